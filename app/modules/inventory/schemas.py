from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Any, Dict, List, Optional
from datetime import datetime
from decimal import Decimal

# ==================== PRODUCTOS ====================

class ProductBase(BaseModel):
    codigo: str = Field(..., min_length=1, max_length=100)
    codigo_barras: Optional[str] = Field(None, max_length=100)
    nombre: str = Field(..., min_length=1, max_length=255)
    categoria: str = Field("general", max_length=100)
    proveedor: Optional[str] = Field(None, max_length=255)
    proveedor_id: Optional[int] = Field(None, gt=0, description="Proveedor registrado; reemplaza al texto libre")
    precio_costo: Decimal = Field(Decimal("0"), ge=0)
    precio_venta: Decimal = Field(..., ge=0)
    stock: int = Field(0, ge=0)
    stock_minimo: int = Field(10, ge=0)
    tiempo_entrega_dias: int = Field(7, ge=0)
    aplica_descuento_forma_pago: bool = True

    @field_validator('codigo', 'nombre')
    @classmethod
    def strip_text(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('No puede estar vacío')
        return v

class ProductCreate(ProductBase):
    pass

class ProductUpdate(BaseModel):
    codigo_barras: Optional[str] = Field(None, max_length=100)
    nombre: Optional[str] = Field(None, min_length=1, max_length=255)
    categoria: Optional[str] = Field(None, max_length=100)
    proveedor: Optional[str] = Field(None, max_length=255)
    proveedor_id: Optional[int] = Field(None, gt=0)
    precio_costo: Optional[Decimal] = Field(None, ge=0)
    precio_venta: Optional[Decimal] = Field(None, ge=0)
    stock_minimo: Optional[int] = Field(None, ge=0)
    tiempo_entrega_dias: Optional[int] = Field(None, ge=0)
    aplica_descuento_forma_pago: Optional[bool] = None
    activo: Optional[bool] = None

class StockAdjustment(BaseModel):
    """Ajuste de stock: `cantidad` suma o resta, `nuevo_stock` fija el valor"""
    cantidad: Optional[int] = Field(None, description="Unidades a sumar (positivo) o restar (negativo)")
    nuevo_stock: Optional[int] = Field(None, ge=0)
    motivo: str = Field(..., min_length=3, max_length=255)

    @model_validator(mode='after')
    def one_of_cantidad_or_nuevo(self):
        if (self.cantidad is None) == (self.nuevo_stock is None):
            raise ValueError('Indica cantidad o nuevo_stock (solo uno)')
        return self

class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    codigo: str
    codigo_barras: Optional[str]
    nombre: str
    categoria: Optional[str]
    proveedor: Optional[str]
    proveedor_id: Optional[int] = None
    precio_costo: float
    precio_venta: float
    stock: int
    stock_minimo: int
    tiempo_entrega_dias: int
    aplica_descuento_forma_pago: bool
    activo: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class ProductListResponse(BaseModel):
    success: bool = True
    productos: List[ProductResponse]
    total: int
    limit: int
    offset: int

class StockAdjustmentResponse(BaseModel):
    success: bool = True
    producto_id: int
    stock_anterior: int
    stock_nuevo: int
    motivo: str

# ==================== PUNTO DE VENTA ====================

class StockInfo(BaseModel):
    cantidad: int
    estado: str
    alerta: str
    puede_vender: bool
    stock_minimo: int

class POSProduct(BaseModel):
    id: int
    codigo: str
    codigo_barras: Optional[str]
    nombre: str
    categoria: Optional[str]
    precio_venta: float
    aplica_descuento_forma_pago: bool
    stock_info: StockInfo

class POSProductsResponse(BaseModel):
    success: bool = True
    productos: List[POSProduct]
    total: int
    categorias: List[str]

# ==================== INVENTARIO INTELIGENTE ====================

class IntelligentInventoryResponse(BaseModel):
    success: bool = True
    productos: List[Dict[str, Any]]
    total: int
    resumen: Dict[str, Any]

class ABCAnalysisResponse(BaseModel):
    success: bool = True
    clasificacion: Dict[int, str]
    conteo: Dict[str, int]
    validacion_pareto: Dict[str, Any]
    por_categoria: Dict[str, Dict[str, int]]
    valor_por_clase: Dict[str, float]

class AlertsResponse(BaseModel):
    success: bool = True
    alertas: List[Dict[str, Any]]
    resumen: Dict[str, int]

class OrderSuggestionsResponse(BaseModel):
    success: bool = True
    sugerencias: List[Dict[str, Any]]
    por_proveedor: List[Dict[str, Any]]
    resumen: Dict[str, Any]

class PredictionsResponse(BaseModel):
    success: bool = True
    predicciones: List[Dict[str, Any]]
