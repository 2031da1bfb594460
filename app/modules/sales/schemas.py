from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from enum import Enum

from app.modules.configuration.schemas import PaymentMethod

# ==================== ENUMS ====================

class SaleStatus(str, Enum):
    completada = "completada"
    anulada = "anulada"

# ==================== CLASE BASE PARA RESPUESTAS (Pydantic v2) ====================

class SalesBaseModel(BaseModel):
    """
    Clase base para los esquemas de respuesta leídos desde el ORM
    """
    model_config = ConfigDict(from_attributes=True)

# ==================== REQUEST SCHEMAS ====================

class SaleItemRequest(BaseModel):
    producto_id: int = Field(..., gt=0)
    cantidad: int = Field(..., gt=0, description="Cantidad")

class SaleCreateRequest(BaseModel):
    items: List[SaleItemRequest] = Field(..., min_length=1, description="Productos del carrito")
    metodo_pago: PaymentMethod = PaymentMethod.EFECTIVO
    monto_recibido: Optional[Decimal] = Field(None, ge=0, description="Efectivo entregado por el cliente")
    cliente_nombre: Optional[str] = Field("Consumidor Final", max_length=255)

    @field_validator('items')
    @classmethod
    def validate_unique_products(cls, v: List[SaleItemRequest]):
        ids = [item.producto_id for item in v]
        if len(ids) != len(set(ids)):
            raise ValueError('Hay productos repetidos en el carrito; agrupa las cantidades')
        return v

class SaleCancelRequest(BaseModel):
    motivo: str = Field(..., min_length=3, max_length=500, description="Motivo de la anulación")

# ==================== RESPONSE SCHEMAS ====================

class SaleItemResponse(SalesBaseModel):
    id: int
    producto_id: int
    nombre: str
    cantidad: int
    precio_unitario: float
    costo_unitario: float
    subtotal: float

class SaleResponse(SalesBaseModel):
    id: int
    numero_comprobante: str
    fecha: datetime
    cliente_nombre: Optional[str]
    metodo_pago: str
    subtotal: float
    descuento: float
    monto_total: float
    monto_recibido: Optional[float]
    vuelto: Optional[float]
    estado: SaleStatus
    motivo_anulacion: Optional[str] = None
    usuario_id: int
    turno_id: Optional[int]
    detalles: List[SaleItemResponse] = []

class SaleListResponse(BaseModel):
    success: bool = True
    ventas: List[SaleResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
    monto_total: float

class QuoteItem(BaseModel):
    producto_id: int
    nombre: str
    cantidad: int
    precio_unitario: float
    subtotal: float
    aplica_descuento_forma_pago: bool

class QuoteResponse(BaseModel):
    success: bool = True
    metodo_pago: str
    items: List[QuoteItem]
    subtotal: float
    base_descuento: float
    descuento_porcentaje: float
    descuento: float
    total: float
    sugerencias_efectivo: List[int] = []

class CashSuggestionsResponse(BaseModel):
    success: bool = True
    total: float
    sugerencias: List[int]
