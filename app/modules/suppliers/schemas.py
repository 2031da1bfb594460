from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

# ==================== REQUEST SCHEMAS ====================

class SupplierBase(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=200)
    razon_social: Optional[str] = Field(None, max_length=200)
    cuit: Optional[str] = Field(None, max_length=20)
    telefono: Optional[str] = Field(None, max_length=50)
    whatsapp: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=100)
    direccion: Optional[str] = None
    categoria: Optional[str] = Field(None, max_length=100, description="Ej: Panadería, Bebidas, Snacks")
    dias_entrega: Optional[str] = Field(None, max_length=100, description="Ej: Lunes y Jueves")
    monto_minimo: Decimal = Field(Decimal("0"), ge=0)
    tiempo_entrega_dias: int = Field(2, ge=0)
    notas: Optional[str] = None

    @field_validator('nombre')
    @classmethod
    def strip_nombre(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('El nombre del proveedor es requerido')
        return v

class SupplierCreate(SupplierBase):
    pass

class SupplierUpdate(BaseModel):
    nombre: Optional[str] = Field(None, min_length=1, max_length=200)
    razon_social: Optional[str] = Field(None, max_length=200)
    cuit: Optional[str] = Field(None, max_length=20)
    telefono: Optional[str] = Field(None, max_length=50)
    whatsapp: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=100)
    direccion: Optional[str] = None
    categoria: Optional[str] = Field(None, max_length=100)
    dias_entrega: Optional[str] = Field(None, max_length=100)
    monto_minimo: Optional[Decimal] = Field(None, ge=0)
    tiempo_entrega_dias: Optional[int] = Field(None, ge=0)
    notas: Optional[str] = None
    activo: Optional[bool] = None

    @field_validator('nombre')
    @classmethod
    def strip_nombre(cls, v):
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError('El nombre del proveedor es requerido')
        return v

# ==================== RESPONSE SCHEMAS ====================

class SupplierResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    nombre: str
    razon_social: Optional[str]
    cuit: Optional[str]
    telefono: Optional[str]
    whatsapp: Optional[str]
    email: Optional[str]
    direccion: Optional[str]
    categoria: Optional[str]
    dias_entrega: Optional[str]
    monto_minimo: float
    tiempo_entrega_dias: int
    notas: Optional[str]
    activo: bool
    total_productos: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class SupplierListResponse(BaseModel):
    success: bool = True
    proveedores: List[SupplierResponse]
    total: int

class SupplierProduct(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    codigo: str
    nombre: str
    stock: int
    stock_minimo: int
    precio_costo: float

class SupplierDetailResponse(BaseModel):
    success: bool = True
    proveedor: SupplierResponse
    productos: List[SupplierProduct]
    total_productos: int
