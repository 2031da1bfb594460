from pydantic import BaseModel, Field
from typing import Any, Dict, Optional
from enum import Enum

class PaymentMethod(str, Enum):
    EFECTIVO = "efectivo"
    TRANSFERENCIA = "transferencia"
    TARJETA = "tarjeta"
    MERCADOPAGO = "mercadopago"
    QR = "qr"
    OTROS = "otros"

class ConfigUpdateRequest(BaseModel):
    valores: Dict[str, Any] = Field(..., description="Claves a actualizar con su nuevo valor")

class ConfigResponse(BaseModel):
    success: bool = True
    configuracion: Dict[str, Any]

class DiscountsResponse(BaseModel):
    success: bool = True
    descuentos: Dict[str, float] = Field(..., description="Porcentaje de descuento por método de pago")
    mensaje: Optional[str] = None
