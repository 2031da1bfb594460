from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime
from enum import Enum

class DeviceStatus(str, Enum):
    pendiente = "pendiente"
    aprobado = "aprobado"
    rechazado = "rechazado"
    revocado = "revocado"

# ==================== REQUEST SCHEMAS ====================

class AccessRequest(BaseModel):
    device_fingerprint: str = Field(..., min_length=8, description="Huella generada por el navegador")
    username: Optional[str] = Field(None, description="Usuario que intenta ingresar")

class DeviceApproval(BaseModel):
    codigo_activacion: str = Field(..., min_length=5)
    nombre_dispositivo: str = Field("Dispositivo", max_length=255)

# ==================== RESPONSE SCHEMAS ====================

class DeviceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    device_fingerprint: str
    codigo_activacion: str
    nombre_dispositivo: Optional[str]
    usuario_solicito: Optional[str]
    usuario_aprobo: Optional[str]
    ip_primer_uso: Optional[str]
    estado: DeviceStatus
    fecha_solicitud: Optional[datetime]
    fecha_aprobacion: Optional[datetime]
    ultima_actividad: Optional[datetime]

class AccessRequestResponse(BaseModel):
    success: bool = True
    dispositivo_existe: bool
    codigo_activacion: Optional[str] = None
    mensaje: Optional[str] = None
    dispositivo: Optional[DeviceResponse] = None

class DeviceAccessResponse(BaseModel):
    success: bool = True
    acceso_concedido: bool
    motivo: str
    requiere_aprobacion: bool
    estado: Optional[DeviceStatus] = None
    codigo_activacion: Optional[str] = None

class DeviceStatusCounts(BaseModel):
    pendientes: int
    aprobados: int
    rechazados: int
    revocados: int

class DeviceListResponse(BaseModel):
    success: bool = True
    dispositivos: List[DeviceResponse]
    total: int
    por_estado: DeviceStatusCounts
