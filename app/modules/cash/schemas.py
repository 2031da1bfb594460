from pydantic import BaseModel, Field, ConfigDict
from typing import Any, Dict, List, Optional
from datetime import datetime
from decimal import Decimal
from enum import Enum

# ==================== ENUMS ====================

class MovementType(str, Enum):
    ingreso = "ingreso"
    egreso = "egreso"

class EventType(str, Enum):
    apertura = "apertura"
    cierre = "cierre"

# ==================== REQUEST SCHEMAS ====================

class OpenShiftRequest(BaseModel):
    monto_apertura: Optional[Decimal] = Field(None, ge=0, decimal_places=2, description="Efectivo inicial cuando no hay cierre previo")
    efectivo_contado: Optional[Decimal] = Field(None, ge=0, decimal_places=2, description="Efectivo físico contado al abrir")
    notas: Optional[str] = Field("", max_length=1000)

class MovementRequest(BaseModel):
    tipo: MovementType
    monto: Decimal = Field(..., gt=0, decimal_places=2, description="Monto positivo; los egresos se registran en negativo")
    categoria: str = Field(..., min_length=1, max_length=100)
    descripcion: str = Field(..., min_length=1)
    referencia: Optional[str] = Field(None, max_length=255)

class CloseShiftRequest(BaseModel):
    monto_cierre: Decimal = Field(..., ge=0, decimal_places=2, description="Efectivo contado al cerrar")
    notas: Optional[str] = Field("", max_length=1000)

class EmergencyCloseRequest(BaseModel):
    turno_id: int = Field(..., gt=0)
    motivo: Optional[str] = Field(None, max_length=500)

# ==================== RESPONSE SCHEMAS ====================

class ShiftResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    numero_turno: int
    usuario_id: int
    fecha_apertura: datetime
    fecha_cierre: Optional[datetime]
    monto_apertura: float
    efectivo_esperado_apertura: Optional[float]
    diferencia_apertura: Optional[float]
    monto_cierre: Optional[float]
    efectivo_teorico: Optional[float]
    diferencia: Optional[float]
    estado: str
    tipo_cierre: Optional[str]
    notas: Optional[str]

class ShiftTotals(BaseModel):
    monto_apertura: float
    ventas_efectivo: float
    ingresos: float
    egresos: float
    efectivo_teorico: float
    total_ventas: float
    cantidad_ventas: int
    cantidad_movimientos: int
    ventas_por_metodo: Dict[str, Dict[str, Any]]

class CashStatusResponse(BaseModel):
    success: bool = True
    caja_abierta: bool
    mensaje: Optional[str] = None
    turno: Optional[ShiftResponse] = None
    totales: Optional[ShiftTotals] = None
    efectivo_disponible: float = 0.0

class OpenShiftResponse(BaseModel):
    success: bool = True
    mensaje: str
    turno: ShiftResponse
    efectivo_esperado: float
    efectivo_contado: float
    diferencia_apertura: float
    tipo_diferencia: str
    verificacion_aplicada: bool

class MovementResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    turno_id: int
    tipo: str
    categoria: str
    monto: float
    descripcion: str
    referencia: Optional[str]
    usuario_id: int
    fecha: datetime

class MovementListResponse(BaseModel):
    success: bool = True
    turno_id: int
    movimientos: List[MovementResponse]
    total_ingresos: float
    total_egresos: float

class CloseShiftResponse(BaseModel):
    success: bool = True
    mensaje: str
    turno: ShiftResponse
    efectivo_teorico: float
    monto_cierre: float
    diferencia: float
    tipo_diferencia: str
    nivel_diferencia: str
    duracion_minutos: Optional[int]
    duracion_categoria: Optional[str]
    totales: ShiftTotals

class HistoryEvent(BaseModel):
    id: int
    turno_id: int
    numero_turno: int
    tipo_evento: str
    cajero_id: int
    cajero_nombre: Optional[str]
    fecha_hora: datetime
    monto_inicial: float
    efectivo_teorico: Optional[float]
    efectivo_contado: Optional[float]
    diferencia: float
    tipo_diferencia: Optional[str]
    nivel_diferencia: Optional[str]
    duracion_turno_minutos: Optional[int]
    duracion_categoria: Optional[str]
    notas: Optional[str]
    balance_anterior: float
    balance_acumulado: float
    flujo_neto: float

class HistoryResponse(BaseModel):
    success: bool = True
    historial: List[HistoryEvent]
    paginacion: Dict[str, Any]
    estadisticas: Dict[str, Any]
    cajeros: List[Dict[str, Any]]

class PeriodAnalysisResponse(BaseModel):
    success: bool = True
    analisis: Optional[Dict[str, Any]]

class ShiftSummaryResponse(BaseModel):
    success: bool = True
    turno: ShiftResponse
    cajero_nombre: Optional[str]
    totales: ShiftTotals
    diferencia: Optional[float]
    tipo_diferencia: Optional[str]
    nivel_diferencia: Optional[str]
    duracion_minutos: Optional[int]
    duracion_categoria: Optional[str]
    movimientos: List[MovementResponse]

class LastClosingResponse(BaseModel):
    success: bool = True
    ultimo_cierre: Optional[ShiftResponse]
    mensaje: str

class POSStatusResponse(BaseModel):
    success: bool = True
    caja_abierta: bool
    puede_vender: bool
    mensaje: str
    turno_id: Optional[int] = None
    cajero: Optional[str] = None
    efectivo_disponible: float = 0.0
    ventas_turno: float = 0.0
    cantidad_ventas: int = 0
