from pydantic import BaseModel, Field
from typing import Dict, Optional
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

MES_ANO_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"

class ExpensePeriod(str, Enum):
    hoy = "hoy"
    ayer = "ayer"
    semana = "semana"
    mes = "mes"

# ==================== REQUEST SCHEMAS ====================

class MonthlyExpenseRequest(BaseModel):
    gastos_totales: Decimal = Field(..., ge=0, decimal_places=2, description="Total de gastos fijos del mes")
    descripcion: Optional[str] = Field("", max_length=1000)
    mes_ano: Optional[str] = Field(None, pattern=MES_ANO_PATTERN, description="YYYY-MM; por defecto, el mes actual")

# ==================== RESPONSE SCHEMAS ====================

class MonthlyExpenseResponse(BaseModel):
    success: bool = True
    mes_ano: str
    gastos_totales: float
    descripcion: Optional[str] = None
    usuario_id: Optional[int] = None
    dias_mes: int
    gastos_diarios: float
    configurado: bool
    updated_at: Optional[datetime] = None

class PeriodExpenseResponse(BaseModel):
    success: bool = True
    periodo: Optional[str] = None
    fecha_desde: date
    fecha_hasta: date
    dias_periodo: int
    gastos_por_mes: Dict[str, float]
    gastos_periodo: float
