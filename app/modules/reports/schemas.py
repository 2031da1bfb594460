from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from datetime import date

class PeriodInfo(BaseModel):
    fecha_desde: date
    fecha_hasta: date
    dias: int

class FinancialReportResponse(BaseModel):
    success: bool = True
    periodo: PeriodInfo
    resumen: Dict[str, Any]
    productos: List[Dict[str, Any]]
    metodos_pago: Dict[str, Dict[str, Any]]
    ventas: Optional[List[Dict[str, Any]]] = None

class OpenShiftSummary(BaseModel):
    turno_id: int
    numero_turno: int
    cajero: str
    fecha_apertura: Any
    efectivo_teorico: float
    total_ventas: float
    cantidad_ventas: int

class DashboardResponse(BaseModel):
    success: bool = True
    fecha: date
    total_ventas: float
    cantidad_ventas: int
    ticket_promedio: float
    ventas_anuladas: int
    ventas_por_metodo: Dict[str, Dict[str, Any]]
    meta: Dict[str, Any]
    turnos_abiertos: List[OpenShiftSummary]
    efectivo_en_caja: float
    alertas_stock: int

class BusinessAnalysisResponse(BaseModel):
    success: bool = True
    periodo: PeriodInfo
    fuente: str = "Análisis local"
    score: int
    estado: str
    problemas: List[Dict[str, Any]]
    alertas: List[Dict[str, Any]]
    oportunidades: List[Dict[str, Any]]
    recomendaciones: List[Dict[str, Any]]
    resumen: Dict[str, Any]
