# app/modules/reports/router.py
from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from app.config.database import get_db
from app.core.auth.dependencies import require_roles
from app.shared.database.models import Usuario
from .service import ReportsService
from .schemas import BusinessAnalysisResponse, DashboardResponse, FinancialReportResponse

router = APIRouter(prefix="/reports", tags=["Reportes"])

@router.get("/financial", response_model=FinancialReportResponse)
async def get_financial_report(
    fecha_desde: Optional[date] = Query(None, description="Por defecto, 30 días antes de fecha_hasta"),
    fecha_hasta: Optional[date] = Query(None, description="Por defecto, hoy"),
    incluir_ventas: bool = Query(False, description="Incluir el detalle de cada venta"),
    current_user: Usuario = Depends(require_roles(["admin"])),
    db: Session = Depends(get_db)
):
    """
    Ganancia neta por venta y por producto.

    Ganancia = (precio - descuento proporcional) - costo guardado en la venta.
    Solo considera ventas completadas. La ganancia neta descuenta los gastos
    fijos mensuales prorrateados por día del período.
    """
    service = ReportsService(db)
    return await service.get_financial_report(fecha_desde, fecha_hasta, incluir_ventas)

@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    fecha: Optional[date] = Query(None),
    current_user: Usuario = Depends(require_roles(["admin"])),
    db: Session = Depends(get_db)
):
    """Ventas del día, avance de la meta diaria y cajas abiertas"""
    service = ReportsService(db)
    return await service.get_dashboard(fecha)

@router.get("/analysis", response_model=BusinessAnalysisResponse)
async def get_business_analysis(
    fecha_desde: Optional[date] = Query(None),
    fecha_hasta: Optional[date] = Query(None),
    current_user: Usuario = Depends(require_roles(["admin"])),
    db: Session = Depends(get_db)
):
    service = ReportsService(db)
    return await service.get_business_analysis(fecha_desde, fecha_hasta)
