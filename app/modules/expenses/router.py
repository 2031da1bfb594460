# app/modules/expenses/router.py
from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from app.config.database import get_db
from app.core.auth.dependencies import require_roles
from app.shared.database.models import Usuario
from .service import ExpensesService
from .schemas import (
    MES_ANO_PATTERN, ExpensePeriod, MonthlyExpenseRequest,
    MonthlyExpenseResponse, PeriodExpenseResponse
)

router = APIRouter(prefix="/expenses", tags=["Gastos Fijos"])

@router.get("/", response_model=MonthlyExpenseResponse)
async def get_monthly_expenses(
    mes_ano: Optional[str] = Query(None, pattern=MES_ANO_PATTERN, description="YYYY-MM; por defecto, el mes actual"),
    current_user: Usuario = Depends(require_roles(["admin"])),
    db: Session = Depends(get_db)
):
    """Gastos fijos del mes y su costo diario; cero si aún no se configuraron"""
    service = ExpensesService(db)
    return await service.get_month(mes_ano)

@router.put("/", response_model=MonthlyExpenseResponse)
async def set_monthly_expenses(
    request: MonthlyExpenseRequest,
    current_user: Usuario = Depends(require_roles(["admin"])),
    db: Session = Depends(get_db)
):
    service = ExpensesService(db)
    return await service.set_month(request, current_user)

@router.get("/period", response_model=PeriodExpenseResponse)
async def get_period_expenses(
    periodo: Optional[ExpensePeriod] = Query(None, description="hoy, ayer, semana o mes"),
    fecha_desde: Optional[date] = Query(None),
    fecha_hasta: Optional[date] = Query(None),
    current_user: Usuario = Depends(require_roles(["admin"])),
    db: Session = Depends(get_db)
):
    """
    Gastos fijos que corresponden al período.

    Cada día carga el gasto de su mes dividido por los días de ese mes. Las
    fechas explícitas tienen prioridad sobre ``periodo``.
    """
    service = ExpensesService(db)
    return await service.get_period(periodo, fecha_desde, fecha_hasta)
