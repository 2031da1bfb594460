# app/modules/expenses/service.py
import logging
from datetime import date, timedelta
from typing import Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.modules.reports import calculator
from app.shared.database.models import GastoMensual, Usuario
from app.shared.utils.money import to_decimal
from .repository import ExpensesRepository
from .schemas import ExpensePeriod, MonthlyExpenseRequest, MonthlyExpenseResponse, PeriodExpenseResponse

logger = logging.getLogger(__name__)

def period_range(periodo: ExpensePeriod, today: date) -> Tuple[date, date]:
    """Fechas de hoy, ayer, la semana en curso (desde el lunes) o el mes en curso"""
    if periodo == ExpensePeriod.ayer:
        ayer = today - timedelta(days=1)
        return ayer, ayer
    if periodo == ExpensePeriod.semana:
        return today - timedelta(days=today.weekday()), today
    if periodo == ExpensePeriod.mes:
        return today.replace(day=1), today
    return today, today

class ExpensesService:
    """
    Gastos fijos mensuales: uno por mes, prorrateados por día
    """

    def __init__(self, db: Session):
        self.db = db
        self.repository = ExpensesRepository(db)

    async def get_month(self, mes_ano: Optional[str] = None) -> MonthlyExpenseResponse:
        mes_ano = mes_ano or date.today().strftime("%Y-%m")
        return self._to_response(mes_ano, self.repository.get_by_month(mes_ano))

    async def set_month(self, request: MonthlyExpenseRequest, user: Usuario) -> MonthlyExpenseResponse:
        mes_ano = request.mes_ano or date.today().strftime("%Y-%m")
        monto = to_decimal(request.gastos_totales)
        descripcion = (request.descripcion or "").strip()

        try:
            expense = self.repository.get_by_month(mes_ano)
            if expense:
                expense.gastos_totales = monto
                expense.descripcion = descripcion
                expense.usuario_id = user.id
            else:
                expense = self.repository.create(
                    mes_ano=mes_ano,
                    gastos_totales=monto,
                    descripcion=descripcion,
                    usuario_id=user.id
                )
            self.db.commit()
            self.db.refresh(expense)
        except Exception:
            self.db.rollback()
            logger.exception(f"Error guardando gastos de {mes_ano}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error guardando los gastos mensuales"
            )

        logger.info(f"Gastos fijos de {mes_ano}: {monto} (por {user.username})")
        return self._to_response(mes_ano, expense)

    async def get_period(
        self,
        periodo: Optional[ExpensePeriod],
        fecha_desde: Optional[date],
        fecha_hasta: Optional[date]
    ) -> PeriodExpenseResponse:
        if fecha_desde or fecha_hasta:
            fecha_hasta = fecha_hasta or date.today()
            fecha_desde = fecha_desde or fecha_hasta
            periodo = None
        else:
            periodo = periodo or ExpensePeriod.hoy
            fecha_desde, fecha_hasta = period_range(periodo, date.today())

        if fecha_desde > fecha_hasta:
            raise HTTPException(status_code=400, detail="fecha_desde no puede ser posterior a fecha_hasta")

        gastos = self.repository.monthly_totals(calculator.months_in_range(fecha_desde, fecha_hasta))
        return PeriodExpenseResponse(
            periodo=periodo.value if periodo else None,
            fecha_desde=fecha_desde,
            fecha_hasta=fecha_hasta,
            dias_periodo=(fecha_hasta - fecha_desde).days + 1,
            gastos_por_mes={mes: float(to_decimal(monto)) for mes, monto in gastos.items()},
            gastos_periodo=float(calculator.prorated_fixed_costs(gastos, fecha_desde, fecha_hasta))
        )

    def _to_response(self, mes_ano: str, expense: Optional[GastoMensual]) -> MonthlyExpenseResponse:
        total = to_decimal(expense.gastos_totales) if expense else to_decimal(0)
        return MonthlyExpenseResponse(
            mes_ano=mes_ano,
            gastos_totales=float(total),
            descripcion=expense.descripcion if expense else None,
            usuario_id=expense.usuario_id if expense else None,
            dias_mes=calculator.days_in_month(mes_ano),
            gastos_diarios=float(calculator.daily_fixed_cost(total, mes_ano)),
            configurado=expense is not None,
            updated_at=expense.updated_at if expense else None
        )
