# app/modules/reports/service.py
import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Tuple

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.modules.cash.repository import CashRepository
from app.modules.cash.service import CashService
from app.modules.configuration.service import load_business_config
from app.modules.expenses.repository import ExpensesRepository
from app.modules.inventory.repository import InventoryRepository
from app.modules.sales.repository import SalesRepository
from app.shared.database.models import Venta
from app.shared.utils.money import to_decimal
from . import calculator
from .schemas import (
    BusinessAnalysisResponse, DashboardResponse, FinancialReportResponse,
    OpenShiftSummary, PeriodInfo
)

logger = logging.getLogger(__name__)

def sale_to_dict(sale: Venta) -> Dict[str, Any]:
    return {
        "id": sale.id,
        "numero_comprobante": sale.numero_comprobante,
        "fecha": sale.fecha,
        "metodo_pago": sale.metodo_pago,
        "subtotal": sale.subtotal,
        "descuento": sale.descuento,
        "monto_total": sale.monto_total,
        "detalles": [
            {
                "producto_id": d.producto_id,
                "nombre": d.nombre,
                "cantidad": d.cantidad,
                "precio_unitario": d.precio_unitario,
                "costo_unitario": d.costo_unitario,
            }
            for d in sale.detalles
        ],
    }

class ReportsService:
    """
    Reportes financieros y tablero del día
    """

    def __init__(self, db: Session):
        self.db = db
        self.sales = SalesRepository(db)
        self.cash = CashRepository(db)
        self.inventory = InventoryRepository(db)
        self.expenses = ExpensesRepository(db)

    def _period(self, fecha_desde: Optional[date], fecha_hasta: Optional[date]) -> Tuple[date, date]:
        fecha_hasta = fecha_hasta or date.today()
        fecha_desde = fecha_desde or fecha_hasta - timedelta(days=29)
        if fecha_desde > fecha_hasta:
            raise HTTPException(status_code=400, detail="fecha_desde no puede ser posterior a fecha_hasta")
        return fecha_desde, fecha_hasta

    def _summary(self, fecha_desde: date, fecha_hasta: date) -> Dict[str, Any]:
        sales = self.sales.all_sales(fecha_desde=fecha_desde, fecha_hasta=fecha_hasta, estado="completada")
        gastos = self.expenses.monthly_totals(calculator.months_in_range(fecha_desde, fecha_hasta))
        gastos_fijos = calculator.prorated_fixed_costs(gastos, fecha_desde, fecha_hasta)
        return calculator.financial_summary((sale_to_dict(s) for s in sales), gastos_fijos)

    # ==================== REPORTE FINANCIERO ====================

    async def get_financial_report(
        self,
        fecha_desde: Optional[date],
        fecha_hasta: Optional[date],
        incluir_ventas: bool = False
    ) -> FinancialReportResponse:
        fecha_desde, fecha_hasta = self._period(fecha_desde, fecha_hasta)
        summary = self._summary(fecha_desde, fecha_hasta)

        if summary["resumen"]["diferencias_detectadas"]:
            logger.warning(
                f"Reporte {fecha_desde}..{fecha_hasta}: "
                f"{summary['resumen']['diferencias_detectadas']} ventas no cuadran con su detalle"
            )

        return FinancialReportResponse(
            periodo=PeriodInfo(fecha_desde=fecha_desde, fecha_hasta=fecha_hasta, dias=(fecha_hasta - fecha_desde).days + 1),
            resumen=summary["resumen"],
            productos=summary["productos"],
            metodos_pago=summary["metodos_pago"],
            ventas=summary["ventas"] if incluir_ventas else None
        )

    # ==================== TABLERO ====================

    async def get_dashboard(self, fecha: Optional[date] = None) -> DashboardResponse:
        fecha = fecha or date.today()
        completed = self.sales.all_sales(fecha_desde=fecha, fecha_hasta=fecha, estado="completada")
        cancelled = self.sales.all_sales(fecha_desde=fecha, fecha_hasta=fecha, estado="anulada")

        total = sum((to_decimal(s.monto_total) for s in completed), to_decimal(0))
        by_method: Dict[str, Dict[str, Any]] = {}
        for sale in completed:
            row = by_method.setdefault(sale.metodo_pago, {"total": 0.0, "cantidad": 0})
            row["total"] = round(row["total"] + float(to_decimal(sale.monto_total)), 2)
            row["cantidad"] += 1

        cash_service = CashService(self.db)
        turnos: List[OpenShiftSummary] = []
        for shift in self.cash.list_open_shifts():
            totales = cash_service.shift_totals(shift)
            turnos.append(OpenShiftSummary(
                turno_id=shift.id,
                numero_turno=shift.numero_turno,
                cajero=shift.usuario.nombre if shift.usuario else "",
                fecha_apertura=shift.fecha_apertura,
                efectivo_teorico=totales.efectivo_teorico,
                total_ventas=totales.total_ventas,
                cantidad_ventas=totales.cantidad_ventas
            ))

        products, _ = self.inventory.search_products(None, None)
        alertas_stock = sum(1 for p in products if p.stock <= p.stock_minimo)

        config = load_business_config(self.db)
        return DashboardResponse(
            fecha=fecha,
            total_ventas=float(total),
            cantidad_ventas=len(completed),
            ticket_promedio=float(to_decimal(total / len(completed))) if completed else 0.0,
            ventas_anuladas=len(cancelled),
            ventas_por_metodo=by_method,
            meta=calculator.goal_progress(total, config.get("meta_diaria", 0)),
            turnos_abiertos=turnos,
            efectivo_en_caja=round(sum(t.efectivo_teorico for t in turnos), 2),
            alertas_stock=alertas_stock
        )

    # ==================== ANÁLISIS ====================

    async def get_business_analysis(
        self,
        fecha_desde: Optional[date],
        fecha_hasta: Optional[date]
    ) -> BusinessAnalysisResponse:
        fecha_desde, fecha_hasta = self._period(fecha_desde, fecha_hasta)
        summary = self._summary(fecha_desde, fecha_hasta)
        analysis = calculator.business_analysis(summary)

        return BusinessAnalysisResponse(
            periodo=PeriodInfo(fecha_desde=fecha_desde, fecha_hasta=fecha_hasta, dias=(fecha_hasta - fecha_desde).days + 1),
            resumen=summary["resumen"],
            **analysis
        )
