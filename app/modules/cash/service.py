# app/modules/cash/service.py
import logging
import math
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.shared.database.models import HistorialTurno, MovimientoCaja, TurnoCaja, Usuario
from app.shared.utils.money import format_currency_ar, to_decimal
from . import reconciliation
from .repository import CashRepository
from .schemas import (
    CashStatusResponse, CloseShiftRequest, CloseShiftResponse, EmergencyCloseRequest,
    HistoryEvent, HistoryResponse, LastClosingResponse, MovementListResponse,
    MovementRequest, MovementResponse, MovementType, OpenShiftRequest,
    OpenShiftResponse, PeriodAnalysisResponse, POSStatusResponse, ShiftResponse,
    ShiftSummaryResponse, ShiftTotals
)

logger = logging.getLogger(__name__)

def _as_float(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: float(v) if isinstance(v, Decimal) else v for k, v in data.items()}

def _event_to_dict(event: HistorialTurno) -> Dict[str, Any]:
    return {
        "id": event.id,
        "turno_id": event.turno_id,
        "numero_turno": event.numero_turno,
        "tipo_evento": event.tipo_evento,
        "cajero_id": event.cajero_id,
        "cajero_nombre": event.cajero_nombre,
        "fecha_hora": event.fecha_hora,
        "monto_inicial": event.monto_inicial,
        "efectivo_teorico": event.efectivo_teorico,
        "efectivo_contado": event.efectivo_contado,
        "diferencia": event.diferencia,
        "tipo_diferencia": event.tipo_diferencia,
        "duracion_turno_minutos": event.duracion_turno_minutos,
        "notas": event.notas,
    }

class CashService:
    """
    Turnos de caja: apertura con verificación, movimientos manuales,
    cierre con arqueo e historial
    """

    def __init__(self, db: Session):
        self.db = db
        self.repository = CashRepository(db)

    # ==================== TOTALES ====================

    def shift_totals(self, shift: TurnoCaja) -> ShiftTotals:
        movements = self.repository.movement_totals(shift.id)
        by_method = self.repository.sales_by_method(shift.id)
        cash_sales = by_method.get("efectivo", {}).get("total", Decimal("0"))

        teorico = reconciliation.theoretical_cash(
            shift.monto_apertura, cash_sales, movements["ingresos"], movements["egresos"]
        )

        return ShiftTotals(
            monto_apertura=float(to_decimal(shift.monto_apertura)),
            ventas_efectivo=float(to_decimal(cash_sales)),
            ingresos=float(to_decimal(movements["ingresos"])),
            egresos=float(to_decimal(movements["egresos"])),
            efectivo_teorico=float(teorico),
            total_ventas=float(to_decimal(sum((m["total"] for m in by_method.values()), Decimal("0")))),
            cantidad_ventas=sum(m["cantidad"] for m in by_method.values()),
            cantidad_movimientos=movements["cantidad_movimientos"],
            ventas_por_metodo={
                metodo: {"total": float(to_decimal(m["total"])), "cantidad": m["cantidad"]}
                for metodo, m in by_method.items()
            }
        )

    # ==================== ESTADO ====================

    async def get_status(self, user: Usuario) -> CashStatusResponse:
        shift = self.repository.get_open_shift(user.id)
        if not shift:
            return CashStatusResponse(
                caja_abierta=False,
                mensaje="No hay turno activo. Debe abrir la caja para comenzar."
            )

        totales = self.shift_totals(shift)
        return CashStatusResponse(
            caja_abierta=True,
            turno=ShiftResponse.model_validate(shift),
            totales=totales,
            efectivo_disponible=totales.efectivo_teorico
        )

    async def get_pos_status(self, user: Usuario) -> POSStatusResponse:
        shift = self.repository.get_open_shift(user.id)
        if not shift:
            return POSStatusResponse(
                caja_abierta=False,
                puede_vender=False,
                mensaje="Caja cerrada. Abre un turno para registrar ventas."
            )

        totales = self.shift_totals(shift)
        return POSStatusResponse(
            caja_abierta=True,
            puede_vender=True,
            mensaje="Caja abierta",
            turno_id=shift.id,
            cajero=user.nombre,
            efectivo_disponible=totales.efectivo_teorico,
            ventas_turno=totales.total_ventas,
            cantidad_ventas=totales.cantidad_ventas
        )

    # ==================== APERTURA ====================

    async def open_shift(self, request: OpenShiftRequest, user: Usuario) -> OpenShiftResponse:
        if self.repository.get_open_shift(user.id):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Ya existe un turno abierto para este usuario"
            )

        last_closing = self.repository.get_last_closed_shift(user.id)
        esperado = to_decimal(last_closing.efectivo_teorico) if last_closing else Decimal("0.00")

        if esperado > 0 and request.efectivo_contado is None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={
                    "requiere_verificacion": True,
                    "efectivo_esperado": float(esperado),
                    "ultimo_cierre": {
                        "id": last_closing.id,
                        "fecha_cierre": last_closing.fecha_cierre.isoformat() if last_closing.fecha_cierre else None,
                        "efectivo_teorico": float(esperado),
                    },
                    "mensaje": "Se requiere verificación manual del efectivo físico"
                }
            )

        if esperado > 0:
            contado = to_decimal(request.efectivo_contado)
        elif request.monto_apertura is not None:
            contado = to_decimal(request.monto_apertura)
        else:
            contado = to_decimal(request.efectivo_contado)

        if esperado > 0:
            diferencia = contado - esperado
            tipo_diferencia = reconciliation.classify_difference(diferencia)
        else:
            diferencia = Decimal("0.00")
            tipo_diferencia = "sin_verificacion"

        notas = (request.notas or "").strip()
        if esperado > 0:
            notas += (
                f"\n[VERIFICACIÓN APERTURA] esperado {format_currency_ar(esperado)}, "
                f"contado {format_currency_ar(contado)}, diferencia {format_currency_ar(diferencia)} ({tipo_diferencia})"
            )

        now = datetime.now()
        try:
            shift = self.repository.add(TurnoCaja(
                numero_turno=self.repository.next_shift_number(),
                usuario_id=user.id,
                fecha_apertura=now,
                monto_apertura=contado,
                efectivo_esperado_apertura=esperado,
                diferencia_apertura=diferencia,
                estado="abierto",
                notas=notas.strip()
            ))
            self.repository.add(HistorialTurno(
                turno_id=shift.id,
                numero_turno=shift.numero_turno,
                tipo_evento="apertura",
                cajero_id=user.id,
                cajero_nombre=user.nombre,
                fecha_hora=now,
                monto_inicial=contado,
                efectivo_teorico=esperado,
                efectivo_contado=contado,
                diferencia=diferencia,
                tipo_diferencia=tipo_diferencia
            ))
            self.db.commit()
            self.db.refresh(shift)
        except Exception:
            self.db.rollback()
            logger.exception("Error abriendo caja")
            raise HTTPException(status_code=500, detail="Error abriendo caja")

        logger.info(f"Turno #{shift.numero_turno} abierto por {user.username} con {contado} (diferencia {diferencia})")
        return OpenShiftResponse(
            mensaje="Caja abierta exitosamente",
            turno=ShiftResponse.model_validate(shift),
            efectivo_esperado=float(esperado),
            efectivo_contado=float(contado),
            diferencia_apertura=float(diferencia),
            tipo_diferencia=tipo_diferencia,
            verificacion_aplicada=esperado > 0
        )

    # ==================== MOVIMIENTOS ====================

    async def register_movement(self, request: MovementRequest, user: Usuario) -> MovementResponse:
        shift = self._require_open_shift(user)
        monto = to_decimal(request.monto)
        if request.tipo == MovementType.egreso:
            monto = -monto

        try:
            movement = self.repository.add(MovimientoCaja(
                turno_id=shift.id,
                tipo=request.tipo.value,
                categoria=request.categoria.strip(),
                monto=monto,
                descripcion=request.descripcion.strip(),
                referencia=request.referencia,
                usuario_id=user.id,
                fecha=datetime.now()
            ))
            self.db.commit()
            self.db.refresh(movement)
        except Exception:
            self.db.rollback()
            logger.exception("Error registrando movimiento de caja")
            raise HTTPException(status_code=500, detail="Error registrando movimiento")

        logger.info(f"Movimiento {request.tipo.value} de {monto} en turno {shift.id} por {user.username}")
        return MovementResponse.model_validate(movement)

    async def list_movements(self, user: Usuario, turno_id: Optional[int] = None) -> MovementListResponse:
        shift = self._get_shift_for(user, turno_id) if turno_id else self._require_open_shift(user)
        movements = self.repository.list_movements(shift.id)
        totals = self.repository.movement_totals(shift.id)
        return MovementListResponse(
            turno_id=shift.id,
            movimientos=[MovementResponse.model_validate(m) for m in movements],
            total_ingresos=float(to_decimal(totals["ingresos"])),
            total_egresos=float(to_decimal(totals["egresos"]))
        )

    # ==================== CIERRE ====================

    async def close_shift(self, request: CloseShiftRequest, user: Usuario) -> CloseShiftResponse:
        shift = self._require_open_shift(user)
        totales = self.shift_totals(shift)
        teorico = to_decimal(totales.efectivo_teorico)
        monto_cierre = to_decimal(request.monto_cierre)

        return self._close(shift, user, monto_cierre, teorico, totales, "normal", request.notas or "")

    async def emergency_close(self, request: EmergencyCloseRequest, admin: Usuario) -> CloseShiftResponse:
        """Cierre forzado por un administrador: se asume el efectivo teórico como contado"""
        shift = self.repository.get_shift(request.turno_id)
        if not shift:
            raise HTTPException(status_code=404, detail=f"Turno {request.turno_id} no encontrado")
        if shift.estado != "abierto":
            raise HTTPException(status_code=409, detail="El turno ya está cerrado")

        totales = self.shift_totals(shift)
        teorico = to_decimal(totales.efectivo_teorico)
        notas = f"Cerrado de emergencia por {admin.username}"
        if request.motivo:
            notas += f": {request.motivo}"

        cashier = shift.usuario
        return self._close(shift, cashier, teorico, teorico, totales, "emergencia", notas)

    def _close(
        self,
        shift: TurnoCaja,
        cashier: Usuario,
        monto_cierre: Decimal,
        teorico: Decimal,
        totales: ShiftTotals,
        tipo_cierre: str,
        notas: str
    ) -> CloseShiftResponse:
        now = datetime.now()
        diferencia = monto_cierre - teorico
        tipo_diferencia = reconciliation.classify_difference(diferencia)
        minutos = reconciliation.duration_minutes(shift.fecha_apertura, now)

        try:
            shift.fecha_cierre = now
            shift.monto_cierre = monto_cierre
            shift.efectivo_teorico = teorico
            shift.diferencia = diferencia
            shift.estado = "cerrado"
            shift.tipo_cierre = tipo_cierre
            if notas.strip():
                shift.notas = f"{shift.notas or ''}\n[CIERRE] {notas.strip()}".strip()

            self.repository.add(HistorialTurno(
                turno_id=shift.id,
                numero_turno=shift.numero_turno,
                tipo_evento="cierre",
                cajero_id=cashier.id,
                cajero_nombre=cashier.nombre,
                fecha_hora=now,
                monto_inicial=shift.monto_apertura,
                efectivo_teorico=teorico,
                efectivo_contado=monto_cierre,
                diferencia=diferencia,
                tipo_diferencia=tipo_diferencia,
                duracion_turno_minutos=minutos,
                notas=notas.strip() or None
            ))
            self.db.commit()
            self.db.refresh(shift)
        except Exception:
            self.db.rollback()
            logger.exception(f"Error cerrando turno {shift.id}")
            raise HTTPException(status_code=500, detail="Error cerrando caja")

        logger.info(
            f"Turno #{shift.numero_turno} cerrado ({tipo_cierre}) de {cashier.username}: "
            f"teórico {teorico}, contado {monto_cierre}, diferencia {diferencia}"
        )
        return CloseShiftResponse(
            mensaje="Turno cerrado de emergencia" if tipo_cierre == "emergencia" else "Caja cerrada exitosamente",
            turno=ShiftResponse.model_validate(shift),
            efectivo_teorico=float(teorico),
            monto_cierre=float(monto_cierre),
            diferencia=float(diferencia),
            tipo_diferencia=tipo_diferencia,
            nivel_diferencia=reconciliation.difference_level(diferencia),
            duracion_minutos=minutos,
            duracion_categoria=reconciliation.duration_category(minutos),
            totales=totales
        )

    # ==================== HISTORIAL ====================

    async def get_history(
        self,
        fecha_desde: Optional[date],
        fecha_hasta: Optional[date],
        tipo_evento: Optional[str],
        cajero_id: Optional[int],
        page: int,
        page_size: int
    ) -> HistoryResponse:
        filters = dict(fecha_desde=fecha_desde, fecha_hasta=fecha_hasta, tipo_evento=tipo_evento, cajero_id=cajero_id)

        # el balance se calcula sobre todo el filtro, luego se pagina
        events = [_event_to_dict(e) for e in self.repository.history_events(**filters)]
        rows = reconciliation.running_balance(events)
        rows.reverse()

        total = len(rows)
        start = (page - 1) * page_size
        page_rows = rows[start:start + page_size]

        historial = [
            HistoryEvent(
                **_as_float(row),
                nivel_diferencia=reconciliation.difference_level(row["diferencia"]) if row["tipo_evento"] == "cierre" else None,
                duracion_categoria=reconciliation.duration_category(row["duracion_turno_minutos"])
            )
            for row in page_rows
        ]

        total_pages = math.ceil(total / page_size) if total else 0
        return HistoryResponse(
            historial=historial,
            paginacion={
                "total_registros": total,
                "pagina_actual": page,
                "limite_por_pagina": page_size,
                "total_paginas": total_pages,
                "tiene_siguiente": page < total_pages,
                "tiene_anterior": page > 1,
            },
            estadisticas=_as_float(reconciliation.history_statistics(events)),
            cajeros=self.repository.history_cashiers()
        )

    async def get_period_analysis(
        self,
        fecha_desde: Optional[date],
        fecha_hasta: Optional[date],
        cajero_id: Optional[int]
    ) -> PeriodAnalysisResponse:
        events = [
            _event_to_dict(e)
            for e in self.repository.history_events(fecha_desde=fecha_desde, fecha_hasta=fecha_hasta, cajero_id=cajero_id)
        ]
        rows = reconciliation.running_balance(events)

        # sin filtro de cajero se suman todas las cajas abiertas
        if cajero_id is not None:
            open_shift = self.repository.get_open_shift(cajero_id)
            open_shifts = [open_shift] if open_shift else []
        else:
            open_shifts = self.repository.list_open_shifts()

        current_cash = None
        if open_shifts:
            current_cash = sum(
                (to_decimal(self.shift_totals(shift).efectivo_teorico) for shift in open_shifts),
                Decimal("0.00")
            )

        analysis = reconciliation.period_analysis(rows, current_cash)
        return PeriodAnalysisResponse(analisis=_as_float(analysis) if analysis else None)

    async def get_shift_summary(self, shift_id: int, user: Usuario) -> ShiftSummaryResponse:
        shift = self._get_shift_for(user, shift_id)
        totales = self.shift_totals(shift)

        if shift.estado == "cerrado":
            diferencia = to_decimal(shift.diferencia)
            tipo = reconciliation.classify_difference(diferencia)
            nivel = reconciliation.difference_level(diferencia)
        else:
            diferencia, tipo, nivel = None, None, None

        minutos = reconciliation.duration_minutes(shift.fecha_apertura, shift.fecha_cierre or datetime.now())
        return ShiftSummaryResponse(
            turno=ShiftResponse.model_validate(shift),
            cajero_nombre=shift.usuario.nombre if shift.usuario else None,
            totales=totales,
            diferencia=float(diferencia) if diferencia is not None else None,
            tipo_diferencia=tipo,
            nivel_diferencia=nivel,
            duracion_minutos=minutos,
            duracion_categoria=reconciliation.duration_category(minutos),
            movimientos=[MovementResponse.model_validate(m) for m in self.repository.list_movements(shift.id)]
        )

    async def get_last_closing(self, user: Usuario) -> LastClosingResponse:
        shift = self.repository.get_last_closed_shift(user.id)
        return LastClosingResponse(
            ultimo_cierre=ShiftResponse.model_validate(shift) if shift else None,
            mensaje="Último cierre encontrado" if shift else "No hay cierres previos"
        )

    # ==================== HELPERS ====================

    def _require_open_shift(self, user: Usuario) -> TurnoCaja:
        shift = self.repository.get_open_shift(user.id)
        if not shift:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="No hay turno activo. Debe abrir la caja primero."
            )
        return shift

    def _get_shift_for(self, user: Usuario, shift_id: int) -> TurnoCaja:
        shift = self.repository.get_shift(shift_id)
        if not shift:
            raise HTTPException(status_code=404, detail=f"Turno {shift_id} no encontrado")
        if not user.is_admin and shift.usuario_id != user.id:
            raise HTTPException(status_code=403, detail="No puedes consultar turnos de otros cajeros")
        return shift
