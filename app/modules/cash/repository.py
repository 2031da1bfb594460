# app/modules/cash/repository.py
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Dict, List, Optional
from sqlalchemy import case, func
from sqlalchemy.orm import Session

from app.shared.database.models import (
    HistorialTurno, MovimientoCaja, TurnoCaja, Usuario, Venta
)

class CashRepository:
    """
    Repositorio de turnos de caja, movimientos y su historial
    """

    def __init__(self, db: Session):
        self.db = db

    # ==================== TURNOS ====================

    def get_shift(self, shift_id: int) -> Optional[TurnoCaja]:
        return self.db.query(TurnoCaja).filter(TurnoCaja.id == shift_id).first()

    def get_open_shift(self, usuario_id: int) -> Optional[TurnoCaja]:
        return self.db.query(TurnoCaja).filter(
            TurnoCaja.usuario_id == usuario_id,
            TurnoCaja.estado == "abierto"
        ).first()

    def list_open_shifts(self) -> List[TurnoCaja]:
        return self.db.query(TurnoCaja).filter(
            TurnoCaja.estado == "abierto"
        ).order_by(TurnoCaja.fecha_apertura).all()

    def get_last_closed_shift(self, usuario_id: Optional[int] = None) -> Optional[TurnoCaja]:
        """Último cierre con efectivo teórico positivo"""
        query = self.db.query(TurnoCaja).filter(
            TurnoCaja.estado == "cerrado",
            TurnoCaja.efectivo_teorico > 0
        )
        if usuario_id is not None:
            query = query.filter(TurnoCaja.usuario_id == usuario_id)
        return query.order_by(TurnoCaja.fecha_cierre.desc(), TurnoCaja.id.desc()).first()

    def next_shift_number(self) -> int:
        current = self.db.query(func.max(TurnoCaja.numero_turno)).scalar()
        return (current or 0) + 1

    def add(self, obj):
        self.db.add(obj)
        self.db.flush()
        return obj

    # ==================== TOTALES DEL TURNO ====================

    def movement_totals(self, shift_id: int) -> Dict[str, Any]:
        ingresos, egresos, cantidad = self.db.query(
            func.coalesce(func.sum(case((MovimientoCaja.tipo == "ingreso", MovimientoCaja.monto), else_=0)), 0),
            func.coalesce(func.sum(case((MovimientoCaja.tipo == "egreso", MovimientoCaja.monto), else_=0)), 0),
            func.count(MovimientoCaja.id)
        ).filter(MovimientoCaja.turno_id == shift_id).one()

        return {
            "ingresos": Decimal(str(ingresos or 0)),
            # los egresos se guardan negativos
            "egresos": abs(Decimal(str(egresos or 0))),
            "cantidad_movimientos": int(cantidad or 0),
        }

    def sales_by_method(self, shift_id: int) -> Dict[str, Dict[str, Any]]:
        rows = self.db.query(
            Venta.metodo_pago,
            func.coalesce(func.sum(Venta.monto_total), 0),
            func.count(Venta.id)
        ).filter(
            Venta.turno_id == shift_id,
            Venta.estado == "completada"
        ).group_by(Venta.metodo_pago).all()

        return {
            metodo: {"total": Decimal(str(total or 0)), "cantidad": int(cantidad)}
            for metodo, total, cantidad in rows
        }

    # ==================== MOVIMIENTOS ====================

    def list_movements(self, shift_id: int) -> List[MovimientoCaja]:
        return self.db.query(MovimientoCaja).filter(
            MovimientoCaja.turno_id == shift_id
        ).order_by(MovimientoCaja.fecha.desc(), MovimientoCaja.id.desc()).all()

    # ==================== HISTORIAL ====================

    def _history_query(
        self,
        fecha_desde: Optional[date] = None,
        fecha_hasta: Optional[date] = None,
        tipo_evento: Optional[str] = None,
        cajero_id: Optional[int] = None
    ):
        query = self.db.query(HistorialTurno)
        if fecha_desde:
            query = query.filter(HistorialTurno.fecha_hora >= datetime.combine(fecha_desde, time.min))
        if fecha_hasta:
            query = query.filter(HistorialTurno.fecha_hora <= datetime.combine(fecha_hasta, time.max))
        if tipo_evento:
            query = query.filter(HistorialTurno.tipo_evento == tipo_evento)
        if cajero_id:
            query = query.filter(HistorialTurno.cajero_id == cajero_id)
        return query

    def history_events(self, **filters) -> List[HistorialTurno]:
        """Eventos en orden cronológico"""
        return self._history_query(**filters).order_by(
            HistorialTurno.fecha_hora, HistorialTurno.id
        ).all()

    def history_cashiers(self) -> List[Dict[str, Any]]:
        rows = self.db.query(HistorialTurno.cajero_id, Usuario.nombre).join(
            Usuario, Usuario.id == HistorialTurno.cajero_id
        ).distinct().order_by(Usuario.nombre).all()
        return [{"id": cajero_id, "nombre": nombre} for cajero_id, nombre in rows]
