# app/modules/sales/repository.py
from datetime import date, datetime, time
from typing import List, Optional, Tuple
from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload

from app.shared.database.models import Venta

class SalesRepository:
    """
    Repositorio para todas las operaciones de datos relacionadas con ventas
    """

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, sale_id: int) -> Optional[Venta]:
        return self.db.query(Venta).options(
            selectinload(Venta.detalles)
        ).filter(Venta.id == sale_id).first()

    def numero_exists(self, numero: str) -> bool:
        return self.db.query(Venta.id).filter(Venta.numero_comprobante == numero).first() is not None

    def add(self, sale: Venta) -> Venta:
        self.db.add(sale)
        self.db.flush()
        return sale

    def _filtered_query(
        self,
        fecha_desde: Optional[date] = None,
        fecha_hasta: Optional[date] = None,
        metodo_pago: Optional[str] = None,
        estado: Optional[str] = None,
        usuario_id: Optional[int] = None,
        search: Optional[str] = None
    ):
        query = self.db.query(Venta)
        if fecha_desde:
            query = query.filter(Venta.fecha >= datetime.combine(fecha_desde, time.min))
        if fecha_hasta:
            query = query.filter(Venta.fecha <= datetime.combine(fecha_hasta, time.max))
        if metodo_pago:
            query = query.filter(Venta.metodo_pago == metodo_pago)
        if estado:
            query = query.filter(Venta.estado == estado)
        if usuario_id:
            query = query.filter(Venta.usuario_id == usuario_id)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(
                Venta.numero_comprobante.ilike(pattern),
                Venta.cliente_nombre.ilike(pattern)
            ))
        return query

    def list_sales(
        self,
        page: int = 1,
        page_size: int = 50,
        **filters
    ) -> Tuple[List[Venta], int, float]:
        """Ventas paginadas, total de registros y suma de monto_total del filtro"""
        query = self._filtered_query(**filters)
        total = query.count()
        monto = query.with_entities(func.coalesce(func.sum(Venta.monto_total), 0)).scalar()

        sales = query.options(selectinload(Venta.detalles)).order_by(
            Venta.fecha.desc(), Venta.id.desc()
        ).offset((page - 1) * page_size).limit(page_size).all()
        return sales, total, float(monto or 0)

    def all_sales(self, **filters) -> List[Venta]:
        return self._filtered_query(**filters).options(
            selectinload(Venta.detalles)
        ).order_by(Venta.fecha, Venta.id).all()
