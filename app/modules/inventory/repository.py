# app/modules/inventory/repository.py
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple
from sqlalchemy import case, func, or_
from sqlalchemy.orm import Session

from app.shared.database.models import DetalleVenta, Producto, Venta

class InventoryRepository:
    """
    Repositorio de productos y agregados de ventas por producto
    """

    def __init__(self, db: Session):
        self.db = db

    # ==================== PRODUCTOS ====================

    def get_by_id(self, product_id: int) -> Optional[Producto]:
        return self.db.query(Producto).filter(Producto.id == product_id).first()

    def get_by_codigo(self, codigo: str) -> Optional[Producto]:
        return self.db.query(Producto).filter(Producto.codigo == codigo).first()

    def get_many(self, product_ids: List[int]) -> Dict[int, Producto]:
        if not product_ids:
            return {}
        products = self.db.query(Producto).filter(Producto.id.in_(product_ids)).all()
        return {p.id: p for p in products}

    def search_products(
        self,
        search: Optional[str] = None,
        categoria: Optional[str] = None,
        solo_activos: bool = True,
        solo_con_stock: bool = False,
        limit: Optional[int] = None,
        offset: int = 0
    ) -> Tuple[List[Producto], int]:
        query = self.db.query(Producto)

        if solo_activos:
            query = query.filter(Producto.activo.is_(True))
        if solo_con_stock:
            query = query.filter(Producto.stock > 0)
        if categoria:
            query = query.filter(Producto.categoria == categoria)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(
                Producto.nombre.ilike(pattern),
                Producto.codigo.ilike(pattern),
                Producto.codigo_barras.ilike(pattern)
            ))

        total = query.count()
        query = query.order_by(Producto.nombre, Producto.id).offset(offset)
        if limit:
            query = query.limit(limit)
        return query.all(), total

    def list_categories(self) -> List[str]:
        rows = self.db.query(Producto.categoria).filter(
            Producto.activo.is_(True)
        ).distinct().order_by(Producto.categoria).all()
        return [r[0] for r in rows if r[0]]

    def create(self, **data) -> Producto:
        product = Producto(**data)
        self.db.add(product)
        self.db.flush()
        return product

    # ==================== AGREGADOS DE VENTAS ====================

    def sales_aggregates(self, now: Optional[datetime] = None) -> Dict[int, Dict[str, int]]:
        """
        Unidades vendidas por producto en ventas completadas:
        últimos 7 días, 7 días anteriores, últimos 30 días y total histórico
        """
        now = now or datetime.now()
        since_7 = now - timedelta(days=7)
        since_14 = now - timedelta(days=14)
        since_30 = now - timedelta(days=30)

        rows = self.db.query(
            DetalleVenta.producto_id,
            func.sum(case((Venta.fecha >= since_7, DetalleVenta.cantidad), else_=0)).label("ventas_7_dias"),
            func.sum(case(
                ((Venta.fecha >= since_14) & (Venta.fecha < since_7), DetalleVenta.cantidad), else_=0
            )).label("ventas_prev_7_dias"),
            func.sum(case((Venta.fecha >= since_30, DetalleVenta.cantidad), else_=0)).label("ventas_30_dias"),
            func.sum(DetalleVenta.cantidad).label("ventas_total")
        ).join(
            Venta, DetalleVenta.venta_id == Venta.id
        ).filter(
            Venta.estado == "completada"
        ).group_by(DetalleVenta.producto_id).all()

        return {
            row.producto_id: {
                "ventas_7_dias": int(row.ventas_7_dias or 0),
                "ventas_prev_7_dias": int(row.ventas_prev_7_dias or 0),
                "ventas_30_dias": int(row.ventas_30_dias or 0),
                "ventas_total": int(row.ventas_total or 0),
            }
            for row in rows
        }
