# app/modules/suppliers/repository.py
from typing import Dict, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.shared.database.models import Producto, Proveedor

class SuppliersRepository:
    """
    Repositorio de proveedores y sus productos asignados
    """

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, supplier_id: int) -> Optional[Proveedor]:
        return self.db.query(Proveedor).filter(Proveedor.id == supplier_id).first()

    def get_by_nombre(self, nombre: str) -> Optional[Proveedor]:
        return self.db.query(Proveedor).filter(func.lower(Proveedor.nombre) == nombre.strip().lower()).first()

    def list_suppliers(self, solo_activos: bool = True) -> List[Proveedor]:
        query = self.db.query(Proveedor)
        if solo_activos:
            query = query.filter(Proveedor.activo.is_(True))
        return query.order_by(Proveedor.nombre).all()

    def product_counts(self) -> Dict[int, int]:
        """Productos activos por proveedor"""
        rows = self.db.query(
            Producto.proveedor_id, func.count(Producto.id)
        ).filter(
            Producto.proveedor_id.isnot(None),
            Producto.activo.is_(True)
        ).group_by(Producto.proveedor_id).all()
        return {supplier_id: int(total) for supplier_id, total in rows}

    def active_products(self, supplier_id: int) -> List[Producto]:
        return self.db.query(Producto).filter(
            Producto.proveedor_id == supplier_id,
            Producto.activo.is_(True)
        ).order_by(Producto.nombre).all()

    def rename_in_products(self, supplier_id: int, nombre: str) -> None:
        self.db.query(Producto).filter(
            Producto.proveedor_id == supplier_id
        ).update({Producto.proveedor: nombre}, synchronize_session=False)

    def create(self, **data) -> Proveedor:
        supplier = Proveedor(**data)
        self.db.add(supplier)
        self.db.flush()
        return supplier
