# app/modules/suppliers/service.py
import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.shared.database.models import Proveedor, Usuario
from .repository import SuppliersRepository
from .schemas import (
    SupplierCreate, SupplierDetailResponse, SupplierListResponse,
    SupplierProduct, SupplierResponse, SupplierUpdate
)

logger = logging.getLogger(__name__)

class SuppliersService:
    """
    Proveedores del almacén. Los productos se vinculan por ``proveedor_id``
    y guardan una copia del nombre para agrupar los pedidos.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repository = SuppliersRepository(db)

    # ==================== CONSULTAS ====================

    async def list_suppliers(self, solo_activos: bool = True) -> SupplierListResponse:
        suppliers = self.repository.list_suppliers(solo_activos)
        counts = self.repository.product_counts()
        return SupplierListResponse(
            proveedores=[self._to_response(s, counts.get(s.id, 0)) for s in suppliers],
            total=len(suppliers)
        )

    async def get_supplier(self, supplier_id: int) -> SupplierDetailResponse:
        supplier = self._get_or_404(supplier_id)
        products = self.repository.active_products(supplier.id)
        return SupplierDetailResponse(
            proveedor=self._to_response(supplier, len(products)),
            productos=[SupplierProduct.model_validate(p) for p in products],
            total_productos=len(products)
        )

    # ==================== ALTA / EDICIÓN ====================

    async def create_supplier(self, data: SupplierCreate, user: Usuario) -> SupplierResponse:
        if self.repository.get_by_nombre(data.nombre):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Ya existe un proveedor llamado {data.nombre}"
            )

        try:
            supplier = self.repository.create(**data.model_dump(), activo=True)
            self.db.commit()
            self.db.refresh(supplier)
        except Exception:
            self.db.rollback()
            logger.exception("Error creando proveedor")
            raise HTTPException(status_code=500, detail="Error creando proveedor")

        logger.info(f"Proveedor {supplier.nombre} creado por {user.username}")
        return self._to_response(supplier, 0)

    async def update_supplier(self, supplier_id: int, data: SupplierUpdate, user: Usuario) -> SupplierResponse:
        supplier = self._get_or_404(supplier_id)
        changes = data.model_dump(exclude_unset=True)

        nuevo_nombre = changes.get("nombre")
        if nuevo_nombre and nuevo_nombre != supplier.nombre:
            existing = self.repository.get_by_nombre(nuevo_nombre)
            if existing and existing.id != supplier.id:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail=f"Ya existe un proveedor llamado {nuevo_nombre}"
                )

        try:
            for field, value in changes.items():
                setattr(supplier, field, value)
            if nuevo_nombre:
                self.repository.rename_in_products(supplier.id, nuevo_nombre)
            self.db.commit()
            self.db.refresh(supplier)
        except Exception:
            self.db.rollback()
            logger.exception(f"Error actualizando proveedor {supplier_id}")
            raise HTTPException(status_code=500, detail="Error actualizando proveedor")

        logger.info(f"Proveedor {supplier.nombre} actualizado por {user.username}: {sorted(changes)}")
        return self._to_response(supplier, self.repository.product_counts().get(supplier.id, 0))

    async def delete_supplier(self, supplier_id: int, user: Usuario) -> SupplierResponse:
        """Baja lógica; no se permite mientras tenga productos activos asignados"""
        supplier = self._get_or_404(supplier_id)
        asignados = len(self.repository.active_products(supplier.id))
        if asignados:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"No se puede eliminar. Tiene {asignados} productos asignados."
            )

        supplier.activo = False
        self.db.commit()
        self.db.refresh(supplier)

        logger.info(f"Proveedor {supplier.nombre} desactivado por {user.username}")
        return self._to_response(supplier, 0)

    # ==================== HELPERS ====================

    def _to_response(self, supplier: Proveedor, total_productos: int) -> SupplierResponse:
        response = SupplierResponse.model_validate(supplier)
        response.total_productos = total_productos
        return response

    def _get_or_404(self, supplier_id: int) -> Proveedor:
        supplier = self.repository.get_by_id(supplier_id)
        if not supplier:
            raise HTTPException(status_code=404, detail=f"Proveedor {supplier_id} no encontrado")
        return supplier
