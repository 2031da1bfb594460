# app/modules/suppliers/router.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.auth.dependencies import get_current_user, require_roles
from app.shared.database.models import Usuario
from .service import SuppliersService
from .schemas import (
    SupplierCreate, SupplierDetailResponse, SupplierListResponse,
    SupplierResponse, SupplierUpdate
)

router = APIRouter(prefix="/suppliers", tags=["Proveedores"])

@router.get("/", response_model=SupplierListResponse)
async def list_suppliers(
    activos: bool = Query(True, description="Solo proveedores activos"),
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = SuppliersService(db)
    return await service.list_suppliers(activos)

@router.post("/", response_model=SupplierResponse, status_code=201)
async def create_supplier(
    supplier_data: SupplierCreate,
    current_user: Usuario = Depends(require_roles(["admin"])),
    db: Session = Depends(get_db)
):
    service = SuppliersService(db)
    return await service.create_supplier(supplier_data, current_user)

@router.get("/{supplier_id}", response_model=SupplierDetailResponse)
async def get_supplier(
    supplier_id: int,
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Proveedor con sus productos activos"""
    service = SuppliersService(db)
    return await service.get_supplier(supplier_id)

@router.put("/{supplier_id}", response_model=SupplierResponse)
async def update_supplier(
    supplier_id: int,
    supplier_data: SupplierUpdate,
    current_user: Usuario = Depends(require_roles(["admin"])),
    db: Session = Depends(get_db)
):
    service = SuppliersService(db)
    return await service.update_supplier(supplier_id, supplier_data, current_user)

@router.delete("/{supplier_id}", response_model=SupplierResponse)
async def delete_supplier(
    supplier_id: int,
    current_user: Usuario = Depends(require_roles(["admin"])),
    db: Session = Depends(get_db)
):
    service = SuppliersService(db)
    return await service.delete_supplier(supplier_id, current_user)
