# app/modules/users/router.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from app.config.database import get_db
from app.core.auth.dependencies import require_roles
from app.core.auth.schemas import UserResponse
from app.shared.database.models import Usuario
from .service import UsersService
from .schemas import UserCreate, UserListResponse, UserRole, UserUpdate

router = APIRouter(prefix="/users", tags=["Usuarios"])

@router.post("/", response_model=UserResponse, status_code=201)
async def create_user(
    user_data: UserCreate,
    current_user: Usuario = Depends(require_roles(["admin"])),
    db: Session = Depends(get_db)
):
    """Crear un usuario cajero o administrador"""
    service = UsersService(db)
    return await service.create_user(user_data, current_user)

@router.get("/", response_model=UserListResponse)
async def list_users(
    role: Optional[UserRole] = Query(None),
    activo: Optional[bool] = Query(None),
    current_user: Usuario = Depends(require_roles(["admin"])),
    db: Session = Depends(get_db)
):
    service = UsersService(db)
    return await service.list_users(role, activo)

@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    current_user: Usuario = Depends(require_roles(["admin"])),
    db: Session = Depends(get_db)
):
    service = UsersService(db)
    return await service.get_user(user_id)

@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    update_data: UserUpdate,
    current_user: Usuario = Depends(require_roles(["admin"])),
    db: Session = Depends(get_db)
):
    """Actualizar nombre, contraseña, rol o estado"""
    service = UsersService(db)
    return await service.update_user(user_id, update_data, current_user)

@router.delete("/{user_id}", response_model=UserResponse)
async def deactivate_user(
    user_id: int,
    current_user: Usuario = Depends(require_roles(["admin"])),
    db: Session = Depends(get_db)
):
    """Desactivar usuario (no se elimina para conservar su historial de ventas)"""
    service = UsersService(db)
    return await service.deactivate_user(user_id, current_user)
