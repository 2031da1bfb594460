# app/modules/users/service.py
import logging
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.core.auth.schemas import UserResponse
from app.core.auth.security import hash_password
from app.shared.database.models import Usuario
from .repository import UsersRepository
from .schemas import UserCreate, UserListResponse, UserRole, UserUpdate

logger = logging.getLogger(__name__)

class UsersService:
    """
    Gestión de usuarios del sistema, solo para administradores
    """

    def __init__(self, db: Session):
        self.db = db
        self.repository = UsersRepository(db)

    # ==================== CREAR USUARIOS ====================

    async def create_user(self, user_data: UserCreate, admin: Usuario) -> UserResponse:
        if self.repository.get_by_username(user_data.username):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="El nombre de usuario ya está en uso"
            )

        try:
            user = self.repository.create(
                username=user_data.username,
                password_hash=hash_password(user_data.password),
                nombre=user_data.nombre.strip(),
                role=user_data.role.value,
                activo=True
            )
            self.db.commit()
            self.db.refresh(user)
        except Exception:
            self.db.rollback()
            logger.exception("Error creando usuario")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error creando usuario"
            )

        logger.info(f"Usuario {user.username} ({user.role}) creado por {admin.username}")
        return UserResponse.model_validate(user)

    # ==================== CONSULTAS ====================

    async def list_users(self, role: Optional[UserRole] = None, activo: Optional[bool] = None) -> UserListResponse:
        users = self.repository.list_users(role.value if role else None, activo)
        return UserListResponse(
            usuarios=[UserResponse.model_validate(u) for u in users],
            total=len(users)
        )

    async def get_user(self, user_id: int) -> UserResponse:
        return UserResponse.model_validate(self._get_or_404(user_id))

    # ==================== ACTUALIZAR / DESACTIVAR ====================

    async def update_user(self, user_id: int, update_data: UserUpdate, admin: Usuario) -> UserResponse:
        user = self._get_or_404(user_id)
        changes = update_data.model_dump(exclude_unset=True)

        if user.id == admin.id:
            if changes.get("activo") is False:
                raise HTTPException(status_code=400, detail="No puedes desactivar tu propio usuario")
            if changes.get("role") not in (None, UserRole.ADMIN):
                raise HTTPException(status_code=400, detail="No puedes quitarte el rol de administrador")

        try:
            if changes.get("nombre") is not None:
                user.nombre = changes["nombre"].strip()
            if changes.get("password"):
                user.password_hash = hash_password(changes["password"])
            if changes.get("role") is not None:
                user.role = UserRole(changes["role"]).value
            if changes.get("activo") is not None:
                user.activo = changes["activo"]

            self.db.commit()
            self.db.refresh(user)
        except Exception:
            self.db.rollback()
            logger.exception(f"Error actualizando usuario {user_id}")
            raise HTTPException(status_code=500, detail="Error actualizando usuario")

        logger.info(f"Usuario {user.username} actualizado por {admin.username}: {sorted(changes)}")
        return UserResponse.model_validate(user)

    async def deactivate_user(self, user_id: int, admin: Usuario) -> UserResponse:
        return await self.update_user(user_id, UserUpdate(activo=False), admin)

    def _get_or_404(self, user_id: int) -> Usuario:
        user = self.repository.get_by_id(user_id)
        if not user:
            raise HTTPException(status_code=404, detail=f"Usuario {user_id} no encontrado")
        return user
