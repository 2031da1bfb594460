# app/modules/users/__init__.py
"""
Módulo de Usuarios

Alta, edición y baja lógica de administradores y cajeros.
"""

from .router import router as users_router
from .repository import UsersRepository
from .service import UsersService

__all__ = [
    "users_router",
    "UsersRepository",
    "UsersService"
]
