from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from enum import Enum

from app.core.auth.schemas import UserResponse

class UserRole(str, Enum):
    ADMIN = "admin"
    CAJERO = "cajero"

# ==================== REQUEST SCHEMAS ====================

class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=6, description="Contraseña (mínimo 6 caracteres)")
    nombre: str = Field(..., min_length=1, max_length=255)
    role: UserRole = UserRole.CAJERO

    @field_validator('username')
    @classmethod
    def normalize_username(cls, v):
        v = v.strip().lower()
        if ' ' in v:
            raise ValueError('El usuario no puede contener espacios')
        return v

class UserUpdate(BaseModel):
    nombre: Optional[str] = Field(None, min_length=1, max_length=255)
    password: Optional[str] = Field(None, min_length=6)
    role: Optional[UserRole] = None
    activo: Optional[bool] = None

# ==================== RESPONSE SCHEMAS ====================

class UserListResponse(BaseModel):
    success: bool = True
    usuarios: List[UserResponse]
    total: int
