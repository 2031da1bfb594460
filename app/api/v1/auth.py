# app/api/v1/auth.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.auth.dependencies import get_current_user
from app.core.auth.schemas import LoginRequest, LoginResponse, UserResponse
from app.core.auth.service import AuthService
from app.shared.database.models import Usuario

router = APIRouter(prefix="/auth", tags=["Autenticación"])

@router.post("/login", response_model=LoginResponse)
async def login(
    credentials: LoginRequest,
    request: Request,
    db: Session = Depends(get_db)
):
    """
    Iniciar sesión

    - 401 si las credenciales no son válidas
    - 429 tras demasiados intentos fallidos en la ventana configurada
    - 403 si un cajero ingresa desde un dispositivo no aprobado
    """
    service = AuthService(db)
    ip = request.client.host if request.client else "desconocida"
    return await service.login(credentials, ip)

@router.get("/me", response_model=UserResponse)
async def get_me(current_user: Usuario = Depends(get_current_user)):
    """Datos del usuario autenticado"""
    return UserResponse.model_validate(current_user)
