# app/modules/devices/router.py
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from typing import Optional

from app.config.database import get_db
from app.core.auth.dependencies import require_roles
from app.modules.users.repository import UsersRepository
from app.shared.database.models import Usuario
from .service import DevicesService
from .schemas import (
    AccessRequest, AccessRequestResponse, DeviceAccessResponse,
    DeviceApproval, DeviceListResponse, DeviceResponse, DeviceStatus
)

router = APIRouter(prefix="/devices", tags=["Dispositivos confiables"])

# ==================== ENDPOINTS PÚBLICOS (ANTES DEL LOGIN) ====================

@router.post("/request-access", response_model=AccessRequestResponse)
async def request_access(
    access_request: AccessRequest,
    request: Request,
    db: Session = Depends(get_db)
):
    """
    Solicitar acceso desde un dispositivo nuevo.

    Devuelve el código de activación que el cajero debe pasarle al
    administrador. Si el dispositivo ya existe, devuelve su estado.
    """
    service = DevicesService(db)
    return await service.request_access(
        fingerprint=access_request.device_fingerprint,
        username=access_request.username,
        ip=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent")
    )

@router.get("/verify", response_model=DeviceAccessResponse)
async def verify_device(
    fingerprint: str = Query(..., description="Huella del dispositivo"),
    username: Optional[str] = Query(None),
    db: Session = Depends(get_db)
):
    """Verificar si un dispositivo está autorizado para el usuario"""
    user = UsersRepository(db).get_by_username(username) if username else None
    return await DevicesService(db).check_access(fingerprint, user)

@router.post("/activity")
async def register_activity(
    fingerprint: str = Query(...),
    db: Session = Depends(get_db)
):
    """Registrar última actividad del dispositivo"""
    updated = await DevicesService(db).register_activity(fingerprint)
    return {"success": True, "actualizado": updated}

# ==================== ADMINISTRACIÓN ====================

@router.get("/", response_model=DeviceListResponse)
async def list_devices(
    estado: Optional[DeviceStatus] = Query(None, description="Filtrar por estado"),
    current_user: Usuario = Depends(require_roles(["admin"])),
    db: Session = Depends(get_db)
):
    return await DevicesService(db).list_devices(estado)

@router.post("/approve", response_model=DeviceResponse)
async def approve_device(
    approval: DeviceApproval,
    current_user: Usuario = Depends(require_roles(["admin"])),
    db: Session = Depends(get_db)
):
    return await DevicesService(db).approve(approval.codigo_activacion, approval.nombre_dispositivo, current_user)

@router.post("/{codigo}/reject", response_model=DeviceResponse)
async def reject_device(
    codigo: str,
    current_user: Usuario = Depends(require_roles(["admin"])),
    db: Session = Depends(get_db)
):
    return await DevicesService(db).reject(codigo, current_user)

@router.post("/{device_id}/revoke", response_model=DeviceResponse)
async def revoke_device(
    device_id: int,
    current_user: Usuario = Depends(require_roles(["admin"])),
    db: Session = Depends(get_db)
):
    return await DevicesService(db).revoke(device_id, current_user)
