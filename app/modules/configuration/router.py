# app/modules/configuration/router.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.core.auth.dependencies import get_current_user, require_roles
from app.shared.database.models import Usuario
from .service import ConfigurationService
from .schemas import ConfigResponse, ConfigUpdateRequest, DiscountsResponse

router = APIRouter(prefix="/config", tags=["Configuración"])

@router.get("/", response_model=ConfigResponse)
async def get_config(
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Configuración del negocio (valores guardados + valores por defecto)"""
    service = ConfigurationService(db)
    return await service.get_config()

@router.get("/discounts", response_model=DiscountsResponse)
async def get_discounts(
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Porcentaje de descuento por método de pago"""
    service = ConfigurationService(db)
    return await service.get_discounts()

@router.put("/", response_model=ConfigResponse)
async def update_config(
    request: ConfigUpdateRequest,
    current_user: Usuario = Depends(require_roles(["admin"])),
    db: Session = Depends(get_db)
):
    """
    Actualizar varias claves a la vez

    Los descuentos deben estar entre 0 y 100 y la meta diaria debe ser positiva.
    """
    service = ConfigurationService(db)
    return await service.update_config(request.valores, current_user)
