# app/modules/cash/router.py
from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from app.config.database import get_db
from app.core.auth.dependencies import get_current_user, require_roles
from app.shared.database.models import Usuario
from .service import CashService
from .schemas import (
    CashStatusResponse, CloseShiftRequest, CloseShiftResponse, EmergencyCloseRequest,
    EventType, HistoryResponse, LastClosingResponse, MovementListResponse,
    MovementRequest, MovementResponse, OpenShiftRequest, OpenShiftResponse,
    PeriodAnalysisResponse, POSStatusResponse, ShiftSummaryResponse
)

router = APIRouter(prefix="/cash", tags=["Caja"])
pos_router = APIRouter(prefix="/pos", tags=["Punto de venta"])

# ==================== ESTADO ====================

@router.get("/status", response_model=CashStatusResponse)
async def get_cash_status(
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Turno abierto del usuario con sus totales"""
    service = CashService(db)
    return await service.get_status(current_user)

@pos_router.get("/status", response_model=POSStatusResponse)
async def get_pos_status(
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = CashService(db)
    return await service.get_pos_status(current_user)

# ==================== APERTURA Y CIERRE ====================

@router.post("/open", response_model=OpenShiftResponse, status_code=201)
async def open_shift(
    request: OpenShiftRequest,
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Abrir caja.

    Si el último cierre del usuario dejó efectivo, se exige ``efectivo_contado``;
    sin él responde 409 con ``requiere_verificacion`` y el monto esperado.
    """
    service = CashService(db)
    return await service.open_shift(request, current_user)

@router.post("/close", response_model=CloseShiftResponse)
async def close_shift(
    request: CloseShiftRequest,
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = CashService(db)
    return await service.close_shift(request, current_user)

@router.post("/emergency-close", response_model=CloseShiftResponse)
async def emergency_close(
    request: EmergencyCloseRequest,
    current_user: Usuario = Depends(require_roles(["admin"])),
    db: Session = Depends(get_db)
):
    service = CashService(db)
    return await service.emergency_close(request, current_user)

# ==================== MOVIMIENTOS ====================

@router.post("/movements", response_model=MovementResponse, status_code=201)
async def register_movement(
    request: MovementRequest,
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Ingreso o egreso manual de efectivo en el turno abierto"""
    service = CashService(db)
    return await service.register_movement(request, current_user)

@router.get("/movements", response_model=MovementListResponse)
async def list_movements(
    turno_id: Optional[int] = Query(None, description="Por defecto, el turno abierto"),
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = CashService(db)
    return await service.list_movements(current_user, turno_id)

# ==================== HISTORIAL ====================

@router.get("/history", response_model=HistoryResponse)
async def get_history(
    fecha_desde: Optional[date] = Query(None),
    fecha_hasta: Optional[date] = Query(None),
    tipo_evento: Optional[EventType] = Query(None),
    cajero_id: Optional[int] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
    current_user: Usuario = Depends(require_roles(["admin"])),
    db: Session = Depends(get_db)
):
    service = CashService(db)
    return await service.get_history(
        fecha_desde, fecha_hasta, tipo_evento.value if tipo_evento else None, cajero_id, page, page_size
    )

@router.get("/history/analysis", response_model=PeriodAnalysisResponse)
async def get_period_analysis(
    fecha_desde: Optional[date] = Query(None),
    fecha_hasta: Optional[date] = Query(None),
    cajero_id: Optional[int] = Query(None),
    current_user: Usuario = Depends(require_roles(["admin"])),
    db: Session = Depends(get_db)
):
    service = CashService(db)
    return await service.get_period_analysis(fecha_desde, fecha_hasta, cajero_id)

@router.get("/shifts/{shift_id}/summary", response_model=ShiftSummaryResponse)
async def get_shift_summary(
    shift_id: int,
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = CashService(db)
    return await service.get_shift_summary(shift_id, current_user)

@router.get("/last-closing", response_model=LastClosingResponse)
async def get_last_closing(
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = CashService(db)
    return await service.get_last_closing(current_user)
