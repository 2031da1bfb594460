# app/modules/sales/router.py
from datetime import date
from decimal import Decimal
from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse, Response
from sqlalchemy.orm import Session
from typing import Optional

from app.config.database import get_db
from app.core.auth.dependencies import get_current_user, require_roles
from app.modules.configuration.schemas import PaymentMethod
from app.shared.database.models import Usuario
from .service import SalesService
from .schemas import (
    CashSuggestionsResponse, QuoteResponse, SaleCancelRequest, SaleCreateRequest,
    SaleListResponse, SaleResponse, SaleStatus
)

router = APIRouter(prefix="/sales", tags=["Ventas"])

# ==================== COBRO ====================

@router.post("/", response_model=SaleResponse, status_code=201)
async def create_sale(
    sale_data: SaleCreateRequest,
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Registrar venta.

    - Aplica el descuento configurado para el método de pago
    - En efectivo calcula el vuelto sobre ``monto_recibido``
    - Descuenta stock y vincula la venta al turno abierto del cajero
    """
    service = SalesService(db)
    return await service.create_sale(sale_data, current_user)

@router.get("/quote", response_model=QuoteResponse)
async def quote_sale(
    items: str = Query(..., description="producto_id:cantidad separados por coma, p.ej. 1:2,5:1"),
    metodo_pago: PaymentMethod = Query(PaymentMethod.EFECTIVO),
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Vista previa de totales para un método de pago, sin registrar la venta"""
    service = SalesService(db)
    return await service.quote(items, metodo_pago.value)

@router.get("/cash-suggestions", response_model=CashSuggestionsResponse)
async def cash_suggestions(
    total: Decimal = Query(..., ge=0),
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = SalesService(db)
    return await service.cash_suggestions(total)

# ==================== CONSULTAS ====================

@router.get("/", response_model=SaleListResponse)
async def list_sales(
    fecha_desde: Optional[date] = Query(None),
    fecha_hasta: Optional[date] = Query(None),
    metodo_pago: Optional[PaymentMethod] = Query(None),
    estado: Optional[SaleStatus] = Query(None),
    search: Optional[str] = Query(None, description="Número de comprobante o cliente"),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = SalesService(db)
    return await service.list_sales(
        page,
        page_size,
        fecha_desde=fecha_desde,
        fecha_hasta=fecha_hasta,
        metodo_pago=metodo_pago.value if metodo_pago else None,
        estado=estado.value if estado else None,
        search=search,
        user=current_user
    )

@router.get("/export/csv")
async def export_sales_csv(
    fecha_desde: Optional[date] = Query(None),
    fecha_hasta: Optional[date] = Query(None),
    metodo_pago: Optional[PaymentMethod] = Query(None),
    estado: Optional[SaleStatus] = Query(None),
    current_user: Usuario = Depends(require_roles(["admin"])),
    db: Session = Depends(get_db)
):
    service = SalesService(db)
    content = await service.export_csv(
        fecha_desde,
        fecha_hasta,
        metodo_pago.value if metodo_pago else None,
        estado.value if estado else None
    )
    filename = f"ventas_{date.today().isoformat()}.csv"
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )

@router.get("/{sale_id}", response_model=SaleResponse)
async def get_sale(
    sale_id: int,
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = SalesService(db)
    return await service.get_sale(sale_id, current_user)

@router.get("/{sale_id}/ticket", response_class=HTMLResponse)
async def get_ticket(
    sale_id: int,
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Ticket imprimible (80mm) con IVA incluido discriminado"""
    service = SalesService(db)
    return HTMLResponse(content=await service.render_ticket(sale_id, current_user))

# ==================== ANULACIÓN ====================

@router.post("/{sale_id}/cancel", response_model=SaleResponse)
async def cancel_sale(
    sale_id: int,
    request: SaleCancelRequest,
    current_user: Usuario = Depends(require_roles(["admin"])),
    db: Session = Depends(get_db)
):
    """Anular venta completada y devolver el stock"""
    service = SalesService(db)
    return await service.cancel_sale(sale_id, request, current_user)
