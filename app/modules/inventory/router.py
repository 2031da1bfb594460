# app/modules/inventory/router.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from app.config.database import get_db
from app.core.auth.dependencies import get_current_user, require_roles
from app.shared.database.models import Usuario
from .service import InventoryService
from .schemas import (
    ABCAnalysisResponse, AlertsResponse, IntelligentInventoryResponse,
    OrderSuggestionsResponse, POSProductsResponse, PredictionsResponse,
    ProductCreate, ProductListResponse, ProductResponse, ProductUpdate,
    StockAdjustment, StockAdjustmentResponse
)

router = APIRouter(prefix="/inventory", tags=["Inventario"])

# ==================== PRODUCTOS ====================

@router.get("/products", response_model=ProductListResponse)
async def list_products(
    search: Optional[str] = Query(None, description="Nombre, código o código de barras"),
    categoria: Optional[str] = Query(None),
    incluir_inactivos: bool = Query(False),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = InventoryService(db)
    return await service.list_products(search, categoria, incluir_inactivos, limit, offset)

@router.post("/products", response_model=ProductResponse, status_code=201)
async def create_product(
    product_data: ProductCreate,
    current_user: Usuario = Depends(require_roles(["admin"])),
    db: Session = Depends(get_db)
):
    service = InventoryService(db)
    return await service.create_product(product_data, current_user)

@router.get("/products/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: int,
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = InventoryService(db)
    return await service.get_product(product_id)

@router.put("/products/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: int,
    product_data: ProductUpdate,
    current_user: Usuario = Depends(require_roles(["admin"])),
    db: Session = Depends(get_db)
):
    service = InventoryService(db)
    return await service.update_product(product_id, product_data, current_user)

@router.delete("/products/{product_id}", response_model=ProductResponse)
async def delete_product(
    product_id: int,
    current_user: Usuario = Depends(require_roles(["admin"])),
    db: Session = Depends(get_db)
):
    """Desactivar producto"""
    service = InventoryService(db)
    return await service.delete_product(product_id, current_user)

@router.post("/products/{product_id}/stock", response_model=StockAdjustmentResponse)
async def adjust_stock(
    product_id: int,
    adjustment: StockAdjustment,
    current_user: Usuario = Depends(require_roles(["admin"])),
    db: Session = Depends(get_db)
):
    """Ajuste manual de stock (recepción de mercadería, rotura, conteo)"""
    service = InventoryService(db)
    return await service.adjust_stock(product_id, adjustment, current_user)

# ==================== PUNTO DE VENTA ====================

@router.get("/pos-products", response_model=POSProductsResponse)
async def get_pos_products(
    search: Optional[str] = Query(None),
    categoria: Optional[str] = Query(None),
    incluir_sin_stock: bool = Query(False),
    limit: int = Query(100, ge=1, le=1000),
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Productos para el punto de venta

    Cada producto trae `stock_info.puede_vender`; por defecto se omiten los
    productos sin stock.
    """
    service = InventoryService(db)
    return await service.get_pos_products(search, categoria, incluir_sin_stock, limit)

# ==================== INVENTARIO INTELIGENTE ====================

@router.get("/intelligent", response_model=IntelligentInventoryResponse)
async def get_intelligent_inventory(
    categoria: Optional[str] = Query(None),
    clase_abc: Optional[str] = Query(None, pattern="^[ABCabc]$"),
    estado_stock: Optional[str] = Query(None),
    solo_necesita_pedido: bool = Query(False),
    current_user: Usuario = Depends(require_roles(["admin"])),
    db: Session = Depends(get_db)
):
    """
    Productos enriquecidos: rotación, días de stock, urgencia, clase ABC,
    punto de reorden, cantidad óptima, score y recomendación
    """
    service = InventoryService(db)
    return await service.get_intelligent_inventory(categoria, clase_abc, estado_stock, solo_necesita_pedido)

@router.get("/abc", response_model=ABCAnalysisResponse)
async def get_abc_analysis(
    current_user: Usuario = Depends(require_roles(["admin"])),
    db: Session = Depends(get_db)
):
    service = InventoryService(db)
    return await service.get_abc_analysis()

@router.get("/alerts", response_model=AlertsResponse)
async def get_alerts(
    current_user: Usuario = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    service = InventoryService(db)
    return await service.get_alerts()

@router.get("/order-suggestions", response_model=OrderSuggestionsResponse)
async def get_order_suggestions(
    current_user: Usuario = Depends(require_roles(["admin"])),
    db: Session = Depends(get_db)
):
    """Sugerencias de pedido agrupadas por proveedor"""
    service = InventoryService(db)
    return await service.get_order_suggestions()

@router.get("/predictions", response_model=PredictionsResponse)
async def get_predictions(
    limit: int = Query(50, ge=1, le=500),
    current_user: Usuario = Depends(require_roles(["admin"])),
    db: Session = Depends(get_db)
):
    service = InventoryService(db)
    return await service.get_predictions(limit)
