# app/api/v1/router.py
from fastapi import APIRouter
from app.api.v1.auth import router as auth_router
from app.config.settings import settings

from app.modules.users import users_router
from app.modules.devices import devices_router
from app.modules.configuration import configuration_router
from app.modules.inventory import inventory_router
from app.modules.suppliers import suppliers_router
from app.modules.sales import sales_router
from app.modules.cash import cash_router, pos_router
from app.modules.reports import reports_router
from app.modules.expenses import expenses_router


# Router principal de la API v1
api_router = APIRouter()

# ==================== ACCESO ====================

api_router.include_router(auth_router)
api_router.include_router(users_router)
api_router.include_router(devices_router)

# ==================== OPERACIÓN ====================

api_router.include_router(configuration_router)
api_router.include_router(inventory_router)
api_router.include_router(suppliers_router)
api_router.include_router(sales_router)
api_router.include_router(cash_router)
api_router.include_router(pos_router)
api_router.include_router(reports_router)
api_router.include_router(expenses_router)


# ==================== ENDPOINTS RAÍZ ====================

@api_router.get("/")
async def api_root():
    return {
        "message": f"{settings.app_name} v1",
        "version": settings.version,
        "status": "active",
        "available_endpoints": {
            "authentication": "/api/v1/auth",
            "users": "/api/v1/users",
            "devices": "/api/v1/devices",
            "configuration": "/api/v1/config",
            "inventory": "/api/v1/inventory",
            "suppliers": "/api/v1/suppliers",
            "sales": "/api/v1/sales",
            "cash": "/api/v1/cash",
            "pos": "/api/v1/pos/status",
            "reports": "/api/v1/reports",
            "expenses": "/api/v1/expenses"
        }
    }

@api_router.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.version
    }
