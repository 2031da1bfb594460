# app/modules/sales/__init__.py
"""
Módulo de Ventas

Funcionalidades:
- Cobro con descuento por método de pago y cálculo de vuelto
- Descuento de stock y vínculo con el turno de caja abierto
- Anulación de ventas con devolución de stock (admin)
- Ticket HTML, exportación CSV y cotización previa al cobro

Arquitectura:
- router.py: Endpoints FastAPI
- service.py: Lógica de negocio
- repository.py: Acceso a datos
- pricing.py: Cálculo de totales, vuelto y billetes sugeridos
- schemas.py: Modelos Pydantic de request/response
"""

from .router import router as sales_router
from .service import SalesService
from .repository import SalesRepository

__all__ = [
    "sales_router",
    "SalesService",
    "SalesRepository"
]
