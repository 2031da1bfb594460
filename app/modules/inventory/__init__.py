# app/modules/inventory/__init__.py
"""
Módulo de Inventario

Funcionalidades:
- CRUD de productos y ajustes de stock
- Búsqueda de productos para el punto de venta
- Inventario inteligente: clasificación ABC, urgencia, punto de reorden,
  alertas, sugerencias de pedido y predicciones de demanda
"""

from .router import router as inventory_router
from .service import InventoryService

__all__ = [
    "inventory_router",
    "InventoryService"
]
