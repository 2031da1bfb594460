# app/modules/suppliers/__init__.py
"""
Módulo de Proveedores

- Alta, edición y baja lógica de proveedores
- Productos asignados a cada proveedor
"""

from .router import router as suppliers_router
from .service import SuppliersService

__all__ = [
    "suppliers_router",
    "SuppliersService"
]
