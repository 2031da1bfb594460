# app/modules/expenses/__init__.py
"""
Módulo de Gastos Fijos

- Gastos mensuales del negocio (alquiler, servicios, sueldos)
- Prorrateo diario que el reporte financiero descuenta de la ganancia
"""

from .router import router as expenses_router
from .service import ExpensesService

__all__ = [
    "expenses_router",
    "ExpensesService"
]
