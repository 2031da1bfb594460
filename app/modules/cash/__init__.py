# app/modules/cash/__init__.py
"""
Módulo de Caja

Funcionalidades:
- Apertura de turno con verificación del efectivo del último cierre
- Ingresos y egresos manuales de efectivo
- Cierre con arqueo (efectivo teórico vs contado) y cierre de emergencia
- Historial de aperturas/cierres con balance acumulado y análisis del período
- Estado de caja para el punto de venta
"""

from .router import router as cash_router, pos_router
from .service import CashService

__all__ = [
    "cash_router",
    "pos_router",
    "CashService"
]
