# app/modules/reports/__init__.py
"""
Módulo de Reportes

- Reporte financiero: ganancia neta por venta y por producto, márgenes y ROI,
  descontando los gastos fijos del período
- Tablero del día: ventas, meta diaria y cajas abiertas
- Análisis local del negocio: score, problemas y recomendaciones
"""

from .router import router as reports_router
from .service import ReportsService

__all__ = [
    "reports_router",
    "ReportsService"
]
