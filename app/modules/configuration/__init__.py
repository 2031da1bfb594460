# app/modules/configuration/__init__.py
"""
Módulo de Configuración

Pares clave/valor del negocio: datos del ticket, meta diaria y descuentos
por método de pago.
"""

from .router import router as configuration_router
from .service import ConfigurationService, load_business_config, discounts_by_method

__all__ = [
    "configuration_router",
    "ConfigurationService",
    "load_business_config",
    "discounts_by_method"
]
