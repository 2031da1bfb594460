# app/modules/devices/__init__.py
"""
Módulo de Dispositivos Confiables

Los cajeros solo pueden operar desde equipos aprobados por un administrador.
Cada navegador se identifica por una huella (fingerprint); un equipo nuevo
queda "pendiente" con un código de activación hasta que el administrador
lo aprueba, rechaza o revoca.
"""

from .router import router as devices_router
from .service import DevicesService

__all__ = [
    "devices_router",
    "DevicesService"
]
