# app/modules/configuration/service.py
import logging
from typing import Any, Dict

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.shared.database.models import Usuario
from .repository import ConfigurationRepository
from .schemas import ConfigResponse, DiscountsResponse, PaymentMethod

logger = logging.getLogger(__name__)

# clave -> (valor por defecto, descripción)
DEFAULT_CONFIG: Dict[str, tuple] = {
    "nombre_negocio": ("Tayrona Almacén", "Nombre del negocio mostrado en tickets y reportes"),
    "direccion_negocio": ("", "Dirección mostrada en tickets"),
    "telefono_negocio": ("", "Teléfono de contacto"),
    "cuit": ("", "CUIT del negocio"),
    "mensaje_pie_ticket": ("¡Gracias por su compra!", "Mensaje al pie de los tickets"),
    "meta_diaria": (100000, "Meta de ventas diaria"),
    "descuento_efectivo": (10, "Descuento aplicado al pago en efectivo (%)"),
    "descuento_transferencia": (10, "Descuento aplicado al pago por transferencia (%)"),
    "descuento_tarjeta": (0, "Descuento aplicado al pago con tarjeta (%)"),
    "descuento_mercadopago": (0, "Descuento aplicado al pago con MercadoPago (%)"),
    "descuento_qr": (0, "Descuento aplicado al pago con QR (%)"),
    "descuento_otros": (0, "Descuento aplicado a otros métodos de pago (%)"),
}

NUMERIC_KEYS = {k for k, (v, _) in DEFAULT_CONFIG.items() if isinstance(v, (int, float))}


def _coerce(clave: str, valor: str) -> Any:
    if clave not in NUMERIC_KEYS:
        return valor
    try:
        number = float(valor)
    except (TypeError, ValueError):
        return DEFAULT_CONFIG[clave][0]
    return int(number) if number.is_integer() else number


def load_business_config(db: Session) -> Dict[str, Any]:
    """Configuración guardada combinada con los valores por defecto"""
    stored = ConfigurationRepository(db).get_all()
    config = {clave: default for clave, (default, _) in DEFAULT_CONFIG.items()}
    for clave, valor in stored.items():
        config[clave] = _coerce(clave, valor)
    return config


def discounts_by_method(config: Dict[str, Any]) -> Dict[str, float]:
    return {
        method.value: float(config.get(f"descuento_{method.value}", 0) or 0)
        for method in PaymentMethod
    }


class ConfigurationService:

    def __init__(self, db: Session):
        self.db = db
        self.repository = ConfigurationRepository(db)

    async def get_config(self) -> ConfigResponse:
        return ConfigResponse(configuracion=load_business_config(self.db))

    async def get_discounts(self) -> DiscountsResponse:
        return DiscountsResponse(descuentos=discounts_by_method(load_business_config(self.db)))

    async def update_config(self, valores: Dict[str, Any], admin: Usuario) -> ConfigResponse:
        if not valores:
            raise HTTPException(status_code=400, detail="No hay valores para actualizar")

        normalized = {clave: self._validate(clave, valor) for clave, valor in valores.items()}

        try:
            for clave, valor in normalized.items():
                descripcion = DEFAULT_CONFIG.get(clave, (None, None))[1]
                self.repository.upsert(clave, valor, descripcion)
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.exception("Error guardando configuración")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error guardando configuración"
            )

        logger.info(f"Configuración actualizada por {admin.username}: {sorted(normalized)}")
        return ConfigResponse(configuracion=load_business_config(self.db))

    def _validate(self, clave: str, valor: Any) -> str:
        if clave.startswith("descuento_") or clave == "meta_diaria":
            try:
                number = float(valor)
            except (TypeError, ValueError):
                raise HTTPException(status_code=400, detail=f"'{clave}' debe ser numérico")

            if clave.startswith("descuento_") and not 0 <= number <= 100:
                raise HTTPException(status_code=400, detail=f"'{clave}' debe estar entre 0 y 100")
            if clave == "meta_diaria" and number <= 0:
                raise HTTPException(status_code=400, detail="La meta diaria debe ser mayor a 0")

            return str(int(number)) if number.is_integer() else str(number)

        if valor is None:
            raise HTTPException(status_code=400, detail=f"'{clave}' no puede ser nulo")
        return str(valor).strip()
