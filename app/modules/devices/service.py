# app/modules/devices/service.py
import logging
import secrets
from datetime import datetime
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.shared.database.models import DispositivoConfiable, Usuario
from .repository import DevicesRepository
from .schemas import (
    AccessRequestResponse, DeviceAccessResponse, DeviceListResponse,
    DeviceResponse, DeviceStatus, DeviceStatusCounts
)

logger = logging.getLogger(__name__)

# Sin caracteres ambiguos (I, O, 0, 1)
CODE_LETTERS = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_DIGITS = "0123456789"


def generate_activation_code() -> str:
    """Código legible para dictar por teléfono: AB-1234-CD-5678"""
    def pick(alphabet: str, size: int) -> str:
        return "".join(secrets.choice(alphabet) for _ in range(size))

    return f"{pick(CODE_LETTERS, 2)}-{pick(CODE_DIGITS, 4)}-{pick(CODE_LETTERS, 2)}-{pick(CODE_DIGITS, 4)}"


class DevicesService:
    """
    Flujo de aprobación de dispositivos: un cajero que ingresa desde un equipo
    nuevo genera una solicitud con código de activación, y un administrador
    la aprueba, rechaza o revoca más tarde.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repository = DevicesRepository(db)

    async def request_access(
        self,
        fingerprint: str,
        username: Optional[str],
        ip: Optional[str],
        user_agent: Optional[str]
    ) -> AccessRequestResponse:
        existing = self.repository.get_by_fingerprint(fingerprint)
        if existing:
            return AccessRequestResponse(
                dispositivo_existe=True,
                codigo_activacion=existing.codigo_activacion,
                dispositivo=DeviceResponse.model_validate(existing)
            )

        codigo = generate_activation_code()
        while self.repository.code_exists(codigo):
            codigo = generate_activation_code()

        try:
            self.repository.create(
                device_fingerprint=fingerprint,
                codigo_activacion=codigo,
                usuario_solicito=username,
                ip_primer_uso=ip,
                user_agent=user_agent,
                estado=DeviceStatus.pendiente.value,
                fecha_solicitud=datetime.now()
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.exception("Error registrando solicitud de dispositivo")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error registrando la solicitud del dispositivo"
            )

        logger.info(f"Nueva solicitud de dispositivo {codigo} para usuario {username}")
        return AccessRequestResponse(
            dispositivo_existe=False,
            codigo_activacion=codigo,
            mensaje="Solicitud creada. Espera a que un administrador apruebe este dispositivo."
        )

    async def check_access(self, fingerprint: Optional[str], user: Optional[Usuario]) -> DeviceAccessResponse:
        """
        Decide si el dispositivo puede usarse. Los administradores ingresan
        desde cualquier equipo.
        """
        if user is not None and user.is_admin:
            return DeviceAccessResponse(
                acceso_concedido=True,
                motivo="Administrador - acceso desde cualquier dispositivo",
                requiere_aprobacion=False
            )

        device = self.repository.get_by_fingerprint(fingerprint) if fingerprint else None
        if not device:
            return DeviceAccessResponse(
                acceso_concedido=False,
                motivo="Dispositivo no registrado",
                requiere_aprobacion=True
            )

        if device.estado == DeviceStatus.aprobado.value:
            self.repository.touch(device)
            self.db.commit()
            return DeviceAccessResponse(
                acceso_concedido=True,
                motivo="Dispositivo autorizado",
                requiere_aprobacion=False,
                estado=DeviceStatus.aprobado
            )

        if device.estado == DeviceStatus.pendiente.value:
            return DeviceAccessResponse(
                acceso_concedido=False,
                motivo="Esperando aprobación del administrador",
                requiere_aprobacion=False,
                estado=DeviceStatus.pendiente,
                codigo_activacion=device.codigo_activacion
            )

        return DeviceAccessResponse(
            acceso_concedido=False,
            motivo="Dispositivo bloqueado por el administrador",
            requiere_aprobacion=False,
            estado=DeviceStatus(device.estado)
        )

    async def list_devices(self, estado: Optional[DeviceStatus] = None) -> DeviceListResponse:
        devices = self.repository.list_devices(estado.value if estado else None)
        counts = {s: 0 for s in DeviceStatus}
        for device in devices:
            counts[DeviceStatus(device.estado)] += 1

        return DeviceListResponse(
            dispositivos=[DeviceResponse.model_validate(d) for d in devices],
            total=len(devices),
            por_estado=DeviceStatusCounts(
                pendientes=counts[DeviceStatus.pendiente],
                aprobados=counts[DeviceStatus.aprobado],
                rechazados=counts[DeviceStatus.rechazado],
                revocados=counts[DeviceStatus.revocado]
            )
        )

    async def approve(self, codigo: str, nombre_dispositivo: str, admin: Usuario) -> DeviceResponse:
        device = self._get_by_code_or_404(codigo)
        if device.estado == DeviceStatus.revocado.value:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="El dispositivo fue revocado y no puede aprobarse nuevamente"
            )

        device.estado = DeviceStatus.aprobado.value
        device.usuario_aprobo = admin.username
        device.nombre_dispositivo = nombre_dispositivo
        device.fecha_aprobacion = datetime.now()
        self.db.commit()
        self.db.refresh(device)

        logger.info(f"Dispositivo {codigo} aprobado por {admin.username}")
        return DeviceResponse.model_validate(device)

    async def reject(self, codigo: str, admin: Usuario) -> DeviceResponse:
        device = self._get_by_code_or_404(codigo)
        device.estado = DeviceStatus.rechazado.value
        self.db.commit()
        self.db.refresh(device)

        logger.info(f"Dispositivo {codigo} rechazado por {admin.username}")
        return DeviceResponse.model_validate(device)

    async def revoke(self, device_id: int, admin: Usuario) -> DeviceResponse:
        device = self.repository.get_by_id(device_id)
        if not device:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Dispositivo no encontrado")

        device.estado = DeviceStatus.revocado.value
        self.db.commit()
        self.db.refresh(device)

        logger.info(f"Acceso revocado al dispositivo {device_id} por {admin.username}")
        return DeviceResponse.model_validate(device)

    async def register_activity(self, fingerprint: str) -> bool:
        device = self.repository.get_by_fingerprint(fingerprint)
        if not device:
            return False
        self.repository.touch(device)
        self.db.commit()
        return True

    def _get_by_code_or_404(self, codigo: str) -> DispositivoConfiable:
        device = self.repository.get_by_code(codigo.strip().upper())
        if not device:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Código de activación no encontrado"
            )
        return device
