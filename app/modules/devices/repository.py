# app/modules/devices/repository.py
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session

from app.shared.database.models import DispositivoConfiable

class DevicesRepository:
    """
    Acceso a datos de dispositivos confiables
    """

    def __init__(self, db: Session):
        self.db = db

    def get_by_fingerprint(self, fingerprint: str) -> Optional[DispositivoConfiable]:
        return self.db.query(DispositivoConfiable).filter(
            DispositivoConfiable.device_fingerprint == fingerprint
        ).first()

    def get_by_code(self, codigo: str) -> Optional[DispositivoConfiable]:
        return self.db.query(DispositivoConfiable).filter(
            DispositivoConfiable.codigo_activacion == codigo
        ).first()

    def get_by_id(self, device_id: int) -> Optional[DispositivoConfiable]:
        return self.db.query(DispositivoConfiable).filter(
            DispositivoConfiable.id == device_id
        ).first()

    def code_exists(self, codigo: str) -> bool:
        return self.get_by_code(codigo) is not None

    def list_devices(self, estado: Optional[str] = None) -> List[DispositivoConfiable]:
        query = self.db.query(DispositivoConfiable)
        if estado:
            query = query.filter(DispositivoConfiable.estado == estado)
        return query.order_by(DispositivoConfiable.fecha_solicitud.desc(), DispositivoConfiable.id.desc()).all()

    def create(self, **data) -> DispositivoConfiable:
        device = DispositivoConfiable(**data)
        self.db.add(device)
        self.db.flush()
        return device

    def touch(self, device: DispositivoConfiable) -> None:
        device.ultima_actividad = datetime.now()
