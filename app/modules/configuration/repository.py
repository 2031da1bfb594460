# app/modules/configuration/repository.py
from typing import Dict, Optional
from sqlalchemy.orm import Session

from app.shared.database.models import Configuracion

class ConfigurationRepository:

    def __init__(self, db: Session):
        self.db = db

    def get_all(self) -> Dict[str, str]:
        return {row.clave: row.valor for row in self.db.query(Configuracion).all()}

    def upsert(self, clave: str, valor: str, descripcion: Optional[str] = None) -> Configuracion:
        row = self.db.query(Configuracion).filter(Configuracion.clave == clave).first()
        if row:
            row.valor = valor
        else:
            row = Configuracion(clave=clave, valor=valor, descripcion=descripcion)
            self.db.add(row)
        return row
