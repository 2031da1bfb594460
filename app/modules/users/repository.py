# app/modules/users/repository.py
from typing import List, Optional
from sqlalchemy.orm import Session

from app.shared.database.models import Usuario

class UsersRepository:
    """
    Repositorio para operaciones de datos de usuarios
    """

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: int) -> Optional[Usuario]:
        return self.db.query(Usuario).filter(Usuario.id == user_id).first()

    def get_by_username(self, username: str) -> Optional[Usuario]:
        return self.db.query(Usuario).filter(
            Usuario.username == username.strip().lower()
        ).first()

    def list_users(self, role: Optional[str] = None, activo: Optional[bool] = None) -> List[Usuario]:
        query = self.db.query(Usuario)
        if role:
            query = query.filter(Usuario.role == role)
        if activo is not None:
            query = query.filter(Usuario.activo == activo)
        return query.order_by(Usuario.nombre).all()

    def create(self, **data) -> Usuario:
        user = Usuario(**data)
        self.db.add(user)
        self.db.flush()
        return user
