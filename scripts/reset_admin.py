#!/usr/bin/env python3
"""
Crea o resetea el usuario admin

Útil en la primera instalación o cuando se pierde el acceso de administrador.
Uso: reset_admin.py NUEVA_PASSWORD [username]
"""

import sys

from app.config.database import Base, SessionLocal, engine
from app.core.auth.security import hash_password
from app.shared.database.models import Usuario

def reset_admin(password: str, username: str = "admin") -> str:
    # mismo criterio que el alta de usuarios y el login
    username = username.strip().lower()
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        user = db.query(Usuario).filter(Usuario.username == username).first()
        if user:
            user.password_hash = hash_password(password)
            user.role = "admin"
            user.activo = True
            mensaje = "Admin actualizado"
        else:
            db.add(Usuario(
                username=username,
                password_hash=hash_password(password),
                nombre="Administrador",
                role="admin",
                activo=True
            ))
            mensaje = "Admin creado"
        db.commit()
        return mensaje
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

if __name__ == "__main__":
    if len(sys.argv) < 2 or len(sys.argv[1]) < 6:
        print("Uso: reset_admin.py NUEVA_PASSWORD [username]  (mínimo 6 caracteres)")
        sys.exit(1)

    username = (sys.argv[2] if len(sys.argv) > 2 else "admin").strip().lower()
    print(f"✅ {reset_admin(sys.argv[1], username)}: {username}")
    print("Cámbiala desde el módulo de Usuarios después de entrar")
