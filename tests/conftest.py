"""
Fixtures compartidas: base SQLite en memoria por test, usuarios y headers.

Las variables de entorno se fijan antes de importar la app para que
``Settings`` no lea una base real.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")
os.environ.setdefault("SECRET_KEY", "clave-de-tests")
os.environ.setdefault("REQUIRE_TRUSTED_DEVICE", "false")
os.environ.setdefault("REQUIRE_OPEN_SHIFT_FOR_SALES", "true")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.config.database import Base, get_db
from app.config.settings import settings
from app.core.auth.security import create_access_token, hash_password
from app.main import app
from app.shared.database.models import DispositivoConfiable, Producto, Usuario


# ===== BASE DE DATOS =====

@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    def override_get_db():
        request_session = TestingSessionLocal()
        try:
            yield request_session
        finally:
            request_session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield session
    session.close()
    app.dependency_overrides.clear()


@pytest.fixture
def client(db):
    return TestClient(app)


# ===== USUARIOS =====

def make_user(db, username, role="cajero", nombre=None, password="secreto123"):
    user = Usuario(
        username=username,
        password_hash=hash_password(password),
        nombre=nombre or username.title(),
        role=role,
        activo=True
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def headers_for(user):
    token = create_access_token({"sub": str(user.id), "username": user.username, "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin(db):
    return make_user(db, "admin", role="admin", nombre="Administrador")


@pytest.fixture
def cajero(db):
    return make_user(db, "cajero", nombre="Cajero Uno")


@pytest.fixture
def admin_headers(admin):
    return headers_for(admin)


@pytest.fixture
def cajero_headers(cajero):
    return headers_for(cajero)


@pytest.fixture
def otro_cajero_headers(db):
    return headers_for(make_user(db, "otro", nombre="Otro Cajero"))


@pytest.fixture
def trusted_devices(monkeypatch):
    monkeypatch.setattr(settings, "require_trusted_device", True)


@pytest.fixture
def approved_device(db):
    device = DispositivoConfiable(
        device_fingerprint="fp-aprobado-0001",
        codigo_activacion="AB-1234-CD-5678",
        nombre_dispositivo="Caja principal",
        usuario_solicito="cajero",
        usuario_aprobo="admin",
        estado="aprobado"
    )
    db.add(device)
    db.commit()
    return device


# ===== PRODUCTOS =====

def make_product(db, codigo, precio_venta, precio_costo=0, stock=50, **extra):
    product = Producto(
        codigo=codigo,
        nombre=extra.pop("nombre", f"Producto {codigo}"),
        categoria=extra.pop("categoria", "almacen"),
        precio_venta=Decimal(str(precio_venta)),
        precio_costo=Decimal(str(precio_costo)),
        stock=stock,
        stock_minimo=extra.pop("stock_minimo", 10),
        activo=True,
        **extra
    )
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


@pytest.fixture
def products(db):
    return {
        "yerba": make_product(db, "YER-1", 2000, 1400, stock=40, nombre="Yerba 1kg", proveedor="Distribuidora Norte"),
        "gaseosa": make_product(db, "GAS-1", 1500, 900, stock=5, nombre="Gaseosa 2L", categoria="bebidas"),
        "cigarrillos": make_product(
            db, "CIG-1", 3000, 2700, stock=20, nombre="Cigarrillos", aplica_descuento_forma_pago=False
        ),
    }


@pytest.fixture
def open_shift(client, cajero_headers):
    response = client.post("/api/v1/cash/open", json={"monto_apertura": 10000}, headers=cajero_headers)
    assert response.status_code == 201, response.text
    return response.json()["turno"]
