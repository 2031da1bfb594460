from app.config.settings import settings
from app.shared.database.models import LoginAttempt

LOGIN_URL = "/api/v1/auth/login"


class TestLogin:

    def test_admin_login(self, client, admin):
        response = client.post(LOGIN_URL, json={"username": "ADMIN ", "password": "secreto123"})

        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["user"]["username"] == "admin"
        assert data["user"]["is_admin"] is True

    def test_token_gives_access_to_me(self, client, cajero):
        token = client.post(LOGIN_URL, json={"username": "cajero", "password": "secreto123"}).json()["access_token"]
        response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json()["nombre"] == "Cajero Uno"

    def test_wrong_password(self, client, db, cajero):
        response = client.post(LOGIN_URL, json={"username": "cajero", "password": "incorrecta"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Credenciales inválidas"
        assert db.query(LoginAttempt).count() == 1

    def test_unknown_user(self, client, db):
        response = client.post(LOGIN_URL, json={"username": "nadie", "password": "x"})
        assert response.status_code == 401

    def test_inactive_user(self, client, db, cajero):
        cajero.activo = False
        db.commit()
        response = client.post(LOGIN_URL, json={"username": "cajero", "password": "secreto123"})
        assert response.status_code == 401

    def test_rate_limit_after_repeated_failures(self, client, cajero):
        for _ in range(settings.login_max_attempts):
            assert client.post(LOGIN_URL, json={"username": "cajero", "password": "mala"}).status_code == 401

        response = client.post(LOGIN_URL, json={"username": "cajero", "password": "secreto123"})
        assert response.status_code == 429

    def test_successful_login_clears_failures(self, client, db, cajero):
        client.post(LOGIN_URL, json={"username": "cajero", "password": "mala"})
        client.post(LOGIN_URL, json={"username": "cajero", "password": "secreto123"})

        db.expire_all()
        assert db.query(LoginAttempt).filter(LoginAttempt.username == "cajero").count() == 0


class TestTrustedDeviceLogin:

    def test_cashier_from_unknown_device_is_rejected(self, client, cajero, trusted_devices):
        response = client.post(LOGIN_URL, json={
            "username": "cajero", "password": "secreto123", "device_fingerprint": "fp-desconocido-01"
        })

        assert response.status_code == 403
        detail = response.json()["detail"]
        assert detail["requiere_aprobacion"] is True
        assert detail["mensaje"] == "Dispositivo no registrado"

    def test_cashier_from_approved_device(self, client, cajero, approved_device, trusted_devices):
        response = client.post(LOGIN_URL, json={
            "username": "cajero", "password": "secreto123", "device_fingerprint": "fp-aprobado-0001"
        })
        assert response.status_code == 200

    def test_admin_skips_device_check(self, client, admin, trusted_devices):
        response = client.post(LOGIN_URL, json={"username": "admin", "password": "secreto123"})
        assert response.status_code == 200


class TestProtectedRoutes:

    def test_missing_token(self, client):
        assert client.get("/api/v1/auth/me").status_code == 401

    def test_invalid_token(self, client):
        response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer basura"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Token inválido"

    def test_cashier_cannot_use_admin_routes(self, client, cajero_headers):
        assert client.get("/api/v1/users/", headers=cajero_headers).status_code == 403

    def test_health(self, client):
        assert client.get("/api/v1/health").json()["status"] == "healthy"
