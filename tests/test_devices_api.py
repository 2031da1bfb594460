from app.shared.database.models import DispositivoConfiable

BASE = "/api/v1/devices"


def request_code(client, fingerprint="fp-nueva-caja-01", username="cajero"):
    response = client.post(f"{BASE}/request-access", json={"device_fingerprint": fingerprint, "username": username})
    assert response.status_code == 200
    return response.json()


class TestAccessRequest:

    def test_new_device_gets_activation_code(self, client):
        data = request_code(client)

        assert data["dispositivo_existe"] is False
        codigo = data["codigo_activacion"]
        letras, digitos, letras2, digitos2 = codigo.split("-")
        assert len(letras) == 2 and letras.isalpha()
        assert len(digitos) == 4 and digitos.isdigit()
        assert len(letras2) == 2 and len(digitos2) == 4

    def test_repeated_request_returns_existing_code(self, client):
        first = request_code(client)
        second = request_code(client)

        assert second["dispositivo_existe"] is True
        assert second["codigo_activacion"] == first["codigo_activacion"]
        assert second["dispositivo"]["estado"] == "pendiente"

    def test_verify_pending_device(self, client, cajero):
        codigo = request_code(client)["codigo_activacion"]
        data = client.get(f"{BASE}/verify", params={"fingerprint": "fp-nueva-caja-01", "username": "cajero"}).json()

        assert data["acceso_concedido"] is False
        assert data["estado"] == "pendiente"
        assert data["codigo_activacion"] == codigo

    def test_verify_admin_any_device(self, client, admin):
        data = client.get(f"{BASE}/verify", params={"fingerprint": "cualquiera", "username": "admin"}).json()
        assert data["acceso_concedido"] is True


class TestApprovalFlow:

    def test_approve_then_login(self, client, cajero, admin_headers, trusted_devices):
        codigo = request_code(client)["codigo_activacion"]

        response = client.post(
            f"{BASE}/approve",
            json={"codigo_activacion": codigo.lower(), "nombre_dispositivo": "Caja 2"},
            headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["estado"] == "aprobado"
        assert response.json()["usuario_aprobo"] == "admin"

        login = client.post("/api/v1/auth/login", json={
            "username": "cajero", "password": "secreto123", "device_fingerprint": "fp-nueva-caja-01"
        })
        assert login.status_code == 200

    def test_reject(self, client, cajero, admin_headers):
        codigo = request_code(client)["codigo_activacion"]
        response = client.post(f"{BASE}/{codigo}/reject", headers=admin_headers)

        assert response.json()["estado"] == "rechazado"
        verify = client.get(f"{BASE}/verify", params={"fingerprint": "fp-nueva-caja-01", "username": "cajero"}).json()
        assert verify["motivo"] == "Dispositivo bloqueado por el administrador"

    def test_revoke(self, client, approved_device, admin_headers):
        response = client.post(f"{BASE}/{approved_device.id}/revoke", headers=admin_headers)
        assert response.json()["estado"] == "revocado"

    def test_unknown_code(self, client, admin_headers):
        response = client.post(f"{BASE}/approve", json={"codigo_activacion": "ZZ-0000-ZZ-0000"}, headers=admin_headers)
        assert response.status_code == 404

    def test_revoked_device_cannot_be_approved_again(self, client, approved_device, admin_headers):
        client.post(f"{BASE}/{approved_device.id}/revoke", headers=admin_headers)

        response = client.post(f"{BASE}/approve", json={"codigo_activacion": "AB-1234-CD-5678"}, headers=admin_headers)

        assert response.status_code == 409
        devices = client.get(BASE + "/", headers=admin_headers).json()
        assert devices["dispositivos"][0]["estado"] == "revocado"

    def test_list_with_counts(self, client, approved_device, admin_headers):
        request_code(client)
        data = client.get(f"{BASE}/", headers=admin_headers).json()

        assert data["total"] == 2
        assert data["por_estado"]["aprobados"] == 1
        assert data["por_estado"]["pendientes"] == 1

    def test_only_admin_manages_devices(self, client, cajero_headers):
        assert client.get(f"{BASE}/", headers=cajero_headers).status_code == 403


class TestActivity:

    def test_registers_activity(self, client, db, approved_device):
        assert client.post(f"{BASE}/activity", params={"fingerprint": "fp-aprobado-0001"}).json()["actualizado"] is True

        db.expire_all()
        device = db.query(DispositivoConfiable).filter_by(device_fingerprint="fp-aprobado-0001").one()
        assert device.ultima_actividad is not None

    def test_unknown_device(self, client):
        assert client.post(f"{BASE}/activity", params={"fingerprint": "nada"}).json()["actualizado"] is False
