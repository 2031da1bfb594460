BASE = "/api/v1/config"


class TestConfiguration:

    def test_defaults(self, client, cajero_headers):
        config = client.get(BASE + "/", headers=cajero_headers).json()["configuracion"]

        assert config["nombre_negocio"] == "Tayrona Almacén"
        assert config["descuento_efectivo"] == 10
        assert config["meta_diaria"] == 100000

    def test_discounts_per_method(self, client, cajero_headers):
        descuentos = client.get(BASE + "/discounts", headers=cajero_headers).json()["descuentos"]

        assert descuentos["efectivo"] == 10
        assert descuentos["transferencia"] == 10
        assert descuentos["tarjeta"] == 0
        assert set(descuentos) == {"efectivo", "transferencia", "tarjeta", "mercadopago", "qr", "otros"}

    def test_update(self, client, admin_headers):
        response = client.put(BASE + "/", json={"valores": {"descuento_tarjeta": 5, "nombre_negocio": "Tayrona"}},
                              headers=admin_headers)

        assert response.status_code == 200
        config = response.json()["configuracion"]
        assert config["descuento_tarjeta"] == 5
        assert config["nombre_negocio"] == "Tayrona"

    def test_update_requires_admin(self, client, cajero_headers):
        response = client.put(BASE + "/", json={"valores": {"descuento_tarjeta": 5}}, headers=cajero_headers)
        assert response.status_code == 403

    def test_rejects_invalid_discount(self, client, admin_headers):
        response = client.put(BASE + "/", json={"valores": {"descuento_efectivo": 150}}, headers=admin_headers)
        assert response.status_code == 400

    def test_rejects_non_positive_goal(self, client, admin_headers):
        response = client.put(BASE + "/", json={"valores": {"meta_diaria": 0}}, headers=admin_headers)
        assert response.status_code == 400

    def test_rejects_empty_update(self, client, admin_headers):
        assert client.put(BASE + "/", json={"valores": {}}, headers=admin_headers).status_code == 400
