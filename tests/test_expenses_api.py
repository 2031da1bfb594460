from datetime import date

BASE = "/api/v1/expenses"


class TestMonthlyExpenses:

    def test_unconfigured_month_is_zero(self, client, admin_headers):
        data = client.get(BASE + "/", params={"mes_ano": "2025-04"}, headers=admin_headers).json()

        assert data["configurado"] is False
        assert data["gastos_totales"] == 0
        assert data["dias_mes"] == 30

    def test_set_and_update_month(self, client, admin, admin_headers):
        first = client.put(BASE + "/", json={
            "mes_ano": "2025-04", "gastos_totales": 30000, "descripcion": "  Alquiler y luz "
        }, headers=admin_headers)

        assert first.status_code == 200
        assert first.json()["gastos_diarios"] == 1000
        assert first.json()["descripcion"] == "Alquiler y luz"
        assert first.json()["usuario_id"] == admin.id

        client.put(BASE + "/", json={"mes_ano": "2025-04", "gastos_totales": 60000}, headers=admin_headers)

        data = client.get(BASE + "/", params={"mes_ano": "2025-04"}, headers=admin_headers).json()
        assert data["configurado"] is True
        assert data["gastos_totales"] == 60000
        assert data["gastos_diarios"] == 2000

    def test_defaults_to_current_month(self, client, admin_headers):
        data = client.put(BASE + "/", json={"gastos_totales": 1000}, headers=admin_headers).json()
        assert data["mes_ano"] == date.today().strftime("%Y-%m")

    def test_negative_or_invalid_month_rejected(self, client, admin_headers):
        assert client.put(BASE + "/", json={"gastos_totales": -1}, headers=admin_headers).status_code == 422
        response = client.put(BASE + "/", json={"gastos_totales": 100, "mes_ano": "2025-13"}, headers=admin_headers)
        assert response.status_code == 422

    def test_requires_admin(self, client, cajero_headers):
        assert client.get(BASE + "/", headers=cajero_headers).status_code == 403
        assert client.put(BASE + "/", json={"gastos_totales": 100}, headers=cajero_headers).status_code == 403


class TestPeriodExpenses:

    def test_explicit_dates(self, client, admin_headers):
        client.put(BASE + "/", json={"mes_ano": "2025-04", "gastos_totales": 30000}, headers=admin_headers)

        data = client.get(BASE + "/period", params={
            "fecha_desde": "2025-04-01", "fecha_hasta": "2025-04-10"
        }, headers=admin_headers).json()

        assert data["periodo"] is None
        assert data["dias_periodo"] == 10
        assert data["gastos_por_mes"] == {"2025-04": 30000}
        assert data["gastos_periodo"] == 10000

    def test_period_across_months(self, client, admin_headers):
        client.put(BASE + "/", json={"mes_ano": "2025-01", "gastos_totales": 31000}, headers=admin_headers)
        client.put(BASE + "/", json={"mes_ano": "2025-02", "gastos_totales": 28000}, headers=admin_headers)

        data = client.get(BASE + "/period", params={
            "fecha_desde": "2025-01-30", "fecha_hasta": "2025-02-02"
        }, headers=admin_headers).json()

        assert data["gastos_periodo"] == 4000

    def test_today_by_default(self, client, admin_headers):
        data = client.get(BASE + "/period", headers=admin_headers).json()

        assert data["periodo"] == "hoy"
        assert data["dias_periodo"] == 1
        assert data["fecha_desde"] == date.today().isoformat()
        assert data["gastos_periodo"] == 0

    def test_current_month(self, client, admin_headers):
        data = client.get(BASE + "/period", params={"periodo": "mes"}, headers=admin_headers).json()

        assert data["fecha_desde"] == date.today().replace(day=1).isoformat()
        assert data["dias_periodo"] == date.today().day

    def test_invalid_range(self, client, admin_headers):
        response = client.get(BASE + "/period", params={
            "fecha_desde": "2025-04-10", "fecha_hasta": "2025-04-01"
        }, headers=admin_headers)
        assert response.status_code == 400
