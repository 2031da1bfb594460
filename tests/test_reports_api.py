import calendar
from datetime import date, timedelta

from conftest import make_product

BASE = "/api/v1/reports"


# ===== FIXTURES =====

def sell(client, headers, items, metodo_pago="efectivo"):
    response = client.post("/api/v1/sales/", json={
        "items": [{"producto_id": p.id, "cantidad": c} for p, c in items],
        "metodo_pago": metodo_pago
    }, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def day_of_sales(client, headers, products):
    """Venta en efectivo de 6600 (costo 5500) y venta con tarjeta de 1500 (costo 900)"""
    sell(client, headers, [(products["yerba"], 2), (products["cigarrillos"], 1)])
    sell(client, headers, [(products["gaseosa"], 1)], metodo_pago="tarjeta")


class TestFinancialReport:

    def test_profit_summary(self, client, admin_headers, cajero_headers, products, open_shift):
        day_of_sales(client, cajero_headers, products)

        data = client.get(BASE + "/financial", headers=admin_headers).json()

        resumen = data["resumen"]
        assert resumen["total_ventas"] == 2
        assert resumen["total_ingresos_brutos"] == 8500
        assert resumen["total_descuentos"] == 400
        assert resumen["total_ingresos_netos"] == 8100
        assert resumen["total_costos"] == 6400
        assert resumen["ganancia_neta"] == 1700
        assert resumen["estado_negocio"] == "RENTABLE"
        assert resumen["diferencias_detectadas"] == 0
        assert [p["nombre"] for p in data["productos"]] == ["Yerba 1kg", "Gaseosa 2L", "Cigarrillos"]
        assert data["metodos_pago"]["efectivo"]["total"] == 6600
        assert data["metodos_pago"]["tarjeta"]["cantidad"] == 1
        assert data["ventas"] is None
        assert data["periodo"]["dias"] == 30

    def test_include_sales_detail(self, client, admin_headers, cajero_headers, products, open_shift):
        day_of_sales(client, cajero_headers, products)

        ventas = client.get(BASE + "/financial", params={"incluir_ventas": True}, headers=admin_headers).json()["ventas"]

        assert len(ventas) == 2
        assert all(v["coherencia_ok"] for v in ventas)
        assert ventas[0]["ganancia_neta"] == 1100

    def test_cancelled_sales_excluded(self, client, admin_headers, cajero_headers, products, open_shift):
        sale = sell(client, cajero_headers, [(products["yerba"], 1)])
        client.post(f"/api/v1/sales/{sale['id']}/cancel", json={"motivo": "Error"}, headers=admin_headers)

        resumen = client.get(BASE + "/financial", headers=admin_headers).json()["resumen"]
        assert resumen["total_ventas"] == 0
        assert resumen["estado_negocio"] == "PUNTO DE EQUILIBRIO"

    def test_fixed_costs_prorated_for_the_day(self, client, admin_headers, cajero_headers, products, open_shift):
        day_of_sales(client, cajero_headers, products)
        hoy = date.today()
        dias_mes = calendar.monthrange(hoy.year, hoy.month)[1]
        client.put("/api/v1/expenses/", json={"gastos_totales": dias_mes * 1000}, headers=admin_headers)

        params = {"fecha_desde": hoy.isoformat(), "fecha_hasta": hoy.isoformat()}
        resumen = client.get(BASE + "/financial", params=params, headers=admin_headers).json()["resumen"]

        assert resumen["ganancia_operativa"] == 1700
        assert resumen["gastos_fijos_periodo"] == 1000
        assert resumen["ganancia_neta"] == 700
        assert resumen["estado_negocio"] == "RENTABLE"

    def test_fixed_costs_can_turn_profit_into_loss(self, client, admin_headers, cajero_headers, products, open_shift):
        day_of_sales(client, cajero_headers, products)
        hoy = date.today()
        dias_mes = calendar.monthrange(hoy.year, hoy.month)[1]
        client.put("/api/v1/expenses/", json={"gastos_totales": dias_mes * 2000}, headers=admin_headers)

        params = {"fecha_desde": hoy.isoformat(), "fecha_hasta": hoy.isoformat()}
        resumen = client.get(BASE + "/financial", params=params, headers=admin_headers).json()["resumen"]

        assert resumen["ganancia_neta"] == -300
        assert resumen["estado_negocio"] == "EN PÉRDIDAS"

    def test_invalid_period(self, client, admin_headers):
        hoy = date.today()
        response = client.get(BASE + "/financial", params={
            "fecha_desde": hoy.isoformat(), "fecha_hasta": (hoy - timedelta(days=1)).isoformat()
        }, headers=admin_headers)
        assert response.status_code == 400

    def test_requires_admin(self, client, cajero_headers):
        assert client.get(BASE + "/financial", headers=cajero_headers).status_code == 403


class TestDashboard:

    def test_today(self, client, admin_headers, cajero_headers, products, open_shift):
        day_of_sales(client, cajero_headers, products)

        data = client.get(BASE + "/dashboard", headers=admin_headers).json()

        assert data["total_ventas"] == 8100
        assert data["cantidad_ventas"] == 2
        assert data["ticket_promedio"] == 4050
        assert data["ventas_por_metodo"]["efectivo"]["total"] == 6600
        assert data["meta"]["meta"] == 100000
        assert data["meta"]["porcentaje"] == 8.1
        assert data["meta"]["faltante"] == 91900
        assert data["meta"]["cumplida"] is False
        assert len(data["turnos_abiertos"]) == 1
        assert data["turnos_abiertos"][0]["cajero"] == "Cajero Uno"
        assert data["efectivo_en_caja"] == 16600
        assert data["alertas_stock"] == 1

    def test_empty_day(self, client, admin_headers):
        data = client.get(BASE + "/dashboard", headers=admin_headers).json()

        assert data["total_ventas"] == 0
        assert data["ticket_promedio"] == 0
        assert data["turnos_abiertos"] == []


class TestBusinessAnalysis:

    def test_profitable_business(self, client, admin_headers, cajero_headers, products, open_shift):
        day_of_sales(client, cajero_headers, products)

        data = client.get(BASE + "/analysis", headers=admin_headers).json()

        assert data["score"] == 100
        assert data["estado"] == "Excelente"
        assert data["problemas"] == []
        assert data["oportunidades"][0]["productos"] == ["Gaseosa 2L"]
        assert [r["prioridad"] for r in data["recomendaciones"]] == ["alta", "media"]

    def test_losing_business(self, client, db, admin_headers, cajero_headers, open_shift):
        remate = make_product(db, "REM-1", 1000, 1500, stock=10, nombre="Remate")
        sell(client, cajero_headers, [(remate, 1)], metodo_pago="tarjeta")

        data = client.get(BASE + "/analysis", headers=admin_headers).json()

        assert data["score"] == 0
        assert data["estado"] == "Crítico"
        assert [p["tipo"] for p in data["problemas"]] == ["crítico", "urgente"]
        assert data["recomendaciones"][0]["prioridad"] == "urgente"
        assert data["resumen"]["estado_negocio"] == "EN PÉRDIDAS"
