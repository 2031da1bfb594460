import csv
import io

BASE = "/api/v1/sales"


# ===== FIXTURES =====

def checkout(client, headers, items, **extra):
    payload = {"items": [{"producto_id": p.id, "cantidad": c} for p, c in items]}
    payload.update(extra)
    return client.post(BASE + "/", json=payload, headers=headers)


class TestCheckout:

    def test_cash_sale_with_discount_and_change(self, client, cajero_headers, products, open_shift):
        response = checkout(
            client, cajero_headers,
            [(products["yerba"], 2), (products["cigarrillos"], 1)],
            metodo_pago="efectivo", monto_recibido=10000
        )

        assert response.status_code == 201, response.text
        sale = response.json()
        # el 10% solo se aplica a la yerba; los cigarrillos no tienen descuento
        assert sale["subtotal"] == 7000
        assert sale["descuento"] == 400
        assert sale["monto_total"] == 6600
        assert sale["vuelto"] == 3400
        assert sale["estado"] == "completada"
        assert sale["turno_id"] == open_shift["id"]
        assert sale["numero_comprobante"].startswith("V")
        assert len(sale["numero_comprobante"]) == 18
        assert [d["costo_unitario"] for d in sale["detalles"]] == [1400, 2700]

    def test_card_sale_has_no_discount(self, client, cajero_headers, products, open_shift):
        sale = checkout(client, cajero_headers, [(products["yerba"], 1)], metodo_pago="tarjeta").json()

        assert sale["descuento"] == 0
        assert sale["monto_total"] == 2000
        assert sale["monto_recibido"] is None

    def test_cash_received_defaults_to_total(self, client, cajero_headers, products, open_shift):
        sale = checkout(client, cajero_headers, [(products["gaseosa"], 1)]).json()

        assert sale["monto_recibido"] == 1350
        assert sale["vuelto"] == 0

    def test_insufficient_cash(self, client, cajero_headers, products, open_shift):
        response = checkout(client, cajero_headers, [(products["yerba"], 1)], monto_recibido=1000)
        assert response.status_code == 400

    def test_requires_open_shift(self, client, cajero_headers, products):
        response = checkout(client, cajero_headers, [(products["yerba"], 1)])

        assert response.status_code == 409
        assert "turno activo" in response.json()["detail"]

    def test_insufficient_stock(self, client, cajero_headers, products, open_shift):
        response = checkout(client, cajero_headers, [(products["gaseosa"], 6)])

        assert response.status_code == 400
        assert "Stock insuficiente" in response.json()["detail"]

    def test_unknown_product(self, client, cajero_headers, products, open_shift):
        response = client.post(BASE + "/", json={"items": [{"producto_id": 999, "cantidad": 1}]},
                               headers=cajero_headers)
        assert response.status_code == 400

    def test_repeated_products_rejected(self, client, cajero_headers, products, open_shift):
        yerba = products["yerba"]
        response = client.post(BASE + "/", json={"items": [
            {"producto_id": yerba.id, "cantidad": 1}, {"producto_id": yerba.id, "cantidad": 2}
        ]}, headers=cajero_headers)
        assert response.status_code == 422

    def test_stock_is_decremented(self, client, cajero_headers, products, open_shift):
        checkout(client, cajero_headers, [(products["gaseosa"], 3)])

        product = client.get(f"/api/v1/inventory/products/{products['gaseosa'].id}", headers=cajero_headers).json()
        assert product["stock"] == 2


class TestSalesQueries:

    def test_list_totals(self, client, cajero_headers, products, open_shift):
        checkout(client, cajero_headers, [(products["yerba"], 1)], metodo_pago="tarjeta")
        checkout(client, cajero_headers, [(products["gaseosa"], 1)], metodo_pago="tarjeta")

        data = client.get(BASE + "/", headers=cajero_headers).json()
        assert data["total"] == 2
        assert data["monto_total"] == 3500

        filtered = client.get(BASE + "/", params={"metodo_pago": "efectivo"}, headers=cajero_headers).json()
        assert filtered["total"] == 0

    def test_cashier_sees_only_own_sales(self, client, admin_headers, cajero_headers, otro_cajero_headers,
                                         products, open_shift):
        checkout(client, cajero_headers, [(products["yerba"], 1)])
        otro_headers = otro_cajero_headers

        assert client.get(BASE + "/", headers=otro_headers).json()["total"] == 0
        assert client.get(BASE + "/", headers=admin_headers).json()["total"] == 1

        sale_id = client.get(BASE + "/", headers=cajero_headers).json()["ventas"][0]["id"]
        assert client.get(f"{BASE}/{sale_id}", headers=otro_headers).status_code == 403

    def test_get_missing(self, client, admin_headers):
        assert client.get(BASE + "/999", headers=admin_headers).status_code == 404


class TestCancellation:

    def test_cancel_restores_stock(self, client, admin_headers, cajero_headers, products, open_shift):
        sale = checkout(client, cajero_headers, [(products["gaseosa"], 4)]).json()

        response = client.post(f"{BASE}/{sale['id']}/cancel", json={"motivo": "Error de carga"}, headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["estado"] == "anulada"
        assert response.json()["motivo_anulacion"] == "Error de carga (anulada por admin)"
        product = client.get(f"/api/v1/inventory/products/{products['gaseosa'].id}", headers=admin_headers).json()
        assert product["stock"] == 5

    def test_cannot_cancel_twice(self, client, admin_headers, cajero_headers, products, open_shift):
        sale = checkout(client, cajero_headers, [(products["yerba"], 1)]).json()
        client.post(f"{BASE}/{sale['id']}/cancel", json={"motivo": "Devolución"}, headers=admin_headers)

        response = client.post(f"{BASE}/{sale['id']}/cancel", json={"motivo": "Devolución"}, headers=admin_headers)
        assert response.status_code == 409

    def test_cashier_cannot_cancel(self, client, cajero_headers, products, open_shift):
        sale = checkout(client, cajero_headers, [(products["yerba"], 1)]).json()
        response = client.post(f"{BASE}/{sale['id']}/cancel", json={"motivo": "Devolución"}, headers=cajero_headers)
        assert response.status_code == 403


class TestTicketAndExport:

    def test_ticket_html(self, client, cajero_headers, products, open_shift):
        sale = checkout(
            client, cajero_headers,
            [(products["yerba"], 2), (products["cigarrillos"], 1)],
            monto_recibido=10000
        ).json()

        response = client.get(f"{BASE}/{sale['id']}/ticket", headers=cajero_headers)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        html = response.text
        assert sale["numero_comprobante"] in html
        assert "Tayrona Almacén" in html
        assert "$6.600,00" in html
        assert "$1.145,45" in html
        assert "$3.400,00" in html
        assert "Cajero Uno" in html

    def test_ticket_marks_cancelled_sale(self, client, admin_headers, cajero_headers, products, open_shift):
        sale = checkout(client, cajero_headers, [(products["yerba"], 1)]).json()
        client.post(f"{BASE}/{sale['id']}/cancel", json={"motivo": "Devolución"}, headers=admin_headers)

        assert "VENTA ANULADA" in client.get(f"{BASE}/{sale['id']}/ticket", headers=admin_headers).text

    def test_export_csv(self, client, admin_headers, cajero_headers, products, open_shift):
        checkout(client, cajero_headers, [(products["yerba"], 2), (products["gaseosa"], 1)], metodo_pago="tarjeta")

        response = client.get(BASE + "/export/csv", headers=admin_headers)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "attachment" in response.headers["content-disposition"]
        rows = list(csv.reader(io.StringIO(response.text)))
        assert rows[0] == ["Fecha", "Número", "Cliente", "Método Pago", "Total", "Productos"]
        assert rows[1][2:] == ["Consumidor Final", "tarjeta", "5500.00", "3"]

    def test_export_requires_admin(self, client, cajero_headers):
        assert client.get(BASE + "/export/csv", headers=cajero_headers).status_code == 403


class TestQuote:

    def test_quote_by_method(self, client, cajero_headers, products):
        items = f"{products['yerba'].id}:2,{products['cigarrillos'].id}:1"

        efectivo = client.get(BASE + "/quote", params={"items": items}, headers=cajero_headers).json()
        assert efectivo["subtotal"] == 7000
        assert efectivo["base_descuento"] == 4000
        assert efectivo["total"] == 6600
        assert efectivo["sugerencias_efectivo"] == [7000, 10000, 50000, 100000]

        tarjeta = client.get(BASE + "/quote", params={"items": items, "metodo_pago": "tarjeta"},
                             headers=cajero_headers).json()
        assert tarjeta["total"] == 7000
        assert tarjeta["sugerencias_efectivo"] == []

    def test_quote_ignores_stock(self, client, cajero_headers, products):
        response = client.get(BASE + "/quote", params={"items": f"{products['gaseosa'].id}:100"},
                              headers=cajero_headers)
        assert response.status_code == 200

    def test_invalid_items(self, client, cajero_headers):
        assert client.get(BASE + "/quote", params={"items": "abc"}, headers=cajero_headers).status_code == 400

    def test_cash_suggestions(self, client, cajero_headers):
        data = client.get(BASE + "/cash-suggestions", params={"total": 750}, headers=cajero_headers).json()
        assert data["sugerencias"] == [800, 1000, 2000, 5000]
