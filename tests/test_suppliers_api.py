BASE = "/api/v1/suppliers"
PRODUCTS = "/api/v1/inventory/products"


# ===== FIXTURES =====

def create_supplier(client, headers, nombre="Distribuidora Central", **extra):
    payload = {"nombre": nombre, "telefono": "11-4567-8901", "tiempo_entrega_dias": 3}
    payload.update(extra)
    response = client.post(BASE + "/", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def link_product(client, headers, product, supplier):
    response = client.put(f"{PRODUCTS}/{product.id}", json={"proveedor_id": supplier["id"]}, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


class TestSuppliersCRUD:

    def test_create_supplier(self, client, admin_headers):
        data = create_supplier(client, admin_headers, nombre="  Mayorista del Norte ", monto_minimo=3000)

        assert data["nombre"] == "Mayorista del Norte"
        assert data["monto_minimo"] == 3000
        assert data["activo"] is True
        assert data["total_productos"] == 0

    def test_duplicate_name(self, client, admin_headers):
        create_supplier(client, admin_headers)
        response = client.post(BASE + "/", json={"nombre": "distribuidora central"}, headers=admin_headers)
        assert response.status_code == 409

    def test_name_required(self, client, admin_headers):
        assert client.post(BASE + "/", json={"nombre": "   "}, headers=admin_headers).status_code == 422

    def test_cajero_reads_but_cannot_write(self, client, admin_headers, cajero_headers):
        create_supplier(client, admin_headers)

        assert client.get(BASE + "/", headers=cajero_headers).json()["total"] == 1
        assert client.post(BASE + "/", json={"nombre": "Otro"}, headers=cajero_headers).status_code == 403

    def test_get_missing(self, client, admin_headers):
        assert client.get(BASE + "/999", headers=admin_headers).status_code == 404

    def test_update_rejects_taken_name(self, client, admin_headers):
        create_supplier(client, admin_headers)
        otro = create_supplier(client, admin_headers, nombre="Proveedor Express")

        response = client.put(f"{BASE}/{otro['id']}", json={"nombre": "Distribuidora Central"}, headers=admin_headers)
        assert response.status_code == 409


class TestSupplierProducts:

    def test_product_linked_by_id(self, client, admin_headers, products):
        supplier = create_supplier(client, admin_headers)

        product = link_product(client, admin_headers, products["gaseosa"], supplier)
        assert product["proveedor_id"] == supplier["id"]
        assert product["proveedor"] == "Distribuidora Central"

        detail = client.get(f"{BASE}/{supplier['id']}", headers=admin_headers).json()
        assert [p["nombre"] for p in detail["productos"]] == ["Gaseosa 2L"]
        assert detail["proveedor"]["total_productos"] == 1

        listed = client.get(BASE + "/", headers=admin_headers).json()["proveedores"]
        assert listed[0]["total_productos"] == 1

    def test_create_product_with_supplier(self, client, admin_headers):
        supplier = create_supplier(client, admin_headers)

        response = client.post(PRODUCTS, json={
            "codigo": "ARR-1", "nombre": "Arroz 1kg", "precio_venta": 1200, "proveedor_id": supplier["id"]
        }, headers=admin_headers)

        assert response.status_code == 201
        assert response.json()["proveedor"] == "Distribuidora Central"

    def test_unknown_supplier_rejected(self, client, admin_headers, products):
        response = client.put(f"{PRODUCTS}/{products['yerba'].id}", json={"proveedor_id": 999}, headers=admin_headers)
        assert response.status_code == 400

    def test_rename_updates_products(self, client, admin_headers, products):
        supplier = create_supplier(client, admin_headers)
        link_product(client, admin_headers, products["gaseosa"], supplier)

        client.put(f"{BASE}/{supplier['id']}", json={"nombre": "Central SA"}, headers=admin_headers)

        product = client.get(f"{PRODUCTS}/{products['gaseosa'].id}", headers=admin_headers).json()
        assert product["proveedor"] == "Central SA"

    def test_order_suggestions_grouped_by_linked_supplier(self, client, admin_headers, products):
        supplier = create_supplier(client, admin_headers)
        link_product(client, admin_headers, products["gaseosa"], supplier)

        data = client.get("/api/v1/inventory/order-suggestions", headers=admin_headers).json()

        assert data["sugerencias"][0]["proveedor"] == "Distribuidora Central"
        assert [g["proveedor"] for g in data["por_proveedor"]] == ["Distribuidora Central"]


class TestSupplierDeletion:

    def test_delete_is_soft(self, client, admin_headers):
        supplier = create_supplier(client, admin_headers)

        response = client.delete(f"{BASE}/{supplier['id']}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["activo"] is False
        assert client.get(BASE + "/", headers=admin_headers).json()["total"] == 0
        assert client.get(BASE + "/", params={"activos": False}, headers=admin_headers).json()["total"] == 1

    def test_cannot_delete_with_products(self, client, admin_headers, products):
        supplier = create_supplier(client, admin_headers)
        link_product(client, admin_headers, products["gaseosa"], supplier)

        response = client.delete(f"{BASE}/{supplier['id']}", headers=admin_headers)

        assert response.status_code == 409
        assert "1 productos asignados" in response.json()["detail"]

    def test_inactive_supplier_cannot_be_assigned(self, client, admin_headers, products):
        supplier = create_supplier(client, admin_headers)
        client.delete(f"{BASE}/{supplier['id']}", headers=admin_headers)

        response = client.put(f"{PRODUCTS}/{products['yerba'].id}", json={"proveedor_id": supplier["id"]},
                              headers=admin_headers)
        assert response.status_code == 400
