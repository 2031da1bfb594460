from datetime import date, datetime
from decimal import Decimal

import pytest

from app.modules.reports import calculator


def sale(id, detalles, descuento=0, metodo="efectivo"):
    subtotal = sum(Decimal(str(d["precio_unitario"])) * d["cantidad"] for d in detalles)
    descuento = Decimal(str(descuento))
    return {
        "id": id,
        "numero_comprobante": f"V{id}",
        "fecha": datetime(2025, 5, 1, 10, 0),
        "metodo_pago": metodo,
        "subtotal": subtotal,
        "descuento": descuento,
        "monto_total": subtotal - descuento,
        "detalles": detalles,
    }


def line(producto_id, cantidad, precio, costo, nombre=None):
    return {
        "producto_id": producto_id,
        "nombre": nombre or f"Producto {producto_id}",
        "cantidad": cantidad,
        "precio_unitario": Decimal(str(precio)),
        "costo_unitario": Decimal(str(costo)),
    }


class TestProductProfit:

    def test_profit_and_margins(self):
        result = calculator.product_profit(3, 150, 100)

        assert result["ganancia_unitaria"] == 50
        assert result["ganancia_total"] == 150
        assert result["margen_porcentaje"] == pytest.approx(33.33)
        assert result["markup_porcentaje"] == 50
        assert result["rentabilidad"] == "RENTABLE"

    def test_discount_reduces_profit(self):
        result = calculator.product_profit(1, 150, 100, descuento_unitario=60)
        assert result["precio_venta_final"] == 90
        assert result["ganancia_unitaria"] == -10
        assert result["rentabilidad"] == "PERDIDA"

    def test_zero_cost(self):
        assert calculator.product_profit(1, 100, 0)["markup_porcentaje"] == 0.0


class TestSaleProfit:

    def test_without_discount(self):
        result = calculator.sale_profit(sale(1, [line(1, 2, 1000, 600), line(2, 1, 500, 400)]))

        assert result["total_ingresos_netos"] == 2500
        assert result["total_costos"] == 1600
        assert result["ganancia_neta"] == 900
        assert result["coherencia_ok"] is True

    def test_discount_spread_over_lines(self):
        result = calculator.sale_profit(sale(1, [line(1, 1, 1000, 600), line(2, 1, 1000, 600)], descuento=200))

        assert result["total_descuentos"] == 200
        assert result["total_ingresos_netos"] == 1800
        assert result["ganancia_neta"] == 600
        assert [p["descuento_total"] for p in result["productos"]] == [100, 100]

    def test_detects_incoherent_total(self):
        data = sale(1, [line(1, 1, 1000, 600)])
        data["monto_total"] = Decimal("900")
        assert calculator.sale_profit(data)["coherencia_ok"] is False


class TestFinancialSummary:

    def test_aggregates_sales(self):
        sales = [
            sale(1, [line(1, 2, 1000, 600, "Yerba")]),
            sale(2, [line(1, 1, 1000, 600, "Yerba"), line(2, 1, 500, 550, "Pilas")], metodo="tarjeta"),
        ]
        summary = calculator.financial_summary(sales)
        resumen = summary["resumen"]

        assert resumen["total_ventas"] == 2
        assert resumen["total_ingresos_netos"] == 3500
        assert resumen["total_costos"] == 2350
        assert resumen["ganancia_neta"] == 1150
        assert resumen["ticket_promedio"] == 1750
        assert resumen["estado_negocio"] == calculator.RENTABLE

        assert [p["nombre"] for p in summary["productos"]] == ["Yerba", "Pilas"]
        assert summary["productos"][0]["cantidad_vendida"] == 3
        assert summary["productos"][1]["ganancia_total"] == -50
        assert summary["metodos_pago"]["tarjeta"]["cantidad"] == 1

    def test_empty_period(self):
        resumen = calculator.financial_summary([])["resumen"]
        assert resumen["total_ventas"] == 0
        assert resumen["ticket_promedio"] == 0.0
        assert resumen["estado_negocio"] == calculator.EQUILIBRIO

    def test_losses(self):
        resumen = calculator.financial_summary([sale(1, [line(1, 1, 100, 150)])])["resumen"]
        assert resumen["estado_negocio"] == calculator.EN_PERDIDAS


class TestGoalProgress:

    def test_progress(self):
        progress = calculator.goal_progress(25000, 100000)
        assert progress["porcentaje"] == 25.0
        assert progress["faltante"] == 75000
        assert progress["cumplida"] is False

    def test_goal_reached(self):
        progress = calculator.goal_progress(120000, 100000)
        assert progress["cumplida"] is True
        assert progress["faltante"] == 0

    def test_no_goal(self):
        assert calculator.goal_progress(100, 0)["porcentaje"] == 0.0


class TestBusinessAnalysis:

    def test_score(self):
        assert calculator.business_score({"ganancia_neta": 100, "margen_neto_porcentaje": 25, "roi_porcentaje": 20}) == 100
        assert calculator.business_score({"ganancia_neta": -100, "margen_neto_porcentaje": -5, "roi_porcentaje": -5}) == 0
        assert calculator.business_score({}) == 50

    def test_score_labels(self):
        assert calculator.score_label(70) == "Excelente"
        assert calculator.score_label(50) == "Regular"
        assert calculator.score_label(39) == "Crítico"

    def test_losing_business(self):
        summary = calculator.financial_summary([sale(1, [line(1, 1, 100, 150, "Pilas")])])
        analysis = calculator.business_analysis(summary)

        titulos = [p["titulo"] for p in analysis["problemas"]]
        assert "Negocio en Pérdidas" in titulos
        assert "1 Productos Perdiendo Dinero" in titulos
        assert analysis["estado"] == "Crítico"
        assert analysis["recomendaciones"][0]["titulo"] == "Plan de Emergencia Financiera"
        assert analysis["recomendaciones"][-1]["titulo"] == "Automatización y BI"

    def test_healthy_business_with_star_products(self):
        summary = calculator.financial_summary([sale(1, [line(1, 2, 2000, 1000, "Vino")])])
        analysis = calculator.business_analysis(summary)

        assert analysis["problemas"] == []
        assert analysis["score"] == 100
        assert analysis["oportunidades"][0]["productos"] == ["Vino"]
        assert [r["titulo"] for r in analysis["recomendaciones"]] == [
            "Estrategia de Optimización", "Automatización y BI"
        ]

    def test_low_margin_alert(self):
        summary = calculator.financial_summary([sale(1, [line(1, 1, 1100, 1000)])])
        alertas = calculator.business_analysis(summary)["alertas"]
        assert alertas[0]["titulo"] == "Márgenes Bajos"


class TestFixedCosts:

    def test_prorated_within_month(self):
        gastos = calculator.prorated_fixed_costs({"2025-04": 30000}, date(2025, 4, 1), date(2025, 4, 10))
        assert gastos == Decimal("10000.00")

    def test_each_day_uses_its_own_month(self):
        gastos = calculator.prorated_fixed_costs(
            {"2025-01": 31000, "2025-02": 28000}, date(2025, 1, 30), date(2025, 2, 2)
        )
        assert gastos == Decimal("4000.00")

    def test_month_without_expenses_counts_zero(self):
        assert calculator.prorated_fixed_costs({}, date(2025, 4, 1), date(2025, 4, 30)) == 0

    def test_daily_cost(self):
        assert calculator.daily_fixed_cost(30000, "2025-04") == Decimal("1000.00")
        assert calculator.days_in_month("2024-02") == 29

    def test_months_in_range(self):
        assert calculator.months_in_range(date(2024, 11, 15), date(2025, 2, 1)) == [
            "2024-11", "2024-12", "2025-01", "2025-02"
        ]

    def test_fixed_costs_reduce_net_profit(self):
        sales = [
            sale(1, [line(1, 2, 1000, 600, "Yerba")]),
            sale(2, [line(1, 1, 1000, 600, "Yerba"), line(2, 1, 500, 550, "Pilas")], metodo="tarjeta"),
        ]
        resumen = calculator.financial_summary(sales, gastos_fijos=Decimal("1500"))["resumen"]

        assert resumen["ganancia_operativa"] == 1150
        assert resumen["gastos_fijos_periodo"] == 1500
        assert resumen["ganancia_neta"] == -350
        assert resumen["estado_negocio"] == calculator.EN_PERDIDAS

    def test_fixed_costs_listed_as_loss_cause(self):
        summary = calculator.financial_summary([sale(1, [line(1, 1, 1000, 600)])], gastos_fijos=1000)
        analysis = calculator.business_analysis(summary)

        assert analysis["problemas"][0]["titulo"] == "Negocio en Pérdidas"
        assert "Gastos fijos del período: $1,000.00" in analysis["problemas"][0]["causas"]
