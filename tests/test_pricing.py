from decimal import Decimal

import pytest

from app.modules.sales.pricing import (
    PricedItem, calculate_change, calculate_totals, discount_for_method, suggest_cash_amounts
)


def item(precio, cantidad=1, descuento=True, producto_id=1):
    return PricedItem(
        producto_id=producto_id,
        cantidad=cantidad,
        precio_unitario=Decimal(str(precio)),
        aplica_descuento_forma_pago=descuento
    )


class TestDiscountForMethod:

    def test_reads_configured_percentage(self):
        config = {"descuento_efectivo": 10, "descuento_tarjeta": 0}
        assert discount_for_method(config, "efectivo") == Decimal("10.00")
        assert discount_for_method(config, "EFECTIVO") == Decimal("10.00")
        assert discount_for_method(config, "tarjeta") == Decimal("0.00")

    def test_unknown_method_has_no_discount(self):
        assert discount_for_method({}, "cripto") == Decimal("0.00")


class TestCalculateTotals:

    def test_discount_only_on_eligible_items(self):
        totals = calculate_totals([item(1000, 2), item(3000, 1, descuento=False, producto_id=2)], 10)

        assert totals.subtotal == Decimal("5000.00")
        assert totals.base_descuento == Decimal("2000.00")
        assert totals.descuento == Decimal("200.00")
        assert totals.total == Decimal("4800.00")

    def test_no_discount(self):
        totals = calculate_totals([item(999.99)], 0)
        assert totals.total == Decimal("999.99")
        assert totals.descuento == Decimal("0.00")

    @pytest.mark.parametrize("pct", [-20, 0, 50, 100, 150])
    def test_total_never_negative(self, pct):
        totals = calculate_totals([item(100, 3), item(50, 1, descuento=False, producto_id=2)], pct)
        assert totals.total >= 0
        assert Decimal("0") <= totals.descuento_porcentaje <= Decimal("100")

    def test_full_discount(self):
        totals = calculate_totals([item(100)], 100)
        assert totals.total == Decimal("0.00")


class TestChange:

    def test_change(self):
        assert calculate_change(Decimal("4800"), Decimal("5000")) == Decimal("200.00")
        assert calculate_change(100, 100) == Decimal("0.00")

    def test_insufficient_amount(self):
        with pytest.raises(ValueError):
            calculate_change(100, 99.99)


class TestCashSuggestions:

    def test_small_amount(self):
        assert suggest_cash_amounts(850) == [900, 1000, 2000, 5000]

    def test_medium_amount(self):
        assert suggest_cash_amounts(4800) == [5000, 10000, 20000]

    def test_large_amount(self):
        assert suggest_cash_amounts(12300) == [13000, 15000, 50000, 100000]

    def test_all_suggestions_cover_total(self):
        for total in (1, 999, 1000, 4999.5, 20000):
            assert all(s >= total for s in suggest_cash_amounts(total))

    def test_zero(self):
        assert suggest_cash_amounts(0) == []
