# app/modules/sales/pricing.py
"""
Reglas de precio del punto de venta: descuento por método de pago, vuelto y
billetes sugeridos para el cobro en efectivo.
"""
import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, List

from app.shared.utils.money import to_decimal

@dataclass
class PricedItem:
    producto_id: int
    cantidad: int
    precio_unitario: Decimal
    aplica_descuento_forma_pago: bool = True

    @property
    def subtotal(self) -> Decimal:
        return to_decimal(self.precio_unitario * self.cantidad)

@dataclass
class SaleTotals:
    subtotal: Decimal
    base_descuento: Decimal
    descuento_porcentaje: Decimal
    descuento: Decimal
    total: Decimal


def discount_for_method(config: Dict[str, Any], metodo_pago: str) -> Decimal:
    """Porcentaje configurado para el método (`descuento_<metodo>`), 0 si no existe"""
    value = config.get(f"descuento_{(metodo_pago or '').strip().lower()}", 0)
    return to_decimal(value or 0)


def calculate_totals(items: Iterable[PricedItem], discount_pct) -> SaleTotals:
    """
    El descuento se aplica solo sobre los productos marcados con
    `aplica_descuento_forma_pago`. El total nunca es negativo.
    """
    items = list(items)
    pct = min(max(to_decimal(discount_pct), Decimal("0")), Decimal("100"))

    subtotal = sum((item.subtotal for item in items), Decimal("0.00"))
    base = sum((item.subtotal for item in items if item.aplica_descuento_forma_pago), Decimal("0.00"))
    descuento = to_decimal(base * pct / 100)
    total = max(Decimal("0.00"), subtotal - descuento)

    return SaleTotals(
        subtotal=to_decimal(subtotal),
        base_descuento=to_decimal(base),
        descuento_porcentaje=pct,
        descuento=descuento,
        total=to_decimal(total)
    )


def calculate_change(total, received) -> Decimal:
    total = to_decimal(total)
    received = to_decimal(received)
    if received < total:
        raise ValueError(f"Monto recibido insuficiente: faltan {total - received}")
    return received - total


def _round_up(value: float, step: int) -> int:
    return int(math.ceil(value / step) * step)


def suggest_cash_amounts(total) -> List[int]:
    """Hasta 4 montos redondos mayores o iguales al total, de menor a mayor"""
    amount = float(to_decimal(total))
    if amount <= 0:
        return []

    if amount < 1000:
        candidates = [_round_up(amount, 100), 1000, 2000, 5000]
    elif amount < 5000:
        candidates = [_round_up(amount, 500), 5000, 10000, 20000]
    else:
        candidates = [_round_up(amount, 1000), _round_up(amount, 5000), 50000, 100000]

    unique = sorted({c for c in candidates if c >= amount})
    return unique[:4]
