"""
Helpers de dinero.

Todos los montos se calculan como ``Decimal`` con dos decimales. El formato
por defecto replica el que usa el POS (``$1,234.56``); el formato argentino
(``$1.234,56``) se usa en el ticket y en los mensajes del arqueo.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

CENT = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """Convierte números, strings o None a Decimal redondeado a centavos"""
    if value is None or value == "":
        return Decimal("0.00")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except InvalidOperation:
            raise ValueError(f"Monto inválido: {value!r}")
    return result.quantize(CENT, rounding=ROUND_HALF_UP)


def format_currency(amount: Optional[Any]) -> str:
    """$1,234.56"""
    if amount is None:
        return "$0.00"
    value = to_decimal(amount)
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def format_currency_ar(amount: Optional[Any]) -> str:
    """$1.234,56 (es-AR)"""
    text = format_currency(amount)
    return text.replace(",", "_").replace(".", ",").replace("_", ".")


def parse_currency(text: Any) -> Decimal:
    """
    Inversa de ``format_currency``. Acepta también el formato es-AR.

    Con ambos separadores presentes, el último es el decimal. Con uno solo,
    es decimal salvo que aparezca una vez seguido de exactamente tres dígitos
    (``1.000`` o ``1,000`` se leen como mil).
    """
    if text is None:
        return Decimal("0.00")
    if not isinstance(text, str):
        return to_decimal(text)

    cleaned = text.strip().replace("$", "").replace(" ", "")
    negative = cleaned.startswith("-")
    cleaned = cleaned.lstrip("-")
    if not cleaned:
        return Decimal("0.00")

    decimal_sep = None
    if "," in cleaned and "." in cleaned:
        decimal_sep = "," if cleaned.rfind(",") > cleaned.rfind(".") else "."
    elif "," in cleaned or "." in cleaned:
        sep = "," if "," in cleaned else "."
        tail = cleaned.rpartition(sep)[2]
        if cleaned.count(sep) == 1 and len(tail) != 3:
            decimal_sep = sep

    for thousands_sep in {",", "."} - {decimal_sep}:
        cleaned = cleaned.replace(thousands_sep, "")
    if decimal_sep:
        cleaned = cleaned.replace(decimal_sep, ".")

    value = to_decimal(cleaned)
    return -value if negative else value
