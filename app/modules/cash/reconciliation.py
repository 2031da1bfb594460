# app/modules/cash/reconciliation.py
"""
Aritmética del arqueo de caja.

Funciones puras: no leen la base de datos. Los montos se manejan como
Decimal con dos decimales. Los egresos llegan como montos positivos a
``theoretical_cash`` aunque en la tabla de movimientos se guarden negativos.
"""
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from app.shared.utils.money import to_decimal

ZERO = Decimal("0.00")


def theoretical_cash(opening, cash_sales, inflows, outflows) -> Decimal:
    """Efectivo que debería haber: apertura + ingresos + ventas en efectivo - egresos"""
    return to_decimal(opening) + to_decimal(inflows) + to_decimal(cash_sales) - abs(to_decimal(outflows))


def classify_difference(diferencia) -> str:
    diferencia = to_decimal(diferencia)
    if diferencia == 0:
        return "exacto"
    return "sobrante" if diferencia > 0 else "faltante"


def difference_level(diferencia) -> str:
    amount = abs(to_decimal(diferencia))
    if amount == 0:
        return "Perfecto"
    if amount <= 100:
        return "Aceptable"
    if amount <= 500:
        return "Alto"
    return "Crítico"


def duration_minutes(start: Optional[datetime], end: Optional[datetime]) -> Optional[int]:
    if not start or not end:
        return None
    return max(int((end - start).total_seconds() // 60), 0)


def duration_category(minutes: Optional[int]) -> Optional[str]:
    if minutes is None:
        return None
    if minutes > 720:
        return "Muy largo"
    if minutes > 480:
        return "Largo"
    if minutes > 240:
        return "Normal"
    return "Corto"


def running_balance(events: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Recorre los eventos de apertura/cierre en orden cronológico.

    La apertura fija el balance en ``monto_inicial`` y el cierre en
    ``efectivo_contado``. ``flujo_neto`` es el cambio respecto al evento
    anterior, así que la suma de los flujos es igual al balance final.
    Devuelve los eventos en orden cronológico.
    """
    ordered = sorted(events, key=lambda e: (e["fecha_hora"], e.get("id") or 0))
    balance = ZERO
    rows = []

    for event in ordered:
        previous = balance
        if event["tipo_evento"] == "apertura":
            balance = to_decimal(event.get("monto_inicial"))
        elif event["tipo_evento"] == "cierre":
            balance = to_decimal(event.get("efectivo_contado"))

        rows.append({
            **event,
            "balance_anterior": previous,
            "balance_acumulado": balance,
            "flujo_neto": balance - previous,
        })

    return rows


def period_analysis(rows: List[Dict[str, Any]], current_cash: Optional[Decimal] = None) -> Optional[Dict[str, Any]]:
    """
    Resumen del período a partir de ``running_balance`` (orden cronológico).

    ``current_cash`` es el efectivo teórico de la caja abierta; ``None`` si
    no hay caja abierta, en cuyo caso se toma el último cierre.
    """
    if not rows:
        return None

    closings = [r for r in rows if r["tipo_evento"] == "cierre"]
    caja_abierta = current_cash is not None

    reference = None
    if caja_abierta:
        expected = to_decimal(current_cash)
    else:
        expected = ZERO
        for row in reversed(closings):
            if to_decimal(row.get("efectivo_teorico")) > 0:
                reference = row
                expected = to_decimal(row.get("efectivo_teorico"))
                break

    initial = to_decimal(rows[0].get("monto_inicial"))
    if reference is not None and reference.get("efectivo_contado") is not None:
        final_real = to_decimal(reference.get("efectivo_contado"))
    else:
        final_real = expected

    accumulated = sum((to_decimal(r.get("diferencia")) for r in closings), ZERO)
    first_day = rows[0]["fecha_hora"].date()
    last_day = rows[-1]["fecha_hora"].date()

    return {
        "efectivo_inicial_periodo": initial,
        "efectivo_final_teorico": expected,
        "efectivo_final_real": final_real,
        "efectivo_que_deberia_haber": expected,
        "diferencias_acumuladas": accumulated,
        "movimientos_neto_periodo": expected - initial,
        "dias_periodo": (last_day - first_day).days + 1,
        "promedio_diferencia_turno": to_decimal(accumulated / max(len(closings), 1)),
        "total_turnos": len(closings),
        "estado_efectivo": classify_difference(accumulated),
        "caja_abierta": caja_abierta,
    }


def history_statistics(events: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    events = list(events)
    openings = [e for e in events if e["tipo_evento"] == "apertura"]
    closings = [e for e in events if e["tipo_evento"] == "cierre"]
    differences = [to_decimal(e.get("diferencia")) for e in closings]
    durations = [e["duracion_turno_minutos"] for e in closings if e.get("duracion_turno_minutos") is not None]

    return {
        "total_eventos": len(events),
        "total_aperturas": len(openings),
        "total_cierres": len(closings),
        "cierres_exactos": sum(1 for d in differences if d == 0),
        "cierres_con_sobrante": sum(1 for d in differences if d > 0),
        "cierres_con_faltante": sum(1 for d in differences if d < 0),
        "suma_diferencias": sum(differences, ZERO),
        "promedio_diferencia_absoluta": to_decimal(
            sum((abs(d) for d in differences), ZERO) / len(differences)
        ) if differences else ZERO,
        "duracion_promedio_minutos": round(sum(durations) / len(durations)) if durations else None,
        "duracion_maxima_minutos": max(durations) if durations else None,
    }
