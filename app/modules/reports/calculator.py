# app/modules/reports/calculator.py
"""
Cálculo de ganancias por producto y por venta.

Ganancia neta unitaria = (precio de venta - descuento unitario) - costo. El
descuento global de una venta se reparte entre sus líneas en proporción al
subtotal de cada una. En el resumen del período se descuentan además los
gastos fijos mensuales, prorrateados por día. Las funciones reciben
diccionarios y no acceden a la base de datos.
"""
import calendar
from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from app.shared.utils.money import to_decimal

ZERO = Decimal("0.00")

RENTABLE = "RENTABLE"
EN_PERDIDAS = "EN PÉRDIDAS"
EQUILIBRIO = "PUNTO DE EQUILIBRIO"


def _pct(part, whole) -> float:
    whole = Decimal(str(whole))
    if whole == 0:
        return 0.0
    return round(float(Decimal(str(part)) / whole * 100), 2)


def product_profit(cantidad: int, precio_venta, costo, descuento_unitario=0) -> Dict[str, Any]:
    precio = to_decimal(precio_venta)
    costo = to_decimal(costo)
    descuento = Decimal(str(descuento_unitario or 0))
    precio_final = precio - descuento
    ganancia_unitaria = precio_final - costo

    return {
        "cantidad": cantidad,
        "precio_venta_original": float(precio),
        "descuento_unitario": float(to_decimal(descuento)),
        "precio_venta_final": float(to_decimal(precio_final)),
        "costo_unitario": float(costo),
        "ingreso_bruto_total": float(to_decimal(precio * cantidad)),
        "descuento_total": float(to_decimal(descuento * cantidad)),
        "ingreso_neto_total": float(to_decimal(precio_final * cantidad)),
        "costo_total": float(to_decimal(costo * cantidad)),
        "ganancia_unitaria": float(to_decimal(ganancia_unitaria)),
        "ganancia_total": float(to_decimal(ganancia_unitaria * cantidad)),
        "margen_porcentaje": _pct(ganancia_unitaria, precio_final) if precio_final > 0 else 0.0,
        "markup_porcentaje": _pct(ganancia_unitaria, costo),
        "rentabilidad": RENTABLE if ganancia_unitaria > 0 else "PERDIDA",
    }


def sale_profit(sale: Dict[str, Any]) -> Dict[str, Any]:
    """
    ``sale`` trae ``monto_total``, ``descuento`` y ``detalles`` con
    cantidad, precio_unitario y costo_unitario por línea.
    """
    descuento_venta = to_decimal(sale.get("descuento"))
    monto_total = to_decimal(sale.get("monto_total"))
    bruto_venta = monto_total + descuento_venta

    productos = []
    for item in sale.get("detalles", []):
        cantidad = int(item["cantidad"])
        precio = to_decimal(item["precio_unitario"])
        descuento_unitario = Decimal("0")
        if descuento_venta > 0 and bruto_venta > 0 and cantidad > 0:
            proporcion = (precio * cantidad) / bruto_venta
            descuento_unitario = descuento_venta * proporcion / cantidad

        profit = product_profit(cantidad, precio, item.get("costo_unitario"), descuento_unitario)
        profit.update({"producto_id": item.get("producto_id"), "nombre": item.get("nombre")})
        productos.append(profit)

    costos = sum((Decimal(str(p["costo_total"])) for p in productos), ZERO)
    brutos = sum((Decimal(str(p["ingreso_bruto_total"])) for p in productos), ZERO)
    netos = brutos - descuento_venta
    ganancia = netos - costos
    diferencia = abs(monto_total - netos)

    return {
        "venta_id": sale.get("id"),
        "numero_comprobante": sale.get("numero_comprobante"),
        "fecha": sale.get("fecha"),
        "metodo_pago": sale.get("metodo_pago"),
        "productos": productos,
        "total_costos": float(costos),
        "total_ingresos_brutos": float(brutos),
        "total_descuentos": float(descuento_venta),
        "total_ingresos_netos": float(netos),
        "ganancia_neta": float(ganancia),
        "monto_total_registrado": float(monto_total),
        "diferencia_calculo": float(diferencia),
        "coherencia_ok": diferencia < Decimal("0.01"),
        "margen_porcentaje": _pct(ganancia, netos),
        "roi_porcentaje": _pct(ganancia, costos),
    }


def business_state(ganancia) -> str:
    ganancia = Decimal(str(ganancia))
    if ganancia > 0:
        return RENTABLE
    if ganancia < 0:
        return EN_PERDIDAS
    return EQUILIBRIO


def days_in_month(mes_ano: str) -> int:
    year, month = (int(part) for part in mes_ano.split("-"))
    return calendar.monthrange(year, month)[1]


def daily_fixed_cost(gastos_mensuales, mes_ano: str) -> Decimal:
    return to_decimal(Decimal(str(gastos_mensuales or 0)) / days_in_month(mes_ano))


def months_in_range(fecha_desde: date, fecha_hasta: date) -> List[str]:
    meses = []
    year, month = fecha_desde.year, fecha_desde.month
    while (year, month) <= (fecha_hasta.year, fecha_hasta.month):
        meses.append(f"{year:04d}-{month:02d}")
        year, month = (year + 1, 1) if month == 12 else (year, month + 1)
    return meses


def prorated_fixed_costs(gastos_por_mes: Dict[str, Any], fecha_desde: date, fecha_hasta: date) -> Decimal:
    """
    Gastos fijos que le tocan al período. Cada día carga el gasto de su mes
    dividido por los días de ese mes; ``gastos_por_mes`` va por ``YYYY-MM``.
    """
    total = Decimal("0")
    day = fecha_desde
    while day <= fecha_hasta:
        mes_ano = day.strftime("%Y-%m")
        gasto = Decimal(str(gastos_por_mes.get(mes_ano) or 0))
        if gasto:
            total += gasto / days_in_month(mes_ano)
        day += timedelta(days=1)
    return to_decimal(total)


def financial_summary(sales: Iterable[Dict[str, Any]], gastos_fijos=0) -> Dict[str, Any]:
    """``gastos_fijos`` es el prorrateo del período y se resta de la ganancia operativa"""
    ventas = [sale_profit(s) for s in sales]

    costos = sum((Decimal(str(v["total_costos"])) for v in ventas), ZERO)
    brutos = sum((Decimal(str(v["total_ingresos_brutos"])) for v in ventas), ZERO)
    descuentos = sum((Decimal(str(v["total_descuentos"])) for v in ventas), ZERO)
    netos = sum((Decimal(str(v["total_ingresos_netos"])) for v in ventas), ZERO)
    ganancia_operativa = netos - costos
    gastos = to_decimal(gastos_fijos)
    ganancia = ganancia_operativa - gastos
    cantidad = len(ventas)

    por_producto: Dict[Any, Dict[str, Any]] = {}
    for venta in ventas:
        for p in venta["productos"]:
            row = por_producto.setdefault(p["producto_id"], {
                "producto_id": p["producto_id"],
                "nombre": p["nombre"],
                "cantidad_vendida": 0,
                "ingresos": ZERO,
                "costos": ZERO,
            })
            row["cantidad_vendida"] += p["cantidad"]
            row["ingresos"] += Decimal(str(p["ingreso_neto_total"]))
            row["costos"] += Decimal(str(p["costo_total"]))

    productos = []
    for row in por_producto.values():
        ganancia_producto = row["ingresos"] - row["costos"]
        productos.append({
            **row,
            "ingresos": float(row["ingresos"]),
            "costos": float(row["costos"]),
            "ganancia_total": float(ganancia_producto),
            "margen_porcentaje": _pct(ganancia_producto, row["ingresos"]),
        })
    productos.sort(key=lambda p: p["ganancia_total"], reverse=True)

    metodos: Dict[str, Dict[str, Any]] = defaultdict(lambda: {"total": ZERO, "cantidad": 0})
    for venta in ventas:
        metodo = metodos[venta["metodo_pago"] or "otros"]
        metodo["total"] += Decimal(str(venta["total_ingresos_netos"]))
        metodo["cantidad"] += 1

    return {
        "resumen": {
            "total_ventas": cantidad,
            "total_productos_vendidos": sum(p["cantidad_vendida"] for p in productos),
            "total_costos": float(costos),
            "total_ingresos_brutos": float(brutos),
            "total_descuentos": float(descuentos),
            "total_ingresos_netos": float(netos),
            "ganancia_operativa": float(ganancia_operativa),
            "gastos_fijos_periodo": float(gastos),
            "ganancia_neta": float(ganancia),
            "margen_neto_porcentaje": _pct(ganancia, netos),
            "roi_porcentaje": _pct(ganancia, costos),
            "ticket_promedio": float(to_decimal(netos / cantidad)) if cantidad else 0.0,
            "ganancia_por_venta": float(to_decimal(ganancia / cantidad)) if cantidad else 0.0,
            "diferencias_detectadas": sum(1 for v in ventas if not v["coherencia_ok"]),
            "estado_negocio": business_state(ganancia),
        },
        "productos": productos,
        "metodos_pago": {
            metodo: {
                "total": float(data["total"]),
                "cantidad": data["cantidad"],
                "porcentaje": _pct(data["total"], netos),
            }
            for metodo, data in metodos.items()
        },
        "ventas": ventas,
    }


def goal_progress(total, goal) -> Dict[str, Any]:
    total = to_decimal(total)
    goal = to_decimal(goal)
    return {
        "meta": float(goal),
        "vendido": float(total),
        "porcentaje": round(float(total / goal * 100), 1) if goal > 0 else 0.0,
        "faltante": float(max(goal - total, ZERO)),
        "cumplida": goal > 0 and total >= goal,
    }


# ==================== ANÁLISIS HEURÍSTICO ====================

def business_score(resumen: Dict[str, Any]) -> int:
    score = 50
    ganancia = resumen.get("ganancia_neta", 0) or 0
    margen = resumen.get("margen_neto_porcentaje", 0) or 0
    roi = resumen.get("roi_porcentaje", 0) or 0

    if ganancia > 0:
        score += 30
    elif ganancia < 0:
        score -= 40

    if margen > 20:
        score += 20
    elif margen < 0:
        score -= 30

    if roi > 15:
        score += 15
    elif roi < 0:
        score -= 20

    return max(0, min(100, score))


def score_label(score: int) -> str:
    if score >= 70:
        return "Excelente"
    if score >= 40:
        return "Regular"
    return "Crítico"


def _loss_causes(resumen: Dict[str, Any], negativos: List[Dict[str, Any]]) -> List[str]:
    causas = []
    if negativos:
        perdida = sum(abs(p["ganancia_total"]) for p in negativos)
        causas.append(f"{len(negativos)} productos con pérdida (${perdida:,.2f})")
    if (resumen.get("total_descuentos") or 0) > 0:
        causas.append(f"Descuentos aplicados: ${resumen['total_descuentos']:,.2f}")
    if (resumen.get("gastos_fijos_periodo") or 0) > 0:
        causas.append(f"Gastos fijos del período: ${resumen['gastos_fijos_periodo']:,.2f}")
    if (resumen.get("total_costos") or 0) > (resumen.get("total_ingresos_netos") or 0):
        causas.append("Los costos superan a los ingresos netos")
    return causas


def business_analysis(summary: Dict[str, Any], ticket_minimo: float = 1000) -> Dict[str, Any]:
    """Diagnóstico local sobre el resultado de ``financial_summary``"""
    resumen = summary["resumen"]
    productos = summary.get("productos", [])

    problemas: List[Dict[str, Any]] = []
    alertas: List[Dict[str, Any]] = []
    oportunidades: List[Dict[str, Any]] = []

    negativos = [p for p in productos if p["margen_porcentaje"] < 0]

    if resumen["ganancia_neta"] < 0:
        problemas.append({
            "tipo": "crítico",
            "titulo": "Negocio en Pérdidas",
            "descripcion": f"Pérdida de ${abs(resumen['ganancia_neta']):,.2f}",
            "causas": _loss_causes(resumen, negativos),
            "solucion": "Revisar precios y costos de productos con margen negativo",
        })

    if negativos:
        problemas.append({
            "tipo": "urgente",
            "titulo": f"{len(negativos)} Productos Perdiendo Dinero",
            "descripcion": "Productos vendidos por debajo del costo",
            "productos": [p["nombre"] for p in negativos[:5]],
            "solucion": "Corregir precios o revisar costos inmediatamente",
        })

    if productos:
        margen_promedio = sum(p["margen_porcentaje"] for p in productos) / len(productos)
        if margen_promedio < 20:
            alertas.append({
                "tipo": "advertencia",
                "titulo": "Márgenes Bajos",
                "descripcion": f"Margen promedio: {margen_promedio:.1f}%",
                "recomendacion": "Aumentar precios o negociar mejores costos",
            })

    estrellas = sorted(
        (p for p in productos if p["margen_porcentaje"] > 30),
        key=lambda p: p["ganancia_total"],
        reverse=True
    )[:3]
    if estrellas:
        oportunidades.append({
            "tipo": "crecimiento",
            "titulo": "Productos Estrella Identificados",
            "descripcion": f"{len(estrellas)} productos con excelente margen",
            "productos": [p["nombre"] for p in estrellas],
            "accion": "Potenciar ventas de estos productos",
        })

    if resumen["total_ventas"] > 0 and resumen["ticket_promedio"] < ticket_minimo:
        oportunidades.append({
            "tipo": "optimización",
            "titulo": "Ticket Promedio Bajo",
            "descripcion": f"${resumen['ticket_promedio']:,.2f} por venta",
            "accion": "Implementar venta cruzada y upselling",
        })

    recomendaciones = []
    if any(p["tipo"] == "crítico" for p in problemas):
        recomendaciones.append({
            "prioridad": "urgente",
            "titulo": "Plan de Emergencia Financiera",
            "acciones": [
                "Revisar precios de productos con margen negativo",
                "Suspender temporalmente productos no rentables",
                "Negociar mejores precios con proveedores",
            ],
        })
    if oportunidades:
        recomendaciones.append({
            "prioridad": "alta",
            "titulo": "Estrategia de Optimización",
            "acciones": [
                "Promocionar productos de alto margen",
                "Capacitar al personal en venta sugestiva",
            ],
        })
    recomendaciones.append({
        "prioridad": "media",
        "titulo": "Automatización y BI",
        "acciones": [
            "Revisar las alertas de inventario semanalmente",
            "Seguir la clasificación ABC al armar pedidos",
        ],
    })

    score = business_score(resumen)
    return {
        "score": score,
        "estado": score_label(score),
        "problemas": problemas,
        "alertas": alertas,
        "oportunidades": oportunidades,
        "recomendaciones": recomendaciones,
    }
