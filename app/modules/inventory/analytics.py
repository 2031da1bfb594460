# app/modules/inventory/analytics.py
"""
Cálculos de inventario inteligente.

Funciones puras sobre diccionarios de producto con las claves de la tabla
`productos` más los agregados de ventas (`ventas_7_dias`, `ventas_30_dias`,
`ventas_total`). No tocan la base de datos; el servicio arma los datos y
aplica estas reglas.
"""
import math
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional

NO_DEMAND_DAYS = 999

CATEGORY_DAILY_DEMAND = {
    "bebidas": 0.5,
    "gaseosas": 0.5,
    "golosinas": 0.3,
    "snacks": 0.3,
    "almacen": 0.1,
    "limpieza": 0.1,
}
DEFAULT_DAILY_DEMAND = 0.2

ORDER_COST = 500
HOLDING_COST_RATE = 0.25

# (clase, pct_valor máximo, pct_productos máximo)
ABC_THRESHOLDS = (("A", 0.80, 0.20), ("B", 0.95, 0.50))
# clase -> (porcentaje esperado, tolerancia)
PARETO_EXPECTED = {"A": (20, 10), "B": (30, 15), "C": (50, 15)}

ALERT_ACTIONS = {
    "sin_stock": [
        "Pedido urgente al proveedor",
        "Buscar proveedores alternativos",
        "Notificar a ventas sobre disponibilidad",
    ],
    "stock_critico": [
        "Realizar pedido inmediato",
        "Reducir promociones del producto",
        "Activar alertas de venta",
    ],
    "agotamiento_proximo": [
        "Programar pedido para esta semana",
        "Revisar demanda reciente",
        "Considerar ajustar stock mínimo",
    ],
    "stock_bajo": [
        "Revisar nivel de stock mínimo",
        "Programar pedido rutinario",
    ],
}


def inventory_value(stock: float, precio_costo: float) -> float:
    return round(max(stock or 0, 0) * float(precio_costo or 0), 2)


# ==================== CLASIFICACIÓN ABC ====================

def classify_abc(products: Iterable[Dict[str, Any]]) -> Dict[int, str]:
    """
    Clasificación ABC por valor de inventario (stock * precio_costo).

    Se recorre de mayor a menor valor acumulando el porcentaje del valor total
    y el porcentaje de productos recorridos. Todo producto recibe exactamente
    una clase.
    """
    ranked = sorted(
        products,
        key=lambda p: (-inventory_value(p.get("stock", 0), p.get("precio_costo", 0)), p["id"])
    )
    if not ranked:
        return {}

    total_value = sum(inventory_value(p.get("stock", 0), p.get("precio_costo", 0)) for p in ranked)
    count = len(ranked)
    accumulated = 0.0
    classes = {}

    for position, product in enumerate(ranked):
        accumulated += inventory_value(product.get("stock", 0), product.get("precio_costo", 0))
        pct_valor = accumulated / total_value if total_value > 0 else 0
        pct_productos = (position + 1) / count

        classes[product["id"]] = "C"
        for clase, max_valor, max_productos in ABC_THRESHOLDS:
            if pct_valor <= max_valor and pct_productos <= max_productos:
                classes[product["id"]] = clase
                break

    return classes


def validate_pareto(classes: Dict[int, str]) -> Dict[str, Any]:
    """Compara la distribución obtenida contra el 20/30/50 esperado"""
    total = len(classes)
    counts = {clase: 0 for clase in PARETO_EXPECTED}
    for clase in classes.values():
        counts[clase] += 1

    detalle = {}
    valido = True
    for clase, (esperado, tolerancia) in PARETO_EXPECTED.items():
        porcentaje = round(counts[clase] / total * 100, 1) if total else 0.0
        desviacion = round(abs(porcentaje - esperado), 1)
        dentro = desviacion <= tolerancia
        valido = valido and dentro
        detalle[clase] = {
            "cantidad": counts[clase],
            "porcentaje": porcentaje,
            "esperado": esperado,
            "desviacion": desviacion,
            "dentro_tolerancia": dentro,
        }

    return {"valido": total > 0 and valido, "total_productos": total, "clases": detalle}


def abc_by_category(products: Iterable[Dict[str, Any]], classes: Dict[int, str]) -> Dict[str, Dict[str, int]]:
    result: Dict[str, Dict[str, int]] = {}
    for product in products:
        categoria = product.get("categoria") or "general"
        bucket = result.setdefault(categoria, {"A": 0, "B": 0, "C": 0, "total": 0})
        bucket[classes.get(product["id"], "C")] += 1
        bucket["total"] += 1
    return result


# ==================== DEMANDA Y REPOSICIÓN ====================

def calculate_urgency(stock: float, stock_minimo: Optional[float]) -> int:
    """Urgencia de reposición de 0 a 100 según stock / stock mínimo"""
    if stock <= 0:
        return 100

    minimo = stock_minimo or 10
    ratio = stock / minimo
    if ratio <= 0.5:
        return 90
    if ratio <= 1:
        return 70
    if ratio <= 1.5:
        return 40
    return 10


def daily_demand(ventas_30_dias: float, ventas_7_dias: float, ventas_total: float, categoria: Optional[str]) -> float:
    if ventas_30_dias > 0:
        return ventas_30_dias / 30
    if ventas_7_dias > 0:
        # extrapolación semanal conservadora
        return ventas_7_dias / 7 * 0.8
    if ventas_total > 0:
        return ventas_total / 365
    return CATEGORY_DAILY_DEMAND.get((categoria or "general").strip().lower(), DEFAULT_DAILY_DEMAND)


def days_of_stock(stock: float, demand: float) -> int:
    if demand <= 0:
        return NO_DEMAND_DAYS
    return math.ceil(max(stock, 0) / demand)


def reorder_point(demand: float, lead_time: float, stock_minimo: float) -> int:
    safety_stock = max(stock_minimo or 0, demand * 3)
    return math.ceil(demand * lead_time + safety_stock)


def optimal_order_quantity(monthly_demand: float, cost: float) -> int:
    """EOQ simplificado: sqrt(2 * D * S / H) con D anual"""
    if monthly_demand <= 0:
        return 10

    holding_cost = float(cost or 0) * HOLDING_COST_RATE
    if holding_cost <= 0:
        return math.ceil(monthly_demand)

    eoq = math.sqrt(2 * monthly_demand * 12 * ORDER_COST / holding_cost)
    return max(math.ceil(eoq), math.ceil(monthly_demand * 0.5))


def stock_status(stock: float, urgency: int) -> str:
    if stock <= 0:
        return "sin_stock"
    if urgency >= 90:
        return "critico"
    if urgency >= 70:
        return "bajo"
    if urgency >= 40:
        return "medio"
    return "optimo"


def profitability(precio_venta: float, precio_costo: float) -> float:
    """Margen sobre costo en porcentaje"""
    if not precio_costo or precio_costo <= 0:
        return 0.0
    return (precio_venta - precio_costo) / precio_costo * 100


def annual_rotation(demand: float, stock: float) -> float:
    return demand * 365 / (stock if stock > 0 else 1)


def performance_score(rentabilidad: float, rotacion_anual: float, urgencia: int) -> float:
    score_rentabilidad = min(100, max(0, rentabilidad * 2))
    score_rotacion = min(100, max(0, rotacion_anual * 10))
    score_stock = 100 - urgencia
    return round(score_rentabilidad * 0.4 + score_rotacion * 0.4 + score_stock * 0.2, 1)


def recommendation(product: Dict[str, Any], rentabilidad: float, rotacion_anual: float,
                   urgencia: int, clase_abc: Optional[str] = None) -> str:
    items = []
    rentabilidad = round(rentabilidad, 2)
    rotacion_anual = round(rotacion_anual, 2)

    if rentabilidad < 10:
        items.append(f"💰 PRECIO: Margen muy bajo ({rentabilidad}%) - Revisar precio de venta")
    elif rentabilidad > 80:
        items.append(f"⚡ OPORTUNIDAD: Margen alto ({rentabilidad}%) - Potenciar ventas")

    if rotacion_anual < 2:
        items.append(f"📦 STOCK: Rotación lenta ({rotacion_anual}x) - Reducir inventario")
    elif rotacion_anual > 20:
        items.append(f"🚀 ÉXITO: Alta rotación ({rotacion_anual}x) - Asegurar disponibilidad")

    stock = product.get("stock", 0)
    if stock <= 0:
        items.append("🚨 CRÍTICO: Sin stock - Pedido urgente")
    elif urgencia >= 90:
        items.append("⚠️ URGENTE: Stock crítico - Programar pedido YA")

    if clase_abc == "A" and stock <= (product.get("stock_minimo") or 0):
        items.append("⭐ PRIORIDAD: Producto clase A con stock bajo")

    if not items:
        return "✅ ÓPTIMO: Producto con buen rendimiento general"
    return " | ".join(items)


# ==================== OUTLIERS Y VALIDACIONES ====================

def percentile(values: Iterable[float], p: float) -> float:
    """Percentil con interpolación lineal entre los dos valores vecinos"""
    ordered = sorted(values)
    if not ordered:
        return 0.0

    index = p / 100 * (len(ordered) - 1)
    lower = math.floor(index)
    upper = math.ceil(index)
    if lower == upper:
        return float(ordered[lower])
    return ordered[lower] + (ordered[upper] - ordered[lower]) * (index - lower)


def percentiles_95(products: List[Dict[str, Any]]) -> Dict[str, float]:
    return {
        "valor_inventario": percentile(
            [inventory_value(p.get("stock", 0), p.get("precio_costo", 0)) for p in products], 95
        ),
        "stock": percentile([p.get("stock", 0) for p in products], 95),
        "precio_venta": percentile([float(p.get("precio_venta", 0) or 0) for p in products], 95),
    }


def detect_outliers(product: Dict[str, Any], p95s: Dict[str, float]) -> List[str]:
    outliers = []
    if inventory_value(product.get("stock", 0), product.get("precio_costo", 0)) > p95s.get("valor_inventario", 0):
        outliers.append("valor_inventario_alto")
    if product.get("stock", 0) > p95s.get("stock", 0):
        outliers.append("stock_excesivo")
    if float(product.get("precio_venta", 0) or 0) > p95s.get("precio_venta", 0):
        outliers.append("precio_premium")
    return outliers


def validation_alerts(product: Dict[str, Any]) -> List[Dict[str, str]]:
    alerts = []
    stock = product.get("stock", 0)
    precio_venta = float(product.get("precio_venta", 0) or 0)
    precio_costo = float(product.get("precio_costo", 0) or 0)
    valor = inventory_value(stock, precio_costo)

    if precio_costo > 0 and precio_venta <= precio_costo:
        alerts.append({"tipo": "precio_perdida", "mensaje": "Precio de venta menor al costo", "severidad": "critica"})
    if stock > 1000:
        alerts.append({"tipo": "stock_extremo", "mensaje": f"Stock muy alto: {stock} unidades", "severidad": "alta"})
    if valor > 1_000_000:
        valor_txt = f"{valor:,.0f}".replace(",", ".")
        alerts.append({"tipo": "valor_extremo", "mensaje": f"Valor de inventario: ${valor_txt}", "severidad": "media"})
    if not product.get("proveedor") or product.get("proveedor") == "Sin proveedor":
        alerts.append({"tipo": "datos_incompletos", "mensaje": "Falta información del proveedor", "severidad": "baja"})

    return alerts


def enrich_product(product: Dict[str, Any], clase_abc: str, p95s: Dict[str, float]) -> Dict[str, Any]:
    """Producto con todas las métricas de inventario inteligente"""
    stock = product.get("stock", 0)
    precio_costo = float(product.get("precio_costo", 0) or 0)
    precio_venta = float(product.get("precio_venta", 0) or 0)
    stock_minimo = product.get("stock_minimo") or 0

    demand = daily_demand(
        product.get("ventas_30_dias", 0),
        product.get("ventas_7_dias", 0),
        product.get("ventas_total", 0),
        product.get("categoria"),
    )
    dias = days_of_stock(stock, demand)
    urgencia = calculate_urgency(stock, stock_minimo)
    punto_reorden = reorder_point(demand, product.get("tiempo_entrega_dias") or 7, stock_minimo)
    rentabilidad = profitability(precio_venta, precio_costo)
    rotacion = annual_rotation(demand, stock)

    return {
        **product,
        "velocidad_rotacion": round(demand, 2),
        "dias_stock": dias,
        "urgencia": urgencia,
        "clase_abc": clase_abc,
        "punto_reorden": punto_reorden,
        "cantidad_optima_pedido": optimal_order_quantity(demand * 30, precio_costo),
        "rentabilidad": round(rentabilidad, 2),
        "rotacion_anual": round(rotacion, 2),
        "valor_inventario": inventory_value(stock, precio_costo),
        "necesita_pedido": stock <= punto_reorden,
        "estado_stock": stock_status(stock, urgencia),
        "performance_score": performance_score(rentabilidad, rotacion, urgencia),
        "recomendacion_ia": recommendation(product, rentabilidad, rotacion, urgencia, clase_abc),
        "es_outlier": detect_outliers(product, p95s),
        "alertas_validacion": validation_alerts(product),
    }


# ==================== PEDIDOS, ALERTAS Y PREDICCIONES ====================

def order_urgency(stock: float, demand: float, lead_time: float) -> int:
    if stock <= 0:
        return 100

    dias = stock / demand if demand > 0 else NO_DEMAND_DAYS
    if dias <= lead_time:
        return 95
    if dias <= lead_time * 1.5:
        return 80
    if dias <= lead_time * 2:
        return 60
    return 30


def order_reason(stock: float, stock_minimo: float, demand: float) -> str:
    if stock <= 0:
        return "Producto agotado - Reposición crítica"
    if stock <= stock_minimo * 0.5:
        return "Stock crítico - Reposición urgente"
    if demand > 0 and stock / demand <= 7:
        return "Stock para menos de una semana"
    return "Mantenimiento de stock óptimo"


def suggest_order(product: Dict[str, Any], ventas_semana: float, lead_time: float = 7,
                  pedido_minimo: int = 1, today: Optional[date] = None) -> Dict[str, Any]:
    """Cantidad sugerida: demanda durante la entrega + stock de seguridad + un mes"""
    today = today or date.today()
    stock = product.get("stock", 0)
    stock_minimo = product.get("stock_minimo") or 0
    demand = (ventas_semana or 1) / 7

    safety_stock = max(stock_minimo, demand * 7)
    cantidad = max(math.ceil(demand * lead_time + safety_stock + demand * 30), pedido_minimo)
    costo_total = round(cantidad * float(product.get("precio_costo", 0) or 0), 2)

    return {
        "producto_id": product["id"],
        "producto_nombre": product.get("nombre"),
        "categoria": product.get("categoria"),
        "proveedor": product.get("proveedor") or "Sin proveedor",
        "stock_actual": stock,
        "stock_minimo": stock_minimo,
        "cantidad_sugerida": cantidad,
        "costo_total": costo_total,
        "dias_cobertura": days_of_stock(cantidad, demand),
        "urgencia": order_urgency(stock, demand, lead_time),
        "fecha_sugerida": (today + timedelta(days=1)).isoformat(),
        "motivo": order_reason(stock, stock_minimo, demand),
    }


def group_by_supplier(suggestions: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    groups: Dict[str, Dict[str, Any]] = {}
    for suggestion in suggestions:
        group = groups.setdefault(suggestion["proveedor"], {
            "proveedor": suggestion["proveedor"],
            "productos": [],
            "costo_total": 0.0,
            "productos_count": 0,
        })
        group["productos"].append(suggestion)
        group["costo_total"] = round(group["costo_total"] + suggestion["costo_total"], 2)
        group["productos_count"] += 1
    return list(groups.values())


def build_alert(product: Dict[str, Any], ventas_7_dias: float) -> Dict[str, Any]:
    stock = product.get("stock", 0)
    stock_minimo = product.get("stock_minimo") or 0
    velocidad = ventas_7_dias / 7
    dias = days_of_stock(stock, velocidad)

    if stock <= 0:
        tipo, prioridad, mensaje = "sin_stock", "critica", "Producto agotado - Pérdida de ventas"
    elif stock <= stock_minimo * 0.5:
        tipo, prioridad, mensaje = "stock_critico", "alta", f"Stock crítico - Solo {stock} unidades"
    elif dias <= 7 and velocidad > 0:
        tipo, prioridad, mensaje = "agotamiento_proximo", "media", f"Se agotará en {dias} días"
    else:
        tipo, prioridad, mensaje = "stock_bajo", "baja", "Stock por debajo del mínimo"

    return {
        "producto_id": product["id"],
        "producto_nombre": product.get("nombre"),
        "categoria": product.get("categoria"),
        "tipo": tipo,
        "prioridad": prioridad,
        "mensaje": mensaje,
        "stock_actual": stock,
        "stock_minimo": stock_minimo,
        "dias_stock_restante": dias,
        "valor_en_riesgo": inventory_value(stock, product.get("precio_costo", 0)),
        "acciones_sugeridas": list(ALERT_ACTIONS[tipo]),
    }


def predict_demand(product: Dict[str, Any], ventas_7_dias: float, ventas_30_dias: float,
                   ventas_prev_7: float, today: Optional[date] = None) -> Dict[str, Any]:
    today = today or date.today()
    demand = ventas_7_dias / 7
    dias = days_of_stock(product.get("stock", 0), demand)
    trend = ventas_7_dias - ventas_prev_7

    if trend > 0:
        tendencia = "creciente"
    elif trend < 0:
        tendencia = "decreciente"
    else:
        tendencia = "estable"

    if ventas_30_dias > 10:
        confianza = "alta"
    elif ventas_30_dias > 3:
        confianza = "media"
    else:
        confianza = "baja"

    return {
        "producto_id": product["id"],
        "producto_nombre": product.get("nombre"),
        "stock_actual": product.get("stock", 0),
        "demanda_diaria": round(demand, 2),
        "demanda_proyectada_30d": round(demand * 30, 2),
        "dias_hasta_agotamiento": dias,
        "fecha_agotamiento": (today + timedelta(days=dias)).isoformat(),
        "tendencia": tendencia,
        "confianza": confianza,
    }


# ==================== PUNTO DE VENTA ====================

def pos_stock_info(stock: int, stock_minimo: Optional[int]) -> Dict[str, Any]:
    """Estado de stock que muestra el POS junto a cada producto"""
    minimo = stock_minimo or 10
    if stock <= 0:
        estado, alerta = "sin_stock", "SIN_STOCK"
    elif stock <= minimo:
        estado, alerta = "stock_bajo", "STOCK_BAJO"
    elif stock <= minimo * 2:
        estado, alerta = "stock_medio", "STOCK_OK"
    else:
        estado, alerta = "stock_normal", "STOCK_OK"

    return {
        "cantidad": stock,
        "estado": estado,
        "alerta": alerta,
        "puede_vender": stock > 0,
        "stock_minimo": minimo,
    }
