# app/modules/inventory/service.py
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.modules.suppliers.repository import SuppliersRepository
from app.shared.database.models import Producto, Usuario
from . import analytics
from .repository import InventoryRepository
from .schemas import (
    ABCAnalysisResponse, AlertsResponse, IntelligentInventoryResponse,
    OrderSuggestionsResponse, POSProduct, POSProductsResponse,
    PredictionsResponse, ProductCreate, ProductListResponse, ProductResponse,
    ProductUpdate, StockAdjustment, StockAdjustmentResponse, StockInfo
)

logger = logging.getLogger(__name__)

def product_to_dict(product: Producto, aggregates: Optional[Dict[str, int]] = None) -> Dict[str, Any]:
    """Producto como diccionario plano para las funciones de analytics"""
    data = {
        "id": product.id,
        "codigo": product.codigo,
        "nombre": product.nombre,
        "categoria": product.categoria,
        "proveedor": product.proveedor_ref.nombre if product.proveedor_ref else product.proveedor,
        "proveedor_id": product.proveedor_id,
        "precio_costo": float(product.precio_costo or 0),
        "precio_venta": float(product.precio_venta or 0),
        "stock": product.stock or 0,
        "stock_minimo": product.stock_minimo or 0,
        "tiempo_entrega_dias": product.tiempo_entrega_dias or 7,
        "ventas_7_dias": 0,
        "ventas_prev_7_dias": 0,
        "ventas_30_dias": 0,
        "ventas_total": 0,
    }
    if aggregates:
        data.update(aggregates)
    return data

class InventoryService:
    """
    Catálogo de productos e inventario inteligente
    """

    def __init__(self, db: Session):
        self.db = db
        self.repository = InventoryRepository(db)

    # ==================== CRUD DE PRODUCTOS ====================

    async def list_products(
        self,
        search: Optional[str],
        categoria: Optional[str],
        incluir_inactivos: bool,
        limit: int,
        offset: int
    ) -> ProductListResponse:
        products, total = self.repository.search_products(
            search=search,
            categoria=categoria,
            solo_activos=not incluir_inactivos,
            limit=limit,
            offset=offset
        )
        return ProductListResponse(
            productos=[ProductResponse.model_validate(p) for p in products],
            total=total,
            limit=limit,
            offset=offset
        )

    async def get_product(self, product_id: int) -> ProductResponse:
        return ProductResponse.model_validate(self._get_or_404(product_id))

    async def create_product(self, data: ProductCreate, user: Usuario) -> ProductResponse:
        if self.repository.get_by_codigo(data.codigo):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Ya existe un producto con código {data.codigo}"
            )

        try:
            product = self.repository.create(**self._with_supplier(data.model_dump()), activo=True)
            self.db.commit()
            self.db.refresh(product)
        except Exception:
            self.db.rollback()
            logger.exception("Error creando producto")
            raise HTTPException(status_code=500, detail="Error creando producto")

        logger.info(f"Producto {product.codigo} creado por {user.username}")
        return ProductResponse.model_validate(product)

    async def update_product(self, product_id: int, data: ProductUpdate, user: Usuario) -> ProductResponse:
        product = self._get_or_404(product_id)
        changes = self._with_supplier(data.model_dump(exclude_unset=True))

        try:
            for field, value in changes.items():
                setattr(product, field, value)
            self.db.commit()
            self.db.refresh(product)
        except Exception:
            self.db.rollback()
            logger.exception(f"Error actualizando producto {product_id}")
            raise HTTPException(status_code=500, detail="Error actualizando producto")

        logger.info(f"Producto {product.codigo} actualizado por {user.username}: {sorted(changes)}")
        return ProductResponse.model_validate(product)

    async def delete_product(self, product_id: int, user: Usuario) -> ProductResponse:
        """Baja lógica: las ventas históricas siguen apuntando al producto"""
        product = self._get_or_404(product_id)
        product.activo = False
        self.db.commit()
        self.db.refresh(product)

        logger.info(f"Producto {product.codigo} desactivado por {user.username}")
        return ProductResponse.model_validate(product)

    async def adjust_stock(self, product_id: int, adjustment: StockAdjustment, user: Usuario) -> StockAdjustmentResponse:
        product = self._get_or_404(product_id)
        anterior = product.stock

        if adjustment.nuevo_stock is not None:
            nuevo = adjustment.nuevo_stock
        else:
            nuevo = anterior + adjustment.cantidad

        if nuevo < 0:
            raise HTTPException(
                status_code=400,
                detail=f"El ajuste deja stock negativo ({anterior} + {adjustment.cantidad})"
            )

        product.stock = nuevo
        self.db.commit()

        logger.info(f"Stock de {product.codigo}: {anterior} -> {nuevo} ({adjustment.motivo}) por {user.username}")
        return StockAdjustmentResponse(
            producto_id=product.id,
            stock_anterior=anterior,
            stock_nuevo=nuevo,
            motivo=adjustment.motivo
        )

    # ==================== PUNTO DE VENTA ====================

    async def get_pos_products(
        self,
        search: Optional[str],
        categoria: Optional[str],
        incluir_sin_stock: bool,
        limit: int
    ) -> POSProductsResponse:
        products, total = self.repository.search_products(
            search=search,
            categoria=categoria,
            solo_con_stock=not incluir_sin_stock,
            limit=limit
        )

        items = [
            POSProduct(
                id=p.id,
                codigo=p.codigo,
                codigo_barras=p.codigo_barras,
                nombre=p.nombre,
                categoria=p.categoria,
                precio_venta=float(p.precio_venta or 0),
                aplica_descuento_forma_pago=p.aplica_descuento_forma_pago,
                stock_info=StockInfo(**analytics.pos_stock_info(p.stock, p.stock_minimo))
            )
            for p in products
        ]
        return POSProductsResponse(
            productos=items,
            total=total,
            categorias=self.repository.list_categories()
        )

    # ==================== INVENTARIO INTELIGENTE ====================

    def _load_products(self) -> List[Dict[str, Any]]:
        products, _ = self.repository.search_products()
        aggregates = self.repository.sales_aggregates()
        return [product_to_dict(p, aggregates.get(p.id)) for p in products]

    async def get_intelligent_inventory(
        self,
        categoria: Optional[str] = None,
        clase_abc: Optional[str] = None,
        estado_stock: Optional[str] = None,
        solo_necesita_pedido: bool = False
    ) -> IntelligentInventoryResponse:
        products = self._load_products()
        classes = analytics.classify_abc(products)
        p95s = analytics.percentiles_95(products)
        enriched = [analytics.enrich_product(p, classes[p["id"]], p95s) for p in products]

        if categoria:
            enriched = [p for p in enriched if p["categoria"] == categoria]
        if clase_abc:
            enriched = [p for p in enriched if p["clase_abc"] == clase_abc.upper()]
        if estado_stock:
            enriched = [p for p in enriched if p["estado_stock"] == estado_stock]
        if solo_necesita_pedido:
            enriched = [p for p in enriched if p["necesita_pedido"]]

        enriched.sort(key=lambda p: (-p["urgencia"], p["nombre"]))

        resumen = {
            "valor_total_inventario": round(sum(p["valor_inventario"] for p in enriched), 2),
            "necesitan_pedido": sum(1 for p in enriched if p["necesita_pedido"]),
            "sin_stock": sum(1 for p in enriched if p["estado_stock"] == "sin_stock"),
            "criticos": sum(1 for p in enriched if p["estado_stock"] == "critico"),
            "performance_promedio": round(
                sum(p["performance_score"] for p in enriched) / len(enriched), 1
            ) if enriched else 0.0,
        }
        return IntelligentInventoryResponse(productos=enriched, total=len(enriched), resumen=resumen)

    async def get_abc_analysis(self) -> ABCAnalysisResponse:
        products = self._load_products()
        classes = analytics.classify_abc(products)

        conteo = {"A": 0, "B": 0, "C": 0}
        valor_por_clase = {"A": 0.0, "B": 0.0, "C": 0.0}
        for p in products:
            clase = classes[p["id"]]
            conteo[clase] += 1
            valor_por_clase[clase] = round(
                valor_por_clase[clase] + analytics.inventory_value(p["stock"], p["precio_costo"]), 2
            )

        return ABCAnalysisResponse(
            clasificacion=classes,
            conteo=conteo,
            validacion_pareto=analytics.validate_pareto(classes),
            por_categoria=analytics.abc_by_category(products, classes),
            valor_por_clase=valor_por_clase
        )

    async def get_alerts(self) -> AlertsResponse:
        """Alertas para productos con stock hasta el doble del mínimo"""
        products = [p for p in self._load_products() if p["stock"] <= p["stock_minimo"] * 2]

        def order(p):
            if p["stock"] <= 0:
                bucket = 1
            elif p["stock"] <= p["stock_minimo"] * 0.5:
                bucket = 2
            elif p["stock"] <= p["stock_minimo"]:
                bucket = 3
            else:
                bucket = 4
            return bucket, -p["ventas_7_dias"]

        fecha = datetime.now().isoformat(timespec="seconds")
        alertas = []
        for p in sorted(products, key=order):
            alerta = analytics.build_alert(p, p["ventas_7_dias"])
            alerta["fecha_alerta"] = fecha
            alertas.append(alerta)

        resumen = {
            "total_alertas": len(alertas),
            "criticas": sum(1 for a in alertas if a["prioridad"] == "critica"),
            "altas": sum(1 for a in alertas if a["prioridad"] == "alta"),
            "medias": sum(1 for a in alertas if a["prioridad"] == "media"),
        }
        return AlertsResponse(alertas=alertas, resumen=resumen)

    async def get_order_suggestions(self) -> OrderSuggestionsResponse:
        """Sugerencias para productos con stock hasta 1.5 veces el mínimo"""
        products = [p for p in self._load_products() if p["stock"] <= p["stock_minimo"] * 1.5]
        products.sort(key=lambda p: (0 if p["stock"] <= 0 else 1, -p["ventas_7_dias"]))

        sugerencias = [
            analytics.suggest_order(p, p["ventas_7_dias"], lead_time=p["tiempo_entrega_dias"])
            for p in products
        ]
        por_proveedor = analytics.group_by_supplier(sugerencias)

        return OrderSuggestionsResponse(
            sugerencias=sugerencias,
            por_proveedor=por_proveedor,
            resumen={
                "total_productos": len(sugerencias),
                "costo_total": round(sum(s["costo_total"] for s in sugerencias), 2),
                "proveedores": len(por_proveedor),
            }
        )

    async def get_predictions(self, limit: int = 50) -> PredictionsResponse:
        products = [p for p in self._load_products() if p["stock"] > 0]
        products.sort(key=lambda p: -p["ventas_7_dias"])

        predicciones = [
            analytics.predict_demand(p, p["ventas_7_dias"], p["ventas_30_dias"], p["ventas_prev_7_dias"])
            for p in products[:limit]
        ]
        return PredictionsResponse(predicciones=predicciones)

    def _with_supplier(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Copia el nombre del proveedor vinculado al texto ``proveedor``"""
        supplier_id = data.get("proveedor_id")
        if supplier_id is None:
            return data

        supplier = SuppliersRepository(self.db).get_by_id(supplier_id)
        if not supplier or not supplier.activo:
            raise HTTPException(status_code=400, detail=f"Proveedor {supplier_id} no existe o está inactivo")
        return {**data, "proveedor": supplier.nombre}

    def _get_or_404(self, product_id: int) -> Producto:
        product = self.repository.get_by_id(product_id)
        if not product:
            raise HTTPException(status_code=404, detail=f"Producto {product_id} no encontrado")
        return product
