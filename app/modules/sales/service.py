# app/modules/sales/service.py
import csv
import io
import logging
import math
import random
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from fastapi import HTTPException, status
from jinja2 import Environment, FileSystemLoader, select_autoescape
from sqlalchemy.orm import Session

from app.config.settings import settings
from app.modules.cash.repository import CashRepository
from app.modules.configuration.service import load_business_config
from app.modules.inventory.repository import InventoryRepository
from app.shared.database.models import DetalleVenta, Usuario, Venta
from app.shared.utils.money import format_currency_ar, to_decimal
from .pricing import (
    PricedItem, calculate_change, calculate_totals, discount_for_method, suggest_cash_amounts
)
from .repository import SalesRepository
from .schemas import (
    CashSuggestionsResponse, QuoteItem, QuoteResponse, SaleCancelRequest,
    SaleCreateRequest, SaleItemRequest, SaleListResponse, SaleResponse, SaleStatus
)

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"

CSV_HEADERS = ["Fecha", "Número", "Cliente", "Método Pago", "Total", "Productos"]

_jinja_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html", "xml"])
)
_jinja_env.filters["moneda"] = format_currency_ar


def generate_sale_number(now: Optional[datetime] = None) -> str:
    """V + fecha/hora + sufijo aleatorio, p.ej. V20250114153045123"""
    now = now or datetime.now()
    return f"V{now.strftime('%Y%m%d%H%M%S')}{random.randint(100, 999)}"


def included_vat(total) -> Decimal:
    """IVA 21% contenido en un precio final"""
    return to_decimal(to_decimal(total) * 21 / 121)


def parse_quote_items(raw: str) -> List[SaleItemRequest]:
    """Formato ``producto_id:cantidad`` separado por comas"""
    items = []
    for chunk in (raw or "").split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        producto_id, _, cantidad = chunk.partition(":")
        try:
            items.append(SaleItemRequest(producto_id=int(producto_id), cantidad=int(cantidad or 1)))
        except ValueError:
            raise ValueError(f"Item inválido: '{chunk}'. Formato esperado producto_id:cantidad")
    if not items:
        raise ValueError("Debe indicar al menos un producto")
    return items


class SalesService:
    """
    Ventas del punto de venta: cobro, anulación, ticket y exportación
    """

    def __init__(self, db: Session):
        self.db = db
        self.repository = SalesRepository(db)
        self.inventory = InventoryRepository(db)
        self.cash = CashRepository(db)

    # ==================== COBRO ====================

    def _price_items(self, items: List[SaleItemRequest], check_stock: bool = True) -> Tuple[List[PricedItem], Dict]:
        products = self.inventory.get_many([item.producto_id for item in items])

        priced = []
        for item in items:
            product = products.get(item.producto_id)
            if not product or not product.activo:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Producto {item.producto_id} no encontrado o inactivo"
                )
            if check_stock and product.stock < item.cantidad:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Stock insuficiente para {product.nombre}. Disponible: {product.stock}, solicitado: {item.cantidad}"
                )
            priced.append(PricedItem(
                producto_id=product.id,
                cantidad=item.cantidad,
                precio_unitario=to_decimal(product.precio_venta),
                aplica_descuento_forma_pago=bool(product.aplica_descuento_forma_pago)
            ))

        return priced, products

    async def create_sale(self, sale_data: SaleCreateRequest, user: Usuario) -> SaleResponse:
        shift = self.cash.get_open_shift(user.id)
        if settings.require_open_shift_for_sales and not shift:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="No hay turno activo. Debe abrir la caja antes de vender."
            )

        priced, products = self._price_items(sale_data.items)
        metodo = sale_data.metodo_pago.value
        config = load_business_config(self.db)
        totals = calculate_totals(priced, discount_for_method(config, metodo))

        monto_recibido = None
        vuelto = Decimal("0.00")
        if metodo == "efectivo":
            monto_recibido = to_decimal(sale_data.monto_recibido) if sale_data.monto_recibido is not None else totals.total
            try:
                vuelto = calculate_change(totals.total, monto_recibido)
            except ValueError as e:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

        numero = generate_sale_number()
        while self.repository.numero_exists(numero):
            numero = generate_sale_number()

        try:
            sale = Venta(
                numero_comprobante=numero,
                fecha=datetime.now(),
                cliente_nombre=(sale_data.cliente_nombre or "").strip() or "Consumidor Final",
                metodo_pago=metodo,
                subtotal=totals.subtotal,
                descuento=totals.descuento,
                monto_total=totals.total,
                monto_recibido=monto_recibido,
                vuelto=vuelto,
                estado=SaleStatus.completada.value,
                usuario_id=user.id,
                turno_id=shift.id if shift else None
            )
            for item in priced:
                product = products[item.producto_id]
                sale.detalles.append(DetalleVenta(
                    producto_id=product.id,
                    nombre=product.nombre,
                    cantidad=item.cantidad,
                    precio_unitario=item.precio_unitario,
                    costo_unitario=to_decimal(product.precio_costo),
                    subtotal=item.subtotal
                ))
                product.stock -= item.cantidad

            self.repository.add(sale)
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.exception("Error registrando venta")
            raise HTTPException(status_code=500, detail="Error registrando la venta")

        logger.info(
            f"Venta {numero} registrada por {user.username}: {metodo} {totals.total} "
            f"(descuento {totals.descuento}, {len(priced)} productos)"
        )
        return SaleResponse.model_validate(self.repository.get_by_id(sale.id))

    # ==================== CONSULTAS ====================

    async def list_sales(
        self,
        page: int,
        page_size: int,
        fecha_desde: Optional[date] = None,
        fecha_hasta: Optional[date] = None,
        metodo_pago: Optional[str] = None,
        estado: Optional[str] = None,
        search: Optional[str] = None,
        user: Optional[Usuario] = None
    ) -> SaleListResponse:
        # los cajeros solo ven sus propias ventas
        usuario_id = user.id if user is not None and not user.is_admin else None

        sales, total, monto = self.repository.list_sales(
            page=page,
            page_size=page_size,
            fecha_desde=fecha_desde,
            fecha_hasta=fecha_hasta,
            metodo_pago=metodo_pago,
            estado=estado,
            usuario_id=usuario_id,
            search=search
        )
        return SaleListResponse(
            ventas=[SaleResponse.model_validate(s) for s in sales],
            total=total,
            page=page,
            page_size=page_size,
            total_pages=math.ceil(total / page_size) if total else 0,
            monto_total=monto
        )

    async def get_sale(self, sale_id: int, user: Usuario) -> SaleResponse:
        return SaleResponse.model_validate(self._get_or_404(sale_id, user))

    # ==================== ANULACIÓN ====================

    async def cancel_sale(self, sale_id: int, request: SaleCancelRequest, admin: Usuario) -> SaleResponse:
        sale = self._get_or_404(sale_id, admin)
        if sale.estado != SaleStatus.completada.value:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Solo se pueden anular ventas completadas (estado actual: {sale.estado})"
            )

        try:
            products = self.inventory.get_many([d.producto_id for d in sale.detalles])
            for detalle in sale.detalles:
                product = products.get(detalle.producto_id)
                if product:
                    product.stock += detalle.cantidad

            sale.estado = SaleStatus.anulada.value
            sale.motivo_anulacion = f"{request.motivo.strip()} (anulada por {admin.username})"
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.exception(f"Error anulando venta {sale_id}")
            raise HTTPException(status_code=500, detail="Error anulando la venta")

        logger.warning(f"Venta {sale.numero_comprobante} anulada por {admin.username}: {request.motivo}")
        return SaleResponse.model_validate(self.repository.get_by_id(sale.id))

    # ==================== TICKET Y EXPORTACIÓN ====================

    async def render_ticket(self, sale_id: int, user: Usuario) -> str:
        sale = self._get_or_404(sale_id, user)
        template = _jinja_env.get_template("ticket.html")
        return template.render(
            venta=sale,
            negocio=load_business_config(self.db),
            cajero=sale.usuario.nombre if sale.usuario else None,
            iva=included_vat(sale.monto_total)
        )

    async def export_csv(
        self,
        fecha_desde: Optional[date] = None,
        fecha_hasta: Optional[date] = None,
        metodo_pago: Optional[str] = None,
        estado: Optional[str] = None
    ) -> str:
        sales = self.repository.all_sales(
            fecha_desde=fecha_desde,
            fecha_hasta=fecha_hasta,
            metodo_pago=metodo_pago,
            estado=estado
        )

        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(CSV_HEADERS)
        for sale in sales:
            writer.writerow([
                sale.fecha.strftime("%d/%m/%Y"),
                sale.numero_comprobante,
                sale.cliente_nombre or "Consumidor Final",
                sale.metodo_pago,
                f"{to_decimal(sale.monto_total):.2f}",
                sum(d.cantidad for d in sale.detalles)
            ])

        logger.info(f"Exportación CSV de {len(sales)} ventas")
        return output.getvalue()

    # ==================== COTIZACIÓN ====================

    async def quote(self, raw_items: str, metodo_pago: str) -> QuoteResponse:
        try:
            items = parse_quote_items(raw_items)
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

        priced, products = self._price_items(items, check_stock=False)
        totals = calculate_totals(priced, discount_for_method(load_business_config(self.db), metodo_pago))

        return QuoteResponse(
            metodo_pago=metodo_pago,
            items=[
                QuoteItem(
                    producto_id=item.producto_id,
                    nombre=products[item.producto_id].nombre,
                    cantidad=item.cantidad,
                    precio_unitario=float(item.precio_unitario),
                    subtotal=float(item.subtotal),
                    aplica_descuento_forma_pago=item.aplica_descuento_forma_pago
                )
                for item in priced
            ],
            subtotal=float(totals.subtotal),
            base_descuento=float(totals.base_descuento),
            descuento_porcentaje=float(totals.descuento_porcentaje),
            descuento=float(totals.descuento),
            total=float(totals.total),
            sugerencias_efectivo=suggest_cash_amounts(totals.total) if metodo_pago == "efectivo" else []
        )

    async def cash_suggestions(self, total: Decimal) -> CashSuggestionsResponse:
        return CashSuggestionsResponse(total=float(to_decimal(total)), sugerencias=suggest_cash_amounts(total))

    # ==================== HELPERS ====================

    def _get_or_404(self, sale_id: int, user: Usuario) -> Venta:
        sale = self.repository.get_by_id(sale_id)
        if not sale:
            raise HTTPException(status_code=404, detail=f"Venta {sale_id} no encontrada")
        if not user.is_admin and sale.usuario_id != user.id:
            raise HTTPException(status_code=403, detail="No puedes consultar ventas de otros cajeros")
        return sale
