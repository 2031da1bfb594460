from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, ForeignKey, Numeric
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.config.database import Base

class TimestampMixin:
    """Mixin para timestamps automáticos"""
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

# ===== USUARIOS Y ACCESO =====

class Usuario(Base):
    """Usuario del sistema (admin o cajero)"""
    __tablename__ = "usuarios"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    nombre = Column(String(255), nullable=False)
    role = Column(String(50), default='cajero', nullable=False)
    activo = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    ventas = relationship("Venta", back_populates="usuario")
    turnos = relationship("TurnoCaja", back_populates="usuario")

    @property
    def is_admin(self):
        return self.role == "admin"

class LoginAttempt(Base):
    """Intentos de login fallidos, base del rate limiting"""
    __tablename__ = "login_attempts"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), nullable=False, index=True)
    ip = Column(String(64), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False)

class DispositivoConfiable(Base):
    """Dispositivo identificado por fingerprint que espera o tiene aprobación"""
    __tablename__ = "dispositivos_confiables"

    id = Column(Integer, primary_key=True, index=True)
    device_fingerprint = Column(String(255), unique=True, nullable=False, index=True)
    codigo_activacion = Column(String(20), unique=True, nullable=False, index=True)
    nombre_dispositivo = Column(String(255))
    usuario_solicito = Column(String(100))
    usuario_aprobo = Column(String(100))
    ip_primer_uso = Column(String(64))
    user_agent = Column(Text)
    estado = Column(String(20), default='pendiente', nullable=False)
    fecha_solicitud = Column(DateTime, server_default=func.now())
    fecha_aprobacion = Column(DateTime)
    ultima_actividad = Column(DateTime)

class Configuracion(Base):
    """Par clave/valor de configuración del negocio"""
    __tablename__ = "configuracion"

    clave = Column(String(100), primary_key=True)
    valor = Column(Text, nullable=False)
    descripcion = Column(String(255))
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

# ===== PRODUCTOS =====

class Proveedor(Base, TimestampMixin):
    """Proveedor al que se le arman los pedidos de reposición"""
    __tablename__ = "proveedores"

    id = Column(Integer, primary_key=True, index=True)
    nombre = Column(String(200), unique=True, nullable=False, index=True)
    razon_social = Column(String(200))
    cuit = Column(String(20))
    telefono = Column(String(50))
    whatsapp = Column(String(50))
    email = Column(String(100))
    direccion = Column(Text)
    categoria = Column(String(100), index=True)
    dias_entrega = Column(String(100))
    monto_minimo = Column(Numeric(12, 2), default=0, nullable=False)
    tiempo_entrega_dias = Column(Integer, default=2, nullable=False)
    notas = Column(Text)
    activo = Column(Boolean, default=True, nullable=False, index=True)

    # Relationships
    productos = relationship("Producto", back_populates="proveedor_ref")

class Producto(Base, TimestampMixin):
    """Producto del catálogo con su stock"""
    __tablename__ = "productos"

    id = Column(Integer, primary_key=True, index=True)
    codigo = Column(String(100), unique=True, nullable=False, index=True)
    codigo_barras = Column(String(100), index=True)
    nombre = Column(String(255), nullable=False, index=True)
    categoria = Column(String(100), default='general')
    proveedor = Column(String(255))
    proveedor_id = Column(Integer, ForeignKey("proveedores.id"), index=True)
    precio_costo = Column(Numeric(12, 2), default=0, nullable=False)
    precio_venta = Column(Numeric(12, 2), default=0, nullable=False)
    stock = Column(Integer, default=0, nullable=False)
    stock_minimo = Column(Integer, default=10, nullable=False)
    tiempo_entrega_dias = Column(Integer, default=7, nullable=False)
    aplica_descuento_forma_pago = Column(Boolean, default=True, nullable=False)
    activo = Column(Boolean, default=True, nullable=False)

    # Relationships
    detalles = relationship("DetalleVenta", back_populates="producto")
    proveedor_ref = relationship("Proveedor", back_populates="productos")

# ===== VENTAS =====

class Venta(Base):
    """Venta registrada en el POS"""
    __tablename__ = "ventas"

    id = Column(Integer, primary_key=True, index=True)
    numero_comprobante = Column(String(50), unique=True, nullable=False, index=True)
    fecha = Column(DateTime, nullable=False, index=True)
    cliente_nombre = Column(String(255), default='Consumidor Final')
    metodo_pago = Column(String(30), nullable=False, index=True)
    subtotal = Column(Numeric(12, 2), nullable=False)
    descuento = Column(Numeric(12, 2), default=0, nullable=False)
    monto_total = Column(Numeric(12, 2), nullable=False)
    monto_recibido = Column(Numeric(12, 2))
    vuelto = Column(Numeric(12, 2), default=0)
    estado = Column(String(20), default='completada', nullable=False, index=True)
    motivo_anulacion = Column(Text)
    usuario_id = Column(Integer, ForeignKey("usuarios.id"), nullable=False)
    turno_id = Column(Integer, ForeignKey("turnos_caja.id"), index=True)

    # Relationships
    usuario = relationship("Usuario", back_populates="ventas")
    turno = relationship("TurnoCaja", back_populates="ventas")
    detalles = relationship("DetalleVenta", back_populates="venta", cascade="all, delete-orphan", order_by="DetalleVenta.id")

class DetalleVenta(Base):
    """Línea de una venta; guarda precio y costo del momento"""
    __tablename__ = "detalle_ventas"

    id = Column(Integer, primary_key=True, index=True)
    venta_id = Column(Integer, ForeignKey("ventas.id"), nullable=False, index=True)
    producto_id = Column(Integer, ForeignKey("productos.id"), nullable=False, index=True)
    nombre = Column(String(255), nullable=False)
    cantidad = Column(Integer, nullable=False)
    precio_unitario = Column(Numeric(12, 2), nullable=False)
    costo_unitario = Column(Numeric(12, 2), default=0, nullable=False)
    subtotal = Column(Numeric(12, 2), nullable=False)

    # Relationships
    venta = relationship("Venta", back_populates="detalles")
    producto = relationship("Producto", back_populates="detalles")

# ===== CAJA =====

class TurnoCaja(Base):
    """Turno de caja de un cajero"""
    __tablename__ = "turnos_caja"

    id = Column(Integer, primary_key=True, index=True)
    numero_turno = Column(Integer, nullable=False, index=True)
    usuario_id = Column(Integer, ForeignKey("usuarios.id"), nullable=False, index=True)
    fecha_apertura = Column(DateTime, nullable=False)
    fecha_cierre = Column(DateTime)
    monto_apertura = Column(Numeric(12, 2), nullable=False)
    efectivo_esperado_apertura = Column(Numeric(12, 2), default=0)
    diferencia_apertura = Column(Numeric(12, 2), default=0)
    monto_cierre = Column(Numeric(12, 2))
    efectivo_teorico = Column(Numeric(12, 2))
    diferencia = Column(Numeric(12, 2))
    estado = Column(String(20), default='abierto', nullable=False, index=True)
    tipo_cierre = Column(String(20))
    notas = Column(Text, default='')

    # Relationships
    usuario = relationship("Usuario", back_populates="turnos")
    movimientos = relationship("MovimientoCaja", back_populates="turno")
    ventas = relationship("Venta", back_populates="turno")

class MovimientoCaja(Base):
    """Ingreso o egreso manual de efectivo. Los egresos se guardan negativos"""
    __tablename__ = "movimientos_caja"

    id = Column(Integer, primary_key=True, index=True)
    turno_id = Column(Integer, ForeignKey("turnos_caja.id"), nullable=False, index=True)
    tipo = Column(String(20), nullable=False)
    categoria = Column(String(100), nullable=False)
    monto = Column(Numeric(12, 2), nullable=False)
    descripcion = Column(Text, nullable=False)
    referencia = Column(String(255))
    usuario_id = Column(Integer, ForeignKey("usuarios.id"), nullable=False)
    fecha = Column(DateTime, nullable=False)

    # Relationships
    turno = relationship("TurnoCaja", back_populates="movimientos")

class HistorialTurno(Base):
    """Evento de apertura o cierre, para trazabilidad del arqueo"""
    __tablename__ = "historial_turnos_caja"

    id = Column(Integer, primary_key=True, index=True)
    turno_id = Column(Integer, ForeignKey("turnos_caja.id"), nullable=False, index=True)
    numero_turno = Column(Integer, nullable=False)
    tipo_evento = Column(String(20), nullable=False, index=True)
    cajero_id = Column(Integer, ForeignKey("usuarios.id"), nullable=False, index=True)
    cajero_nombre = Column(String(255))
    fecha_hora = Column(DateTime, nullable=False, index=True)
    monto_inicial = Column(Numeric(12, 2), default=0)
    efectivo_teorico = Column(Numeric(12, 2))
    efectivo_contado = Column(Numeric(12, 2))
    diferencia = Column(Numeric(12, 2), default=0)
    tipo_diferencia = Column(String(20))
    duracion_turno_minutos = Column(Integer)
    notas = Column(Text)

# ===== GASTOS =====

class GastoMensual(Base, TimestampMixin):
    """Gastos fijos de un mes (alquiler, servicios, sueldos), uno por mes"""
    __tablename__ = "gastos_mensuales"

    id = Column(Integer, primary_key=True, index=True)
    mes_ano = Column(String(7), unique=True, nullable=False, index=True)
    gastos_totales = Column(Numeric(12, 2), default=0, nullable=False)
    descripcion = Column(Text)
    usuario_id = Column(Integer, ForeignKey("usuarios.id"))
