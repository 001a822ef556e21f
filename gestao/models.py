from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    Integer,
    String,
    Text,
    func,
)

from .database import Base


class TimestampMixin:
    created_date = Column(DateTime, server_default=func.now(), index=True)
    updated_date = Column(DateTime, server_default=func.now(), onupdate=func.now())


# =========================
# Users
# =========================
class User(TimestampMixin, Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(80), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    role = Column(String(20), default="user", nullable=False)
    department = Column(String(120), nullable=True)
    position = Column(String(120), nullable=True)
    phone = Column(String(40), nullable=True)
    photo_url = Column(String, nullable=True)
    theme = Column(String(10), default="claro", nullable=False)
    # dados da empresa (nome, documento, telefone, email, endereço, logo)
    company_data = Column(JSON, nullable=True)
    active = Column(Boolean, default=True, nullable=False)


class RevokedToken(Base):
    """Tokens invalidados por logout (jti)."""
    __tablename__ = "revoked_tokens"

    jti = Column(String(64), primary_key=True)
    revoked_at = Column(DateTime, server_default=func.now())


# =========================
# Clients
# =========================
class Client(TimestampMixin, Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    document = Column(String(40), nullable=True)  # CPF/CNPJ
    email = Column(String(255), nullable=True)
    phone = Column(String(40), nullable=True)
    type = Column(String(20), default="individual")
    birth_date = Column(Date, nullable=True)
    address = Column(String(500), nullable=True)
    notes = Column(Text, nullable=True)


# =========================
# Products
# =========================
class Product(TimestampMixin, Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    sku = Column(String(64), nullable=True, index=True)
    barcode = Column(String(64), nullable=True, index=True)
    price = Column(Float, default=0.0)
    cost = Column(Float, default=0.0)
    stock = Column(Float, default=0.0)
    min_stock = Column(Float, default=0.0)
    category = Column(String(120), nullable=True)
    unit = Column(String(20), default="unidade")

    # dimensões (opcionais)
    weight = Column(Float, nullable=True)
    volume = Column(Float, nullable=True)
    length = Column(Float, nullable=True)
    width = Column(Float, nullable=True)
    height = Column(Float, nullable=True)


# =========================
# Sales
# =========================
class Sale(TimestampMixin, Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, nullable=True, index=True)
    # [{product_id, quantity, price}]
    items = Column(JSON, nullable=False, default=list)
    total = Column(Float, default=0.0)
    payment_method = Column(String(30), nullable=True)
    installments = Column(Integer, default=1)
    status = Column(String(20), default="completed")


# =========================
# Financeiro
# =========================
class Transaction(TimestampMixin, Base):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String(10), nullable=False)
    description = Column(String(255), nullable=False)
    amount = Column(Float, default=0.0)
    date = Column(Date, nullable=True, index=True)
    due_date = Column(Date, nullable=True, index=True)
    status = Column(String(20), default="pendente")
    category = Column(String(60), nullable=True)
    payment_method = Column(String(30), nullable=True)
    installments = Column(Integer, default=1)
    # {type, interval, end_date}
    recurrence = Column(JSON, nullable=True)
    notes = Column(Text, nullable=True)


# =========================
# Quotes
# =========================
class Quote(TimestampMixin, Base):
    __tablename__ = "quotes"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, nullable=True, index=True)
    # [{description, quantity, unit_price, type, total, product_id?, service_id?}]
    items = Column(JSON, nullable=False, default=list)
    total = Column(Float, default=0.0)
    status = Column(String(20), default="draft")
    valid_until = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)


# =========================
# Services
# =========================
class ServiceType(TimestampMixin, Base):
    __tablename__ = "service_types"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    base_price = Column(Float, default=0.0)
    duration_minutes = Column(Integer, nullable=True)
    category = Column(String(120), nullable=True)
    active = Column(Boolean, default=True)


class Service(TimestampMixin, Base):
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, nullable=True, index=True)
    service_type_id = Column(Integer, nullable=True, index=True)
    description = Column(String(255), nullable=True)
    scheduled_date = Column(DateTime, nullable=True, index=True)
    price = Column(Float, default=0.0)
    status = Column(String(20), default="agendado")
    notes = Column(Text, nullable=True)


class ServiceOrder(TimestampMixin, Base):
    __tablename__ = "service_orders"

    id = Column(Integer, primary_key=True, index=True)
    number = Column(String(40), nullable=True)
    client_id = Column(Integer, nullable=True, index=True)
    service_type_id = Column(Integer, nullable=True)
    description = Column(Text, nullable=True)
    status = Column(String(20), default="pending")
    scheduled_date = Column(DateTime, nullable=True, index=True)
    price = Column(Float, default=0.0)
    # equipamento do cliente {type, brand, model, serial_number, condition}
    client_item = Column(JSON, nullable=True)
    # peças usadas [{product_id, quantity, price}]
    products = Column(JSON, nullable=False, default=list)
    technician_notes = Column(Text, nullable=True)
