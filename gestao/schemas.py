from datetime import date as Date, datetime
from typing import ClassVar, List, Optional

from pydantic import BaseModel, Field, model_validator

from .enums import (
    ClientType,
    PaymentMethod,
    ProductUnit,
    QuoteItemType,
    QuoteStatus,
    RecurrenceType,
    SaleStatus,
    ServiceOrderStatus,
    ServiceStatus,
    Theme,
    TransactionStatus,
    TransactionType,
    UserRole,
)


class Record(BaseModel):
    class Config:
        from_attributes = True
        use_enum_values = True


class RecordOut(Record):
    id: int
    created_date: datetime | None = None
    updated_date: datetime | None = None


class PartialRecord(Record):
    """
    Atualização parcial: campo ausente fica como está. Campos em ``NOT_NULL``
    podem ser omitidos, mas não recebem null explícito.
    """
    NOT_NULL: ClassVar[tuple] = ()

    @model_validator(mode="before")
    @classmethod
    def reject_null(cls, data):
        if isinstance(data, dict):
            nulls = [name for name in cls.NOT_NULL if name in data and data[name] is None]
            if nulls:
                raise ValueError(f"Campo obrigatório não pode ser nulo: {', '.join(nulls)}")
        return data


# =========================
# Users / Auth
# =========================
class CompanyData(Record):
    name: str | None = None
    document: str | None = None
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    logo_url: str | None = None


class UserLogin(BaseModel):
    username: str
    password: str


class UserCreate(Record):
    username: str
    password: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    role: UserRole = UserRole.USER
    department: Optional[str] = None
    position: Optional[str] = None
    phone: Optional[str] = None


class UserUpdate(Record):
    full_name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[UserRole] = None
    password: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None
    phone: Optional[str] = None
    photo_url: Optional[str] = None
    active: Optional[bool] = None


class MyUserDataUpdate(PartialRecord):
    """Campos que o próprio usuário pode alterar (nome, email e papel são somente leitura)."""
    NOT_NULL = ("theme",)

    department: Optional[str] = None
    position: Optional[str] = None
    phone: Optional[str] = None
    photo_url: Optional[str] = None
    theme: Optional[Theme] = None
    company_data: Optional[CompanyData] = None


class UserOut(RecordOut):
    username: str
    full_name: str | None = None
    email: str | None = None
    role: UserRole = UserRole.USER
    department: str | None = None
    position: str | None = None
    phone: str | None = None
    photo_url: str | None = None
    theme: Theme = Theme.CLARO
    company_data: CompanyData | None = None
    active: bool = True


# =========================
# Clients
# =========================
class ClientCreate(Record):
    name: str
    document: str | None = None
    email: str | None = None
    phone: str | None = None
    type: ClientType = ClientType.INDIVIDUAL
    birth_date: Date | None = None
    address: str | None = None
    notes: str | None = None


class ClientUpdate(PartialRecord):
    NOT_NULL = ("name", "type")

    name: Optional[str] = None
    document: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    type: Optional[ClientType] = None
    birth_date: Optional[Date] = None
    address: Optional[str] = None
    notes: Optional[str] = None


class ClientOut(RecordOut, ClientCreate):
    pass


# =========================
# Products
# =========================
class ProductCreate(Record):
    name: str
    description: str | None = None
    sku: str | None = None
    barcode: str | None = None
    price: float = 0.0
    cost: float = 0.0
    stock: float = 0.0
    min_stock: float = 0.0
    category: str | None = None
    unit: ProductUnit = ProductUnit.UNIDADE
    weight: float | None = None
    volume: float | None = None
    length: float | None = None
    width: float | None = None
    height: float | None = None


class ProductUpdate(PartialRecord):
    NOT_NULL = ("name", "price", "cost", "stock", "min_stock", "unit")

    name: Optional[str] = None
    description: Optional[str] = None
    sku: Optional[str] = None
    barcode: Optional[str] = None
    price: Optional[float] = None
    cost: Optional[float] = None
    stock: Optional[float] = None
    min_stock: Optional[float] = None
    category: Optional[str] = None
    unit: Optional[ProductUnit] = None
    weight: Optional[float] = None
    volume: Optional[float] = None
    length: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None


class ProductOut(RecordOut, ProductCreate):
    pass


# =========================
# Sales
# =========================
class SaleItem(Record):
    product_id: int
    quantity: int = 1
    price: float = 0.0


class SaleCreate(Record):
    client_id: int | None = None
    items: List[SaleItem] = Field(default_factory=list)
    total: float = 0.0
    payment_method: PaymentMethod | None = None
    installments: int = 1
    status: SaleStatus = SaleStatus.COMPLETED


class SaleUpdate(PartialRecord):
    NOT_NULL = ("items", "total", "installments", "status")

    client_id: Optional[int] = None
    items: Optional[List[SaleItem]] = None
    total: Optional[float] = None
    payment_method: Optional[PaymentMethod] = None
    installments: Optional[int] = None
    status: Optional[SaleStatus] = None


class SaleOut(RecordOut, SaleCreate):
    pass


class CheckoutIn(BaseModel):
    """Carrinho enviado pelo PDV no momento de finalizar."""
    client_id: int | None = None
    payment_method: PaymentMethod | None = None
    installments: int = 1
    items: List[SaleItem] = Field(default_factory=list)


# =========================
# Financeiro
# =========================
class Recurrence(Record):
    type: RecurrenceType = RecurrenceType.NONE
    interval: int = 1
    end_date: Date | None = None


class TransactionCreate(Record):
    type: TransactionType
    description: str
    amount: float = 0.0
    date: Optional[Date] = None
    due_date: Optional[Date] = None
    status: TransactionStatus = TransactionStatus.PENDENTE
    category: str | None = None
    payment_method: PaymentMethod | None = None
    installments: int = 1
    recurrence: Recurrence | None = None
    notes: str | None = None


class TransactionUpdate(PartialRecord):
    NOT_NULL = ("type", "description", "amount", "installments", "status")

    type: Optional[TransactionType] = None
    description: Optional[str] = None
    amount: Optional[float] = None
    date: Optional[Date] = None
    due_date: Optional[Date] = None
    status: Optional[TransactionStatus] = None
    category: Optional[str] = None
    payment_method: Optional[PaymentMethod] = None
    installments: Optional[int] = None
    recurrence: Optional[Recurrence] = None
    notes: Optional[str] = None


class TransactionOut(RecordOut, TransactionCreate):
    pass


class TransactionStatusIn(BaseModel):
    status: TransactionStatus


# =========================
# Quotes
# =========================
class QuoteItem(Record):
    description: str = ""
    quantity: float = 1
    unit_price: float = 0.0
    type: QuoteItemType = QuoteItemType.CUSTOM
    total: float = 0.0
    product_id: int | None = None
    service_id: int | None = None


class QuoteCreate(Record):
    client_id: int | None = None
    items: List[QuoteItem] = Field(default_factory=list)
    total: float = 0.0
    status: QuoteStatus = QuoteStatus.DRAFT
    valid_until: Date | None = None
    notes: str | None = None


class QuoteUpdate(PartialRecord):
    NOT_NULL = ("items", "total", "status")

    client_id: Optional[int] = None
    items: Optional[List[QuoteItem]] = None
    total: Optional[float] = None
    status: Optional[QuoteStatus] = None
    valid_until: Optional[Date] = None
    notes: Optional[str] = None


class QuoteOut(RecordOut, QuoteCreate):
    pass


class QuoteStatusIn(BaseModel):
    status: QuoteStatus


# =========================
# Services
# =========================
class ServiceTypeCreate(Record):
    name: str
    description: str | None = None
    base_price: float = 0.0
    duration_minutes: int | None = None
    category: str | None = None
    active: bool = True


class ServiceTypeUpdate(PartialRecord):
    NOT_NULL = ("name", "base_price", "active")

    name: Optional[str] = None
    description: Optional[str] = None
    base_price: Optional[float] = None
    duration_minutes: Optional[int] = None
    category: Optional[str] = None
    active: Optional[bool] = None


class ServiceTypeOut(RecordOut, ServiceTypeCreate):
    pass


class ServiceCreate(Record):
    client_id: int | None = None
    service_type_id: int | None = None
    description: str | None = None
    scheduled_date: datetime | None = None
    price: float = 0.0
    status: ServiceStatus = ServiceStatus.AGENDADO
    notes: str | None = None


class ServiceUpdate(PartialRecord):
    NOT_NULL = ("price", "status")

    client_id: Optional[int] = None
    service_type_id: Optional[int] = None
    description: Optional[str] = None
    scheduled_date: Optional[datetime] = None
    price: Optional[float] = None
    status: Optional[ServiceStatus] = None
    notes: Optional[str] = None


class ServiceOut(RecordOut, ServiceCreate):
    pass


class ClientItem(Record):
    type: str | None = None
    brand: str | None = None
    model: str | None = None
    serial_number: str | None = None
    condition: str | None = None


class ServiceOrderProduct(Record):
    product_id: int | None = None
    quantity: int = 1
    price: float = 0.0


class ServiceOrderCreate(Record):
    number: str | None = None
    client_id: int | None = None
    service_type_id: int | None = None
    description: str | None = None
    status: ServiceOrderStatus = ServiceOrderStatus.PENDING
    scheduled_date: datetime | None = None
    price: float = 0.0
    client_item: ClientItem | None = None
    products: List[ServiceOrderProduct] = Field(default_factory=list)
    technician_notes: str | None = None


class ServiceOrderUpdate(PartialRecord):
    NOT_NULL = ("status", "price", "products")

    number: Optional[str] = None
    client_id: Optional[int] = None
    service_type_id: Optional[int] = None
    description: Optional[str] = None
    status: Optional[ServiceOrderStatus] = None
    scheduled_date: Optional[datetime] = None
    price: Optional[float] = None
    client_item: Optional[ClientItem] = None
    products: Optional[List[ServiceOrderProduct]] = None
    technician_notes: Optional[str] = None


class ServiceOrderOut(RecordOut, ServiceOrderCreate):
    pass
