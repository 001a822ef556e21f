from enum import Enum


# =========================
# Financeiro
# =========================
class TransactionType(str, Enum):
    RECEITA = "receita"
    DESPESA = "despesa"


class TransactionStatus(str, Enum):
    PENDENTE = "pendente"
    PAGO = "pago"
    CANCELADO = "cancelado"


class TransactionDisplayState(str, Enum):
    """Estado exibido; ``atrasado`` e ``a_vencer`` são derivados, nunca gravados."""
    PENDENTE = "pendente"
    A_VENCER = "a_vencer"
    ATRASADO = "atrasado"
    PAGO = "pago"
    CANCELADO = "cancelado"


class RecurrenceType(str, Enum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class PaymentMethod(str, Enum):
    DINHEIRO = "dinheiro"
    CARTAO_CREDITO = "cartao_credito"
    CARTAO_DEBITO = "cartao_debito"
    PIX = "pix"
    BOLETO = "boleto"
    TRANSFERENCIA = "transferencia"
    CHEQUE = "cheque"
    EMPRESTIMO = "emprestimo"


# formas aceitas no PDV
POS_PAYMENT_METHODS = (
    PaymentMethod.DINHEIRO,
    PaymentMethod.CARTAO_CREDITO,
    PaymentMethod.CARTAO_DEBITO,
    PaymentMethod.PIX,
)


# =========================
# Vendas / Orçamentos
# =========================
class SaleStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class QuoteStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    APPROVED = "approved"
    REJECTED = "rejected"
    FINALIZED = "finalized"
    CANCELED = "canceled"


class QuoteItemType(str, Enum):
    PRODUCT = "product"
    SERVICE = "service"
    CUSTOM = "custom"


# =========================
# Serviços
# =========================
class ServiceStatus(str, Enum):
    AGENDADO = "agendado"
    EM_ANDAMENTO = "em_andamento"
    CONCLUIDO = "concluido"
    CANCELADO = "cancelado"


class ServiceOrderStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class EventType(str, Enum):
    SERVICE = "service"
    ORDER = "order"
    RECEITA = "receita"
    DESPESA = "despesa"


# =========================
# Cadastros
# =========================
class ClientType(str, Enum):
    INDIVIDUAL = "individual"
    BUSINESS = "business"


class ProductUnit(str, Enum):
    UNIDADE = "unidade"
    KG = "kg"
    LITRO = "litro"
    METRO = "metro"
    CAIXA = "caixa"
    PAR = "par"


class UserRole(str, Enum):
    ADMINISTRADOR = "administrador"
    GERENTE = "gerente"
    VENDEDOR = "vendedor"
    ADMINISTRATIVO = "administrativo"
    USER = "user"


class Theme(str, Enum):
    CLARO = "claro"
    ESCURO = "escuro"
