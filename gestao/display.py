"""
Tabelas de rótulo/cor por tipo de evento e status.

Cada tabela cobre todos os membros do enum correspondente; a verificação
roda na importação do módulo, então um status novo sem rótulo quebra na
subida da aplicação e não vira um "status desconhecido" na tela.
"""
from collections import namedtuple
from datetime import datetime

from .enums import (
    EventType,
    PaymentMethod,
    QuoteStatus,
    SaleStatus,
    ServiceOrderStatus,
    ServiceStatus,
    TransactionDisplayState,
    TransactionType,
    UserRole,
)
from .rules import transaction_display_state

Badge = namedtuple("Badge", "label color")


def badge_class(color: str) -> str:
    return f"bg-{color}-100 text-{color}-800"


SERVICE_STATUS = {
    ServiceStatus.AGENDADO: Badge("Agendado", "blue"),
    ServiceStatus.EM_ANDAMENTO: Badge("Em andamento", "yellow"),
    ServiceStatus.CONCLUIDO: Badge("Concluído", "green"),
    ServiceStatus.CANCELADO: Badge("Cancelado", "red"),
}

SERVICE_ORDER_STATUS = {
    ServiceOrderStatus.PENDING: Badge("Pendente", "blue"),
    ServiceOrderStatus.IN_PROGRESS: Badge("Em andamento", "yellow"),
    ServiceOrderStatus.COMPLETED: Badge("Concluído", "green"),
    ServiceOrderStatus.CANCELLED: Badge("Cancelado", "red"),
}

TRANSACTION_STATE = {
    TransactionDisplayState.PENDENTE: Badge("Pendente", "blue"),
    TransactionDisplayState.A_VENCER: Badge("A vencer", "yellow"),
    TransactionDisplayState.ATRASADO: Badge("Atrasado", "red"),
    TransactionDisplayState.PAGO: Badge("Pago", "green"),
    TransactionDisplayState.CANCELADO: Badge("Cancelado", "gray"),
}

TRANSACTION_TYPE = {
    TransactionType.RECEITA: Badge("Receita", "green"),
    TransactionType.DESPESA: Badge("Despesa", "red"),
}

QUOTE_STATUS = {
    QuoteStatus.DRAFT: Badge("Rascunho", "gray"),
    QuoteStatus.SENT: Badge("Enviado", "slate"),
    QuoteStatus.APPROVED: Badge("Aprovado", "green"),
    QuoteStatus.REJECTED: Badge("Rejeitado", "red"),
    QuoteStatus.FINALIZED: Badge("Finalizado", "blue"),
    QuoteStatus.CANCELED: Badge("Cancelado", "red"),
}

SALE_STATUS = {
    SaleStatus.PENDING: Badge("Pendente", "yellow"),
    SaleStatus.COMPLETED: Badge("Concluída", "green"),
    SaleStatus.CANCELLED: Badge("Cancelada", "red"),
}

EVENT_TYPE = {
    EventType.SERVICE: Badge("Serviço", "blue"),
    EventType.ORDER: Badge("Ordem de Serviço", "purple"),
    EventType.RECEITA: Badge("Receita", "green"),
    EventType.DESPESA: Badge("Despesa", "red"),
}

USER_ROLE = {
    UserRole.ADMINISTRADOR: Badge("Administrador", "blue"),
    UserRole.GERENTE: Badge("Gerente", "purple"),
    UserRole.VENDEDOR: Badge("Vendedor", "green"),
    UserRole.ADMINISTRATIVO: Badge("Administrativo", "yellow"),
    UserRole.USER: Badge("Usuário", "gray"),
}

PAYMENT_METHOD = {
    PaymentMethod.DINHEIRO: "Dinheiro",
    PaymentMethod.CARTAO_CREDITO: "Cartão de Crédito",
    PaymentMethod.CARTAO_DEBITO: "Cartão de Débito",
    PaymentMethod.PIX: "PIX",
    PaymentMethod.BOLETO: "Boleto",
    PaymentMethod.TRANSFERENCIA: "Transferência",
    PaymentMethod.CHEQUE: "Cheque",
    PaymentMethod.EMPRESTIMO: "Empréstimo",
}


def _check_exhaustive(table, enum_cls):
    missing = set(enum_cls) - set(table)
    if missing:
        raise RuntimeError(
            f"Tabela de exibição incompleta para {enum_cls.__name__}: "
            + ", ".join(sorted(m.value for m in missing))
        )


for _table, _enum in (
    (SERVICE_STATUS, ServiceStatus),
    (SERVICE_ORDER_STATUS, ServiceOrderStatus),
    (TRANSACTION_STATE, TransactionDisplayState),
    (TRANSACTION_TYPE, TransactionType),
    (QUOTE_STATUS, QuoteStatus),
    (SALE_STATUS, SaleStatus),
    (EVENT_TYPE, EventType),
    (USER_ROLE, UserRole),
    (PAYMENT_METHOD, PaymentMethod),
):
    _check_exhaustive(_table, _enum)


def transaction_badge(transaction, now: datetime | None = None) -> Badge:
    return TRANSACTION_STATE[transaction_display_state(transaction, now)]


def event_status_badge(event: dict, now: datetime | None = None) -> Badge:
    """Rótulo/cor do status de um evento do calendário."""
    event_type = EventType(event["type"])
    if event_type is EventType.SERVICE:
        return SERVICE_STATUS[ServiceStatus(event["status"])]
    if event_type is EventType.ORDER:
        return SERVICE_ORDER_STATUS[ServiceOrderStatus(event["status"])]
    return transaction_badge({"status": event["status"], "due_date": event["date"]}, now)


def event_type_color(event: dict, now: datetime | None = None) -> str:
    """Cor da célula no calendário: por tipo, com lançamento atrasado em vermelho."""
    event_type = EventType(event["type"])
    if event_type in (EventType.RECEITA, EventType.DESPESA):
        state = transaction_display_state(
            {"status": event["status"], "due_date": event["date"]}, now, due_soon_days=0
        )
        if state is TransactionDisplayState.ATRASADO:
            return TRANSACTION_STATE[state].color
    return EVENT_TYPE[event_type].color


def labels() -> dict:
    """Todas as tabelas de exibição, no formato consumido pela interface."""
    def _badges(table):
        return {
            k.value: {"label": b.label, "color": b.color, "class": badge_class(b.color)}
            for k, b in table.items()
        }

    return {
        "service_status": _badges(SERVICE_STATUS),
        "service_order_status": _badges(SERVICE_ORDER_STATUS),
        "transaction_state": _badges(TRANSACTION_STATE),
        "transaction_type": _badges(TRANSACTION_TYPE),
        "quote_status": _badges(QUOTE_STATUS),
        "sale_status": _badges(SALE_STATUS),
        "event_type": _badges(EVENT_TYPE),
        "user_role": _badges(USER_ROLE),
        "payment_method": {k.value: v for k, v in PAYMENT_METHOD.items()},
    }
