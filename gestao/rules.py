"""
Regras de negócio compartilhadas pelas telas.

Toda tela que precisa saber se um lançamento está atrasado usa
``is_overdue``; nenhuma repete a comparação por conta própria.
"""
from datetime import date, datetime, timedelta

from .enums import QuoteStatus, TransactionDisplayState, TransactionStatus
from .formatting import to_datetime

DUE_SOON_DAYS = 5


def _is_date_only(value) -> bool:
    if isinstance(value, datetime):
        return False
    if isinstance(value, date):
        return True
    return isinstance(value, str) and len(value.strip()) == 10


def is_before_now(value, now: datetime) -> bool:
    """Datas sem hora comparam com o dia de hoje; com hora, com o instante."""
    if value in (None, ""):
        return False
    if _is_date_only(value):
        return to_datetime(value).date() < now.date()
    return to_datetime(value) < now


def within_next(value, now: datetime, days: int) -> bool:
    """Janela "a partir de agora" e estritamente antes de agora + ``days``."""
    if value in (None, ""):
        return False
    if _is_date_only(value):
        d = to_datetime(value).date()
        today = now.date()
        return today <= d < today + timedelta(days=days)
    dt = to_datetime(value)
    return now < dt < now + timedelta(days=days)


def _field(record, name):
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


def is_overdue(transaction, now: datetime | None = None) -> bool:
    """Pendente com vencimento já passado. Pago ou cancelado nunca está atrasado."""
    now = now or datetime.now()
    if _field(transaction, "status") != TransactionStatus.PENDENTE.value:
        return False
    return is_before_now(_field(transaction, "due_date"), now)


def transaction_display_state(
    transaction, now: datetime | None = None, due_soon_days: int = DUE_SOON_DAYS
) -> TransactionDisplayState:
    now = now or datetime.now()
    status = TransactionStatus(_field(transaction, "status"))
    if status is TransactionStatus.PAGO:
        return TransactionDisplayState.PAGO
    if status is TransactionStatus.CANCELADO:
        return TransactionDisplayState.CANCELADO
    if is_overdue(transaction, now):
        return TransactionDisplayState.ATRASADO
    if due_soon_days and within_next(_field(transaction, "due_date"), now, due_soon_days):
        return TransactionDisplayState.A_VENCER
    return TransactionDisplayState.PENDENTE


# =========================
# Totais
# =========================

def line_total(quantity, unit_price) -> float:
    return (quantity or 0) * (unit_price or 0)


def document_total(items, price_key: str = "price") -> float:
    """``sum(quantity * price)`` sem arredondamento; o valor gravado é a soma literal."""
    total = 0
    for item in items or []:
        total += line_total(_field(item, "quantity"), _field(item, price_key))
    return total


# =========================
# Orçamentos
# =========================

# Fluxo nominal. Não bloqueia nada: qualquer status pode ser definido a
# partir de qualquer outro pelo menu de ações.
QUOTE_TRANSITIONS = {
    QuoteStatus.DRAFT: {QuoteStatus.SENT, QuoteStatus.FINALIZED, QuoteStatus.CANCELED},
    QuoteStatus.SENT: {QuoteStatus.APPROVED, QuoteStatus.REJECTED, QuoteStatus.FINALIZED,
                       QuoteStatus.CANCELED},
    QuoteStatus.APPROVED: {QuoteStatus.CANCELED},
    QuoteStatus.REJECTED: {QuoteStatus.CANCELED},
    QuoteStatus.FINALIZED: {QuoteStatus.CANCELED},
    QuoteStatus.CANCELED: set(),
}


def is_nominal_quote_transition(current, new) -> bool:
    current, new = QuoteStatus(current), QuoteStatus(new)
    return current == new or new in QUOTE_TRANSITIONS[current]
