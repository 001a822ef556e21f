"""
Financeiro: resumo, gráfico mensal, filtros da listagem, pendências e
marcações do calendário de lançamentos.
"""
import calendar
from datetime import date, datetime, timedelta

from dateutil.relativedelta import relativedelta

from .display import TRANSACTION_STATE
from .enums import TransactionStatus, TransactionType
from .formatting import month_key, to_date
from .rules import DUE_SOON_DAYS, is_overdue, transaction_display_state, within_next

CHART_MONTHS = 6


def _total(transactions, tx_type, status=None) -> float:
    return sum(
        t.get("amount") or 0
        for t in transactions
        if t.get("type") == tx_type.value and (status is None or t.get("status") == status.value)
    )


def summary(transactions) -> dict:
    revenue = _total(transactions, TransactionType.RECEITA)
    expenses = _total(transactions, TransactionType.DESPESA)
    return {
        "total_revenue": revenue,
        "total_expenses": expenses,
        "balance": revenue - expenses,
        "pending_revenue": _total(transactions, TransactionType.RECEITA, TransactionStatus.PENDENTE),
        "pending_expenses": _total(transactions, TransactionType.DESPESA, TransactionStatus.PENDENTE),
    }


def monthly_chart(transactions, today: date | None = None, months: int = CHART_MONTHS) -> list:
    """Últimos ``months`` meses (rótulo ``MM``) pela data do lançamento."""
    today = today or date.today()
    keys = [(today - relativedelta(months=i)).strftime("%Y-%m") for i in range(months - 1, -1, -1)]
    out = []
    for key in keys:
        in_month = [t for t in transactions if month_key(t.get("date")) == key]
        out.append({
            "month": key[5:],
            "receitas": _total(in_month, TransactionType.RECEITA),
            "despesas": _total(in_month, TransactionType.DESPESA),
        })
    return out


# =========================
# Listagem
# =========================

def _reference_date(t):
    return to_date(t.get("due_date") or t.get("date"))


def date_bounds(date_range: str, today: date, start=None, end=None):
    """Intervalo fechado do filtro de período; ``None`` quando não há filtro."""
    if date_range == "month":
        last = calendar.monthrange(today.year, today.month)[1]
        return today.replace(day=1), today.replace(day=last)
    if date_range == "week":
        # semana de domingo a sábado
        sunday = today - timedelta(days=(today.weekday() + 1) % 7)
        return sunday, sunday + timedelta(days=6)
    if date_range == "custom" and start and end:
        return to_date(start), to_date(end)
    return None


def apply_filters(transactions, type="all", status="all", category="all",
                  date_range="all", start=None, end=None, today: date | None = None) -> list:
    today = today or date.today()
    out = list(transactions)
    if type != "all":
        out = [t for t in out if t.get("type") == type]
    if status != "all":
        out = [t for t in out if t.get("status") == status]
    if category != "all":
        out = [t for t in out if t.get("category") == category]
    bounds = date_bounds(date_range, today, start, end)
    if bounds:
        lo, hi = bounds
        out = [t for t in out if _reference_date(t) and lo <= _reference_date(t) <= hi]
    return out


def categories(transactions) -> list:
    seen = []
    for t in transactions:
        c = t.get("category")
        if c and c not in seen:
            seen.append(c)
    return seen


def pending_items(transactions, now: datetime | None = None, days: int = DUE_SOON_DAYS) -> list:
    """Pendentes já vencidos ou vencendo em até ``days`` dias, por vencimento."""
    now = now or datetime.now()
    found = [
        t for t in transactions
        if t.get("status") == TransactionStatus.PENDENTE.value
        and t.get("due_date")
        and (is_overdue(t, now) or within_next(t["due_date"], now, days))
    ]
    return sorted(found, key=lambda t: to_date(t["due_date"]))


def with_display_state(transactions, now: datetime | None = None) -> list:
    out = []
    for t in transactions:
        state = transaction_display_state(t, now)
        badge = TRANSACTION_STATE[state]
        out.append({**t, "display_state": state.value, "status_label": badge.label,
                    "status_color": badge.color})
    return out


# =========================
# Calendário de lançamentos
# =========================

def transactions_on(transactions, day) -> list:
    target = to_date(day)
    return [t for t in transactions if to_date(t.get("date")) == target]


def month_days(transactions, year: int, month: int, now: datetime | None = None) -> list:
    now = now or datetime.now()
    last = calendar.monthrange(year, month)[1]
    days = []
    for n in range(1, last + 1):
        d = date(year, month, n)
        day_tx = transactions_on(transactions, d)
        total = 0
        for t in day_tx:
            if t.get("type") == TransactionType.RECEITA.value:
                total += t.get("amount") or 0
            else:
                total -= t.get("amount") or 0
        days.append({
            "date": d,
            "has_revenue": any(t.get("type") == TransactionType.RECEITA.value for t in day_tx),
            "has_expense": any(t.get("type") == TransactionType.DESPESA.value for t in day_tx),
            "has_overdue": any(is_overdue(t, now) for t in day_tx),
            "total": total,
        })
    return days


def day_markers(days) -> dict:
    """Dias só com receita, só com despesa, com ambos e com atraso."""
    return {
        "revenue": [d["date"] for d in days if d["has_revenue"] and not d["has_expense"]],
        "expense": [d["date"] for d in days if d["has_expense"] and not d["has_revenue"]],
        "both": [d["date"] for d in days if d["has_revenue"] and d["has_expense"]],
        "overdue": [d["date"] for d in days if d["has_overdue"]],
    }
