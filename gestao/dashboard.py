"""Indicadores do painel inicial, calculados sobre as listas já carregadas."""
from datetime import datetime

from dateutil.relativedelta import relativedelta

from .enums import ServiceStatus, TransactionStatus, TransactionType
from .formatting import month_key, month_label
from .rules import is_overdue, within_next

PENDING_WINDOW_DAYS = 7
TREND_MONTHS = 6
RANKING_SIZE = 5


def _sum_amount(transactions, tx_type: TransactionType) -> float:
    return sum(t.get("amount") or 0 for t in transactions if t.get("type") == tx_type.value)


def stats(sales, clients, transactions, services) -> dict:
    return {
        "total_sales": len(sales),
        "total_clients": len(clients),
        "revenue": _sum_amount(transactions, TransactionType.RECEITA),
        "expenses": _sum_amount(transactions, TransactionType.DESPESA),
        "service_sales": sum(1 for s in services if s.get("status") == ServiceStatus.CONCLUIDO.value),
        "product_sales": len(sales),
        "open_orders": sum(
            1 for s in services
            if s.get("status") not in (ServiceStatus.CONCLUIDO.value, ServiceStatus.CANCELADO.value)
        ),
    }


def pending_financial(transactions, now: datetime | None = None,
                      days: int = PENDING_WINDOW_DAYS) -> list:
    """Lançamentos pendentes atrasados ou vencendo nos próximos ``days`` dias."""
    now = now or datetime.now()
    out = []
    for t in transactions:
        if not t.get("due_date") or t.get("status") != TransactionStatus.PENDENTE.value:
            continue
        overdue = is_overdue(t, now)
        if overdue or within_next(t["due_date"], now, days):
            out.append({**t, "overdue": overdue})
    return out


def last_month_keys(now: datetime, count: int = TREND_MONTHS) -> list:
    return [(now - relativedelta(months=i)).strftime("%Y-%m") for i in range(count - 1, -1, -1)]


def sales_trend(sales, now: datetime | None = None, months: int = TREND_MONTHS) -> list:
    """Total vendido por mês nos últimos ``months`` meses (incluindo o atual)."""
    now = now or datetime.now()
    keys = last_month_keys(now, months)
    by_month = dict.fromkeys(keys, 0)
    for sale in sales:
        key = month_key(sale.get("created_date"))
        if key in by_month:
            by_month[key] += sale.get("total") or 0
    return [{"month": month_label(k), "key": k, "vendas": by_month[k]} for k in keys]


def _ranking(rows) -> dict:
    ordered = sorted(rows, key=lambda r: r["count"], reverse=True)
    return {
        "top": ordered[:RANKING_SIZE],
        "bottom": list(reversed(ordered))[:RANKING_SIZE],
    }


def top_products(sales, products) -> dict:
    sold = {}
    for sale in sales:
        for item in sale.get("items") or []:
            pid = item.get("product_id")
            if not pid:
                continue
            acc = sold.setdefault(pid, {"count": 0, "total": 0})
            acc["count"] += item.get("quantity") or 0
            acc["total"] += (item.get("price") or 0) * (item.get("quantity") or 0)
    rows = [
        {
            "id": p["id"],
            "name": p.get("name"),
            "count": sold.get(p["id"], {}).get("count", 0),
            "total": sold.get(p["id"], {}).get("total", 0),
        }
        for p in products
    ]
    return _ranking(rows)


def top_services(services, service_types) -> dict:
    done = {}
    for s in services:
        st_id = s.get("service_type_id")
        if not st_id:
            continue
        acc = done.setdefault(st_id, {"count": 0, "total": 0})
        acc["count"] += 1
        acc["total"] += s.get("price") or 0
    rows = [
        {
            "id": st["id"],
            "name": st.get("name"),
            "count": done.get(st["id"], {}).get("count", 0),
            "total": done.get(st["id"], {}).get("total", 0),
        }
        for st in service_types
    ]
    return _ranking(rows)


def financial_chart(transactions, months: int = TREND_MONTHS) -> list:
    """Receitas, despesas e lucro dos últimos ``months`` meses que têm lançamentos."""
    grouped = {}
    for t in transactions:
        key = month_key(t.get("date"))
        if not key:
            continue
        acc = grouped.setdefault(key, {"receitas": 0, "despesas": 0})
        if t.get("type") == TransactionType.RECEITA.value:
            acc["receitas"] += t.get("amount") or 0
        else:
            acc["despesas"] += t.get("amount") or 0
    return [
        {
            "month": month_label(k),
            "key": k,
            "receitas": grouped[k]["receitas"],
            "despesas": grouped[k]["despesas"],
            "lucro": grouped[k]["receitas"] - grouped[k]["despesas"],
        }
        for k in sorted(grouped)[-months:]
    ]
