"""
Calendário: serviços, ordens de serviço e lançamentos financeiros numa
única linha do tempo de eventos.
"""
import calendar
from datetime import date, datetime

from .display import event_status_badge, event_type_color
from .enums import EventType, ServiceOrderStatus, ServiceStatus, TransactionStatus
from .formatting import to_date, to_datetime
from .listing import index_by_id, lookup_name
from .rules import within_next

UPCOMING_DAYS = 7
CELL_EVENTS = 3


def service_events(services, clients_index) -> list:
    return [
        {
            "id": s["id"],
            "title": s.get("description"),
            "date": s["scheduled_date"],
            "type": EventType.SERVICE.value,
            "status": s.get("status"),
            "client_id": s.get("client_id"),
            "client_name": lookup_name(clients_index, s.get("client_id")),
            "price": s.get("price"),
        }
        for s in services
        if s.get("scheduled_date")
    ]


def order_events(orders, clients_index) -> list:
    return [
        {
            "id": o["id"],
            "title": f"OS {o['number']}" if o.get("number") else o.get("description"),
            "date": o["scheduled_date"],
            "type": EventType.ORDER.value,
            "status": o.get("status"),
            "description": o.get("description"),
            "client_id": o.get("client_id"),
            "client_name": lookup_name(clients_index, o.get("client_id")),
            "price": o.get("price"),
        }
        for o in orders
        if o.get("scheduled_date")
    ]


def financial_events(transactions) -> list:
    return [
        {
            "id": t["id"],
            "title": t.get("description"),
            "date": t["due_date"],
            "type": t["type"],
            "status": t.get("status"),
            "amount": t.get("amount"),
            "category": t.get("category"),
        }
        for t in transactions
        if t.get("due_date")
    ]


def build_events(services, orders, transactions, clients, now: datetime | None = None) -> list:
    """Junta as três fontes no formato comum de evento, com cores já resolvidas."""
    clients_index = index_by_id(clients)
    events = (
        service_events(services, clients_index)
        + order_events(orders, clients_index)
        + financial_events(transactions)
    )
    for ev in events:
        badge = event_status_badge(ev, now)
        ev["status_label"] = badge.label
        ev["status_color"] = badge.color
        ev["color"] = event_type_color(ev, now)
    return events


def events_on(events, day) -> list:
    """Eventos do dia (igualdade de data de calendário)."""
    target = to_date(day)
    if target is None:
        return []
    return [ev for ev in events if to_date(ev.get("date")) == target]


def _is_open(ev) -> bool:
    t = ev["type"]
    if t in (EventType.RECEITA.value, EventType.DESPESA.value):
        return ev["status"] == TransactionStatus.PENDENTE.value
    if t == EventType.SERVICE.value:
        return ev["status"] == ServiceStatus.AGENDADO.value
    if t == EventType.ORDER.value:
        return ev["status"] in (ServiceOrderStatus.PENDING.value, ServiceOrderStatus.IN_PROGRESS.value)
    return False


def upcoming(events, now: datetime | None = None, days: int = UPCOMING_DAYS) -> list:
    """Pendências dos próximos ``days`` dias, da mais próxima para a mais distante."""
    now = now or datetime.now()
    found = [ev for ev in events if _is_open(ev) and within_next(ev.get("date"), now, days)]
    return sorted(found, key=lambda ev: to_datetime(ev["date"]))


def month_grid(events, year: int, month: int) -> dict:
    """
    Grade do mês com semana começando no domingo: células vazias antes do
    dia 1 e depois do último dia, até 3 eventos por dia e o excedente.
    """
    last_day = calendar.monthrange(year, month)[1]
    first = date(year, month, 1)
    last = date(year, month, last_day)
    # weekday(): segunda=0; no calendário, domingo=0
    leading = (first.weekday() + 1) % 7
    trailing = 6 - (last.weekday() + 1) % 7

    by_day = {}
    for ev in events:
        d = to_date(ev.get("date"))
        if d and d.year == year and d.month == month:
            by_day.setdefault(d, []).append(ev)

    days = []
    for n in range(1, last_day + 1):
        d = date(year, month, n)
        day_events = by_day.get(d, [])
        days.append({
            "date": d,
            "events": day_events[:CELL_EVENTS],
            "more": max(0, len(day_events) - CELL_EVENTS),
        })
    return {"year": year, "month": month, "leading_blanks": leading,
            "trailing_blanks": trailing, "days": days}
