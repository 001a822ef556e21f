from datetime import date, datetime

import pytest

from gestao import display, rules
from gestao.enums import QuoteStatus, TransactionDisplayState as State

NOW = datetime(2024, 5, 10, 14, 0)


def tx(status, due):
    return {"status": status, "due_date": due}


def test_pending_with_past_due_date_is_overdue():
    assert rules.is_overdue(tx("pendente", date(2024, 5, 9)), NOW)
    assert rules.is_overdue(tx("pendente", "2024-05-01"), NOW)


def test_paid_or_cancelled_never_overdue():
    assert not rules.is_overdue(tx("pago", date(2020, 1, 1)), NOW)
    assert not rules.is_overdue(tx("cancelado", date(2020, 1, 1)), NOW)


def test_due_today_is_not_overdue_but_timestamp_in_past_is():
    assert not rules.is_overdue(tx("pendente", date(2024, 5, 10)), NOW)
    assert rules.is_overdue(tx("pendente", "2024-05-10T09:00:00"), NOW)
    assert not rules.is_overdue(tx("pendente", None), NOW)


@pytest.mark.parametrize(
    "status, due, expected",
    [
        ("pago", date(2024, 5, 1), State.PAGO),
        ("cancelado", date(2024, 5, 1), State.CANCELADO),
        ("pendente", date(2024, 5, 1), State.ATRASADO),
        ("pendente", date(2024, 5, 10), State.A_VENCER),
        ("pendente", date(2024, 5, 14), State.A_VENCER),
        ("pendente", date(2024, 5, 15), State.PENDENTE),
    ],
)
def test_transaction_display_state(status, due, expected):
    assert rules.transaction_display_state(tx(status, due), NOW) is expected


def test_overdue_badge_is_red():
    badge = display.transaction_badge(tx("pendente", date(2024, 5, 1)), NOW)
    assert badge == display.Badge("Atrasado", "red")
    assert display.badge_class(badge.color) == "bg-red-100 text-red-800"


def test_document_total_is_not_rounded():
    items = [{"quantity": 3, "price": 0.1}]
    assert rules.document_total(items) == 3 * 0.1
    assert rules.document_total([]) == 0


def test_quote_transitions_are_reported_not_enforced():
    assert rules.is_nominal_quote_transition("draft", "sent")
    assert rules.is_nominal_quote_transition(QuoteStatus.SENT, QuoteStatus.APPROVED)
    assert not rules.is_nominal_quote_transition("canceled", "draft")


def test_display_tables_cover_every_status():
    labels = display.labels()
    assert set(labels["quote_status"]) == {s.value for s in QuoteStatus}
    assert labels["transaction_state"]["atrasado"]["class"] == "bg-red-100 text-red-800"
