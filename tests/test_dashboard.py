from datetime import date, datetime

from gestao import dashboard

NOW = datetime(2024, 5, 10, 14, 0)

SALES = [
    {"id": 1, "total": 26.0, "created_date": datetime(2024, 5, 2, 10, 0),
     "items": [{"product_id": 1, "quantity": 2, "price": 10.5}, {"product_id": 2, "quantity": 1, "price": 5.0}]},
    {"id": 2, "total": 15.0, "created_date": datetime(2024, 3, 15, 10, 0),
     "items": [{"product_id": 2, "quantity": 3, "price": 5.0}]},
    {"id": 3, "total": 99.0, "created_date": datetime(2023, 1, 1, 10, 0), "items": []},
]

PRODUCTS = [{"id": 1, "name": "Café"}, {"id": 2, "name": "Açúcar"}, {"id": 3, "name": "Sal"}]

TRANSACTIONS = [
    {"id": 1, "type": "receita", "amount": 500.0, "status": "pago", "date": date(2024, 5, 1), "due_date": None},
    {"id": 2, "type": "despesa", "amount": 200.0, "status": "pendente", "date": date(2024, 4, 20),
     "due_date": date(2024, 5, 8)},
    {"id": 3, "type": "despesa", "amount": 50.0, "status": "pendente", "date": date(2024, 5, 5),
     "due_date": date(2024, 5, 16)},
    {"id": 4, "type": "receita", "amount": 80.0, "status": "pendente", "date": date(2024, 5, 5),
     "due_date": date(2024, 5, 30)},
]

SERVICES = [
    {"id": 1, "status": "concluido", "service_type_id": 1, "price": 100.0},
    {"id": 2, "status": "agendado", "service_type_id": 1, "price": 120.0},
    {"id": 3, "status": "cancelado", "service_type_id": None, "price": 0.0},
]


def test_stats():
    s = dashboard.stats(SALES, [{"id": 1}], TRANSACTIONS, SERVICES)
    assert s["total_sales"] == 3
    assert s["total_clients"] == 1
    assert s["revenue"] == 580.0
    assert s["expenses"] == 250.0
    assert s["service_sales"] == 1
    assert s["open_orders"] == 1


def test_pending_financial_overdue_or_due_within_a_week():
    found = dashboard.pending_financial(TRANSACTIONS, NOW)
    assert [(t["id"], t["overdue"]) for t in found] == [(2, True), (3, False)]


def test_sales_trend_last_six_months():
    trend = dashboard.sales_trend(SALES, NOW)
    assert [p["month"] for p in trend] == ["dez", "jan", "fev", "mar", "abr", "mai"]
    assert trend[-1]["vendas"] == 26.0
    assert trend[3]["vendas"] == 15.0
    assert sum(p["vendas"] for p in trend) == 41.0


def test_top_and_bottom_products():
    ranking = dashboard.top_products(SALES, PRODUCTS)
    assert [p["name"] for p in ranking["top"]] == ["Açúcar", "Café", "Sal"]
    assert ranking["top"][0]["count"] == 4
    assert ranking["top"][0]["total"] == 20.0
    assert ranking["bottom"][0]["name"] == "Sal"


def test_top_services_by_count():
    ranking = dashboard.top_services(SERVICES, [{"id": 1, "name": "Instalação"}, {"id": 2, "name": "Pintura"}])
    assert ranking["top"][0] == {"id": 1, "name": "Instalação", "count": 2, "total": 220.0}
    assert ranking["bottom"][0]["name"] == "Pintura"


def test_financial_chart_months_with_data():
    chart = dashboard.financial_chart(TRANSACTIONS)
    assert [c["key"] for c in chart] == ["2024-04", "2024-05"]
    may = chart[-1]
    assert may["receitas"] == 580.0
    assert may["despesas"] == 50.0
    assert may["lucro"] == 530.0
