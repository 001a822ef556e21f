from datetime import date, timedelta

from sqlalchemy.exc import OperationalError

from gestao import crud


def _create(client, headers, entity, payload):
    r = client.post(f"/api/{entity}", json=payload, headers=headers)
    assert r.status_code == 200, r.text
    return r.json()


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok"}


def test_first_user_bootstraps_as_admin(client, admin_headers):
    me = client.get("/api/auth/me", headers=admin_headers).json()
    assert me["role"] == "administrador"

    # depois do primeiro, registro anônimo é recusado
    r = client.post("/api/auth/register", json={"username": "x", "password": "y"})
    assert r.status_code == 403


def test_requires_authentication(client):
    assert client.get("/api/clients").status_code == 401


def test_create_list_and_sort(client, admin_headers):
    _create(client, admin_headers, "clients", {"name": "Bruno", "email": "bruno@ex.com"})
    _create(client, admin_headers, "clients", {"name": "Ana", "document": "123"})
    _create(client, admin_headers, "clients", {"name": "Carla"})

    default = client.get("/api/clients", headers=admin_headers).json()
    assert [c["name"] for c in default] == ["Bruno", "Ana", "Carla"]

    desc = client.get("/api/clients", params={"sort": "-name"}, headers=admin_headers).json()
    assert [c["name"] for c in desc] == ["Carla", "Bruno", "Ana"]

    found = client.get("/api/clients", params={"q": "BRUNO"}, headers=admin_headers).json()
    assert [c["name"] for c in found] == ["Bruno"]


def test_unknown_sort_field_is_400(client, admin_headers):
    r = client.get("/api/clients", params={"sort": "-nope"}, headers=admin_headers)
    assert r.status_code == 400


def test_update_missing_record_is_404(client, admin_headers):
    r = client.put("/api/clients/999", json={"name": "X"}, headers=admin_headers)
    assert r.status_code == 404


def test_update_changes_only_sent_fields(client, admin_headers):
    c = _create(client, admin_headers, "clients", {"name": "Ana", "phone": "1111"})
    r = client.put(f"/api/clients/{c['id']}", json={"phone": "2222"}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["name"] == "Ana"
    assert r.json()["phone"] == "2222"


def test_invalid_payload_is_422(client, admin_headers):
    r = client.post("/api/transactions", json={"description": "sem tipo"}, headers=admin_headers)
    assert r.status_code == 422


def test_missing_client_renders_fallback_name(client, admin_headers):
    _create(client, admin_headers, "quotes", {"client_id": 42, "items": [], "total": 0})
    quotes = client.get("/api/quotes", headers=admin_headers).json()
    assert quotes[0]["client_name"] == "Cliente não encontrado"


def test_role_enforced_on_server(client, user_headers):
    vendedor = user_headers("vendedor")
    r = client.post("/api/transactions", json={"type": "receita", "description": "x"}, headers=vendedor)
    assert r.status_code == 403
    assert r.json()["detail"] == "Sem permissão para acessar esta seção."
    assert client.get("/api/financial/summary", headers=vendedor).status_code == 403
    assert client.get("/api/users", headers=vendedor).status_code == 403

    # leitura das listagens continua liberada
    assert client.get("/api/transactions", headers=vendedor).status_code == 200


def test_session_lists_allowed_pages(client, user_headers):
    headers = user_headers("administrativo")
    ctx = client.get("/api/session", headers=headers).json()
    pages = [n["page"] for n in ctx["nav"]]
    assert "Financeiro" in pages
    assert "PDV" not in pages
    assert ctx["nav"][0]["url"] == "/Dashboard"


def test_update_my_data_ignores_read_only_fields(client, admin_headers):
    r = client.patch(
        "/api/auth/me",
        json={"theme": "escuro", "phone": "9999", "role": "user", "full_name": "Outro"},
        headers=admin_headers,
    )
    assert r.status_code == 200
    body = r.json()
    assert body["theme"] == "escuro"
    assert body["phone"] == "9999"
    assert body["role"] == "administrador"
    assert body["full_name"] == "Admin"


def test_logout_revokes_token(client, admin_headers):
    assert client.post("/api/auth/logout", headers=admin_headers).status_code == 200
    assert client.get("/api/auth/me", headers=admin_headers).status_code == 401


def test_checkout_creates_sale_and_decrements_stock(client, admin_headers):
    cli = _create(client, admin_headers, "clients", {"name": "Ana"})
    p1 = _create(client, admin_headers, "products", {"name": "Café", "price": 10.5, "stock": 10, "barcode": "789"})
    p2 = _create(client, admin_headers, "products", {"name": "Açúcar", "price": 5.0, "stock": 4})

    r = client.post("/api/pos/checkout", headers=admin_headers, json={
        "client_id": cli["id"],
        "payment_method": "cartao_credito",
        "installments": 3,
        "items": [{"product_id": p1["id"], "quantity": 2}, {"product_id": p2["id"], "quantity": 1}],
    })
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["message"] == "Venda Realizada!"
    assert body["sale"]["total"] == 26.0
    assert body["sale"]["installments"] == 3
    assert body["sale"]["status"] == "completed"
    assert body["total_display"] == "R$ 26,00"

    stock = {p["id"]: p["stock"] for p in client.get("/api/products", headers=admin_headers).json()}
    assert stock[p1["id"]] == 8
    assert stock[p2["id"]] == 3

    sales = client.get("/api/sales", headers=admin_headers).json()
    assert len(sales) == 1
    assert sales[0]["client_name"] == "Ana"
    assert sales[0]["items"][0]["name"] == "Café"


def test_checkout_blocked_creates_nothing(client, admin_headers):
    p = _create(client, admin_headers, "products", {"name": "Café", "price": 10.5})
    r = client.post("/api/pos/checkout", headers=admin_headers, json={
        "payment_method": "dinheiro",
        "items": [{"product_id": p["id"], "quantity": 1}],
    })
    assert r.status_code == 422
    assert r.json()["detail"] == "Por favor, preencha todos os campos necessários"
    assert client.get("/api/sales", headers=admin_headers).json() == []


def test_pos_lookup(client, admin_headers):
    _create(client, admin_headers, "products", {"name": "Café", "price": 10.5, "barcode": "789", "sku": "CAF"})
    assert client.get("/api/pos/lookup", params={"code": "CAF"}, headers=admin_headers).json()["name"] == "Café"
    r = client.get("/api/pos/lookup", params={"code": "000"}, headers=admin_headers)
    assert r.status_code == 404
    assert r.json()["detail"] == "Produto não encontrado!"


def test_status_changes(client, admin_headers):
    q = _create(client, admin_headers, "quotes", {"items": [], "total": 0})
    r = client.post(f"/api/quotes/{q['id']}/status", json={"status": "approved"}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["record"]["status"] == "approved"
    assert r.json()["nominal"] is False

    yesterday = (date.today() - timedelta(days=1)).isoformat()
    t = _create(client, admin_headers, "transactions", {
        "type": "despesa", "description": "Luz", "amount": 100, "due_date": yesterday,
    })
    listed = client.get("/api/transactions", headers=admin_headers).json()
    assert listed[0]["display_state"] == "atrasado"

    r = client.post(f"/api/transactions/{t['id']}/status", json={"status": "pago"}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["display_state"] == "pago"


def test_print_placeholders(client, admin_headers):
    q = _create(client, admin_headers, "quotes", {"items": [], "total": 0})
    r = client.post(f"/api/quotes/{q['id']}/pdf", headers=admin_headers)
    assert r.json()["message"] == f"Salvando orçamento {q['id']} como PDF..."
    assert client.post(f"/api/clients/{q['id']}/print", headers=admin_headers).status_code == 404


def test_aggregation_routes(client, admin_headers):
    _create(client, admin_headers, "clients", {"name": "Ana", "birth_date": date.today().isoformat()})
    assert client.get("/api/dashboard", headers=admin_headers).status_code == 200
    cal = client.get("/api/calendar", headers=admin_headers).json()
    assert len(cal["month"]["days"]) >= 28
    fin = client.get("/api/financial/transactions", params={"date_range": "month"}, headers=admin_headers)
    assert fin.status_code == 200
    birthdays = client.get("/api/clients/birthdays", headers=admin_headers).json()
    assert birthdays[0]["days_until"] == 0


def test_sales_csv(client, admin_headers):
    r = client.get("/api/reports/sales.csv", headers=admin_headers)
    assert r.status_code == 200
    assert r.text.splitlines()[0] == "id,data,cliente,pagamento,parcelas,total"


def test_null_on_required_field_is_rejected(client, admin_headers):
    t = _create(client, admin_headers, "transactions", {
        "type": "despesa", "description": "Aluguel", "amount": 900, "due_date": date.today().isoformat(),
    })
    for field in ("status", "type", "amount"):
        r = client.put(f"/api/transactions/{t['id']}", json={field: None}, headers=admin_headers)
        assert r.status_code == 422, field

    # o registro continua íntegro e as telas que agregam transações seguem funcionando
    listed = client.get("/api/transactions", headers=admin_headers)
    assert listed.status_code == 200
    assert listed.json()[0]["status"] == "pendente"
    for url in ("/api/calendar", "/api/dashboard", "/api/financial/transactions"):
        assert client.get(url, headers=admin_headers).status_code == 200, url

    # campo opcional ainda pode ser limpo
    r = client.put(f"/api/transactions/{t['id']}", json={"category": None}, headers=admin_headers)
    assert r.status_code == 200


def test_null_theme_is_rejected(client, admin_headers):
    r = client.patch("/api/auth/me", json={"theme": None}, headers=admin_headers)
    assert r.status_code == 422
    assert client.get("/api/auth/me", headers=admin_headers).json()["theme"] == "claro"


def test_register_first_user_with_empty_password_is_400(client):
    r = client.post("/api/auth/register", json={"username": "a", "password": ""})
    assert r.status_code == 400
    assert r.json()["detail"] == "Senha obrigatória"


def test_duplicate_user_is_409(client, admin_headers):
    r = client.post("/api/users", json={"username": "admin", "password": "z"}, headers=admin_headers)
    assert r.status_code == 409
    r = client.post("/api/users", json={"username": "novo", "password": ""}, headers=admin_headers)
    assert r.status_code == 400


def test_checkout_stock_failure_keeps_no_sale(client, admin_headers, monkeypatch):
    cli = _create(client, admin_headers, "clients", {"name": "Ana"})
    p = _create(client, admin_headers, "products", {"name": "Café", "price": 10.5, "stock": 10})
    decrease = crud.decrease_stock_for_items

    def failing_decrease(db, items, commit=True):
        decrease(db, items, commit=False)
        raise OperationalError("UPDATE products", {}, Exception("disk I/O error"))

    monkeypatch.setattr(crud, "decrease_stock_for_items", failing_decrease)
    r = client.post("/api/pos/checkout", headers=admin_headers, json={
        "client_id": cli["id"],
        "payment_method": "dinheiro",
        "items": [{"product_id": p["id"], "quantity": 2}],
    })
    assert r.status_code == 500
    assert r.json()["detail"] == "Erro ao finalizar venda"

    assert client.get("/api/sales", headers=admin_headers).json() == []
    stock = client.get(f"/api/products/{p['id']}", headers=admin_headers).json()["stock"]
    assert stock == 10
