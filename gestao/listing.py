"""Ajudantes das telas de listagem: mapas id -> registro e busca textual em memória."""

CLIENT_NOT_FOUND = "Cliente não encontrado"
PRODUCT_NOT_FOUND = "Produto não encontrado"
SERVICE_TYPE_NOT_FOUND = "Serviço não encontrado"


def index_by_id(records) -> dict:
    return {r["id"]: r for r in records or [] if r.get("id") is not None}


def lookup_name(index: dict, record_id, fallback: str = CLIENT_NOT_FOUND) -> str:
    rec = index.get(record_id)
    if not rec or not rec.get("name"):
        return fallback
    return rec["name"]


def _matches(value, term: str, case_sensitive: bool) -> bool:
    if value is None:
        return False
    text = str(value)
    if case_sensitive:
        return term in text
    return term.lower() in text.lower()


def search(records, term: str | None, fields, exact_case_fields=()):
    """
    Filtra por substring (sem diferenciar maiúsculas) em qualquer um dos
    ``fields``; ``exact_case_fields`` comparam como estão (ex.: código de barras).
    Termo vazio devolve tudo.
    """
    if not term:
        return list(records)
    out = []
    for r in records:
        if any(_matches(r.get(f), term, False) for f in fields) or any(
            _matches(r.get(f), term, True) for f in exact_case_fields
        ):
            out.append(r)
    return out


def with_client_names(records, clients_index: dict, key: str = "client_id"):
    """Acrescenta ``client_name`` para exibição, tolerando cliente removido."""
    return [{**r, "client_name": lookup_name(clients_index, r.get(key))} for r in records]


# Campos de busca de cada listagem
SEARCH_FIELDS = {
    "clients": (("name", "email", "document"), ()),
    "products": (("name", "sku", "description"), ("barcode",)),
    "quotes": (("client_name", "id", "total"), ()),
    "services": (("description", "client_name"), ()),
    "service_orders": (("number", "description", "client_name"), ()),
    "service_types": (("name", "category"), ()),
    "transactions": (("description", "category"), ()),
    "sales": (("client_name",), ()),
    "users": (("full_name", "email"), ()),
}


def filter_users(users, term: str | None, role: str | None = None):
    """Busca de funcionários por nome/email e, opcionalmente, papel ("all" = todos)."""
    fields, exact = SEARCH_FIELDS["users"]
    found = search(users, term, fields, exact)
    if role and role != "all":
        found = [u for u in found if u.get("role") == role]
    return found
