"""
Formulários: estado inicial, campos dependentes e coerção no envio.

Os campos numéricos chegam como texto e só são convertidos no envio
(``parse_float``/``parse_int``); valores inválidos viram o padrão do campo.
"""
from copy import deepcopy
from datetime import date, datetime, timedelta

from .enums import QuoteItemType, QuoteStatus, RecurrenceType, ServiceOrderStatus, ServiceStatus
from .formatting import combine_date_time, optional_float, parse_float, parse_int
from .rules import document_total, line_total

QUOTE_VALIDITY_DAYS = 30

PRODUCT_DIMENSIONS = ("weight", "volume", "length", "width", "height")


def _blank_to_none(value):
    return None if value == "" else value


# =========================
# Produtos / Serviços / Financeiro
# =========================

def product_form(raw: dict) -> dict:
    data = {k: _blank_to_none(v) for k, v in raw.items() if k not in PRODUCT_DIMENSIONS}
    data["price"] = parse_float(raw.get("price"))
    data["cost"] = parse_float(raw.get("cost"))
    data["stock"] = parse_float(raw.get("stock"))
    data["min_stock"] = parse_float(raw.get("min_stock"))
    for dim in PRODUCT_DIMENSIONS:
        data[dim] = optional_float(raw.get(dim))
    return data


def service_type_form(raw: dict) -> dict:
    data = {k: _blank_to_none(v) for k, v in raw.items()}
    data["base_price"] = parse_float(raw.get("base_price"))
    data["duration_minutes"] = parse_int(raw.get("duration_minutes"), default=None)
    return data


def transaction_form(raw: dict) -> dict:
    data = {k: _blank_to_none(v) for k, v in raw.items()}
    data["amount"] = parse_float(raw.get("amount"))
    data["installments"] = parse_int(raw.get("installments"), default=1)
    recurrence = dict(raw.get("recurrence") or {})
    data["recurrence"] = {
        "type": recurrence.get("type") or RecurrenceType.NONE.value,
        "interval": parse_int(recurrence.get("interval"), default=1),
        "end_date": _blank_to_none(recurrence.get("end_date")),
    }
    return data


def apply_service_type(form: dict, service_type: dict | None) -> dict:
    """Escolher o tipo de serviço copia nome e preço base para o formulário."""
    if not service_type:
        return form
    return {
        **form,
        "service_type_id": service_type["id"],
        "description": service_type.get("name"),
        "price": service_type.get("base_price") or 0,
    }


def default_service() -> dict:
    return {
        "client_id": None,
        "service_type_id": None,
        "description": "",
        "scheduled_date": "",
        "scheduled_time": "",
        "price": "",
        "status": ServiceStatus.AGENDADO.value,
        "notes": "",
    }


def service_form(raw: dict) -> dict:
    """Agendamento: data + hora viram um único ``scheduled_date``."""
    return {
        "client_id": raw.get("client_id") or None,
        "service_type_id": raw.get("service_type_id") or None,
        "description": raw.get("description"),
        "scheduled_date": combine_date_time(raw.get("scheduled_date"), raw.get("scheduled_time")),
        "price": parse_float(raw.get("price")),
        "status": raw.get("status") or ServiceStatus.AGENDADO.value,
        "notes": _blank_to_none(raw.get("notes")),
    }


# =========================
# Orçamento
# =========================

def default_quote(today: date | None = None) -> dict:
    today = today or date.today()
    return {
        "client_id": None,
        "items": [],
        "total": 0,
        "status": QuoteStatus.DRAFT.value,
        "valid_until": today + timedelta(days=QUOTE_VALIDITY_DAYS),
        "notes": "",
    }


class QuoteDraft:
    """
    Edição de orçamento. Toda alteração de itens recalcula o total do
    documento como a soma literal ``quantity * unit_price``.
    """

    def __init__(self, quote: dict | None = None, today: date | None = None):
        self.data = deepcopy(quote) if quote else default_quote(today)
        self.data.setdefault("items", [])

    @property
    def items(self) -> list:
        return self.data["items"]

    @property
    def total(self) -> float:
        return self.data["total"]

    def _recalculate(self) -> None:
        self.data["total"] = document_total(self.items, price_key="unit_price")

    def add_item(self, item_type: str = QuoteItemType.CUSTOM.value) -> dict:
        item = {"description": "", "quantity": 1, "unit_price": 0, "type": item_type, "total": 0}
        self.items.append(item)
        self._recalculate()
        return item

    def add_service(self, service_type: dict) -> dict:
        price = service_type.get("base_price") or 0
        item = {
            "type": QuoteItemType.SERVICE.value,
            "service_id": service_type["id"],
            "description": service_type.get("description") or service_type.get("name"),
            "quantity": 1,
            "unit_price": price,
            "total": price,
        }
        self.items.append(item)
        self._recalculate()
        return item

    def add_product(self, product: dict) -> dict:
        price = product.get("price") or 0
        item = {
            "type": QuoteItemType.PRODUCT.value,
            "product_id": product["id"],
            "description": product.get("name"),
            "quantity": 1,
            "unit_price": price,
            "total": price,
        }
        self.items.append(item)
        self._recalculate()
        return item

    def update_item(self, index: int, field: str, value) -> dict:
        item = self.items[index]
        if field in ("quantity", "unit_price"):
            value = parse_float(value)
        item[field] = value
        if field in ("quantity", "unit_price"):
            item["total"] = line_total(item["quantity"], item["unit_price"])
        self._recalculate()
        return item

    def remove_item(self, index: int) -> None:
        del self.items[index]
        self._recalculate()

    def to_record(self) -> dict:
        return deepcopy(self.data)

    def finalized(self) -> dict:
        """Dados do botão "Finalizar": o rascunho salvo com status ``finalized``."""
        return {**self.to_record(), "status": QuoteStatus.FINALIZED.value}


# =========================
# Ordem de serviço
# =========================

def default_service_order(now: datetime | None = None) -> dict:
    now = now or datetime.now()
    return {
        "number": "",
        "client_id": None,
        "service_type_id": None,
        "description": "",
        "status": ServiceOrderStatus.PENDING.value,
        "scheduled_date": now.strftime("%Y-%m-%d"),
        "scheduled_time": now.strftime("%H:%M"),
        "price": "",
        "client_item": {"type": "", "brand": "", "model": "", "serial_number": "", "condition": ""},
        "products": [],
        "technician_notes": "",
    }


class ServiceOrderDraft:

    def __init__(self, order: dict | None = None, now: datetime | None = None):
        self.data = deepcopy(order) if order else default_service_order(now)
        self.data.setdefault("products", [])

    def select_service_type(self, service_types, service_type_id) -> None:
        selected = next((st for st in service_types if st["id"] == service_type_id), None)
        if selected:
            self.data = apply_service_type(self.data, selected)

    def set_client_item(self, field: str, value) -> None:
        self.data["client_item"] = {**(self.data.get("client_item") or {}), field: value}

    def add_product(self) -> dict:
        line = {"product_id": None, "quantity": 1, "price": 0}
        self.data["products"].append(line)
        return line

    def remove_product(self, index: int) -> None:
        del self.data["products"][index]

    def change_product(self, index: int, field: str, value, available_products=()) -> dict:
        line = self.data["products"][index]
        if field == "quantity":
            value = parse_int(value, default=1)
        elif field == "price":
            value = parse_float(value)
        line[field] = value
        if field == "product_id":
            product = next((p for p in available_products if p["id"] == value), None)
            if product:
                line["price"] = product.get("price") or 0
        return line

    def products_total(self) -> float:
        return document_total(self.data["products"])

    def to_record(self) -> dict:
        data = deepcopy(self.data)
        scheduled_time = data.pop("scheduled_time", None)
        data["scheduled_date"] = combine_date_time(data.get("scheduled_date"), scheduled_time)
        data["price"] = parse_float(data.get("price"))
        return data
