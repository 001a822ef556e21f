"""Impressão e exportação em PDF: por enquanto só a mensagem de confirmação."""
from .pos import PRINT_RECEIPT_MSG

RECEIPT_PDF_MSG = "Salvando comprovante como PDF..."
FINANCIAL_CALENDAR_PDF_MSG = "Exportando calendário financeiro para PDF..."

PRINT = "print"
PDF = "pdf"


def _order_ref(order: dict):
    return order.get("number") or order["id"]


_MESSAGES = {
    ("quotes", PRINT): lambda r: f"Imprimindo orçamento {r['id']}...",
    ("quotes", PDF): lambda r: f"Salvando orçamento {r['id']} como PDF...",
    ("service_orders", PRINT): lambda r: f"Imprimindo ordem de serviço {_order_ref(r)}...",
    ("service_orders", PDF): lambda r: f"Salvando ordem de serviço {_order_ref(r)} como PDF...",
    ("transactions", PRINT): lambda r: f"Imprimindo {r.get('description')}...",
    ("transactions", PDF): lambda r: f"Salvando {r.get('description')} como PDF...",
    ("sales", PRINT): lambda r: PRINT_RECEIPT_MSG,
    ("sales", PDF): lambda r: RECEIPT_PDF_MSG,
    ("products", PRINT): lambda r: f"Imprimindo etiqueta para {r.get('name')}...",
    ("products", PDF): lambda r: f"Exportando dados de {r.get('name')}...",
}


def supports(entity: str, action: str) -> bool:
    return (entity, action) in _MESSAGES


def placeholder_message(entity: str, action: str, record: dict) -> str:
    return _MESSAGES[(entity, action)](record)
