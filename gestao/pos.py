"""
PDV: carrinho, leitura de código de barras/SKU e finalização da venda.

O carrinho é chaveado por ``product_id``: adicionar um produto que já está
no carrinho soma uma unidade na mesma linha. O total é recalculado a cada
chamada, nunca guardado.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .enums import PaymentMethod, SaleStatus
from .rules import document_total

log = logging.getLogger(__name__)

MISSING_FIELDS_MSG = "Por favor, preencha todos os campos necessários"
PRODUCT_NOT_FOUND_MSG = "Produto não encontrado!"
SALE_DONE_MSG = "Venda Realizada!"
PRINT_RECEIPT_MSG = "Imprimindo comprovante de venda..."

MAX_INSTALLMENTS = 12


class SaleBlocked(Exception):
    """Pré-condição do PDV não atendida; nada foi enviado ao banco."""

    def __init__(self, message: str = MISSING_FIELDS_MSG):
        super().__init__(message)
        self.message = message


class ProductNotFound(LookupError):
    def __init__(self, code: str):
        super().__init__(PRODUCT_NOT_FOUND_MSG)
        self.code = code
        self.message = PRODUCT_NOT_FOUND_MSG


@dataclass
class CartLine:
    product_id: int
    name: str
    price: float
    quantity: int = 1

    @property
    def subtotal(self) -> float:
        return self.price * self.quantity


def find_by_code(products, code: str):
    """Busca exata por código de barras ou SKU na lista já carregada."""
    if not code:
        return None
    for p in products:
        if p.get("barcode") == code or p.get("sku") == code:
            return p
    return None


def search_products(products, term: str | None):
    """Busca da lista lateral do PDV: nome/SKU sem caixa, código de barras exato."""
    if not term:
        return list(products)
    t = term.lower()
    return [
        p for p in products
        if t in (p.get("name") or "").lower()
        or (p.get("sku") and t in p["sku"].lower())
        or (p.get("barcode") and term in p["barcode"])
    ]


@dataclass
class Cart:
    lines: List[CartLine] = field(default_factory=list)

    def _line(self, product_id) -> Optional[CartLine]:
        for line in self.lines:
            if line.product_id == product_id:
                return line
        return None

    def add(self, product: dict, quantity: int = 1) -> CartLine:
        line = self._line(product["id"])
        if line:
            line.quantity += quantity
            return line
        line = CartLine(
            product_id=product["id"],
            name=product.get("name") or "",
            price=product.get("price") or 0.0,
            quantity=quantity,
        )
        self.lines.append(line)
        return line

    def add_by_code(self, products, code: str) -> CartLine:
        product = find_by_code(products, code)
        if product is None:
            raise ProductNotFound(code)
        return self.add(product)

    def remove(self, product_id) -> None:
        self.lines = [line for line in self.lines if line.product_id != product_id]

    def update_quantity(self, product_id, quantity: int, clamp: bool = False) -> None:
        """
        Quantidade < 1 é ignorada; com ``clamp=True`` (PDV completo) vira 1.
        """
        if quantity < 1:
            if not clamp:
                return
            quantity = 1
        line = self._line(product_id)
        if line:
            line.quantity = quantity

    def total(self) -> float:
        return document_total(self.snapshot())

    def is_empty(self) -> bool:
        return not self.lines

    def snapshot(self) -> List[dict]:
        return [
            {"product_id": line.product_id, "quantity": line.quantity, "price": line.price}
            for line in self.lines
        ]

    def clear(self) -> None:
        self.lines = []


def normalize_installments(payment_method, installments) -> int:
    """Parcelas só para cartão de crédito (1 a 12); não alteram o total."""
    if payment_method != PaymentMethod.CARTAO_CREDITO.value:
        return 1
    try:
        n = int(installments or 1)
    except (TypeError, ValueError):
        n = 1
    return max(1, min(MAX_INSTALLMENTS, n))


def build_sale(cart: Cart, client_id, payment_method, installments=1) -> dict:
    if cart.is_empty() or not client_id or not payment_method:
        raise SaleBlocked()
    method = getattr(payment_method, "value", payment_method)
    return {
        "client_id": client_id,
        "items": cart.snapshot(),
        "total": cart.total(),
        "payment_method": method,
        "installments": normalize_installments(method, installments),
        "status": SaleStatus.COMPLETED.value,
    }


@dataclass
class Checkout:
    """
    Estado do PDV entre a leitura dos itens e a finalização.

    ``create_sale`` é a chamada ao banco (``Sale.create``); só é invocada
    quando carrinho, cliente e forma de pagamento estão preenchidos.
    """
    create_sale: Callable[[dict], object]
    cart: Cart = field(default_factory=Cart)
    client_id: Optional[int] = None
    payment_method: Optional[str] = None
    installments: int = 1
    completed: bool = False

    def finalize(self):
        try:
            sale = build_sale(self.cart, self.client_id, self.payment_method, self.installments)
        except SaleBlocked:
            log.warning("Venda bloqueada: carrinho=%d itens, cliente=%s, pagamento=%s",
                        len(self.cart.lines), self.client_id, self.payment_method)
            raise
        created = self.create_sale(sale)
        self.completed = True
        self.reset()
        return created

    def reset(self) -> None:
        self.cart.clear()
        self.client_id = None
        self.payment_method = None
        self.installments = 1

    def new_sale(self) -> None:
        """Botão "Nova Venda" da tela de sucesso."""
        self.completed = False
        self.reset()


def cart_from_items(products, items) -> Cart:
    """
    Remonta o carrinho enviado pelo cliente usando os preços do cadastro.
    Linhas repetidas do mesmo produto somam na mesma linha.
    """
    index = {p["id"]: p for p in products}
    cart = Cart()
    for it in items:
        product = index.get(it["product_id"])
        if product is None:
            raise ProductNotFound(str(it["product_id"]))
        cart.add(product, max(1, int(it.get("quantity") or 1)))
    return cart
