import pytest

from gestao import pos
from gestao.enums import PaymentMethod, SaleStatus

PRODUCTS = [
    {"id": 1, "name": "Café 500g", "price": 10.50, "sku": "CAF500", "barcode": "7890001"},
    {"id": 2, "name": "Açúcar 1kg", "price": 5.0, "sku": "ACU1", "barcode": "7890002"},
]


def test_adding_same_product_twice_increments_one_line():
    cart = pos.Cart()
    cart.add(PRODUCTS[0])
    cart.add(PRODUCTS[0])
    assert len(cart.lines) == 1
    assert cart.lines[0].quantity == 2

    other = pos.Cart()
    other.add(PRODUCTS[0], quantity=2)
    assert cart.snapshot() == other.snapshot()


def test_total_is_sum_of_price_times_quantity():
    cart = pos.Cart()
    cart.add(PRODUCTS[0], 2)
    cart.add(PRODUCTS[1], 1)
    assert cart.total() == pytest.approx(26.00)


def test_add_by_code_matches_barcode_or_sku_exactly():
    cart = pos.Cart()
    cart.add_by_code(PRODUCTS, "7890002")
    cart.add_by_code(PRODUCTS, "ACU1")
    assert cart.snapshot() == [{"product_id": 2, "quantity": 2, "price": 5.0}]

    with pytest.raises(pos.ProductNotFound) as exc:
        cart.add_by_code(PRODUCTS, "acu1")
    assert exc.value.message == "Produto não encontrado!"


def test_update_quantity_ignores_or_clamps_values_below_one():
    cart = pos.Cart()
    cart.add(PRODUCTS[0], 3)
    cart.update_quantity(1, 0)
    assert cart.lines[0].quantity == 3
    cart.update_quantity(1, -2, clamp=True)
    assert cart.lines[0].quantity == 1
    cart.update_quantity(1, 5)
    assert cart.lines[0].quantity == 5
    cart.remove(1)
    assert cart.is_empty()


def test_search_products_by_name_sku_and_exact_barcode():
    assert [p["id"] for p in pos.search_products(PRODUCTS, "café")] == [1]
    assert [p["id"] for p in pos.search_products(PRODUCTS, "acu")] == [2]
    assert [p["id"] for p in pos.search_products(PRODUCTS, "")] == [1, 2]


@pytest.mark.parametrize(
    "method, requested, expected",
    [
        (PaymentMethod.CARTAO_CREDITO.value, 3, 3),
        (PaymentMethod.CARTAO_CREDITO.value, 30, 12),
        (PaymentMethod.CARTAO_CREDITO.value, "abc", 1),
        (PaymentMethod.PIX.value, 6, 1),
    ],
)
def test_installments_only_for_credit_card(method, requested, expected):
    assert pos.normalize_installments(method, requested) == expected


@pytest.mark.parametrize(
    "fill_cart, client_id, method",
    [
        (False, 1, "dinheiro"),
        (True, None, "dinheiro"),
        (True, 1, None),
    ],
)
def test_finalize_blocked_creates_nothing(fill_cart, client_id, method):
    created = []
    checkout = pos.Checkout(create_sale=created.append, client_id=client_id, payment_method=method)
    if fill_cart:
        checkout.cart.add(PRODUCTS[0])
    with pytest.raises(pos.SaleBlocked) as exc:
        checkout.finalize()
    assert exc.value.message == "Por favor, preencha todos os campos necessários"
    assert created == []
    assert not checkout.completed


def test_finalize_creates_one_sale_and_resets():
    created = []
    checkout = pos.Checkout(create_sale=lambda s: created.append(s) or s)
    checkout.cart.add(PRODUCTS[0], 2)
    checkout.cart.add(PRODUCTS[1])
    checkout.client_id = 7
    checkout.payment_method = PaymentMethod.CARTAO_CREDITO.value
    checkout.installments = 3

    sale = checkout.finalize()

    assert len(created) == 1
    assert sale["items"] == [
        {"product_id": 1, "quantity": 2, "price": 10.50},
        {"product_id": 2, "quantity": 1, "price": 5.0},
    ]
    assert sale["total"] == pytest.approx(26.00)
    assert sale["installments"] == 3
    assert sale["status"] == SaleStatus.COMPLETED.value
    assert checkout.completed
    assert checkout.cart.is_empty()
    assert checkout.client_id is None

    checkout.new_sale()
    assert not checkout.completed


def test_cart_from_items_uses_catalog_prices():
    cart = pos.cart_from_items(PRODUCTS, [
        {"product_id": 1, "quantity": 1, "price": 0.01},
        {"product_id": 1, "quantity": 1},
    ])
    assert cart.snapshot() == [{"product_id": 1, "quantity": 2, "price": 10.50}]

    with pytest.raises(pos.ProductNotFound):
        pos.cart_from_items(PRODUCTS, [{"product_id": 99, "quantity": 1}])
