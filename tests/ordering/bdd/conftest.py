"""Shared BDD fixtures and step definitions for checkout."""

from pytest_bdd import given, parsers, then, when

from shared.notifications import NotificationLevel


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(
    parsers.cfparse("a cart with subtotal {subtotal:g} and a default delivery address"),
    target_fixture="checkout",
)
def _(storefront, stock_checkout, subtotal):
    stock_checkout(subtotal=float(subtotal))
    assert storefront.checkout.load().success
    return storefront.checkout


@given(parsers.cfparse('the customer pays with "{method}"'))
def _(checkout, method):
    checkout.set_payment_method(method)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when("the customer places the order", target_fixture="placed")
def _(checkout):
    return checkout.place_order()


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the checkout step is "{step}"'))
def _(checkout, step):
    assert checkout.step.value == step


@then("the cart is empty")
def _(storefront, mock_backend):
    assert mock_backend.called("DELETE", "/cart/")
    assert storefront.cart.current.is_empty
    assert storefront.cart.item_count() == 0


@then(parsers.cfparse('the customer sees the error "{message}"'))
def _(storefront, message):
    errors = [item.message for item in storefront.notifier.pending if item.level is NotificationLevel.ERROR]
    assert message in errors
