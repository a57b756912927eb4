"""BDD tests for discount codes at checkout."""

from pytest_bdd import given, parsers, scenarios, then, when

scenarios("features/discount_codes.feature")


@given(parsers.cfparse('the backend accepts discount code "{code}" for {value:g} percent'))
def _(mock_backend, code, value):
    mock_backend.on("POST", "/discounts/validate", json={"code": code, "type": "percentage", "value": value})


@given(parsers.cfparse('the backend rejects discount code "{code}"'))
def _(mock_backend, code):
    mock_backend.on("POST", "/discounts/validate", status=404, json={"detail": "Invalid discount code"})


@when(parsers.cfparse('the customer applies discount code "{code}"'))
def _(checkout, code):
    checkout.apply_discount(code)


@when("the customer removes the discount")
def _(checkout):
    checkout.remove_discount()


@then(parsers.cfparse("the discount amount is {amount:g}"))
def _(checkout, amount):
    assert checkout.summary.discount == amount


@then(parsers.cfparse("the order total is {total:g}"))
def _(checkout, total):
    assert checkout.summary.total == total
