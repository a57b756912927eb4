import pytest

from identity.customer.addresses import AddressBook
from ordering.cart.cart import CartService
from ordering.order.order import OrderService


@pytest.fixture()
def cart(backend, store, emitter):
    return CartService(backend, store, emitter)


@pytest.fixture()
def orders(backend):
    return OrderService(backend)


@pytest.fixture()
def address_book(backend):
    return AddressBook(backend)
