from dataclasses import replace

import pytest

from payments.payment.bridge import PaymentState
from storefront import SessionRegistry


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def registry(settings, mock_backend, clock):
    sessions = SessionRegistry(
        replace(settings, session_idle_ttl=60.0, max_sessions=3),
        transport=mock_backend.transport,
        clock=clock,
    )
    yield sessions
    sessions.close()


def is_closed(storefront):
    return storefront.backend._client.is_closed


class TestLookup:
    def test_same_id_same_storefront(self, registry):
        assert registry.get_or_create("a") is registry.get_or_create("a")

    def test_missing_id_starts_a_new_session(self, registry):
        first = registry.get_or_create(None)
        second = registry.get_or_create(None)

        assert first is not second
        assert first.session_id in registry
        assert len(registry) == 2


class TestIdleExpiry:
    def test_idle_session_is_closed(self, registry, clock):
        idle = registry.get_or_create("a")
        clock.now = 61.0

        registry.get_or_create("b")

        assert "a" not in registry
        assert is_closed(idle)

    def test_recent_use_keeps_session_alive(self, registry, clock):
        registry.get_or_create("a")
        clock.now = 50.0
        registry.get_or_create("a")
        clock.now = 100.0

        registry.get_or_create("b")

        assert "a" in registry

    def test_session_with_open_widget_survives(self, registry, clock):
        paying = registry.get_or_create("a")
        paying.bridge.state = PaymentState.GATEWAY_OPEN
        clock.now = 500.0

        registry.get_or_create("b")

        assert "a" in registry
        assert not is_closed(paying)

    def test_returning_after_expiry_starts_fresh(self, registry, clock):
        old = registry.get_or_create("a")
        clock.now = 61.0

        assert registry.get_or_create("a") is not old


class TestCapacity:
    def test_least_recently_used_is_evicted(self, registry, clock):
        a = registry.get_or_create("a")
        registry.get_or_create("b")
        registry.get_or_create("c")
        registry.get_or_create("a")

        registry.get_or_create("d")

        assert len(registry) == 3
        assert "b" not in registry
        assert "a" in registry
        assert not is_closed(a)

    def test_busy_sessions_are_skipped(self, registry):
        registry.get_or_create("a").bridge.state = PaymentState.GATEWAY_OPEN
        registry.get_or_create("b")
        registry.get_or_create("c")

        registry.get_or_create("d")

        assert "a" in registry
        assert "b" not in registry


class TestShutdown:
    def test_end_closes_storefront(self, registry):
        storefront = registry.get_or_create("a")

        registry.end("a")

        assert "a" not in registry
        assert is_closed(storefront)

    def test_end_unknown_session_is_harmless(self, registry):
        registry.end("missing")
        assert len(registry) == 0

    def test_close_closes_everything(self, registry):
        storefronts = [registry.get_or_create(name) for name in ("a", "b")]

        registry.close()

        assert len(registry) == 0
        assert all(is_closed(storefront) for storefront in storefronts)
