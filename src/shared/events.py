"""Cart-count broadcast.

The header badge and any other view interested in the cart size subscribe
here. The emitter is owned by the ``Storefront`` composition root and torn
down with it.
"""

from collections.abc import Callable

import structlog

logger = structlog.get_logger(__name__)

CartCountListener = Callable[[int], None]


class CartCountEmitter:
    def __init__(self) -> None:
        self._listeners: list[CartCountListener] = []
        self._closed = False
        self.last_count: int | None = None

    def subscribe(self, listener: CartCountListener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that unregisters it."""
        if self._closed:
            raise RuntimeError("Cannot subscribe to a closed emitter")
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, count: int) -> None:
        self.last_count = count
        for listener in list(self._listeners):
            try:
                listener(count)
            except Exception:
                logger.exception("Cart count listener failed", count=count)

    @property
    def subscriber_count(self) -> int:
        return len(self._listeners)

    def close(self) -> None:
        self._listeners.clear()
        self._closed = True
