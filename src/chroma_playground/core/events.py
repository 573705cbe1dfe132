"""Callback registry with ordered delivery and idempotent unsubscribe."""

import logging
from collections.abc import Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _Subscription(Generic[T]):
    __slots__ = ("callback", "active")

    def __init__(self, callback: Callable[[T], None]) -> None:
        self.callback = callback
        self.active = True


class ListenerRegistry(Generic[T]):
    """Registry of listeners notified in subscription order.

    Each emit delivers to the listeners registered when it started. Listeners
    removed during a round are skipped; listeners added during a round wait
    for the next one. When ``copy`` is given, every listener receives its own
    copy of the emitted value.
    """

    def __init__(self, copy: Callable[[T], T] | None = None) -> None:
        self._subscriptions: list[_Subscription[T]] = []
        self._copy = copy

    def __len__(self) -> int:
        return len(self._subscriptions)

    def add(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register a callback and return its unsubscribe handle."""
        subscription = _Subscription(callback)
        self._subscriptions.append(subscription)

        def unsubscribe() -> None:
            if not subscription.active:
                return
            subscription.active = False
            self._subscriptions.remove(subscription)

        return unsubscribe

    def emit(self, value: T) -> None:
        """Call every registered listener once with value."""
        for subscription in list(self._subscriptions):
            if subscription.active:
                self.notify(subscription.callback, value)

    def notify(self, callback: Callable[[T], None], value: T) -> None:
        """Call one callback with value. A raising callback is logged."""
        try:
            callback(self._copy(value) if self._copy else value)
        except Exception:
            logger.exception("Listener %r failed", callback)

    def clear(self) -> None:
        """Drop every listener."""
        for subscription in self._subscriptions:
            subscription.active = False
        self._subscriptions.clear()
