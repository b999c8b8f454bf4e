"""
Replay-one publish/subscribe holder for the current session.

Readers anywhere in the client can observe login/logout without being
coupled to the session store. A new subscriber is immediately handed the
latest published value, so late subscribers never miss the current state.
"""

import logging
from typing import Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Subscriber = Callable[[Optional[T]], None]


class SessionChannel(Generic[T]):
    """
    Holds one value and notifies subscribers whenever it changes.

    Not thread-safe: the client is driven by a single event loop and the
    only writers are login and logout.
    """

    def __init__(self, initial: Optional[T] = None):
        self._value: Optional[T] = initial
        self._subscribers: list[Subscriber] = []

    @property
    def value(self) -> Optional[T]:
        """The most recently published value."""
        return self._value

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a callback and replay the current value to it.

        Args:
            callback: Called with each published value (including None).

        Returns:
            A function that removes the subscription. Calling it twice is harmless.
        """
        self._subscribers.append(callback)
        self._deliver(callback, self._value)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, value: Optional[T]) -> None:
        self._value = value
        # copy so callbacks may unsubscribe while being notified
        for callback in list(self._subscribers):
            self._deliver(callback, value)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def _deliver(self, callback: Subscriber, value: Optional[T]) -> None:
        try:
            callback(value)
        except Exception:
            logger.exception(f"Session subscriber {callback!r} raised while handling an update")
