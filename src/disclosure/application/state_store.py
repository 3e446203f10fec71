"""Shared per-context reveal state observed by every contact surface of an entity."""

from collections.abc import Callable
from dataclasses import dataclass

from disclosure.application.ports import NumberCacheRepository


@dataclass(frozen=True)
class ContactState:
    phone_number: str = ""
    whatsapp_number: str = ""
    show_number: bool = False


Subscriber = Callable[[ContactState], None]


class ContactStateStore:
    """
    Explicit map of context_key -> ContactState with subscriptions.
    The first read or subscription for a key seeds it from the number cache.
    Updates for one key only notify that key's subscribers.
    """

    def __init__(self, number_cache: NumberCacheRepository | None = None) -> None:
        self._number_cache = number_cache
        self._states: dict[str, ContactState] = {}
        self._subscribers: dict[str, list[Subscriber]] = {}

    def _ensure_seeded(self, context_key: str) -> ContactState:
        state = self._states.get(context_key)
        if state is not None:
            return state
        state = ContactState()
        if self._number_cache is not None:
            cached = self._number_cache.get(context_key)
            if cached is not None:
                state = ContactState(
                    phone_number=cached.display_number,
                    whatsapp_number=cached.whatsapp_number,
                    show_number=True,
                )
        self._states[context_key] = state
        return state

    def get(self, context_key: str) -> ContactState:
        return self._ensure_seeded(context_key)

    def set_phone_numbers(self, context_key: str, display: str, whatsapp: str) -> ContactState:
        """Store revealed numbers for the key, flip show_number and notify its subscribers."""
        self._ensure_seeded(context_key)
        state = ContactState(phone_number=display, whatsapp_number=whatsapp, show_number=True)
        self._states[context_key] = state
        for callback in list(self._subscribers.get(context_key, ())):
            callback(state)
        return state

    def subscribe(self, context_key: str, callback: Subscriber) -> Callable[[], None]:
        """Register callback for updates to context_key. Returns an unsubscribe function."""
        self._ensure_seeded(context_key)
        self._subscribers.setdefault(context_key, []).append(callback)

        def unsubscribe() -> None:
            callbacks = self._subscribers.get(context_key, [])
            if callback in callbacks:
                callbacks.remove(callback)
            if not callbacks:
                self._subscribers.pop(context_key, None)

        return unsubscribe

    def subscriber_count(self, context_key: str) -> int:
        return len(self._subscribers.get(context_key, ()))
