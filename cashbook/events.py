from datetime import datetime, timedelta
from typing import Callable, Dict, List, NamedTuple, Optional

from cashbook.config import BANNER_TIMEOUT_SECONDS

__all__ = [
    'Event', 'EventBus', 'Banner', 'banner_active', 'default_bus',
    'ENTRY_ADDED', 'ENTRY_DELETED', 'PARTY_ADDED', 'PARTY_DELETED', 'STORE_ERROR',
]

ENTRY_ADDED = "ENTRY_ADDED"
ENTRY_DELETED = "ENTRY_DELETED"
PARTY_ADDED = "PARTY_ADDED"
PARTY_DELETED = "PARTY_DELETED"
STORE_ERROR = "STORE_ERROR"


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


class Banner(NamedTuple):
    kind: str        # "success" or "error"
    message: str
    expires_at: str  # ISO timestamp


Handler = Callable[[Event, dict], object]


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def publish(self, name: str, payload: dict) -> list:
        handlers = self._subscribers.get(name, [])
        if not handlers:
            return []
        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)
        return [handler(event, payload) for handler in handlers]

    def unsubscribe(self, name: str, handler: Handler) -> None:
        if handler in self._subscribers.get(name, []):
            self._subscribers[name].remove(handler)


SUCCESS_MESSAGES = {
    ENTRY_ADDED: "Entry added successfully!",
    ENTRY_DELETED: "Entry deleted successfully!",
    PARTY_ADDED: "Party added successfully!",
    PARTY_DELETED: "Party deleted successfully!",
}


def _expiry(event: Event, timeout: float) -> str:
    return (datetime.fromisoformat(event.ts) + timedelta(seconds=timeout)).isoformat()


def success_banner_handler(timeout: float = BANNER_TIMEOUT_SECONDS) -> Handler:
    def _handler(event: Event, payload: dict) -> Banner:
        return Banner("success", SUCCESS_MESSAGES[event.name], _expiry(event, timeout))

    return _handler


def error_banner_handler(timeout: float = BANNER_TIMEOUT_SECONDS) -> Handler:
    def _handler(event: Event, payload: dict) -> Banner:
        return Banner("error", payload.get("message", "Something went wrong"), _expiry(event, timeout))

    return _handler


def banner_active(banner: Optional[Banner], now: Optional[datetime] = None) -> bool:
    if banner is None:
        return False
    now = now or datetime.now()
    return now < datetime.fromisoformat(banner.expires_at)


def default_bus(timeout: float = BANNER_TIMEOUT_SECONDS) -> EventBus:
    """A bus with the banner handlers registered for every mutation event."""
    bus = EventBus()
    on_success = success_banner_handler(timeout)
    for name in SUCCESS_MESSAGES:
        bus.subscribe(name, on_success)
    bus.subscribe(STORE_ERROR, error_banner_handler(timeout))
    return bus
