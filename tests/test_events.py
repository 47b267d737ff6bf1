from datetime import datetime, timedelta

from cashbook.events import (
    ENTRY_ADDED, ENTRY_DELETED, PARTY_ADDED, STORE_ERROR,
    Banner, Event, EventBus, banner_active, default_bus,
)


def test_event_bus_subscribe_and_publish(bus):
    collected = []

    def handler(event: Event, payload: dict) -> dict:
        collected.append(payload)
        return {"processed": True}

    bus.subscribe(ENTRY_ADDED, handler)
    results = bus.publish(ENTRY_ADDED, {"account_no": "101"})

    assert results == [{"processed": True}]
    assert collected == [{"account_no": "101"}]


def test_publish_without_subscribers(bus):
    assert bus.publish(PARTY_ADDED, {}) == []


def test_multiple_subscribers_and_unsubscribe(bus):
    calls = []

    def first(event, payload):
        calls.append(1)

    def second(event, payload):
        calls.append(2)

    bus.subscribe(ENTRY_DELETED, first)
    bus.subscribe(ENTRY_DELETED, second)
    assert len(bus.publish(ENTRY_DELETED, {"id": 1})) == 2

    bus.unsubscribe(ENTRY_DELETED, first)
    bus.unsubscribe(ENTRY_DELETED, first)
    bus.publish(ENTRY_DELETED, {"id": 2})
    assert calls == [1, 2, 2]


def test_default_bus_produces_banners():
    bus = default_bus(timeout=3)
    [success] = bus.publish(ENTRY_ADDED, {"id": 1})
    [error] = bus.publish(STORE_ERROR, {"message": "Failed to add entry"})

    assert success.kind == "success"
    assert success.message == "Entry added successfully!"
    assert error == Banner("error", "Failed to add entry", error.expires_at)


def test_banner_expires_after_timeout():
    bus = default_bus(timeout=3)
    [banner] = bus.publish(PARTY_ADDED, {"id": 1})
    expires = datetime.fromisoformat(banner.expires_at)

    assert banner_active(banner, now=expires - timedelta(seconds=2.5))
    assert not banner_active(banner, now=expires)
    assert not banner_active(None)
