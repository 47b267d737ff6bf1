from datetime import datetime
from decimal import Decimal

import pytest

from cashbook.domain import Entry, Party
from cashbook.events import EventBus, default_bus
from cashbook.gateway import RecordStore
from cashbook.services import CollectionService

TODAY = "2025-01-02"


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Just enough of the supabase/postgrest query builder for the gateway."""

    def __init__(self, client, table, action, payload=None):
        self.client = client
        self.table = table
        self.action = action
        self.payload = payload
        self.filters = []
        self.order_by = None
        self.limit_to = None

    def eq(self, field, value):
        self.filters.append((field, value))
        return self

    def order(self, column, desc=False):
        self.order_by = (column, desc)
        return self

    def limit(self, n):
        self.limit_to = n
        return self

    def _matches(self, row):
        return all(row.get(f) == v for f, v in self.filters)

    def execute(self):
        self.client.calls.append((self.table, self.action, list(self.filters)))
        rows = self.client.tables.setdefault(self.table, [])
        if self.action == "select":
            found = [dict(r) for r in rows if self._matches(r)]
            if self.order_by:
                column, desc = self.order_by
                found.sort(key=lambda r: r[column], reverse=desc)
            if self.limit_to is not None:
                found = found[: self.limit_to]
            return FakeResponse(found)
        if self.action == "insert":
            self.client.next_id += 1
            row = {**self.payload, "id": self.client.next_id, "created_at": datetime(2025, 1, 2, 9, 0).isoformat()}
            rows.append(row)
            return FakeResponse([dict(row)])
        if self.action == "update":
            changed = []
            for r in rows:
                if self._matches(r):
                    r.update(self.payload)
                    changed.append(dict(r))
            return FakeResponse(changed)
        if self.action == "delete":
            kept = [r for r in rows if not self._matches(r)]
            removed = [r for r in rows if self._matches(r)]
            self.client.tables[self.table] = kept
            return FakeResponse(removed)
        raise AssertionError(self.action)


class FakeTable:
    def __init__(self, client, name):
        self.client = client
        self.name = name

    def select(self, columns="*"):
        return FakeQuery(self.client, self.name, "select")

    def insert(self, payload):
        return FakeQuery(self.client, self.name, "insert", payload)

    def update(self, payload):
        return FakeQuery(self.client, self.name, "update", payload)

    def delete(self):
        return FakeQuery(self.client, self.name, "delete")


class FakeClient:
    def __init__(self, tables=None):
        self.tables = tables or {}
        self.calls = []
        self.next_id = 100

    def table(self, name):
        return FakeTable(self, name)


class BrokenQuery(FakeQuery):
    def execute(self):
        self.client.calls.append((self.table, self.action, list(self.filters)))
        raise ConnectionError("store unreachable")


class BrokenClient(FakeClient):
    def table(self, name):
        client = self

        class _Table(FakeTable):
            def select(self, columns="*"):
                return BrokenQuery(client, name, "select")

            def insert(self, payload):
                return BrokenQuery(client, name, "insert", payload)

            def update(self, payload):
                return BrokenQuery(client, name, "update", payload)

            def delete(self):
                return BrokenQuery(client, name, "delete")

        return _Table(self, name)


def make_entry(account_no, amount, date, collector="Kalpesh", id=None):
    return Entry(date=date, account_no=account_no, amount=Decimal(str(amount)), collector=collector, id=id)


def make_party(account_no, name, id=None):
    return Party(account_no=account_no, name=name, id=id)


def apply_filters(entries, predicates):
    # in-memory counterpart of Table.list_filtered: AND of exact matches
    return tuple(
        e for e in entries
        if all(str(getattr(e, field)) == value for field, value in predicates.items())
    )


def seed_rows():
    return {
        "cash_collections": [
            {"id": 1, "date": "2025-01-01", "account_no": "101", "amount": 100, "collector": "Kalpesh"},
            {"id": 2, "date": "2025-01-01", "account_no": "102", "amount": 50.5, "collector": "Sanjay"},
            {"id": 3, "date": "2025-01-02", "account_no": "101", "amount": 25, "collector": "Supan"},
        ],
        "parties": [
            {"id": 1, "account_no": "102", "name": "Beta Co"},
            {"id": 2, "account_no": "101", "name": "Acme Traders Private Limited"},
        ],
    }


@pytest.fixture
def client():
    return FakeClient(seed_rows())


@pytest.fixture
def store(client):
    return RecordStore(client)


@pytest.fixture
def broken_store():
    return RecordStore(BrokenClient())


@pytest.fixture
def service(store):
    return CollectionService(store, bus=default_bus(), today=lambda: TODAY)


@pytest.fixture
def broken_service(broken_store):
    return CollectionService(broken_store, bus=default_bus(), today=lambda: TODAY)


@pytest.fixture
def sample():
    entries = (
        make_entry("101", 100, "2025-01-01"),
        make_entry("102", 50, "2025-01-01"),
        make_entry("101", 25, "2025-01-02"),
    )
    parties = (
        make_party("101", "Acme Traders"),
        make_party("102", "Beta Co"),
    )
    return entries, parties


@pytest.fixture
def bus():
    return EventBus()
