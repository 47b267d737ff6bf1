import logging
from decimal import Decimal
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from cashbook import transforms
from cashbook.domain import BankReportRow, Entry, Party, SelfReportRow, today_iso
from cashbook.events import (
    ENTRY_ADDED, ENTRY_DELETED, PARTY_ADDED, PARTY_DELETED, STORE_ERROR,
    Banner, EventBus, default_bus,
)
from cashbook.filters import store_predicates
from cashbook.functional import Either, Right, failure
from cashbook.gateway import RecordStore
from cashbook.validation import validate_entry_form, validate_party_form

logger = logging.getLogger(__name__)


class CollectionService:
    """Facade the pages talk to: store reads/writes plus the aggregation functions.

    Every mutation goes straight to the store; callers reload their lists
    afterwards instead of patching them locally. Successful mutations and
    store failures are published on the bus, and the banner produced by the
    handlers is kept in `banner` for the page to show.
    """

    def __init__(self, store: RecordStore, bus: Optional[EventBus] = None, today: Callable[[], str] = today_iso):
        self.store = store
        self.bus = bus if bus is not None else default_bus()
        self.today = today
        self.banner: Optional[Banner] = None

    def _emit(self, name: str, payload: dict) -> None:
        for result in self.bus.publish(name, payload):
            if isinstance(result, Banner):
                self.banner = result

    def _store_failure(self, code: str, message: str) -> Either:
        logger.warning("%s: %s", code, message)
        self._emit(STORE_ERROR, {"error": code, "message": message})
        return failure(code, message)

    # reads

    def entries(self) -> List[Entry]:
        return self.store.collections.list_all()

    def parties(self) -> List[Party]:
        return self.store.parties.list_all()

    def filtered_entries(self, date: Optional[str] = None, account_no: Optional[str] = None) -> List[Entry]:
        return self.store.collections.list_filtered(store_predicates(date, account_no))

    def collections_for_party(self, account_no: str) -> List[Entry]:
        return self.store.collections.list_filtered({"account_no": account_no})

    def party_by_account_no(self, account_no: str) -> Optional[Party]:
        return self.store.parties.get_by("account_no", account_no)

    def total_for_date(self, date: Optional[str] = None) -> Decimal:
        date = date or self.today()
        return transforms.total_for_date(self.store.collections.list_filtered({"date": date}), date)

    def party_today_total(self, account_no: str) -> Decimal:
        today = self.today()
        rows = self.store.collections.list_filtered({"account_no": account_no, "date": today})
        return transforms.total_for_party_today(rows, account_no, today)

    def party_today_report(self, account_no: str, parties: Iterable[Party]) -> Optional[Tuple[str, Decimal]]:
        """(party name, today's total) for a known party, None otherwise."""
        party = transforms.find_party(parties, account_no)
        if party is None:
            return None
        return party.name, self.party_today_total(account_no)

    # writes

    def add_entry(self, date, account_no, amount, collector) -> Either[dict, Entry]:
        checked = validate_entry_form(date, account_no, amount, collector)
        if checked.is_left():
            return checked
        created = self.store.collections.insert(checked.get_or_else(None))
        if created is None:
            return self._store_failure("insert_failed", "Failed to add entry")
        self._emit(ENTRY_ADDED, {"id": created.id, "account_no": created.account_no, "amount": created.amount})
        return Right(created)

    def delete_entry(self, entry_id: int) -> Either[dict, int]:
        if not self.store.collections.delete(entry_id):
            return self._store_failure("delete_failed", "Failed to delete entry")
        self._emit(ENTRY_DELETED, {"id": entry_id})
        return Right(entry_id)

    def add_party(self, name, account_no) -> Either[dict, Party]:
        checked = validate_party_form(name, account_no)
        if checked.is_left():
            return checked
        created = self.store.parties.insert(checked.get_or_else(None))
        if created is None:
            return self._store_failure("insert_failed", "Failed to add party")
        self._emit(PARTY_ADDED, {"id": created.id, "account_no": created.account_no})
        return Right(created)

    def delete_party(self, party_id: int) -> Either[dict, int]:
        if not self.store.parties.delete(party_id):
            return self._store_failure("delete_failed", "Failed to delete party")
        self._emit(PARTY_DELETED, {"id": party_id})
        return Right(party_id)

    # exports

    def self_export_rows(self, entries: Sequence[Entry], parties: Iterable[Party]) -> List[SelfReportRow]:
        return transforms.build_self_report(entries, parties)

    def bank_export_rows(self, entries: Sequence[Entry], parties: Iterable[Party]) -> List[BankReportRow]:
        return transforms.build_bank_report(entries, parties)
