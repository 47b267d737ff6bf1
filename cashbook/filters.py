from typing import Callable, Dict, Optional

from cashbook.domain import Entry


def by_date(day: str) -> Callable[[Entry], bool]:
    def _filter(e: Entry) -> bool:
        return e.date == day

    return _filter


def by_account(account_no: str) -> Callable[[Entry], bool]:
    def _filter(e: Entry) -> bool:
        return e.account_no == account_no

    return _filter


def store_predicates(date: Optional[str] = None, account_no: Optional[str] = None) -> Dict[str, str]:
    """Equality predicates for Table.list_filtered; blank filters are left out."""
    predicates = {}
    if date and str(date).strip():
        predicates["date"] = str(date).strip()
    if account_no and str(account_no).strip():
        predicates["account_no"] = str(account_no).strip()
    return predicates
