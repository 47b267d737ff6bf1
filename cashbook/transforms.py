from collections import OrderedDict
from decimal import Decimal
from functools import reduce
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from cashbook.domain import BankReportRow, Entry, Party, SelfReportRow
from cashbook.filters import by_account, by_date
from cashbook.money import ZERO, format_amount

UNKNOWN = "Unknown"
PARTICULARS_PREFIX = "Cash Collection - "


def _sum_amounts(entries: Iterable[Entry]) -> Decimal:
    return reduce(lambda acc, e: acc + e.amount, entries, ZERO)


def total_for_date(entries: Iterable[Entry], date: str) -> Decimal:
    """Total collected on `date`.

    `entries` is expected to come from the store already filtered on date,
    so every amount in the sequence is summed. Empty input gives 0.
    """
    return _sum_amounts(entries)


def total_for_party_today(entries: Iterable[Entry], account_no: str, today: str) -> Decimal:
    """Total for one party on one day; `entries` is pre-filtered on (account_no, today)."""
    return _sum_amounts(entries)


def total_for_party(entries: Iterable[Entry], account_no: str) -> Decimal:
    return _sum_amounts(filter(by_account(account_no), entries))


def party_lookup(parties: Iterable[Party]) -> Dict[str, Party]:
    # later parties overwrite earlier ones with the same account number
    return {p.account_no: p for p in parties}


def find_party(parties: Iterable[Party], account_no: str) -> Optional[Party]:
    return party_lookup(parties).get(account_no)


def party_name(lookup: Dict[str, Party], account_no: str, default: str = UNKNOWN) -> str:
    party = lookup.get(account_no)
    return party.name if party is not None else default


def short_name(name: str) -> str:
    return " ".join(name.split()[:2])


def group_by_party(entries: Iterable[Entry], parties: Iterable[Party]) -> List[Tuple[str, Decimal]]:
    """Per-party totals in the order each account number first appears in `entries`.

    Accounts without a party are labelled "Unknown (<account_no>)".
    """
    lookup = party_lookup(parties)
    totals: "OrderedDict[str, Decimal]" = OrderedDict()
    for e in entries:
        totals[e.account_no] = totals.get(e.account_no, ZERO) + e.amount

    return [
        (party_name(lookup, account_no, default=f"{UNKNOWN} ({account_no})"), total)
        for account_no, total in totals.items()
    ]


def build_bank_report(entries: Sequence[Entry], parties: Iterable[Party]) -> List[BankReportRow]:
    """Bank-statement rows: ascending by date with a running balance.

    sorted() is stable, so entries sharing a date keep their input order.
    The balance starts from zero on every call.
    """
    lookup = party_lookup(parties)
    rows = []
    balance = ZERO
    for e in sorted(entries, key=lambda e: e.date):
        balance += e.amount
        name = lookup[e.account_no].name if e.account_no in lookup else None
        rows.append(BankReportRow(
            date=e.date,
            account_no=e.account_no,
            particulars=PARTICULARS_PREFIX + (short_name(name) if name is not None else UNKNOWN),
            credit=format_amount(e.amount),
            balance=format_amount(balance),
        ))
    return rows


def build_self_report(entries: Sequence[Entry], parties: Iterable[Party]) -> List[SelfReportRow]:
    lookup = party_lookup(parties)
    return [
        SelfReportRow(
            serial=i,
            date=e.date,
            party_name=party_name(lookup, e.account_no),
            account_no=e.account_no,
            amount=format_amount(e.amount),
            collector=e.collector,
        )
        for i, e in enumerate(entries, start=1)
    ]


def is_duplicate_today(entries: Iterable[Entry], account_no: str, today: str) -> bool:
    same_day = by_date(today)
    return any(e.account_no == account_no and same_day(e) for e in entries)


def available_parties(
    parties: Iterable[Party], entries: Iterable[Entry], search: str, today: str
) -> Tuple[Party, ...]:
    """Parties offered in the "pick a party" dropdown.

    Matches the search text against the name (case-insensitive) or the
    account number, and hides parties that already have an entry today.
    """
    needle = (search or "").strip()
    lowered = needle.lower()
    entries = tuple(entries)
    return tuple(
        p for p in parties
        if (lowered in p.name.lower() or needle in p.account_no) and not is_duplicate_today(entries, p.account_no, today)
    )
