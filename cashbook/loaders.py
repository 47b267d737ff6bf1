import asyncio
from decimal import Decimal
from typing import Dict, List, NamedTuple, Optional

from cashbook.domain import Entry, Party
from cashbook.services import CollectionService


class Snapshot(NamedTuple):
    entries: List[Entry]
    parties: List[Party]


async def load_snapshot(
    service: CollectionService, date: Optional[str] = None, account_no: Optional[str] = None
) -> Snapshot:
    """Fetch entries (optionally filtered) and parties at the same time.

    The store client is blocking, so each call runs in a worker thread.
    """
    if date or account_no:
        entries_call = asyncio.to_thread(service.filtered_entries, date, account_no)
    else:
        entries_call = asyncio.to_thread(service.entries)
    entries, parties = await asyncio.gather(entries_call, asyncio.to_thread(service.parties))
    return Snapshot(entries=entries, parties=parties)


async def daily_totals(service: CollectionService, dates: List[str]) -> Dict[str, Decimal]:
    """Total collected per date, one store query per date, run concurrently."""
    totals = await asyncio.gather(*(asyncio.to_thread(service.total_for_date, d) for d in dates))
    return dict(zip(dates, totals))
