"""Record store gateway: the only module that talks to the remote store.

Every operation catches client/transport errors, logs them and degrades to
an empty list, None or False. Callers never see an exception from here.
"""
import logging
from typing import Any, Callable, Dict, Generic, List, Mapping, Optional, TypeVar

from supabase import Client, create_client

from cashbook.config import StoreConfig
from cashbook.domain import Entry, Party

logger = logging.getLogger(__name__)

R = TypeVar('R', Entry, Party)

COLLECTIONS_TABLE = "cash_collections"
PARTIES_TABLE = "parties"


class Table(Generic[R]):
    """CRUD over one logical table, parsing rows into records on the way in."""

    def __init__(
        self,
        client: Client,
        name: str,
        parse: Callable[[Mapping[str, Any]], R],
        order_key: str,
        ascending: bool,
    ):
        self.client = client
        self.name = name
        self.parse = parse
        self.order_key = order_key
        self.ascending = ascending

    def _parse_rows(self, rows) -> List[R]:
        records = []
        for row in rows or []:
            try:
                records.append(self.parse(row))
            except (KeyError, TypeError, ValueError, ArithmeticError) as e:
                logger.warning("Skipping malformed %s row %r: %s", self.name, row, e)
        return records

    def list_all(self, order_key: Optional[str] = None, ascending: Optional[bool] = None) -> List[R]:
        return self.list_filtered(None, order_key=order_key, ascending=ascending)

    def list_filtered(
        self,
        predicates: Optional[Mapping[str, Any]],
        order_key: Optional[str] = None,
        ascending: Optional[bool] = None,
    ) -> List[R]:
        """Rows matching every `field == value` pair; None or {} matches all."""
        order_key = order_key or self.order_key
        ascending = self.ascending if ascending is None else ascending
        try:
            query = self.client.table(self.name).select("*")
            for field, value in (predicates or {}).items():
                query = query.eq(field, value)
            response = query.order(order_key, desc=not ascending).execute()
        except Exception:
            logger.exception("Error fetching %s (filters=%r)", self.name, dict(predicates or {}))
            return []
        return self._parse_rows(response.data)

    def get_by(self, field: str, value: Any) -> Optional[R]:
        try:
            response = self.client.table(self.name).select("*").eq(field, value).limit(1).execute()
        except Exception:
            logger.exception("Error fetching %s where %s=%r", self.name, field, value)
            return None
        records = self._parse_rows(response.data)
        return records[0] if records else None

    def insert(self, record: R) -> Optional[R]:
        try:
            response = self.client.table(self.name).insert(record.to_row()).execute()
        except Exception:
            logger.exception("Error adding %s row %r", self.name, record)
            return None
        records = self._parse_rows(response.data)
        return records[0] if records else None

    def update(self, record_id: int, changes: Dict[str, Any]) -> Optional[R]:
        try:
            response = self.client.table(self.name).update(changes).eq("id", record_id).execute()
        except Exception:
            logger.exception("Error updating %s id=%s", self.name, record_id)
            return None
        records = self._parse_rows(response.data)
        return records[0] if records else None

    def delete(self, record_id: int) -> bool:
        try:
            self.client.table(self.name).delete().eq("id", record_id).execute()
        except Exception:
            logger.exception("Error deleting %s id=%s", self.name, record_id)
            return False
        logger.info("Deleted %s id=%s", self.name, record_id)
        return True


class RecordStore:
    def __init__(self, client: Client):
        self.collections: Table[Entry] = Table(client, COLLECTIONS_TABLE, Entry.from_row, "date", ascending=False)
        self.parties: Table[Party] = Table(client, PARTIES_TABLE, Party.from_row, "name", ascending=True)


def connect(config: StoreConfig) -> RecordStore:
    """Build a store from a validated config (see config.config_error)."""
    return RecordStore(create_client(config.url, config.key))
