from dataclasses import dataclass
from datetime import date as _date
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional

from cashbook.money import to_currency


def today_iso() -> str:
    return _date.today().isoformat()


def _date_part(value: Any) -> str:
    # the store may hand back "2025-01-01" or "2025-01-01T00:00:00"
    text = str(value).strip()
    return _date.fromisoformat(text[:10]).isoformat()


@dataclass(frozen=True)
class Entry:
    date: str            # ISO date, e.g. "2025-09-01"
    account_no: str      # 3 digits, joins to Party.account_no
    amount: Decimal      # > 0, two places
    collector: str
    id: Optional[int] = None
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Entry":
        """Parse a store row. Raises KeyError/ValueError on a malformed row."""
        return cls(
            id=int(row["id"]) if row.get("id") is not None else None,
            date=_date_part(row["date"]),
            account_no=str(row["account_no"]),
            amount=to_currency(row["amount"]),
            collector=str(row["collector"]),
            created_at=row.get("created_at"),
        )

    def to_row(self) -> Dict[str, Any]:
        # store assigns id and created_at
        return {
            "date": self.date,
            "account_no": self.account_no,
            "amount": float(self.amount),
            "collector": self.collector,
        }


@dataclass(frozen=True)
class Party:
    account_no: str
    name: str
    id: Optional[int] = None
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Party":
        return cls(
            id=int(row["id"]) if row.get("id") is not None else None,
            account_no=str(row["account_no"]),
            name=str(row["name"]),
            created_at=row.get("created_at"),
        )

    def to_row(self) -> Dict[str, Any]:
        return {"account_no": self.account_no, "name": self.name}

    @property
    def label(self) -> str:
        return f"{self.name} ({self.account_no})"


# Export rows ("self" format keeps input order, "bank" format carries a running balance)
@dataclass(frozen=True)
class SelfReportRow:
    serial: int
    date: str
    party_name: str
    account_no: str
    amount: str
    collector: str

    def as_record(self) -> Dict[str, Any]:
        return {
            "Sr. No": self.serial,
            "Date": self.date,
            "Party Name": self.party_name,
            "Account No": self.account_no,
            "Amount (Rs.)": self.amount,
            "Collector": self.collector,
        }


@dataclass(frozen=True)
class BankReportRow:
    date: str
    account_no: str
    particulars: str
    credit: str
    balance: str

    def as_record(self) -> Dict[str, Any]:
        return {
            "Transaction Date": self.date,
            "Account Number": self.account_no,
            "Particulars": self.particulars,
            "Credit (Rs.)": self.credit,
            "Balance (Rs.)": self.balance,
        }
