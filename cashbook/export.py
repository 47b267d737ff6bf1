import io
from typing import Iterable, List, Optional, Union

import pandas as pd

from cashbook.domain import BankReportRow, SelfReportRow

SELF_SHEET = "Cash Collections"
BANK_SHEET = "Bank Statement"
XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

SELF_COLUMNS = ["Sr. No", "Date", "Party Name", "Account No", "Amount (Rs.)", "Collector"]
BANK_COLUMNS = ["Transaction Date", "Account Number", "Particulars", "Credit (Rs.)", "Balance (Rs.)"]

Row = Union[SelfReportRow, BankReportRow]


def to_dataframe(rows: Iterable[Row], columns: Optional[List[str]] = None) -> pd.DataFrame:
    rows = list(rows)
    if columns is None:
        columns = BANK_COLUMNS if rows and isinstance(rows[0], BankReportRow) else SELF_COLUMNS
    return pd.DataFrame([r.as_record() for r in rows], columns=columns)


def to_excel_bytes(rows: Iterable[Row], sheet_name: str = SELF_SHEET, columns: Optional[List[str]] = None) -> bytes:
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        to_dataframe(rows, columns).to_excel(writer, sheet_name=sheet_name, index=False)
    return buffer.getvalue()


def to_csv_bytes(rows: Iterable[Row], columns: Optional[List[str]] = None) -> bytes:
    return to_dataframe(rows, columns).to_csv(index=False).encode("utf-8")


def export_filename(prefix: str, today: str, ext: str = "xlsx") -> str:
    """export_filename("Cash_Collections", "2025-01-01") -> "Cash_Collections_2025-01-01.xlsx" """
    return f"{prefix}_{today}.{ext}"
