from datetime import date as _date
from decimal import Decimal

from cashbook.domain import Entry, Party
from cashbook.functional import Either, Right, failure
from cashbook.money import ZERO, parse_currency

ACCOUNT_NO_LENGTH = 3

MISSING_FIELDS = "Please fill all fields"
BAD_ACCOUNT_NO = "Account No must be a 3-digit number"
BAD_AMOUNT = "Amount must be a positive number"
BAD_DATE = "Date must be a valid date (YYYY-MM-DD)"


def _blank(value) -> bool:
    return value is None or str(value).strip() == ""


def validate_account_no(text) -> Either[dict, str]:
    account_no = "" if text is None else str(text).strip()
    # isdigit() alone would accept non-ASCII digits such as "١٢٣"
    if len(account_no) != ACCOUNT_NO_LENGTH or not (account_no.isascii() and account_no.isdigit()):
        return failure("invalid_account_no", BAD_ACCOUNT_NO, account_no=account_no)
    return Right(account_no)


def validate_amount(text) -> Either[dict, Decimal]:
    amount = parse_currency(text)
    if amount is None or amount <= ZERO:
        return failure("invalid_amount", BAD_AMOUNT, amount=text)
    return Right(amount)


def validate_date(text) -> Either[dict, str]:
    try:
        return Right(_date.fromisoformat(str(text).strip()).isoformat())
    except ValueError:
        return failure("invalid_date", BAD_DATE, date=text)


def validate_entry_form(date, account_no, amount, collector) -> Either[dict, Entry]:
    """Check the entry form before anything is sent to the store.

    Required fields are checked first, then date, account number and amount
    in that order; the first failure wins.
    """
    if any(_blank(v) for v in (date, account_no, amount, collector)):
        return failure("missing_fields", MISSING_FIELDS)

    return validate_date(date).bind(
        lambda d: validate_account_no(account_no).bind(
            lambda acc: validate_amount(amount).map(
                lambda amt: Entry(date=d, account_no=acc, amount=amt, collector=str(collector).strip())
            )
        )
    )


def validate_party_form(name, account_no) -> Either[dict, Party]:
    if _blank(name) or _blank(account_no):
        return failure("missing_fields", MISSING_FIELDS)
    return validate_account_no(account_no).map(
        lambda acc: Party(account_no=acc, name=str(name).strip())
    )
