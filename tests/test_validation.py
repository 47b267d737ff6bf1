from decimal import Decimal

import pytest

from cashbook.domain import Entry, Party
from cashbook.validation import (
    BAD_ACCOUNT_NO,
    BAD_AMOUNT,
    MISSING_FIELDS,
    validate_account_no,
    validate_amount,
    validate_date,
    validate_entry_form,
    validate_party_form,
)


@pytest.mark.parametrize("text", ["12", "12a", "1234", "", "abc", "1 2", "١٢٣", None])
def test_account_no_rejected(text):
    result = validate_account_no(text)
    assert result.is_left()
    assert result.get_error()["message"] == BAD_ACCOUNT_NO


def test_account_no_accepted():
    assert validate_account_no("123").get_or_else(None) == "123"
    assert validate_account_no(" 007 ").get_or_else(None) == "007"


@pytest.mark.parametrize("text", ["0", "-5", "0.00", "abc", "", "nan", "inf", None, "1e30", "9" * 29])
def test_amount_rejected(text):
    result = validate_amount(text)
    assert result.is_left()
    assert result.get_error()["error"] == "invalid_amount"
    assert result.get_error()["message"] == BAD_AMOUNT


def test_amount_accepted_and_quantized():
    assert validate_amount("10.50").get_or_else(None) == Decimal("10.50")
    assert validate_amount("10.5").get_or_else(None) == Decimal("10.5")
    assert validate_amount(3).get_or_else(None) == Decimal("3.00")


def test_date():
    assert validate_date("2025-01-01").get_or_else(None) == "2025-01-01"
    assert validate_date("2025-02-30").is_left()
    assert validate_date("yesterday").is_left()


def test_entry_form_ok():
    result = validate_entry_form("2025-01-01", "101", "10.50", "Kalpesh")
    assert result.is_right()
    entry = result.get_or_else(None)
    assert entry == Entry(date="2025-01-01", account_no="101", amount=Decimal("10.50"), collector="Kalpesh")
    assert entry.to_row()["amount"] == 10.5


def test_entry_form_missing_field_reported_first():
    result = validate_entry_form("2025-01-01", "12", "", "Kalpesh")
    assert result.get_error()["message"] == MISSING_FIELDS


def test_entry_form_bad_account_before_amount():
    result = validate_entry_form("2025-01-01", "12a", "-5", "Kalpesh")
    assert result.get_error()["message"] == BAD_ACCOUNT_NO


def test_entry_form_bad_amount():
    result = validate_entry_form("2025-01-01", "123", "0", "Kalpesh")
    assert result.get_error()["message"] == BAD_AMOUNT


def test_entry_form_amount_too_large():
    result = validate_entry_form("2025-01-01", "101", "1e30", "Kalpesh")
    assert result.get_error()["message"] == BAD_AMOUNT


def test_party_form():
    assert validate_party_form(" Acme ", "101").get_or_else(None) == Party(account_no="101", name="Acme")
    assert validate_party_form("", "101").get_error()["message"] == MISSING_FIELDS
    assert validate_party_form("Acme", "10").get_error()["message"] == BAD_ACCOUNT_NO
