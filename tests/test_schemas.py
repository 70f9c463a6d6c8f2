"""Tests for invoice form parsing."""

from decimal import Decimal

import pytest

from models import InvoiceStatus
from schemas import (
  CREATE_INVOICE_FAILED,
  FieldErrorCode,
  InvoiceFormErrors,
  NewInvoice,
  parse_create_invoice,
)


def _codes(result):
  return {e.field: e.code for e in result.errors}


def test_parse_valid_form():
  result = parse_create_invoice({"customerId": "c1", "amount": "12.50", "status": "paid"})

  assert isinstance(result, NewInvoice)
  assert result.customer_id == "c1"
  assert result.amount == Decimal("12.50")
  assert result.status is InvoiceStatus.PAID
  assert result.amount_in_cents == 1250


@pytest.mark.parametrize("amount,cents", [
  ("0", 0),
  ("1", 100),
  ("19.99", 1999),
  ("0.005", 1),
  ("157.95", 15795),
])
def test_amount_in_cents_rounds_half_up(amount, cents):
  result = parse_create_invoice({"customerId": "c1", "amount": amount, "status": "pending"})
  assert result.amount_in_cents == cents


def test_invalid_status_is_reported():
  result = parse_create_invoice({"customerId": "c1", "amount": "10", "status": "overdue"})

  assert isinstance(result, InvoiceFormErrors)
  assert _codes(result) == {"status": FieldErrorCode.INVALID_CHOICE}
  assert result.message == CREATE_INVOICE_FAILED


@pytest.mark.parametrize("amount", ["abc", "12,50,1", "NaN", "inf"])
def test_non_numeric_amount_is_reported(amount):
  result = parse_create_invoice({"customerId": "c1", "amount": amount, "status": "paid"})

  assert isinstance(result, InvoiceFormErrors)
  assert _codes(result) == {"amount": FieldErrorCode.NOT_A_NUMBER}


def test_negative_amount_is_reported():
  result = parse_create_invoice({"customerId": "c1", "amount": "-5", "status": "paid"})

  assert _codes(result) == {"amount": FieldErrorCode.NEGATIVE}


def test_empty_form_reports_every_field():
  result = parse_create_invoice({})

  assert isinstance(result, InvoiceFormErrors)
  assert _codes(result) == {
    "customerId": FieldErrorCode.MISSING,
    "amount": FieldErrorCode.MISSING,
    "status": FieldErrorCode.MISSING,
  }


def test_blank_values_count_as_missing():
  result = parse_create_invoice({"customerId": "  ", "amount": "", "status": "paid"})

  assert _codes(result) == {
    "customerId": FieldErrorCode.MISSING,
    "amount": FieldErrorCode.MISSING,
  }


def test_non_string_customer_id_is_reported():
  result = parse_create_invoice({"customerId": 42, "amount": "1", "status": "paid"})

  assert _codes(result) == {"customerId": FieldErrorCode.INVALID_TYPE}


def test_errors_grouped_by_field():
  result = parse_create_invoice({"customerId": "c1", "amount": "x", "status": "nope"})

  grouped = result.by_field()
  assert set(grouped) == {"amount", "status"}
  assert grouped["status"] == ["Please select an invoice status."]


@pytest.mark.parametrize("amount", ["1e30", "30000000", "21474836.48"])
def test_amount_above_int_column_is_reported(amount):
  result = parse_create_invoice({"customerId": "c1", "amount": amount, "status": "paid"})

  assert isinstance(result, InvoiceFormErrors)
  assert _codes(result) == {"amount": FieldErrorCode.TOO_LARGE}


def test_largest_amount_fits_int_column():
  result = parse_create_invoice({"customerId": "c1", "amount": "21474836.47", "status": "paid"})

  assert isinstance(result, NewInvoice)
  assert result.amount_in_cents == 2147483647


def test_customer_id_longer_than_column_is_reported():
  result = parse_create_invoice({"customerId": "c" * 256, "amount": "1", "status": "paid"})

  assert _codes(result) == {"customerId": FieldErrorCode.TOO_LONG}


def test_customer_id_at_column_length_is_accepted():
  result = parse_create_invoice({"customerId": "c" * 255, "amount": "1", "status": "paid"})

  assert isinstance(result, NewInvoice)
