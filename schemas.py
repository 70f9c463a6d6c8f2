# schemas.py
"""Form parsing for invoice intake.

``parse_create_invoice`` never raises on bad input: it returns either a
``NewInvoice`` or an ``InvoiceFormErrors`` that callers can render per field.
"""
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from models import InvoiceStatus

# amount INT holds at most 2147483647 cents
MAX_AMOUNT = Decimal("21474836.47")
MAX_CUSTOMER_ID_LENGTH = 255

CREATE_INVOICE_FAILED = "Missing Fields. Failed to Create Invoice."

# form field name -> model attribute
FORM_FIELDS = {
  "customerId": "customer_id",
  "amount": "amount",
  "status": "status",
}


class FieldErrorCode(str, Enum):
  MISSING = "missing"
  INVALID_TYPE = "invalid_type"
  NOT_A_NUMBER = "not_a_number"
  NEGATIVE = "negative"
  TOO_LARGE = "too_large"
  TOO_LONG = "too_long"
  INVALID_CHOICE = "invalid_choice"
  INVALID = "invalid"


ERROR_MESSAGES = {
  FieldErrorCode.MISSING: "This field is required.",
  FieldErrorCode.INVALID_TYPE: "Expected text.",
  FieldErrorCode.NOT_A_NUMBER: "Please enter a valid amount.",
  FieldErrorCode.NEGATIVE: "Please enter an amount of 0 or more.",
  FieldErrorCode.TOO_LARGE: f"Please enter an amount of at most {MAX_AMOUNT}.",
  FieldErrorCode.TOO_LONG: f"Must be at most {MAX_CUSTOMER_ID_LENGTH} characters.",
  FieldErrorCode.INVALID_CHOICE: "Please select an invoice status.",
  FieldErrorCode.INVALID: "Invalid value.",
}

# pydantic error type -> our code
PYDANTIC_ERROR_CODES = {
  "missing": FieldErrorCode.MISSING,
  "string_too_short": FieldErrorCode.MISSING,
  "string_too_long": FieldErrorCode.TOO_LONG,
  "string_type": FieldErrorCode.INVALID_TYPE,
  "decimal_parsing": FieldErrorCode.NOT_A_NUMBER,
  "decimal_type": FieldErrorCode.NOT_A_NUMBER,
  "finite_number": FieldErrorCode.NOT_A_NUMBER,
  "greater_than_equal": FieldErrorCode.NEGATIVE,
  "less_than_equal": FieldErrorCode.TOO_LARGE,
  "enum": FieldErrorCode.INVALID_CHOICE,
  "literal_error": FieldErrorCode.INVALID_CHOICE,
}


class CreateInvoiceForm(BaseModel):
  model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

  customer_id: str = Field(alias="customerId", min_length=1, max_length=MAX_CUSTOMER_ID_LENGTH)
  amount: Decimal = Field(ge=0, le=MAX_AMOUNT, allow_inf_nan=False)
  status: InvoiceStatus


class NewInvoice(BaseModel):
  customer_id: str
  amount: Decimal
  status: InvoiceStatus

  @property
  def amount_in_cents(self) -> int:
    return int((self.amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class FieldError(BaseModel):
  field: str
  code: FieldErrorCode
  message: str


class InvoiceFormErrors(BaseModel):
  message: str = CREATE_INVOICE_FAILED
  errors: List[FieldError] = Field(default_factory=list)

  def by_field(self) -> Dict[str, List[str]]:
    out: Dict[str, List[str]] = {}
    for err in self.errors:
      out.setdefault(err.field, []).append(err.message)
    return out


ParseResult = Union[NewInvoice, InvoiceFormErrors]


def _field_name(loc: tuple) -> str:
  if not loc:
    return "form"
  name = str(loc[0])
  for form_name, attr in FORM_FIELDS.items():
    if name in (form_name, attr):
      return form_name
  return name


def _raw_value(raw: Mapping[str, Any], key: str) -> Optional[Any]:
  value = raw.get(key)
  # empty form inputs arrive as ""
  if isinstance(value, str) and not value.strip():
    return None
  return value


def parse_create_invoice(raw: Mapping[str, Any]) -> ParseResult:
  data = {key: _raw_value(raw, key) for key in FORM_FIELDS}
  data = {k: v for k, v in data.items() if v is not None}

  try:
    form = CreateInvoiceForm.model_validate(data)
  except ValidationError as e:
    errors = []
    for item in e.errors():
      code = PYDANTIC_ERROR_CODES.get(item["type"], FieldErrorCode.INVALID)
      errors.append(FieldError(field=_field_name(item["loc"]), code=code, message=ERROR_MESSAGES[code]))
    return InvoiceFormErrors(errors=errors)

  return NewInvoice(customer_id=form.customer_id, amount=form.amount, status=form.status)


class InvoiceListItem(BaseModel):
  id: str
  customer_id: str
  name: Optional[str] = None
  email: Optional[str] = None
  image_url: Optional[str] = None
  amount: int  # cents
  status: str
  date: str  # YYYY-MM-DD


class ErrorResponse(BaseModel):
  success: bool = False
  error: str
  details: Optional[str] = None
