# actions.py
import datetime as dt
import logging
from typing import Any, Mapping, Optional, Union

from sqlmodel import Session

from cache import PageCache
from models import Invoice
from schemas import InvoiceFormErrors, parse_create_invoice

logger = logging.getLogger(__name__)

INVOICES_PATH = "/dashboard/invoices"


def utc_today() -> dt.date:
  return dt.datetime.now(dt.timezone.utc).date()


def create_invoice(
  session: Session,
  form_data: Mapping[str, Any],
  cache: PageCache,
  today: Optional[dt.date] = None,
) -> Union[Invoice, InvoiceFormErrors]:
  """Validate a submitted invoice form and insert it.

  Returns the field errors without touching the database when the form is
  invalid. On success the invoices listing is revalidated and the new row is
  returned; the caller redirects to INVOICES_PATH. Database errors propagate.
  """
  parsed = parse_create_invoice(form_data)
  if isinstance(parsed, InvoiceFormErrors):
    logger.info("Rejected invoice form: %s", parsed.by_field())
    return parsed

  invoice = Invoice(
    customer_id=parsed.customer_id,
    amount=parsed.amount_in_cents,
    status=parsed.status.value,
    date=today or utc_today(),
  )
  session.add(invoice)
  session.commit()
  session.refresh(invoice)
  logger.info("Invoice %s created for customer %s (%d cents)", invoice.id, invoice.customer_id, invoice.amount)

  cache.revalidate_path(INVOICES_PATH)
  return invoice
