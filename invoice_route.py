# invoice_route.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Form
from fastapi.responses import JSONResponse, RedirectResponse
from sqlmodel import Session, select

from actions import INVOICES_PATH, create_invoice
from cache import PageCache
from db import get_page_cache, get_session
from models import Customer, Invoice
from schemas import InvoiceFormErrors, InvoiceListItem

router = APIRouter(prefix="/dashboard", tags=["invoices"])


def _match(q: str, *values: str) -> bool:
  ql = q.strip().lower()
  return any(ql in (v or "").lower() for v in values)


def _render_invoices(session: Session) -> List[InvoiceListItem]:
  customers = {str(c.id): c for c in session.exec(select(Customer)).all()}
  rows = session.exec(select(Invoice).order_by(Invoice.date.desc())).all()

  items = []
  for inv in rows:
    customer = customers.get(inv.customer_id.lower())
    items.append(InvoiceListItem(
      id=str(inv.id),
      customer_id=inv.customer_id,
      name=customer.name if customer else None,
      email=customer.email if customer else None,
      image_url=customer.image_url if customer else None,
      amount=inv.amount,
      status=inv.status,
      date=inv.date.isoformat(),
    ))
  return items


@router.get("/invoices", response_model=List[InvoiceListItem])
def list_invoices(
  query: Optional[str] = None,
  session: Session = Depends(get_session),
  cache: PageCache = Depends(get_page_cache),
):
  items = cache.get_or_render(INVOICES_PATH, lambda: _render_invoices(session))
  query = (query or "").strip()
  if not query:
    return items
  return [i for i in items if _match(query, i.name, i.email, i.status, str(i.amount))]


@router.post("/invoices/create")
def create_invoice_route(
  customerId: Optional[str] = Form(None),
  amount: Optional[str] = Form(None),
  status: Optional[str] = Form(None),
  session: Session = Depends(get_session),
  cache: PageCache = Depends(get_page_cache),
):
  result = create_invoice(
    session,
    {"customerId": customerId, "amount": amount, "status": status},
    cache,
  )
  if isinstance(result, InvoiceFormErrors):
    return JSONResponse(
      status_code=422,
      content={"message": result.message, "errors": result.by_field()},
    )
  return RedirectResponse(INVOICES_PATH, status_code=303)
