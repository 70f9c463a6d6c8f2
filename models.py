# models.py
import datetime as dt
import uuid
from enum import Enum

from sqlalchemy import CheckConstraint, Column, Text, Uuid
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.expression import FunctionElement
from sqlmodel import SQLModel, Field


class uuid_generate_v4(FunctionElement):
  """Server-side UUID default (needs the uuid-ossp extension on PostgreSQL)."""
  type = Uuid()
  name = "uuid_generate_v4"
  inherit_cache = True


@compiles(uuid_generate_v4)
def _compile_uuid_generate(element, compiler, **kw):
  return "uuid_generate_v4()"


@compiles(uuid_generate_v4, "sqlite")
def _compile_uuid_generate_sqlite(element, compiler, **kw):
  # Uuid is stored as 32 hex chars on SQLite
  return "(lower(hex(randomblob(16))))"


def _uuid_pk():
  return Field(
    default_factory=uuid.uuid4,
    primary_key=True,
    sa_column_kwargs={"server_default": uuid_generate_v4()},
  )


class InvoiceStatus(str, Enum):
  PENDING = "pending"
  PAID = "paid"


class User(SQLModel, table=True):
  __tablename__ = "users"

  id: uuid.UUID = _uuid_pk()
  name: str = Field(max_length=255)
  email: str = Field(sa_column=Column(Text, nullable=False, unique=True))
  password: str = Field(sa_column=Column(Text, nullable=False))  # bcrypt hash


class Customer(SQLModel, table=True):
  __tablename__ = "customers"

  id: uuid.UUID = _uuid_pk()
  name: str = Field(max_length=255)
  email: str = Field(max_length=255)
  image_url: str = Field(max_length=255)


class Invoice(SQLModel, table=True):
  __tablename__ = "invoices"
  __table_args__ = (
    CheckConstraint("status IN ('pending', 'paid')", name="invoices_status_check"),
  )

  id: uuid.UUID = _uuid_pk()
  customer_id: str = Field(max_length=255, index=True)
  amount: int  # cents
  status: str = Field(max_length=255)
  date: dt.date


class Revenue(SQLModel, table=True):
  __tablename__ = "revenue"

  month: str = Field(primary_key=True, max_length=4)  # Jan, Feb, ...
  revenue: int


SEED_TABLES = [
  User.__table__,
  Customer.__table__,
  Invoice.__table__,
  Revenue.__table__,
]
