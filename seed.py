# seed.py
"""Drop, recreate and reseed users, customers, invoices and revenue.

Seeding runs on one connection inside one transaction. The four seeders and
their per-row inserts run concurrently through ``gather_bounded``; statements
on the shared connection are serialized by ``SeedTransaction`` while bcrypt
hashing overlaps in worker threads. Any failed insert rolls the whole
transaction back.
"""
import asyncio
import datetime as dt
import logging
import uuid
from functools import partial
from typing import Any, Dict, List, NamedTuple, Optional

import bcrypt
from sqlalchemy import Table, text
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Connection, CursorResult, Engine
from sqlmodel import SQLModel

import placeholder_data
from batch import DEFAULT_LIMIT, gather_bounded
from errors import ConfigurationError
from models import SEED_TABLES, Customer, Invoice, Revenue, User

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


class SeedData(NamedTuple):
  users: List[Row]
  customers: List[Row]
  invoices: List[Row]
  revenue: List[Row]


def default_seed_data() -> SeedData:
  return SeedData(
    users=placeholder_data.users,
    customers=placeholder_data.customers,
    invoices=placeholder_data.invoices,
    revenue=placeholder_data.revenue,
  )


def insert_ignore(dialect_name: str, table: Table, values: Row, key: str):
  """INSERT ... ON CONFLICT (key) DO NOTHING for the given dialect."""
  if dialect_name == "postgresql":
    stmt = pg_insert(table)
  elif dialect_name == "sqlite":
    stmt = sqlite_insert(table)
  else:
    raise ConfigurationError(f"Conflict-skip insert is not supported on {dialect_name}")
  return stmt.values(**values).on_conflict_do_nothing(index_elements=[key])


def hash_password(password: str, rounds: int) -> str:
  return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds)).decode("utf-8")


def drop_tables(engine: Engine) -> None:
  logger.info("Dropping all tables...")
  SQLModel.metadata.drop_all(engine, tables=SEED_TABLES, checkfirst=True)
  logger.info("All tables dropped")


def create_tables(engine: Engine) -> None:
  with engine.begin() as conn:
    if conn.dialect.name == "postgresql":
      conn.execute(text('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"'))
    SQLModel.metadata.create_all(conn, tables=SEED_TABLES)
  logger.info("Tables created: %s", ", ".join(t.name for t in SEED_TABLES))


class SeedTransaction:
  """A connection shared by concurrent seeders."""

  def __init__(self, conn: Connection):
    self.conn = conn
    self.dialect_name = conn.dialect.name
    self._lock = asyncio.Lock()
    self._inflight: Optional[asyncio.Future] = None

  async def execute(self, stmt) -> CursorResult:
    async with self._lock:
      self._inflight = asyncio.ensure_future(asyncio.to_thread(self.conn.execute, stmt))
      # a cancelled caller must not leave a statement running under a rollback
      return await asyncio.shield(self._inflight)

  async def settle(self) -> None:
    if self._inflight is not None:
      await asyncio.gather(self._inflight, return_exceptions=True)

  async def insert_ignore(self, table: Table, values: Row, key: str) -> int:
    result = await self.execute(insert_ignore(self.dialect_name, table, values, key))
    return result.rowcount


async def seed_users(tx: SeedTransaction, users: List[Row], rounds: int = 10, limit: int = DEFAULT_LIMIT) -> int:
  logger.info("Seeding users...")

  async def insert_user(user: Row) -> int:
    hashed = await asyncio.to_thread(hash_password, user["password"], rounds)
    inserted = await tx.insert_ignore(User.__table__, {
      "id": uuid.UUID(str(user["id"])),
      "name": user["name"],
      "email": user["email"],
      "password": hashed,
    }, "id")
    logger.debug("User inserted: %s", user["email"])
    return inserted

  counts = await gather_bounded([partial(insert_user, u) for u in users], limit)
  logger.info("Users seeded: %d", sum(counts))
  return sum(counts)


async def seed_customers(tx: SeedTransaction, customers: List[Row], limit: int = DEFAULT_LIMIT) -> int:
  logger.info("Seeding customers...")

  async def insert_customer(customer: Row) -> int:
    inserted = await tx.insert_ignore(Customer.__table__, {
      "id": uuid.UUID(str(customer["id"])),
      "name": customer["name"],
      "email": customer["email"],
      "image_url": customer["image_url"],
    }, "id")
    logger.debug("Customer inserted: %s", customer["name"])
    return inserted

  counts = await gather_bounded([partial(insert_customer, c) for c in customers], limit)
  logger.info("Customers seeded: %d", sum(counts))
  return sum(counts)


async def seed_invoices(tx: SeedTransaction, invoices: List[Row], limit: int = DEFAULT_LIMIT) -> int:
  logger.info("Seeding invoices...")

  async def insert_invoice(invoice: Row) -> int:
    # no id: a fresh one is generated per row
    inserted = await tx.insert_ignore(Invoice.__table__, {
      "customer_id": str(invoice["customer_id"]),
      "amount": int(invoice["amount"]),
      "status": invoice["status"],
      "date": dt.date.fromisoformat(str(invoice["date"])),
    }, "id")
    logger.debug("Invoice inserted: %s for customer %s", invoice["amount"], invoice["customer_id"])
    return inserted

  counts = await gather_bounded([partial(insert_invoice, i) for i in invoices], limit)
  logger.info("Invoices seeded: %d", sum(counts))
  return sum(counts)


async def seed_revenue(tx: SeedTransaction, revenue: List[Row], limit: int = DEFAULT_LIMIT) -> int:
  logger.info("Seeding revenue...")

  async def insert_revenue(rev: Row) -> int:
    inserted = await tx.insert_ignore(Revenue.__table__, {
      "month": rev["month"],
      "revenue": int(rev["revenue"]),
    }, "month")
    logger.debug("Revenue inserted for month: %s", rev["month"])
    return inserted

  counts = await gather_bounded([partial(insert_revenue, r) for r in revenue], limit)
  logger.info("Revenue seeded: %d", sum(counts))
  return sum(counts)


async def seed_database(
  engine: Engine,
  bcrypt_rounds: int = 10,
  limit: int = DEFAULT_LIMIT,
  data: Optional[SeedData] = None,
) -> Dict[str, int]:
  """Reset the four tables and load ``data`` (the placeholder fixtures by default).

  Returns the number of rows inserted per table.
  """
  data = data or default_seed_data()
  logger.info("Starting database seeding...")

  await asyncio.to_thread(drop_tables, engine)
  await asyncio.to_thread(create_tables, engine)

  conn = await asyncio.to_thread(engine.connect)
  try:
    trans = conn.begin()
    tx = SeedTransaction(conn)
    try:
      users, customers, invoices, revenue = await gather_bounded([
        partial(seed_users, tx, data.users, bcrypt_rounds, limit),
        partial(seed_customers, tx, data.customers, limit),
        partial(seed_invoices, tx, data.invoices, limit),
        partial(seed_revenue, tx, data.revenue, limit),
      ], limit=4)
    except BaseException:
      await tx.settle()
      await asyncio.to_thread(trans.rollback)
      raise
    await asyncio.to_thread(trans.commit)
  finally:
    await asyncio.to_thread(conn.close)

  counts = {"users": users, "customers": customers, "invoices": invoices, "revenue": revenue}
  logger.info("Database seeded successfully: %s", counts)
  return counts
