# batch.py
import asyncio
from typing import Awaitable, Callable, Iterable, List, TypeVar

T = TypeVar("T")

DEFAULT_LIMIT = 10


async def gather_bounded(jobs: Iterable[Callable[[], Awaitable[T]]], limit: int = DEFAULT_LIMIT) -> List[T]:
  """Run coroutine factories with at most ``limit`` in flight.

  Results come back in submission order. The first failure cancels whatever
  is still pending and is re-raised; nothing partial is returned. When this
  returns or raises, every job it started has finished.
  """
  if limit < 1:
    raise ValueError(f"limit must be >= 1, got {limit}")

  semaphore = asyncio.Semaphore(limit)

  async def run(job: Callable[[], Awaitable[T]]) -> T:
    async with semaphore:
      return await job()

  tasks = [asyncio.ensure_future(run(job)) for job in jobs]
  if not tasks:
    return []

  try:
    await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
  finally:
    for task in tasks:
      if not task.done():
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)

  for task in tasks:
    if not task.cancelled() and task.exception() is not None:
      raise task.exception()
  return [task.result() for task in tasks]
