# cache.py
import logging
import threading
from collections import OrderedDict
from typing import Any, Callable

logger = logging.getLogger(__name__)

DEFAULT_MAX_PAGES = 64


class PageCache:
  """Rendered pages keyed by path, least recently used evicted first.

  Lives in app.state. Filtering (search queries) happens per request on top
  of the cached page, so the number of entries is bounded by the routes.
  """

  def __init__(self, max_pages: int = DEFAULT_MAX_PAGES):
    if max_pages < 1:
      raise ValueError(f"max_pages must be >= 1, got {max_pages}")
    self.max_pages = max_pages
    self._pages: "OrderedDict[str, Any]" = OrderedDict()
    self._lock = threading.Lock()

  def get_or_render(self, path: str, render: Callable[[], Any]) -> Any:
    with self._lock:
      if path in self._pages:
        self._pages.move_to_end(path)
        return self._pages[path]
    page = render()
    with self._lock:
      self._pages[path] = page
      self._pages.move_to_end(path)
      while len(self._pages) > self.max_pages:
        evicted, _ = self._pages.popitem(last=False)
        logger.debug("Evicted cached page %s", evicted)
    return page

  def revalidate_path(self, path: str) -> bool:
    with self._lock:
      dropped = self._pages.pop(path, None) is not None
    logger.info("Revalidated %s (cached page dropped: %s)", path, dropped)
    return dropped

  def __contains__(self, path: str) -> bool:
    with self._lock:
      return path in self._pages

  def __len__(self) -> int:
    with self._lock:
      return len(self._pages)
