"""
Paginated fetching against the store.

The store caps every read at PAGE_SIZE rows, so listing everything means
walking offset windows until a short page comes back.
"""
import logging
from typing import Any, Callable, List, Optional, Sequence

from sellerfin.core.config import settings

logger = logging.getLogger(__name__)


def fetch_all_pages(fetch_page: Callable[[int, int], Sequence[Any]], page_size: Optional[int] = None) -> List[Any]:
    """Call fetch_page(offset, limit) until a page shorter than page_size"""
    if page_size is None:
        page_size = settings.PAGE_SIZE
    if page_size <= 0:
        raise ValueError("page_size must be positive")

    rows: List[Any] = []
    offset = 0
    while True:
        page = list(fetch_page(offset, page_size))
        rows.extend(page)
        if len(page) < page_size:
            break
        offset += page_size

    if offset:
        logger.debug(f"Fetched {len(rows)} rows in {offset // page_size + 1} pages")
    return rows


def fetch_all_rows(query, page_size: Optional[int] = None) -> List[Any]:
    """
    Page through a SQLAlchemy query.

    The query must already carry a stable order_by (date desc, then id),
    otherwise rows can repeat or vanish between windows.
    """
    return fetch_all_pages(lambda offset, limit: query.offset(offset).limit(limit).all(), page_size)
