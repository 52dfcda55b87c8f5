"""
Paged reads for queries that can exceed PostgREST's max-rows cap.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from scoreline.config import settings

logger = logging.getLogger(__name__)


def fetch_all(build_query: Callable[[], Any], page_size: Optional[int] = None) -> List[Dict[str, Any]]:
    """Run a select page by page with .range() until a short page comes back.

    `build_query` must return a fresh, fully ordered select builder on every
    call; builders keep their range params, so one cannot be reused.
    """
    page_size = page_size or settings.supabase_max_rows
    rows: List[Dict[str, Any]] = []
    start = 0
    while True:
        page = build_query().range(start, start + page_size - 1).execute().data or []
        rows.extend(page)
        if len(page) < page_size:
            break
        start += page_size
    if start:
        logger.debug(f"Fetched {len(rows)} rows in {start // page_size + 1} pages")
    return rows
