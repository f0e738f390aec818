from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from .core import DEFAULT_MAX_PAGES, DEFAULT_PAGE_SIZE
from .gateway import Page
from .logger import logger
from .reporter import Reporter, ReportLevel

T = TypeVar("T")


def list_all(
    fetch_page: Callable[[str | None, int], Page[T]],
    reporter: Reporter,
    max_pages: int = DEFAULT_MAX_PAGES,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> list[T]:
    """
    Follows page tokens until the listing is exhausted or `max_pages` pages
    have been read, whichever comes first.

    `fetch_page(page_token, page_size)` is bound to one endpoint at the call
    site, e.g. ``lambda token, size: gateway.list_disks(project, zone, token, size)``.
    Hitting the cap while more results exist is reported as a warning and the
    items gathered so far are returned.
    """
    items: list[T] = []
    token: str | None = None
    pages = 0

    while True:
        page = fetch_page(token, page_size)
        pages += 1
        items.extend(page.items or [])
        token = page.next_page_token
        logger.debug(f"Fetched page {pages} ({len(page.items or [])} items)")

        if not token:
            break

        if pages >= max_pages:
            reporter.report(
                ReportLevel.WARNING,
                f"Max pages ({max_pages}) reached, but more results exist - "
                "truncating results...",
            )
            break

    return items
