"""
Pagination of a collection.

    >>> paginator = Paginator(total_entries=204, entries_per_page=20, current_page=5)
    >>> paginator.last_page, paginator.offset, paginator.limit
    (11, 80, 20)
    >>> rows = query.limit(paginator.limit).offset(paginator.offset)
"""

import math
from typing import Any, Iterator

import structlog

from .config import get_settings
from .validation import builder as v
from .validation.exceptions import ConfigurationError

logger = structlog.get_logger(__name__)

PAGE_SCHEMA = v.trim() | v.optional() | v.integer()


class Paginator:
    """
    Page arithmetic for ``total_entries`` split into pages.

    ``current_page`` is always kept within ``first_page`` and ``last_page``;
    assigning a value outside that range clamps it.
    """

    def __init__(self, total_entries: int, entries_per_page: int, current_page: int = 1):
        if isinstance(entries_per_page, bool) or not isinstance(entries_per_page, int) or entries_per_page < 1:
            raise ConfigurationError(
                "entries_per_page must be a positive integer",
                option="entries_per_page",
                value=entries_per_page,
            )
        self.total_entries = max(int(total_entries), 0)
        self.entries_per_page = entries_per_page
        self.last_page = max(math.ceil(self.total_entries / entries_per_page), self.first_page)
        self.current_page = current_page

    @classmethod
    def from_form_data(
        cls,
        total_entries: int,
        data: Any,
        entries_per_page: int | None = None,
        param: str = "page",
    ) -> "Paginator":
        """
        Build a paginator from a request's form data (or any mapping).

        A missing or malformed page parameter means the first page. The
        page size defaults to DEFAULT_ENTRIES_PER_PAGE and is capped at
        MAX_ENTRIES_PER_PAGE.
        """
        settings = get_settings()
        per_page = min(
            entries_per_page or settings.DEFAULT_ENTRIES_PER_PAGE,
            settings.MAX_ENTRIES_PER_PAGE,
        )

        raw = data.get(param) if data is not None else None
        result = PAGE_SCHEMA.validate(raw)
        page = result.value if result.success and result.value is not None else 1
        if result.error:
            logger.debug("Ignoring malformed page parameter", param=param, value=raw)

        return cls(total_entries, per_page, page)

    @property
    def first_page(self) -> int:
        """Always 1; provided to complement ``last_page``."""
        return 1

    @property
    def current_page(self) -> int:
        return self._current_page

    @current_page.setter
    def current_page(self, new_value: int) -> None:
        self._current_page = min(max(new_value, self.first_page), self.last_page)

    @property
    def is_first_page(self) -> bool:
        return self.current_page == self.first_page

    @property
    def is_last_page(self) -> bool:
        return self.current_page == self.last_page

    @property
    def prev_page(self) -> int | None:
        """Previous page number, or None on the first page."""
        return None if self.is_first_page else self.current_page - 1

    @property
    def next_page(self) -> int | None:
        """Next page number, or None on the last page."""
        return None if self.is_last_page else self.current_page + 1

    def pages(self) -> Iterator[int]:
        """Every page number from the first to the last page."""
        return iter(range(self.first_page, self.last_page + 1))

    @property
    def limit(self) -> int:
        return self.entries_per_page

    @property
    def offset(self) -> int:
        """Number of entries to skip to reach the current page."""
        return (self.current_page - 1) * self.entries_per_page

    def __repr__(self) -> str:
        return (
            f"Paginator(total_entries={self.total_entries}, "
            f"entries_per_page={self.entries_per_page}, current_page={self.current_page})"
        )
