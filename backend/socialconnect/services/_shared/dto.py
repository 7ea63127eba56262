# comments in English; reST docstrings strict
from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PaginationIn:
    """
    Input pagination contract.

    :param page: 1-based page number.
    :type page: int
    :param limit: Page size (> 0).
    :type limit: int
    """

    page: int = 1
    limit: int = 20


@dataclass(frozen=True, slots=True)
class PageMeta:
    """
    Output pagination metadata.

    :param page: Current page (1-based).
    :param limit: Page size.
    :param total: Total rows available.
    :param total_pages: Number of pages for ``total`` rows at ``limit`` per page.
    """

    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def build(cls, *, page: int, limit: int, total: int) -> PageMeta:
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=math.ceil(total / limit) if limit else 0,
        )

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1
