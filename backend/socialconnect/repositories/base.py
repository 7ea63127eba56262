"""Repository base class for SQLAlchemy 2.x aggregates.

Repositories translate between ORM rows and queries; they flush but never
commit or roll back, the Unit of Work owns the transaction. Listing is
always deterministic: whitelisted sort keys first, then the primary key.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import ColumnElement, Select, func, select
from sqlalchemy.orm import InstrumentedAttribute, Session

from socialconnect.core.extensions import db

E = TypeVar("E")  # mapped entity


@dataclass(slots=True)
class Pagination:
    """1-based page request plus public sort tokens such as ``"-created_at"``."""

    page: int
    limit: int
    sort: list[str]


@dataclass(slots=True)
class Page(Generic[E]):
    items: Sequence[E]
    total: int
    page: int
    limit: int


class BaseRepository(Generic[E]):
    """Persistence for one mapped model.

    Subclasses set ``model`` and may override the hooks ``_sortable_fields``,
    ``_updatable_fields`` and ``_soft_delete``.
    """

    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        """Injected session, or the Flask-scoped one when none was given."""
        return self._session if self._session is not None else cast(Session, db.session)

    # -- hooks -----------------------------------------------------------------

    def _pk_attr(self) -> InstrumentedAttribute[Any]:
        return cast(InstrumentedAttribute[Any], getattr(self.model, "id"))

    def _sortable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        return {}

    def _updatable_fields(self) -> set[str]:
        """Keys :meth:`assign_updates` accepts. Empty means nothing is editable."""
        return set()

    def _soft_delete(self, instance: E) -> bool:
        """Return ``True`` after marking ``instance`` deleted in place."""
        return False

    # -- reads -----------------------------------------------------------------

    def _where(self, **filters: Any) -> list[ColumnElement[bool]]:
        return [getattr(self.model, name) == value for name, value in filters.items()]

    def get(self, entity_id: Any) -> E | None:
        stmt = select(self.model).where(self._pk_attr() == entity_id)
        return cast(E | None, self.session.scalars(stmt).first())

    def find_one(self, **filters: Any) -> E | None:
        stmt = select(self.model).where(*self._where(**filters))
        return cast(E | None, self.session.scalars(stmt).first())

    def exists(self, **filters: Any) -> bool:
        return self.count(*self._where(**filters)) > 0

    def count(self, *criteria: Any) -> int:
        stmt = select(func.count()).select_from(self.model).where(*criteria)
        return int(self.session.execute(stmt).scalar_one())

    # -- writes ----------------------------------------------------------------

    def flush(self) -> None:
        self.session.flush()

    def add(self, instance: E) -> E:
        """Stage and flush so the PK is set and unique violations raise here."""
        self.session.add(instance)
        self.flush()
        return instance

    def delete(self, instance: E) -> None:
        if not self._soft_delete(instance):
            self.session.delete(instance)
        self.flush()

    def assign_updates(self, instance: E, fields: Mapping[str, Any], *, flush: bool = True) -> E:
        """Assign whitelisted keys through ``setattr`` so ``@validates`` hooks run.

        :raises ValueError: ``fields`` holds a key outside ``_updatable_fields``.
        """
        rejected = sorted(set(fields) - self._updatable_fields())
        if rejected:
            raise ValueError(f"Unknown or non-updatable fields: {rejected}")
        for name, value in fields.items():
            setattr(instance, name, value)
        if flush:
            self.flush()
        return instance

    # -- listing ---------------------------------------------------------------

    def _order_by(self, stmt: Select[Any], tokens: Sequence[str]) -> Select[Any]:
        """Apply whitelisted sort tokens, then the PK as tiebreaker.

        Unknown tokens are skipped. The PK follows the direction of the first
        applied token so newest-first listings stay newest-first on ties.
        """
        allowed = self._sortable_fields()
        clauses: list[Any] = []
        descending_first: bool | None = None
        for token in tokens:
            descending = token.startswith("-")
            column = allowed.get(token.lstrip("-").strip())
            if column is None:
                continue
            if descending_first is None:
                descending_first = descending
            clauses.append(column.desc() if descending else column.asc())
        pk = self._pk_attr()
        clauses.append(pk.desc() if descending_first else pk.asc())
        return stmt.order_by(*clauses)

    def paginate_stmt(self, stmt: Select[Any], pagination: Pagination) -> Page[E]:
        """Sort ``stmt`` and return the requested page with the total row count."""
        page = max(int(pagination.page), 1)
        limit = max(int(pagination.limit), 1)

        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        total = int(self.session.execute(count_stmt).scalar_one())

        ordered = self._order_by(stmt, pagination.sort)
        rows = self.session.scalars(ordered.limit(limit).offset((page - 1) * limit))
        return Page(items=list(rows.unique()), total=total, page=page, limit=limit)
