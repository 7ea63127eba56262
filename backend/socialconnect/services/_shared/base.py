# socialconnect/services/_shared/base.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from socialconnect.repositories.base import Pagination
from socialconnect.services._shared.dto import PageMeta, PaginationIn
from socialconnect.services._shared.errors import AuthorizationError
from socialconnect.services._shared.policies.common import is_owner
from socialconnect.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)

MAX_PAGE_SIZE = 100


@dataclass(slots=True)
class ServiceContext:
    """
    Carry cross-cutting request-scoped data.

    :param actor_id: Authenticated user identifier, ``None`` for anonymous.
    :param is_admin: Whether the actor's token carries the admin claim.
    :param request_id: Correlation id for logging/tracing.
    """

    actor_id: int | None = None
    is_admin: bool = False
    request_id: str | None = None


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Offer shared validation helpers (pagination, ownership).
    * Keep services thin, orchestration-only, no web leakage.

    Notes
    -----
    Services never touch the global session; they always go through a Unit
    of Work so a handler's writes commit or roll back together.
    """

    DEFAULT_READ_ISOLATION = "READ COMMITTED"

    def __init__(self, *, ctx: ServiceContext | None = None) -> None:
        self.ctx = ctx or ServiceContext()
        self.log = logging.getLogger(type(self).__module__)

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork()

    def ro_uow(
        self, *, isolation: str | None = None, enforce_db_readonly: bool = True
    ) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :param isolation: Transaction isolation level (e.g. "READ COMMITTED").
        :param enforce_db_readonly: Apply ``SET TRANSACTION READ ONLY`` when supported.
        """
        return SQLAlchemyReadOnlyUnitOfWork(
            isolation_level=isolation or self.DEFAULT_READ_ISOLATION,
            enforce_db_readonly=enforce_db_readonly,
        )

    # ----------------------- Validation utilities ---------------------------

    def ensure_pagination(
        self, page_in: PaginationIn | None, *, sort: list[str] | None = None
    ) -> Pagination:
        """
        Build a repository ``Pagination`` with clamping (``1 <= limit <= 100``).

        :param page_in: Requested page; defaults to page 1 of 20.
        :param sort: Sort tokens like ``["-created_at"]``.
        """
        page_in = page_in or PaginationIn()
        page = max(1, int(page_in.page))
        limit = min(max(1, int(page_in.limit)), MAX_PAGE_SIZE)
        return Pagination(page=page, limit=limit, sort=list(sort or ["-created_at"]))

    @staticmethod
    def page_meta(pagination: Pagination, total: int) -> PageMeta:
        return PageMeta.build(page=pagination.page, limit=pagination.limit, total=total)

    @staticmethod
    def now() -> datetime:
        return datetime.now(UTC)

    # --------------------------- AuthZ --------------------------------

    def ensure_owner(self, actor_id: int | None, owner_id: int, *, msg: str | None = None) -> None:
        """
        Ensure the current actor is the resource owner.

        :raises AuthorizationError: If actor is not the owner.
        """
        if not is_owner(actor_id=actor_id, owner_id=owner_id):
            raise AuthorizationError(msg or "You can only modify your own content.")
