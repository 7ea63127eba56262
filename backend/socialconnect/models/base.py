"""Column mixins shared by the SocialConnect tables."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, func
from sqlalchemy.orm import Mapped, mapped_column


class PKMixin:
    """Integer surrogate key ``id``."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True)


class CreatedAtMixin:
    """Insert timestamp set by the database.

    Edge tables (follows, likes, refresh tokens) are never edited, so they
    carry only this column.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class TimestampMixin(CreatedAtMixin):
    """``created_at`` plus an ``updated_at`` bumped on every UPDATE."""

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )


class SoftDeleteMixin:
    """``is_active`` flag used instead of hard deletes.

    Readers filter on ``is_active``; writers call :meth:`deactivate`.
    """

    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default="true"
    )

    def deactivate(self) -> None:
        self.is_active = False


class ReprMixin:
    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={getattr(self, 'id', None)}>"
