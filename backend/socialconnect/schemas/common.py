"""Common Marshmallow schemas shared across resources."""

from __future__ import annotations

from typing import Any

from marshmallow import EXCLUDE, Schema, fields, post_load, validate

from socialconnect.services._shared.dto import PageMeta

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


class BaseSchema(Schema):
    """Input schema base: unknown keys are dropped rather than rejected."""

    class Meta:
        unknown = EXCLUDE


class PaginationQuerySchema(BaseSchema):
    """Validate ``page``/``limit`` query parameters, clamping ``limit`` to the maximum."""

    def __init__(
        self, *, default_limit: int = DEFAULT_LIMIT, max_limit: int = MAX_LIMIT, **kwargs: Any
    ) -> None:
        self._default_limit = default_limit
        self._max_limit = max_limit
        super().__init__(**kwargs)

    page = fields.Integer(load_default=1, validate=validate.Range(min=1))
    limit = fields.Integer(validate=validate.Range(min=1))

    @post_load
    def apply_defaults(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        limit = data.get("limit", self._default_limit)
        data["limit"] = min(max(limit, 1), self._max_limit)
        data.setdefault("page", 1)
        return data


class PaginationSchema(Schema):
    """``pagination`` block of list responses."""

    page = fields.Integer(required=True)
    limit = fields.Integer(required=True)
    total = fields.Integer(required=True)
    total_pages = fields.Integer(required=True)


_pagination_schema = PaginationSchema()


def build_pagination(meta: PageMeta) -> dict[str, int]:
    """Return the ``pagination`` mapping for a list response."""

    return _pagination_schema.dump(meta)


class MessageSchema(Schema):
    message = fields.String(required=True)
