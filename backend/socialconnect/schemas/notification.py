"""Notification schemas."""

from __future__ import annotations

from marshmallow import Schema, fields

from .common import BaseSchema
from .user import UserSummarySchema


class NotificationSchema(Schema):
    id = fields.Integer(required=True)
    type = fields.String(required=True)
    content = fields.String(required=True)
    is_read = fields.Boolean(required=True)
    related_post_id = fields.Integer(allow_none=True)
    related_user = fields.Nested(UserSummarySchema, allow_none=True)
    created_at = fields.DateTime(allow_none=True)


class NotificationQuerySchema(BaseSchema):
    unread_only = fields.Boolean(load_default=False)
