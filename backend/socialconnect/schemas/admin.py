"""Admin console schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from socialconnect.services.admin.service import STATUS_ACTIVE, STATUS_INACTIVE

from .common import BaseSchema


class _UserStatsSchema(Schema):
    total = fields.Integer(required=True)
    active = fields.Integer(required=True)
    active_today = fields.Integer(required=True)


class _PostStatsSchema(Schema):
    total = fields.Integer(required=True)
    created_today = fields.Integer(required=True)


class _EngagementSchema(Schema):
    total_likes = fields.Integer(required=True)
    total_comments = fields.Integer(required=True)
    total_follows = fields.Integer(required=True)


class SystemStatsSchema(Schema):
    users = fields.Nested(_UserStatsSchema, required=True)
    posts = fields.Nested(_PostStatsSchema, required=True)
    engagement = fields.Nested(_EngagementSchema, required=True)


class AdminUserQuerySchema(BaseSchema):
    search = fields.String(load_default=None, validate=validate.Length(max=100))
    status = fields.String(
        load_default=None, validate=validate.OneOf((STATUS_ACTIVE, STATUS_INACTIVE))
    )


class AdminPostQuerySchema(BaseSchema):
    include_inactive = fields.Boolean(load_default=False)


class ProvisionSchema(BaseSchema):
    user_id = fields.Integer(load_default=None)
    secret_key = fields.String(load_default=None)
