"""User and profile schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import Schema, fields, validate

from socialconnect.models.user import BIO_MAX_LENGTH, VISIBILITY_CHOICES
from socialconnect.services.users.dto import ProfileOut

from .common import BaseSchema


class UserSummarySchema(Schema):
    """Author/actor reference embedded in posts, comments and notifications."""

    id = fields.Integer(required=True)
    username = fields.String(required=True)
    first_name = fields.String(required=True)
    last_name = fields.String(required=True)
    avatar_url = fields.String(allow_none=True)


class PublicUserSchema(UserSummarySchema):
    """Profile fields any permitted viewer may see."""

    bio = fields.String(allow_none=True)
    website = fields.String(allow_none=True)
    location = fields.String(allow_none=True)
    profile_visibility = fields.String(required=True)
    created_at = fields.DateTime(allow_none=True)


class UserSchema(PublicUserSchema):
    """Account representation for the owner and admins. Never includes the hash."""

    email = fields.Email(required=True)
    is_active = fields.Boolean(required=True)
    is_admin = fields.Boolean(required=True)
    email_verified = fields.Boolean(required=True)
    last_login = fields.DateTime(allow_none=True)


class UserStatsSchema(Schema):
    followers_count = fields.Integer(required=True)
    following_count = fields.Integer(required=True)
    posts_count = fields.Integer(required=True)


class ProfileUpdateSchema(BaseSchema):
    """Partial profile update; only keys present in the body are loaded."""

    username = fields.String(validate=validate.Length(min=1))
    first_name = fields.String(validate=validate.Length(min=1, max=100))
    last_name = fields.String(validate=validate.Length(min=1, max=100))
    bio = fields.String(
        allow_none=True,
        validate=validate.Length(
            max=BIO_MAX_LENGTH, error=f"Bio must be {BIO_MAX_LENGTH} characters or less"
        ),
    )
    avatar_url = fields.String(allow_none=True, validate=validate.Length(max=500))
    website = fields.String(allow_none=True, validate=validate.Length(max=255))
    location = fields.String(allow_none=True, validate=validate.Length(max=100))
    profile_visibility = fields.String(
        validate=validate.OneOf(VISIBILITY_CHOICES, error="Invalid profile visibility")
    )


class UserSearchQuerySchema(BaseSchema):
    search = fields.String(load_default=None, validate=validate.Length(max=100))


_user_schema = UserSchema()
_public_user_schema = PublicUserSchema()
_stats_schema = UserStatsSchema()


def dump_profile(profile: ProfileOut, *, public: bool = False) -> dict[str, Any]:
    """Flatten a profile into one mapping: user fields, counts and ``is_following``."""

    schema = _public_user_schema if public else _user_schema
    payload = schema.dump(profile.user)
    payload.update(_stats_schema.dump(profile.stats))
    if public:
        payload["is_following"] = profile.is_following
    return payload
