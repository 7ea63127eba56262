"""Post, comment and feed schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from socialconnect.models.post import CATEGORY_CHOICES, COMMENT_MAX_LENGTH, POST_MAX_LENGTH

from .common import BaseSchema
from .user import UserSummarySchema

_category = validate.OneOf(CATEGORY_CHOICES, error="Invalid category")
_content_length = validate.Length(
    max=POST_MAX_LENGTH, error=f"Content must be {POST_MAX_LENGTH} characters or less"
)


class PostSchema(Schema):
    id = fields.Integer(required=True)
    author_id = fields.Integer(required=True)
    author = fields.Nested(UserSummarySchema, required=True)
    content = fields.String(allow_none=True)
    image_url = fields.String(allow_none=True)
    category = fields.String(required=True)
    like_count = fields.Integer(required=True)
    comment_count = fields.Integer(required=True)
    is_active = fields.Boolean(required=True)
    created_at = fields.DateTime(allow_none=True)
    updated_at = fields.DateTime(allow_none=True)
    is_liked = fields.Boolean(allow_none=True)


class PostCreateSchema(BaseSchema):
    content = fields.String(load_default=None, allow_none=True, validate=_content_length)
    image_url = fields.String(load_default=None, allow_none=True, validate=validate.Length(max=500))
    category = fields.String(load_default="general", validate=_category)


class PostUpdateSchema(BaseSchema):
    """Partial post update; only keys present in the body are loaded."""

    content = fields.String(allow_none=True, validate=_content_length)
    image_url = fields.String(allow_none=True, validate=validate.Length(max=500))
    category = fields.String(validate=_category)


class FeedQuerySchema(BaseSchema):
    category = fields.String(load_default=None, validate=_category)
    author_id = fields.Integer(load_default=None)
    following = fields.Boolean(load_default=False)


class CommentSchema(Schema):
    id = fields.Integer(required=True)
    post_id = fields.Integer(required=True)
    author = fields.Nested(UserSummarySchema, required=True)
    content = fields.String(required=True)
    created_at = fields.DateTime(allow_none=True)


class CommentCreateSchema(BaseSchema):
    content = fields.String(
        required=True,
        validate=validate.Length(
            max=COMMENT_MAX_LENGTH,
            error=f"Comment must be {COMMENT_MAX_LENGTH} characters or less",
        ),
        error_messages={"required": "Comment content is required"},
    )
