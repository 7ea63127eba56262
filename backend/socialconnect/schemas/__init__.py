"""Convenience exports for application schemas."""

from __future__ import annotations

from .admin import (
    AdminPostQuerySchema,
    AdminUserQuerySchema,
    ProvisionSchema,
    SystemStatsSchema,
)
from .auth import (
    ChangePasswordSchema,
    LoginSchema,
    LogoutSchema,
    PasswordResetConfirmSchema,
    PasswordResetRequestSchema,
    RefreshSchema,
    RegisterSchema,
    TokenResponseSchema,
    UsernameQuerySchema,
)
from .common import (
    BaseSchema,
    MessageSchema,
    PaginationQuerySchema,
    PaginationSchema,
    build_pagination,
)
from .notification import NotificationQuerySchema, NotificationSchema
from .post import (
    CommentCreateSchema,
    CommentSchema,
    FeedQuerySchema,
    PostCreateSchema,
    PostSchema,
    PostUpdateSchema,
)
from .user import (
    ProfileUpdateSchema,
    PublicUserSchema,
    UserSchema,
    UserSearchQuerySchema,
    UserStatsSchema,
    UserSummarySchema,
    dump_profile,
)

__all__ = [
    "AdminPostQuerySchema",
    "AdminUserQuerySchema",
    "ProvisionSchema",
    "SystemStatsSchema",
    "ChangePasswordSchema",
    "LoginSchema",
    "LogoutSchema",
    "PasswordResetConfirmSchema",
    "PasswordResetRequestSchema",
    "RefreshSchema",
    "RegisterSchema",
    "TokenResponseSchema",
    "UsernameQuerySchema",
    "BaseSchema",
    "MessageSchema",
    "PaginationQuerySchema",
    "PaginationSchema",
    "build_pagination",
    "NotificationQuerySchema",
    "NotificationSchema",
    "CommentCreateSchema",
    "CommentSchema",
    "FeedQuerySchema",
    "PostCreateSchema",
    "PostSchema",
    "PostUpdateSchema",
    "ProfileUpdateSchema",
    "PublicUserSchema",
    "UserSchema",
    "UserSearchQuerySchema",
    "UserStatsSchema",
    "UserSummarySchema",
    "dump_profile",
]
