"""Notification inbox endpoints."""

from __future__ import annotations

from flask import Blueprint, request

from socialconnect.api.deps import (
    json_response,
    parse_pagination,
    require_auth,
    service_context,
    timing,
)
from socialconnect.schemas import NotificationQuerySchema, NotificationSchema, build_pagination
from socialconnect.services.auth.dto import TokenClaims
from socialconnect.services.notifications.service import NotificationService

bp = Blueprint("notifications", __name__)

notification_schema = NotificationSchema()
notification_list_schema = NotificationSchema(many=True)
query_schema = NotificationQuerySchema()


@bp.get("")
@require_auth
@timing
def list_notifications(claims: TokenClaims):
    filters = query_schema.load(request.args)
    page_in = parse_pagination()
    result = NotificationService(ctx=service_context(claims)).inbox(
        claims.user_id, page_in, unread_only=filters["unread_only"]
    )
    return json_response(
        {
            "notifications": notification_list_schema.dump(result.items),
            "unread_count": result.unread_count,
            "pagination": build_pagination(result.meta),
        }
    )


@bp.post("/<int:notification_id>/read")
@require_auth
@timing
def mark_read(notification_id: int, claims: TokenClaims):
    NotificationService(ctx=service_context(claims)).mark_read(claims.user_id, notification_id)
    return json_response({"message": "Notification marked as read"})


@bp.post("/mark-all-read")
@require_auth
@timing
def mark_all_read(claims: TokenClaims):
    updated = NotificationService(ctx=service_context(claims)).mark_all_read(claims.user_id)
    return json_response({"message": "All notifications marked as read", "updated": updated})
