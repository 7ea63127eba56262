"""Admin console endpoints."""

from __future__ import annotations

from flask import Blueprint, current_app, request

from socialconnect.api.deps import (
    json_body,
    json_response,
    parse_pagination,
    require_admin,
    service_context,
    timing,
)
from socialconnect.schemas import (
    AdminPostQuerySchema,
    AdminUserQuerySchema,
    PostSchema,
    ProvisionSchema,
    SystemStatsSchema,
    UserSchema,
    build_pagination,
    dump_profile,
)
from socialconnect.services.admin.service import AdminService
from socialconnect.services.auth.dto import TokenClaims

bp = Blueprint("admin", __name__)

stats_schema = SystemStatsSchema()
user_query_schema = AdminUserQuerySchema()
post_query_schema = AdminPostQuerySchema()
post_list_schema = PostSchema(many=True)
provision_schema = ProvisionSchema()
user_schema = UserSchema()


def _service(claims: TokenClaims | None = None) -> AdminService:
    return AdminService(
        admin_secret=current_app.config.get("ADMIN_SECRET_KEY"), ctx=service_context(claims)
    )


@bp.get("/stats")
@require_admin
@timing
def stats(claims: TokenClaims):
    return json_response(stats_schema.dump(_service(claims).stats()))


@bp.get("/users")
@require_admin
@timing
def list_users(claims: TokenClaims):
    filters = user_query_schema.load(request.args)
    page_in = parse_pagination()
    result = _service(claims).list_users(
        page_in, search=filters["search"], status=filters["status"]
    )
    return json_response(
        {
            "users": [dump_profile(p) for p in result.items],
            "pagination": build_pagination(result.meta),
        }
    )


@bp.get("/users/<int:user_id>")
@require_admin
@timing
def get_user(user_id: int, claims: TokenClaims):
    return json_response(dump_profile(_service(claims).get_user(user_id)))


@bp.post("/users/<int:user_id>/deactivate")
@require_admin
@timing
def deactivate_user(user_id: int, claims: TokenClaims):
    """Deactivate an account and revoke its refresh tokens."""

    _service(claims).deactivate_user(claims.user_id, user_id)
    return json_response({"message": "User deactivated successfully"})


@bp.get("/posts")
@require_admin
@timing
def list_posts(claims: TokenClaims):
    filters = post_query_schema.load(request.args)
    page_in = parse_pagination()
    result = _service(claims).list_posts(page_in, include_inactive=filters["include_inactive"])
    return json_response(
        {"posts": post_list_schema.dump(result.items), "pagination": build_pagination(result.meta)}
    )


@bp.delete("/posts/<int:post_id>")
@require_admin
@timing
def delete_post(post_id: int, claims: TokenClaims):
    _service(claims).delete_post(claims.user_id, post_id)
    return json_response({"message": "Post deleted successfully"})


@bp.post("/provision")
@timing
def provision():
    """Promote a user to admin with the shared provisioning secret."""

    data = provision_schema.load(json_body())
    user = _service().provision(data["secret_key"], data["user_id"])
    return json_response(
        {"message": "User successfully provisioned as admin", "user": user_schema.dump(user)}
    )
