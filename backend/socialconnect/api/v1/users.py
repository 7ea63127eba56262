"""User directory, profile and follow endpoints."""

from __future__ import annotations

from flask import Blueprint, request

from socialconnect.api.deps import (
    authenticate,
    json_body,
    json_response,
    parse_pagination,
    require_auth,
    service_context,
    timing,
)
from socialconnect.schemas import (
    ProfileUpdateSchema,
    PublicUserSchema,
    UserSchema,
    UserSearchQuerySchema,
    build_pagination,
    dump_profile,
)
from socialconnect.services.auth.dto import TokenClaims
from socialconnect.services.users.dto import ProfileUpdateIn
from socialconnect.services.users.service import UserService

bp = Blueprint("users", __name__)

user_schema = UserSchema()
public_list_schema = PublicUserSchema(many=True)
profile_update_schema = ProfileUpdateSchema()
search_schema = UserSearchQuerySchema()


@bp.get("")
@timing
def list_users():
    """Search active users by username or name."""

    filters = search_schema.load(request.args)
    page_in = parse_pagination()
    result = UserService(ctx=service_context(None)).search(page_in, search=filters["search"])
    return json_response(
        {"users": public_list_schema.dump(result.items), "pagination": build_pagination(result.meta)}
    )


@bp.get("/me")
@require_auth
@timing
def get_me(claims: TokenClaims):
    """Return the caller's own profile with counts."""

    profile = UserService(ctx=service_context(claims)).get_me(claims.user_id)
    return json_response(dump_profile(profile))


@bp.route("/me", methods=["PATCH", "PUT"])
@require_auth
@timing
def update_me(claims: TokenClaims):
    """Apply a partial update to the caller's profile."""

    fields = profile_update_schema.load(json_body())
    user = UserService(ctx=service_context(claims)).update_me(
        claims.user_id, ProfileUpdateIn(fields=fields)
    )
    return json_response(user_schema.dump(user))


@bp.get("/<int:user_id>")
@timing
def get_user(user_id: int):
    """Return a profile if the owner's visibility allows the caller to see it."""

    claims = authenticate()
    viewer_id = claims.user_id if claims else None
    profile = UserService(ctx=service_context(claims)).get_profile(user_id, viewer_id)
    return json_response(dump_profile(profile, public=True))


@bp.post("/<int:user_id>/follow")
@require_auth
@timing
def follow(user_id: int, claims: TokenClaims):
    UserService(ctx=service_context(claims)).follow(claims.user_id, user_id)
    return json_response({"message": "Successfully followed user"})


@bp.delete("/<int:user_id>/follow")
@require_auth
@timing
def unfollow(user_id: int, claims: TokenClaims):
    UserService(ctx=service_context(claims)).unfollow(claims.user_id, user_id)
    return json_response({"message": "Successfully unfollowed user"})


@bp.get("/<int:user_id>/followers")
@timing
def followers(user_id: int):
    page_in = parse_pagination()
    result = UserService(ctx=service_context(authenticate())).followers(user_id, page_in)
    return json_response(
        {"users": public_list_schema.dump(result.items), "pagination": build_pagination(result.meta)}
    )


@bp.get("/<int:user_id>/following")
@timing
def following(user_id: int):
    page_in = parse_pagination()
    result = UserService(ctx=service_context(authenticate())).following(user_id, page_in)
    return json_response(
        {"users": public_list_schema.dump(result.items), "pagination": build_pagination(result.meta)}
    )
