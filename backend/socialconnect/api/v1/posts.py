"""Feed, post, like and comment endpoints."""

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
    CommentCreateSchema,
    CommentSchema,
    FeedQuerySchema,
    PostCreateSchema,
    PostSchema,
    PostUpdateSchema,
    build_pagination,
)
from socialconnect.services.auth.dto import TokenClaims
from socialconnect.services.posts.dto import FeedFilterIn, PostCreateIn, PostUpdateIn
from socialconnect.services.posts.service import PostService

bp = Blueprint("posts", __name__)

post_schema = PostSchema()
post_list_schema = PostSchema(many=True)
post_create_schema = PostCreateSchema()
post_update_schema = PostUpdateSchema()
feed_query_schema = FeedQuerySchema()
comment_schema = CommentSchema()
comment_list_schema = CommentSchema(many=True)
comment_create_schema = CommentCreateSchema()


def _viewer(claims: TokenClaims | None) -> int | None:
    return claims.user_id if claims else None


@bp.get("")
@timing
def feed():
    """List posts the caller may see, newest first."""

    claims = authenticate()
    filters = feed_query_schema.load(request.args)
    page_in = parse_pagination()
    result = PostService(ctx=service_context(claims)).feed(
        _viewer(claims), FeedFilterIn(**filters), page_in
    )
    return json_response(
        {"posts": post_list_schema.dump(result.items), "pagination": build_pagination(result.meta)}
    )


@bp.post("")
@require_auth
@timing
def create_post(claims: TokenClaims):
    data = post_create_schema.load(json_body())
    post = PostService(ctx=service_context(claims)).create(claims.user_id, PostCreateIn(**data))
    return json_response(post_schema.dump(post), status=201)


@bp.get("/<int:post_id>")
@timing
def get_post(post_id: int):
    """Return a single post; hidden and deleted posts answer 404."""

    claims = authenticate()
    post = PostService(ctx=service_context(claims)).get(post_id, _viewer(claims))
    return json_response(post_schema.dump(post))


@bp.route("/<int:post_id>", methods=["PATCH", "PUT"])
@require_auth
@timing
def update_post(post_id: int, claims: TokenClaims):
    fields = post_update_schema.load(json_body())
    post = PostService(ctx=service_context(claims)).update(
        claims.user_id, post_id, PostUpdateIn(fields=fields)
    )
    return json_response(post_schema.dump(post))


@bp.delete("/<int:post_id>")
@require_auth
@timing
def delete_post(post_id: int, claims: TokenClaims):
    PostService(ctx=service_context(claims)).delete(claims.user_id, post_id)
    return json_response({"message": "Post deleted successfully"})


@bp.post("/<int:post_id>/like")
@require_auth
@timing
def like_post(post_id: int, claims: TokenClaims):
    PostService(ctx=service_context(claims)).like(claims.user_id, post_id)
    return json_response({"message": "Post liked successfully"})


@bp.delete("/<int:post_id>/like")
@require_auth
@timing
def unlike_post(post_id: int, claims: TokenClaims):
    PostService(ctx=service_context(claims)).unlike(claims.user_id, post_id)
    return json_response({"message": "Post unliked successfully"})


@bp.get("/<int:post_id>/comments")
@timing
def list_comments(post_id: int):
    claims = authenticate()
    page_in = parse_pagination()
    result = PostService(ctx=service_context(claims)).list_comments(
        post_id, _viewer(claims), page_in
    )
    return json_response(
        {
            "comments": comment_list_schema.dump(result.items),
            "pagination": build_pagination(result.meta),
        }
    )


@bp.post("/<int:post_id>/comments")
@require_auth
@timing
def add_comment(post_id: int, claims: TokenClaims):
    data = comment_create_schema.load(json_body())
    comment = PostService(ctx=service_context(claims)).add_comment(
        claims.user_id, post_id, data["content"]
    )
    return json_response({"comment": comment_schema.dump(comment)}, status=201)
