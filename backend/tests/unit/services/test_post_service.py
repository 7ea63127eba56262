# tests/unit/services/test_post_service.py
from __future__ import annotations

import pytest

from socialconnect.models.notification import Notification
from socialconnect.models.post import Like
from socialconnect.repositories.post import LikeRepository
from socialconnect.services._shared.dto import PaginationIn
from socialconnect.services._shared.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from socialconnect.services.posts.dto import FeedFilterIn, PostCreateIn, PostUpdateIn
from socialconnect.services.posts.service import PostService
from tests.factories.post import CommentFactory, FollowFactory, PostFactory
from tests.factories.user import UserFactory


@pytest.fixture()
def service(app) -> PostService:
    return PostService()


@pytest.fixture()
def cast(session):
    """
    One author per visibility plus a follower of the restricted ones.

    Returns a dict with ``public``, ``followers_only``, ``private``,
    ``follower`` and ``stranger`` users and a ``posts`` map keyed the same way.
    """
    people = {v: UserFactory(profile_visibility=v) for v in ("public", "followers_only", "private")}
    follower, stranger = UserFactory(), UserFactory()
    FollowFactory(follower=follower, following=people["followers_only"])
    FollowFactory(follower=follower, following=people["private"])
    posts = {v: PostFactory(author=u) for v, u in people.items()}
    return {**people, "follower": follower, "stranger": stranger, "posts": posts}


def _ids(out) -> set[int]:
    return {p.id for p in out.items}


# -------------------------------- Feed ------------------------------------ #
def test_feed_for_anonymous_shows_public_posts_only(service, cast):
    out = service.feed(None)
    assert _ids(out) == {cast["posts"]["public"].id}
    assert all(p.is_liked is None for p in out.items)


def test_feed_for_follower_includes_followers_only_but_not_private(service, cast):
    out = service.feed(cast["follower"].id)
    assert _ids(out) == {cast["posts"]["public"].id, cast["posts"]["followers_only"].id}
    assert out.meta.total == 2


def test_feed_for_owner_includes_own_private_posts(service, cast):
    owner = cast["private"]
    out = service.feed(owner.id, FeedFilterIn(author_id=owner.id))
    assert _ids(out) == {cast["posts"]["private"].id}


def test_feed_following_filter(service, cast):
    out = service.feed(cast["follower"].id, FeedFilterIn(following=True))
    assert _ids(out) == {cast["posts"]["followers_only"].id}


def test_feed_following_filter_is_ignored_for_anonymous(service, cast):
    out = service.feed(None, FeedFilterIn(following=True))
    assert _ids(out) == {cast["posts"]["public"].id}
    assert out.meta.total == 1


def test_feed_following_filter_is_empty_for_loners(service, cast):
    loner = service.feed(cast["stranger"].id, FeedFilterIn(following=True))
    assert loner.items == []
    assert loner.meta.total == 0


def test_feed_filters_by_category_and_skips_deleted(service):
    question = PostFactory(category="question")
    PostFactory(category="question", is_active=False)
    PostFactory(category="general")

    out = service.feed(None, FeedFilterIn(category="question"))
    assert _ids(out) == {question.id}


def test_feed_is_newest_first_and_paginated(service):
    author = UserFactory()
    posts = [PostFactory(author=author) for _ in range(5)]

    first = service.feed(None, page_in=PaginationIn(page=1, limit=2))
    last = service.feed(None, page_in=PaginationIn(page=3, limit=2))

    assert [p.id for p in first.items] == [posts[4].id, posts[3].id]
    assert [p.id for p in last.items] == [posts[0].id]
    assert first.meta.total == 5
    assert first.meta.total_pages == 3


def test_feed_marks_posts_liked_by_viewer(service):
    viewer = UserFactory()
    liked, other = PostFactory(), PostFactory()
    service.like(viewer.id, liked.id)

    flags = {p.id: p.is_liked for p in service.feed(viewer.id).items}
    assert flags == {liked.id: True, other.id: False}


# -------------------------------- Get ------------------------------------- #
def test_hidden_posts_look_missing(service, cast):
    hidden = cast["posts"]["private"]
    with pytest.raises(NotFoundError, match="Post not found"):
        service.get(hidden.id, cast["follower"].id)
    with pytest.raises(NotFoundError):
        service.get(cast["posts"]["followers_only"].id, None)
    assert service.get(hidden.id, cast["private"].id).id == hidden.id


def test_get_skips_soft_deleted_posts(service):
    post = PostFactory(is_active=False)
    with pytest.raises(NotFoundError):
        service.get(post.id)


# ------------------------------ Commands ---------------------------------- #
def test_create_post(service):
    author = UserFactory()
    out = service.create(author.id, PostCreateIn(content="  Hello world  ", category="question"))

    assert out.content == "Hello world"
    assert out.category == "question"
    assert out.author.id == author.id
    assert out.like_count == out.comment_count == 0
    assert out.is_liked is False


def test_create_accepts_image_only_posts(service):
    out = service.create(UserFactory().id, PostCreateIn(image_url="https://img.example.com/a.png"))
    assert out.content is None
    assert out.image_url == "https://img.example.com/a.png"


@pytest.mark.parametrize(
    "dto, match",
    [
        (PostCreateIn(content="   "), "Content or image is required"),
        (PostCreateIn(content="x" * 281), "280 characters or less"),
        (PostCreateIn(content="ok", category="rant"), "Invalid category"),
    ],
)
def test_create_validates_input(service, dto, match):
    with pytest.raises(ValidationError, match=match):
        service.create(UserFactory().id, dto)


def test_update_by_author(service):
    post = PostFactory(content="before")
    out = service.update(post.author_id, post.id, PostUpdateIn(fields={"content": "after"}))
    assert out.content == "after"


def test_update_by_someone_else_is_forbidden(service):
    post = PostFactory()
    with pytest.raises(AuthorizationError, match="You can only update your own posts"):
        service.update(UserFactory().id, post.id, PostUpdateIn(fields={"content": "hijack"}))


@pytest.mark.parametrize(
    "fields, match",
    [({}, "No valid fields"), ({"content": ""}, "Content cannot be empty")],
)
def test_update_validates_input(service, fields, match):
    post = PostFactory()
    with pytest.raises(ValidationError, match=match):
        service.update(post.author_id, post.id, PostUpdateIn(fields=fields))


def test_delete_is_soft_and_author_only(service, session):
    post = PostFactory()
    with pytest.raises(AuthorizationError):
        service.delete(UserFactory().id, post.id)

    service.delete(post.author_id, post.id)

    session.refresh(post)
    assert post.is_active is False
    with pytest.raises(NotFoundError):
        service.get(post.id, post.author_id)
    with pytest.raises(NotFoundError):
        service.delete(post.author_id, post.id)


# ------------------------------- Likes ------------------------------------ #
def test_like_counts_and_notifies_author(service, session):
    post = PostFactory()
    fan = UserFactory(username="fan")

    service.like(fan.id, post.id)

    out = service.get(post.id, fan.id)
    assert out.like_count == 1
    assert out.is_liked is True
    notes = session.query(Notification).filter_by(user_id=post.author_id).all()
    assert [(n.type, n.related_post_id) for n in notes] == [("like", post.id)]
    assert notes[0].content == "fan liked your post"


def test_like_twice_is_a_conflict(service):
    post, fan = PostFactory(), UserFactory()
    service.like(fan.id, post.id)
    with pytest.raises(ConflictError, match="Post already liked"):
        service.like(fan.id, post.id)
    assert service.get(post.id).like_count == 1


def test_like_race_past_the_lookup_is_a_conflict(service, session, monkeypatch):
    post, fan = PostFactory(), UserFactory()
    service.like(fan.id, post.id)
    # Simulate a concurrent like landing between the lookup and the insert.
    monkeypatch.setattr(LikeRepository, "find", lambda self, user_id, post_id: None)

    with pytest.raises(ConflictError, match="Post already liked"):
        service.like(fan.id, post.id)

    assert session.query(Like).filter_by(user_id=fan.id, post_id=post.id).count() == 1
    assert service.get(post.id).like_count == 1


def test_liking_own_post_does_not_notify(service, session):
    post = PostFactory()
    service.like(post.author_id, post.id)
    assert session.query(Notification).filter_by(user_id=post.author_id).count() == 0


def test_cannot_like_hidden_post(service, cast):
    with pytest.raises(NotFoundError):
        service.like(cast["stranger"].id, cast["posts"]["followers_only"].id)


def test_unlike_is_idempotent_and_keeps_counter_consistent(service):
    post, fan = PostFactory(), UserFactory()
    service.like(fan.id, post.id)

    assert service.unlike(fan.id, post.id) is True
    assert service.unlike(fan.id, post.id) is False
    assert service.get(post.id).like_count == 0


# ------------------------------ Comments ---------------------------------- #
def test_add_comment_counts_and_notifies(service, session):
    post = PostFactory()
    commenter = UserFactory(username="critic")

    out = service.add_comment(commenter.id, post.id, "Nice one")

    assert out.content == "Nice one"
    assert out.author.username == "critic"
    assert service.get(post.id).comment_count == 1
    note = session.query(Notification).filter_by(user_id=post.author_id).one()
    assert note.type == "comment"
    assert note.content == "critic commented on your post"


@pytest.mark.parametrize("content, match", [("  ", "required"), ("x" * 501, "500 characters")])
def test_add_comment_validates_content(service, content, match):
    post = PostFactory()
    with pytest.raises(ValidationError, match=match):
        service.add_comment(UserFactory().id, post.id, content)


def test_list_comments_newest_first(service):
    post = PostFactory()
    comments = [CommentFactory(post_id=post.id) for _ in range(3)]
    CommentFactory()  # another post

    out = service.list_comments(post.id)
    assert [c.id for c in out.items] == [c.id for c in reversed(comments)]
    assert out.meta.total == 3


def test_comments_of_hidden_posts_are_not_found(service, cast):
    with pytest.raises(NotFoundError):
        service.list_comments(cast["posts"]["private"].id, cast["stranger"].id)
