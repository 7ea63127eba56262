"""Unit tests for the profile visibility rules."""

from __future__ import annotations

import pytest

from socialconnect.services._shared.policies.visibility import (
    can_view,
    visibility_denial_message,
)

OWNER = 1
VIEWER = 2


@pytest.mark.parametrize("visibility", ["public", "private", "followers_only"])
@pytest.mark.parametrize("follows", [True, False])
def test_owner_always_sees_own_content(visibility, follows):
    assert can_view(OWNER, OWNER, visibility, follows) is True


@pytest.mark.parametrize("viewer", [None, VIEWER])
def test_public_is_visible_to_everyone(viewer):
    assert can_view(viewer, OWNER, "public", False) is True


@pytest.mark.parametrize("viewer", [None, VIEWER])
@pytest.mark.parametrize("follows", [True, False])
def test_private_is_hidden_from_non_owners_even_followers(viewer, follows):
    assert can_view(viewer, OWNER, "private", follows) is False


def test_followers_only_requires_a_follow_edge():
    assert can_view(VIEWER, OWNER, "followers_only", True) is True
    assert can_view(VIEWER, OWNER, "followers_only", False) is False


def test_anonymous_is_never_a_follower():
    assert can_view(None, OWNER, "followers_only", True) is False


def test_unknown_visibility_is_hidden():
    assert can_view(VIEWER, OWNER, "friends", True) is False


def test_denial_message_names_the_rule():
    assert visibility_denial_message("followers_only") == "This profile is only visible to followers"
    assert visibility_denial_message("private") == "This profile is private"
