"""Profile visibility rules shared by post, feed and profile reads."""

from __future__ import annotations

from socialconnect.models.user import (
    VISIBILITY_FOLLOWERS_ONLY,
    VISIBILITY_PRIVATE,
    VISIBILITY_PUBLIC,
)

from .common import is_owner


def can_view(
    viewer_id: int | None,
    owner_id: int,
    owner_visibility: str,
    viewer_follows_owner: bool,
) -> bool:
    """
    Decide whether ``viewer_id`` may see content owned by ``owner_id``.

    Rules apply in order:

    1. The owner always sees their own content.
    2. ``public`` content is visible to everyone, anonymous included.
    3. ``private`` content is hidden from everyone else, followers included.
    4. ``followers_only`` content is visible iff ``viewer_follows_owner``.
       Anonymous viewers never follow anyone.

    Unknown visibility values are treated as hidden.

    :param viewer_id: Authenticated viewer, or ``None`` for anonymous.
    :param owner_id: Author / profile owner.
    :param owner_visibility: The owner's *current* ``profile_visibility``.
    :param viewer_follows_owner: Whether a follow edge viewer→owner exists now.
    """
    if is_owner(actor_id=viewer_id, owner_id=owner_id):
        return True
    if owner_visibility == VISIBILITY_PUBLIC:
        return True
    if owner_visibility == VISIBILITY_PRIVATE:
        return False
    if owner_visibility == VISIBILITY_FOLLOWERS_ONLY:
        return viewer_id is not None and bool(viewer_follows_owner)
    return False


def visibility_denial_message(owner_visibility: str) -> str:
    """Explain why a profile was withheld."""
    if owner_visibility == VISIBILITY_FOLLOWERS_ONLY:
        return "This profile is only visible to followers"
    return "This profile is private"
