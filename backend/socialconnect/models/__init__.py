from socialconnect.models.follow import Follow
from socialconnect.models.notification import Notification
from socialconnect.models.post import Comment, Like, Post
from socialconnect.models.refresh_token import RefreshToken
from socialconnect.models.user import User

__all__ = [
    "Comment",
    "Follow",
    "Like",
    "Notification",
    "Post",
    "RefreshToken",
    "User",
]
