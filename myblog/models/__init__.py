from .user import User
from .profile import Profile
from .post import Post
from .comment import Comment
from .like import Like, CommentLike

__all__ = [
    "User",
    "Profile",
    "Post",
    "Comment",
    "Like",
    "CommentLike",
]
