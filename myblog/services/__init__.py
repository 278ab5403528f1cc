from .records import AuthorProfile, PostCard, CommentView, UNKNOWN_AUTHOR
from .comment_tree import CommentThread, build_comment_tree, DELETED_PLACEHOLDER
from .comment_pager import CommentPage, CommentPager, fetch_comments
from .feed_pager import FeedPager, fetch_public_posts, SORT_ORDERS, LATEST, POPULAR
from .likes import LikeToggle, LikeOutcome, LikeError, POST_LIKES, COMMENT_LIKES
from .profile_stats import ProfileStats, compute_stats, load_profile_stats
from .highlight import Span, highlight
from .mentions import parse_mentions
from .slugify import slugify, parse_tags
from .time_ago import time_ago
from .safe_storage import MemoryStorage, FileStorage, SafeStorage
from .recent_searches import RecentSearches
from .auth_context import AuthState, AuthController

__all__ = [
    "AuthorProfile",
    "PostCard",
    "CommentView",
    "UNKNOWN_AUTHOR",
    "CommentThread",
    "build_comment_tree",
    "DELETED_PLACEHOLDER",
    "CommentPage",
    "CommentPager",
    "fetch_comments",
    "FeedPager",
    "fetch_public_posts",
    "SORT_ORDERS",
    "LATEST",
    "POPULAR",
    "LikeToggle",
    "LikeOutcome",
    "LikeError",
    "POST_LIKES",
    "COMMENT_LIKES",
    "ProfileStats",
    "compute_stats",
    "load_profile_stats",
    "Span",
    "highlight",
    "parse_mentions",
    "slugify",
    "parse_tags",
    "time_ago",
    "MemoryStorage",
    "FileStorage",
    "SafeStorage",
    "RecentSearches",
    "AuthState",
    "AuthController",
]
