from .auth import SignupRequest, LoginRequest, RefreshRequest, UserResponse, TokenResponse, SignupResponse
from .posts import PostCreate, PostUpdate, PostResponse, FeedResponse, LikeResponse, AuthorResponse
from .comments import CommentCreate, CommentUpdate, CommentResponse, CommentThreadResponse, CommentPageResponse
from .profiles import ProfileUpdate, ProfileResponse, ProfileStatsResponse
from .search import SearchResponse

__all__ = [
    "SignupRequest", "LoginRequest", "RefreshRequest", "UserResponse", "TokenResponse", "SignupResponse",
    "PostCreate", "PostUpdate", "PostResponse", "FeedResponse", "LikeResponse", "AuthorResponse",
    "CommentCreate", "CommentUpdate", "CommentResponse", "CommentThreadResponse", "CommentPageResponse",
    "ProfileUpdate", "ProfileResponse", "ProfileStatsResponse",
    "SearchResponse",
]
