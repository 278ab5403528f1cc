from .auth import router as auth_router
from .posts import router as posts_router
from .comments import router as comments_router
from .profiles import router as profiles_router
from .search import router as search_router
from .uploads import router as uploads_router

__all__ = [
    "auth_router",
    "posts_router",
    "comments_router",
    "profiles_router",
    "search_router",
    "uploads_router",
]
