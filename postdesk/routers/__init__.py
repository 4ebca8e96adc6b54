"""
API routers.
"""

from postdesk.routers.assets import router as assets_router
from postdesk.routers.posts import router as posts_router

__all__ = [
    "assets_router",
    "posts_router",
]
