"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Auth is applied at the include_router level using FastAPI's
dependencies parameter. This protects all routes in each router
without modifying individual handlers. The health and users routers
are mounted open; the users router guards its own account routes
per-handler because register, login and refresh must stay public.
"""

from fastapi import APIRouter, Depends

from vidtube.api.comments import router as comments_router
from vidtube.api.health import router as health_router
from vidtube.api.likes import router as likes_router
from vidtube.api.playlists import router as playlists_router
from vidtube.api.subscriptions import router as subscriptions_router
from vidtube.api.tweets import router as tweets_router
from vidtube.api.users import router as users_router
from vidtube.api.videos import router as videos_router
from vidtube.auth.dependencies import get_current_user

# All protected routers require authentication
_auth = [Depends(get_current_user)]

api_router = APIRouter(prefix="/api/v1")

# Open routes
api_router.include_router(health_router, tags=["health"])
api_router.include_router(users_router, tags=["users"])

# Protected routes: valid access token required (cookie or Bearer)
api_router.include_router(videos_router, tags=["videos"], dependencies=_auth)
api_router.include_router(comments_router, tags=["comments"], dependencies=_auth)
api_router.include_router(tweets_router, tags=["tweets"], dependencies=_auth)
api_router.include_router(likes_router, tags=["likes"], dependencies=_auth)
api_router.include_router(subscriptions_router, tags=["subscriptions"], dependencies=_auth)
api_router.include_router(playlists_router, tags=["playlists"], dependencies=_auth)
