"""Public HTTP API mounted under the common prefix."""

from fastapi import APIRouter, Depends

from hive.api import auth, posts, replies, threads, users
from hive.infra.rate_limit import api_limiter
from hive.settings import settings

router = APIRouter(prefix=settings.api_prefix, dependencies=[Depends(api_limiter)])
router.include_router(auth.router)
router.include_router(users.router)
router.include_router(threads.router)
router.include_router(posts.router)
router.include_router(replies.router)

__all__ = ["router"]
