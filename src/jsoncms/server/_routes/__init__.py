from fastapi import APIRouter

from ._content import router as content_router
from ._git import router as git_router
from ._health import router as health_router

router = APIRouter(prefix="/api")

router.include_router(health_router)
router.include_router(content_router)
router.include_router(git_router)
