from fastapi import APIRouter
from app.api.routes import avatars

router = APIRouter()
router.include_router(avatars.router, prefix="/avatars", tags=["avatars"])
