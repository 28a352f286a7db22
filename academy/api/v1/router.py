"""API V1 Router"""

from fastapi import APIRouter

from academy.api.v1.endpoints import auth, users, branches

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(branches.router, prefix="/branches", tags=["Branches"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
