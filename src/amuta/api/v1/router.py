from fastapi import APIRouter

from src.amuta.api.v1 import access, auth, invites, organizations

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth.router)
api_router.include_router(access.router)
api_router.include_router(organizations.router)
api_router.include_router(invites.router)
