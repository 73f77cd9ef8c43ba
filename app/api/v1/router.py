from fastapi import APIRouter

from app.api.v1 import (
    chapters,
    characters,
    content,
    presets,
    projects,
    revisions,
)


api_router = APIRouter(prefix="/v1")

api_router.include_router(projects.router)
api_router.include_router(content.router)
api_router.include_router(revisions.router)
api_router.include_router(characters.router)
api_router.include_router(chapters.router)
api_router.include_router(presets.router)
