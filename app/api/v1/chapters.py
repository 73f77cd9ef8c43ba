import uuid

from fastapi import APIRouter, Response

from app.api.deps import DbSessionDep
from app.api.v1.schemas import ChapterCreate, ChapterRead, ChapterRename
from app.services.chapters import ChapterService


router = APIRouter(tags=["chapters"])


@router.post("/projects/{project_id}/chapters", response_model=ChapterRead)
def create_chapter(project_id: uuid.UUID, payload: ChapterCreate, db=DbSessionDep):
    return ChapterService(db).create_chapter(project_id, payload.title)


@router.get("/projects/{project_id}/chapters", response_model=list[ChapterRead])
def list_chapters(project_id: uuid.UUID, db=DbSessionDep):
    return ChapterService(db).list_chapters(project_id)


@router.patch("/chapters/{chapter_id}", response_model=ChapterRead)
def rename_chapter(chapter_id: uuid.UUID, payload: ChapterRename, db=DbSessionDep):
    return ChapterService(db).rename_chapter(chapter_id, payload.title)


@router.delete("/chapters/{chapter_id}", status_code=204)
def delete_chapter(chapter_id: uuid.UUID, db=DbSessionDep):
    ChapterService(db).delete_chapter(chapter_id)
    return Response(status_code=204)
