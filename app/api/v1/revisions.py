import uuid

from fastapi import APIRouter, HTTPException

from app.api.deps import DbSessionDep
from app.api.v1.schemas import RevisionCreate, RevisionRead
from app.services.chapters import ChapterService
from app.services.content_tree import ContentTreeService
from app.services.revisions import RevisionService


router = APIRouter(tags=["revisions"])


@router.get("/nodes/{node_id}/revisions", response_model=list[RevisionRead])
def list_node_revisions(node_id: uuid.UUID, db=DbSessionDep):
    ContentTreeService(db).get_node(node_id)
    return RevisionService(db).list_node_revisions(node_id)


@router.get("/nodes/{node_id}/revisions/latest", response_model=RevisionRead)
def get_latest_node_revision(node_id: uuid.UUID, db=DbSessionDep):
    ContentTreeService(db).get_node(node_id)
    revision = RevisionService(db).get_latest_node_revision(node_id)
    if revision is None:
        raise HTTPException(status_code=404, detail="revision not found")
    return revision


@router.post("/nodes/{node_id}/revisions", response_model=RevisionRead)
def save_node_revision(node_id: uuid.UUID, payload: RevisionCreate, db=DbSessionDep):
    return RevisionService(db).save_node_revision(
        node_id,
        content=payload.content,
        author_name=payload.author_name,
        ai_metadata=payload.ai_metadata,
    )


@router.get("/chapters/{chapter_id}/revisions", response_model=list[RevisionRead])
def list_chapter_revisions(chapter_id: uuid.UUID, db=DbSessionDep):
    ChapterService(db).get_chapter(chapter_id)
    return RevisionService(db).list_chapter_revisions(chapter_id)


@router.get("/chapters/{chapter_id}/revisions/latest", response_model=RevisionRead)
def get_latest_chapter_revision(chapter_id: uuid.UUID, db=DbSessionDep):
    ChapterService(db).get_chapter(chapter_id)
    revision = RevisionService(db).get_latest_chapter_revision(chapter_id)
    if revision is None:
        raise HTTPException(status_code=404, detail="revision not found")
    return revision


@router.post("/chapters/{chapter_id}/revisions", response_model=RevisionRead)
def save_chapter_revision(chapter_id: uuid.UUID, payload: RevisionCreate, db=DbSessionDep):
    return RevisionService(db).save_chapter_revision(
        chapter_id,
        content=payload.content,
        author_name=payload.author_name,
        ai_metadata=payload.ai_metadata,
    )
