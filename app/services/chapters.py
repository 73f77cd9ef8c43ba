"""Flat chapter list used by projects that predate the content hierarchy."""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from app.core.exceptions import EntityNotFoundError
from app.core.request_context import log_context
from app.db.models import Chapter, Revision
from app.db.session import unit_of_work
from app.services.projects import ProjectService
from app.services.revisions import RevisionService
from app.services.tree_cache import notify_content_changed


logger = logging.getLogger(__name__)


class ChapterService:
    def __init__(self, db: Session):
        self.db = db

    def get_chapter(self, chapter_id: uuid.UUID) -> Chapter:
        chapter = self.db.get(Chapter, chapter_id)
        if chapter is None:
            raise EntityNotFoundError("chapter", chapter_id)
        return chapter

    def list_chapters(self, project_id: uuid.UUID) -> list[Chapter]:
        ProjectService(self.db).get_project(project_id)
        stmt = (
            select(Chapter)
            .where(Chapter.project_id == project_id)
            .order_by(Chapter.order.asc(), Chapter.created_at.asc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def create_chapter(self, project_id: uuid.UUID, title: str) -> Chapter:
        if not title or not title.strip():
            raise ValueError("title must not be empty")
        ProjectService(self.db).get_project(project_id)
        with log_context(project_id=project_id):
            with unit_of_work(self.db):
                existing = self.db.execute(
                    select(func.count()).select_from(Chapter).where(Chapter.project_id == project_id)
                ).scalar_one()
                chapter = Chapter(project_id=project_id, title=title, order=int(existing))
                self.db.add(chapter)
                self.db.flush()
                RevisionService(self.db).add_initial_revision(chapter_id=chapter.chapter_id)
            self.db.refresh(chapter)
            logger.info("chapter_created", extra={"chapter_id": str(chapter.chapter_id), "order": chapter.order})
        notify_content_changed(project_id, "chapter", "created")
        return chapter

    def rename_chapter(self, chapter_id: uuid.UUID, title: str) -> Chapter:
        if not title or not title.strip():
            raise ValueError("title must not be empty")
        chapter = self.get_chapter(chapter_id)
        with unit_of_work(self.db):
            chapter.title = title
            self.db.add(chapter)
        self.db.refresh(chapter)
        notify_content_changed(chapter.project_id, "chapter", "renamed")
        return chapter

    def delete_chapter(self, chapter_id: uuid.UUID) -> None:
        chapter = self.get_chapter(chapter_id)
        project_id = chapter.project_id
        with log_context(project_id=project_id):
            with unit_of_work(self.db):
                self.db.execute(delete(Revision).where(Revision.chapter_id == chapter_id))
                self.db.execute(delete(Chapter).where(Chapter.chapter_id == chapter_id))
            logger.info("chapter_deleted", extra={"chapter_id": str(chapter_id)})
        notify_content_changed(project_id, "chapter", "deleted")
