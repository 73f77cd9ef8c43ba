"""Append-only prose revisions for leaf nodes and legacy chapters."""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, EntityNotFoundError
from app.core.hierarchy import is_leaf_level
from app.core.metrics import record_revision_saved
from app.core.request_context import log_context
from app.core.settings import settings
from app.db.models import Chapter, ContentNode, Revision
from app.db.session import unit_of_work
from app.services.tree_cache import notify_content_changed


logger = logging.getLogger(__name__)

_MAX_APPEND_ATTEMPTS = 3


class RevisionService:
    def __init__(self, db: Session):
        self.db = db

    def add_initial_revision(
        self,
        *,
        node_id: uuid.UUID | None = None,
        chapter_id: uuid.UUID | None = None,
    ) -> Revision:
        """Stage the empty first revision of a new owner; the caller commits."""
        if (node_id is None) == (chapter_id is None):
            raise ValueError("exactly one of node_id or chapter_id is required")
        revision = Revision(
            node_id=node_id,
            chapter_id=chapter_id,
            version=1,
            content="",
            author_id=settings.default_author_id,
            author_name=settings.initial_revision_author_name,
        )
        self.db.add(revision)
        return revision

    # ------------------------------------------------------------------
    # Content nodes
    # ------------------------------------------------------------------

    def save_node_revision(
        self,
        node_id: uuid.UUID,
        content: str,
        author_name: str,
        ai_metadata: dict | None = None,
    ) -> Revision:
        node = self.db.get(ContentNode, node_id)
        if node is None:
            raise EntityNotFoundError("content node", node_id)
        if not is_leaf_level(node.level):
            raise ConflictError(
                f"content node {node_id} is level {node.level}; only leaf nodes hold revisions",
                detail="only leaf nodes hold revisions",
            )
        with log_context(project_id=node.project_id, node_id=node_id):
            revision = self._append("node_id", node_id, content, author_name, ai_metadata)
        notify_content_changed(node.project_id, "revision", "saved")
        record_revision_saved("node")
        return revision

    def list_node_revisions(self, node_id: uuid.UUID) -> list[Revision]:
        return self._list("node_id", node_id)

    def get_latest_node_revision(self, node_id: uuid.UUID) -> Revision | None:
        return self._latest("node_id", node_id)

    # ------------------------------------------------------------------
    # Legacy chapters
    # ------------------------------------------------------------------

    def save_chapter_revision(
        self,
        chapter_id: uuid.UUID,
        content: str,
        author_name: str,
        ai_metadata: dict | None = None,
    ) -> Revision:
        chapter = self.db.get(Chapter, chapter_id)
        if chapter is None:
            raise EntityNotFoundError("chapter", chapter_id)
        with log_context(project_id=chapter.project_id):
            revision = self._append("chapter_id", chapter_id, content, author_name, ai_metadata)
        notify_content_changed(chapter.project_id, "revision", "saved")
        record_revision_saved("chapter")
        return revision

    def list_chapter_revisions(self, chapter_id: uuid.UUID) -> list[Revision]:
        return self._list("chapter_id", chapter_id)

    def get_latest_chapter_revision(self, chapter_id: uuid.UUID) -> Revision | None:
        return self._latest("chapter_id", chapter_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _append(
        self,
        owner_key: str,
        owner_id: uuid.UUID,
        content: str,
        author_name: str,
        ai_metadata: dict | None,
    ) -> Revision:
        for _ in range(_MAX_APPEND_ATTEMPTS):
            latest = self._latest(owner_key, owner_id)
            next_version = 1
            parent_revision_id = None
            if latest is not None:
                next_version = latest.version + 1
                parent_revision_id = latest.revision_id

            revision = Revision(
                version=next_version,
                content=content,
                author_id=settings.default_author_id,
                author_name=author_name,
                parent_revision_id=parent_revision_id,
                ai_metadata=ai_metadata,
                **{owner_key: owner_id},
            )
            try:
                with unit_of_work(self.db):
                    self.db.add(revision)
            except ConflictError:
                logger.warning("revision_version_conflict", extra={"version": next_version})
                continue
            self.db.refresh(revision)
            logger.info(
                "revision_saved",
                extra={"revision_id": str(revision.revision_id), "version": revision.version},
            )
            return revision

        raise ConflictError(
            "revision version conflict after retries",
            detail="revision could not be saved, please retry",
        )

    def _list(self, owner_key: str, owner_id: uuid.UUID) -> list[Revision]:
        column = getattr(Revision, owner_key)
        stmt = select(Revision).where(column == owner_id).order_by(Revision.version.asc())
        return list(self.db.execute(stmt).scalars().all())

    def _latest(self, owner_key: str, owner_id: uuid.UUID) -> Revision | None:
        column = getattr(Revision, owner_key)
        stmt = select(Revision).where(column == owner_id).order_by(desc(Revision.version)).limit(1)
        return self.db.execute(stmt).scalar_one_or_none()
