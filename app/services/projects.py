from __future__ import annotations

import logging
import uuid
from typing import Any

from sqlalchemy import delete, or_, select
from sqlalchemy.orm import Session

from app.config.loaders import get_level_preset
from app.core.exceptions import EntityNotFoundError
from app.core.hierarchy import LEVEL_KEYS, default_level_config, resolve_level_config
from app.core.request_context import log_context
from app.db.models import Chapter, Character, ContentNode, Project, Revision
from app.db.session import unit_of_work
from app.services.tree_cache import notify_content_changed


logger = logging.getLogger(__name__)

UNSET: Any = object()


def normalize_level_config(level_config: dict[str, str]) -> dict[str, str]:
    """Validate a full three-label config and return it with labels stripped."""
    normalized: dict[str, str] = {}
    for key in LEVEL_KEYS:
        value = level_config.get(key)
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"{key} label must be a non-empty string")
        normalized[key] = value.strip()
    return normalized


def effective_level_config(project: Project) -> dict[str, str]:
    return resolve_level_config(project.level_config)


class ProjectService:
    def __init__(self, db: Session):
        self.db = db

    def get_project(self, project_id: uuid.UUID) -> Project:
        project = self.db.get(Project, project_id)
        if project is None:
            raise EntityNotFoundError("project", project_id)
        return project

    def list_projects(self) -> list[Project]:
        stmt = select(Project).order_by(Project.created_at.asc(), Project.title.asc())
        return list(self.db.execute(stmt).scalars().all())

    def create_project(
        self,
        title: str,
        description: str | None = None,
        level_config: dict[str, str] | None = None,
    ) -> Project:
        if not title or not title.strip():
            raise ValueError("title must not be empty")
        config = normalize_level_config(level_config) if level_config else default_level_config()
        project = Project(title=title, description=description, level_config=config)
        with unit_of_work(self.db):
            self.db.add(project)
        self.db.refresh(project)
        with log_context(project_id=project.project_id):
            logger.info("project_created")
        return project

    def update_project(
        self,
        project_id: uuid.UUID,
        *,
        title: str | None = UNSET,
        description: str | None = UNSET,
    ) -> Project:
        project = self.get_project(project_id)
        with unit_of_work(self.db):
            if title is not UNSET:
                if not title or not title.strip():
                    raise ValueError("title must not be empty")
                project.title = title
            if description is not UNSET:
                project.description = description
            self.db.add(project)
        self.db.refresh(project)
        notify_content_changed(project_id, "project", "updated")
        return project

    def update_level_config(self, project_id: uuid.UUID, level_config: dict[str, str]) -> Project:
        """Replace the project's level labels wholesale; node levels are untouched."""
        config = normalize_level_config(level_config)
        project = self.get_project(project_id)
        with unit_of_work(self.db):
            project.level_config = config
            self.db.add(project)
        self.db.refresh(project)
        with log_context(project_id=project_id):
            logger.info("level_config_updated", extra={"level_config": config})
        notify_content_changed(project_id, "project", "level_config_updated")
        return project

    def apply_level_preset(self, project_id: uuid.UUID, preset_name: str) -> Project:
        preset = get_level_preset(preset_name)
        return self.update_level_config(project_id, preset.as_level_config())

    def delete_project(self, project_id: uuid.UUID) -> None:
        """Delete a project and everything it owns in one transaction."""
        project = self.get_project(project_id)
        with log_context(project_id=project_id):
            with unit_of_work(self.db):
                node_ids = list(
                    self.db.execute(
                        select(ContentNode.node_id).where(ContentNode.project_id == project_id)
                    ).scalars()
                )
                chapter_ids = list(
                    self.db.execute(select(Chapter.chapter_id).where(Chapter.project_id == project_id)).scalars()
                )
                if node_ids or chapter_ids:
                    self.db.execute(
                        delete(Revision).where(
                            or_(Revision.node_id.in_(node_ids), Revision.chapter_id.in_(chapter_ids))
                        )
                    )
                self.db.execute(delete(ContentNode).where(ContentNode.project_id == project_id))
                self.db.execute(delete(Chapter).where(Chapter.project_id == project_id))
                self.db.execute(delete(Character).where(Character.project_id == project_id))
                self.db.delete(project)
            logger.info(
                "project_deleted",
                extra={"deleted_nodes": len(node_ids), "deleted_chapters": len(chapter_ids)},
            )
        notify_content_changed(project_id, "project", "deleted")

    def backfill_level_configs(self) -> int:
        """Give projects stored without labels the default level config."""
        stmt = select(Project).where(Project.level_config.is_(None))
        projects = list(self.db.execute(stmt).scalars().all())
        if not projects:
            return 0
        with unit_of_work(self.db):
            for project in projects:
                project.level_config = default_level_config()
                self.db.add(project)
        for project in projects:
            notify_content_changed(project.project_id, "project", "level_config_backfilled")
        logger.info("level_configs_backfilled", extra={"count": len(projects)})
        return len(projects)
