"""Character roster for a project.

Create and update share one default-filling step, so a stored character is
always fully populated. Update is a full replace: fields missing from the
payload are reset to their defaults rather than kept from the stored row.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.config.loaders import get_archetype, has_appearance_option, has_archetype, has_role
from app.core.character_defaults import (
    DEFAULT_IMPORTANCE_LEVEL,
    DEFAULT_ROLE,
    IMPORTANCE_MAX,
    IMPORTANCE_MIN,
    default_appearance,
    personality_with_overrides,
)
from app.core.exceptions import EntityNotFoundError
from app.core.request_context import log_context
from app.db.models import Character
from app.db.session import unit_of_work
from app.services.projects import ProjectService
from app.services.tree_cache import notify_content_changed


logger = logging.getLogger(__name__)

_OPTIONAL_TEXT_FIELDS = ("description", "notes", "motivation", "goals", "fears", "secrets")


def _blank_to_none(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


def _fill_appearance(raw: Mapping[str, Any] | None) -> dict[str, Any]:
    appearance = default_appearance()
    if not raw:
        return appearance
    for key, value in raw.items():
        if key not in appearance or value is None:
            continue
        if key == "distinctive_features":
            appearance[key] = [str(item) for item in value if str(item).strip()]
        elif key == "age":
            appearance[key] = int(value)
        else:
            option = str(value)
            if not has_appearance_option(key, option):
                raise ValueError(f"unknown {key}: {option}")
            appearance[key] = option
    return appearance


def fill_character_defaults(data: Mapping[str, Any]) -> dict[str, Any]:
    """Turn a (possibly sparse) character payload into a complete row."""
    name = (data.get("name") or "").strip()
    if not name:
        raise ValueError("character name must not be empty")

    role = data.get("role") or DEFAULT_ROLE
    if not has_role(role):
        raise ValueError(f"unknown character role: {role}")

    archetype = data.get("archetype") or None
    if archetype is not None and not has_archetype(archetype):
        raise ValueError(f"unknown archetype: {archetype}")

    personality_input = data.get("personality")
    if personality_input is None and archetype is not None:
        personality = personality_with_overrides(get_archetype(archetype).traits)
    else:
        personality = personality_with_overrides(personality_input)

    importance_level = data.get("importance_level") or DEFAULT_IMPORTANCE_LEVEL
    if not IMPORTANCE_MIN <= int(importance_level) <= IMPORTANCE_MAX:
        raise ValueError(f"importance_level must be between {IMPORTANCE_MIN} and {IMPORTANCE_MAX}")

    relationships = {str(k): str(v) for k, v in (data.get("relationships") or {}).items()}

    fields: dict[str, Any] = {
        "name": name,
        "role": role,
        "archetype": archetype,
        "appearance": _fill_appearance(data.get("appearance")),
        "personality": personality,
        "importance_level": int(importance_level),
        "relationships": relationships,
    }
    for key in _OPTIONAL_TEXT_FIELDS:
        fields[key] = _blank_to_none(data.get(key))
    return fields


class CharacterService:
    def __init__(self, db: Session):
        self.db = db

    def list_characters(self, project_id: uuid.UUID) -> list[Character]:
        ProjectService(self.db).get_project(project_id)
        stmt = select(Character).where(Character.project_id == project_id).order_by(Character.name.asc())
        return list(self.db.execute(stmt).scalars().all())

    def get_character(self, character_id: uuid.UUID) -> Character:
        character = self.db.get(Character, character_id)
        if character is None:
            raise EntityNotFoundError("character", character_id)
        return character

    def create_character(self, project_id: uuid.UUID, data: Mapping[str, Any]) -> Character:
        ProjectService(self.db).get_project(project_id)
        fields = fill_character_defaults(data)
        character = Character(project_id=project_id, **fields)
        with log_context(project_id=project_id):
            with unit_of_work(self.db):
                self.db.add(character)
            self.db.refresh(character)
            logger.info(
                "character_created",
                extra={"character_id": str(character.character_id), "role": character.role},
            )
        notify_content_changed(project_id, "character", "created")
        return character

    def update_character(self, character_id: uuid.UUID, data: Mapping[str, Any]) -> Character:
        character = self.get_character(character_id)
        fields = fill_character_defaults(data)
        with log_context(project_id=character.project_id):
            with unit_of_work(self.db):
                for key, value in fields.items():
                    setattr(character, key, value)
                self.db.add(character)
            self.db.refresh(character)
            logger.info("character_updated", extra={"character_id": str(character_id)})
        notify_content_changed(character.project_id, "character", "updated")
        return character

    def delete_character(self, character_id: uuid.UUID) -> None:
        """Remove the character row; other characters' relationship maps are left as they are."""
        character = self.get_character(character_id)
        project_id = character.project_id
        with log_context(project_id=project_id):
            with unit_of_work(self.db):
                self.db.delete(character)
            logger.info("character_deleted", extra={"character_id": str(character_id)})
        notify_content_changed(project_id, "character", "deleted")
