from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from app.core.character_defaults import (
    DEFAULT_APPEARANCE,
    TRAIT_DEFAULT,
    clamp_trait,
)
from app.core.hierarchy import DEFAULT_LEVEL_CONFIG, LEAF_LEVEL, TOP_LEVEL, resolve_level_config


# ============================================================================
# Projects & level configuration
# ============================================================================


class LevelConfig(BaseModel):
    level1: str = Field(min_length=1, max_length=64)
    level2: str = Field(min_length=1, max_length=64)
    level3: str = Field(min_length=1, max_length=64)

    @field_validator("level1", "level2", "level3")
    @classmethod
    def ensure_label_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("level labels must not be blank")
        return value.strip()


class LevelPresetRequest(BaseModel):
    preset: str = Field(min_length=1, max_length=64)


class ProjectCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    level_config: LevelConfig | None = None


class ProjectUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None


class ProjectRead(BaseModel):
    project_id: uuid.UUID
    title: str
    description: str | None
    level_config: LevelConfig = Field(default_factory=lambda: LevelConfig(**DEFAULT_LEVEL_CONFIG))
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}

    @field_validator("level_config", mode="before")
    @classmethod
    def default_missing_labels(cls, value):
        if isinstance(value, LevelConfig):
            return value
        return resolve_level_config(value)


# ============================================================================
# Content tree
# ============================================================================


class ContentNodeCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    level: int = Field(ge=TOP_LEVEL, le=LEAF_LEVEL)
    parent_id: uuid.UUID | None = None


class ContentNodeRename(BaseModel):
    title: str = Field(min_length=1, max_length=255)


class ContentNodeNotesUpdate(BaseModel):
    """Only the fields present in the request body are written."""

    head_notes: str | None = None
    foot_notes: str | None = None


class ContentNodeRead(BaseModel):
    node_id: uuid.UUID
    project_id: uuid.UUID
    parent_id: uuid.UUID | None
    title: str
    level: int
    order: int
    head_notes: str | None
    foot_notes: str | None
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class ContentTreeNodeRead(ContentNodeRead):
    children: list[ContentTreeNodeRead] = Field(default_factory=list)


class ContentTreeRead(BaseModel):
    project_id: uuid.UUID
    level_config: LevelConfig
    node_count: int
    roots: list[ContentTreeNodeRead]


# ============================================================================
# Revisions
# ============================================================================


class RevisionCreate(BaseModel):
    content: str
    author_name: str = Field(min_length=1, max_length=255)
    ai_metadata: dict | None = None


class RevisionRead(BaseModel):
    revision_id: uuid.UUID
    node_id: uuid.UUID | None
    chapter_id: uuid.UUID | None
    version: int
    content: str
    author_id: str
    author_name: str
    parent_revision_id: uuid.UUID | None
    ai_metadata: dict | None
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


# ============================================================================
# Legacy chapters
# ============================================================================


class ChapterCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)


class ChapterRename(BaseModel):
    title: str = Field(min_length=1, max_length=255)


class ChapterRead(BaseModel):
    chapter_id: uuid.UUID
    project_id: uuid.UUID
    title: str
    order: int
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


# ============================================================================
# Characters
# ============================================================================


class CharacterAppearance(BaseModel):
    age: int = Field(default=DEFAULT_APPEARANCE["age"], ge=0)
    height: str = Field(default=DEFAULT_APPEARANCE["height"], min_length=1, max_length=32)
    build: str = Field(default=DEFAULT_APPEARANCE["build"], min_length=1, max_length=32)
    hair_color: str = Field(default=DEFAULT_APPEARANCE["hair_color"], min_length=1, max_length=32)
    eye_color: str = Field(default=DEFAULT_APPEARANCE["eye_color"], min_length=1, max_length=32)
    distinctive_features: list[str] = Field(default_factory=list)


class CharacterPersonality(BaseModel):
    """Six 0-100 sliders. Out-of-range input is clamped, missing traits default to 50."""

    courage: int = TRAIT_DEFAULT
    intelligence: int = TRAIT_DEFAULT
    charisma: int = TRAIT_DEFAULT
    kindness: int = TRAIT_DEFAULT
    humor: int = TRAIT_DEFAULT
    determination: int = TRAIT_DEFAULT

    @field_validator("courage", "intelligence", "charisma", "kindness", "humor", "determination", mode="before")
    @classmethod
    def clamp_slider(cls, value):
        return clamp_trait(value)


class CharacterData(BaseModel):
    """Full character payload, used for both create and (replacing) update."""

    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    notes: str | None = None
    role: str | None = Field(default=None, max_length=32)
    archetype: str | None = Field(default=None, max_length=32)
    appearance: CharacterAppearance | None = None
    personality: CharacterPersonality | None = None
    importance_level: int | None = Field(default=None, ge=1, le=5)
    relationships: dict[str, str] | None = None
    motivation: str | None = None
    goals: str | None = None
    fears: str | None = None
    secrets: str | None = None


class CharacterRead(BaseModel):
    character_id: uuid.UUID
    project_id: uuid.UUID
    name: str
    description: str | None
    notes: str | None
    role: str
    archetype: str | None
    appearance: CharacterAppearance
    personality: CharacterPersonality
    importance_level: int
    relationships: dict[str, str]
    motivation: str | None
    goals: str | None
    fears: str | None
    secrets: str | None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}

    @field_validator("appearance", "personality", mode="before")
    @classmethod
    def default_missing_blob(cls, value):
        return value or {}

    @field_validator("relationships", mode="before")
    @classmethod
    def default_missing_relationships(cls, value):
        return value or {}
