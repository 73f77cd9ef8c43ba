from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from app.core.character_defaults import TRAIT_MAX, TRAIT_MIN
from app.core.exceptions import ConfigurationError


logger = logging.getLogger(__name__)


class LevelPreset(BaseModel):
    name: str = Field(min_length=1)
    level1: str = Field(min_length=1)
    level2: str = Field(min_length=1)
    level3: str = Field(min_length=1)

    def as_level_config(self) -> dict[str, str]:
        return {"level1": self.level1, "level2": self.level2, "level3": self.level3}


class LevelPresetsV1(BaseModel):
    version: str
    default_preset: str = Field(min_length=1)
    presets: list[LevelPreset] = Field(min_length=1)


class RoleItem(BaseModel):
    id: str = Field(min_length=1)
    label: str = Field(min_length=1)
    description: str = Field(default="")


class ArchetypeItem(BaseModel):
    id: str = Field(min_length=1)
    label: str = Field(min_length=1)
    description: str = Field(default="")
    # Only the traits an archetype emphasises; the rest keep the neutral default.
    traits: dict[str, int] = Field(default_factory=dict)


class OptionItem(BaseModel):
    id: str = Field(min_length=1)
    label: str = Field(min_length=1)


class AppearanceOptions(BaseModel):
    heights: list[OptionItem]
    builds: list[OptionItem]
    hair_colors: list[OptionItem]
    eye_colors: list[OptionItem]


class PersonalityTraitItem(BaseModel):
    key: str = Field(min_length=1)
    label: str = Field(min_length=1)
    description: str = Field(default="")
    low: str = Field(default="")
    high: str = Field(default="")
    min: int = Field(default=TRAIT_MIN)
    max: int = Field(default=TRAIT_MAX)


class CharacterPresetsV1(BaseModel):
    version: str
    roles: list[RoleItem] = Field(min_length=1)
    archetypes: list[ArchetypeItem]
    appearance: AppearanceOptions
    personality_traits: list[PersonalityTraitItem]


def clear_config_cache():
    """Clear all cached config data. Call this to force config reload."""
    load_level_presets_v1.cache_clear()
    load_character_presets_v1.cache_clear()


def get_level_preset(name: str) -> LevelPreset:
    lib = load_level_presets_v1()
    for preset in lib.presets:
        if preset.name == name:
            return preset
    raise KeyError(f"Unknown level preset: {name}")


def get_archetype(archetype_id: str) -> ArchetypeItem:
    lib = load_character_presets_v1()
    for archetype in lib.archetypes:
        if archetype.id == archetype_id:
            return archetype
    raise KeyError(f"Unknown archetype: {archetype_id}")


def has_role(role_id: str) -> bool:
    lib = load_character_presets_v1()
    return any(r.id == role_id for r in lib.roles)


def has_archetype(archetype_id: str) -> bool:
    lib = load_character_presets_v1()
    return any(a.id == archetype_id for a in lib.archetypes)


_APPEARANCE_BUCKETS = {
    "height": "heights",
    "build": "builds",
    "hair_color": "hair_colors",
    "eye_color": "eye_colors",
}


def has_appearance_option(field: str, option_id: str) -> bool:
    """Check a character appearance value against its bucket in the catalog."""
    bucket = _APPEARANCE_BUCKETS.get(field)
    if bucket is None:
        raise KeyError(f"Unknown appearance field: {field}")
    options = getattr(load_character_presets_v1().appearance, bucket)
    return any(o.id == option_id for o in options)


# ============================================================================
# Config Loaders
# ============================================================================

_CONFIG_DIR = Path(__file__).parent


def _load_catalog(filename: str, model: type[BaseModel]) -> BaseModel:
    path = _CONFIG_DIR / filename
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return model.model_validate(data)
    except (OSError, json.JSONDecodeError, ValidationError) as exc:
        logger.error("config_load_failed", extra={"config_file": filename, "error": str(exc)})
        raise ConfigurationError(
            f"failed to load {filename}: {exc}",
            detail="preset catalog is unavailable",
        ) from exc


@lru_cache(maxsize=1)
def load_level_presets_v1() -> LevelPresetsV1:
    """Load hierarchy label presets."""
    return _load_catalog("level_presets_v1.json", LevelPresetsV1)


@lru_cache(maxsize=1)
def load_character_presets_v1() -> CharacterPresetsV1:
    """Load character roles, archetypes and appearance options."""
    return _load_catalog("character_presets_v1.json", CharacterPresetsV1)
