from fastapi import APIRouter

from app.api.v1.schemas import CharacterPersonality
from app.config.loaders import (
    CharacterPresetsV1,
    LevelPresetsV1,
    get_archetype,
    load_character_presets_v1,
    load_level_presets_v1,
)
from app.core.character_defaults import personality_with_overrides


router = APIRouter(prefix="/presets", tags=["presets"])


@router.get("/levels", response_model=LevelPresetsV1)
def list_level_presets():
    return load_level_presets_v1()


@router.get("/characters", response_model=CharacterPresetsV1)
def list_character_presets():
    return load_character_presets_v1()


@router.get("/archetypes/{archetype_id}/personality", response_model=CharacterPersonality)
def archetype_personality(archetype_id: str):
    """Trait values a new character starts with when given this archetype."""
    archetype = get_archetype(archetype_id)
    return CharacterPersonality(**personality_with_overrides(archetype.traits))
