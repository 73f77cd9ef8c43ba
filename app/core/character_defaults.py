from __future__ import annotations

import math

PERSONALITY_TRAITS = (
    "courage",
    "intelligence",
    "charisma",
    "kindness",
    "humor",
    "determination",
)

TRAIT_MIN = 0
TRAIT_MAX = 100
TRAIT_DEFAULT = 50

DEFAULT_ROLE = "supporting"
DEFAULT_IMPORTANCE_LEVEL = 3
IMPORTANCE_MIN = 1
IMPORTANCE_MAX = 5

DEFAULT_APPEARANCE: dict[str, object] = {
    "age": 25,
    "height": "average",
    "build": "average",
    "hair_color": "brown",
    "eye_color": "brown",
    "distinctive_features": [],
}


def clamp_trait(value: object) -> int:
    """Coerce a slider value into an integer in [TRAIT_MIN, TRAIT_MAX].

    Missing values become the midpoint and infinities pin to the nearest bound.
    NaN and non-numeric input raise ValueError.
    """
    if value is None or isinstance(value, bool):
        return TRAIT_DEFAULT
    if isinstance(value, int):
        return max(TRAIT_MIN, min(TRAIT_MAX, value))
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return TRAIT_DEFAULT
        try:
            value = float(value)
        except ValueError:
            raise ValueError(f"trait value must be a number, got {value!r}") from None
    if not isinstance(value, float):
        raise ValueError(f"trait value must be a number, got {type(value).__name__}")
    if math.isnan(value):
        raise ValueError("trait value must not be NaN")
    if math.isinf(value):
        return TRAIT_MAX if value > 0 else TRAIT_MIN
    return max(TRAIT_MIN, min(TRAIT_MAX, int(round(value))))


def default_personality() -> dict[str, int]:
    return {trait: TRAIT_DEFAULT for trait in PERSONALITY_TRAITS}


def default_appearance() -> dict[str, object]:
    appearance = dict(DEFAULT_APPEARANCE)
    appearance["distinctive_features"] = []
    return appearance


def personality_with_overrides(overrides: dict[str, object] | None) -> dict[str, int]:
    """Overlay archetype or user trait values onto the neutral baseline."""
    personality = default_personality()
    for trait, value in (overrides or {}).items():
        if trait in personality:
            personality[trait] = clamp_trait(value)
    return personality
