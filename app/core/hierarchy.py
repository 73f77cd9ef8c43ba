"""Fixed shape of the content hierarchy.

Projects always have exactly three levels. Level 1 nodes are roots and
level 3 nodes are the leaves that carry prose revisions; only the display
labels of each level are configurable per project.
"""

from __future__ import annotations

TOP_LEVEL = 1
LEAF_LEVEL = 3

LEVEL_KEYS = ("level1", "level2", "level3")

DEFAULT_LEVEL_CONFIG: dict[str, str] = {
    "level1": "Chapter",
    "level2": "Section",
    "level3": "Beat",
}


def default_level_config() -> dict[str, str]:
    return dict(DEFAULT_LEVEL_CONFIG)


def resolve_level_config(raw: dict | None) -> dict[str, str]:
    """Return a complete label mapping, falling back per level to the defaults."""
    resolved = default_level_config()
    if not raw:
        return resolved
    for key in LEVEL_KEYS:
        value = raw.get(key)
        if isinstance(value, str) and value.strip():
            resolved[key] = value.strip()
    return resolved


def is_leaf_level(level: int) -> bool:
    return level == LEAF_LEVEL
