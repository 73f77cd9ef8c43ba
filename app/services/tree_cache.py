"""Read-through cache of assembled content trees.

Trees are rebuilt from the store on first read after any mutation of the
owning project. Mutating services never patch cached trees in place; they
call `notify_content_changed` once their transaction has committed.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Callable
from typing import TYPE_CHECKING

from app.core.metrics import record_content_mutation, record_tree_cache_lookup
from app.core.settings import settings

if TYPE_CHECKING:
    from app.services.content_tree import ContentTreeNode


logger = logging.getLogger(__name__)

TreeLoader = Callable[[], "list[ContentTreeNode]"]


class ContentTreeCache:
    def __init__(self) -> None:
        self._trees: dict[uuid.UUID, list[ContentTreeNode]] = {}
        self._generations: dict[uuid.UUID, int] = {}
        self._lock = threading.Lock()

    def get_or_load(self, project_id: uuid.UUID, loader: TreeLoader) -> list[ContentTreeNode]:
        if not settings.tree_cache_enabled:
            return loader()

        with self._lock:
            cached = self._trees.get(project_id)
            generation = self._generations.get(project_id, 0)
        if cached is not None:
            record_tree_cache_lookup(hit=True)
            return cached

        record_tree_cache_lookup(hit=False)
        tree = loader()
        with self._lock:
            # Drop the result if an invalidation raced with the load.
            if self._generations.get(project_id, 0) == generation:
                self._trees[project_id] = tree
        return tree

    def invalidate(self, project_id: uuid.UUID) -> None:
        with self._lock:
            self._trees.pop(project_id, None)
            self._generations[project_id] = self._generations.get(project_id, 0) + 1

    def clear(self) -> None:
        with self._lock:
            self._trees.clear()
            self._generations.clear()

    def is_cached(self, project_id: uuid.UUID) -> bool:
        with self._lock:
            return project_id in self._trees


tree_cache = ContentTreeCache()


def notify_content_changed(project_id: uuid.UUID, entity: str, action: str) -> None:
    """Signal that a project's stored content changed; readers must re-fetch."""
    tree_cache.invalidate(project_id)
    record_content_mutation(entity, action)
    logger.info(
        "content_changed",
        extra={"changed_project_id": str(project_id), "entity": entity, "action": action},
    )
