"""Content hierarchy: tree assembly and node mutations."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from app.core.exceptions import EntityNotFoundError, HierarchyError
from app.core.hierarchy import LEAF_LEVEL, TOP_LEVEL, is_leaf_level
from app.core.metrics import track_tree_build
from app.core.request_context import log_context
from app.db.models import ContentNode, Revision
from app.db.session import unit_of_work
from app.services.projects import ProjectService
from app.services.revisions import RevisionService
from app.services.tree_cache import notify_content_changed, tree_cache


logger = logging.getLogger(__name__)

UNSET: Any = object()


@dataclass
class ContentTreeNode:
    node_id: uuid.UUID
    project_id: uuid.UUID
    parent_id: uuid.UUID | None
    title: str
    level: int
    order: int
    head_notes: str | None = None
    foot_notes: str | None = None
    created_at: object | None = None
    children: list[ContentTreeNode] = field(default_factory=list)

    @classmethod
    def from_row(cls, row: Any) -> ContentTreeNode:
        return cls(
            node_id=row.node_id,
            project_id=row.project_id,
            parent_id=row.parent_id,
            title=row.title,
            level=row.level,
            order=row.order,
            head_notes=row.head_notes,
            foot_notes=row.foot_notes,
            created_at=row.created_at,
        )


@dataclass
class DeletedSubtree:
    node_ids: list[uuid.UUID]
    revision_count: int


def build_content_tree(rows: Iterable[Any]) -> list[ContentTreeNode]:
    """Assemble flat node rows into an ordered forest.

    Rows are expected in (level, order) order; children keep that relative
    order under their parent. A row whose parent_id does not resolve to any
    row in the input is promoted to a root.
    """
    rows = list(rows)
    lookup: dict[uuid.UUID, ContentTreeNode] = {}
    for row in rows:
        lookup[row.node_id] = ContentTreeNode.from_row(row)

    roots: list[ContentTreeNode] = []
    for row in rows:
        wrapper = lookup[row.node_id]
        parent = lookup.get(row.parent_id) if row.parent_id is not None else None
        if parent is not None:
            parent.children.append(wrapper)
        else:
            roots.append(wrapper)
    return roots


def iter_tree(forest: Iterable[ContentTreeNode]):
    """Yield every node of a forest, parents before children."""
    stack = list(reversed(list(forest)))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


class ContentTreeService:
    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_content_tree(self, project_id: uuid.UUID) -> list[ContentTreeNode]:
        ProjectService(self.db).get_project(project_id)
        return tree_cache.get_or_load(project_id, lambda: self._load_tree(project_id))

    def _load_tree(self, project_id: uuid.UUID) -> list[ContentTreeNode]:
        with track_tree_build():
            # Orders can repeat after a delete and created_at is only second-precise on SQLite,
            # so node_id keeps ties in a stable order.
            stmt = (
                select(ContentNode)
                .where(ContentNode.project_id == project_id)
                .order_by(
                    ContentNode.level.asc(),
                    ContentNode.order.asc(),
                    ContentNode.created_at.asc(),
                    ContentNode.node_id.asc(),
                )
            )
            rows = self.db.execute(stmt).scalars().all()
            return build_content_tree(rows)

    def get_node(self, node_id: uuid.UUID) -> ContentNode:
        node = self.db.get(ContentNode, node_id)
        if node is None:
            raise EntityNotFoundError("content node", node_id)
        return node

    def list_children(self, node_id: uuid.UUID) -> list[ContentNode]:
        stmt = (
            select(ContentNode)
            .where(ContentNode.parent_id == node_id)
            .order_by(ContentNode.order.asc(), ContentNode.created_at.asc(), ContentNode.node_id.asc())
        )
        return list(self.db.execute(stmt).scalars().all())

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_node(
        self,
        project_id: uuid.UUID,
        title: str,
        level: int,
        parent_id: uuid.UUID | None = None,
    ) -> ContentNode:
        if not title or not title.strip():
            raise ValueError("title must not be empty")
        if level < TOP_LEVEL or level > LEAF_LEVEL:
            raise HierarchyError(
                f"level must be between {TOP_LEVEL} and {LEAF_LEVEL}",
                detail=f"invalid level {level}",
            )

        ProjectService(self.db).get_project(project_id)
        node_id = uuid.uuid4()

        if level == TOP_LEVEL:
            if parent_id is not None:
                raise HierarchyError("top-level nodes cannot have a parent")
        else:
            if parent_id is None:
                raise HierarchyError(f"level {level} nodes require a parent")
            parent = self.get_node(parent_id)
            if parent.project_id != project_id:
                raise HierarchyError("parent belongs to a different project")
            if parent.level != level - 1:
                raise HierarchyError(
                    f"parent is level {parent.level}; a level {level} node needs a level {level - 1} parent"
                )
            self._assert_acyclic(parent, node_id)

        with log_context(project_id=project_id, node_id=node_id):
            with unit_of_work(self.db):
                order = self._count_siblings(project_id, level, parent_id)
                node = ContentNode(
                    node_id=node_id,
                    project_id=project_id,
                    parent_id=parent_id,
                    title=title,
                    level=level,
                    order=order,
                )
                self.db.add(node)
                self.db.flush()
                if is_leaf_level(level):
                    # Every leaf starts with one empty revision so the editor always has something to load.
                    RevisionService(self.db).add_initial_revision(node_id=node_id)
            self.db.refresh(node)
            logger.info("content_node_created", extra={"level": level, "order": order})

        notify_content_changed(project_id, "content_node", "created")
        return node

    def update_node_title(self, node_id: uuid.UUID, title: str) -> ContentNode:
        if not title or not title.strip():
            raise ValueError("title must not be empty")
        node = self.get_node(node_id)
        with log_context(project_id=node.project_id, node_id=node_id):
            with unit_of_work(self.db):
                node.title = title
                self.db.add(node)
            self.db.refresh(node)
            logger.info("content_node_renamed")

        notify_content_changed(node.project_id, "content_node", "renamed")
        return node

    def update_node_notes(
        self,
        node_id: uuid.UUID,
        head_notes: str | None = UNSET,
        foot_notes: str | None = UNSET,
    ) -> ContentNode:
        """Overwrite only the notes that were supplied; omitted notes keep their value."""
        node = self.get_node(node_id)
        changed: list[str] = []
        with log_context(project_id=node.project_id, node_id=node_id):
            with unit_of_work(self.db):
                if head_notes is not UNSET:
                    node.head_notes = head_notes
                    changed.append("head_notes")
                if foot_notes is not UNSET:
                    node.foot_notes = foot_notes
                    changed.append("foot_notes")
                self.db.add(node)
            self.db.refresh(node)
            logger.info("content_node_notes_updated", extra={"fields": changed})

        notify_content_changed(node.project_id, "content_node", "notes_updated")
        return node

    def delete_node(self, node_id: uuid.UUID) -> DeletedSubtree:
        """Delete a node, its descendants and every revision attached to them.

        Runs as a single transaction: revisions first, then nodes bottom-up.
        """
        node = self.get_node(node_id)
        project_id = node.project_id
        with log_context(project_id=project_id, node_id=node_id):
            with unit_of_work(self.db):
                subtree_ids = self._collect_subtree(node_id, set())
                revision_result = self.db.execute(delete(Revision).where(Revision.node_id.in_(subtree_ids)))
                for descendant_id in subtree_ids:
                    self.db.execute(delete(ContentNode).where(ContentNode.node_id == descendant_id))
            deleted = DeletedSubtree(node_ids=subtree_ids, revision_count=revision_result.rowcount or 0)
            logger.info(
                "content_node_deleted",
                extra={"deleted_nodes": len(deleted.node_ids), "deleted_revisions": deleted.revision_count},
            )

        notify_content_changed(project_id, "content_node", "deleted")
        return deleted

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _count_siblings(self, project_id: uuid.UUID, level: int, parent_id: uuid.UUID | None) -> int:
        parent_clause = ContentNode.parent_id.is_(None) if parent_id is None else ContentNode.parent_id == parent_id
        stmt = (
            select(func.count())
            .select_from(ContentNode)
            .where(ContentNode.project_id == project_id, ContentNode.level == level, parent_clause)
        )
        return int(self.db.execute(stmt).scalar_one())

    def _assert_acyclic(self, parent: ContentNode, new_node_id: uuid.UUID) -> None:
        """Walk the proposed parent's ancestors; reject revisits or the new node itself."""
        seen: set[uuid.UUID] = set()
        current: ContentNode | None = parent
        while current is not None:
            if current.node_id == new_node_id or current.node_id in seen:
                raise HierarchyError("attaching the node would create a cycle")
            seen.add(current.node_id)
            if current.parent_id is None:
                break
            current = self.db.get(ContentNode, current.parent_id)

    def _collect_subtree(self, node_id: uuid.UUID, visited: set[uuid.UUID]) -> list[uuid.UUID]:
        """Return the ids of a subtree in post-order (descendants before ancestors)."""
        if node_id in visited:
            raise HierarchyError("content tree contains a cycle")
        visited.add(node_id)
        child_ids = self.db.execute(
            select(ContentNode.node_id).where(ContentNode.parent_id == node_id)
        ).scalars().all()
        ordered: list[uuid.UUID] = []
        for child_id in child_ids:
            ordered.extend(self._collect_subtree(child_id, visited))
        ordered.append(node_id)
        return ordered
