from __future__ import annotations

import uuid

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql.sqltypes import Uuid

from app.core.hierarchy import default_level_config
from app.db.base import Base


class Project(Base):
    __tablename__ = "projects"

    project_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Nullable for rows written before labels were configurable; readers fall back to defaults.
    level_config: Mapped[dict | None] = mapped_column(JSON(none_as_null=True), nullable=True, default=default_level_config)
    created_at: Mapped[object] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[object] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    nodes: Mapped[list["ContentNode"]] = relationship(
        back_populates="project", cascade="all, delete-orphan", passive_deletes=True
    )
    chapters: Mapped[list["Chapter"]] = relationship(
        back_populates="project", cascade="all, delete-orphan", passive_deletes=True
    )
    characters: Mapped[list["Character"]] = relationship(
        back_populates="project", cascade="all, delete-orphan", passive_deletes=True
    )


class ContentNode(Base):
    __tablename__ = "content_nodes"

    node_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("projects.project_id", ondelete="CASCADE"), nullable=False
    )
    parent_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("content_nodes.node_id", ondelete="CASCADE"), nullable=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    level: Mapped[int] = mapped_column(Integer, nullable=False)
    order: Mapped[int] = mapped_column("sort_order", Integer, nullable=False)
    head_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    foot_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[object] = mapped_column(DateTime(timezone=True), server_default=func.now())

    project: Mapped[Project] = relationship(back_populates="nodes")

    __table_args__ = (
        Index("ix_content_nodes_project_level_order", "project_id", "level", "sort_order"),
        Index("ix_content_nodes_parent_id", "parent_id"),
    )


class Chapter(Base):
    """Flat chapter list kept for projects created before the content hierarchy."""

    __tablename__ = "chapters"

    chapter_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("projects.project_id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    order: Mapped[int] = mapped_column("sort_order", Integer, nullable=False)
    created_at: Mapped[object] = mapped_column(DateTime(timezone=True), server_default=func.now())

    project: Mapped[Project] = relationship(back_populates="chapters")


class Revision(Base):
    __tablename__ = "revisions"

    revision_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    node_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("content_nodes.node_id", ondelete="CASCADE"), nullable=True
    )
    chapter_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("chapters.chapter_id", ondelete="CASCADE"), nullable=True
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[str] = mapped_column(String(64), nullable=False)
    author_name: Mapped[str] = mapped_column(String(255), nullable=False)
    parent_revision_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("revisions.revision_id", ondelete="SET NULL"), nullable=True
    )
    ai_metadata: Mapped[dict | None] = mapped_column(JSON(none_as_null=True), nullable=True)
    created_at: Mapped[object] = mapped_column(DateTime(timezone=True), server_default=func.now())

    parent: Mapped[Revision | None] = relationship(
        "Revision",
        foreign_keys=[parent_revision_id],
        remote_side="Revision.revision_id",
    )

    __table_args__ = (
        Index("ix_revisions_node_version", "node_id", "version", unique=True),
        Index("ix_revisions_chapter_version", "chapter_id", "version", unique=True),
    )


class Character(Base):
    __tablename__ = "characters"

    character_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("projects.project_id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    role: Mapped[str] = mapped_column(String(32), nullable=False, default="supporting")
    archetype: Mapped[str | None] = mapped_column(String(32), nullable=True)
    appearance: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    personality: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    importance_level: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    # Keyed by the other character's id; not cleaned up when that character is deleted.
    relationships: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    motivation: Mapped[str | None] = mapped_column(Text, nullable=True)
    goals: Mapped[str | None] = mapped_column(Text, nullable=True)
    fears: Mapped[str | None] = mapped_column(Text, nullable=True)
    secrets: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[object] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[object] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    project: Mapped[Project] = relationship(back_populates="characters")
