"""initial

Revision ID: 20261019_0001
Revises: 
Create Date: 2026-10-19

"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op


revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "projects",
        sa.Column("project_id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("level_config", sa.JSON(none_as_null=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "content_nodes",
        sa.Column("node_id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
        sa.Column(
            "project_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("projects.project_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "parent_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("content_nodes.node_id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("level", sa.Integer(), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        sa.Column("head_notes", sa.Text(), nullable=True),
        sa.Column("foot_notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index(
        "ix_content_nodes_project_level_order",
        "content_nodes",
        ["project_id", "level", "sort_order"],
    )
    op.create_index("ix_content_nodes_parent_id", "content_nodes", ["parent_id"])

    op.create_table(
        "chapters",
        sa.Column("chapter_id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
        sa.Column(
            "project_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("projects.project_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        "revisions",
        sa.Column("revision_id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
        sa.Column(
            "node_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("content_nodes.node_id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column(
            "chapter_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("chapters.chapter_id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("author_id", sa.String(length=64), nullable=False),
        sa.Column("author_name", sa.String(length=255), nullable=False),
        sa.Column(
            "parent_revision_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("revisions.revision_id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("ai_metadata", sa.JSON(none_as_null=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_revisions_node_version", "revisions", ["node_id", "version"], unique=True)
    op.create_index("ix_revisions_chapter_version", "revisions", ["chapter_id", "version"], unique=True)

    op.create_table(
        "characters",
        sa.Column("character_id", sa.Uuid(as_uuid=True), primary_key=True, nullable=False),
        sa.Column(
            "project_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("projects.project_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("role", sa.String(length=32), nullable=False),
        sa.Column("archetype", sa.String(length=32), nullable=True),
        sa.Column("appearance", sa.JSON(), nullable=False),
        sa.Column("personality", sa.JSON(), nullable=False),
        sa.Column("importance_level", sa.Integer(), nullable=False),
        sa.Column("relationships", sa.JSON(), nullable=False),
        sa.Column("motivation", sa.Text(), nullable=True),
        sa.Column("goals", sa.Text(), nullable=True),
        sa.Column("fears", sa.Text(), nullable=True),
        sa.Column("secrets", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("characters")
    op.drop_index("ix_revisions_chapter_version", table_name="revisions")
    op.drop_index("ix_revisions_node_version", table_name="revisions")
    op.drop_table("revisions")
    op.drop_table("chapters")
    op.drop_index("ix_content_nodes_parent_id", table_name="content_nodes")
    op.drop_index("ix_content_nodes_project_level_order", table_name="content_nodes")
    op.drop_table("content_nodes")
    op.drop_table("projects")
