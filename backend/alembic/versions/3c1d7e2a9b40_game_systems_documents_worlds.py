"""game systems, documents, worlds

Revision ID: 3c1d7e2a9b40
Revises:
Create Date: 2025-09-02 10:14:27.512034

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3c1d7e2a9b40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "game_systems",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=True),
        sa.Column("image_url", sa.String(length=2048), nullable=True),
        sa.Column("owner_id", sa.String(length=64), nullable=False),
        sa.Column(
            "parent_system_id",
            sa.String(length=36),
            sa.ForeignKey("game_systems.id", ondelete="RESTRICT"),
            nullable=True,
        ),
        sa.Column("validation_schema", sa.JSON(), nullable=True),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("sync_with_parent", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_game_systems_owner_id", "game_systems", ["owner_id"])
    op.create_index("ix_game_systems_parent_system_id", "game_systems", ["parent_system_id"])
    op.create_index("ix_game_systems_owner_name", "game_systems", ["owner_id", "name"])

    op.create_table(
        "documents",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "game_system_id",
            sa.String(length=36),
            sa.ForeignKey("game_systems.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("filename", sa.String(length=255), nullable=False),
        sa.Column("display_name", sa.String(length=100), nullable=False),
        sa.Column(
            "type",
            sa.Enum("JSON", "PDF", "MARKDOWN", name="document_type_enum"),
            nullable=False,
        ),
        sa.Column("file_path", sa.String(length=512), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("mime_type", sa.String(length=100), nullable=False),
        sa.Column("uploaded_by", sa.String(length=64), nullable=False),
        sa.Column("checksum", sa.String(length=64), nullable=False),
        sa.Column("validation_errors", sa.JSON(), nullable=False),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "ix_documents_system_active", "documents", ["game_system_id", "is_active"]
    )

    op.create_table(
        "worlds",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("image_url", sa.String(length=2048), nullable=True),
        sa.Column(
            "game_system_id",
            sa.String(length=36),
            sa.ForeignKey("game_systems.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("session_data", sa.JSON(), nullable=False),
        sa.Column("last_accessed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_worlds_game_system_id", "worlds", ["game_system_id"])
    op.create_index("ix_worlds_last_accessed_at", "worlds", ["last_accessed_at"])


def downgrade() -> None:
    op.drop_index("ix_worlds_last_accessed_at", table_name="worlds")
    op.drop_index("ix_worlds_game_system_id", table_name="worlds")
    op.drop_table("worlds")
    op.drop_index("ix_documents_system_active", table_name="documents")
    op.drop_table("documents")
    op.drop_index("ix_game_systems_owner_name", table_name="game_systems")
    op.drop_index("ix_game_systems_parent_system_id", table_name="game_systems")
    op.drop_index("ix_game_systems_owner_id", table_name="game_systems")
    op.drop_table("game_systems")
