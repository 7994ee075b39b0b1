"""studio and institutional pages

Revision ID: 3f6a9c1b5d27
Revises: 8c1d4e2a7b90
Create Date: 2026-10-19 16:40:27.118532

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3f6a9c1b5d27"
down_revision: Union[str, None] = "8c1d4e2a7b90"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def _i18n(prefix: str, type_: sa.types.TypeEngine) -> list[sa.Column]:
    return [sa.Column(f"{prefix}_{loc}", type_, nullable=False) for loc in ("pt", "en", "es")]


def upgrade() -> None:
    op.create_table(
        "studio",
        sa.Column("id", sa.Integer(), primary_key=True),
        *_i18n("body", sa.Text()),
        *_audit_columns(),
    )

    op.create_table(
        "studio_category",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("studio_id", sa.Integer(), sa.ForeignKey("studio.id"), nullable=False),
        *_i18n("name", sa.String(200)),
        *_audit_columns(),
    )
    op.create_index("ix_studio_category_studio_id", "studio_category", ["studio_id"])

    op.create_table(
        "studio_category_media",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "studio_category_id", sa.Integer(), sa.ForeignKey("studio_category.id"), nullable=False
        ),
        sa.Column("file_path", sa.String(500), nullable=False),
        *_audit_columns(),
    )
    op.create_index(
        "ix_studio_category_media_category_id", "studio_category_media", ["studio_category_id"]
    )

    op.create_table(
        "institutional_page",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("kind", sa.String(32), nullable=False),
        *_i18n("body", sa.Text()),
        *_audit_columns(),
    )
    op.create_index("ix_institutional_page_kind", "institutional_page", ["kind"])


def downgrade() -> None:
    op.drop_index("ix_institutional_page_kind", table_name="institutional_page")
    op.drop_table("institutional_page")
    op.drop_index("ix_studio_category_media_category_id", table_name="studio_category_media")
    op.drop_table("studio_category_media")
    op.drop_index("ix_studio_category_studio_id", table_name="studio_category")
    op.drop_table("studio_category")
    op.drop_table("studio")
