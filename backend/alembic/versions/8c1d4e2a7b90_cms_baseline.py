"""cms baseline

Revision ID: 8c1d4e2a7b90
Revises:
Create Date: 2026-10-19 10:12:03.412907

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "8c1d4e2a7b90"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def _i18n(prefix: str, type_: sa.types.TypeEngine, nullable: bool = False, unique: bool = False) -> list[sa.Column]:
    return [
        sa.Column(f"{prefix}_{loc}", type_, nullable=nullable, unique=unique)
        for loc in ("pt", "en", "es")
    ]


def upgrade() -> None:
    op.create_table(
        "category",
        sa.Column("id", sa.Integer(), primary_key=True),
        *_i18n("name", sa.String(200)),
        *_i18n("slug", sa.String(200), unique=True),
        *_i18n("description", sa.Text(), nullable=True),
        sa.Column("parent_id", sa.Integer(), sa.ForeignKey("category.id"), nullable=True),
        *_audit_columns(),
    )
    op.create_index("ix_category_parent_id", "category", ["parent_id"])

    op.create_table(
        "location",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("city", sa.String(200), nullable=False),
        sa.Column("city_slug", sa.String(200), nullable=False, unique=True),
        sa.Column("state", sa.String(100), nullable=False),
        sa.Column("country", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        *_audit_columns(),
    )

    op.create_table(
        "location_district",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("location_id", sa.Integer(), sa.ForeignKey("location.id"), nullable=False),
        sa.Column("district", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(200), nullable=False),
        *_audit_columns(),
    )
    op.create_index("ix_location_district_location_id", "location_district", ["location_id"])

    op.create_table(
        "company",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(200), nullable=False, unique=True),
        sa.Column("location_id", sa.Integer(), sa.ForeignKey("location.id"), nullable=False),
        sa.Column("lat", sa.Float(), nullable=True),
        sa.Column("lng", sa.Float(), nullable=True),
        *_audit_columns(),
    )

    op.create_table(
        "address",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("company.id"), nullable=False, unique=True),
        sa.Column("street", sa.String(200), nullable=False),
        sa.Column("number", sa.String(30), nullable=True),
        sa.Column("complement", sa.String(200), nullable=True),
        sa.Column("district", sa.String(200), nullable=True),
        sa.Column("city", sa.String(200), nullable=False),
        sa.Column("state", sa.String(10), nullable=False),
        sa.Column("state_full", sa.String(100), nullable=True),
        sa.Column("postal_code", sa.String(20), nullable=True),
        sa.Column("country", sa.String(100), nullable=False),
        sa.Column("country_code", sa.String(2), nullable=False),
        *_audit_columns(),
    )

    op.create_table(
        "article",
        sa.Column("id", sa.Integer(), primary_key=True),
        *_i18n("title", sa.String(300)),
        *_i18n("slug", sa.String(300), unique=True),
        *_i18n("body", sa.Text()),
        sa.Column("hero_image", sa.String(500), nullable=False),
        sa.Column("thumbnail", sa.String(500), nullable=False),
        sa.Column("publication_date", sa.DateTime(timezone=True), nullable=False),
        *_audit_columns(),
    )
    op.create_index("ix_article_publication_date", "article", ["publication_date"])

    op.create_table(
        "ad",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("ad_type", sa.Integer(), nullable=False),
        sa.Column("url", sa.String(500), nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        *_i18n("title", sa.String(300)),
        sa.Column("thumbnail", sa.String(500), nullable=False),
        sa.Column("pricing", sa.Float(), nullable=False),
        *_audit_columns(),
    )

    op.create_table(
        "ad_category",
        sa.Column("ad_id", sa.Integer(), sa.ForeignKey("ad.id"), primary_key=True),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("category.id"), nullable=False),
        *_audit_columns(),
    )

    op.create_table(
        "ad_menu",
        sa.Column("ad_id", sa.Integer(), sa.ForeignKey("ad.id"), primary_key=True),
        sa.Column("menu_type", sa.Integer(), nullable=False),
        *_audit_columns(),
    )

    op.create_table(
        "event",
        sa.Column("id", sa.Integer(), primary_key=True),
        *_i18n("title", sa.String(300)),
        *_i18n("slug", sa.String(300), unique=True),
        *_i18n("body", sa.Text()),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("category.id"), nullable=False),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("company.id"), nullable=False),
        sa.Column("hero_image", sa.String(500), nullable=False),
        sa.Column("thumbnail", sa.String(500), nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("pricing", sa.Float(), nullable=False),
        sa.Column("external_ticket_link", sa.String(500), nullable=True),
        sa.Column("facilities", sa.JSON(), nullable=False),
        sa.Column("sponsored", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_audit_columns(),
    )
    op.create_index("ix_event_start_date", "event", ["start_date"])
    op.create_index("ix_event_category_id", "event", ["category_id"])
    op.create_index("ix_event_company_id", "event", ["company_id"])

    op.create_table(
        "event_recurrence",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("event_id", sa.Integer(), sa.ForeignKey("event.id"), nullable=False, unique=True),
        sa.Column("rrule", sa.Text(), nullable=False),
        sa.Column("until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("exdates", sa.JSON(), nullable=False),
        sa.Column("rdates", sa.JSON(), nullable=False),
        *_audit_columns(),
    )


def downgrade() -> None:
    op.drop_table("event_recurrence")
    op.drop_index("ix_event_company_id", table_name="event")
    op.drop_index("ix_event_category_id", table_name="event")
    op.drop_index("ix_event_start_date", table_name="event")
    op.drop_table("event")
    op.drop_table("ad_menu")
    op.drop_table("ad_category")
    op.drop_table("ad")
    op.drop_index("ix_article_publication_date", table_name="article")
    op.drop_table("article")
    op.drop_table("address")
    op.drop_table("company")
    op.drop_index("ix_location_district_location_id", table_name="location_district")
    op.drop_table("location_district")
    op.drop_table("location")
    op.drop_index("ix_category_parent_id", table_name="category")
    op.drop_table("category")
