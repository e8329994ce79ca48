"""initial_inspection_schema

Revision ID: a1c2e3g4i5k6
Revises:
Create Date: 2026-10-18 09:00:00.000000

점검 보고 스키마 초기 생성:
- roles, users, refresh_tokens
- mosques
- main_items, sub_items (점검 카탈로그)
- reports, report_issues, issue_items, issue_photos
- 기본 역할 seed (admin=1, technician=2)
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "a1c2e3g4i5k6"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column("id", UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), primary_key=True)


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False)


def _updated_at() -> sa.Column:
    return sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False)


def upgrade() -> None:
    # 1. 인증
    op.create_table(
        "roles",
        _id(),
        sa.Column("name", sa.String(50), unique=True, nullable=False),
        sa.Column("level", sa.Integer, unique=True, nullable=False),
        _created_at(),
    )
    op.create_table(
        "users",
        _id(),
        sa.Column("role_id", UUID(as_uuid=True), sa.ForeignKey("roles.id"), nullable=False),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("phone_number", sa.String(50), nullable=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.text("true")),
        _created_at(),
        _updated_at(),
    )
    op.create_table(
        "refresh_tokens",
        _id(),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("token", sa.String(512), unique=True, nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        _created_at(),
    )
    op.create_index("idx_refresh_tokens_user_id", "refresh_tokens", ["user_id"])

    # 2. 현장
    op.create_table(
        "mosques",
        _id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("supervisor_name", sa.String(255), nullable=False, server_default=""),
        sa.Column("supervisor_phone", sa.String(50), nullable=False, server_default=""),
        sa.Column("district", sa.String(255), nullable=False, server_default=""),
        sa.Column("city", sa.String(255), nullable=False, server_default=""),
        sa.Column("address", sa.Text, nullable=True),
        sa.Column("main_photo_url", sa.Text, nullable=True),
        sa.Column("latitude", sa.Float, nullable=True),
        sa.Column("longitude", sa.Float, nullable=True),
        _created_at(),
        _updated_at(),
    )

    # 3. 카탈로그
    op.create_table(
        "main_items",
        _id(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("name_ar", sa.String(255), nullable=False),
        _created_at(),
    )
    op.create_table(
        "sub_items",
        _id(),
        sa.Column("main_item_id", UUID(as_uuid=True), sa.ForeignKey("main_items.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("name_ar", sa.String(255), nullable=False),
        sa.Column("unit", sa.String(50), nullable=False, server_default="unit"),
        sa.Column("unit_ar", sa.String(50), nullable=False, server_default=""),
        sa.Column("unit_price", sa.Float, nullable=False, server_default=sa.text("0")),
        sa.Column("name_table", sa.String(255), nullable=True),
        _created_at(),
    )
    op.create_index("idx_sub_items_main_item_id", "sub_items", ["main_item_id"])

    # 4. 보고서 집합체 — 삭제는 애플리케이션이 하위 행부터 순서대로 수행
    op.create_table(
        "reports",
        _id(),
        sa.Column("mosque_id", UUID(as_uuid=True), sa.ForeignKey("mosques.id"), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
        sa.Column("report_date", sa.Date, nullable=False),
        sa.Column("map_photo_url", sa.Text, nullable=True),
        sa.Column("created_by", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        _created_at(),
        _updated_at(),
    )
    op.create_index("idx_reports_mosque_id", "reports", ["mosque_id"])
    op.create_index("idx_reports_report_date", "reports", ["report_date"])

    op.create_table(
        "report_issues",
        _id(),
        sa.Column("report_id", UUID(as_uuid=True), sa.ForeignKey("reports.id"), nullable=False),
        sa.Column("main_item_id", UUID(as_uuid=True), sa.ForeignKey("main_items.id"), nullable=False),
        sa.Column("notes", sa.Text, nullable=False, server_default=""),
        sa.Column("issue_type", sa.String(20), nullable=False, server_default="single"),
        _created_at(),
        _updated_at(),
    )
    op.create_index("idx_report_issues_report_id", "report_issues", ["report_id"])

    op.create_table(
        "issue_items",
        _id(),
        sa.Column("issue_id", UUID(as_uuid=True), sa.ForeignKey("report_issues.id", ondelete="CASCADE"), nullable=False),
        sa.Column("sub_item_id", UUID(as_uuid=True), sa.ForeignKey("sub_items.id"), nullable=False),
        sa.Column("quantity", sa.Integer, nullable=False, server_default=sa.text("1")),
        sa.Column("unit_price", sa.Float, nullable=False, server_default=sa.text("0")),
        sa.Column("sort_order", sa.Integer, nullable=False, server_default=sa.text("0")),
    )
    op.create_index("idx_issue_items_issue_id", "issue_items", ["issue_id"])

    op.create_table(
        "issue_photos",
        _id(),
        sa.Column("issue_id", UUID(as_uuid=True), sa.ForeignKey("report_issues.id", ondelete="CASCADE"), nullable=False),
        sa.Column("photo_url", sa.Text, nullable=False),
        sa.Column("sort_order", sa.Integer, nullable=False, server_default=sa.text("0")),
        _created_at(),
    )
    op.create_index("idx_issue_photos_issue_id", "issue_photos", ["issue_id"])

    # 5. 기본 역할 seed
    conn = op.get_bind()
    for name, level in [("admin", 1), ("technician", 2)]:
        conn.execute(
            sa.text("INSERT INTO roles (name, level) VALUES (:name, :level)"),
            {"name": name, "level": level},
        )


def downgrade() -> None:
    op.drop_index("idx_issue_photos_issue_id", table_name="issue_photos")
    op.drop_table("issue_photos")
    op.drop_index("idx_issue_items_issue_id", table_name="issue_items")
    op.drop_table("issue_items")
    op.drop_index("idx_report_issues_report_id", table_name="report_issues")
    op.drop_table("report_issues")
    op.drop_index("idx_reports_report_date", table_name="reports")
    op.drop_index("idx_reports_mosque_id", table_name="reports")
    op.drop_table("reports")
    op.drop_index("idx_sub_items_main_item_id", table_name="sub_items")
    op.drop_table("sub_items")
    op.drop_table("main_items")
    op.drop_table("mosques")
    op.drop_index("idx_refresh_tokens_user_id", table_name="refresh_tokens")
    op.drop_table("refresh_tokens")
    op.drop_table("users")
    op.drop_table("roles")
