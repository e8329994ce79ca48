"""점검 항목 카탈로그 SQLAlchemy ORM 모델.

Inspection catalog ORM models — two-level reference data managed by
administrators, independent of any report.

Tables:
    - main_items: 주 점검 분류 (Top-level inspection categories, bilingual)
    - sub_items: 세부 작업 단위 (Billable sub-tasks with unit and unit price)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, DateTime, Float, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class MainItem(Base):
    """주 점검 항목 — 영문/아랍어 이름을 가진 최상위 분류."""

    __tablename__ = "main_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    name_ar: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    sub_items = relationship(
        "SubItem",
        back_populates="main_item",
        order_by="SubItem.created_at",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class SubItem(Base):
    """세부 항목 — 주 항목 아래의 청구 가능한 작업 단위.

    Attributes:
        main_item_id: 상위 주 항목 FK (Parent main item)
        unit / unit_ar: 측정 단위 (Unit of measure, bilingual)
        unit_price: 단가 — 이슈별로 덮어쓸 수 있음 (Catalog price, overridable per issue)
        name_table: 보고서 표 표시용 이름 (Optional display name for report tables)
    """

    __tablename__ = "sub_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    main_item_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("main_items.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    name_ar: Mapped[str] = mapped_column(String(255), nullable=False)
    unit: Mapped[str] = mapped_column(String(50), default="unit")
    unit_ar: Mapped[str] = mapped_column(String(50), default="")
    unit_price: Mapped[float] = mapped_column(Float, default=0)
    name_table: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    main_item = relationship("MainItem", back_populates="sub_items")
