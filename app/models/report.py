"""점검 보고서 및 이슈 SQLAlchemy ORM 모델.

Inspection report aggregate ORM models. A report owns its issues; an
issue owns its items and photos, which are replaced as whole collections
when the issue is edited.

Tables:
    - reports: 현장 방문 1회의 점검 보고서 (One inspection visit)
    - report_issues: 기록된 결함 (Recorded defect, issue_type single|multiple)
    - issue_items: 이슈별 수량/단가 스냅샷 (Quantity + unit price per sub item)
    - issue_photos: 이슈 사진 URL (Stored photo URLs)
"""

import uuid
from datetime import date, datetime, timezone
from sqlalchemy import Date, DateTime, Float, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

# 이슈 유형 — single: 항목 1 + 사진 3, multiple: 항목 3 + 사진 3 (인덱스로 짝지음)
ISSUE_TYPE_SINGLE = "single"
ISSUE_TYPE_MULTIPLE = "multiple"


class Report(Base):
    """점검 보고서 모델.

    Attributes:
        mosque_id: 점검 현장 FK (Inspected site)
        status: 진행 상태 (draft / in_progress / completed)
        report_date: 점검 일자 (Visit date)
        map_photo_url: 위성 지도 스냅샷 URL (Satellite map snapshot, optional)
        created_by: 작성자 FK (Field staff who created the report)
    """

    __tablename__ = "reports"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    mosque_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("mosques.id"), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="draft")  # draft, in_progress, completed
    report_date: Mapped[date] = mapped_column(Date, nullable=False)
    map_photo_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    mosque = relationship("Mosque", back_populates="reports")
    # 보고서 삭제는 하위 행을 명시적 순서로 지움 (report_service.delete_report)
    issues = relationship("ReportIssue", back_populates="report", order_by="ReportIssue.created_at", passive_deletes=True)


class ReportIssue(Base):
    """보고서 이슈 모델 — 하나의 결함 기록."""

    __tablename__ = "report_issues"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    report_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("reports.id"), nullable=False)
    main_item_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("main_items.id"), nullable=False)
    notes: Mapped[str] = mapped_column(Text, default="")
    issue_type: Mapped[str] = mapped_column(String(20), default=ISSUE_TYPE_SINGLE)  # single, multiple
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    report = relationship("Report", back_populates="issues")
    main_item = relationship("MainItem")
    items = relationship("IssueItem", back_populates="issue", order_by="IssueItem.sort_order", passive_deletes=True)
    photos = relationship("IssuePhoto", back_populates="issue", order_by="IssuePhoto.sort_order", passive_deletes=True)


class IssueItem(Base):
    """이슈 항목 — 세부 항목별 수량과 단가 스냅샷.

    sort_order는 삽입 시점의 배열 위치이며 multiple 유형에서 사진과 짝을 맞춥니다.
    """

    __tablename__ = "issue_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    issue_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("report_issues.id", ondelete="CASCADE"), nullable=False)
    sub_item_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("sub_items.id"), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    unit_price: Mapped[float] = mapped_column(Float, default=0)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)

    issue = relationship("ReportIssue", back_populates="items")
    sub_item = relationship("SubItem")


class IssuePhoto(Base):
    """이슈 사진 — 저장된 오브젝트 URL."""

    __tablename__ = "issue_photos"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    issue_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("report_issues.id", ondelete="CASCADE"), nullable=False)
    photo_url: Mapped[str] = mapped_column(Text, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    issue = relationship("ReportIssue", back_populates="photos")
