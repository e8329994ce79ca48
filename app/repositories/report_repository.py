"""점검 보고서 레포지토리.

Report repository — Loads the report aggregate (mosque, ordered issues,
their items with joined sub items, and photos) and performs the ordered
report delete.
"""

from datetime import date
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.report import IssueItem, IssuePhoto, Report, ReportIssue
from app.repositories.base import BaseRepository


class ReportRepository(BaseRepository[Report]):
    """보고서 집합체 조회와 삭제를 담당하는 레포지토리."""

    def __init__(self) -> None:
        super().__init__(Report)

    async def get_aggregate(
        self,
        db: AsyncSession,
        report_id: UUID,
    ) -> Report | None:
        """보고서를 모스크, 이슈, 항목, 사진과 함께 조회합니다.

        Load a report with its mosque, ordered issues, each issue's items
        (with the joined sub item for name/unit/price fallback), photos and
        main item. ``populate_existing`` refreshes collections already held
        by the session after a delete-then-reinsert.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            report_id: 보고서 UUID (Report identifier)

        Returns:
            Report | None: 보고서 집합체 또는 None (Report aggregate or None)
        """
        query: Select = (
            select(Report)
            .options(
                selectinload(Report.mosque),
                selectinload(Report.issues).selectinload(ReportIssue.main_item),
                selectinload(Report.issues)
                .selectinload(ReportIssue.items)
                .selectinload(IssueItem.sub_item),
                selectinload(Report.issues).selectinload(ReportIssue.photos),
            )
            .where(Report.id == report_id)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_list(
        self,
        db: AsyncSession,
        mosque_id: UUID | None = None,
        status: str | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[Report], int]:
        """필터 조건으로 보고서 목록을 페이지네이션 조회합니다 (최신순)."""
        query: Select = (
            select(Report)
            .options(selectinload(Report.mosque))
            .order_by(Report.report_date.desc(), Report.created_at.desc())
        )
        if mosque_id is not None:
            query = query.where(Report.mosque_id == mosque_id)
        if status is not None:
            query = query.where(Report.status == status)
        if date_from is not None:
            query = query.where(Report.report_date >= date_from)
        if date_to is not None:
            query = query.where(Report.report_date <= date_to)
        return await self.get_paginated(db, query, page, per_page)

    async def get_issue_ids(self, db: AsyncSession, report_id: UUID) -> list[UUID]:
        result = await db.execute(
            select(ReportIssue.id).where(ReportIssue.report_id == report_id)
        )
        return list(result.scalars().all())

    async def delete_with_descendants(
        self,
        db: AsyncSession,
        report_id: UUID,
    ) -> bool:
        """보고서와 모든 하위 행을 고정 순서로 삭제합니다.

        Delete order: issue items (issue-id batch) → issue photos (batch)
        → issues (id batch) → report. The store does not cascade
        report-level deletes.

        Returns:
            bool: 보고서가 존재했는지 여부 (Whether the report existed)
        """
        if await self.get_by_id(db, report_id) is None:
            return False

        issue_ids: list[UUID] = await self.get_issue_ids(db, report_id)
        if issue_ids:
            await db.execute(delete(IssueItem).where(IssueItem.issue_id.in_(issue_ids)))
            await db.execute(delete(IssuePhoto).where(IssuePhoto.issue_id.in_(issue_ids)))
            await db.execute(delete(ReportIssue).where(ReportIssue.id.in_(issue_ids)))
        await db.execute(delete(Report).where(Report.id == report_id))
        await db.flush()
        return True


report_repository: ReportRepository = ReportRepository()
