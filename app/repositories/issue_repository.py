"""보고서 이슈 레포지토리.

Issue repository — Issue rows plus whole-collection replacement of
their items and photos. ``sort_order`` stores the array position so a
photo stays paired with the item at the same index.
"""

from typing import Any
from uuid import UUID

from sqlalchemy import Select, delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.report import IssueItem, IssuePhoto, ReportIssue
from app.repositories.base import BaseRepository


class IssueRepository(BaseRepository[ReportIssue]):

    def __init__(self) -> None:
        super().__init__(ReportIssue)

    async def get_with_children(
        self,
        db: AsyncSession,
        issue_id: UUID,
    ) -> ReportIssue | None:
        """이슈를 항목(세부 항목 포함)과 사진과 함께 조회합니다."""
        query: Select = (
            select(ReportIssue)
            .options(
                selectinload(ReportIssue.main_item),
                selectinload(ReportIssue.items).selectinload(IssueItem.sub_item),
                selectinload(ReportIssue.photos),
            )
            .where(ReportIssue.id == issue_id)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def insert_items(
        self,
        db: AsyncSession,
        issue_id: UUID,
        items: list[dict[str, Any]],
    ) -> None:
        """이슈 항목을 배열 순서대로 삽입합니다.

        Args:
            items: {"sub_item_id", "quantity", "unit_price"} 딕셔너리 목록
        """
        for index, item in enumerate(items):
            db.add(IssueItem(
                issue_id=issue_id,
                sub_item_id=item["sub_item_id"],
                quantity=item["quantity"],
                unit_price=item["unit_price"],
                sort_order=index,
            ))
        await db.flush()

    async def insert_photos(
        self,
        db: AsyncSession,
        issue_id: UUID,
        photo_urls: list[str],
    ) -> None:
        """이슈 사진 URL을 배열 순서대로 삽입합니다."""
        for index, url in enumerate(photo_urls):
            db.add(IssuePhoto(issue_id=issue_id, photo_url=url, sort_order=index))
        await db.flush()

    async def delete_children(self, db: AsyncSession, issue_id: UUID) -> None:
        """이슈의 기존 항목과 사진을 모두 삭제합니다 (재삽입 전 단계)."""
        await db.execute(delete(IssueItem).where(IssueItem.issue_id == issue_id))
        await db.execute(delete(IssuePhoto).where(IssuePhoto.issue_id == issue_id))
        await db.flush()

    async def delete_issue(self, db: AsyncSession, issue_id: UUID) -> bool:
        """이슈와 그 항목/사진을 삭제합니다."""
        if await self.get_by_id(db, issue_id) is None:
            return False
        await self.delete_children(db, issue_id)
        await db.execute(delete(ReportIssue).where(ReportIssue.id == issue_id))
        await db.flush()
        return True


issue_repository: IssueRepository = IssueRepository()
