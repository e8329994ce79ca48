"""점검 항목 카탈로그 레포지토리.

Catalog repository — Main items with their sub items, and sub-item
price lookups used when an issue item carries no explicit price.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.catalog import MainItem, SubItem
from app.models.report import IssueItem, ReportIssue
from app.repositories.base import BaseRepository


class MainItemRepository(BaseRepository[MainItem]):

    def __init__(self) -> None:
        super().__init__(MainItem)

    async def get_all_with_sub_items(self, db: AsyncSession) -> Sequence[MainItem]:
        """주 항목 전체를 세부 항목과 함께 조회합니다."""
        query: Select = (
            select(MainItem)
            .options(selectinload(MainItem.sub_items))
            .order_by(MainItem.created_at)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        return result.scalars().all()

    async def get_with_sub_items(self, db: AsyncSession, main_item_id: UUID) -> MainItem | None:
        result = await db.execute(
            select(MainItem)
            .options(selectinload(MainItem.sub_items))
            .where(MainItem.id == main_item_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def is_referenced(self, db: AsyncSession, main_item_id: UUID | None = None) -> bool:
        """이슈가 카탈로그 항목을 참조하는지 확인합니다.

        Whether any issue (or issue item) references the given main item,
        or any catalog entry at all when main_item_id is None.
        """
        issue_query: Select = select(ReportIssue.id).limit(1)
        item_query: Select = select(IssueItem.id).limit(1)
        if main_item_id is not None:
            issue_query = issue_query.where(ReportIssue.main_item_id == main_item_id)
            item_query = item_query.join(SubItem, SubItem.id == IssueItem.sub_item_id).where(
                SubItem.main_item_id == main_item_id
            )
        if (await db.execute(issue_query)).first() is not None:
            return True
        return (await db.execute(item_query)).first() is not None

    async def delete_cascade(self, db: AsyncSession, main_item_id: UUID) -> bool:
        """세부 항목을 먼저 지우고 주 항목을 삭제합니다."""
        if await self.get_by_id(db, main_item_id) is None:
            return False
        await db.execute(delete(SubItem).where(SubItem.main_item_id == main_item_id))
        await db.execute(delete(MainItem).where(MainItem.id == main_item_id))
        await db.flush()
        return True

    async def delete_all(self, db: AsyncSession) -> None:
        """카탈로그 전체 삭제 — 세부 항목 → 주 항목 순서."""
        await db.execute(delete(SubItem))
        await db.execute(delete(MainItem))
        await db.flush()


class SubItemRepository(BaseRepository[SubItem]):

    def __init__(self) -> None:
        super().__init__(SubItem)

    async def get_by_main_item(self, db: AsyncSession, main_item_id: UUID) -> Sequence[SubItem]:
        result = await db.execute(
            select(SubItem)
            .where(SubItem.main_item_id == main_item_id)
            .order_by(SubItem.created_at)
        )
        return result.scalars().all()

    async def is_referenced(self, db: AsyncSession, sub_item_id: UUID) -> bool:
        result = await db.execute(
            select(IssueItem.id).where(IssueItem.sub_item_id == sub_item_id).limit(1)
        )
        return result.first() is not None

    async def get_prices(self, db: AsyncSession, sub_item_ids: list[UUID]) -> dict[UUID, float]:
        """세부 항목 ID → 단가 매핑을 조회합니다.

        Look up catalog unit prices by sub-item id. Unknown ids are absent.
        """
        if not sub_item_ids:
            return {}
        result = await db.execute(
            select(SubItem.id, SubItem.unit_price).where(SubItem.id.in_(sub_item_ids))
        )
        return {row.id: row.unit_price or 0 for row in result.all()}


main_item_repository: MainItemRepository = MainItemRepository()
sub_item_repository: SubItemRepository = SubItemRepository()
