"""기본 CRUD 레포지토리 — 점검 도메인 레포지토리의 부모 클래스.

Base CRUD Repository — Shared by the mosque, catalog, report and issue
repositories. Repositories only flush; the router (or the report
workspace) that owns the session decides when to commit.

Usage:
    class MosqueRepository(BaseRepository[Mosque]):
        def __init__(self) -> None:
            super().__init__(Mosque)
"""

from typing import Any, Generic, Sequence, TypeVar
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """제네릭 CRUD 레포지토리.

    Attributes:
        model: SQLAlchemy 모델 클래스 (The SQLAlchemy model class)
    """

    def __init__(self, model: type[ModelType]) -> None:
        self.model: type[ModelType] = model

    def _filtered(self, query: Select, filters: dict[str, Any] | None) -> Select:
        # 알 수 없는 컬럼과 None 값은 무시 — unknown columns and None values are skipped
        for column_name, value in (filters or {}).items():
            if hasattr(self.model, column_name) and value is not None:
                query = query.where(getattr(self.model, column_name) == value)
        return query

    async def get_by_id(self, db: AsyncSession, record_id: UUID) -> ModelType | None:
        """ID로 단일 레코드를 조회합니다. 없으면 None."""
        result = await db.execute(select(self.model).where(self.model.id == record_id))
        return result.scalar_one_or_none()

    async def get_all(
        self,
        db: AsyncSession,
        filters: dict[str, Any] | None = None,
        order_by: Any | None = None,
    ) -> Sequence[ModelType]:
        """조건에 맞는 모든 레코드를 조회합니다.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            filters: 컬럼 동등 조건 {'컬럼명': 값} (Column equality filters)
            order_by: 정렬 기준 컬럼 (Column to order by)
        """
        query: Select = self._filtered(select(self.model), filters)
        if order_by is not None:
            query = query.order_by(order_by)
        result = await db.execute(query)
        return result.scalars().all()

    async def get_paginated(
        self,
        db: AsyncSession,
        query: Select,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[ModelType], int]:
        """주어진 쿼리를 페이지 단위로 실행합니다.

        Returns:
            tuple[Sequence[ModelType], int]: (현재 페이지 레코드, 전체 개수)
                                             (Records on this page, total count)
        """
        total: int = (
            await db.execute(select(func.count()).select_from(query.subquery()))
        ).scalar() or 0
        result = await db.execute(query.offset((page - 1) * per_page).limit(per_page))
        return result.scalars().all(), total

    async def create(self, db: AsyncSession, obj_data: dict[str, Any]) -> ModelType:
        """새 레코드를 추가하고 flush 후 새로고침된 인스턴스를 반환합니다."""
        db_obj: ModelType = self.model(**obj_data)
        db.add(db_obj)
        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def update(
        self,
        db: AsyncSession,
        record_id: UUID,
        update_data: dict[str, Any],
    ) -> ModelType | None:
        """부분 업데이트 — 전달된 필드만 덮어씁니다 (None 값 포함).

        Returns None when the record does not exist.
        """
        db_obj: ModelType | None = await self.get_by_id(db, record_id)
        if db_obj is None:
            return None

        for field, value in update_data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def delete(self, db: AsyncSession, record_id: UUID) -> bool:
        """레코드를 삭제합니다. 삭제했으면 True."""
        db_obj: ModelType | None = await self.get_by_id(db, record_id)
        if db_obj is None:
            return False
        await db.delete(db_obj)
        await db.flush()
        return True

    async def exists(self, db: AsyncSession, filters: dict[str, Any]) -> bool:
        """조건에 일치하는 레코드가 하나라도 있는지 확인합니다."""
        query: Select = self._filtered(select(func.count()).select_from(self.model), filters)
        count: int = (await db.execute(query)).scalar() or 0
        return count > 0
