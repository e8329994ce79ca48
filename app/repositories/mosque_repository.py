"""모스크 레포지토리.

Mosque repository — Handles mosques DB queries.
"""

from typing import Sequence

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.mosque import Mosque
from app.repositories.base import BaseRepository


class MosqueRepository(BaseRepository[Mosque]):

    def __init__(self) -> None:
        super().__init__(Mosque)

    async def search(
        self,
        db: AsyncSession,
        keyword: str | None = None,
    ) -> Sequence[Mosque]:
        query: Select = select(Mosque).order_by(Mosque.name)
        if keyword:
            pattern = f"%{keyword}%"
            query = query.where(
                Mosque.name.ilike(pattern) | Mosque.district.ilike(pattern) | Mosque.city.ilike(pattern)
            )
        result = await db.execute(query)
        return result.scalars().all()


mosque_repository: MosqueRepository = MosqueRepository()
