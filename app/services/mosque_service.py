"""모스크 서비스 — 점검 현장 CRUD.

Mosque Service — Site metadata shared by every report of the site.
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.mosque import Mosque
from app.repositories.mosque_repository import mosque_repository
from app.schemas.mosque import MosqueCreate, MosqueResponse, MosqueUpdate
from app.utils.exceptions import BadRequestError, NotFoundError


class MosqueService:

    def to_response(self, mosque: Mosque) -> MosqueResponse:
        return MosqueResponse(
            id=str(mosque.id),
            name=mosque.name,
            supervisor_name=mosque.supervisor_name or "",
            supervisor_phone=mosque.supervisor_phone or "",
            district=mosque.district or "",
            city=mosque.city or "",
            address=mosque.address,
            main_photo_url=mosque.main_photo_url,
            latitude=mosque.latitude,
            longitude=mosque.longitude,
        )

    async def list_mosques(self, db: AsyncSession, keyword: str | None = None) -> list[MosqueResponse]:
        mosques = await mosque_repository.search(db, keyword)
        return [self.to_response(m) for m in mosques]

    async def get_mosque(self, db: AsyncSession, mosque_id: UUID) -> MosqueResponse:
        mosque: Mosque | None = await mosque_repository.get_by_id(db, mosque_id)
        if mosque is None:
            raise NotFoundError("Mosque not found")
        return self.to_response(mosque)

    async def create_mosque(self, db: AsyncSession, data: MosqueCreate) -> Mosque:
        return await mosque_repository.create(db, data.model_dump())

    async def update_mosque(
        self,
        db: AsyncSession,
        mosque_id: UUID,
        data: MosqueUpdate,
    ) -> Mosque:
        """모스크 정보를 부분 수정합니다 (전달된 필드만).

        Raises:
            NotFoundError: 모스크를 찾을 수 없을 때 (Mosque not found)
        """
        update_data: dict = data.model_dump(exclude_unset=True)
        if "name" in update_data and update_data["name"] is None:
            del update_data["name"]
        mosque: Mosque | None = await mosque_repository.update(db, mosque_id, update_data)
        if mosque is None:
            raise NotFoundError("Mosque not found")
        return mosque

    async def delete_mosque(self, db: AsyncSession, mosque_id: UUID) -> None:
        """보고서가 없는 모스크만 삭제할 수 있습니다."""
        from app.repositories.report_repository import report_repository

        if await report_repository.exists(db, {"mosque_id": mosque_id}):
            raise BadRequestError("Mosque has reports")
        if not await mosque_repository.delete(db, mosque_id):
            raise NotFoundError("Mosque not found")


mosque_service: MosqueService = MosqueService()
