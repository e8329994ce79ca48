"""점검 항목 카탈로그 서비스 — 주 항목/세부 항목 CRUD 및 기본 카탈로그 시드.

Catalog Service — Business logic for main item / sub item management and
for replacing the catalog with the default inspection categories.
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.catalog import MainItem, SubItem
from app.repositories.catalog_repository import main_item_repository, sub_item_repository
from app.schemas.catalog import (
    MainItemCreate,
    MainItemResponse,
    MainItemUpdate,
    SubItemCreate,
    SubItemResponse,
    SubItemUpdate,
)
from app.utils.exceptions import BadRequestError, NotFoundError

logger = logging.getLogger(__name__)

# 기본 카탈로그 — Default catalog: (name, name_ar, [(name, name_ar, unit, unit_ar, price)])
DEFAULT_CATALOG: list[tuple[str, str, list[tuple[str, str, str, str, float]]]] = [
    (
        "Toilets and Ablution Areas", "دورات المياه والمواضئ",
        [
            ("Clean toilet", "تنظيف دورة المياه", "unit", "وحدة", 50),
            ("Repair faucet", "إصلاح صنبور", "piece", "قطعة", 30),
        ],
    ),
    (
        "Air Conditioning and Ventilation", "التكييف والتهوية",
        [
            ("Clean AC filter", "تنظيف فلتر المكيف", "unit", "وحدة", 20),
            ("AC maintenance", "صيانة المكيف", "unit", "وحدة", 150),
        ],
    ),
    (
        "Electricity and Lighting", "الكهرباء والإضاءة",
        [
            ("Replace lamp", "استبدال مصباح", "piece", "قطعة", 15),
        ],
    ),
    (
        "Furniture and Carpets", "الأثاث والفرش",
        [
            ("Clean carpet", "تنظيف السجاد", "sqm", "متر مربع", 10),
            ("Repair chair", "إصلاح كرسي", "piece", "قطعة", 40),
        ],
    ),
]


def parse_uuid(value: str, label: str = "id") -> UUID:
    """문자열 ID를 UUID로 변환합니다. 실패 시 400."""
    try:
        return UUID(str(value))
    except ValueError:
        raise BadRequestError(f"Invalid {label}")


class CatalogService:
    """카탈로그 관련 비즈니스 로직을 처리하는 서비스."""

    def _sub_item_response(self, sub_item: SubItem) -> SubItemResponse:
        return SubItemResponse(
            id=str(sub_item.id),
            main_item_id=str(sub_item.main_item_id),
            name=sub_item.name,
            name_ar=sub_item.name_ar,
            unit=sub_item.unit,
            unit_ar=sub_item.unit_ar,
            unit_price=sub_item.unit_price or 0,
            name_table=sub_item.name_table,
        )

    def _main_item_response(
        self,
        main_item: MainItem,
        sub_items: list[SubItem] | None = None,
    ) -> MainItemResponse:
        return MainItemResponse(
            id=str(main_item.id),
            name=main_item.name,
            name_ar=main_item.name_ar,
            sub_items=[self._sub_item_response(s) for s in (sub_items or [])],
        )

    async def list_catalog(self, db: AsyncSession) -> list[MainItemResponse]:
        """주 항목 전체를 세부 항목과 함께 반환합니다.

        List every main item with its sub items, oldest first.
        """
        main_items = await main_item_repository.get_all_with_sub_items(db)
        return [self._main_item_response(m, list(m.sub_items)) for m in main_items]

    async def get_main_item(self, db: AsyncSession, main_item_id: UUID) -> MainItemResponse:
        main_item: MainItem | None = await main_item_repository.get_with_sub_items(db, main_item_id)
        if main_item is None:
            raise NotFoundError("Main item not found")
        return self._main_item_response(main_item, list(main_item.sub_items))

    async def create_main_item(self, db: AsyncSession, data: MainItemCreate) -> MainItemResponse:
        main_item: MainItem = await main_item_repository.create(
            db, {"name": data.name, "name_ar": data.name_ar}
        )
        return self._main_item_response(main_item)

    async def update_main_item(
        self,
        db: AsyncSession,
        main_item_id: UUID,
        data: MainItemUpdate,
    ) -> MainItemResponse:
        main_item: MainItem | None = await main_item_repository.update(
            db, main_item_id, data.model_dump(exclude_unset=True, exclude_none=True)
        )
        if main_item is None:
            raise NotFoundError("Main item not found")
        sub_items = await sub_item_repository.get_by_main_item(db, main_item_id)
        return self._main_item_response(main_item, list(sub_items))

    async def delete_main_item(self, db: AsyncSession, main_item_id: UUID) -> None:
        """주 항목과 그 세부 항목을 삭제합니다.

        Raises:
            NotFoundError: 주 항목이 없을 때 (Main item not found)
            BadRequestError: 이슈가 참조 중일 때 (Referenced by recorded issues)
        """
        if await main_item_repository.is_referenced(db, main_item_id):
            raise BadRequestError("Main item is used by recorded issues")
        if not await main_item_repository.delete_cascade(db, main_item_id):
            raise NotFoundError("Main item not found")

    async def list_sub_items(
        self,
        db: AsyncSession,
        main_item_id: UUID | None = None,
    ) -> list[SubItemResponse]:
        if main_item_id is not None:
            sub_items = await sub_item_repository.get_by_main_item(db, main_item_id)
        else:
            sub_items = await sub_item_repository.get_all(db, order_by=SubItem.created_at)
        return [self._sub_item_response(s) for s in sub_items]

    async def create_sub_item(self, db: AsyncSession, data: SubItemCreate) -> SubItemResponse:
        """세부 항목을 생성합니다.

        Raises:
            NotFoundError: 상위 주 항목이 없을 때 (Parent main item not found)
        """
        main_item_id: UUID = parse_uuid(data.main_item_id, "main_item_id")
        if await main_item_repository.get_by_id(db, main_item_id) is None:
            raise NotFoundError("Main item not found")

        values = data.model_dump()
        values["main_item_id"] = main_item_id
        sub_item: SubItem = await sub_item_repository.create(db, values)
        return self._sub_item_response(sub_item)

    async def update_sub_item(
        self,
        db: AsyncSession,
        sub_item_id: UUID,
        data: SubItemUpdate,
    ) -> SubItemResponse:
        update_data = data.model_dump(exclude_unset=True)
        # name_table만 null 허용 — only name_table may be cleared
        update_data = {k: v for k, v in update_data.items() if v is not None or k == "name_table"}
        sub_item: SubItem | None = await sub_item_repository.update(db, sub_item_id, update_data)
        if sub_item is None:
            raise NotFoundError("Sub item not found")
        return self._sub_item_response(sub_item)

    async def delete_sub_item(self, db: AsyncSession, sub_item_id: UUID) -> None:
        if await sub_item_repository.is_referenced(db, sub_item_id):
            raise BadRequestError("Sub item is used by recorded issues")
        if not await sub_item_repository.delete(db, sub_item_id):
            raise NotFoundError("Sub item not found")

    async def get_unit_prices(self, db: AsyncSession, sub_item_ids: list[UUID]) -> dict[UUID, float]:
        """세부 항목 단가 조회 — 알 수 없는 ID는 결과에 없음."""
        return await sub_item_repository.get_prices(db, sub_item_ids)

    async def seed_default_catalog(self, db: AsyncSession) -> list[MainItemResponse]:
        """카탈로그를 기본 4개 분류와 7개 세부 항목으로 교체합니다.

        Replace the whole catalog with the default categories. Existing
        sub items are removed before their main items.

        Raises:
            BadRequestError: 기록된 이슈가 카탈로그를 참조할 때
                             (Recorded issues still reference the catalog)
        """
        if await main_item_repository.is_referenced(db):
            raise BadRequestError("Catalog is used by recorded issues")
        await main_item_repository.delete_all(db)

        for name, name_ar, sub_items in DEFAULT_CATALOG:
            main_item: MainItem = await main_item_repository.create(
                db, {"name": name, "name_ar": name_ar}
            )
            for sub_name, sub_name_ar, unit, unit_ar, price in sub_items:
                await sub_item_repository.create(
                    db,
                    {
                        "main_item_id": main_item.id,
                        "name": sub_name,
                        "name_ar": sub_name_ar,
                        "unit": unit,
                        "unit_ar": unit_ar,
                        "unit_price": price,
                    },
                )

        logger.info("Catalog seeded with %d main items", len(DEFAULT_CATALOG))
        return await self.list_catalog(db)


catalog_service: CatalogService = CatalogService()
