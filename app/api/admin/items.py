"""관리자 점검 항목 라우터 — 주 항목/세부 항목 CRUD 및 기본 카탈로그 시드.

Admin Items Router — Catalog management. Admin role (level 1) only.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin
from app.database import get_db
from app.models.user import User
from app.schemas.catalog import (
    MainItemCreate,
    MainItemResponse,
    MainItemUpdate,
    SubItemCreate,
    SubItemResponse,
    SubItemUpdate,
)
from app.services.catalog_service import catalog_service

router: APIRouter = APIRouter()


@router.get("/main-items", response_model=list[MainItemResponse])
async def list_main_items(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> list[MainItemResponse]:
    """주 항목 목록 — 세부 항목 포함."""
    return await catalog_service.list_catalog(db)


@router.get("/main-items/{main_item_id}", response_model=MainItemResponse)
async def get_main_item(
    main_item_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> MainItemResponse:
    return await catalog_service.get_main_item(db, main_item_id)


@router.post("/main-items", response_model=MainItemResponse, status_code=201)
async def create_main_item(
    data: MainItemCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> MainItemResponse:
    """주 항목을 생성합니다."""
    result: MainItemResponse = await catalog_service.create_main_item(db, data)
    await db.commit()
    return result


@router.put("/main-items/{main_item_id}", response_model=MainItemResponse)
async def update_main_item(
    main_item_id: UUID,
    data: MainItemUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> MainItemResponse:
    result: MainItemResponse = await catalog_service.update_main_item(db, main_item_id, data)
    await db.commit()
    return result


@router.delete("/main-items/{main_item_id}", status_code=204)
async def delete_main_item(
    main_item_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> None:
    """주 항목과 그 세부 항목을 삭제합니다 (이슈가 참조 중이면 400)."""
    await catalog_service.delete_main_item(db, main_item_id)
    await db.commit()


@router.get("/sub-items", response_model=list[SubItemResponse])
async def list_sub_items(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
    main_item_id: Annotated[UUID | None, Query()] = None,
) -> list[SubItemResponse]:
    return await catalog_service.list_sub_items(db, main_item_id)


@router.post("/sub-items", response_model=SubItemResponse, status_code=201)
async def create_sub_item(
    data: SubItemCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> SubItemResponse:
    """세부 항목을 생성합니다."""
    result: SubItemResponse = await catalog_service.create_sub_item(db, data)
    await db.commit()
    return result


@router.put("/sub-items/{sub_item_id}", response_model=SubItemResponse)
async def update_sub_item(
    sub_item_id: UUID,
    data: SubItemUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> SubItemResponse:
    result: SubItemResponse = await catalog_service.update_sub_item(db, sub_item_id, data)
    await db.commit()
    return result


@router.delete("/sub-items/{sub_item_id}", status_code=204)
async def delete_sub_item(
    sub_item_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> None:
    await catalog_service.delete_sub_item(db, sub_item_id)
    await db.commit()


@router.post("/catalog/seed", response_model=list[MainItemResponse])
async def seed_catalog(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> list[MainItemResponse]:
    """카탈로그를 기본 4개 분류/7개 세부 항목으로 교체합니다."""
    result: list[MainItemResponse] = await catalog_service.seed_default_catalog(db)
    await db.commit()
    return result
