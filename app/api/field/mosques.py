"""현장 모스크 라우터 — 점검 현장 CRUD.

Field Mosques Router — Inspection site endpoints.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.database import get_db
from app.models.user import User
from app.schemas.mosque import MosqueCreate, MosqueResponse, MosqueUpdate
from app.services.mosque_service import mosque_service

router: APIRouter = APIRouter()


@router.get("/", response_model=list[MosqueResponse])
async def list_mosques(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    keyword: Annotated[str | None, Query()] = None,
) -> list[MosqueResponse]:
    """모스크 목록 — 이름/지구/도시 검색."""
    return await mosque_service.list_mosques(db, keyword)


@router.get("/{mosque_id}", response_model=MosqueResponse)
async def get_mosque(
    mosque_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> MosqueResponse:
    return await mosque_service.get_mosque(db, mosque_id)


@router.post("/", response_model=MosqueResponse, status_code=201)
async def create_mosque(
    data: MosqueCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> MosqueResponse:
    mosque = await mosque_service.create_mosque(db, data)
    await db.commit()
    return mosque_service.to_response(mosque)


@router.put("/{mosque_id}", response_model=MosqueResponse)
async def update_mosque(
    mosque_id: UUID,
    data: MosqueUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> MosqueResponse:
    mosque = await mosque_service.update_mosque(db, mosque_id, data)
    await db.commit()
    return mosque_service.to_response(mosque)


@router.delete("/{mosque_id}", status_code=204)
async def delete_mosque(
    mosque_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> None:
    """보고서가 없는 모스크만 삭제합니다."""
    await mosque_service.delete_mosque(db, mosque_id)
    await db.commit()
