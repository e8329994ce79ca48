"""현장 카탈로그 라우터 — 이슈 작성용 주/세부 항목 조회.

Field Items Router — Read-only catalog for the issue editor.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.database import get_db
from app.models.user import User
from app.schemas.catalog import MainItemResponse
from app.services.catalog_service import catalog_service

router: APIRouter = APIRouter()


@router.get("/", response_model=list[MainItemResponse])
async def list_items(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> list[MainItemResponse]:
    return await catalog_service.list_catalog(db)
