"""현장 사진 라우터 — 사진 업로드와 대기 중 업로드 수.

Field Photos Router — Compresses (best effort) and uploads a photo under
``{user_id}/{epoch_ms}_{token}.{ext}`` and returns its public URL.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile

from app.api.deps import get_current_user
from app.models.user import User
from app.schemas.common import PendingUploadsResponse, PhotoUploadResponse
from app.services.image_service import PhotoFile
from app.services.upload_service import upload_pipeline
from app.utils.exceptions import BadRequestError

router: APIRouter = APIRouter()


@router.post("/", response_model=PhotoUploadResponse, status_code=201)
async def upload_photo(
    file: Annotated[UploadFile, File()],
    current_user: Annotated[User, Depends(get_current_user)],
) -> PhotoUploadResponse:
    """사진을 업로드합니다.

    Raises:
        BadRequestError: 빈 파일 (Empty upload)
        StorageError: 스토리지 실패 (Storage failure, 502)
    """
    data: bytes = await file.read()
    if not data:
        raise BadRequestError("Empty file")
    photo = PhotoFile(
        name=file.filename or "photo",
        content_type=file.content_type or "",
        data=data,
    )
    url: str = await upload_pipeline.upload_photo(photo, current_user.id)
    return PhotoUploadResponse(url=url)


@router.get("/pending", response_model=PendingUploadsResponse)
async def pending_uploads(
    current_user: Annotated[User, Depends(get_current_user)],
) -> PendingUploadsResponse:
    """현재 사용자의 진행 중인 업로드 수 — 저장 버튼 활성화 판단용."""
    return PendingUploadsResponse(pending=upload_pipeline.pending_for(current_user.id))
