"""현장 보고서 라우터 — 보고서 집합체 CRUD, 미리보기, PDF, 지도 자동 조회.

Field Reports Router — Report aggregate endpoints.
"""

from typing import Annotated
from urllib.parse import quote
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.database import get_db
from app.models.user import User
from app.schemas.common import PaginatedResponse
from app.schemas.report import (
    ReportCreate,
    ReportDetailResponse,
    ReportSaveRequest,
    ReportUpdate,
)
from app.services.report_service import report_service
from app.services.report_template import report_filename
from app.services.report_workspace import ReportWorkspace
from app.utils.exceptions import NotFoundError

router: APIRouter = APIRouter()


async def _open_workspace(db: AsyncSession, report_id: UUID, user: User) -> ReportWorkspace:
    workspace = ReportWorkspace(db, report_id, user)
    if await workspace.load() is None:
        raise NotFoundError(workspace.notice or "Report not found")
    return workspace


def _content_disposition(filename: str) -> str:
    fallback = filename.encode("ascii", "ignore").decode("ascii").strip("_ ")
    if not fallback or fallback.startswith("."):
        fallback = "report.pdf"
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


@router.get("/", response_model=PaginatedResponse)
async def list_reports(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    mosque_id: Annotated[UUID | None, Query()] = None,
    status: Annotated[str | None, Query()] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 20,
) -> PaginatedResponse:
    """보고서 목록 — 최신 점검일 순."""
    return await report_service.list_reports(db, mosque_id, status, page, per_page)


@router.post("/", response_model=ReportDetailResponse, status_code=201)
async def create_report(
    data: ReportCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ReportDetailResponse:
    """보고서를 생성합니다 — 기존 모스크 ID 또는 인라인 모스크."""
    report = await report_service.create_report(db, data, current_user.id)
    await db.commit()
    return report_service.build_response(report)


@router.get("/{report_id}", response_model=ReportDetailResponse)
async def get_report(
    report_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ReportDetailResponse:
    """보고서 집합체 조회 — 모스크, 이슈, 항목, 사진 포함."""
    report = await report_service.get_aggregate(db, report_id)
    return report_service.build_response(report)


@router.patch("/{report_id}", response_model=ReportDetailResponse)
async def update_report(
    report_id: UUID,
    data: ReportUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ReportDetailResponse:
    """보고서 필드 부분 수정 (status, report_date, map_photo_url)."""
    report = await report_service.update_report(db, report_id, data)
    await db.commit()
    return report_service.build_response(report)


@router.put("/{report_id}", response_model=ReportDetailResponse)
async def save_report(
    report_id: UUID,
    data: ReportSaveRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ReportDetailResponse:
    """편집 저장 — 모스크 인라인 수정과 상태 변경."""
    workspace = await _open_workspace(db, report_id, current_user)
    return await workspace.save_changes(data)


@router.delete("/{report_id}", status_code=204)
async def delete_report(
    report_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> None:
    """보고서 삭제 — 항목 → 사진 → 이슈 → 보고서 순서."""
    await report_service.delete_report(db, report_id)
    await db.commit()


@router.post("/{report_id}/map-photo", response_model=ReportDetailResponse)
async def fetch_map_photo(
    report_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ReportDetailResponse:
    """위성 지도 자동 조회 — 실패해도 보고서는 그대로 반환됩니다."""
    workspace = await _open_workspace(db, report_id, current_user)
    await workspace.auto_fetch_map()
    return workspace.report


@router.get("/{report_id}/preview", response_class=HTMLResponse)
async def preview_report(
    report_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> HTMLResponse:
    """화면 미리보기 — PDF와 동일한 템플릿."""
    workspace = await _open_workspace(db, report_id, current_user)
    return HTMLResponse(workspace.preview_html())


@router.get("/{report_id}/pdf")
async def export_pdf(
    report_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> Response:
    """PDF 내보내기 — <모스크 이름>_<날짜>.pdf 첨부 파일."""
    workspace = await _open_workspace(db, report_id, current_user)
    data: bytes = await workspace.export_pdf_bytes()
    return Response(
        content=data,
        media_type="application/pdf",
        headers={"Content-Disposition": _content_disposition(report_filename(workspace.report))},
    )
