"""점검 보고서 Pydantic 스키마.

Report request/response schemas, including the aggregate detail view and
the satellite map photo endpoint payloads.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field

from app.schemas.issue import IssueResponse
from app.schemas.mosque import MosqueCreate, MosqueResponse, MosqueUpdate

# 보고서 상태 — Report workflow states
REPORT_STATUSES = ("draft", "in_progress", "completed")
_STATUS_PATTERN = "^(draft|in_progress|completed)$"


class ReportCreate(BaseModel):
    """보고서 생성 스키마.

    기존 모스크 ID 또는 인라인 모스크 정보 중 하나가 필요합니다.
    Requires either an existing mosque_id or an inline mosque.
    """

    mosque_id: str | None = None
    mosque: MosqueCreate | None = None
    report_date: date
    status: str = Field(default="draft", pattern=_STATUS_PATTERN)


class ReportUpdate(BaseModel):
    """보고서 부분 수정 — 전달된 필드만 변경 (exclude_unset)."""

    status: str | None = Field(default=None, pattern=_STATUS_PATTERN)
    report_date: date | None = None
    map_photo_url: str | None = None


class ReportSaveRequest(BaseModel):
    """보고서 편집 저장 — 모스크 인라인 수정 + 상태 변경."""

    mosque: MosqueUpdate | None = None
    status: str | None = Field(default=None, pattern=_STATUS_PATTERN)


class ReportListItem(BaseModel):
    id: str
    mosque_id: str
    mosque_name: str
    status: str
    report_date: date
    map_photo_url: str | None
    created_at: datetime


class ReportDetailResponse(BaseModel):
    """보고서 집합체 응답 — 모스크, 이슈, 항목, 사진 포함."""

    id: str
    status: str
    report_date: date
    map_photo_url: str | None
    created_by: str | None
    mosque: MosqueResponse
    issues: list[IssueResponse] = []
    total: float = 0  # 전체 이슈 금액 합계 (Sum of all issue totals)
    created_at: datetime
    updated_at: datetime


class MapPhotoResponse(BaseModel):
    url: str
    path: str
