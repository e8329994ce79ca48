"""공통 Pydantic 응답 스키마 정의.

Common Pydantic response schemas shared across API domains:
pagination wrapper and photo upload responses.
"""

from typing import Any

from pydantic import BaseModel


class PaginatedResponse(BaseModel):
    """페이지네이션 응답 스키마.

    Attributes:
        items: 항목 목록 (List of result items)
        total: 전체 항목 수 (Total count across all pages)
        page: 현재 페이지 번호 (Current page number, 1-based)
        per_page: 페이지당 항목 수 (Items per page)
    """

    items: list[Any]
    total: int
    page: int  # 현재 페이지 — 1부터 시작 (Current page, 1-indexed)
    per_page: int


class PhotoUploadResponse(BaseModel):
    """업로드된 사진의 공개 URL."""

    url: str


class PendingUploadsResponse(BaseModel):
    pending: int  # 진행 중인 압축+업로드 수 (In-flight compress+upload count)
