"""보고서 이슈 Pydantic 스키마 — 두 가지 형태의 태그드 유니온.

Issue request/response schemas. The persisted ``issue_type`` string maps
onto a tagged union with two payload shapes:

    single   (case1): 항목 1개 + 사진 정확히 3장
                      (one item and exactly three photos)
    multiple (case2): 항목 3개, 각 항목에 사진 1장이 인덱스로 짝지어짐
                      (three item entries, each paired with one photo by index)

The server re-validates the shape rules so every write path keeps the
cardinality invariant.
"""

from typing import Annotated, Literal, Union
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.models.report import ISSUE_TYPE_MULTIPLE, ISSUE_TYPE_SINGLE

# 이슈 형태별 고정 개수 — Fixed cardinality per issue shape
SINGLE_PHOTO_COUNT = 3
MULTIPLE_ENTRY_COUNT = 3


class IssueItemInput(BaseModel):
    """이슈 항목 입력.

    unit_price 0은 "지정 안 함"으로 간주되어 세부 항목 단가로 대체됩니다.
    A unit_price of 0 means "not set" and falls back to the catalog price.
    """

    sub_item_id: UUID
    quantity: int = Field(default=1, gt=0)
    unit_price: float = Field(default=0, ge=0)


class SingleIssueData(BaseModel):
    """case1 — 항목 1개와 사진 3장."""

    issue_type: Literal["single"] = ISSUE_TYPE_SINGLE
    item: IssueItemInput
    photos: list[str] = Field(..., min_length=SINGLE_PHOTO_COUNT, max_length=SINGLE_PHOTO_COUNT)

    @field_validator("photos")
    @classmethod
    def _photos_not_empty(cls, value: list[str]) -> list[str]:
        if any(not url.strip() for url in value):
            raise ValueError("Three photos are required")
        return value


class MultipleIssueEntry(IssueItemInput):
    """case2 항목 — 사진 1장과 짝지어진 세부 항목."""

    photo_url: str = Field(..., min_length=1)


class MultipleIssueData(BaseModel):
    """case2 — 사진과 짝지어진 항목 정확히 3개."""

    issue_type: Literal["multiple"] = ISSUE_TYPE_MULTIPLE
    entries: list[MultipleIssueEntry] = Field(
        ..., min_length=MULTIPLE_ENTRY_COUNT, max_length=MULTIPLE_ENTRY_COUNT
    )


IssueData = Annotated[Union[SingleIssueData, MultipleIssueData], Field(discriminator="issue_type")]


class IssueSaveRequest(BaseModel):
    """이슈 생성/수정 요청 — 공통 필드 + 태그드 유니온 본문.

    Example:
        {"main_item_id": "...", "notes": "",
         "data": {"issue_type": "single",
                  "item": {"sub_item_id": "...", "quantity": 2, "unit_price": 0},
                  "photos": ["u1", "u2", "u3"]}}
    """

    main_item_id: UUID
    notes: str = ""
    data: IssueData


class IssueItemResponse(BaseModel):
    id: str
    sub_item_id: str
    sub_item_name: str = ""
    sub_item_name_ar: str = ""
    name_table: str | None = None
    unit: str = ""
    unit_ar: str = ""
    quantity: int
    unit_price: float
    line_total: float  # 수량 × 단가 (quantity × unit price)


class IssuePhotoResponse(BaseModel):
    id: str
    photo_url: str


class IssueResponse(BaseModel):
    """이슈 응답 — items와 photos는 sort_order 순서."""

    id: str
    report_id: str
    main_item_id: str
    main_item_name: str = ""
    main_item_name_ar: str = ""
    notes: str
    issue_type: str  # single | multiple
    items: list[IssueItemResponse] = []
    photos: list[IssuePhotoResponse] = []
    total: float = 0
