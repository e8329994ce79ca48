"""점검 항목 카탈로그 Pydantic 스키마.

Catalog request/response schemas — main items and their sub items.
"""

from pydantic import BaseModel, Field


class MainItemCreate(BaseModel):
    name: str = Field(..., min_length=1)
    name_ar: str = Field(..., min_length=1)


class MainItemUpdate(BaseModel):
    name: str | None = None
    name_ar: str | None = None


class SubItemCreate(BaseModel):
    """세부 항목 생성 스키마.

    Attributes:
        main_item_id: 상위 주 항목 UUID (Parent main item)
        unit_price: 카탈로그 단가, 0 이상 (Catalog unit price, >= 0)
    """

    main_item_id: str
    name: str = Field(..., min_length=1)
    name_ar: str = Field(..., min_length=1)
    unit: str = "unit"
    unit_ar: str = ""
    unit_price: float = Field(default=0, ge=0)
    name_table: str | None = None


class SubItemUpdate(BaseModel):
    name: str | None = None
    name_ar: str | None = None
    unit: str | None = None
    unit_ar: str | None = None
    unit_price: float | None = Field(default=None, ge=0)
    name_table: str | None = None


class SubItemResponse(BaseModel):
    id: str
    main_item_id: str
    name: str
    name_ar: str
    unit: str
    unit_ar: str
    unit_price: float
    name_table: str | None


class MainItemResponse(BaseModel):
    """주 항목 응답 — 세부 항목 목록 포함 (Includes sub items)."""

    id: str
    name: str
    name_ar: str
    sub_items: list[SubItemResponse] = []
