"""모스크 Pydantic 스키마.

Mosque (inspection site) request/response schemas.
"""

from pydantic import BaseModel, Field


class MosqueCreate(BaseModel):
    name: str = Field(..., min_length=1)
    supervisor_name: str = ""
    supervisor_phone: str = ""
    district: str = ""
    city: str = ""
    address: str | None = None
    main_photo_url: str | None = None
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)


class MosqueUpdate(BaseModel):
    """모스크 부분 수정 스키마 — 보고서 편집 중 인라인 수정에 사용."""

    name: str | None = Field(default=None, min_length=1)
    supervisor_name: str | None = None
    supervisor_phone: str | None = None
    district: str | None = None
    city: str | None = None
    address: str | None = None
    main_photo_url: str | None = None
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)


class MosqueResponse(BaseModel):
    id: str
    name: str
    supervisor_name: str
    supervisor_phone: str
    district: str
    city: str
    address: str | None
    main_photo_url: str | None
    latitude: float | None
    longitude: float | None
