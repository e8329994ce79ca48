"""모스크(점검 현장) SQLAlchemy ORM 모델.

Mosque (inspection site) ORM model. Site metadata is edited inline while
a report is being edited and is shared by every report of the site.
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, DateTime, Float, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class Mosque(Base):
    """모스크 모델 — 점검 대상 현장 정보.

    Attributes:
        name: 모스크 이름 (Site name)
        supervisor_name: 현장 관리자 이름 (Site supervisor name)
        supervisor_phone: 현장 관리자 연락처 (Site supervisor phone)
        district: 지구 (District)
        city: 도시 (City)
        address: 상세 주소 (Street address, optional)
        main_photo_url: 대표 사진 URL (Main photo, optional)
        latitude: 위도 (Latitude, optional — enables satellite map fetch)
        longitude: 경도 (Longitude, optional)
    """

    __tablename__ = "mosques"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    supervisor_name: Mapped[str] = mapped_column(String(255), default="")
    supervisor_phone: Mapped[str] = mapped_column(String(50), default="")
    district: Mapped[str] = mapped_column(String(255), default="")
    city: Mapped[str] = mapped_column(String(255), default="")
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    main_photo_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    reports = relationship("Report", back_populates="mosque", passive_deletes=True)
