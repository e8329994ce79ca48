"""사용자 및 역할 관련 SQLAlchemy ORM 모델 정의.

User and Role SQLAlchemy ORM model definitions.
Roles are resolved from the database for every identity; lower level
numbers carry more authority.

Tables:
    - roles: 역할 (admin=1, technician=2)
    - users: 사용자 계정 (Field staff and administrators)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, Boolean, DateTime, Integer, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class Role(Base):
    """역할 모델 — 권한 수준 정의.

    Role model — Defines permission levels.
        1 = admin (카탈로그 관리 가능, may manage the item catalog)
        2 = technician (현장 점검 담당, field inspection staff)

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        name: 역할 이름 (Role name, unique)
        level: 권한 레벨 (Permission level, 1=highest)
    """

    __tablename__ = "roles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 역할 이름 — "admin" 또는 "technician"
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    # 권한 레벨 — 1=admin 최고 권한
    level: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    users = relationship("User", back_populates="role")


class User(Base):
    """사용자 모델 — 시스템 사용자 계정 정보.

    User model — Field staff or administrator account. Login is by email.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier, also the photo storage owner prefix)
        role_id: 역할 FK (Assigned role foreign key)
        email: 로그인 이메일 (Login email, unique)
        full_name: 실명 (Full display name)
        phone_number: 연락처 (Phone number, optional)
        password_hash: bcrypt 해시된 비밀번호 (bcrypt-hashed password)
        is_active: 활성 상태 (Active status)
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    role_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("roles.id"), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    # 비밀번호 해시 — bcrypt (평문 저장 금지, never store plaintext)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # 관계 — Relationships
    role = relationship("Role", back_populates="users")
    refresh_tokens = relationship("RefreshToken", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
