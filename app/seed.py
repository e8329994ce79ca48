"""초기 데이터 시드 스크립트 — 역할, 관리자 계정, 기본 카탈로그 생성.

Seed script — Creates roles, the first admin account and the default
inspection catalog. Run once to bootstrap the database.

Usage:
    python -m app.seed

Creates:
    - 2개 역할: admin(1), technician(2) (없을 때만, only when missing)
    - 1개 관리자 계정: admin@mosque.local / admin123 (1 admin user)
    - 기본 점검 카탈로그 (Default main items and sub items, when empty)
"""

import asyncio
import logging

from sqlalchemy import select

from app.database import Base, async_session, engine
from app.models import MainItem, Role, User
from app.services.catalog_service import catalog_service
from app.utils.password import hash_password

logger = logging.getLogger(__name__)

ADMIN_EMAIL = "admin@mosque.local"
ROLES: list[tuple[str, int]] = [
    ("admin", 1),
    ("technician", 2),
]


async def seed() -> None:
    """데이터베이스를 초기 데이터로 시드합니다.

    Idempotent: 관리자 계정이 이미 있으면 건너뜁니다 (Skips if the admin exists).
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as db:
        existing = await db.execute(select(User).where(User.email == ADMIN_EMAIL))
        if existing.scalar_one_or_none():
            logger.info("Already seeded. Skipping.")
            return

        # 마이그레이션이 역할을 이미 만들었을 수 있음
        roles: dict[str, Role] = {
            role.name: role for role in (await db.execute(select(Role))).scalars().all()
        }
        for name, level in ROLES:
            if name not in roles:
                role = Role(name=name, level=level)
                db.add(role)
                await db.flush()
                roles[name] = role

        admin = User(
            role_id=roles["admin"].id,
            email=ADMIN_EMAIL,
            full_name="System Admin",
            password_hash=hash_password("admin123"),
            is_active=True,
        )
        db.add(admin)
        await db.flush()

        has_catalog = (await db.execute(select(MainItem).limit(1))).scalar_one_or_none()
        if has_catalog is None:
            await catalog_service.seed_default_catalog(db)

        await db.commit()
        logger.info("Seeded: admin user=%s/admin123", admin.email)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed())
