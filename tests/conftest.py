"""테스트 인프라 — 임시 SQLite DB, 세션, httpx 클라이언트 픽스처.

Test infrastructure — In-memory SQLite (aiosqlite) database, session, and
httpx client fixtures. Environment overrides are applied before the app is
imported so the module-level engine and upload mount use test settings.
Schema is created per test on a fresh in-memory database.
"""

import os
import tempfile

_UPLOADS_DIR = tempfile.mkdtemp(prefix="mosque_uploads_")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["DEBUG"] = "false"
os.environ["LOCAL_UPLOADS_DIR"] = _UPLOADS_DIR
os.environ["AWS_ACCESS_KEY_ID"] = ""
os.environ["AWS_S3_BUCKET"] = ""
os.environ["AXIOM_API_TOKEN"] = ""
os.environ["GMAPS_KEY"] = ""
os.environ["PUBLIC_GMAPS_KEY"] = ""
os.environ["MAP_PHOTO_LOCAL_FILE"] = os.path.join(_UPLOADS_DIR, "missing-map-key")

from collections.abc import AsyncGenerator  # noqa: E402
from datetime import date  # noqa: E402
from pathlib import Path  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.config import settings  # noqa: E402
from app.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models import *  # noqa: F401,F403,E402 — register all models with metadata
from app.utils.jwt import create_access_token  # noqa: E402
from app.utils.password import hash_password  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite://"


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """테스트용 async 엔진 — 테스트마다 새 인메모리 DB와 스키마."""
    eng = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # SQLite는 외래 키 검사를 연결마다 켜야 함
    @event.listens_for(eng.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """각 테스트에 격리된 DB 세션을 제공합니다."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — DB 세션을 오버라이드합니다."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def uploads_dir() -> Path:
    return settings.uploads_dir


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 테스트용 데이터 생성 (작업공간 롤백에도 남도록 커밋)
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def roles(db: AsyncSession):
    """admin(1), technician(2) 역할을 생성합니다."""
    from app.models.user import Role
    result = {}
    for name, level in [("admin", 1), ("technician", 2)]:
        role = Role(name=name, level=level)
        db.add(role)
        await db.flush()
        result[name] = role
    await db.commit()
    return result


@pytest_asyncio.fixture
async def admin_user(db: AsyncSession, roles):
    """관리자 사용자를 생성합니다."""
    from app.models.user import User
    user = User(
        role_id=roles["admin"].id,
        email="admin@test.com",
        full_name="Test Admin",
        password_hash=hash_password("admin123!"),
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def tech_user(db: AsyncSession, roles):
    """현장 점검 담당자를 생성합니다."""
    from app.models.user import User
    user = User(
        role_id=roles["technician"].id,
        email="tech@test.com",
        full_name="Test Technician",
        phone_number="0500000000",
        password_hash=hash_password("tech123!"),
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def catalog(db: AsyncSession):
    """주 항목 1개와 세부 항목 3개를 생성합니다.

    Returns:
        dict: {"main": MainItem, "subs": [SubItem, SubItem, SubItem]}
    """
    from app.models.catalog import MainItem, SubItem
    main = MainItem(name="Toilets", name_ar="دورات المياه")
    db.add(main)
    await db.flush()
    subs = []
    for name, name_ar, price in [
        ("Clean toilet", "تنظيف دورة المياه", 50),
        ("Repair faucet", "إصلاح صنبور", 30),
        ("Replace lamp", "استبدال مصباح", 15),
    ]:
        sub = SubItem(
            main_item_id=main.id, name=name, name_ar=name_ar,
            unit="unit", unit_ar="وحدة", unit_price=price,
        )
        db.add(sub)
        await db.flush()
        subs.append(sub)
    await db.commit()
    return {"main": main, "subs": subs}


@pytest_asyncio.fixture
async def mosque(db: AsyncSession):
    """좌표가 있는 테스트 모스크를 생성합니다."""
    from app.models.mosque import Mosque
    m = Mosque(
        name="Al Noor Mosque",
        supervisor_name="Ahmed",
        supervisor_phone="0511111111",
        district="Olaya",
        city="Riyadh",
        latitude=24.7136,
        longitude=46.6753,
    )
    db.add(m)
    await db.commit()
    await db.refresh(m)
    return m


@pytest_asyncio.fixture
async def report(db: AsyncSession, mosque, tech_user):
    """테스트 보고서를 생성합니다."""
    from app.models.report import Report
    r = Report(
        mosque_id=mosque.id,
        report_date=date(2026, 3, 1),
        status="draft",
        created_by=tech_user.id,
    )
    db.add(r)
    await db.commit()
    await db.refresh(r)
    return r


def make_token(user, role_name: str, role_level: int) -> str:
    """테스트용 JWT 액세스 토큰을 생성합니다."""
    return create_access_token({
        "sub": str(user.id),
        "role": role_name,
        "level": role_level,
    })


@pytest.fixture
def admin_token(admin_user) -> str:
    return make_token(admin_user, "admin", 1)


@pytest.fixture
def tech_token(tech_user) -> str:
    return make_token(tech_user, "technician", 2)


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def single_payload(main_item_id, sub_item_id, quantity: int = 1, unit_price: float = 0,
                   photos: list[str] | None = None) -> dict:
    """case1(single) 이슈 저장 본문."""
    return {
        "main_item_id": str(main_item_id),
        "notes": "",
        "data": {
            "issue_type": "single",
            "item": {"sub_item_id": str(sub_item_id), "quantity": quantity, "unit_price": unit_price},
            "photos": photos if photos is not None else ["u1", "u2", "u3"],
        },
    }


def multiple_payload(main_item_id, entries: list[tuple]) -> dict:
    """case2(multiple) 이슈 저장 본문 — entries: (sub_item_id, quantity, unit_price, photo_url)."""
    return {
        "main_item_id": str(main_item_id),
        "notes": "",
        "data": {
            "issue_type": "multiple",
            "entries": [
                {"sub_item_id": str(s), "quantity": q, "unit_price": p, "photo_url": url}
                for s, q, p, url in entries
            ],
        },
    }
