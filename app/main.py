"""FastAPI 애플리케이션 엔트리포인트 — 미들웨어 및 라우터 등록.

FastAPI application entry point — Middleware and router registration.
Configures logging, CORS, health check, the local upload mount, and
includes the auth, admin, field and map-photo routers.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.config import settings
from app.middleware.axiom_logging import AxiomLoggingMiddleware

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app: FastAPI = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Axiom API 로깅 미들웨어 — CORS보다 먼저 등록하여 모든 요청을 캡처
app.add_middleware(AxiomLoggingMiddleware)

# CORS 미들웨어 — Cross-Origin Resource Sharing middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """서버 상태 확인 엔드포인트.

    Health check endpoint for load balancers and monitoring.
    """
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# 라우터 등록 — Router registration
# ---------------------------------------------------------------------------
# auth_router: 로그인/갱신/로그아웃/프로필 (shared by admin and field clients)
# admin_router: 점검 항목 카탈로그 관리 (catalog management, admin only)
# field_router: 현장, 보고서, 이슈, 사진 (field inspection workflow)
# map_photo_router: POST /api/map-photo (static satellite snapshot)
from app.api.admin import admin_router  # noqa: E402
from app.api.auth import router as auth_router  # noqa: E402
from app.api.field import field_router  # noqa: E402
from app.api.map_photo import router as map_photo_router  # noqa: E402

app.include_router(auth_router, prefix="/api/v1/auth", tags=["Auth"])
app.include_router(admin_router, prefix="/api/v1/admin")
app.include_router(field_router, prefix="/api/v1/field")
app.include_router(map_photo_router, prefix="/api", tags=["Map Photo"])

# 로컬 모드 — S3 버킷 미설정 시 업로드 파일을 /uploads로 제공
if not settings.AWS_S3_BUCKET:
    settings.uploads_dir.mkdir(parents=True, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=settings.uploads_dir), name="uploads")
