"""관리자 API 라우터 패키지 — 모든 관리자 엔드포인트 통합.

Admin API Router package — Aggregates all admin-facing endpoints
into a single router for inclusion in the FastAPI application.

Included routers:
    - items: 점검 항목 카탈로그 관리 (Main item / sub item catalog management)
"""

from fastapi import APIRouter

from app.api.admin.items import router as items_router

admin_router: APIRouter = APIRouter()

# 카탈로그: /main-items, /sub-items, /catalog/seed
admin_router.include_router(items_router, tags=["Admin Items"])
