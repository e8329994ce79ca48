"""현장 API 라우터 패키지 — 현장 점검 담당자용 엔드포인트 통합.

Field API Router package — Aggregates the endpoints used while inspecting
a site: mosques, reports with their issues, photo uploads, catalog reads.

Included routers:
    - mosques: 점검 현장 (Inspection sites)
    - reports: 보고서 집합체, 미리보기, PDF (Report aggregate, preview, PDF)
    - issues: 보고서 이슈 저장/삭제 (Issue save and delete)
    - photos: 사진 업로드 (Photo upload, pending counter)
    - items: 카탈로그 조회 (Catalog read)
"""

from fastapi import APIRouter

from app.api.field.issues import router as issues_router
from app.api.field.items import router as items_router
from app.api.field.mosques import router as mosques_router
from app.api.field.photos import router as photos_router
from app.api.field.reports import router as reports_router

field_router: APIRouter = APIRouter()

field_router.include_router(mosques_router, prefix="/mosques", tags=["Field Mosques"])
field_router.include_router(reports_router, prefix="/reports", tags=["Field Reports"])
# 이슈: /reports/{report_id}/issues 하위 (nested under reports)
field_router.include_router(issues_router, prefix="/reports", tags=["Field Issues"])
field_router.include_router(photos_router, prefix="/photos", tags=["Field Photos"])
field_router.include_router(items_router, prefix="/items", tags=["Field Items"])
