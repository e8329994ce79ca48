"""점검 보고서 서비스 — 보고서 집합체 조회, 생성, 수정, 순서 보장 삭제.

Report Service — Business logic for the report aggregate: create, list,
load with mosque/issues/items/photos, partial update, save inline edits,
and delete with its descendants in a fixed order.
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.mosque import Mosque
from app.models.report import Report
from app.repositories.mosque_repository import mosque_repository
from app.repositories.report_repository import report_repository
from app.schemas.common import PaginatedResponse
from app.schemas.report import (
    ReportCreate,
    ReportDetailResponse,
    ReportListItem,
    ReportSaveRequest,
    ReportUpdate,
)
from app.services.catalog_service import parse_uuid
from app.services.issue_service import issue_service
from app.services.mosque_service import mosque_service
from app.utils.exceptions import BadRequestError, NotFoundError


class ReportService:
    """보고서 관련 비즈니스 로직을 처리하는 서비스."""

    def _list_item(self, report: Report) -> ReportListItem:
        return ReportListItem(
            id=str(report.id),
            mosque_id=str(report.mosque_id),
            mosque_name=report.mosque.name if report.mosque is not None else "",
            status=report.status,
            report_date=report.report_date,
            map_photo_url=report.map_photo_url,
            created_at=report.created_at,
        )

    def build_response(self, report: Report) -> ReportDetailResponse:
        """집합체 모델을 상세 응답으로 변환합니다."""
        issues = [issue_service.to_response(issue) for issue in report.issues]
        return ReportDetailResponse(
            id=str(report.id),
            status=report.status,
            report_date=report.report_date,
            map_photo_url=report.map_photo_url,
            created_by=str(report.created_by) if report.created_by else None,
            mosque=mosque_service.to_response(report.mosque),
            issues=issues,
            total=sum(issue.total for issue in issues),
            created_at=report.created_at,
            updated_at=report.updated_at,
        )

    async def list_reports(
        self,
        db: AsyncSession,
        mosque_id: UUID | None = None,
        status: str | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> PaginatedResponse:
        reports, total = await report_repository.get_list(
            db, mosque_id=mosque_id, status=status, page=page, per_page=per_page
        )
        return PaginatedResponse(
            items=[self._list_item(r) for r in reports],
            total=total,
            page=page,
            per_page=per_page,
        )

    async def get_aggregate(self, db: AsyncSession, report_id: UUID) -> Report:
        """보고서 집합체를 조회합니다.

        Raises:
            NotFoundError: 보고서를 찾을 수 없을 때 (Report not found)
        """
        report: Report | None = await report_repository.get_aggregate(db, report_id)
        if report is None:
            raise NotFoundError("Report not found")
        return report

    async def create_report(
        self,
        db: AsyncSession,
        data: ReportCreate,
        created_by: UUID | None,
    ) -> Report:
        """보고서를 생성합니다 — 기존 모스크 또는 인라인 모스크.

        Raises:
            BadRequestError: 모스크 정보가 없을 때 (Neither mosque_id nor mosque given)
            NotFoundError: 모스크를 찾을 수 없을 때 (Mosque not found)
        """
        if data.mosque_id:
            mosque_id: UUID = parse_uuid(data.mosque_id, "mosque_id")
            if await mosque_repository.get_by_id(db, mosque_id) is None:
                raise NotFoundError("Mosque not found")
        elif data.mosque is not None:
            mosque: Mosque = await mosque_service.create_mosque(db, data.mosque)
            mosque_id = mosque.id
        else:
            raise BadRequestError("mosque_id or mosque is required")

        report: Report = await report_repository.create(
            db,
            {
                "mosque_id": mosque_id,
                "report_date": data.report_date,
                "status": data.status,
                "created_by": created_by,
            },
        )
        return await self.get_aggregate(db, report.id)

    async def update_report(
        self,
        db: AsyncSession,
        report_id: UUID,
        data: ReportUpdate,
    ) -> Report:
        """보고서 필드를 부분 수정합니다 (전달된 필드만)."""
        update_data: dict = data.model_dump(exclude_unset=True)
        for field in ("status", "report_date"):
            if field in update_data and update_data[field] is None:
                del update_data[field]
        report: Report | None = await report_repository.update(db, report_id, update_data)
        if report is None:
            raise NotFoundError("Report not found")
        return await self.get_aggregate(db, report_id)

    async def save_changes(
        self,
        db: AsyncSession,
        report_id: UUID,
        data: ReportSaveRequest,
    ) -> Report:
        """편집 화면 저장 — 인라인 모스크 수정과 상태 변경."""
        report: Report | None = await report_repository.get_by_id(db, report_id)
        if report is None:
            raise NotFoundError("Report not found")

        if data.mosque is not None:
            await mosque_service.update_mosque(db, report.mosque_id, data.mosque)
        if data.status is not None:
            await report_repository.update(db, report_id, {"status": data.status})
        return await self.get_aggregate(db, report_id)

    async def set_map_photo(self, db: AsyncSession, report_id: UUID, url: str) -> None:
        if await report_repository.update(db, report_id, {"map_photo_url": url}) is None:
            raise NotFoundError("Report not found")

    async def delete_report(self, db: AsyncSession, report_id: UUID) -> None:
        """보고서와 하위 이슈/항목/사진을 순서대로 삭제합니다.

        Order: items → photos → issues → report.
        """
        if not await report_repository.delete_with_descendants(db, report_id):
            raise NotFoundError("Report not found")


report_service: ReportService = ReportService()
