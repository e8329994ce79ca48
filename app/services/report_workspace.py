"""보고서 편집 작업공간 — 집합체 로드, 이슈 저장/삭제, 지도 자동 조회.

Report workspace — The editing session for one report. Holds the loaded
aggregate, an issue editor wired to the catalog prices, and the one-shot
satellite map auto-fetch.

Issue deletion is optimistic: the issue leaves the in-memory report
before the remote delete runs. On failure the exact inverse edit is
replayed (the issue goes back at its original index) instead of reloading
the whole aggregate, so other local edits survive.
"""

import logging
from enum import Enum
from pathlib import Path
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.user import User
from app.schemas.issue import IssueResponse, IssueSaveRequest
from app.schemas.report import ReportDetailResponse, ReportSaveRequest
from app.services.catalog_service import catalog_service
from app.services.issue_draft import IssueEditor
from app.services.issue_service import issue_service
from app.services.map_photo_service import MapPhotoRequest, map_photo_service
from app.services.pdf_service import generate_pdf_bytes, save_pdf
from app.services.report_service import report_service
from app.services.report_template import render_report_html, report_filename
from app.services.upload_service import PhotoUploadPipeline
from app.utils.exceptions import BadRequestError, NotFoundError

logger = logging.getLogger(__name__)


class WorkspaceState(str, Enum):
    LOADING = "loading"
    READY = "ready"
    NOT_FOUND = "not_found"
    DELETED = "deleted"


class ReportWorkspace:
    """보고서 하나의 편집 세션.

    Args:
        db: 비동기 데이터베이스 세션 (Session; the workspace commits each action)
        report_id: 보고서 UUID (Report identifier)
        user: 인증된 사용자 — 사진 업로드 소유자 (Authenticated user, photo owner)
    """

    def __init__(self, db: AsyncSession, report_id: UUID, user: User | None = None) -> None:
        self.db = db
        self.report_id = report_id
        self.user = user
        self.state: WorkspaceState = WorkspaceState.LOADING
        self.notice: str | None = None
        self.report: ReportDetailResponse | None = None
        self.pipeline = PhotoUploadPipeline()
        self.editor = IssueEditor(pipeline=self.pipeline, owner_id=user.id if user else None)
        self._map_fetch_attempted = False

    async def load(self) -> ReportDetailResponse | None:
        """집합체를 로드합니다. 없으면 not_found 종료 상태로 전환합니다."""
        try:
            aggregate = await report_service.get_aggregate(self.db, self.report_id)
        except NotFoundError:
            self.state = WorkspaceState.NOT_FOUND
            self.notice = "Report not found"
            self.report = None
            return None

        self.report = report_service.build_response(aggregate)
        catalog = await catalog_service.list_sub_items(self.db)
        self.editor.sub_item_prices = {s.id: s.unit_price for s in catalog}
        self.state = WorkspaceState.READY
        return self.report

    def _require_ready(self) -> ReportDetailResponse:
        if self.state is not WorkspaceState.READY or self.report is None:
            raise BadRequestError(f"Report workspace is {self.state.value}")
        return self.report

    async def auto_fetch_map(self) -> str | None:
        """위성 지도 사진을 한 번만 자동 조회합니다.

        Runs at most once per load, only when the report has no map photo
        and the mosque has coordinates. Failures are logged and swallowed;
        the report stays savable.
        """
        report = self._require_ready()
        if self._map_fetch_attempted or report.map_photo_url:
            return None
        mosque = report.mosque
        if not mosque.latitude or not mosque.longitude:
            return None

        self._map_fetch_attempted = True
        api_key = settings.resolve_gmaps_key()
        if not api_key:
            logger.warning("map-photo skipped: no map API key configured")
            return None
        try:
            stored = await map_photo_service.fetch_and_store(
                MapPhotoRequest(
                    lat=mosque.latitude,
                    lng=mosque.longitude,
                    target_id=report.id,
                    target_type="report",
                ),
                api_key,
            )
            await report_service.set_map_photo(self.db, self.report_id, stored["url"])
            await self.db.commit()
        except Exception as exc:
            await self.db.rollback()
            logger.warning("map-photo auto-fetch failed: %s", getattr(exc, "detail", None) or exc)
            return None

        report.map_photo_url = stored["url"]
        return stored["url"]

    async def save_changes(self, data: ReportSaveRequest) -> ReportDetailResponse:
        """모스크 인라인 수정과 상태를 저장합니다."""
        self._require_ready()
        try:
            aggregate = await report_service.save_changes(self.db, self.report_id, data)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        self.report = report_service.build_response(aggregate)
        return self.report

    async def _persist_issue(self, request: IssueSaveRequest, issue_id: str | None) -> IssueResponse:
        try:
            if issue_id is None:
                issue = await issue_service.create_issue(self.db, self.report_id, request)
            else:
                issue = await issue_service.update_issue(self.db, self.report_id, UUID(issue_id), request)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        return issue_service.to_response(issue)

    async def save_issue(self) -> IssueResponse:
        """편집기 초안을 저장하고 집합체를 다시 로드합니다."""
        self._require_ready()
        saved = await self.editor.save(self._persist_issue)
        await self.load()
        return saved

    async def delete_issue(self, issue_id: str) -> None:
        """이슈를 낙관적으로 삭제합니다.

        The issue is removed locally first. If the remote delete fails it is
        restored at its original index and the error is re-raised.

        Raises:
            NotFoundError: 로컬 보고서에 이슈가 없을 때 (Issue not in the loaded report)
        """
        report = self._require_ready()
        index = next((i for i, issue in enumerate(report.issues) if issue.id == issue_id), None)
        if index is None:
            raise NotFoundError("Issue not found")

        removed = report.issues.pop(index)
        report.total = sum(issue.total for issue in report.issues)
        try:
            await issue_service.delete_issue(self.db, self.report_id, UUID(issue_id))
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            report.issues.insert(index, removed)
            report.total = sum(issue.total for issue in report.issues)
            logger.warning("Issue delete failed; restored issue %s", issue_id)
            raise

    async def delete_report(self) -> None:
        """보고서와 모든 하위 행을 삭제합니다 (항목 → 사진 → 이슈 → 보고서)."""
        self._require_ready()
        try:
            await report_service.delete_report(self.db, self.report_id)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        self.report = None
        self.state = WorkspaceState.DELETED

    def preview_html(self) -> str:
        return render_report_html(self._require_ready())

    async def export_pdf(self, directory: Path | None = None) -> Path:
        """PDF 파일로 저장합니다 — 파일 이름 <모스크 이름>_<날짜>.pdf."""
        report = self._require_ready()
        return await save_pdf(render_report_html(report), report_filename(report), directory=directory)

    async def export_pdf_bytes(self) -> bytes:
        return await generate_pdf_bytes(render_report_html(self._require_ready()))
