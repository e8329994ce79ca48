"""보고서 이슈 서비스 — 이슈 저장(생성/수정), 삭제, 단가 기본값.

Issue Service — Persists issues from the tagged-union payload.

Create: issue row → items → photos.
Edit:   issue row update → delete all items and photos → re-insert the
        current payload's rows. Both run inside the request's session and
        are committed together by the router.
Price:  an explicit unit price wins; 0 falls back to the sub item's
        catalog price (0 when unknown).
"""

from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.report import Report, ReportIssue
from app.repositories.catalog_repository import main_item_repository, sub_item_repository
from app.repositories.issue_repository import issue_repository
from app.repositories.report_repository import report_repository
from app.schemas.issue import (
    IssueData,
    IssueItemResponse,
    IssuePhotoResponse,
    IssueResponse,
    IssueSaveRequest,
    MultipleIssueData,
    SingleIssueData,
)
from app.utils.exceptions import BadRequestError, NotFoundError


def issue_rows(data: IssueData) -> tuple[list[dict[str, Any]], list[str]]:
    """태그드 유니온 본문을 (항목 목록, 사진 URL 목록)으로 펼칩니다.

    Flatten a payload into item rows and photo URLs, index-aligned for
    the ``multiple`` shape.
    """
    if isinstance(data, SingleIssueData):
        items = [data.item.model_dump()]
        return items, list(data.photos)
    if isinstance(data, MultipleIssueData):
        items = [entry.model_dump(exclude={"photo_url"}) for entry in data.entries]
        return items, [entry.photo_url for entry in data.entries]
    raise BadRequestError(f"Unsupported issue type: {getattr(data, 'issue_type', None)}")


class IssueService:
    """이슈 관련 비즈니스 로직을 처리하는 서비스."""

    async def resolve_prices(
        self,
        db: AsyncSession,
        items: list[dict[str, Any]],
    ) -> list[dict[str, Any]]:
        """단가가 0인 항목에 세부 항목 단가를 채웁니다."""
        missing: list[UUID] = [item["sub_item_id"] for item in items if not item["unit_price"]]
        if not missing:
            return items
        prices: dict[UUID, float] = await sub_item_repository.get_prices(db, missing)
        return [
            {**item, "unit_price": item["unit_price"] or prices.get(item["sub_item_id"], 0)}
            for item in items
        ]

    async def _check_references(
        self,
        db: AsyncSession,
        main_item_id: UUID,
        items: list[dict[str, Any]],
    ) -> None:
        if await main_item_repository.get_by_id(db, main_item_id) is None:
            raise BadRequestError("Main item not found")
        sub_item_ids = {item["sub_item_id"] for item in items}
        known = await sub_item_repository.get_prices(db, list(sub_item_ids))
        if len(known) != len(sub_item_ids):
            raise BadRequestError("Sub item not found")

    async def _get_report(self, db: AsyncSession, report_id: UUID) -> Report:
        report: Report | None = await report_repository.get_by_id(db, report_id)
        if report is None:
            raise NotFoundError("Report not found")
        return report

    async def _get_issue(self, db: AsyncSession, report_id: UUID, issue_id: UUID) -> ReportIssue:
        issue: ReportIssue | None = await issue_repository.get_by_id(db, issue_id)
        if issue is None or issue.report_id != report_id:
            raise NotFoundError("Issue not found")
        return issue

    async def _write_children(
        self,
        db: AsyncSession,
        issue_id: UUID,
        data: IssueData,
    ) -> None:
        items, photos = issue_rows(data)
        items = await self.resolve_prices(db, items)
        await issue_repository.insert_items(db, issue_id, items)
        await issue_repository.insert_photos(db, issue_id, photos)

    async def create_issue(
        self,
        db: AsyncSession,
        report_id: UUID,
        data: IssueSaveRequest,
    ) -> ReportIssue:
        """새 이슈를 생성합니다 — 이슈 행, 항목, 사진 순서.

        Raises:
            NotFoundError: 보고서가 없을 때 (Report not found)
            BadRequestError: 주/세부 항목 참조가 잘못됐을 때 (Unknown catalog references)
        """
        await self._get_report(db, report_id)
        await self._check_references(db, data.main_item_id, issue_rows(data.data)[0])

        issue: ReportIssue = await issue_repository.create(
            db,
            {
                "report_id": report_id,
                "main_item_id": data.main_item_id,
                "notes": data.notes,
                "issue_type": data.data.issue_type,
            },
        )
        await self._write_children(db, issue.id, data.data)
        return await issue_repository.get_with_children(db, issue.id)

    async def update_issue(
        self,
        db: AsyncSession,
        report_id: UUID,
        issue_id: UUID,
        data: IssueSaveRequest,
    ) -> ReportIssue:
        """이슈를 수정합니다 — 행 갱신 후 항목/사진 전체 삭제 및 재삽입.

        Items and photos are replaced as whole collections, so a re-save
        never accumulates rows from a prior save.
        """
        await self._get_issue(db, report_id, issue_id)
        await self._check_references(db, data.main_item_id, issue_rows(data.data)[0])

        await issue_repository.update(
            db,
            issue_id,
            {
                "main_item_id": data.main_item_id,
                "notes": data.notes,
                "issue_type": data.data.issue_type,
            },
        )
        await issue_repository.delete_children(db, issue_id)
        await self._write_children(db, issue_id, data.data)
        return await issue_repository.get_with_children(db, issue_id)

    async def delete_issue(self, db: AsyncSession, report_id: UUID, issue_id: UUID) -> None:
        await self._get_issue(db, report_id, issue_id)
        await issue_repository.delete_issue(db, issue_id)

    async def get_issue(self, db: AsyncSession, report_id: UUID, issue_id: UUID) -> ReportIssue:
        await self._get_issue(db, report_id, issue_id)
        return await issue_repository.get_with_children(db, issue_id)

    def to_response(self, issue: ReportIssue) -> IssueResponse:
        """이슈 모델을 응답 스키마로 변환합니다 (항목 합계 포함)."""
        items: list[IssueItemResponse] = []
        for item in issue.items:
            sub_item = item.sub_item
            unit_price = item.unit_price or (sub_item.unit_price if sub_item is not None else 0) or 0
            items.append(IssueItemResponse(
                id=str(item.id),
                sub_item_id=str(item.sub_item_id),
                sub_item_name=sub_item.name if sub_item is not None else "",
                sub_item_name_ar=sub_item.name_ar if sub_item is not None else "",
                name_table=sub_item.name_table if sub_item is not None else None,
                unit=sub_item.unit if sub_item is not None else "",
                unit_ar=sub_item.unit_ar if sub_item is not None else "",
                quantity=item.quantity,
                unit_price=unit_price,
                line_total=item.quantity * unit_price,
            ))

        main_item = issue.main_item
        return IssueResponse(
            id=str(issue.id),
            report_id=str(issue.report_id),
            main_item_id=str(issue.main_item_id),
            main_item_name=main_item.name if main_item is not None else "",
            main_item_name_ar=main_item.name_ar if main_item is not None else "",
            notes=issue.notes or "",
            issue_type=issue.issue_type,
            items=items,
            photos=[IssuePhotoResponse(id=str(p.id), photo_url=p.photo_url) for p in issue.photos],
            total=sum(i.line_total for i in items),
        )


issue_service: IssueService = IssueService()
