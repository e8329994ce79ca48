"""현장 이슈 라우터 — 보고서 이슈 생성, 수정, 삭제.

Field Issues Router — Issues nested under a report. Create and edit
accept the tagged-union body (``data.issue_type`` single | multiple) and
write the issue row with its items and photos in one transaction.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.database import get_db
from app.models.user import User
from app.schemas.issue import IssueResponse, IssueSaveRequest
from app.services.issue_service import issue_service

router: APIRouter = APIRouter()


@router.get("/{report_id}/issues/{issue_id}", response_model=IssueResponse)
async def get_issue(
    report_id: UUID,
    issue_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> IssueResponse:
    issue = await issue_service.get_issue(db, report_id, issue_id)
    return issue_service.to_response(issue)


@router.post("/{report_id}/issues", response_model=IssueResponse, status_code=201)
async def create_issue(
    report_id: UUID,
    data: IssueSaveRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> IssueResponse:
    """이슈 생성 — 이슈 행, 항목, 사진."""
    issue = await issue_service.create_issue(db, report_id, data)
    await db.commit()
    return issue_service.to_response(issue)


@router.put("/{report_id}/issues/{issue_id}", response_model=IssueResponse)
async def update_issue(
    report_id: UUID,
    issue_id: UUID,
    data: IssueSaveRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> IssueResponse:
    """이슈 수정 — 항목/사진은 전체 교체됩니다."""
    issue = await issue_service.update_issue(db, report_id, issue_id, data)
    await db.commit()
    return issue_service.to_response(issue)


@router.delete("/{report_id}/issues/{issue_id}", status_code=204)
async def delete_issue(
    report_id: UUID,
    issue_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> None:
    await issue_service.delete_issue(db, report_id, issue_id)
    await db.commit()
