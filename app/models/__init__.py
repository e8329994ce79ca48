"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package — Central import point for all domain models.
Importing from this package registers every model with the metadata,
which Alembic and relationship resolution rely on.

Modules:
    user: 역할 및 사용자 (Role and User)
    token: 리프레시 토큰 (Refresh tokens)
    mosque: 점검 현장 (Mosque)
    catalog: 주/세부 점검 항목 (MainItem, SubItem)
    report: 보고서, 이슈, 이슈 항목, 이슈 사진 (Report, ReportIssue, IssueItem, IssuePhoto)
"""

from app.models.user import Role, User
from app.models.token import RefreshToken
from app.models.mosque import Mosque
from app.models.catalog import MainItem, SubItem
from app.models.report import Report, ReportIssue, IssueItem, IssuePhoto

__all__ = [
    "Role", "User",
    "RefreshToken",
    "Mosque",
    "MainItem", "SubItem",
    "Report", "ReportIssue", "IssueItem", "IssuePhoto",
]
