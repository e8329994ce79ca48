"""FastAPI 의존성 주입 모듈 — 인증 및 권한 검사.

FastAPI dependency injection module — Authentication and authorization.
The authenticated identity is passed explicitly to every endpoint through
these dependencies instead of a global session object.

Authentication Flow:
    1. 클라이언트가 Authorization: Bearer <token> 헤더를 전송
       (Client sends Authorization: Bearer <token> header)
    2. HTTPBearer가 토큰을 추출 (HTTPBearer extracts the token)
    3. auth_service.resolve_session()이 JWT를 검증하고 사용자를 조회
       (Session resolution verifies the JWT and loads the user with role,
        raced against SESSION_TIMEOUT_MS)

Authorization Flow (require_level):
    1. get_current_user로 사용자 인증 (User authenticated via get_current_user)
    2. 역할 레벨이 max_level 이하인지 확인 (Role level checked against max_level)
    3. 레벨이 높으면(숫자가 크면) 403 Forbidden 반환
       (Returns 403 if level exceeds max_level)
"""

from typing import Annotated, Awaitable, Callable

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.user import User
from app.services.auth_service import ADMIN_LEVEL, auth_service
from app.utils.exceptions import ForbiddenError

# HTTP Bearer 토큰 추출기 — Authorization 헤더에서 JWT 토큰 추출
security: HTTPBearer = HTTPBearer()


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """JWT 토큰에서 현재 인증된 사용자를 추출합니다.

    Returns:
        User: 인증된 사용자 ORM 인스턴스, 역할 포함 (Authenticated user with role loaded)

    Raises:
        UnauthorizedError(401): 토큰 무효/만료, 사용자 없음/비활성, 세션 시간 초과
    """
    return await auth_service.resolve_session(db, credentials.credentials)


def require_level(max_level: int) -> Callable[..., Awaitable[User]]:
    """역할 레벨 기반 권한 검사 의존성 팩토리.

    Level hierarchy:
        1 = admin (카탈로그 관리, catalog management)
        2 = technician (현장 점검, field inspection)
    """
    async def _check(
        current_user: Annotated[User, Depends(get_current_user)],
    ) -> User:
        role = current_user.role
        if role is None or role.level > max_level:
            raise ForbiddenError("Insufficient permissions")
        return current_user
    return _check


# 편의 의존성 — Admin only
require_admin = require_level(ADMIN_LEVEL)
