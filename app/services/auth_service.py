"""인증 서비스 — 로그인, 세션 확인, 토큰 갱신, 로그아웃 비즈니스 로직.

Auth Service — Business logic for email login, session resolution,
token refresh and sign-out. Each provider call is raced against a fixed
time budget; a timeout counts as the equivalent failure (failed login,
empty session), never as a retry trigger.
"""

import logging
from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.user import Role, User
from app.repositories.auth_repository import auth_repository
from app.schemas.auth import LoginRequest, RefreshRequest, TokenResponse, UserMeResponse
from app.utils.exceptions import OperationTimeoutError, UnauthorizedError
from app.utils.jwt import create_access_token, create_refresh_token, decode_token
from app.utils.password import verify_password
from app.utils.timeouts import race_timeout

logger = logging.getLogger(__name__)

# 관리자 레벨 — 이 값 이하의 레벨은 카탈로그 관리 가능
ADMIN_LEVEL = 1


class AuthService:
    """인증 관련 비즈니스 로직을 처리하는 서비스.

    Service handling authentication business logic.
    Role resolution is a database lookup of the user's role row.
    """

    def _build_jwt_payload(self, user: User, role: Role) -> dict[str, str | int]:
        return {
            "sub": str(user.id),
            "role": role.name,
            "level": role.level,
        }

    async def _generate_tokens(
        self,
        db: AsyncSession,
        user: User,
        role: Role,
    ) -> TokenResponse:
        """액세스 토큰과 리프레시 토큰을 생성합니다.

        Generate an access/refresh token pair and persist the refresh token.
        """
        payload: dict[str, str | int] = self._build_jwt_payload(user, role)
        access_token: str = create_access_token(payload)
        refresh_token: str = create_refresh_token(payload)

        expires_at: datetime = datetime.now(timezone.utc) + timedelta(
            days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS
        )
        await auth_repository.create_refresh_token(
            db, user_id=user.id, token=refresh_token, expires_at=expires_at
        )

        return TokenResponse(access_token=access_token, refresh_token=refresh_token)

    async def _authenticate(self, db: AsyncSession, data: LoginRequest) -> User:
        user: User | None = await auth_repository.get_user_by_email(db, data.email)
        if user is None or not verify_password(data.password, user.password_hash):
            raise UnauthorizedError("Invalid email or password")

        if not user.is_active:
            raise UnauthorizedError("Account is deactivated")
        return user

    async def login(
        self,
        db: AsyncSession,
        data: LoginRequest,
    ) -> TokenResponse:
        """이메일 로그인을 처리합니다.

        Process email login. Credential verification is raced against
        ``LOGIN_TIMEOUT_MS``; a timeout is reported as a failed login.

        Raises:
            UnauthorizedError: 잘못된 인증 정보, 비활성 계정 또는 시간 초과
                               (Invalid credentials, inactive account, or timeout)
        """
        try:
            user: User = await race_timeout(
                self._authenticate(db, data),
                settings.LOGIN_TIMEOUT_MS,
                detail="Login timed out",
            )
        except OperationTimeoutError:
            logger.warning("Login timed out for %s", data.email)
            raise UnauthorizedError("Login timed out")

        return await self._generate_tokens(db, user, user.role)

    async def resolve_session(
        self,
        db: AsyncSession,
        access_token: str,
    ) -> User:
        """액세스 토큰으로 현재 세션의 사용자를 확인합니다.

        Resolve the identity behind an access token. The lookup is raced
        against ``SESSION_TIMEOUT_MS``; a timeout yields an empty session.

        Raises:
            UnauthorizedError: 토큰 무효, 사용자 없음/비활성, 시간 초과
        """
        try:
            payload: dict = decode_token(access_token)
        except jwt.InvalidTokenError:
            raise UnauthorizedError("Invalid or expired token")

        if payload.get("type") != "access":
            raise UnauthorizedError("Invalid token type")
        user_id: str | None = payload.get("sub")
        if user_id is None:
            raise UnauthorizedError("Invalid token")
        try:
            user_uuid = UUID(user_id)
        except ValueError:
            raise UnauthorizedError("Invalid token")

        try:
            user: User | None = await race_timeout(
                auth_repository.get_user_with_role(db, user_uuid),
                settings.SESSION_TIMEOUT_MS,
                detail="Session lookup timed out",
            )
        except OperationTimeoutError:
            logger.warning("Session lookup timed out")
            raise UnauthorizedError("Session unavailable")

        if user is None or not user.is_active:
            raise UnauthorizedError("User not found or inactive")
        return user

    async def refresh_tokens(
        self,
        db: AsyncSession,
        data: RefreshRequest,
    ) -> TokenResponse:
        """리프레시 토큰으로 새 토큰 쌍을 발급합니다 (토큰 회전).

        Raises:
            UnauthorizedError: 유효하지 않거나 만료된 리프레시 토큰일 때
        """
        db_token = await auth_repository.get_refresh_token(db, data.refresh_token)
        if db_token is None:
            raise UnauthorizedError("Invalid refresh token")

        if db_token.expires_at_utc < datetime.now(timezone.utc):
            await auth_repository.delete_refresh_token(db, data.refresh_token)
            raise UnauthorizedError("Refresh token has expired")

        try:
            payload: dict = decode_token(data.refresh_token)
        except jwt.InvalidTokenError:
            await auth_repository.delete_refresh_token(db, data.refresh_token)
            raise UnauthorizedError("Invalid refresh token")

        if payload.get("type") != "refresh" or payload.get("sub") is None:
            raise UnauthorizedError("Invalid refresh token payload")

        user: User | None = await auth_repository.get_user_with_role(db, UUID(payload["sub"]))
        if user is None or not user.is_active:
            raise UnauthorizedError("User not found or inactive")

        await auth_repository.delete_refresh_token(db, data.refresh_token)
        return await self._generate_tokens(db, user, user.role)

    async def logout(
        self,
        db: AsyncSession,
        refresh_token: str,
    ) -> None:
        """로그아웃 처리 — 리프레시 토큰을 삭제합니다.

        Revocation is raced against ``SIGN_OUT_TIMEOUT_MS``. A timeout is
        logged and ignored; the client discards its tokens either way.
        """
        try:
            await race_timeout(
                auth_repository.delete_refresh_token(db, refresh_token),
                settings.SIGN_OUT_TIMEOUT_MS,
                detail="Sign-out timed out",
            )
        except OperationTimeoutError:
            logger.warning("Sign-out timed out; token revocation skipped")

    def is_admin(self, user: User) -> bool:
        return user.role is not None and user.role.level <= ADMIN_LEVEL

    async def get_me(self, user: User) -> UserMeResponse:
        """현재 로그인한 사용자 프로필을 반환합니다."""
        role: Role = user.role
        return UserMeResponse(
            id=str(user.id),
            email=user.email,
            full_name=user.full_name,
            phone_number=user.phone_number,
            role_name=role.name,
            role_level=role.level,
            is_admin=self.is_admin(user),
            is_active=user.is_active,
        )


# 싱글턴 인스턴스 — Singleton instance
auth_service: AuthService = AuthService()
