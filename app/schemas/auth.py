"""인증 관련 Pydantic 요청/응답 스키마 정의.

Authentication-related Pydantic request/response schema definitions.
Covers email login, token issuance/refresh, and current user info.
"""

from pydantic import BaseModel


class LoginRequest(BaseModel):
    """이메일 로그인 요청 스키마.

    Attributes:
        email: 로그인 이메일 (Login email, case-insensitive)
        password: 비밀번호 (Plain text password, verified against bcrypt hash)
    """

    email: str
    password: str  # 평문, 서버에서 bcrypt 해시와 비교 (Plain text, compared to bcrypt hash)


class TokenResponse(BaseModel):
    """JWT 토큰 발급 응답 스키마.

    Returned after successful login or token refresh.
    """

    access_token: str  # JWT 액세스 토큰 — 만료: 30분 기본 (Access token, default TTL: 30min)
    refresh_token: str  # JWT 리프레시 토큰 — 만료: 7일 기본 (Refresh token, default TTL: 7 days)
    token_type: str = "bearer"


class RefreshRequest(BaseModel):
    """토큰 갱신/로그아웃 요청 스키마."""

    refresh_token: str


class UserMeResponse(BaseModel):
    """현재 사용자 정보 응답 스키마 (GET /me).

    Attributes:
        role_name: 역할 이름 ("admin" | "technician")
        role_level: 역할 레벨 (1=admin, 2=technician)
        is_admin: 카탈로그 관리 권한 여부 (May manage the item catalog)
    """

    id: str
    email: str
    full_name: str
    phone_number: str | None
    role_name: str
    role_level: int
    is_admin: bool
    is_active: bool
