"""커스텀 HTTP 예외 클래스 모듈.

Custom HTTP exception classes module.
Provides pre-configured HTTPException subclasses for the error taxonomy
used across services: auth, validation, storage, not-found, timeout and
upstream provider failures.

Usage:
    from app.utils.exceptions import NotFoundError, ValidationError
    raise NotFoundError("Report not found")
    raise ValidationError("Three photos are required")
"""

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """404 Not Found 예외 — 요청한 리소스를 찾을 수 없을 때 사용.

    Raised when a requested resource (report, issue, mosque, item) does not exist.
    """

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ForbiddenError(HTTPException):
    """403 Forbidden 예외 — 권한 부족 시 사용.

    Raised when the authenticated user's role does not allow the operation
    (e.g. technician attempting catalog management).
    """

    def __init__(self, detail: str = "Insufficient permissions") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class UnauthorizedError(HTTPException):
    """401 Unauthorized 예외 — 인증 실패 시 사용 (AuthError).

    Raised when authentication is missing, invalid, expired, or when an
    operation needs an owner identity that is not present.
    """

    def __init__(self, detail: str = "Authentication required") -> None:
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class BadRequestError(HTTPException):
    """400 Bad Request 예외 — 잘못된 요청 데이터 시 사용."""

    def __init__(self, detail: str = "Bad request") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class ValidationError(HTTPException):
    """422 Unprocessable 예외 — 이슈 초안이 형태 규칙을 위반할 때 사용.

    Raised when an issue draft fails its shape rules. The detail is a
    user-facing message; nothing is persisted.
    """

    def __init__(self, detail: str = "Validation failed") -> None:
        super().__init__(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)


class StorageError(HTTPException):
    """502 Bad Gateway 예외 — 오브젝트 스토리지 업로드/조회 실패.

    Raised when the object store rejects or fails an upload or fetch.
    """

    def __init__(self, detail: str = "Storage operation failed") -> None:
        super().__init__(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)


class OperationTimeoutError(HTTPException):
    """504 Gateway Timeout 예외 — 고정 시간 예산 초과."""

    def __init__(self, detail: str = "Operation timed out") -> None:
        super().__init__(status_code=status.HTTP_504_GATEWAY_TIMEOUT, detail=detail)


class UpstreamError(HTTPException):
    """502 Bad Gateway 예외 — 외부 지도 제공자가 2xx 이외를 반환."""

    def __init__(self, detail: str = "Upstream provider failed") -> None:
        super().__init__(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)
