"""타임아웃 유틸리티 — 네트워크 호출을 고정 시간 예산과 경주시킵니다.

Timeout utility — Races an awaitable against a fixed millisecond budget.
Whichever settles first wins; a timeout becomes OperationTimeoutError so
callers can map it onto their own failure outcome.
"""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from app.utils.exceptions import OperationTimeoutError

T = TypeVar("T")


async def race_timeout(
    awaitable: Awaitable[T],
    timeout_ms: int,
    detail: str = "Operation timed out",
) -> T:
    """awaitable을 timeout_ms 안에 완료하거나 OperationTimeoutError를 발생시킵니다.

    Args:
        awaitable: 실행할 코루틴 (Coroutine or future to await)
        timeout_ms: 제한 시간 밀리초 (Budget in milliseconds)
        detail: 타임아웃 메시지 (Timeout error detail)

    Raises:
        OperationTimeoutError: 제한 시간 초과 (Budget exceeded)
    """
    try:
        return await asyncio.wait_for(awaitable, timeout_ms / 1000)
    except asyncio.TimeoutError:
        raise OperationTimeoutError(detail)
