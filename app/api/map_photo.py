"""위성 지도 사진 API — POST /api/map-photo.

Map Photo endpoint. Accepts ``{lat, lng, targetId | reportId, targetType?}``,
fetches a static satellite image and stores it at
``map-photos/{type}-{id}.jpg``. Responds ``{url, path}`` or ``{error}``:

    405  POST 이외의 메서드 (Allow: POST)
    500  지도 API 키 없음, 저장 실패, 예기치 않은 오류
    400  좌표 또는 ID가 유효하지 않음
    502  지도 제공자가 2xx 이외를 반환
"""

import json
import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from app.config import settings
from app.services.map_photo_service import map_photo_service
from app.utils.exceptions import BadRequestError, StorageError, UpstreamError

logger = logging.getLogger(__name__)

router: APIRouter = APIRouter()


def _error(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


@router.api_route(
    "/map-photo",
    methods=["GET", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
async def map_photo_method_not_allowed() -> JSONResponse:
    return _error(405, "Method not allowed", headers={"Allow": "POST"})


@router.post("/map-photo")
async def create_map_photo(request: Request) -> JSONResponse:
    """정적 위성 지도를 받아 스토리지에 저장합니다."""
    api_key: str = settings.resolve_gmaps_key()
    if not api_key:
        return _error(500, "GMAPS_KEY is missing in environment variables")

    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = {}

    try:
        map_request = map_photo_service.parse_request(body)
    except BadRequestError as exc:
        return _error(400, exc.detail)

    try:
        result: dict[str, str] = await map_photo_service.fetch_and_store(map_request, api_key)
    except UpstreamError as exc:
        return _error(502, exc.detail)
    except StorageError as exc:
        return _error(500, exc.detail)
    except Exception as exc:
        logger.exception("map-photo error")
        return _error(500, str(exc) or "Unexpected server error")

    return JSONResponse(status_code=200, content=result)
