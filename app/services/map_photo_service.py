"""위성 지도 사진 서비스 — 정적 지도 이미지 조회 및 저장.

Map Photo Service — Fetches a static satellite image for a site's
coordinates from the map provider and stores it at
``map-photos/{type}-{id}.jpg`` (overwrite allowed).
"""

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import Any

import httpx

from app.config import settings
from app.services.storage_service import map_photo_key, storage_service
from app.utils.exceptions import BadRequestError, UpstreamError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MapPhotoRequest:
    lat: float
    lng: float
    target_id: str
    target_type: str


def _to_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return None if math.isnan(number) else number


class MapPhotoService:
    """정적 지도 제공자 호출과 스토리지 저장을 담당하는 서비스."""

    def parse_request(self, body: Any) -> MapPhotoRequest:
        """요청 본문을 검증합니다.

        ``lat``/``lng`` accept numbers or numeric strings. The id comes from
        ``targetId`` or ``reportId``; the type defaults to ``report`` when a
        ``reportId`` is given, else ``mosque``.

        Raises:
            BadRequestError: 좌표 또는 ID가 유효하지 않을 때 (Invalid coordinates or id)
        """
        body = body if isinstance(body, dict) else {}
        lat = _to_float(body.get("lat"))
        lng = _to_float(body.get("lng"))
        report_id = body.get("reportId")
        target_id = body.get("targetId") or report_id
        target_type = body.get("targetType")
        if not isinstance(target_type, str) or not target_type:
            target_type = "report" if report_id else "mosque"

        if lat is None or lng is None or not target_id:
            raise BadRequestError("lat, lng (number) and targetId are required")
        return MapPhotoRequest(lat=lat, lng=lng, target_id=str(target_id), target_type=target_type)

    def build_params(self, lat: float, lng: float, api_key: str) -> dict[str, str | int]:
        return {
            "center": f"{lat},{lng}",
            "zoom": settings.MAP_PHOTO_ZOOM,
            "size": settings.MAP_PHOTO_SIZE,
            "maptype": "satellite",
            "key": api_key,
        }

    async def fetch_image(self, lat: float, lng: float, api_key: str) -> bytes:
        """지도 제공자에서 위성 이미지를 받아옵니다.

        Raises:
            UpstreamError: 제공자가 2xx 이외를 반환하거나 요청 실패
                           (Provider returned non-2xx or the request failed)
        """
        try:
            async with httpx.AsyncClient(timeout=settings.MAP_PHOTO_TIMEOUT_SECONDS) as client:
                response = await client.get(
                    settings.MAP_PHOTO_BASE_URL,
                    params=self.build_params(lat, lng, api_key),
                )
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Failed to reach static map provider: {exc}")

        if not response.is_success:
            raise UpstreamError(
                f"Failed to fetch static map from Google: {response.status_code} "
                f"{response.reason_phrase} {response.text}".strip()
            )
        return response.content

    async def store(self, image: bytes, target_type: str, target_id: str) -> dict[str, str]:
        """이미지를 지도 경로에 덮어쓰기 허용으로 저장합니다.

        Raises:
            StorageError: 저장 실패 (Upload failure)
        """
        path = map_photo_key(target_type, target_id)
        url = await asyncio.to_thread(
            storage_service.put_object, path, image, "image/jpeg", True
        )
        return {"url": url, "path": path}

    async def fetch_and_store(self, request: MapPhotoRequest, api_key: str) -> dict[str, str]:
        image = await self.fetch_image(request.lat, request.lng, api_key)
        return await self.store(image, request.target_type, request.target_id)


map_photo_service: MapPhotoService = MapPhotoService()
