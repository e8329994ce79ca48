"""위성 지도 사진 API 테스트 — 입력 검증, 상태 코드 매핑, 저장 경로.

Map photo endpoint tests. The provider is replaced with an httpx mock
transport; storage runs in local mode.
"""

import httpx
import pytest
from httpx import AsyncClient

from app.config import settings
from app.services.map_photo_service import map_photo_service
from app.utils.exceptions import BadRequestError

URL = "/api/map-photo"


@pytest.fixture
def map_key(monkeypatch: pytest.MonkeyPatch) -> str:
    monkeypatch.setattr(settings, "GMAPS_KEY", "test-key")
    return "test-key"


@pytest.fixture
def provider(monkeypatch: pytest.MonkeyPatch):
    """지도 제공자 응답을 대체합니다 — requests 목록에 요청을 기록."""
    state = {"status": 200, "content": b"\xff\xd8jpeg", "requests": []}

    def _handler(request: httpx.Request) -> httpx.Response:
        state["requests"].append(request)
        return httpx.Response(state["status"], content=state["content"])

    real_client = httpx.AsyncClient

    def _client(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(_handler)
        return real_client(*args, **kwargs)

    monkeypatch.setattr(httpx, "AsyncClient", _client)
    return state


class TestParseRequest:
    """요청 본문 검증 테스트."""

    def test_numeric_strings_accepted(self):
        request = map_photo_service.parse_request({"lat": "24.7", "lng": "46.6", "targetId": "m1"})
        assert (request.lat, request.lng) == (24.7, 46.6)
        assert request.target_type == "mosque"

    def test_report_id_defaults_type(self):
        request = map_photo_service.parse_request({"lat": 1, "lng": 2, "reportId": "r1"})
        assert request.target_id == "r1"
        assert request.target_type == "report"

    @pytest.mark.parametrize(
        "body",
        [
            {"lat": "abc", "lng": 2, "targetId": "x"},
            {"lat": 1, "lng": 2},
            {"lat": True, "lng": 2, "targetId": "x"},
            {"lat": "nan", "lng": 2, "targetId": "x"},
            None,
        ],
    )
    def test_invalid_bodies(self, body):
        with pytest.raises(BadRequestError):
            map_photo_service.parse_request(body)


class TestMapPhotoEndpoint:
    """POST /api/map-photo 테스트."""

    async def test_success_stores_and_returns_path(self, client: AsyncClient, map_key, provider, uploads_dir):
        res = await client.post(URL, json={"lat": 24.7, "lng": 46.6, "targetId": "abc", "targetType": "report"})
        assert res.status_code == 200
        data = res.json()
        assert data["path"] == "map-photos/report-abc.jpg"
        assert data["url"].endswith("/uploads/map-photos/report-abc.jpg")
        assert (uploads_dir / "map-photos" / "report-abc.jpg").read_bytes() == b"\xff\xd8jpeg"

        params = provider["requests"][0].url.params
        assert params["center"] == "24.7,46.6"
        assert params["maptype"] == "satellite"
        assert params["key"] == "test-key"

    async def test_overwrite_allowed(self, client: AsyncClient, map_key, provider, uploads_dir):
        body = {"lat": 1, "lng": 2, "targetId": "same"}
        assert (await client.post(URL, json=body)).status_code == 200
        provider["content"] = b"second"
        assert (await client.post(URL, json=body)).status_code == 200
        assert (uploads_dir / "map-photos" / "mosque-same.jpg").read_bytes() == b"second"

    async def test_get_not_allowed(self, client: AsyncClient):
        res = await client.get(URL)
        assert res.status_code == 405
        assert res.headers["allow"] == "POST"
        assert "error" in res.json()

    async def test_missing_key(self, client: AsyncClient):
        res = await client.post(URL, json={"lat": 1, "lng": 2, "targetId": "x"})
        assert res.status_code == 500
        assert "GMAPS_KEY" in res.json()["error"]

    async def test_invalid_input(self, client: AsyncClient, map_key):
        res = await client.post(URL, json={"lat": "north", "lng": 2, "targetId": "x"})
        assert res.status_code == 400
        assert res.json() == {"error": "lat, lng (number) and targetId are required"}

    async def test_non_json_body(self, client: AsyncClient, map_key):
        res = await client.post(URL, content=b"not json", headers={"content-type": "application/json"})
        assert res.status_code == 400

    async def test_provider_error_is_502(self, client: AsyncClient, map_key, provider):
        provider["status"] = 403
        provider["content"] = b"key rejected"
        res = await client.post(URL, json={"lat": 1, "lng": 2, "targetId": "x"})
        assert res.status_code == 502
        assert res.json()["error"].startswith("Failed to fetch static map from Google: 403")
        assert "key rejected" in res.json()["error"]

    async def test_local_key_file_takes_precedence(self, tmp_path, monkeypatch: pytest.MonkeyPatch):
        key_file = tmp_path / "map_photo.local"
        key_file.write_text(" local-key \n", encoding="utf-8")
        monkeypatch.setattr(settings, "MAP_PHOTO_LOCAL_FILE", str(key_file))
        monkeypatch.setattr(settings, "GMAPS_KEY", "env-key")
        assert settings.resolve_gmaps_key() == "local-key"
