"""사진 업로드 파이프라인 테스트 — 대기 카운터, 소유자 검사, 슬롯 갱신 규칙.

Upload pipeline tests — pending counter bookkeeping, owner requirement,
and the slot staleness guard with exactly-once preview revocation.
"""

import asyncio
import re
from pathlib import Path
from urllib.parse import urlparse
from urllib.request import url2pathname

import pytest
from httpx import AsyncClient

from app.services.image_service import PhotoFile
from app.services.upload_service import PhotoUploadPipeline, upload_pipeline
from app.utils.exceptions import StorageError, UnauthorizedError
from tests.conftest import auth_header

PHOTO = PhotoFile(name="a.jpg", content_type="image/jpeg", data=b"jpeg-bytes")


def _preview_path(url: str) -> Path:
    return Path(url2pathname(urlparse(url).path))


class _Slot:
    def __init__(self, value: str = "") -> None:
        self.value = value

    def read(self) -> str:
        return self.value

    def write(self, value: str) -> None:
        self.value = value


class _GatedStore:
    """업로드를 외부 신호까지 멈춰두는 대체 저장 함수."""

    def __init__(self, result: str = "https://cdn/u/1.jpg", error: Exception | None = None) -> None:
        self.started = asyncio.Event()
        self.release = asyncio.Event()
        self.result = result
        self.error = error

    async def __call__(self, file, owner_id) -> str:
        self.started.set()
        await self.release.wait()
        if self.error is not None:
            raise self.error
        return self.result


class TestPendingCounter:
    """대기 중 업로드 카운터 테스트."""

    async def test_counter_tracks_in_flight_upload(self, monkeypatch: pytest.MonkeyPatch):
        pipeline = PhotoUploadPipeline()
        store = _GatedStore()
        monkeypatch.setattr(pipeline, "_store", store)

        task = asyncio.create_task(pipeline.upload_photo(PHOTO, "owner"))
        await store.started.wait()
        assert pipeline.pending == 1
        assert pipeline.has_pending

        store.release.set()
        assert await task == "https://cdn/u/1.jpg"
        assert pipeline.pending == 0

    async def test_counter_released_on_failure(self, monkeypatch: pytest.MonkeyPatch):
        pipeline = PhotoUploadPipeline()
        store = _GatedStore(error=StorageError("boom"))
        store.release.set()
        monkeypatch.setattr(pipeline, "_store", store)

        with pytest.raises(StorageError):
            await pipeline.upload(PHOTO, "owner")
        assert pipeline.pending == 0

    async def test_missing_owner_is_auth_error(self):
        pipeline = PhotoUploadPipeline()
        with pytest.raises(UnauthorizedError):
            await pipeline.upload_photo(PHOTO, None)
        assert pipeline.pending == 0

    async def test_upload_stores_under_owner_prefix(self, uploads_dir):
        pipeline = PhotoUploadPipeline()
        url = await pipeline.upload(PHOTO, "owner-7")
        assert re.search(r"/uploads/owner-7/\d+_[0-9a-f]{12}\.jpeg$", url)
        key = url.split("/uploads/", 1)[1]
        assert (uploads_dir / key).read_bytes() == b"jpeg-bytes"


    async def test_counter_is_scoped_per_owner(self, monkeypatch: pytest.MonkeyPatch):
        pipeline = PhotoUploadPipeline()
        store = _GatedStore()
        monkeypatch.setattr(pipeline, "_store", store)

        task = asyncio.create_task(pipeline.upload_photo(PHOTO, "owner-a"))
        await store.started.wait()
        assert pipeline.pending_for("owner-a") == 1
        assert pipeline.pending_for("owner-b") == 0

        store.release.set()
        await task
        assert pipeline.pending_for("owner-a") == 0


class TestUploadToSlot:
    """슬롯 업로드 테스트 — 미리보기 후 원격 URL로 교체."""

    async def test_success_replaces_preview(self, monkeypatch: pytest.MonkeyPatch):
        pipeline = PhotoUploadPipeline()
        store = _GatedStore()
        monkeypatch.setattr(pipeline, "_store", store)
        slot = _Slot()

        task = asyncio.create_task(pipeline.upload_to_slot(slot.read, slot.write, PHOTO, "owner"))
        await store.started.wait()
        preview_url = slot.value
        assert preview_url.startswith("file:")
        assert _preview_path(preview_url).exists()

        store.release.set()
        assert await task == "https://cdn/u/1.jpg"
        assert slot.value == "https://cdn/u/1.jpg"
        assert not _preview_path(preview_url).exists()

    async def test_stale_slot_is_not_overwritten(self, monkeypatch: pytest.MonkeyPatch):
        """업로드 중 사용자가 슬롯을 바꾸면 결과를 버림."""
        pipeline = PhotoUploadPipeline()
        store = _GatedStore()
        monkeypatch.setattr(pipeline, "_store", store)
        slot = _Slot()

        task = asyncio.create_task(pipeline.upload_to_slot(slot.read, slot.write, PHOTO, "owner"))
        await store.started.wait()
        preview_url = slot.value
        slot.write("")  # 사용자가 사진을 지움

        store.release.set()
        assert await task is None
        assert slot.value == ""
        assert not _preview_path(preview_url).exists()

    async def test_failure_clears_own_preview(self, monkeypatch: pytest.MonkeyPatch):
        pipeline = PhotoUploadPipeline()
        store = _GatedStore(error=StorageError("boom"))
        store.release.set()
        monkeypatch.setattr(pipeline, "_store", store)
        slot = _Slot("https://cdn/old.jpg")

        with pytest.raises(StorageError):
            await pipeline.upload_to_slot(slot.read, slot.write, PHOTO, "owner")
        assert slot.value == ""
        assert pipeline.pending == 0

    async def test_failure_keeps_newer_value(self, monkeypatch: pytest.MonkeyPatch):
        pipeline = PhotoUploadPipeline()
        store = _GatedStore(error=StorageError("boom"))
        monkeypatch.setattr(pipeline, "_store", store)
        slot = _Slot()

        task = asyncio.create_task(pipeline.upload_to_slot(slot.read, slot.write, PHOTO, "owner"))
        await store.started.wait()
        slot.write("https://cdn/replacement.jpg")
        store.release.set()

        with pytest.raises(StorageError):
            await task
        assert slot.value == "https://cdn/replacement.jpg"


    async def test_unexpected_error_clears_preview(self, monkeypatch: pytest.MonkeyPatch):
        """저장 오류가 아닌 예외에도 미리보기 URL이 슬롯에 남지 않음."""
        pipeline = PhotoUploadPipeline()
        store = _GatedStore(error=RuntimeError("disk gone"))
        monkeypatch.setattr(pipeline, "_store", store)
        slot = _Slot()

        task = asyncio.create_task(pipeline.upload_to_slot(slot.read, slot.write, PHOTO, "owner"))
        await store.started.wait()
        preview_url = slot.value
        store.release.set()

        with pytest.raises(RuntimeError):
            await task
        assert slot.value == ""
        assert not _preview_path(preview_url).exists()
        assert pipeline.pending == 0

    async def test_last_initiated_upload_wins(self, monkeypatch: pytest.MonkeyPatch):
        """같은 슬롯에 연속 업로드 — 나중에 시작한 업로드가 슬롯을 차지."""
        pipeline = PhotoUploadPipeline()
        first_store = _GatedStore(result="https://cdn/u/first.jpg")
        second_store = _GatedStore(result="https://cdn/u/second.jpg")
        stores = iter([first_store, second_store])

        async def _store(file, owner_id):
            return await next(stores)(file, owner_id)

        monkeypatch.setattr(pipeline, "_store", _store)
        slot = _Slot()

        first = asyncio.create_task(pipeline.upload_to_slot(slot.read, slot.write, PHOTO, "owner"))
        await first_store.started.wait()
        first_preview = slot.value
        second = asyncio.create_task(pipeline.upload_to_slot(slot.read, slot.write, PHOTO, "owner"))
        await second_store.started.wait()
        second_preview = slot.value
        assert first_preview != second_preview

        # 역순으로 완료 — second resolves before first
        second_store.release.set()
        assert await second == "https://cdn/u/second.jpg"
        first_store.release.set()
        assert await first is None

        assert slot.value == "https://cdn/u/second.jpg"
        assert not _preview_path(first_preview).exists()
        assert not _preview_path(second_preview).exists()
        assert pipeline.pending == 0


class TestPhotoEndpoint:
    """사진 업로드 API 테스트."""

    async def test_upload_photo(self, client: AsyncClient, tech_token, tech_user):
        res = await client.post(
            "/api/v1/field/photos/",
            files={"file": ("p.jpg", b"small-jpeg", "image/jpeg")},
            headers=auth_header(tech_token),
        )
        assert res.status_code == 201
        assert f"/uploads/{tech_user.id}/" in res.json()["url"]
        assert upload_pipeline.pending == 0

    async def test_upload_empty_file(self, client: AsyncClient, tech_token):
        res = await client.post(
            "/api/v1/field/photos/",
            files={"file": ("p.jpg", b"", "image/jpeg")},
            headers=auth_header(tech_token),
        )
        assert res.status_code == 400

    async def test_upload_requires_auth(self, client: AsyncClient):
        res = await client.post("/api/v1/field/photos/", files={"file": ("p.jpg", b"x", "image/jpeg")})
        assert res.status_code in (401, 403)

    async def test_pending_count(self, client: AsyncClient, tech_token):
        res = await client.get("/api/v1/field/photos/pending", headers=auth_header(tech_token))
        assert res.status_code == 200
        assert res.json() == {"pending": 0}

    async def test_pending_count_is_per_user(
        self, client: AsyncClient, tech_token, admin_token, admin_user, monkeypatch: pytest.MonkeyPatch
    ):
        store = _GatedStore()
        monkeypatch.setattr(upload_pipeline, "_store", store)

        task = asyncio.create_task(upload_pipeline.upload_photo(PHOTO, admin_user.id))
        await store.started.wait()
        try:
            own = await client.get("/api/v1/field/photos/pending", headers=auth_header(admin_token))
            other = await client.get("/api/v1/field/photos/pending", headers=auth_header(tech_token))
        finally:
            store.release.set()
            await task

        assert own.json() == {"pending": 1}
        assert other.json() == {"pending": 0}
