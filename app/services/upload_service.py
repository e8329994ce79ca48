"""사진 업로드 파이프라인 — 압축, 업로드, 대기 카운터, 슬롯 갱신.

Photo upload pipeline. Uploads go to object storage under a deterministic
owner-prefixed key and resolve to a public URL. A pending-uploads counter
gates saving while uploads are in flight.

Slot uploads show a temporary local preview first. When the remote URL
resolves, the slot is updated only if it still holds that same preview
(staleness guard), so a slow upload never resurrects a photo the user has
since cleared or replaced. The preview is revoked exactly once.
"""

import asyncio
import logging
import tempfile
from collections import Counter
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from uuid import UUID

from app.services.image_service import PhotoFile, compress_with_timeout
from app.services.storage_service import extension_for, storage_service
from app.utils.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)


class LocalPreview:
    """업로드 중 표시되는 임시 로컬 미리보기.

    Short-lived local reference (a temp file URI) shown in a slot while the
    remote upload is pending.
    """

    def __init__(self, file: PhotoFile) -> None:
        suffix = "." + extension_for(file.content_type, file.name)
        with tempfile.NamedTemporaryFile(prefix="preview_", suffix=suffix, delete=False) as handle:
            handle.write(file.data)
            self._path = Path(handle.name)
        self.url: str = self._path.as_uri()
        self.revoked: bool = False

    def revoke(self) -> None:
        """미리보기를 해제합니다 — 여러 번 호출해도 한 번만 해제."""
        if self.revoked:
            return
        self.revoked = True
        self._path.unlink(missing_ok=True)


class PhotoUploadPipeline:
    """사진 업로드 파이프라인.

    Attributes:
        pending: 진행 중인 업로드 수 (Uploads currently in flight)

    The workspace editor owns one pipeline per open report, so ``pending``
    is that page's counter. The process-wide ``upload_pipeline`` behind the
    photo endpoint serves every user; callers there read
    :meth:`pending_for` to see only their own uploads.
    """

    def __init__(self) -> None:
        self._pending: int = 0
        self._pending_by_owner: Counter[str] = Counter()

    @property
    def pending(self) -> int:
        return self._pending

    @property
    def has_pending(self) -> bool:
        return self._pending > 0

    def pending_for(self, owner_id: UUID | str) -> int:
        """특정 소유자의 진행 중 업로드 수."""
        return self._pending_by_owner[str(owner_id)]

    @contextmanager
    def _track(self, owner_id: UUID | str) -> Iterator[None]:
        # 시작 전 증가, finally에서 감소 (0 미만 없음)
        owner = str(owner_id)
        self._pending += 1
        self._pending_by_owner[owner] += 1
        try:
            yield
        finally:
            self._pending = max(0, self._pending - 1)
            self._pending_by_owner[owner] -= 1
            if self._pending_by_owner[owner] <= 0:
                del self._pending_by_owner[owner]

    async def upload(self, file: PhotoFile, owner_id: UUID | str | None) -> str:
        """파일을 스토리지에 업로드하고 공개 URL을 반환합니다.

        The pending counter is incremented before work starts and
        decremented in ``finally`` regardless of outcome.

        Raises:
            UnauthorizedError: 소유자(인증 사용자)가 없을 때 (No authenticated owner)
            StorageError: 스토리지 업로드 실패 (Storage failure)
        """
        if not owner_id:
            raise UnauthorizedError("Sign in to upload photos")

        with self._track(owner_id):
            return await self._store(file, owner_id)

    async def upload_photo(self, file: PhotoFile, owner_id: UUID | str | None) -> str:
        """압축(실패 시 원본) 후 업로드합니다.

        The upload counts as pending from the start of compression.
        """
        if not owner_id:
            raise UnauthorizedError("Sign in to upload photos")

        with self._track(owner_id):
            compressed = await compress_with_timeout(file)
            return await self._store(compressed, owner_id)

    async def _store(self, file: PhotoFile, owner_id: UUID | str) -> str:
        key = storage_service.generate_photo_key(str(owner_id), file.content_type, file.name)
        return await asyncio.to_thread(
            storage_service.put_object,
            key,
            file.data,
            file.content_type or "application/octet-stream",
        )

    async def upload_to_slot(
        self,
        read_slot: Callable[[], str],
        write_slot: Callable[[str], None],
        file: PhotoFile,
        owner_id: UUID | str | None,
    ) -> str | None:
        """슬롯에 미리보기를 넣고 업로드 후 원격 URL로 교체합니다.

        Place a local preview in the slot, upload, then write the remote
        URL only if the slot still holds the preview. On failure the slot is
        cleared under the same guard and the error is re-raised. The slot is
        read through ``read_slot`` at resolution time, never captured.

        Returns:
            str | None: 원격 URL, 슬롯이 그사이 바뀌었으면 None
                        (Remote URL, or None when the slot went stale)
        """
        preview = LocalPreview(file)
        write_slot(preview.url)
        try:
            url = await self.upload_photo(file, owner_id)
        except Exception:
            if read_slot() == preview.url:
                write_slot("")
            raise
        finally:
            preview.revoke()

        if read_slot() != preview.url:
            logger.info("Discarding stale upload; slot changed while uploading")
            return None
        write_slot(url)
        return url


# 프로세스 전역 파이프라인 — Process-wide pipeline used by the photo endpoint
upload_pipeline: PhotoUploadPipeline = PhotoUploadPipeline()
