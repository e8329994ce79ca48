"""스토리지 서비스 — S3 또는 로컬 파일 저장.

Storage Service — Object storage for inspection photos and map snapshots.
AWS 키가 비어있으면 자동으로 로컬 모드로 전환됩니다.
(Falls back to local disk under the uploads directory when AWS keys are blank.)

Key layout:
    {owner_id}/{epoch_ms}_{token}.{ext}     — 현장 사진 (field photos)
    map-photos/{type}-{id}.jpg              — 위성 지도 스냅샷 (map snapshots)
"""

import logging
import re
import secrets
import time
from pathlib import Path

from botocore.exceptions import BotoCoreError, ClientError

from app.config import settings
from app.utils.exceptions import StorageError

logger = logging.getLogger(__name__)

MAP_PHOTO_PREFIX = "map-photos"
DEFAULT_EXTENSION = "jpg"
_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")
_NON_KEY_TOKEN = re.compile(r"[^a-zA-Z0-9_-]")


def extension_for(content_type: str | None, filename: str | None) -> str:
    """업로드 확장자를 결정합니다.

    MIME subtype first, then the filename extension, then ``jpg``; the
    result keeps alphanumerics only (empty → ``jpg``).
    """
    ext = ""
    if content_type and "/" in content_type:
        ext = content_type.split("/", 1)[1].split(";", 1)[0]
    if not ext and filename and "." in filename:
        ext = filename.rsplit(".", 1)[-1]
    ext = _NON_ALNUM.sub("", ext or DEFAULT_EXTENSION).lower()
    return ext or DEFAULT_EXTENSION


def map_photo_key(target_type: str | None, target_id: str) -> str:
    """지도 스냅샷 경로 — map-photos/{sanitizedType}-{id}.jpg."""
    safe_type = _NON_KEY_TOKEN.sub("", target_type or "") or "map"
    return f"{MAP_PHOTO_PREFIX}/{safe_type}-{target_id}.jpg"


class StorageService:
    """파일 업로드 서비스 — S3 또는 로컬 모드 자동 선택."""

    def __init__(self) -> None:
        self._client = None

    @property
    def is_local(self) -> bool:
        return not settings.AWS_ACCESS_KEY_ID or not settings.AWS_S3_BUCKET

    @property
    def client(self):
        if self.is_local:
            return None
        if self._client is None:
            import boto3
            from botocore.config import Config as BotoConfig

            self._client = boto3.client(
                "s3",
                region_name=settings.AWS_S3_REGION,
                aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                config=BotoConfig(signature_version="s3v4"),
            )
        return self._client

    def generate_photo_key(
        self,
        owner_id: str,
        content_type: str | None,
        filename: str | None,
    ) -> str:
        """충돌하지 않는 사진 키 — {owner}/{epoch_ms}_{token}.{ext}."""
        epoch_ms = int(time.time() * 1000)
        token = secrets.token_hex(6)
        return f"{owner_id}/{epoch_ms}_{token}.{extension_for(content_type, filename)}"

    def public_url(self, key: str) -> str:
        if self.is_local:
            return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/uploads/{key}"
        return f"https://{settings.AWS_S3_BUCKET}.s3.{settings.AWS_S3_REGION}.amazonaws.com/{key}"

    def save_local(self, key: str, data: bytes, upsert: bool = False) -> str:
        """로컬 파일 저장. 경로를 반환합니다."""
        path: Path = settings.uploads_dir / key
        if path.exists() and not upsert:
            raise StorageError(f"Object already exists: {key}")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return str(path)

    def put_object(
        self,
        key: str,
        data: bytes,
        content_type: str,
        upsert: bool = False,
    ) -> str:
        """객체를 저장하고 공개 URL을 반환합니다.

        Store ``data`` under ``key`` and return its public URL. S3 writes
        always overwrite; local writes refuse to replace an existing file
        unless ``upsert`` is set.

        Raises:
            StorageError: 저장 실패 (Upload rejected or transport failure)
        """
        if self.is_local:
            try:
                self.save_local(key, data, upsert=upsert)
            except OSError as exc:
                logger.error("Local storage write failed for %s: %s", key, exc)
                raise StorageError(f"Upload failed: {exc}")
            return self.public_url(key)

        try:
            self.client.put_object(
                Bucket=settings.AWS_S3_BUCKET,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error("S3 upload failed for %s: %s", key, exc)
            raise StorageError(f"Upload failed: {exc}")
        return self.public_url(key)

    def get_object(self, key: str) -> bytes:
        """저장된 객체를 읽습니다.

        Raises:
            StorageError: 조회 실패 (Missing object or transport failure)
        """
        if self.is_local:
            path: Path = settings.uploads_dir / key
            try:
                return path.read_bytes()
            except OSError as exc:
                raise StorageError(f"Fetch failed: {exc}")
        try:
            response = self.client.get_object(Bucket=settings.AWS_S3_BUCKET, Key=key)
            return response["Body"].read()
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Fetch failed: {exc}")


storage_service: StorageService = StorageService()
