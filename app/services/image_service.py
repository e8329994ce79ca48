"""사진 압축 서비스 — 업로드 전 JPEG 재인코딩.

Photo compression — Produces a size-bounded JPEG before upload. The
operation is best-effort: the caller falls back to the original file on
timeout or failure.

Algorithm:
    1. size <= target 이면 원본 그대로 반환 (identity fast path)
    2. 긴 변을 max_dimension으로 축소, 확대는 하지 않음 (no upscaling)
    3. JPEG 품질 72부터 8씩 낮추며 재인코딩, size > target 이고
       quality > 58 인 동안만 반복 (strict floor; encodes at 72, 64, 56)
"""

import asyncio
import io
import logging
import time
from dataclasses import dataclass

from PIL import Image, ImageOps, features

from app.config import settings

logger = logging.getLogger(__name__)

INITIAL_QUALITY = 72
QUALITY_STEP = 8
QUALITY_FLOOR = 58


@dataclass(frozen=True)
class PhotoFile:
    """업로드 대상 파일 — 이름, MIME 타입, 바이트 데이터."""

    name: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


def can_encode_jpeg() -> bool:
    """이미지 백엔드가 JPEG 인코더를 제공하는지 확인합니다."""
    return bool(features.check("jpg"))


def _scaled_size(width: int, height: int, max_dimension: int) -> tuple[int, int]:
    if width > height:
        if width > max_dimension:
            return max_dimension, max(1, round(height * max_dimension / width))
    elif height > max_dimension:
        return max(1, round(width * max_dimension / height)), max_dimension
    return width, height


def _encode(image: Image.Image, quality: int) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="JPEG", quality=quality, optimize=True)
    return buffer.getvalue()


def compress(
    file: PhotoFile,
    max_dimension: int = 1400,
    target_size_kb: int = 900,
) -> PhotoFile:
    """사진을 크기 제한 JPEG로 압축합니다.

    Compress ``file`` into a JPEG whose longer edge is at most
    ``max_dimension`` px, lowering quality in bounded steps until it fits
    ``target_size_kb`` or the quality floor is reached.

    Args:
        file: 원본 사진 (Original photo)
        max_dimension: 긴 변 최대 픽셀 (Longest edge in px)
        target_size_kb: 목표 크기 KB (Target size in KB)

    Returns:
        PhotoFile: 압축된 파일 또는 원본 (Compressed file, or the original
            when it already fits or no JPEG encoder is available)

    Raises:
        PIL.UnidentifiedImageError: 디코딩 불가 이미지 (Undecodable image)
        PIL.Image.DecompressionBombError: 픽셀 수 한도 초과 (Pixel count over the safety limit)
    """
    target_bytes = target_size_kb * 1024
    if file.size <= target_bytes:
        return file
    if not can_encode_jpeg():
        return file

    with Image.open(io.BytesIO(file.data)) as source:
        image = ImageOps.exif_transpose(source)
        if image.mode != "RGB":
            image = image.convert("RGB")
        width, height = _scaled_size(image.width, image.height, max_dimension)
        if (width, height) != image.size:
            image = image.resize((width, height), Image.Resampling.LANCZOS)

        quality = INITIAL_QUALITY
        encoded = _encode(image, quality)
        while len(encoded) > target_bytes and quality > QUALITY_FLOOR:
            quality -= QUALITY_STEP
            encoded = _encode(image, quality)

    return PhotoFile(
        name=f"{int(time.time() * 1000)}.jpg",
        content_type="image/jpeg",
        data=encoded,
    )


async def compress_with_timeout(
    file: PhotoFile,
    timeout_ms: int | None = None,
    max_dimension: int | None = None,
    target_size_kb: int | None = None,
) -> PhotoFile:
    """제한 시간 안에 압축하고, 실패하면 원본을 반환합니다.

    Run :func:`compress` in a worker thread raced against the compression
    budget. A timeout, any compression error (undecodable input, an
    oversized image) or an empty result logs a warning and returns the
    original file.
    """
    budget_ms = timeout_ms if timeout_ms is not None else settings.PHOTO_COMPRESSION_TIMEOUT_MS
    try:
        result = await asyncio.wait_for(
            asyncio.to_thread(
                compress,
                file,
                max_dimension or settings.PHOTO_MAX_DIMENSION,
                target_size_kb or settings.PHOTO_TARGET_SIZE_KB,
            ),
            budget_ms / 1000,
        )
    except asyncio.TimeoutError:
        logger.warning("Photo compression timed out after %d ms; uploading original", budget_ms)
        return file
    except Exception as exc:
        logger.warning("Photo compression failed (%s: %s); uploading original", type(exc).__name__, exc)
        return file

    if result.size == 0:
        logger.warning("Photo compression produced an empty file; uploading original")
        return file
    return result
