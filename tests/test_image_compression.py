"""사진 압축 테스트 — 크기 제한, 품질 단계, 실패 시 원본 반환.

Photo compression tests.
"""

import io
import os
import time

import pytest
from PIL import Image

from app.services import image_service
from app.services.image_service import PhotoFile, compress, compress_with_timeout


def _noise_photo(width: int, height: int, fmt: str = "PNG") -> PhotoFile:
    image = Image.frombytes("RGB", (width, height), os.urandom(width * height * 3))
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return PhotoFile(name=f"photo.{fmt.lower()}", content_type=f"image/{fmt.lower()}", data=buffer.getvalue())


class TestCompress:
    """compress() 테스트."""

    def test_small_file_returned_unchanged(self):
        original = PhotoFile(name="a.jpg", content_type="image/jpeg", data=b"x" * 100)
        assert compress(original, target_size_kb=1) is original

    def test_large_photo_downscaled_to_jpeg(self):
        original = _noise_photo(2000, 1000)
        result = compress(original, max_dimension=1400, target_size_kb=900)

        assert result.content_type == "image/jpeg"
        assert result.name.endswith(".jpg")
        assert result.size < original.size
        with Image.open(io.BytesIO(result.data)) as img:
            assert img.format == "JPEG"
            assert img.size == (1400, 700)

    def test_portrait_keeps_aspect_ratio(self):
        original = _noise_photo(600, 1200)
        result = compress(original, max_dimension=300, target_size_kb=1)
        with Image.open(io.BytesIO(result.data)) as img:
            assert img.size == (150, 300)

    def test_never_upscales(self):
        original = _noise_photo(200, 100)
        result = compress(original, max_dimension=1400, target_size_kb=1)
        with Image.open(io.BytesIO(result.data)) as img:
            assert img.size == (200, 100)

    def test_quality_steps_stop_at_floor(self, monkeypatch: pytest.MonkeyPatch):
        """품질 72 → 64 → 56 에서 멈춤."""
        qualities: list[int] = []

        def _fake_encode(image, quality):
            qualities.append(quality)
            return b"x" * 4096

        monkeypatch.setattr(image_service, "_encode", _fake_encode)
        result = compress(_noise_photo(64, 64), target_size_kb=1)
        assert qualities == [72, 64, 56]
        assert result.size == 4096

    def test_exif_orientation_applied(self):
        image = Image.new("RGB", (200, 100), "red")
        exif = Image.Exif()
        exif[0x0112] = 6  # 90° 회전
        buffer = io.BytesIO()
        image.save(buffer, format="JPEG", exif=exif)
        original = PhotoFile(name="r.jpg", content_type="image/jpeg", data=buffer.getvalue())

        result = compress(original, target_size_kb=0)
        with Image.open(io.BytesIO(result.data)) as img:
            assert img.size == (100, 200)

    def test_no_jpeg_encoder_returns_original(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(image_service, "can_encode_jpeg", lambda: False)
        original = _noise_photo(64, 64)
        assert compress(original, target_size_kb=0) is original


class TestCompressWithTimeout:
    """compress_with_timeout() 테스트 — 항상 업로드 가능한 파일을 반환."""

    async def test_undecodable_returns_original(self):
        original = PhotoFile(name="a.jpg", content_type="image/jpeg", data=b"not an image" * 200)
        assert await compress_with_timeout(original, target_size_kb=1) is original

    async def test_timeout_returns_original(self, monkeypatch: pytest.MonkeyPatch):
        def _slow(file, max_dimension, target_size_kb):
            time.sleep(0.3)
            return file

        monkeypatch.setattr(image_service, "compress", _slow)
        original = PhotoFile(name="a.jpg", content_type="image/jpeg", data=b"x")
        assert await compress_with_timeout(original, timeout_ms=10) is original

    async def test_empty_result_returns_original(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(
            image_service, "compress",
            lambda file, max_dimension, target_size_kb: PhotoFile("e.jpg", "image/jpeg", b""),
        )
        original = PhotoFile(name="a.jpg", content_type="image/jpeg", data=b"x")
        assert await compress_with_timeout(original) is original

    async def test_success_returns_compressed(self):
        original = _noise_photo(1600, 800)
        result = await compress_with_timeout(original, timeout_ms=10000, max_dimension=800, target_size_kb=100)
        assert result is not original
        assert result.content_type == "image/jpeg"

    async def test_oversized_image_returns_original(self, monkeypatch: pytest.MonkeyPatch):
        """픽셀 수 한도를 넘는 이미지는 원본 그대로 업로드."""
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)
        original = _noise_photo(200, 100)
        assert await compress_with_timeout(original, target_size_kb=1) is original

    async def test_unexpected_error_returns_original(self, monkeypatch: pytest.MonkeyPatch):
        def _broken(file, max_dimension, target_size_kb):
            raise RuntimeError("encoder crashed")

        monkeypatch.setattr(image_service, "compress", _broken)
        original = PhotoFile(name="a.jpg", content_type="image/jpeg", data=b"x")
        assert await compress_with_timeout(original) is original
