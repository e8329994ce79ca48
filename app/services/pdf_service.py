"""PDF 내보내기 서비스 — 보고서 HTML 템플릿을 래스터 PDF로 변환.

PDF export — Renders the same HTML used for the on-screen preview into a
raster-backed PDF. Each ``.pdf-page`` element becomes one landscape page
(1123×794 px at 96 DPI, i.e. A4), captured at 2× scale as a maximum
quality JPEG and assembled with Pillow.

The headless browser stack (Playwright) is imported lazily on first
render, so importing this module never requires a browser.
"""

import io
import logging
from dataclasses import dataclass, replace
from pathlib import Path

from PIL import Image

logger = logging.getLogger(__name__)

PAGE_WIDTH = 1123
PAGE_HEIGHT = 794
CSS_DPI = 96

_FONTS_READY_JS = """
() => (document.fonts && document.fonts.ready && typeof document.fonts.ready.then === "function")
    ? document.fonts.ready.then(() => true)
    : true
"""


@dataclass(frozen=True)
class PdfOptions:
    """PDF 출력 옵션 — 두 진입점이 공유합니다 (filename은 파일 저장 경로 전용)."""

    page_width: int = PAGE_WIDTH
    page_height: int = PAGE_HEIGHT
    margin: int = 0
    scale: int = 2
    image_quality: float = 1.0
    orientation: str = "landscape"
    page_selector: str = ".pdf-page"
    filename: str | None = None

    @property
    def jpeg_quality(self) -> int:
        return max(1, min(100, round(self.image_quality * 100)))

    @property
    def resolution(self) -> float:
        return float(CSS_DPI * self.scale)


DEFAULT_OPTIONS = PdfOptions()


async def render_pages(html: str, options: PdfOptions = DEFAULT_OPTIONS) -> list[bytes]:
    """HTML을 렌더링하고 ``.pdf-page``마다 JPEG 스크린샷을 반환합니다.

    Waits for web fonts before capturing. When the document has no page
    marker the whole viewport-width page is captured as one image.
    """
    from playwright.async_api import async_playwright

    async with async_playwright() as playwright:
        browser = await playwright.chromium.launch()
        try:
            page = await browser.new_page(
                viewport={"width": options.page_width, "height": options.page_height},
                device_scale_factor=options.scale,
            )
            await page.set_content(html, wait_until="networkidle")
            await page.evaluate(_FONTS_READY_JS)

            elements = await page.query_selector_all(options.page_selector)
            if not elements:
                return [await page.screenshot(type="jpeg", quality=options.jpeg_quality, full_page=True)]
            return [
                await element.screenshot(type="jpeg", quality=options.jpeg_quality)
                for element in elements
            ]
        finally:
            await browser.close()


def assemble_pdf(pages: list[bytes], options: PdfOptions = DEFAULT_OPTIONS) -> bytes:
    """JPEG 페이지 이미지들을 하나의 PDF로 묶습니다.

    Raises:
        ValueError: 페이지가 없을 때 (No pages rendered)
    """
    if not pages:
        raise ValueError("No pages to export")

    images = [Image.open(io.BytesIO(data)).convert("RGB") for data in pages]
    buffer = io.BytesIO()
    images[0].save(
        buffer,
        format="PDF",
        save_all=True,
        append_images=images[1:],
        resolution=options.resolution,
        quality=options.jpeg_quality,
    )
    return buffer.getvalue()


async def generate_pdf_bytes(html: str, options: PdfOptions = DEFAULT_OPTIONS) -> bytes:
    """메모리 내 PDF를 생성합니다 (업로드/미리보기 등 대체 전달용).

    Any failure is logged and re-raised; no retry and no partial output.
    """
    try:
        pages = await render_pages(html, options)
        return assemble_pdf(pages, options)
    except Exception:
        logger.exception("Error generating PDF")
        raise


async def save_pdf(
    html: str,
    filename: str = "report.pdf",
    options: PdfOptions = DEFAULT_OPTIONS,
    directory: Path | None = None,
) -> Path:
    """PDF를 생성해 파일로 저장하고 경로를 반환합니다."""
    options = replace(options, filename=filename)
    data = await generate_pdf_bytes(html, options)
    target = (directory or Path.cwd()) / options.filename
    try:
        target.write_bytes(data)
    except OSError:
        logger.exception("Error saving PDF to %s", target)
        raise
    return target
