"""
HTML to PDF Conversion

Two engines behind one async interface:
- BrowserPdfConverter: headless Chromium via Playwright (handles the
  Tailwind/JS modern template)
- WeasyPrintConverter: no browser needed, classic HTML templates only

Every result is validated before it is returned; a buffer that is empty,
lacks the %PDF- header or is implausibly small raises PDFRenderError.
"""

import asyncio
import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF-"
MIN_PDF_BYTES = 1024

BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
]

IMAGE_WAIT_MS = 3000
SELECTOR_WAIT_MS = 5000
SETTLE_MS = 1000

PDF_OPTIMIZATION_CSS = """
  @media print {
    * {
      -webkit-print-color-adjust: exact !important;
      print-color-adjust: exact !important;
      color-adjust: exact !important;
    }
    .page, .content-page, .package-card, .competitor-card, table {
      page-break-inside: avoid !important;
    }
    .page { page-break-after: always !important; }
    .page:last-child { page-break-after: auto !important; }
    body { background: white !important; }
    table { border-collapse: collapse !important; }
    td, th { border: 1px solid #ddd !important; }
    .animate-on-scroll { opacity: 1 !important; }
  }
  img, svg, canvas {
    max-width: 100% !important;
    height: auto !important;
  }
"""

# Waits for every <img> to load or fail, capped at IMAGE_WAIT_MS
_WAIT_FOR_IMAGES_JS = """
(timeout) => new Promise((resolve) => {
    const images = Array.from(document.querySelectorAll('img'));
    let pending = images.filter((img) => !img.complete).length;
    if (pending === 0) { resolve(); return; }
    const done = () => { pending -= 1; if (pending <= 0) resolve(); };
    images.forEach((img) => {
        if (!img.complete) {
            img.addEventListener('load', done);
            img.addEventListener('error', done);
        }
    });
    setTimeout(resolve, timeout);
})
"""


class PDFRenderError(Exception):
    """HTML to PDF conversion failed or produced garbage."""
    pass


@dataclass
class PdfOptions:
    """Page setup for a conversion."""
    format: str = "A4"
    margin: Dict[str, str] = field(default_factory=lambda: {
        "top": "20mm", "right": "15mm", "bottom": "20mm", "left": "15mm",
    })
    viewport_width: int = 1920
    viewport_height: int = 1080
    scale: float = 1.0
    print_background: bool = True
    wait_for_selectors: List[str] = field(default_factory=list)
    extra_css: str = ""


def validate_pdf(pdf_bytes: Optional[bytes]) -> bool:
    """True when the buffer looks like a real PDF."""
    if not pdf_bytes:
        return False
    if not pdf_bytes.startswith(PDF_MAGIC):
        return False
    return len(pdf_bytes) >= MIN_PDF_BYTES


def ensure_valid_pdf(pdf_bytes: Optional[bytes]) -> bytes:
    if not validate_pdf(pdf_bytes):
        size = len(pdf_bytes) if pdf_bytes else 0
        raise PDFRenderError(f"Renderer produced an invalid PDF ({size} bytes)")
    return pdf_bytes


def inject_print_css(html: str, extra_css: str = "") -> str:
    """Insert the print overrides just before </head>."""
    style = f"<style>{PDF_OPTIMIZATION_CSS}{extra_css}</style></head>"
    if "</head>" in html:
        return html.replace("</head>", style, 1)
    return f"<head>{style}{html}"


def preprocess_html_for_pdf(html: str) -> str:
    """Strip CSS that renders badly in print: transforms and sticky positioning."""
    processed = re.sub(r"transform:\s*[^;\"]+;", "", html, flags=re.IGNORECASE)
    processed = re.sub(r"position:\s*sticky", "position: relative", processed, flags=re.IGNORECASE)
    return processed


class BrowserPdfConverter:
    """
    Headless Chromium converter.

    A fresh browser is launched per conversion and always closed, even when
    the conversion fails.
    """

    engine = "chromium"
    supports_scripts = True

    async def convert(self, html: str, options: Optional[PdfOptions] = None) -> bytes:
        options = options or PdfOptions()
        prepared = inject_print_css(preprocess_html_for_pdf(html), options.extra_css)

        try:
            async with async_playwright() as p:
                browser = await p.chromium.launch(headless=True, args=BROWSER_ARGS)
                try:
                    page = await browser.new_page(viewport={
                        "width": options.viewport_width,
                        "height": options.viewport_height,
                    })
                    await page.set_content(prepared, wait_until="networkidle")

                    for selector in options.wait_for_selectors:
                        try:
                            await page.wait_for_selector(selector, timeout=SELECTOR_WAIT_MS)
                        except PlaywrightTimeoutError:
                            logger.warning(f"Selector {selector} not found, continuing")

                    await page.evaluate(_WAIT_FOR_IMAGES_JS, IMAGE_WAIT_MS)
                    await page.evaluate("() => { window.scrollTo(0, document.body.scrollHeight); window.scrollTo(0, 0); }")
                    await page.wait_for_timeout(SETTLE_MS)

                    pdf_bytes = await page.pdf(
                        format=options.format,
                        margin=options.margin,
                        print_background=options.print_background,
                        scale=options.scale,
                        prefer_css_page_size=False,
                    )
                finally:
                    await browser.close()
        except PlaywrightError as e:
            logger.error(f"Browser PDF generation failed: {e}")
            raise PDFRenderError(f"Browser PDF generation failed: {e}") from e

        logger.info(f"Generated PDF: {len(pdf_bytes)} bytes")
        return ensure_valid_pdf(pdf_bytes)


class WeasyPrintConverter:
    """Converter for environments without a browser. Ignores JavaScript."""

    engine = "weasyprint"
    supports_scripts = False

    async def convert(self, html: str, options: Optional[PdfOptions] = None) -> bytes:
        options = options or PdfOptions()
        prepared = inject_print_css(preprocess_html_for_pdf(html), options.extra_css)
        pdf_bytes = await asyncio.to_thread(self._html_to_pdf, prepared)
        return ensure_valid_pdf(pdf_bytes)

    def _html_to_pdf(self, html_content: str) -> bytes:
        # WeasyPrint loads Pango on import
        from weasyprint import HTML

        try:
            pdf_bytes = HTML(string=html_content).write_pdf()
            logger.info(f"Generated PDF: {len(pdf_bytes)} bytes")
            return pdf_bytes
        except Exception as e:
            logger.error(f"PDF generation failed: {e}")
            raise PDFRenderError(f"PDF generation failed: {e}") from e


def get_converter(engine: str):
    """
    HTML to PDF converter for an engine name.

    Returns None for "reportlab", which renders classic PDFs without HTML.
    """
    engine = (engine or "reportlab").lower()
    if engine == "reportlab":
        return None
    if engine == "weasyprint":
        return WeasyPrintConverter()
    if engine != "chromium":
        logger.warning(f"Unknown PDF engine '{engine}', using chromium")
    return BrowserPdfConverter()
