"""
Renderer Module

Turns typed proposal content into documents:
- Classic-HTML and Modern-HTML string templates
- Classic-PDF built directly with reportlab
- HTML to PDF conversion (Playwright Chromium or WeasyPrint) with validation
"""

from .classic_html import ClassicConciseBuilder, ClassicDetailedBuilder
from .classic_pdf import ClassicPdfBuilder, render_classic_pdf
from .html_utils import escape_html, format_currency, format_number, slugify
from .modern_html import ModernHTMLBuilder, competitor_frequency_color
from .pdf import (
    BrowserPdfConverter,
    PDFRenderError,
    PdfOptions,
    WeasyPrintConverter,
    get_converter,
    preprocess_html_for_pdf,
    validate_pdf,
)
from .selector import (
    TEMPLATE_OPTIONS,
    RenderedDocument,
    get_proposal_filename,
    get_template_option,
    is_valid_template_style,
    render_proposal,
    render_proposal_html,
)

__all__ = [
    # Templates
    "ClassicConciseBuilder",
    "ClassicDetailedBuilder",
    "ClassicPdfBuilder",
    "ModernHTMLBuilder",
    "competitor_frequency_color",
    "render_classic_pdf",
    # HTML helpers
    "escape_html",
    "format_currency",
    "format_number",
    "slugify",
    # PDF conversion
    "BrowserPdfConverter",
    "PDFRenderError",
    "PdfOptions",
    "WeasyPrintConverter",
    "get_converter",
    "preprocess_html_for_pdf",
    "validate_pdf",
    # Selection
    "TEMPLATE_OPTIONS",
    "RenderedDocument",
    "get_proposal_filename",
    "get_template_option",
    "is_valid_template_style",
    "render_proposal",
    "render_proposal_html",
]
