"""
Template Selector

Routes proposal content to a template family:
- classic: Classic-HTML, or the reportlab Classic-PDF for PDF output
- modern: Modern-HTML, converted by the browser for PDF output

The content kind is read from the `kind` tag and matched exhaustively.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Literal, Optional, Union

from ..content.schemas import ConciseProposal, DetailedProposal, load_proposal_content
from ..research.models import ResearchResult
from .classic_html import render_classic_concise_html, render_classic_detailed_html
from .classic_pdf import render_classic_pdf
from .html_utils import slugify
from .modern_html import render_modern_html
from .pdf import PDFRenderError, PdfOptions, ensure_valid_pdf, get_converter

logger = logging.getLogger(__name__)

TemplateStyle = Literal["classic", "modern"]
OutputFormat = Literal["pdf", "html"]

DEFAULT_TEMPLATE_STYLE = "classic"

TEMPLATE_OPTIONS: List[Dict[str, Any]] = [
    {
        "id": "classic",
        "name": "Classic Template",
        "description": "Traditional PDF-style layout. Perfect for formal proposals and attachments.",
        "features": [
            "Professional PDF appearance",
            "Detailed technical sections",
            "Printable format",
            "Comprehensive analysis",
        ],
        "bestFor": [
            "Formal RFP responses",
            "Email attachments",
            "Print distribution",
            "Technical stakeholders",
        ],
    },
    {
        "id": "modern",
        "name": "Modern Template",
        "description": "Beautiful web-first design. Perfect for client presentations and sharing.",
        "features": [
            "Mobile-responsive layout",
            "Video testimonials embedded",
            "Interactive presentation mode",
            "Beautiful Tailwind CSS styling",
        ],
        "bestFor": [
            "Client presentations",
            "Screen sharing during calls",
            "Mobile viewing",
            "Social proof with videos",
        ],
    },
]


@dataclass
class RenderedDocument:
    """A rendered proposal ready to store."""
    filename: str
    content_type: str
    data: bytes
    template_style: str
    kind: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_pdf(self) -> bool:
        return self.content_type == "application/pdf"

    @property
    def size_bytes(self) -> int:
        return len(self.data)


def is_valid_template_style(style: Optional[str]) -> bool:
    return style in ("classic", "modern")


def get_template_option(style: str) -> Optional[Dict[str, Any]]:
    return next((option for option in TEMPLATE_OPTIONS if option["id"] == style), None)


def get_proposal_filename(
    company_name: str,
    proposal_number: Optional[str] = None,
    extension: str = "pdf",
    today: Optional[date] = None,
) -> str:
    """
    Download filename for a proposal.

    seo-proposal-{number}-{slug}.pdf when numbered, otherwise
    seo-proposal-{slug}-{YYYY-MM-DD}.pdf.
    """
    slug = slugify(company_name)
    if proposal_number:
        return f"seo-proposal-{proposal_number}-{slug}.{extension}"
    day = (today or date.today()).isoformat()
    return f"seo-proposal-{slug}-{day}.{extension}"


def _coerce_content(content: Union[DetailedProposal, ConciseProposal, Dict[str, Any]]):
    if isinstance(content, (DetailedProposal, ConciseProposal)):
        return content
    return load_proposal_content(content)


def _company_name(content: Union[DetailedProposal, ConciseProposal], company_name: Optional[str]) -> str:
    return company_name or content.company_name or content.cover_page.prepared_for


def render_proposal_html(
    content: Union[DetailedProposal, ConciseProposal, Dict[str, Any]],
    template_style: str = DEFAULT_TEMPLATE_STYLE,
    company_name: Optional[str] = None,
    research: Optional[ResearchResult] = None,
    package_tier: Optional[str] = None,
) -> str:
    """
    Render proposal content as a full HTML document.

    Raises:
        ValueError: Unknown template style or content kind
    """
    content = _coerce_content(content)
    name = _company_name(content, company_name)

    if template_style == "modern":
        return render_modern_html(content, name, research, package_tier)
    if template_style != "classic":
        raise ValueError(f"Unknown template style: {template_style}")

    if content.kind == "concise":
        return render_classic_concise_html(content, name)
    if content.kind == "detailed":
        return render_classic_detailed_html(content, research)
    raise ValueError(f"Unknown proposal kind: {content.kind}")


async def render_proposal(
    content: Union[DetailedProposal, ConciseProposal, Dict[str, Any]],
    template_style: str = DEFAULT_TEMPLATE_STYLE,
    output: str = "pdf",
    company_name: Optional[str] = None,
    research: Optional[ResearchResult] = None,
    package_tier: Optional[str] = None,
    proposal_number: Optional[str] = None,
    pdf_engine: str = "reportlab",
    converter: Any = None,
    pdf_options: Optional[PdfOptions] = None,
) -> RenderedDocument:
    """
    Render proposal content into a storable document.

    Args:
        content: Typed proposal content (or its stored dict form)
        template_style: "classic" or "modern"
        output: "pdf" or "html"
        company_name: Overrides the name carried by the content
        research: Research for real competitor/keyword data
        package_tier: Tier the proposal quotes (modern investment card)
        proposal_number: Used in the filename when known
        pdf_engine: How classic PDFs are made: reportlab, chromium or weasyprint
        converter: HTML to PDF converter, overriding pdf_engine

    Raises:
        PDFRenderError: Conversion failed or produced an invalid PDF
        ValueError: Unknown template style or output format
    """
    if not is_valid_template_style(template_style):
        raise ValueError(f"Unknown template style: {template_style}")
    if output not in ("pdf", "html"):
        raise ValueError(f"Unknown output format: {output}")

    content = _coerce_content(content)
    name = _company_name(content, company_name)
    filename = get_proposal_filename(name, proposal_number, extension=output)

    if output == "html":
        html = render_proposal_html(content, template_style, name, research, package_tier)
        return RenderedDocument(
            filename=filename,
            content_type="text/html; charset=utf-8",
            data=html.encode("utf-8"),
            template_style=template_style,
            kind=content.kind,
        )

    if template_style == "modern":
        # Tailwind and the animation script need a real browser
        converter = converter or get_converter("chromium")
        if not getattr(converter, "supports_scripts", False):
            raise PDFRenderError("The modern template needs a browser engine for PDF output")
    elif converter is None:
        converter = get_converter(pdf_engine)

    if converter is None:
        # reportlab builds synchronously; keep it off the event loop
        pdf_bytes = ensure_valid_pdf(await asyncio.to_thread(render_classic_pdf, content, name, research))
        engine = "reportlab"
    else:
        html = render_proposal_html(content, template_style, name, research, package_tier)
        pdf_bytes = await converter.convert(html, pdf_options)
        engine = getattr(converter, "engine", type(converter).__name__)

    logger.info(f"Rendered {content.kind} proposal ({template_style}, {engine}): {len(pdf_bytes)} bytes")
    return RenderedDocument(
        filename=filename,
        content_type="application/pdf",
        data=pdf_bytes,
        template_style=template_style,
        kind=content.kind,
        metadata={"engine": engine},
    )
