"""
Classic PDF Template

Paginated PDF built directly from proposal content with reportlab platypus
(no HTML step, no browser). One flowable group per content section, styled
from a shared stylesheet of brand colours and typography.
"""

import logging
from io import BytesIO
from typing import Any, Dict, List, Optional, Union
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import (
    KeepTogether,
    ListFlowable,
    ListItem,
    PageBreak,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from ..content.schemas import ConciseProposal, DetailedProposal
from ..research.models import ResearchResult
from .html_utils import format_currency, format_number, format_percent

logger = logging.getLogger(__name__)

# Brand palette
PRIMARY = colors.HexColor("#00CED1")
PRIMARY_DARK = colors.HexColor("#20B2AA")
PRIMARY_VERY_DARK = colors.HexColor("#006B6E")
TEXT = colors.HexColor("#333333")
TEXT_LIGHT = colors.HexColor("#666666")
HIGHLIGHT = colors.HexColor("#e8f9f9")
WARNING_LIGHT = colors.HexColor("#fff3cd")
BORDER = colors.HexColor("#dddddd")

FOOTER_TEXT = "seodons.co.uk"


def _build_styles() -> Dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    body = ParagraphStyle("Body", parent=base["BodyText"], fontName="Helvetica",
                          fontSize=10.5, leading=15, textColor=TEXT, spaceAfter=6)
    return {
        "cover_title": ParagraphStyle("CoverTitle", parent=base["Title"], fontSize=30, leading=36,
                                      textColor=PRIMARY_VERY_DARK, alignment=TA_CENTER, spaceAfter=14),
        "cover_subtitle": ParagraphStyle("CoverSubtitle", parent=body, fontSize=15, leading=20,
                                         textColor=TEXT_LIGHT, alignment=TA_CENTER),
        "cover_meta": ParagraphStyle("CoverMeta", parent=body, fontSize=12, alignment=TA_CENTER),
        "h1": ParagraphStyle("H1", parent=base["Heading1"], fontSize=20, leading=24,
                             textColor=PRIMARY_VERY_DARK, spaceBefore=6, spaceAfter=10),
        "h2": ParagraphStyle("H2", parent=base["Heading2"], fontSize=15, leading=19,
                             textColor=PRIMARY_DARK, spaceBefore=10, spaceAfter=6),
        "h3": ParagraphStyle("H3", parent=base["Heading3"], fontSize=12, leading=15,
                             textColor=TEXT, spaceBefore=8, spaceAfter=4),
        "body": body,
        "small": ParagraphStyle("Small", parent=body, fontSize=9, leading=12, textColor=TEXT_LIGHT),
        "callout": ParagraphStyle("Callout", parent=body, backColor=WARNING_LIGHT, borderPadding=8,
                                  spaceBefore=6, spaceAfter=12),
        "highlight": ParagraphStyle("Highlight", parent=body, backColor=HIGHLIGHT, borderPadding=8,
                                    spaceBefore=6, spaceAfter=12),
    }


def _text(value: Any) -> str:
    """Escape for reportlab's mini-markup."""
    if value is None:
        return ""
    return escape(str(value))


class ClassicPdfBuilder:
    """Builds the platypus story for either content kind."""

    def __init__(self):
        self.styles = _build_styles()

    def build(
        self,
        content: Union[DetailedProposal, ConciseProposal],
        company_name: str,
        research: Optional[ResearchResult] = None,
    ) -> bytes:
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            topMargin=20 * mm,
            bottomMargin=20 * mm,
            leftMargin=15 * mm,
            rightMargin=15 * mm,
            title=f"SEO Proposal - {company_name}",
            author=FOOTER_TEXT,
        )

        if content.kind == "concise":
            story = self._concise_story(content, company_name)
        else:
            story = self._detailed_story(content, company_name, research)

        def on_page(canvas, document):
            if document.page == 1:
                return
            canvas.saveState()
            canvas.setFont("Helvetica", 8)
            canvas.setFillColor(TEXT_LIGHT)
            canvas.drawString(15 * mm, 10 * mm, f"{company_name} | SEO Proposal")
            canvas.drawRightString(A4[0] - 15 * mm, 10 * mm, f"{FOOTER_TEXT} | Page {document.page}")
            canvas.restoreState()

        doc.build(story, onFirstPage=on_page, onLaterPages=on_page)
        pdf_bytes = buffer.getvalue()
        logger.info(f"Generated classic PDF: {len(pdf_bytes)} bytes")
        return pdf_bytes

    # =========================================================================
    # FLOWABLE HELPERS
    # =========================================================================

    def _heading(self, text: str, level: str = "h1") -> Paragraph:
        return Paragraph(_text(text), self.styles[level])

    def _para(self, text: Any, style: str = "body") -> List[Paragraph]:
        blocks = [block.strip() for block in str(text or "").split("\n") if block.strip()]
        return [Paragraph(_text(block), self.styles[style]) for block in blocks]

    def _bullets(self, items: List[str]) -> List[Any]:
        if not items:
            return []
        return [ListFlowable(
            [ListItem(Paragraph(_text(item), self.styles["body"]), leftIndent=12) for item in items],
            bulletType="bullet",
            bulletColor=PRIMARY,
            leftIndent=12,
        )]

    def _table(self, header: List[str], rows: List[List[Any]], col_widths: Optional[List[float]] = None) -> Table:
        cell = self.styles["small"]
        data = [[Paragraph(f"<b>{_text(h)}</b>", cell) for h in header]]
        data += [[Paragraph(self._cell(value), cell) for value in row] for row in rows]
        table = Table(data, colWidths=col_widths, repeatRows=1)
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), HIGHLIGHT),
            ("GRID", (0, 0), (-1, -1), 0.5, BORDER),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#f8f8f8")]),
        ]))
        return table

    @staticmethod
    def _cell(value: Any) -> str:
        if isinstance(value, list):
            return "<br/>".join(f"&bull; {_text(item)}" for item in value)
        return _text(value)

    def _cover(self, title: str, subtitle: str, company_name: str, prepared_for: str, date: str) -> List[Any]:
        story = [
            Spacer(1, 60 * mm),
            Paragraph(_text(title), self.styles["cover_title"]),
            Paragraph(_text(subtitle), self.styles["cover_subtitle"]),
            Spacer(1, 20 * mm),
            Paragraph(f"<b>{_text(company_name)}</b>", self.styles["cover_meta"]),
        ]
        if prepared_for and prepared_for != company_name:
            story.append(Paragraph(f"Prepared for {_text(prepared_for)}", self.styles["cover_meta"]))
        if date:
            story.append(Paragraph(_text(date), self.styles["cover_meta"]))
        story += [Spacer(1, 40 * mm), Paragraph(FOOTER_TEXT, self.styles["cover_meta"]), PageBreak()]
        return story

    # =========================================================================
    # CONCISE
    # =========================================================================

    def _concise_story(self, content: ConciseProposal, company_name: str) -> List[Any]:
        cover = content.cover_page
        intro = content.introduction
        competition = content.competition
        strategy = content.strategy
        investment = content.investment
        summary = content.summary

        story = self._cover(cover.title, cover.subtitle, company_name, cover.prepared_for, cover.date)

        story.append(self._heading("Introduction"))
        for label, text in (
            ("Where You Are", intro.current_landscape),
            ("Your Market", intro.location_context),
            ("Your Goals", intro.client_goals),
        ):
            if text:
                story.append(self._heading(label, "h3"))
                story += self._para(text)
        if intro.opportunity:
            story += self._para(intro.opportunity, "highlight")

        story.append(self._heading("Your Competition"))
        story += self._para(competition.summary)
        if competition.comparison_table:
            story.append(self._table(
                ["Metric", "You", "Competitor 1", "Competitor 2", "Leader"],
                [[r.metric, r.client, r.competitor1, r.competitor2, r.leader] for r in competition.comparison_table],
            ))
        if competition.key_gaps:
            story.append(self._heading("Key Gaps", "h3"))
            story += self._bullets(competition.key_gaps)
        if competition.main_opportunity:
            story += self._para(competition.main_opportunity, "highlight")
        story.append(PageBreak())

        story.append(self._heading("The Strategy"))
        story += self._para(strategy.core_approach)
        story += self._bullets(strategy.key_tactics)
        if strategy.timeline:
            story.append(self._heading("Timeline", "h3"))
            story.append(self._table(
                ["Phase", "Duration", "Focus"],
                [[p.phase, p.duration, p.focus] for p in strategy.timeline],
                col_widths=[35 * mm, 30 * mm, 115 * mm],
            ))
        if strategy.expected_outcomes:
            story.append(self._heading("Expected Outcomes", "h3"))
            story += self._bullets(strategy.expected_outcomes)

        story.append(self._heading("Your Investment"))
        story.append(KeepTogether([
            Paragraph(f"<b>{_text(investment.package_name)}</b>", self.styles["h2"]),
            Paragraph(f"{format_currency(investment.monthly_investment)} per month", self.styles["h2"]),
        ]))
        story += self._bullets(investment.deliverables)
        if investment.projected_results:
            story.append(self._table(
                ["Metric", "Current", "Month 3", "Month 6", "Month 12"],
                [[r.metric, r.current, r.month3, r.month6, r.month12] for r in investment.projected_results],
            ))
        roi = investment.roi_summary
        story.append(Spacer(1, 6))
        story.append(self._table(
            ["Annual Investment", "Projected Revenue", "ROI", "Breakeven"],
            [[format_currency(roi.total_investment), format_currency(roi.projected_revenue),
              format_percent(roi.roi), roi.breakeven]],
        ))
        story.append(PageBreak())

        story.append(self._heading("Summary"))
        story += self._bullets(summary.key_benefits)
        if summary.next_steps:
            story.append(self._heading("Next Steps", "h3"))
            story.append(ListFlowable(
                [ListItem(Paragraph(_text(step), self.styles["body"])) for step in summary.next_steps],
                bulletType="1",
            ))
        if summary.call_to_action:
            story += self._para(summary.call_to_action, "highlight")
        return story

    # =========================================================================
    # DETAILED
    # =========================================================================

    def _detailed_story(
        self,
        content: DetailedProposal,
        company_name: str,
        research: Optional[ResearchResult],
    ) -> List[Any]:
        cover = content.cover_page
        story = self._cover(
            cover.title, cover.subtitle, company_name or cover.company_name, cover.prepared_for, cover.date
        )

        summary = content.executive_summary
        story.append(self._heading("Executive Summary"))
        for callout in content.brutal_truth_callouts:
            style = "callout" if callout.type == "warning" else "highlight"
            story.append(Paragraph(f"<b>{_text(callout.title)}</b><br/>{_text(callout.content)}", self.styles[style]))
        story += self._para(summary.overview)
        if content.statistics_cards:
            story.append(self._table(
                ["Today", "", "Target", ""],
                [[c.current_number, c.current_label, c.target_number, c.target_label] for c in content.statistics_cards],
            ))
        story.append(self._heading("Key Findings", "h3"))
        story += self._bullets(summary.key_findings)
        if summary.recommended_strategy:
            story.append(self._heading("Recommended Strategy", "h3"))
            story += self._para(summary.recommended_strategy)
        if summary.expected_outcomes:
            story.append(self._heading("Expected Outcomes", "h3"))
            story += self._bullets(summary.expected_outcomes)
        story.append(PageBreak())

        story.append(self._heading("Market Analysis & Opportunity"))
        if content.market_opportunity:
            market = content.market_opportunity
            story.append(Paragraph(
                f"<b>{_text(market.title)}</b><br/>{_text(market.current_state)}<br/>"
                f"{_text(market.opportunity_size)} {_text(market.timeframe)}",
                self.styles["highlight"],
            ))
        story += self._competitor_table(content, research)

        situation = content.current_situation
        story.append(self._heading("Current Situation Analysis"))
        story += self._para(situation.digital_presence)
        story.append(self._table(
            ["Strengths", "Weaknesses"],
            [[situation.strengths, situation.weaknesses]],
            col_widths=[90 * mm, 90 * mm],
        ))
        story.append(Spacer(1, 6))
        story.append(self._table(
            ["Opportunities", "Threats"],
            [[situation.opportunities, situation.threats]],
            col_widths=[90 * mm, 90 * mm],
        ))
        story.append(PageBreak())

        strategy = content.recommended_strategy
        story.append(self._heading("Recommended Strategy"))
        story += self._para(strategy.strategy_overview)
        story.append(self._heading("Core Objectives", "h3"))
        story += self._bullets(strategy.core_objectives)
        if strategy.key_pillars:
            story.append(self._heading("Key Strategic Pillars", "h3"))
            story += self._bullets(strategy.key_pillars)
        if strategy.timeline:
            story.append(self._heading("12-Month Timeline", "h3"))
            story += self._para(strategy.timeline)

        technical = content.technical_seo
        story.append(self._heading("Technical SEO"))
        story += self._para(technical.overview)
        if technical.priorities:
            story.append(self._table(
                ["Priority", "What", "Impact"],
                [[p.title, p.description, p.impact] for p in technical.priorities],
                col_widths=[45 * mm, 90 * mm, 45 * mm],
            ))
        story.append(PageBreak())

        strategy_content = content.content_strategy
        story.append(self._heading("Content Strategy"))
        story += self._para(strategy_content.overview)
        for pillar in strategy_content.content_pillars:
            story.append(self._heading(pillar.pillar, "h3"))
            story += self._bullets(pillar.topics)
            if pillar.keywords:
                story.append(Paragraph(f"Keywords: {_text(', '.join(pillar.keywords))}", self.styles["small"]))
        if strategy_content.content_calendar:
            story.append(self._heading("Content Calendar", "h3"))
            story += self._para(strategy_content.content_calendar)

        if content.local_seo is not None:
            local = content.local_seo
            story.append(self._heading("Local SEO Strategy"))
            story += self._para(local.overview)
            story += self._bullets(local.tactics)
            if local.location_pages:
                story.append(self._table(
                    ["Location", "Keywords", "Content"],
                    [[p.location, ", ".join(p.keywords), p.content_strategy] for p in local.location_pages],
                    col_widths=[35 * mm, 60 * mm, 85 * mm],
                ))

        links = content.link_building
        story.append(self._heading("Link Building Strategy"))
        story += self._para(links.overview)
        story += self._para(links.strategy)
        story += self._bullets(links.tactics)
        if links.expected_acquisition:
            story += self._para(links.expected_acquisition, "highlight")
        story.append(PageBreak())

        story.append(self._heading("Investment Options"))
        if content.package_options:
            story.append(self._table(
                ["Package", "Monthly", "Keywords", "Content/Month", "Backlinks/Month"],
                [[o.name, format_currency(o.monthly_investment), format_number(o.keyword_count),
                  format_number(o.content_per_month), format_number(o.backlinks_per_month)]
                 for o in content.package_options],
            ))
            for option in content.package_options:
                story.append(self._heading(option.name, "h3"))
                story += self._bullets(option.deliverables)

        projections = content.projections
        story.append(self._heading("Projected Results"))
        story.append(self._table(
            ["", "Traffic", "Leads", "Revenue"],
            [
                ["Month 6", format_number(projections.month6.traffic), format_number(projections.month6.leads),
                 format_currency(projections.month6.revenue)],
                ["Month 12", format_number(projections.month12.traffic), format_number(projections.month12.leads),
                 format_currency(projections.month12.revenue)],
            ],
        ))
        story.append(Paragraph(
            f"<b>ROI: {format_percent(projections.roi.percentage)}</b> | "
            f"Payback: {_text(projections.roi.payback_period)} | "
            f"Annual value: {format_currency(projections.roi.lifetime_value)}",
            self.styles["highlight"],
        ))

        if content.simple_math_breakdown and content.simple_math_breakdown.steps:
            breakdown = content.simple_math_breakdown
            story.append(self._heading("The Simple Math", "h2"))
            story.append(self._table(
                ["Month", "Traffic", "Leads", "Customers", "Revenue"],
                [[s.month, format_number(s.traffic), format_number(s.leads), format_number(s.customers),
                  format_currency(s.revenue)] for s in breakdown.steps],
            ))
            story.append(Paragraph(
                f"Invest {format_currency(breakdown.total_investment)}, return "
                f"{format_currency(breakdown.total_return)} ({format_percent(breakdown.roi)} ROI)",
                self.styles["highlight"],
            ))

        steps = content.next_steps
        story.append(self._heading("Next Steps"))
        if steps.immediate:
            story.append(self._heading("Immediately", "h3"))
            story += self._bullets(steps.immediate)
        if steps.onboarding:
            story.append(self._heading("Onboarding", "h3"))
            story += self._bullets(steps.onboarding)
        story += self._para(steps.kickoff, "highlight")
        return story

    def _competitor_table(self, content: DetailedProposal, research: Optional[ResearchResult]) -> List[Any]:
        comparison = content.competitor_comparison
        if comparison and comparison.metrics:
            return [
                self._heading("Competitive Landscape", "h2"),
                self._table(
                    ["Metric", "You", "Competitor A", "Competitor B", "Market Leader"],
                    [[m.metric, m.your_business, m.top_competitor_a, m.top_competitor_b, m.market_leader]
                     for m in comparison.metrics],
                ),
            ]

        enhanced = research.enhanced_research if research else None
        if enhanced is None or not enhanced.competitors:
            return []
        return [
            self._heading("Competitive Landscape", "h2"),
            self._table(
                ["Competitor", "Domain", "Keyword Appearances", "Est. Traffic"],
                [[c.name, c.domain, str(c.appearances), format_number(c.estimated_traffic)]
                 for c in enhanced.competitors],
            ),
        ]


def render_classic_pdf(
    content: Union[DetailedProposal, ConciseProposal],
    company_name: str,
    research: Optional[ResearchResult] = None,
) -> bytes:
    return ClassicPdfBuilder().build(content, company_name, research)
