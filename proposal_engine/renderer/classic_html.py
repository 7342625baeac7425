"""
Classic HTML Templates

Full HTML documents with embedded CSS, one `<div class="page">` per
section, for direct viewing or headless-browser PDF conversion.

Structure (detailed):
1. Cover
2. Executive Summary (brutal-truth callouts)
3. Current Situation (statistics cards, SWOT)
4. Recommended Strategy
5. Technical SEO
6. Content Strategy
7. Local SEO (local/regional only)
8. Link Building
9. Competitor Comparison
10. Investment Options
11. Projections (simple math)
12. Next Steps

Structure (concise): cover, introduction, competition, strategy,
investment, summary.
"""

import logging
from typing import List, Optional

from ..content.schemas import ConciseProposal, DetailedProposal
from ..research.models import ResearchResult
from .html_utils import (
    escape_html,
    format_currency,
    format_number,
    format_percent,
    list_items,
    paragraphs,
)

logger = logging.getLogger(__name__)

PRIMARY_COLOR = "#00CED1"
SECONDARY_COLOR = "#20B2AA"
FOOTER_TEXT = "seodons.co.uk"


BASE_STYLES = f"""
        @page {{
            size: A4;
            margin: 0;
        }}

        * {{
            box-sizing: border-box;
            margin: 0;
            padding: 0;
        }}

        body {{
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', 'Helvetica Neue', Arial, sans-serif;
            line-height: 1.6;
            color: #333;
            background: #fff;
        }}

        .page {{
            width: 210mm;
            min-height: 297mm;
            padding: 25mm 20mm;
            margin: 0 auto;
            background: white;
            page-break-after: always;
            position: relative;
        }}

        .page:last-child {{
            page-break-after: avoid;
        }}

        .cover-page {{
            display: flex;
            flex-direction: column;
            justify-content: center;
            align-items: center;
            text-align: center;
            background: linear-gradient(135deg, {PRIMARY_COLOR} 0%, {SECONDARY_COLOR} 100%);
            color: white;
        }}

        .cover-title {{ font-size: 44px; font-weight: 700; margin-bottom: 20px; }}
        .cover-subtitle {{ font-size: 22px; font-weight: 300; margin-bottom: 40px; opacity: 0.9; }}
        .cover-company {{ font-size: 32px; font-weight: 600; margin-bottom: 40px; }}
        .cover-meta {{ font-size: 16px; opacity: 0.85; margin: 4px 0; }}

        h1 {{ font-size: 30px; font-weight: 700; color: {PRIMARY_COLOR}; margin-bottom: 20px; }}
        h2 {{ font-size: 22px; font-weight: 700; margin: 28px 0 14px; }}
        h3 {{ font-size: 17px; font-weight: 600; margin: 20px 0 10px; }}
        p {{ font-size: 14px; margin-bottom: 14px; }}
        ul, ol {{ margin: 0 0 14px 22px; }}
        li {{ font-size: 14px; margin-bottom: 6px; }}

        .brutal-truth, .info-callout, .highlight-box {{
            padding: 18px 22px;
            margin: 20px 0;
            border-radius: 8px;
            page-break-inside: avoid;
        }}
        .brutal-truth {{ background: #FEF3C7; border-left: 4px solid #F59E0B; color: #78350F; }}
        .info-callout {{ background: #E0F2FE; border-left: 4px solid #0EA5E9; color: #0C4A6E; }}
        .highlight-box {{ background: #E8F9F9; border-left: 4px solid {PRIMARY_COLOR}; }}
        .callout-title {{ font-weight: 700; text-transform: uppercase; margin-bottom: 8px; }}

        .stats-grid {{ display: flex; flex-direction: column; gap: 16px; margin: 20px 0; }}
        .stat-comparison {{ display: flex; justify-content: space-around; background: #F8FAFC; border-radius: 8px; padding: 16px; }}
        .stat-number {{ font-size: 34px; font-weight: 700; color: {PRIMARY_COLOR}; text-align: center; }}
        .stat-current .stat-number {{ color: #DC2626; }}
        .stat-label {{ font-size: 12px; color: #666; text-align: center; }}

        .swot-grid {{ display: grid; grid-template-columns: 1fr 1fr; gap: 16px; margin: 20px 0; }}
        .swot-box {{ padding: 16px; border-radius: 8px; page-break-inside: avoid; }}
        .swot-strengths {{ background: #DCFCE7; }}
        .swot-weaknesses {{ background: #FEE2E2; }}
        .swot-opportunities {{ background: #E0F2FE; }}
        .swot-threats {{ background: #FEF3C7; }}
        .swot-title {{ font-weight: 700; margin-bottom: 8px; }}

        .comparison-table {{ width: 100%; border-collapse: collapse; margin: 20px 0; font-size: 13px; }}
        .comparison-table th {{ background: {PRIMARY_COLOR}; color: white; padding: 10px; text-align: left; }}
        .comparison-table td {{ border: 1px solid #ddd; padding: 8px 10px; }}
        .comparison-table tr:nth-child(even) {{ background: #F9F9F9; }}

        .package-grid {{ display: flex; gap: 14px; margin: 20px 0; }}
        .package-card {{ flex: 1; border: 2px solid #E5E7EB; border-radius: 10px; padding: 18px; page-break-inside: avoid; }}
        .package-card.recommended {{ border-color: {PRIMARY_COLOR}; }}
        .package-name {{ font-size: 18px; font-weight: 700; }}
        .package-price {{ font-size: 28px; font-weight: 700; color: {PRIMARY_COLOR}; margin-top: 8px; }}
        .package-price-period {{ font-size: 12px; color: #666; margin-bottom: 12px; }}

        .projection-timeline {{ display: flex; gap: 16px; margin: 20px 0; }}
        .projection-period {{ flex: 1; background: #F8FAFC; border-radius: 8px; padding: 16px; }}
        .projection-label {{ font-weight: 700; color: {PRIMARY_COLOR}; margin-bottom: 8px; }}
        .projection-metric {{ display: flex; justify-content: space-between; font-size: 14px; padding: 4px 0; }}

        .simple-math {{ background: #1F2937; color: white; border-radius: 10px; padding: 20px; margin: 20px 0; }}
        .simple-math-title {{ font-size: 18px; font-weight: 700; margin-bottom: 12px; }}
        .simple-math-step {{ display: flex; justify-content: space-between; font-size: 13px; padding: 6px 0; border-bottom: 1px solid #374151; }}
        .simple-math-result {{ display: flex; justify-content: space-around; margin-top: 14px; text-align: center; }}
        .simple-math-result-value {{ font-size: 20px; font-weight: 700; color: {PRIMARY_COLOR}; }}

        .timeline {{ display: flex; gap: 10px; margin: 20px 0; padding: 14px; background: #F8F8F8; border-radius: 8px; }}
        .timeline-item {{ flex: 1; text-align: center; }}
        .timeline-phase {{ font-weight: 700; color: {PRIMARY_COLOR}; }}

        .key-metric {{ display: inline-block; background: {PRIMARY_COLOR}; color: white; padding: 2px 8px; border-radius: 4px; font-weight: 700; margin-right: 8px; }}

        .roi-box {{ background: {PRIMARY_COLOR}; color: white; padding: 24px; margin: 24px 0; border-radius: 8px; text-align: center; }}
        .roi-number {{ font-size: 44px; font-weight: 700; }}
        .roi-row {{ display: flex; justify-content: space-around; margin-top: 12px; }}
        .roi-row-label {{ font-size: 12px; opacity: 0.9; }}
        .roi-row-value {{ font-size: 18px; font-weight: 700; }}

        .cta-box {{
            background: linear-gradient(135deg, {PRIMARY_COLOR} 0%, {SECONDARY_COLOR} 100%);
            color: white;
            padding: 28px;
            margin-top: 28px;
            text-align: center;
            border-radius: 8px;
        }}
        .cta-text {{ font-size: 20px; font-weight: 700; margin-bottom: 8px; }}

        .page-footer {{
            position: absolute;
            bottom: 12mm;
            left: 20mm;
            right: 20mm;
            text-align: center;
            color: #999;
            font-size: 11px;
            border-top: 1px solid #ddd;
            padding-top: 6px;
        }}
"""


def wrap_html(title: str, sections: List[str], styles: str = BASE_STYLES) -> str:
    """Wrap sections in a full HTML document."""
    content = "\n".join(section for section in sections if section)
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{escape_html(title)}</title>
    <style>
        {styles}
    </style>
</head>
<body>
    {content}
</body>
</html>"""


def _footer() -> str:
    return f'<div class="page-footer">{FOOTER_TEXT}</div>'


# ============================================================================
# CONCISE
# ============================================================================

class ClassicConciseBuilder:
    """Builds the classic concise proposal (5-6 pages)."""

    def build(self, content: ConciseProposal, company_name: Optional[str] = None) -> str:
        company = company_name or content.company_name or content.cover_page.prepared_for
        sections = [
            self._build_cover(content, company),
            self._build_introduction(content),
            self._build_competition(content),
            self._build_strategy(content),
            self._build_investment(content),
            self._build_summary(content),
        ]
        return wrap_html(f"SEO Proposal - {company}", sections)

    def _build_cover(self, content: ConciseProposal, company: str) -> str:
        cover = content.cover_page
        prepared_for = ""
        if cover.prepared_for and cover.prepared_for != company:
            prepared_for = f'<div class="cover-meta">Prepared for {escape_html(cover.prepared_for)}</div>'
        return f"""
        <div class="page cover-page">
            <div class="cover-title">{escape_html(cover.title)}</div>
            <div class="cover-subtitle">{escape_html(cover.subtitle)}</div>
            <div class="cover-company">{escape_html(company)}</div>
            {prepared_for}
            <div class="cover-meta">{escape_html(cover.date)}</div>
            <div class="cover-meta">{escape_html(cover.contact_info)}</div>
        </div>
        """

    def _build_introduction(self, content: ConciseProposal) -> str:
        intro = content.introduction
        return f"""
        <div class="page">
            <h1>Introduction</h1>
            <h2>Current Landscape</h2>
            {paragraphs(intro.current_landscape)}
            <h2>Your Market</h2>
            {paragraphs(intro.location_context)}
            <h2>Your Goals</h2>
            {paragraphs(intro.client_goals)}
            <div class="highlight-box">
                <h3>The Opportunity</h3>
                <p><strong>{escape_html(intro.opportunity)}</strong></p>
            </div>
            {_footer()}
        </div>
        """

    def _build_competition(self, content: ConciseProposal) -> str:
        competition = content.competition
        rows = "".join(
            f"""
                <tr>
                    <td><strong>{escape_html(row.metric)}</strong></td>
                    <td>{escape_html(row.client)}</td>
                    <td>{escape_html(row.competitor1)}</td>
                    <td>{escape_html(row.competitor2)}</td>
                    <td>{escape_html(row.leader)}</td>
                </tr>"""
            for row in competition.comparison_table
        )
        table = ""
        if rows:
            table = f"""
            <table class="comparison-table">
                <thead>
                    <tr><th>Metric</th><th>Your Business</th><th>Competitor 1</th><th>Competitor 2</th><th>Market Leader</th></tr>
                </thead>
                <tbody>{rows}
                </tbody>
            </table>"""
        return f"""
        <div class="page">
            <h1>Competition Analysis</h1>
            {paragraphs(competition.summary)}
            {table}
            <h2>Key Gaps</h2>
            <ul>{list_items(competition.key_gaps)}</ul>
            <div class="highlight-box">
                <h3>Main Opportunity</h3>
                <p>{escape_html(competition.main_opportunity)}</p>
            </div>
            {_footer()}
        </div>
        """

    def _build_strategy(self, content: ConciseProposal) -> str:
        strategy = content.strategy
        timeline = "".join(
            f"""
                <div class="timeline-item">
                    <div class="timeline-phase">{escape_html(phase.phase)}</div>
                    <div style="font-size: 12px; color: #666;">{escape_html(phase.duration)}</div>
                    <div style="font-size: 13px; margin-top: 6px;">{escape_html(phase.focus)}</div>
                </div>"""
            for phase in strategy.timeline
        )
        outcomes = "".join(
            f'<li><span class="key-metric">&#10003;</span> {escape_html(outcome)}</li>'
            for outcome in strategy.expected_outcomes
        )
        return f"""
        <div class="page">
            <h1>Strategy</h1>
            <h2>Our Approach</h2>
            {paragraphs(strategy.core_approach)}
            <h2>Key Tactics</h2>
            <ul>{list_items(strategy.key_tactics)}</ul>
            <h2>Timeline</h2>
            <div class="timeline">{timeline}
            </div>
            <h2>Expected Outcomes</h2>
            <ul style="list-style: none; margin-left: 0;">{outcomes}</ul>
            {_footer()}
        </div>
        """

    def _build_investment(self, content: ConciseProposal) -> str:
        investment = content.investment
        roi = investment.roi_summary
        rows = "".join(
            f"""
                <tr>
                    <td><strong>{escape_html(result.metric)}</strong></td>
                    <td>{escape_html(result.current)}</td>
                    <td>{escape_html(result.month3)}</td>
                    <td>{escape_html(result.month6)}</td>
                    <td>{escape_html(result.month12)}</td>
                </tr>"""
            for result in investment.projected_results
        )
        return f"""
        <div class="page">
            <h1>Investment &amp; Results</h1>
            <div class="highlight-box">
                <h2 style="margin-top: 0;">{escape_html(investment.package_name)}</h2>
                <p style="font-size: 24px; font-weight: 700; color: {PRIMARY_COLOR};">
                    {format_currency(investment.monthly_investment)} per month
                </p>
            </div>
            <h2>What's Included</h2>
            <ul>{list_items(investment.deliverables)}</ul>
            <h2>Projected Results</h2>
            <table class="comparison-table">
                <thead>
                    <tr><th>Metric</th><th>Current</th><th>Month 3</th><th>Month 6</th><th>Month 12</th></tr>
                </thead>
                <tbody>{rows}
                </tbody>
            </table>
            <div class="roi-box">
                <div>Expected ROI</div>
                <div class="roi-number">{format_percent(roi.roi)}</div>
                <div class="roi-row">
                    <div><div class="roi-row-label">Investment</div><div class="roi-row-value">{format_currency(roi.total_investment)}</div></div>
                    <div><div class="roi-row-label">Revenue</div><div class="roi-row-value">{format_currency(roi.projected_revenue)}</div></div>
                    <div><div class="roi-row-label">Break-even</div><div class="roi-row-value">{escape_html(roi.breakeven)}</div></div>
                </div>
            </div>
            {_footer()}
        </div>
        """

    def _build_summary(self, content: ConciseProposal) -> str:
        summary = content.summary
        benefits = "".join(
            f'<li><span class="key-metric">&#10003;</span> {escape_html(benefit)}</li>'
            for benefit in summary.key_benefits
        )
        steps = "".join(
            f'<li><span class="key-metric">{index}</span> {escape_html(step)}</li>'
            for index, step in enumerate(summary.next_steps, 1)
        )
        return f"""
        <div class="page">
            <h1>Summary</h1>
            <h2>Key Benefits</h2>
            <ul style="list-style: none; margin-left: 0;">{benefits}</ul>
            <h2>Next Steps</h2>
            <ul style="list-style: none; margin-left: 0;">{steps}</ul>
            <div class="cta-box">
                <div class="cta-text">{escape_html(summary.call_to_action)}</div>
                <div>Contact us today to get started<br>{FOOTER_TEXT}</div>
            </div>
            {_footer()}
        </div>
        """


# ============================================================================
# DETAILED
# ============================================================================

class ClassicDetailedBuilder:
    """Builds the classic detailed proposal (12+ pages)."""

    def build(self, content: DetailedProposal, research: Optional[ResearchResult] = None) -> str:
        sections = [
            self._build_cover(content),
            self._build_executive_summary(content),
            self._build_current_situation(content),
            self._build_strategy(content),
            self._build_technical_seo(content),
            self._build_content_strategy(content),
            self._build_local_seo(content),
            self._build_link_building(content),
            self._build_competitor_comparison(content, research),
            self._build_package_options(content),
            self._build_projections(content),
            self._build_next_steps(content),
        ]
        return wrap_html(f"SEO Proposal - {content.company_name}", sections)

    def _build_cover(self, content: DetailedProposal) -> str:
        cover = content.cover_page
        return f"""
        <div class="page cover-page">
            <div class="cover-title">{escape_html(cover.title)}</div>
            <div class="cover-subtitle">{escape_html(cover.subtitle)}</div>
            <div class="cover-company">{escape_html(cover.company_name)}</div>
            <div class="cover-meta">{escape_html(cover.prepared_for)}</div>
            <div class="cover-meta">{escape_html(cover.date)}</div>
        </div>
        """

    def _build_callouts(self, content: DetailedProposal) -> str:
        blocks = []
        for callout in content.brutal_truth_callouts:
            css_class = "brutal-truth" if callout.type == "warning" else "info-callout"
            blocks.append(f"""
            <div class="{css_class}">
                <div class="callout-title">{escape_html(callout.title)}</div>
                <div>{escape_html(callout.content)}</div>
            </div>""")
        return "".join(blocks)

    def _build_executive_summary(self, content: DetailedProposal) -> str:
        summary = content.executive_summary
        opportunity = ""
        if content.market_opportunity is not None:
            market = content.market_opportunity
            opportunity = f"""
            <div class="highlight-box">
                <h3 style="margin-top: 0;">{escape_html(market.title)}</h3>
                <p><strong>Where you are:</strong> {escape_html(market.current_state)}</p>
                <p><strong>The size of the prize:</strong> {escape_html(market.opportunity_size)}</p>
                <p><strong>Timeframe:</strong> {escape_html(market.timeframe)}</p>
            </div>"""
        return f"""
        <div class="page">
            <h1>Executive Summary</h1>
            {self._build_callouts(content)}
            {paragraphs(summary.overview)}
            <h2>Key Findings</h2>
            <ul>{list_items(summary.key_findings)}</ul>
            <h2>Recommended Strategy</h2>
            {paragraphs(summary.recommended_strategy)}
            <h2>Expected Outcomes</h2>
            <ul>{list_items(summary.expected_outcomes)}</ul>
            {opportunity}
        </div>
        """

    def _build_current_situation(self, content: DetailedProposal) -> str:
        situation = content.current_situation
        cards = ""
        if content.statistics_cards:
            items = "".join(
                f"""
                <div class="stat-comparison">
                    <div class="stat-current">
                        <div class="stat-number">{escape_html(card.current_number)}</div>
                        <div class="stat-label">{escape_html(card.current_label)}</div>
                    </div>
                    <div class="stat-target">
                        <div class="stat-number">{escape_html(card.target_number)}</div>
                        <div class="stat-label">{escape_html(card.target_label)}</div>
                    </div>
                </div>
                {f'<p style="text-align: center;">{escape_html(card.context)}</p>' if card.context else ''}"""
                for card in content.statistics_cards
            )
            cards = f'<div class="stats-grid">{items}</div>'
        return f"""
        <div class="page">
            <h1>Where You Stand Today</h1>
            {cards}
            <h2>Digital Presence</h2>
            {paragraphs(situation.digital_presence)}
            <div class="swot-grid">
                <div class="swot-box swot-strengths"><div class="swot-title">Strengths</div><ul>{list_items(situation.strengths)}</ul></div>
                <div class="swot-box swot-weaknesses"><div class="swot-title">Weaknesses</div><ul>{list_items(situation.weaknesses)}</ul></div>
                <div class="swot-box swot-opportunities"><div class="swot-title">Opportunities</div><ul>{list_items(situation.opportunities)}</ul></div>
                <div class="swot-box swot-threats"><div class="swot-title">Threats</div><ul>{list_items(situation.threats)}</ul></div>
            </div>
        </div>
        """

    def _build_strategy(self, content: DetailedProposal) -> str:
        strategy = content.recommended_strategy
        return f"""
        <div class="page">
            <h1>Recommended Strategy</h1>
            {paragraphs(strategy.strategy_overview)}
            <h2>Core Objectives</h2>
            <ul>{list_items(strategy.core_objectives)}</ul>
            <h2>Key Pillars</h2>
            <ul>{list_items(strategy.key_pillars)}</ul>
            <h2>Timeline</h2>
            {paragraphs(strategy.timeline)}
        </div>
        """

    def _build_technical_seo(self, content: DetailedProposal) -> str:
        technical = content.technical_seo
        priorities = "".join(
            f"""
            <div style="margin-bottom: 20px; page-break-inside: avoid;">
                <h3>{escape_html(priority.title)}</h3>
                <p>{escape_html(priority.description)}</p>
                <p><strong>Impact:</strong> {escape_html(priority.impact)}</p>
            </div>"""
            for priority in technical.priorities
        )
        return f"""
        <div class="page">
            <h1>Technical SEO</h1>
            {paragraphs(technical.overview)}
            <h2>Priorities</h2>
            {priorities}
        </div>
        """

    def _build_content_strategy(self, content: DetailedProposal) -> str:
        strategy = content.content_strategy
        pillars = "".join(
            f"""
            <div style="margin-bottom: 20px; page-break-inside: avoid;">
                <h3>{escape_html(pillar.pillar)}</h3>
                <ul>{list_items(pillar.topics)}</ul>
                <p><strong>Keywords:</strong> {escape_html(', '.join(pillar.keywords))}</p>
            </div>"""
            for pillar in strategy.content_pillars
        )
        return f"""
        <div class="page">
            <h1>Content Strategy</h1>
            {paragraphs(strategy.overview)}
            <h2>Content Pillars</h2>
            {pillars}
            <h2>Content Calendar</h2>
            {paragraphs(strategy.content_calendar)}
        </div>
        """

    def _build_local_seo(self, content: DetailedProposal) -> str:
        local = content.local_seo
        if local is None:
            return ""
        pages = "".join(
            f"""
            <div style="margin-bottom: 16px; page-break-inside: avoid;">
                <h3>{escape_html(page.location)}</h3>
                <p><strong>Keywords:</strong> {escape_html(', '.join(page.keywords))}</p>
                <p>{escape_html(page.content_strategy)}</p>
            </div>"""
            for page in local.location_pages
        )
        return f"""
        <div class="page">
            <h1>Local SEO</h1>
            {paragraphs(local.overview)}
            <h2>Tactics</h2>
            <ul>{list_items(local.tactics)}</ul>
            <h2>Location Pages</h2>
            {pages}
        </div>
        """

    def _build_link_building(self, content: DetailedProposal) -> str:
        links = content.link_building
        return f"""
        <div class="page">
            <h1>Link Building</h1>
            {paragraphs(links.overview)}
            <h2>Strategy</h2>
            {paragraphs(links.strategy)}
            <h2>Tactics</h2>
            <ul>{list_items(links.tactics)}</ul>
            <div class="highlight-box">
                <strong>Expected acquisition:</strong> {escape_html(links.expected_acquisition)}
            </div>
        </div>
        """

    def _build_competitor_comparison(
        self,
        content: DetailedProposal,
        research: Optional[ResearchResult],
    ) -> str:
        comparison = content.competitor_comparison
        if comparison is not None and comparison.metrics:
            rows = "".join(
                f"""
                <tr>
                    <td><strong>{escape_html(metric.metric)}</strong></td>
                    <td>{escape_html(metric.your_business)}</td>
                    <td>{escape_html(metric.top_competitor_a)}</td>
                    <td>{escape_html(metric.top_competitor_b)}</td>
                    <td>{escape_html(metric.market_leader)}</td>
                </tr>"""
                for metric in comparison.metrics
            )
            header = "<tr><th>Metric</th><th>Your Business</th><th>Competitor A</th><th>Competitor B</th><th>Market Leader</th></tr>"
        elif research is not None and research.enhanced_research and research.enhanced_research.competitors:
            # Fall back to the competitors that actually rank
            rows = "".join(
                f"""
                <tr>
                    <td><strong>{escape_html(competitor.name)}</strong></td>
                    <td>{escape_html(competitor.domain)}</td>
                    <td>{format_number(competitor.appearances)}</td>
                    <td>{format_number(competitor.estimated_traffic)}</td>
                </tr>"""
                for competitor in research.enhanced_research.competitors
            )
            header = "<tr><th>Competitor</th><th>Domain</th><th>Top-10 Appearances</th><th>Est. Monthly Traffic</th></tr>"
        else:
            return ""

        return f"""
        <div class="page">
            <h1>Competitor Comparison</h1>
            <table class="comparison-table">
                <thead>{header}</thead>
                <tbody>{rows}
                </tbody>
            </table>
        </div>
        """

    def _build_package_options(self, content: DetailedProposal) -> str:
        cards = "".join(
            f"""
            <div class="package-card">
                <div class="package-name">{escape_html(option.name)}</div>
                <div class="package-price">{format_currency(option.monthly_investment)}</div>
                <div class="package-price-period">per month</div>
                <ul>{list_items(option.deliverables)}</ul>
            </div>"""
            for option in content.package_options
        )
        return f"""
        <div class="page">
            <h1>Investment Options</h1>
            <div class="package-grid">{cards}
            </div>
        </div>
        """

    def _build_projections(self, content: DetailedProposal) -> str:
        projections = content.projections
        periods = "".join(
            f"""
            <div class="projection-period">
                <div class="projection-label">{label}</div>
                <div class="projection-metric"><span>Traffic</span><strong>{format_number(period.traffic)}</strong></div>
                <div class="projection-metric"><span>Leads</span><strong>{format_number(period.leads)}</strong></div>
                <div class="projection-metric"><span>Revenue</span><strong>{format_currency(period.revenue)}</strong></div>
            </div>"""
            for label, period in (("Month 6", projections.month6), ("Month 12", projections.month12))
        )

        simple_math = ""
        breakdown = content.simple_math_breakdown
        if breakdown is not None and breakdown.steps:
            steps = "".join(
                f"""
                <div class="simple-math-step">
                    <strong>{escape_html(step.month)}</strong>
                    <span>{format_number(step.traffic)} visitors</span>
                    <span>{format_number(step.leads)} leads</span>
                    <span>{format_number(step.customers)} customers</span>
                    <span>{format_currency(step.revenue)}</span>
                </div>"""
                for step in breakdown.steps
            )
            simple_math = f"""
            <div class="simple-math">
                <div class="simple-math-title">The Simple Math</div>
                {steps}
                <div class="simple-math-result">
                    <div><div>Investment</div><div class="simple-math-result-value">{format_currency(breakdown.total_investment)}</div></div>
                    <div><div>Return</div><div class="simple-math-result-value">{format_currency(breakdown.total_return)}</div></div>
                    <div><div>ROI</div><div class="simple-math-result-value">{format_percent(breakdown.roi)}</div></div>
                </div>
            </div>"""

        roi = projections.roi
        return f"""
        <div class="page">
            <h1>Projected Results</h1>
            <div class="projection-timeline">{periods}
            </div>
            <div class="roi-box">
                <div>Return on Investment</div>
                <div class="roi-number">{format_percent(roi.percentage)}</div>
                <div class="roi-row">
                    <div><div class="roi-row-label">Payback</div><div class="roi-row-value">{escape_html(roi.payback_period)}</div></div>
                    <div><div class="roi-row-label">12-Month Value</div><div class="roi-row-value">{format_currency(roi.lifetime_value)}</div></div>
                </div>
            </div>
            {simple_math}
        </div>
        """

    def _build_next_steps(self, content: DetailedProposal) -> str:
        steps = content.next_steps
        return f"""
        <div class="page">
            <h1>Next Steps</h1>
            <h2>Immediate Actions</h2>
            <ol>{list_items(steps.immediate)}</ol>
            <h2>Onboarding</h2>
            <ol>{list_items(steps.onboarding)}</ol>
            <div class="info-callout">
                <div class="callout-title">Kickoff</div>
                {paragraphs(steps.kickoff)}
            </div>
            <div class="cta-box">
                <div class="cta-text">Ready to dominate your market?</div>
                <div>Let's start this month. {FOOTER_TEXT}</div>
            </div>
        </div>
        """


def render_classic_concise_html(content: ConciseProposal, company_name: Optional[str] = None) -> str:
    return ClassicConciseBuilder().build(content, company_name)


def render_classic_detailed_html(content: DetailedProposal, research: Optional[ResearchResult] = None) -> str:
    return ClassicDetailedBuilder().build(content, research)
