"""
Modern HTML Template

Web-first proposal for screen-share presentations:
- Tailwind CSS from the CDN, responsive layout
- Hero, keyword ranking table and competitor frequency bars from live research
- Investment card with ROI
- Embedded video testimonials and scroll animations

Works with both proposal kinds. Needs a real browser to convert to PDF.
"""

import logging
from typing import List, Optional, Union

from ..content.packages import get_package
from ..content.schemas import ConciseProposal, DetailedProposal
from ..research.external import EnhancedResearchAgent
from ..research.models import ResearchResult
from .html_utils import escape_html, format_currency, format_number, format_percent, paragraphs

logger = logging.getLogger(__name__)

TAILWIND_CDN = "https://cdn.tailwindcss.com"

TESTIMONIAL_VIDEOS = [
    ("9n_IjcxVjfM", "Client Success Story"),
    ("PnPr8OfpfFA", "Genbatt Case Study"),
    ("cIuNH45hxVg", "Halo's 67 Deal Month"),
    ("ipBXG6yk5KA", "£4,000,000 for AB Renewables"),
    ("TmYby-YVlOA", "Our First Ever Solar Client, Still With Us 2 Years Later"),
]

MAX_KEYWORD_ROWS = 20

CUSTOM_CSS = """
        :root {
            --accent: #0f766e;
            --muted: #6b7280;
            --border: #e5e7eb;
        }
        body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Helvetica Neue', Arial, sans-serif; }
        .card { background: white; border: 1px solid var(--border); border-radius: 0.75rem; }
        .gradient-text { background: linear-gradient(135deg, #0f766e, #06b6d4); -webkit-background-clip: text; color: transparent; }
        .aspect-video { position: relative; padding-bottom: 56.25%; height: 0; }
        .aspect-video iframe { position: absolute; inset: 0; width: 100%; height: 100%; }

        .animate-on-scroll { opacity: 0; transform: translateY(30px); transition: opacity 0.6s ease, transform 0.6s ease; }
        .animate-on-scroll.animate-in { opacity: 1; transform: translateY(0); }
        @media print { .animate-on-scroll { opacity: 1; transform: none; } }
        @media (prefers-reduced-motion: reduce) {
            *, *::before, *::after { animation-duration: 0.01ms !important; transition-duration: 0.01ms !important; }
        }
"""

SCROLL_ANIMATION_JS = """
        (function() {
            function init() {
                var observer = new IntersectionObserver(function(entries) {
                    entries.forEach(function(entry) {
                        if (entry.isIntersecting) { entry.target.classList.add('animate-in'); }
                    });
                }, { threshold: 0.1, rootMargin: '0px 0px -50px 0px' });
                document.querySelectorAll('.animate-on-scroll').forEach(function(el) { observer.observe(el); });
            }
            if (document.readyState === 'loading') {
                document.addEventListener('DOMContentLoaded', init);
            } else {
                init();
            }
        })();
"""


def competitor_frequency_color(percent: float) -> str:
    """Bar colour for how often a competitor appears: red >= 70%, amber >= 40%, else green."""
    if percent >= 70:
        return "#ef4444"
    if percent >= 40:
        return "#f59e0b"
    return "#22c55e"


def _section(title: str, body: str, shaded: bool = False) -> str:
    background = ' style="background-color: rgba(0, 0, 0, 0.02);"' if shaded else ""
    return f"""
    <section class="py-10 sm:py-16"{background}>
        <div class="container mx-auto px-4 max-w-6xl animate-on-scroll">
            <h2 class="text-2xl sm:text-3xl font-bold mb-6">{escape_html(title)}</h2>
            {body}
        </div>
    </section>"""


def _bullets(items: List[str]) -> str:
    return "".join(
        f'<li class="flex gap-3"><span class="text-teal-700 font-bold">&#10003;</span><span>{escape_html(item)}</span></li>'
        for item in items
    )


class ModernHTMLBuilder:
    """Builds the modern proposal for either content kind."""

    def build(
        self,
        content: Union[DetailedProposal, ConciseProposal],
        company_name: str,
        research: Optional[ResearchResult] = None,
        package_tier: Optional[str] = None,
    ) -> str:
        is_concise = content.kind == "concise"
        sections = [
            self._build_hero(content, company_name),
            self._build_introduction(content),
            self._build_keyword_rankings(research),
            self._build_competition(content, research),
            self._build_strategy(content),
            self._build_content_opportunities(research),
            self._build_location_opportunities(research),
            self._build_investment(content, package_tier),
            self._build_summary(content) if is_concise else self._build_next_steps(content),
            self._build_testimonials(),
        ]
        body = "\n".join(section for section in sections if section)

        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{escape_html(content.cover_page.title)} - {escape_html(company_name)}</title>
    <script src="{TAILWIND_CDN}"></script>
    <style>
        {CUSTOM_CSS}
    </style>
</head>
<body class="min-h-screen bg-white text-gray-900">
    {body}
    <footer class="py-8 text-center text-sm text-gray-500">seodons.co.uk</footer>
    <script>
        {SCROLL_ANIMATION_JS}
    </script>
</body>
</html>"""

    def _build_hero(self, content: Union[DetailedProposal, ConciseProposal], company_name: str) -> str:
        cover = content.cover_page
        return f"""
    <section class="relative overflow-hidden py-16 md:py-32 bg-gradient-to-br from-teal-50 to-cyan-100">
        <div class="container mx-auto px-4 max-w-5xl text-center">
            <p class="uppercase tracking-widest text-sm text-teal-700 font-bold mb-4">SEO Proposal</p>
            <h1 class="text-4xl md:text-6xl font-black mb-6 gradient-text">{escape_html(cover.title)}</h1>
            <p class="text-lg md:text-2xl text-gray-600 mb-8">{escape_html(cover.subtitle)}</p>
            <p class="text-2xl font-bold">{escape_html(company_name)}</p>
            <p class="text-gray-500 mt-2">{escape_html(cover.date)}</p>
        </div>
    </section>"""

    def _build_introduction(self, content: Union[DetailedProposal, ConciseProposal]) -> str:
        if content.kind == "concise":
            intro = content.introduction
            body = f"""
            <div class="grid md:grid-cols-2 gap-6">
                <div class="card p-6"><h3 class="font-semibold mb-2">Where You Are</h3>{paragraphs(intro.current_landscape)}</div>
                <div class="card p-6"><h3 class="font-semibold mb-2">Your Market</h3>{paragraphs(intro.location_context)}</div>
                <div class="card p-6"><h3 class="font-semibold mb-2">Your Goals</h3>{paragraphs(intro.client_goals)}</div>
                <div class="card p-6 bg-teal-700 text-white"><h3 class="font-semibold mb-2">The Opportunity</h3>{paragraphs(intro.opportunity)}</div>
            </div>"""
            return _section("Introduction", body, shaded=True)

        summary = content.executive_summary
        callouts = "".join(
            f"""
            <div class="rounded-lg p-5 mb-4 {'bg-amber-50 border-l-4 border-amber-500' if c.type == 'warning' else 'bg-sky-50 border-l-4 border-sky-500'}">
                <p class="font-bold uppercase text-sm mb-1">{escape_html(c.title)}</p>
                <p>{escape_html(c.content)}</p>
            </div>"""
            for c in content.brutal_truth_callouts
        )
        cards = "".join(
            f"""
            <div class="card p-6 text-center">
                <div class="text-4xl font-black text-red-500">{escape_html(card.current_number)}</div>
                <div class="text-sm text-gray-500 mb-3">{escape_html(card.current_label)}</div>
                <div class="text-4xl font-black text-teal-700">{escape_html(card.target_number)}</div>
                <div class="text-sm text-gray-500">{escape_html(card.target_label)}</div>
            </div>"""
            for card in content.statistics_cards
        )
        body = f"""
            {callouts}
            <div class="card p-6 mb-6">{paragraphs(summary.overview)}</div>
            <div class="grid md:grid-cols-3 gap-6 mb-6">{cards}</div>
            <h3 class="text-xl font-semibold mb-3">Key Findings</h3>
            <ul class="space-y-2">{_bullets(summary.key_findings)}</ul>"""
        return _section("Executive Summary", body, shaded=True)

    def _build_keyword_rankings(self, research: Optional[ResearchResult]) -> str:
        enhanced = research.enhanced_research if research else None
        if enhanced is None or not enhanced.keywords:
            return ""

        keywords = sorted(enhanced.keywords, key=lambda k: k.search_volume, reverse=True)[:MAX_KEYWORD_ROWS]
        rows = "".join(
            f"""
                    <tr class="border-b">
                        <td class="py-3 px-3 font-medium">{escape_html(k.keyword)}</td>
                        <td class="py-3 px-3 text-gray-500">{f'#{k.position}' if k.position else 'Not Ranking'}</td>
                        <td class="py-3 px-3 font-semibold">{format_number(k.search_volume)}</td>
                        <td class="py-3 px-3">{escape_html(k.difficulty)}</td>
                        <td class="py-3 px-3">{escape_html(k.intent)}</td>
                    </tr>"""
            for k in keywords
        )
        body = f"""
            <div class="card p-6 overflow-x-auto">
                <table class="w-full min-w-[600px] text-sm">
                    <thead>
                        <tr class="border-b-2 text-left">
                            <th class="py-3 px-3">Keyword</th><th class="py-3 px-3">Position</th>
                            <th class="py-3 px-3">Volume</th><th class="py-3 px-3">Difficulty</th><th class="py-3 px-3">Intent</th>
                        </tr>
                    </thead>
                    <tbody>{rows}
                    </tbody>
                </table>
            </div>"""
        return _section("Keyword Ranking Analysis", body)

    def _build_competition(
        self,
        content: Union[DetailedProposal, ConciseProposal],
        research: Optional[ResearchResult],
    ) -> str:
        parts = []
        if content.kind == "concise":
            competition = content.competition
            parts.append(f'<div class="card p-6 mb-6">{paragraphs(competition.summary)}</div>')
            rows = [
                (row.metric, row.client, row.competitor1, row.competitor2, row.leader)
                for row in competition.comparison_table
            ]
            gaps, opportunity = competition.key_gaps, competition.main_opportunity
        else:
            comparison = content.competitor_comparison
            rows = [
                (m.metric, m.your_business, m.top_competitor_a, m.top_competitor_b, m.market_leader)
                for m in (comparison.metrics if comparison else [])
            ]
            gaps, opportunity = content.current_situation.weaknesses, ""

        if rows:
            body_rows = "".join(
                "<tr class=\"border-b\">" + "".join(
                    f'<td class="py-3 px-3">{escape_html(cell)}</td>' for cell in row
                ) + "</tr>"
                for row in rows
            )
            parts.append(f"""
            <div class="card p-6 mb-6 overflow-x-auto">
                <table class="w-full text-sm">
                    <thead><tr class="border-b-2 text-left">
                        <th class="py-3 px-3">Metric</th><th class="py-3 px-3">You</th><th class="py-3 px-3">Competitor 1</th>
                        <th class="py-3 px-3">Competitor 2</th><th class="py-3 px-3">Leader</th>
                    </tr></thead>
                    <tbody>{body_rows}</tbody>
                </table>
            </div>""")

        enhanced = research.enhanced_research if research else None
        if enhanced is not None and enhanced.competitors:
            checked = max(1, min(EnhancedResearchAgent.COMPETITOR_KEYWORDS, len(enhanced.keywords)))
            bars = []
            for competitor in enhanced.competitors:
                percent = min(100, round(competitor.appearances / checked * 100))
                bars.append(f"""
                <div class="mb-4">
                    <div class="flex justify-between text-sm mb-1">
                        <span class="font-semibold">{escape_html(competitor.name)} <span class="text-gray-400">({escape_html(competitor.domain)})</span></span>
                        <span>{percent}%</span>
                    </div>
                    <div class="w-full bg-gray-100 rounded-full h-3">
                        <div class="h-3 rounded-full" style="width: {percent}%; background-color: {competitor_frequency_color(percent)};"></div>
                    </div>
                </div>""")
            parts.append(f"""
            <div class="card p-6 mb-6">
                <h3 class="font-semibold mb-4">Who Shows Up When Your Customers Search</h3>
                {''.join(bars)}
            </div>""")

        if gaps:
            parts.append(f'<h3 class="text-xl font-semibold mb-3">Key Gaps</h3><ul class="space-y-2 mb-6">{_bullets(gaps)}</ul>')
        if opportunity:
            parts.append(f'<div class="card p-6 bg-teal-700 text-white font-semibold">{escape_html(opportunity)}</div>')

        if not parts:
            return ""
        return _section("Your Competition", "".join(parts))

    def _build_strategy(self, content: Union[DetailedProposal, ConciseProposal]) -> str:
        if content.kind == "concise":
            strategy = content.strategy
            timeline = "".join(
                f"""
                <div class="card p-5">
                    <div class="text-teal-700 font-bold">{escape_html(phase.phase)}</div>
                    <div class="text-xs text-gray-500 mb-2">{escape_html(phase.duration)}</div>
                    <div class="text-sm">{escape_html(phase.focus)}</div>
                </div>"""
                for phase in strategy.timeline
            )
            body = f"""
            <div class="card p-6 mb-6">{paragraphs(strategy.core_approach)}</div>
            <ul class="space-y-2 mb-6">{_bullets(strategy.key_tactics)}</ul>
            <div class="grid md:grid-cols-3 gap-4 mb-6">{timeline}</div>
            <h3 class="text-xl font-semibold mb-3">Expected Outcomes</h3>
            <ul class="space-y-2">{_bullets(strategy.expected_outcomes)}</ul>"""
            return _section("The Strategy", body, shaded=True)

        strategy = content.recommended_strategy
        pillars = "".join(
            f"""
                <div class="card p-5">
                    <div class="font-bold mb-2">{escape_html(pillar.pillar)}</div>
                    <ul class="text-sm space-y-1">{_bullets(pillar.topics)}</ul>
                </div>"""
            for pillar in content.content_strategy.content_pillars
        )
        priorities = "".join(
            f"""
                <div class="card p-5">
                    <div class="font-bold">{escape_html(p.title)}</div>
                    <p class="text-sm text-gray-600">{escape_html(p.description)}</p>
                    <p class="text-sm text-teal-700 mt-2">{escape_html(p.impact)}</p>
                </div>"""
            for p in content.technical_seo.priorities
        )
        local = ""
        if content.local_seo is not None:
            local = f"""
            <h3 class="text-xl font-semibold mb-3 mt-8">Local SEO</h3>
            <ul class="space-y-2">{_bullets(content.local_seo.tactics)}</ul>"""
        body = f"""
            <div class="card p-6 mb-6">{paragraphs(strategy.strategy_overview)}</div>
            <ul class="space-y-2 mb-8">{_bullets(strategy.core_objectives)}</ul>
            <h3 class="text-xl font-semibold mb-3">Technical Priorities</h3>
            <div class="grid md:grid-cols-2 gap-4 mb-8">{priorities}</div>
            <h3 class="text-xl font-semibold mb-3">Content Pillars</h3>
            <div class="grid md:grid-cols-3 gap-4">{pillars}</div>
            {local}
            <h3 class="text-xl font-semibold mb-3 mt-8">Link Building</h3>
            <ul class="space-y-2">{_bullets(content.link_building.tactics)}</ul>"""
        return _section("The Strategy", body, shaded=True)

    def _build_content_opportunities(self, research: Optional[ResearchResult]) -> str:
        enhanced = research.enhanced_research if research else None
        if enhanced is None or not enhanced.content_opportunities:
            return ""
        cards = "".join(
            f"""
                <div class="card p-5">
                    <div class="font-semibold mb-2">{escape_html(item.question)}</div>
                    <p class="text-sm text-gray-600">{escape_html(item.snippet)}</p>
                </div>"""
            for item in enhanced.content_opportunities
        )
        body = f"""
            <p class="text-gray-600 mb-6">Questions your customers are asking Google right now. Each one is a page we can rank.</p>
            <div class="grid md:grid-cols-2 gap-4">{cards}</div>"""
        return _section("Content Opportunities", body)

    def _build_location_opportunities(self, research: Optional[ResearchResult]) -> str:
        enhanced = research.enhanced_research if research else None
        if enhanced is None or not enhanced.location_opportunities:
            return ""
        cards = "".join(
            f"""
                <div class="card p-5">
                    <div class="text-lg font-bold">{escape_html(item.location)}</div>
                    <div class="text-sm text-gray-500">{escape_html(item.keyword)}</div>
                    <div class="mt-2"><span class="font-semibold">{format_number(item.estimated_volume)}</span> searches/month</div>
                    <div class="text-sm">Competition: {escape_html(item.competition)}</div>
                </div>"""
            for item in enhanced.location_opportunities
        )
        return _section("Location Opportunities", f'<div class="grid md:grid-cols-3 gap-4">{cards}</div>', shaded=True)

    def _build_investment(
        self,
        content: Union[DetailedProposal, ConciseProposal],
        package_tier: Optional[str],
    ) -> str:
        if content.kind == "concise":
            investment = content.investment
            name, monthly = investment.package_name, investment.monthly_investment
            deliverables = investment.deliverables
            roi_value = investment.roi_summary.roi
            annual_revenue = investment.roi_summary.projected_revenue
        else:
            package = get_package(package_tier) if package_tier else None
            option = next(
                (o for o in content.package_options if package and o.tier == package.tier),
                content.package_options[0] if content.package_options else None,
            )
            if option is None:
                return ""
            name, monthly, deliverables = option.name, option.monthly_investment, option.deliverables
            roi_value = content.projections.roi.percentage
            annual_revenue = content.projections.roi.lifetime_value

        body = f"""
            <div class="card p-8 md:p-12 max-w-3xl mx-auto text-center">
                <div class="text-sm uppercase tracking-widest text-teal-700 font-bold">{escape_html(name)}</div>
                <div class="text-5xl font-black my-4">{format_currency(monthly)}<span class="text-lg text-gray-500 font-normal">/month</span></div>
                <ul class="space-y-2 text-left max-w-md mx-auto my-6">{_bullets(deliverables)}</ul>
                <div class="grid grid-cols-2 gap-4 mt-6">
                    <div class="rounded-lg bg-teal-50 p-4"><div class="text-3xl font-black text-teal-700">{format_percent(roi_value)}</div><div class="text-sm text-gray-500">Projected ROI</div></div>
                    <div class="rounded-lg bg-teal-50 p-4"><div class="text-3xl font-black text-teal-700">{format_currency(annual_revenue)}</div><div class="text-sm text-gray-500">Projected Annual Revenue</div></div>
                </div>
            </div>"""
        return _section("Your Investment", body)

    def _build_summary(self, content: ConciseProposal) -> str:
        summary = content.summary
        steps = "".join(
            f'<li class="flex gap-3"><span class="font-bold text-teal-700">{index}.</span><span>{escape_html(step)}</span></li>'
            for index, step in enumerate(summary.next_steps, 1)
        )
        body = f"""
            <ul class="space-y-2 mb-8">{_bullets(summary.key_benefits)}</ul>
            <h3 class="text-xl font-semibold mb-3">Next Steps</h3>
            <ol class="space-y-2 mb-8">{steps}</ol>
            <div class="rounded-xl bg-teal-700 text-white p-8 text-center text-2xl font-bold">{escape_html(summary.call_to_action)}</div>"""
        return _section("Summary", body, shaded=True)

    def _build_next_steps(self, content: DetailedProposal) -> str:
        steps = content.next_steps
        body = f"""
            <div class="grid md:grid-cols-2 gap-6 mb-6">
                <div class="card p-6"><h3 class="font-semibold mb-3">Immediately</h3><ul class="space-y-2">{_bullets(steps.immediate)}</ul></div>
                <div class="card p-6"><h3 class="font-semibold mb-3">Onboarding</h3><ul class="space-y-2">{_bullets(steps.onboarding)}</ul></div>
            </div>
            <div class="rounded-xl bg-teal-700 text-white p-8">{paragraphs(steps.kickoff)}</div>"""
        return _section("Next Steps", body, shaded=True)

    def _build_testimonials(self) -> str:
        videos = "".join(
            f"""
                <div class="card overflow-hidden">
                    <div class="aspect-video bg-black">
                        <iframe src="https://www.youtube.com/embed/{video_id}" title="{escape_html(title)}"
                            frameborder="0" allow="accelerometer; autoplay; clipboard-write; encrypted-media; gyroscope; picture-in-picture"
                            allowfullscreen loading="lazy"></iframe>
                    </div>
                    <div class="p-4 font-bold">{escape_html(title)}</div>
                </div>"""
            for video_id, title in TESTIMONIAL_VIDEOS
        )
        return _section("What Our Clients Say", f'<div class="grid md:grid-cols-2 lg:grid-cols-3 gap-6">{videos}</div>')


def render_modern_html(
    content: Union[DetailedProposal, ConciseProposal],
    company_name: str,
    research: Optional[ResearchResult] = None,
    package_tier: Optional[str] = None,
) -> str:
    return ModernHTMLBuilder().build(content, company_name, research, package_tier)
