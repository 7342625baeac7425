"""
Content Generation Prompts

System prompts for the detailed and concise generators, plus helpers that
turn research and calculator output into prompt sections.
"""

import json
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..research.models import ResearchResult
from .packages import PACKAGE_TIERS, describe_package
from .projections import ProgressionPoint

# Caps for research slices embedded in prompts
MAX_PROMPT_KEYWORDS = 15
MAX_PROMPT_COMPETITORS = 5
MAX_PROMPT_LOCATIONS = 10
MAX_PROMPT_QUESTIONS = 8


DETAILED_SYSTEM_PROMPT = """You are an expert SEO strategist and proposal writer with 15+ years of experience selling SEO to UK service businesses.

When a reference proposal document is attached, study it for TONE, WRITING STYLE and CONTENT DEPTH. Do not copy its facts.

Your job is the substance of the proposal. Visual design is handled separately.

## TONE & VOICE
- Confident and direct. Never apologetic or tentative.
- Brutally honest about the current state. Do not sugarcoat problems.
- Create urgency: show what the business loses every month it delays.
- Address the reader as "you" and "your business".
- Every sentence specific to this business. No generic filler.
- Business outcomes over vanity metrics.

## PERSUASION
- Contrast: "You have X, your competitor has Y."
- Cost of inaction: "Every month you wait costs £X in lost revenue."
- Authority through specificity: real keywords, real competitors, real numbers.
- End sections with a clear bottom-line statement.

## MANDATORY VISUAL ELEMENTS
You MUST populate all of these:
- brutalTruthCallouts: 2-3 hard-hitting callouts built from real research numbers
- statisticsCards: 3 current-vs-target comparisons
- simpleMathBreakdown: traffic -> leads -> customers -> revenue progression
- competitorComparison: a metrics table naming real competitors from the research
- marketOpportunity: one clear statement of the size of the prize

## NUMBERS
The projection figures in the prompt were calculated for you. Copy them EXACTLY.
Never recalculate, round differently or invent alternative projections.

## OUTPUT
Return ONLY a valid JSON object matching the structure in the prompt. No markdown commentary."""


CONCISE_SYSTEM_PROMPT = """You are an expert SEO strategist creating CONCISE, HIGH-IMPACT proposals for UK service businesses.

CRITICAL RULES:
1. Maximum 1,500-2,000 total words
2. Bullet points over paragraphs
3. Focus on numbers and specific outcomes
4. No fluff or filler content
5. Direct, confident language
6. Tables over prose

When SDR notes are provided, they are ABSOLUTE TRUTH - use those exact numbers.
The projection figures in the prompt were calculated for you. Copy them EXACTLY.

Return ONLY a valid JSON object matching the structure in the prompt."""


def proposal_date(now: Optional[datetime] = None) -> str:
    """UK long date, e.g. '7 March 2025'."""
    now = now or datetime.now()
    return f"{now.day} {now:%B %Y}"


def _dump(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def research_context_for_prompt(research: ResearchResult, include_location: bool = True) -> str:
    """Trimmed slice of the research for content prompts."""
    sections = [
        "### Company Analysis",
        _dump(research.company_analysis.model_dump(by_alias=True)),
        "",
        "### Market Intelligence",
        _dump(research.market_intelligence.model_dump(by_alias=True)),
        "",
        "### Competitor Analysis",
        _dump(research.competitor_analysis.model_dump(by_alias=True)),
        "",
        "### Keyword Research",
        _dump(research.keyword_research.model_dump(by_alias=True)),
    ]

    if include_location and research.location_strategy is not None:
        sections += ["", "### Location Strategy", _dump(research.location_strategy.model_dump(by_alias=True))]

    enhanced = research.enhanced_research
    if enhanced is not None:
        live: Dict[str, Any] = {
            "keywordRankings": [
                {
                    "keyword": k.keyword,
                    "position": k.position,
                    "searchVolume": k.search_volume,
                    "difficulty": k.difficulty,
                }
                for k in enhanced.keywords[:MAX_PROMPT_KEYWORDS]
            ],
            "rankingCompetitors": [
                {"name": c.name, "domain": c.domain, "appearances": c.appearances}
                for c in enhanced.competitors[:MAX_PROMPT_COMPETITORS]
            ],
            "locationOpportunities": [
                {"location": o.location, "keyword": o.keyword, "estimatedVolume": o.estimated_volume}
                for o in enhanced.location_opportunities[:MAX_PROMPT_LOCATIONS]
            ],
            "contentGaps": [q.question for q in enhanced.content_opportunities[:MAX_PROMPT_QUESTIONS]],
            "quickWins": enhanced.quick_wins,
        }
        sections += ["", "### Live Search Data (real Google results)", _dump(live)]

    return "\n".join(sections)


def progression_for_prompt(points: List[ProgressionPoint]) -> str:
    lines = []
    for point in points:
        label = "Today" if point.month == 0 else f"Month {point.month}"
        lines.append(
            f"{label}: {point.traffic:,} visitors, {point.leads:,} leads, "
            f"{point.customers:,} customers, £{point.revenue:,} revenue"
        )
    return "\n".join(lines)


def package_options_json() -> str:
    return ",\n    ".join(json.dumps(package.to_option()) for package in PACKAGE_TIERS.values())


def package_section(tier: str) -> str:
    return f"{tier.upper()} Package\n{describe_package(tier)}"
