"""
Pytest Configuration and Shared Fixtures

Provides common fixtures and configuration for all test modules.
No fixture touches the network, a browser or a real API key.
"""

import copy
import json
from types import SimpleNamespace
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from proposal_engine.llm.client import LLMResponse
from proposal_engine.llm.costs import TokenUsage
from proposal_engine.llm.retry import RetryPolicy
from proposal_engine.research.models import (
    CompetitorRanking,
    ContentOpportunity,
    DiscoveredCompetitor,
    EnhancedResearchResult,
    KeywordRanking,
    LocationOpportunity,
    ResearchResult,
)


# ============================================================================
# Sample Data
# ============================================================================

SAMPLE_RESEARCH: Dict[str, Any] = {
    "companyAnalysis": {
        "businessOverview": {
            "coreBusiness": "Residential and commercial roofing",
            "valueProposition": "Same-week repairs with a 10 year guarantee",
            "targetAudience": "Homeowners in West Yorkshire",
            "geographicScope": "Leeds and surrounding towns",
        },
        "currentDigitalPresence": {
            "websiteQuality": "Dated brochure site",
            "contentStrategy": "No blog",
            "technicalSEO": "Slow mobile pages",
            "userExperience": "No clear call to action",
        },
        "painPoints": ["Relies on word of mouth", "Seasonal lead gaps"],
        "opportunities": ["Emergency repair searches", "Flat roof replacement"],
    },
    "marketIntelligence": {
        "industryTrends": ["Growth in flat roof replacements"],
        "searchBehavior": {
            "primarySearchIntents": ["emergency repair", "quotes"],
            "typicalCustomerJourney": "Search, compare reviews, call",
        },
        "competitiveGaps": ["Few competitors publish pricing"],
        "marketSize": "Large",
    },
    "competitorAnalysis": {
        "topCompetitors": [
            {
                "name": "Leeds Roofing Co",
                "website": "leedsroofing.co.uk",
                "strengths": ["Strong reviews"],
                "weaknesses": ["Thin service pages"],
                "keywordStrategy": "Location pages",
            }
        ],
        "competitiveAdvantages": ["Guarantee length"],
        "differentiationOpportunities": ["Transparent pricing"],
        "currentMetrics": {"monthlyTraffic": 300, "rankingKeywords": 45, "domainAuthority": 18},
    },
    "keywordResearch": {
        "primaryKeywords": [
            {"keyword": "roofers leeds", "searchVolume": 880, "difficulty": "Medium",
             "businessValue": "High", "currentRanking": None},
        ],
        "secondaryKeywords": [
            {"keyword": "flat roof repair leeds", "searchVolume": 210, "difficulty": "Low",
             "businessValue": "Medium", "currentRanking": 14},
        ],
        "longTailOpportunities": ["emergency roof repair leeds"],
    },
    "locationStrategy": {
        "targetLocations": [
            {"area": "Leeds", "population": "800,000", "searchDemand": "High", "competitionLevel": "High"},
        ],
        "localSEOOpportunities": ["Google Business Profile posts"],
    },
}

SAMPLE_CONCISE_CONTENT: Dict[str, Any] = {
    "coverPage": {
        "title": "Roofing SEO Dominance Strategy",
        "subtitle": "More enquiries from Leeds homeowners",
        "preparedFor": "Jane Smith",
        "date": "October 2026",
        "contactInfo": "seodons.co.uk",
    },
    "introduction": {
        "currentLandscape": "Acme Roofing ranks for very few service searches.",
        "locationContext": "Leeds is a competitive roofing market.",
        "clientGoals": "Two more roof replacements per month.",
        "opportunity": "Own the emergency repair searches in Leeds.",
    },
    "competition": {
        "summary": "Leeds Roofing Co dominates the map pack.",
        "comparisonTable": [
            {"metric": "Monthly Traffic", "client": "300", "competitor1": "1,200",
             "competitor2": "900", "leader": "2,500"},
        ],
        "keyGaps": ["No location pages", "No reviews strategy"],
        "mainOpportunity": "Emergency repair keywords are under-served.",
    },
    "strategy": {
        "coreApproach": "Build service and location pages, then earn local links.",
        "keyTactics": ["Location pages", "Review generation", "Local link building"],
        "timeline": [{"phase": "Month 1-2", "duration": "8 weeks", "focus": "Technical fixes"}],
        "expectedOutcomes": ["Top 3 for roofers leeds"],
    },
    "investment": {
        "packageName": "Local Dominance",
        "monthlyInvestment": 2000,
        "deliverables": ["20 target keywords", "12 content pieces per month"],
        "projectedResults": [
            {"metric": "Monthly Visitors", "current": "300", "month3": "390",
             "month6": "480", "month12": "600"},
        ],
        "roiSummary": {
            "totalInvestment": 24000,
            "projectedRevenue": 420000,
            "roi": 1650,
            "breakeven": "1 months",
        },
    },
    "summary": {
        "keyBenefits": ["More qualified enquiries"],
        "nextSteps": ["Book a kickoff call", "Grant website access", "Approve keyword list"],
        "callToAction": "Let's get started this month.",
    },
}

SAMPLE_DETAILED_CONTENT: Dict[str, Any] = {
    "coverPage": {
        "title": "Comprehensive SEO Strategy Proposal",
        "subtitle": "A 12 month plan for Acme Roofing",
        "companyName": "Acme Roofing",
        "preparedFor": "The Team at Acme Roofing",
        "date": "October 2026",
    },
    "executiveSummary": {
        "overview": "Acme Roofing has a strong reputation offline.\nOnline it is almost invisible.",
        "keyFindings": ["Not ranking for roofers leeds", "Competitors rank with thin pages"],
        "recommendedStrategy": "Local-first content and links.",
        "expectedOutcomes": ["Double organic traffic"],
    },
    "currentSituation": {
        "digitalPresence": "A dated five page website.",
        "strengths": ["Reviews"],
        "weaknesses": ["No service pages"],
        "opportunities": ["Emergency searches"],
        "threats": ["National lead-gen sites"],
    },
    "recommendedStrategy": {
        "strategyOverview": "Three phases over twelve months.",
        "coreObjectives": ["Rank top 3 locally"],
        "keyPillars": ["Content", "Links", "Technical"],
        "timeline": "Months 1-3 foundation, 4-12 growth.",
    },
    "technicalSEO": {
        "overview": "Fix speed and structure first.",
        "priorities": [{"title": "Page speed", "description": "Compress images", "impact": "High"}],
    },
    "contentStrategy": {
        "overview": "Service pages plus answers to common questions.",
        "contentPillars": [{"pillar": "Roof repairs", "topics": ["Storm damage"], "keywords": ["roof repair leeds"]}],
        "contentCalendar": "12 pieces per month.",
    },
    "localSEO": {
        "overview": "Own the map pack.",
        "tactics": ["Google Business Profile posts"],
        "locationPages": [{"location": "Headingley", "keywords": ["roofers headingley"], "contentStrategy": "Local page"}],
    },
    "linkBuilding": {
        "overview": "Earn local links.",
        "strategy": "Sponsorships and trade directories.",
        "tactics": ["Local news features"],
        "expectedAcquisition": "15 links per month",
    },
    "packageOptions": [],
    "projections": {
        "month6": {"traffic": 480, "leads": 29, "revenue": 50000},
        "month12": {"traffic": 600, "leads": 36, "revenue": 65000},
        "roi": {"percentage": 1525, "paybackPeriod": "2 months", "lifetimeValue": 780000},
    },
    "nextSteps": {
        "immediate": ["Sign the agreement"],
        "onboarding": ["Access to analytics"],
        "kickoff": "Kickoff call within 5 working days.",
    },
    "brutalTruthCallouts": [
        {"title": "THE BRUTAL TRUTH:", "content": "Your competitors get 8x your traffic.", "type": "warning"},
    ],
    "statisticsCards": [
        {"currentNumber": "300", "currentLabel": "visitors today",
         "targetNumber": "600", "targetLabel": "visitors in 12 months"},
    ],
}


# ============================================================================
# Research Fixtures
# ============================================================================

@pytest.fixture
def sample_research_data() -> Dict[str, Any]:
    """Claude research JSON (camelCase, as returned by the model)."""
    return copy.deepcopy(SAMPLE_RESEARCH)


@pytest.fixture
def enhanced_research() -> EnhancedResearchResult:
    """Live search data for Acme Roofing in Leeds."""
    return EnhancedResearchResult(
        keywords=[
            KeywordRanking(keyword="roofers Leeds", position=None, search_volume=500,
                           difficulty="Medium", intent="Navigational"),
            KeywordRanking(keyword="roof repairs Leeds", position=12, search_volume=250,
                           difficulty="Low", intent="Navigational",
                           url="https://acmeroofing.co.uk/repairs"),
            KeywordRanking(keyword="roofing services near me", position=None, search_volume=300,
                           difficulty="High", intent="Local"),
        ],
        competitors=[
            DiscoveredCompetitor(
                name="Leeds Roofing Co",
                domain="leedsroofing.co.uk",
                appearances=3,
                rankings=[CompetitorRanking(keyword="roofers Leeds", position=1)],
                estimated_traffic=159,
            ),
            DiscoveredCompetitor(
                name="Yorkshire Roofers",
                domain="yorkshireroofers.com",
                appearances=1,
                rankings=[CompetitorRanking(keyword="roofers Leeds", position=4)],
                estimated_traffic=67,
            ),
        ],
        location_opportunities=[
            LocationOpportunity(location="Leeds", keyword="roofing services Leeds", estimated_volume=250),
        ],
        content_opportunities=[
            ContentOpportunity(question="How much does a new roof cost?", snippet="Around £5,000"),
        ],
        quick_wins=["1 keywords already ranking 4-20 can move onto page one"],
    )


@pytest.fixture
def research_result(sample_research_data, enhanced_research) -> ResearchResult:
    """Validated research with live search data and telemetry."""
    data = dict(sample_research_data)
    data.update({
        "enhancedResearch": enhanced_research,
        "totalTokensUsed": 12000,
        "thinkingTokensUsed": 4000,
        "estimatedCost": 0.42,
    })
    return ResearchResult.model_validate(data)


# ============================================================================
# Content Fixtures
# ============================================================================

@pytest.fixture
def sample_concise_content() -> Dict[str, Any]:
    return copy.deepcopy(SAMPLE_CONCISE_CONTENT)


@pytest.fixture
def sample_detailed_content() -> Dict[str, Any]:
    return copy.deepcopy(SAMPLE_DETAILED_CONTENT)


# ============================================================================
# LLM Fixtures
# ============================================================================

@pytest.fixture
def make_llm_response():
    """Factory for gateway responses carrying JSON or raw text."""

    def _make(payload: Any, input_tokens: int = 1000, output_tokens: int = 500,
              thinking_tokens: int = 0, cost: float = 0.05, model: str = "claude-sonnet-4-20250514") -> LLMResponse:
        content = payload if isinstance(payload, str) else json.dumps(payload)
        return LLMResponse(
            content=content,
            usage=TokenUsage(input_tokens, output_tokens, thinking_tokens),
            cost=cost,
            model=model,
        )

    return _make


@pytest.fixture
def mock_gateway():
    """Gateway double with awaitable research and content calls."""
    gateway = MagicMock()
    gateway.research_model = "claude-opus-4-20250514"
    gateway.content_model = "claude-sonnet-4-20250514"
    gateway.call_for_research = AsyncMock()
    gateway.call_for_content = AsyncMock()
    return gateway


@pytest.fixture
def make_anthropic_message():
    """Factory for objects shaped like anthropic Message responses."""

    def _make(text: str = "{}", input_tokens: int = 1200, output_tokens: int = 800,
              thinking: Optional[str] = None, stop_reason: str = "end_turn"):
        blocks: List[SimpleNamespace] = []
        if thinking is not None:
            blocks.append(SimpleNamespace(type="thinking", thinking=thinking))
        blocks.append(SimpleNamespace(type="text", text=text))
        return SimpleNamespace(
            content=blocks,
            usage=SimpleNamespace(input_tokens=input_tokens, output_tokens=output_tokens),
            stop_reason=stop_reason,
        )

    return _make


@pytest.fixture
def mock_anthropic_client(make_anthropic_message):
    """AsyncAnthropic double; messages.create returns a canned message."""
    client = MagicMock()
    client.messages = MagicMock()
    client.messages.create = AsyncMock(return_value=make_anthropic_message('{"ok": true}'))
    return client


@pytest.fixture
def no_sleep_policy() -> RetryPolicy:
    """Retry policy that never actually waits."""
    return RetryPolicy(max_retries=3, sleep=AsyncMock())


# ============================================================================
# Search Fixtures
# ============================================================================

@pytest.fixture
def serp_response():
    """Factory for SerpAPI-shaped responses, one organic result per link."""

    def _make(links: List[str], questions: Optional[List[str]] = None) -> Dict[str, Any]:
        return {
            "organic_results": [
                {"position": index + 1, "link": link, "title": f"{link.split('/')[2]} | Roofers"}
                for index, link in enumerate(links)
            ],
            "related_questions": [{"question": q, "snippet": "", "link": ""} for q in questions or []],
        }

    return _make


@pytest.fixture
def mock_search_client():
    """Search client double returning an empty page unless configured."""
    client = MagicMock()
    client.search = AsyncMock(return_value={"organic_results": []})
    return client
