"""
Research Data Models

- ResearchRequest: immutable input for one generation run
- EnhancedResearchResult: live search-engine data (rankings, competitors,
  location opportunities, "people also ask" questions)
- ResearchResult: Claude's structured research, validated on parse
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

PackageTier = Literal["local", "regional", "national"]
PACKAGE_TIER_VALUES = ("local", "regional", "national")

MAX_COMPANY_NAME_LENGTH = 100


class RequestValidationError(ValueError):
    """A generation request failed a precondition check."""


# ============================================================================
# REQUEST
# ============================================================================

@dataclass(frozen=True)
class ResearchRequest:
    """Input for one research run. Constructed once per generation."""
    company_name: str
    website: Optional[str] = None
    industry: Optional[str] = None
    location: Optional[str] = None
    package_tier: str = "local"

    @property
    def domain(self) -> Optional[str]:
        return extract_domain(self.website) if self.website else None

    @property
    def is_local(self) -> bool:
        return self.package_tier in ("local", "regional")


def extract_domain(url: str) -> str:
    """Domain from a URL or bare host (scheme and www. stripped)."""
    if not url:
        return ""
    cleaned = url.strip().lower()
    cleaned = re.sub(r"^https?://", "", cleaned)
    cleaned = re.sub(r"^www\.", "", cleaned)
    return cleaned.split("/")[0].split("?")[0].split("#")[0]


def is_valid_url(url: str) -> bool:
    """True for http(s) URLs or bare hosts with a dot."""
    candidate = url.strip()
    if not re.match(r"^https?://", candidate, re.IGNORECASE):
        candidate = f"https://{candidate}"
    try:
        parsed = urlparse(candidate)
    except ValueError:
        return False
    host = parsed.hostname or ""
    return bool(host) and "." in host and " " not in candidate


def validate_company_data(request: ResearchRequest) -> List[str]:
    """
    Check research preconditions before any network call.

    Returns:
        Warnings (non-fatal)

    Raises:
        RequestValidationError: When the company name is missing
    """
    if not request.company_name or not request.company_name.strip():
        raise RequestValidationError("Company name is required")

    warnings = []
    if not request.website:
        warnings.append("No website provided - research will be less accurate")
    if not request.industry:
        warnings.append("No industry provided - generic service keywords will be used")
    if not request.location:
        warnings.append("No location provided - local search data will be limited")

    for warning in warnings:
        logger.warning(f"{request.company_name}: {warning}")
    return warnings


def validate_research_request(request: ResearchRequest) -> None:
    """
    Full request validation used by the orchestrator.

    Raises:
        RequestValidationError: On the first failed check
    """
    validate_company_data(request)

    if len(request.company_name.strip()) >= MAX_COMPANY_NAME_LENGTH:
        raise RequestValidationError(
            f"Company name must be less than {MAX_COMPANY_NAME_LENGTH} characters"
        )
    if request.package_tier not in PACKAGE_TIER_VALUES:
        raise RequestValidationError(
            f"Invalid package tier '{request.package_tier}'. "
            f"Must be one of: {', '.join(PACKAGE_TIER_VALUES)}"
        )
    if request.website and not is_valid_url(request.website):
        raise RequestValidationError(f"Invalid website URL: {request.website}")


# ============================================================================
# ENHANCED (LIVE SEARCH) RESEARCH
# ============================================================================

class KeywordRanking(BaseModel):
    keyword: str
    position: Optional[int] = None
    search_volume: int = 0
    difficulty: str = "Medium"
    intent: str = "Navigational"
    url: Optional[str] = None


class CompetitorRanking(BaseModel):
    keyword: str
    position: int


class DiscoveredCompetitor(BaseModel):
    name: str
    domain: str
    appearances: int = 0
    rankings: List[CompetitorRanking] = Field(default_factory=list)
    estimated_traffic: int = 0


class LocationOpportunity(BaseModel):
    location: str
    keyword: str
    estimated_volume: int = 0
    competition: str = "Medium"


class ContentOpportunity(BaseModel):
    question: str
    snippet: str = ""
    source: str = ""


class EnhancedResearchResult(BaseModel):
    keywords: List[KeywordRanking] = Field(default_factory=list)
    competitors: List[DiscoveredCompetitor] = Field(default_factory=list)
    location_opportunities: List[LocationOpportunity] = Field(default_factory=list)
    content_opportunities: List[ContentOpportunity] = Field(default_factory=list)
    quick_wins: List[str] = Field(default_factory=list)
    searched_at: datetime = Field(default_factory=datetime.now)


# ============================================================================
# CLAUDE RESEARCH RESULT
# ============================================================================

Number = Union[int, float, str]


class _LLMModel(BaseModel):
    """Base for models parsed from Claude JSON (camelCase keys)."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class BusinessOverview(_LLMModel):
    core_business: str = Field("", alias="coreBusiness")
    value_proposition: str = Field("", alias="valueProposition")
    target_audience: str = Field("", alias="targetAudience")
    geographic_scope: str = Field("", alias="geographicScope")


class DigitalPresence(_LLMModel):
    website_quality: str = Field("", alias="websiteQuality")
    content_strategy: str = Field("", alias="contentStrategy")
    technical_seo: str = Field("", alias="technicalSEO")
    user_experience: str = Field("", alias="userExperience")


class CompanyAnalysis(_LLMModel):
    business_overview: BusinessOverview = Field(default_factory=BusinessOverview, alias="businessOverview")
    current_digital_presence: DigitalPresence = Field(
        default_factory=DigitalPresence, alias="currentDigitalPresence"
    )
    pain_points: List[str] = Field(default_factory=list, alias="painPoints")
    opportunities: List[str] = Field(default_factory=list)


class SearchBehavior(_LLMModel):
    primary_search_intents: List[str] = Field(default_factory=list, alias="primarySearchIntents")
    typical_customer_journey: str = Field("", alias="typicalCustomerJourney")


class MarketIntelligence(_LLMModel):
    industry_trends: List[str] = Field(default_factory=list, alias="industryTrends")
    search_behavior: SearchBehavior = Field(default_factory=SearchBehavior, alias="searchBehavior")
    competitive_gaps: List[str] = Field(default_factory=list, alias="competitiveGaps")
    market_size: str = Field("", alias="marketSize")


class CompetitorProfile(_LLMModel):
    name: str
    website: str = ""
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    keyword_strategy: str = Field("", alias="keywordStrategy")


class CurrentMetrics(_LLMModel):
    monthly_traffic: Optional[int] = Field(None, alias="monthlyTraffic")
    ranking_keywords: Optional[int] = Field(None, alias="rankingKeywords")
    domain_authority: Optional[int] = Field(None, alias="domainAuthority")

    @field_validator("monthly_traffic", "ranking_keywords", "domain_authority", mode="before")
    @classmethod
    def _coerce_number(cls, value: Any) -> Optional[int]:
        return coerce_int(value)


class CompetitorAnalysis(_LLMModel):
    top_competitors: List[CompetitorProfile] = Field(default_factory=list, alias="topCompetitors")
    competitive_advantages: List[str] = Field(default_factory=list, alias="competitiveAdvantages")
    differentiation_opportunities: List[str] = Field(
        default_factory=list, alias="differentiationOpportunities"
    )
    current_metrics: CurrentMetrics = Field(default_factory=CurrentMetrics, alias="currentMetrics")


class ResearchKeyword(_LLMModel):
    keyword: str
    search_volume: Number = Field(0, alias="searchVolume")
    difficulty: Number = "Medium"
    business_value: str = Field("", alias="businessValue")
    current_ranking: Optional[Number] = Field(None, alias="currentRanking")


class KeywordResearch(_LLMModel):
    primary_keywords: List[ResearchKeyword] = Field(default_factory=list, alias="primaryKeywords")
    secondary_keywords: List[ResearchKeyword] = Field(default_factory=list, alias="secondaryKeywords")
    long_tail_opportunities: List[str] = Field(default_factory=list, alias="longTailOpportunities")


class TargetLocation(_LLMModel):
    area: str
    population: Number = ""
    search_demand: str = Field("", alias="searchDemand")
    competition_level: str = Field("", alias="competitionLevel")


class LocationStrategy(_LLMModel):
    target_locations: List[TargetLocation] = Field(default_factory=list, alias="targetLocations")
    local_seo_opportunities: List[str] = Field(default_factory=list, alias="localSEOOpportunities")


class ResearchResult(_LLMModel):
    """Complete research for one company. Never mutated after creation."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    company_analysis: CompanyAnalysis = Field(alias="companyAnalysis")
    market_intelligence: MarketIntelligence = Field(
        default_factory=MarketIntelligence, alias="marketIntelligence"
    )
    competitor_analysis: CompetitorAnalysis = Field(alias="competitorAnalysis")
    keyword_research: KeywordResearch = Field(alias="keywordResearch")
    location_strategy: Optional[LocationStrategy] = Field(None, alias="locationStrategy")
    enhanced_research: Optional[EnhancedResearchResult] = Field(None, alias="enhancedResearch")

    # Telemetry
    researched_at: datetime = Field(default_factory=datetime.now, alias="researchedAt")
    total_tokens_used: int = Field(0, alias="totalTokensUsed")
    thinking_tokens_used: int = Field(0, alias="thinkingTokensUsed")
    estimated_cost: float = Field(0.0, alias="estimatedCost")

    @property
    def current_monthly_traffic(self) -> Optional[int]:
        return self.competitor_analysis.current_metrics.monthly_traffic


_AMOUNT_PATTERN = re.compile(r"-?\d[\d,]*(?:\.\d+)?")
_AMOUNT_SUFFIXES = {"k": 1_000, "m": 1_000_000}


def parse_amount(text: str) -> Optional[float]:
    """First number in free text, honouring a k/m suffix ("£12,000", "1.2K", "2.5m")."""
    match = _AMOUNT_PATTERN.search(text)
    if not match:
        return None
    number = float(match.group(0).replace(",", ""))
    rest = text[match.end():].lstrip()
    suffix = rest[:1].lower()
    # "500 monthly" is not "500m"
    if suffix in _AMOUNT_SUFFIXES and not rest[1:2].isalpha():
        number *= _AMOUNT_SUFFIXES[suffix]
    return number


def coerce_int(value: Any) -> Optional[int]:
    """Best-effort int from LLM output ("1,200", "~500 visitors", "1.2k", 12.0)."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        number = parse_amount(value)
        if number is not None:
            return int(number)
    return None
