"""
Proposal Content Schemas

Typed proposal content shared by the content generators and the renderers.
Claude's JSON is validated against these models immediately after parsing,
so a renderer never sees a structurally incomplete proposal.

Two variants, discriminated by the `kind` tag the generator sets:
- DetailedProposal: long narrative proposal (SWOT, strategy, projections...)
- ConciseProposal: short bullet-driven proposal (competition, investment...)
"""

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from ..research.models import parse_amount

ProposalKind = Literal["detailed", "concise"]


class ContentValidationError(Exception):
    """Parsed proposal JSON does not satisfy the proposal schema."""

    def __init__(self, kind: str, errors: Optional[List[Dict[str, Any]]] = None):
        self.kind = kind
        self.errors = errors or []
        fields = ", ".join(
            ".".join(str(part) for part in error.get("loc", ())) for error in self.errors[:5]
        )
        message = f"{kind} proposal content failed validation ({len(self.errors)} errors)"
        if fields:
            message += f": {fields}"
        super().__init__(message)


# ============================================================================
# LENIENT FIELD TYPES
# ============================================================================

def _as_text(value: Any) -> Any:
    """Claude sometimes returns a list or a number where prose is expected."""
    if isinstance(value, list):
        return "\n".join(str(item) for item in value)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)
    return value


def _as_list(value: Any) -> Any:
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, list):
        return [_as_text(item) for item in value]
    return value


def _as_number(value: Any) -> Any:
    """Numbers written as "£12,000", "1.2k" or "450%" become floats."""
    if isinstance(value, str):
        number = parse_amount(value)
        return value if number is None else number
    return value


Text = Annotated[str, BeforeValidator(_as_text)]
TextList = Annotated[List[str], BeforeValidator(_as_list)]
Amount = Annotated[float, BeforeValidator(_as_number)]


class _ContentModel(BaseModel):
    """Base for proposal sections parsed from Claude JSON (camelCase keys)."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# ============================================================================
# DETAILED PROPOSAL
# ============================================================================

class CoverPage(_ContentModel):
    title: Text
    subtitle: Text = ""
    company_name: Text = Field("", alias="companyName")
    prepared_for: Text = Field("", alias="preparedFor")
    date: Text = ""


class ExecutiveSummary(_ContentModel):
    overview: Text
    key_findings: TextList = Field(default_factory=list, alias="keyFindings")
    recommended_strategy: Text = Field("", alias="recommendedStrategy")
    expected_outcomes: TextList = Field(default_factory=list, alias="expectedOutcomes")


class CurrentSituation(_ContentModel):
    digital_presence: Text = Field(alias="digitalPresence")
    strengths: TextList = Field(default_factory=list)
    weaknesses: TextList = Field(default_factory=list)
    opportunities: TextList = Field(default_factory=list)
    threats: TextList = Field(default_factory=list)


class RecommendedStrategy(_ContentModel):
    strategy_overview: Text = Field(alias="strategyOverview")
    core_objectives: TextList = Field(default_factory=list, alias="coreObjectives")
    key_pillars: TextList = Field(default_factory=list, alias="keyPillars")
    timeline: Text = ""


class TechnicalPriority(_ContentModel):
    title: Text
    description: Text = ""
    impact: Text = ""


class TechnicalSEO(_ContentModel):
    overview: Text
    priorities: List[TechnicalPriority] = Field(default_factory=list)


class ContentPillar(_ContentModel):
    pillar: Text
    topics: TextList = Field(default_factory=list)
    keywords: TextList = Field(default_factory=list)


class ContentStrategy(_ContentModel):
    overview: Text
    content_pillars: List[ContentPillar] = Field(default_factory=list, alias="contentPillars")
    content_calendar: Text = Field("", alias="contentCalendar")


class LocationPage(_ContentModel):
    location: Text
    keywords: TextList = Field(default_factory=list)
    content_strategy: Text = Field("", alias="contentStrategy")


class LocalSEO(_ContentModel):
    overview: Text
    tactics: TextList = Field(default_factory=list)
    location_pages: List[LocationPage] = Field(default_factory=list, alias="locationPages")


class LinkBuilding(_ContentModel):
    overview: Text
    strategy: Text = ""
    tactics: TextList = Field(default_factory=list)
    expected_acquisition: Text = Field("", alias="expectedAcquisition")


class PackageOption(_ContentModel):
    tier: Text
    name: Text
    monthly_investment: Amount = Field(alias="monthlyInvestment")
    deliverables: TextList = Field(default_factory=list)
    keyword_count: Amount = Field(0, alias="keywordCount")
    content_per_month: Amount = Field(0, alias="contentPerMonth")
    backlinks_per_month: Amount = Field(0, alias="backlinksPerMonth")


class PeriodProjection(_ContentModel):
    traffic: Amount
    leads: Amount
    revenue: Amount


class RoiProjection(_ContentModel):
    percentage: Amount
    payback_period: Text = Field("", alias="paybackPeriod")
    lifetime_value: Amount = Field(0, alias="lifetimeValue")


class Projections(_ContentModel):
    month6: PeriodProjection
    month12: PeriodProjection
    roi: RoiProjection


class NextSteps(_ContentModel):
    immediate: TextList = Field(default_factory=list)
    onboarding: TextList = Field(default_factory=list)
    kickoff: Text = ""


class Callout(_ContentModel):
    title: Text
    content: Text
    type: Literal["warning", "info"] = "warning"

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> str:
        return "info" if str(value).strip().lower() == "info" else "warning"


class StatisticsCard(_ContentModel):
    current_number: Text = Field(alias="currentNumber")
    current_label: Text = Field("", alias="currentLabel")
    target_number: Text = Field(alias="targetNumber")
    target_label: Text = Field("", alias="targetLabel")
    context: Optional[Text] = None


class MathStep(_ContentModel):
    month: Text
    traffic: Amount
    leads: Amount
    customers: Amount
    revenue: Amount


class SimpleMathBreakdown(_ContentModel):
    steps: List[MathStep] = Field(default_factory=list)
    total_investment: Amount = Field(0, alias="totalInvestment")
    total_return: Amount = Field(0, alias="totalReturn")
    roi: Amount = 0


class ComparisonMetric(_ContentModel):
    metric: Text
    your_business: Text = Field("", alias="yourBusiness")
    top_competitor_a: Text = Field("", alias="topCompetitorA")
    top_competitor_b: Text = Field("", alias="topCompetitorB")
    market_leader: Text = Field("", alias="marketLeader")


class CompetitorComparison(_ContentModel):
    metrics: List[ComparisonMetric] = Field(default_factory=list)


class MarketOpportunity(_ContentModel):
    title: Text
    current_state: Text = Field("", alias="currentState")
    opportunity_size: Text = Field("", alias="opportunitySize")
    timeframe: Text = ""


class DetailedProposal(_ContentModel):
    """Long narrative proposal."""
    kind: Literal["detailed"] = "detailed"

    cover_page: CoverPage = Field(alias="coverPage")
    executive_summary: ExecutiveSummary = Field(alias="executiveSummary")
    current_situation: CurrentSituation = Field(alias="currentSituation")
    recommended_strategy: RecommendedStrategy = Field(alias="recommendedStrategy")
    technical_seo: TechnicalSEO = Field(alias="technicalSEO")
    content_strategy: ContentStrategy = Field(alias="contentStrategy")
    local_seo: Optional[LocalSEO] = Field(None, alias="localSEO")
    link_building: LinkBuilding = Field(alias="linkBuilding")
    package_options: List[PackageOption] = Field(default_factory=list, alias="packageOptions")
    projections: Projections
    next_steps: NextSteps = Field(alias="nextSteps")

    brutal_truth_callouts: List[Callout] = Field(default_factory=list, alias="brutalTruthCallouts")
    statistics_cards: List[StatisticsCard] = Field(default_factory=list, alias="statisticsCards")
    simple_math_breakdown: Optional[SimpleMathBreakdown] = Field(None, alias="simpleMathBreakdown")
    competitor_comparison: Optional[CompetitorComparison] = Field(None, alias="competitorComparison")
    market_opportunity: Optional[MarketOpportunity] = Field(None, alias="marketOpportunity")

    @property
    def company_name(self) -> str:
        return self.cover_page.company_name


# ============================================================================
# CONCISE PROPOSAL
# ============================================================================

class ConciseCoverPage(_ContentModel):
    title: Text
    subtitle: Text = ""
    prepared_for: Text = Field(alias="preparedFor")
    date: Text = ""
    contact_info: Text = Field("", alias="contactInfo")


class Introduction(_ContentModel):
    current_landscape: Text = Field(alias="currentLandscape")
    location_context: Text = Field("", alias="locationContext")
    client_goals: Text = Field("", alias="clientGoals")
    opportunity: Text = ""


class ComparisonRow(_ContentModel):
    metric: Text
    client: Text = ""
    competitor1: Text = ""
    competitor2: Text = ""
    leader: Text = ""


class Competition(_ContentModel):
    summary: Text
    comparison_table: List[ComparisonRow] = Field(default_factory=list, alias="comparisonTable")
    key_gaps: TextList = Field(default_factory=list, alias="keyGaps")
    main_opportunity: Text = Field("", alias="mainOpportunity")


class TimelinePhase(_ContentModel):
    phase: Text
    duration: Text = ""
    focus: Text = ""


class Strategy(_ContentModel):
    core_approach: Text = Field(alias="coreApproach")
    key_tactics: TextList = Field(default_factory=list, alias="keyTactics")
    timeline: List[TimelinePhase] = Field(default_factory=list)
    expected_outcomes: TextList = Field(default_factory=list, alias="expectedOutcomes")


class ProjectedResult(_ContentModel):
    metric: Text
    current: Text = ""
    month3: Text = ""
    month6: Text = ""
    month12: Text = ""


class RoiSummaryBlock(_ContentModel):
    total_investment: Amount = Field(alias="totalInvestment")
    projected_revenue: Amount = Field(alias="projectedRevenue")
    roi: Amount
    breakeven: Text = ""


class Investment(_ContentModel):
    package_name: Text = Field(alias="packageName")
    monthly_investment: Amount = Field(alias="monthlyInvestment")
    deliverables: TextList = Field(default_factory=list)
    projected_results: List[ProjectedResult] = Field(default_factory=list, alias="projectedResults")
    roi_summary: RoiSummaryBlock = Field(alias="roiSummary")


class Summary(_ContentModel):
    key_benefits: TextList = Field(default_factory=list, alias="keyBenefits")
    next_steps: TextList = Field(default_factory=list, alias="nextSteps")
    call_to_action: Text = Field("", alias="callToAction")


class ConciseProposal(_ContentModel):
    """Short bullet-driven proposal."""
    kind: Literal["concise"] = "concise"

    cover_page: ConciseCoverPage = Field(alias="coverPage")
    introduction: Introduction
    competition: Competition
    strategy: Strategy
    investment: Investment
    summary: Summary

    # Not part of the LLM schema; set by the generator for renderers
    company_name: str = Field("", alias="companyName")


ProposalContent = Annotated[Union[DetailedProposal, ConciseProposal], Field(discriminator="kind")]

_proposal_adapter = TypeAdapter(ProposalContent)

_MODELS = {
    "detailed": DetailedProposal,
    "concise": ConciseProposal,
}


def parse_proposal_content(data: Dict[str, Any], kind: str) -> Union[DetailedProposal, ConciseProposal]:
    """
    Validate parsed JSON as a proposal of the given kind.

    The kind comes from the generator, never from the JSON itself.

    Raises:
        ContentValidationError: When required sections are missing or malformed
    """
    model = _MODELS.get(kind)
    if model is None:
        raise ValueError(f"Unknown proposal kind: {kind}")
    if not isinstance(data, dict):
        raise ContentValidationError(kind, [{"loc": (), "msg": "Proposal content is not a JSON object"}])

    payload = {**data, "kind": kind}
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise ContentValidationError(kind, e.errors(include_url=False)) from e


def load_proposal_content(data: Dict[str, Any]) -> Union[DetailedProposal, ConciseProposal]:
    """Rebuild stored content (tag already present) into its typed variant."""
    return _proposal_adapter.validate_python(data)
