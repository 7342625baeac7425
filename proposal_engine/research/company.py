"""
Company Research Agent

Deep research on a prospect using Claude's extended thinking:
1. Validates company data (fails before any network call)
2. Gathers live search data via the Enhanced Research Agent
3. Sends one combined research prompt to Claude
4. Parses and validates the JSON into a ResearchResult

There is no degraded fallback: a run gets full research or fails.
"""

import json
import logging
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError

from ..llm.client import ClaudeGateway, CallOptions
from ..llm.prompt_utils import extract_json, sanitize_for_prompt
from .external import EnhancedResearchAgent
from .keywords import get_services_for_industry, match_industry
from .models import (
    EnhancedResearchResult,
    ResearchRequest,
    ResearchResult,
    validate_company_data,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int], Any]


class ResearchValidationError(Exception):
    """Claude's research JSON parsed but does not match the research schema."""

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors or []


# ============================================================================
# PROMPTS
# ============================================================================

RESEARCH_SYSTEM_PROMPT = """You are an expert SEO consultant, market researcher and competitive intelligence analyst working for a UK SEO agency.

Your task is to deeply research a prospect company and produce the research foundation for a sales proposal:
- Analyze the business model, digital presence, pain points and opportunities
- Analyze industry trends and how customers search
- Analyze the competitive landscape using the LIVE SEARCH DATA provided (these are the businesses that actually rank)
- Identify high-value keywords with realistic volumes and difficulty
- For local and regional packages, identify target locations

Rules:
- Base competitor analysis on the live search data when it is provided. Never invent competitor names when real ones are available.
- Estimate the client's current monthly organic traffic and ranking keyword count conservatively.
- Be specific to this company, industry and location. No generic filler.

Respond with ONLY a JSON object in exactly this structure:
{
  "companyAnalysis": {
    "businessOverview": {"coreBusiness": "", "valueProposition": "", "targetAudience": "", "geographicScope": ""},
    "currentDigitalPresence": {"websiteQuality": "", "contentStrategy": "", "technicalSEO": "", "userExperience": ""},
    "painPoints": [""],
    "opportunities": [""]
  },
  "marketIntelligence": {
    "industryTrends": [""],
    "searchBehavior": {"primarySearchIntents": [""], "typicalCustomerJourney": ""},
    "competitiveGaps": [""],
    "marketSize": ""
  },
  "competitorAnalysis": {
    "topCompetitors": [{"name": "", "website": "", "strengths": [""], "weaknesses": [""], "keywordStrategy": ""}],
    "competitiveAdvantages": [""],
    "differentiationOpportunities": [""],
    "currentMetrics": {"monthlyTraffic": 0, "rankingKeywords": 0, "domainAuthority": 0}
  },
  "keywordResearch": {
    "primaryKeywords": [{"keyword": "", "searchVolume": 0, "difficulty": "Low|Medium|High", "businessValue": "", "currentRanking": null}],
    "secondaryKeywords": [{"keyword": "", "searchVolume": 0, "difficulty": "Low|Medium|High", "businessValue": "", "currentRanking": null}],
    "longTailOpportunities": [""]
  },
  "locationStrategy": {
    "targetLocations": [{"area": "", "population": "", "searchDemand": "", "competitionLevel": ""}],
    "localSEOOpportunities": [""]
  }
}

Omit "locationStrategy" for national packages."""


def build_research_prompt(
    request: ResearchRequest,
    enhanced: Optional[EnhancedResearchResult],
    additional_context: Optional[str] = None,
) -> str:
    """Assemble the single research prompt."""
    industry_key = match_industry(request.industry)
    services = get_services_for_industry(request.industry)

    sections = [
        "COMPANY INFORMATION:",
        f"- Company Name: {request.company_name}",
        f"- Website: {request.website or 'Not provided'}",
        f"- Industry: {request.industry or 'Not specified'} (mapped to: {industry_key})",
        f"- Location: {request.location or 'United Kingdom'}",
        f"- Package Tier: {request.package_tier}",
        f"- Core services customers search for: {', '.join(services.primary_services)}",
        f"- Related services: {', '.join(services.secondary_services)}",
    ]

    if additional_context:
        sections += ["", "ADDITIONAL CONTEXT FROM SALES TEAM:", sanitize_for_prompt(additional_context)]

    if enhanced is not None:
        payload = enhanced.model_dump(mode="json", exclude={"searched_at"})
        sections += [
            "",
            "LIVE SEARCH DATA (real Google results, use these facts):",
            json.dumps(payload, indent=2),
        ]
    else:
        sections += ["", "LIVE SEARCH DATA: not available for this run. Use your own knowledge."]

    if not request.is_local:
        sections += ["", "This is a NATIONAL package: omit locationStrategy."]

    sections += ["", "Return ONLY the JSON object."]
    return sanitize_for_prompt("\n".join(sections))


# ============================================================================
# AGENT
# ============================================================================

class CompanyResearchAgent:
    """
    Performs deep research on a company.

    Usage:
        agent = CompanyResearchAgent(gateway, enhanced_agent)
        research = await agent.perform_deep_research(request)
    """

    def __init__(
        self,
        gateway: ClaudeGateway,
        enhanced_agent: Optional[EnhancedResearchAgent] = None,
    ):
        """
        Initialize research agent.

        Args:
            gateway: Claude gateway (research mode)
            enhanced_agent: Live search agent; when None, research runs without live data
        """
        self.gateway = gateway
        self.enhanced_agent = enhanced_agent

    async def perform_deep_research(
        self,
        request: ResearchRequest,
        on_progress: Optional[ProgressCallback] = None,
        additional_context: Optional[str] = None,
        options: Optional[CallOptions] = None,
    ) -> ResearchResult:
        """
        Research a company end to end.

        Args:
            request: Research request
            on_progress: Called with (stage, percent of research done)
            additional_context: Free-text notes for the prompt
            options: Gateway overrides (e.g., model)

        Returns:
            ResearchResult with telemetry attached

        Raises:
            RequestValidationError: Missing company name (before any network call)
            ProposalParseError: Claude did not return JSON
            ResearchValidationError: JSON does not match the research schema
        """
        validate_company_data(request)

        def progress(stage: str, percent: int) -> None:
            if on_progress is not None:
                on_progress(stage, percent)

        enhanced = None
        if self.enhanced_agent is not None:
            progress("Gathering live search data", 10)
            enhanced = await self.enhanced_agent.conduct(request)
        else:
            logger.warning(f"No search client configured - researching {request.company_name} without live data")

        progress("Analyzing company, market and competitors", 40)
        user_prompt = build_research_prompt(request, enhanced, additional_context)
        response = await self.gateway.call_for_research(RESEARCH_SYSTEM_PROMPT, user_prompt, options)

        progress("Parsing research results", 90)
        data = extract_json(response.content)
        if not isinstance(data, dict):
            raise ResearchValidationError("Research response is not a JSON object")

        if not request.is_local:
            data.pop("locationStrategy", None)

        data.update({
            "enhancedResearch": enhanced,
            "totalTokensUsed": response.usage.total_tokens,
            "thinkingTokensUsed": response.usage.thinking_tokens,
            "estimatedCost": response.cost,
        })

        try:
            result = ResearchResult.model_validate(data)
        except ValidationError as e:
            logger.error(f"Research schema validation failed: {e.error_count()} errors")
            raise ResearchValidationError(
                f"Research response failed validation: {e.error_count()} errors",
                errors=e.errors(include_url=False),
            ) from e

        progress("Research complete", 100)
        logger.info(
            f"Research complete for {request.company_name}: "
            f"{response.usage.total_tokens} tokens, £{response.cost:.4f}"
        )
        return result
