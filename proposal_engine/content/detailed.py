"""
Detailed Content Generator

Long-form proposal: executive summary, SWOT, strategy, technical SEO,
content strategy, local SEO, link building, competitor comparison,
packages, projections and next steps. Attaches the style-reference
document when a loader is configured.
"""

import logging
from typing import Any, Dict, List, Optional

from ..llm.client import ClaudeGateway
from ..llm.prompt_utils import sanitize_for_prompt
from .base import BaseContentGenerator, ContentGenerationRequest, pin_value
from .packages import PACKAGE_TIERS, PackageTier
from .projections import ProgressionPoint, ProjectionCalculation, calculate_roi, format_projections_for_prompt
from .prompts import (
    DETAILED_SYSTEM_PROMPT,
    package_options_json,
    package_section,
    progression_for_prompt,
    proposal_date,
    research_context_for_prompt,
)
from .reference import ReferenceDocumentLoader

logger = logging.getLogger(__name__)

# Months shown in the simple-math breakdown
SIMPLE_MATH_MONTHS = (3, 6, 12)


class DetailedContentGenerator(BaseContentGenerator):
    """
    Detailed Content Generator - narrative proposal with design elements.

    Usage:
        generator = DetailedContentGenerator(gateway, reference_loader)
        content = await generator.generate(request)
    """

    def __init__(
        self,
        gateway: ClaudeGateway,
        reference_loader: Optional[ReferenceDocumentLoader] = None,
        opus_model: Optional[str] = None,
    ):
        super().__init__(gateway, opus_model)
        self.reference_loader = reference_loader

    @property
    def kind(self) -> str:
        return "detailed"

    @property
    def system_prompt(self) -> str:
        return DETAILED_SYSTEM_PROMPT

    def attachments(self) -> List[Dict[str, Any]]:
        if self.reference_loader is None:
            return []
        block = self.reference_loader.as_attachment()
        if block is None:
            logger.warning("Reference document not available - generating without style reference")
            return []
        return [block]

    def build_user_prompt(
        self,
        request: ContentGenerationRequest,
        package: PackageTier,
        projection: ProjectionCalculation,
        progression: List[ProgressionPoint],
    ) -> str:
        company = request.company_name
        is_local = request.package_tier != "national"
        prepared_for = request.contact_name or f"The Team at {company}"
        month6 = _point(progression, 6)
        roi = calculate_roi(package.monthly_investment, projection)

        local_block = ""
        if is_local:
            local_block = """
  "localSEO": {
    "overview": "[2-3 paragraphs on local SEO for this business]",
    "tactics": ["[5-7 specific local SEO tactics]"],
    "locationPages": [
      {"location": "[City/area from research]", "keywords": ["[location keywords]"], "contentStrategy": "[approach]"}
    ]
  },"""

        sections = [
            f"Generate a comprehensive SEO proposal for: **{company}**",
            "",
            "## RESEARCH DATA",
            research_context_for_prompt(request.research, include_location=is_local),
            "",
            "## PACKAGE TIER",
            package_section(request.package_tier),
            "",
            "## CALCULATED PROJECTIONS (USE THESE EXACT NUMBERS)",
            format_projections_for_prompt(projection, package.monthly_investment),
            "",
            "## MONTH-BY-MONTH PROGRESSION (USE THESE EXACT NUMBERS)",
            progression_for_prompt(progression),
        ]

        if request.notes:
            sections += ["", "## SDR NOTES (ABSOLUTE TRUTH - USE EXACT NUMBERS)", sanitize_for_prompt(request.notes)]
        if request.custom_instructions:
            sections += ["", "## CUSTOM INSTRUCTIONS", sanitize_for_prompt(request.custom_instructions)]

        sections += [
            "",
            "## YOUR TASK",
            "Generate ALL proposal content following this exact structure:",
            "",
            f"""```json
{{
  "coverPage": {{
    "title": "Comprehensive SEO Strategy Proposal",
    "subtitle": "[One-line promise specific to {company}]",
    "companyName": "{company}",
    "preparedFor": "{prepared_for}",
    "date": "{proposal_date()}"
  }},
  "executiveSummary": {{
    "overview": "[2-3 paragraphs: opportunity, current situation, recommended approach]",
    "keyFindings": ["[3-5 critical insights from research]"],
    "recommendedStrategy": "[1 paragraph core strategy]",
    "expectedOutcomes": ["[4-6 specific, measurable outcomes]"]
  }},
  "currentSituation": {{
    "digitalPresence": "[Analysis of the current digital footprint]",
    "strengths": ["[3-4]"],
    "weaknesses": ["[3-4]"],
    "opportunities": ["[4-6]"],
    "threats": ["[2-3]"]
  }},
  "recommendedStrategy": {{
    "strategyOverview": "[3-4 paragraphs]",
    "coreObjectives": ["[4-5 measurable objectives]"],
    "keyPillars": ["[3-4 strategic pillars]"],
    "timeline": "[Month-by-month outline of the 12-month plan]"
  }},
  "technicalSEO": {{
    "overview": "[2 paragraphs]",
    "priorities": [{{"title": "[area]", "description": "[what needs doing]", "impact": "[expected impact]"}}]
  }},
  "contentStrategy": {{
    "overview": "[2-3 paragraphs]",
    "contentPillars": [{{"pillar": "[theme]", "topics": ["[3-5 topics]"], "keywords": ["[keywords from research]"]}}],
    "contentCalendar": "[Monthly production overview: {package.content_per_month} pieces/month]"
  }},{local_block}
  "linkBuilding": {{
    "overview": "[2 paragraphs]",
    "strategy": "[Strategy based on industry and competitors]",
    "tactics": ["[4-6 tactics]"],
    "expectedAcquisition": "[{package.backlinks_per_month} links/month target]"
  }},
  "packageOptions": [
    {package_options_json()}
  ],
  "projections": {{
    "month6": {{"traffic": {month6.traffic}, "leads": {month6.leads}, "revenue": {month6.revenue}}},
    "month12": {{"traffic": {projection.projected_traffic}, "leads": {projection.monthly_leads}, "revenue": {projection.monthly_revenue}}},
    "roi": {{"percentage": {roi.roi_percentage}, "paybackPeriod": "[e.g. '4-5 months']", "lifetimeValue": {projection.annual_revenue}}}
  }},
  "nextSteps": {{
    "immediate": ["[3-4 immediate actions]"],
    "onboarding": ["[4-5 onboarding steps]"],
    "kickoff": "[Kickoff process and timeline]"
  }},
  "brutalTruthCallouts": [
    {{"title": "THE BRUTAL TRUTH:", "content": "[Provocative statement with real numbers]", "type": "warning"}},
    {{"title": "THE REALITY:", "content": "[Another insight from the research]", "type": "info"}}
  ],
  "statisticsCards": [
    {{"currentNumber": "{projection.current_traffic:,}", "currentLabel": "monthly visitors today", "targetNumber": "{projection.projected_traffic:,}", "targetLabel": "monthly visitors in 12 months", "context": "[Why this gap matters]"}}
  ],
  "simpleMathBreakdown": {{
    "steps": [{{"month": "Month 3", "traffic": 0, "leads": 0, "customers": 0, "revenue": 0}}],
    "totalInvestment": {roi.annual_investment},
    "totalReturn": {projection.annual_revenue},
    "roi": {roi.roi_percentage}
  }},
  "competitorComparison": {{
    "metrics": [{{"metric": "Monthly Organic Traffic", "yourBusiness": "", "topCompetitorA": "", "topCompetitorB": "", "marketLeader": ""}}]
  }},
  "marketOpportunity": {{
    "title": "[The £X Opportunity]",
    "currentState": "[Current market position]",
    "opportunitySize": "[Size of the opportunity]",
    "timeframe": "[Timeline to capture it]"
  }}
}}
```""",
            "",
            "IMPORTANT:",
            "- Use ONLY data from the research provided",
            "- simpleMathBreakdown steps for Month 3, 6 and 12 must copy the progression above",
            "- competitorComparison must name real competitors from the live search data when available",
            f"- Tailor everything specifically to {company}",
            "- No placeholders: every field must have real content",
        ]
        return sanitize_for_prompt("\n".join(sections))

    def pin_calculated_fields(
        self,
        data: Dict[str, Any],
        request: ContentGenerationRequest,
        package: PackageTier,
        projection: ProjectionCalculation,
        progression: List[ProgressionPoint],
    ) -> Dict[str, Any]:
        cover = data.get("coverPage")
        if isinstance(cover, dict):
            cover["companyName"] = request.company_name
            if request.contact_name:
                cover["preparedFor"] = request.contact_name

        data["packageOptions"] = [option.to_option() for option in PACKAGE_TIERS.values()]

        projections = data.get("projections")
        if isinstance(projections, dict):
            month6 = _point(progression, 6)
            roi = calculate_roi(package.monthly_investment, projection)
            pin_value(projections, "month6", {
                "traffic": month6.traffic, "leads": month6.leads, "revenue": month6.revenue,
            }, "month 6 projection")
            pin_value(projections, "month12", {
                "traffic": projection.projected_traffic,
                "leads": projection.monthly_leads,
                "revenue": projection.monthly_revenue,
            }, "month 12 projection")
            roi_section = projections.get("roi")
            if isinstance(roi_section, dict):
                pin_value(roi_section, "percentage", roi.roi_percentage, "ROI percentage")
                pin_value(roi_section, "lifetimeValue", projection.annual_revenue, "lifetime value")
                if roi.breakeven_months and not roi_section.get("paybackPeriod"):
                    roi_section["paybackPeriod"] = f"{roi.breakeven_months} months"

        breakdown = data.get("simpleMathBreakdown")
        if isinstance(breakdown, dict):
            roi = calculate_roi(package.monthly_investment, projection)
            breakdown["steps"] = [
                {
                    "month": f"Month {point.month}",
                    "traffic": point.traffic,
                    "leads": point.leads,
                    "customers": point.customers,
                    "revenue": point.revenue,
                }
                for point in progression
                if point.month in SIMPLE_MATH_MONTHS
            ]
            pin_value(breakdown, "totalInvestment", roi.annual_investment, "total investment")
            pin_value(breakdown, "totalReturn", projection.annual_revenue, "total return")
            pin_value(breakdown, "roi", roi.roi_percentage, "simple math ROI")

        if request.package_tier == "national":
            data.pop("localSEO", None)

        return data


def _point(progression: List[ProgressionPoint], month: int) -> ProgressionPoint:
    for point in progression:
        if point.month == month:
            return point
    return progression[-1]
