"""
Concise Content Generator

Short, bullet-driven proposal (1,500-2,000 words) built around the
customer record: SDR notes, deal size, profit per deal and conversion rate.
"""

import logging
from typing import Any, Dict, List

from ..llm.prompt_utils import sanitize_for_prompt, truncate_text
from .base import BaseContentGenerator, ContentGenerationRequest, pin_value
from .packages import PackageTier
from .projections import (
    ProgressionPoint,
    ProjectionCalculation,
    calculate_roi,
    format_projections_for_prompt,
    normalize_conversion_rate,
)
from .prompts import (
    CONCISE_SYSTEM_PROMPT,
    package_section,
    progression_for_prompt,
    proposal_date,
    research_context_for_prompt,
)

logger = logging.getLogger(__name__)

MAX_NOTES_LENGTH = 4000
DEFAULT_CONTACT_INFO = "seodons.co.uk"


class ConciseContentGenerator(BaseContentGenerator):
    """
    Concise Content Generator - short proposal for quick decisions.

    Usage:
        generator = ConciseContentGenerator(gateway)
        content = await generator.generate(request)
    """

    @property
    def kind(self) -> str:
        return "concise"

    @property
    def system_prompt(self) -> str:
        return CONCISE_SYSTEM_PROMPT

    def build_user_prompt(
        self,
        request: ContentGenerationRequest,
        package: PackageTier,
        projection: ProjectionCalculation,
        progression: List[ProgressionPoint],
    ) -> str:
        company = request.company_name
        roi = calculate_roi(package.monthly_investment, projection)
        sections = [f"Generate a CONCISE SEO proposal for {company}"]

        if request.notes:
            sections += [
                "",
                "SDR NOTES (USE THESE EXACT NUMBERS):",
                truncate_text(sanitize_for_prompt(request.notes), MAX_NOTES_LENGTH),
            ]

        facts = []
        if request.average_deal_size:
            facts.append(f"Deal Size: £{request.average_deal_size:,.0f}")
        if request.profit_per_deal:
            facts.append(f"Profit per Deal: £{request.profit_per_deal:,.0f}")
        rate = normalize_conversion_rate(request.conversion_rate)
        if rate:
            facts.append(f"Conversion Rate: {rate * 100:.1f}%")
        if facts:
            sections += ["", "CUSTOMER FACTS:", *facts]

        if request.custom_instructions:
            sections += ["", "CUSTOM INSTRUCTIONS:", sanitize_for_prompt(request.custom_instructions)]

        sections += [
            "",
            "RESEARCH DATA:",
            research_context_for_prompt(request.research, include_location=request.package_tier != "national"),
            "",
            "PACKAGE:",
            package_section(request.package_tier),
            "",
            "CALCULATED PROJECTIONS (USE THESE EXACT NUMBERS):",
            format_projections_for_prompt(projection, package.monthly_investment),
            "",
            "MONTH-BY-MONTH PROGRESSION (USE THESE EXACT NUMBERS):",
            progression_for_prompt(progression),
            "",
            "Generate a CONCISE proposal with this EXACT structure:",
            "",
            f"""```json
{{
  "coverPage": {{
    "title": "[Compelling title, e.g. 'Roofing SEO Dominance Strategy']",
    "subtitle": "[One-line promise]",
    "preparedFor": "{request.contact_name or company}",
    "date": "{proposal_date()}",
    "contactInfo": "{DEFAULT_CONTACT_INFO}"
  }},
  "introduction": {{
    "currentLandscape": "[2-3 sentences on where they stand today]",
    "locationContext": "[Local market context for {request.location or 'their area'}]",
    "clientGoals": "[What they want, from the SDR notes]",
    "opportunity": "[The size of the prize in one sentence]"
  }},
  "competition": {{
    "summary": "[2 sentences naming real competitors]",
    "comparisonTable": [
      {{"metric": "Monthly Traffic", "client": "{projection.current_traffic:,}", "competitor1": "", "competitor2": "", "leader": ""}}
    ],
    "keyGaps": ["[3-4 gaps]"],
    "mainOpportunity": "[One sentence]"
  }},
  "strategy": {{
    "coreApproach": "[2 sentences]",
    "keyTactics": ["[4-6 tactics]"],
    "timeline": [{{"phase": "Month 1-2", "duration": "8 weeks", "focus": "[focus]"}}],
    "expectedOutcomes": ["[3-4 measurable outcomes]"]
  }},
  "investment": {{
    "packageName": "{package.name}",
    "monthlyInvestment": {package.monthly_investment},
    "deliverables": ["[4-6 deliverables]"],
    "projectedResults": [
      {{"metric": "Monthly Visitors", "current": "", "month3": "", "month6": "", "month12": ""}},
      {{"metric": "Enquiries/Leads", "current": "", "month3": "", "month6": "", "month12": ""}},
      {{"metric": "Revenue", "current": "", "month3": "", "month6": "", "month12": ""}}
    ],
    "roiSummary": {{
      "totalInvestment": {roi.annual_investment},
      "projectedRevenue": {projection.annual_revenue},
      "roi": {roi.roi_percentage},
      "breakeven": "{f'{roi.breakeven_months} months' if roi.breakeven_months else 'n/a'}"
    }}
  }},
  "summary": {{
    "keyBenefits": ["[3-4 benefits]"],
    "nextSteps": ["[3 steps]"],
    "callToAction": "[Strong CTA]"
  }}
}}
```""",
            "",
            "REMEMBER: Keep it CONCISE. No long explanations. Focus on impact and numbers.",
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
        data["companyName"] = request.company_name

        cover = data.get("coverPage")
        if isinstance(cover, dict):
            if request.contact_name:
                cover["preparedFor"] = request.contact_name
            elif not cover.get("preparedFor"):
                cover["preparedFor"] = request.company_name

        investment = data.get("investment")
        if isinstance(investment, dict):
            roi = calculate_roi(package.monthly_investment, projection)
            pin_value(investment, "packageName", package.name, "package name")
            pin_value(investment, "monthlyInvestment", package.monthly_investment, "monthly investment")
            if not investment.get("deliverables"):
                investment["deliverables"] = list(package.deliverables)

            roi_summary = investment.get("roiSummary")
            if isinstance(roi_summary, dict):
                pin_value(roi_summary, "totalInvestment", roi.annual_investment, "total investment")
                pin_value(roi_summary, "projectedRevenue", projection.annual_revenue, "projected revenue")
                pin_value(roi_summary, "roi", roi.roi_percentage, "ROI")
                if roi.breakeven_months:
                    roi_summary["breakeven"] = f"{roi.breakeven_months} months"

        return data
