"""
Package Tiers

The single source of truth for tier pricing, volumes and growth
assumptions. Content generators, renderers and the projection calculator
all read from PACKAGE_TIERS.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass(frozen=True)
class PackageTier:
    """One fixed service level."""
    tier: str
    name: str
    monthly_investment: int
    keyword_count: int
    content_per_month: int
    backlinks_per_month: int
    growth_multiplier: float
    coverage: str
    deliverables: List[str] = field(default_factory=list)

    @property
    def annual_investment(self) -> int:
        return self.monthly_investment * 12

    def to_option(self) -> Dict:
        """Package option as embedded in the detailed proposal schema."""
        return {
            "tier": self.tier,
            "name": self.name,
            "monthlyInvestment": self.monthly_investment,
            "deliverables": list(self.deliverables),
            "keywordCount": self.keyword_count,
            "contentPerMonth": self.content_per_month,
            "backlinksPerMonth": self.backlinks_per_month,
        }


PACKAGE_TIERS: Dict[str, PackageTier] = {
    "local": PackageTier(
        tier="local",
        name="Local Dominance",
        monthly_investment=2000,
        keyword_count=20,
        content_per_month=12,
        backlinks_per_month=15,
        growth_multiplier=2.0,
        coverage="3-5 local areas",
        deliverables=[
            "15-20 target keywords",
            "8-12 optimized content pieces per month",
            "10-15 high-quality backlinks per month",
            "3-5 local area pages",
            "Google Business Profile optimization",
            "Monthly reporting & strategy calls",
        ],
    ),
    "regional": PackageTier(
        tier="regional",
        name="Regional Authority",
        monthly_investment=3000,
        keyword_count=35,
        content_per_month=16,
        backlinks_per_month=25,
        growth_multiplier=3.0,
        coverage="5-10 regional locations",
        deliverables=[
            "25-35 target keywords",
            "12-16 optimized content pieces per month",
            "15-25 high-quality backlinks per month",
            "5-10 regional location pages",
            "Advanced technical SEO",
            "Competitor monitoring",
            "Bi-weekly reporting & strategy calls",
        ],
    ),
    "national": PackageTier(
        tier="national",
        name="National Leader",
        monthly_investment=5000,
        keyword_count=60,
        content_per_month=30,
        backlinks_per_month=40,
        growth_multiplier=4.0,
        coverage="National coverage",
        deliverables=[
            "40-60 target keywords",
            "20-30 optimized content pieces per month",
            "25-40 high-quality backlinks per month",
            "National coverage strategy",
            "Enterprise technical SEO",
            "PR & digital outreach",
            "Weekly reporting & dedicated account manager",
        ],
    ),
}

# Multiplier for package names outside the table
DEFAULT_GROWTH_MULTIPLIER = 1.5


def get_package(tier_or_name: Optional[str]) -> Optional[PackageTier]:
    """Look up a package by tier key ("local") or display name ("Local Dominance")."""
    if not tier_or_name:
        return None
    key = tier_or_name.strip().lower()
    if key in PACKAGE_TIERS:
        return PACKAGE_TIERS[key]
    for package in PACKAGE_TIERS.values():
        if package.name.lower() == key:
            return package
    return None


def require_package(tier: str) -> PackageTier:
    """Package for a tier key, raising ValueError for unknown tiers."""
    package = get_package(tier)
    if package is None:
        raise ValueError(f"Unknown package tier: {tier}")
    return package


def growth_multiplier_for(tier_or_name: Optional[str]) -> float:
    package = get_package(tier_or_name)
    return package.growth_multiplier if package else DEFAULT_GROWTH_MULTIPLIER


def describe_package(tier: str) -> str:
    """Plain-text package summary for prompts."""
    package = require_package(tier)
    return "\n".join([
        f"Package: {package.name}",
        f"Monthly Investment: £{package.monthly_investment:,}/month",
        f"Target Keywords: {package.keyword_count}",
        f"Monthly Content: {package.content_per_month} pieces",
        f"Monthly Backlinks: {package.backlinks_per_month}",
        f"Geographic Coverage: {package.coverage}",
    ])
