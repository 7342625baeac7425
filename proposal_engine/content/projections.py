"""
Projection Calculator

Deterministic visitor -> lead -> customer -> revenue funnel.

This is the single source of truth for every number the proposal quotes.
Generators embed its output verbatim in prompts and pin it back into the
parsed content, so it must stay a pure function of its inputs.
"""

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

from .packages import PackageTier, get_package, growth_multiplier_for

# Conversion defaults for high-ticket local services
VISITOR_TO_LEAD = 0.06
LEAD_TO_CUSTOMER = 0.35
VISITOR_TO_CUSTOMER = 0.021

DEFAULT_CURRENT_TRAFFIC = 200
DEFAULT_DEAL_VALUE = 5000

PROGRESSION_MONTHS = (0, 1, 2, 3, 6, 9, 12)


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values."""
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class ConversionRates:
    visitor_to_lead: float = VISITOR_TO_LEAD
    lead_to_customer: float = LEAD_TO_CUSTOMER
    visitor_to_customer: float = VISITOR_TO_CUSTOMER


@dataclass(frozen=True)
class ProjectionCalculation:
    """Result of calculate_projections. Never drifts from its inputs."""
    current_traffic: int
    projected_traffic: int
    multiplier: float
    monthly_leads: int
    monthly_customers: int
    monthly_revenue: int
    annual_leads: int
    annual_revenue: int
    conversion_rates: ConversionRates
    avg_deal_value: float
    package_name: str
    monthly_profit: Optional[int] = None
    annual_profit: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ProgressionPoint:
    month: int
    traffic: int
    leads: int
    customers: int
    revenue: int


def normalize_conversion_rate(rate: Optional[float]) -> Optional[float]:
    """Accept 5 (percent) or 0.05 (fraction); None or non-positive means unknown."""
    if rate is None:
        return None
    try:
        rate = float(rate)
    except (TypeError, ValueError):
        return None
    if rate <= 0:
        return None
    return rate / 100 if rate > 1 else rate


def calculate_projections(
    current_traffic: Optional[float],
    package: Optional[str],
    avg_deal_value: Optional[float] = DEFAULT_DEAL_VALUE,
    conversion_rate: Optional[float] = None,
    profit_per_deal: Optional[float] = None,
) -> ProjectionCalculation:
    """
    Calculate projections for a package.

    Args:
        current_traffic: Current monthly organic visitors (default 200 when unknown)
        package: Tier key ("local") or package name ("Local Dominance")
        avg_deal_value: Revenue per customer
        conversion_rate: Real visitor-to-lead rate from the customer record
        profit_per_deal: Profit per customer from the customer record

    Returns:
        ProjectionCalculation
    """
    if current_traffic is None:
        traffic = DEFAULT_CURRENT_TRAFFIC
    else:
        traffic = max(0, round_half_up(current_traffic))
    deal_value = avg_deal_value if avg_deal_value and avg_deal_value > 0 else DEFAULT_DEAL_VALUE

    visitor_to_lead = normalize_conversion_rate(conversion_rate) or VISITOR_TO_LEAD
    rates = ConversionRates(
        visitor_to_lead=visitor_to_lead,
        lead_to_customer=LEAD_TO_CUSTOMER,
        visitor_to_customer=round(visitor_to_lead * LEAD_TO_CUSTOMER, 4),
    )

    package_info: Optional[PackageTier] = get_package(package)
    multiplier = growth_multiplier_for(package)

    projected_traffic = round_half_up(traffic * multiplier)
    monthly_leads = round_half_up(projected_traffic * rates.visitor_to_lead)
    monthly_customers = round_half_up(monthly_leads * rates.lead_to_customer)
    monthly_revenue = round_half_up(monthly_customers * deal_value)

    monthly_profit = None
    annual_profit = None
    if profit_per_deal and profit_per_deal > 0:
        monthly_profit = round_half_up(monthly_customers * profit_per_deal)
        annual_profit = monthly_profit * 12

    return ProjectionCalculation(
        current_traffic=traffic,
        projected_traffic=projected_traffic,
        multiplier=multiplier,
        monthly_leads=monthly_leads,
        monthly_customers=monthly_customers,
        monthly_revenue=monthly_revenue,
        annual_leads=monthly_leads * 12,
        annual_revenue=monthly_revenue * 12,
        conversion_rates=rates,
        avg_deal_value=deal_value,
        package_name=package_info.name if package_info else (package or ""),
        monthly_profit=monthly_profit,
        annual_profit=annual_profit,
    )


def growth_fraction(month: int) -> float:
    """Share of total growth reached by a month."""
    if month <= 0:
        return 0.0
    if month <= 3:
        return 0.3
    if month <= 6:
        return 0.6
    if month <= 9:
        return 0.85
    return 1.0


def calculate_monthly_progression(
    current_traffic: int,
    final_multiplier: float,
    conversion_rate: float = VISITOR_TO_LEAD,
    avg_deal_value: float = DEFAULT_DEAL_VALUE,
    months: tuple = PROGRESSION_MONTHS,
) -> List[ProgressionPoint]:
    """Month-by-month growth curve (30% of growth by month 3, 60% by 6, 85% by 9)."""
    points = []
    for month in months:
        factor = 1.0 + (final_multiplier - 1.0) * growth_fraction(month)
        traffic = round_half_up(current_traffic * factor)
        leads = round_half_up(traffic * conversion_rate)
        customers = round_half_up(leads * LEAD_TO_CUSTOMER)
        points.append(ProgressionPoint(
            month=month,
            traffic=traffic,
            leads=leads,
            customers=customers,
            revenue=round_half_up(customers * avg_deal_value),
        ))
    return points


@dataclass(frozen=True)
class RoiSummary:
    annual_investment: int
    annual_revenue: int
    roi_percentage: int
    breakeven_months: Optional[int]


def calculate_roi(monthly_investment: int, projection: ProjectionCalculation) -> RoiSummary:
    """ROI of a package against a projection."""
    annual_investment = monthly_investment * 12
    annual_revenue = projection.annual_revenue

    roi = 0
    if annual_investment > 0:
        roi = int(round((annual_revenue - annual_investment) / annual_investment * 100))

    breakeven = None
    if projection.monthly_revenue > 0:
        breakeven = math.ceil(annual_investment / projection.monthly_revenue)

    return RoiSummary(
        annual_investment=annual_investment,
        annual_revenue=annual_revenue,
        roi_percentage=roi,
        breakeven_months=breakeven,
    )


def format_projections_for_prompt(projection: ProjectionCalculation, monthly_investment: int) -> str:
    """Projection block embedded verbatim in content prompts."""
    roi = calculate_roi(monthly_investment, projection)
    rates = projection.conversion_rates
    lines = [
        f"Current Traffic: {projection.current_traffic:,} visitors/month",
        f"Growth Multiplier: {projection.multiplier}x",
        f"Projected Traffic (Month 12): {projection.projected_traffic:,} visitors/month",
        f"Visitor to Lead: {rates.visitor_to_lead * 100:.1f}%",
        f"Lead to Customer: {rates.lead_to_customer * 100:.1f}%",
        f"Monthly Leads: {projection.monthly_leads:,}",
        f"Monthly Customers: {projection.monthly_customers:,}",
        f"Average Deal Value: £{projection.avg_deal_value:,.0f}",
        f"Monthly Revenue: £{projection.monthly_revenue:,}",
        f"Annual Revenue: £{projection.annual_revenue:,}",
        f"Annual Investment: £{roi.annual_investment:,}",
        f"ROI: {roi.roi_percentage}%",
        f"Breakeven: {roi.breakeven_months} months" if roi.breakeven_months else "Breakeven: n/a",
    ]
    if projection.annual_profit is not None:
        lines.append(f"Annual Profit: £{projection.annual_profit:,}")
    return "\n".join(lines)
