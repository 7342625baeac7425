"""
Industry to Service Keyword Mapping

Translates a free-text industry label into real service search terms so
competitor discovery searches what customers search ("roofers Leeds"),
not the client's own brand name.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

FALLBACK_INDUSTRY = "Services"
DEFAULT_COUNTRY = "UK"

_TRAILING_PUNCTUATION = re.compile(r"[.,;:!?]+$")


@dataclass(frozen=True)
class ServiceKeywords:
    """Search terms for one industry."""
    primary_services: List[str]
    secondary_services: List[str]
    related_terms: List[str]


@dataclass
class ParsedLocation:
    """Components of a "City, County, Country" location string."""
    full: str
    city: Optional[str] = None
    county: Optional[str] = None
    country: Optional[str] = None
    parts: List[str] = field(default_factory=list)


def _services(primary, secondary, related) -> ServiceKeywords:
    return ServiceKeywords(list(primary), list(secondary), list(related))


# ============================================================================
# INDUSTRY TABLE
# ============================================================================

INDUSTRY_TO_SERVICES: Dict[str, ServiceKeywords] = {
    # Energy & sustainability
    "Solar": _services(
        ["solar panel installation", "solar panel installers", "solar panels", "solar pv installation"],
        ["solar battery storage", "solar energy systems", "solar panel maintenance",
         "solar panel repair", "commercial solar installation", "residential solar panels"],
        ["renewable energy", "solar power", "photovoltaic systems", "solar energy"],
    ),
    "Renewable Energy": _services(
        ["renewable energy solutions", "solar installation", "wind energy", "green energy"],
        ["energy storage", "battery systems", "solar pv", "renewable power"],
        ["sustainable energy", "clean energy", "eco energy"],
    ),

    # Home services
    "Plumbing": _services(
        ["plumbers", "plumbing services", "emergency plumber", "plumbing repairs"],
        ["boiler installation", "heating engineer", "drain cleaning", "leak repairs",
         "bathroom installation", "central heating"],
        ["plumbing company", "local plumber", "plumbing contractor"],
    ),
    "Electrical": _services(
        ["electricians", "electrical services", "electrical contractors", "electrical installation"],
        ["emergency electrician", "rewiring", "electrical repairs", "ev charger installation",
         "electrical testing", "commercial electrician"],
        ["electrical company", "local electrician", "certified electrician"],
    ),
    "HVAC": _services(
        ["hvac services", "air conditioning installation", "heating and cooling", "hvac contractors"],
        ["ac repair", "furnace installation", "hvac maintenance", "ductwork", "heat pump installation"],
        ["hvac company", "climate control", "air conditioning"],
    ),
    "Roofing": _services(
        ["roofing services", "roof installation", "roofers", "roof repairs"],
        ["roof replacement", "flat roofing", "tile roofing", "roof maintenance",
         "emergency roof repairs", "commercial roofing"],
        ["roofing company", "roofing contractor", "local roofer"],
    ),

    # Construction & renovation
    "Construction": _services(
        ["construction services", "building contractors", "construction company", "general contractor"],
        ["home renovation", "commercial construction", "building extensions", "new builds", "refurbishment"],
        ["construction firm", "builders", "construction contractor"],
    ),
    "Home Improvement": _services(
        ["home improvement services", "home renovation", "remodeling", "home upgrades"],
        ["kitchen renovation", "bathroom remodel", "basement finishing", "home extensions"],
        ["home improvement company", "renovation contractor", "remodeling services"],
    ),

    # Professional services
    "Accounting": _services(
        ["accounting services", "accountants", "tax services", "bookkeeping"],
        ["tax preparation", "payroll services", "financial planning", "business accounting", "tax accountant"],
        ["accounting firm", "chartered accountants", "cpa services"],
    ),
    "Legal": _services(
        ["legal services", "lawyers", "attorneys", "law firm"],
        ["business law", "family law", "estate planning", "personal injury lawyer", "corporate law"],
        ["legal advice", "solicitors", "legal counsel"],
    ),
    "Marketing": _services(
        ["marketing services", "digital marketing", "marketing agency", "marketing consultant"],
        ["seo services", "social media marketing", "content marketing", "ppc management",
         "email marketing", "brand strategy"],
        ["marketing company", "marketing firm", "advertising agency"],
    ),

    # Healthcare
    "Dental": _services(
        ["dental services", "dentist", "dental clinic", "dental practice"],
        ["teeth whitening", "dental implants", "orthodontics", "cosmetic dentistry", "emergency dentist"],
        ["dental care", "family dentist", "dental surgery"],
    ),
    "Medical": _services(
        ["medical services", "healthcare", "medical clinic", "doctor"],
        ["primary care", "urgent care", "family medicine", "medical practice"],
        ["medical center", "healthcare provider", "physician"],
    ),

    # Automotive
    "Auto Repair": _services(
        ["auto repair", "car repair", "auto service", "mechanic"],
        ["brake repair", "oil change", "transmission repair", "engine repair", "auto maintenance"],
        ["auto shop", "car service", "automotive repair"],
    ),

    # Real estate
    "Real Estate": _services(
        ["real estate services", "real estate agent", "property sales", "estate agent"],
        ["property management", "home sales", "commercial real estate", "property valuations", "lettings"],
        ["real estate agency", "property agent", "realtor"],
    ),

    # Cleaning & maintenance
    "Cleaning": _services(
        ["cleaning services", "cleaners", "commercial cleaning", "office cleaning"],
        ["residential cleaning", "deep cleaning", "carpet cleaning", "window cleaning",
         "end of tenancy cleaning"],
        ["cleaning company", "cleaning contractors", "professional cleaners"],
    ),
    "Landscaping": _services(
        ["landscaping services", "landscapers", "garden design", "lawn care"],
        ["tree surgery", "garden maintenance", "patio installation", "fencing", "artificial grass"],
        ["landscaping company", "garden services", "landscape design"],
    ),
    "Walk in Baths": _services(
        ["walk in baths", "walk in bath installation", "easy access baths", "walk in bathtubs"],
        ["disabled access baths", "mobility baths", "walk in showers", "wet rooms",
         "bath conversion", "accessible bathing"],
        ["walk in bathtubs", "easy access bathing", "mobility bathing"],
    ),

    # Food & hospitality
    "Restaurant": _services(
        ["restaurant", "dining", "food service", "catering"],
        ["takeaway", "delivery", "private dining", "event catering"],
        ["eatery", "bistro", "cafe"],
    ),

    # Technology
    "IT Services": _services(
        ["it services", "it support", "managed it services", "it consultant"],
        ["network support", "cloud services", "cybersecurity", "it infrastructure", "help desk"],
        ["it company", "technology services", "it solutions"],
    ),
    "Web Design": _services(
        ["web design", "website design", "web development", "website builder"],
        ["ecommerce development", "wordpress development", "responsive design",
         "website redesign", "web hosting"],
        ["web design agency", "web designers", "website development"],
    ),

    # Generic fallback
    FALLBACK_INDUSTRY: _services(
        ["professional services", "business services", "local services"],
        ["consulting", "contractor", "service provider"],
        ["service company", "professional company"],
    ),
}


# ============================================================================
# LOOKUP
# ============================================================================

def clean_industry_label(industry: Optional[str]) -> str:
    """Trim and strip trailing punctuation ("Walk in Baths.  " -> "Walk in Baths")."""
    if not industry:
        return ""
    return _TRAILING_PUNCTUATION.sub("", industry.strip()).strip()


def match_industry(industry: Optional[str]) -> str:
    """
    Resolve a free-text label to a key of INDUSTRY_TO_SERVICES.

    Order: exact, case-insensitive, bidirectional substring, fallback.
    """
    cleaned = clean_industry_label(industry)
    if not cleaned:
        return FALLBACK_INDUSTRY

    if cleaned in INDUSTRY_TO_SERVICES:
        return cleaned

    lowered = cleaned.lower()
    for key in INDUSTRY_TO_SERVICES:
        if key.lower() == lowered:
            logger.debug(f"Matched industry '{industry}' -> '{key}' (case-insensitive)")
            return key

    for key in INDUSTRY_TO_SERVICES:
        key_lower = key.lower()
        if key_lower in lowered or lowered in key_lower:
            logger.debug(f"Matched industry '{industry}' -> '{key}' (partial match)")
            return key

    logger.warning(f"Industry '{industry}' not found in mapping, using generic services")
    return FALLBACK_INDUSTRY


def get_services_for_industry(industry: Optional[str]) -> ServiceKeywords:
    """Service keywords for an industry. Never raises, never empty."""
    return INDUSTRY_TO_SERVICES[match_industry(industry)]


def parse_location(location: Optional[str]) -> ParsedLocation:
    """Split "City, County, Country" into components."""
    if not location:
        return ParsedLocation(full=DEFAULT_COUNTRY)

    parts = [p.strip() for p in location.split(",") if p.strip()]
    if not parts:
        return ParsedLocation(full=DEFAULT_COUNTRY)

    if len(parts) == 1:
        return ParsedLocation(full=parts[0], city=parts[0], parts=parts)

    if len(parts) == 2:
        return ParsedLocation(full=location.strip(), city=parts[0], county=parts[1], parts=parts)

    return ParsedLocation(
        full=location.strip(),
        city=parts[0],
        county=parts[1],
        country=parts[2],
        parts=parts,
    )


def generate_keywords(
    industry: Optional[str],
    location: Optional[str],
    max_keywords: int = 8,
) -> List[str]:
    """
    Build realistic service + location queries for an industry.

    Example for ("Roofing", "Leeds, UK"):
        roofing services Leeds, roof installation Leeds, roofers Leeds,
        roof repairs Leeds, roofing services near me, ...
    """
    services = get_services_for_industry(industry)
    place = parse_location(location).city

    keywords: List[str] = []
    for service in services.primary_services:
        keywords.append(f"{service} {place}" if place else service)

    keywords.append(f"{services.primary_services[0]} near me")

    for service in services.secondary_services[:2]:
        keywords.append(f"{service} {place}" if place else service)

    keywords.append(f"best {services.related_terms[0]}" if services.related_terms else services.primary_services[0])

    # Preserve order, drop duplicates
    seen = set()
    unique = []
    for keyword in keywords:
        if keyword not in seen:
            seen.add(keyword)
            unique.append(keyword)

    return unique[:max_keywords]
