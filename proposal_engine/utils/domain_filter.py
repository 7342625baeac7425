"""
Domain Filtering Utilities

Domain exclusion used when inferring competitors from search results.
Directories, social platforms and reference sites rank for local service
queries but are never a prospect's real competitors.
"""

import logging
from typing import Optional, Set

logger = logging.getLogger(__name__)


# =============================================================================
# EXCLUDED DOMAINS
# =============================================================================

SOCIAL_MEDIA = {
    "facebook.com", "fb.com",
    "twitter.com", "x.com",
    "instagram.com",
    "linkedin.com",
    "tiktok.com",
    "pinterest.com", "pinterest.co.uk",
    "reddit.com",
    "nextdoor.co.uk", "nextdoor.com",
}

VIDEO_PLATFORMS = {
    "youtube.com", "youtu.be",
    "vimeo.com",
}

# Trade directories and lead-gen marketplaces (UK home services)
TRADE_DIRECTORIES = {
    "checkatrade.com",
    "ratedpeople.com",
    "mybuilder.com",
    "trustatrader.com",
    "yell.com",
    "bark.com",
    "houzz.co.uk", "houzz.com",
    "which.co.uk",
    "thomsonlocal.com",
    "freeindex.co.uk",
    "scoot.co.uk",
    "cylex-uk.co.uk",
    "192.com",
    "hotfrog.co.uk",
    "threebestrated.co.uk",
}

REVIEW_SITES = {
    "trustpilot.com", "uk.trustpilot.com",
    "yelp.com", "yelp.co.uk",
    "tripadvisor.com", "tripadvisor.co.uk",
    "reviews.co.uk",
    "feefo.com",
    "glassdoor.com", "glassdoor.co.uk",
    "indeed.com", "indeed.co.uk",
}

REFERENCE_SITES = {
    "wikipedia.org",
    "quora.com",
    "medium.com",
    "bbc.co.uk", "bbc.com",
    "theguardian.com",
    "moneysavingexpert.com",
}

MARKETPLACES = {
    "amazon.co.uk", "amazon.com",
    "ebay.co.uk", "ebay.com",
    "google.com", "google.co.uk",
    "screwfix.com", "b-and-q.co.uk", "diy.com",
}

GOVERNMENT_PATTERNS = {
    ".gov.uk",
    ".gov",
    ".nhs.uk",
    ".ac.uk",
    ".police.uk",
}

EXCLUDED_DOMAINS: Set[str] = (
    SOCIAL_MEDIA |
    VIDEO_PLATFORMS |
    TRADE_DIRECTORIES |
    REVIEW_SITES |
    REFERENCE_SITES |
    MARKETPLACES
)

# Brands whose presence in the top 10 signals a hard keyword
MAJOR_BRAND_MARKERS = ("amazon", "ebay", "gov.uk", "bbc")


def _normalize(domain: str) -> str:
    domain_lower = domain.lower().strip()
    if domain_lower.startswith("www."):
        domain_lower = domain_lower[4:]
    return domain_lower


def is_excluded_domain(domain: Optional[str]) -> bool:
    """
    Check if a domain should be excluded from competitor analysis.

    Matches known domains, their subdomains and government/education suffixes.
    """
    if not domain:
        return True

    domain_lower = _normalize(domain)

    if domain_lower in EXCLUDED_DOMAINS:
        return True

    for excluded in EXCLUDED_DOMAINS:
        if domain_lower.endswith("." + excluded):
            return True

    for pattern in GOVERNMENT_PATTERNS:
        if domain_lower.endswith(pattern):
            return True

    return False


def get_exclusion_reason(domain: str) -> Optional[str]:
    """Reason a domain is excluded, or None if it is a valid competitor."""
    if not domain:
        return "Empty domain"

    domain_lower = _normalize(domain)

    def _in(group: Set[str]) -> bool:
        return domain_lower in group or any(domain_lower.endswith("." + d) for d in group)

    if _in(SOCIAL_MEDIA):
        return "Social media platform"
    if _in(VIDEO_PLATFORMS):
        return "Video platform"
    if _in(TRADE_DIRECTORIES):
        return "Trade directory"
    if _in(REVIEW_SITES):
        return "Review site"
    if _in(REFERENCE_SITES):
        return "Reference or news site"
    if _in(MARKETPLACES):
        return "Marketplace"
    if any(domain_lower.endswith(p) for p in GOVERNMENT_PATTERNS):
        return "Government or educational site"
    return None
