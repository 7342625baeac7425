"""
Research Module

Live search-engine research and Claude deep research on prospects.
"""

from .company import CompanyResearchAgent, ResearchValidationError, build_research_prompt
from .external import (
    EnhancedResearchAgent,
    detect_intent,
    estimate_difficulty,
    estimate_search_volume,
)
from .keywords import (
    INDUSTRY_TO_SERVICES,
    ServiceKeywords,
    generate_keywords,
    get_services_for_industry,
    parse_location,
)
from .models import (
    EnhancedResearchResult,
    RequestValidationError,
    ResearchRequest,
    ResearchResult,
    extract_domain,
    validate_company_data,
    validate_research_request,
)
from .search import SearchAPIError, SerpApiClient

__all__ = [
    # Agents
    "CompanyResearchAgent",
    "EnhancedResearchAgent",
    "ResearchValidationError",
    "build_research_prompt",
    # Heuristics
    "detect_intent",
    "estimate_difficulty",
    "estimate_search_volume",
    # Keywords
    "INDUSTRY_TO_SERVICES",
    "ServiceKeywords",
    "generate_keywords",
    "get_services_for_industry",
    "parse_location",
    # Models
    "EnhancedResearchResult",
    "RequestValidationError",
    "ResearchRequest",
    "ResearchResult",
    "extract_domain",
    "validate_company_data",
    "validate_research_request",
    # Search
    "SearchAPIError",
    "SerpApiClient",
]
