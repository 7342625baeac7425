"""
Content Module

Turns research into typed proposal content:
- Package tiers and the deterministic projection calculator
- Detailed and concise Claude content generators
- Typed proposal schemas validated right after parsing
"""

from .base import BaseContentGenerator, ContentGenerationRequest, ContentResult
from .concise import ConciseContentGenerator
from .detailed import DetailedContentGenerator
from .packages import (
    DEFAULT_GROWTH_MULTIPLIER,
    PACKAGE_TIERS,
    PackageTier,
    describe_package,
    get_package,
    growth_multiplier_for,
    require_package,
)
from .projections import (
    DEFAULT_CURRENT_TRAFFIC,
    DEFAULT_DEAL_VALUE,
    ProgressionPoint,
    ProjectionCalculation,
    RoiSummary,
    calculate_monthly_progression,
    calculate_projections,
    calculate_roi,
    format_projections_for_prompt,
)
from .reference import ReferenceDocumentLoader
from .sanitizer import fix_encoding, sanitize_content
from .schemas import (
    ConciseProposal,
    ContentValidationError,
    DetailedProposal,
    ProposalContent,
    load_proposal_content,
    parse_proposal_content,
)

__all__ = [
    # Generators
    "BaseContentGenerator",
    "ConciseContentGenerator",
    "ContentGenerationRequest",
    "ContentResult",
    "DetailedContentGenerator",
    # Packages
    "DEFAULT_GROWTH_MULTIPLIER",
    "PACKAGE_TIERS",
    "PackageTier",
    "describe_package",
    "get_package",
    "growth_multiplier_for",
    "require_package",
    # Projections
    "DEFAULT_CURRENT_TRAFFIC",
    "DEFAULT_DEAL_VALUE",
    "ProgressionPoint",
    "ProjectionCalculation",
    "RoiSummary",
    "calculate_monthly_progression",
    "calculate_projections",
    "calculate_roi",
    "format_projections_for_prompt",
    # Reference document
    "ReferenceDocumentLoader",
    # Sanitizer
    "fix_encoding",
    "sanitize_content",
    # Schemas
    "ConciseProposal",
    "ContentValidationError",
    "DetailedProposal",
    "ProposalContent",
    "load_proposal_content",
    "parse_proposal_content",
]
