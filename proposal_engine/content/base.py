"""
Base Content Generator

Both proposal generators share one algorithm:
1. Calculate projections first (deterministic, research-independent)
2. Build a prompt embedding the projection numbers verbatim
3. Call Claude in content mode
4. Extract JSON, sanitize it, pin the calculator-owned fields
5. Validate against the typed proposal schema

Architecture:
    BaseContentGenerator (abstract)
    ├── DetailedContentGenerator
    └── ConciseContentGenerator
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from ..llm.client import CallOptions, ClaudeGateway
from ..llm.costs import TokenUsage
from ..llm.prompt_utils import extract_json
from ..research.models import ResearchResult
from .packages import PackageTier, require_package
from .projections import (
    ProgressionPoint,
    ProjectionCalculation,
    calculate_monthly_progression,
    calculate_projections,
)
from .sanitizer import sanitize_content
from .schemas import ConciseProposal, DetailedProposal, parse_proposal_content

logger = logging.getLogger(__name__)

ProposalContentModel = Union[DetailedProposal, ConciseProposal]


# ============================================================================
# DATA CLASSES
# ============================================================================

@dataclass
class ContentGenerationRequest:
    """Everything a generator needs for one proposal."""
    research: ResearchResult
    company_name: str
    package_tier: str = "local"
    contact_name: Optional[str] = None
    location: Optional[str] = None

    # Customer-record facts (SDR notes are treated as ground truth)
    notes: Optional[str] = None
    average_deal_size: Optional[float] = None
    profit_per_deal: Optional[float] = None
    conversion_rate: Optional[float] = None

    custom_instructions: Optional[str] = None
    prefer_opus: bool = False


@dataclass
class ContentResult:
    """Validated content plus the numbers and telemetry behind it."""
    content: ProposalContentModel
    projection: ProjectionCalculation
    progression: List[ProgressionPoint]
    usage: TokenUsage = field(default_factory=TokenUsage)
    cost: float = 0.0
    model: str = ""
    duration_seconds: float = 0.0


# ============================================================================
# BASE GENERATOR
# ============================================================================

class BaseContentGenerator(ABC):
    """
    Abstract base class for proposal content generators.

    Each generator must implement:
    - kind: Proposal variant tag ("detailed" or "concise")
    - system_prompt: Tone and structure constraints
    - build_user_prompt: Prompt with research, notes and projections
    - pin_calculated_fields: Overwrite calculator-owned fields in the JSON
    """

    def __init__(self, gateway: ClaudeGateway, opus_model: Optional[str] = None):
        """
        Args:
            gateway: Claude gateway (content mode)
            opus_model: Model used when a request prefers Opus
        """
        self.gateway = gateway
        self.opus_model = opus_model or gateway.research_model

    @property
    @abstractmethod
    def kind(self) -> str:
        pass

    @property
    @abstractmethod
    def system_prompt(self) -> str:
        pass

    @abstractmethod
    def build_user_prompt(
        self,
        request: ContentGenerationRequest,
        package: PackageTier,
        projection: ProjectionCalculation,
        progression: List[ProgressionPoint],
    ) -> str:
        pass

    @abstractmethod
    def pin_calculated_fields(
        self,
        data: Dict[str, Any],
        request: ContentGenerationRequest,
        package: PackageTier,
        projection: ProjectionCalculation,
        progression: List[ProgressionPoint],
    ) -> Dict[str, Any]:
        pass

    def attachments(self) -> List[Dict[str, Any]]:
        """Extra content blocks sent before the prompt."""
        return []

    # =========================================================================
    # GENERATION
    # =========================================================================

    def calculate(self, request: ContentGenerationRequest):
        """Projection and month-by-month progression for a request."""
        projection = calculate_projections(
            current_traffic=request.research.current_monthly_traffic,
            package=request.package_tier,
            avg_deal_value=request.average_deal_size,
            conversion_rate=request.conversion_rate,
            profit_per_deal=request.profit_per_deal,
        )
        progression = calculate_monthly_progression(
            projection.current_traffic,
            projection.multiplier,
            conversion_rate=projection.conversion_rates.visitor_to_lead,
            avg_deal_value=projection.avg_deal_value,
        )
        return projection, progression

    async def generate(self, request: ContentGenerationRequest) -> ProposalContentModel:
        """Generate validated proposal content."""
        result = await self.generate_with_telemetry(request)
        return result.content

    async def generate_with_telemetry(self, request: ContentGenerationRequest) -> ContentResult:
        """
        Generate validated proposal content with usage and cost.

        Raises:
            LLMError: Claude call failed after retries
            ProposalParseError: Response was not JSON
            ContentValidationError: JSON did not match the proposal schema
        """
        start_time = time.time()
        package = require_package(request.package_tier)
        projection, progression = self.calculate(request)

        logger.info(
            f"Generating {self.kind} content for {request.company_name} "
            f"({package.name}, {projection.current_traffic} -> {projection.projected_traffic} visitors)"
        )

        user_prompt = self.build_user_prompt(request, package, projection, progression)
        options = CallOptions(
            model=self.opus_model if request.prefer_opus else None,
            attachments=self.attachments(),
        )
        response = await self.gateway.call_for_content(self.system_prompt, user_prompt, options)

        data = extract_json(response.content)
        data = sanitize_content(data)
        if isinstance(data, dict):
            data = self.pin_calculated_fields(data, request, package, projection, progression)

        content = parse_proposal_content(data, self.kind)

        duration = time.time() - start_time
        logger.info(f"{self.kind.capitalize()} content ready for {request.company_name} in {duration:.1f}s")

        return ContentResult(
            content=content,
            projection=projection,
            progression=progression,
            usage=response.usage,
            cost=response.cost,
            model=response.model,
            duration_seconds=duration,
        )


def pin_value(section: Any, key: str, value: Any, label: str) -> None:
    """Overwrite a calculator-owned field, logging when Claude drifted."""
    if not isinstance(section, dict):
        return
    current = section.get(key)
    if current is not None and current != value:
        logger.warning(f"Replacing {label} {current!r} with calculated {value!r}")
    section[key] = value
