"""
Generation Orchestrator

Runs one proposal generation end to end and streams its progress:

    validating -> researching -> generating_content -> rendering
               -> persisting -> complete

Any failure moves the run to `failed` with a user-facing message. Nothing is
stored or numbered until rendering has succeeded, and a proposal row is
written only after its artifact is stored.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, AsyncIterator, Dict, Optional

from ..content import (
    BaseContentGenerator,
    ConciseContentGenerator,
    ContentGenerationRequest,
    ContentValidationError,
    DetailedContentGenerator,
    ReferenceDocumentLoader,
    load_proposal_content,
)
from ..llm import ClaudeGateway, LLMError, ProposalParseError, RetryPolicy, format_llm_error
from ..renderer import PDFRenderError, get_proposal_filename, is_valid_template_style, render_proposal
from ..research import (
    CompanyResearchAgent,
    EnhancedResearchAgent,
    RequestValidationError,
    ResearchRequest,
    ResearchResult,
    ResearchValidationError,
    SearchAPIError,
    SerpApiClient,
    validate_research_request,
)
from ..utils.config import Settings, get_settings
from .events import GenerationStage, ProgressEvent, format_sse, scale_research_progress
from .storage import (
    ArtifactStorage,
    CustomerStore,
    FileStorage,
    ProposalRecord,
    ProposalStore,
    new_proposal_id,
)

logger = logging.getLogger(__name__)

PROPOSAL_MODES = ("concise", "detailed")
OUTPUT_FORMATS = ("pdf", "html")


class ProposalNotFoundError(LookupError):
    """No proposal row with the requested id."""
    pass


class MissingContentError(ValueError):
    """The proposal row carries no stored content to re-render."""
    pass


class GenerationTimeout(Exception):
    """A run exceeded its wall-clock deadline."""

    def __init__(self, timeout_seconds: float):
        super().__init__(f"Proposal generation timed out after {timeout_seconds:g} seconds")
        self.timeout_seconds = timeout_seconds


@dataclass
class GenerationRequest:
    """A request to generate a proposal for a customer."""
    customer_id: str
    package_tier: str = "local"
    proposal_mode: str = "concise"
    template_style: str = "classic"
    prefer_opus: bool = False
    output_format: str = "pdf"
    custom_instructions: Optional[str] = None


def user_message(error: BaseException) -> str:
    """Message shown to the user for a failed run."""
    if isinstance(error, (GenerationTimeout, RequestValidationError, ProposalNotFoundError, MissingContentError)):
        return str(error)
    if isinstance(error, ProposalParseError):
        return "Claude returned an invalid proposal format. Please try again."
    if isinstance(error, (ContentValidationError, ResearchValidationError)):
        return f"Generated content was incomplete: {error}"
    if isinstance(error, PDFRenderError):
        return f"Failed to render proposal document: {error}"
    if isinstance(error, SearchAPIError):
        return f"Search data request failed: {error}"
    if isinstance(error, LLMError) or getattr(error, "status_code", None) is not None:
        return format_llm_error(error)
    return f"Proposal generation failed: {error}"


def estimate_generation_time(package_tier: str) -> Dict[str, int]:
    """Rough duration range for a tier, for UI hints."""
    estimates = {
        "local": {"minSeconds": 60, "maxSeconds": 120, "averageSeconds": 90},
        "regional": {"minSeconds": 80, "maxSeconds": 140, "averageSeconds": 110},
        "national": {"minSeconds": 100, "maxSeconds": 160, "averageSeconds": 130},
    }
    return estimates.get(package_tier, estimates["local"])


def estimate_generation_cost(package_tier: str) -> Dict[str, float]:
    """Rough Claude cost range (GBP) for a tier, for UI hints."""
    estimates = {
        "local": {"minCost": 0.60, "maxCost": 0.90, "averageCost": 0.75},
        "regional": {"minCost": 0.80, "maxCost": 1.20, "averageCost": 1.00},
        "national": {"minCost": 1.00, "maxCost": 1.50, "averageCost": 1.25},
    }
    return estimates.get(package_tier, estimates["local"])


class GenerationOrchestrator:
    """
    Orchestrates research, content generation, rendering and persistence.

    Usage:
        orchestrator = GenerationOrchestrator.from_settings(customers, proposals)
        async for event in orchestrator.run(request):
            ...
    """

    def __init__(
        self,
        gateway: ClaudeGateway,
        customer_store: CustomerStore,
        proposal_store: ProposalStore,
        storage: ArtifactStorage,
        research_agent: Optional[CompanyResearchAgent] = None,
        reference_loader: Optional[ReferenceDocumentLoader] = None,
        pdf_engine: str = "reportlab",
        converter: Any = None,
        timeout_seconds: Optional[float] = 600,
    ):
        """
        Initialize orchestrator.

        Args:
            gateway: Claude gateway shared by research and content
            customer_store: Customer record source
            proposal_store: Proposal row sink
            storage: Artifact storage
            research_agent: Research agent (built from gateway when omitted, without live search)
            reference_loader: Reference proposal PDF for detailed proposals
            pdf_engine: Classic PDF engine (reportlab, chromium, weasyprint)
            converter: HTML to PDF converter override
            timeout_seconds: Per-run deadline (None disables it)
        """
        self.gateway = gateway
        self.customer_store = customer_store
        self.proposal_store = proposal_store
        self.storage = storage
        self.research_agent = research_agent or CompanyResearchAgent(gateway)
        self.reference_loader = reference_loader
        self.pdf_engine = pdf_engine
        self.converter = converter
        self.timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(
        cls,
        customer_store: CustomerStore,
        proposal_store: ProposalStore,
        settings: Optional[Settings] = None,
        storage: Optional[ArtifactStorage] = None,
    ) -> "GenerationOrchestrator":
        settings = settings or get_settings()
        gateway = ClaudeGateway.from_settings(settings)

        enhanced_agent = None
        if settings.SERPAPI_API_KEY:
            search = SerpApiClient(
                api_key=settings.SERPAPI_API_KEY,
                retry_policy=RetryPolicy(max_retries=settings.LLM_MAX_RETRIES),
                country=settings.SEARCH_COUNTRY,
                language=settings.SEARCH_LANGUAGE,
                timeout=settings.API_TIMEOUT,
            )
            enhanced_agent = EnhancedResearchAgent(search)
        else:
            logger.warning("SERPAPI_API_KEY not set - research will run without live search data")

        return cls(
            gateway=gateway,
            customer_store=customer_store,
            proposal_store=proposal_store,
            storage=storage or FileStorage(settings.STORAGE_PATH, settings.PUBLIC_BASE_URL),
            research_agent=CompanyResearchAgent(gateway, enhanced_agent),
            reference_loader=ReferenceDocumentLoader.from_settings(settings),
            pdf_engine=settings.PDF_ENGINE,
            timeout_seconds=settings.GENERATION_TIMEOUT,
        )

    async def close(self) -> None:
        """Release the search client's connection pool."""
        enhanced = getattr(self.research_agent, "enhanced_agent", None)
        if enhanced is not None:
            await enhanced.search.close()

    # ========================================================================
    # STREAMING
    # ========================================================================

    async def run(self, request: GenerationRequest) -> AsyncIterator[ProgressEvent]:
        """
        Run a generation, yielding progress events.

        The last event is always terminal: complete or failed.
        """
        queue: asyncio.Queue = asyncio.Queue()
        task = asyncio.create_task(self._run_guarded(request, queue.put_nowait))
        try:
            while True:
                event = await queue.get()
                yield event
                if event.is_terminal:
                    break
        finally:
            if not task.done():
                # Consumer went away; the run keeps no partial state
                task.cancel()
            await asyncio.gather(task, return_exceptions=True)

    async def stream(self, request: GenerationRequest) -> AsyncIterator[str]:
        """Server-sent event lines for a generation."""
        async for event in self.run(request):
            yield format_sse(event)

    async def _run_guarded(self, request: GenerationRequest, emit) -> None:
        start_time = time.time()
        try:
            if self.timeout_seconds:
                try:
                    await asyncio.wait_for(self.execute(request, emit), timeout=self.timeout_seconds)
                except asyncio.TimeoutError as e:
                    raise GenerationTimeout(self.timeout_seconds) from e
            else:
                await self.execute(request, emit)
        except Exception as e:
            duration = time.time() - start_time
            logger.error(
                f"Proposal generation failed for customer {request.customer_id} after {duration:.1f}s: {e}",
                exc_info=not isinstance(e, (RequestValidationError, GenerationTimeout)),
            )
            emit(ProgressEvent.failed(user_message(e)))

    # ========================================================================
    # PIPELINE
    # ========================================================================

    def _content_generator(self, proposal_mode: str) -> BaseContentGenerator:
        if proposal_mode == "detailed":
            return DetailedContentGenerator(self.gateway, self.reference_loader, opus_model=self.gateway.research_model)
        return ConciseContentGenerator(self.gateway, opus_model=self.gateway.research_model)

    async def execute(self, request: GenerationRequest, emit) -> ProposalRecord:
        """
        Run every stage, reporting through emit.

        Returns:
            The stored proposal row

        Raises:
            Whatever the failing stage raised
        """
        start_time = time.time()

        # Stage 1: Validation
        emit(ProgressEvent.running(GenerationStage.VALIDATING))
        if request.proposal_mode not in PROPOSAL_MODES:
            raise RequestValidationError(f"Invalid proposal mode '{request.proposal_mode}'")
        if not is_valid_template_style(request.template_style):
            raise RequestValidationError(f"Invalid template style '{request.template_style}'")
        if request.output_format not in OUTPUT_FORMATS:
            raise RequestValidationError(f"Invalid output format '{request.output_format}'")

        customer = await self.customer_store.get_customer(request.customer_id)
        if customer is None:
            raise RequestValidationError(f"Customer {request.customer_id} not found")

        research_request = ResearchRequest(
            company_name=customer.display_name,
            website=customer.website,
            industry=customer.industry,
            location=customer.location,
            package_tier=request.package_tier,
        )
        validate_research_request(research_request)
        company_name = research_request.company_name

        logger.info(
            f"Generating {request.proposal_mode} proposal for {company_name} "
            f"({request.package_tier}, {request.template_style})"
        )

        # Stage 2: Research
        emit(ProgressEvent.running(GenerationStage.RESEARCHING))

        def on_research_progress(stage: str, percent: int) -> None:
            emit(ProgressEvent.running(GenerationStage.RESEARCHING, scale_research_progress(percent), stage))

        research = await self.research_agent.perform_deep_research(
            research_request,
            on_progress=on_research_progress,
            additional_context=customer.notes,
        )

        # Stage 3: Content
        emit(ProgressEvent.running(GenerationStage.GENERATING_CONTENT))
        generator = self._content_generator(request.proposal_mode)
        content_result = await generator.generate_with_telemetry(ContentGenerationRequest(
            research=research,
            company_name=company_name,
            package_tier=request.package_tier,
            contact_name=customer.contact_name,
            location=customer.location,
            notes=customer.notes,
            average_deal_size=customer.average_deal_size,
            profit_per_deal=customer.profit_per_deal,
            conversion_rate=customer.conversion_rate,
            custom_instructions=request.custom_instructions,
            prefer_opus=request.prefer_opus,
        ))

        # Stage 4: Rendering
        emit(ProgressEvent.running(GenerationStage.RENDERING))
        document = await render_proposal(
            content_result.content,
            template_style=request.template_style,
            output=request.output_format,
            company_name=company_name,
            research=research,
            package_tier=request.package_tier,
            pdf_engine=self.pdf_engine,
            converter=self.converter,
        )

        # Stage 5: Persistence
        emit(ProgressEvent.running(GenerationStage.PERSISTING))
        proposal_number = await self.proposal_store.next_proposal_number()
        filename = get_proposal_filename(company_name, proposal_number, extension=request.output_format)
        key = f"proposals/{customer.id}/{filename}"

        total_tokens = research.total_tokens_used + content_result.usage.total_tokens
        total_cost = round(research.estimated_cost + content_result.cost, 4)
        duration = round(time.time() - start_time, 1)

        record = ProposalRecord(
            id=new_proposal_id(),
            proposal_number=proposal_number,
            customer_id=customer.id,
            url="",
            package_tier=request.package_tier,
            proposal_mode=request.proposal_mode,
            template_style=request.template_style,
            company_name=company_name,
            total_tokens=total_tokens,
            total_cost=total_cost,
            duration_seconds=duration,
            output_format=request.output_format,
            content=content_result.content.model_dump(by_alias=True, mode="json"),
            research=research.model_dump(by_alias=True, mode="json"),
        )
        await self._store_then_record(key, document, record, self.proposal_store.create_proposal)

        logger.info(
            f"Proposal {proposal_number} complete for {company_name}: "
            f"{total_tokens:,} tokens, £{total_cost:.4f}, {duration}s"
        )
        emit(ProgressEvent.complete(proposal_number, record.url, {
            "totalDurationSeconds": duration,
            "totalTokensUsed": total_tokens,
            "totalCost": total_cost,
        }))
        return record

    async def _store_then_record(
        self,
        key: str,
        document,
        record: ProposalRecord,
        write,
        replaces_existing: bool = False,
    ) -> ProposalRecord:
        """
        Store the artifact, then write its row.

        A new artifact is removed again when the row write fails or the run
        is cancelled in between, so no file outlives a missing row. An
        artifact written over an existing key is left for the existing row.
        """
        try:
            await self.storage.save_binary(key, document.data, document.content_type)
            record.storage_key = key
            record.url = self.storage.get_url(key) or key
            return await write(record)
        except BaseException:
            if not replaces_existing:
                await asyncio.shield(self.storage.delete(key))
            raise

    # ========================================================================
    # RE-RENDERING
    # ========================================================================

    async def rerender(
        self,
        proposal_id: str,
        template_style: Optional[str] = None,
        output_format: Optional[str] = None,
    ) -> ProposalRecord:
        """
        Render a stored proposal again from its saved content.

        No Claude call is made. The proposal keeps its number; the new
        artifact replaces the old one and the row points at it.

        Raises:
            ProposalNotFoundError: Unknown proposal id
            MissingContentError: The row has no stored content
            RequestValidationError: Unknown template style or output format
        """
        record = await self.proposal_store.get_proposal(proposal_id)
        if record is None:
            raise ProposalNotFoundError(f"Proposal {proposal_id} not found")
        if not record.content:
            raise MissingContentError(
                f"Proposal {record.proposal_number} has no stored content. Please generate a new proposal."
            )

        template_style = template_style or record.template_style
        output_format = output_format or record.output_format
        if not is_valid_template_style(template_style):
            raise RequestValidationError(f"Invalid template style '{template_style}'")
        if output_format not in OUTPUT_FORMATS:
            raise RequestValidationError(f"Invalid output format '{output_format}'")

        content = load_proposal_content(record.content)
        research = ResearchResult.model_validate(record.research) if record.research else None

        logger.info(f"Re-rendering proposal {record.proposal_number} ({template_style}, {output_format})")
        start_time = time.time()
        render = render_proposal(
            content,
            template_style=template_style,
            output=output_format,
            company_name=record.company_name,
            research=research,
            package_tier=record.package_tier,
            proposal_number=record.proposal_number,
            pdf_engine=self.pdf_engine,
            converter=self.converter,
        )
        if self.timeout_seconds:
            try:
                document = await asyncio.wait_for(render, timeout=self.timeout_seconds)
            except asyncio.TimeoutError as e:
                raise GenerationTimeout(self.timeout_seconds) from e
        else:
            document = await render

        key = f"proposals/{record.customer_id}/{document.filename}"
        updated = replace(
            record,
            template_style=template_style,
            output_format=output_format,
            updated_at=datetime.now(),
        )
        await self._store_then_record(
            key, document, updated, self.proposal_store.update_proposal,
            replaces_existing=key == record.storage_key,
        )
        if record.storage_key and record.storage_key != key:
            await self.storage.delete(record.storage_key)

        logger.info(
            f"Proposal {record.proposal_number} re-rendered in {time.time() - start_time:.1f}s: {updated.url}"
        )
        return updated
