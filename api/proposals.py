"""
API Endpoints for Proposal Generation

FastAPI app that:
1. Starts a proposal generation for a customer and streams progress (SSE)
2. Re-renders a stored proposal in another template or format
3. Lists generated proposals
4. Lists template options and generation estimates
"""

import logging
import sys
from datetime import datetime
from typing import Literal, Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, ConfigDict, Field

from proposal_engine import __version__
from proposal_engine.pipeline import (
    GenerationOrchestrator,
    GenerationRequest,
    GenerationTimeout,
    InMemoryCustomerStore,
    InMemoryProposalStore,
    MissingContentError,
    ProposalNotFoundError,
    ProposalStore,
    estimate_generation_cost,
    estimate_generation_time,
    user_message,
)
from proposal_engine.renderer import TEMPLATE_OPTIONS
from proposal_engine.research import RequestValidationError
from proposal_engine.utils.config import get_settings


def log_level(name: str) -> int:
    """Numeric level for a LOG_LEVEL name; unknown names fall back to INFO."""
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


# Configure logging to stdout
logging.basicConfig(
    level=log_level(get_settings().LOG_LEVEL),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
    force=True,
)
logger = logging.getLogger(__name__)

# Quiet down chatty loggers
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

app = FastAPI(
    title="SEO Proposal Engine",
    description="Research, write and render SEO proposals with Claude",
    version=__version__,
)

# Record stores; a CRM-backed deployment swaps these out
customer_store = InMemoryCustomerStore()
proposal_store = InMemoryProposalStore()

_orchestrator: Optional[GenerationOrchestrator] = None


def get_orchestrator() -> GenerationOrchestrator:
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = GenerationOrchestrator.from_settings(customer_store, proposal_store, get_settings())
    return _orchestrator


def get_proposal_store() -> ProposalStore:
    return proposal_store


@app.on_event("shutdown")
async def shutdown_event():
    """Close the search client's connection pool."""
    global _orchestrator
    if _orchestrator is not None:
        await _orchestrator.close()
        _orchestrator = None
        logger.info("Orchestrator closed")


# ============================================================================
# REQUEST/RESPONSE MODELS
# ============================================================================

class GenerateProposalRequest(BaseModel):
    """Request to generate a proposal for a customer."""
    model_config = ConfigDict(populate_by_name=True)

    customer_id: str = Field(alias="customerId", min_length=1)
    package_tier: Literal["local", "regional", "national"] = Field("local", alias="packageTier")
    proposal_mode: Literal["concise", "detailed"] = Field("concise", alias="proposalMode")
    template_style: Literal["classic", "modern"] = Field("classic", alias="templateStyle")
    prefer_opus: bool = Field(False, alias="preferOpus")
    output_format: Literal["pdf", "html"] = Field("pdf", alias="outputFormat")
    custom_instructions: Optional[str] = Field(None, alias="customInstructions", max_length=4000)


class RegenerateProposalRequest(BaseModel):
    """Re-render a stored proposal; omitted fields keep the stored choice."""
    model_config = ConfigDict(populate_by_name=True)

    template_style: Optional[Literal["classic", "modern"]] = Field(None, alias="templateStyle")
    output_format: Optional[Literal["pdf", "html"]] = Field(None, alias="outputFormat")


# ============================================================================
# ENDPOINTS
# ============================================================================

@app.get("/health")
async def health():
    """Health check."""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "version": __version__,
    }


@app.post("/api/proposals/generate")
async def generate_proposal(
    request: GenerateProposalRequest,
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    """
    Generate a proposal, streaming progress as server-sent events.

    Each event is a `data:` line holding {stage, progress}; the stream ends
    with {complete: true, ...} or {error: true, message}.
    """
    logger.info(
        f"Proposal requested for customer {request.customer_id}: "
        f"{request.proposal_mode}/{request.package_tier}/{request.template_style}"
    )
    generation = GenerationRequest(
        customer_id=request.customer_id,
        package_tier=request.package_tier,
        proposal_mode=request.proposal_mode,
        template_style=request.template_style,
        prefer_opus=request.prefer_opus,
        output_format=request.output_format,
        custom_instructions=request.custom_instructions,
    )
    return StreamingResponse(
        orchestrator.stream(generation),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",
        },
    )


@app.post("/api/proposals/{proposal_id}/regenerate")
async def regenerate_proposal(
    proposal_id: str,
    request: Optional[RegenerateProposalRequest] = None,
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
):
    """Render a stored proposal again without another Claude call."""
    request = request or RegenerateProposalRequest()
    try:
        record = await orchestrator.rerender(
            proposal_id,
            template_style=request.template_style,
            output_format=request.output_format,
        )
    except ProposalNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (MissingContentError, RequestValidationError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except GenerationTimeout as e:
        raise HTTPException(status_code=504, detail=str(e))
    except Exception as e:
        logger.error(f"Re-render of proposal {proposal_id} failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=user_message(e))

    return record.to_dict()


@app.get("/api/proposals/templates")
async def list_templates():
    """Available template styles."""
    return {"templates": TEMPLATE_OPTIONS, "default": "classic"}


@app.get("/api/proposals/estimate")
async def estimate(package_tier: Literal["local", "regional", "national"] = Query("local", alias="packageTier")):
    """Expected duration and cost of a generation."""
    return {
        "packageTier": package_tier,
        "time": estimate_generation_time(package_tier),
        "cost": estimate_generation_cost(package_tier),
    }


@app.get("/api/proposals")
async def list_proposals(
    customer_id: Optional[str] = Query(None, alias="customerId"),
    store: ProposalStore = Depends(get_proposal_store),
):
    """Generated proposals, newest first."""
    rows = await store.list_proposals(customer_id)
    return {"proposals": [row.to_dict() for row in rows], "count": len(rows)}
