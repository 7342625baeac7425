"""
Pipeline Module

Generation orchestration, progress events and storage.
"""

from .events import (
    STAGE_PROGRESS,
    GenerationStage,
    ProgressEvent,
    format_sse,
    iter_sse_events,
    scale_research_progress,
)
from .orchestrator import (
    GenerationOrchestrator,
    GenerationRequest,
    GenerationTimeout,
    MissingContentError,
    ProposalNotFoundError,
    estimate_generation_cost,
    estimate_generation_time,
    user_message,
)
from .storage import (
    ArtifactStorage,
    CustomerRecord,
    CustomerStore,
    FileStorage,
    InMemoryArtifactStorage,
    InMemoryCustomerStore,
    InMemoryProposalStore,
    ProposalRecord,
    ProposalStore,
)

__all__ = [
    # Events
    "STAGE_PROGRESS",
    "GenerationStage",
    "ProgressEvent",
    "format_sse",
    "iter_sse_events",
    "scale_research_progress",
    # Orchestrator
    "GenerationOrchestrator",
    "GenerationRequest",
    "GenerationTimeout",
    "MissingContentError",
    "ProposalNotFoundError",
    "estimate_generation_cost",
    "estimate_generation_time",
    "user_message",
    # Storage
    "ArtifactStorage",
    "CustomerRecord",
    "CustomerStore",
    "FileStorage",
    "InMemoryArtifactStorage",
    "InMemoryCustomerStore",
    "InMemoryProposalStore",
    "ProposalRecord",
    "ProposalStore",
]
