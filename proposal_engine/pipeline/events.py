"""
Progress Events

Stage states and the server-sent event wire format for a generation run.

Each event is one JSON object on its own `data:` line:
- {"stage": ..., "progress": 0-100} while running
- {"complete": true, "proposalNumber", "pdfUrl", "metadata"} on success
- {"error": true, "message"} on failure
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, Optional, Union

logger = logging.getLogger(__name__)


class GenerationStage(Enum):
    """Generation run states."""
    VALIDATING = "validating"
    RESEARCHING = "researching"
    GENERATING_CONTENT = "generating_content"
    RENDERING = "rendering"
    PERSISTING = "persisting"
    COMPLETE = "complete"
    FAILED = "failed"


# Progress reported when a stage begins
STAGE_PROGRESS = {
    GenerationStage.VALIDATING: 5,
    GenerationStage.RESEARCHING: 10,
    GenerationStage.GENERATING_CONTENT: 55,
    GenerationStage.RENDERING: 80,
    GenerationStage.PERSISTING: 90,
    GenerationStage.COMPLETE: 100,
}

RESEARCH_PROGRESS_START = 10
RESEARCH_PROGRESS_END = 50


def scale_research_progress(percent: float) -> int:
    """Map research progress (0-100) into the researching band (10-50)."""
    percent = max(0.0, min(100.0, float(percent)))
    span = RESEARCH_PROGRESS_END - RESEARCH_PROGRESS_START
    return RESEARCH_PROGRESS_START + int(round(span * percent / 100))


@dataclass
class ProgressEvent:
    """One event in a generation stream."""
    stage: GenerationStage
    progress: int = 0
    message: Optional[str] = None
    proposal_number: Optional[str] = None
    url: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_terminal(self) -> bool:
        return self.stage in (GenerationStage.COMPLETE, GenerationStage.FAILED)

    @classmethod
    def running(cls, stage: GenerationStage, progress: Optional[int] = None, message: Optional[str] = None) -> "ProgressEvent":
        return cls(stage=stage, progress=STAGE_PROGRESS.get(stage, 0) if progress is None else progress, message=message)

    @classmethod
    def complete(cls, proposal_number: str, url: str, metadata: Dict[str, Any]) -> "ProgressEvent":
        return cls(
            stage=GenerationStage.COMPLETE,
            progress=100,
            proposal_number=proposal_number,
            url=url,
            metadata=metadata,
        )

    @classmethod
    def failed(cls, message: str) -> "ProgressEvent":
        return cls(stage=GenerationStage.FAILED, message=message)

    def to_dict(self) -> Dict[str, Any]:
        """Wire payload for this event."""
        if self.stage == GenerationStage.COMPLETE:
            return {
                "complete": True,
                "proposalNumber": self.proposal_number,
                "pdfUrl": self.url,
                "metadata": self.metadata,
            }
        if self.stage == GenerationStage.FAILED:
            return {"error": True, "message": self.message or "Proposal generation failed"}

        payload: Dict[str, Any] = {"stage": self.stage.value, "progress": self.progress}
        if self.message:
            payload["message"] = self.message
        return payload


def format_sse(event: Union[ProgressEvent, Dict[str, Any]]) -> str:
    """Encode an event as a `data:` line followed by a blank line."""
    payload = event.to_dict() if isinstance(event, ProgressEvent) else event
    return f"data: {json.dumps(payload)}\n\n"


def iter_sse_events(lines: Iterable[Union[str, bytes]]) -> Iterator[Dict[str, Any]]:
    """
    Parse a stream of SSE lines into event payloads.

    Lines without a `data:` prefix are ignored, and a line that fails to
    parse is skipped without stopping the stream.
    """
    for raw in lines:
        line = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
        line = line.strip()
        if not line.startswith("data:"):
            continue
        body = line[len("data:"):].strip()
        try:
            payload = json.loads(body)
        except json.JSONDecodeError:
            logger.warning(f"Skipping unparseable event line: {body[:80]}")
            continue
        if isinstance(payload, dict):
            yield payload
