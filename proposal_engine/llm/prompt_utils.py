"""
Prompt and Response Helpers

- Prompt sanitization for CRM free text flowing into prompts
- JSON extraction from Claude's free-text responses
- Text block handling for extended-thinking responses
"""

import json
import logging
import re
from typing import Any, Iterable, List

logger = logging.getLogger(__name__)

EXCERPT_LENGTH = 500

_FENCE_PATTERN = re.compile(r"^```(?:json|JSON)?[ \t]*\n?([\s\S]*?)\n?[ \t]*```$")
_EMBEDDED_FENCE_PATTERN = re.compile(r"```(?:json|JSON)?[ \t]*\n([\s\S]*?)\n[ \t]*```")
_BLANK_RUN_PATTERN = re.compile(r"\n{3,}")


class ProposalParseError(Exception):
    """Claude returned text that does not contain valid JSON."""

    def __init__(self, message: str, excerpt: str = ""):
        super().__init__(message)
        self.excerpt = excerpt


# ============================================================================
# PROMPT SANITIZATION
# ============================================================================

def sanitize_for_prompt(text: str) -> str:
    """
    Normalize free text before it is embedded in a prompt.

    Normalizes line endings, trims every line, collapses runs of blank
    lines to a single blank line and trims the whole string.
    """
    if not text:
        return ""

    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    lines = [line.strip() for line in normalized.split("\n")]
    collapsed = _BLANK_RUN_PATTERN.sub("\n\n", "\n".join(lines))
    return collapsed.strip()


def truncate_text(text: str, max_length: int, suffix: str = "...") -> str:
    """Truncate text to max_length characters including the suffix."""
    if not text or len(text) <= max_length:
        return text or ""
    return text[: max(0, max_length - len(suffix))] + suffix


# ============================================================================
# JSON EXTRACTION
# ============================================================================

def _strip_code_fence(text: str) -> str:
    stripped = text.strip()

    match = _FENCE_PATTERN.match(stripped)
    if match:
        return match.group(1).strip()

    # Fence surrounded by chatter
    match = _EMBEDDED_FENCE_PATTERN.search(stripped)
    if match:
        return match.group(1).strip()

    return stripped


def extract_json(text: str) -> Any:
    """
    Parse JSON from a Claude response.

    Strips an optional surrounding markdown code fence, trims, then parses.
    When the payload is wrapped in prose, the outermost {...} span is tried.

    Raises:
        ProposalParseError: When no valid JSON can be recovered
    """
    if text is None:
        raise ProposalParseError("Empty response from Claude", excerpt="")

    candidate = _strip_code_fence(text)

    try:
        return json.loads(candidate)
    except json.JSONDecodeError as first_error:
        start = candidate.find("{")
        end = candidate.rfind("}")
        if start != -1 and end > start:
            try:
                return json.loads(candidate[start:end + 1])
            except json.JSONDecodeError:
                pass

        excerpt = candidate[:EXCERPT_LENGTH]
        logger.error(f"Failed to parse JSON response: {first_error}. Content: {excerpt[:200]}")
        raise ProposalParseError(
            f"Failed to parse JSON from Claude response: {first_error.msg} "
            f"(content starts with: {excerpt[:100]!r})",
            excerpt=excerpt,
        ) from first_error


# ============================================================================
# RESPONSE BLOCKS
# ============================================================================

def _block_type(block: Any) -> str:
    if isinstance(block, dict):
        return block.get("type", "")
    return getattr(block, "type", "")


def _block_attr(block: Any, name: str) -> str:
    if isinstance(block, dict):
        return block.get(name, "") or ""
    return getattr(block, name, "") or ""


def extract_text_blocks(blocks: Iterable[Any]) -> str:
    """Join the text blocks of a response, excluding thinking blocks."""
    return "".join(_block_attr(b, "text") for b in blocks if _block_type(b) == "text")


def extract_thinking_blocks(blocks: Iterable[Any]) -> List[str]:
    """Thinking block contents, for debugging research output."""
    return [_block_attr(b, "thinking") for b in blocks if _block_type(b) == "thinking"]


def combine_response_blocks(blocks: Iterable[Any], include_thinking: bool = False) -> str:
    """Text content, optionally prefixed with the thinking transcript."""
    blocks = list(blocks)
    text = extract_text_blocks(blocks)
    if not include_thinking:
        return text

    thinking = extract_thinking_blocks(blocks)
    if not thinking:
        return text
    return "[THINKING]\n" + "\n\n".join(thinking) + "\n[/THINKING]\n\n" + text
