"""
LLM Module

Claude gateway with retry policy, prompt helpers and cost accounting.
"""

from .client import (
    CallOptions,
    ClaudeGateway,
    LLMError,
    LLMResponse,
    format_llm_error,
)
from .costs import (
    MODEL_PRICING,
    TokenUsage,
    UsageTotals,
    calculate_cost,
    estimate_prompt_tokens,
    estimate_thinking_tokens,
    estimate_tokens,
    format_token_count,
)
from .prompt_utils import (
    ProposalParseError,
    combine_response_blocks,
    extract_json,
    extract_text_blocks,
    extract_thinking_blocks,
    sanitize_for_prompt,
    truncate_text,
)
from .retry import RetryPolicy, default_is_retryable_status, is_network_error

__all__ = [
    # Gateway
    "CallOptions",
    "ClaudeGateway",
    "LLMError",
    "LLMResponse",
    "format_llm_error",
    # Costs
    "MODEL_PRICING",
    "TokenUsage",
    "UsageTotals",
    "calculate_cost",
    "estimate_prompt_tokens",
    "estimate_thinking_tokens",
    "estimate_tokens",
    "format_token_count",
    # Prompt helpers
    "ProposalParseError",
    "combine_response_blocks",
    "extract_json",
    "extract_text_blocks",
    "extract_thinking_blocks",
    "sanitize_for_prompt",
    "truncate_text",
    # Retry
    "RetryPolicy",
    "default_is_retryable_status",
    "is_network_error",
]
