"""
Token Usage and Cost Accounting

Pure functions converting Claude token counts into a GBP cost estimate.
Used by every LLM call site so proposals can report what they cost.
"""

import math
from dataclasses import dataclass
from typing import Dict, Optional


# ============================================================================
# PRICING
# ============================================================================

# USD per million tokens
MODEL_PRICING: Dict[str, Dict[str, float]] = {
    "opus": {"input": 15.0, "output": 75.0, "thinking": 15.0},
    "sonnet": {"input": 3.0, "output": 15.0, "thinking": 3.0},
}

DEFAULT_USD_TO_GBP = 0.79

# Fixed overhead added to local prompt estimates (message framing)
PROMPT_OVERHEAD_TOKENS = 50


def get_pricing(model: str) -> Dict[str, float]:
    """Pricing table for a model id. Unknown models are priced as Sonnet."""
    model_lower = (model or "").lower()
    for family, pricing in MODEL_PRICING.items():
        if family in model_lower:
            return pricing
    return MODEL_PRICING["sonnet"]


def calculate_cost(
    input_tokens: int,
    output_tokens: int,
    thinking_tokens: int = 0,
    model: str = "claude-sonnet-4-20250514",
    usd_to_gbp: float = DEFAULT_USD_TO_GBP,
) -> float:
    """
    Calculate the cost of a single call in GBP.

    Args:
        input_tokens: Reported input tokens
        output_tokens: Reported output tokens
        thinking_tokens: Estimated thinking tokens
        model: Model id (selects the pricing row)
        usd_to_gbp: Conversion constant

    Returns:
        Cost in GBP rounded to 4 decimal places
    """
    pricing = get_pricing(model)
    cost_usd = (
        (max(0, input_tokens) / 1_000_000) * pricing["input"]
        + (max(0, output_tokens) / 1_000_000) * pricing["output"]
        + (max(0, thinking_tokens) / 1_000_000) * pricing["thinking"]
    )
    return round(cost_usd * usd_to_gbp, 4)


# ============================================================================
# TOKEN ESTIMATION
# ============================================================================

def estimate_tokens(text: Optional[str]) -> int:
    """Rough token estimate (~4 characters per token)."""
    if not text:
        return 0
    return math.ceil(len(text) / 4)


def estimate_prompt_tokens(system_prompt: Optional[str], user_prompt: Optional[str]) -> int:
    """Estimate the tokens a prompt pair will consume."""
    return estimate_tokens(system_prompt) + estimate_tokens(user_prompt) + PROMPT_OVERHEAD_TOKENS


def estimate_thinking_tokens(reported_input_tokens: int, estimated_prompt_tokens: int) -> int:
    """
    Approximate thinking tokens.

    The provider does not report thinking tokens separately, so this is the
    reported input minus the local prompt estimate, clamped at zero.
    """
    return max(0, reported_input_tokens - estimated_prompt_tokens)


def format_token_count(tokens: int) -> str:
    """Format a token count for display (950, 12.3K, 1.25M)."""
    if tokens < 1000:
        return str(tokens)
    if tokens < 1_000_000:
        return f"{tokens / 1000:.1f}K"
    return f"{tokens / 1_000_000:.2f}M"


# ============================================================================
# USAGE TRACKING
# ============================================================================

@dataclass
class TokenUsage:
    """Token usage for one call."""
    input_tokens: int = 0
    output_tokens: int = 0
    thinking_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens + self.thinking_tokens

    def to_dict(self) -> Dict[str, int]:
        return {
            "input_tokens": self.input_tokens,
            "output_tokens": self.output_tokens,
            "thinking_tokens": self.thinking_tokens,
            "total_tokens": self.total_tokens,
        }


@dataclass
class UsageTotals:
    """Cumulative usage across the calls of one generation run."""
    input_tokens: int = 0
    output_tokens: int = 0
    thinking_tokens: int = 0
    cost: float = 0.0
    call_count: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens + self.thinking_tokens

    def add(self, usage: TokenUsage, cost: float) -> None:
        self.input_tokens += usage.input_tokens
        self.output_tokens += usage.output_tokens
        self.thinking_tokens += usage.thinking_tokens
        self.cost = round(self.cost + cost, 4)
        self.call_count += 1

    def summary(self) -> Dict[str, float]:
        return {
            "total_calls": self.call_count,
            "input_tokens": self.input_tokens,
            "output_tokens": self.output_tokens,
            "thinking_tokens": self.thinking_tokens,
            "total_tokens": self.total_tokens,
            "estimated_cost": self.cost,
        }
