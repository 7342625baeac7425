"""
Claude API Gateway for Proposal Generation

Provides the single entry point for every Claude call in the pipeline,
including retry logic, usage tracking and cost accounting.

Two call modes:
- research: extended thinking budget, Opus, larger reasoning headroom
- content: no thinking, Sonnet (or Opus when preferred), temperature 0.5
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import anthropic

from .costs import (
    DEFAULT_USD_TO_GBP,
    TokenUsage,
    UsageTotals,
    calculate_cost,
    estimate_prompt_tokens,
    estimate_thinking_tokens,
)
from .prompt_utils import extract_text_blocks, extract_thinking_blocks
from .retry import RetryPolicy

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """Claude API failure (after the retry policy gave up)."""

    def __init__(self, message: str, status_code: Optional[int] = None, network: bool = False):
        super().__init__(message)
        self.status_code = status_code
        self.network = network


def format_llm_error(error: BaseException) -> str:
    """User-facing message for a Claude failure."""
    status = getattr(error, "status_code", None)

    if status == 401:
        return "Invalid API key. Please check your Anthropic API configuration."
    if status == 403:
        return "Permission denied. Your API key may not have access to this model."
    if status == 429:
        return "Rate limit exceeded. Please try again in a few moments."
    if isinstance(status, int) and status >= 500:
        return "Claude API is temporarily unavailable. Please try again later."
    if status == 400:
        return f"Invalid request: {error}"
    return f"Claude API error: {error}"


@dataclass
class CallOptions:
    """Per-call overrides."""
    model: Optional[str] = None
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    thinking_budget: Optional[int] = None
    attachments: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class LLMResponse:
    """Response from a gateway call."""
    content: str
    usage: TokenUsage
    cost: float
    model: str
    stop_reason: str = ""
    thinking: List[str] = field(default_factory=list)

    def to_metadata(self) -> Dict[str, Any]:
        return {
            "model": self.model,
            "cost": self.cost,
            **self.usage.to_dict(),
        }


class ClaudeGateway:
    """
    Async gateway for Claude API used by research and content generation.

    Features:
    - Research and content call modes
    - Retry with exponential backoff (429/5xx only)
    - Thinking token estimation and GBP cost tracking
    - Text extraction excluding thinking blocks
    """

    RESEARCH_MODEL = "claude-opus-4-20250514"
    CONTENT_MODEL = "claude-sonnet-4-20250514"
    THINKING_BUDGET = 10000
    MAX_TOKENS = 16000
    RESEARCH_TEMPERATURE = 0.3
    CONTENT_TEMPERATURE = 0.5

    def __init__(
        self,
        api_key: Optional[str] = None,
        research_model: Optional[str] = None,
        content_model: Optional[str] = None,
        thinking_budget: Optional[int] = None,
        max_tokens: Optional[int] = None,
        retry_policy: Optional[RetryPolicy] = None,
        usd_to_gbp: float = DEFAULT_USD_TO_GBP,
        client: Optional[Any] = None,
    ):
        """
        Initialize Claude gateway.

        Args:
            api_key: Anthropic API key (defaults to env var)
            research_model: Model for research mode (defaults to Opus 4)
            content_model: Model for content mode (defaults to Sonnet 4)
            thinking_budget: Research thinking budget in tokens
            max_tokens: Maximum output tokens for both modes
            retry_policy: Retry policy (defaults to 3 retries, 1s/2s/4s)
            usd_to_gbp: Currency conversion for cost reporting
            client: Pre-built AsyncAnthropic-compatible client (tests)
        """
        if client is None:
            api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
            if not api_key:
                raise ValueError("ANTHROPIC_API_KEY not provided")
            client = anthropic.AsyncAnthropic(api_key=api_key)

        self.client = client
        self.research_model = research_model or self.RESEARCH_MODEL
        self.content_model = content_model or self.CONTENT_MODEL
        self.thinking_budget = self.THINKING_BUDGET if thinking_budget is None else thinking_budget
        self.max_tokens = max_tokens or self.MAX_TOKENS
        self.retry_policy = retry_policy or RetryPolicy()
        self.usd_to_gbp = usd_to_gbp

        # Track cumulative usage
        self.total_usage = UsageTotals()

    @classmethod
    def from_settings(cls, settings: Any) -> "ClaudeGateway":
        return cls(
            api_key=settings.ANTHROPIC_API_KEY,
            research_model=settings.RESEARCH_MODEL,
            content_model=settings.CONTENT_MODEL,
            thinking_budget=settings.THINKING_BUDGET,
            max_tokens=settings.MAX_OUTPUT_TOKENS,
            retry_policy=RetryPolicy(max_retries=settings.LLM_MAX_RETRIES),
            usd_to_gbp=settings.USD_TO_GBP,
        )

    # ========================================================================
    # CALL MODES
    # ========================================================================

    async def call_for_research(
        self,
        system_prompt: str,
        user_prompt: str,
        options: Optional[CallOptions] = None,
    ) -> LLMResponse:
        """
        Research call with extended thinking.

        Args:
            system_prompt: System prompt
            user_prompt: User prompt
            options: Per-call overrides

        Returns:
            LLMResponse with text content, usage and cost
        """
        options = options or CallOptions()
        budget = self.thinking_budget if options.thinking_budget is None else options.thinking_budget

        return await self._call(
            mode="research",
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            model=options.model or self.research_model,
            max_tokens=options.max_tokens or self.max_tokens,
            temperature=options.temperature if options.temperature is not None else self.RESEARCH_TEMPERATURE,
            thinking_budget=budget,
            attachments=options.attachments,
        )

    async def call_for_content(
        self,
        system_prompt: str,
        user_prompt: str,
        options: Optional[CallOptions] = None,
    ) -> LLMResponse:
        """
        Content call without thinking.

        Args:
            system_prompt: System prompt
            user_prompt: User prompt
            options: Per-call overrides (model, attachments...)

        Returns:
            LLMResponse with text content, usage and cost
        """
        options = options or CallOptions()

        return await self._call(
            mode="content",
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            model=options.model or self.content_model,
            max_tokens=options.max_tokens or self.max_tokens,
            temperature=options.temperature if options.temperature is not None else self.CONTENT_TEMPERATURE,
            thinking_budget=0,
            attachments=options.attachments,
        )

    # ========================================================================
    # INTERNALS
    # ========================================================================

    def _build_request(
        self,
        system_prompt: str,
        user_prompt: str,
        model: str,
        max_tokens: int,
        temperature: float,
        thinking_budget: int,
        attachments: List[Dict[str, Any]],
    ) -> Dict[str, Any]:
        if attachments:
            user_content: Any = [*attachments, {"type": "text", "text": user_prompt}]
        else:
            user_content = user_prompt

        kwargs: Dict[str, Any] = {
            "model": model,
            "max_tokens": max_tokens,
            "system": system_prompt,
            "messages": [{"role": "user", "content": user_content}],
        }

        if thinking_budget > 0:
            # The API only accepts the default temperature with thinking enabled
            kwargs["thinking"] = {"type": "enabled", "budget_tokens": thinking_budget}
        else:
            kwargs["temperature"] = temperature

        return kwargs

    async def _send(self, kwargs: Dict[str, Any]) -> Any:
        """Single API attempt, translating SDK errors into LLMError."""
        try:
            return await self.client.messages.create(**kwargs)
        except anthropic.APIStatusError as e:
            raise LLMError(str(e), status_code=e.status_code) from e
        except anthropic.APIConnectionError as e:
            raise LLMError(f"Connection error: {e}", network=True) from e

    async def _call(
        self,
        mode: str,
        system_prompt: str,
        user_prompt: str,
        model: str,
        max_tokens: int,
        temperature: float,
        thinking_budget: int,
        attachments: List[Dict[str, Any]],
    ) -> LLMResponse:
        kwargs = self._build_request(
            system_prompt, user_prompt, model, max_tokens, temperature, thinking_budget, attachments
        )

        response = await self.retry_policy.run(
            lambda: self._send(kwargs),
            label=f"Claude {mode} call",
        )

        blocks = list(response.content or [])
        content = extract_text_blocks(blocks)

        input_tokens = response.usage.input_tokens
        thinking_tokens = 0
        if thinking_budget > 0:
            thinking_tokens = estimate_thinking_tokens(
                input_tokens, estimate_prompt_tokens(system_prompt, user_prompt)
            )

        usage = TokenUsage(
            input_tokens=input_tokens,
            output_tokens=response.usage.output_tokens,
            thinking_tokens=thinking_tokens,
        )
        cost = calculate_cost(
            usage.input_tokens,
            usage.output_tokens,
            usage.thinking_tokens,
            model=model,
            usd_to_gbp=self.usd_to_gbp,
        )
        self.total_usage.add(usage, cost)

        logger.info(
            f"Claude {mode} call ({model}): {usage.input_tokens} in, "
            f"{usage.output_tokens} out, ~{usage.thinking_tokens} thinking, £{cost:.4f}"
        )

        return LLMResponse(
            content=content,
            usage=usage,
            cost=cost,
            model=model,
            stop_reason=getattr(response, "stop_reason", "") or "",
            thinking=extract_thinking_blocks(blocks),
        )

    def get_usage_summary(self) -> Dict[str, Any]:
        """Get summary of all API usage."""
        return self.total_usage.summary()
