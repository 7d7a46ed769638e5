"""
LLM Client Module.

Single LLM client for every AI-assisted surface (quiz feedback, call-scoring
Q&A). Provides:
- Config-driven model selection (via environment variables)
- Stable call interface with structured logging per call
- Structured output parsing helper
- LLM_DISABLED mode for tests and local development
- Cost estimation hooks

Two classes of models: "fast" (cheap, short coaching feedback) and
"heavy" (long transcripts). All LLM calls go through this client; no direct
provider SDK calls elsewhere.
"""

from __future__ import annotations

import json
import logging
import os
import re
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal, TypeVar

from pydantic import BaseModel, ValidationError

if TYPE_CHECKING:
    from uuid import UUID

logger = logging.getLogger("agencybrain.llm")

# =============================================================================
# TYPE DEFINITIONS
# =============================================================================

Role = Literal["fast", "heavy"]
Status = Literal["success", "failure", "disabled"]

T = TypeVar("T", bound=BaseModel)


# =============================================================================
# EXCEPTIONS
# =============================================================================


class LLMCallError(Exception):
    """
    Exception raised when an LLM call fails.

    Wraps the underlying provider error with additional context.
    No provider-specific exception types escape this module.
    """

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error


class StructuredOutputError(Exception):
    """
    Exception raised when structured output parsing fails.

    Raised when:
    - Raw text is not valid JSON
    - JSON doesn't validate against the target Pydantic model
    """

    pass


# =============================================================================
# CONFIGURATION
# =============================================================================


@dataclass(frozen=True)
class LLMConfig:
    """
    LLM client configuration.

    Environment Variables:
    - OPENAI_API_KEY: API key for OpenAI (required for real calls)
    - LLM_DISABLED: "true"/"1" disables real LLM calls
    - AGENCYBRAIN_LLM_MODEL_FAST: Model for the fast role (default: gpt-4o-mini)
    - AGENCYBRAIN_LLM_MODEL_HEAVY: Model for the heavy role (default: gpt-4o-mini)
    - AGENCYBRAIN_LLM_TIMEOUT_FAST / _HEAVY: Timeouts in seconds (15 / 60)
    - AGENCYBRAIN_LLM_MAX_TOKENS_FAST / _HEAVY: Max output tokens (300 / 3000)
    - AGENCYBRAIN_LLM_TEMP_FAST / _HEAVY: Temperature (0.7 / 0.1)
    - AGENCYBRAIN_LLM_COST_FAST_USD_PER_1K / _HEAVY_USD_PER_1K: Cost estimates
    """

    fast_model_name: str = "gpt-4o-mini"
    heavy_model_name: str = "gpt-4o-mini"

    # API key (may be None if LLM_DISABLED)
    api_key: str | None = None

    llm_disabled: bool = False

    timeout_fast: float = 15.0
    timeout_heavy: float = 60.0

    max_tokens_fast: int = 300
    max_tokens_heavy: int = 3000

    # Coaching feedback reads better with some variety; transcript
    # analysis should stay close to the source text
    temperature_fast: float = 0.7
    temperature_heavy: float = 0.1

    cost_fast_usd_per_1k: float = 0.0006
    cost_heavy_usd_per_1k: float = 0.0006


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def load_config_from_env() -> LLMConfig:
    """
    Load LLM configuration from environment variables.

    Returns sensible defaults if environment variables are not set,
    allowing tests to run without any configuration.
    """
    disabled_str = os.getenv("LLM_DISABLED", "").lower().strip()
    llm_disabled = disabled_str in ("true", "1", "yes", "on")

    return LLMConfig(
        fast_model_name=os.getenv("AGENCYBRAIN_LLM_MODEL_FAST", "gpt-4o-mini"),
        heavy_model_name=os.getenv("AGENCYBRAIN_LLM_MODEL_HEAVY", "gpt-4o-mini"),
        api_key=os.getenv("OPENAI_API_KEY") or None,
        llm_disabled=llm_disabled,
        timeout_fast=_env_float("AGENCYBRAIN_LLM_TIMEOUT_FAST", 15.0),
        timeout_heavy=_env_float("AGENCYBRAIN_LLM_TIMEOUT_HEAVY", 60.0),
        max_tokens_fast=_env_int("AGENCYBRAIN_LLM_MAX_TOKENS_FAST", 300),
        max_tokens_heavy=_env_int("AGENCYBRAIN_LLM_MAX_TOKENS_HEAVY", 3000),
        temperature_fast=_env_float("AGENCYBRAIN_LLM_TEMP_FAST", 0.7),
        temperature_heavy=_env_float("AGENCYBRAIN_LLM_TEMP_HEAVY", 0.1),
        cost_fast_usd_per_1k=_env_float("AGENCYBRAIN_LLM_COST_FAST_USD_PER_1K", 0.0006),
        cost_heavy_usd_per_1k=_env_float("AGENCYBRAIN_LLM_COST_HEAVY_USD_PER_1K", 0.0006),
    )


# =============================================================================
# RESPONSE MODEL
# =============================================================================


@dataclass
class LLMResponse:
    """
    Response from an LLM call.

    Contains the raw text output along with usage, timing, and cost metadata.
    """

    raw_text: str
    model: str
    usage_tokens_in: int
    usage_tokens_out: int
    latency_ms: int
    role: Role
    status: Status = "success"
    estimated_cost_usd: float | None = None

    @property
    def is_disabled(self) -> bool:
        return self.status == "disabled"


# =============================================================================
# STRUCTURED OUTPUT PARSING
# =============================================================================


def parse_structured_output(raw_text: str, target: type[T]) -> T:
    """
    Parse raw LLM output into a Pydantic model.

    Handles both pure JSON and JSON fenced by markdown triple-backticks.

    Raises:
        StructuredOutputError: If JSON is invalid or validation fails
    """
    text = raw_text.strip()

    fence_pattern = r"```(?:json)?\s*([\s\S]*?)\s*```"
    match = re.search(fence_pattern, text)
    if match:
        text = match.group(1).strip()

    try:
        return target.model_validate_json(text)
    except json.JSONDecodeError as e:
        raise StructuredOutputError(
            f"Invalid JSON in LLM output: {e}. Raw text: {raw_text[:200]}..."
        ) from e
    except ValidationError as e:
        error_summary = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise StructuredOutputError(
            f"Schema validation failed: {error_summary}. Raw text: {raw_text[:200]}..."
        ) from e


# =============================================================================
# LLM CLIENT
# =============================================================================


class LLMClient:
    """
    Single LLM client for all AgencyBrain LLM usage.

    Usage:
        client = LLMClient()
        response = client.call(
            agency_id=agency.id,
            flow="quiz_feedback",
            prompt="...",
            role="fast",
        )
    """

    def __init__(self, config: LLMConfig | None = None):
        self.config = config or load_config_from_env()

    @property
    def enabled(self) -> bool:
        return not self.config.llm_disabled

    def call(
        self,
        *,
        agency_id: "UUID | None",
        flow: str,
        prompt: str,
        role: Role = "fast",
        system_prompt: str | None = None,
        max_output_tokens: int | None = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        """
        Make an LLM call.

        Args:
            agency_id: Agency the call is made for (for observability)
            flow: Flow identifier (quiz_feedback, call_scoring_qa)
            prompt: The user/main prompt
            role: "fast" or "heavy" - determines model and parameters
            system_prompt: Optional system prompt
            max_output_tokens: Override max output tokens
            json_mode: Ask the provider for a JSON object response

        Returns:
            LLMResponse with raw_text and metadata

        Raises:
            LLMCallError: If the LLM call fails (wraps all provider exceptions)
        """
        if role == "fast":
            model = self.config.fast_model_name
            timeout = self.config.timeout_fast
            default_max_tokens = self.config.max_tokens_fast
            temperature = self.config.temperature_fast
            cost_per_1k = self.config.cost_fast_usd_per_1k
        else:
            model = self.config.heavy_model_name
            timeout = self.config.timeout_heavy
            default_max_tokens = self.config.max_tokens_heavy
            temperature = self.config.temperature_heavy
            cost_per_1k = self.config.cost_heavy_usd_per_1k

        actual_max_tokens = max_output_tokens or default_max_tokens

        start_time = time.perf_counter()

        if self.config.llm_disabled:
            latency_ms = int((time.perf_counter() - start_time) * 1000)
            tokens_in = len(prompt.split())  # Rough estimate
            tokens_out = 0

            response = LLMResponse(
                raw_text="",
                model=model,
                usage_tokens_in=tokens_in,
                usage_tokens_out=tokens_out,
                latency_ms=latency_ms,
                role=role,
                status="disabled",
                estimated_cost_usd=0.0,
            )

            self._log_call(
                agency_id=agency_id,
                flow=flow,
                model=model,
                role=role,
                latency_ms=latency_ms,
                tokens_in=tokens_in,
                tokens_out=tokens_out,
                status="disabled",
            )

            return response

        try:
            result = self._call_provider(
                model=model,
                prompt=prompt,
                system_prompt=system_prompt,
                max_tokens=actual_max_tokens,
                temperature=temperature,
                timeout=timeout,
                json_mode=json_mode,
            )
        except Exception as exc:
            latency_ms = int((time.perf_counter() - start_time) * 1000)
            error_summary = f"{exc.__class__.__name__}: {str(exc)[:100]}"

            self._log_call(
                agency_id=agency_id,
                flow=flow,
                model=model,
                role=role,
                latency_ms=latency_ms,
                tokens_in=0,
                tokens_out=0,
                status="failure",
                error_summary=error_summary,
            )

            raise LLMCallError(
                f"LLM call failed: {exc}",
                original_error=exc,
            ) from exc

        latency_ms = int((time.perf_counter() - start_time) * 1000)
        tokens_in = result["usage"]["prompt_tokens"]
        tokens_out = result["usage"]["completion_tokens"]
        estimated_cost = (tokens_in + tokens_out) / 1000.0 * cost_per_1k

        self._log_call(
            agency_id=agency_id,
            flow=flow,
            model=model,
            role=role,
            latency_ms=latency_ms,
            tokens_in=tokens_in,
            tokens_out=tokens_out,
            status="success",
            estimated_cost_usd=estimated_cost,
        )

        return LLMResponse(
            raw_text=result["content"],
            model=model,
            usage_tokens_in=tokens_in,
            usage_tokens_out=tokens_out,
            latency_ms=latency_ms,
            role=role,
            status="success",
            estimated_cost_usd=estimated_cost,
        )

    def _call_provider(
        self,
        *,
        model: str,
        prompt: str,
        system_prompt: str | None,
        max_tokens: int,
        temperature: float,
        timeout: float,
        json_mode: bool,
    ) -> dict[str, Any]:
        """
        Call the OpenAI chat completions API.

        Tests should patch this method to avoid real HTTP calls.

        Returns:
            Dict with 'content' and 'usage' keys
        """
        import openai

        if not self.config.api_key:
            raise LLMCallError(
                "OPENAI_API_KEY not set. Set the environment variable or use LLM_DISABLED=true."
            )

        messages: list[dict[str, str]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        client = openai.OpenAI(
            api_key=self.config.api_key,
            timeout=timeout,
        )

        request_kwargs: dict[str, Any] = {
            "model": model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if json_mode:
            request_kwargs["response_format"] = {"type": "json_object"}

        response = client.chat.completions.create(**request_kwargs)

        content = response.choices[0].message.content or ""
        usage = {
            "prompt_tokens": response.usage.prompt_tokens if response.usage else 0,
            "completion_tokens": (
                response.usage.completion_tokens if response.usage else 0
            ),
        }

        return {"content": content, "usage": usage}

    def _log_call(
        self,
        *,
        agency_id: "UUID | None",
        flow: str,
        model: str,
        role: Role,
        latency_ms: int,
        tokens_in: int,
        tokens_out: int,
        status: Status,
        error_summary: str | None = None,
        estimated_cost_usd: float | None = None,
    ) -> None:
        """Log an LLM call with a structured payload."""
        log_data = {
            "agency_id": str(agency_id) if agency_id else None,
            "flow": flow,
            "model": model,
            "role": role,
            "latency_ms": latency_ms,
            "tokens_in": tokens_in,
            "tokens_out": tokens_out,
            "status": status,
        }

        if estimated_cost_usd is not None:
            log_data["estimated_cost_usd"] = estimated_cost_usd

        if error_summary:
            log_data["error_summary"] = error_summary

        if status == "failure":
            logger.error("LLM call failed", extra=log_data)
        else:
            logger.info("LLM call completed", extra=log_data)


# =============================================================================
# MODULE-LEVEL CONVENIENCE
# =============================================================================

_default_client: LLMClient | None = None


def get_default_client() -> LLMClient:
    """
    Get the default LLM client instance.

    Creates the client on first call using environment configuration.
    """
    global _default_client
    if _default_client is None:
        _default_client = LLMClient()
    return _default_client


def reset_default_client() -> None:
    """Reset the default client (useful for tests)."""
    global _default_client
    _default_client = None
