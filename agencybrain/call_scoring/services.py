"""
Call Scoring Q&A Service.

Answers a coach's question about one recorded call by locating the moments
in its timestamped transcript where the topic came up.

Access rules:
- the agency must have the call_scoring_qa feature
- the call must belong to the caller's agency
- staff callers must be linked to a team member; non-managers may only ask
  about their own calls
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from agencybrain.core.enums import FeatureKey
from agencybrain.core.exceptions import (
    ConflictError,
    FeatureDisabledError,
    ForbiddenError,
    NotFoundError,
    ServiceError,
)
from agencybrain.core.http import parse_uuid
from agencybrain.core.models import AgencyFeatureAccess
from agencybrain.integrations.llm_client import (
    LLMCallError,
    LLMClient,
    StructuredOutputError,
    get_default_client,
    parse_structured_output,
)

from .dto import QaResultDTO, RawQaOutput
from .models import AgencyCall
from .transcript import (
    Segment,
    build_transcript_prompt,
    coerce_segments,
    finalize_result,
    find_keyword_matches,
)

if TYPE_CHECKING:
    from agencybrain.middleware.supabase_auth import AuthContext

logger = logging.getLogger(__name__)

QA_FLOW = "call_scoring_qa"

SYSTEM_PROMPT = """You are a call transcript analyst. A coach will ask a question about a recorded insurance call. Your job is to find the exact moments in the transcript where the topic was discussed.

Rules:
- ONLY use quotes and timestamps from the provided transcript. Never invent or guess.
- Return timestamps as the number of seconds from the start of the call (use the start time shown in brackets).
- Include the actual words spoken as the quote, copied from the transcript.
- If the topic was discussed multiple times, return ALL relevant moments.
- If you genuinely cannot find any discussion of the topic, return verdict "not_found" with empty matches."""

RESPONSE_SHAPE = """Return ONLY valid JSON:
{
  "question": string,
  "verdict": "found" | "partial" | "not_found",
  "confidence": number between 0 and 1,
  "summary": string (1-2 sentence answer to the coach's question),
  "matches": [
    {
      "timestamp_seconds": number (seconds from call start),
      "speaker": "agent" | "customer" | null,
      "quote": string (exact words from transcript),
      "context": string (brief context of what was being discussed)
    }
  ]
}"""


class AnalysisError(ServiceError):
    """Raised when the model call fails or returns something unusable."""

    code = "analysis_failed"
    status = 500


# =============================================================================
# ACCESS
# =============================================================================


def ensure_feature_enabled(agency_id) -> None:
    """
    Raises:
        FeatureDisabledError: the agency lacks call_scoring_qa
    """
    enabled = (
        agency_id is not None
        and AgencyFeatureAccess.objects.filter(
            agency_id=agency_id,
            feature_key=FeatureKey.CALL_SCORING_QA,
        ).exists()
    )
    if not enabled:
        raise FeatureDisabledError("Call scoring Q&A feature is not enabled for this agency")


def get_accessible_call(ctx: AuthContext, call_id: str) -> AgencyCall:
    """
    Load a call the caller may ask about.

    Raises:
        NotFoundError: unknown call id
        ForbiddenError: another agency's call, or a staff member without
            access to it
    """
    call_uuid = parse_uuid(call_id)
    call = AgencyCall.objects.filter(id=call_uuid).first() if call_uuid else None
    if call is None:
        raise NotFoundError("Call not found")

    if call.agency_id != ctx.agency_id:
        raise ForbiddenError("You do not have access to this call")

    if ctx.is_staff:
        if ctx.staff_member_id is None:
            raise ForbiddenError("Staff account is not linked to a team member")
        if not ctx.is_manager and call.team_member_id != ctx.staff_member_id:
            raise ForbiddenError("You do not have access to this call")

    return call


def load_segments(call: AgencyCall) -> list[Segment]:
    """
    Raises:
        ConflictError: the call has no usable timestamped segments
    """
    if call.transcript_segments is None:
        raise ConflictError("No transcript segments available for this call")

    segments = coerce_segments(call.transcript_segments)
    if not segments:
        raise ConflictError("Timestamped transcript segments are required for timeline Q&A")
    return segments


# =============================================================================
# ANALYSIS
# =============================================================================


def build_user_prompt(question: str, segments: list[Segment]) -> str:
    return (
        "Question from coach:\n"
        f'"{question}"\n\n'
        "Full call transcript:\n"
        f"{build_transcript_prompt(segments)}\n\n"
        f"{RESPONSE_SHAPE}"
    )


def run_model(
    question: str,
    segments: list[Segment],
    agency_id,
    client: LLMClient,
) -> dict:
    """
    Ask the model, returning its raw answer as a dict.

    Raises:
        AnalysisError: call failure, empty content or unparseable JSON
    """
    try:
        response = client.call(
            agency_id=agency_id,
            flow=QA_FLOW,
            prompt=build_user_prompt(question, segments),
            role="heavy",
            system_prompt=SYSTEM_PROMPT,
            json_mode=True,
        )
    except LLMCallError as exc:
        logger.error("Call scoring Q&A model call failed: %s", exc)
        raise AnalysisError("Failed to run assistant analysis") from exc

    if not response.raw_text.strip():
        raise AnalysisError("No response content from analysis model")

    try:
        parsed = parse_structured_output(response.raw_text, RawQaOutput)
    except StructuredOutputError as exc:
        logger.error("Call scoring Q&A returned unparseable output: %s", exc)
        raise AnalysisError("Invalid response format from model") from exc

    return parsed.model_dump()


def answer_question(
    ctx: AuthContext,
    call_id: str,
    question: str,
    client: LLMClient | None = None,
) -> QaResultDTO:
    """
    Answer a question about one call.

    With the LLM disabled the answer comes from a keyword search over the
    transcript instead.
    """
    ensure_feature_enabled(ctx.agency_id)
    call = get_accessible_call(ctx, call_id)
    segments = load_segments(call)

    client = client or get_default_client()
    if client.enabled:
        raw = run_model(question, segments, ctx.agency_id, client)
    else:
        logger.info("LLM disabled, answering call %s by keyword search", call.id)
        raw = find_keyword_matches(segments, question)

    result = finalize_result(question, raw, segments)
    logger.info(
        "Call Q&A answered: call=%s verdict=%s matches=%d",
        call.id,
        result.verdict,
        len(result.matches),
    )
    return result
