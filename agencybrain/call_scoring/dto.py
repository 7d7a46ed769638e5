"""
Call scoring DTOs.

Request/response shapes for POST /api/call-scoring/qa/, plus the loose
shape the model is asked to return.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

Verdict = Literal["found", "partial", "not_found"]


class QaRequestDTO(BaseModel):
    """Request body for POST /api/call-scoring/qa/. Both fields are stripped."""
    call_id: str = ""
    question: str = ""

    @field_validator("call_id", "question", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> Any:
        if value is None:
            return ""
        return value.strip() if isinstance(value, str) else value


class QaMatchDTO(BaseModel):
    timestamp_seconds: float | None = None
    speaker: str | None = None
    quote: str
    context: str | None = None


class QaResultDTO(BaseModel):
    """Response for POST /api/call-scoring/qa/."""
    question: str
    verdict: Verdict
    confidence: float = Field(ge=0, le=1)
    summary: str
    matches: list[QaMatchDTO] = Field(default_factory=list)


class RawQaOutput(BaseModel):
    """
    Model output before validation against the transcript.

    Fields are untyped; finalize_result decides what survives.
    """
    model_config = ConfigDict(extra="allow")

    question: Any = None
    verdict: Any = None
    confidence: Any = None
    summary: Any = None
    matches: Any = None
