"""
Transcript helpers for call-scoring Q&A.

Pure functions over timestamped transcript segments: formatting for the
prompt, timestamp parsing, snapping model-reported timestamps back onto real
segments, a keyword search used when the LLM is disabled, and the final
cleanup of a raw answer into a QaResultDTO.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any

from .dto import QaMatchDTO, QaResultDTO

# Model timestamps drift; anything further than this from every segment is kept as-is
SNAP_TOLERANCE_SECONDS = 15.0
MAX_MATCHES = 8
MAX_QUOTE_CHARS = 300
DEDUPE_QUOTE_PREFIX = 40
# Adjacent keyword hits closer than this are reported as one moment
MERGE_WINDOW_SECONDS = 5.0

FOUND_SUMMARY = "Found matching moments in the call."
NOT_FOUND_SUMMARY = "No matching moments found for this question."

CUSTOMER_ALIASES = {"customer", "caller", "customer side", "client"}
AGENT_ALIASES = {"agent", "rep", "sales", "representative"}

STOPWORDS = {
    "the", "and", "for", "are", "was", "were", "did", "does", "has", "have",
    "had", "they", "them", "their", "this", "that", "with", "about", "what",
    "when", "where", "which", "who", "why", "how", "any", "you", "your",
    "agent", "customer", "call", "ask", "asked", "talk", "mention", "mentioned",
    "discuss", "discussed", "say", "said", "there", "from", "into", "than",
}

_HMS_RE = re.compile(r"^(\d+):(\d{2}):(\d{2})$")
_MS_RE = re.compile(r"^(\d+):(\d{1,2})$")
_WORD_RE = re.compile(r"[a-z0-9']+")


@dataclass(frozen=True)
class Segment:
    start: float
    end: float
    text: str
    speaker: str | None = None


# =============================================================================
# PARSING + FORMATTING
# =============================================================================


def format_seconds(value: float) -> str:
    """65 -> "1:05"."""
    minutes = int(value // 60)
    seconds = int(value % 60)
    return f"{minutes}:{seconds:02d}"


def parse_timestamp(value: Any) -> float | None:
    """
    Parse a timestamp into seconds.

    Accepts numbers, "H:MM:SS", "M:SS" and numeric strings. Returns None for
    anything else, including non-finite numbers.
    """
    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None

    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None

        hms = _HMS_RE.match(raw)
        if hms:
            return float(int(hms[1]) * 3600 + int(hms[2]) * 60 + int(hms[3]))

        ms = _MS_RE.match(raw)
        if ms:
            return float(int(ms[1]) * 60 + int(ms[2]))

        try:
            number = float(raw)
        except ValueError:
            return None
        return number if math.isfinite(number) else None

    return None


def normalize_speaker(raw: Any) -> str | None:
    """Map speaker labels onto "customer" / "agent"; other labels pass through lowercased."""
    if not raw or not isinstance(raw, str):
        return None

    lower = raw.lower().strip()
    if lower in CUSTOMER_ALIASES:
        return "customer"
    if lower in AGENT_ALIASES:
        return "agent"
    return lower or None


def _finite_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def coerce_segments(raw: Any) -> list[Segment]:
    """
    Turn stored transcript_segments JSON into Segments.

    Entries without finite start/end or with blank text are dropped.
    """
    if not isinstance(raw, list):
        return []

    segments = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        start = _finite_float(item.get("start"))
        end = _finite_float(item.get("end"))
        text = str(item.get("text") or "")
        if start is None or end is None or not text.strip():
            continue
        speaker = item.get("speaker")
        segments.append(
            Segment(
                start=start,
                end=end,
                text=text,
                speaker=speaker if isinstance(speaker, str) else None,
            )
        )
    return segments


def build_transcript_prompt(segments: list[Segment]) -> str:
    """One line per segment: "[0:05 - 0:09 agent] text"."""
    lines = []
    for seg in segments:
        speaker = f" {seg.speaker}" if seg.speaker else ""
        lines.append(f"[{format_seconds(seg.start)} - {format_seconds(seg.end)}{speaker}] {seg.text}")
    return "\n".join(lines)


# =============================================================================
# TIMELINE
# =============================================================================


def snap_to_segment(
    segments: list[Segment],
    ts: float,
    tolerance: float = SNAP_TOLERANCE_SECONDS,
) -> Segment | None:
    """
    The segment containing ts, else the nearest one within `tolerance`
    seconds, else None.
    """
    best = None
    best_dist = math.inf

    for seg in segments:
        if seg.start <= ts <= seg.end:
            return seg
        dist = seg.start - ts if ts < seg.start else ts - seg.end
        if dist < best_dist:
            best_dist = dist
            best = seg

    return best if best_dist <= tolerance else None


def question_keywords(question: str) -> list[str]:
    keywords = []
    for word in _WORD_RE.findall(question.lower()):
        if len(word) < 3 or word in STOPWORDS or word in keywords:
            continue
        keywords.append(word)
    return keywords


def find_keyword_matches(
    segments: list[Segment],
    question: str,
    limit: int = MAX_MATCHES,
) -> dict[str, Any]:
    """
    Answer a question by keyword overlap alone.

    Segments are scored by how many distinct question keywords they contain.
    Hits from the same speaker within MERGE_WINDOW_SECONDS of each other are
    merged into a single moment. The best `limit` moments are returned in
    timeline order, shaped like a model answer so finalize_result can clean
    it up the same way.
    """
    keywords = question_keywords(question)
    if not keywords:
        return {"confidence": 0, "matches": []}

    hits = []
    for seg in segments:
        words = set(_WORD_RE.findall(seg.text.lower()))
        score = sum(1 for kw in keywords if kw in words)
        if score:
            hits.append((seg, score))
    hits.sort(key=lambda hit: hit[0].start)

    groups: list[dict[str, Any]] = []
    for seg, score in hits:
        last = groups[-1] if groups else None
        if (
            last is not None
            and seg.speaker == last["speaker"]
            and seg.start - last["end"] <= MERGE_WINDOW_SECONDS
        ):
            last["end"] = seg.end
            last["quote"] = f"{last['quote']} {seg.text.strip()}"
            last["score"] = max(last["score"], score)
            continue
        groups.append(
            {
                "start": seg.start,
                "end": seg.end,
                "speaker": seg.speaker,
                "quote": seg.text.strip(),
                "score": score,
            }
        )

    best = sorted(groups, key=lambda g: (-g["score"], g["start"]))[:limit]
    best.sort(key=lambda g: g["start"])

    top_score = max((g["score"] for g in best), default=0)
    return {
        "confidence": top_score / len(keywords),
        "matches": [
            {
                "timestamp_seconds": g["start"],
                "speaker": g["speaker"],
                "quote": g["quote"],
                "context": f"Keyword match ({g['score']} of {len(keywords)} terms)",
            }
            for g in best
        ],
    }


# =============================================================================
# RESULT CLEANUP
# =============================================================================


def _clamp_confidence(value: Any) -> float:
    confidence = _finite_float(value)
    if confidence is None:
        return 0.0
    # Models sometimes answer in percent
    if 1 < confidence <= 100:
        confidence /= 100
    return max(0.0, min(1.0, confidence))


def finalize_result(
    question: str,
    raw: dict[str, Any],
    segments: list[Segment],
) -> QaResultDTO:
    """
    Validate a raw answer against the transcript.

    - matches without a quote are dropped; quotes are cut to 300 chars
    - timestamps snap to the start of the nearest real segment
    - duplicates (same timestamp and quote prefix) are removed
    - verdict: two or more matches "found", one "partial", none "not_found"
    - confidence is clamped to [0, 1] and forced to 0 without matches
    - at most 8 matches are returned
    """
    raw_matches = raw.get("matches")
    if not isinstance(raw_matches, list):
        raw_matches = []

    validated: list[QaMatchDTO] = []
    for match in raw_matches:
        if not isinstance(match, dict):
            continue
        quote = match.get("quote")
        quote = quote.strip() if isinstance(quote, str) else ""
        if not quote:
            continue

        raw_ts = parse_timestamp(match.get("timestamp_seconds"))
        segment = snap_to_segment(segments, raw_ts) if raw_ts is not None else None
        context = match.get("context")

        validated.append(
            QaMatchDTO(
                timestamp_seconds=segment.start if segment is not None else raw_ts,
                speaker=normalize_speaker(match.get("speaker")),
                quote=quote[:MAX_QUOTE_CHARS],
                context=context if isinstance(context, str) else None,
            )
        )

    seen = set()
    deduped = []
    for match in validated:
        key = f"{_format_key_ts(match.timestamp_seconds)}-{match.quote[:DEDUPE_QUOTE_PREFIX]}"
        if key in seen:
            continue
        seen.add(key)
        deduped.append(match)

    if len(deduped) >= 2:
        verdict = "found"
    elif len(deduped) == 1:
        verdict = "partial"
    else:
        verdict = "not_found"

    summary = raw.get("summary")
    if isinstance(summary, str) and summary.strip():
        summary = summary.strip()
    else:
        summary = FOUND_SUMMARY if deduped else NOT_FOUND_SUMMARY

    return QaResultDTO(
        question=question,
        verdict=verdict,
        confidence=_clamp_confidence(raw.get("confidence")) if deduped else 0.0,
        summary=summary,
        matches=deduped[:MAX_MATCHES],
    )


def _format_key_ts(ts: float | None) -> str:
    if ts is None:
        return "x"
    # 12.0 and 12 must collide
    return str(int(ts)) if ts.is_integer() else str(ts)
