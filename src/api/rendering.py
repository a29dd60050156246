"""Render relay outcomes to the response bodies clients depend on."""

from typing import Any

from src.api.models import SearchResponse
from src.services.relay import (
    MODE_AI,
    FallbackReason,
    OutcomeKind,
    RelayOutcome,
    UpstreamError,
)

INVALID_QUERY_MESSAGE = "Missing or invalid 'query'."
SERVER_CRASHED_MESSAGE = "Server crashed internally."
INVALID_MODE_MESSAGE = "Invalid mode. Use 'ai' or 'web'."

AI_LIMIT_MESSAGE = (
    "You have reached the free AI limit for today. "
    "Please try again tomorrow or use Web Summary mode."
)
WEB_LIMIT_MESSAGE = "You have reached the free Web Summary limit for today. Please try again tomorrow."

AI_EMPTY_RESPONSE_MESSAGE = "AI error: No response from Groq model."
AI_UNEXPECTED_MESSAGE = "AI error: Unexpected server error while calling Groq."
WEB_UNEXPECTED_MESSAGE = "Web summary error: Unexpected server error."

_AI_FALLBACK_NOTES = {
    FallbackReason.MISSING_CREDENTIAL: "GROQ_API_KEY not set on server",
    FallbackReason.UNREACHABLE: "network cannot reach Groq from this server",
}
_WEB_FALLBACK_NOTES = {
    FallbackReason.MISSING_CREDENTIAL: "TAVILY_API_KEY not set on server",
    FallbackReason.UNREACHABLE: "network cannot reach Tavily from this server",
}


def _body(answer: str, results: list[Any] | None = None) -> dict[str, Any]:
    return SearchResponse(answer=answer, results=results).model_dump(exclude_none=True)


def _render_ai(outcome: RelayOutcome) -> dict[str, Any]:
    if outcome.kind == OutcomeKind.ANSWERED:
        return _body(outcome.answer)
    if outcome.kind == OutcomeKind.QUOTA_EXCEEDED:
        return _body(AI_LIMIT_MESSAGE)
    if outcome.kind == OutcomeKind.MOCK_FALLBACK:
        note = _AI_FALLBACK_NOTES[outcome.fallback]
        return _body(f'Mock AI response for "{outcome.query}" ({note}).')
    if outcome.error == UpstreamError.EMPTY_RESPONSE:
        return _body(AI_EMPTY_RESPONSE_MESSAGE)
    return _body(AI_UNEXPECTED_MESSAGE)


def _render_web(outcome: RelayOutcome) -> Any:
    if outcome.kind == OutcomeKind.ANSWERED:
        return outcome.payload
    if outcome.kind == OutcomeKind.QUOTA_EXCEEDED:
        return _body(WEB_LIMIT_MESSAGE, results=[])
    if outcome.kind == OutcomeKind.MOCK_FALLBACK:
        note = _WEB_FALLBACK_NOTES[outcome.fallback]
        return _body(f'Mock web summary for "{outcome.query}" ({note}).', results=[])
    return _body(WEB_UNEXPECTED_MESSAGE, results=[])


def render_outcome(outcome: RelayOutcome) -> Any:
    """Convert a relay outcome into the JSON body sent with status 200."""
    if outcome.kind == OutcomeKind.INVALID_MODE:
        return _body(INVALID_MODE_MESSAGE)
    if outcome.mode == MODE_AI:
        return _render_ai(outcome)
    return _render_web(outcome)
