"""Query relay: quota check, upstream dispatch and fallback classification.

The relay returns a tagged RelayOutcome and never builds response text.
The API layer renders outcomes to the wire format.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from src.services.quota import QuotaTracker
from src.services.upstream import (
    GroqClient,
    TavilyClient,
    extract_completion_text,
    is_network_error,
)

logger = logging.getLogger(__name__)

MODE_AI = "ai"
MODE_WEB = "web"

MAX_AI_PER_DAY = 20
MAX_WEB_PER_DAY = 100


class OutcomeKind(str, Enum):
    ANSWERED = "answered"
    QUOTA_EXCEEDED = "quota_exceeded"
    MOCK_FALLBACK = "mock_fallback"
    UPSTREAM_ERROR = "upstream_error"
    INVALID_MODE = "invalid_mode"


class FallbackReason(str, Enum):
    MISSING_CREDENTIAL = "missing_credential"
    UNREACHABLE = "unreachable"


class UpstreamError(str, Enum):
    EMPTY_RESPONSE = "empty_response"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class RelayOutcome:
    """Result of relaying one query.

    Only the field matching ``kind`` is set: ``answer`` for an AI answer,
    ``payload`` for a web search result, ``fallback`` for a mock, ``error``
    for an upstream error.
    """

    kind: OutcomeKind
    query: str
    mode: Optional[str] = None
    answer: Optional[str] = None
    payload: Any = None
    fallback: Optional[FallbackReason] = None
    error: Optional[UpstreamError] = None


class QueryRelay:
    """Forwards queries to Groq or Tavily under a per-client daily quota.

    Each attempt is charged before the upstream call and is not refunded if
    the call fails. The check and the increment happen with no await between
    them, so concurrent requests on the event loop cannot both pass the
    last free slot.
    """

    def __init__(
        self,
        tracker: QuotaTracker,
        groq: Optional[GroqClient] = None,
        tavily: Optional[TavilyClient] = None,
        max_ai_per_day: int = MAX_AI_PER_DAY,
        max_web_per_day: int = MAX_WEB_PER_DAY,
    ):
        self.tracker = tracker
        self.groq = groq
        self.tavily = tavily
        self.max_ai_per_day = max_ai_per_day
        self.max_web_per_day = max_web_per_day

    def reset_if_expired(self) -> bool:
        """Roll the quota window over if it has elapsed."""
        return self.tracker.reset_if_expired()

    async def handle(self, query: str, mode: Any, client_id: str) -> RelayOutcome:
        """Relay a validated query for a client.

        The caller starts each request with ``reset_if_expired()``, before
        validating it, so rejected requests also roll the window over.

        Args:
            query: Non-empty query text
            mode: "ai" or "web"; anything else is an invalid mode
            client_id: Quota bucket key

        Returns:
            Tagged outcome for the API layer to render
        """
        record = self.tracker.get_or_create_record(client_id)

        if mode == MODE_AI:
            if record.ai_count >= self.max_ai_per_day:
                logger.info(f"AI quota exhausted for client {client_id}")
                return RelayOutcome(OutcomeKind.QUOTA_EXCEEDED, query, mode=MODE_AI)
            record.ai_count += 1
            return await self._ask_groq(query)

        if mode == MODE_WEB:
            if record.web_count >= self.max_web_per_day:
                logger.info(f"Web quota exhausted for client {client_id}")
                return RelayOutcome(OutcomeKind.QUOTA_EXCEEDED, query, mode=MODE_WEB)
            record.web_count += 1
            return await self._search_tavily(query)

        return RelayOutcome(OutcomeKind.INVALID_MODE, query)

    async def _ask_groq(self, query: str) -> RelayOutcome:
        if self.groq is None:
            return RelayOutcome(
                OutcomeKind.MOCK_FALLBACK,
                query,
                mode=MODE_AI,
                fallback=FallbackReason.MISSING_CREDENTIAL,
            )

        try:
            data = await self.groq.complete(query)
        except Exception as e:
            if is_network_error(e):
                logger.warning(f"Groq unreachable: {e!r}", exc_info=True)
                return RelayOutcome(
                    OutcomeKind.MOCK_FALLBACK,
                    query,
                    mode=MODE_AI,
                    fallback=FallbackReason.UNREACHABLE,
                )
            logger.exception("Groq AI error")
            return RelayOutcome(
                OutcomeKind.UPSTREAM_ERROR, query, mode=MODE_AI, error=UpstreamError.UNEXPECTED
            )

        answer = extract_completion_text(data)
        if answer is None:
            return RelayOutcome(
                OutcomeKind.UPSTREAM_ERROR, query, mode=MODE_AI, error=UpstreamError.EMPTY_RESPONSE
            )
        return RelayOutcome(OutcomeKind.ANSWERED, query, mode=MODE_AI, answer=answer)

    async def _search_tavily(self, query: str) -> RelayOutcome:
        if self.tavily is None:
            return RelayOutcome(
                OutcomeKind.MOCK_FALLBACK,
                query,
                mode=MODE_WEB,
                fallback=FallbackReason.MISSING_CREDENTIAL,
            )

        try:
            data = await self.tavily.search(query)
        except Exception as e:
            if is_network_error(e):
                logger.warning(f"Tavily unreachable: {e!r}", exc_info=True)
                return RelayOutcome(
                    OutcomeKind.MOCK_FALLBACK,
                    query,
                    mode=MODE_WEB,
                    fallback=FallbackReason.UNREACHABLE,
                )
            logger.exception("Tavily web error")
            return RelayOutcome(
                OutcomeKind.UPSTREAM_ERROR, query, mode=MODE_WEB, error=UpstreamError.UNEXPECTED
            )

        return RelayOutcome(OutcomeKind.ANSWERED, query, mode=MODE_WEB, payload=data)
