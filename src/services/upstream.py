"""HTTP clients for the Groq completion and Tavily search APIs."""

import errno
import json
import logging
import socket
import ssl
from typing import Any, Iterator

import httpx

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are SearchNet, a helpful, clear and concise AI assistant. "
    "Explain things in simple language, especially for a class 9-10 student. "
    "Avoid unsafe or illegal instructions."
)

COMPLETION_TEMPERATURE = 0.6
COMPLETION_MAX_TOKENS = 512

SEARCH_DEPTH = "advanced"
SEARCH_MAX_RESULTS = 8

_NETWORK_ERRNOS = {errno.ECONNREFUSED, errno.ETIMEDOUT}


def _exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield an exception and everything it was raised from, including group members."""
    seen: set[int] = set()
    pending = [exc]
    while pending:
        current = pending.pop()
        if current is None or id(current) in seen:
            continue
        seen.add(id(current))
        yield current
        pending.append(current.__cause__)
        pending.append(current.__context__)
        pending.extend(getattr(current, "exceptions", None) or ())


def _is_unreachable_os_error(exc: BaseException) -> bool:
    if isinstance(exc, socket.gaierror):
        return True
    return isinstance(exc, OSError) and exc.errno in _NETWORK_ERRNOS


def is_network_error(exc: BaseException) -> bool:
    """Check whether an upstream failure means the API could not be reached.

    Covers name resolution failures (permanent and temporary), refused
    connections and timeouts. httpx reports TLS failures and unroutable
    hosts as ConnectError too, so a ConnectError only counts when one of
    those socket errors caused it. Anything else is an unexpected error.
    """
    if isinstance(exc, httpx.TimeoutException):
        return True
    chain = list(_exception_chain(exc))
    if any(isinstance(e, ssl.SSLError) for e in chain):
        return False
    return any(_is_unreachable_os_error(e) for e in chain)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Invalid JSON constant: {name}")


def parse_json_body(response: httpx.Response) -> Any:
    """Decode a response body as strict JSON.

    NaN and Infinity are rejected here so they can't reach the client
    response, which cannot encode them.
    """
    return json.loads(response.content, parse_constant=_reject_constant)


def extract_completion_text(payload: Any) -> str | None:
    """Get the first choice's message content from a chat completion payload.

    Returns None when the payload doesn't have that shape, which is what
    Groq error bodies (bad key, rate limit) look like.
    """
    if not isinstance(payload, dict):
        return None
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    message = first.get("message")
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    if not content or not isinstance(content, str):
        return None
    return content


def _auth_headers(api_key: str) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }


class GroqClient:
    """Groq chat-completions client (OpenAI-compatible endpoint)."""

    def __init__(
        self,
        api_key: str,
        model: str = "llama-3.1-8b-instant",
        url: str = "https://api.groq.com/openai/v1/chat/completions",
        timeout: float | None = None,
    ):
        self.api_key = api_key
        self.model = model
        self.url = url
        self.timeout = timeout

    async def complete(self, query: str) -> Any:
        """Send the query as the only user message and return the JSON payload.

        The response status is not checked; error bodies are returned like any
        other payload.
        """
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": query},
            ],
            "temperature": COMPLETION_TEMPERATURE,
            "max_tokens": COMPLETION_MAX_TOKENS,
        }
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(self.url, headers=_auth_headers(self.api_key), json=payload)
            logger.debug(f"Groq responded with status {response.status_code}")
            return parse_json_body(response)


class TavilyClient:
    """Tavily search client."""

    def __init__(
        self,
        api_key: str,
        url: str = "https://api.tavily.com/search",
        timeout: float | None = None,
    ):
        self.api_key = api_key
        self.url = url
        self.timeout = timeout

    async def search(self, query: str) -> Any:
        """Run an advanced search with a synthesized answer and return the JSON payload."""
        payload = {
            "query": query,
            "search_depth": SEARCH_DEPTH,
            "include_answer": True,
            "max_results": SEARCH_MAX_RESULTS,
        }
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(self.url, headers=_auth_headers(self.api_key), json=payload)
            logger.debug(f"Tavily responded with status {response.status_code}")
            return parse_json_body(response)
