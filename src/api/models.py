"""Pydantic models for API requests and responses."""

from typing import Any

from pydantic import BaseModel, Field, StrictStr


class SearchRequest(BaseModel):
    """Search request from client."""

    query: StrictStr = Field(..., min_length=1, description="Text to search for or ask the AI")
    mode: Any = Field(None, description="'ai' for a Groq answer, 'web' for a Tavily summary")


class SearchResponse(BaseModel):
    """Search response to client.

    Successful web searches return the Tavily payload as-is instead.
    """

    answer: str = Field(..., description="Answer, mock answer or in-band error message")
    results: list[Any] | None = Field(None, description="Web results (web mode only)")
