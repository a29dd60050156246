"""API module for request/response models and handlers."""

from src.api.models import SearchRequest, SearchResponse
from src.api.handlers import create_health_handler, create_search_handler

__all__ = [
    "SearchRequest",
    "SearchResponse",
    "create_health_handler",
    "create_search_handler",
]
