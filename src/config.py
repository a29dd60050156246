"""Configuration dataclass for the relay."""

from dataclasses import dataclass


@dataclass
class Config:
    """Application configuration.

    All configuration should be passed as a Config instance rather than
    reading from environment variables directly. A missing API key is a
    supported mode: that upstream answers with mock responses.
    """

    groq_api_key: str | None
    tavily_api_key: str | None
    port: int = 5000
    static_dir: str = "public"
    groq_model: str = "llama-3.1-8b-instant"
    groq_url: str = "https://api.groq.com/openai/v1/chat/completions"
    tavily_url: str = "https://api.tavily.com/search"
    max_ai_per_day: int = 20
    max_web_per_day: int = 100
    quota_window_hours: int = 24
    # None disables the upstream timeout entirely
    upstream_timeout: float | None = None
