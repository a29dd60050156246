"""FastAPI application entry point."""

import logging
import os
from pathlib import Path
from contextlib import asynccontextmanager
from datetime import timedelta

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from src.api.handlers import create_health_handler, create_search_handler
from src.config import Config
from src.services.quota import QuotaTracker
from src.services.relay import QueryRelay
from src.services.upstream import GroqClient, TavilyClient

# Load .env file if it exists (for local development)
env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _getenv_key(name: str) -> str | None:
    value = os.getenv(name, "").strip()
    return value or None


def load_config() -> Config:
    """Load configuration from environment variables.

    This is the only place that reads from environment variables.
    Missing API keys are allowed; the relay falls back to mock answers.
    """
    timeout = os.getenv("UPSTREAM_TIMEOUT_SECONDS", "").strip()
    return Config(
        groq_api_key=_getenv_key("GROQ_API_KEY"),
        tavily_api_key=_getenv_key("TAVILY_API_KEY"),
        port=int(os.getenv("PORT", "5000")),
        static_dir=os.getenv("STATIC_DIR", "public"),
        groq_model=os.getenv("GROQ_MODEL", "llama-3.1-8b-instant").strip() or "llama-3.1-8b-instant",
        max_ai_per_day=int(os.getenv("MAX_AI_PER_DAY", "20")),
        max_web_per_day=int(os.getenv("MAX_WEB_PER_DAY", "100")),
        upstream_timeout=float(timeout) if timeout else None,
    )


def create_relay(config: Config, tracker: QuotaTracker | None = None) -> QueryRelay:
    """Build the query relay, leaving out upstreams that have no API key."""
    groq = None
    if config.groq_api_key:
        groq = GroqClient(
            api_key=config.groq_api_key,
            model=config.groq_model,
            url=config.groq_url,
            timeout=config.upstream_timeout,
        )
    tavily = None
    if config.tavily_api_key:
        tavily = TavilyClient(
            api_key=config.tavily_api_key,
            url=config.tavily_url,
            timeout=config.upstream_timeout,
        )
    if tracker is None:
        tracker = QuotaTracker(window=timedelta(hours=config.quota_window_hours))
    return QueryRelay(
        tracker,
        groq=groq,
        tavily=tavily,
        max_ai_per_day=config.max_ai_per_day,
        max_web_per_day=config.max_web_per_day,
    )


def create_app(config: Config, tracker: QuotaTracker | None = None) -> FastAPI:
    """Create the FastAPI app with its own relay and quota tracker."""
    relay = create_relay(config, tracker)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan context manager for startup/shutdown."""
        # Startup
        print(f"🚀 SearchNet relay running at http://localhost:{config.port}", flush=True)
        print(f"🤖 AI mode: {'Groq ' + config.groq_model if relay.groq else 'mock (GROQ_API_KEY not set)'}", flush=True)
        print(f"🌐 Web mode: {'Tavily' if relay.tavily else 'mock (TAVILY_API_KEY not set)'}", flush=True)
        yield
        # Shutdown
        print("👋 Shutting down SearchNet relay...", flush=True)

    app = FastAPI(
        title="SearchNet Relay",
        description="Relays search queries to Groq or Tavily with a daily per-client quota",
        lifespan=lifespan,
    )
    app.state.relay = relay

    # CORS middleware for UI
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routes
    app.get("/health")(create_health_handler())
    app.post("/api/search")(create_search_handler(relay))

    # Static UI last so it doesn't shadow the API routes
    static_dir = Path(config.static_dir)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
    else:
        logger.warning(f"Static directory {static_dir} not found, serving API only")

    return app


# Load configuration
config = load_config()

app = create_app(config)


def main():
    """Run the FastAPI server."""
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=config.port)


if __name__ == "__main__":
    main()
