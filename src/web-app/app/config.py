"""Web app configuration — loads environment variables and validates required settings.

Usage:
    from app.config import config
    print(config.generator_endpoint)
"""

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


def _find_env_file() -> Path | None:
    """Search for .env file starting from this file's directory, then up."""
    current = Path(__file__).resolve().parent.parent  # src/web-app/
    candidates = [
        current / ".env",
        current.parent.parent / ".env",  # repo root
    ]
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return None


@dataclass(frozen=True)
class Config:
    """Typed configuration loaded from environment variables."""

    # Generation service endpoint (local: http://localhost:8088)
    generator_endpoint: str

    # Seconds the web app waits on the generation service
    generator_timeout_seconds: float

    # Delay between two reveal steps
    reveal_delay_ms: int

    # Presentation theme name (see app.theme.THEMES)
    web_theme: str


def _load_config() -> Config:
    """Load and validate configuration from environment."""
    env_file = _find_env_file()
    if env_file:
        load_dotenv(env_file, override=False)

    required = {
        "GENERATOR_ENDPOINT": "generator_endpoint",
    }

    missing = [var for var in required if not os.environ.get(var)]
    if missing:
        print(
            f"Error: Missing required environment variables: {', '.join(missing)}\n"
            f"Copy .env.sample to .env and fill in values, e.g. GENERATOR_ENDPOINT=http://localhost:8088",
            file=sys.stderr,
        )
        sys.exit(1)

    return Config(
        generator_endpoint=os.environ["GENERATOR_ENDPOINT"],
        generator_timeout_seconds=float(os.environ.get("GENERATOR_TIMEOUT_SECONDS", "60")),
        reveal_delay_ms=int(os.environ.get("REVEAL_DELAY_MS", "7")),
        web_theme=os.environ.get("WEB_THEME", "noir"),
    )


# Singleton — imported as `from app.config import config`
config = _load_config()
