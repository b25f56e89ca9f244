"""Generation service configuration — loads environment variables.

Usage:
    from generator.config import config
    print(config.model_name)
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Gemini exposes an OpenAI-compatible surface under this path
_DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"


def _find_env_file() -> Path | None:
    """Search for .env file starting from this file's directory, then up."""
    current = Path(__file__).resolve().parent.parent  # src/generator/
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

    # Provider credentials; empty makes every generation fail with 500
    gemini_api_key: str

    # Model name and OpenAI-compatible base URL
    model_name: str
    base_url: str

    # Seconds before an in-flight generation is aborted (→ 499)
    generation_timeout_seconds: float

    # Listen port for ``python main.py``
    port: int


def _load_config() -> Config:
    """Load configuration from environment."""
    env_file = _find_env_file()
    if env_file:
        load_dotenv(env_file, override=False)

    api_key = os.environ.get("GEMINI_API_KEY", "")
    if not api_key:
        logger.warning("GEMINI_API_KEY not set — generation requests will fail")

    return Config(
        gemini_api_key=api_key,
        model_name=os.environ.get("GEMINI_MODEL", "gemini-1.5-flash"),
        base_url=os.environ.get("GEMINI_BASE_URL", _DEFAULT_BASE_URL),
        generation_timeout_seconds=float(os.environ.get("GENERATION_TIMEOUT_SECONDS", "30")),
        port=int(os.environ.get("PORT", "8088")),
    )


# Singleton — imported as `from generator.config import config`
config = _load_config()
