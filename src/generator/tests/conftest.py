"""Shared test fixtures for generation service tests.

Environment variables MUST be set at module level (before any generator
modules are imported) because ``generator.config`` evaluates
``_load_config()`` at import time.
"""

import os

# Set env vars before any generator code is imported
os.environ.setdefault("GEMINI_API_KEY", "test-gemini-key")
os.environ.setdefault("GEMINI_MODEL", "gemini-test")

import pytest  # noqa: E402
