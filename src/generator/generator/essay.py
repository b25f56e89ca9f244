"""Essay generation — prompt templating, provider call and abort handling.

Uses the ``openai`` SDK against Gemini's OpenAI-compatible endpoint.  The
references returned alongside each essay are built from two fixed templates;
they are not looked up anywhere and the service never claims they are real.

Exports an ``EssayWriter`` (wrapping the provider client), a
``create_writer()`` factory used by the hosting adapter (``main.py``) and
``generate_essay()``, which bounds one provider call by a timeout and an
optional client-disconnect check.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from openai import APITimeoutError, AsyncOpenAI

from generator.config import config

logger = logging.getLogger(__name__)

_PROMPT_TEMPLATE = """\
Write a comprehensive, scholarly essay about {keywords}.
Provide an in-depth analysis with:
- Clear, academic language
- Substantive historical or contextual information
- Objective analysis
- Detailed exploration of the topic
Aim for 350-450 words, include potential source references within the text.\
"""

REFERENCE_TEMPLATES = (
    "Academic Research on {keywords}, Global Studies Journal, 2024",
    "Comprehensive {keywords} Analysis, International Review, 2024",
)

# Seconds between two client-disconnect checks while waiting on the provider
_DISCONNECT_POLL_SECONDS = 0.5


class GenerationError(Exception):
    """The provider call failed (configuration, network or provider error)."""


class GenerationAborted(GenerationError):
    """The provider call was abandoned before it produced a result."""


@dataclass
class Essay:
    """A generated essay and its template-built references."""

    content: str
    references: list[str] = field(default_factory=list)


def build_prompt(keywords: str) -> str:
    """Return the essay prompt for *keywords* (used verbatim)."""
    return _PROMPT_TEMPLATE.format(keywords=keywords)


def build_references(keywords: str) -> list[str]:
    """Return the two fabricated reference strings for *keywords*."""
    return [template.format(keywords=keywords) for template in REFERENCE_TEMPLATES]


# ---------------------------------------------------------------------------
# Provider client
# ---------------------------------------------------------------------------

class EssayWriter:
    """Sends a single prompt to the text-generation provider."""

    def __init__(self, client: AsyncOpenAI, model: str) -> None:
        self._client = client
        self.model = model

    async def write(self, prompt: str) -> str:
        """Return the completion text for *prompt*.

        Raises ``GenerationAborted`` when the provider itself times out and
        ``GenerationError`` when it returns no text.
        """
        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
            )
        except APITimeoutError as e:
            raise GenerationAborted("provider request timed out") from e

        if not response.choices:
            raise GenerationError("provider returned no choices")
        text = response.choices[0].message.content
        if not text:
            raise GenerationError("provider returned an empty completion")
        return text

    async def aclose(self) -> None:
        await self._client.close()


def create_writer() -> EssayWriter:
    """Create an ``EssayWriter`` from the service configuration.

    Raises ``GenerationError`` when ``GEMINI_API_KEY`` is not configured.
    Retries are disabled: each request makes exactly one provider call.
    """
    if not config.gemini_api_key:
        raise GenerationError("GEMINI_API_KEY is not configured")

    client = AsyncOpenAI(
        api_key=config.gemini_api_key,
        base_url=config.base_url,
        timeout=config.generation_timeout_seconds,
        max_retries=0,
    )
    logger.info("Created EssayWriter (model=%s, base_url=%s)", config.model_name, config.base_url)
    return EssayWriter(client, config.model_name)


# ---------------------------------------------------------------------------
# Bounded generation
# ---------------------------------------------------------------------------

async def _wait_for_disconnect(is_disconnected: Callable[[], Awaitable[bool]]) -> None:
    while not await is_disconnected():
        await asyncio.sleep(_DISCONNECT_POLL_SECONDS)


async def generate_essay(
    writer: EssayWriter,
    keywords: str,
    *,
    timeout: float,
    is_disconnected: Callable[[], Awaitable[bool]] | None = None,
) -> Essay:
    """Generate an essay for *keywords*, aborting after *timeout* seconds.

    When *is_disconnected* is given it is polled while the provider call is
    pending; a ``True`` result aborts the call as well.  Either abort raises
    ``GenerationAborted`` and cancels the provider call.
    """
    prompt = build_prompt(keywords)
    generation = asyncio.ensure_future(writer.write(prompt))
    watcher = None
    pending = {generation}
    if is_disconnected is not None:
        watcher = asyncio.ensure_future(_wait_for_disconnect(is_disconnected))
        pending.add(watcher)

    try:
        done, _ = await asyncio.wait(pending, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
    finally:
        if watcher is not None:
            watcher.cancel()
        if not generation.done():
            generation.cancel()

    if generation not in done:
        if watcher is not None and watcher in done:
            if watcher.exception() is not None:
                raise GenerationError("disconnect check failed") from watcher.exception()
            raise GenerationAborted("client disconnected")
        raise GenerationAborted(f"no completion within {timeout:g}s")

    return Essay(content=generation.result(), references=build_references(keywords))
