"""Essay page controller — owns the page state and the generation lifecycle.

At most one generation is current.  Starting a new one cancels the
previous ``GenerationToken`` together with its in-flight request and reveal
task; any late completion of superseded work is dropped instead of being
written to the page.

The controller knows nothing about Chainlit: the view subscribes through
``on_change`` and the copy action writes through ``clipboard``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Protocol

from app.models import GenerationResult, PageState
from app.reveal import GenerationToken, reveal
from app.theme import PresentationTheme

logger = logging.getLogger(__name__)

EMPTY_KEYWORDS_MESSAGE = "Please enter keywords first"

StateListener = Callable[[PageState], Awaitable[None]]
ClipboardSink = Callable[[str], Awaitable[None]]


class EssaySource(Protocol):
    async def generate(self, keywords: str) -> GenerationResult: ...


class EssayController:
    """State machine behind the essay page."""

    def __init__(
        self,
        source: EssaySource,
        *,
        theme: PresentationTheme,
        reveal_delay: float,
        on_change: StateListener | None = None,
        clipboard: ClipboardSink | None = None,
    ) -> None:
        self.state = PageState()
        self.theme = theme
        self._source = source
        self._reveal_delay = reveal_delay
        self._on_change = on_change
        self._clipboard = clipboard
        self._token: GenerationToken | None = None
        self._request_task: asyncio.Future | None = None
        self._reveal_task: asyncio.Future | None = None

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def set_keywords(self, keywords: str) -> None:
        self.state.keywords = keywords

    async def generate(self, regenerate: bool = False) -> None:
        """Start a generation for the current keywords.

        Supersedes whatever generation is in flight.  Only ``regenerate``
        rejects empty keywords; the initial generate sends them as-is.
        """
        token = self._supersede()

        if regenerate and not self.state.keywords.strip():
            self.state.error = EMPTY_KEYWORDS_MESSAGE
            self.state.is_loading = False
            await self._notify()
            return

        self.state.is_loading = True
        self.state.error = None
        self.state.displayed = ""
        await self._notify()

        logger.info("Generation %d started: %s", token.id, self.state.keywords[:100])
        self._request_task = asyncio.ensure_future(self._source.generate(self.state.keywords))
        try:
            result = await self._request_task
        except asyncio.CancelledError:
            if token.cancelled:
                logger.info("Generation %d superseded", token.id)
                return
            # cancelled from outside (session stop): clear the loading label first
            self.state.is_loading = False
            await self._notify()
            raise
        except Exception as e:
            if self.is_current(token):
                logger.warning("Generation %d failed: %s", token.id, e)
                self.state.error = str(e)
                self.state.is_loading = False
                await self._notify()
            return

        if not self.is_current(token):
            logger.info("Generation %d finished after being superseded, dropped", token.id)
            return

        self.state.generated = result
        self.state.displayed = ""
        self.state.is_loading = False
        await self._notify()

        self._reveal_task = asyncio.ensure_future(
            reveal(result.content, lambda prefix: self._show(token, prefix), token, self._reveal_delay)
        )

    async def regenerate(self) -> None:
        await self.generate(regenerate=True)

    async def copy_content(self) -> str:
        """Copy the currently displayed (possibly partial) text."""
        text = self.state.displayed
        if self._clipboard is not None:
            await self._clipboard(text)
        return text

    async def edit(self, value: str) -> None:
        """Apply a user edit made in the editor."""
        self.state.displayed = value
        await self._notify()

    async def wait_for_reveal(self) -> None:
        """Wait until the current reveal has finished or been cancelled."""
        if self._reveal_task is not None:
            await asyncio.wait({self._reveal_task})

    async def close(self) -> None:
        """Cancel any outstanding work (session end)."""
        self._cancel_current()
        self._token = None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def is_current(self, token: GenerationToken) -> bool:
        return token is self._token and not token.cancelled

    def _cancel_current(self) -> None:
        if self._token is not None:
            self._token.cancel()
        for task in (self._request_task, self._reveal_task):
            if task is not None and not task.done():
                task.cancel()

    def _supersede(self) -> GenerationToken:
        self._cancel_current()
        self._token = GenerationToken()
        return self._token

    async def _show(self, token: GenerationToken, prefix: str) -> None:
        if not self.is_current(token):
            return
        self.state.displayed = self.theme.wrap(prefix)
        await self._notify()

    async def _notify(self) -> None:
        if self._on_change is not None:
            await self._on_change(self.state)
