"""Typewriter-style reveal of generated text, one character per step.

Every step checks the ``GenerationToken`` it was started with; once that
token is cancelled (a newer generation started) the reveal stops without
writing anything else.
"""

from __future__ import annotations

import asyncio
import itertools
from collections.abc import Awaitable, Callable

_token_ids = itertools.count(1)


class GenerationToken:
    """Identifies one generation; cancelled when a newer one supersedes it."""

    def __init__(self) -> None:
        self.id = next(_token_ids)
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def __repr__(self) -> str:
        return f"GenerationToken(id={self.id}, cancelled={self.cancelled})"


async def reveal(
    text: str,
    render: Callable[[str], Awaitable[None]],
    token: GenerationToken,
    delay: float,
) -> None:
    """Render ``text[:0]`` through ``text[:len(text)]``, *delay* seconds apart."""
    for end in range(len(text) + 1):
        if token.cancelled:
            return
        await render(text[:end])
        if end < len(text):
            await asyncio.sleep(delay)
