"""Tests for the character-by-character reveal and generation tokens."""

from __future__ import annotations

import asyncio

import pytest

from app.reveal import GenerationToken, reveal


class _Recorder:
    def __init__(self) -> None:
        self.frames: list[str] = []

    async def __call__(self, text: str) -> None:
        self.frames.append(text)


class TestGenerationToken:
    """Test token identity and cancellation."""

    def test_ids_are_unique(self) -> None:
        assert GenerationToken().id != GenerationToken().id

    def test_cancel(self) -> None:
        token = GenerationToken()
        assert not token.cancelled
        token.cancel()
        assert token.cancelled


class TestReveal:
    """Test the reveal animation."""

    @pytest.mark.asyncio
    async def test_n_plus_one_frames(self) -> None:
        rec = _Recorder()
        await reveal("essay", rec, GenerationToken(), delay=0)
        assert rec.frames == ["", "e", "es", "ess", "essa", "essay"]

    @pytest.mark.asyncio
    async def test_frames_grow_by_one(self) -> None:
        text = "Photosynthesis converts light into chemical energy."
        rec = _Recorder()
        await reveal(text, rec, GenerationToken(), delay=0)
        assert len(rec.frames) == len(text) + 1
        assert rec.frames[0] == ""
        assert rec.frames[-1] == text
        for shorter, longer in zip(rec.frames, rec.frames[1:]):
            assert len(longer) == len(shorter) + 1
            assert longer.startswith(shorter)

    @pytest.mark.asyncio
    async def test_empty_text_renders_once(self) -> None:
        rec = _Recorder()
        await reveal("", rec, GenerationToken(), delay=0)
        assert rec.frames == [""]

    @pytest.mark.asyncio
    async def test_cancelled_token_renders_nothing(self) -> None:
        token = GenerationToken()
        token.cancel()
        rec = _Recorder()
        await reveal("abc", rec, token, delay=0)
        assert rec.frames == []

    @pytest.mark.asyncio
    async def test_stops_when_token_cancelled_midway(self) -> None:
        token = GenerationToken()
        frames: list[str] = []

        async def _render(text: str) -> None:
            frames.append(text)
            if len(text) == 2:
                token.cancel()

        await reveal("abcdef", _render, token, delay=0)
        assert frames == ["", "a", "ab"]

    @pytest.mark.asyncio
    async def test_waits_between_steps(self, monkeypatch) -> None:
        delays: list[float] = []
        real_sleep = asyncio.sleep

        async def _sleep(seconds: float) -> None:
            delays.append(seconds)
            await real_sleep(0)

        monkeypatch.setattr("app.reveal.asyncio.sleep", _sleep)
        await reveal("abc", _Recorder(), GenerationToken(), delay=0.007)
        assert delays == [0.007, 0.007, 0.007]
