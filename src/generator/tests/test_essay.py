"""Tests for essay prompt templating, the provider writer and abort handling."""

from __future__ import annotations

import asyncio
import dataclasses
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from openai import APITimeoutError

from generator import essay
from generator.essay import (
    REFERENCE_TEMPLATES,
    Essay,
    EssayWriter,
    GenerationAborted,
    GenerationError,
    build_prompt,
    build_references,
    create_writer,
    generate_essay,
)


def _completion(text: str | None) -> SimpleNamespace:
    """Build a minimal chat-completions response object."""
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])


def _writer_returning(text: str) -> MagicMock:
    writer = MagicMock()
    writer.write = AsyncMock(return_value=text)
    return writer


# ---------------------------------------------------------------------------
# Prompt and references
# ---------------------------------------------------------------------------


class TestPrompt:
    """Test the essay prompt template."""

    def test_keywords_used_verbatim(self) -> None:
        assert "Roman aqueducts" in build_prompt("Roman aqueducts")

    def test_asks_for_scholarly_tone(self) -> None:
        prompt = build_prompt("x")
        assert "scholarly essay" in prompt
        assert "academic language" in prompt

    def test_word_range(self) -> None:
        assert "350-450 words" in build_prompt("x")

    def test_asks_for_references(self) -> None:
        assert "source references" in build_prompt("x")


class TestReferences:
    """Test the fabricated reference templates."""

    def test_photosynthesis(self) -> None:
        assert build_references("photosynthesis") == [
            "Academic Research on photosynthesis, Global Studies Journal, 2024",
            "Comprehensive photosynthesis Analysis, International Review, 2024",
        ]

    def test_always_two(self) -> None:
        assert len(REFERENCE_TEMPLATES) == 2
        assert len(build_references("anything at all")) == 2

    def test_braces_in_keywords_are_not_formatted(self) -> None:
        refs = build_references("{keywords} and {0}")
        assert all("{keywords} and {0}" in ref for ref in refs)


# ---------------------------------------------------------------------------
# EssayWriter
# ---------------------------------------------------------------------------


class TestEssayWriter:
    """Test the provider wrapper against a mocked OpenAI client."""

    @pytest.mark.asyncio
    async def test_returns_completion_text(self) -> None:
        client = MagicMock()
        client.chat.completions.create = AsyncMock(return_value=_completion("Essay text"))

        text = await EssayWriter(client, "gemini-test").write("prompt")

        assert text == "Essay text"
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gemini-test"
        assert kwargs["messages"] == [{"role": "user", "content": "prompt"}]

    @pytest.mark.asyncio
    async def test_empty_completion_raises(self) -> None:
        client = MagicMock()
        client.chat.completions.create = AsyncMock(return_value=_completion(None))

        with pytest.raises(GenerationError):
            await EssayWriter(client, "m").write("prompt")

    @pytest.mark.asyncio
    async def test_no_choices_raises(self) -> None:
        client = MagicMock()
        client.chat.completions.create = AsyncMock(return_value=SimpleNamespace(choices=[]))

        with pytest.raises(GenerationError):
            await EssayWriter(client, "m").write("prompt")

    @pytest.mark.asyncio
    async def test_provider_timeout_is_an_abort(self) -> None:
        client = MagicMock()
        client.chat.completions.create = AsyncMock(
            side_effect=APITimeoutError(request=httpx.Request("POST", "https://provider.test"))
        )

        with pytest.raises(GenerationAborted):
            await EssayWriter(client, "m").write("prompt")

    @pytest.mark.asyncio
    async def test_aclose_closes_client(self) -> None:
        client = MagicMock()
        client.close = AsyncMock()

        await EssayWriter(client, "m").aclose()

        client.close.assert_awaited_once()


class TestCreateWriter:
    """Test the writer factory."""

    def test_missing_key_raises(self, monkeypatch) -> None:
        monkeypatch.setattr(essay, "config", dataclasses.replace(essay.config, gemini_api_key=""))
        with pytest.raises(GenerationError, match="GEMINI_API_KEY"):
            create_writer()

    def test_uses_configured_model(self) -> None:
        writer = create_writer()
        assert isinstance(writer, EssayWriter)
        assert writer.model == "gemini-test"


# ---------------------------------------------------------------------------
# generate_essay
# ---------------------------------------------------------------------------


class TestGenerateEssay:
    """Test the bounded generation helper."""

    @pytest.mark.asyncio
    async def test_success(self) -> None:
        result = await generate_essay(_writer_returning("Body"), "tides", timeout=1.0)
        assert result == Essay(content="Body", references=build_references("tides"))

    @pytest.mark.asyncio
    async def test_timeout_aborts_and_cancels_call(self) -> None:
        cancelled = asyncio.Event()

        async def _slow(prompt):
            try:
                await asyncio.sleep(5)
            except asyncio.CancelledError:
                cancelled.set()
                raise

        writer = MagicMock()
        writer.write = _slow

        with pytest.raises(GenerationAborted):
            await generate_essay(writer, "tides", timeout=0.05)
        await asyncio.sleep(0.01)
        assert cancelled.is_set()

    @pytest.mark.asyncio
    async def test_disconnect_aborts(self) -> None:
        async def _slow(prompt):
            await asyncio.sleep(5)

        async def _disconnected() -> bool:
            return True

        writer = MagicMock()
        writer.write = _slow

        with pytest.raises(GenerationAborted, match="disconnected"):
            await generate_essay(writer, "tides", timeout=1.0, is_disconnected=_disconnected)

    @pytest.mark.asyncio
    async def test_connected_client_does_not_abort(self) -> None:
        async def _connected() -> bool:
            return False

        result = await generate_essay(
            _writer_returning("Body"), "tides", timeout=1.0, is_disconnected=_connected
        )
        assert result.content == "Body"

    @pytest.mark.asyncio
    async def test_provider_error_propagates(self) -> None:
        writer = MagicMock()
        writer.write = AsyncMock(side_effect=RuntimeError("boom"))

        with pytest.raises(RuntimeError, match="boom"):
            await generate_essay(writer, "tides", timeout=1.0)
