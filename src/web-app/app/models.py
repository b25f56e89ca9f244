"""Shared data models for the web app."""

from __future__ import annotations

from dataclasses import dataclass, field

GENERATE_LABEL = "Generate Essay"
LOADING_LABEL = "Generating..."


@dataclass
class GenerationResult:
    """An essay returned by the generation service."""

    content: str
    references: list[str] = field(default_factory=list)


@dataclass
class PageState:
    """Everything the page shows; lives for one Chainlit session."""

    keywords: str = ""
    is_loading: bool = False
    error: str | None = None
    generated: GenerationResult | None = None
    # Text currently in the editor, built up by the reveal animation
    displayed: str = ""

    @property
    def submit_label(self) -> str:
        return LOADING_LABEL if self.is_loading else GENERATE_LABEL
