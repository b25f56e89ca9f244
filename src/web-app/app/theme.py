"""Presentation themes for the essay page.

Both themes drive the same controller; they differ in page title and in
whether the revealed text is wrapped in a heading.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PresentationTheme:
    name: str
    title: str
    # Render the revealed text as a level-3 Markdown heading; Chainlit
    # escapes raw HTML in message content
    heading: bool = False

    def wrap(self, text: str) -> str:
        if self.heading:
            return f"### {text}"
        return text


THEMES: dict[str, PresentationTheme] = {
    "noir": PresentationTheme(name="noir", title="ACADEMIC ESSAY GENERATOR", heading=True),
    "paper": PresentationTheme(name="paper", title="Academic Content Generator"),
}


def get_theme(name: str) -> PresentationTheme:
    """Return the theme called *name*, raising ``ValueError`` if unknown."""
    try:
        return THEMES[name]
    except KeyError:
        raise ValueError(f"Unknown theme {name!r}; choose one of: {', '.join(THEMES)}") from None


def format_references(references: list[str]) -> str:
    """Render references as a Markdown bullet list."""
    return "\n".join(f"- {ref}" for ref in references)
