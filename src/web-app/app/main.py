"""Academic Essay Generator — Chainlit entry point.

The web app is a thin Chainlit client over the generation service.  The
chat input plays the keyword field; each essay message carries
*Copy content*, *Regenerate* and *Edit* actions and an inline reference
list.  All state lives in an ``EssayController`` stored in the user
session; this module only renders it.
"""

from __future__ import annotations

import logging

import chainlit as cl

from app.config import config
from app.controller import EssayController
from app.generation_client import GenerationClient
from app.models import GenerationResult, PageState
from app.theme import PresentationTheme, format_references, get_theme

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
)
for _name in ("httpx", "watchfiles"):
    logging.getLogger(_name).setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

theme = get_theme(config.web_theme)


# ---------------------------------------------------------------------------
# View — mirrors PageState into Chainlit messages
# ---------------------------------------------------------------------------

def _essay_actions() -> list[cl.Action]:
    return [
        cl.Action(name="copy_content", payload={}, label="Copy Content"),
        cl.Action(name="regenerate", payload={}, label="Regenerate"),
        cl.Action(name="edit_content", payload={}, label="Edit"),
    ]


class EssayView:
    """Renders one session's ``PageState`` as Chainlit messages.

    - a status message while a request is in flight (the loading label)
    - one error message per distinct error (the error banner)
    - one essay message per generation result, streamed one reveal step at a time
    """

    def __init__(self, theme: PresentationTheme) -> None:
        self._theme = theme
        self._status: cl.Message | None = None
        self._essay: cl.Message | None = None
        self._shown_result: GenerationResult | None = None
        self._shown_error: str | None = None

    async def render(self, state: PageState) -> None:
        await self._render_status(state)
        await self._render_error(state)
        await self._render_essay(state)

    async def _render_status(self, state: PageState) -> None:
        if state.is_loading and self._status is None:
            self._status = cl.Message(content=state.submit_label)
            await self._status.send()
        elif not state.is_loading and self._status is not None:
            await self._status.remove()
            self._status = None

    async def _render_error(self, state: PageState) -> None:
        if state.error and state.error != self._shown_error:
            await cl.ErrorMessage(content=state.error).send()
        self._shown_error = state.error

    async def _render_essay(self, state: PageState) -> None:
        if state.generated is None:
            return
        if state.generated is not self._shown_result:
            self._shown_result = state.generated
            self._essay = cl.Message(
                content=state.displayed,
                actions=_essay_actions(),
                elements=[
                    cl.Text(
                        name="References",
                        content=format_references(state.generated.references),
                        display="inline",
                    )
                ],
            )
            await self._essay.send()
        elif self._essay is not None and self._essay.content != state.displayed:
            shown = self._essay.content
            if state.displayed.startswith(shown):
                # reveal step: send only the new characters
                await self._essay.stream_token(state.displayed[len(shown):])
                if state.displayed == self._theme.wrap(state.generated.content):
                    await self._essay.update()
            else:
                # edited text
                self._essay.content = state.displayed
                await self._essay.update()


async def _send_to_clipboard(text: str) -> None:
    """Hand the text back as a code block — Chainlit gives it a copy button."""
    await cl.Message(content=f"Copied content:\n```\n{text}\n```").send()


def _controller() -> EssayController:
    return cl.user_session.get("controller")  # type: ignore[return-value]


# ---------------------------------------------------------------------------
# Chainlit lifecycle hooks
# ---------------------------------------------------------------------------

@cl.on_chat_start
async def on_chat_start() -> None:
    """Create the per-session generation client, view and controller."""
    client = GenerationClient(config.generator_endpoint, timeout=config.generator_timeout_seconds)
    view = EssayView(theme)
    controller = EssayController(
        client,
        theme=theme,
        reveal_delay=config.reveal_delay_ms / 1000,
        on_change=view.render,
        clipboard=_send_to_clipboard,
    )
    cl.user_session.set("client", client)
    cl.user_session.set("controller", controller)

    await cl.Message(
        content=f"# {theme.title}\n\nEnter a research topic or keywords to generate an essay."
    ).send()
    logger.info("New session started (generator endpoint: %s, theme: %s)", config.generator_endpoint, theme.name)


@cl.on_chat_end
async def on_chat_end() -> None:
    """Cancel outstanding work and close the HTTP client."""
    controller = _controller()
    if controller is not None:
        await controller.close()
    client: GenerationClient | None = cl.user_session.get("client")  # type: ignore[assignment]
    if client is not None:
        await client.aclose()


@cl.on_message
async def on_message(message: cl.Message) -> None:
    """Treat each chat message as a new set of keywords and generate."""
    controller = _controller()
    controller.set_keywords(message.content)
    await controller.generate()


@cl.action_callback("copy_content")
async def on_copy(action: cl.Action) -> None:
    await _controller().copy_content()


@cl.action_callback("regenerate")
async def on_regenerate(action: cl.Action) -> None:
    await _controller().regenerate()


@cl.action_callback("edit_content")
async def on_edit(action: cl.Action) -> None:
    """Ask for replacement text and apply it as an editor change."""
    res = await cl.AskUserMessage(content="Send the edited essay text.", timeout=600).send()
    if res:
        await _controller().edit(res["output"])
