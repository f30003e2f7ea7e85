"""In-memory chat surface and the undo control.

MessageLog records everything the assistant says. It backs the CLI and the
tests; a browser UI implements the same ChatSurface protocol.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Literal

from pageguide.dispatch.services import UndoCallback

logger = logging.getLogger(__name__)

MessageKind = Literal["user", "assistant", "error", "success"]


class UndoControl:
    """Undo button state: ``Undo`` -> ``Undoing...`` -> ``Undone``.

    A failed undo shows ``Undo failed`` and becomes clickable again.
    """

    def __init__(self, on_undo: UndoCallback) -> None:
        self.on_undo = on_undo
        self.label = "Undo"
        self.disabled = False

    async def click(self) -> bool:
        """Run the undo callback. Returns True if it succeeded."""
        if self.disabled:
            return False
        self.disabled = True
        self.label = "Undoing..."
        try:
            await self.on_undo()
        except Exception as e:
            logger.warning("Undo failed: %s", e)
            self.label = "Undo failed"
            self.disabled = False
            return False
        self.label = "Undone"
        return True


@dataclass(slots=True)
class ChatMessage:
    """One chat message, with any controls attached to it."""

    text: str
    kind: MessageKind = "assistant"
    undo: UndoControl | None = None


@dataclass
class MessageLog:
    """Chat surface that keeps messages in a list.

    ``confirm`` decides previews; by default every preview is applied.
    """

    messages: list[ChatMessage] = field(default_factory=list)
    typing: bool = False
    previews: list[str] = field(default_factory=list)
    confirm: Callable[[str], Awaitable[bool]] | None = None

    def add_message(self, text: str, kind: MessageKind = "assistant") -> ChatMessage:
        message = ChatMessage(text=text, kind=kind)
        self.messages.append(message)
        return message

    def show_typing(self) -> None:
        self.typing = True

    def remove_typing(self) -> None:
        self.typing = False

    def append_undo_button(self, message: ChatMessage, on_undo: UndoCallback) -> UndoControl:
        message.undo = UndoControl(on_undo)
        return message.undo

    async def confirm_changes(self, preview: str) -> bool:
        self.previews.append(preview)
        if self.confirm is None:
            return True
        return await self.confirm(preview)

    @property
    def last(self) -> ChatMessage | None:
        return self.messages[-1] if self.messages else None

    def texts(self, kind: MessageKind | None = None) -> list[str]:
        """Message texts, optionally only those of one kind."""
        return [m.text for m in self.messages if kind is None or m.kind == kind]
