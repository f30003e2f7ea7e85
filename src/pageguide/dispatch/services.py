"""Collaborator interfaces consumed by the edit assistant.

The assistant never talks to the page builder, the AI backend, the snapshot
store or the chat UI directly. Each is injected behind one of these
protocols, so tests and headless runs can swap in doubles.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class SelectedComponent:
    """The component currently selected in the host builder."""

    id: str
    component_type: str
    data: Mapping[str, Any] = field(default_factory=dict)


SelectionHandler = Callable[[SelectedComponent | None], None]
UndoCallback = Callable[[], Awaitable[None]]


@runtime_checkable
class HostBuilder(Protocol):
    """Selection and mutation capability of the page builder."""

    def get_selected_component(self) -> SelectedComponent | None:
        """Return the selected component, or None."""
        ...

    def apply_field_changes(self, component_id: str, changes: Mapping[str, Any]) -> bool:
        """Write field values to a component.

        Returns:
            False if the component is no longer selected or valid.
        """
        ...

    def on_selection_changed(self, handler: SelectionHandler) -> Callable[[], None]:
        """Subscribe to selection changes.

        Returns:
            A function that removes the subscription.
        """
        ...


@runtime_checkable
class AIService(Protocol):
    """Two-stage remote AI service. Every call may raise."""

    async def analyze(
        self, prompt: str, component_type: str, component_data: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Interpret a request; returns an opaque analysis result."""
        ...

    async def generate(
        self, analysis: Mapping[str, Any], component_type: str, component_data: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Produce ``{"changes": [{field, new_value, label?}], "summary"?}``."""
        ...

    async def validate_changeset(self, changeset: Mapping[str, Any]) -> dict[str, Any]:
        """Check ``{"component_type", "changes"}``; returns ``{"valid", "errors"?}``."""
        ...


@runtime_checkable
class SnapshotService(Protocol):
    """Stores component data so applied changes can be rolled back."""

    async def save_snapshot(
        self,
        component_id: str,
        component_type: str,
        data: Mapping[str, Any],
        label: str = "",
    ) -> str:
        """Save a snapshot; returns its id."""
        ...

    async def rollback(
        self, *, snapshot_id: str | None = None, component_id: str | None = None
    ) -> dict[str, Any]:
        """Restore a snapshot; returns ``{"data": {...}}``."""
        ...


@runtime_checkable
class ChatSurface(Protocol):
    """The chat panel the assistant writes to."""

    def add_message(self, text: str, kind: str = "assistant") -> Any:
        """Append a message; returns a handle for attaching controls."""
        ...

    def show_typing(self) -> None: ...

    def remove_typing(self) -> None: ...

    def append_undo_button(self, message: Any, on_undo: UndoCallback) -> Any:
        """Attach an undo control to a message; returns the control."""
        ...

    async def confirm_changes(self, preview: str) -> bool:
        """Show a changeset preview with apply/cancel; True if applied."""
        ...
