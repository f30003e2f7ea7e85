"""Request dispatch: routing policy, changesets, collaborators and the assistant."""

from pageguide.dispatch.assistant import DispatchOutcome, EditAssistant
from pageguide.dispatch.changeset import (
    Change,
    ChangeEntry,
    changeset_to_map,
    diff_changes,
    format_value,
    parse_changes,
    render_preview,
)
from pageguide.dispatch.chat import ChatMessage, MessageLog, UndoControl
from pageguide.dispatch.policy import (
    COMPLEX_FIELD_TYPES,
    Route,
    decide_route,
    is_simple_local_change,
    needs_ai,
    resolve_local_value,
)
from pageguide.dispatch.services import (
    AIService,
    ChatSurface,
    HostBuilder,
    SelectedComponent,
    SnapshotService,
)

__all__ = [
    "AIService",
    "COMPLEX_FIELD_TYPES",
    "Change",
    "ChangeEntry",
    "ChatMessage",
    "ChatSurface",
    "DispatchOutcome",
    "EditAssistant",
    "HostBuilder",
    "MessageLog",
    "Route",
    "SelectedComponent",
    "SnapshotService",
    "UndoControl",
    "changeset_to_map",
    "decide_route",
    "diff_changes",
    "format_value",
    "is_simple_local_change",
    "needs_ai",
    "parse_changes",
    "render_preview",
    "resolve_local_value",
]
