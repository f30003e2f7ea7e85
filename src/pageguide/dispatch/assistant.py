"""Edit Assistant: The user-submit entry point.

Classifies each chat message against the selected component and routes it:

- guidance: build a plan and walk the user to the setting
- local change: write the value straight to the host, with preview and undo
- AI escalation: analyze -> generate -> validate -> confirm -> apply -> undo

Every failure is turned into a chat message and a DispatchOutcome here;
``handle_message`` does not raise.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from pageguide.config import PageGuideConfig
from pageguide.dispatch.changeset import (
    Change,
    ChangeEntry,
    changeset_to_map,
    diff_changes,
    format_value,
    parse_changes,
    render_preview,
)
from pageguide.dispatch.policy import Route, decide_route, resolve_local_value
from pageguide.dispatch.services import (
    AIService,
    ChatSurface,
    HostBuilder,
    SelectedComponent,
    SnapshotService,
    UndoCallback,
)
from pageguide.errors import (
    ErrorCode,
    PageGuideError,
    UndoFailedError,
    classify_ai_error,
    format_ai_error,
)
from pageguide.guidance.executor import GuidanceExecutor
from pageguide.guidance.planner import build_plan
from pageguide.intent.classifier import IntentClassifier
from pageguide.intent.types import Intent

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = (
    "Hi! Select a module and tell me what you'd like to change. "
    "I'll guide you to the right setting."
)
NO_CHANGES_MESSAGE = (
    "I couldn't work out any changes for that request. Try being more specific."
)
CANCELLED_MESSAGE = "Okay, no changes were made."


@dataclass(frozen=True, slots=True)
class DispatchOutcome:
    """What happened to one user message."""

    route: Route
    success: bool
    message: str
    intent: Intent | None = None
    changes: tuple[ChangeEntry, ...] = ()
    error: ErrorCode | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "route": self.route.value,
            "success": self.success,
            "message": self.message,
            "intent": self.intent.to_dict() if self.intent else None,
            "changes": [c.to_dict() for c in self.changes],
            "error": int(self.error) if self.error is not None else None,
        }


class _Halt(Exception):
    """Internal: an AI-flow stage stopped with an outcome to report."""

    def __init__(self, outcome: DispatchOutcome) -> None:
        super().__init__(outcome.message)
        self.outcome = outcome


class EditAssistant:
    """Route chat requests to guidance, local edits or the AI service."""

    def __init__(
        self,
        host: HostBuilder,
        chat: ChatSurface,
        classifier: IntentClassifier,
        *,
        executor: GuidanceExecutor | None = None,
        ai: AIService | None = None,
        snapshots: SnapshotService | None = None,
        config: PageGuideConfig | None = None,
    ) -> None:
        self.host = host
        self.chat = chat
        self.classifier = classifier
        self.executor = executor
        self.ai = ai
        self.snapshots = snapshots
        self.config = config or PageGuideConfig()
        self._selected_id: str | None = None
        self._unsubscribe: Callable[[], None] | None = None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """Subscribe to host selection changes and greet the user."""
        if self._unsubscribe is None:
            self._unsubscribe = self.host.on_selection_changed(self._on_selection_changed)
        self.chat.add_message(WELCOME_MESSAGE, "assistant")

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self.executor is not None:
            self.executor.cleanup()

    def _on_selection_changed(self, component: SelectedComponent | None) -> None:
        new_id = component.id if component else None
        if new_id == self._selected_id:
            return
        self._selected_id = new_id
        if self.executor is not None and self.executor.is_executing:
            logger.info("Selection changed; cancelling in-flight guidance")
            self.executor.cleanup()

    # -------------------------------------------------------------------------
    # Entry point
    # -------------------------------------------------------------------------

    async def handle_message(self, text: str) -> DispatchOutcome:
        """Handle one user submission."""
        self.chat.add_message(text, "user")

        selected = self.host.get_selected_component()
        self._selected_id = selected.id if selected else None

        intent = self.classifier.classify(text, selected.component_type if selected else None)
        route = decide_route(
            intent,
            has_selection=selected is not None,
            complex_types=self.config.dispatch.complex_field_types,
        )
        logger.info(
            "Routing %r: action=%s confidence=%s -> %s",
            text,
            intent.action.value,
            intent.confidence.value,
            route.value,
        )

        match route:
            case Route.NO_SELECTION:
                return self._fail(route, intent, PageGuideError(ErrorCode.NO_SELECTION))
            case Route.LOCAL_CHANGE:
                return await self._apply_local(intent, selected)
            case Route.AI_ESCALATION:
                return await self._escalate(text, intent, selected)
            case _:
                return await self._guide(intent)

    # -------------------------------------------------------------------------
    # Routes
    # -------------------------------------------------------------------------

    async def _guide(self, intent: Intent) -> DispatchOutcome:
        plan = build_plan(intent)
        if not plan.success:
            self.chat.add_message(plan.message, "error")
            error = ErrorCode.NO_MATCH if intent.component_type else ErrorCode.NO_SELECTION
            return DispatchOutcome(Route.GUIDANCE, False, plan.message, intent, error=error)

        self.chat.add_message(plan.message, "assistant")
        if self.executor is not None:
            await self.executor.execute_plan(plan.steps)
        return DispatchOutcome(Route.GUIDANCE, True, plan.message, intent)

    async def _apply_local(self, intent: Intent, selected: SelectedComponent) -> DispatchOutcome:
        top = intent.fields[0]
        value = resolve_local_value(intent)
        change = Change(field=top.field_name, new_value=value, label=top.label)
        summary = f'Done! Set **{top.label}** to "{format_value(value)}".'
        return await self._apply(Route.LOCAL_CHANGE, intent, selected, [change], summary)

    async def _escalate(
        self, text: str, intent: Intent, selected: SelectedComponent
    ) -> DispatchOutcome:
        ai = self.ai
        if ai is None:
            error = PageGuideError(
                ErrorCode.AI_FEATURE_DISABLED, {"stage": "analysis", "detail": "no AI service"}
            )
            return self._fail(Route.AI_ESCALATION, intent, error)

        self.chat.show_typing()
        try:
            changes, summary = await self._request_changes(ai, text, intent, selected)
        except _Halt as halt:
            return halt.outcome
        finally:
            self.chat.remove_typing()

        entries = diff_changes(
            changes, selected.data, self.classifier.index, selected.component_type
        )
        preview = render_preview(entries)
        if summary:
            preview = f"{summary}\n\n{preview}"

        if not await self.chat.confirm_changes(preview):
            self.chat.add_message(CANCELLED_MESSAGE, "assistant")
            return DispatchOutcome(
                Route.AI_ESCALATION, False, CANCELLED_MESSAGE, intent, tuple(entries)
            )

        return await self._apply(Route.AI_ESCALATION, intent, selected, changes, summary)

    async def _request_changes(
        self, ai: AIService, text: str, intent: Intent, selected: SelectedComponent
    ) -> tuple[tuple[Change, ...], str]:
        """analyze -> generate -> validate. Raises _Halt when a stage stops the flow."""
        component_type, data = selected.component_type, dict(selected.data)

        try:
            analysis = await ai.analyze(text, component_type, data)
        except Exception as e:
            raise _Halt(self._ai_failure("analysis", e, intent)) from e

        try:
            result = await ai.generate(analysis, component_type, data)
        except Exception as e:
            raise _Halt(self._ai_failure("generation", e, intent)) from e

        if not _is_changeset(result):
            error = PageGuideError(ErrorCode.AI_MALFORMED_RESPONSE)
            raise _Halt(self._fail(Route.AI_ESCALATION, intent, error))

        changes = parse_changes(result.get("changes"))
        if not changes:
            self.chat.add_message(NO_CHANGES_MESSAGE, "assistant")
            raise _Halt(DispatchOutcome(Route.AI_ESCALATION, False, NO_CHANGES_MESSAGE, intent))

        if self.config.dispatch.validate_changesets:
            await self._validate(ai, changes, component_type, intent)

        return changes, str(result.get("summary") or "")

    async def _validate(
        self, ai: AIService, changes: Sequence[Change], component_type: str, intent: Intent
    ) -> None:
        changeset = {
            "component_type": component_type,
            "changes": [c.to_dict() for c in changes],
        }
        try:
            verdict = await ai.validate_changeset(changeset)
        except Exception as e:
            # Transport failure: present the changeset anyway.
            logger.warning("Changeset validation unavailable: %s", e)
            return

        if isinstance(verdict, Mapping) and verdict.get("valid") is False:
            errors = verdict.get("errors") or ["unknown validation error"]
            error = PageGuideError(
                ErrorCode.VALIDATION_FAILED, {"detail": "; ".join(str(e) for e in errors)}
            )
            raise _Halt(self._fail(Route.AI_ESCALATION, intent, error))

    async def _apply(
        self,
        route: Route,
        intent: Intent,
        selected: SelectedComponent,
        changes: Sequence[Change],
        summary: str,
    ) -> DispatchOutcome:
        entries = tuple(
            diff_changes(changes, selected.data, self.classifier.index, selected.component_type)
        )
        snapshot_id = await self._save_snapshot(selected, intent.raw_text)

        try:
            applied = self.host.apply_field_changes(selected.id, changeset_to_map(changes))
        except Exception:
            logger.exception("Host rejected field changes for %s", selected.id)
            applied = False
        if not applied:
            return self._fail(route, intent, PageGuideError(ErrorCode.APPLY_FAILED))

        text = render_preview(entries)
        if summary:
            text = f"{summary}\n\n{text}"
        message = self.chat.add_message(text, "success")
        self.chat.append_undo_button(message, self._make_undo(selected, snapshot_id, entries))
        return DispatchOutcome(route, True, text, intent, entries)

    # -------------------------------------------------------------------------
    # Snapshots and undo
    # -------------------------------------------------------------------------

    async def _save_snapshot(self, selected: SelectedComponent, label: str) -> str | None:
        """Best-effort: a failed snapshot never blocks the apply."""
        if self.snapshots is None or not self.config.dispatch.snapshot_before_apply:
            return None
        try:
            return await self.snapshots.save_snapshot(
                selected.id, selected.component_type, dict(selected.data), f"Before: {label}"
            )
        except Exception as e:
            logger.warning("Snapshot save failed for %s: %s", selected.id, e)
            return None

    def _make_undo(
        self,
        selected: SelectedComponent,
        snapshot_id: str | None,
        entries: Sequence[ChangeEntry],
    ) -> UndoCallback:
        async def undo() -> None:
            if snapshot_id is not None and self.snapshots is not None:
                try:
                    result = await self.snapshots.rollback(snapshot_id=snapshot_id)
                except Exception as e:
                    raise UndoFailedError(str(e)) from e
                restored = dict(result.get("data") or {})
            else:
                restored = {
                    e.field: "" if e.old_value is None else e.old_value for e in entries
                }
            if not self.host.apply_field_changes(selected.id, restored):
                raise UndoFailedError("the component is no longer selected")

        return undo

    # -------------------------------------------------------------------------
    # Failures
    # -------------------------------------------------------------------------

    def _ai_failure(self, stage: str, error: Exception, intent: Intent) -> DispatchOutcome:
        logger.info("AI %s failed: %s", stage, error)
        message = format_ai_error(stage, error)
        self.chat.add_message(message, "error")
        return DispatchOutcome(
            Route.AI_ESCALATION, False, message, intent, error=classify_ai_error(error)
        )

    def _fail(self, route: Route, intent: Intent, error: PageGuideError) -> DispatchOutcome:
        self.chat.add_message(error.message, "error")
        return DispatchOutcome(route, False, error.message, intent, error=error.code)


def _is_changeset(result: Any) -> bool:
    """A generation result: a mapping whose ``changes``, when present, is a list of mappings."""
    if not isinstance(result, Mapping):
        return False
    changes = result.get("changes")
    if changes is None:
        return True
    return isinstance(changes, (list, tuple)) and all(isinstance(c, Mapping) for c in changes)
