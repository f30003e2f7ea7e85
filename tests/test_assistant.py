"""Tests for the edit assistant's routing and change flows."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from pageguide.config import DispatchConfig, PageGuideConfig
from pageguide.dispatch.assistant import (
    CANCELLED_MESSAGE,
    NO_CHANGES_MESSAGE,
    WELCOME_MESSAGE,
    EditAssistant,
)
from pageguide.dispatch.chat import MessageLog
from pageguide.dispatch.policy import Route
from pageguide.dispatch.services import SelectedComponent
from pageguide.errors import AIServiceError, ErrorCode
from pageguide.guidance.steps import OpenSettings
from pageguide.intent.classifier import IntentClassifier

REWRITE = "make the content more professional"
NEW_CONTENT = "<p>Good afternoon.</p>"


@pytest.fixture
def host(text_component: SelectedComponent) -> MagicMock:
    host = MagicMock()
    host.get_selected_component.return_value = text_component
    host.apply_field_changes.return_value = True
    return host


@pytest.fixture
def chat() -> MessageLog:
    return MessageLog()


@pytest.fixture
def ai() -> MagicMock:
    ai = MagicMock()
    ai.analyze = AsyncMock(return_value={"goal": "formal tone"})
    ai.generate = AsyncMock(
        return_value={
            "changes": [{"field": "content", "new_value": NEW_CONTENT}],
            "summary": "Made the tone more formal.",
        }
    )
    ai.validate_changeset = AsyncMock(return_value={"valid": True})
    return ai


@pytest.fixture
def snapshots() -> MagicMock:
    snapshots = MagicMock()
    snapshots.save_snapshot = AsyncMock(return_value="snap-1")
    snapshots.rollback = AsyncMock(
        return_value={"data": {"text_orientation": "left", "content": "<p>Hello world</p>"}}
    )
    return snapshots


@pytest.fixture
def assistant(
    host: MagicMock,
    chat: MessageLog,
    classifier: IntentClassifier,
    ai: MagicMock,
    snapshots: MagicMock,
) -> EditAssistant:
    return EditAssistant(host, chat, classifier, ai=ai, snapshots=snapshots)


class TestLifecycle:
    """Welcome message and selection tracking."""

    def test_start_greets_and_subscribes(
        self, assistant: EditAssistant, host: MagicMock, chat: MessageLog
    ) -> None:
        assistant.start()
        assert chat.texts() == [WELCOME_MESSAGE]
        host.on_selection_changed.assert_called_once()

    def test_selection_change_cancels_guidance(
        self, host: MagicMock, chat: MessageLog, classifier: IntentClassifier
    ) -> None:
        executor = MagicMock(is_executing=True)
        assistant = EditAssistant(host, chat, classifier, executor=executor)
        assistant.start()
        handler = host.on_selection_changed.call_args.args[0]

        handler(SelectedComponent("module-2", "et_pb_button"))
        executor.cleanup.assert_called_once()

        # same component again: nothing to cancel
        handler(SelectedComponent("module-2", "et_pb_button"))
        executor.cleanup.assert_called_once()

    def test_selection_change_when_idle(
        self, host: MagicMock, chat: MessageLog, classifier: IntentClassifier
    ) -> None:
        executor = MagicMock(is_executing=False)
        assistant = EditAssistant(host, chat, classifier, executor=executor)
        assistant.start()
        host.on_selection_changed.call_args.args[0](None)
        executor.cleanup.assert_not_called()

    def test_close(self, host: MagicMock, chat: MessageLog, classifier: IntentClassifier) -> None:
        executor = MagicMock()
        assistant = EditAssistant(host, chat, classifier, executor=executor)
        assistant.start()
        assistant.close()
        host.on_selection_changed.return_value.assert_called_once()
        executor.cleanup.assert_called_once()


class TestGuidanceRoute:
    """Find requests and unmatched requests."""

    @pytest.mark.asyncio
    async def test_runs_plan(self, host: MagicMock, chat: MessageLog, classifier: IntentClassifier) -> None:
        executor = MagicMock()
        executor.execute_plan = AsyncMock(return_value=True)
        assistant = EditAssistant(host, chat, classifier, executor=executor)

        outcome = await assistant.handle_message("where is the alignment")

        assert outcome.route is Route.GUIDANCE
        assert outcome.success
        assert chat.texts() == ["where is the alignment", outcome.message]
        steps = executor.execute_plan.await_args.args[0]
        assert steps[0] == OpenSettings()
        host.apply_field_changes.assert_not_called()

    @pytest.mark.asyncio
    async def test_without_executor(self, assistant: EditAssistant) -> None:
        outcome = await assistant.handle_message("where is the alignment")
        assert outcome.success

    @pytest.mark.asyncio
    async def test_no_match(self, assistant: EditAssistant, chat: MessageLog) -> None:
        outcome = await assistant.handle_message("where is the zebra")
        assert outcome.route is Route.GUIDANCE
        assert not outcome.success
        assert outcome.error is ErrorCode.NO_MATCH
        assert chat.last.kind == "error"
        assert "et_pb_text" in chat.last.text

    @pytest.mark.asyncio
    async def test_no_selection(self, assistant: EditAssistant, host: MagicMock, chat: MessageLog) -> None:
        host.get_selected_component.return_value = None
        outcome = await assistant.handle_message("set alignment to center")
        assert outcome.route is Route.NO_SELECTION
        assert outcome.error is ErrorCode.NO_SELECTION
        assert chat.last.text.startswith("Please select a component first")
        host.apply_field_changes.assert_not_called()


class TestLocalChange:
    """Direct writes with preview and undo."""

    @pytest.mark.asyncio
    async def test_apply(
        self, assistant: EditAssistant, host: MagicMock, chat: MessageLog, ai: MagicMock
    ) -> None:
        outcome = await assistant.handle_message("set alignment to center")

        assert outcome.route is Route.LOCAL_CHANGE
        assert outcome.success
        host.apply_field_changes.assert_called_once_with("module-1", {"text_orientation": "center"})
        ai.analyze.assert_not_awaited()

        message = chat.last
        assert message.kind == "success"
        assert message.text.startswith('Done! Set **Text Alignment** to "center".')
        assert "- Text Alignment: left → center" in message.text
        assert message.undo is not None
        assert [e.to_dict()["changed"] for e in outcome.changes] == [True]

    @pytest.mark.asyncio
    async def test_disable_toggle(self, assistant: EditAssistant, host: MagicMock, chat: MessageLog) -> None:
        outcome = await assistant.handle_message("turn off animation")
        assert outcome.route is Route.LOCAL_CHANGE
        host.apply_field_changes.assert_called_once_with("module-1", {"animation": "off"})
        assert 'to "No"' in chat.last.text

    @pytest.mark.asyncio
    async def test_snapshot_saved_before_apply(self, assistant: EditAssistant, snapshots: MagicMock) -> None:
        await assistant.handle_message("set alignment to center")
        snapshots.save_snapshot.assert_awaited_once_with(
            "module-1",
            "et_pb_text",
            {"text_orientation": "left", "content": "<p>Hello world</p>"},
            "Before: set alignment to center",
        )

    @pytest.mark.asyncio
    async def test_undo_rolls_back_snapshot(
        self, assistant: EditAssistant, host: MagicMock, chat: MessageLog, snapshots: MagicMock
    ) -> None:
        await assistant.handle_message("set alignment to center")
        assert await chat.last.undo.click() is True
        snapshots.rollback.assert_awaited_once_with(snapshot_id="snap-1")
        host.apply_field_changes.assert_called_with(
            "module-1", {"text_orientation": "left", "content": "<p>Hello world</p>"}
        )
        assert chat.last.undo.label == "Undone"

    @pytest.mark.asyncio
    async def test_undo_without_snapshots(
        self, host: MagicMock, chat: MessageLog, classifier: IntentClassifier
    ) -> None:
        assistant = EditAssistant(host, chat, classifier)
        await assistant.handle_message("turn on animation")
        assert await chat.last.undo.click() is True
        # the field had no previous value
        host.apply_field_changes.assert_called_with("module-1", {"animation": ""})

    @pytest.mark.asyncio
    async def test_snapshot_failure_is_not_fatal(
        self, assistant: EditAssistant, host: MagicMock, chat: MessageLog, snapshots: MagicMock
    ) -> None:
        snapshots.save_snapshot.side_effect = RuntimeError("storage offline")
        outcome = await assistant.handle_message("set alignment to center")
        assert outcome.success

        await chat.last.undo.click()
        snapshots.rollback.assert_not_awaited()
        host.apply_field_changes.assert_called_with("module-1", {"text_orientation": "left"})

    @pytest.mark.asyncio
    async def test_snapshots_disabled(
        self, host: MagicMock, chat: MessageLog, classifier: IntentClassifier, snapshots: MagicMock
    ) -> None:
        config = PageGuideConfig(dispatch=DispatchConfig(snapshot_before_apply=False))
        assistant = EditAssistant(host, chat, classifier, snapshots=snapshots, config=config)
        await assistant.handle_message("set alignment to center")
        snapshots.save_snapshot.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_undo_failure(self, assistant: EditAssistant, host: MagicMock, chat: MessageLog) -> None:
        host.apply_field_changes.side_effect = [True, False]
        await assistant.handle_message("set alignment to center")
        undo = chat.last.undo
        assert await undo.click() is False
        assert undo.label == "Undo failed"
        assert not undo.disabled

    @pytest.mark.asyncio
    async def test_rollback_failure(
        self, assistant: EditAssistant, chat: MessageLog, snapshots: MagicMock
    ) -> None:
        snapshots.rollback.side_effect = RuntimeError("snapshot expired")
        await assistant.handle_message("set alignment to center")
        assert await chat.last.undo.click() is False

    @pytest.mark.asyncio
    async def test_apply_rejected(self, assistant: EditAssistant, host: MagicMock, chat: MessageLog) -> None:
        host.apply_field_changes.return_value = False
        outcome = await assistant.handle_message("set alignment to center")
        assert not outcome.success
        assert outcome.error is ErrorCode.APPLY_FAILED
        assert chat.last.kind == "error"
        assert chat.last.undo is None

    @pytest.mark.asyncio
    async def test_apply_raises(self, assistant: EditAssistant, host: MagicMock) -> None:
        host.apply_field_changes.side_effect = RuntimeError("builder crashed")
        outcome = await assistant.handle_message("set alignment to center")
        assert outcome.error is ErrorCode.APPLY_FAILED


class TestAIEscalation:
    """analyze -> generate -> validate -> confirm -> apply."""

    @pytest.mark.asyncio
    async def test_success(
        self, assistant: EditAssistant, host: MagicMock, chat: MessageLog, ai: MagicMock
    ) -> None:
        outcome = await assistant.handle_message(REWRITE)

        assert outcome.route is Route.AI_ESCALATION
        assert outcome.success
        ai.analyze.assert_awaited_once_with(
            REWRITE, "et_pb_text", {"text_orientation": "left", "content": "<p>Hello world</p>"}
        )
        ai.validate_changeset.assert_awaited_once_with(
            {
                "component_type": "et_pb_text",
                "changes": [{"field": "content", "new_value": NEW_CONTENT}],
            }
        )
        assert chat.previews[0].startswith("Made the tone more formal.\n\nProposed Changes")
        assert f"- Body: <p>Hello world</p> → {NEW_CONTENT}" in chat.previews[0]
        host.apply_field_changes.assert_called_once_with("module-1", {"content": NEW_CONTENT})
        assert chat.last.kind == "success"
        assert chat.last.undo is not None
        assert not chat.typing

    @pytest.mark.asyncio
    async def test_feature_disabled(
        self, assistant: EditAssistant, host: MagicMock, chat: MessageLog, ai: MagicMock
    ) -> None:
        ai.analyze.side_effect = AIServiceError("feature_disabled")
        outcome = await assistant.handle_message(REWRITE)

        assert not outcome.success
        assert outcome.error is ErrorCode.AI_FEATURE_DISABLED
        assert "not enabled" in chat.last.text
        assert chat.last.kind == "error"
        ai.generate.assert_not_awaited()
        host.apply_field_changes.assert_not_called()
        assert not chat.typing

    @pytest.mark.asyncio
    async def test_missing_api_key(self, assistant: EditAssistant, chat: MessageLog, ai: MagicMock) -> None:
        ai.generate.side_effect = AIServiceError("no_api_key")
        outcome = await assistant.handle_message(REWRITE)
        assert outcome.error is ErrorCode.AI_MISSING_CREDENTIALS
        assert "API key" in chat.last.text

    @pytest.mark.asyncio
    async def test_generic_failure(self, assistant: EditAssistant, chat: MessageLog, ai: MagicMock) -> None:
        ai.generate.side_effect = TimeoutError("request timed out")
        outcome = await assistant.handle_message(REWRITE)
        assert outcome.error is ErrorCode.AI_STAGE_FAILED
        assert chat.last.text == "AI generation failed: request timed out"

    @pytest.mark.asyncio
    async def test_malformed_response(self, assistant: EditAssistant, host: MagicMock, ai: MagicMock) -> None:
        ai.generate.return_value = "not a changeset"
        outcome = await assistant.handle_message(REWRITE)
        assert outcome.error is ErrorCode.AI_MALFORMED_RESPONSE
        host.apply_field_changes.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "changes", [5, "content", {"field": "content"}, [{"field": "content"}, "extra"]]
    )
    async def test_malformed_change_list(
        self,
        assistant: EditAssistant,
        host: MagicMock,
        chat: MessageLog,
        ai: MagicMock,
        changes: object,
    ) -> None:
        ai.generate.return_value = {"changes": changes}
        outcome = await assistant.handle_message(REWRITE)
        assert not outcome.success
        assert outcome.error is ErrorCode.AI_MALFORMED_RESPONSE
        assert chat.last.kind == "error"
        assert not chat.typing
        host.apply_field_changes.assert_not_called()
        ai.validate_changeset.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_change_list(
        self, assistant: EditAssistant, chat: MessageLog, ai: MagicMock
    ) -> None:
        ai.generate.return_value = {"summary": "nothing to do"}
        outcome = await assistant.handle_message(REWRITE)
        assert outcome.error is None
        assert chat.last.text == NO_CHANGES_MESSAGE

    @pytest.mark.asyncio
    async def test_no_changes(self, assistant: EditAssistant, chat: MessageLog, ai: MagicMock) -> None:
        ai.generate.return_value = {"changes": []}
        outcome = await assistant.handle_message(REWRITE)
        assert not outcome.success
        assert chat.last.text == NO_CHANGES_MESSAGE
        ai.validate_changeset.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_validation_rejects(
        self, assistant: EditAssistant, host: MagicMock, chat: MessageLog, ai: MagicMock
    ) -> None:
        ai.validate_changeset.return_value = {"valid": False, "errors": ["content too long"]}
        outcome = await assistant.handle_message(REWRITE)
        assert outcome.error is ErrorCode.VALIDATION_FAILED
        assert chat.last.text == "The proposed changes are invalid: content too long"
        assert chat.previews == []
        host.apply_field_changes.assert_not_called()

    @pytest.mark.asyncio
    async def test_validation_unavailable(self, assistant: EditAssistant, ai: MagicMock) -> None:
        ai.validate_changeset.side_effect = ConnectionError("validator down")
        outcome = await assistant.handle_message(REWRITE)
        assert outcome.success

    @pytest.mark.asyncio
    async def test_validation_disabled(
        self, host: MagicMock, chat: MessageLog, classifier: IntentClassifier, ai: MagicMock
    ) -> None:
        config = PageGuideConfig(dispatch=DispatchConfig(validate_changesets=False))
        assistant = EditAssistant(host, chat, classifier, ai=ai, config=config)
        outcome = await assistant.handle_message(REWRITE)
        assert outcome.success
        ai.validate_changeset.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_confirmation_declined(
        self, host: MagicMock, classifier: IntentClassifier, ai: MagicMock
    ) -> None:
        chat = MessageLog(confirm=AsyncMock(return_value=False))
        assistant = EditAssistant(host, chat, classifier, ai=ai)
        outcome = await assistant.handle_message(REWRITE)

        assert not outcome.success
        assert outcome.message == CANCELLED_MESSAGE
        assert len(outcome.changes) == 1
        host.apply_field_changes.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_ai_service(self, host: MagicMock, chat: MessageLog, classifier: IntentClassifier) -> None:
        assistant = EditAssistant(host, chat, classifier)
        outcome = await assistant.handle_message(REWRITE)
        assert outcome.error is ErrorCode.AI_FEATURE_DISABLED
        assert chat.last.text.startswith("AI analysis is not enabled")

    @pytest.mark.asyncio
    async def test_outcome_to_dict(self, assistant: EditAssistant) -> None:
        data = (await assistant.handle_message(REWRITE)).to_dict()
        assert data["route"] == "ai_escalation"
        assert data["error"] is None
        assert data["changes"][0]["field"] == "content"
