"""PageGuide Error System.

Provides structured error handling with:
- Numeric error codes for programmatic handling
- User-facing chat messages
- Context for debugging

Every failure kind the assistant can hit is caught where it happens and turned
into one of these codes plus a chat message. Nothing here is meant to reach
the host application as an unhandled fault.
"""

from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Numeric error codes organized by category.

    Format: XYYY where X = category, YYY = specific error

    Categories:
        1xxx - Selection/classification errors
        2xxx - Guidance errors
        3xxx - AI service errors
        4xxx - Changeset errors
        5xxx - Configuration/schema errors
    """

    # 1xxx - Selection/classification
    NO_SELECTION = 1001
    NO_MATCH = 1002

    # 2xxx - Guidance
    LOCATOR_MISS = 2001

    # 3xxx - AI service
    AI_FEATURE_DISABLED = 3001
    AI_MISSING_CREDENTIALS = 3002
    AI_MALFORMED_RESPONSE = 3003
    AI_STAGE_FAILED = 3004

    # 4xxx - Changeset
    VALIDATION_FAILED = 4001
    APPLY_FAILED = 4002
    UNDO_FAILED = 4003

    # 5xxx - Configuration/schema
    SCHEMA_LOAD_FAILED = 5001
    CONFIG_INVALID = 5002

    @property
    def category(self) -> str:
        """Get the error category name."""
        prefix = self.value // 1000
        return {
            1: "selection",
            2: "guidance",
            3: "ai",
            4: "changeset",
            5: "config",
        }.get(prefix, "unknown")


ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.NO_SELECTION: (
        "Please select a component first, then tell me what you'd like to change."
    ),
    ErrorCode.NO_MATCH: (
        "I couldn't find a matching setting in the {component} component. "
        "Try describing the setting differently, or check the Design and Advanced tabs."
    ),
    ErrorCode.LOCATOR_MISS: "Could not locate field '{field}' in the settings panel.",
    ErrorCode.AI_FEATURE_DISABLED: (
        "AI {stage} is not enabled. Please enable it in the assistant settings."
    ),
    ErrorCode.AI_MISSING_CREDENTIALS: (
        "No AI provider API key is configured. Please add one in the assistant settings."
    ),
    ErrorCode.AI_MALFORMED_RESPONSE: (
        "The AI returned an unexpected response. Try rephrasing your request."
    ),
    ErrorCode.AI_STAGE_FAILED: "AI {stage} failed: {detail}",
    ErrorCode.VALIDATION_FAILED: "The proposed changes are invalid: {detail}",
    ErrorCode.APPLY_FAILED: (
        "Could not apply the changes. Is the component still selected?"
    ),
    ErrorCode.UNDO_FAILED: "Undo failed: {detail}",
    ErrorCode.SCHEMA_LOAD_FAILED: "Failed to load schema file '{path}': {detail}",
    ErrorCode.CONFIG_INVALID: "Invalid configuration for '{key}': {detail}",
}


class PageGuideError(Exception):
    """Structured error with a code and formatting context."""

    def __init__(self, code: ErrorCode, context: dict[str, Any] | None = None) -> None:
        self.code = code
        self.context = context or {}
        super().__init__(self.message)

    @property
    def message(self) -> str:
        """Render the message template with the error's context."""
        template = ERROR_MESSAGES.get(self.code, "Unknown error ({code})")
        try:
            return template.format(code=int(self.code), **self.context)
        except (KeyError, IndexError):
            return template

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logging and JSON output."""
        return {
            "code": int(self.code),
            "category": self.code.category,
            "message": self.message,
            "context": self.context,
        }


class AIServiceError(PageGuideError):
    """Raised by AI service adapters when a stage is rejected.

    ``reason`` carries the machine-readable signal from the service
    (``feature_disabled``, ``no_api_key``, ``parse_error``, ...).
    """

    def __init__(self, reason: str, detail: str = "", stage: str = "request") -> None:
        self.reason = reason
        self.detail = detail or reason
        super().__init__(
            _code_for_reason(f"{reason} {detail}"),
            {"stage": stage, "detail": self.detail},
        )

    def __str__(self) -> str:
        return f"{self.reason}: {self.detail}" if self.detail != self.reason else self.reason


class UndoFailedError(PageGuideError):
    """Raised by undo callbacks when the host refuses the restore."""

    def __init__(self, detail: str) -> None:
        super().__init__(ErrorCode.UNDO_FAILED, {"detail": detail})


def _code_for_reason(text: str) -> ErrorCode:
    if "feature_disabled" in text or "not enabled" in text:
        return ErrorCode.AI_FEATURE_DISABLED
    if "no_api_key" in text or "API key" in text:
        return ErrorCode.AI_MISSING_CREDENTIALS
    if "parse_error" in text or "unexpected response" in text:
        return ErrorCode.AI_MALFORMED_RESPONSE
    return ErrorCode.AI_STAGE_FAILED


def classify_ai_error(error: BaseException | str) -> ErrorCode:
    """Map an AI-stage failure to its error code."""
    if isinstance(error, AIServiceError):
        return error.code
    return _code_for_reason(str(error))


def format_ai_error(stage: str, error: BaseException | str) -> str:
    """Turn an AI-stage failure into a user-facing chat message.

    Args:
        stage: "analysis" or "generation".
        error: The caught exception (or a bare message).

    Returns:
        Message distinguishing feature-disabled, missing-credentials,
        malformed-response and generic failures.
    """
    detail = str(error) or type(error).__name__
    code = classify_ai_error(error)
    return PageGuideError(code, {"stage": stage, "detail": detail}).message
