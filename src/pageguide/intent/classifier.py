"""Intent Classifier: Local keyword/alias matching against component schemas.

Turns a free-text request into a structured Intent: what the user wants to do,
which fields of the component they mean, and any value or breakpoint they
named. No model calls, no I/O: classification is deterministic and cheap
enough to run on every submission.

Field scoring (per token, summed):
- +20 for each word of the field label it equals
- +15 for each underscore segment of the field name it equals
- +30 for each option key or option display value it equals
- +10 for each word of the section label it equals
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence
from typing import Any

from pageguide.config import ClassifierConfig
from pageguide.intent.types import Action, Breakpoint, Confidence, Intent, ScoredField
from pageguide.intent.vocabulary import (
    ABBREVIATIONS,
    ACTION_PHRASES,
    BREAKPOINT_KEYWORDS,
    DEFAULT_ACTION,
)
from pageguide.schema.index import ComponentSchemaEntry, SchemaIndex

logger = logging.getLogger(__name__)

# =============================================================================
# PRE-COMPILED PATTERNS
# =============================================================================

_ABBREVIATION_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = tuple(
    (re.compile(rf"\b{re.escape(abbr)}\b"), full) for abbr, full in ABBREVIATIONS
)
_PUNCTUATION = re.compile(r"[^\w\s]")
_TO_VALUE = re.compile(r"\bto\s+(\w+)")
_ASSIGN_VALUE = re.compile(r"[=:]\s*(\w+)")


class IntentClassifier:
    """Classify requests against an explicitly owned SchemaIndex."""

    def __init__(
        self,
        index: SchemaIndex | None = None,
        config: ClassifierConfig | None = None,
    ) -> None:
        self.index = index if index is not None else SchemaIndex()
        self.config = config or ClassifierConfig()

    def build_index(self, raw_schemas: Mapping[str, Any]) -> None:
        """Replace the index content with the given raw schemas."""
        self.index.build(raw_schemas)

    def classify(self, text: str, component_type: str | None = None) -> Intent:
        """Classify user input, degrading confidence rather than failing.

        Args:
            text: The user's request.
            component_type: Type of the currently selected component, if any.
                When absent, the type is guessed from labels and aliases
                mentioned in the text.

        Returns:
            A well-formed Intent.
        """
        normalized = self.normalize(text or "")
        tokens = self.tokenize(normalized)

        action = self.detect_action(normalized)
        breakpoint = self.detect_breakpoint(tokens)
        value = self.detect_value(normalized)

        if not component_type:
            component_type = self.detect_component_type(tokens)

        entry = self.index.get(component_type)
        if entry is None:
            logger.debug("No schema for component %r; confidence none", component_type)
            return Intent(
                action=action,
                component_type=component_type,
                fields=(),
                breakpoint=breakpoint,
                value=value,
                confidence=Confidence.NONE,
                raw_text=text,
            )

        scored = self.score_fields(tokens, entry)
        matched = tuple(f for f in scored if f.score >= self.config.match_threshold)

        if matched and matched[0].score >= self.config.high_confidence_threshold:
            confidence = Confidence.HIGH
        elif matched:
            confidence = Confidence.MEDIUM
        else:
            confidence = Confidence.LOW

        logger.debug(
            "Classified %r: action=%s component=%s confidence=%s top=%s",
            text,
            action.value,
            component_type,
            confidence.value,
            matched[0].field_name if matched else None,
        )

        return Intent(
            action=action,
            component_type=component_type,
            fields=matched,
            breakpoint=breakpoint,
            value=value,
            confidence=confidence,
            raw_text=text,
        )

    # -------------------------------------------------------------------------
    # Text processing
    # -------------------------------------------------------------------------

    @staticmethod
    def normalize(text: str) -> str:
        """Lowercase, trim and expand abbreviations (whole words, table order)."""
        normalized = text.lower().strip()
        for pattern, full in _ABBREVIATION_PATTERNS:
            normalized = pattern.sub(full, normalized)
        return normalized

    @staticmethod
    def tokenize(text: str) -> list[str]:
        """Split on whitespace after replacing punctuation with spaces."""
        return _PUNCTUATION.sub(" ", text).split()

    @staticmethod
    def detect_action(normalized: str) -> Action:
        for phrase, action in ACTION_PHRASES:
            if phrase in normalized:
                return action
        return DEFAULT_ACTION

    @staticmethod
    def detect_breakpoint(tokens: Sequence[str]) -> Breakpoint | None:
        for token in tokens:
            if token in BREAKPOINT_KEYWORDS:
                return BREAKPOINT_KEYWORDS[token]
        return None

    @staticmethod
    def detect_value(normalized: str) -> str | None:
        """Pick up "to <word>", then "=<word>" / ":<word>"."""
        for pattern in (_TO_VALUE, _ASSIGN_VALUE):
            match = pattern.search(normalized)
            if match:
                return match.group(1)
        return None

    def detect_component_type(self, tokens: Sequence[str]) -> str | None:
        """Guess the component type from its label or aliases.

        The label must equal a token; an alias only has to appear inside the
        space-joined tokens.
        """
        joined = " ".join(tokens)
        token_set = set(tokens)
        for entry in self.index:
            if entry.label and entry.label.lower() in token_set:
                return entry.component_type
            for alias in entry.aliases:
                if alias.lower() in joined:
                    return entry.component_type
        return None

    # -------------------------------------------------------------------------
    # Scoring
    # -------------------------------------------------------------------------

    def score_fields(
        self, tokens: Sequence[str], entry: ComponentSchemaEntry
    ) -> list[ScoredField]:
        """Score every field of a component; highest first, ties in field order."""
        cfg = self.config
        results: list[ScoredField] = []

        for descriptor in entry.fields:
            label_words = descriptor.label.lower().split()
            name_parts = descriptor.field_name.lower().split("_")
            section_words = descriptor.section_label.lower().split()

            score = 0
            for token in tokens:
                if token in label_words:
                    score += cfg.label_weight
                if token in name_parts:
                    score += cfg.field_name_weight
                if token in section_words:
                    score += cfg.section_weight
                score += cfg.option_weight * _option_hits(token, descriptor.options)

            results.append(ScoredField(descriptor=descriptor, score=score))

        # sorted() is stable, so equal scores keep schema order
        return sorted(results, key=lambda f: f.score, reverse=True)


def _option_hits(token: str, options: Mapping[str, str] | None) -> int:
    """Count options whose key or display value equals the token."""
    if not options:
        return 0
    return sum(
        1
        for key, display in options.items()
        if key.lower() == token or display.lower() == token
    )
