"""Local intent classification: free text -> structured Intent."""

from pageguide.intent.classifier import IntentClassifier
from pageguide.intent.types import Action, Breakpoint, Confidence, Intent, ScoredField

__all__ = [
    "Action",
    "Breakpoint",
    "Confidence",
    "Intent",
    "IntentClassifier",
    "ScoredField",
]
