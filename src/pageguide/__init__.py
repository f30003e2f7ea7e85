"""PageGuide - plain-language settings assistant for visual page builders.

Classifies free-text requests against component schemas, then either walks
the user to the right setting, writes a simple change directly, or hands the
request to an AI service for a reviewed changeset.
"""

from pageguide.errors import ErrorCode, PageGuideError

# Classification
from pageguide.intent import Action, Breakpoint, Confidence, Intent, IntentClassifier
from pageguide.schema import SchemaIndex, SchemaLoader

# Guidance
from pageguide.guidance import GuidanceExecutor, GuidancePlan, build_plan

# Dispatch
from pageguide.dispatch import DispatchOutcome, EditAssistant, Route, decide_route

__version__ = "0.1.0"

__all__ = [
    # Classification
    "Action",
    "Breakpoint",
    "Confidence",
    "Intent",
    "IntentClassifier",
    "SchemaIndex",
    "SchemaLoader",
    # Guidance
    "GuidanceExecutor",
    "GuidancePlan",
    "build_plan",
    # Dispatch
    "DispatchOutcome",
    "EditAssistant",
    "Route",
    "decide_route",
    # Errors
    "ErrorCode",
    "PageGuideError",
]
