# ==============================================
# ANALYSIS (Validation + Sensitivity Classification)
# ==============================================
#
# This package decides whether a key is usable and whether a value
# is sensitive. Nothing here performs I/O.
#
# Modules:
# --------
# - decision.py    → Backend, AccessibilityLevel, StorageIntent, RouteDecision
# - classifier.py  → SensitivityClassifier (keyword heuristic + declared tag)
# - validator.py   → validate_key, validate_intent
#
# ==============================================

from .decision import (
    AUTOMATIC,
    DEFAULT_ACCESSIBILITY,
    VOLATILE,
    AccessibilityLevel,
    Backend,
    DeviceState,
    IntentKind,
    RouteDecision,
    StorageIntent,
)
from .classifier import SENSITIVE_KEYWORDS, SensitivityClassifier, classify
from .validator import MAX_KEY_LENGTH, validate_intent, validate_key

__all__ = [
    "AUTOMATIC",
    "DEFAULT_ACCESSIBILITY",
    "VOLATILE",
    "AccessibilityLevel",
    "Backend",
    "DeviceState",
    "IntentKind",
    "RouteDecision",
    "StorageIntent",
    "SENSITIVE_KEYWORDS",
    "SensitivityClassifier",
    "classify",
    "MAX_KEY_LENGTH",
    "validate_intent",
    "validate_key",
]
