# ==============================================
# Key / Intent Validation
# ==============================================
#
# FUNCTIONS:
# ----------
# - validate_key(key: str) -> bool
#     Reject empty keys, keys containing any whitespace character and
#     keys longer than MAX_KEY_LENGTH. Accept everything else.
#
# - validate_intent(schema_name: str, intent: StorageIntent) -> bool
#     Advisory check: a schema name the classifier flags as sensitive
#     should not be stored with an explicit Volatile intent.
#
# ==============================================

from typing import Any

from .classifier import SensitivityClassifier
from .decision import IntentKind, StorageIntent

MAX_KEY_LENGTH = 255


def validate_key(key: Any) -> bool:
    if not isinstance(key, str) or not key:
        return False
    if len(key) > MAX_KEY_LENGTH:
        return False
    return not any(ch.isspace() for ch in key)


def validate_intent(
    schema_name: str,
    intent: StorageIntent,
    classifier: SensitivityClassifier = None,
) -> bool:
    classifier = classifier or SensitivityClassifier()
    if intent.kind is IntentKind.VOLATILE:
        return not classifier.classify(schema_name)
    # Durable can hold anything small; Automatic routes by itself
    return True
