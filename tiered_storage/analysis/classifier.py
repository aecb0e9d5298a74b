# ==============================================
# SensitivityClassifier
# ==============================================
#
# PURPOSE:
#   Decide whether a value should be treated as sensitive, which in
#   turn decides (for Automatic intents) whether it goes to the
#   durable tier.
#
# CLASS: SensitivityClassifier
# ----------------------------
#   Stateless - schema/key names in, boolean verdict out.
#
#   Constructor:
#   ------------
#   - __init__(keywords: Iterable[str] | None = None)
#
#   Methods:
#   --------
#   - classify(schema_name: str) -> bool
#       Keyword heuristic only. Lower-cases the name and returns True
#       if any keyword is a substring of it.
#
#   - is_sensitive(schema_name, key=None, declared=None) -> bool
#       Applies rules in order:
#
#       RULE 1: DECLARED TAG WINS
#         If the caller declared sensitivity (True/False) → use it.
#
#       RULE 2: KEYWORD HEURISTIC (convenience fallback)
#         classify(schema_name) or classify(key)
#
# NOTE:
#   The heuristic is a convenience, not a guarantee. "monkey" matches
#   "key"; "pin_code" matches nothing. Declare sensitivity explicitly
#   (StorageKeySpec.sensitive or the `sensitive=` argument) wherever
#   it matters.
#
# ==============================================

from typing import Iterable, Optional, FrozenSet

SENSITIVE_KEYWORDS: FrozenSet[str] = frozenset({
    "password",
    "token",
    "secret",
    "key",
    "credential",
    "auth",
})


class SensitivityClassifier:
    """Keyword-based sensitivity check with an explicit-tag override."""

    def __init__(self, keywords: Optional[Iterable[str]] = None):
        self.keywords = frozenset(k.lower() for k in keywords) if keywords else SENSITIVE_KEYWORDS

    def classify(self, schema_name: Optional[str]) -> bool:
        if not schema_name:
            return False
        lowered = schema_name.lower()
        return any(keyword in lowered for keyword in self.keywords)

    def is_sensitive(
        self,
        schema_name: Optional[str],
        key: Optional[str] = None,
        declared: Optional[bool] = None,
    ) -> bool:
        """
        Resolve sensitivity for one value.

        Args:
            schema_name: Declared schema / type name of the value
            key: Storage key the value is written under
            declared: Static sensitivity tag supplied by the caller, if any

        Returns:
            True if the value should be treated as sensitive
        """
        if declared is not None:
            return declared
        return self.classify(schema_name) or self.classify(key)


_default_classifier = SensitivityClassifier()


def classify(schema_name: Optional[str]) -> bool:
    """Module-level shortcut using the default keyword set."""
    return _default_classifier.classify(schema_name)
