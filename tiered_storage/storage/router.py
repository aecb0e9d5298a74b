# ==============================================
# StorageRouter
# ==============================================
#
# PURPOSE:
#   Take a storage intent plus what is known about the value (schema
#   name, key, declared sensitivity) and decide which tier handles the
#   call and under which accessibility level.
#
# CLASS: StorageRouter
# --------------------
#   Holds references to both backends so callers can turn a decision
#   into a backend handle, but resolve() itself never touches them.
#
#   Constructor:
#   ------------
#   - __init__(volatile_backend, durable_backend,
#              classifier: SensitivityClassifier | None = None,
#              default_accessibility: AccessibilityLevel = WHEN_UNLOCKED)
#
#   Methods:
#   --------
#   - resolve(intent, schema_name, key=None, sensitive=None) -> RouteDecision
#       Rules:
#         - Volatile        → VOLATILE, no level
#         - Durable(level)  → DURABLE, level
#         - Automatic       → classifier verdict:
#                               sensitive     → DURABLE, default level
#                               not sensitive → VOLATILE
#
#   - backend_for(decision) -> StorageBackend
#
#   - route(intent, schema_name, key=None, sensitive=None)
#         -> tuple[StorageBackend, AccessibilityLevel | None]
#
# ==============================================

from typing import Optional, Tuple

from ..analysis.classifier import SensitivityClassifier
from ..analysis.decision import (
    DEFAULT_ACCESSIBILITY,
    AccessibilityLevel,
    Backend,
    IntentKind,
    RouteDecision,
    StorageIntent,
)
from .base import StorageBackend


class StorageRouter:
    def __init__(
        self,
        volatile_backend: StorageBackend,
        durable_backend: StorageBackend,
        classifier: SensitivityClassifier = None,
        default_accessibility: AccessibilityLevel = DEFAULT_ACCESSIBILITY,
    ):
        self.volatile_backend = volatile_backend
        self.durable_backend = durable_backend
        self.classifier = classifier or SensitivityClassifier()
        self.default_accessibility = default_accessibility

    def resolve(
        self,
        intent: StorageIntent,
        schema_name: Optional[str],
        key: Optional[str] = None,
        sensitive: Optional[bool] = None,
    ) -> RouteDecision:
        """
        Decide the tier for one call.

        Args:
            intent: Caller's storage intent
            schema_name: Schema / type name of the value
            key: Storage key (also fed to the keyword heuristic)
            sensitive: Declared sensitivity tag, overrides the heuristic

        Returns:
            RouteDecision naming the backend and accessibility level
        """
        if intent.kind is IntentKind.VOLATILE:
            return RouteDecision(Backend.VOLATILE, None, "explicit volatile")
        if intent.kind is IntentKind.DURABLE:
            return RouteDecision(Backend.DURABLE, intent.accessibility, "explicit durable")

        if self.classifier.is_sensitive(schema_name, key=key, declared=sensitive):
            reason = "declared sensitive" if sensitive else "sensitive keyword match"
            return RouteDecision(Backend.DURABLE, self.default_accessibility, reason)
        reason = "declared non-sensitive" if sensitive is False else "no sensitive keyword"
        return RouteDecision(Backend.VOLATILE, None, reason)

    def backend_for(self, decision: RouteDecision) -> StorageBackend:
        if decision.backend is Backend.DURABLE:
            return self.durable_backend
        return self.volatile_backend

    def route(
        self,
        intent: StorageIntent,
        schema_name: Optional[str],
        key: Optional[str] = None,
        sensitive: Optional[bool] = None,
    ) -> Tuple[StorageBackend, Optional[AccessibilityLevel]]:
        decision = self.resolve(intent, schema_name, key=key, sensitive=sensitive)
        return self.backend_for(decision), decision.accessibility
