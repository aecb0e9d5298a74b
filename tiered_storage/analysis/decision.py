# ==============================================
# Decision (Data Classes)
# ==============================================
#
# PURPOSE:
#   Data classes that describe WHERE a value goes and under WHICH
#   access policy. The router produces RouteDecision objects; the
#   backends consume AccessibilityLevel and DeviceState.
#
# ENUMS:
# ------
# - Backend(Enum): VOLATILE, DURABLE
#     Which storage tier a value is assigned to.
#
# - AccessibilityLevel(Enum)
#     When the durable tier lets an entry be touched, relative to the
#     device lock state. Members are declared from least to most
#     restrictive and compare in that order.
#
# - IntentKind(Enum): VOLATILE, DURABLE, AUTOMATIC
#
# CLASSES:
# --------
# - DeviceState (dataclass)
#     unlocked / unlocked_since_boot / passcode_set flags consulted by
#     durable backends before every operation.
#
# - StorageIntent (frozen dataclass)
#     kind: IntentKind
#     accessibility: AccessibilityLevel | None   (only for DURABLE)
#
# - RouteDecision (frozen dataclass)
#     backend: Backend
#     accessibility: AccessibilityLevel | None
#     reason: str
#
# ==============================================

from dataclasses import dataclass
from enum import Enum
from functools import total_ordering
from typing import Optional, Dict, Any


class Backend(Enum):
    """
    Enumeration of storage tiers.

    - VOLATILE: cleared when the application is removed
    - DURABLE: survives removal/reinstall, access gated by AccessibilityLevel
    """
    VOLATILE = "volatile"
    DURABLE = "durable"


@dataclass
class DeviceState:
    """Lock state of the device as seen by the durable tier."""
    unlocked: bool = True
    unlocked_since_boot: bool = True
    passcode_set: bool = True

    @classmethod
    def locked(cls) -> "DeviceState":
        """Locked after having been unlocked once since boot."""
        return cls(unlocked=False, unlocked_since_boot=True)

    @classmethod
    def before_first_unlock(cls) -> "DeviceState":
        return cls(unlocked=False, unlocked_since_boot=False)


@total_ordering
class AccessibilityLevel(Enum):
    """
    Durable-tier access policies, declared least to most restrictive.

    The *_THIS_DEVICE_ONLY variants share the lock requirement of their
    base policy but are never carried to another device by a backup.
    """
    ALWAYS = "always"
    ALWAYS_THIS_DEVICE_ONLY = "always_this_device_only"
    AFTER_FIRST_UNLOCK = "after_first_unlock"
    AFTER_FIRST_UNLOCK_THIS_DEVICE_ONLY = "after_first_unlock_this_device_only"
    WHEN_UNLOCKED = "when_unlocked"
    WHEN_UNLOCKED_THIS_DEVICE_ONLY = "when_unlocked_this_device_only"
    WHEN_PASSCODE_SET_THIS_DEVICE_ONLY = "when_passcode_set_this_device_only"

    @property
    def rank(self) -> int:
        return _LEVEL_ORDER.index(self)

    def __lt__(self, other):
        if not isinstance(other, AccessibilityLevel):
            return NotImplemented
        return self.rank < other.rank

    @property
    def this_device_only(self) -> bool:
        return self.value.endswith("this_device_only")

    def permits(self, state: DeviceState) -> bool:
        """
        Check whether an entry tagged with this level may be accessed.

        Args:
            state: Current device lock state

        Returns:
            True if the operation is allowed right now
        """
        if self in (AccessibilityLevel.ALWAYS, AccessibilityLevel.ALWAYS_THIS_DEVICE_ONLY):
            return True
        if self in (
            AccessibilityLevel.AFTER_FIRST_UNLOCK,
            AccessibilityLevel.AFTER_FIRST_UNLOCK_THIS_DEVICE_ONLY,
        ):
            return state.unlocked_since_boot
        if self is AccessibilityLevel.WHEN_PASSCODE_SET_THIS_DEVICE_ONLY:
            return state.unlocked and state.passcode_set
        return state.unlocked

    @classmethod
    def parse(cls, name: str) -> "AccessibilityLevel":
        """Accept either the value ("when_unlocked") or member name ("WHEN_UNLOCKED")."""
        normalized = name.strip().lower().replace("-", "_")
        return cls(normalized)


_LEVEL_ORDER = list(AccessibilityLevel)

DEFAULT_ACCESSIBILITY = AccessibilityLevel.WHEN_UNLOCKED


class IntentKind(Enum):
    VOLATILE = "volatile"
    DURABLE = "durable"
    AUTOMATIC = "automatic"


@dataclass(frozen=True)
class StorageIntent:
    """
    Caller's request for where a value should live.

    Use the factory classmethods rather than the constructor:

        StorageIntent.volatile()
        StorageIntent.durable(AccessibilityLevel.AFTER_FIRST_UNLOCK)
        StorageIntent.automatic()
    """
    kind: IntentKind
    accessibility: Optional[AccessibilityLevel] = None

    def __post_init__(self):
        if self.kind is IntentKind.DURABLE and self.accessibility is None:
            raise ValueError("Durable intent requires an accessibility level")
        if self.kind is not IntentKind.DURABLE and self.accessibility is not None:
            raise ValueError(f"{self.kind.value} intent does not take an accessibility level")

    @classmethod
    def volatile(cls) -> "StorageIntent":
        return cls(IntentKind.VOLATILE)

    @classmethod
    def durable(cls, accessibility: AccessibilityLevel = DEFAULT_ACCESSIBILITY) -> "StorageIntent":
        return cls(IntentKind.DURABLE, accessibility)

    @classmethod
    def automatic(cls) -> "StorageIntent":
        return cls(IntentKind.AUTOMATIC)

    @property
    def is_automatic(self) -> bool:
        return self.kind is IntentKind.AUTOMATIC

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "accessibility": self.accessibility.value if self.accessibility else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StorageIntent":
        level = data.get("accessibility")
        return cls(
            kind=IntentKind(data["kind"]),
            accessibility=AccessibilityLevel(level) if level else None,
        )


VOLATILE = StorageIntent.volatile()
AUTOMATIC = StorageIntent.automatic()


@dataclass(frozen=True)
class RouteDecision:
    """
    The router's answer for a single call.

    backend=VOLATILE always carries accessibility=None.
    """
    backend: Backend
    accessibility: Optional[AccessibilityLevel] = None
    reason: str = ""
