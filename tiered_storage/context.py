# ==============================================
# TieredStorage - Storage Context
# ==============================================
#
# PURPOSE:
#   This is the class applications talk to. It ties validation,
#   routing, the codec, both backends, migration and usage statistics
#   together behind one object. Everything else is internal.
#
# HOW A CALL FLOWS:
#
#   caller ──► validate_key ──► StorageRouter.resolve ──► codec ──► backend
#                 │                     │
#                 │ invalid             │ Volatile / Durable(level) / Automatic
#                 ▼                     ▼
#           InvalidKeyError       classifier verdict (declared tag wins)
#
#   MigrationManager moves raw bytes backend-to-backend and skips the
#   router. StatisticsEngine is only built on first access.
#
# CLASS: TieredStorage
# --------------------
#
#   Constructor:
#   ------------
#   - __init__(volatile_backend, durable_backend, config=None,
#              classifier=None, clock=None)
#   - from_config(config=None, connect=True)   (classmethod)
#
#   Public Methods:
#   ---------------
#   - set(value, key, intent=AUTOMATIC, *, sensitive=None) -> OperationResult
#   - get(key, default, intent=AUTOMATIC, *, sensitive=None) -> value
#   - get_result(key, default, intent=AUTOMATIC, *, sensitive=None) -> ValueResult
#   - remove(key, intent=AUTOMATIC, *, sensitive=None) -> OperationResult
#       Automatic without a declared tag sweeps both tiers.
#   - migrate(key, direction, accessibility=WHEN_UNLOCKED) -> MigrationResult
#   - statistics -> StatisticsEngine   (StatisticsDisabledError if disabled)
#   - validate_key(key) -> bool
#   - set_bool/get_bool, set_int/get_int, set_float/get_float,
#     set_string/get_string             (volatile tier)
#   - read(spec) / write(spec, value)   (StorageKeySpec helpers)
#   - close()
#
# ==============================================

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from .analysis.classifier import SensitivityClassifier
from .analysis.decision import (
    AUTOMATIC,
    DEFAULT_ACCESSIBILITY,
    AccessibilityLevel,
    Backend,
    StorageIntent,
)
from .analysis.validator import validate_key
from .config import AppConfig, get_config
from .errors import InvalidKeyError, StatisticsDisabledError, StorageError
from .persistence.statistics_engine import StatisticsEngine
from .storage.base import OperationResult, StorageBackend, is_not_found
from .storage.codec import decode_value, encode_value, schema_name_of
from .storage.factory import build_backends
from .storage.migrator import MigrationDirection, MigrationManager, MigrationResult
from .storage.router import StorageRouter

logger = logging.getLogger(__name__)


@dataclass
class ValueResult:
    """Outcome of a typed read: the value plus how it was obtained."""
    value: Any
    found: bool = False
    backend: Optional[Backend] = None
    error: Optional[StorageError] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass(frozen=True)
class StorageKeySpec:
    """
    A typed key declaration: the key, its default value and its
    sensitivity tag, declared once and reused for every access.

    Example:
        SESSION_TOKEN = StorageKeySpec("session", "", sensitive=True)
        storage.write(SESSION_TOKEN, "abc")
        storage.read(SESSION_TOKEN)   # "abc"
    """
    key: str
    default: Any
    sensitive: bool = False
    intent: Optional[StorageIntent] = None


class TieredStorage:
    """
    Typed key-value storage over a volatile and a durable tier.
    """

    def __init__(
        self,
        volatile_backend: StorageBackend,
        durable_backend: StorageBackend,
        config: Optional[AppConfig] = None,
        classifier: Optional[SensitivityClassifier] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._config = config or AppConfig()
        self.volatile_backend = volatile_backend
        self.durable_backend = durable_backend
        self._router = StorageRouter(
            volatile_backend,
            durable_backend,
            classifier=classifier,
            default_accessibility=self._config.default_accessibility,
        )
        self._migrator = MigrationManager(volatile_backend, durable_backend)
        self._clock = clock
        self._statistics: Optional[StatisticsEngine] = None

    @classmethod
    def from_config(cls, config: Optional[AppConfig] = None, connect: bool = True, **kwargs) -> "TieredStorage":
        """Build backends from configuration (loads .env when config is None)."""
        config = config or get_config()
        volatile_backend, durable_backend = build_backends(config, connect=connect)
        logger.info("Storage ready: volatile=%s durable=%s service=%s",
                    volatile_backend.name, durable_backend.name, config.service_name)
        return cls(volatile_backend, durable_backend, config=config, **kwargs)

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def router(self) -> StorageRouter:
        return self._router

    # ==============================================
    # Typed values
    # ==============================================

    def set(
        self,
        value: Any,
        key: str,
        intent: StorageIntent = AUTOMATIC,
        *,
        sensitive: Optional[bool] = None,
    ) -> OperationResult:
        """
        Encode and store a value.

        Args:
            value: Value to store (see codec for supported types)
            key: Storage key
            intent: Volatile, Durable(level) or Automatic
            sensitive: Declared sensitivity tag for Automatic routing

        Returns:
            OperationResult; truthy on success
        """
        if not validate_key(key):
            return OperationResult.failed(InvalidKeyError(key))
        try:
            data = encode_value(value)
        except StorageError as e:
            logger.warning("Could not encode value for key '%s': %s", key, e)
            return OperationResult.failed(e)

        backend, level = self._router.route(intent, schema_name_of(value), key=key, sensitive=sensitive)
        return backend.write(key, data, level)

    def get_result(
        self,
        key: str,
        default: Any,
        intent: StorageIntent = AUTOMATIC,
        *,
        sensitive: Optional[bool] = None,
    ) -> ValueResult:
        """
        Read a value decoded to the type of `default`.

        A missing entry yields `default` with found=False. A read or
        decode failure yields `default` with the error attached.
        """
        if not validate_key(key):
            return ValueResult(default, error=InvalidKeyError(key))

        decision = self._router.resolve(intent, schema_name_of(default), key=key, sensitive=sensitive)
        backend = self._router.backend_for(decision)
        read = backend.read(key, decision.accessibility)
        if read.failed:
            return ValueResult(default, backend=decision.backend, error=read.error)
        if not read.found:
            return ValueResult(default, backend=decision.backend)
        try:
            value = decode_value(read.data, default=default)
        except StorageError as e:
            logger.warning("Stored value for key '%s' could not be decoded: %s", key, e)
            return ValueResult(default, backend=decision.backend, error=e)
        return ValueResult(value, found=True, backend=decision.backend)

    def get(
        self,
        key: str,
        default: Any,
        intent: StorageIntent = AUTOMATIC,
        *,
        sensitive: Optional[bool] = None,
    ) -> Any:
        """Read a value, falling back to `default` when missing or unreadable."""
        return self.get_result(key, default, intent, sensitive=sensitive).value

    def remove(
        self,
        key: str,
        intent: StorageIntent = AUTOMATIC,
        *,
        sensitive: Optional[bool] = None,
    ) -> OperationResult:
        """
        Remove a key.

        Automatic intent without a declared tag cannot know which tier
        the value went to (its schema name is unknown here), so both
        tiers are cleared. A durable "not found" is not an error then.
        """
        if not validate_key(key):
            return OperationResult.failed(InvalidKeyError(key))

        if intent.is_automatic and sensitive is None:
            return self._remove_everywhere(key)

        backend, level = self._router.route(intent, None, key=key, sensitive=sensitive)
        return backend.delete(key, level)

    def _remove_everywhere(self, key: str) -> OperationResult:
        volatile = self.volatile_backend.delete(key)
        durable = self.durable_backend.delete(key, self._router.default_accessibility)
        if not durable and is_not_found(durable.error):
            durable = OperationResult.ok()
        if not volatile:
            return volatile
        return durable

    # ==============================================
    # Typed key declarations
    # ==============================================

    def read(self, spec: StorageKeySpec) -> Any:
        return self.get(spec.key, spec.default, spec.intent or AUTOMATIC, sensitive=spec.sensitive)

    def write(self, spec: StorageKeySpec, value: Any) -> OperationResult:
        return self.set(value, spec.key, spec.intent or AUTOMATIC, sensitive=spec.sensitive)

    # ==============================================
    # Primitive fast paths (volatile tier)
    # ==============================================

    def set_bool(self, key: str, value: bool) -> bool:
        return validate_key(key) and self.volatile_backend.set_bool(key, value)

    def get_bool(self, key: str) -> Optional[bool]:
        return self.volatile_backend.get_bool(key) if validate_key(key) else None

    def set_int(self, key: str, value: int) -> bool:
        return validate_key(key) and self.volatile_backend.set_int(key, value)

    def get_int(self, key: str) -> Optional[int]:
        return self.volatile_backend.get_int(key) if validate_key(key) else None

    def set_float(self, key: str, value: float) -> bool:
        return validate_key(key) and self.volatile_backend.set_float(key, value)

    def get_float(self, key: str) -> Optional[float]:
        return self.volatile_backend.get_float(key) if validate_key(key) else None

    def set_string(self, key: str, value: str) -> bool:
        return validate_key(key) and self.volatile_backend.set_string(key, value)

    def get_string(self, key: str) -> Optional[str]:
        return self.volatile_backend.get_string(key) if validate_key(key) else None

    # ==============================================
    # Migration / statistics
    # ==============================================

    def migrate(
        self,
        key: str,
        direction: MigrationDirection,
        accessibility: AccessibilityLevel = DEFAULT_ACCESSIBILITY,
    ) -> MigrationResult:
        return self._migrator.migrate(key, direction, accessibility)

    @property
    def statistics(self) -> StatisticsEngine:
        """Usage statistics engine, created on first access."""
        if not self._config.enable_statistics:
            raise StatisticsDisabledError()
        if self._statistics is None:
            self._statistics = StatisticsEngine(
                self.volatile_backend, self.durable_backend, clock=self._clock
            )
        return self._statistics

    @staticmethod
    def validate_key(key: Any) -> bool:
        return validate_key(key)

    # ==============================================
    # Lifecycle
    # ==============================================

    def close(self) -> None:
        """Disconnect network backends (no-op for local ones)."""
        for backend in (self.volatile_backend, self.durable_backend):
            disconnect = getattr(backend, "disconnect", None)
            if disconnect is not None:
                disconnect()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
