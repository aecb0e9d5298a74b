# ==============================================
# tiered_storage
# ==============================================
#
# Typed key-value storage over two tiers:
#   - volatile: cleared when the application is removed
#   - durable:  survives removal / reinstall, gated by lock state
#
# Packages:
# ---------
# - analysis/     → key validation, sensitivity classification, intents
# - storage/      → backends, codec, router, migration, factory
# - persistence/  → reinstall-aware usage statistics
#
# Entry points:
# -------------
#   from tiered_storage import TieredStorage, StorageIntent
#   storage = TieredStorage.from_config()
#   storage.set("abc", "auth.token")
#
#   python -m tiered_storage.cli --help
#
# ==============================================

from .analysis import (
    AUTOMATIC,
    DEFAULT_ACCESSIBILITY,
    VOLATILE,
    AccessibilityLevel,
    Backend,
    DeviceState,
    SensitivityClassifier,
    StorageIntent,
    classify,
    validate_key,
)
from .config import AppConfig, get_config
from .context import StorageKeySpec, TieredStorage, ValueResult
from .errors import (
    DecodingFailedError,
    DurableBackendError,
    EncodingFailedError,
    InvalidKeyError,
    MigrationNotFoundError,
    StatisticsDisabledError,
    StorageError,
    UnsupportedTypeError,
    VolatileBackendError,
)
from .persistence import StatisticsEngine, UsageStatistics
from .storage import (
    InMemoryDurableBackend,
    InMemoryVolatileBackend,
    MigrationDirection,
    MigrationResult,
    OperationResult,
    ReadResult,
)

__version__ = "0.1.0"

__all__ = [
    "AUTOMATIC",
    "DEFAULT_ACCESSIBILITY",
    "VOLATILE",
    "AccessibilityLevel",
    "Backend",
    "DeviceState",
    "SensitivityClassifier",
    "StorageIntent",
    "classify",
    "validate_key",
    "AppConfig",
    "get_config",
    "StorageKeySpec",
    "TieredStorage",
    "ValueResult",
    "DecodingFailedError",
    "DurableBackendError",
    "EncodingFailedError",
    "InvalidKeyError",
    "MigrationNotFoundError",
    "StatisticsDisabledError",
    "StorageError",
    "UnsupportedTypeError",
    "VolatileBackendError",
    "StatisticsEngine",
    "UsageStatistics",
    "InMemoryDurableBackend",
    "InMemoryVolatileBackend",
    "MigrationDirection",
    "MigrationResult",
    "OperationResult",
    "ReadResult",
]
