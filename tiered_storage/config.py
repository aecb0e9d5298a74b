# ==============================================
# Configuration Management
# ==============================================
#
# PURPOSE:
#   Load and validate all configuration from environment
#   variables / .env file. Provides typed config objects
#   to the backend factory and the storage context.
#
# CLASSES:
# --------
# - MySQLConfig (dataclass)
#     host: str          (default "localhost")
#     port: int          (default 3306)
#     user: str          (default "root")
#     password: str      (default "root")
#     database: str      (default "tiered_storage")
#     table: str         (default "durable_items")
#
# - MongoConfig (dataclass)
#     host: str          (default "localhost")
#     port: int          (default 27017)
#     user: str | None   (default None)
#     password: str | None (default None)
#     database: str      (default "tiered_storage")
#     collection: str    (default "volatile_store")
#
# - VolatileConfig (dataclass)
#     backend: str       ("memory" | "file" | "mongo", default "memory")
#     file_path: str     (default "data/volatile_store.json")
#
# - DurableConfig (dataclass)
#     backend: str       ("memory" | "mysql", default "memory")
#     max_item_bytes: int (default 16384)
#
# - AppConfig (dataclass)
#     service_name: str                       (default "tiered_storage")
#     default_accessibility: AccessibilityLevel (default WHEN_UNLOCKED)
#     enable_statistics: bool                 (default True)
#     volatile / durable / mysql / mongo
#
# FUNCTION:
# ---------
# - get_config(env_path=None) -> AppConfig
#     Load .env using python-dotenv, construct a fresh AppConfig.
#
# USAGE:
# ------
#   from tiered_storage.config import get_config
#   config = get_config()
#   print(config.durable.backend)
#
# ==============================================

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .analysis.decision import DEFAULT_ACCESSIBILITY, AccessibilityLevel

VOLATILE_BACKENDS = ("memory", "file", "mongo")
DURABLE_BACKENDS = ("memory", "mysql")


@dataclass
class MySQLConfig:
    """MySQL connection for the durable tier."""
    host: str = "localhost"
    port: int = 3306
    user: str = "root"
    password: str = "root"
    database: str = "tiered_storage"
    table: str = "durable_items"


@dataclass
class MongoConfig:
    """MongoDB connection for the volatile tier."""
    host: str = "localhost"
    port: int = 27017
    user: Optional[str] = None
    password: Optional[str] = None
    database: str = "tiered_storage"
    collection: str = "volatile_store"


@dataclass
class VolatileConfig:
    backend: str = "memory"
    file_path: str = "data/volatile_store.json"


@dataclass
class DurableConfig:
    backend: str = "memory"
    max_item_bytes: int = 16 * 1024


@dataclass
class AppConfig:
    """Main storage configuration."""
    service_name: str = "tiered_storage"
    default_accessibility: AccessibilityLevel = DEFAULT_ACCESSIBILITY
    enable_statistics: bool = True
    volatile: VolatileConfig = field(default_factory=VolatileConfig)
    durable: DurableConfig = field(default_factory=DurableConfig)
    mysql: MySQLConfig = field(default_factory=MySQLConfig)
    mongo: MongoConfig = field(default_factory=MongoConfig)

    def __post_init__(self):
        if self.volatile.backend not in VOLATILE_BACKENDS:
            raise ValueError(
                f"Unknown volatile backend '{self.volatile.backend}', expected one of {VOLATILE_BACKENDS}"
            )
        if self.durable.backend not in DURABLE_BACKENDS:
            raise ValueError(
                f"Unknown durable backend '{self.durable.backend}', expected one of {DURABLE_BACKENDS}"
            )
        if self.durable.max_item_bytes <= 0:
            raise ValueError("max_item_bytes must be positive")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def get_config(env_path: Optional[str] = None) -> AppConfig:
    """
    Load configuration from environment variables / .env file.

    Args:
        env_path: Path to a .env file. Defaults to ".env" in the
            current working directory.

    Returns:
        AppConfig: Storage configuration
    """
    load_dotenv(dotenv_path=Path(env_path) if env_path else Path.cwd() / ".env")

    mysql_config = MySQLConfig(
        host=os.getenv("MYSQL_HOST", "localhost"),
        port=int(os.getenv("MYSQL_PORT", "3306")),
        user=os.getenv("MYSQL_USER", "root"),
        password=os.getenv("MYSQL_PASSWORD", "root"),
        database=os.getenv("MYSQL_DATABASE", "tiered_storage"),
        table=os.getenv("MYSQL_TABLE", "durable_items"),
    )

    mongo_config = MongoConfig(
        host=os.getenv("MONGO_HOST", "localhost"),
        port=int(os.getenv("MONGO_PORT", "27017")),
        user=os.getenv("MONGO_USER") or None,
        password=os.getenv("MONGO_PASSWORD") or None,
        database=os.getenv("MONGO_DATABASE", "tiered_storage"),
        collection=os.getenv("MONGO_COLLECTION", "volatile_store"),
    )

    volatile_config = VolatileConfig(
        backend=os.getenv("VOLATILE_BACKEND", "memory").lower(),
        file_path=os.getenv("VOLATILE_FILE_PATH", "data/volatile_store.json"),
    )

    durable_config = DurableConfig(
        backend=os.getenv("DURABLE_BACKEND", "memory").lower(),
        max_item_bytes=int(os.getenv("DURABLE_MAX_ITEM_BYTES", str(16 * 1024))),
    )

    return AppConfig(
        service_name=os.getenv("STORAGE_SERVICE_NAME", "tiered_storage"),
        default_accessibility=AccessibilityLevel.parse(
            os.getenv("STORAGE_DEFAULT_ACCESSIBILITY", DEFAULT_ACCESSIBILITY.value)
        ),
        enable_statistics=_env_bool("STORAGE_ENABLE_STATISTICS", True),
        volatile=volatile_config,
        durable=durable_config,
        mysql=mysql_config,
        mongo=mongo_config,
    )
