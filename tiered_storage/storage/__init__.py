# ==============================================
# STORAGE (Backends, Routing, Migration)
# ==============================================
#
# This package handles every byte that reaches a tier:
# the backend contract and its implementations, the value codec,
# tier routing and tier-to-tier migration.
#
# Modules:
# --------
# - base.py            → StorageBackend contract, result objects
# - codec.py           → value <-> bytes
# - memory_backend.py  → in-memory volatile + durable tiers
# - file_backend.py    → JSON-file volatile tier
# - mongo_backend.py   → MongoDB volatile tier
# - mysql_backend.py   → MySQL durable tier
# - router.py          → Picks the tier for an intent
# - migrator.py        → Moves entries between tiers
# - factory.py         → Builds backends from configuration
#
# ==============================================

from .base import (
    DurableBackend,
    OperationResult,
    ReadResult,
    StorageBackend,
    VolatileBackend,
)
from .codec import decode_value, encode_value, schema_name_of
from .memory_backend import InMemoryDurableBackend, InMemoryVolatileBackend
from .file_backend import FileVolatileBackend
from .mongo_backend import MongoVolatileBackend
from .mysql_backend import MySQLDurableBackend
from .router import StorageRouter
from .migrator import MigrationDirection, MigrationManager, MigrationResult
from .factory import build_backends, build_durable_backend, build_volatile_backend

__all__ = [
    "DurableBackend",
    "OperationResult",
    "ReadResult",
    "StorageBackend",
    "VolatileBackend",
    "decode_value",
    "encode_value",
    "schema_name_of",
    "InMemoryDurableBackend",
    "InMemoryVolatileBackend",
    "FileVolatileBackend",
    "MongoVolatileBackend",
    "MySQLDurableBackend",
    "StorageRouter",
    "MigrationDirection",
    "MigrationManager",
    "MigrationResult",
    "build_backends",
    "build_durable_backend",
    "build_volatile_backend",
]
