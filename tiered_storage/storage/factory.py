# ==============================================
# Backend Factory
# ==============================================
#
# - build_volatile_backend(config) -> VolatileBackend
# - build_durable_backend(config) -> DurableBackend
# - build_backends(config) -> (volatile, durable)
#
# Network backends (mongo, mysql) are returned connected when
# connect=True.
#
# ==============================================

from typing import Tuple

from ..config import AppConfig
from .base import DurableBackend, VolatileBackend
from .file_backend import FileVolatileBackend
from .memory_backend import InMemoryDurableBackend, InMemoryVolatileBackend
from .mongo_backend import MongoVolatileBackend
from .mysql_backend import MySQLDurableBackend


def build_volatile_backend(config: AppConfig, connect: bool = True) -> VolatileBackend:
    kind = config.volatile.backend
    if kind == "memory":
        return InMemoryVolatileBackend()
    if kind == "file":
        return FileVolatileBackend(config.volatile.file_path)
    if kind == "mongo":
        backend = MongoVolatileBackend(
            host=config.mongo.host,
            port=config.mongo.port,
            database=config.mongo.database,
            collection=config.mongo.collection,
            user=config.mongo.user,
            password=config.mongo.password,
        )
        if connect:
            backend.connect()
        return backend
    raise ValueError(f"Unknown VOLATILE_BACKEND={kind}")


def build_durable_backend(config: AppConfig, connect: bool = True) -> DurableBackend:
    kind = config.durable.backend
    options = dict(
        max_item_bytes=config.durable.max_item_bytes,
        default_accessibility=config.default_accessibility,
    )
    if kind == "memory":
        return InMemoryDurableBackend(config.service_name, **options)
    if kind == "mysql":
        backend = MySQLDurableBackend(
            host=config.mysql.host,
            port=config.mysql.port,
            user=config.mysql.user,
            password=config.mysql.password,
            database=config.mysql.database,
            service_name=config.service_name,
            table=config.mysql.table,
            **options,
        )
        if connect:
            backend.connect()
        return backend
    raise ValueError(f"Unknown DURABLE_BACKEND={kind}")


def build_backends(config: AppConfig, connect: bool = True) -> Tuple[VolatileBackend, DurableBackend]:
    return build_volatile_backend(config, connect), build_durable_backend(config, connect)
