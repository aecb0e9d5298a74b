# ==============================================
# MySQLDurableBackend
# ==============================================
#
# PURPOSE:
#   Durable tier on a MySQL server. Entries outlive the application
#   install on the device and are tagged with the AccessibilityLevel
#   they were written under.
#
# TABLE:
# ------
#   CREATE TABLE durable_items (
#       service        VARCHAR(255) NOT NULL,
#       account        VARCHAR(255) NOT NULL,
#       accessibility  VARCHAR(64)  NOT NULL,
#       data           MEDIUMBLOB   NOT NULL,
#       updated_at     TIMESTAMP    DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP,
#       PRIMARY KEY (service, account)
#   )
#
#   (service, account) = (service_name, key). Writes never use
#   ON DUPLICATE KEY UPDATE: the base class deletes the row under the
#   requested accessibility, commits, then inserts. If the insert fails
#   the row stays deleted.
#
# CLASS: MySQLDurableBackend
# --------------------------
#   Stateful - holds connection to MySQL.
#
#   Constructor:
#   ------------
#   - __init__(host, port, user, password, database,
#              service_name, table="durable_items", **durable_options)
#       Store connection params. Don't connect yet.
#
#   Methods:
#   --------
#   - connect() -> None
#       Establish connection. Create database and table if missing.
#   - disconnect() -> None
#
#   Context Manager:
#   ----------------
#   - __enter__ / __exit__ for `with MySQLDurableBackend(...) as db:` usage.
#
# ==============================================

import logging
from typing import Optional, Tuple

import pymysql
import pymysql.cursors

from ..analysis.decision import AccessibilityLevel
from ..errors import DurableBackendError
from .base import STATUS_DUPLICATE_ITEM, STATUS_PARAM, DurableBackend

logger = logging.getLogger(__name__)

ER_DUP_ENTRY = 1062


class MySQLDurableBackend(DurableBackend):
    name = "mysql-durable"
    backend_errors = (pymysql.MySQLError,)

    def __init__(self, host, port, user, password, database, service_name, table="durable_items", **kwargs):
        super().__init__(service_name, **kwargs)
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.database = database
        self.table = table
        self.connection = None

    def connect(self) -> None:
        # Establish connection to MySQL, create database and table if they don't exist
        self.connection = pymysql.connect(
            host=self.host,
            port=self.port,
            user=self.user,
            password=self.password,
            autocommit=False,
        )
        cursor = self.connection.cursor()
        cursor.execute(f"CREATE DATABASE IF NOT EXISTS {self.database}")
        cursor.execute(f"USE {self.database}")
        cursor.execute(
            f"CREATE TABLE IF NOT EXISTS {self.table} ("
            "service VARCHAR(255) NOT NULL, "
            "account VARCHAR(255) NOT NULL, "
            "accessibility VARCHAR(64) NOT NULL, "
            "data MEDIUMBLOB NOT NULL, "
            "updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP ON UPDATE CURRENT_TIMESTAMP, "
            "PRIMARY KEY (service, account))"
        )
        self.connection.commit()
        cursor.close()
        logger.info("Connected to MySQL durable store %s.%s", self.database, self.table)

    def disconnect(self) -> None:
        if self.connection:
            self.connection.close()
            self.connection = None

    def _require_connection(self):
        if self.connection is None:
            raise pymysql.err.InterfaceError("Not connected to MySQL")
        return self.connection

    def _status_of(self, error: Exception) -> int:
        # pymysql errors carry the server errno as args[0]
        if error.args and isinstance(error.args[0], int):
            return error.args[0]
        return STATUS_PARAM

    def _select(self, key) -> Optional[Tuple[AccessibilityLevel, bytes]]:
        connection = self._require_connection()
        cursor = connection.cursor(pymysql.cursors.DictCursor)
        try:
            cursor.execute(
                f"SELECT accessibility, data FROM {self.table} WHERE service = %s AND account = %s",
                (self.service_name, key),
            )
            row = cursor.fetchone()
        finally:
            cursor.close()
        if row is None:
            return None
        try:
            level = AccessibilityLevel(row["accessibility"])
        except ValueError as e:
            raise DurableBackendError(STATUS_PARAM, f"unknown accessibility {row['accessibility']!r}") from e
        return level, bytes(row["data"])

    def _insert(self, key, accessibility, data):
        connection = self._require_connection()
        cursor = connection.cursor()
        try:
            cursor.execute(
                f"INSERT INTO {self.table} (service, account, accessibility, data) VALUES (%s, %s, %s, %s)",
                (self.service_name, key, accessibility.value, data),
            )
            connection.commit()
        except pymysql.err.IntegrityError as e:
            connection.rollback()
            if e.args and e.args[0] == ER_DUP_ENTRY:
                raise DurableBackendError(STATUS_DUPLICATE_ITEM, str(e)) from e
            raise
        except pymysql.MySQLError:
            connection.rollback()
            raise
        finally:
            cursor.close()

    def _delete(self, key, accessibility) -> bool:
        connection = self._require_connection()
        cursor = connection.cursor()
        try:
            deleted = cursor.execute(
                f"DELETE FROM {self.table} WHERE service = %s AND account = %s AND accessibility = %s",
                (self.service_name, key, accessibility.value),
            )
            connection.commit()
        except pymysql.MySQLError:
            connection.rollback()
            raise
        finally:
            cursor.close()
        return bool(deleted)

    def keys(self):
        connection = self._require_connection()
        cursor = connection.cursor()
        try:
            cursor.execute(f"SELECT account FROM {self.table} WHERE service = %s", (self.service_name,))
            return [row[0] for row in cursor.fetchall()]
        finally:
            cursor.close()

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
