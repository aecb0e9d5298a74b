# ==============================================
# MongoVolatileBackend
# ==============================================
#
# PURPOSE:
#   Volatile tier on an application-scoped MongoDB database. The
#   database is dropped together with the application, so entries
#   here have the same lifetime as local preferences.
#
# DOCUMENT SHAPE:
# ---------------
#   {"_id": <key>, "value": <bytes | bool | int | float | str>}
#   Primitives written through the fast paths are stored natively;
#   everything else as BSON binary.
#
# CLASS: MongoVolatileBackend
# ---------------------------
#   Stateful - holds connection to MongoDB.
#
#   Constructor:
#   ------------
#   - __init__(host, port, database, collection="volatile_store",
#              user=None, password=None)
#
#   Methods:
#   --------
#   - connect() -> None         Establish connection and ping.
#   - disconnect() -> None      Close connection.
#   - wipe() -> None            Drop the collection.
#
#   Context Manager:
#   ----------------
#   - __enter__ / __exit__ for `with MongoVolatileBackend(...) as db:` usage.
#
# ==============================================

import logging

from pymongo import MongoClient as PyMongoClient
from pymongo.errors import ConnectionFailure, OperationFailure, PyMongoError

from .base import VolatileBackend

logger = logging.getLogger(__name__)


class NotConnectedError(ConnectionError):
    pass


class MongoVolatileBackend(VolatileBackend):
    name = "mongo-volatile"
    backend_errors = (PyMongoError, NotConnectedError)

    def __init__(self, host, port, database, collection="volatile_store", user=None, password=None):
        # Store connection params. Don't connect yet.
        self.host = host
        self.port = port
        self.database = database
        self.collection_name = collection
        self.user = user
        self.password = password
        self.client = None

    def connect(self):
        try:
            if self.user and self.password:
                uri = f"mongodb://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"
            else:
                uri = f"mongodb://{self.host}:{self.port}/{self.database}"
            self.client = PyMongoClient(uri)
            self.client.admin.command("ping")
            logger.info("Connected to MongoDB at %s:%s", self.host, self.port)
        except ConnectionFailure as e:
            logger.error("Could not connect to MongoDB: %s", e)
            raise
        except OperationFailure as e:
            logger.error("MongoDB authentication failed: %s", e)
            raise

    def disconnect(self):
        if self.client:
            self.client.close()
            logger.info("Disconnected from MongoDB.")
            self.client = None

    @property
    def collection(self):
        if not self.client:
            raise NotConnectedError("Not connected to MongoDB.")
        return self.client[self.database][self.collection_name]

    def _fetch(self, key):
        doc = self.collection.find_one({"_id": key})
        if doc is None:
            return None
        return doc.get("value")

    def _put(self, key, value):
        self.collection.replace_one({"_id": key}, {"_id": key, "value": value}, upsert=True)

    def _discard(self, key):
        self.collection.delete_one({"_id": key})

    def keys(self):
        return [doc["_id"] for doc in self.collection.find({}, {"_id": 1})]

    def wipe(self) -> None:
        self.collection.drop()

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
