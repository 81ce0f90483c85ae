# auth_server/managers/mongodb_management.py
import logging
import threading
from enum import Enum
from typing import Optional

from flask import current_app
from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from ..constants.constants_mongodb import MongoDBCollection, MongoDBIndex
from ..constants.constants_server import DB_CONNECTED_MESSAGE


class DatabaseState(str, Enum):
    CONNECTING = "connecting"
    READY = "ready"
    FAILED = "failed"


class DatabaseUnavailableError(Exception):
    """Raised when a request needs the database and it is not READY."""

    def __init__(self, state: DatabaseState, reason: Optional[str] = None):
        self.state = state
        self.reason = reason
        message = f"database is {state.value}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class MongoDBManager:
    """
    Owns the single MongoClient of the process and its readiness state.

    One instance is created per Flask app and kept in app.extensions["mongodb"];
    use get_mongodb() to reach it from a request.

    The connection is opened on a background thread (connect_async) so the HTTP
    listener never waits on it. Handlers that need the database go through
    get_collection(), which waits up to ready_timeout seconds for the connect
    to settle and raises DatabaseUnavailableError otherwise.
    """

    users_collection_name = MongoDBCollection.USERS

    def __init__(
        self,
        uri: Optional[str],
        db_name: str = "auth_db",
        server_selection_timeout_ms: int = 5000,
        socket_timeout_ms: int = 10000,
        max_pool_size: int = 100,
        ready_timeout: float = 2.0,
        client: Optional[MongoClient] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.uri = uri
        self.db_name = db_name
        self.server_selection_timeout_ms = server_selection_timeout_ms
        self.socket_timeout_ms = socket_timeout_ms
        self.max_pool_size = max_pool_size
        self.ready_timeout = ready_timeout
        self.logger = logger or logging.getLogger(__name__)
        self.lifecycle_logger = self.logger.getChild("lifecycle")

        self._client = client
        self._db = None
        self._state = DatabaseState.CONNECTING
        self._error: Optional[str] = None
        self._settled = threading.Event()
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None

    @classmethod
    def from_config(cls, config, logger=None, client=None) -> "MongoDBManager":
        return cls(
            uri=config.get("DB_ACCESS"),
            db_name=config.get("DB_NAME", "auth_db"),
            server_selection_timeout_ms=config.get("MONGO_SERVER_SELECTION_TIMEOUT_MS", 5000),
            socket_timeout_ms=config.get("MONGO_SOCKET_TIMEOUT_MS", 10000),
            max_pool_size=config.get("MONGO_MAX_POOL_SIZE", 100),
            ready_timeout=config.get("DB_READY_TIMEOUT_SEC", 2.0),
            client=client,
            logger=logger,
        )

    # ------------------------ State -------------------------

    @property
    def state(self) -> DatabaseState:
        return self._state

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def is_ready(self) -> bool:
        return self._state is DatabaseState.READY

    def _settle(self, state: DatabaseState, error: Optional[str] = None) -> DatabaseState:
        self._state = state
        self._error = error
        self._settled.set()
        return state

    # ------------------------ Connection -------------------------

    def connect_async(self) -> threading.Thread:
        """Start connecting in the background and return immediately."""
        with self._lock:
            if self._thread is None:
                self._thread = threading.Thread(
                    target=self.connect, name="mongodb-connect", daemon=True
                )
                self._thread.start()
            return self._thread

    def connect(self) -> DatabaseState:
        """
        Open the client, ping the server and ensure indexes (blocking).

        Settles exactly once; later calls return the settled state.
        """
        with self._lock:
            if self._settled.is_set():
                return self._state

            if self._client is None and not self.uri:
                msg = "DB_ACCESS is not set, database connection failed"
                self.logger.error(f"❌ {msg}")
                return self._settle(DatabaseState.FAILED, msg)

            try:
                if self._client is None:
                    self._client = MongoClient(
                        self.uri,
                        serverSelectionTimeoutMS=self.server_selection_timeout_ms,
                        socketTimeoutMS=self.socket_timeout_ms,
                        maxPoolSize=self.max_pool_size,
                        retryWrites=True,
                        retryReads=True,
                    )
                self._client.admin.command("ping")
                # a database named in the connection string wins over DB_NAME
                self._db = self._client.get_default_database(default=self.db_name)
                self._ensure_indexes()
            except (PyMongoError, ValueError, TypeError) as e:
                # pymongo rejects some malformed URIs with plain ValueError
                msg = f"database connection failed: {e}"
                self.logger.error(f"❌ {msg}")
                return self._settle(DatabaseState.FAILED, msg)

            self.lifecycle_logger.info(DB_CONNECTED_MESSAGE)
            return self._settle(DatabaseState.READY)

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the connect settles (or timeout) and report readiness."""
        self._settled.wait(timeout)
        return self.is_ready

    def require_ready(self, timeout: Optional[float] = None) -> None:
        if self.is_ready:
            return

        if timeout is None:
            timeout = self.ready_timeout
        if self._state is DatabaseState.CONNECTING and timeout > 0:
            self.wait_until_ready(timeout)

        if not self.is_ready:
            raise DatabaseUnavailableError(self._state, self._error)

    def ping(self) -> bool:
        if self._client is None:
            return False
        try:
            self._client.admin.command("ping")
        except PyMongoError as e:
            self.logger.warning(f"database ping failed: {e}")
            return False
        return True

    def close(self) -> None:
        """Release the client; the manager then reports FAILED."""
        with self._lock:
            if self._client is not None:
                self._client.close()
            self._client = None
            self._db = None
            self._settle(DatabaseState.FAILED, "database connection closed")

    # ------------------------ Collections -------------------------

    def get_collection(self, collection_name: str) -> Collection:
        if not collection_name:
            raise ValueError("collection_name is required")

        self.require_ready()
        return self._db[collection_name]

    def _ensure_indexes(self) -> None:
        users = self._db[self.users_collection_name]
        users.create_index(
            [("email", ASCENDING)], unique=True, name=MongoDBIndex.USERS_EMAIL_UNIQUE
        )

    def ensure_indexes(self) -> None:
        """Create all known indexes (idempotent)."""
        self.require_ready()
        self._ensure_indexes()


def get_mongodb() -> MongoDBManager:
    """Return the MongoDBManager of the current Flask app."""
    return current_app.extensions["mongodb"]
