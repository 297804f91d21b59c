import logging
import os
from typing import Optional
from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)

DEFAULT_URI = "mongodb://localhost:27017"
DEFAULT_DB = "treatviewerstest"
DEFAULT_MIN_POOL_SIZE = 5
DEFAULT_MAX_POOL_SIZE = 10
DEFAULT_CONN_TIMEOUT = 10

_client: Optional[MongoClient] = None
_db: Optional[Database] = None
MONGODB_URI = MONGODB_DB = MIN_POOL_SIZE = MAX_POOL_SIZE = CONN_TIMEOUT = None


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name, "")
    try:
        return int(raw)
    except ValueError:
        return default


def config_by_env(uri: Optional[str] = None, db_name: Optional[str] = None) -> None:
    global MONGODB_URI, MONGODB_DB, MIN_POOL_SIZE, MAX_POOL_SIZE, CONN_TIMEOUT
    MONGODB_URI = uri or os.getenv("MONGODB_URI", DEFAULT_URI)
    MONGODB_DB = db_name or os.getenv("MONGODB_DB", DEFAULT_DB)
    MIN_POOL_SIZE = _int_from_env("MONGODB_MIN_POOL_SIZE", DEFAULT_MIN_POOL_SIZE)
    MAX_POOL_SIZE = _int_from_env("MONGODB_MAX_POOL_SIZE", DEFAULT_MAX_POOL_SIZE)
    CONN_TIMEOUT = _int_from_env("MONGODB_CONN_TIMEOUT", DEFAULT_CONN_TIMEOUT)


def connect(uri: Optional[str] = None, db_name: Optional[str] = None, reset: bool = False) -> None:
    global _client, _db
    # Case of reset of the DB connection
    if reset:
        close_client()
    if not reset and _client is not None and _db is not None:
        return
    config_by_env(uri, db_name)
    timeout_ms = CONN_TIMEOUT * 1000
    try:
        _client = MongoClient(
            MONGODB_URI,
            minPoolSize=MIN_POOL_SIZE,
            maxPoolSize=MAX_POOL_SIZE,
            connectTimeoutMS=timeout_ms,
            serverSelectionTimeoutMS=timeout_ms,
        )
        _client.admin.command("ping")
    except PyMongoError as exc:
        logger.warning("Unable to reach MongoDB at %s: %s", MONGODB_URI, exc)
        close_client()
        return
    _db = _client[MONGODB_DB]


def get_client() -> Optional[MongoClient]:
    return _client


def get_db() -> Optional[Database]:
    return _db


def close_client() -> None:
    global _client, _db
    if _client:
        _client.close()
    _client = None
    _db = None


def ping() -> bool:
    if _client is None:
        return False
    try:
        _client.admin.command("ping")
        return True
    except PyMongoError:
        return False
