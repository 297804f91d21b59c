"""
Reset of the treatviewers test database.

The reset runs in three phases over every collection of the plan, one phase
completing on all collections before the next one starts:

1. drop every index (the implicit ``_id_`` index is kept by MongoDB),
2. delete every document,
3. create the planned indexes.

Driver errors are never caught here, except the ``NamespaceNotFound`` answer
MongoDB gives to ``dropIndexes`` on a collection that does not exist yet.
"""

import logging
from typing import Iterable, Optional
from pymongo.database import Database
from pymongo.errors import OperationFailure
from treatviewers_env.db.indexes import RESET_PLAN, IndexSpec

logger = logging.getLogger(__name__)

Plan = Iterable[tuple[str, list[IndexSpec]]]

NAMESPACE_NOT_FOUND = 26
DEFAULT_INDEX_NAME = "_id_"


def _require_db(db: Optional[Database]) -> Database:
    if db is None:
        raise RuntimeError("MongoDB connection not available; cannot reset the environment.")
    return db


def drop_all_indexes(db: Database, plan: Plan = RESET_PLAN) -> None:
    dropped = 0
    for coll_name, _ in plan:
        try:
            db[coll_name].drop_indexes()
        except OperationFailure as exc:
            if exc.code != NAMESPACE_NOT_FOUND:
                raise
            logger.debug("Collection '%s' does not exist; no indexes to drop.", coll_name)
            continue
        logger.debug("Dropped indexes of '%s'.", coll_name)
        dropped += 1
    logger.info("Dropped indexes on %d collections.", dropped)


def purge_collections(db: Database, plan: Plan = RESET_PLAN) -> None:
    deleted = 0
    for coll_name, _ in plan:
        result = db[coll_name].delete_many({})
        logger.debug("Deleted %d documents from '%s'.", result.deleted_count, coll_name)
        deleted += result.deleted_count
    logger.info("Deleted %d documents in total.", deleted)


def create_indexes(db: Database, plan: Plan = RESET_PLAN) -> None:
    created = 0
    for coll_name, specs in plan:
        for spec in specs:
            name = db[coll_name].create_index(spec.key_list(), unique=spec.unique)
            logger.debug("Created index '%s' on '%s' (unique=%s).", name, coll_name, spec.unique)
            created += 1
    logger.info("Created %d indexes.", created)


def reset_environment(db: Optional[Database], plan: Plan = RESET_PLAN) -> None:
    """
    Empties every collection of the plan and rebuilds its indexes.

    Parameters:
    - db (Database): open handle on the target database; None means no connection.
    - plan: ordered (collection name, index specs) pairs, RESET_PLAN by default.

    Raises RuntimeError without touching anything when db is None. Any driver
    error aborts the reset where it happens and is raised as is.
    """
    db = _require_db(db)
    plan = list(plan)
    drop_all_indexes(db, plan)
    purge_collections(db, plan)
    create_indexes(db, plan)
    logger.info("Environment of database '%s' reset (%d collections).", db.name, len(plan))


def _normalize_keys(keys) -> list[tuple[str, object]]:
    normalized = []
    for field_name, direction in keys:
        # The server may report directions as doubles (1.0)
        if isinstance(direction, float):
            direction = int(direction)
        normalized.append((field_name, direction))
    return normalized


def verify_environment(db: Optional[Database], plan: Plan = RESET_PLAN) -> list[str]:
    """
    Returns the differences between the database and the plan, empty when it conforms.
    Nothing is written.
    """
    db = _require_db(db)
    problems: list[str] = []
    for coll_name, specs in plan:
        collection = db[coll_name]
        count = collection.count_documents({})
        if count:
            problems.append(f"{coll_name}: holds {count} documents")

        existing = {
            name: (_normalize_keys(info.get("key", [])), bool(info.get("unique", False)))
            for name, info in collection.index_information().items()
            if name != DEFAULT_INDEX_NAME
        }
        expected = [(spec.key_list(), spec.unique) for spec in specs]
        for keys, unique in expected:
            matches = [name for name, found in existing.items() if found == (keys, unique)]
            if len(matches) != 1:
                problems.append(f"{coll_name}: expected one index on {keys} (unique={unique}), found {len(matches)}")
        for name, found in existing.items():
            if found not in expected:
                problems.append(f"{coll_name}: unexpected index '{name}' on {found[0]} (unique={found[1]})")
    return problems
