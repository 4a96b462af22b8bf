"""
MongoDB Connection Utility

MongoDB stores:
- users: credentials (email, bcrypt hash, role)
- students: student records, optionally owned by one user

Registering a student writes to both collections, so that path runs in a
multi-document transaction (needs a replica set or sharded cluster).
"""
import logging
from typing import Any, Callable

from pymongo import ASCENDING, MongoClient
from pymongo.client_session import ClientSession
from pymongo.collection import Collection
from pymongo.database import Database

from app.core.config import get_settings

logger = logging.getLogger(__name__)

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(get_settings().mongodb_uri)
    return _client


def get_mongo_db() -> Database:
    """Get the application database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[get_settings().mongodb_db]
    return _db


def set_mongo_client(client: MongoClient) -> None:
    """Swap the process-wide client (tests, scripts)."""
    global _client, _db
    _client = client
    _db = None


def close_mongo_client() -> None:
    global _client, _db
    if _client is not None:
        _client.close()
    _client = None
    _db = None


def get_collection(name: str) -> Collection:
    """
    Get a specific collection.
    Collections we use:
    - users: credential records
    - students: student records
    """
    db = get_mongo_db()
    return db[name]


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        # ping command checks connection
        client.admin.command('ping')
        return True
    except Exception as e:
        logger.warning("MongoDB connection failed: %s", e)
        return False


def run_in_transaction(callback: Callable[[ClientSession], Any]) -> Any:
    """
    Run `callback(session)` inside one transaction.

    Every write in the callback must pass `session=session`. If the callback
    raises, the transaction is aborted and the exception propagates.
    """
    client = get_mongo_client()
    with client.start_session() as session:
        return session.with_transaction(callback)


# Collection name constants (avoid typos)
COLLECTIONS = {
    "users": "users",
    "students": "students",
}


def init_mongo_indexes():
    """
    Create indexes for uniqueness and query performance.
    Call this once during app startup.
    """
    db = get_mongo_db()

    # Emails are stored lowercased, so a plain unique index is case-insensitive
    db[COLLECTIONS["users"]].create_index("email", unique=True)
    db[COLLECTIONS["users"]].create_index([("role", ASCENDING), ("created_at", -1)])

    db[COLLECTIONS["students"]].create_index("email", unique=True)
    # Standalone students have no owner field; sparse keeps them out of the index
    db[COLLECTIONS["students"]].create_index("owner", unique=True, sparse=True)
    db[COLLECTIONS["students"]].create_index([("created_at", -1)])

    logger.info("MongoDB indexes created successfully")
