"""
Database module - MongoDB connection.
"""
from app.db.mongodb import get_mongo_db, run_in_transaction, test_mongo_connection

__all__ = [
    "get_mongo_db",
    "run_in_transaction",
    "test_mongo_connection",
]
