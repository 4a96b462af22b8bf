#!/usr/bin/env python3
"""
Connection Check Script

Run this to verify MongoDB is reachable and supports transactions
(student registration needs them).
Usage: python scripts/check_connections.py
"""
import sys
sys.path.insert(0, '.')

from pymongo.errors import PyMongoError

from app.core.config import get_settings
from app.db.mongodb import get_mongo_client, test_mongo_connection


def transactions_supported() -> bool:
    """Transactions need a replica set or a sharded cluster."""
    hello = get_mongo_client().admin.command("hello")
    return bool(hello.get("setName")) or hello.get("msg") == "isdbgrid"


def main():
    settings = get_settings()
    print("=" * 50)
    print("STUDENT RECORDS API - CONNECTION CHECK")
    print("=" * 50)

    print("\n[1] Checking MongoDB...")
    print(f"    URI: {settings.mongodb_uri}")
    print(f"    Database: {settings.mongodb_db}")
    if not test_mongo_connection():
        print("    MongoDB: FAILED")
        sys.exit(1)
    print("    MongoDB: CONNECTED")

    print("\n[2] Checking transaction support...")
    try:
        if transactions_supported():
            print("    Transactions: AVAILABLE")
        else:
            print("    Transactions: UNAVAILABLE (run mongod as a replica set)")
            sys.exit(1)
    except PyMongoError as e:
        print(f"    Transactions: could not check ({e})")
        sys.exit(1)

    print("\n" + "=" * 50)
    print("Connection check complete!")
    print("=" * 50)


if __name__ == "__main__":
    main()
