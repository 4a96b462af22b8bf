"""
MongoDB Service - CRUD operations for the document collections.

Collections in this database:
1. users    - credential records (email, bcrypt hash, role)
2. students - student records; `owner` links a student to the user
              that may manage it (absent for admin-created students)

Stores only talk to MongoDB. Access rules and validation live in the
resource services.
"""

from datetime import datetime, timezone
from typing import Optional, List, Dict, Any

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING, ReturnDocument
from pymongo.client_session import ClientSession
from pymongo.collection import Collection

from app.core.errors import NotFound
from app.db.mongodb import get_collection, COLLECTIONS

NEWEST_FIRST = [("created_at", DESCENDING), ("_id", DESCENDING)]


# ============================================================
# HELPERS
# ============================================================

def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def to_object_id(value: Any) -> ObjectId:
    """Parse a path id; malformed ids read as missing resources."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        raise NotFound(f"Resource not found with id of {value}")


def serialize_doc(doc: Optional[dict]) -> Optional[dict]:
    """Convert MongoDB document to JSON-serializable dict."""
    if doc is None:
        return None
    data = {key: value for key, value in doc.items() if key not in ("_id", "password")}
    data["id"] = str(doc["_id"])
    if "owner" in data:
        data["owner"] = str(data["owner"]) if data["owner"] is not None else None
    return data


# ============================================================
# USERS COLLECTION (Credential Store)
# ============================================================

class UserStore:
    """
    Handles user documents.
    The password hash stays inside this store; serialize_doc strips it.
    """

    def __init__(self, collection: Optional[Collection] = None):
        self.collection: Collection = (
            collection if collection is not None else get_collection(COLLECTIONS["users"])
        )

    def insert(
        self,
        name: str,
        email: str,
        password_hash: Optional[str],
        role: str,
        session: Optional[ClientSession] = None,
    ) -> dict:
        """Insert a user and return the stored document (with _id)."""
        now = utcnow()
        doc = {
            "name": name,
            "email": normalize_email(email),
            "password": password_hash,
            "role": role,
            "created_at": now,
            "updated_at": now,
        }
        result = self.collection.insert_one(doc, session=session)
        doc["_id"] = result.inserted_id
        return doc

    def get_by_id(self, user_id: Any) -> Optional[dict]:
        return self.collection.find_one({"_id": to_object_id(user_id)})

    def get_by_email(self, email: str, roles: Optional[List[str]] = None) -> Optional[dict]:
        query: Dict[str, Any] = {"email": normalize_email(email)}
        if roles is not None:
            query["role"] = {"$in": list(roles)}
        return self.collection.find_one(query)

    def email_taken(self, email: str, exclude_id: Optional[ObjectId] = None) -> bool:
        query: Dict[str, Any] = {"email": normalize_email(email)}
        if exclude_id is not None:
            query["_id"] = {"$ne": exclude_id}
        return self.collection.find_one(query, projection={"_id": 1}) is not None

    def list_by_role(self, role: str) -> List[dict]:
        return list(self.collection.find({"role": role}).sort(NEWEST_FIRST))

    def update(self, user_id: Any, fields: Dict[str, Any]) -> Optional[dict]:
        """Apply a partial update, return the updated document (None if missing)."""
        changes = dict(fields)
        if "email" in changes:
            changes["email"] = normalize_email(changes["email"])
        changes["updated_at"] = utcnow()
        return self.collection.find_one_and_update(
            {"_id": to_object_id(user_id)},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )

    def delete(self, user_id: Any) -> Optional[dict]:
        """Delete a user, return the removed document (None if missing)."""
        return self.collection.find_one_and_delete({"_id": to_object_id(user_id)})


# ============================================================
# STUDENTS COLLECTION (Student Store)
# ============================================================

class StudentStore:
    """
    Handles student documents.
    At most one student per owner (unique sparse index on `owner`).
    """

    def __init__(self, collection: Optional[Collection] = None):
        self.collection: Collection = (
            collection if collection is not None else get_collection(COLLECTIONS["students"])
        )

    def insert(
        self,
        name: str,
        email: str,
        age: int,
        course: str,
        owner: Optional[ObjectId] = None,
        session: Optional[ClientSession] = None,
    ) -> dict:
        """
        Insert a student document.

        Args:
            owner: id of the user that may self-manage this record. Left out
                of the document entirely when None so the sparse index skips it.
        """
        now = utcnow()
        doc = {
            "name": name.strip(),
            "email": normalize_email(email),
            "age": age,
            "course": course.strip(),
            "created_at": now,
            "updated_at": now,
        }
        if owner is not None:
            doc["owner"] = owner
        result = self.collection.insert_one(doc, session=session)
        doc["_id"] = result.inserted_id
        return doc

    def get_by_id(self, student_id: Any) -> Optional[dict]:
        return self.collection.find_one({"_id": to_object_id(student_id)})

    def get_by_owner(self, owner_id: Any) -> Optional[dict]:
        return self.collection.find_one({"owner": to_object_id(owner_id)})

    def email_taken(self, email: str) -> bool:
        return self.collection.find_one(
            {"email": normalize_email(email)}, projection={"_id": 1}
        ) is not None

    def list_all(self) -> List[dict]:
        return list(self.collection.find().sort(NEWEST_FIRST))

    def update(self, student_id: Any, fields: Dict[str, Any]) -> Optional[dict]:
        changes = dict(fields)
        changes["updated_at"] = utcnow()
        return self.collection.find_one_and_update(
            {"_id": to_object_id(student_id)},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )

    def delete(self, student_id: Any) -> Optional[dict]:
        return self.collection.find_one_and_delete({"_id": to_object_id(student_id)})

    def delete_by_owner(self, owner_id: Any) -> Optional[dict]:
        return self.collection.find_one_and_delete({"owner": to_object_id(owner_id)})
