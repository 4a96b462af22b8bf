"""
Admin Service - CRUD over users with the admin role.
"""

import logging
from typing import List

from app.core.auth import hash_password
from app.core.errors import DuplicateEmail, NotFound
from app.schemas.schemas import AdminCreate, AdminUpdate, MessageResponse, UserResponse
from app.services.mongo_service import StudentStore, UserStore, serialize_doc, to_object_id

logger = logging.getLogger(__name__)


class AdminService:

    def __init__(self, users: UserStore, students: StudentStore):
        self.users = users
        self.students = students

    def list_admins(self) -> List[UserResponse]:
        return [UserResponse(**serialize_doc(doc)) for doc in self.users.list_by_role("admin")]

    def get_admin(self, admin_id: str) -> UserResponse:
        admin = self.users.get_by_id(admin_id)
        if admin is None:
            raise NotFound("Admin not found")
        return UserResponse(**serialize_doc(admin))

    def create_admin(self, data: AdminCreate) -> UserResponse:
        if self.users.email_taken(data.email):
            raise DuplicateEmail("Admin with this email already exists")

        password_hash = hash_password(data.password) if data.password else None
        admin = self.users.insert(data.name, data.email, password_hash, "admin")
        logger.info("Admin %s created", admin["_id"])
        return UserResponse(**serialize_doc(admin))

    def update_admin(self, admin_id: str, data: AdminUpdate) -> UserResponse:
        oid = to_object_id(admin_id)
        if self.users.get_by_id(oid) is None:
            raise NotFound("Admin not found")

        changes = data.model_dump(exclude_none=True)
        if "email" in changes and self.users.email_taken(changes["email"], exclude_id=oid):
            raise DuplicateEmail("Email already in use by another admin")

        updated = self.users.update(oid, changes)
        if updated is None:
            # Deleted between the read and the write
            raise NotFound("Admin not found")
        return UserResponse(**serialize_doc(updated))

    def delete_admin(self, admin_id: str) -> MessageResponse:
        admin = self.users.delete(admin_id)
        if admin is None:
            raise NotFound("Admin not found")

        # A user owns at most one student; it goes with the user
        owned = self.students.delete_by_owner(admin["_id"])
        if owned is not None:
            logger.info("Deleted student %s owned by user %s", owned["_id"], admin["_id"])
        logger.info("Admin %s deleted", admin["_id"])
        return MessageResponse(message="Admin deleted successfully")


def get_admin_service() -> AdminService:
    """Get admin service instance."""
    return AdminService(UserStore(), StudentStore())
