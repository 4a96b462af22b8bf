"""
Student Service - student records and the ownership rules around them.

Admins may act on any student. Any other identity may only read or update
the single student record it owns.
"""

import logging
from typing import List

from app.core.errors import DuplicateEmail, Forbidden, NotFound
from app.schemas.schemas import (
    MessageResponse,
    ProfileResponse,
    StudentCreate,
    StudentResponse,
    StudentUpdate,
)
from app.services.mongo_service import StudentStore, UserStore, serialize_doc, to_object_id

logger = logging.getLogger(__name__)


def _owned_by(student: dict, identity: ProfileResponse) -> bool:
    owner = student.get("owner")
    return owner is not None and str(owner) == identity.id


class StudentService:

    def __init__(self, students: StudentStore, users: UserStore):
        self.students = students
        self.users = users

    def _get_or_404(self, student_id: str) -> dict:
        student = self.students.get_by_id(student_id)
        if student is None:
            raise NotFound("Student not found")
        return student

    def _check_access(self, student: dict, identity: ProfileResponse, action: str) -> None:
        if identity.role == "admin" or _owned_by(student, identity):
            return
        logger.warning("User %s denied %s on student %s", identity.id, action, student["_id"])
        raise Forbidden(f"You can only {action} your own student record")

    def get_own_profile(self, identity: ProfileResponse) -> StudentResponse:
        student = self.students.get_by_owner(identity.id)
        if student is None:
            raise NotFound("Student profile not found")
        return StudentResponse(**serialize_doc(student))

    def create_student(self, data: StudentCreate) -> StudentResponse:
        if self.students.email_taken(data.email):
            raise DuplicateEmail("Student with this email already exists")

        student = self.students.insert(data.name, data.email, data.age, data.course)
        logger.info("Student %s created", student["_id"])
        return StudentResponse(**serialize_doc(student))

    def list_students(self) -> List[StudentResponse]:
        return [StudentResponse(**serialize_doc(doc)) for doc in self.students.list_all()]

    def get_student(self, student_id: str, identity: ProfileResponse) -> StudentResponse:
        student = self._get_or_404(student_id)
        self._check_access(student, identity, "view")
        return StudentResponse(**serialize_doc(student))

    def update_student(
        self, student_id: str, data: StudentUpdate, identity: ProfileResponse
    ) -> StudentResponse:
        student = self._get_or_404(student_id)
        self._check_access(student, identity, "update")

        changes = data.model_dump(exclude_none=True)
        if not changes:
            return StudentResponse(**serialize_doc(student))

        updated = self.students.update(student["_id"], changes)
        if updated is None:
            raise NotFound("Student not found")
        return StudentResponse(**serialize_doc(updated))

    def delete_student(self, student_id: str) -> MessageResponse:
        student = self.students.delete(to_object_id(student_id))
        if student is None:
            raise NotFound(f"Student not found with id of {student_id}")

        owner = student.get("owner")
        if owner is not None:
            self.users.delete(owner)
            logger.info("Deleted user %s owning student %s", owner, student["_id"])
        logger.info("Student %s deleted", student["_id"])
        return MessageResponse(message="Student deleted successfully")


def get_student_service() -> StudentService:
    """Get student service instance."""
    return StudentService(StudentStore(), UserStore())
