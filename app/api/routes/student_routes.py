"""
Student Routes

GET /students - List students (admin)
GET /students/me - Get own student record
POST /students - Create standalone student (admin)
GET /students/{student_id} - Get student (admin or owner)
PUT /students/{student_id} - Update name/age/course (admin or owner)
DELETE /students/{student_id} - Delete student and its owning account (admin)
"""

from fastapi import APIRouter, Depends
from typing import List

from app.core.auth import get_current_user, require_admin
from app.schemas.schemas import (
    MessageResponse, ProfileResponse, StudentCreate, StudentResponse, StudentUpdate
)
from app.services.student_service import StudentService, get_student_service

router = APIRouter(prefix="/students", tags=["Students"])


@router.get("", response_model=List[StudentResponse], dependencies=[Depends(require_admin)])
def list_students(service: StudentService = Depends(get_student_service)):
    """All students, newest first."""
    return service.list_students()


# Declared before /{student_id} so "me" is not read as an id
@router.get("/me", response_model=StudentResponse)
def get_my_profile(
    user: ProfileResponse = Depends(get_current_user),
    service: StudentService = Depends(get_student_service),
):
    """Get the student record owned by the caller."""
    return service.get_own_profile(user)


@router.post("", response_model=StudentResponse, status_code=201, dependencies=[Depends(require_admin)])
def create_student(data: StudentCreate, service: StudentService = Depends(get_student_service)):
    """Create a student without a linked account."""
    return service.create_student(data)


@router.get("/{student_id}", response_model=StudentResponse)
def get_student(
    student_id: str,
    user: ProfileResponse = Depends(get_current_user),
    service: StudentService = Depends(get_student_service),
):
    return service.get_student(student_id, user)


@router.put("/{student_id}", response_model=StudentResponse)
def update_student(
    student_id: str,
    data: StudentUpdate,
    user: ProfileResponse = Depends(get_current_user),
    service: StudentService = Depends(get_student_service),
):
    """Only name, age and course can change; other fields are ignored."""
    return service.update_student(student_id, data, user)


@router.delete("/{student_id}", response_model=MessageResponse, dependencies=[Depends(require_admin)])
def delete_student(student_id: str, service: StudentService = Depends(get_student_service)):
    return service.delete_student(student_id)
