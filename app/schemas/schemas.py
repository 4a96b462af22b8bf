"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator
from typing import Optional, List, Literal, Union
from datetime import datetime
from enum import Enum


# Single age policy for every student path (registration, create, update)
STUDENT_MIN_AGE = 16
STUDENT_MAX_AGE = 100
MIN_PASSWORD_LENGTH = 6


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    admin = "admin"
    student = "student"
    user = "user"


# ============================================================
# AUTH SCHEMAS
# ============================================================

# Auth bodies are loosely typed on purpose: the auth service checks them
# field by field so each failure gets its own message.

class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class RegisterRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None
    age: Optional[Union[int, float, str]] = None
    course: Optional[str] = None


class LoginResponse(BaseModel):
    id: str
    email: str
    name: Optional[str] = None
    role: str
    token: str


class RegisterResponse(BaseModel):
    success: bool = True
    id: str
    email: str
    role: str
    token: str
    message: str = "Registration successful!"


class ProfileResponse(BaseModel):
    id: str
    name: Optional[str] = None
    email: str
    role: str


# ============================================================
# ADMIN SCHEMAS
# ============================================================

class AdminCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    role: Literal["admin"] = "admin"
    password: Optional[str] = Field(None, min_length=MIN_PASSWORD_LENGTH)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        return value.strip()


class AdminUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    email: Optional[EmailStr] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: Optional[str]) -> Optional[str]:
        return value.strip() if value is not None else None

    @model_validator(mode="after")
    def at_least_one_field(self):
        if self.name is None and self.email is None:
            raise ValueError("Provide at least one of name or email")
        return self


class UserResponse(BaseModel):
    id: str
    name: Optional[str] = None
    email: str
    role: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================================
# STUDENT SCHEMAS
# ============================================================

class StudentCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    age: int = Field(..., ge=STUDENT_MIN_AGE, le=STUDENT_MAX_AGE)
    course: str = Field(..., min_length=1, max_length=100)

    @field_validator("name", "course")
    @classmethod
    def strip_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class StudentUpdate(BaseModel):
    """Only these fields are mutable; unknown keys are ignored."""
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    age: Optional[int] = Field(None, ge=STUDENT_MIN_AGE, le=STUDENT_MAX_AGE)
    course: Optional[str] = Field(None, min_length=1, max_length=100)

    @field_validator("name", "course")
    @classmethod
    def strip_text(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class StudentResponse(BaseModel):
    id: str
    name: str
    email: str
    age: int
    course: str
    owner: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    errors: Optional[List[str]] = None
    stack: Optional[str] = None
