"""
Auth Service - login, registration, and identity lookup.

Registration of a student writes a user and its student record in one
transaction: either both exist afterwards or neither does.
"""

import logging
import re
from typing import Any, Callable, Iterable, Optional

from pymongo.client_session import ClientSession

from app.core.auth import TokenManager, get_token_manager, hash_password, verify_password
from app.core.config import get_settings
from app.core.errors import (
    DuplicateEmail,
    Forbidden,
    InvalidCredentials,
    InvalidEmailFormat,
    InvalidStudentFields,
    MissingFields,
    NotFound,
    ValidationFailed,
    WeakPassword,
)
from app.db.mongodb import run_in_transaction
from app.schemas.schemas import (
    MIN_PASSWORD_LENGTH,
    STUDENT_MAX_AGE,
    STUDENT_MIN_AGE,
    LoginRequest,
    LoginResponse,
    ProfileResponse,
    RegisterRequest,
    RegisterResponse,
    UserRole,
)
from app.services.mongo_service import StudentStore, UserStore

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")
MAX_COURSE_LENGTH = 100
MAX_STUDENT_NAME_LENGTH = 100


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def parse_student_age(value: Any) -> int:
    """Accept ints and numeric strings within the student age policy."""
    if isinstance(value, bool) or value is None:
        raise InvalidStudentFields("Age is required for student registration")
    try:
        age = float(value)
    except (TypeError, ValueError, OverflowError):
        raise InvalidStudentFields("Age must be a number")
    if not age.is_integer():
        raise InvalidStudentFields("Age must be an integer")
    age = int(age)
    if age < STUDENT_MIN_AGE or age > STUDENT_MAX_AGE:
        raise InvalidStudentFields(
            f"Age must be between {STUDENT_MIN_AGE} and {STUDENT_MAX_AGE}"
        )
    return age


class AuthService:
    """
    Verifies credentials and issues tokens.

    Args:
        users / students: stores to read and write
        tokens: signs and verifies session tokens
        login_roles: roles allowed to log in
        allow_admin_registration: whether /register may create admins
        transaction: runs a callback(session) atomically
    """

    def __init__(
        self,
        users: UserStore,
        students: StudentStore,
        tokens: TokenManager,
        login_roles: Iterable[str] = ("admin",),
        allow_admin_registration: bool = False,
        transaction: Callable[[Callable[[ClientSession], Any]], Any] = run_in_transaction,
    ):
        self.users = users
        self.students = students
        self.tokens = tokens
        self.login_roles = list(login_roles)
        self.allow_admin_registration = allow_admin_registration
        self.transaction = transaction

    # --------------------------------------------------------
    # Login
    # --------------------------------------------------------

    def login(self, request: LoginRequest) -> LoginResponse:
        if _blank(request.email) or not request.password:
            raise MissingFields("Please provide email and password")

        user = self.users.get_by_email(request.email, roles=self.login_roles)
        # One message for unknown email and wrong password
        if user is None or not verify_password(request.password, user.get("password")):
            logger.warning("Failed login attempt")
            raise InvalidCredentials()

        user_id = str(user["_id"])
        logger.info("User %s logged in", user_id)
        return LoginResponse(
            id=user_id,
            email=user["email"],
            name=user.get("name"),
            role=user["role"],
            token=self.tokens.create_access_token(user_id),
        )

    # --------------------------------------------------------
    # Registration
    # --------------------------------------------------------

    def _validate_registration(self, request: RegisterRequest) -> str:
        """Check the payload, return the effective role."""
        if _blank(request.name) or _blank(request.email) or not request.password:
            raise MissingFields()

        if not EMAIL_PATTERN.search(request.email.strip()):
            raise InvalidEmailFormat()

        if len(request.password) < MIN_PASSWORD_LENGTH:
            raise WeakPassword()

        role = (request.role or UserRole.user.value).strip().lower()
        if role not in {r.value for r in UserRole}:
            raise ValidationFailed(f"Invalid role: {request.role}")
        if role == UserRole.admin.value and not self.allow_admin_registration:
            raise Forbidden("Admin accounts cannot be self-registered")
        return role

    def register(self, request: RegisterRequest) -> RegisterResponse:
        role = self._validate_registration(request)

        age = None
        course = None
        if role == UserRole.student.value:
            age = parse_student_age(request.age)
            if len(request.name.strip()) > MAX_STUDENT_NAME_LENGTH:
                raise InvalidStudentFields(
                    f"Name cannot be longer than {MAX_STUDENT_NAME_LENGTH} characters"
                )
            if _blank(request.course):
                raise InvalidStudentFields("Course is required for student registration")
            course = request.course.strip()
            if len(course) > MAX_COURSE_LENGTH:
                raise InvalidStudentFields(
                    f"Course name cannot be longer than {MAX_COURSE_LENGTH} characters"
                )

        if self.users.email_taken(request.email):
            raise DuplicateEmail("User with this email already exists")
        if role == UserRole.student.value and self.students.email_taken(request.email):
            raise DuplicateEmail("Student with this email already exists")

        name = request.name.strip()
        password_hash = hash_password(request.password)

        if role == UserRole.student.value:
            def create_user_and_student(session: ClientSession) -> dict:
                created = self.users.insert(name, request.email, password_hash, role, session=session)
                self.students.insert(
                    name, request.email, age, course, owner=created["_id"], session=session
                )
                return created

            user = self.transaction(create_user_and_student)
        else:
            user = self.users.insert(name, request.email, password_hash, role)

        user_id = str(user["_id"])
        logger.info("Registered user %s with role %s", user_id, role)
        return RegisterResponse(
            id=user_id,
            email=user["email"],
            role=user["role"],
            token=self.tokens.create_access_token(user_id),
        )

    # --------------------------------------------------------
    # Identity
    # --------------------------------------------------------

    def verify_token(self, token: str) -> str:
        """Return the user id carried by `token` (TokenExpired / TokenInvalid)."""
        return self.tokens.decode_token(token)

    def get_current_identity(self, user_id: str) -> ProfileResponse:
        user = self.users.get_by_id(user_id)
        if user is None:
            raise NotFound("User not found")
        return ProfileResponse(
            id=str(user["_id"]), name=user.get("name"), email=user["email"], role=user["role"]
        )

    def ensure_bootstrap_admin(self, name: str, email: str, password: str) -> Optional[str]:
        """Create the configured first admin unless the email is already in use."""
        if _blank(email) or not password:
            return None
        if self.users.email_taken(email):
            return None
        user = self.users.insert(name.strip() or "Administrator", email, hash_password(password), "admin")
        logger.info("Bootstrap admin %s created", user["_id"])
        return str(user["_id"])


def get_auth_service() -> AuthService:
    """Get auth service instance wired from the current settings."""
    settings = get_settings()
    return AuthService(
        users=UserStore(),
        students=StudentStore(),
        tokens=get_token_manager(),
        login_roles=settings.login_roles,
        allow_admin_registration=settings.allow_admin_registration,
        transaction=run_in_transaction,
    )
