import inspect
from datetime import timedelta

import pytest
from bson import ObjectId
from jose import jwt

from app.core.auth import (
    TokenManager,
    get_current_user,
    hash_password,
    require_roles,
    verify_password,
)
from app.core.errors import (
    DuplicateEmail,
    InvalidStudentFields,
    NotFound,
    TokenExpired,
    TokenInvalid,
)
from app.schemas.schemas import LoginRequest, RegisterRequest
from app.services.auth_service import AuthService, parse_student_age
from app.services.mongo_service import StudentStore, UserStore
from conftest import fake_transaction


@pytest.fixture
def tokens():
    return TokenManager(secret_key="unit-secret", algorithm="HS256", expire_days=30)


@pytest.fixture
def service(tokens):
    return AuthService(
        users=UserStore(),
        students=StudentStore(),
        tokens=tokens,
        transaction=fake_transaction,
    )


def _student_request(**overrides) -> RegisterRequest:
    data = {
        "name": "Ann",
        "email": "ann@x.com",
        "password": "secret1",
        "role": "student",
        "age": 20,
        "course": "CS",
    }
    data.update(overrides)
    return RegisterRequest(**data)


def test_token_round_trip(tokens):
    subject = str(ObjectId())

    assert tokens.decode_token(tokens.create_access_token(subject)) == subject


def test_token_expires_after_thirty_days(tokens):
    token = tokens.create_access_token("abc")
    claims = jwt.get_unverified_claims(token)

    assert claims["exp"] - claims["iat"] == int(timedelta(days=30).total_seconds())


def test_expired_token(tokens):
    token = tokens.create_access_token("abc", expires_delta=timedelta(minutes=-1))

    with pytest.raises(TokenExpired):
        tokens.decode_token(token)


def test_token_signed_with_other_secret(tokens):
    foreign = TokenManager(secret_key="someone-else").create_access_token("abc")

    with pytest.raises(TokenInvalid):
        tokens.decode_token(foreign)


def test_garbage_token(tokens):
    with pytest.raises(TokenInvalid):
        tokens.decode_token("not.a.jwt")


def test_token_without_subject(tokens):
    token = jwt.encode({"foo": "bar"}, "unit-secret", algorithm="HS256")

    with pytest.raises(TokenInvalid):
        tokens.decode_token(token)


def test_password_hash_verifies():
    hashed = hash_password("secret1")

    assert hashed != "secret1"
    assert verify_password("secret1", hashed)
    assert not verify_password("secret2", hashed)
    assert not verify_password("secret1", None)
    assert not verify_password("secret1", "plain-text-value")


@pytest.mark.parametrize("value,expected", [(16, 16), ("42", 42), (100.0, 100)])
def test_parse_student_age_accepts(value, expected):
    assert parse_student_age(value) == expected


@pytest.mark.parametrize("value", [None, True, "abc", 15, 101, 20.5, 10**400])
def test_parse_student_age_rejects(value):
    with pytest.raises(InvalidStudentFields):
        parse_student_age(value)


def test_register_student_sets_owner(service, mongo):
    response = service.register(_student_request())

    student = mongo["students"].find_one({})
    assert str(student["owner"]) == response.id
    assert service.verify_token(response.token) == response.id


def test_failed_student_insert_rolls_back_user(service, mongo, monkeypatch):
    def explode(*args, **kwargs):
        raise RuntimeError("student insert failed")

    monkeypatch.setattr(StudentStore, "insert", explode)

    with pytest.raises(RuntimeError):
        service.register(_student_request())

    assert mongo["users"].count_documents({}) == 0
    assert mongo["students"].count_documents({}) == 0


def test_register_student_with_taken_student_email(service, mongo):
    StudentStore().insert("Ann", "ann@x.com", 20, "CS")

    with pytest.raises(DuplicateEmail):
        service.register(_student_request())

    assert mongo["users"].count_documents({}) == 0


def test_get_current_identity_missing_user(service):
    with pytest.raises(NotFound):
        service.get_current_identity(str(ObjectId()))


def test_bootstrap_admin_is_idempotent(service, mongo):
    first = service.ensure_bootstrap_admin("Root", "root@school.edu", "bootstrap-pass")
    second = service.ensure_bootstrap_admin("Root", "root@school.edu", "bootstrap-pass")

    assert first is not None
    assert second is None
    assert mongo["users"].count_documents({"role": "admin"}) == 1


def test_bootstrap_admin_skipped_without_password(service, mongo):
    assert service.ensure_bootstrap_admin("Root", "root@school.edu", "") is None
    assert mongo["users"].count_documents({}) == 0


def test_login_roles_can_include_students(tokens, mongo):
    service = AuthService(
        users=UserStore(),
        students=StudentStore(),
        tokens=tokens,
        login_roles=["admin", "student"],
        transaction=fake_transaction,
    )
    registered = service.register(_student_request())

    logged_in = service.login(LoginRequest(email="ann@x.com", password="secret1"))

    assert logged_in.id == registered.id
    assert logged_in.role == "student"


def test_auth_dependencies_run_in_threadpool():
    # pymongo blocks, so these must stay plain functions
    assert not inspect.iscoroutinefunction(get_current_user)
    assert not inspect.iscoroutinefunction(require_roles("admin"))
