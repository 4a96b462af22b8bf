from bson import ObjectId

from conftest import auth_headers, make_user


def test_admin_routes_require_token(client):
    response = client.get("/api/admins")

    assert response.status_code == 401


def test_admin_routes_reject_non_admins(client, register_student):
    student = register_student()

    response = client.get("/api/admins", headers=student["headers"])

    assert response.status_code == 403
    assert response.json()["error"] == "User role student is not authorized to access this route"


def test_list_admins_newest_first_without_passwords(client, admin):
    make_user(name="Second", email="second@school.edu")
    make_user(name="Plain User", email="plain@school.edu", role="user")

    response = client.get("/api/admins", headers=admin["headers"])

    assert response.status_code == 200
    body = response.json()
    assert [item["email"] for item in body] == ["second@school.edu", "root@school.edu"]
    assert all("password" not in item for item in body)


def test_get_admin(client, admin):
    response = client.get(f"/api/admins/{admin['id']}", headers=admin["headers"])

    assert response.status_code == 200
    assert response.json()["email"] == "root@school.edu"


def test_get_admin_not_found(client, admin):
    response = client.get(f"/api/admins/{ObjectId()}", headers=admin["headers"])

    assert response.status_code == 404
    assert response.json()["error"] == "Admin not found"


def test_get_admin_with_malformed_id(client, admin):
    response = client.get("/api/admins/not-an-id", headers=admin["headers"])

    assert response.status_code == 404
    assert response.json()["error"] == "Resource not found with id of not-an-id"


def test_create_admin_forces_admin_role(client, admin, mongo):
    response = client.post(
        "/api/admins",
        json={"name": "New Admin", "email": "New@School.edu"},
        headers=admin["headers"],
    )

    assert response.status_code == 201
    body = response.json()
    assert body["role"] == "admin"
    assert body["email"] == "new@school.edu"
    assert "password" not in body
    assert mongo["users"].find_one({"email": "new@school.edu"})["password"] is None


def test_created_admin_with_password_can_log_in(client, admin):
    client.post(
        "/api/admins",
        json={"name": "New Admin", "email": "new@school.edu", "password": "new-admin-pass"},
        headers=admin["headers"],
    )

    response = client.post(
        "/api/auth/login", json={"email": "new@school.edu", "password": "new-admin-pass"}
    )

    assert response.status_code == 200


def test_create_admin_rejects_other_roles(client, admin):
    response = client.post(
        "/api/admins",
        json={"name": "Sneaky", "email": "sneaky@school.edu", "role": "student"},
        headers=admin["headers"],
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Validation failed"


def test_create_admin_validation_errors_are_listed(client, admin):
    response = client.post(
        "/api/admins", json={"name": "A", "email": "nope"}, headers=admin["headers"]
    )

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert len(body["errors"]) == 2
    assert any(message.startswith("name:") for message in body["errors"])
    assert any(message.startswith("email:") for message in body["errors"])


def test_create_admin_duplicate_email(client, admin):
    response = client.post(
        "/api/admins",
        json={"name": "Copy", "email": "ROOT@school.edu"},
        headers=admin["headers"],
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Admin with this email already exists"


def test_update_admin_partial(client, admin):
    other = make_user(name="Other", email="other@school.edu")

    response = client.put(
        f"/api/admins/{other['_id']}", json={"name": "Renamed"}, headers=admin["headers"]
    )

    assert response.status_code == 200
    assert response.json()["name"] == "Renamed"
    assert response.json()["email"] == "other@school.edu"


def test_update_admin_requires_a_field(client, admin):
    response = client.put(f"/api/admins/{admin['id']}", json={}, headers=admin["headers"])

    assert response.status_code == 400


def test_update_admin_email_collision(client, admin):
    other = make_user(name="Other", email="other@school.edu")

    response = client.put(
        f"/api/admins/{other['_id']}", json={"email": "root@school.edu"}, headers=admin["headers"]
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Email already in use by another admin"


def test_update_admin_keeping_own_email(client, admin):
    response = client.put(
        f"/api/admins/{admin['id']}",
        json={"name": "Still Root", "email": "root@school.edu"},
        headers=admin["headers"],
    )

    assert response.status_code == 200


def test_update_admin_not_found(client, admin):
    response = client.put(
        f"/api/admins/{ObjectId()}", json={"name": "Ghost"}, headers=admin["headers"]
    )

    assert response.status_code == 404


def test_delete_admin_also_removes_owned_student(client, admin, mongo, students):
    other = make_user(name="Other", email="other@school.edu")
    students.insert("Other", "other@school.edu", 30, "Math", owner=other["_id"])

    response = client.delete(f"/api/admins/{other['_id']}", headers=admin["headers"])

    assert response.status_code == 200
    assert response.json() == {"message": "Admin deleted successfully", "success": True}
    assert mongo["users"].find_one({"_id": other["_id"]}) is None
    assert mongo["students"].count_documents({}) == 0


def test_delete_admin_not_found(client, admin):
    response = client.delete(f"/api/admins/{ObjectId()}", headers=admin["headers"])

    assert response.status_code == 404


def test_deleted_admin_token_stops_working(client, admin):
    other = make_user(name="Other", email="other@school.edu")
    headers = auth_headers(other["_id"])
    client.delete(f"/api/admins/{other['_id']}", headers=admin["headers"])

    response = client.get("/api/admins", headers=headers)

    assert response.status_code == 401


def test_update_admin_strips_name(client, admin):
    response = client.put(
        f"/api/admins/{admin['id']}", json={"name": "  Bob  "}, headers=admin["headers"]
    )

    assert response.status_code == 200
    assert response.json()["name"] == "Bob"
