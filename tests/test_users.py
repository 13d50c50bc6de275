from sqlalchemy.orm import Session


# ============================================================================
# LIST / GET USER TESTS
# ============================================================================


def test_list_users(client, db: Session, member_token: str, member_user: dict, admin_user: dict):
    """Any authenticated user can list the crew."""
    response = client.get(
        "/api/v1/users",
        headers={"Authorization": f"Bearer {member_token}"},
    )
    assert response.status_code == 200
    data = response.json()
    assert [user["email"] for user in data] == [admin_user["email"], member_user["email"]]
    assert all("password_hash" not in user for user in data)
    assert all("is_admin" not in user for user in data)


def test_list_users_without_token(client, db: Session):
    response = client.get("/api/v1/users")
    assert response.status_code == 401


def test_get_user_by_id(client, db: Session, member_token: str, admin_user: dict):
    response = client.get(
        f"/api/v1/users/{admin_user['id']}",
        headers={"Authorization": f"Bearer {member_token}"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == admin_user["id"]
    assert data["name"] == admin_user["name"]


def test_get_user_by_id_not_found(client, db: Session, member_token: str):
    """Test getting non-existent user returns 404."""
    response = client.get(
        "/api/v1/users/999999",
        headers={"Authorization": f"Bearer {member_token}"},
    )
    assert response.status_code == 404
    assert response.json() == {"detail": "User not found", "code": "NOT_FOUND"}


# ============================================================================
# PROFILE TESTS
# ============================================================================


def test_get_profile(client, db: Session, member_token: str, member_user: dict):
    response = client.get(
        "/api/v1/users/profile",
        headers={"Authorization": f"Bearer {member_token}"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == member_user["id"]
    assert data["is_admin"] is False
    assert data["bio"] is None
    assert "password_hash" not in data


def test_update_profile(client, db: Session, member_token: str, member_user: dict):
    response = client.put(
        "/api/v1/users/profile",
        json={"title": "Gaffer", "department": "Lighting", "phone": "+1 555 0100"},
        headers={"Authorization": f"Bearer {member_token}"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Gaffer"
    assert data["department"] == "Lighting"
    assert data["phone"] == "+1 555 0100"
    # Untouched fields keep their values
    assert data["name"] == member_user["name"]
    assert data["email"] == member_user["email"]


def test_update_profile_ignores_privileged_fields(client, db: Session, member_token: str):
    response = client.put(
        "/api/v1/users/profile",
        json={"is_admin": True, "email": "hijack@example.com", "bio": "Grip"},
        headers={"Authorization": f"Bearer {member_token}"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["is_admin"] is False
    assert data["email"] == "member@crew.example.com"
    assert data["bio"] == "Grip"


def test_update_profile_name_too_short(client, db: Session, member_token: str):
    response = client.put(
        "/api/v1/users/profile",
        json={"name": "A"},
        headers={"Authorization": f"Bearer {member_token}"},
    )
    assert response.status_code == 422


def test_update_profile_null_clears_field(client, db: Session, member_token: str, member_user: dict):
    headers = {"Authorization": f"Bearer {member_token}"}
    client.put("/api/v1/users/profile", json={"bio": "hello", "title": "Grip"}, headers=headers)

    response = client.put("/api/v1/users/profile", json={"bio": None}, headers=headers)
    assert response.status_code == 200
    data = response.json()
    assert data["bio"] is None
    # Fields left out of the body are untouched
    assert data["title"] == "Grip"
    assert data["name"] == member_user["name"]


def test_update_profile_null_name_rejected(client, db: Session, member_token: str, member_user: dict):
    response = client.put(
        "/api/v1/users/profile",
        json={"name": None},
        headers={"Authorization": f"Bearer {member_token}"},
    )
    assert response.status_code == 422

    profile = client.get(
        "/api/v1/users/profile",
        headers={"Authorization": f"Bearer {member_token}"},
    )
    assert profile.json()["name"] == member_user["name"]


def test_update_profile_without_token(client, db: Session):
    response = client.put("/api/v1/users/profile", json={"bio": "Nope"})
    assert response.status_code == 401
