"""Integration tests for /api/users and /api/auth."""

from tests.factories import auth_headers

NEW_USER = {
    "username": "dana_w",
    "email": "dana@acme.com",
    "password": "Welcome2024!",
    "full_name": "Dana White",
    "role": "department_manager",
    "department": "IT",
    "cost_center": "IT-001",
}


class TestAuth:
    def test_login_with_form_returns_token(self, client, it_user):
        response = client.post("/api/auth/login", data={"username": "ivan", "password": "Secret123!"})

        assert response.status_code == 200
        token = response.json()["access_token"]
        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"}).json()
        assert me["username"] == "ivan"
        assert me["department"] == "IT"
        assert "password_hash" not in me

    def test_wrong_password(self, client, it_user):
        response = client.post("/api/auth/login", data={"username": "ivan", "password": "nope"})
        assert response.status_code == 401

    def test_garbage_token(self, client):
        response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401


class TestUserManagement:
    def test_create_user(self, client, admin):
        response = client.post("/api/users/", json=NEW_USER, headers=auth_headers(admin))

        assert response.status_code == 201
        data = response.json()
        assert data["role"] == "department_manager"
        assert data["role_label"] == "Department Manager"
        assert data["is_active"] is True
        assert "password" not in data

        login = client.post("/api/auth/login", data={"username": "dana_w", "password": "Welcome2024!"})
        assert login.status_code == 200

    def test_duplicate_username_conflicts(self, client, admin, it_user):
        response = client.post(
            "/api/users/", json={**NEW_USER, "username": "ivan"}, headers=auth_headers(admin)
        )
        assert response.status_code == 409

    def test_department_role_needs_department(self, client, admin):
        payload = {k: v for k, v in NEW_USER.items() if k != "department"}
        response = client.post("/api/users/", json=payload, headers=auth_headers(admin))
        assert response.status_code == 422

    def test_non_admin_is_forbidden(self, client, reviewer):
        assert client.get("/api/users/", headers=auth_headers(reviewer)).status_code == 403

    def test_update_role_and_password(self, client, admin, viewer):
        response = client.put(
            f"/api/users/{viewer.id}",
            json={"role": "finance_team", "password": "Changed2024!"},
            headers=auth_headers(admin),
        )

        assert response.status_code == 200
        assert response.json()["role"] == "finance_team"
        login = client.post("/api/auth/login", data={"username": "victor", "password": "Changed2024!"})
        assert login.status_code == 200

    def test_admin_cannot_deactivate_self(self, client, admin):
        response = client.delete(f"/api/users/{admin.id}", headers=auth_headers(admin))
        assert response.status_code == 409

    def test_deactivated_user_cannot_log_in(self, client, admin, viewer):
        response = client.delete(f"/api/users/{viewer.id}", headers=auth_headers(admin))

        assert response.status_code == 200
        assert response.json()["is_active"] is False
        login = client.post("/api/auth/login", data={"username": "victor", "password": "Secret123!"})
        assert login.status_code == 401
