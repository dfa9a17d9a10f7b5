"""Integration tests for /api/settings."""

import json

from tests.factories import auth_headers


def test_defaults_use_camel_case_keys(client, viewer):
    data = client.get("/api/settings/", headers=auth_headers(viewer)).json()

    assert data["companyName"] == "Acme Corporation"
    assert data["sessionTimeoutMinutes"] == 60
    assert "company_name" not in data


def test_admin_updates_and_values_persist(client, admin, preferences_file):
    response = client.put(
        "/api/settings/",
        json={"companyName": "Globex", "weekly_reports": True, "unknownKey": 1},
        headers=auth_headers(admin),
    )

    assert response.status_code == 200
    assert response.json()["companyName"] == "Globex"
    assert response.json()["weeklyReports"] is True

    stored = json.loads(preferences_file.read_text(encoding="utf-8"))
    assert stored["company_name"] == "Globex"
    assert "unknownKey" not in stored


def test_non_admin_cannot_update(client, reviewer):
    response = client.put("/api/settings/", json={"companyName": "Nope"}, headers=auth_headers(reviewer))
    assert response.status_code == 403


def test_invalid_value_is_rejected_without_writing(client, admin, preferences_file):
    response = client.put(
        "/api/settings/", json={"sessionTimeoutMinutes": 1}, headers=auth_headers(admin)
    )

    assert response.status_code == 422
    assert response.json()["violations"][0]["field"] == "sessionTimeoutMinutes"
    assert not preferences_file.exists()


def test_export_then_import(client, admin):
    client.put("/api/settings/", json={"theme": "dark"}, headers=auth_headers(admin))

    exported = client.get("/api/settings/export", headers=auth_headers(admin))
    assert exported.status_code == 200
    assert "budgetflow-settings-" in exported.headers["content-disposition"]

    client.post("/api/settings/reset", headers=auth_headers(admin))
    assert client.get("/api/settings/", headers=auth_headers(admin)).json()["theme"] == "system"

    imported = client.post(
        "/api/settings/import",
        files={"file": ("settings.json", exported.content, "application/json")},
        headers=auth_headers(admin),
    )
    assert imported.status_code == 200
    assert imported.json()["theme"] == "dark"


def test_import_rejects_non_json(client, admin):
    response = client.post(
        "/api/settings/import",
        files={"file": ("settings.json", b"not json", "application/json")},
        headers=auth_headers(admin),
    )
    assert response.status_code == 422
    assert response.json()["violations"][0]["code"] == "invalid_json"


def test_import_rejects_non_utf8_upload(client, admin, preferences_file):
    response = client.post(
        "/api/settings/import",
        files={"file": ("settings.json", b"\xff\xfe{\x00}", "application/json")},
        headers=auth_headers(admin),
    )
    assert response.status_code == 422
    assert response.json()["violations"][0]["code"] == "invalid_encoding"
    assert not preferences_file.exists()
