"""Integration tests for /api/export."""

import pytest

from tests.factories import auth_headers


@pytest.fixture
def budgets(catalog, add_budget):
    add_budget(department="IT", status="Approved", amount="1234.50")
    add_budget(department="HR", status="Draft", amount="10.00")


class TestCsvExport:
    def test_header_row_and_rows(self, client, admin, budgets):
        response = client.get("/api/export/csv", headers=auth_headers(admin))

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "attachment" in response.headers["content-disposition"]
        assert response.content.startswith(b"\xef\xbb\xbf")

        lines = response.content.decode("utf-8-sig").splitlines()
        assert lines[0] == "Budget ID,Department,Type,Amount,Status,Submitted Date,Reviewed Date"
        assert len(lines) == 3
        assert "1234.50" in response.text

    def test_filters_and_scope_apply(self, client, it_user, budgets):
        response = client.get("/api/export/csv", params={"status": "Approved"}, headers=auth_headers(it_user))

        lines = response.content.decode("utf-8-sig").splitlines()
        assert len(lines) == 2
        assert lines[1].startswith("BUD-000001,IT,")


def test_excel_export_is_xlsx(client, admin, budgets):
    response = client.get("/api/export/excel", headers=auth_headers(admin))

    assert response.status_code == 200
    assert response.content[:2] == b"PK"
    assert response.headers["content-disposition"].endswith('.xlsx"')


def test_pdf_export_is_pdf(client, admin, budgets):
    response = client.get("/api/export/pdf", headers=auth_headers(admin))

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")


def test_export_requires_authentication(client):
    assert client.get("/api/export/csv").status_code == 401
