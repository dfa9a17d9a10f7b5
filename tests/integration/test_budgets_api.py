"""Integration tests for /api/budgets: drafting, scoping and the review lifecycle."""

from sqlalchemy import update
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Query

from budgetflow.domain.errors import ConcurrentModificationError
from budgetflow.domain.lifecycle import plan_transition
from budgetflow.models import Budget
from budgetflow.services import budget_service
from budgetflow.utils.constants import Role
from tests.factories import auth_headers

import pytest

DRAFT = {
    "department": "IT",
    "cost_center": "IT-001",
    "budget_type": "CAPEX",
    "description": "Laptop refresh",
    "line_items": [
        {"category": "Hardware", "description": "Laptop", "quantity": 2, "unit_cost": "1200.00"},
        {"category": "Hardware", "description": "Dock", "quantity": 2, "unit_cost": "150.50"},
    ],
}


def _create(client, user, payload=None):
    response = client.post("/api/budgets/", json=payload or DRAFT, headers=auth_headers(user))
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateBudget:
    def test_creates_draft_with_derived_amount(self, client, catalog, it_user):
        data = _create(client, it_user)

        assert data["budget_id"] == "BUD-000001"
        assert data["status"] == "Draft"
        assert data["created_by"] == "ivan"
        assert data["amount"] == 2701.0
        assert [i["total_amount"] for i in data["line_items"]] == [2400.0, 301.0]

    def test_business_ids_increase(self, client, catalog, it_user):
        _create(client, it_user)
        assert _create(client, it_user)["budget_id"] == "BUD-000002"

    def test_department_defaults_to_callers(self, client, catalog, it_user):
        payload = {k: v for k, v in DRAFT.items() if k != "department"}
        assert _create(client, it_user, payload)["department"] == "IT"

    def test_department_user_cannot_target_other_department(self, client, catalog, it_user):
        response = client.post("/api/budgets/", json={**DRAFT, "department": "HR"}, headers=auth_headers(it_user))
        assert response.status_code == 422
        assert response.json()["violations"][0]["code"] == "out_of_scope"

    def test_view_only_cannot_create(self, client, catalog, viewer):
        response = client.post("/api/budgets/", json=DRAFT, headers=auth_headers(viewer))
        assert response.status_code == 403

    def test_invalid_quantity_names_the_line(self, client, catalog, it_user):
        payload = {**DRAFT, "line_items": [{"description": "Laptop", "quantity": 0, "unit_cost": "10"}]}
        response = client.post("/api/budgets/", json=payload, headers=auth_headers(it_user))
        assert response.status_code == 422
        assert response.json()["violations"][0]["field"] == "line_items[0].quantity"

    def test_requires_authentication(self, client):
        assert client.post("/api/budgets/", json=DRAFT).status_code == 401


class TestReadBudgets:
    def test_department_user_sees_only_own_department(self, client, it_user, add_budget):
        add_budget(department="IT")
        hr_budget = add_budget(department="HR")

        listing = client.get("/api/budgets/", headers=auth_headers(it_user)).json()
        assert listing["total"] == 1
        assert listing["rows"][0]["department"] == "IT"

        response = client.get(f"/api/budgets/{hr_budget.budget_id}", headers=auth_headers(it_user))
        assert response.status_code == 404

    def test_filters_and_pagination(self, client, admin, add_budget):
        add_budget(department="IT", status="Approved")
        add_budget(department="IT", status="Draft")
        add_budget(department="HR", status="Approved")

        response = client.get(
            "/api/budgets/", params={"search": "it", "status": "Approved"}, headers=auth_headers(admin)
        )
        assert response.json()["total"] == 1

        page = client.get("/api/budgets/", params={"page": 2, "page_size": 2}, headers=auth_headers(admin)).json()
        assert page["total"] == 3
        assert len(page["rows"]) == 1

    def test_filter_options_come_from_the_data(self, client, admin, add_budget):
        add_budget(department="IT", status="Approved", budget_type="CAPEX")
        add_budget(department="HR", status="Draft")

        options = client.get("/api/budgets/filter-options", headers=auth_headers(admin)).json()

        assert options["departments"] == ["HR", "IT"]
        assert options["statuses"] == ["Draft", "Approved"]
        assert options["budget_types"] == ["CAPEX", "OPEX"]

    def test_unknown_budget(self, client, admin):
        assert client.get("/api/budgets/BUD-999999", headers=auth_headers(admin)).status_code == 404


class TestUpdateBudget:
    def test_replacing_line_items_recalculates(self, client, catalog, it_user):
        budget_id = _create(client, it_user)["budget_id"]

        response = client.put(
            f"/api/budgets/{budget_id}",
            json={"description": "Fewer laptops", "line_items": [{"description": "Laptop", "quantity": 1, "unit_cost": "999.99"}]},
            headers=auth_headers(it_user),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["amount"] == 999.99
        assert data["description"] == "Fewer laptops"
        assert len(data["line_items"]) == 1

    def test_amount_cannot_be_set_on_itemised_budget(self, client, catalog, it_user, test_db_session):
        budget_id = _create(client, it_user)["budget_id"]

        response = client.put(f"/api/budgets/{budget_id}", json={"amount": "5"}, headers=auth_headers(it_user))

        assert response.status_code == 422
        assert response.json()["violations"][0]["code"] == "derived"
        stored = test_db_session.query(Budget).filter_by(budget_id=budget_id).one()
        assert float(stored.amount) == 2701.0

    def test_approved_budget_is_frozen(self, client, it_user, add_budget):
        budget = add_budget(status="Approved", created_by="ivan")
        response = client.put(
            f"/api/budgets/{budget.budget_id}", json={"description": "x"}, headers=auth_headers(it_user)
        )
        assert response.status_code == 409

    def test_colleague_cannot_edit_someone_elses_draft(self, client, catalog, it_user, make_user):
        budget_id = _create(client, it_user)["budget_id"]
        colleague = make_user("olga", Role.DEPARTMENT_USER, department="IT")

        response = client.put(
            f"/api/budgets/{budget_id}", json={"description": "Mine now"}, headers=auth_headers(colleague)
        )

        assert response.status_code == 403
        stored = client.get(f"/api/budgets/{budget_id}", headers=auth_headers(it_user)).json()
        assert stored["description"] == "Laptop refresh"
        assert stored["status"] == "Draft"

    def test_admin_edits_any_draft(self, client, catalog, it_user, admin):
        budget_id = _create(client, it_user)["budget_id"]
        response = client.put(f"/api/budgets/{budget_id}", json={"description": "Fixed"}, headers=auth_headers(admin))
        assert response.status_code == 200
        assert response.json()["created_by"] == "ivan"


class TestLifecycle:
    def test_submit_review_approve(self, client, catalog, it_user, reviewer):
        budget_id = _create(client, it_user)["budget_id"]

        submitted = client.post(f"/api/budgets/{budget_id}/submit", headers=auth_headers(it_user)).json()
        assert submitted["status"] == "Submitted"
        assert submitted["submitted_by"] == "ivan"
        assert submitted["submitted_at"] is not None

        claimed = client.post(f"/api/budgets/{budget_id}/start-review", headers=auth_headers(reviewer)).json()
        assert claimed["status"] == "Under Review"
        assert claimed["reviewed_by"] == "fiona"

        approved = client.post(f"/api/budgets/{budget_id}/approve", headers=auth_headers(reviewer))
        assert approved.status_code == 200
        assert approved.json()["status"] == "Approved"
        assert approved.json()["reviewed_at"] is not None

        again = client.post(f"/api/budgets/{budget_id}/approve", headers=auth_headers(reviewer))
        assert again.status_code == 409

    def test_submit_reports_every_violation(self, client, catalog, it_user):
        budget_id = _create(client, it_user, {"department": "IT"})["budget_id"]

        response = client.post(f"/api/budgets/{budget_id}/submit", headers=auth_headers(it_user))

        assert response.status_code == 422
        fields = {v["field"] for v in response.json()["violations"]}
        assert fields == {"cost_center", "budget_type", "line_items"}
        status = client.get(f"/api/budgets/{budget_id}", headers=auth_headers(it_user)).json()["status"]
        assert status == "Draft"

    def test_cost_center_must_belong_to_department(self, client, catalog, it_user):
        budget_id = _create(client, it_user, {**DRAFT, "cost_center": "HR-001"})["budget_id"]
        response = client.post(f"/api/budgets/{budget_id}/submit", headers=auth_headers(it_user))
        assert response.json()["violations"][0]["code"] == "not_in_department"

    def test_reject_requires_comments(self, client, catalog, it_user, reviewer):
        budget_id = _create(client, it_user)["budget_id"]
        client.post(f"/api/budgets/{budget_id}/submit", headers=auth_headers(it_user))

        missing = client.post(f"/api/budgets/{budget_id}/reject", json={}, headers=auth_headers(reviewer))
        assert missing.status_code == 422

        rejected = client.post(
            f"/api/budgets/{budget_id}/reject", json={"comments": "Over the limit"}, headers=auth_headers(reviewer)
        ).json()
        assert rejected["status"] == "Rejected"
        assert rejected["review_comments"] == "Over the limit"

    def test_revision_round_trip(self, client, catalog, it_user, reviewer):
        budget_id = _create(client, it_user)["budget_id"]
        client.post(f"/api/budgets/{budget_id}/submit", headers=auth_headers(it_user))
        client.post(
            f"/api/budgets/{budget_id}/request-revision",
            json={"comments": "Split the docks"},
            headers=auth_headers(reviewer),
        )

        edited = client.put(f"/api/budgets/{budget_id}", json={"description": "v2"}, headers=auth_headers(it_user))
        assert edited.json()["status"] == "Revision Required"

        resubmitted = client.post(f"/api/budgets/{budget_id}/submit", headers=auth_headers(it_user)).json()
        assert resubmitted["status"] == "Submitted"
        assert resubmitted["reviewed_by"] is None

    def test_department_user_cannot_review(self, client, catalog, it_user):
        budget_id = _create(client, it_user)["budget_id"]
        client.post(f"/api/budgets/{budget_id}/submit", headers=auth_headers(it_user))
        response = client.post(f"/api/budgets/{budget_id}/approve", headers=auth_headers(it_user))
        assert response.status_code == 403

    def test_colleague_cannot_submit_someone_elses_draft(self, client, catalog, it_user, make_user):
        budget_id = _create(client, it_user)["budget_id"]
        colleague = make_user("olga", Role.DEPARTMENT_USER, department="IT")

        response = client.post(f"/api/budgets/{budget_id}/submit", headers=auth_headers(colleague))

        assert response.status_code == 403
        stored = client.get(f"/api/budgets/{budget_id}", headers=auth_headers(it_user)).json()
        assert stored["status"] == "Draft"
        assert stored["submitted_at"] is None


class TestDeleteBudget:
    def test_author_deletes_own_draft(self, client, catalog, it_user):
        budget_id = _create(client, it_user)["budget_id"]
        assert client.delete(f"/api/budgets/{budget_id}", headers=auth_headers(it_user)).status_code == 200
        assert client.get(f"/api/budgets/{budget_id}", headers=auth_headers(it_user)).status_code == 404

    def test_submitted_budget_cannot_be_deleted_by_author(self, client, catalog, it_user):
        budget_id = _create(client, it_user)["budget_id"]
        client.post(f"/api/budgets/{budget_id}/submit", headers=auth_headers(it_user))
        assert client.delete(f"/api/budgets/{budget_id}", headers=auth_headers(it_user)).status_code == 409

    def test_admin_deletes_any_budget(self, client, admin, add_budget):
        budget = add_budget(status="Approved")
        assert client.delete(f"/api/budgets/{budget.budget_id}", headers=auth_headers(admin)).status_code == 200


class TestConcurrentReview:
    def test_stale_transition_is_refused(self, test_db_session, add_budget):
        budget = add_budget(status="Submitted")
        transition = plan_transition(budget, "approve", "fiona")

        # another reviewer rejects first
        test_db_session.execute(
            update(Budget).where(Budget.id == budget.id).values(status="Rejected", reviewed_by="mike")
        )
        test_db_session.commit()

        with pytest.raises(ConcurrentModificationError):
            budget_service._write_transition(test_db_session, budget, transition)

        test_db_session.refresh(budget)
        assert budget.status == "Rejected"
        assert budget.reviewed_by == "mike"


class TestStoreOutage:
    def test_failing_query_gives_503(self, client, admin, add_budget, monkeypatch):
        add_budget(department="IT")

        def broken_all(self):
            raise OperationalError("SELECT", {}, Exception("db down"))

        monkeypatch.setattr(Query, "all", broken_all)
        response = client.get("/api/budgets/", headers=auth_headers(admin))

        assert response.status_code == 503
        assert response.json()["detail"] == "The data store is unavailable. Try again later."
