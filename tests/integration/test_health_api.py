"""Integration tests for route mounting under the configured API prefix."""

from budgetflow.config import get_settings
from budgetflow.main import app


def test_health_is_mounted_under_the_prefix(client):
    prefix = get_settings().API_PREFIX

    response = client.get(f"{prefix}/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "app": "BudgetFlow"}


def test_every_router_uses_the_prefix():
    prefix = get_settings().API_PREFIX
    docs = ("/docs", "/redoc", "/openapi.json")
    api_paths = [route.path for route in app.routes if not route.path.startswith(docs)]

    assert f"{prefix}/budgets/" in api_paths
    assert all(path.startswith(f"{prefix}/") for path in api_paths)
