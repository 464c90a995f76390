"""Integration tests for API endpoints"""

import pytest
from fastapi.testclient import TestClient
from bookkeeping_gateway.domain.models import TransactionStatus


@pytest.fixture
def loaded(client: TestClient) -> TestClient:
    """Client whose stores were filled from the hosted database"""
    response = client.post("/v1/pending/refresh")
    assert response.status_code == 200
    return client


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "bookkeeping_transition_total" in response.text


def test_request_id_header(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-42"})
    assert response.headers["X-Request-ID"] == "req-42"


def test_refresh_loads_stores(loaded: TestClient):
    data = loaded.get("/v1/pending").json()

    assert data["total"] == 12
    assert data["page_count"] == 2
    assert len(data["rows"]) == 10
    assert data["selected_ids"] == []

    approved = loaded.get("/v1/transactions/approved").json()["transactions"]
    rejected = loaded.get("/v1/transactions/rejected").json()["transactions"]
    assert {t["id"] for t in approved} == {"AP1", "AP2", "AP3"}
    assert [t["id"] for t in rejected] == ["RJ1"]


def test_refresh_hosted_database_down(client: TestClient, supabase):
    supabase.unavailable = True
    response = client.post("/v1/pending/refresh")
    assert response.status_code == 503


def test_approve_selected(loaded: TestClient, supabase):
    """POST /v1/pending/transition approves the selected income and expense"""
    selection = loaded.post("/v1/pending/selection", json={"ids": ["T00", "T01"]}).json()
    assert selection["selected_ids"] == ["T00", "T01"]

    response = loaded.post("/v1/pending/transition", json={"target": "APPROVED"})

    assert response.status_code == 200
    data = response.json()
    assert data["processed_ids"] == ["T00", "T01"]
    assert data["failed_ids"] == []
    assert data["reconciled"] is True
    assert data["notification"]["variant"] == "default"

    kinds = sorted((call[0].value, call[1]) for call in supabase.calls)
    assert kinds == [("Expense", "T01"), ("Income", "T00")]
    assert all(call[2].approved_at is not None and call[2].rejected_at is None for call in supabase.calls)

    pending = loaded.get("/v1/pending").json()
    assert pending["total"] == 10
    assert pending["selected_ids"] == []

    approved = loaded.get("/v1/transactions/approved").json()["transactions"]
    assert [t["id"] for t in approved[:2]] == ["T00", "T01"]
    assert all(t["status"] == "APPROVED" and t["approved_at"] for t in approved[:2])


def test_reject_with_failure_keeps_stores(loaded: TestClient, supabase):
    supabase.fail_ids = {"T01"}
    loaded.post("/v1/pending/selection", json={"ids": ["T00", "T01"]})

    data = loaded.post("/v1/pending/transition", json={"target": "REJECTED"}).json()

    assert data["reconciled"] is False
    assert data["processed_ids"] == []
    assert data["failed_ids"] == ["T01"]
    assert data["notification"]["variant"] == "destructive"

    assert loaded.get("/v1/pending").json()["total"] == 12
    assert [t["id"] for t in loaded.get("/v1/transactions/rejected").json()["transactions"]] == ["RJ1"]


def test_empty_selection_transition(loaded: TestClient, supabase):
    data = loaded.post("/v1/pending/transition", json={"target": "APPROVED"}).json()

    assert data["processed_ids"] == []
    assert data["notification"] is None
    assert supabase.calls == []
    assert loaded.get("/v1/notifications").json()["notifications"] == []


def test_pending_is_not_a_valid_target(loaded: TestClient):
    response = loaded.post("/v1/pending/transition", json={"target": "PENDING"})
    assert response.status_code == 422


def test_page_change_clears_selection(loaded: TestClient):
    loaded.post("/v1/pending/selection", json={"all_page_rows": True})
    assert len(loaded.get("/v1/pending").json()["selected_ids"]) == 10

    data = loaded.post("/v1/pending/page", json={"page_index": 1}).json()

    assert data["selected_ids"] == []
    assert [r["id"] for r in data["rows"]] == ["T10", "T11"]


def test_filter_and_sort(loaded: TestClient):
    data = loaded.post(
        "/v1/pending/filter", json={"text": "expense", "sort_column": "amount", "sort_descending": True}
    ).json()

    assert data["total"] == 6
    assert data["rows"][0]["id"] == "T11"


def test_notifications_and_history(loaded: TestClient):
    loaded.post("/v1/pending/selection", json={"ids": ["T02"]})
    loaded.post("/v1/pending/transition", json={"target": "REJECTED"})
    loaded.post("/v1/pending/selection", json={"ids": ["T03"]})
    loaded.post("/v1/pending/transition", json={"target": "APPROVED"})

    notifications = loaded.get("/v1/notifications").json()["notifications"]
    assert [n["message"] for n in notifications] == [
        "Approved 1 selected transactions.",
        "Rejected 1 selected transactions.",
    ]

    history = loaded.get("/v1/transitions/history").json()["transitions"]
    assert len(history) == 2
    assert {h["target"] for h in history} == {"APPROVED", "REJECTED"}
    assert all(h["requested_count"] == 1 and h["processed_count"] == 1 for h in history)

    rejected_only = loaded.get("/v1/transitions/history?target=REJECTED").json()["transitions"]
    assert len(rejected_only) == 1


def test_income_expense_report(client: TestClient):
    response = client.get(
        "/v1/reports/income-expense",
        params={"account_id": "acc-1", "from": "2024-03-01T00:00:00+00:00", "to": "2024-03-31T00:00:00+00:00"},
    )

    assert response.status_code == 200
    data = response.json()
    assert [t["id"] for t in data["transactions"]] == ["AP2", "AP1"]
    assert data["account_id"] == "acc-1"


def test_income_expense_report_without_filters(client: TestClient):
    data = client.get("/v1/reports/income-expense").json()
    assert data["transactions"] == []


def test_account_report(client: TestClient):
    data = client.get("/v1/reports/accounts").json()

    assert len(data["accounts"]) == 3
    assert data["totals"] == {"cur-lak": 1300.0, "cur-usd": 40.0}


def test_overview(client: TestClient):
    data = client.get(
        "/v1/reports/overview",
        params={"account_id": "acc-1", "from": "2024-03-01T00:00:00+00:00", "to": "2024-03-03T00:00:00+00:00"},
    ).json()

    assert data["total_income"] == 500.0
    assert data["total_expense"] == 120.0
    assert data["donator_count"] == 1
    assert [t["id"] for t in data["latest"]] == ["AP1", "AP2"]


def test_reports_hosted_database_down(client: TestClient, supabase):
    supabase.unavailable = True
    assert client.get("/v1/reports/accounts").status_code == 503
    assert client.get("/v1/reports/overview").status_code == 503


def test_refresh_refused_while_transition_in_flight(loaded: TestClient):
    workspace = loaded.app.state.workspace
    workspace.in_flight = TransactionStatus.APPROVED

    response = loaded.post("/v1/pending/refresh")

    assert response.status_code == 409
    assert loaded.get("/v1/pending").json()["total"] == 12


def test_list_donators(client: TestClient):
    response = client.get("/v1/donators")

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["message"] == "Donators retrieval was successful."
    assert [d["display_name"] for d in data["data"]] == ["Somchai", "Bounmy"]


def test_list_donators_query_failure_is_404(client: TestClient, supabase):
    supabase.unavailable = True

    response = client.get("/v1/donators")

    assert response.status_code == 404
    data = response.json()
    assert data["success"] is False
    assert data["data"] is None
    assert "timeout" in data["message"]


def test_delete_selected_categories(client: TestClient, supabase):
    page = client.post("/v1/expense-categories/refresh").json()
    assert page["total"] == 12
    assert len(page["rows"]) == 10

    client.post("/v1/expense-categories/selection", json={"ids": ["cat-00", "cat-05"]})
    data = client.post("/v1/expense-categories/delete").json()

    assert data["deleted_ids"] == ["cat-00", "cat-05"]
    assert data["failed_ids"] == []
    assert data["notification"]["message"] == "Deleted all selected expense categories."

    page = client.get("/v1/expense-categories").json()
    assert page["total"] == 10
    assert page["selected_ids"] == []
    assert not {"cat-00", "cat-05"} & {r["id"] for r in page["rows"]}


def test_delete_categories_failure_keeps_rows(client: TestClient, supabase):
    supabase.fail_ids = {"cat-01"}
    client.post("/v1/expense-categories/refresh")
    client.post("/v1/expense-categories/selection", json={"ids": ["cat-00", "cat-01"]})

    data = client.post("/v1/expense-categories/delete").json()

    assert data["deleted_ids"] == []
    assert data["failed_ids"] == ["cat-01"]
    assert data["notification"]["variant"] == "destructive"
    assert client.get("/v1/expense-categories").json()["total"] == 12


def test_category_filter(client: TestClient):
    client.post("/v1/expense-categories/refresh")
    data = client.post("/v1/expense-categories/filter", json={"text": "wat"}).json()
    assert [r["name"] for r in data["rows"]] == ["Water"]


def test_income_expense_report_needs_both_bounds(client: TestClient):
    data = client.get(
        "/v1/reports/income-expense", params={"account_id": "acc-1", "from": "2024-03-01T00:00:00+00:00"}
    ).json()
    assert data["transactions"] == []
