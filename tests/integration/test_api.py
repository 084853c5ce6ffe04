"""Integration tests for API endpoints"""

import pytest
from datetime import date
from decimal import Decimal
from fastapi.testclient import TestClient


@pytest.fixture
def condition_id(client: TestClient, condition_payload: dict) -> str:
    response = client.post("/v1/payment-conditions", json=condition_payload)
    assert response.status_code == 201
    return response.json()["condition_id"]


@pytest.fixture
def rent_payload() -> dict:
    return {
        "name": "Office rent",
        "supplier_id": "landlord",
        "amount_cents": 250000,
        "recurrence_type": "monthly",
        "due_day": 31,
        "start_date": "2023-06-01",
    }


def _order_payload(condition_id: str, **overrides) -> dict:
    payload = {
        "supplier_id": "acme",
        "payment_condition_id": condition_id,
        "items": [
            {"sku": "A-1", "description": "Widget", "quantity": "2", "unit_price_cents": 4500},
            {"sku": "B-2", "description": "Gadget", "quantity": "1", "unit_price_cents": 1000},
        ],
        "freight_cents": 500,
        "discount_cents": 0,
        "order_date": "2024-01-10",
    }
    payload.update(overrides)
    return payload


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "payplan_plans_generated_total" in response.text


def test_request_id_header_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"


def test_payment_condition_roundtrip(client: TestClient, condition_id: str):
    response = client.get(f"/v1/payment-conditions/{condition_id}")

    assert response.status_code == 200
    data = response.json()
    assert data["installments_count"] == 2
    assert Decimal(str(data["down_payment_percent"])) == Decimal("20")


def test_payment_condition_invalid_id(client: TestClient):
    response = client.get("/v1/payment-conditions/not-a-uuid")
    assert response.status_code == 400


def test_create_order_generates_plan(client: TestClient, condition_id: str):
    """Total 10500: 20% down (2100) then 2 x 4200 at +30/+60 days"""
    response = client.post("/v1/orders", json=_order_payload(condition_id))

    assert response.status_code == 201
    data = response.json()
    assert data["total_cents"] == 10500
    assert data["order_number"] == "#001"
    installments = data["installments"]
    assert [inst["installment_number"] for inst in installments] == [0, 1, 2]
    assert [inst["amount_cents"] for inst in installments] == [2100, 4200, 4200]
    assert [inst["due_date"] for inst in installments] == ["2024-01-10", "2024-02-09", "2024-03-10"]
    assert all(inst["status"] == "pending" for inst in installments)


def test_create_order_defaults_order_date_to_today(client: TestClient, condition_id: str, today: date):
    payload = _order_payload(condition_id)
    del payload["order_date"]

    data = client.post("/v1/orders", json=payload).json()

    assert data["order_date"] == today.isoformat()
    assert data["installments"][0]["due_date"] == today.isoformat()


def test_create_order_with_override(client: TestClient, condition_id: str):
    payload = _order_payload(
        condition_id,
        installments_override=[
            {"installment_number": 1, "amount_cents": 10500, "due_date": "2024-04-01"},
            {"installment_number": 2, "amount_cents": 0, "due_date": "2024-05-01"},
        ],
    )
    data = client.post("/v1/orders", json=payload).json()

    # zero-value entries are not stored
    assert [(inst["amount_cents"], inst["due_date"]) for inst in data["installments"]] == [(10500, "2024-04-01")]


def test_create_order_negative_total_has_no_installments(client: TestClient, condition_id: str):
    response = client.post("/v1/orders", json=_order_payload(condition_id, discount_cents=20000))

    assert response.status_code == 201
    data = response.json()
    assert data["total_cents"] == -9500
    assert data["installments"] == []


def test_create_order_unknown_condition(client: TestClient):
    response = client.post("/v1/orders", json=_order_payload("00000000-0000-0000-0000-000000000000"))
    assert response.status_code == 404


def test_create_order_rejects_zero_quantity(client: TestClient, condition_id: str):
    payload = _order_payload(condition_id, items=[{"quantity": "0", "unit_price_cents": 100}])
    response = client.post("/v1/orders", json=payload)
    assert response.status_code == 422


def test_create_order_few_cents_over_many_installments(client: TestClient):
    """Total 7 cents over 10 installments: stored values add up to the total"""
    condition_id = client.post(
        "/v1/payment-conditions",
        json={"name": "10x", "installments_count": 10, "interval_days": 1},
    ).json()["condition_id"]
    payload = _order_payload(
        condition_id,
        items=[{"quantity": "1", "unit_price_cents": 7}],
        freight_cents=0,
    )

    data = client.post("/v1/orders", json=payload).json()

    assert data["total_cents"] == 7
    assert all(inst["amount_cents"] > 0 for inst in data["installments"])
    assert sum(inst["amount_cents"] for inst in data["installments"]) == 7
    assert [inst["installment_number"] for inst in data["installments"]] == [10]


def test_get_and_delete_order(client: TestClient, condition_id: str):
    order_id = client.post("/v1/orders", json=_order_payload(condition_id)).json()["order_id"]

    response = client.get(f"/v1/orders/{order_id}")
    assert response.status_code == 200
    assert sum(inst["amount_cents"] for inst in response.json()["installments"]) == 10500

    assert client.delete(f"/v1/orders/{order_id}").status_code == 204
    assert client.get(f"/v1/orders/{order_id}").status_code == 404
    assert client.get("/v1/installments").json()["installments"] == []


def test_get_order_not_found(client: TestClient):
    fake_uuid = "00000000-0000-0000-0000-000000000000"
    response = client.get(f"/v1/orders/{fake_uuid}")
    assert response.status_code == 404


def test_plan_preview_inline_condition(client: TestClient, today: date):
    response = client.post(
        "/v1/plan/preview",
        json={
            "total_cents": 10000,
            "condition": {"name": "3x", "installments_count": 3, "interval_days": 30},
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["base_date"] == today.isoformat()
    assert [inst["amount_cents"] for inst in data["installments"]] == [3333, 3333, 3334]
    assert [inst["due_in_days"] for inst in data["installments"]] == [30, 60, 90]


def test_plan_preview_stored_condition_explicit_days(client: TestClient):
    condition_id = client.post(
        "/v1/payment-conditions",
        json={"name": "0/15/45", "installments_count": 1, "due_days": [45, 0, 15]},
    ).json()["condition_id"]

    data = client.post(
        "/v1/plan/preview",
        json={"total_cents": 30000, "payment_condition_id": condition_id, "base_date": "2024-03-01"},
    ).json()

    assert [inst["due_date"] for inst in data["installments"]] == ["2024-03-01", "2024-03-16", "2024-04-15"]


def test_plan_preview_requires_condition(client: TestClient):
    response = client.post("/v1/plan/preview", json={"total_cents": 10000})
    assert response.status_code == 422


def test_installments_marked_overdue_and_paid(client: TestClient, condition_id: str):
    # order dated well before the pinned today (2024-01-15)
    client.post("/v1/orders", json=_order_payload(condition_id, order_date="2023-12-01"))

    data = client.get("/v1/installments").json()
    statuses = [inst["status"] for inst in data["installments"]]
    assert statuses == ["overdue", "overdue", "pending"]  # 2023-12-01, 2023-12-31, 2024-01-30
    assert data["marked_overdue"] == 2

    installment_id = data["installments"][0]["installment_id"]
    paid = client.post(f"/v1/installments/{installment_id}/pay")
    assert paid.status_code == 200
    assert paid.json()["status"] == "paid"

    overdue_only = client.get("/v1/installments", params={"status": "overdue"}).json()
    assert len(overdue_only["installments"]) == 1


def test_installments_date_filter(client: TestClient, condition_id: str):
    client.post("/v1/orders", json=_order_payload(condition_id))

    data = client.get(
        "/v1/installments", params={"start_date": "2024-02-01", "end_date": "2024-02-29"}
    ).json()
    assert [inst["due_date"] for inst in data["installments"]] == ["2024-02-09"]


def test_recurring_generation_is_idempotent(client: TestClient, rent_payload: dict):
    expense_id = client.post("/v1/recurring-expenses", json=rent_payload).json()["expense_id"]

    first = client.post("/v1/recurring-expenses/generate", json={"months_ahead": 3})
    assert first.status_code == 200
    assert first.json()["generated"] == 3

    second = client.post("/v1/recurring-expenses/generate", json={"months_ahead": 3})
    assert second.json()["generated"] == 0

    expense = client.get(f"/v1/recurring-expenses/{expense_id}").json()
    assert [inst["due_date"] for inst in expense["installments"]] == ["2024-01-31", "2024-02-29", "2024-03-31"]
    assert [inst["reference_month"] for inst in expense["installments"]] == [
        "2024-01-01",
        "2024-02-01",
        "2024-03-01",
    ]


def test_recurring_generation_defaults_lookahead(client: TestClient, rent_payload: dict):
    client.post("/v1/recurring-expenses", json=rent_payload)
    response = client.post("/v1/recurring-expenses/generate", json={})
    assert response.json()["generated"] == 3


def test_recurring_generation_skips_inactive(client: TestClient, rent_payload: dict):
    client.post("/v1/recurring-expenses", json={**rent_payload, "is_active": False})
    response = client.post("/v1/recurring-expenses/generate", json={"months_ahead": 2})
    assert response.json() == {"generated": 0, "removed": 0, "expenses_processed": 0}


def test_recurring_rebuild_modes(client: TestClient, rent_payload: dict):
    expense_id = client.post("/v1/recurring-expenses", json=rent_payload).json()["expense_id"]
    client.post("/v1/recurring-expenses/generate", json={"expense_id": expense_id, "months_ahead": 3})

    replaced = client.post(
        "/v1/recurring-expenses/generate",
        json={
            "expense_id": expense_id,
            "months_ahead": 3,
            "rebuild_mode": "replace-upcoming",
            "rebuild_from": "2024-02-10",
        },
    ).json()
    assert replaced["removed"] == 2
    assert replaced["generated"] == 2

    removed = client.post(
        "/v1/recurring-expenses/generate",
        json={"expense_id": expense_id, "rebuild_mode": "remove-upcoming"},
    ).json()
    assert removed["removed"] == 3
    assert removed["generated"] == 0
    assert client.get(f"/v1/recurring-expenses/{expense_id}").json()["installments"] == []


def test_recurring_variable_expense(client: TestClient, rent_payload: dict):
    payload = {**rent_payload, "value_type": "variable", "amount_cents": None}
    expense_id = client.post("/v1/recurring-expenses", json=payload).json()["expense_id"]
    client.post("/v1/recurring-expenses/generate", json={"months_ahead": 1})

    installments = client.get(f"/v1/recurring-expenses/{expense_id}").json()["installments"]
    assert len(installments) == 1
    assert installments[0]["recurring_expense_id"] == expense_id
    assert {key: installments[0][key] for key in ("reference_month", "amount_cents", "due_date", "status")} == {
        "reference_month": "2024-01-01",
        "amount_cents": None,
        "due_date": "2024-01-31",
        "status": "awaiting_value",
    }


def test_paid_recurring_installment_survives_rebuild(client: TestClient, rent_payload: dict):
    expense_id = client.post("/v1/recurring-expenses", json=rent_payload).json()["expense_id"]
    client.post("/v1/recurring-expenses/generate", json={"expense_id": expense_id, "months_ahead": 3})
    installments = client.get(f"/v1/recurring-expenses/{expense_id}").json()["installments"]
    february = next(inst for inst in installments if inst["reference_month"] == "2024-02-01")

    paid = client.post(f"/v1/recurring-expenses/installments/{february['installment_id']}/pay")
    assert paid.status_code == 200
    assert paid.json()["status"] == "paid"

    replaced = client.post(
        "/v1/recurring-expenses/generate",
        json={
            "expense_id": expense_id,
            "months_ahead": 3,
            "rebuild_mode": "replace-upcoming",
            "rebuild_from": "2024-01-01",
        },
    ).json()
    # January and March are rebuilt, February is left alone
    assert replaced["removed"] == 2
    assert replaced["generated"] == 2

    after = client.get(f"/v1/recurring-expenses/{expense_id}").json()["installments"]
    assert [inst["reference_month"] for inst in after] == ["2024-01-01", "2024-02-01", "2024-03-01"]
    assert [inst["status"] for inst in after] == ["pending", "paid", "pending"]
    assert after[1]["installment_id"] == february["installment_id"]


def test_pay_recurring_installment_not_found(client: TestClient):
    fake_uuid = "00000000-0000-0000-0000-000000000000"
    assert client.post(f"/v1/recurring-expenses/installments/{fake_uuid}/pay").status_code == 404
    assert client.post("/v1/recurring-expenses/installments/not-a-uuid/pay").status_code == 400


def test_upcoming_recurring_installments(client: TestClient, rent_payload: dict):
    """Window is today (2024-01-15) through 60 days later; paid ones drop out"""
    client.post("/v1/recurring-expenses", json=rent_payload)
    client.post("/v1/recurring-expenses/generate", json={"months_ahead": 3})

    upcoming = client.get("/v1/recurring-expenses/installments/upcoming").json()["installments"]
    assert [inst["due_date"] for inst in upcoming] == ["2024-01-31", "2024-02-29"]

    client.post(f"/v1/recurring-expenses/installments/{upcoming[0]['installment_id']}/pay")

    upcoming = client.get("/v1/recurring-expenses/installments/upcoming").json()["installments"]
    assert [inst["due_date"] for inst in upcoming] == ["2024-02-29"]

    wider = client.get("/v1/recurring-expenses/installments/upcoming", params={"days": 90}).json()
    assert [inst["due_date"] for inst in wider["installments"]] == ["2024-02-29", "2024-03-31"]


def test_recurring_expense_validation(client: TestClient, rent_payload: dict):
    bad_dates = client.post("/v1/recurring-expenses", json={**rent_payload, "end_date": "2023-01-01"})
    assert bad_dates.status_code == 422

    no_amount = client.post("/v1/recurring-expenses", json={**rent_payload, "amount_cents": None})
    assert no_amount.status_code == 422
