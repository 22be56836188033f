"""Tests for the Flask app used in local development."""

import pytest

from main import app


@pytest.fixture
def client():
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


@pytest.fixture
def active_plan(client, sample_input):
    created = client.post("/payment_plans", json=sample_input).get_json()
    return client.post(f"/payment_plans/{created['id']}/activate").get_json()


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.get_json()["status"] == "healthy"


def test_api_info(client):
    body = client.get("/api").get_json()

    assert "generate_installments" in body["endpoints"]


def test_cors_header(client):
    response = client.get("/health", headers={"Origin": "http://localhost:3000"})

    # older flask-cors answers "*", newer ones echo the request origin
    assert response.headers["Access-Control-Allow-Origin"] in ("*", "http://localhost:3000")


def test_generate_installments(client, sample_input):
    response = client.post("/payment_plans/generate_installments", json=sample_input)

    assert response.status_code == 200
    assert response.get_json()["summary"]["commissionable_value"] == 9200.0


def test_generate_installments_without_body(client):
    response = client.post("/payment_plans/generate_installments")

    assert response.status_code == 400
    assert response.get_json()["error"] == "No input data provided"


def test_validation_error(client, sample_input):
    sample_input["materials_cost"] = 20000
    response = client.post("/payment_plans/generate_installments", json=sample_input)

    assert response.status_code == 400
    body = response.get_json()
    assert body["status"] == "validation_failed"
    assert body["details"][0]["field"] == "materials_cost"


def test_create_and_pay(client, active_plan):
    installment = active_plan["installments"][1]
    response = client.post(
        f"/installments/{installment['id']}/record_payment",
        json={"paid_date": "2025-02-01", "paid_amount": 1000, "notes": "bank transfer"},
    )

    assert response.status_code == 200
    body = response.get_json()
    assert body["installment"]["status"] == "partial"
    assert body["installment"]["payment_notes"] == "bank transfer"
    assert body["previous"]["status"] == "pending"


def test_nan_amount_is_a_validation_error(client, active_plan):
    installment = active_plan["installments"][1]
    response = client.post(
        f"/installments/{installment['id']}/record_payment",
        data='{"paid_date": "2025-02-01", "paid_amount": NaN}',
        content_type="application/json",
    )

    assert response.status_code == 400
    assert response.get_json()["details"][0]["field"] == "paid_amount"


def test_record_payment_unknown_installment(client):
    response = client.post(
        "/installments/missing/record_payment", json={"paid_date": "2025-02-01", "paid_amount": 10}
    )

    assert response.status_code == 404


def test_status_sweep(client, active_plan):
    response = client.post("/jobs/status_sweep", json={"today": "2025-02-10"})

    assert response.status_code == 200
    body = response.get_json()
    assert body["job"]["status"] == "success"
    assert active_plan["installments"][1]["id"] in body["report"]["newly_overdue_ids"]


def test_unknown_route(client):
    assert client.get("/nope").status_code == 404
