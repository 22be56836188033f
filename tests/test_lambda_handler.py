"""Tests for AWS Lambda handler."""

import base64
import json

import pytest

import lambda_handler as handler_module
from lambda_handler import lambda_handler
from plan_engine.models import InstallmentStatus


def post(path, payload=None, raw=None):
    body = raw if raw is not None else (json.dumps(payload) if payload is not None else "")
    return lambda_handler({"httpMethod": "POST", "path": path, "body": body}, None)


@pytest.fixture
def active_plan(sample_input):
    created = json.loads(post("/payment_plans", sample_input)["body"])
    return json.loads(post(f"/payment_plans/{created['id']}/activate")["body"])


class TestLambdaHandler:
    """Test the Lambda handler routes and responses."""

    def test_health_check(self):
        """GET /health returns healthy status."""
        event = {"httpMethod": "GET", "path": "/health"}
        response = lambda_handler(event, None)

        assert response["statusCode"] == 200
        body = json.loads(response["body"])
        assert body["status"] == "healthy"

    def test_api_info(self):
        """GET /api returns API information."""
        event = {"httpMethod": "GET", "path": "/api"}
        response = lambda_handler(event, None)

        assert response["statusCode"] == 200
        body = json.loads(response["body"])
        assert body["status"] == "ok"
        assert "record_payment" in body["endpoints"]

    def test_cors_preflight(self):
        """OPTIONS requests return CORS headers."""
        event = {"httpMethod": "OPTIONS", "path": "/payment_plans"}
        response = lambda_handler(event, None)

        assert response["statusCode"] == 200
        assert "Access-Control-Allow-Origin" in response["headers"]
        assert "Access-Control-Allow-Methods" in response["headers"]

    def test_not_found(self):
        """Unknown paths return 404."""
        event = {"httpMethod": "GET", "path": "/unknown"}
        response = lambda_handler(event, None)

        assert response["statusCode"] == 404

    def test_http_api_format(self):
        """Supports HTTP API v2 event format."""
        event = {"requestContext": {"http": {"method": "GET"}}, "rawPath": "/health"}
        response = lambda_handler(event, None)

        assert response["statusCode"] == 200


class TestPaymentPlanRoutes:
    """Schedule generation and plan creation."""

    def test_generate_installments(self, sample_input):
        response = post("/payment_plans/generate_installments", sample_input)

        assert response["statusCode"] == 200
        body = json.loads(response["body"])
        assert len(body["installments"]) == 5
        assert body["summary"]["expected_commission"] == 1380.0

    def test_base64_body(self, sample_input):
        event = {
            "httpMethod": "POST",
            "path": "/payment_plans/generate_installments",
            "body": base64.b64encode(json.dumps(sample_input).encode("utf-8")).decode("ascii"),
            "isBase64Encoded": True,
        }
        response = lambda_handler(event, None)

        assert response["statusCode"] == 200

    def test_create_plan_returns_201(self, sample_input):
        response = post("/payment_plans", sample_input)

        assert response["statusCode"] == 201
        body = json.loads(response["body"])
        assert body["status"] == "active"
        assert body["installments"][1]["status"] == "draft"

    def test_activate_plan(self, active_plan):
        assert [i["status"] for i in active_plan["installments"]] == ["paid", "pending", "pending", "pending", "pending"]

    def test_activate_unknown_plan(self):
        response = post("/payment_plans/missing/activate")

        assert response["statusCode"] == 404
        assert json.loads(response["body"])["status"] == "not_found"

    def test_empty_body(self):
        """POST with empty body returns 400."""
        response = post("/payment_plans/generate_installments")

        assert response["statusCode"] == 400
        body = json.loads(response["body"])
        assert "error" in body

    def test_invalid_json(self):
        """POST with invalid JSON returns 400."""
        response = post("/payment_plans/generate_installments", raw="not valid json")

        assert response["statusCode"] == 400
        body = json.loads(response["body"])
        assert "Invalid JSON" in body["error"]

    def test_validation_error_details(self, sample_input):
        sample_input["number_of_installments"] = 30
        response = post("/payment_plans/generate_installments", sample_input)

        assert response["statusCode"] == 400
        body = json.loads(response["body"])
        assert body["status"] == "validation_failed"
        assert body["details"][0]["field"] == "number_of_installments"


class TestRecordPaymentRoute:
    """Payment recording over API Gateway."""

    def test_record_payment(self, active_plan):
        installment = active_plan["installments"][1]
        response = post(
            f"/installments/{installment['id']}/record_payment",
            {"paid_date": "2025-02-01", "paid_amount": 1800},
        )

        assert response["statusCode"] == 200
        body = json.loads(response["body"])
        assert body["installment"]["status"] == "paid"
        assert body["payment_plan"]["earned_commission"] == 524.4

    def test_unknown_installment(self):
        response = post("/installments/missing/record_payment", {"paid_date": "2025-02-01", "paid_amount": 10})

        assert response["statusCode"] == 404

    def test_cancelled_installment_conflicts(self, active_plan):
        store = handler_module.processor.store
        plan = store.get_plan(active_plan["id"])
        plan.installments[1].status = InstallmentStatus.CANCELLED
        store.save_plan(plan)

        response = post(
            f"/installments/{plan.installments[1].id}/record_payment",
            {"paid_date": "2025-02-01", "paid_amount": 100},
        )

        assert response["statusCode"] == 409
        assert json.loads(response["body"])["status"] == "conflict"

    def test_future_paid_date(self, active_plan):
        installment = active_plan["installments"][1]
        response = post(
            f"/installments/{installment['id']}/record_payment",
            {"paid_date": "2999-01-01", "paid_amount": 100},
        )

        assert response["statusCode"] == 400
        assert json.loads(response["body"])["details"][0]["field"] == "paid_date"


class TestStatusSweep:
    """Sweep over HTTP and from the EventBridge schedule."""

    def test_sweep_route(self, active_plan):
        response = post("/jobs/status_sweep", {"today": "2025-02-10"})

        assert response["statusCode"] == 200
        body = json.loads(response["body"])
        assert body["job"]["status"] == "success"
        assert active_plan["installments"][1]["id"] in body["report"]["newly_overdue_ids"]

    def test_sweep_route_allows_empty_body(self):
        response = post("/jobs/status_sweep")

        assert response["statusCode"] == 200

    def test_scheduled_event(self):
        event = {"source": "aws.events", "id": "evt-1", "detail-type": "Scheduled Event"}
        result = lambda_handler(event, None)

        assert result["job"]["job_name"] == "update-installment-statuses"
        assert result["job"]["status"] == "success"
