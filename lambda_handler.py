"""
AWS Lambda handler for the Payment Plan Engine API.

This is the production entry point for AWS Lambda deployments.
For local development, use main.py (Flask app) instead.

Besides API Gateway events, a scheduled EventBridge event
({"source": "aws.events"}) runs the installment status sweep.
"""

import json
import logging
import os
import re
from datetime import date

from plan_engine import ConflictError, NotFoundError, PaymentPlanProcessor, ValidationError

# Configure logging
logger = logging.getLogger()
logger.setLevel(logging.INFO)

# Environment (dev, staging, prod)
ENVIRONMENT = os.environ.get("ENVIRONMENT", "dev")
DUE_SOON_WINDOW_DAYS = int(os.environ.get("DUE_SOON_WINDOW_DAYS", 7))

# Initialize processor (reused across warm invocations)
processor = PaymentPlanProcessor()

# CORS headers for API Gateway
CORS_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type,Authorization",
    "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
}

ACTIVATE_PATH = re.compile(r"^/payment_plans/(?P<id>[^/]+)/activate$")
RECORD_PAYMENT_PATH = re.compile(r"^/installments/(?P<id>[^/]+)/record_payment$")


def _response(status_code, payload):
    return {"statusCode": status_code, "headers": CORS_HEADERS, "body": json.dumps(payload)}


def lambda_handler(event, context):
    """
    Main Lambda entry point.

    Handles API Gateway events for:
    - GET /health, GET /api
    - POST /payment_plans/generate_installments
    - POST /payment_plans
    - POST /payment_plans/{id}/activate
    - POST /installments/{id}/record_payment
    - POST /jobs/status_sweep
    - OPTIONS (CORS preflight)
    and scheduled events for the status sweep.
    """
    if event.get("source") == "aws.events":
        return handle_scheduled_sweep(event)

    # Handle CORS preflight
    http_method = event.get("httpMethod") or event.get("requestContext", {}).get("http", {}).get("method", "")
    if http_method == "OPTIONS":
        return {"statusCode": 200, "headers": CORS_HEADERS, "body": ""}

    # Get path (supports both REST API and HTTP API formats)
    path = event.get("path") or event.get("rawPath", "")

    if http_method == "GET":
        if path == "/health":
            return handle_health()
        if path == "/api":
            return handle_api_info()

    if http_method == "POST":
        if path == "/payment_plans/generate_installments":
            return handle_with_body(event, processor.generate_installments_from_dict)
        if path == "/payment_plans":
            return handle_with_body(event, processor.create_plan_from_dict, success_code=201)
        if path == "/jobs/status_sweep":
            return handle_with_body(event, _run_sweep, allow_empty=True)

        match = ACTIVATE_PATH.match(path)
        if match:
            return handle_with_body(event, lambda _: processor.activate_plan_from_dict(match["id"]), allow_empty=True)

        match = RECORD_PAYMENT_PATH.match(path)
        if match:
            return handle_with_body(event, lambda body: processor.record_payment_from_dict(match["id"], body))

    return _response(404, {"error": "Not found", "path": path})


def handle_health():
    """Health check endpoint."""
    return _response(200, {"status": "healthy", "environment": ENVIRONMENT})


def handle_api_info():
    """API information endpoint."""
    return _response(
        200,
        {
            "status": "ok",
            "message": "Payment Plan Engine API",
            "version": "1.0",
            "environment": ENVIRONMENT,
            "runtime": "AWS Lambda",
            "endpoints": {
                "generate_installments": "/payment_plans/generate_installments [POST]",
                "create_plan": "/payment_plans [POST]",
                "activate_plan": "/payment_plans/{id}/activate [POST]",
                "record_payment": "/installments/{id}/record_payment [POST]",
                "status_sweep": "/jobs/status_sweep [POST]",
                "health": "/health [GET]",
            },
        },
    )


def handle_scheduled_sweep(event):
    """Run the status sweep for the current date (EventBridge schedule)."""
    logger.info(f"Scheduled status sweep triggered: {event.get('id', 'unknown')}")
    result = _run_sweep({"today": date.today().isoformat()})
    logger.info(f"Status sweep finished: {result['job']['records_updated']} installments updated")
    return result


def _run_sweep(body):
    body = dict(body or {})
    body.setdefault("due_soon_window_days", DUE_SOON_WINDOW_DAYS)
    return processor.run_status_sweep_from_dict(body)


def _parse_body(event):
    body = event.get("body", "")
    if not isinstance(body, str):
        return body
    if not body:
        return None
    # Handle base64 encoded body (API Gateway)
    if event.get("isBase64Encoded"):
        import base64

        body = base64.b64decode(body).decode("utf-8")
    return json.loads(body)


def handle_with_body(event, action, success_code=200, allow_empty=False):
    """Parse the request body, run `action` on it and map engine errors to responses."""
    try:
        input_data = _parse_body(event)
        if not input_data and not allow_empty:
            return _response(400, {"error": "No input data provided", "status": "failed"})

        result = action(input_data or {})
        return _response(success_code, result)

    except json.JSONDecodeError as e:
        logger.error(f"JSON parse error: {str(e)}")
        return _response(400, {"error": f"Invalid JSON: {str(e)}", "status": "failed"})

    except ValidationError as e:
        logger.error(f"Validation error: {e.message}")
        return _response(400, {"error": f"Validation error: {e.message}", "details": e.details, "status": "validation_failed"})

    except NotFoundError as e:
        return _response(404, {"error": str(e), "status": "not_found"})

    except ConflictError as e:
        logger.error(f"Conflict: {str(e)}")
        return _response(409, {"error": str(e), "status": "conflict"})

    except (ValueError, KeyError, TypeError) as e:
        logger.error(f"Validation error: {str(e)}")
        return _response(400, {"error": f"Validation error: {str(e)}", "status": "validation_failed"})

    except Exception as e:
        # Unexpected errors - log details but return generic message to avoid information disclosure
        logger.error(f"Unexpected processing error: {str(e)}", exc_info=True)
        return _response(500, {"error": "An unexpected error occurred during processing", "status": "failed"})
