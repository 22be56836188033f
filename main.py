from flask import Flask, request, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException
from plan_engine import ConflictError, NotFoundError, PaymentPlanProcessor, ValidationError
import os
import logging

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = Flask(__name__)

# Enable CORS for all routes
CORS(app)

# Initialize the processor (in-memory store for local development)
processor = PaymentPlanProcessor()

DUE_SOON_WINDOW_DAYS = int(os.environ.get("DUE_SOON_WINDOW_DAYS", 7))


def _json_body():
    return request.get_json(force=True, silent=True)


@app.errorhandler(ValidationError)
def handle_validation_error(e):
    logger.error(f"Validation error: {e.message}")
    return jsonify({"error": e.message, "details": e.details, "status": "validation_failed"}), 400


@app.errorhandler(NotFoundError)
def handle_not_found(e):
    return jsonify({"error": str(e), "status": "not_found"}), 404


@app.errorhandler(ConflictError)
def handle_conflict(e):
    logger.error(f"Conflict: {str(e)}")
    return jsonify({"error": str(e), "status": "conflict"}), 409


@app.errorhandler(Exception)
def handle_unexpected(e):
    if isinstance(e, HTTPException):
        return e
    # Log details but return a generic message
    logger.error(f"Processing error: {str(e)}", exc_info=True)
    return jsonify({"error": "An unexpected error occurred during processing", "status": "failed"}), 500


@app.route("/api", methods=["GET"])
def api_info():
    """API information endpoint"""
    return jsonify({
        "status": "ok",
        "message": "Payment Plan Engine API",
        "version": "1.0",
        "endpoints": {
            "generate_installments": "/payment_plans/generate_installments [POST]",
            "create_plan": "/payment_plans [POST]",
            "activate_plan": "/payment_plans/<id>/activate [POST]",
            "record_payment": "/installments/<id>/record_payment [POST]",
            "status_sweep": "/jobs/status_sweep [POST]",
            "health": "/health [GET]"
        }
    }), 200


@app.route("/health", methods=["GET"])
def health():
    """Health check for monitoring"""
    return jsonify({"status": "healthy"}), 200


@app.route("/payment_plans/generate_installments", methods=["POST"])
def generate_installments():
    """Preview the installment schedule for wizard input (nothing is saved)"""
    input_data = _json_body()
    if not input_data:
        return jsonify({"error": "No input data provided", "status": "failed"}), 400

    result = processor.generate_installments_from_dict(input_data)
    return jsonify(result), 200


@app.route("/payment_plans", methods=["POST"])
def create_plan():
    """Create a payment plan with its generated installments"""
    input_data = _json_body()
    if not input_data:
        return jsonify({"error": "No input data provided", "status": "failed"}), 400

    result = processor.create_plan_from_dict(input_data)
    logger.info(f"Payment plan created: {result['id']}")
    return jsonify(result), 201


@app.route("/payment_plans/<plan_id>/activate", methods=["POST"])
def activate_plan(plan_id):
    """Move draft installments to pending"""
    return jsonify(processor.activate_plan_from_dict(plan_id)), 200


@app.route("/installments/<installment_id>/record_payment", methods=["POST"])
def record_payment(installment_id):
    """Record a payment received for an installment"""
    input_data = _json_body()
    if not input_data:
        return jsonify({"error": "No input data provided", "status": "failed"}), 400

    logger.info(f"Recording payment for installment: {installment_id}")
    result = processor.record_payment_from_dict(installment_id, input_data)
    return jsonify(result), 200


@app.route("/jobs/status_sweep", methods=["POST"])
def status_sweep():
    """Run the overdue / due-soon sweep (normally triggered by the scheduler)"""
    input_data = _json_body() or {}
    input_data.setdefault("due_soon_window_days", DUE_SOON_WINDOW_DAYS)
    return jsonify(processor.run_status_sweep_from_dict(input_data)), 200


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8080))
    app.run(host="0.0.0.0", port=port, debug=False)
