from flask import Flask, Response, request, jsonify
from flask_cors import CORS
from commission_engine import CommissionProcessor
from commission_engine.audit import InMemoryAuditRepository
import os
import logging

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = Flask(__name__)

# Enable CORS for all routes (the web dashboard calls the API from another origin)
CORS(app)

# Audit entries live for the lifetime of the process
audit_repository = InMemoryAuditRepository()

# Initialize the processor
processor = CommissionProcessor(audit_repository=audit_repository)


@app.route("/api", methods=["GET"])
def api_info():
    """API information endpoint"""
    return jsonify({
        "status": "ok",
        "message": "Commission Engine API",
        "version": "1.0",
        "endpoints": {
            "preview": "/commission/preview [POST]",
            "create_payment": "/payments [POST]",
            "monthly_report": "/reports/monthly [POST]",
            "report_rows": "/reports/rows [POST]",
            "export": "/reports/export [POST]",
            "health": "/health [GET]"
        }
    }), 200


@app.route("/health", methods=["GET"])
def health():
    """Health check for monitoring"""
    return jsonify({"status": "healthy"}), 200


def _handle(action, handler):
    """Run a processor call and map its errors onto HTTP responses."""
    try:
        input_data = request.get_json(force=True, silent=True)

        if not input_data:
            return jsonify({
                "error": "No input data provided",
                "status": "failed"
            }), 400

        if not isinstance(input_data, dict):
            return jsonify({
                "error": "Request body must be a JSON object",
                "status": "failed"
            }), 400

        logger.info(f"Processing {action}")

        result = handler(input_data)

        logger.info(f"{action} processed successfully")

        if isinstance(result, str):
            return Response(result, status=200, mimetype="text/csv")
        return jsonify(result), 200

    except ValueError as e:
        # Validation errors from engine
        logger.error(f"Validation error: {str(e)}")
        return jsonify({
            "error": str(e),
            "status": "validation_failed"
        }), 400

    except PermissionError as e:
        logger.error(f"Export refused: {str(e)}")
        return jsonify({
            "error": str(e),
            "status": "forbidden"
        }), 403

    except Exception as e:
        # Unexpected errors
        logger.error(f"Processing error: {str(e)}", exc_info=True)
        return jsonify({
            "error": "An unexpected error occurred during processing",
            "status": "failed"
        }), 500


@app.route("/commission/preview", methods=["POST"])
def preview_commission():
    """Live commission preview for a draft payment"""
    return _handle("commission preview", processor.preview_from_dict)


@app.route("/payments", methods=["POST"])
def create_payment():
    """Price a new payment and record it in the audit trail"""
    return _handle("payment creation", processor.create_from_dict)


@app.route("/reports/monthly", methods=["POST"])
def monthly_report():
    """Monthly commission series for charting"""
    return _handle("monthly report", processor.rollup_from_dict)


@app.route("/reports/rows", methods=["POST"])
def report_rows():
    """Per-payment commission report rows"""
    return _handle("report rows", processor.report_rows_from_dict)


@app.route("/reports/export", methods=["POST"])
def export_report():
    """CSV export of a report"""
    return _handle("report export", processor.export_csv_from_dict)


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8080))
    app.run(host="0.0.0.0", port=port, debug=False)
