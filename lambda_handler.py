"""
AWS Lambda handler for the Commission Engine API.

This is the production entry point for AWS Lambda deployments.
For local development, use main.py (Flask app) instead.
"""

import base64
import json
import logging
import os

from commission_engine import CommissionProcessor

# Configure logging
logger = logging.getLogger()
logger.setLevel(logging.INFO)

# Environment (dev, staging, prod)
ENVIRONMENT = os.environ.get("ENVIRONMENT", "dev")

# Initialize processor (reused across warm invocations). Payment creation
# is served by the Flask app, where the audit repository lives.
processor = CommissionProcessor()

# CORS headers for API Gateway
CORS_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type,Authorization",
    "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
}

# POST path → (description, processor method)
POST_ROUTES = {
    "/commission/preview": ("commission preview", processor.preview_from_dict),
    "/reports/monthly": ("monthly report", processor.rollup_from_dict),
    "/reports/rows": ("report rows", processor.report_rows_from_dict),
    "/reports/export": ("report export", processor.export_csv_from_dict),
}


def lambda_handler(event, context):
    """
    Main Lambda entry point.

    Handles API Gateway events for:
    - GET /health
    - GET /api
    - POST routes in POST_ROUTES
    - OPTIONS (CORS preflight)
    """
    # Handle CORS preflight
    http_method = event.get("httpMethod") or event.get("requestContext", {}).get("http", {}).get("method", "")
    if http_method == "OPTIONS":
        return {"statusCode": 200, "headers": CORS_HEADERS, "body": ""}

    # Get path (supports both REST API and HTTP API formats)
    path = event.get("path") or event.get("rawPath", "")

    # Route to appropriate handler
    if path == "/health" and http_method == "GET":
        return handle_health()
    elif path == "/api" and http_method == "GET":
        return handle_api_info()
    elif path in POST_ROUTES and http_method == "POST":
        action, handler = POST_ROUTES[path]
        return handle_post(event, action, handler)
    else:
        return _json_response(404, {"error": "Not found", "path": path})


def _json_response(status_code, payload):
    return {"statusCode": status_code, "headers": CORS_HEADERS, "body": json.dumps(payload)}


def handle_health():
    """Health check endpoint."""
    return _json_response(200, {"status": "healthy", "environment": ENVIRONMENT})


def handle_api_info():
    """API information endpoint."""
    return _json_response(
        200,
        {
            "status": "ok",
            "message": "Commission Engine API",
            "version": "1.0",
            "environment": ENVIRONMENT,
            "runtime": "AWS Lambda",
            "endpoints": {path: f"{path} [POST]" for path in POST_ROUTES} | {"health": "/health [GET]"},
        },
    )


def handle_post(event, action, handler):
    """Parse the request body and run it through the processor."""
    try:
        # Parse request body
        body = event.get("body", "")
        if isinstance(body, str):
            if not body:
                return _json_response(400, {"error": "No input data provided", "status": "failed"})
            # Handle base64 encoded body (API Gateway)
            if event.get("isBase64Encoded"):
                body = base64.b64decode(body).decode("utf-8")
            input_data = json.loads(body)
        else:
            input_data = body

        if not isinstance(input_data, dict):
            return _json_response(400, {"error": "Request body must be a JSON object", "status": "failed"})

        logger.info(f"Processing {action}")

        result = handler(input_data)

        logger.info(f"{action} processed successfully")

        if isinstance(result, str):
            headers = dict(CORS_HEADERS, **{"Content-Type": "text/csv"})
            return {"statusCode": 200, "headers": headers, "body": result}
        return _json_response(200, result)

    except json.JSONDecodeError as e:
        logger.error(f"JSON parse error: {str(e)}")
        return _json_response(400, {"error": f"Invalid JSON: {str(e)}", "status": "failed"})

    except PermissionError as e:
        logger.error(f"Export refused: {str(e)}")
        return _json_response(403, {"error": str(e), "status": "forbidden"})

    except (ValueError, KeyError, TypeError) as e:
        # Validation errors from engine (missing fields, invalid types, etc.)
        logger.error(f"Validation error: {str(e)}")
        return _json_response(400, {"error": f"Validation error: {str(e)}", "status": "validation_failed"})

    except Exception as e:
        # Unexpected errors - log details but return generic message to avoid information disclosure
        logger.error(f"Unexpected processing error: {str(e)}", exc_info=True)
        return _json_response(500, {"error": "An unexpected error occurred during processing", "status": "failed"})
