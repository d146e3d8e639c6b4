"""
=============================================================================
ENERGY MONITOR - LOCAL DEVELOPMENT SERVER
=============================================================================

In production every endpoint is a separate AWS Lambda function behind API
Gateway (see backend/lambda_handlers). This Flask app runs the same
handlers in one local process: each route turns the Flask request into an
API Gateway-shaped event, calls the handler, and converts the handler's
response dict back into an HTTP response.

Cognito is not in the loop locally. Send an `X-User-Id` header to act as
a signed-in user; without it the handlers fall back to their defaults.

How to run:
    python -m backend.app

Then visit: http://127.0.0.1:5000/health
=============================================================================
"""

from flask import Flask, Response, request, jsonify

# dotenv - Load TABLE, SNS_TOPIC_ARN, ENDPOINT_OVERRIDE, ... from a .env file
# This must run before any settings are read
from dotenv import load_dotenv

load_dotenv()

from backend.lambda_handlers import (  # noqa: E402
    auth_login,
    auth_signup,
    get_all_items,
    get_energy_history,
    post_energy_input,
    post_energy_upload,
    process_csv,
    update_threshold,
)
from backend.lib import wiring  # noqa: E402
from backend.lib.config import get_settings  # noqa: E402
from backend.lib.energy_core.errors import MethodNotAllowedError  # noqa: E402

USER_HEADER = "X-User-Id"


def build_event() -> dict:
    """
    Convert the current Flask request into an API Gateway proxy event.

    Example:
        POST /energy with X-User-Id: user123 and body {"date": ..., "usage": ...}
        becomes
        {"httpMethod": "POST", "path": "/energy", "body": "{...}",
         "requestContext": {"authorizer": {"claims": {"sub": "user123"}}}}
    """
    event = {
        "httpMethod": request.method,
        "path": request.path,
        "headers": dict(request.headers),
        "queryStringParameters": request.args.to_dict() or None,
        "body": request.get_data(as_text=True) or None,
        "requestContext": {},
    }
    user_id = request.headers.get(USER_HEADER)
    if user_id:
        event["requestContext"] = {"authorizer": {"claims": {"sub": user_id}}}
    return event


def to_flask(result: dict) -> Response:
    """Turn a handler's {'statusCode', 'headers', 'body'} into a Flask response."""
    return Response(
        result.get("body", ""),
        status=result.get("statusCode", 200),
        headers=result.get("headers") or {},
    )


def create_app() -> Flask:
    app = Flask(__name__)

    # =========================================================================
    # BASIC ENDPOINTS
    # =========================================================================

    @app.route("/health")
    def health():
        settings = get_settings()
        return jsonify({
            "status": "ok",
            "usage_table": settings.usage_table,
            "threshold_table": settings.threshold_table,
            "timestream_table": f"{settings.timestream_database}.{settings.timestream_table}",
            "sns_enabled": bool(settings.sns_topic_arn),
            "csv_bucket": settings.csv_bucket,
        })

    # =========================================================================
    # ENERGY ENDPOINTS
    # =========================================================================

    @app.route("/energy", methods=["POST"])
    def energy_input():
        return to_flask(post_energy_input.handle(build_event(), wiring.build_pipeline()))

    @app.route("/energy/history", methods=["GET"])
    def energy_history():
        return to_flask(get_energy_history.handle(build_event(), wiring.build_record_store()))

    @app.route("/energy/all", methods=["GET"])
    def energy_all():
        return to_flask(get_all_items.handle(build_event(), wiring.build_record_store()))

    @app.route("/energy/upload", methods=["POST"])
    def energy_upload():
        return to_flask(post_energy_upload.handle(
            build_event(),
            wiring.build_http_client(),
            wiring.build_blob_store(),
            get_settings().csv_bucket,
        ))

    @app.route("/csv/process", methods=["POST"])
    def csv_process():
        """
        Stand-in for the S3 put notification.

        Request Body (JSON):
            {"bucket": "energy-csv-uploads", "key": "user123-usage-1700000000000.csv"}
        """
        data = request.get_json(silent=True) or {}
        if not data.get("key"):
            return jsonify({"error": "key required"}), 400
        event = {"Records": [{"s3": {
            "bucket": {"name": data.get("bucket") or get_settings().csv_bucket},
            "object": {"key": data["key"]},
        }}]}
        return to_flask(process_csv.handle(event, wiring.build_batch_driver()))

    # =========================================================================
    # THRESHOLD AND AUTH ENDPOINTS
    # =========================================================================

    @app.route("/threshold", methods=["POST"])
    def threshold():
        return to_flask(update_threshold.handle(build_event(), wiring.build_record_store()))

    @app.route("/auth/login", methods=["POST"])
    def login():
        return to_flask(auth_login.handle(build_event(), wiring.build_identity_provider()))

    @app.route("/auth/signup", methods=["POST"])
    def signup():
        return to_flask(auth_signup.handle(build_event(), wiring.build_identity_provider()))

    @app.errorhandler(MethodNotAllowedError)
    def wrong_method(error):
        return jsonify({"error": error.message}), error.status_code

    return app


app = create_app()


if __name__ == "__main__":
    # debug=True reloads on code changes; never use it in production
    app.run(debug=True)
