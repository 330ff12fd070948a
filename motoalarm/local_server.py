"""
Local server

Serves the Lambda handlers through Flask so the service can run outside
AWS, e.g. behind a tunnel while testing with a real tracker.
"""
import base64
import sys

from dotenv import find_dotenv, load_dotenv
from flask import Flask, Response, request
from flask_cors import CORS

from motoalarm import health, status
from motoalarm.utils.config import ConfigError, load_settings
from motoalarm.utils.logger import get_logger
from motoalarm.webhook import WebhookHandler, build_handler

logger = get_logger("local_server")


def _to_event() -> dict:
    """Shape the current Flask request like an API Gateway HTTP API event."""
    raw = request.get_data()
    try:
        body = raw.decode("utf-8")
        encoded = False
    except UnicodeDecodeError:
        body = base64.b64encode(raw).decode("ascii")
        encoded = True

    return {
        "headers": {key.lower(): value for key, value in request.headers.items()},
        "body": body,
        "isBase64Encoded": encoded,
        "requestContext": {"http": {"method": request.method, "path": request.path}},
    }


def _to_response(result: dict) -> Response:
    return Response(
        result.get("body", ""),
        status=result["statusCode"],
        headers=result.get("headers") or {},
    )


def create_app(handler: WebhookHandler) -> Flask:
    app = Flask(__name__)
    CORS(app)

    @app.route("/webhook", methods=["POST"])
    def webhook():
        return _to_response(handler.handle(_to_event()))

    @app.route("/twilio/status", methods=["POST"])
    def call_status():
        return _to_response(status.lambda_handler(_to_event(), None))

    @app.route("/health", methods=["GET"])
    def healthz():
        return _to_response(health.lambda_handler(_to_event(), None))

    return app


def main() -> int:
    # A .env file in the working directory fills in anything not already exported.
    load_dotenv(find_dotenv(usecwd=True))

    try:
        settings = load_settings()
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    handler = build_handler(settings)
    app = create_app(handler)

    logger.info("local_server.start", extra={"port": settings.port})
    try:
        app.run(host="0.0.0.0", port=settings.port)
    finally:
        handler.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
