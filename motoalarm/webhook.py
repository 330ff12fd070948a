import base64
import binascii
import json
from typing import Any, Dict, Optional

from motoalarm.message import compose, compose_lines
from motoalarm.telemetry import TelemetryRecord, should_call
from motoalarm.utils.address_cache import AddressCache
from motoalarm.utils.config import ConfigError, Settings, load_settings
from motoalarm.utils.geocoder import GoogleGeocoder
from motoalarm.utils.logger import get_logger
from motoalarm.utils.twilio_client import CallDispatchError, CallDispatcher, build_client

logger = get_logger("webhook")

PHONE_HEADER = "x-phone-number"

CALL_INITIATED = "Call initiated"
NO_CALL = "No call made due to engine status or alarm event."
INVALID_PAYLOAD = "Invalid JSON payload"
MISSING_PHONE = "Missing x-phone-number header"
DISPATCH_FAILED = "Call dispatch failed"
INVALID_REQUEST = "Invalid request"
MISCONFIGURED = "Server misconfigured"


class InvalidPayload(ValueError):
    """The request body could not be decoded into a JSON object."""


def _text(status: int, body: str) -> Dict[str, Any]:
    return {
        "statusCode": status,
        "headers": {"Content-Type": "text/plain"},
        "body": body,
    }


def _header(event: dict, name: str) -> Optional[str]:
    # API Gateway v2 lowercases header names, local callers may not.
    for key, value in (event.get("headers") or {}).items():
        if key.lower() == name:
            return value
    return None


def _parse_body(event: dict) -> dict:
    """
    Extract and parse the JSON body from the Lambda event.

    - For API Gateway / HttpApi: event["body"] is a JSON string, possibly
      base64-encoded.
    - For direct tests: event["body"] might already be the payload.
    """
    body = event.get("body")

    if isinstance(body, dict):
        return body

    if body is None:
        raise InvalidPayload("empty body")

    raw_body = body
    try:
        if event.get("isBase64Encoded"):
            raw_body = base64.b64decode(body).decode("utf-8")
        payload = json.loads(raw_body)
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError, TypeError) as e:
        logger.warning(
            "webhook.invalid_json",
            extra={"body_preview": str(raw_body)[:200]},
        )
        raise InvalidPayload(str(e)) from e

    if not isinstance(payload, dict):
        logger.warning(
            "webhook.payload_not_object",
            extra={"payload_type": type(payload).__name__},
        )
        raise InvalidPayload("payload must be a JSON object")

    return payload


class WebhookHandler:
    """
    Handles one tracker webhook: decide, geocode, compose, call.
    """

    def __init__(self, cache: AddressCache, dispatcher: CallDispatcher):
        self.cache = cache
        self.dispatcher = dispatcher

    def handle(self, event: dict) -> Dict[str, Any]:
        try:
            payload = _parse_body(event)
        except InvalidPayload:
            return _text(400, INVALID_PAYLOAD)

        try:
            logger.info("webhook.payload_received", extra={"payload": payload})

            record = TelemetryRecord.from_payload(payload, _header(event, PHONE_HEADER))

            if not should_call(record):
                logger.info(
                    "webhook.no_call",
                    extra={"alarm": record.alarm_triggered, "engine_on": record.engine_on},
                )
                return _text(200, NO_CALL)

            if not record.destination:
                logger.warning("webhook.missing_phone", extra={"device": record.device_name})
                return _text(400, MISSING_PHONE)

            address = self.cache.resolve(record.latitude, record.longitude)
            lines = compose_lines(record, address)
            logger.debug("webhook.composed", extra={"spoken_text": compose(record, address)})

            sid = self.dispatcher.dispatch(record.destination, lines)

            logger.info(
                "webhook.call_initiated",
                extra={"to": record.destination, "sid": sid, "device": record.device_name},
            )
            return _text(200, CALL_INITIATED)

        except CallDispatchError as e:
            logger.error("webhook.dispatch_failed", extra={"error": str(e)})
            return _text(502, DISPATCH_FAILED)
        except Exception:
            logger.exception("webhook.unhandled_error")
            return _text(400, INVALID_REQUEST)

    def close(self) -> None:
        self.cache.clear()
        close = getattr(self.cache.geocoder, "close", None)
        if close is not None:
            close()


def build_handler(settings: Settings) -> WebhookHandler:
    geocoder = GoogleGeocoder(settings.google_maps_api_key)
    cache = AddressCache(geocoder)
    dispatcher = CallDispatcher(
        build_client(settings),
        settings.twilio_number,
        status_callback=settings.status_callback_url,
    )
    return WebhookHandler(cache, dispatcher)


# Built once per container, on first request.
_handler: Optional[WebhookHandler] = None


def get_handler() -> WebhookHandler:
    global _handler
    if _handler is None:
        _handler = build_handler(load_settings())
    return _handler


def lambda_handler(event, context):
    logger.info(
        "webhook.lambda_start",
        extra={"request_id": getattr(context, "aws_request_id", None)},
    )

    try:
        handler = get_handler()
    except ConfigError as e:
        # Misconfiguration is a 500, not a 4xx
        logger.error("webhook.env_error", extra={"error": str(e)})
        return _text(500, MISCONFIGURED)

    return handler.handle(event)
