import json
import logging

from motoalarm import __version__, health, status


def test_call_status_is_acknowledged_and_logged(monkeypatch, load_event):
    logged = []
    monkeypatch.setattr(status, "log", lambda message, **fields: logged.append((message, fields)))

    resp = status.lambda_handler(load_event("twilio_call_status.json"), None)

    assert resp["statusCode"] == 200
    assert json.loads(resp["body"]) == {"ok": True}

    message, fields = logged[0]
    assert message == "twilio.call_status"
    assert fields["CallSid"] == "CA0123456789abcdef0123456789abcdef"
    assert fields["CallStatus"] == "completed"
    assert fields["To"] == "+15555550123"
    assert fields["CallDuration"] == "23"
    assert fields["ErrorCode"] is None
    assert fields["raw"]["CallSid"] == "CA0123456789abcdef0123456789abcdef"
    assert fields["raw"]["From"] == "+15555550100"


def test_call_status_tolerates_empty_body():
    resp = status.lambda_handler({}, None)
    assert resp["statusCode"] == 200


def test_health():
    resp = health.lambda_handler({"requestContext": {"http": {"method": "GET"}}}, None)

    assert resp["statusCode"] == 200
    assert json.loads(resp["body"]) == {"status": "ok", "version": __version__}


def test_json_formatter_includes_extra_fields():
    from motoalarm.utils.logger import JsonFormatter

    record = logging.LogRecord("webhook", logging.INFO, __file__, 1, "webhook.call_initiated", (), None)
    record.to = "+15555550123"

    payload = json.loads(JsonFormatter().format(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "webhook"
    assert payload["message"] == "webhook.call_initiated"
    assert payload["to"] == "+15555550123"
