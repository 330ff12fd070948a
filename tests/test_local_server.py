import os

import pytest

from motoalarm import local_server
from motoalarm.local_server import create_app
from motoalarm.webhook import WebhookHandler


@pytest.fixture
def client(cache, dispatcher):
    app = create_app(WebhookHandler(cache, dispatcher))
    app.config["TESTING"] = True
    return app.test_client()


def test_webhook_route_places_call(client, twilio):
    resp = client.post(
        "/webhook",
        json={
            "alarm.event": True,
            "engine.ignition.status": False,
            "position.latitude": 40.0,
            "position.longitude": -73.0,
            "battery.level": 55,
            "external.powersource.voltage": 12.34,
            "device.name": "Bike1",
        },
        headers={"X-Phone-Number": "+15555550123"},
    )

    assert resp.status_code == 200
    assert resp.get_data(as_text=True) == "Call initiated"
    assert resp.headers["Content-Type"].startswith("text/plain")
    assert len(twilio.calls.created) == 1
    assert twilio.calls.created[0]["to"] == "+15555550123"


def test_webhook_route_rejects_garbage(client, twilio):
    resp = client.post("/webhook", data="not json", content_type="application/json")

    assert resp.status_code == 400
    assert twilio.calls.created == []


def test_status_route(client):
    resp = client.post("/twilio/status", data={"CallSid": "CA1", "CallStatus": "ringing"})

    assert resp.status_code == 200
    assert resp.get_json() == {"ok": True}


def test_health_route(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.get_json()["status"] == "ok"


def test_webhook_route_sends_cors_headers(client):
    resp = client.post(
        "/webhook",
        json={"alarm.event": False},
        headers={"Origin": "https://dashboard.example.com"},
    )

    assert resp.status_code == 200
    assert resp.headers["Access-Control-Allow-Origin"] == "*"


def test_webhook_route_answers_preflight(client):
    resp = client.options(
        "/webhook",
        headers={
            "Origin": "https://dashboard.example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "x-phone-number",
        },
    )

    assert resp.status_code == 200
    assert resp.headers["Access-Control-Allow-Origin"] == "*"


def test_main_loads_dotenv_from_working_directory(monkeypatch, tmp_path):
    required = ("TWILIO_ACCOUNT_SID", "TWILIO_AUTH_TOKEN", "TWILIO_NUMBER", "GOOGLE_MAPS_API_KEY")
    env = {k: v for k, v in os.environ.items() if k not in required + ("TWILIO_SECRET_NAME", "PORT")}
    # A private copy so values read from .env don't leak into other tests.
    monkeypatch.setattr(os, "environ", env)
    (tmp_path / ".env").write_text("TWILIO_NUMBER=+15555550100\nPORT=4000\n")
    monkeypatch.chdir(tmp_path)

    # Only part of the required settings are in .env, so startup stops at validation.
    assert local_server.main() == 1

    assert env["TWILIO_NUMBER"] == "+15555550100"
    assert env["PORT"] == "4000"
