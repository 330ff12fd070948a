import json
from pathlib import Path
from urllib.parse import parse_qs, urlparse

import pytest

from motoalarm.utils.address_cache import AddressCache
from motoalarm.utils.twilio_client import CallDispatcher

EVENTS_DIR = Path(__file__).parent / "events"

FROM_NUMBER = "+15555550100"
ADDRESS = "350 5th Ave, New York, NY 10118, USA"


class StubCall:
    def __init__(self, sid="CAXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXXX"):
        self.sid = sid


class StubCalls:
    def __init__(self, error=None):
        self.created = []
        self.error = error

    # Twilio SDK uses .calls.create(...). We record the kwargs.
    def create(self, **kwargs):
        if self.error is not None:
            raise self.error
        self.created.append(kwargs)
        return StubCall()


class StubTwilioClient:
    def __init__(self, error=None):
        self.calls = StubCalls(error)


class StubGeocoder:
    def __init__(self, address=ADDRESS, error=None):
        self.address = address
        self.error = error
        self.lookups = []
        self.closed = False

    def reverse(self, latitude, longitude):
        self.lookups.append((latitude, longitude))
        if self.error is not None:
            raise self.error
        return self.address

    def close(self):
        self.closed = True


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def _load_event(name):
    with open(EVENTS_DIR / name, "r", encoding="utf-8") as f:
        return json.load(f)


def _spoken_twiml(call_kwargs):
    """Pull the TwiML back out of the Twimlets echo URL."""
    query = parse_qs(urlparse(call_kwargs["url"]).query)
    return query["Twiml"][0]


@pytest.fixture
def load_event():
    return _load_event


@pytest.fixture
def spoken_twiml():
    return _spoken_twiml


@pytest.fixture
def address():
    return ADDRESS


@pytest.fixture
def from_number():
    return FROM_NUMBER


@pytest.fixture
def make_geocoder():
    return StubGeocoder


@pytest.fixture
def make_twilio():
    return StubTwilioClient


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def geocoder():
    return StubGeocoder()


@pytest.fixture
def twilio():
    return StubTwilioClient()


@pytest.fixture
def cache(geocoder, clock):
    return AddressCache(geocoder, clock=clock)


@pytest.fixture
def dispatcher(twilio):
    return CallDispatcher(twilio, FROM_NUMBER)
