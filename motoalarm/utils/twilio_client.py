# utils/twilio_client.py

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple
from urllib.parse import quote, urlencode

import requests
from twilio.base.exceptions import TwilioException
from twilio.http.http_client import TwilioHttpClient
from twilio.rest import Client as TwilioClient
from twilio.twiml.voice_response import VoiceResponse

from motoalarm.utils.config import Settings
from motoalarm.utils.logger import get_logger

TWIMLET_ECHO_URL = "https://twimlets.com/echo"
TWILIO_TIMEOUT = 10

logger = get_logger("twilio_client")


class CallDispatchError(Exception):
    """Twilio refused or failed to create the outbound call."""


@dataclass(frozen=True)
class CallRequest:
    to: str
    from_: str
    lines: Tuple[str, ...]

    @property
    def message(self) -> str:
        return " ".join(self.lines)


def build_client(settings: Settings) -> TwilioClient:
    """
    Build a Twilio REST client whose HTTP calls time out instead of hanging.
    """
    client = TwilioClient(
        settings.twilio_account_sid,
        settings.twilio_auth_token,
        http_client=TwilioHttpClient(timeout=TWILIO_TIMEOUT),
    )
    logger.info("Twilio client initialized successfully")
    return client


def render_twiml(lines: Iterable[str]) -> str:
    """One <Say> per spoken line."""
    response = VoiceResponse()
    for line in lines:
        response.say(line)
    return str(response)


def echo_url(twiml: str) -> str:
    # Twimlets echo serves back whatever TwiML it is handed in the query string.
    return f"{TWIMLET_ECHO_URL}?{urlencode({'Twiml': twiml}, quote_via=quote)}"


class CallDispatcher:
    def __init__(self, client, from_number: str, status_callback: Optional[str] = None):
        self.client = client
        self.from_number = from_number
        self.status_callback = status_callback

    def dispatch(self, to: str, lines: Iterable[str]) -> str:
        """
        Place a voice call that reads `lines` aloud. Returns the call SID.
        """
        request = CallRequest(to=to, from_=self.from_number, lines=tuple(lines))

        params = {
            "url": echo_url(render_twiml(request.lines)),
            "to": request.to,
            "from_": request.from_,
        }
        if self.status_callback:
            params["status_callback"] = self.status_callback

        try:
            call = self.client.calls.create(**params)
        except (TwilioException, requests.RequestException) as e:
            logger.error(
                "twilio.call_error",
                extra={"to": request.to, "error": str(e)},
            )
            raise CallDispatchError(str(e)) from e

        sid = getattr(call, "sid", None)
        logger.info("twilio.call_created", extra={"sid": sid, "to": request.to})
        return sid
