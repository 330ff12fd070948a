import os
from dataclasses import dataclass
from typing import Mapping, Optional

from botocore.exceptions import BotoCoreError, ClientError

from motoalarm.utils.logger import get_logger
from motoalarm.utils.secrets import get_twilio_secrets

logger = get_logger("config")

DEFAULT_PORT = 3000
DEFAULT_REGION = "us-east-1"


class ConfigError(RuntimeError):
    """Raised when required settings are missing or invalid."""


@dataclass(frozen=True)
class Settings:
    twilio_account_sid: str
    twilio_auth_token: str
    twilio_number: str
    google_maps_api_key: str
    port: int = DEFAULT_PORT
    status_callback_url: Optional[str] = None

    def __repr__(self) -> str:
        # Keep credentials out of logs and tracebacks.
        return (
            f"Settings(twilio_number={self.twilio_number!r}, port={self.port}, "
            f"status_callback_url={self.status_callback_url!r})"
        )


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from environment variables, once, at startup.

    TWILIO_ACCOUNT_SID / TWILIO_AUTH_TOKEN may instead live in the Secrets
    Manager secret named by TWILIO_SECRET_NAME; explicit env values win.

    Raises ConfigError listing every missing variable.
    """
    env = os.environ if environ is None else environ

    account_sid = env.get("TWILIO_ACCOUNT_SID")
    auth_token = env.get("TWILIO_AUTH_TOKEN")

    secret_name = env.get("TWILIO_SECRET_NAME")
    if secret_name and not (account_sid and auth_token):
        try:
            secrets = get_twilio_secrets(secret_name, env.get("AWS_REGION", DEFAULT_REGION))
        except (BotoCoreError, ClientError, RuntimeError, ValueError) as e:
            msg = f"Could not load Twilio secret '{secret_name}': {e}"
            logger.error(msg)
            raise ConfigError(msg) from e
        account_sid = account_sid or secrets.get("account_sid")
        auth_token = auth_token or secrets.get("auth_token")

    values = {
        "TWILIO_ACCOUNT_SID": account_sid,
        "TWILIO_AUTH_TOKEN": auth_token,
        "TWILIO_NUMBER": env.get("TWILIO_NUMBER"),
        "GOOGLE_MAPS_API_KEY": env.get("GOOGLE_MAPS_API_KEY"),
    }

    missing = [name for name, value in values.items() if not value]
    if missing:
        msg = f"Missing required environment variables: {', '.join(missing)}"
        logger.error(msg)
        raise ConfigError(msg)

    port_str = env.get("PORT") or str(DEFAULT_PORT)
    try:
        port = int(port_str)
    except ValueError:
        msg = f"Invalid PORT='{port_str}'. Must be an integer."
        logger.error(msg)
        raise ConfigError(msg)

    return Settings(
        twilio_account_sid=values["TWILIO_ACCOUNT_SID"],
        twilio_auth_token=values["TWILIO_AUTH_TOKEN"],
        twilio_number=values["TWILIO_NUMBER"],
        google_maps_api_key=values["GOOGLE_MAPS_API_KEY"],
        port=port,
        status_callback_url=env.get("STATUS_CALLBACK_URL") or None,
    )
