import base64
import json
from urllib.parse import parse_qs

from motoalarm.utils.logger import log

# Fields Twilio posts to a voice call StatusCallback that are worth keeping.
_LOGGED_FIELDS = ("CallSid", "CallStatus", "To", "From", "CallDuration", "ErrorCode")


def lambda_handler(event, context):
    raw_body = event.get("body") or ""
    if event.get("isBase64Encoded"):
        raw_body = base64.b64decode(raw_body).decode("utf-8")
    parsed = parse_qs(raw_body)

    # Flatten: {'CallSid': ['CA...']} → {'CallSid': 'CA...'}
    data = {k: v[0] for k, v in parsed.items() if v}

    log(
        "twilio.call_status",
        raw=data,
        **{field: data.get(field) for field in _LOGGED_FIELDS},
    )

    # Twilio only needs a 2xx; never fail the callback.
    return {
        "statusCode": 200,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps({"ok": True}),
    }
