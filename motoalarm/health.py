import json

from motoalarm import __version__
from motoalarm.utils.logger import log


def lambda_handler(event, context):
    method = (event or {}).get("requestContext", {}).get("http", {}).get("method", "GET")
    log("health.check", path="/health", method=method)
    return {
        "statusCode": 200,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps({"status": "ok", "version": __version__}),
    }
