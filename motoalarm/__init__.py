"""
Motorbike Alarm Voice Caller
============================

Receives webhook notifications from a motorbike GPS tracker and, when the
alarm fires while the engine is off, phones the owner through Twilio and
reads out where the bike is, using Google reverse geocoding for the address.

Modules under this package:
- webhook.py      → HTTP endpoint for tracker events (/webhook)
- status.py       → Twilio call status webhook (/twilio/status)
- health.py       → Health check (/health)
- telemetry.py    → tracker payload record and the "should we call" rule
- message.py      → spoken message composition
- local_server.py → Flask app serving the handlers on PORT for local runs
- utils/          → Shared helpers (logging, config, secrets, geocoding, Twilio)

Environment variables expected:
  • TWILIO_ACCOUNT_SID    - Twilio account SID
  • TWILIO_AUTH_TOKEN     - Twilio auth token
  • TWILIO_NUMBER         - Caller ID for outbound calls
  • GOOGLE_MAPS_API_KEY   - Google Geocoding API key
  • PORT                  - Local server port (default: 3000)
  • TWILIO_SECRET_NAME    - Secrets Manager secret with Twilio credentials (optional)
  • STATUS_CALLBACK_URL   - Twilio call status callback URL (optional)
  • LOG_LEVEL             - Log verbosity (default: INFO)
"""

__version__ = "1.0.0"
__license__ = "MIT"

__all__ = ["__version__"]
