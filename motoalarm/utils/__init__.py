"""
Motorbike Alarm Voice Caller Utilities
======================================

Shared helper modules:

- logger.py          → structured JSON logging
- config.py          → startup settings from the environment
- secrets.py         → AWS Secrets Manager integration
- geocoder.py        → Google reverse geocoding client
- address_cache.py   → TTL cache in front of the geocoder
- twilio_client.py   → Twilio client builder and voice call dispatcher
"""
