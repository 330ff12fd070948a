import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional

# Dot-delimited keys as sent by the tracker webhook.
ALARM_EVENT = "alarm.event"
BATTERY_LEVEL = "battery.level"
EXTERNAL_VOLTAGE = "external.powersource.voltage"
DEVICE_NAME = "device.name"
LATITUDE = "position.latitude"
LONGITUDE = "position.longitude"
ENGINE_IGNITION = "engine.ignition.status"

_TRUE_STRINGS = {"true", "1", "yes", "on"}


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return False


def _as_float(value: Any) -> Optional[float]:
    """Numbers and numeric strings; NaN, infinities and anything else become None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
    elif not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def _as_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class TelemetryRecord:
    alarm_triggered: bool = False
    engine_on: bool = False
    battery_level: Optional[float] = None
    external_voltage: Optional[float] = None
    device_name: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    destination: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], destination: Optional[str] = None) -> "TelemetryRecord":
        """
        Build a record from a decoded webhook body.

        Missing or unusable fields fall back to False / None instead of
        rejecting the payload.
        """
        return cls(
            alarm_triggered=_as_bool(payload.get(ALARM_EVENT)),
            engine_on=_as_bool(payload.get(ENGINE_IGNITION)),
            battery_level=_as_float(payload.get(BATTERY_LEVEL)),
            external_voltage=_as_float(payload.get(EXTERNAL_VOLTAGE)),
            device_name=_as_str(payload.get(DEVICE_NAME)),
            latitude=_as_float(payload.get(LATITUDE)),
            longitude=_as_float(payload.get(LONGITUDE)),
            destination=_as_str(destination),
        )


def should_call(record: TelemetryRecord) -> bool:
    """Alarm went off while the engine is off."""
    return bool(record.alarm_triggered) and not record.engine_on
