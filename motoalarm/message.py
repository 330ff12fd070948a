import math
from typing import List, Optional

from motoalarm.telemetry import TelemetryRecord

PREAMBLE = "Motorbike alarm activated."
GOODBYE = "Goodbye!"
UNKNOWN = "unknown"


def floor_voltage(voltage: float) -> float:
    """Round down to 0.1 V, toward negative infinity (-0.05 -> -0.1)."""
    return math.floor(voltage * 10) / 10


def _format_voltage(voltage: Optional[float]) -> str:
    if voltage is None or not math.isfinite(voltage):
        return UNKNOWN
    return f"{floor_voltage(voltage):.1f}"


def _format_number(value: Optional[float]) -> str:
    if value is None or not math.isfinite(value):
        return UNKNOWN
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def _one_line(text: str) -> str:
    return " ".join(text.split())


def compose_lines(record: TelemetryRecord, address: Optional[str]) -> List[str]:
    """
    The spoken script, one entry per <Say>: the alarm report, then the
    closing line.
    """
    report = (
        f"{PREAMBLE} "
        f"Current Location: {address or UNKNOWN}. "
        f"Device: {record.device_name or UNKNOWN}. "
        f"Tracker Battery Level: {_format_number(record.battery_level)}%. "
        f"External Power Source Voltage: {_format_voltage(record.external_voltage)} volts."
    )
    return [_one_line(report), GOODBYE]


def compose(record: TelemetryRecord, address: Optional[str]) -> str:
    return " ".join(compose_lines(record, address))
