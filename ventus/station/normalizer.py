"""Conversion of raw station fields into metric display values.

The station reports imperial units as strings. Every function here is pure:
it reads the payload and returns a ``Normalized(value, annotation)`` pair.
A missing primary field yields ``Normalized(None, None)`` and a missing
companion field marks its annotation as unavailable, so an incomplete push
never aborts a cycle and never leaves a stale annotation behind. Present but non-numeric values raise ``ConversionError``.
"""

import math
from typing import Callable, Dict, Optional, Union

from ventus.shared.exceptions import ConversionError
from ventus.shared.models import ConversionRule, Normalized, Number, WeatherPayload
from .catalog import FIELD_MAX_DAILY_GUST, FIELD_MONTHLY_RAIN, rule_for

INHG_PER_HPA = 0.029529983071445
KMH_PER_MPH = 1.609344
MM_PER_INCH = 25.4

# Upper bounds (inclusive) of each UV tier; anything above the last is "Very High"
UV_TIERS = (
    (0, "None"),
    (2, "Very Low"),
    (4, "Low"),
    (6, "Moderate"),
    (8, "High"),
)
UV_TOP_LABEL = "Very High"

# Shown instead of a companion value the station did not send
UNAVAILABLE = "unavailable"


def round_half_up(value: float, digits: int = 2) -> float:
    """Round half up (floor(x * 10**digits + 0.5)), matching the station readout."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def parse_number(raw: Union[str, int, float]) -> Number:
    """Parse a raw payload value.

    Integral strings become ``int``, everything else numeric becomes ``float``.

    Raises:
        ConversionError: If the value is not a finite number.
    """
    if isinstance(raw, bool):
        raise ConversionError(f"Not a number: {raw!r}")

    if isinstance(raw, (int, float)):
        value: Number = raw
    else:
        text = str(raw).strip()
        if "_" in text:
            raise ConversionError(f"Not a number: {raw!r}")
        try:
            return int(text)
        except ValueError:
            pass
        try:
            value = float(text)
        except ValueError:
            raise ConversionError(f"Not a number: {raw!r}") from None

    if isinstance(value, float) and not math.isfinite(value):
        raise ConversionError(f"Not a finite number: {raw!r}")
    return value


def _field(payload: WeatherPayload, name: str) -> Optional[Number]:
    """Parse ``payload[name]``, or return None when the field is absent."""
    raw = payload.get(name)
    if raw is None:
        return None
    return parse_number(raw)


def fahrenheit_to_celsius(fahrenheit: float) -> float:
    return round_half_up((fahrenheit - 32) * 5 / 9)


def inhg_to_hpa(inhg: float) -> float:
    return round_half_up(inhg / INHG_PER_HPA)


def mph_to_kmh(mph: float) -> float:
    return round_half_up(mph * KMH_PER_MPH)


def inch_to_mm(inches: float) -> float:
    return inches * MM_PER_INCH


def uv_label(uv_index: float) -> str:
    """Return the descriptive tier for a UV index."""
    for upper, label in UV_TIERS:
        if uv_index <= upper:
            return label
    return UV_TOP_LABEL


def _temperature(source_field: str, payload: WeatherPayload) -> Normalized:
    value = _field(payload, source_field)
    if value is None:
        return Normalized(None)
    return Normalized(fahrenheit_to_celsius(value))


def _uv_index(source_field: str, payload: WeatherPayload) -> Normalized:
    value = _field(payload, source_field)
    if value is None:
        return Normalized(None)
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return Normalized(value, uv_label(value))


def _pressure(source_field: str, payload: WeatherPayload) -> Normalized:
    value = _field(payload, source_field)
    if value is None:
        return Normalized(None)
    return Normalized(inhg_to_hpa(value))


def _wind_speed(source_field: str, payload: WeatherPayload) -> Normalized:
    value = _field(payload, source_field)
    if value is None:
        return Normalized(None)
    return Normalized(mph_to_kmh(value))


def _wind_gust(source_field: str, payload: WeatherPayload) -> Normalized:
    value = _field(payload, source_field)
    if value is None:
        return Normalized(None)

    max_gust = _field(payload, FIELD_MAX_DAILY_GUST)
    shown = UNAVAILABLE if max_gust is None else mph_to_kmh(max_gust)
    return Normalized(mph_to_kmh(value), f"Max: {shown} km/u")


def _rainfall(source_field: str, payload: WeatherPayload) -> Normalized:
    value = _field(payload, source_field)
    if value is None:
        return Normalized(None)

    monthly = _field(payload, FIELD_MONTHLY_RAIN)
    shown = UNAVAILABLE if monthly is None else round_half_up(inch_to_mm(monthly), 1)
    return Normalized(inch_to_mm(value), f"Month: {shown} mm")


def _passthrough(source_field: str, payload: WeatherPayload) -> Normalized:
    return Normalized(_field(payload, source_field))


RULES: Dict[ConversionRule, Callable[[str, WeatherPayload], Normalized]] = {
    ConversionRule.FAHRENHEIT_TO_CELSIUS: _temperature,
    ConversionRule.UV_INDEX: _uv_index,
    ConversionRule.INHG_TO_HPA: _pressure,
    ConversionRule.MPH_TO_KMH: _wind_speed,
    ConversionRule.WIND_GUST: _wind_gust,
    ConversionRule.RAINFALL: _rainfall,
    ConversionRule.PASSTHROUGH: _passthrough,
}


def normalize(
    source_field: str,
    payload: WeatherPayload,
    rule: Optional[ConversionRule] = None,
) -> Normalized:
    """Convert one payload field into its display value and annotation.

    Args:
        source_field: Payload key the sensor is bound to.
        payload: The full inbound payload (companion fields are read from it).
        rule: Rule to apply. Defaults to the catalog rule for ``source_field``.

    Returns:
        ``Normalized(value, annotation)``; ``value`` is None when the field
        is absent from the payload.

    Raises:
        ConversionError: If a field the rule reads is present but not numeric.
    """
    if rule is None:
        rule = rule_for(source_field)
    return RULES[rule](source_field, payload)
