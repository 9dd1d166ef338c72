"""Decoding of the station's upload body into a flat payload."""

import json
import logging
from urllib.parse import parse_qsl

from ventus.shared.exceptions import PayloadError
from ventus.shared.models import WeatherPayload

logger = logging.getLogger(__name__)

# Station credentials sent with every upload; never kept.
DROPPED_FIELDS = {"PASSKEY"}


def parse_payload(text: str) -> WeatherPayload:
    """Parse one upload body.

    Accepts the JSON object a forwarding server produces as well as the raw
    form-encoded body of the station's custom upload.

    Args:
        text: The body, JSON (``{...}``) or ``key=value&...``.

    Returns:
        Mapping of field name to string value.

    Raises:
        PayloadError: If the body is neither a JSON object nor form data.
    """
    text = text.strip()
    if not text:
        raise PayloadError("Empty payload")

    if text.startswith("{"):
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise PayloadError(f"Invalid JSON payload: {e}") from e
        if not isinstance(data, dict):
            raise PayloadError("JSON payload is not an object")
        items = data.items()
    else:
        try:
            items = parse_qsl(text, keep_blank_values=True, strict_parsing=True)
        except ValueError as e:
            raise PayloadError(f"Invalid form payload: {e}") from e

    payload: WeatherPayload = {}
    for key, value in items:
        if key in DROPPED_FIELDS:
            continue
        if isinstance(value, (dict, list)):
            logger.debug(f"Ignoring nested field {key}")
            continue
        payload[str(key)] = value if value is None else str(value)
    return payload
