"""Feeds newline-delimited upload bodies to a station handler."""

import logging
from typing import Iterable

from ventus.shared.exceptions import PayloadError
from .handler import StationHandler
from .payload import parse_payload

logger = logging.getLogger(__name__)


def process_lines(handler: StationHandler, lines: Iterable[str]) -> int:
    """Handle one payload per line until the input is exhausted.

    Blank lines are ignored and undecodable lines are logged and skipped.

    Returns:
        Number of payloads handed to the handler.
    """
    processed = 0
    for line_number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        try:
            payload = parse_payload(line)
        except PayloadError as e:
            logger.warning(f"Skipping line {line_number}: {e}")
            continue

        try:
            handler.handle(payload)
            processed += 1
        except Exception as e:
            logger.error(f"Failed to handle payload on line {line_number}: {e}")
    return processed
