"""Applies inbound station payloads to the station device and its sensors."""

from datetime import datetime
from typing import Any, Callable, Dict, Optional
import logging
import threading

from ventus.shared.exceptions import (
    ConversionError,
    DeviceDisabledError,
    DeviceNotFoundError,
    StoreWriteError,
)
from ventus.shared.models import SensorEntity, WeatherPayload
from .bootstrap import SensorCatalogBootstrapper
from .catalog import FIELD_DATE_UTC, FIELD_MODEL, FIELD_STATION_TYPE
from .normalizer import normalize
from .stores.base import DeviceStore

logger = logging.getLogger(__name__)

ATTR_VALUE = "value"
ATTR_LOG = "log"

# (attribute on the parent, payload field, suffix)
STATION_ATTRIBUTES = (
    ("stationType", FIELD_STATION_TYPE, ""),
    ("model", FIELD_MODEL, ""),
    ("dateUtc", FIELD_DATE_UTC, " UTC"),
)

LAST_UPDATE_FORMAT = "%d-%m %H:%M:%S"

_parent_locks: Dict[int, threading.Lock] = {}
_parent_locks_guard = threading.Lock()


def parent_lock(parent_id: int) -> threading.Lock:
    """Return the process-wide lock serializing cycles for one station."""
    with _parent_locks_guard:
        return _parent_locks.setdefault(parent_id, threading.Lock())


class StationHandler:
    """Handles every payload pushed by one station."""

    def __init__(
        self,
        store: DeviceStore,
        parent_id: int,
        bootstrapper: Optional[SensorCatalogBootstrapper] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self.parent_id = parent_id
        self.bootstrapper = bootstrapper or SensorCatalogBootstrapper(store)
        self.clock = clock
        self.entities: Optional[Dict[int, SensorEntity]] = None

    def start(self) -> bool:
        """Reconcile the sensor children of the station.

        Returns:
            True when the sensors are ready, False when the station is
            disabled, missing or the store rejected a write.
        """
        try:
            self.entities = self.bootstrapper.reconcile(self.parent_id)
        except DeviceDisabledError as e:
            logger.warning(f"The weather station device is disabled! ({e})")
            return False
        except DeviceNotFoundError as e:
            logger.warning(f"Weather station device not found: {e}")
            return False
        except StoreWriteError as e:
            logger.error(f"Failed to set up sensor devices, retrying on next payload: {e}")
            self.entities = None
            return False
        return True

    def handle(self, payload: WeatherPayload) -> None:
        """Process one inbound payload to completion."""
        with parent_lock(self.parent_id):
            self._handle(payload)

    def _handle(self, payload: WeatherPayload) -> None:
        try:
            parent = self.store.get_parent(self.parent_id)
        except DeviceNotFoundError as e:
            logger.warning(f"Skipping payload, station device not found: {e}")
            return

        if not parent.enabled:
            logger.warning(f"Skipping payload, station device {parent.name} is disabled")
            return

        if self.entities is None and not self.start():
            return

        self._update_station(payload)

        updated = 0
        for entity in self.entities.values():
            if self._update_entity(entity, payload):
                updated += 1

        logger.info(f"Updated {updated} of {len(self.entities)} sensors")

    def _update_station(self, payload: WeatherPayload) -> None:
        for attribute, field_name, suffix in STATION_ATTRIBUTES:
            raw = payload.get(field_name)
            if raw is None:
                continue
            self._write(self.parent_id, attribute, f"{raw}{suffix}")

        self._write(self.parent_id, ATTR_LOG, self.clock().strftime(LAST_UPDATE_FORMAT))

    def _update_entity(self, entity: SensorEntity, payload: WeatherPayload) -> bool:
        if entity.source_field not in payload:
            logger.debug(f"{entity.source_field} not in payload, keeping {entity.name}")
            return False

        try:
            result = normalize(entity.source_field, payload, entity.rule)
        except ConversionError as e:
            logger.warning(f"Skipping {entity.name}: {e}")
            return False

        if result.value is None:
            return False

        if not self._write(entity.id, ATTR_VALUE, result.value):
            return False
        entity.current_value = result.value

        if result.annotation is not None and self._write(entity.id, ATTR_LOG, result.annotation):
            entity.annotation = result.annotation

        logger.debug(f"{entity.name} = {result.value} {entity.unit or ''}".rstrip())
        return True

    def _write(self, device_id: int, name: str, value: Any) -> bool:
        try:
            self.store.write_attribute(device_id, name, value)
            return True
        except StoreWriteError as e:
            logger.error(f"Failed to write {name} on device {device_id}: {e}")
            return False
