"""Pytest fixtures for the weather station tests."""

from datetime import datetime

import pytest

from ventus.shared.exceptions import StoreWriteError
from ventus.station.bootstrap import SensorCatalogBootstrapper
from ventus.station.handler import StationHandler
from ventus.station.stores.memory import MemoryDeviceStore

PARENT_ID = 1


@pytest.fixture
def store() -> MemoryDeviceStore:
    """Memory store holding one enabled station device."""
    store = MemoryDeviceStore()
    store.add_parent(PARENT_ID, "Ventus W830")
    return store


@pytest.fixture
def bootstrapper(store) -> SensorCatalogBootstrapper:
    return SensorCatalogBootstrapper(store)


@pytest.fixture
def handler(store) -> StationHandler:
    """Handler with a frozen clock."""
    return StationHandler(store, PARENT_ID, clock=lambda: datetime(2022, 3, 21, 19, 43, 31))


@pytest.fixture
def sample_payload() -> dict:
    """Upload captured from a WS2900 console (PASSKEY removed)."""
    return {
        "stationtype": "EasyWeatherV1.6.1",
        "dateutc": "2022-03-21 18:43:31",
        "tempinf": "72.9",
        "humidityin": "40",
        "baromrelin": "29.938",
        "baromabsin": "30.337",
        "tempf": "55.9",
        "humidity": "66",
        "winddir": "24",
        "windspeedmph": "0.0",
        "windgustmph": "0.0",
        "maxdailygust": "8.1",
        "rainratein": "0.000",
        "eventrainin": "0.000",
        "hourlyrainin": "0.000",
        "dailyrainin": "0.000",
        "weeklyrainin": "0.000",
        "monthlyrainin": "0.020",
        "totalrainin": "25.780",
        "solarradiation": "0.00",
        "uv": "0",
        "wh65batt": "0",
        "freq": "868M",
        "model": "WS2900_V2.01.14",
    }


class FlakyStore(MemoryDeviceStore):
    """Memory store whose n-th metadata write fails once."""

    def __init__(self, fail_on_call: int):
        super().__init__()
        self.fail_on_call = fail_on_call
        self.metadata_calls = 0

    def set_metadata(self, device_id, key, value):
        self.metadata_calls += 1
        if self.metadata_calls == self.fail_on_call:
            raise StoreWriteError("transient")
        super().set_metadata(device_id, key, value)
