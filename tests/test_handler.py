"""Tests for applying payloads to the station and its sensors."""

import threading

import pytest

from ventus.shared.exceptions import StoreWriteError
from ventus.station.handler import StationHandler, parent_lock

from .conftest import PARENT_ID, FlakyStore


def sensor_id(handler, source_field):
    return next(e.id for e in handler.entities.values() if e.source_field == source_field)


def snapshot(store):
    return {device_id: dict(attrs) for device_id, attrs in store.attributes.items()}


def test_end_to_end_payload(store, handler, sample_payload):
    """Test the sample upload produces the expected display values."""
    assert handler.start()
    handler.handle(sample_payload)

    def value(field):
        return store.attribute(sensor_id(handler, field), "value")

    def log(field):
        return store.attribute(sensor_id(handler, field), "log")

    assert value("tempinf") == 22.72
    assert value("tempf") == 13.28
    assert value("humidityin") == 40
    assert value("humidity") == 66
    assert value("uv") == 0
    assert log("uv") == "None"
    assert value("baromabsin") == pytest.approx(1027.34, abs=0.011)
    assert value("windspeedmph") == 0.0
    assert value("windgustmph") == 0.0
    assert log("windgustmph") == "Max: 13.04 km/u"
    assert value("dailyrainin") == 0.0
    assert log("dailyrainin") == "Month: 0.5 mm"
    assert value("solarradiation") == 0.0


def test_entities_mirror_written_values(handler, sample_payload):
    """Test the in-memory entities reflect the last write."""
    handler.handle(sample_payload)

    rain = handler.entities[sensor_id(handler, "dailyrainin")]
    assert rain.current_value == 0.0
    assert rain.annotation == "Month: 0.5 mm"


def test_station_attributes(store, handler, sample_payload):
    """Test station type, model, date and last update are shown on the parent."""
    handler.handle(sample_payload)

    assert store.attribute(PARENT_ID, "stationType") == "EasyWeatherV1.6.1"
    assert store.attribute(PARENT_ID, "model") == "WS2900_V2.01.14"
    assert store.attribute(PARENT_ID, "dateUtc") == "2022-03-21 18:43:31 UTC"
    assert store.attribute(PARENT_ID, "log") == "21-03 19:43:31"


def test_missing_station_fields_keep_previous(store, handler, sample_payload):
    """Test absent station fields leave the previous display untouched."""
    handler.handle(sample_payload)
    del sample_payload["model"]
    del sample_payload["dateutc"]
    sample_payload["stationtype"] = "EasyWeatherV1.6.2"

    handler.handle(sample_payload)

    assert store.attribute(PARENT_ID, "stationType") == "EasyWeatherV1.6.2"
    assert store.attribute(PARENT_ID, "model") == "WS2900_V2.01.14"
    assert store.attribute(PARENT_ID, "dateUtc") == "2022-03-21 18:43:31 UTC"


def test_handle_is_idempotent(store, handler, sample_payload):
    """Test the same payload twice leaves identical state."""
    handler.handle(sample_payload)
    first = snapshot(store)
    handler.handle(sample_payload)

    assert snapshot(store) == first
    assert len(store.list_children(PARENT_ID)) == 10


def test_missing_daily_max_gust(store, handler):
    """Test the gust value is written when the daily maximum is absent."""
    handler.handle({"windgustmph": "10.0"})

    gust = sensor_id(handler, "windgustmph")
    assert store.attribute(gust, "value") == 16.09
    assert store.attribute(gust, "log") == "Max: unavailable km/u"


def test_absent_field_keeps_previous_value(store, handler, sample_payload):
    """Test sensors missing from a payload keep their last value."""
    handler.handle(sample_payload)
    handler.handle({"tempinf": "50.0"})

    assert store.attribute(sensor_id(handler, "tempinf"), "value") == 10.0
    assert store.attribute(sensor_id(handler, "tempf"), "value") == 13.28


def test_bad_field_does_not_block_others(store, handler, sample_payload):
    """Test one non-numeric field only skips its own sensor."""
    handler.handle(sample_payload)
    sample_payload["tempf"] = "abc"
    sample_payload["tempinf"] = "50.0"

    handler.handle(sample_payload)

    assert store.attribute(sensor_id(handler, "tempf"), "value") == 13.28
    assert store.attribute(sensor_id(handler, "tempinf"), "value") == 10.0


def test_store_write_error_does_not_block_others(store, handler, sample_payload):
    """Test a failed write is logged and the cycle continues."""
    handler.start()
    failing = sensor_id(handler, "tempinf")
    write_attribute = store.write_attribute

    def flaky_write(device_id, name, value):
        if device_id == failing:
            raise StoreWriteError("disk full")
        write_attribute(device_id, name, value)

    store.write_attribute = flaky_write
    handler.handle(sample_payload)

    assert store.attribute(failing, "value") is None
    assert handler.entities[failing].current_value is None
    assert store.attribute(sensor_id(handler, "tempf"), "value") == 13.28


def test_disabled_parent_is_a_noop(store, handler, sample_payload):
    """Test nothing is created or written while the station is disabled."""
    store.parents[PARENT_ID].enabled = False

    assert not handler.start()
    handler.handle(sample_payload)

    assert store.list_children(PARENT_ID) == []
    assert store.attributes[PARENT_ID] == {}


def test_sensors_created_once_parent_is_enabled(store, handler, sample_payload):
    """Test a station enabled after start is reconciled on the next payload."""
    store.parents[PARENT_ID].enabled = False
    handler.start()
    store.parents[PARENT_ID].enabled = True

    handler.handle(sample_payload)

    assert len(store.list_children(PARENT_ID)) == 10
    assert store.attribute(sensor_id(handler, "tempinf"), "value") == 22.72


def test_missing_parent_is_a_noop(store, sample_payload):
    """Test a deleted station skips the cycle without raising."""
    handler = StationHandler(store, 999)

    assert not handler.start()
    handler.handle(sample_payload)

    assert handler.entities is None
    assert store.children == {}


def test_parent_deleted_after_start(store, handler, sample_payload):
    """Test a station removed between cycles is skipped."""
    handler.start()
    del store.parents[PARENT_ID]

    handler.handle(sample_payload)

    assert all(e.current_value is None for e in handler.entities.values())


def test_parent_lock_is_shared_per_parent():
    """Test one lock per station id."""
    assert parent_lock(1) is parent_lock(1)
    assert parent_lock(1) is not parent_lock(2)


def test_concurrent_payloads_are_serialized(store, handler, sample_payload):
    """Test cycles for the same station never overlap."""
    handler.start()
    active = []
    overlaps = []
    write_attribute = store.write_attribute

    def tracking_write(device_id, name, value):
        if name == "log" and device_id == PARENT_ID:
            active.append(1)
            if len(active) > 1:
                overlaps.append(1)
        write_attribute(device_id, name, value)

    original_handle = handler._handle

    def tracked_handle(payload):
        try:
            original_handle(payload)
        finally:
            active.clear()

    store.write_attribute = tracking_write
    handler._handle = tracked_handle

    threads = [threading.Thread(target=handler.handle, args=(sample_payload,)) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert overlaps == []
    assert store.attribute(sensor_id(handler, "tempinf"), "value") == 22.72


def test_missing_companion_replaces_stale_annotation(store, handler, sample_payload):
    """Test an annotation from an earlier payload is not shown as current."""
    handler.handle(sample_payload)
    del sample_payload["maxdailygust"]
    del sample_payload["monthlyrainin"]

    handler.handle(sample_payload)

    assert store.attribute(sensor_id(handler, "windgustmph"), "log") == "Max: unavailable km/u"
    assert store.attribute(sensor_id(handler, "dailyrainin"), "log") == "Month: unavailable mm"


def test_store_failure_during_setup_is_retried(sample_payload):
    """Test a write failure while creating sensors skips the cycle and the next one completes setup."""
    store = FlakyStore(fail_on_call=7)
    store.add_parent(PARENT_ID, "Ventus W830")
    handler = StationHandler(store, PARENT_ID)

    handler.handle(sample_payload)

    assert handler.entities is None
    assert store.attribute(PARENT_ID, "log") is None

    handler.handle(sample_payload)

    assert len(handler.entities) == 10
    assert len(store.list_children(PARENT_ID)) == 10
    assert store.attribute(sensor_id(handler, "tempinf"), "value") == 22.72
    assert store.attribute(sensor_id(handler, "baromabsin"), "unit") == "hPa"

    restarted = StationHandler(store, PARENT_ID)
    assert restarted.start()
    assert sorted(restarted.entities) == sorted(handler.entities)


def test_start_reports_store_failure():
    """Test start returns False instead of raising on a store write failure."""
    store = FlakyStore(fail_on_call=1)
    store.add_parent(PARENT_ID, "Ventus W830")
    handler = StationHandler(store, PARENT_ID)

    assert not handler.start()
    assert handler.entities is None
    assert handler.start()
    assert len(handler.entities) == 10
