"""Core data models for the weather station sensors."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, NamedTuple, Optional, Union

# One inbound push from the station: field name -> raw (string) value.
WeatherPayload = Dict[str, str]

Number = Union[int, float]


class SensorKind(Enum):
    """Kind of child device created for a catalog entry."""
    SENSOR = "Sensor"


class ConversionRule(Enum):
    """Selects how a raw payload field is turned into a display value."""
    FAHRENHEIT_TO_CELSIUS = "fahrenheit_to_celsius"
    UV_INDEX = "uv_index"
    INHG_TO_HPA = "inhg_to_hpa"
    MPH_TO_KMH = "mph_to_kmh"
    WIND_GUST = "wind_gust"
    RAINFALL = "rainfall"
    PASSTHROUGH = "passthrough"


@dataclass(frozen=True)
class SensorDefinition:
    """A single entry of the static sensor catalog."""
    name: str
    source_field: str
    device_type: str
    rule: ConversionRule = ConversionRule.PASSTHROUGH
    unit: Optional[str] = None
    kind: SensorKind = SensorKind.SENSOR


@dataclass
class ParentDevice:
    """The station device that owns the sensor children."""
    id: int
    name: str
    enabled: bool = True


@dataclass
class ChildDevice:
    """A child device as the device store reports it."""
    id: int
    parent_id: int
    name: str
    device_type: str
    metadata: Dict[str, str] = field(default_factory=dict)


@dataclass
class SensorEntity:
    """In-memory handle bound to one persisted sensor child.

    The store owns the persisted value; ``current_value`` and ``annotation``
    mirror whatever was last written through this handle.
    """
    id: int
    parent_id: int
    name: str
    source_field: str
    rule: ConversionRule = ConversionRule.PASSTHROUGH
    unit: Optional[str] = None
    current_value: Optional[Number] = None
    annotation: Optional[str] = None


class Normalized(NamedTuple):
    """Display value and optional annotation produced for one field."""
    value: Optional[Number]
    annotation: Optional[str] = None
