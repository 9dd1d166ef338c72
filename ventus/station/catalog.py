"""Static catalog of the sensors exposed for a Ventus W830 station."""

from typing import Dict, Tuple

from ventus.shared.models import ConversionRule, SensorDefinition

TYPE_TEMPERATURE = "com.fibaro.temperatureSensor"
TYPE_HUMIDITY = "com.fibaro.humiditySensor"
TYPE_MULTILEVEL = "com.fibaro.multilevelSensor"
TYPE_WIND = "com.fibaro.windSensor"
TYPE_RAIN = "com.fibaro.rainSensor"

# Companion fields read alongside a sensor's own field
FIELD_MAX_DAILY_GUST = "maxdailygust"
FIELD_MONTHLY_RAIN = "monthlyrainin"

# Station-level fields shown on the parent device
FIELD_STATION_TYPE = "stationtype"
FIELD_MODEL = "model"
FIELD_DATE_UTC = "dateutc"

# Declaration order is the creation order for new children.
SENSOR_CATALOG: Tuple[SensorDefinition, ...] = (
    SensorDefinition(
        name="Indoor Temperature",
        source_field="tempinf",
        device_type=TYPE_TEMPERATURE,
        rule=ConversionRule.FAHRENHEIT_TO_CELSIUS,
    ),
    SensorDefinition(
        name="Indoor Humidity",
        source_field="humidityin",
        device_type=TYPE_HUMIDITY,
    ),
    SensorDefinition(
        name="Barometric Pressure",
        source_field="baromabsin",
        device_type=TYPE_MULTILEVEL,
        rule=ConversionRule.INHG_TO_HPA,
        unit="hPa",
    ),
    SensorDefinition(
        name="Outdoor Temperature",
        source_field="tempf",
        device_type=TYPE_TEMPERATURE,
        rule=ConversionRule.FAHRENHEIT_TO_CELSIUS,
    ),
    SensorDefinition(
        name="Outdoor Humidity",
        source_field="humidity",
        device_type=TYPE_HUMIDITY,
    ),
    SensorDefinition(
        name="Wind Speed",
        source_field="windspeedmph",
        device_type=TYPE_WIND,
        rule=ConversionRule.MPH_TO_KMH,
        unit="km/h",
    ),
    SensorDefinition(
        name="Wind Gust",
        source_field="windgustmph",
        device_type=TYPE_WIND,
        rule=ConversionRule.WIND_GUST,
        unit="km/h",
    ),
    SensorDefinition(
        name="Rain Fall",
        source_field="dailyrainin",
        device_type=TYPE_RAIN,
        rule=ConversionRule.RAINFALL,
        unit="mm",
    ),
    SensorDefinition(
        name="Light",
        source_field="solarradiation",
        device_type=TYPE_MULTILEVEL,
        unit="w/m2",
    ),
    SensorDefinition(
        name="UV index",
        source_field="uv",
        device_type=TYPE_MULTILEVEL,
        rule=ConversionRule.UV_INDEX,
        unit="UVI",
    ),
)

CATALOG_BY_FIELD: Dict[str, SensorDefinition] = {
    definition.source_field: definition for definition in SENSOR_CATALOG
}


def rule_for(source_field: str) -> ConversionRule:
    """Return the conversion rule for a payload field.

    Fields outside the catalog are passed through as plain numbers.
    """
    definition = CATALOG_BY_FIELD.get(source_field)
    if definition is None:
        return ConversionRule.PASSTHROUGH
    return definition.rule
