"""Sensor metrics shown on the dashboard."""
from __future__ import annotations

from enum import Enum
from typing import Dict, Tuple


class MetricType(Enum):
    TEMPERATURE = "temperature"
    HUMIDITY = "humidity"
    PRESSURE = "pressure"
    DEW_POINT = "dew_point"
    CLOUD_COVER = "cloud_cover"
    SKY_TEMPERATURE = "sky_temperature"
    SKY_BRIGHTNESS = "sky_brightness"
    SKY_QUALITY = "sky_quality"
    RAIN_RATE = "rain_rate"
    WIND_SPEED = "wind_speed"
    WIND_GUST = "wind_gust"
    WIND_DIRECTION = "wind_direction"
    STAR_FWHM = "star_fwhm"
    IS_SAFE = "is_safe"

    @property
    def display_name(self) -> str:
        return _METRIC_INFO[self][0]

    @property
    def unit(self) -> str:
        return _METRIC_INFO[self][1]

    @property
    def number_format(self) -> str:
        return _METRIC_INFO[self][2]


# display name, unit, format spec for hover readouts
_METRIC_INFO: Dict[MetricType, Tuple[str, str, str]] = {
    MetricType.TEMPERATURE: ("Temperature", "°C", ".1f"),
    MetricType.HUMIDITY: ("Humidity", "%", ".0f"),
    MetricType.PRESSURE: ("Pressure", "hPa", ".1f"),
    MetricType.DEW_POINT: ("Dew Point", "°C", ".1f"),
    MetricType.CLOUD_COVER: ("Cloud Cover", "%", ".0f"),
    MetricType.SKY_TEMPERATURE: ("Sky Temperature", "°C", ".1f"),
    MetricType.SKY_BRIGHTNESS: ("Sky Brightness", "Lux", ".2f"),
    MetricType.SKY_QUALITY: ("Sky Quality", "mpsas", ".2f"),
    MetricType.RAIN_RATE: ("Rain Rate", "mm/hr", ".1f"),
    MetricType.WIND_SPEED: ("Wind Speed", "m/s", ".1f"),
    MetricType.WIND_GUST: ("Wind Gust", "m/s", ".1f"),
    MetricType.WIND_DIRECTION: ("Wind Direction", "°", ".0f"),
    MetricType.STAR_FWHM: ("Star FWHM", "arcsec", ".2f"),
    MetricType.IS_SAFE: ("Safety", "", ".0f"),
}


__all__ = ["MetricType"]
