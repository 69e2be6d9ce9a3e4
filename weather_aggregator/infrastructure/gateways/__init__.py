"""Infrastructure gateways - HTTP weather source adapters."""

from .base import HttpWeatherSource
from .factory import build_weather_sources
from .openmeteo_gateway import OpenMeteoGateway
from .openweather_gateway import OpenWeatherGateway
from .weatherapi_gateway import WeatherAPIGateway

__all__ = [
    "HttpWeatherSource",
    "OpenMeteoGateway",
    "OpenWeatherGateway",
    "WeatherAPIGateway",
    "build_weather_sources",
]
