"""
Gateways Package - Domain Layer

This package contains interfaces defining gateway contracts
for external service communications. Specific implementations
are provided by the infrastructure layer.
"""

from .weather_source import IForecastSource, IWeatherSource

__all__ = ["IWeatherSource", "IForecastSource"]
