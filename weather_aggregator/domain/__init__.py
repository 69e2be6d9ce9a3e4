"""
Domain Layer Package

This package contains the core business logic and rules of the application.
It defines entities, ports, gateway contracts and pure services without
dependencies on external frameworks or infrastructure concerns.
"""

# Re-export submodules
from weather_aggregator.domain import entities, gateways, ports, repositories, services

__all__ = ["entities", "gateways", "ports", "repositories", "services"]
