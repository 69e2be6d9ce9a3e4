"""
Controllers Package - Presentation Layer

FastAPI routers: query parsing, mapping of domain errors to HTTP status
codes, and delegation to application use cases.
"""

from .system_controller import router as system_router
from .weather_controller import router as weather_router

__all__ = ["system_router", "weather_router"]
