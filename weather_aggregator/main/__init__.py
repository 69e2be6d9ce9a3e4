"""
Main module - Main/Composition Root Layer

Entry point of the service: settings, the dependency injection container
(Composition Root), the FastAPI application factory and the uvicorn
server launcher.
"""

from .config import AppSettings, get_settings
from .container import AppContainer, get_container, init_container

__all__ = [
    "AppSettings",
    "get_settings",
    "AppContainer",
    "init_container",
    "get_container",
]
