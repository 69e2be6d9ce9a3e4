from __future__ import annotations

import pytest

from weather_aggregator.main import app as module_app
from weather_aggregator.main.app import create_app


@pytest.mark.asyncio
async def test_create_app_initializes_lifespan(clean_env) -> None:
    app = create_app()
    assert app.title
    paths = set(app.openapi()["paths"])
    assert {"/health", "/info", "/api/v1/weather/current"} <= paths

    async with app.router.lifespan_context(app):
        assert app.state.started_at is not None
        assert app.state.container is not None

    # Ensure module-level app is instantiated
    assert isinstance(module_app.app, type(app))
