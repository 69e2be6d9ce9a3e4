from __future__ import annotations

import runpy
from types import SimpleNamespace


def test_main_module_invokes_server(monkeypatch):
    executed = {}

    def fake_main() -> None:
        executed["called"] = True

    monkeypatch.setattr("weather_aggregator.main.server.main", fake_main)

    runpy.run_module("weather_aggregator.main.__main__", run_name="__main__")

    assert executed["called"] is True


def test_server_runs_uvicorn_with_settings(monkeypatch):
    calls = {}

    def fake_run(app, **kwargs) -> None:
        calls["app"] = app
        calls.update(kwargs)

    settings = SimpleNamespace(
        environment=SimpleNamespace(value="testing"),
        service=SimpleNamespace(host="127.0.0.1", port=9000, reload=False),
    )
    monkeypatch.setattr("weather_aggregator.main.server.uvicorn.run", fake_run)
    monkeypatch.setattr("weather_aggregator.main.server.get_settings", lambda: settings)

    from weather_aggregator.main.server import main

    main()

    assert calls == {
        "app": "weather_aggregator.main.app:app",
        "host": "127.0.0.1",
        "port": 9000,
        "reload": False,
        "log_config": None,
    }
