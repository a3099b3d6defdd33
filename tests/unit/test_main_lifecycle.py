"""Unit tests for app lifecycle wiring in keygate.main."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from keygate import main as main_module
from keygate.services.cooldown import Cooldown


async def test_lifespan_wires_startup_and_shutdown_in_order(monkeypatch: pytest.MonkeyPatch):
    events: list[str] = []
    cooldown = object()

    async def init_db() -> None:
        events.append("init_db")

    async def close_db() -> None:
        events.append("close_db")

    async def init_gc_scheduler(passed_cooldown) -> None:
        assert passed_cooldown is cooldown
        events.append("init_gc_scheduler")

    async def shutdown_gc_scheduler() -> None:
        events.append("shutdown_gc_scheduler")

    class FakeHTTPClientManager:
        async def startup(self) -> None:
            events.append("http_startup")

        async def shutdown(self) -> None:
            events.append("http_shutdown")

    monkeypatch.setattr(main_module, "init_db", init_db)
    monkeypatch.setattr(main_module, "close_db", close_db)
    monkeypatch.setattr(main_module, "init_gc_scheduler", init_gc_scheduler)
    monkeypatch.setattr(main_module, "shutdown_gc_scheduler", shutdown_gc_scheduler)
    monkeypatch.setattr(main_module, "http_client_manager", FakeHTTPClientManager())

    app = SimpleNamespace(state=SimpleNamespace(cooldown=cooldown))
    async with main_module.lifespan(app):
        events.append("inside")

    assert events == [
        "init_db",
        "http_startup",
        "init_gc_scheduler",
        "inside",
        "shutdown_gc_scheduler",
        "http_shutdown",
        "close_db",
    ]


def test_create_app_uses_configured_cooldown():
    app = main_module.create_app()
    assert app.state.cooldown.interval.total_seconds() == 120
    assert app.state.email_sender.name == "log"


def test_create_app_keeps_injected_empty_collaborators():
    cooldown = Cooldown()
    assert len(cooldown) == 0

    app = main_module.create_app(cooldown=cooldown)

    assert app.state.cooldown is cooldown
