from __future__ import annotations

from contextlib import asynccontextmanager, suppress
from typing import Any, Callable

from fastapi import FastAPI


def configure_runtime_lifespan(
    app: FastAPI,
    *,
    runtime_factory: Callable[[], Any],
    log,
) -> None:
    """Attach the lifespan that owns the scene runtime: subscribe on startup, reset on teardown."""

    @asynccontextmanager
    async def lifespan(app_context: FastAPI):
        runtime = runtime_factory()
        app_context.state.scene_runtime = runtime
        app_context.state.scene_service = runtime.service
        app_context.state.scene_listener = runtime.listener
        if runtime.listener is not None:
            await runtime.listener.start()
        log.info(
            "startup.complete",
            extra={"status": runtime.listener.status.value if runtime.listener else "disabled"},
        )
        try:
            yield
        finally:
            if runtime.listener is not None:
                await runtime.listener.stop()
            runtime.arbitrator.reset()
            with suppress(Exception):
                await runtime.notifier.drain()
            if runtime.publisher is not None:
                runtime.notifier.remove_broadcast_listener(runtime.publisher)
            app_context.state.scene_service = None
            app_context.state.scene_listener = None
            log.info("shutdown.complete")

    app.router.lifespan_context = lifespan


__all__ = ["configure_runtime_lifespan"]
