from __future__ import annotations

import argparse
import os
from pathlib import Path
from typing import Optional

from fastapi import FastAPI

from interface_entry.bootstrap.application_builder import configure_application
from interface_entry.http.dependencies import AppSettings, get_settings
from project_utility.logging import configure_logging

CLI_DESCRIPTION = "Scene panel arbitration service"

app: Optional[FastAPI] = None


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    fastapi_app = FastAPI(title="Scene Panel Arbitration", version="1.0.0")
    configure_application(fastapi_app, settings=settings)
    return fastapi_app


def configure_arg_parser(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--host", default="0.0.0.0", help="绑定主机地址 (默认 0.0.0.0)")
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.getenv("PORT", "8000")),
        help="监听端口 (默认 8000)",
    )
    parser.add_argument(
        "--settle-delay-ms",
        type=int,
        default=None,
        help="面板预关闭到激活之间的等待毫秒数 (默认读取 PANEL_SETTLE_DELAY_MS)",
    )
    parser.add_argument(
        "--log-root",
        type=Path,
        default=None,
        help="日志与遥测输出目录 (默认读取 SCENE_LOG_ROOT)",
    )


def handle_cli(args: argparse.Namespace) -> None:
    global app  # type: ignore[assignment]
    configure_logging(log_root=getattr(args, "log_root", None))
    settings = get_settings()
    settle_delay_ms = getattr(args, "settle_delay_ms", None)
    if settle_delay_ms is not None:
        settings = settings.model_copy(update={"panel_settle_delay_ms": max(0, settle_delay_ms)})
    app = create_app(settings)

    import uvicorn

    uvicorn.run(
        app,
        host=getattr(args, "host", "0.0.0.0"),
        port=getattr(args, "port", int(os.getenv("PORT", "8000"))),
        log_config=None,
    )


app = create_app()
