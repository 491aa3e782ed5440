"""
Project utility layer: reusable infrastructure primitives shared across the scene panel service.

This package depends only on the Python standard library and vetted third-party libraries (Rich
for console logging, structlog for telemetry, redis for the pub/sub client) so higher layers can
import helpers without pulling in panel logic.
"""

from __future__ import annotations

from .context import ContextBridge
from .logging import configure_logging

__all__ = [
    "ContextBridge",
    "configure_logging",
]
