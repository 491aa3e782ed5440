"""Pub/sub publishers for foundational services."""

from __future__ import annotations

__all__ = ["modal_state_publisher"]
