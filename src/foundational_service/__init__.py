"""Foundational service layer: wire contracts and pub/sub messaging."""

from __future__ import annotations

__all__ = ["contracts", "messaging"]
