"""
Configuration helpers exposed by the project utility layer.
"""

from __future__ import annotations

from .paths import get_log_root, get_repo_root

__all__ = ["get_log_root", "get_repo_root"]
