from __future__ import annotations

from .app import cache_control_header, create_app, serialize_result

__all__ = ["cache_control_header", "create_app", "serialize_result"]
