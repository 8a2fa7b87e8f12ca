from __future__ import annotations

from .http import UpstreamPayloadError, get_json

__all__ = ["UpstreamPayloadError", "get_json"]
