from __future__ import annotations

from .formatter import build_result_table, format_result_table

__all__ = ["build_result_table", "format_result_table"]
