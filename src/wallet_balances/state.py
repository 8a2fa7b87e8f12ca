"""Application state container."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .settings import BalanceSettings


@dataclass
class AppState:
    """Container for application-wide state and dependencies.

    Passed into the aggregator and the API to avoid module-level globals
    and to let tests inject their own settings.
    """

    settings: BalanceSettings
    logger: logging.Logger
