"""Settings that shape how a connection performs requests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

MAX_RETRIES = 3
"""Retries allowed after a failed attempt when retrying on error is enabled."""


@dataclass
class ConnectionConfig:
    """Retry budget and correlation vector for a connection."""

    max_retries: int = MAX_RETRIES
    base_cv: Optional[str] = None

    @classmethod
    def from_retry_on_error(
        cls, retry_on_error: bool, base_cv: Optional[str] = None
    ) -> "ConnectionConfig":
        """Build a config that retries only when ``retry_on_error`` is set."""
        return cls(max_retries=MAX_RETRIES if retry_on_error else 0, base_cv=base_cv)