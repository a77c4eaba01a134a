"""Names of the HTTP headers the client reads and writes."""

from __future__ import annotations

import enum


class HttpHeader(enum.Enum):
    """An HTTP header used in requests to or responses from the service."""

    CONTENT_TYPE = "Content-Type"
    MSCV = "MS-CV"
    RETRY_AFTER = "Retry-After"

    def __str__(self) -> str:
        return self.value