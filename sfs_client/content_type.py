"""Kinds of content the service can return."""

from __future__ import annotations

import enum
import logging

from .errors import ResultCode, SFSError

logger = logging.getLogger(__name__)


class ContentType(enum.Enum):
    """Kind of content described by a service response."""

    GENERIC = "Generic"
    APP = "App"

    def __str__(self) -> str:
        return self.value


def validate_content_type(current: ContentType, expected: ContentType) -> None:
    """Raise SFSError if ``current`` is not the ``expected`` content type."""
    if current != expected:
        message = (
            f"Unexpected content type [{current}] returned by the service "
            f"does not match the expected [{expected}]"
        )
        logger.error(message)
        raise SFSError(ResultCode.SERVICE_UNEXPECTED_CONTENT_TYPE, message)