"""Result codes and the exception raised when an operation fails."""

from __future__ import annotations

import enum


class ResultCode(enum.Enum):
    """Outcome of a client operation."""

    SUCCESS = "Success"
    OUT_OF_MEMORY = "OutOfMemory"
    UNEXPECTED = "Unexpected"
    INVALID_ARG = "InvalidArg"
    CONNECTION_SETUP_FAILED = "ConnectionSetupFailed"
    CONNECTION_UNEXPECTED_ERROR = "ConnectionUnexpectedError"
    HTTP_BAD_REQUEST = "HttpBadRequest"
    HTTP_METHOD_NOT_ALLOWED = "HttpMethodNotAllowed"
    HTTP_NOT_FOUND = "HttpNotFound"
    HTTP_SERVICE_NOT_AVAILABLE = "HttpServiceNotAvailable"
    HTTP_TIMEOUT = "HttpTimeout"
    HTTP_TOO_MANY_REQUESTS = "HttpTooManyRequests"
    HTTP_UNEXPECTED = "HttpUnexpected"
    SERVICE_INVALID_RESPONSE = "ServiceInvalidResponse"
    SERVICE_UNEXPECTED_CONTENT_TYPE = "ServiceUnexpectedContentType"


class SFSError(Exception):
    """Raised when an operation fails; carries a result code and a message."""

    def __init__(self, code: ResultCode, message: str = "") -> None:
        super().__init__(message or code.value)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return self.message or self.code.value

    def __repr__(self) -> str:
        return f"SFSError({self.code!r}, {self.message!r})"