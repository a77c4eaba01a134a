"""Connection to the service over HTTP, with retries and back-off."""

from __future__ import annotations

import http.client
import logging
import re
import time
import urllib.error
import urllib.request
from datetime import datetime, timezone
from email.message import Message
from email.utils import parsedate_to_datetime
from typing import Optional

from .connection import Connection, ConnectionManager
from .connection_config import ConnectionConfig
from .errors import ResultCode, SFSError
from .http_header import HttpHeader

logger = logging.getLogger(__name__)

MAX_RESPONSE_CHARACTERS = 100_000
"""Hard limit on the response size, to guard against rogue servers."""

BASE_RETRY_DELAY = 15.0
"""Seconds to wait before the first retry when the server gives no Retry-After."""

_RETRIABLE_HTTP_CODES = frozenset({429, 500, 502, 503, 504})

_HTTP_ERRORS = {
    400: (ResultCode.HTTP_BAD_REQUEST, "400 Bad Request"),
    404: (ResultCode.HTTP_NOT_FOUND, "404 Not Found"),
    405: (ResultCode.HTTP_METHOD_NOT_ALLOWED, "405 Method Not Allowed"),
    429: (ResultCode.HTTP_TOO_MANY_REQUESTS, "429 Too Many Requests"),
    503: (ResultCode.HTTP_SERVICE_NOT_AVAILABLE, "503 Service Unavailable"),
}

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")
_INT32_MIN, _INT32_MAX = -(2**31), 2**31 - 1


def _fail(code: ResultCode, message: str) -> SFSError:
    logger.error(message)
    return SFSError(code, message)


def http_code_to_error(http_code: int) -> Optional[SFSError]:
    """Return the error matching an HTTP status code, or None for success (200)."""
    if http_code == 200:
        return None
    code, message = _HTTP_ERRORS.get(
        http_code, (ResultCode.HTTP_UNEXPECTED, f"Unexpected HTTP code {http_code}")
    )
    return SFSError(code, message)


def is_retriable_http_error(http_code: int) -> bool:
    """Whether a request that failed with ``http_code`` may be retried."""
    return http_code in _RETRIABLE_HTTP_CODES


def parse_retry_after(value: str, now: Optional[datetime] = None) -> int:
    """Return the number of seconds to wait given a Retry-After header value.

    The value is either an integer number of seconds or an HTTP date, which is
    measured against ``now`` (the current time by default). Raises SFSError if
    the value cannot be parsed or does not give a positive delay.
    """
    logger.debug("Parsing Retry-After value [%s]", value)
    match = _INT_PREFIX.match(value)
    if match:
        seconds = int(match.group(1))
        if not _INT32_MIN <= seconds <= _INT32_MAX:
            raise _fail(
                ResultCode.CONNECTION_UNEXPECTED_ERROR,
                "Retry-After header value is not in the expected range",
            )
    else:
        try:
            when = parsedate_to_datetime(value)
        except (TypeError, ValueError, IndexError):
            when = None
        if when is None:
            raise _fail(
                ResultCode.CONNECTION_UNEXPECTED_ERROR,
                "Retry-After header value could not be converted to an integer or an HTTP Date",
            )
        if when.tzinfo is None:
            when = when.replace(tzinfo=timezone.utc)
        current = now if now is not None else datetime.now(timezone.utc)
        if current.tzinfo is None:
            current = current.replace(tzinfo=timezone.utc)
        seconds = int(when.timestamp()) - int(current.timestamp())

    if seconds <= 0:
        raise _fail(ResultCode.CONNECTION_UNEXPECTED_ERROR, "Invalid Retry-After header value")
    return seconds


class HttpConnection(Connection):
    """Connection performing requests over HTTP, retrying on transient errors."""

    def __init__(
        self, config: Optional[ConnectionConfig] = None, base_retry_delay: float = BASE_RETRY_DELAY
    ) -> None:
        super().__init__(config if config is not None else ConnectionConfig())
        self.base_retry_delay = base_retry_delay

    def get(self, url: str) -> str:
        self._check_url(url)
        return self._perform(url, "GET", None, {})

    def post(self, url: str, data: str = "") -> str:
        self._check_url(url)
        headers = {str(HttpHeader.CONTENT_TYPE): "application/json"}
        return self._perform(url, "POST", data.encode("utf-8"), headers)

    @staticmethod
    def _check_url(url: str) -> None:
        if not url:
            raise _fail(ResultCode.INVALID_ARG, "url cannot be empty")

    def _perform(self, url: str, method: str, data: Optional[bytes], headers: dict) -> str:
        request_headers = dict(headers)
        if self.base_cv:
            request_headers[str(HttpHeader.MSCV)] = self.base_cv

        total_attempts = 1 + self.max_retries
        for attempt in range(1, total_attempts + 1):
            logger.info(
                "Request attempt %d out of %d (cv: %s)", attempt, total_attempts, self.base_cv
            )
            request = urllib.request.Request(
                url, data=data, headers=request_headers, method=method
            )
            status, response_headers, body = self._send(request)
            if status == 200:
                return body

            error = http_code_to_error(status)
            if not self._can_retry(attempt == total_attempts, status):
                logger.error("%s", error)
                raise error
            self._wait_before_retry(attempt, error, response_headers)
        raise AssertionError("unreachable")

    def _send(self, request: urllib.request.Request) -> tuple[int, Message, str]:
        try:
            with urllib.request.urlopen(request) as response:
                return response.status, response.headers, self._read(response)
        except urllib.error.HTTPError as error:
            with error:
                return error.code, error.headers, ""
        except urllib.error.URLError as error:
            if isinstance(error.reason, TimeoutError):
                raise _fail(ResultCode.HTTP_TIMEOUT, str(error.reason) or "Request timed out")
            raise _fail(
                ResultCode.CONNECTION_UNEXPECTED_ERROR, str(error.reason) or "Connection error"
            )
        except TimeoutError as error:
            raise _fail(ResultCode.HTTP_TIMEOUT, str(error) or "Request timed out")
        except (OSError, ValueError, http.client.HTTPException) as error:
            raise _fail(ResultCode.CONNECTION_UNEXPECTED_ERROR, str(error) or "Connection error")

    @staticmethod
    def _read(response) -> str:
        body = response.read(MAX_RESPONSE_CHARACTERS + 1)
        if len(body) > MAX_RESPONSE_CHARACTERS:
            raise _fail(
                ResultCode.CONNECTION_UNEXPECTED_ERROR,
                f"Response exceeds the maximum of {MAX_RESPONSE_CHARACTERS} characters",
            )
        return body.decode("utf-8", errors="replace")

    @staticmethod
    def _can_retry(last_attempt: bool, http_code: int) -> bool:
        if last_attempt:
            logger.info("No retry as this is the last attempt")
            return False
        if not is_retriable_http_error(http_code):
            logger.info("Error %d is not retriable, stopping", http_code)
            return False
        return True

    def _wait_before_retry(self, attempt: int, error: SFSError, headers: Message) -> None:
        retry_after = headers.get(str(HttpHeader.RETRY_AFTER)) if headers is not None else None
        if retry_after is not None:
            delay = float(parse_retry_after(retry_after))
        else:
            delay = self.base_retry_delay * (2 ** (attempt - 1))
        logger.warning("%s", error)
        logger.info("Sleeping for %d ms", int(delay * 1000))
        time.sleep(delay)


class HttpConnectionManager(ConnectionManager):
    """Creates HTTP connections."""

    def make_connection(self, config: Optional[ConnectionConfig] = None) -> HttpConnection:
        return HttpConnection(config if config is not None else ConnectionConfig())