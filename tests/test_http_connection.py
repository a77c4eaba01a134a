import json
import socket
import threading
from datetime import datetime, timezone
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from sfs_client.connection_config import ConnectionConfig
from sfs_client.errors import ResultCode, SFSError
from sfs_client.http_connection import (
    MAX_RESPONSE_CHARACTERS,
    HttpConnection,
    HttpConnectionManager,
    http_code_to_error,
    is_retriable_http_error,
    parse_retry_after,
)


class _Handler(BaseHTTPRequestHandler):
    def do_GET(self):
        self._respond()

    def do_POST(self):
        self._respond()

    def _respond(self):
        length = int(self.headers.get("Content-Length", 0) or 0)
        body = self.rfile.read(length) if length else b""
        self.server.requests.append((self.command, self.headers, body))
        responses = self.server.responses
        status, headers, payload = responses.pop(0) if len(responses) > 1 else responses[0]
        self.send_response(status)
        for name, value in headers.items():
            self.send_header(name, value)
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def log_message(self, format, *args):
        pass


@pytest.fixture
def server():
    httpd = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
    httpd.requests = []
    httpd.responses = [(200, {}, b"expected")]
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    yield httpd
    httpd.shutdown()
    httpd.server_close()
    thread.join()


def _url(server):
    host, port = server.server_address[:2]
    return f"http://{host}:{port}/path"


def _connection(max_retries=3, base_cv=None):
    return HttpConnection(ConnectionConfig(max_retries, base_cv), base_retry_delay=0)


def test_get_not_found_then_success(server):
    connection = _connection()
    server.responses = [(404, {}, b"")]
    with pytest.raises(SFSError) as exc:
        connection.get(_url(server))
    assert exc.value.code == ResultCode.HTTP_NOT_FOUND
    assert exc.value.message == "404 Not Found"
    assert len(server.requests) == 1

    server.responses = [(200, {}, b"expected")]
    assert connection.get(_url(server)) == "expected"
    assert server.requests[-1][0] == "GET"


def test_post_not_found_then_success(server):
    connection = _connection()
    body = json.dumps([{"dummy": None}])
    server.responses = [(404, {}, b"")]
    for call in (lambda: connection.post(_url(server)), lambda: connection.post(_url(server), body)):
        with pytest.raises(SFSError) as exc:
            call()
        assert exc.value.code == ResultCode.HTTP_NOT_FOUND

    server.responses = [(200, {}, b"expected")]
    assert connection.get(_url(server)) == "expected"

    server.responses = [(200, {}, b"")]
    assert connection.post(_url(server), body) == ""
    method, headers, sent = server.requests[-1]
    assert method == "POST"
    assert headers.get("Content-Type") == "application/json"
    assert sent == body.encode()


def test_post_without_data_sends_empty_body(server):
    assert _connection().post(_url(server)) == "expected"
    method, _, sent = server.requests[-1]
    assert method == "POST"
    assert sent == b""


def test_empty_url_is_invalid():
    connection = _connection()
    for call in (lambda: connection.get(""), lambda: connection.post("", "{}")):
        with pytest.raises(SFSError) as exc:
            call()
        assert exc.value.code == ResultCode.INVALID_ARG
        assert exc.value.message == "url cannot be empty"


def test_retries_retriable_error_then_succeeds(server):
    server.responses = [(503, {}, b""), (200, {}, b"expected")]
    assert _connection().get(_url(server)) == "expected"
    assert len(server.requests) == 2


def test_retries_exhausted_raises_last_error(server):
    server.responses = [(500, {}, b"")]
    with pytest.raises(SFSError) as exc:
        _connection(max_retries=2).get(_url(server))
    assert exc.value.code == ResultCode.HTTP_UNEXPECTED
    assert exc.value.message == "Unexpected HTTP code 500"
    assert len(server.requests) == 3


def test_no_retries_when_disabled(server):
    server.responses = [(503, {}, b"")]
    with pytest.raises(SFSError) as exc:
        _connection(max_retries=0).get(_url(server))
    assert exc.value.code == ResultCode.HTTP_SERVICE_NOT_AVAILABLE
    assert len(server.requests) == 1


def test_invalid_retry_after_stops_retrying(server):
    server.responses = [(429, {"Retry-After": "0"}, b""), (200, {}, b"expected")]
    with pytest.raises(SFSError) as exc:
        _connection().get(_url(server))
    assert exc.value.code == ResultCode.CONNECTION_UNEXPECTED_ERROR
    assert exc.value.message == "Invalid Retry-After header value"
    assert len(server.requests) == 1


def test_correlation_vector_header_sent(server):
    _connection(base_cv="aaaaaaaaaaaaaaaa.1").get(_url(server))
    assert server.requests[-1][1].get("MS-CV") == "aaaaaaaaaaaaaaaa.1"


def test_no_correlation_vector_header_without_base_cv(server):
    _connection().get(_url(server))
    assert server.requests[-1][1].get("MS-CV") is None


def test_response_too_large(server):
    server.responses = [(200, {}, b"a" * (MAX_RESPONSE_CHARACTERS + 1))]
    with pytest.raises(SFSError) as exc:
        _connection().get(_url(server))
    assert exc.value.code == ResultCode.CONNECTION_UNEXPECTED_ERROR


def test_response_at_limit_is_accepted(server):
    server.responses = [(200, {}, b"a" * MAX_RESPONSE_CHARACTERS)]
    assert len(_connection().get(_url(server))) == MAX_RESPONSE_CHARACTERS


def test_connection_refused():
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    with pytest.raises(SFSError) as exc:
        _connection().get(f"http://127.0.0.1:{port}/")
    assert exc.value.code == ResultCode.CONNECTION_UNEXPECTED_ERROR


def test_manager_makes_working_connections(server):
    manager = HttpConnectionManager()
    first = manager.make_connection(ConnectionConfig())
    assert isinstance(first, HttpConnection)
    assert first.get(_url(server)) == "expected"

    second = HttpConnectionManager().make_connection(ConnectionConfig.from_retry_on_error(False))
    third = manager.make_connection(ConnectionConfig())
    assert second.max_retries == 0
    assert third.max_retries == first.max_retries
    assert third is not first


@pytest.mark.parametrize(
    "http_code, code, message",
    [
        (400, ResultCode.HTTP_BAD_REQUEST, "400 Bad Request"),
        (404, ResultCode.HTTP_NOT_FOUND, "404 Not Found"),
        (405, ResultCode.HTTP_METHOD_NOT_ALLOWED, "405 Method Not Allowed"),
        (429, ResultCode.HTTP_TOO_MANY_REQUESTS, "429 Too Many Requests"),
        (503, ResultCode.HTTP_SERVICE_NOT_AVAILABLE, "503 Service Unavailable"),
        (418, ResultCode.HTTP_UNEXPECTED, "Unexpected HTTP code 418"),
    ],
)
def test_http_code_to_error(http_code, code, message):
    error = http_code_to_error(http_code)
    assert error.code == code
    assert error.message == message


def test_http_code_200_is_success():
    assert http_code_to_error(200) is None


@pytest.mark.parametrize(
    "http_code, expected",
    [(429, True), (500, True), (502, True), (503, True), (504, True),
     (400, False), (404, False), (405, False), (200, False)],
)
def test_is_retriable_http_error(http_code, expected):
    assert is_retriable_http_error(http_code) is expected


def test_parse_retry_after_integer():
    assert parse_retry_after("120") == 120


def test_parse_retry_after_http_date():
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert parse_retry_after("Mon, 01 Jan 2024 00:01:00 GMT", now) == 60


@pytest.mark.parametrize(
    "value, message",
    [
        ("0", "Invalid Retry-After header value"),
        ("-5", "Invalid Retry-After header value"),
        ("99999999999", "Retry-After header value is not in the expected range"),
        ("abc", "Retry-After header value could not be converted to an integer or an HTTP Date"),
    ],
)
def test_parse_retry_after_errors(value, message):
    with pytest.raises(SFSError) as exc:
        parse_retry_after(value)
    assert exc.value.code == ResultCode.CONNECTION_UNEXPECTED_ERROR
    assert exc.value.message == message


def test_parse_retry_after_past_date():
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    with pytest.raises(SFSError) as exc:
        parse_retry_after("Sun, 31 Dec 2023 23:00:00 GMT", now)
    assert exc.value.message == "Invalid Retry-After header value"