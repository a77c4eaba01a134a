# sfs_client

Building blocks for a client of a simple file service: a web service that
publishes versioned content and the files that belong to it.

The package covers two areas: parsing what the service returns, and talking
to it over HTTP.

## Service entities

JSON answers from the service, already decoded into Python objects, are
checked strictly. A missing or mistyped field raises
`sfs_client.errors.SFSError` with the code
`ResultCode.SERVICE_INVALID_RESPONSE` and a message that names the field, for
example `"Missing File.Url in response"`.

- `sfs_client.version_entity.version_entity_from_json(data)` reads a version
  answer. It returns a `GenericVersionEntity`, or an `AppVersionEntity` (with
  `update_id` and a list of `prerequisites`) when the answer carries an
  `UpdateId`. Each entity has a `content_id` (`ContentIdEntity` with
  `name_space`, `name` and `version`).
- `sfs_client.version_entity.as_app_version_entity(entity)` returns the entity
  as an `AppVersionEntity`, or raises when it is generic content.
- `sfs_client.file_entity.file_entity_from_json(data)` reads one file
  description, and `download_info_response_to_file_entities(data)` reads a
  list of them. The result is a `GenericFileEntity`, or an `AppFileEntity`
  (with `file_moniker` and `applicability_details`) when the description
  carries a `FileMoniker`. Hashes are kept as a mapping from the hash name
  given by the service to its value.
- `sfs_client.content_type.validate_content_type(current, expected)` raises an
  error with the code `SERVICE_UNEXPECTED_CONTENT_TYPE` when the two
  `ContentType` values differ.

```python
import json
from sfs_client.file_entity import download_info_response_to_file_entities

entities = download_info_response_to_file_entities(json.loads(body))
for entity in entities:
    print(entity.content_type, entity.file_id, entity.url, entity.size_in_bytes)
```

## HTTP connections

`sfs_client.http_connection.HttpConnection` sends GET and POST requests using
the standard library alone. POST bodies are sent as `application/json`.

- When the `ConnectionConfig` has a `base_cv`, it is sent in the `MS-CV`
  header of every request.
- A response body may not exceed 100,000 characters.
- When the server answers 429, 500, 502, 503 or 504, the request is retried
  up to `max_retries` times (3 by default;
  `ConnectionConfig.from_retry_on_error(False)` gives 0). The wait before a
  retry comes from the `Retry-After` header (seconds or an HTTP date, see
  `parse_retry_after`), or is an exponential back-off starting from
  `base_retry_delay`, 15 seconds by default.
- Any other status than 200 raises `SFSError`; `http_code_to_error` gives the
  mapping and `is_retriable_http_error` tells which codes are retried.

```python
from sfs_client.connection_config import ConnectionConfig
from sfs_client.http_connection import HttpConnectionManager

manager = HttpConnectionManager()
connection = manager.make_connection(ConnectionConfig.from_retry_on_error(True, None))
body = connection.get("https://service.example.com/api/v2/contents")
```

A failed request raises `SFSError`. Its `code` attribute tells the cases
apart, for example `HTTP_NOT_FOUND`, `HTTP_TOO_MANY_REQUESTS`, `HTTP_TIMEOUT`
or `INVALID_ARG` for an empty URL.

`sfs_client.connection` holds the abstract `Connection` and
`ConnectionManager` classes, for other transports or for test doubles.

## What the package does not do

- It is not a complete client: there is no command, and nothing ties the
  entities and the connections together into calls to the service's API.
- Correlation vectors are neither generated, validated nor incremented; the
  `base_cv` given in the config is sent as it is.
- Entities are not turned into higher-level file or content objects; hash
  names and architectures stay the strings the service sent.

## Installing and testing

```
pip install .
pip install ".[test]"
pytest
```