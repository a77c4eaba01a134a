"""Service entities and HTTP connections for a simple file service client."""

__version__ = "0.1.0"

__all__ = [
    "errors",
    "content_type",
    "file_entity",
    "version_entity",
    "http_header",
    "connection_config",
    "connection",
    "http_connection",
]