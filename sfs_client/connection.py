"""Abstract connections to the service and the managers that create them."""

from __future__ import annotations

from abc import ABC, abstractmethod

from .connection_config import ConnectionConfig


class Connection(ABC):
    """A connection able to perform GET and POST requests."""

    def __init__(self, config: ConnectionConfig) -> None:
        self.max_retries = config.max_retries
        self.base_cv = config.base_cv

    @abstractmethod
    def get(self, url: str) -> str:
        """Perform a GET request to ``url`` and return the response body.

        Raises SFSError if the request fails.
        """

    @abstractmethod
    def post(self, url: str, data: str = "") -> str:
        """Perform a POST request to ``url`` with ``data`` as body and return the response body.

        Raises SFSError if the request fails.
        """


class ConnectionManager(ABC):
    """Creates connections."""

    @abstractmethod
    def make_connection(self, config: ConnectionConfig) -> Connection:
        """Create a new connection configured by ``config``."""