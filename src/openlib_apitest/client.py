"""HTTP access to the OpenLibrary author endpoint."""

import logging
from typing import Any, Optional

import requests

from .constants import AUTHOR_ENDPOINT, BASE_URL, DEFAULT_REQUEST_TIMEOUT, REQUEST_HEADERS

__all__ = ["AuthorClient", "json_body", "json_value", "media_type", "normalize_media_type"]

logger = logging.getLogger(__name__)


class AuthorClient:
    """
    Minimal client for ``GET <base>/authors/<id>.json``.

    Responses are returned as-is, whatever their status code. Transport failures
    propagate as :class:`requests.RequestException`.
    """

    def __init__(
        self,
        base_url: str = BASE_URL,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """
        Args:
            base_url (str): API root, without the endpoint path.
            timeout (float): Timeout in seconds for each request.
            session (Optional[requests.Session]): Session to send requests with. A new one is created if omitted.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()

    @staticmethod
    def author_endpoint(author_id: str) -> str:
        return AUTHOR_ENDPOINT.format(author_id=author_id)

    def fetch_author(self, author_id: str) -> requests.Response:
        """Requests the author record.

        Args:
            author_id (str): The OpenLibrary author identifier (e.g., 'OL1A').

        Returns:
            requests.Response: The response, unchecked.
        """
        endpoint = self.author_endpoint(author_id)
        response = self.session.get(f"{self.base_url}{endpoint}", headers=REQUEST_HEADERS, timeout=self.timeout)

        logger.info("GET %s -> %s", endpoint, response.status_code)
        return response

    def close(self) -> None:
        self.session.close()


def json_body(response: requests.Response) -> Any:
    return response.json()


def json_value(response: requests.Response, path: str) -> Any:
    """Looks up a dotted path (e.g., 'type.key') in the JSON body.

    Returns:
        Any: The value found, or None if any part of the path is missing or the body is not JSON.
    """
    try:
        value = json_body(response)
    except ValueError:
        logger.debug("Response body is not JSON, no value for %r", path)
        return None

    for part in path.split("."):
        if isinstance(value, dict):
            value = value.get(part)
        elif isinstance(value, list) and part.isdigit() and int(part) < len(value):
            value = value[int(part)]
        else:
            return None
    return value


def normalize_media_type(content_type: str) -> str:
    """Strips parameters from a content type and lower-cases it.

    Examples:
        'Application/JSON; charset=utf-8' -> 'application/json'
    """
    return content_type.split(";", 1)[0].strip().lower()


def media_type(response: requests.Response) -> str:
    """Returns the response content type without parameters, lower-cased."""
    return normalize_media_type(response.headers.get("Content-Type", ""))
