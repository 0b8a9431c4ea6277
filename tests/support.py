import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests

AUTHOR_ID = "OL1A"

AUTHOR_BODY: Dict[str, Any] = {
    "key": "/authors/OL1A",
    "name": "Sachi Rautroy",
    "personal_name": "Sachi Rautroy",
    "alternate_names": ["Yugashrashta Sachi Routray"],
    "type": {"key": "/type/author"},
    "revision": 3,
}


def get_project_root_dir() -> Path:
    return Path(__file__).parents[1].absolute()


def get_src_dir() -> Path:
    return get_project_root_dir() / "src"


def get_features_dir() -> Path:
    return get_project_root_dir() / "features"


def make_response(
    body: Any, status_code: int = 200, content_type: str = "application/json; charset=utf-8"
) -> requests.Response:
    """Builds a requests.Response as returned by the author endpoint.

    Args:
        body (Any): JSON-serializable response body.
        status_code (int): HTTP status code.
        content_type (str): Value of the Content-Type header.

    Returns:
        requests.Response: The simulated response.
    """
    response = requests.Response()
    response.status_code = status_code
    response.headers["Content-Type"] = content_type
    response.encoding = "utf-8"
    response._content = json.dumps(body).encode("utf-8")
    return response


class FakeAuthorClient:
    """Stands in for AuthorClient, returning canned responses in order."""

    def __init__(self, responses: List[requests.Response], base_url: str = "https://openlibrary.test"):
        self.base_url = base_url
        self.responses = list(responses)
        self.requested: List[str] = []
        self.closed = False

    def fetch_author(self, author_id: str) -> requests.Response:
        self.requested.append(author_id)
        return self.responses.pop(0)

    def close(self) -> None:
        self.closed = True


def author_response(personal_name: Optional[str] = None, status_code: int = 200) -> requests.Response:
    body = dict(AUTHOR_BODY)
    if personal_name is not None:
        body["personal_name"] = personal_name
    return make_response(body, status_code=status_code)


def make_text_response(text: str, status_code: int = 502, content_type: str = "text/html") -> requests.Response:
    """Builds a response with a non-JSON body, as served by an upstream proxy error page."""
    response = requests.Response()
    response.status_code = status_code
    response.headers["Content-Type"] = content_type
    response.encoding = "utf-8"
    response._content = text.encode("utf-8")
    return response
