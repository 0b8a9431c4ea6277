"""Per-scenario record of expected values and captured HTTP responses."""

from typing import Any, List, Optional

from .types import TestData

__all__ = ["ScenarioContext"]


class ScenarioContext:
    """
    Shared state for one scenario on one execution unit.

    Step definitions write the expected values they assert on, and every HTTP
    response they receive, so that standalone tests running later on the same
    thread can read them back instead of relying on hardcoded values.

    Expected-value attributes are plain attributes: assignments overwrite
    unconditionally and ``None`` means "not provided".
    """

    def __init__(self):
        self._last_response: Any = None
        self._previous_response: Any = None

        self.expected_status_code: Optional[int] = None
        self.expected_personal_name: Optional[str] = None
        self.expected_alternate_name: Optional[str] = None
        self.expected_content_type: Optional[str] = None
        self.author_id: Optional[str] = None
        self.schema: Optional[str] = None
        self.expected_fields: Optional[List[str]] = None

        self.test_data: TestData = {}

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(author_id={self.author_id!r}, "
            f"expected_status_code={self.expected_status_code!r}, test_data_keys={sorted(self.test_data)!r})"
        )

    @property
    def last_response(self) -> Any:
        """The most recently received response, or None if no request was made."""
        return self._last_response

    @property
    def previous_response(self) -> Any:
        """The response that was the last response before the most recent one."""
        return self._previous_response

    def set_last_response(self, response: Any) -> None:
        """Stores a new response, shifting the current one into previous_response.

        Args:
            response (Any): The response handle. It is stored as-is, without validation.
        """
        self._previous_response = self._last_response
        self._last_response = response

    def put(self, key: str, value: Any) -> None:
        self.test_data[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self.test_data.get(key, default)

    def clear(self) -> None:
        """Resets every field to its default in place, including both response handles."""
        self._last_response = None
        self._previous_response = None

        self.expected_status_code = None
        self.expected_personal_name = None
        self.expected_alternate_name = None
        self.expected_content_type = None
        self.author_id = None
        self.schema = None
        self.expected_fields = None

        self.test_data.clear()
