"""Expected values for consumers that may run without a scenario.

Each resolver reads one field from the calling thread's scenario context and
falls back to a fixed default when that field is not set. Fields are resolved
independently, since a context can exist with only some fields populated.
"""

from typing import List, Optional, TypeVar

from .constants import (
    EXPECTED_ALTERNATE_NAME,
    EXPECTED_AUTHOR_ID,
    EXPECTED_CONTENT_TYPE,
    EXPECTED_FIELDS,
    EXPECTED_PERSONAL_NAME,
    EXPECTED_STATUS_CODE,
)
from .context import ScenarioContext
from .registry import get_context

__all__ = [
    "resolve",
    "expected_status_code",
    "expected_personal_name",
    "expected_alternate_name",
    "expected_content_type",
    "author_id",
    "expected_fields",
]

T = TypeVar("T")


def resolve(value: Optional[T], default: T) -> T:
    """Returns value if it is set, otherwise default.

    Examples:
        >>> resolve("Jane", "John")
        'Jane'
        >>> resolve(None, "John")
        'John'
        >>> resolve(0, 200)
        0
    """
    return default if value is None else value


def _context(context: Optional[ScenarioContext]) -> ScenarioContext:
    return get_context() if context is None else context


def expected_status_code(context: Optional[ScenarioContext] = None) -> int:
    return resolve(_context(context).expected_status_code, EXPECTED_STATUS_CODE)


def expected_personal_name(context: Optional[ScenarioContext] = None) -> str:
    return resolve(_context(context).expected_personal_name, EXPECTED_PERSONAL_NAME)


def expected_alternate_name(context: Optional[ScenarioContext] = None) -> str:
    return resolve(_context(context).expected_alternate_name, EXPECTED_ALTERNATE_NAME)


def expected_content_type(context: Optional[ScenarioContext] = None) -> str:
    return resolve(_context(context).expected_content_type, EXPECTED_CONTENT_TYPE)


def author_id(context: Optional[ScenarioContext] = None) -> str:
    return resolve(_context(context).author_id, EXPECTED_AUTHOR_ID)


def expected_fields(context: Optional[ScenarioContext] = None) -> List[str]:
    return list(resolve(_context(context).expected_fields, EXPECTED_FIELDS))
