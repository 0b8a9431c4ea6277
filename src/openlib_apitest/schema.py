"""Loading and applying the author JSON Schema."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

import jsonschema
import requests

from .exceptions import SchemaLoadError

__all__ = ["load_schema", "parse_schema", "validate_response"]

logger = logging.getLogger(__name__)


def load_schema(path: Union[str, Path]) -> str:
    """Reads the schema document as text.

    Args:
        path (Union[str, Path]): Path to the schema file.

    Raises:
        SchemaLoadError: If the file cannot be read.

    Returns:
        str: The raw schema text.
    """
    path = Path(path)
    try:
        schema = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SchemaLoadError(f"Could not read schema file {str(path)!r}: {e}") from e

    logger.debug("Loaded schema from %s", path)
    return schema


def parse_schema(schema: str) -> Dict[str, Any]:
    try:
        return json.loads(schema)
    except json.JSONDecodeError as e:
        raise SchemaLoadError(f"Schema is not valid JSON: {e}") from e


def validate_response(response: requests.Response, schema: str) -> None:
    """Validates the raw JSON body of the response against the schema text.

    Raises:
        SchemaLoadError: If the schema text is not valid JSON.
        jsonschema.ValidationError: If the body does not conform to the schema.
    """
    jsonschema.validate(instance=response.json(), schema=parse_schema(schema))
