class ApiTestError(Exception):
    """Base exception for all harness errors."""


class SchemaLoadError(ApiTestError):
    """Raised when a JSON Schema document cannot be read or parsed."""
