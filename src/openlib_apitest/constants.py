from pathlib import Path
from typing import List, Set

from .types import Options

VERSION: str = "0.1.0-dev"

ENV_PREFIX: str = "openlib_"

OPTIONS: Options = [
    (
        ("--base-url",),
        dict(
            dest="base_url",
            action="store",
            type=str,
            help="Base URL of the OpenLibrary API under test (e.g., 'https://openlibrary.org').",
        ),
    ),
    (
        ("--schema-path",),
        dict(dest="schema_path", action="store", type=Path, help="Path to the author JSON Schema document."),
    ),
    (
        ("--request-timeout",),
        dict(dest="request_timeout", action="store", type=float, help="Timeout in seconds for each HTTP request."),
    ),
    (
        ("--clear-context",),
        dict(
            dest="clear_context",
            action="store_true",
            help="Drop the scenario context of the current thread after each scenario.",
        ),
    ),
    (
        ("--features-dir",),
        dict(
            dest="features_directory",
            action="store",
            type=Path,
            help="The directory containing the feature files, used when no paths are given.",
        ),
    ),
    (("--config",), dict(dest="config", action="store", type=str, help="Specify the path to a configuration file.")),
]

ENV_SEQUENCE_OPTIONS: Set = {"name", "tags", "format", "outfiles", "userdata_defines", "paths"}

ENV_EXCLUDED_OPTIONS: Set = {
    "config",
    "help",
    "tags_help",
    "lang_list",
    "lang_help",
    "verbose",
    "version",
}

USER_CONFIG: str = ".openlib-apitest"

DEFAULT_FEATURES_PATH = Path.cwd() / "features"

# --- OpenLibrary API ---

BASE_URL: str = "https://openlibrary.org"

AUTHOR_ENDPOINT: str = "/authors/{author_id}.json"

REQUEST_HEADERS = {"Accept": "application/json"}

DEFAULT_REQUEST_TIMEOUT: float = 10.0

SCHEMA_PATH: Path = Path(__file__).absolute().parent / "schemas" / "author-schema.json"

# --- Fallback expectations for consumers running outside a scenario ---

EXPECTED_STATUS_CODE: int = 200

EXPECTED_PERSONAL_NAME: str = "Sachi Rautroy"

EXPECTED_ALTERNATE_NAME: str = "Yugashrashta Sachi Routray"

EXPECTED_CONTENT_TYPE: str = "application/json"

EXPECTED_AUTHOR_ID: str = "OL1A"

EXPECTED_FIELDS: List[str] = ["key", "personal_name", "alternate_names"]
