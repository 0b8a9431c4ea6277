import sys
import traceback
from contextlib import contextmanager
from typing import Generator, Optional

from behave import __version__ as behave_version
from behave.__main__ import run_behave
from behave.exception import ConfigError, NotSupportedWarning, TagExpressionError

from .constants import VERSION
from .exceptions import ApiTestError
from .openlib_behave.configuration import Configuration
from .registry import registry

__all__ = ["main", "run_apitest"]


def handle_utility_functions(config: Configuration) -> Optional[int]:
    """
    Checks for CLI flags that trigger utility actions instead of running tests.
    Returns an exit code (int) if an action was performed, otherwise None.
    """
    if config.version:
        print(f"openlib-apitest {VERSION} & behave {behave_version}")
        return 0

    return None


@contextmanager
def handle_test_environment(config: Configuration) -> Generator[None, None, None]:
    """
    Context manager that sets up and tears down the test environment.
    """
    if config.verbose:
        print(f"Testing against {config.base_url!r} with schema {str(config.schema_path)!r}")

    try:
        yield
    finally:
        # Scenario contexts are only meaningful within one run.
        registry.clear_all()


def run_apitest(config: Configuration) -> int:
    """
    Runs the API features using the behave framework.

    Args:
        config (Configuration): The configuration object.

    Returns:
        int: The exit status code: 0 if all tests pass, > 0 if any test fails.
    """
    result = handle_utility_functions(config)

    if result is None:
        with handle_test_environment(config):
            result = run_behave(config)

    return result


def main() -> int:
    """
    Main entry point for the openlib-apitest command-line utility.

    Returns:
        int: The exit status code (0 for success, 1 for any failure).
    """
    try:
        config = Configuration(load_config=False)
        return run_apitest(config)
    except ConfigError as e:
        exception_class_name = e.__class__.__name__
        print(f"{exception_class_name}: {e}")
    except TagExpressionError as e:
        print(f"TagExpressionError: {e}")
    except (NotSupportedWarning, ApiTestError) as e:
        print(e)
    except Exception:
        traceback.print_exc()

    return 1  # FAILED


if __name__ == "__main__":
    sys.exit(main())
