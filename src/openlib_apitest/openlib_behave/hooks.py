"""
Scenario lifecycle hooks publishing the scenario context to the registry.

Import these into a features ``environment.py``::

    from openlib_apitest.openlib_behave.hooks import after_scenario, before_scenario
"""

import logging

from behave.model import Scenario
from behave.runner import Context

from ..context import ScenarioContext
from ..registry import clear_context, get_context, set_context
from .configuration import ApiSettings, Configuration, load_api_settings, make_api_settings

__all__ = ["api_settings", "before_scenario", "after_scenario"]

logger = logging.getLogger(__name__)


def api_settings(config) -> ApiSettings:
    """Resolves the API settings of a behave run.

    With our Configuration, its settings are used directly. With a plain behave
    configuration, the 'OPENLIB_' environment settings apply, overridden by
    userdata defines (e.g., ``behave -D base_url=http://localhost:8080``).
    """
    if isinstance(config, Configuration):
        return config.api_settings

    settings = load_api_settings()
    userdata = getattr(config, "userdata", None)
    if not userdata:
        return settings

    return make_api_settings(
        {
            "base_url": userdata.get("base_url", settings.base_url),
            "schema_path": userdata.get("schema_path", settings.schema_path),
            "request_timeout": userdata.getfloat("request_timeout", settings.request_timeout),
            "clear_context": userdata.getbool("clear_context", settings.clear_context),
        }
    )


def before_scenario(context: Context, scenario: Scenario):
    """
    Registers a fresh scenario context for the current thread before the first step runs.
    """
    if not hasattr(context, "api_settings"):
        context.api_settings = api_settings(context.config)

    set_context(ScenarioContext())
    logger.debug("Scenario context registered for %r", scenario.name)


def after_scenario(context: Context, scenario: Scenario):
    """
    Logs the scenario data and closes the scenario's API client.
    The context is dropped only when 'clear_context' is
    enabled; otherwise it stays available to later tests on the same thread.
    """
    scenario_context = get_context()
    logger.info(
        "Scenario %r completed. Test data: Author=%s, Status=%s",
        scenario.name,
        scenario_context.author_id,
        scenario_context.expected_status_code,
    )

    api_client = getattr(context, "api_client", None)
    if api_client is not None:
        api_client.close()

    if context.api_settings.clear_context:
        clear_context()
