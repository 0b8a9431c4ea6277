"""
Hooks defined in this module execute before and after specific events
during the run. They publish a fresh scenario context for every scenario,
which the steps and any standalone tests on the same thread read back.

Official Behave documentation: https://behave.readthedocs.io/en/latest/api/#environment-file-functions
"""

from behave.model import Scenario
from behave.runner import Context

from openlib_apitest.openlib_behave import hooks
from openlib_apitest.openlib_behave.hooks import api_settings


def before_all(context: Context):
    """
    Setup executed once before any test execution begins.
    """
    # Resolved once, shared by every scenario of the run.
    context.api_settings = api_settings(context.config)


def before_scenario(context: Context, scenario: Scenario):
    """
    Executed before each scenario.
    """
    hooks.before_scenario(context, scenario)


def after_scenario(context: Context, scenario: Scenario):
    """
    Executed after each scenario.
    """
    hooks.after_scenario(context, scenario)

