"""
Step definitions for the OpenLibrary author API features.

Importing this module registers the steps with behave. Every step reads and
writes the scenario context of the current thread through the registry, so
standalone tests on the same thread can reuse the expected values.
"""

import logging

import jsonschema
from behave import given, then, when
from behave.runner import Context

from ..client import AuthorClient, json_value, media_type, normalize_media_type
from ..registry import get_context
from ..schema import load_schema, validate_response

logger = logging.getLogger(__name__)


def make_client(context: Context) -> AuthorClient:
    settings = context.api_settings
    return AuthorClient(base_url=settings.base_url, timeout=settings.request_timeout)


def fetch_author(context: Context, author_id: str) -> None:
    """Requests the author and stores the response as the scenario's last response."""
    scenario_context = get_context()
    scenario_context.author_id = author_id
    scenario_context.set_last_response(context.api_client.fetch_author(author_id))


@given("the OpenLibrary API is available")
def step_api_available(context: Context):
    context.api_client = make_client(context)
    logger.info("OpenLibrary API base URL configured: %s", context.api_client.base_url)


@given("the OpenLibrary API is available with a defined schema")
def step_api_available_with_schema(context: Context):
    """
    Configures the client and loads the author schema into the scenario context.
    A schema file that cannot be read fails the step.
    """
    context.api_client = make_client(context)
    get_context().schema = load_schema(context.api_settings.schema_path)
    logger.info("OpenLibrary API and schema configured from %s", context.api_settings.schema_path)


@when('a GET request is made to fetch author "{author_id}"')
def step_fetch_author(context: Context, author_id: str):
    fetch_author(context, author_id)


@when('two sequential GET requests are made to fetch author "{author_id}"')
def step_fetch_author_twice(context: Context, author_id: str):
    fetch_author(context, author_id)
    fetch_author(context, author_id)
    logger.info("Two sequential GET requests completed for author: %s", author_id)


@then("the response status code should be {status_code:d}")
def step_status_code(context: Context, status_code: int):
    scenario_context = get_context()
    scenario_context.expected_status_code = status_code
    actual = scenario_context.last_response.status_code

    assert actual == status_code, f"Response status code should be {status_code}, but was {actual}."


@then('the response should contain personal_name as "{expected_name}"')
def step_personal_name(context: Context, expected_name: str):
    scenario_context = get_context()
    scenario_context.expected_personal_name = expected_name
    actual = json_value(scenario_context.last_response, "personal_name")

    assert actual == expected_name, f"Personal name should be {expected_name!r}, but was {actual!r}."


@then('the response should contain alternate_names with "{expected_name}"')
def step_alternate_names(context: Context, expected_name: str):
    scenario_context = get_context()
    scenario_context.expected_alternate_name = expected_name
    alternate_names = json_value(scenario_context.last_response, "alternate_names") or []

    assert expected_name in alternate_names, f"Alternate names should contain {expected_name!r}: {alternate_names!r}"


@then('the response content type should be "{content_type}"')
def step_content_type(context: Context, content_type: str):
    scenario_context = get_context()
    scenario_context.expected_content_type = content_type
    actual = media_type(scenario_context.last_response)
    expected = normalize_media_type(content_type)

    assert actual == expected, f"Content type should be {content_type!r}, but was {actual!r}."


@then("the response should validate against the author schema")
def step_validate_schema(context: Context):
    scenario_context = get_context()
    if scenario_context.schema is None:
        scenario_context.schema = load_schema(context.api_settings.schema_path)

    try:
        validate_response(scenario_context.last_response, scenario_context.schema)
    except jsonschema.ValidationError as e:
        raise AssertionError(f"Response does not conform to the author schema: {e.message}") from e


@then('the response should contain required fields "{field1}" and "{field2}"')
def step_required_fields(context: Context, field1: str, field2: str):
    response = get_context().last_response

    for field in (field1, field2):
        assert json_value(response, field) is not None, f"Required field {field!r} is missing from the response."


@then("the response should contain the following fields:")
def step_fields_table(context: Context):
    """
    Expects a table with a 'field' heading, one field name (or dotted path) per row.
    """
    fields = [row["field"] for row in context.table]
    scenario_context = get_context()
    scenario_context.expected_fields = fields

    for field in fields:
        assert (
            json_value(scenario_context.last_response, field) is not None
        ), f"Field {field!r} should exist in the response."


@then("both responses should return status code {status_code:d}")
def step_both_status_codes(context: Context, status_code: int):
    scenario_context = get_context()
    scenario_context.expected_status_code = status_code
    first = scenario_context.previous_response.status_code
    second = scenario_context.last_response.status_code

    assert first == status_code, f"First response status code should be {status_code}, but was {first}."
    assert second == status_code, f"Second response status code should be {status_code}, but was {second}."


@then("both responses should have the same personal_name")
def step_same_personal_name(context: Context):
    scenario_context = get_context()
    first = json_value(scenario_context.previous_response, "personal_name")
    second = json_value(scenario_context.last_response, "personal_name")

    assert first == second, f"Personal names differ between responses: {first!r} != {second!r}"
    scenario_context.expected_personal_name = first


@then("both responses should have the same alternate_names")
def step_same_alternate_names(context: Context):
    scenario_context = get_context()
    first = json_value(scenario_context.previous_response, "alternate_names")
    second = json_value(scenario_context.last_response, "alternate_names")

    assert first == second, f"Alternate names differ between responses: {first!r} != {second!r}"
