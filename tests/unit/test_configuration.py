import re
from pathlib import Path
from typing import Any, Iterator, List, Sequence, Tuple

import pytest
from behave.exception import ConfigError
from pytest_mock import MockerFixture

from openlib_apitest.constants import BASE_URL, DEFAULT_REQUEST_TIMEOUT, SCHEMA_PATH
from openlib_apitest.openlib_behave import configuration
from openlib_apitest.openlib_behave.configuration import ApiSettings, Configuration


def check_output(output_lines: Sequence[str], expected_line: str, error_message: str) -> None:
    """Helper to assert that an expected line is present in the captured output.

    Args:
        output_lines (Sequence[str]): Captured, stripped print output lines.
        expected_line (str): The exact string expected to be found in the output.
        error_message (str): The assertion failure message displayed if the expected line is not found.
    """
    assert any(line == expected_line for line in output_lines), error_message


class ConfigurationModuleHelper:
    """Patches functions and constants of the 'configuration' module and captures print output."""

    module = configuration

    def __init__(self, mocker: MockerFixture):
        self.mocker = mocker
        self.mock_print = self.mocker.patch("builtins.print")

    def iter_mock_output(self) -> Iterator[str]:
        for call in self.mock_print.call_args_list:
            yield call[0][0].strip()

    def get_output_lines(self) -> Tuple[str, ...]:
        """Returns all captured print output lines as a tuple of stripped strings."""
        return tuple(self.iter_mock_output())

    def mock_func(self, name: str, return_value: Any) -> None:
        """Mocks a function within the module and sets its return value.

        Args:
            name (str): The name of the function to mock (e.g., 'build_environment_values').
            return_value (Any): The value the mocked function should return.
        """
        self.mocker.patch(f"{self.module.__name__}.{name}", return_value=return_value)

    def mock_constant(self, name: str, value: Any) -> None:
        self.mocker.patch(f"{self.module.__name__}.{name}", new=value)


# --- Fixtures ---


@pytest.fixture
def configuration_module_helper(mocker: MockerFixture) -> ConfigurationModuleHelper:
    """Provides a ConfigurationModuleHelper instance for patching the configuration module."""
    return ConfigurationModuleHelper(mocker)


# --- TESTS ---


class TestLoadEnvironmentSettings:
    """Unit tests for load_environment_settings, which populates a dictionary
    with values from OPENLIB_-prefixed environment variables.
    """

    def test_load_various_types_correctly(  # pylint: disable=redefined-outer-name
        self, configuration_module_helper: ConfigurationModuleHelper
    ):
        defaults = {"other_key": "initial_value"}
        configuration_module_helper.mock_func(
            "build_environment_values",
            {
                "OPENLIB_BASE_URL": "http://localhost:8080",
                "OPENLIB_CLEAR_CONTEXT": "True",
                "OPENLIB_REQUEST_TIMEOUT": "30",
                "OPENLIB_TAGS": '@author "@schema and not @wip"',
                "OPENLIB_USERDATA_DEFINES": 'key1=value1 "key2=value 2"',
            },
        )

        configuration_module_helper.module.load_environment_settings(defaults)

        assert defaults == {
            "other_key": "initial_value",
            "base_url": "http://localhost:8080",
            "clear_context": True,
            "request_timeout": 30,
            "tags": ["@author", "@schema and not @wip"],
            "userdata_defines": [("key1", "value1"), ("key2", "value 2")],
        }, "Loaded environment settings did not match expected dictionary structure or type conversion failed."

    def test_skip_non_openlib_vars(  # pylint: disable=redefined-outer-name
        self, configuration_module_helper: ConfigurationModuleHelper
    ):
        defaults = {}
        configuration_module_helper.mock_func(
            "build_environment_values",
            {"OPENLIB_SETTING_A": "value_A", "OTHER_VAR": "should_be_ignored", "SYSTEST_SETTING_B": "value_B"},
        )

        configuration_module_helper.module.load_environment_settings(defaults)

        assert defaults == {"setting_a": "value_A"}, "Only OPENLIB_ prefixed variables should be loaded."

    def test_skip_empty_or_whitespace_values(  # pylint: disable=redefined-outer-name
        self, configuration_module_helper: ConfigurationModuleHelper
    ):
        defaults = {}
        configuration_module_helper.mock_func(
            "build_environment_values",
            {"OPENLIB_VAR_1": "valid", "OPENLIB_VAR_2": "", "OPENLIB_VAR_3": "   ", "OPENLIB_VAR_4": "  again  "},
        )

        configuration_module_helper.module.load_environment_settings(defaults)

        assert defaults == {"var_1": "valid", "var_4": "again"}

    def test_raise_error_on_excluded_options(  # pylint: disable=redefined-outer-name
        self, configuration_module_helper: ConfigurationModuleHelper
    ):
        configuration_module_helper.mock_func("build_environment_values", {"OPENLIB_EXCLUDED": "should_fail"})
        configuration_module_helper.mock_constant("ENV_EXCLUDED_OPTIONS", {"excluded"})

        match = re.escape("ENV[OPENLIB_EXCLUDED]: Setting 'excluded' cannot be specified as environment var.")
        with pytest.raises(ConfigError, match=match):
            configuration_module_helper.module.load_environment_settings({})

    def test_verbose_output(  # pylint: disable=redefined-outer-name
        self, configuration_module_helper: ConfigurationModuleHelper
    ):
        defaults = {}
        configuration_module_helper.mock_func(
            "build_environment_values",
            {"OPENLIB_VAR": "", "OPENLIB_SETTING": "test_value", "OPENLIB_": "some_value"},
        )

        configuration_module_helper.module.load_environment_settings(defaults, verbose=True)

        output_lines = configuration_module_helper.get_output_lines()
        check_output(
            output_lines,
            "setting         = 'test_value' (ENV[OPENLIB_SETTING] = 'test_value')",
            "Successful load message for 'OPENLIB_SETTING' was not found in verbose output.",
        )
        check_output(
            output_lines,
            "Skipping ENV[OPENLIB_VAR]: Value is empty or whitespace.",
            "Skipping message for 'OPENLIB_VAR' not found.",
        )
        check_output(
            output_lines,
            "Skipping ENV[OPENLIB_]: Configuration name is empty after stripping prefix ('OPENLIB_').",
            "Skipping message for malformed key 'OPENLIB_' not found.",
        )
        assert defaults == {"setting": "test_value"}


class TestBuildEnvironmentValues:
    def test_cli_file_overrides_environment(self, mocker: MockerFixture, tmp_path: Path):
        mocker.patch.dict("os.environ", {"OPENLIB_BASE_URL": "http://from-env"}, clear=True)
        mocker.patch("pathlib.Path.home", return_value=tmp_path)
        cli_file = tmp_path / "openlib.env"
        cli_file.write_text("OPENLIB_BASE_URL=http://from-file\n", encoding="utf-8")

        env_values = configuration.build_environment_values(cli_file)

        assert env_values["OPENLIB_BASE_URL"] == "http://from-file"

    def test_user_config_is_loaded(self, mocker: MockerFixture, tmp_path: Path):
        mocker.patch.dict("os.environ", {}, clear=True)
        mocker.patch("pathlib.Path.home", return_value=tmp_path)
        (tmp_path / ".openlib-apitest").write_text("OPENLIB_CLEAR_CONTEXT=true\n", encoding="utf-8")

        env_values = configuration.build_environment_values()

        assert env_values["OPENLIB_CLEAR_CONTEXT"] == "true"

    def test_missing_cli_file_raises(self, mocker: MockerFixture, tmp_path: Path):
        mocker.patch("pathlib.Path.home", return_value=tmp_path)

        with pytest.raises(FileNotFoundError):
            configuration.build_environment_values(tmp_path / "missing.env")


class TestApiSettings:
    def test_defaults(self):
        assert configuration.make_api_settings({}) == ApiSettings(
            base_url=BASE_URL, schema_path=SCHEMA_PATH, request_timeout=DEFAULT_REQUEST_TIMEOUT, clear_context=False
        )

    def test_values_are_normalized(self):
        settings = configuration.make_api_settings(
            {
                "base_url": "http://localhost:8080/",
                "schema_path": "schemas/author.json",
                "request_timeout": "2.5",
                "clear_context": True,
            }
        )

        assert settings == ApiSettings(
            base_url="http://localhost:8080",
            schema_path=Path("schemas/author.json"),
            request_timeout=2.5,
            clear_context=True,
        )

    @pytest.mark.parametrize("base_url", ["openlibrary.org", "ftp://openlibrary.org", "https://"])
    def test_invalid_base_url(self, base_url: str):
        with pytest.raises(ConfigError, match="Invalid base URL"):
            configuration.make_api_settings({"base_url": base_url})

    def test_load_api_settings_from_environment(  # pylint: disable=redefined-outer-name
        self, configuration_module_helper: ConfigurationModuleHelper
    ):
        configuration_module_helper.mock_func(
            "build_environment_values",
            {"OPENLIB_BASE_URL": "https://staging.openlibrary.test/", "OPENLIB_CLEAR_CONTEXT": "true"},
        )

        settings = configuration.load_api_settings()

        assert settings.base_url == "https://staging.openlibrary.test"
        assert settings.clear_context is True
        assert settings.schema_path == SCHEMA_PATH


class TestConfiguration:
    """Tests for the behave Configuration subclass built from command-line arguments."""

    @pytest.fixture(autouse=True)
    def no_environment(self, mocker: MockerFixture):
        mocker.patch(f"{configuration.__name__}.build_environment_values", return_value={})

    def test_defaults(self):
        config = Configuration(command_args=[], load_config=False)

        assert config.api_settings == ApiSettings()

    def test_api_options(self, tmp_path: Path):
        schema_file = tmp_path / "author.json"

        config = Configuration(
            command_args=[
                "--base-url",
                "http://localhost:8080/",
                "--schema-path",
                str(schema_file),
                "--request-timeout",
                "1.5",
                "--clear-context",
            ],
            load_config=False,
        )

        assert config.api_settings == ApiSettings(
            base_url="http://localhost:8080", schema_path=schema_file, request_timeout=1.5, clear_context=True
        )

    def test_environment_values_are_defaults(self, mocker: MockerFixture):
        mocker.patch(
            f"{configuration.__name__}.build_environment_values",
            return_value={"OPENLIB_BASE_URL": "https://env.openlibrary.test", "OPENLIB_CLEAR_CONTEXT": "true"},
        )

        config = Configuration(command_args=["--base-url", "https://cli.openlibrary.test"], load_config=False)

        assert config.base_url == "https://cli.openlibrary.test"
        assert config.clear_context is True

    def test_invalid_base_url(self):
        with pytest.raises(ConfigError):
            Configuration(command_args=["--base-url", "localhost"], load_config=False)

    def test_features_directory_is_default_path(self, tmp_path: Path):
        config = Configuration(command_args=["--features-dir", str(tmp_path)], load_config=False)

        assert config.features_directory == tmp_path.absolute()
        assert config.paths == [str(tmp_path.absolute())]

    def test_explicit_paths_are_kept(self, tmp_path: Path):
        feature = tmp_path / "author_api.feature"

        config = Configuration(command_args=["--features-dir", str(tmp_path), str(feature)], load_config=False)

        assert config.paths == [str(feature)]


class TestParseEnvironmentValue:
    @pytest.mark.parametrize(
        "config_name, value, expected",
        [
            ("clear_context", "TRUE", True),
            ("dry_run", "false", False),
            ("request_timeout", "30", 30),
            ("request_timeout", "2.5", "2.5"),
            ("base_url", "https://openlibrary.org", "https://openlibrary.org"),
            ("tags", "@author @schema", ["@author", "@schema"]),
            ("base_url", "a b", "a b"),
        ],
    )
    def test_conversion(self, config_name: str, value: str, expected: Any):
        assert configuration.parse_environment_value(config_name, value) == expected


class TestIterConfigFiles:
    def test_source_checkout_adds_project_file(self, mocker: MockerFixture, tmp_path: Path):
        mocker.patch.dict("os.environ", {"_OPENLIB_SOURCE": "true"}, clear=True)
        mocker.patch("pathlib.Path.home", return_value=tmp_path)

        sources = [source for source, _ in configuration.iter_config_files()]

        assert sources == ["user", "project"]

    def test_cli_file_is_last(self, mocker: MockerFixture, tmp_path: Path):
        mocker.patch.dict("os.environ", {}, clear=True)
        mocker.patch("pathlib.Path.home", return_value=tmp_path)
        cli_file = tmp_path / "openlib.env"
        cli_file.touch()

        assert list(configuration.iter_config_files(cli_file)) == [
            ("user", tmp_path / ".openlib-apitest"),
            ("CLI", cli_file),
        ]

    def test_keys_without_value_are_ignored(self, mocker: MockerFixture, tmp_path: Path):
        mocker.patch.dict("os.environ", {"OPENLIB_BASE_URL": "http://from-env"}, clear=True)
        mocker.patch("pathlib.Path.home", return_value=tmp_path)
        cli_file = tmp_path / "openlib.env"
        cli_file.write_text("OPENLIB_BASE_URL\nOPENLIB_TAGS=@author\n", encoding="utf-8")

        env_values = configuration.build_environment_values(cli_file)

        assert env_values["OPENLIB_BASE_URL"] == "http://from-env"
        assert env_values["OPENLIB_TAGS"] == "@author"


class TestCommandArgs:
    @pytest.mark.parametrize(
        "command_args, expected",
        [
            (["--color", "author_api.feature"], ["--color", "auto", "author_api.feature"]),
            (["author_api.feature", "--color"], ["author_api.feature", "--color", "auto"]),
            (["--color", "never", "author_api.feature"], ["--color", "never", "author_api.feature"]),
            (["--color=off"], ["--color=off"]),
            (["author_api.feature"], ["author_api.feature"]),
        ],
    )
    def test_complete_color_option(self, command_args: List[str], expected: List[str]):
        assert Configuration.complete_color_option(command_args) == expected

    def test_find_config_file(self, tmp_path: Path):
        config_file = tmp_path / "openlib.env"
        config_file.touch()

        assert Configuration.find_config_file(["--config", str(config_file)]) == config_file
        assert Configuration.find_config_file([f"--config={config_file}", "-v"]) == config_file

    @pytest.mark.parametrize(
        "command_args", [[], ["--config"], ["--config", "missing.env"], ["--tags", "@author"]], ids=repr
    )
    def test_no_config_file(self, command_args: List[str]):
        assert Configuration.find_config_file(command_args) is None
