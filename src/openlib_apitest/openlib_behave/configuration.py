import argparse
import logging
import os
import shlex
import sys
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping, NamedTuple, Optional, Tuple
from urllib.parse import urlparse

from behave.configuration import COLOR_CHOICES
from behave.configuration import OPTIONS as BEHAVE_OPTIONS
from behave.configuration import Configuration as BehaveConfiguration
from behave.exception import ConfigError
from behave.userdata import parse_user_define
from dotenv import dotenv_values

from ..constants import (
    BASE_URL,
    DEFAULT_FEATURES_PATH,
    DEFAULT_REQUEST_TIMEOUT,
    ENV_EXCLUDED_OPTIONS,
    ENV_PREFIX,
    ENV_SEQUENCE_OPTIONS,
    OPTIONS,
    SCHEMA_PATH,
    USER_CONFIG,
)
from ..types import CommandArgs, DefaultValues, Options, override

__all__ = ["ApiSettings", "Configuration", "load_api_settings", "make_api_settings"]


class ApiSettings(NamedTuple):
    base_url: str = BASE_URL
    schema_path: Path = SCHEMA_PATH
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    clear_context: bool = False


def normalize_base_url(base_url: str) -> str:
    """Validates an http(s) base URL and strips trailing slashes.

    Raises:
        ConfigError: If the URL has no http(s) scheme or no host.
    """
    parsed = urlparse(base_url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigError(f"Invalid base URL {base_url!r}: expected 'http(s)://host[:port]'.")

    return base_url.rstrip("/")


def make_api_settings(values: Mapping) -> ApiSettings:
    """Builds ApiSettings from a mapping of configuration values, using defaults for missing or empty ones."""
    base_url = values.get("base_url") or BASE_URL
    schema_path = values.get("schema_path") or SCHEMA_PATH
    request_timeout = values.get("request_timeout") or DEFAULT_REQUEST_TIMEOUT

    return ApiSettings(
        base_url=normalize_base_url(str(base_url)),
        schema_path=Path(schema_path),
        request_timeout=float(request_timeout),
        clear_context=bool(values.get("clear_context", False)),
    )


def iter_config_files(cli_file: Optional[Path] = None) -> Iterator[Tuple[str, Path]]:
    """Yields the dotenv files to layer over the OS environment, lowest precedence first.

    1. User home config (~/.openlib-apitest)
    2. Project .env file, only when running from a source checkout (_OPENLIB_SOURCE=true)
    3. The file given with --config

    Raises:
        FileNotFoundError: If the --config file does not exist.
    """
    yield "user", Path.home() / USER_CONFIG

    if os.environ.get("_OPENLIB_SOURCE") == "true":
        yield "project", Path(__file__).absolute().parents[3] / ".env"

    if cli_file is not None:
        if not cli_file.exists():
            raise FileNotFoundError(f"The CLI specified config file not found at {str(cli_file)!r}.")
        yield "CLI", cli_file


def build_environment_values(cli_file: Optional[Path] = None, verbose: Optional[bool] = None) -> Dict[str, str]:
    """Merges the OS environment with the config files from :func:`iter_config_files`.

    Later sources override earlier ones. Keys declared without a value in a
    dotenv file are ignored.
    """
    env_values = dict(os.environ)

    for source, config_file in iter_config_files(cli_file):
        if not config_file.exists():
            if verbose:
                print(f"Skipping: No {source} config file at {str(config_file)!r}.")
            continue

        if verbose:
            print(f"Load {source} config file {str(config_file)!r}.")
        env_values.update((key, value) for key, value in dotenv_values(config_file).items() if value is not None)

    return env_values


def parse_environment_value(config_name: str, value: str) -> Any:
    """Converts a stripped environment value to the type behave expects for the setting.

    'true'/'false' become booleans and digits become integers. Sequence options
    are shell-split, so quoted elements stay together; userdata defines become
    (name, value) pairs.
    """
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    if value.isnumeric():
        return int(value)
    if config_name not in ENV_SEQUENCE_OPTIONS:
        return value

    elements = shlex.split(value)
    if config_name == "userdata_defines":
        return [parse_user_define(element) for element in elements]
    return elements


def load_environment_settings(
    defaults: DefaultValues, cli_file: Optional[Path] = None, verbose: Optional[bool] = None
) -> None:
    """Copies 'OPENLIB_' prefixed settings from the environment sources into defaults.

    Args:
        defaults: The dictionary of default settings, updated in place.
        cli_file: Optional path to a configuration file specified via CLI.
        verbose: If True, prints which variables were used or skipped.

    Raises:
        ConfigError: If a setting that may not come from the environment is specified.
    """
    for env_var, env_value in build_environment_values(cli_file, verbose).items():
        prefix, config_name = env_var[: len(ENV_PREFIX)].lower(), env_var[len(ENV_PREFIX) :].lower()
        if prefix != ENV_PREFIX:
            continue

        if not config_name:
            if verbose:
                print(f"Skipping ENV[{env_var}]: Configuration name is empty after stripping prefix ('OPENLIB_').")
            continue

        if config_name in ENV_EXCLUDED_OPTIONS:
            raise ConfigError(f"ENV[{env_var}]: Setting {config_name!r} cannot be specified as environment var.")

        if not env_value.strip():
            if verbose:
                print(f"Skipping ENV[{env_var}]: Value is empty or whitespace.")
            continue

        defaults[config_name] = parse_environment_value(config_name, env_value.strip())
        if verbose:
            print(f"{config_name:<15} = {defaults[config_name]!r} (ENV[{env_var}] = {env_value!r})")


def load_api_settings(cli_file: Optional[Path] = None, verbose: Optional[bool] = None) -> ApiSettings:
    """Resolves the API settings from the environment sources, for consumers running outside behave.

    Args:
        cli_file: Optional path to a configuration file.
        verbose: If True, prints status messages about loading.

    Returns:
        ApiSettings: The resolved settings.
    """
    values = Configuration.openlib_defaults.copy()
    load_environment_settings(values, cli_file, verbose)
    return make_api_settings(values)


def iter_behave_options(behave_options: Options) -> Iterator[Options]:
    """
    Filters Behave's option list, omitting options whose flags clash with our own.

    Args:
        behave_options: Options from Behave's configuration, as (option_flags, keyword_arguments) tuples.

    Yields:
        Options: Option tuples usable with ArgumentParser.
    """
    openlib_options = {flag for flags, _ in OPTIONS for flag in flags}

    for options_flags, keywords in behave_options:
        if not options_flags or set(options_flags) & openlib_options:
            continue

        # 'config_help' is only meaningful to Behave's own Configuration.
        if "config_help" in keywords:
            keywords = keywords.copy()
            del keywords["config_help"]

        yield (options_flags, keywords)


def setup_main_parser() -> argparse.ArgumentParser:
    """
    Constructs the ArgumentParser for the openlib-apitest script, holding both
    our options and all standard behave options.

    Returns:
        The configured ArgumentParser instance.
    """
    prog = "openlib-apitest"
    usage = "%(prog)s [options] [paths ...]"
    description = """Run the OpenLibrary author API features with %(prog)s.

EXAMPLES:
  %(prog)s
  %(prog)s --base-url http://localhost:8080 features/author_api.feature
  %(prog)s --clear-context --tags @schema
  %(prog)s features/author_api.feature:12
"""

    formatter_class = argparse.RawDescriptionHelpFormatter
    parser = argparse.ArgumentParser(prog=prog, usage=usage, description=description, formatter_class=formatter_class)

    for arguments, keywords in OPTIONS:
        parser.add_argument(*arguments, **keywords)

    for arguments, keywords in iter_behave_options(BEHAVE_OPTIONS):
        parser.add_argument(*arguments, **keywords)

    parser.add_argument(
        "paths",
        nargs="*",
        help="Feature directories, files or scenarios (FILE:LINE). Defaults to the features directory.",
    )

    return parser


class Configuration(BehaveConfiguration):
    """
    Behave configuration extended with the OpenLibrary API settings.
    """

    defaults: DefaultValues = {
        **BehaveConfiguration.defaults,
        "logging_level": logging.INFO,
    }

    openlib_defaults: DefaultValues = {
        "base_url": BASE_URL,
        "schema_path": SCHEMA_PATH,
        "request_timeout": DEFAULT_REQUEST_TIMEOUT,
        "clear_context": False,
        "features_directory": DEFAULT_FEATURES_PATH,
    }

    @override
    def __init__(
        self,
        command_args: Optional[CommandArgs] = None,
        load_config: bool = True,
        verbose: Optional[bool] = None,
        **kwargs: DefaultValues,
    ):
        """Initializes configuration by loading defaults, kwargs, config file,
        env vars, and parsing CLI arguments.

        Args:
            command_args (CommandArgs): List of command-line arguments (defaults to sys.argv[1:]).
            load_config (bool): If True, loads settings from behave config files (defaults to True).
            verbose (Optional[bool]): Overrides the verbosity setting (Defaults to None).
        """
        command_args = self.make_command_args(command_args, verbose)
        cli_config = self.find_config_file(command_args)
        if verbose is None:
            verbose = "-v" in command_args or "--verbose" in command_args

        defaults = Configuration.make_defaults(**kwargs)

        # 1. Environment settings (OPENLIB_ prefix) override the defaults
        load_environment_settings(defaults, cli_config, verbose)

        # 2. The master parser validates the full command line and serves --help
        parser = setup_main_parser()
        parser.set_defaults(**defaults)
        parser.parse_args(command_args)

        # 3. Split our options from the ones behave understands
        openlib_parsed_args, behave_command_args = Configuration.parse_openlib_args(command_args, **defaults)

        # 4. Initialize Behave Configuration
        super(Configuration, self).__init__(
            command_args=behave_command_args, load_config=load_config, verbose=verbose, **defaults
        )

        # 5. Apply our parsed arguments
        for key, value in openlib_parsed_args.__dict__.items():
            if key.startswith("_"):
                continue
            setattr(self, key, value)

        # 6. Finalize setup
        self.setup_api()
        self.setup_paths()

    @override
    def init(self, verbose: Optional[bool] = None, **kwargs: DefaultValues):
        """Initializes internal state.

        Args:
            verbose (Optional[bool], optional): Verbosity setting. Defaults to None.
            **kwargs (DefaultValues): Hand-over configuration dictionary.
        """
        super(Configuration, self).init(verbose=verbose, **kwargs)

        self.base_url: str = BASE_URL
        self.schema_path: Path = SCHEMA_PATH
        self.request_timeout: float = DEFAULT_REQUEST_TIMEOUT
        self.clear_context: bool = False
        self.features_directory: Path = DEFAULT_FEATURES_PATH

    @override
    @classmethod
    def make_defaults(cls, **kwargs):
        defaults = cls.openlib_defaults.copy()
        defaults.update(kwargs)
        return super().make_defaults(**defaults)

    @override
    def make_command_args(self, command_args: Optional[CommandArgs] = None, verbose: Optional[bool] = None):
        if command_args is None:
            command_args = sys.argv[1:]
        elif isinstance(command_args, str):
            command_args = shlex.split(command_args)

        return super(Configuration, self).make_command_args(
            command_args=self.complete_color_option(list(command_args)), verbose=verbose
        )

    @staticmethod
    def complete_color_option(command_args: CommandArgs) -> CommandArgs:
        """Gives a bare '--color' the value 'auto'.

        behave only treats the next argument as the color mode when it is not an
        existing path, which fails for feature paths relative to --features-dir.
        So 'openlib-apitest --color author_api.feature' becomes
        'openlib-apitest --color auto author_api.feature'.
        """
        if "--color" not in command_args:
            return command_args

        value_pos = command_args.index("--color") + 1
        if value_pos < len(command_args) and command_args[value_pos] in COLOR_CHOICES:
            return command_args
        return [*command_args[:value_pos], "auto", *command_args[value_pos:]]

    @staticmethod
    def find_config_file(command_args: CommandArgs) -> Optional[Path]:
        """Returns the existing file passed with '--config FILE' or '--config=FILE', if any."""
        for position, argument in enumerate(command_args):
            if argument.startswith("--config="):
                candidate = argument.split("=", 1)[1]
            elif argument == "--config" and position + 1 < len(command_args):
                candidate = command_args[position + 1]
            else:
                continue

            if os.path.isfile(candidate):
                return Path(candidate)
        return None

    @classmethod
    def parse_openlib_args(
        cls, command_args: CommandArgs, **kwargs: DefaultValues
    ) -> Tuple[argparse.Namespace, CommandArgs]:
        """
        Separates our options from the options intended for Behave.

        Args:
            command_args: The list of command-line arguments.

        Returns:
            A tuple containing:
            - parsed_openlib_args (argparse.Namespace): Values for the options defined in OPTIONS.
            - unknown_args (CommandArgs): The remaining arguments, passed on to Behave.
        """
        # add_help=False keeps this parser from exiting on '--help'.
        parser = argparse.ArgumentParser(add_help=False)
        for arguments, keywords in OPTIONS:
            parser.add_argument(*arguments, **keywords)

        openlib_defaults = cls.openlib_defaults.copy()
        parser.set_defaults(**{key: kwargs.get(key, value) for key, value in openlib_defaults.items()})

        return parser.parse_known_args(command_args)

    def setup_api(self):
        settings = make_api_settings(
            {
                "base_url": self.base_url,
                "schema_path": self.schema_path,
                "request_timeout": self.request_timeout,
                "clear_context": self.clear_context,
            }
        )
        self.base_url, self.schema_path, self.request_timeout, self.clear_context = settings

    def setup_paths(self):
        if isinstance(self.features_directory, str):
            self.features_directory = Path(self.features_directory)

        self.features_directory = self.features_directory.absolute()

        if not self.paths and self.features_directory.is_dir():
            self.paths = [str(self.features_directory)]

    @property
    def api_settings(self) -> ApiSettings:
        return ApiSettings(
            base_url=self.base_url,
            schema_path=self.schema_path,
            request_timeout=self.request_timeout,
            clear_context=self.clear_context,
        )
