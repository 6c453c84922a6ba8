"""Layered configuration loading: example, override and per-environment files plus environment variables."""

from strata.config.decode import Duration, EnvironmentBinding, parse_duration
from strata.config.engine import YamlMergeEngine
from strata.config.environment import AppEnvironment, get_app_environment, get_server_port, parse_config_dir
from strata.config.errors import ConfigDecodeError, ConfigLoadError, ConfigSetupError, ConfigValidationError
from strata.config.interfaces import MergeEngine
from strata.config.loader import ConfigLoader, load_config

__all__ = [
    "AppEnvironment",
    "ConfigDecodeError",
    "ConfigLoadError",
    "ConfigLoader",
    "ConfigSetupError",
    "ConfigValidationError",
    "Duration",
    "EnvironmentBinding",
    "MergeEngine",
    "YamlMergeEngine",
    "get_app_environment",
    "get_server_port",
    "load_config",
    "parse_config_dir",
    "parse_duration",
]
