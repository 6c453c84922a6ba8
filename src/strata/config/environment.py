from __future__ import annotations

import argparse
import os
from enum import Enum
from typing import Mapping, Optional, Sequence, Union


class AppEnvironment(str, Enum):
    PROD = "prod"
    DEV = "dev"
    TEST = "test"
    INTEGRATION = "integration"

    def __str__(self) -> str:
        return self.value

    def is_production(self) -> bool:
        return self is AppEnvironment.PROD

    def is_development(self) -> bool:
        return self is AppEnvironment.DEV

    def is_test(self) -> bool:
        return self is AppEnvironment.TEST

    def is_integration(self) -> bool:
        return self is AppEnvironment.INTEGRATION


def get_app_environment(
    key: str = "APP_ENV",
    default: str = AppEnvironment.DEV.value,
    environ: Optional[Mapping[str, str]] = None,
) -> Union[AppEnvironment, str]:
    """
    Return the environment name from `key`, falling back to `default`.

    Known names come back as AppEnvironment members; any other name is returned
    as-is so callers can use custom environments.
    """
    env = os.environ if environ is None else environ
    value = env.get(key, default)
    try:
        return AppEnvironment(value)
    except ValueError:
        return value


def get_server_port(default_port: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """Return PORT from the environment when set, else `default_port`."""
    env = os.environ if environ is None else environ
    port = env.get("PORT")
    if port:
        return port
    return default_port


def parse_config_dir(default_dir: str, argv: Optional[Sequence[str]] = None) -> str:
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("--config-dir", default=default_dir, help="Configuration directory")
    args, _ = parser.parse_known_args(argv)
    return args.config_dir
