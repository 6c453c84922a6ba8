from __future__ import annotations

import argparse
import importlib
import json
import logging
import sys
from typing import Any, Optional, Sequence

import yaml

from strata.config import ConfigLoader, ConfigLoadError, ConfigValidationError, get_app_environment
from strata.config.models import AppConfig
from strata.logging import LoggingSettings, init_logging

logger = logging.getLogger(__name__)

EXIT_CONFIG_MALFORMED = 2
EXIT_CONFIG_INVALID = 3


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="strata-config", description="Print the effective layered configuration")
    parser.add_argument(
        "--config-dir",
        default="configs",
        help="Directory holding config.example.yaml, config.yaml and config.<env>.yaml (default: configs)",
    )
    parser.add_argument(
        "--env",
        default=None,
        help="Environment name used to pick config.<env>.yaml (default: $APP_ENV or dev)",
    )
    parser.add_argument(
        "--model",
        default="strata.config.models:AppConfig",
        help="Target model as module:Class (default: strata.config.models:AppConfig)",
    )
    parser.add_argument("--validator", default=None, help="Validation callback as module:function")
    parser.add_argument("--dotenv", default=None, help="Optional .env file consulted below the process environment")
    parser.add_argument("--env-prefix", default="", help="Prefix for environment variable names")
    parser.add_argument("--format", choices=("yaml", "json"), default="yaml", help="Output format (default: yaml)")
    parser.add_argument("--log-level", default="WARNING", help="Log level used while loading (default: WARNING)")
    return parser


def _import_object(path: str) -> Any:
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"Expected module:attribute, got: {path}")
    module = importlib.import_module(module_name)
    return getattr(module, attr)


def _render(data: dict[str, Any], output_format: str) -> str:
    if output_format == "json":
        return json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    init_logging(LoggingSettings(level=args.log_level))

    try:
        loader = ConfigLoader(_import_object(args.model), env_prefix=args.env_prefix)
        if args.validator:
            loader.with_validation(_import_object(args.validator))
    except (ImportError, AttributeError, TypeError, ValueError) as e:
        parser.error(str(e))
    if args.dotenv:
        loader.with_dotenv(args.dotenv)

    environment = args.env or get_app_environment()
    try:
        config = loader.load(environment, args.config_dir)
    except ConfigValidationError as e:
        logger.error("app.config_invalid error=%s", e)
        return EXIT_CONFIG_INVALID
    except ConfigLoadError as e:
        logger.error("app.config_malformed phase=%s error=%s", e.phase, e)
        return EXIT_CONFIG_MALFORMED

    if isinstance(config, AppConfig) and (config.app_log_level or config.app_log_path):
        init_logging(config.logging_settings())

    sys.stdout.write(_render(config.model_dump(mode="json", by_alias=True), args.format))
    return 0


if __name__ == "__main__":
    sys.exit(main())
