from __future__ import annotations

import logging

from strata.config import AppEnvironment, ConfigLoader, get_app_environment
from strata.config.models import AppConfig
from strata.logging import init_logging


def _check(config: AppConfig) -> None:
    if config.server_port <= 0:
        raise ValueError("server_port must be positive")


def main() -> None:
    environment = get_app_environment(default=AppEnvironment.DEV.value)
    config = ConfigLoader(AppConfig).with_validation(_check).load(environment, "examples/configs")
    init_logging(config.logging_settings())

    logger = logging.getLogger("smoke")
    logger.info("Config loaded app_name=%s environment=%s", config.app_name, environment)
    logger.info("Database dsn=%s", config.database.get_dsn())
    logger.info("Redis addr=%s dial_timeout=%s", config.redis.get_addr(), config.redis.dial_timeout)


if __name__ == "__main__":
    main()
