from __future__ import annotations

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any, Generic, Mapping, Optional, Type, Union

from dotenv import dotenv_values
from pydantic import BaseModel

from strata.config.decode import EnvironmentBinding, decode
from strata.config.engine import YamlMergeEngine, normalize_keys
from strata.config.errors import ConfigDecodeError, ConfigLoadError, ConfigSetupError, ConfigValidationError
from strata.config.interfaces import Document, MergeEngine, MergeEngineFactory, T, Validator

logger = logging.getLogger(__name__)

BASE_CONFIG_NAME = "config"
EXAMPLE_CONFIG_NAME = "config.example"


def _read_dotenv(path: Path) -> dict[str, str]:
    if not path.exists():
        return {}
    if not path.is_file():
        raise IsADirectoryError(f"Dotenv path is not a file: {path}")
    return {k: v for k, v in dotenv_values(path).items() if v is not None}


def _environment_name(environment: Union[str, Enum]) -> str:
    name = environment.value if isinstance(environment, Enum) else str(environment)
    if not name:
        raise ValueError("environment name must not be empty")
    if "/" in name or "\\" in name or name in (".", ".."):
        raise ValueError(f"invalid environment name: {name!r}")
    return name


class ConfigLoader(Generic[T]):
    """
    Loads a pydantic model from layered configuration files and the environment.

    Precedence, lowest to highest:
    - values explicitly set on the target instance (when an instance is given)
    - config.example.<ext>
    - config.<ext>
    - config.<environment>.<ext>
    - .env values (see `with_dotenv`)
    - process environment variables

    Example:

        config = (
            ConfigLoader(AppConfig)
            .with_validation(check_ports)
            .load(AppEnvironment.DEV, "./configs")
        )
    """

    def __init__(
        self,
        target: Union[Type[T], T],
        *,
        environ: Optional[Mapping[str, str]] = None,
        env_prefix: str = "",
    ) -> None:
        if isinstance(target, BaseModel):
            self._model_type: Type[T] = type(target)
            self._initial: Optional[T] = target
        elif isinstance(target, type) and issubclass(target, BaseModel):
            self._model_type = target
            self._initial = None
        else:
            raise TypeError(f"ConfigLoader target must be a pydantic model class or instance, got {target!r}")

        self._environ = environ
        self._env_prefix = env_prefix
        self._engine_factory: MergeEngineFactory = YamlMergeEngine
        self._validator: Optional[Validator[T]] = None
        self._dotenv_path: Optional[Path] = None
        self._config: Optional[T] = self._initial

    @property
    def model_type(self) -> Type[T]:
        return self._model_type

    @property
    def config(self) -> Optional[T]:
        """The most recently loaded configuration, or the initial target."""
        return self._config

    def with_engine(self, factory: MergeEngineFactory) -> ConfigLoader[T]:
        self._engine_factory = factory
        return self

    def with_validation(self, validator: Validator[T]) -> ConfigLoader[T]:
        """
        Register a callback run on the decoded configuration.

        The callback rejects the configuration by raising, or by returning an
        exception instance. Registering again replaces the previous callback.
        """
        self._validator = validator
        return self

    def with_dotenv(self, path: Union[str, Path] = ".env") -> ConfigLoader[T]:
        self._dotenv_path = Path(path)
        return self

    def load(self, environment: Union[str, Enum], config_dir: Union[str, Path]) -> T:
        config_dir = Path(config_dir)
        try:
            engine = self._engine_factory(config_dir)
            binding = self._environment_binding()
        except Exception as e:
            raise ConfigSetupError(e) from e
        state = self._initial_state()

        try:
            layers = self._load_base(engine, state)
        except Exception as e:
            raise ConfigLoadError("base-load", e) from e

        try:
            env_layer = self._merge_environment(engine, state, _environment_name(environment))
        except Exception as e:
            raise ConfigLoadError("env-merge", e) from e
        if env_layer is not None:
            layers.append(env_layer)

        try:
            config = decode(self._model_type, state, binding)
        except (ValueError, TypeError) as e:
            raise ConfigDecodeError(e) from e

        if self._validator is not None:
            try:
                result = self._validator(config)
            except Exception as e:
                raise ConfigValidationError(e) from e
            if isinstance(result, BaseException):
                raise ConfigValidationError(result) from result

        self._config = config
        logger.info(
            "config.loaded model=%s environment=%s dir=%s layers=%s",
            self._model_type.__name__,
            environment.value if isinstance(environment, Enum) else environment,
            config_dir,
            ",".join(layers) or "none",
        )
        return config

    def _environment_binding(self) -> EnvironmentBinding:
        environ: dict[str, str] = {}
        if self._dotenv_path is not None:
            environ.update(_read_dotenv(self._dotenv_path))
        environ.update(os.environ if self._environ is None else self._environ)
        return EnvironmentBinding(environ, self._env_prefix)

    def _initial_state(self) -> Document:
        if self._initial is None:
            return {}
        data: Any = self._initial.model_dump(mode="python", by_alias=True, exclude_unset=True)
        return normalize_keys(data)

    def _load_base(self, engine: MergeEngine, state: Document) -> list[str]:
        layers: list[str] = []

        example = engine.read(EXAMPLE_CONFIG_NAME)
        if example is not None:
            engine.merge(state, example)
            layers.append(EXAMPLE_CONFIG_NAME)
            override = engine.read(BASE_CONFIG_NAME)
            if override is not None:
                engine.merge(state, override)
                layers.append(BASE_CONFIG_NAME)
            return layers

        base = engine.read(BASE_CONFIG_NAME)
        if base is None:
            # Defaults and environment variables may still populate the target.
            logger.debug("config.no_base_config")
            return layers
        engine.merge(state, base)
        layers.append(BASE_CONFIG_NAME)
        return layers

    def _merge_environment(self, engine: MergeEngine, state: Document, environment: str) -> Optional[str]:
        name = f"{BASE_CONFIG_NAME}.{environment}"
        document = engine.read(name)
        if document is None:
            return None
        engine.merge(state, document)
        return name


def load_config(
    target: Union[Type[T], T],
    environment: Union[str, Enum],
    config_dir: Union[str, Path],
    *,
    validator: Optional[Validator[T]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> T:
    """Convenience wrapper around :class:`ConfigLoader`."""

    loader = ConfigLoader(target, environ=environ)
    if validator is not None:
        loader.with_validation(validator)
    return loader.load(environment, config_dir)
