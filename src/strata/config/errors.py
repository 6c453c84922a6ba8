from __future__ import annotations

from typing import Literal

Phase = Literal["setup", "base-load", "env-merge", "unmarshal", "validation"]

_PHASE_MESSAGES: dict[str, str] = {
    "setup": "failed to setup config engine",
    "base-load": "failed to load base config",
    "env-merge": "failed to merge environment config",
    "unmarshal": "failed to unmarshal config",
    "validation": "config validation failed",
}


class ConfigLoadError(Exception):
    """
    Fatal configuration loading failure.

    `phase` names the loading step that failed so callers can branch on it
    (for example to pick a process exit code).
    """

    phase: Phase

    def __init__(self, phase: Phase, cause: BaseException | str) -> None:
        self.phase = phase
        self.cause = cause
        super().__init__(f"{_PHASE_MESSAGES[phase]}: {cause}")


class ConfigSetupError(ConfigLoadError):
    def __init__(self, cause: BaseException | str) -> None:
        super().__init__("setup", cause)


class ConfigDecodeError(ConfigLoadError):
    """The merged document does not fit the target model."""

    def __init__(self, cause: BaseException | str) -> None:
        super().__init__("unmarshal", cause)


class ConfigValidationError(ConfigLoadError):
    """The decoded configuration was rejected by the registered validator."""

    def __init__(self, cause: BaseException | str) -> None:
        super().__init__("validation", cause)
