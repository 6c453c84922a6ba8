from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional, Sequence

import yaml

from strata.config.interfaces import Document

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS: Sequence[str] = ("yaml", "yml", "json")


def normalize_keys(value: Any) -> Any:
    """Lower-case every mapping key so key paths compare case-insensitively."""
    if isinstance(value, Mapping):
        return {str(k).lower(): normalize_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [normalize_keys(v) for v in value]
    return value


def deep_merge_dicts(base: MutableMapping[str, Any], override: Mapping[str, Any]) -> None:
    for k, v in override.items():
        if isinstance(v, Mapping) and isinstance(base.get(k), MutableMapping):
            deep_merge_dicts(base[k], v)  # type: ignore[arg-type]
            continue
        if v is None and k in base:
            # A blank key keeps the lower layer's value.
            continue
        base[k] = v


class YamlMergeEngine:
    """Reads `<name>.<ext>` documents from a single directory."""

    def __init__(self, config_dir: Path | str, extensions: Sequence[str] = SUPPORTED_EXTENSIONS) -> None:
        config_dir = Path(config_dir)
        if config_dir.exists() and not config_dir.is_dir():
            raise NotADirectoryError(f"Config path is not a directory: {config_dir}")
        self._config_dir = config_dir
        self._extensions = tuple(extensions)

    @property
    def config_dir(self) -> Path:
        return self._config_dir

    def find(self, name: str) -> Optional[Path]:
        for ext in self._extensions:
            path = self._config_dir / f"{name}.{ext}"
            if path.is_file():
                return path
        return None

    def read(self, name: str) -> Optional[Document]:
        path = self.find(name)
        if path is None:
            logger.debug("config.layer_missing name=%s dir=%s", name, self._config_dir)
            return None

        try:
            data = self._parse(path)
        except (OSError, UnicodeDecodeError, yaml.YAMLError, json.JSONDecodeError) as e:
            logger.warning("config.layer_unreadable path=%s error=%s", path, e)
            return None

        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            logger.warning(
                "config.layer_unreadable path=%s error=top-level document must be a mapping, got %s",
                path,
                type(data).__name__,
            )
            return None

        logger.debug("config.layer_loaded name=%s path=%s", name, path)
        return normalize_keys(data)

    def merge(self, into: Document, source: Document) -> Document:
        deep_merge_dicts(into, normalize_keys(source))
        return into

    @staticmethod
    def _parse(path: Path) -> Any:
        raw = path.read_text(encoding="utf-8")
        if path.suffix.lower() == ".json":
            return json.loads(raw) if raw.strip() else None
        return yaml.safe_load(raw)
