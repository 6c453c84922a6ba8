from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Optional, Protocol, TypeVar

from pydantic import BaseModel

Document = dict[str, Any]

T = TypeVar("T", bound=BaseModel)

Validator = Callable[[T], Optional[BaseException]]


class MergeEngine(Protocol):
    """
    Reads named documents from one configuration directory and merges them.

    `read` returns None when no file with that name exists or the file cannot
    be parsed. Any exception it raises is treated as an engine failure.
    """

    def read(self, name: str) -> Optional[Document]:
        ...

    def merge(self, into: Document, source: Document) -> Document:
        ...


class MergeEngineFactory(Protocol):
    def __call__(self, config_dir: Path) -> MergeEngine:
        ...
