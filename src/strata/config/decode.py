from __future__ import annotations

import collections.abc
import re
import types
from datetime import timedelta
from typing import Annotated, Any, Mapping, Optional, Sequence, Type, TypeVar, Union, get_args, get_origin

from pydantic import BaseModel, BeforeValidator
from pydantic.fields import FieldInfo

T = TypeVar("T", bound=BaseModel)

_MISSING = object()

_SEQUENCE_ORIGINS = {
    list,
    tuple,
    set,
    frozenset,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
    collections.abc.MutableSet,
}

# Go duration syntax: "300ms", "1h30m", "-1.5h".
_DURATION_PART = r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)"
_DURATION_RE = re.compile(rf"[-+]?(?:{_DURATION_PART})+")
_DURATION_PART_RE = re.compile(_DURATION_PART)
_UNIT_MICROSECONDS = {
    "ns": 0.001,
    "us": 1,
    "µs": 1,
    "μs": 1,
    "ms": 1_000,
    "s": 1_000_000,
    "m": 60_000_000,
    "h": 3_600_000_000,
}


def parse_duration(value: Any) -> Any:
    """
    Convert a Go-style duration string into a timedelta.

    Anything else is returned unchanged so pydantic can apply its own timedelta
    parsing (numbers of seconds, ISO 8601 durations).
    """
    if not isinstance(value, str):
        return value
    text = value.strip()
    if text in ("0", "+0", "-0"):
        return timedelta(0)
    if not _DURATION_RE.fullmatch(text):
        return value
    sign = -1 if text.startswith("-") else 1
    micros = sum(float(number) * _UNIT_MICROSECONDS[unit] for number, unit in _DURATION_PART_RE.findall(text))
    return timedelta(microseconds=sign * micros)


Duration = Annotated[timedelta, BeforeValidator(parse_duration)]


class EnvironmentBinding:
    """
    Maps target key paths to environment variable names.

    `database.host` is looked up as `DATABASE_HOST` (or `<PREFIX>_DATABASE_HOST`).
    Empty values count as unset.
    """

    def __init__(self, environ: Mapping[str, str], prefix: str = "") -> None:
        self._environ = environ
        self._prefix = prefix.strip("_").upper()

    def variable_name(self, path: Sequence[str]) -> str:
        name = "_".join(path).replace(".", "_").upper()
        if self._prefix:
            return f"{self._prefix}_{name}"
        return name

    def lookup(self, path: Sequence[str]) -> Optional[str]:
        value = self._environ.get(self.variable_name(path))
        if not value:
            return None
        return value

    def has_prefix(self, path: Sequence[str]) -> bool:
        """Whether any non-empty variable names a key below `path`."""
        head = self.variable_name(path) + "_"
        return any(value and name.startswith(head) for name, value in self._environ.items())


_NO_ENVIRONMENT = EnvironmentBinding({})


def _unwrap(annotation: Any) -> Any:
    while True:
        origin = get_origin(annotation)
        if origin is Annotated:
            annotation = get_args(annotation)[0]
            continue
        if origin is Union or origin is types.UnionType:
            args = [a for a in get_args(annotation) if a is not type(None)]
            if len(args) == 1:
                annotation = args[0]
                continue
        return annotation


def _model_type(annotation: Any) -> Optional[Type[BaseModel]]:
    inner = _unwrap(annotation)
    if isinstance(inner, type) and issubclass(inner, BaseModel):
        return inner
    return None


def _is_sequence(annotation: Any) -> bool:
    inner = _unwrap(annotation)
    return (get_origin(inner) or inner) in _SEQUENCE_ORIGINS


def _sequence_item_model(annotation: Any) -> Optional[Type[BaseModel]]:
    inner = _unwrap(annotation)
    if not _is_sequence(inner):
        return None
    args = [a for a in get_args(inner) if a is not Ellipsis]
    if len(args) != 1:
        return None
    return _model_type(args[0])


def _is_duration(annotation: Any) -> bool:
    return _unwrap(annotation) is timedelta


def field_key(name: str, field: FieldInfo) -> str:
    """Return the key a field is read from: its alias when set, else its name."""
    if isinstance(field.validation_alias, str):
        return field.validation_alias
    return field.alias or name


def _allows_none(annotation: Any) -> bool:
    if annotation is Any or annotation is None or annotation is type(None):
        return True
    origin = get_origin(annotation)
    if origin is Annotated:
        return _allows_none(get_args(annotation)[0])
    if origin is Union or origin is types.UnionType:
        return any(_allows_none(a) for a in get_args(annotation))
    return False


def _stringify(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return value


def _coerce_scalars(value: Any, annotation: Any) -> Any:
    """Render YAML numbers and booleans as text for str fields."""
    inner = _unwrap(annotation)
    if inner is str:
        return _stringify(value)
    if isinstance(value, list) and _is_sequence(inner):
        args = [a for a in get_args(inner) if a is not Ellipsis]
        if len(args) == 1 and _unwrap(args[0]) is str:
            return [_stringify(v) for v in value]
    return value


def _coerce_env(value: str, annotation: Any) -> Any:
    if _is_sequence(annotation):
        return [part.strip() for part in value.split(",") if part.strip()]
    return value


def build_payload(
    model_type: Type[BaseModel],
    tree: Mapping[str, Any],
    binding: EnvironmentBinding = _NO_ENVIRONMENT,
    prefix: Sequence[str] = (),
) -> dict[str, Any]:
    """
    Select the values `model_type` declares from a lower-cased document tree.

    Bound environment variables replace document values. A nested model is only
    visited when the document holds a mapping for it or an environment variable
    names one of its keys, so optional nested models without data stay None.
    Blank document values (`key:`) count as absent unless the field accepts None.
    """
    payload: dict[str, Any] = {}
    for name, field in model_type.model_fields.items():
        key = field_key(name, field)
        path = (*prefix, key.lower())
        value = tree.get(key.lower(), _MISSING)

        nested = _model_type(field.annotation)
        if nested is not None:
            if value is None and not _allows_none(field.annotation):
                value = {}
            if isinstance(value, Mapping) or binding.has_prefix(path):
                sub_tree = value if isinstance(value, Mapping) else {}
                sub_payload = build_payload(nested, sub_tree, binding, path)
                if isinstance(value, Mapping) or sub_payload:
                    payload[key] = sub_payload
                    continue
            if value is not _MISSING:
                payload[key] = value
            continue

        if value is None and not _allows_none(field.annotation):
            value = _MISSING
        env_value = binding.lookup(path)
        if env_value is not None:
            value = _coerce_env(env_value, field.annotation)
        if value is _MISSING:
            continue

        if _is_duration(field.annotation):
            value = parse_duration(value)
        else:
            item_model = _sequence_item_model(field.annotation)
            if item_model is not None and isinstance(value, list):
                value = [build_payload(item_model, v) if isinstance(v, Mapping) else v for v in value]
            else:
                value = _coerce_scalars(value, field.annotation)
        payload[key] = value
    return payload


def decode(model_type: Type[T], tree: Mapping[str, Any], binding: EnvironmentBinding = _NO_ENVIRONMENT) -> T:
    """Validate the merged tree into `model_type`. Raises pydantic.ValidationError."""
    return model_type.model_validate(build_payload(model_type, tree, binding))
