"""
Canonical JSON serialization.

The output of serialize is used as input for fingerprints, so it must not depend on
the order in which dict keys or set members happen to be stored.
"""

import datetime
import json
from enum import Enum
from pathlib import Path, PurePath
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from projectcache.errors import DeserializationError

M = TypeVar("M", bound=BaseModel)


def serialize(value: Any) -> bytes:
    """Serialize a value into canonical UTF-8 JSON bytes (sorted keys, no whitespace)"""
    return _dumps(value).encode("utf-8")


def _dumps(value: Any) -> str:
    _check_keys(value)
    return json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
        default=_to_json,
    )


def _check_keys(value: Any):
    # json would silently turn 1 into "1", making {1: x} and {"1": x} indistinguishable
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise TypeError(f"Keys must be strings, not {type(key).__name__} ({key!r})")
            _check_keys(item)
    elif isinstance(value, (list, tuple)):
        for item in value:
            _check_keys(item)


def _to_json(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, PurePath):
        return value.as_posix()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=_dumps)
    raise TypeError(f"Object of type {type(value).__name__} cannot be serialized")


def deserialize_file(path: Path, model: type[M]) -> M:
    """Read a JSON file and validate it as the given model"""
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise DeserializationError(f"Cannot read {path}: {e}") from e
    try:
        return model.model_validate_json(data)
    except ValidationError as e:
        raise DeserializationError(f"Invalid {model.__name__} in {path}: {e}") from e
