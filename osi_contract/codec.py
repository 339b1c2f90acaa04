"""Tagged-field mapping codec for the schema dataclasses.

Mirrors the contract of the wire format: every field has a stable numeric tag,
unknown keys are ignored on read, and absent fields stay absent (None or an
empty tuple) instead of turning into zero.
"""
from __future__ import annotations

import dataclasses
import json
import re
import typing
from enum import IntEnum
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Tuple, Type, TypeVar

import yaml

from osi_contract.schemas.common import Identifier, Timestamp

T = TypeVar("T")


@lru_cache(maxsize=None)
def _fields(cls) -> Tuple[Tuple[str, int, Any], ...]:
    hints = typing.get_type_hints(cls)
    return tuple((f.name, f.metadata.get("tag"), hints[f.name]) for f in dataclasses.fields(cls))


def _unwrap_optional(tp):
    if typing.get_origin(tp) is typing.Union:
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


def _encode_value(value, by_tag: bool):
    if dataclasses.is_dataclass(value):
        return to_dict(value, by_tag=by_tag)
    if isinstance(value, IntEnum):
        return int(value) if by_tag else value.name
    if isinstance(value, tuple):
        return [_encode_value(v, by_tag) for v in value]
    return value


def to_dict(obj, by_tag: bool = False) -> Dict[Any, Any]:
    """Encode a schema dataclass; keys are field names, or tags with ``by_tag``."""
    out: Dict[Any, Any] = {}
    for name, number, _ in _fields(type(obj)):
        value = getattr(obj, name)
        if value is None or value == ():
            continue
        out[number if by_tag else name] = _encode_value(value, by_tag)
    return out


class _Absent(Exception):
    pass


def _enum_prefix(enum_cls) -> str:
    """ChannelFormat -> CHANNEL_FORMAT_"""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", enum_cls.__name__).upper() + "_"


def _decode_enum(enum_cls, raw):
    if isinstance(raw, enum_cls):
        return raw
    if isinstance(raw, str) and not raw.strip().isdigit():
        key = raw.strip().upper()
        if key in enum_cls.__members__:
            return enum_cls[key]
        # schema-style names carry a prefix, e.g. CHANNEL_FORMAT_RGB_U8_LIN
        prefix = _enum_prefix(enum_cls)
        if key.startswith(prefix) and key[len(prefix):] in enum_cls.__members__:
            return enum_cls[key[len(prefix):]]
        raise ValueError(f"unknown {enum_cls.__name__} name: {raw!r}")
    try:
        return enum_cls(int(raw))
    except ValueError:
        # values outside the closed set are treated like unknown tags
        raise _Absent()


def parse_enum(enum_cls, raw):
    """Strict enum parsing for configuration files: unknown values raise ValueError."""
    try:
        return _decode_enum(enum_cls, raw)
    except _Absent:
        raise ValueError(f"unknown {enum_cls.__name__} value: {raw!r}") from None


def _decode_value(tp, raw):
    tp = _unwrap_optional(tp)
    origin = typing.get_origin(tp)
    if origin is tuple:
        item_tp = typing.get_args(tp)[0]
        if not isinstance(raw, (list, tuple)):
            raw = [raw]
        items = []
        for item in raw:
            try:
                items.append(_decode_value(item_tp, item))
            except _Absent:
                continue
        return tuple(items)
    if isinstance(tp, type) and issubclass(tp, IntEnum):
        return _decode_enum(tp, raw)
    if dataclasses.is_dataclass(tp):
        if isinstance(raw, tp):
            return raw
        if tp is Timestamp and isinstance(raw, (int, float)) and not isinstance(raw, bool):
            return Timestamp.from_seconds(raw)
        if tp is Identifier and isinstance(raw, int) and not isinstance(raw, bool):
            return Identifier(raw)
        if not isinstance(raw, dict):
            raise ValueError(f"expected a mapping for {tp.__name__}, got {raw!r}")
        return from_dict(tp, raw)
    if tp is bool:
        if isinstance(raw, str):
            return raw.strip().lower() == "true"
        return bool(raw)
    if tp is int:
        if isinstance(raw, float) and not raw.is_integer():
            raise ValueError(f"expected an integer, got {raw!r}")
        return int(raw)
    if tp is float:
        return float(raw)
    return raw


def from_dict(cls: Type[T], data: Dict[Any, Any]) -> T:
    """Decode a mapping keyed by field names or tags; unknown keys are ignored."""
    if data is None:
        data = {}
    kwargs = {}
    for name, number, tp in _fields(cls):
        if name in data:
            raw = data[name]
        elif number in data:
            raw = data[number]
        elif str(number) in data:
            raw = data[str(number)]
        else:
            continue
        if raw is None:
            continue
        try:
            kwargs[name] = _decode_value(tp, raw)
        except _Absent:
            continue
    return cls(**kwargs)


def dump_yaml(obj, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(to_dict(obj), sort_keys=False))
    return path


def load_yaml(cls: Type[T], path: Path) -> T:
    return from_dict(cls, yaml.safe_load(Path(path).read_text()) or {})


def dump_json(obj, path: Path, by_tag: bool = False) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(to_dict(obj, by_tag=by_tag), indent=2))
    return path


def load_json(cls: Type[T], path: Path) -> T:
    return from_dict(cls, json.loads(Path(path).read_text()))
