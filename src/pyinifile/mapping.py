# -*- encoding: utf-8 -*-
# @File   : mapping.py
# @Time   : 2024/11/06 19:30:21
# @Author : Kariko Lin

"""Typed records <-> INI sections.

A record type is described by a `Schema`: its fields in declaration order,
each with a type, an optional default and optional custom converters.
Dataclasses, `NamedTuple` and `TypedDict` classes are understood as is.

```python
@dataclass
class Window:
    width: int
    height: int
    title: str = 'untitled'
    opacity: float | None = None

res = read_record(doc, 'Window', Window)
if res.complete:
    ...
write_record(doc, 'Window', res.value)
```

Per-field converters can be given through dataclass field metadata
(`field(metadata={'ini_decode': ..., 'ini_encode': ...})`), or by
passing a hand-built `Schema`.
"""

import dataclasses
import logging
import typing
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any, NamedTuple, TypeVar, is_typeddict

from .codec import unwrap_optional
from .errors import ConversionError, MappingError
from .ini.model import IniDocument

logger = logging.getLogger(__name__)

E = TypeVar('E', bound=Enum)

MISSING: Any = dataclasses.MISSING
"""Marks a field without default value."""

_UNSET = object()


class Scope(Enum):
    FIELDS = 'fields'  # every field, `_private` ones included
    PUBLIC = 'public'


class FieldSpec(NamedTuple):
    name: str
    type: Any
    default: Any = MISSING
    encode: Callable[[Any], str | None] | None = None
    decode: Callable[[str], Any] | None = None
    factory: Callable[[], Any] | None = None
    required: bool = True

    def default_value(self) -> Any:
        if self.factory is not None:
            return self.factory()
        return self.default


def _is_namedtuple(cls: type) -> bool:
    return (isinstance(cls, type) and issubclass(cls, tuple)
            and hasattr(cls, '_fields'))


def _dataclass_fields(cls: type, hints: dict[str, Any]) -> Iterator[FieldSpec]:
    for f in dataclasses.fields(cls):
        if not f.init:
            continue
        yield FieldSpec(
            f.name, hints.get(f.name, f.type),
            default=f.default,
            encode=f.metadata.get('ini_encode'),
            decode=f.metadata.get('ini_decode'),
            factory=(None if f.default_factory is MISSING
                     else f.default_factory),
            required=(f.default is MISSING
                      and f.default_factory is MISSING))


def _namedtuple_fields(cls: type, hints: dict[str, Any]) -> Iterator[FieldSpec]:
    defaults = getattr(cls, '_field_defaults', {})
    for name in cls._fields:  # type: ignore[attr-defined]
        yield FieldSpec(
            name, hints.get(name, Any),
            default=defaults.get(name, MISSING),
            required=name not in defaults)


def _typeddict_fields(cls: type, hints: dict[str, Any]) -> Iterator[FieldSpec]:
    required = getattr(cls, '__required_keys__', frozenset(hints))
    for name, tp in hints.items():
        yield FieldSpec(name, tp, required=name in required)


@dataclass(frozen=True)
class Schema:
    """Ordered field description of a record type."""
    cls: type
    fields: tuple[FieldSpec, ...]

    @staticmethod
    def of(cls: type, scope: Scope = Scope.FIELDS) -> 'Schema':
        """Schema of `cls`, built once per `(cls, scope)`."""
        return _build_schema(cls, scope)

    @property
    def is_mapping(self) -> bool:
        return is_typeddict(self.cls)

    def get(self, record: Any, spec: FieldSpec) -> Any:
        """Current value of `spec` in `record`, `_UNSET` when it has none."""
        if self.is_mapping or isinstance(record, dict):
            return record.get(spec.name, _UNSET)
        return getattr(record, spec.name, _UNSET)

    def build(self, values: dict[str, Any]) -> Any:
        # NamedTuple, dataclass and TypedDict all take keywords.
        return self.cls(**values)


@lru_cache(maxsize=None)
def _build_schema(cls: type, scope: Scope) -> Schema:
    try:
        hints = typing.get_type_hints(cls)
    except (NameError, TypeError) as e:
        raise MappingError(
            f'Cannot resolve annotations of {cls!r}: {e}') from e
    if dataclasses.is_dataclass(cls):
        specs = _dataclass_fields(cls, hints)
    elif _is_namedtuple(cls):
        specs = _namedtuple_fields(cls, hints)
    elif is_typeddict(cls):
        specs = _typeddict_fields(cls, hints)
    else:
        raise MappingError(
            f'{cls!r} is neither a dataclass, NamedTuple nor TypedDict')
    fields = tuple(
        s for s in specs
        if scope is Scope.FIELDS or not s.name.startswith('_'))
    logger.debug('schema of %s: %s', cls.__qualname__,
                 ', '.join(s.name for s in fields))
    return Schema(cls, fields)


class RecordResult(NamedTuple):
    """`value` is None when required fields could not be filled."""
    value: Any
    complete: bool
    missing: tuple[str, ...] = ()
    invalid: tuple[str, ...] = ()

    def __bool__(self) -> bool:
        return self.complete


def _decode_field(doc: IniDocument, spec: FieldSpec, raw: str) -> Any:
    if spec.decode is None:
        return doc.codec.decode(raw, spec.type)
    try:
        return spec.decode(raw)
    except ConversionError:
        raise
    except (ValueError, TypeError) as e:
        raise ConversionError(raw, spec.type, str(e)) from e


def _is_unset(spec: FieldSpec, raw: str | None) -> bool:
    # `key=` counts as not set, unless text or None is a valid reading.
    if raw is None:
        return True
    if raw.strip() or spec.decode is not None:
        return False
    tp, nullable = unwrap_optional(spec.type)
    if nullable or tp is Any:
        return False
    return not (isinstance(tp, type) and issubclass(tp, str))


def read_record(
    doc: IniDocument,
    section: str | None,
    cls: type,
    *,
    strict: bool = True,
    base: Any = None,
    schema: Schema | None = None,
) -> RecordResult:
    """Build a fresh `cls` instance from the settings of `section`.

    Absent settings fall back to the value in `base` (if given), then to
    the field default. Strict mode raises `MappingError` on an invalid
    value or on an absent field that has nothing to fall back to; lenient
    mode logs and lists them in the result instead.

    An empty setting (`key=`) is treated as absent for non-text fields.
    For `Optional` fields it reads as None; this includes `str | None`,
    so an empty string written there comes back as None.
    """
    if schema is None:
        schema = Schema.of(cls)
    if not schema.fields:
        msg = f'{cls.__qualname__} has no fields to read'
        if strict:
            raise MappingError(msg, section=section)
        logger.warning(msg)
        return RecordResult(None, False)

    values: dict[str, Any] = {}
    missing: list[str] = []
    invalid: list[str] = []
    unfilled = False

    def fallback(spec: FieldSpec) -> None:
        nonlocal unfilled
        if base is not None:
            value = schema.get(base, spec)
            if value is not _UNSET:
                values[spec.name] = value
                return
        if spec.required:
            unfilled = True

    for spec in schema.fields:
        raw = doc.read_setting(section, spec.name)
        if _is_unset(spec, raw):
            missing.append(spec.name)
            fallback(spec)
            if spec.name not in values and spec.required:
                if strict:
                    raise MappingError(
                        f'[{section}] {spec.name} is not set',
                        section=section, field=spec.name)
                logger.warning('[%s] %s is not set', section, spec.name)
            continue
        try:
            values[spec.name] = _decode_field(doc, spec, raw)
        except ConversionError as e:
            if strict:
                raise MappingError(
                    f'[{section}] {spec.name}: {e}',
                    section=section, field=spec.name) from e
            logger.warning('[%s] %s: %s', section, spec.name, e)
            invalid.append(spec.name)
            fallback(spec)

    value = None if unfilled else schema.build(values)
    return RecordResult(
        value, not (missing or invalid), tuple(missing), tuple(invalid))


def write_record(
    doc: IniDocument,
    section: str,
    record: Any,
    *,
    schema: Schema | None = None,
) -> int:
    """Write every field of `record` into `section`; returns the count.

    `None` fields are written as `key=`. TypedDict instances are plain
    dicts at runtime, so they need an explicit `schema`.
    """
    if schema is None:
        if isinstance(record, dict):
            raise MappingError(
                'Pass schema=Schema.of(<TypedDict class>) for dict records',
                section=section)
        schema = Schema.of(type(record))
    if not schema.fields:
        raise MappingError(
            f'{schema.cls.__qualname__} has no fields to write',
            section=section)
    count = 0
    for spec in schema.fields:
        value = schema.get(record, spec)
        if value is _UNSET:
            continue
        text = spec.encode(value) if spec.encode else doc.codec.encode(value)
        doc.write_setting(section, spec.name, '' if text is None else text)
        count += 1
    return count


def read_enums(
    doc: IniDocument,
    section: str | None,
    enum_cls: type[E],
    *,
    strict: bool = True,
) -> list[E]:
    """Every non-comment line of `section` parsed as an `enum_cls` member.

    ```ini
    [Features]
    Logging
    Metrics
    ```
    """
    result: list[E] = []
    for line in doc.read_section(section, strip_comments=True):
        try:
            result.append(doc.codec.decode(line.strip(), enum_cls))
        except ConversionError:
            if strict:
                raise
            logger.warning(
                'ignoring invalid %s value %r in [%s]',
                enum_cls.__name__, line, section)
    return result


def read_value(
    doc: IniDocument,
    section: str | None,
    key: str,
    to_type: Any,
    default: Any = MISSING,
) -> Any:
    """Read and decode one setting.

    Without `default`, an unset key raises `MappingError`.
    """
    raw = doc.read_setting(section, key)
    if raw is None:
        if default is MISSING:
            raise MappingError(
                f'[{section}] {key} is not set', section=section, field=key)
        return default
    return doc.codec.decode(raw, to_type)
