# -*- encoding: utf-8 -*-
# @File   : codec.py
# @Time   : 2024/11/03 14:10:52
# @Author : Kariko Lin

"""Conversion between typed scalars and their INI text form.

Numbers and dates are formatted according to a culture (a Babel `Locale`),
so a document written with `de` reads back `1,5` as `1.5`.

Decoding tries, in order:

1. `bool` literals (`true/on/yes/1`, `false/off/no/0`);
2. `int`, `float` and `Decimal`;
3. `str` (and anything a `str` already is);
4. `Enum` and `Flag` members, by name;
5. `timedelta` (ticks, `150ms`, `2.5s`, `d.hh:mm:ss`);
6. `datetime` (ticks, the configured format, ISO-8601, locale dates),
   `date` and `time`;
7. converters registered with `ValueCodec.register()`.

`Optional[X]` targets are unwrapped before any of the above.
"""

import math
import re
import types
import typing
from collections.abc import Callable
from datetime import date, datetime, time, timedelta
from decimal import Decimal, InvalidOperation, localcontext
from enum import Enum, Flag
from pathlib import Path
from typing import Any, NamedTuple
from uuid import UUID

from babel import Locale
from babel.dates import parse_date
from babel.numbers import (
    NumberFormatError,
    format_decimal,
    get_minus_sign_symbol,
    get_plus_sign_symbol,
    parse_decimal,
)

from .errors import ConversionError
from .properties import DEFAULT_DATE_FORMAT, INVARIANT_CULTURE

# .NET style ticks: 100 ns units, datetimes counted from 0001-01-01.
TICKS_PER_MICROSECOND = 10

_TRUE_LITERALS = frozenset(('true', 'on', 'yes', '1'))
_FALSE_LITERALS = frozenset(('false', 'off', 'no', '0'))
_FLOAT_SPECIALS = {
    'nan': math.nan,
    'infinity': math.inf, '+infinity': math.inf, '-infinity': -math.inf,
    'inf': math.inf, '+inf': math.inf, '-inf': -math.inf,
}

_INTEGER = re.compile(r'[+-]?\d+')
# d.hh:mm[:ss[.fffffff]]
_SPAN_DOTTED = re.compile(
    r'(?P<sign>-)?(?:(?P<d>\d+)\.)?(?P<h>\d+):(?P<m>\d+)'
    r'(?::(?P<s>\d+)(?:\.(?P<f>\d{1,7}))?)?')
# d:hh:mm:ss[.fffffff]
_SPAN_COLONS = re.compile(
    r'(?P<sign>-)?(?P<d>\d+):(?P<h>\d+):(?P<m>\d+):(?P<s>\d+)'
    r'(?:\.(?P<f>\d{1,7}))?')
# `%Y` is not zero padded below year 1000 on glibc
_YEAR_DIRECTIVE = re.compile(r'(?<!%)((?:%%)*)%Y')
_DIGITS = re.compile(r'\d+')


def ticks_to_timedelta(ticks: int) -> timedelta:
    """Ticks -> timedelta, truncating toward zero like .NET does."""
    micros = abs(ticks) // TICKS_PER_MICROSECOND
    return timedelta(microseconds=-micros if ticks < 0 else micros)


class Converter(NamedTuple):
    decode: Callable[..., Any]
    encode: Callable[..., str] | None = None
    culture_aware: bool = False


BUILTIN_CONVERTERS: typing.Mapping[type, Converter] = types.MappingProxyType({
    Path: Converter(Path),
    UUID: Converter(UUID),
})


def unwrap_optional(to_type: Any) -> tuple[Any, bool]:
    """`Optional[int]` -> `(int, True)`; `int` -> `(int, False)`."""
    origin = typing.get_origin(to_type)
    if origin is typing.Union or origin is types.UnionType:
        args = typing.get_args(to_type)
        rest = [a for a in args if a is not type(None)]
        if len(rest) == 1 and len(args) == 2:
            return rest[0], True
    return to_type, False


def _is_subclass(to_type: Any, base: type) -> bool:
    return isinstance(to_type, type) and issubclass(to_type, base)


class ValueCodec:
    def __init__(
        self,
        culture: Locale | str = INVARIANT_CULTURE,
        date_format: str = DEFAULT_DATE_FORMAT,
    ) -> None:
        self.locale = (culture if isinstance(culture, Locale)
                       else Locale.parse(culture.replace('-', '_')))
        self.date_format = date_format
        self._minus = get_minus_sign_symbol(self.locale)
        self._plus = get_plus_sign_symbol(self.locale)
        self._converters: dict[type, Converter] = dict(BUILTIN_CONVERTERS)

    def __repr__(self) -> str:
        return f'ValueCodec({str(self.locale)!r}, {self.date_format!r})'

    def register(
        self,
        to_type: type,
        decode: Callable[..., Any],
        encode: Callable[..., str] | None = None,
        *,
        culture_aware: bool = False,
    ) -> None:
        """Register a converter for `to_type` (and its subclasses).

        With `culture_aware=True` both callables receive the codec locale
        as an additional positional argument.
        """
        self._converters[to_type] = Converter(decode, encode, culture_aware)

    def converter_for(self, to_type: Any) -> Converter | None:
        if not isinstance(to_type, type):
            return self._converters.get(to_type)
        for klass in to_type.__mro__:
            if klass in self._converters:
                return self._converters[klass]
        return None

    def encode(self, value: Any) -> str | None:
        if value is None:
            return None
        if isinstance(value, bool):
            return 'True' if value else 'False'
        if isinstance(value, Flag):
            return self._format_flag(value)
        if isinstance(value, Enum):
            return value.name
        if isinstance(value, str):
            return value
        if isinstance(value, (int, float, Decimal)):
            return self.format_number(value)
        if isinstance(value, datetime):
            return self._format_datetime(value)
        if isinstance(value, (date, time)):
            return value.isoformat()
        if isinstance(value, timedelta):
            return format_timedelta(value)
        conv = self.converter_for(type(value))
        if conv is not None and conv.encode is not None:
            if conv.culture_aware:
                return conv.encode(value, self.locale)
            return conv.encode(value)
        return str(value)

    def format_number(self, value: int | float | Decimal) -> str:
        if isinstance(value, float):
            if math.isnan(value):
                return 'NaN'
            if math.isinf(value):
                return 'Infinity' if value > 0 else '-Infinity'
            value = Decimal(repr(value))
        elif isinstance(value, Decimal):
            if not value.is_finite():
                return str(value)
        else:
            value = Decimal(value)
        exponent = int(value.as_tuple().exponent)
        with localcontext() as ctx:
            # keep every digit, Babel quantizes inside this context
            ctx.prec = max(
                ctx.prec, len(value.as_tuple().digits) + abs(exponent) + 2)
            return format_decimal(
                value, locale=self.locale,
                decimal_quantization=False, group_separator=False)

    def _format_flag(self, value: Flag) -> str:
        if not value._value_:
            return value.name if value.name else '0'
        names, covered = [], 0
        for member in type(value):
            if member._value_ and member in value:
                names.append(member.name)
                covered |= member._value_
        rest = value._value_ & ~covered
        if rest:
            names.append(str(rest))
        return ', '.join(names)

    def _format_datetime(self, value: datetime) -> str:
        if value.tzinfo is not None and '%z' not in self.date_format:
            return value.isoformat(sep=' ')
        fmt = _YEAR_DIRECTIVE.sub(
            lambda m: m[1] + f'{value.year:04d}', self.date_format)
        return value.strftime(fmt)

    def decode(self, text: str | None, to_type: Any) -> Any:
        """Convert `text` to `to_type`. `None` text decodes to `None`."""
        to_type, nullable = unwrap_optional(to_type)
        if text is None:
            return None
        if not isinstance(text, str):
            if isinstance(to_type, type) and isinstance(text, to_type):
                return text
            text = self.encode(text)
        if nullable and not text.strip():
            return None
        try:
            return self._decode(text, to_type)
        except ConversionError:
            raise
        except (ValueError, TypeError, ArithmeticError,
                KeyError, IndexError) as e:
            raise ConversionError(text, to_type, str(e)) from e

    def _decode(self, text: str, to_type: Any) -> Any:
        if to_type is bool:
            return self.parse_bool(text)
        if to_type in (int, float, Decimal):
            return self.parse_number(text, to_type)
        if to_type is Any or (
                isinstance(to_type, type) and isinstance(text, to_type)):
            return text
        if _is_subclass(to_type, Enum):
            return self._parse_enum(text, to_type)
        if to_type is timedelta:
            return self.parse_timedelta(text)
        if _is_subclass(to_type, datetime):
            return self.parse_datetime(text)
        if to_type is date:
            return date.fromisoformat(text.strip())
        if to_type is time:
            return time.fromisoformat(text.strip())
        conv = self.converter_for(to_type)
        if conv is None:
            raise ConversionError(
                text, to_type, 'no converter registered for this type')
        if conv.culture_aware:
            return conv.decode(text, self.locale)
        return conv.decode(text)

    def parse_bool(self, text: str) -> bool:
        s = text.strip().lower()
        if s in _TRUE_LITERALS:
            return True
        if s in _FALSE_LITERALS:
            return False
        raise ConversionError(text, bool, 'not a boolean literal')

    def parse_number(
        self, text: str, to_type: type = Decimal
    ) -> int | float | Decimal:
        s = text.strip()
        if to_type is not int and s.lower() in _FLOAT_SPECIALS:
            special = _FLOAT_SPECIALS[s.lower()]
            return special if to_type is float else Decimal(special)
        if self._minus != '-':
            s = s.replace(self._minus, '-')
        if self._plus != '+':
            s = s.replace(self._plus, '+')
        try:
            number = parse_decimal(s, locale=self.locale)
        except (NumberFormatError, InvalidOperation) as e:
            raise ConversionError(text, to_type, str(e)) from e
        if to_type is int:
            if not number.is_finite() or number != number.to_integral_value():
                raise ConversionError(text, int, 'not an integral number')
            return int(number)
        if to_type is float:
            return float(number)
        return number

    def _parse_enum(self, text: str, to_type: type[Enum]) -> Enum:
        s = text.strip()
        members = {k.casefold(): v for k, v in to_type.__members__.items()}
        if _is_subclass(to_type, Flag):
            result = to_type(0)
            for part in s.split(','):
                part = part.strip()
                if not part:
                    continue
                if part.casefold() in members:
                    result |= members[part.casefold()]
                elif _INTEGER.fullmatch(part):
                    result |= to_type(int(part))
                else:
                    raise ConversionError(
                        text, to_type, f'unknown member {part!r}')
            return result
        if s.casefold() in members:
            return members[s.casefold()]
        for member in to_type:
            if str(member.value).casefold() == s.casefold():
                return member
        if _INTEGER.fullmatch(s):
            return to_type(int(s))
        raise ConversionError(text, to_type, f'unknown member {s!r}')

    def parse_timedelta(self, text: str) -> timedelta:
        s = text.strip()
        try:
            if ':' in s:
                return _parse_span(s)
            if _INTEGER.fullmatch(s):
                return ticks_to_timedelta(int(s))
            if s.endswith('ms'):
                ms = self.parse_number(s[:-2])
                return timedelta(microseconds=round(ms * 1000))
            if s.endswith('s'):
                sec = self.parse_number(s[:-1])
                return timedelta(microseconds=round(sec * 1_000_000))
        except (ConversionError, ValueError, ArithmeticError) as e:
            raise ConversionError(text, timedelta, 'invalid duration') from e
        raise ConversionError(text, timedelta, 'invalid duration')

    def parse_datetime(self, text: str) -> datetime:
        s = text.strip()
        if _INTEGER.fullmatch(s):
            return datetime.min + ticks_to_timedelta(int(s))
        errors: list[Exception] = []
        try:
            return datetime.strptime(s, self.date_format)
        except ValueError as e:
            errors.append(e)
        try:
            return datetime.fromisoformat(s)
        except ValueError as e:
            errors.append(e)
        # Babel widens short years ('1' -> 2001), only trust a literal match.
        years = {int(d) for d in _DIGITS.findall(s) if len(d) >= 3}
        for fmt in ('short', 'medium', 'long'):
            try:
                parsed = parse_date(s, locale=self.locale, format=fmt)
            except (ValueError, IndexError) as e:
                errors.append(e)
                continue
            if parsed.year in years:
                return datetime.combine(parsed, time())
            errors.append(ValueError(
                f'{s!r} read as year {parsed.year} with the {fmt} format'))
        raise ConversionError(
            text, datetime, 'unrecognised date/time') from errors[0]


def _parse_span(s: str) -> timedelta:
    m = _SPAN_COLONS.fullmatch(s) or _SPAN_DOTTED.fullmatch(s)
    if m is None:
        raise ValueError(f'invalid time span {s!r}')
    days = int(m['d'] or 0)
    hours, minutes = int(m['h']), int(m['m'])
    seconds = int(m['s'] or 0)
    if hours > 23 or minutes > 59 or seconds > 59:
        raise ValueError(f'time span component out of range in {s!r}')
    ticks = int((m['f'] or '').ljust(7, '0'))
    span = timedelta(
        days=days, hours=hours, minutes=minutes, seconds=seconds,
        microseconds=ticks // TICKS_PER_MICROSECOND)
    return -span if m['sign'] else span


def format_timedelta(value: timedelta) -> str:
    """Canonical `[-][d.]hh:mm:ss[.fffffff]`, readable by `_parse_span`."""
    total = (value.days * 86400 + value.seconds) * 1_000_000 \
        + value.microseconds
    sign = '-' if total < 0 else ''
    total = abs(total)
    seconds, micros = divmod(total, 1_000_000)
    minutes, seconds = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    days, hours = divmod(hours, 24)
    ret = f'{sign}{days}.' if days else sign
    ret += f'{hours:02d}:{minutes:02d}:{seconds:02d}'
    if micros:
        ret += f'.{micros * TICKS_PER_MICROSECOND:07d}'
    return ret
