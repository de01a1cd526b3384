# -*- encoding: utf-8 -*-
# @File   : properties.py
# @Time   : 2024/11/02 21:03:44
# @Author : Kariko Lin

"""Document properties and the byte level transforms they describe.

Saving:  text -> encode -> cipher.encrypt -> compress
Loading: bytes -> decompress -> cipher.decrypt -> decode
"""

import codecs
import gzip
import zlib
from dataclasses import dataclass, replace
from enum import Enum
from typing import Protocol, runtime_checkable

from babel import Locale, UnknownLocaleError

from .errors import ConfigurationError

INVARIANT_CULTURE = 'en'
DEFAULT_DATE_FORMAT = '%Y-%m-%d %H:%M:%S.%f'


class Compression(str, Enum):
    NONE = 'none'
    DEFLATE = 'deflate'
    GZIP = 'gzip'


@runtime_checkable
class Cipher(Protocol):
    """Any symmetric transform, e.g. a thin wrapper over an AES context."""

    def encrypt(self, data: bytes) -> bytes:
        ...

    def decrypt(self, data: bytes) -> bytes:
        ...


@dataclass(frozen=True)
class IniProperties:
    encoding: str = 'utf-8'
    culture: Locale | str = INVARIANT_CULTURE
    case_sensitive: bool = False
    compression: Compression = Compression.NONE
    cipher: Cipher | None = None
    date_format: str = DEFAULT_DATE_FORMAT

    def __post_init__(self) -> None:
        # accept 'gzip' etc. for convenience; leave unknown ones to `check()`
        if (isinstance(self.compression, str)
                and not isinstance(self.compression, Compression)):
            try:
                object.__setattr__(
                    self, 'compression',
                    Compression(self.compression.lower()))
            except ValueError:
                pass

    @property
    def locale(self) -> Locale:
        if isinstance(self.culture, Locale):
            return self.culture
        try:
            return Locale.parse(self.culture.replace('-', '_'))
        except (UnknownLocaleError, ValueError, TypeError, AttributeError) as e:
            raise ConfigurationError(
                f'Unknown culture {self.culture!r}') from e

    @property
    def valid(self) -> bool:
        try:
            self.check()
        except ConfigurationError:
            return False
        return True

    def check(self) -> None:
        """Raise `ConfigurationError` if any property is unusable."""
        if not self.encoding:
            raise ConfigurationError('Encoding must not be empty')
        try:
            codecs.lookup(self.encoding)
        except LookupError as e:
            raise ConfigurationError(
                f'Unknown encoding {self.encoding!r}') from e
        if self.culture is None:
            raise ConfigurationError('Culture must not be None')
        if not self.locale.language:
            raise ConfigurationError(f'Unknown culture {self.culture!r}')
        if not isinstance(self.compression, Compression):
            raise ConfigurationError(
                f'Unknown compression {self.compression!r}')
        if not self.date_format:
            raise ConfigurationError('Date format must not be empty')

    def with_culture(self, culture: Locale | str) -> 'IniProperties':
        return replace(self, culture=culture)


def compress(data: bytes, mode: Compression) -> bytes:
    match mode:
        case Compression.NONE:
            return data
        case Compression.DEFLATE:
            packer = zlib.compressobj(wbits=-zlib.MAX_WBITS)
            return packer.compress(data) + packer.flush()
        case Compression.GZIP:
            return gzip.compress(data)
        case _:
            raise ConfigurationError(f'Unknown compression {mode!r}')


def decompress(data: bytes, mode: Compression) -> bytes:
    match mode:
        case Compression.NONE:
            return data
        case Compression.DEFLATE:
            return zlib.decompress(data, wbits=-zlib.MAX_WBITS)
        case Compression.GZIP:
            return gzip.decompress(data)
        case _:
            raise ConfigurationError(f'Unknown compression {mode!r}')


def pack_payload(data: bytes, props: IniProperties) -> bytes:
    if props.cipher is not None:
        data = props.cipher.encrypt(data)
    return compress(data, props.compression)


def unpack_payload(data: bytes, props: IniProperties) -> bytes:
    if not data:
        return data
    data = decompress(data, props.compression)
    if props.cipher is not None:
        data = props.cipher.decrypt(data)
    return data
