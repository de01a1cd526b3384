# -*- encoding: utf-8 -*-
# @File   : errors.py
# @Time   : 2024/11/02 20:41:07
# @Author : Kariko Lin

"""Exceptions raised by pyinifile.

Removal APIs report "not found" through their return value,
so there is no dedicated exception for it.
"""

from typing import Any


class IniError(Exception):
    """Base class of all errors raised by this package."""
    pass


class InvalidArgumentError(IniError, ValueError):
    """A section, key or value cannot be stored as given."""
    pass


class ConversionError(IniError, ValueError):
    """A string cannot be converted to (or from) the requested type."""

    def __init__(self, value: Any, to_type: Any, reason: str = '') -> None:
        self.value = value
        self.to_type = to_type
        name = getattr(to_type, '__name__', repr(to_type))
        msg = f'The value {value!r} cannot be converted to type {name}'
        super().__init__(f'{msg}: {reason}' if reason else msg)


class ConfigurationError(IniError):
    """Invalid `IniProperties`, e.g. unknown codec or compression."""
    pass


class OperationError(IniError):
    """The document cannot be reloaded or saved in its current state."""
    pass


class MappingError(IniError):
    """A record could not be completely read from a section."""

    def __init__(
        self, message: str, *,
        section: str | None = None, field: str | None = None
    ) -> None:
        self.section = section
        self.field = field
        super().__init__(message)
