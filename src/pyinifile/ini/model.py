# -*- encoding: utf-8 -*-
# @File   : model.py
# @Time   : 2024/11/04 00:57:10
# @Author : Kariko Lin

"""
In-memory INI structure.

A document is an ordered list of sections, each an ordered list of items.
Items keep their *raw* value text, so comments and quoting survive
a load/save cycle. Lookup by name always hits the first match; later
duplicates stay in storage but are shadowed.
"""

from collections.abc import Callable, Iterable, Iterator, MutableMapping
from dataclasses import dataclass
from os import PathLike
from typing import TYPE_CHECKING, Any

from ..codec import ValueCodec
from ..errors import InvalidArgumentError, OperationError
from ..properties import IniProperties
from . import text
from .writer import render, save_document, to_bytes

if TYPE_CHECKING:
    from .parser import IniParser


def _folder(case_sensitive: bool) -> Callable[[str], str]:
    return (lambda s: s) if case_sensitive else str.casefold


@dataclass
class IniItem:
    """`name=value`, or a bare line (comment, flag, blank) if value is None."""
    name: str
    value: str | None = None

    @classmethod
    def from_line(cls, line: str) -> 'IniItem':
        return cls(*text.split_setting(line))

    @property
    def is_comment(self) -> bool:
        return self.value is None and text.is_comment(self.name)

    @property
    def is_blank(self) -> bool:
        return self.value is None and text.is_blank(self.name)

    @property
    def is_setting(self) -> bool:
        return self.value is not None

    @property
    def is_stray_header(self) -> bool:
        """`[broken` and the like; readers stop scanning a section here."""
        return self.name.startswith('[')

    @property
    def decoded(self) -> str | None:
        return text.decode_value(self.value)

    @property
    def line(self) -> str:
        return self.name if self.value is None else f'{self.name}={self.value}'

    def __str__(self) -> str:
        return self.line


def check_key(key: Any) -> str:
    if key is None:
        raise InvalidArgumentError('Setting name must not be None')
    if not isinstance(key, str):
        raise InvalidArgumentError(f'Setting name must be str, not {key!r}')
    key = key.strip()
    if not key:
        raise InvalidArgumentError('Setting name must not be empty')
    if '=' in key:
        raise InvalidArgumentError(
            f'Name may not contain an equal sign: {key!r}')
    if key.startswith(text.COMMENT_MARKS) or key.startswith('['):
        raise InvalidArgumentError(
            f'Name would be read back as comment or header: {key!r}')
    if text.has_control(key):
        raise InvalidArgumentError(
            f'Name may not contain control characters: {key!r}')
    return key


def check_section_name(name: Any) -> str:
    if name is None:
        raise InvalidArgumentError('Section name must not be None')
    if not isinstance(name, str):
        raise InvalidArgumentError(f'Section name must be str, not {name!r}')
    if text.has_control(name):
        raise InvalidArgumentError(
            f'Section name may not contain control characters: {name!r}')
    return name.strip()


def check_raw_value(raw: str) -> str:
    if text.has_control(raw):
        raise InvalidArgumentError(
            f'Value may not contain control characters: {raw!r}')
    return raw.strip()


class IniSection(MutableMapping[str, str]):
    """Items of one INI section.

    As a mapping it exposes *settings* only (`key=value` lines), first
    match wins, values come back unboxed and comment-stripped.
    The full item list, comments included, is `self.entries`.
    """

    def __init__(
        self, name: str | None,
        entries: Iterable[IniItem] = (), *,
        case_sensitive: bool = False
    ) -> None:
        self.name = name
        self.entries: list[IniItem] = list(entries)
        self._fold = _folder(case_sensitive)

    @property
    def visible(self) -> int:
        """Count of leading items readers see.

        A stray `[` line (not a complete header) ends the section for
        reads; it and the items after it stay stored and are written back.
        """
        for i, item in enumerate(self.entries):
            if item.is_stray_header:
                return i
        return len(self.entries)

    def find(self, key: str, *, settings_only: bool = True) -> int:
        """Index of the first item named `key`, or -1."""
        folded = self._fold(key.strip())
        for i, item in enumerate(self.entries[:self.visible]):
            if settings_only and not item.is_setting:
                continue
            if item.is_comment or item.is_blank:
                continue
            if self._fold(item.name) == folded:
                return i
        return -1

    def _find_any(self, key: str) -> int:
        # settings first, so writes and removals hit what reads return
        i = self.find(key)
        return i if i > -1 else self.find(key, settings_only=False)

    def put_raw(self, key: str, raw: str) -> None:
        """Replace the first item named `key` in place, or append."""
        i = self._find_any(key)
        if i < 0:
            self.entries.insert(self.visible, IniItem(key, raw))
        else:
            self.entries[i] = IniItem(self.entries[i].name, raw)

    def remove(self, key: str) -> bool:
        i = self._find_any(key)
        if i < 0:
            return False
        del self.entries[i]
        return True

    def lines(self, strip_comments: bool = True) -> list[str]:
        return [
            item.line for item in self.entries[:self.visible]
            if not (strip_comments and (item.is_comment or item.is_blank))
        ]

    def trim_blank_tail(self) -> None:
        while self.entries and self.entries[-1].is_blank:
            self.entries.pop()

    def __getitem__(self, key: str) -> str:
        i = self.find(key)
        if i < 0:
            raise KeyError(key)
        return self.entries[i].decoded  # type: ignore[return-value]

    def __setitem__(self, key: str, value: str) -> None:
        self.put_raw(check_key(key), text.encode_value(value))

    def __delitem__(self, key: str) -> None:
        if not self.remove(key):
            raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.find(key) > -1

    def __iter__(self) -> Iterator[str]:
        seen: set[str] = set()
        for item in self.entries[:self.visible]:
            if not item.is_setting:
                continue
            folded = self._fold(item.name)
            if folded not in seen:
                seen.add(folded)
                yield item.name

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __str__(self) -> str:
        return f'[{self.name}]'

    def __repr__(self) -> str:
        return '[%s] { .cnt = %d }' % (self.name, len(self.entries))


class IniDocument(MutableMapping[str, IniSection]):
    """INI document (in memory).

    ```ini
    key = val  # before the first header, see `self.header`

    [section]
    key = value # trailing comment
    text = " quoted, keeps its spaces "
    ```

    Indexing by section name returns the `IniSection`; assigning a list of
    lines (or a section) replaces the section wholesale.
    """

    def __init__(
        self,
        properties: IniProperties | None = None,
        *,
        filename: str | PathLike[str] | None = None,
    ) -> None:
        self.__props = IniProperties() if properties is None else properties
        self.__props.check()
        self.codec = ValueCodec(
            self.__props.locale, self.__props.date_format)
        self.filename = None if filename is None else str(filename)
        # set by `IniParser` when the document came from a file.
        self.source: 'IniParser | None' = None
        self.__fold = _folder(self.__props.case_sensitive)
        self.__header = self._new_section(None)
        self.__sections: list[IniSection] = []
        self.__index: dict[str, int] = {}

    @property
    def properties(self) -> IniProperties:
        return self.__props

    @property
    def header(self) -> IniSection:
        """Items located before the first section header."""
        return self.__header

    @property
    def sections(self) -> tuple[IniSection, ...]:
        return tuple(self.__sections)

    def _new_section(
        self, name: str | None, entries: Iterable[IniItem] = ()
    ) -> IniSection:
        return IniSection(
            name, entries, case_sensitive=self.__props.case_sensitive)

    def reindex(self) -> None:
        """Rebuild the name -> position map; first occurrence wins."""
        index: dict[str, int] = {}
        for i, section in enumerate(self.__sections):
            index.setdefault(self.__fold(section.name), i)  # type: ignore
        self.__index = index

    def replace_content(
        self, header: Iterable[IniItem], sections: Iterable[IniSection]
    ) -> None:
        """Swap the whole content in one step (used by parsing, reload)."""
        new_header = self._new_section(None, header)
        new_sections = list(sections)
        self.__header, self.__sections = new_header, new_sections
        self.reindex()

    def _get(self, name: str | None) -> IniSection | None:
        if name is None:
            return self.__header
        i = self.__index.get(self.__fold(name.strip()))
        return None if i is None else self.__sections[i]

    def has_section(self, name: str) -> bool:
        return name is not None and self._get(name) is not None

    def section_names(self) -> list[str]:
        return [s.name for s in self.__sections]  # type: ignore[misc]

    def read_section(
        self, name: str | None, strip_comments: bool = True
    ) -> list[str]:
        """Raw lines of a section in file order ([] if absent).

        `None` addresses the lines before the first header.
        """
        section = self._get(name)
        return [] if section is None else section.lines(strip_comments)

    def read_setting(self, section: str | None, key: str) -> str | None:
        """Value of the first `key` in `section`.

        None if absent, '' if written as `key=`.
        """
        if key is None:
            raise InvalidArgumentError('Setting name must not be None')
        sect = self._get(section)
        if sect is None:
            return None
        i = sect.find(key)
        return None if i < 0 else sect.entries[i].decoded

    def write_section(self, name: str, lines: Iterable[Any] | str) -> None:
        """Create or replace (in place) a whole section."""
        name = check_section_name(name)
        if lines is None:
            raise InvalidArgumentError('Lines must not be None')
        if isinstance(lines, str):
            lines = lines.splitlines()
        entries = []
        for line in lines:
            if not isinstance(line, str):
                line = self.codec.encode(line) or ''
            if text.has_control(line):
                raise InvalidArgumentError(
                    f'Line may not contain control characters: {line!r}')
            if line.strip().startswith('['):
                raise InvalidArgumentError(
                    f'Line would end the section when read back: {line!r}')
            entries.append(IniItem.from_line(line))
        new_section = self._new_section(name, entries)
        i = self.__index.get(self.__fold(name))
        if i is None:
            self.__sections.append(new_section)
            self.__index[self.__fold(name)] = len(self.__sections) - 1
        else:
            new_section.name = self.__sections[i].name
            self.__sections[i] = new_section

    def write_setting(
        self, section: str, key: str, value: Any, *, raw: bool = False
    ) -> None:
        """Replace the first `key` in place, or append it.

        Non-str values are encoded by `self.codec`; None removes the key.
        With `raw=True` the value is stored verbatim (already escaped).
        """
        section = check_section_name(section)
        key = check_key(key)
        if value is None:
            self.remove_setting(section, key)
            return
        if not isinstance(value, str):
            value = self.codec.encode(value)
        stored = check_raw_value(value) if raw else text.encode_value(value)
        sect = self._get(section)
        if sect is None:
            sect = self._new_section(section)
            self.__sections.append(sect)
            self.__index[self.__fold(section)] = len(self.__sections) - 1
        sect.put_raw(key, stored)

    def remove_setting(self, section: str, key: str) -> bool:
        key = check_key(key)
        sect = self._get(check_section_name(section))
        return sect is not None and sect.remove(key)

    def remove_section(self, name: str, *, missing_ok: bool = True) -> bool:
        sect = self._get(check_section_name(name))
        if sect is None:
            if missing_ok:
                return False
            raise KeyError(name)
        self.__sections.remove(sect)
        self.reindex()
        return True

    def clear(self) -> None:
        self.replace_content((), ())

    @property
    def can_reload(self) -> bool:
        return self.source is not None and self.source.can_reload

    def reload(self) -> None:
        if self.source is None:
            raise OperationError(
                'Cannot reload: document was not loaded from a file')
        self.source.reload(self)

    def save(self, path: str | PathLike[str] | None = None) -> None:
        save_document(self, path)

    def to_bytes(self) -> bytes:
        return to_bytes(self)

    def to_string(self) -> str:
        return render(self)

    def __getitem__(self, name: str) -> IniSection:
        sect = self._get(name) if name is not None else None
        if sect is None:
            raise KeyError(name)
        return sect

    def __setitem__(
        self, name: str, value: IniSection | Iterable[Any] | str
    ) -> None:
        if isinstance(value, IniSection):
            value = [item.line for item in value.entries]
        self.write_section(name, value)

    def __delitem__(self, name: str) -> None:
        self.remove_section(name, missing_ok=False)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has_section(name)

    def __iter__(self) -> Iterator[str]:
        return iter(self.section_names())

    def __len__(self) -> int:
        return len(self.__sections)

    def __str__(self) -> str:
        return render(self)

    def __repr__(self) -> str:
        return f'<IniDocument {self.filename or "<memory>"}: ' \
            f'{len(self.__sections)} sections>'
