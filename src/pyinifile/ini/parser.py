# -*- encoding: utf-8 -*-
# @File   : parser.py
# @Time   : 2024/11/04 01:04:45
# @Author : Kariko Lin

"""Loading INI documents from text, bytes, streams and files.

Raw bytes go through the transforms described by `IniProperties`
(decompress, then decrypt) before being decoded. If the configured
encoding does not fit, `chardet` gets a try, like for hand-edited files
saved in some legacy code page.
"""

import logging
from collections.abc import Iterable
from io import IOBase, TextIOBase
from os import PathLike
from os.path import isfile
from re import compile as regex
from typing import IO

import chardet

from ..abstract import FileHandler
from ..errors import OperationError
from ..properties import IniProperties, unpack_payload
from . import text
from .model import IniDocument, IniItem, IniSection
from .writer import save_document

logger = logging.getLogger(__name__)

_NEWLINE = regex(r'\r\n|\r|\n')


def split_lines(content: str) -> list[str]:
    if content.startswith('\ufeff'):
        content = content[1:]
    if not content:
        return []
    lines = _NEWLINE.split(content)
    if lines[-1] == '':
        lines.pop()
    return lines


def tokenize_line(line: str) -> IniItem:
    """`' key = v '` -> `IniItem('key', 'v')`; comments stay bare."""
    return IniItem.from_line(line)


def load_lines(doc: IniDocument, lines: Iterable[str]) -> IniDocument:
    """Tokenize `lines` and replace the content of `doc` with them.

    Lines of a repeated `[header]` are appended to the first section of
    that name. Blank lines closing a section are dropped, the writer puts
    its own separator back.
    """
    fold = (lambda s: s) if doc.properties.case_sensitive else str.casefold
    header = doc._new_section(None)
    sections: list[IniSection] = []
    by_name: dict[str, IniSection] = {}
    current = header
    for line in lines:
        name = text.header_name(line)
        if name is None:
            current.entries.append(tokenize_line(line))
            continue
        current.trim_blank_tail()
        if fold(name) in by_name:
            logger.debug('merging duplicate section [%s]', name)
            current = by_name[fold(name)]
        else:
            current = doc._new_section(name)
            by_name[fold(name)] = current
            sections.append(current)
    current.trim_blank_tail()
    doc.replace_content(header.entries, sections)
    return doc


class IniParser(FileHandler[IniDocument]):
    def __init__(
        self,
        filename: str | PathLike[str] | None,
        properties: IniProperties | None = None,
    ) -> None:
        super().__init__(filename)
        self._props = IniProperties() if properties is None else properties

    @property
    def properties(self) -> IniProperties:
        return self._props

    @property
    def can_reload(self) -> bool:
        if not self._fn or '\0' in self._fn:
            return False
        try:
            return isfile(self._fn)
        except (OSError, ValueError):
            return False

    def decode(self, data: bytes) -> str:
        """Undo the byte transforms and decode to text."""
        self._props.check()
        data = unpack_payload(data, self._props)
        try:
            return data.decode(self._props.encoding)
        except UnicodeDecodeError:
            guess = chardet.detect(data)
            if not guess or not guess['encoding'] \
                    or guess['confidence'] < 0.8:
                raise
            logger.warning(
                '%s is not valid %s, decoding as %s (confidence %.2f)',
                self, self._props.encoding,
                guess['encoding'], guess['confidence'])
            return data.decode(guess['encoding'])

    def _new_document(self) -> IniDocument:
        doc = IniDocument(self._props, filename=self._fn)
        doc.source = self
        return doc

    def readstream(
        self, buf: TextIOBase | IO[str], ins: IniDocument | None = None
    ) -> IniDocument:
        """读取解码好的字符串流。"""
        if ins is None:
            ins = self._new_document()
        return load_lines(ins, split_lines(buf.read()))

    def readbytes(
        self, data: bytes, ins: IniDocument | None = None
    ) -> IniDocument:
        if ins is None:
            ins = self._new_document()
        return load_lines(ins, split_lines(self.decode(data)))

    def read(self) -> IniDocument:
        """Read the file; a missing file gives an empty document."""
        if not self.can_reload:
            logger.debug('%s does not exist, starting empty', self)
            return self._new_document()
        with open(self._fn, 'rb') as fp:  # type: ignore[arg-type]
            return self.readbytes(fp.read())

    def reload(self, ins: IniDocument) -> None:
        if not self.can_reload:
            raise OperationError(f'Cannot reload {self}: no such file')
        with open(self._fn, 'rb') as fp:  # type: ignore[arg-type]
            self.readbytes(fp.read(), ins)
        logger.debug('reloaded %s', self)

    def write(self, instance: IniDocument) -> None:
        save_document(instance, self._fn)

    def __str__(self) -> str:
        return "INI file: " + super().__str__() + f" ({self._props.encoding})"


def parse_lines(
    lines: Iterable[str],
    properties: IniProperties | None = None,
    name: str | None = None,
) -> IniDocument:
    return load_lines(IniDocument(properties, filename=name), lines)


def parse_text(
    content: str,
    properties: IniProperties | None = None,
    name: str | None = None,
) -> IniDocument:
    return parse_lines(split_lines(content), properties, name)


def parse_bytes(
    data: bytes,
    properties: IniProperties | None = None,
    name: str | None = None,
) -> IniDocument:
    handler = IniParser(name, properties)
    doc = handler.readbytes(data)
    doc.source = None
    return doc


def from_stream(
    stream: IOBase | IO[bytes] | IO[str],
    properties: IniProperties | None = None,
    name: str | None = None,
    count: int = -1,
) -> IniDocument:
    """Read `count` bytes (or characters, for text streams) and parse them."""
    data = stream.read(count)
    if isinstance(data, str):
        return parse_text(data, properties, name)
    return parse_bytes(data, properties, name)


def from_file(
    path: str | PathLike[str],
    properties: IniProperties | None = None,
) -> IniDocument:
    return IniParser(path, properties).read()
