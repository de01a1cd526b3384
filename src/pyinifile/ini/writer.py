# -*- encoding: utf-8 -*-
# @File   : writer.py
# @Time   : 2024/11/04 21:18:02
# @Author : Kariko Lin

import logging
from collections.abc import Iterable, Iterator
from os import PathLike
from pathlib import Path
from typing import TYPE_CHECKING

from ..errors import OperationError
from ..properties import pack_payload

if TYPE_CHECKING:
    from .model import IniDocument, IniItem

logger = logging.getLogger(__name__)


def _body(entries: 'Iterable[IniItem]') -> Iterator[str]:
    # at most one blank line in a row; none leading, none trailing.
    pending = started = False
    for item in entries:
        if item.is_blank:
            pending = started
            continue
        if pending:
            yield ''
            pending = False
        yield item.line
        started = True


def render_lines(doc: 'IniDocument') -> Iterator[str]:
    header = list(_body(doc.header.entries))
    yield from header
    if header and doc.sections:
        yield ''
    for section in doc.sections:
        yield f'[{section.name}]'
        yield from _body(section.entries)
        yield ''


def render(doc: 'IniDocument', newline: str = '\n') -> str:
    """Document -> text; one blank line closes every section."""
    lines = list(render_lines(doc))
    if not lines:
        return ''
    return newline.join(lines) + newline


def to_bytes(doc: 'IniDocument') -> bytes:
    """Encode, encrypt and compress as the document properties say."""
    props = doc.properties
    props.check()
    return pack_payload(render(doc).encode(props.encoding), props)


def save_document(
    doc: 'IniDocument', path: str | PathLike[str] | None = None
) -> None:
    """Write the whole document to `path` (default: where it came from).

    The payload is built before the file is opened, so a conversion
    failure leaves an existing file untouched.
    """
    if path is None:
        path = doc.filename
    if not path:
        raise OperationError(
            'No file name given and the document has none to fall back to')
    data = to_bytes(doc)
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, 'wb') as fp:
        fp.write(data)
    logger.debug('saved %d sections (%d bytes) to %s',
                 len(doc.sections), len(data), target)
