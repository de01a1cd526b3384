# -*- encoding: utf-8 -*-
# @File   : __init__.py
# @Time   : 2024/11/03 22:30:08
# @Author : Kariko Lin

from .model import IniDocument, IniItem, IniSection
from .parser import (
    IniParser,
    from_file,
    from_stream,
    parse_bytes,
    parse_lines,
    parse_text,
    tokenize_line,
)
from .text import box_text, unbox_text
from .writer import render

__all__ = [
    'IniDocument', 'IniItem', 'IniSection', 'IniParser',
    'from_file', 'from_stream', 'parse_bytes', 'parse_lines', 'parse_text',
    'tokenize_line', 'box_text', 'unbox_text', 'render',
]
