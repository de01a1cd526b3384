# -*- encoding: utf-8 -*-
# @File   : __init__.py
# @Time   : 2024/11/02 20:20:11
# @Author : Kariko Lin

import logging

from .codec import ValueCodec
from .errors import (
    ConfigurationError,
    ConversionError,
    IniError,
    InvalidArgumentError,
    MappingError,
    OperationError,
)
from .ini import (
    IniDocument,
    IniItem,
    IniParser,
    IniSection,
    from_file,
    from_stream,
    parse_bytes,
    parse_lines,
    parse_text,
)
from .mapping import (
    FieldSpec,
    RecordResult,
    Schema,
    Scope,
    read_enums,
    read_record,
    read_value,
    write_record,
)
from .properties import Cipher, Compression, IniProperties

__all__ = [
    'ValueCodec',
    'IniError', 'InvalidArgumentError', 'ConversionError',
    'ConfigurationError', 'OperationError', 'MappingError',
    'IniDocument', 'IniItem', 'IniSection', 'IniParser',
    'from_file', 'from_stream', 'parse_bytes', 'parse_lines', 'parse_text',
    'FieldSpec', 'RecordResult', 'Schema', 'Scope',
    'read_enums', 'read_record', 'read_value', 'write_record',
    'Cipher', 'Compression', 'IniProperties',
]

# the application decides where records go.
logging.getLogger(__name__).addHandler(logging.NullHandler())
