# -*- encoding: utf-8 -*-
# @File   : text.py
# @Time   : 2024/11/03 22:37:15
# @Author : Kariko Lin

"""Line level grammar shared by the parser and the document model.

```ini
[section]            ; header
key = value          ; setting
key = value # note   ; unquoted `#` starts a trailing comment
key = " padded "     ; quoted (boxed) value, taken as is
FLAG                 ; bare token, no value
# comment            ; `#` or `;` as first non-blank character
```

Boxed values are wrapped in `"`; characters below 0x20, DEL and `[`
itself are written as `[<decimal code>]`, e.g. a newline is `[10]`.
"""

from re import compile as regex

COMMENT_MARKS = ('#', ';')
QUOTE_MARKS = ('"', "'")
BOX_QUOTE = '"'

_ESCAPE_TOKEN = regex(r'\[(\d{1,7})\]')


def is_control(ch: str) -> bool:
    # U+0085/2028/2029 are line breaks to `str.splitlines()`.
    return ch < ' ' or ch in '\x7f\x85\u2028\u2029'


def has_control(text: str) -> bool:
    return any(is_control(ch) for ch in text)


def is_comment(line: str) -> bool:
    return line.lstrip().startswith(COMMENT_MARKS)


def is_blank(line: str) -> bool:
    return not line.strip()


def header_name(line: str) -> str | None:
    """`' [ Main ] '` -> `'Main'`; anything that is not a header -> None."""
    line = line.strip()
    if len(line) >= 2 and line[0] == '[' and line[-1] == ']':
        return line[1:-1].strip()
    return None


def split_setting(line: str) -> tuple[str, str | None]:
    """Tokenize one non-header line into `(name, raw value)`.

    Comments, blank lines and bare tokens have no value (`None`).
    The raw value is trimmed, but neither unboxed nor comment-stripped.
    """
    line = line.strip()
    if not line or line.startswith(COMMENT_MARKS):
        return line, None
    key, sep, val = line.partition('=')
    if not sep:
        return line, None
    return key.strip(), val.strip()


def needs_box(value: str) -> bool:
    if not value:
        return False
    return (
        '#' in value
        or value != value.strip()
        or value[0] in QUOTE_MARKS
        or has_control(value)
    )


def box_text(value: str) -> str:
    """Quote `value` so that `unbox_text` returns it unchanged."""
    escaped = ''.join(
        f'[{ord(ch)}]' if ch == '[' or is_control(ch) else ch
        for ch in value)
    return f'{BOX_QUOTE}{escaped}{BOX_QUOTE}'


def unbox_text(raw: str) -> str:
    """Strip the outer quotes of `raw` and decode its escape tokens.

    A trailing `# comment` after the closing quote is allowed.
    Returns `raw` unchanged if it is not a complete quoted literal.
    """
    if len(raw) < 2 or raw[0] not in QUOTE_MARKS:
        return raw
    quote = raw[0]
    end = raw.rfind(quote)
    if end == 0:
        return raw
    rest = raw[end + 1:].strip()
    if rest and not rest.startswith('#'):
        return raw
    return _ESCAPE_TOKEN.sub(
        lambda m: chr(int(m[1])) if int(m[1]) <= 0x10FFFF else m[0],
        raw[1:end])


def decode_value(raw: str | None) -> str | None:
    """Raw stored value -> the value a reader sees."""
    if raw is None:
        return None
    raw = raw.strip()
    if not raw:
        return ''
    if raw[0] in QUOTE_MARKS:
        return unbox_text(raw)
    comment = raw.find('#')
    if comment > -1:
        raw = raw[:comment].strip()
    return raw


def encode_value(value: str) -> str:
    """Value -> raw text to be stored after `=`."""
    return box_text(value) if needs_box(value) else value
