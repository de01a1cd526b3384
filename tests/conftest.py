"""
Pytest configuration and fixtures.
"""

from pathlib import Path

import pytest

from pyinifile import IniDocument, parse_text

SAMPLE = """\
; global comment
version=3

[General]
# leading comment
Name = Demo App
Title = "  padded  "
Port = 8080 # trailing comment
Empty=
FLAG

[Paths]
Root = /srv/app
"""


class XorCipher:
    """Stand-in for a real symmetric cipher."""

    def __init__(self, key: int = 0x5A) -> None:
        self.key = key

    def encrypt(self, data: bytes) -> bytes:
        return bytes(b ^ self.key for b in data)

    def decrypt(self, data: bytes) -> bytes:
        return bytes(b ^ self.key for b in data)


@pytest.fixture
def sample_text() -> str:
    return SAMPLE


@pytest.fixture
def sample_doc(sample_text: str) -> IniDocument:
    return parse_text(sample_text)


@pytest.fixture
def ini_path(tmp_path: Path) -> Path:
    """Not yet existing file in a not yet existing directory."""
    return tmp_path / "conf" / "app.ini"


@pytest.fixture
def xor_cipher() -> XorCipher:
    return XorCipher()
