"""
Tests for in-memory document editing.
"""

import pytest

from pyinifile import IniDocument, IniProperties, parse_text
from pyinifile.errors import ConfigurationError, InvalidArgumentError


def test_read_setting(sample_doc: IniDocument) -> None:
    assert sample_doc.read_setting("General", "Name") == "Demo App"
    assert sample_doc.read_setting("General", "Title") == "  padded  "
    assert sample_doc.read_setting("General", "Port") == "8080"
    assert sample_doc.read_setting("Paths", "Root") == "/srv/app"


def test_absent_vs_empty(sample_doc: IniDocument) -> None:
    assert sample_doc.read_setting("General", "Empty") == ""
    assert sample_doc.read_setting("General", "Missing") is None
    assert sample_doc.read_setting("Nowhere", "Name") is None
    # bare tokens carry no value
    assert sample_doc.read_setting("General", "FLAG") is None


def test_header_section(sample_doc: IniDocument) -> None:
    assert sample_doc.read_setting(None, "version") == "3"
    assert sample_doc.read_section(None) == ["version=3"]
    assert sample_doc.read_section(None, strip_comments=False) == [
        "; global comment", "version=3"]


def test_sections(sample_doc: IniDocument) -> None:
    assert sample_doc.section_names() == ["General", "Paths"]
    assert sample_doc.has_section("general")
    assert not sample_doc.has_section("Missing")
    assert "Paths" in sample_doc
    assert list(sample_doc) == ["General", "Paths"]
    assert len(sample_doc) == 2


def test_read_section_keeps_raw_lines(sample_doc: IniDocument) -> None:
    assert sample_doc.read_section("General") == [
        "Name=Demo App",
        'Title="  padded  "',
        "Port=8080 # trailing comment",
        "Empty=",
        "FLAG",
    ]
    assert sample_doc.read_section("Missing") == []


def test_comment_filtering() -> None:
    doc = IniDocument()
    doc.write_section("S", ["; note", "a=1"])
    assert doc.read_section("S", strip_comments=True) == ["a=1"]
    assert doc.read_section("S", strip_comments=False) == ["; note", "a=1"]


def test_write_is_idempotent() -> None:
    doc = IniDocument()
    doc.write_setting("S", "K", "a")
    doc.write_setting("S", "K", "b")
    assert [i.name for i in doc["S"].entries].count("K") == 1
    assert doc.read_setting("S", "K") == "b"


def test_write_replaces_in_place() -> None:
    doc = parse_text("[S]\na=1\nb=2\nc=3\n")
    doc.write_setting("S", "B", "x")
    assert doc.read_section("S") == ["a=1", "b=x", "c=3"]
    doc.write_setting("S", "d", "4")
    assert doc.read_section("S") == ["a=1", "b=x", "c=3", "d=4"]


def test_write_creates_section() -> None:
    doc = IniDocument()
    doc.write_setting("New", "k", "v")
    assert doc.section_names() == ["New"]


def test_quoting_fidelity() -> None:
    doc = IniDocument()
    doc.write_setting("S", "K", " a ")
    assert doc.read_setting("S", "K") == " a "
    doc.write_setting("S", "K", "x # not a comment")
    assert doc.read_setting("S", "K") == "x # not a comment"
    doc.write_setting("S", "K", "two\nlines")
    assert doc.read_setting("S", "K") == "two\nlines"
    assert doc.read_section("S") == ['K="two[10]lines"']


def test_raw_write() -> None:
    doc = IniDocument()
    doc.write_setting("S", "K", '"kept[9]"', raw=True)
    assert doc.read_setting("S", "K") == "kept\t"


def test_write_none_removes() -> None:
    doc = parse_text("[S]\na=1\nb=2\n")
    doc.write_setting("S", "a", None)
    assert doc.read_section("S") == ["b=2"]


def test_non_str_values_use_codec() -> None:
    doc = IniDocument()
    doc.write_setting("S", "ratio", 1.5)
    doc.write_setting("S", "on", True)
    assert doc.read_setting("S", "ratio") == "1.5"
    assert doc.read_setting("S", "on") == "True"
    de = IniDocument(IniProperties(culture="de"))
    de.write_setting("S", "ratio", 1.5)
    assert de.read_setting("S", "ratio") == "1,5"


def test_duplicate_keys_first_wins() -> None:
    doc = parse_text("[S]\nk=1\nk=2\n")
    assert doc.read_setting("S", "k") == "1"
    assert doc["S"]["k"] == "1"
    assert list(doc["S"]) == ["k"]
    assert doc.remove_setting("S", "k")
    assert doc.read_setting("S", "k") == "2"


def test_remove_setting_reports_not_found() -> None:
    doc = parse_text("[S]\na=1\n")
    assert not doc.remove_setting("S", "zzz")
    assert not doc.remove_setting("T", "a")


def test_remove_section() -> None:
    doc = parse_text("[A]\n[B]\nx=1\n[C]\n")
    assert doc.remove_section("b")
    assert doc.section_names() == ["A", "C"]
    assert not doc.has_section("B")
    assert doc.has_section("C")
    assert not doc.remove_section("B")
    with pytest.raises(KeyError):
        doc.remove_section("B", missing_ok=False)
    with pytest.raises(KeyError):
        del doc["B"]


def test_write_section_replaces_wholesale() -> None:
    doc = parse_text("[A]\nx=1\ny=2\n[B]\nz=3\n")
    doc.write_section("a", ["only=1", "FLAG"])
    assert doc.section_names() == ["A", "B"]
    assert doc.read_section("A") == ["only=1", "FLAG"]
    doc["C"] = "p = 1\nq = 2"
    assert doc.read_section("C") == ["p=1", "q=2"]


def test_write_section_rejects_headers() -> None:
    doc = IniDocument()
    with pytest.raises(InvalidArgumentError):
        doc.write_section("A", ["[B]"])
    with pytest.raises(InvalidArgumentError):
        doc.write_section("A", ["ok=1", " [half"])
    assert not doc.has_section("A")


@pytest.mark.parametrize("key", [None, "", "a=b", "; c", "[x]", "a\nb"])
def test_invalid_keys(key: object) -> None:
    doc = IniDocument()
    with pytest.raises(InvalidArgumentError):
        doc.write_setting("S", key, "v")  # type: ignore[arg-type]
    assert len(doc) == 0


def test_invalid_section_and_raw_value() -> None:
    doc = IniDocument()
    with pytest.raises(InvalidArgumentError):
        doc.write_setting(None, "k", "v")  # type: ignore[arg-type]
    with pytest.raises(InvalidArgumentError):
        doc.write_setting("S", "k", "a\x01b", raw=True)
    assert len(doc) == 0


def test_case_insensitive_lookup() -> None:
    doc = parse_text("[S]\nkey=v\n")
    assert doc.read_setting("S", "Key") == "v"
    assert doc.read_setting("s", "KEY") == "v"


def test_case_sensitive_lookup() -> None:
    doc = parse_text("[S]\nkey=v\n", IniProperties(case_sensitive=True))
    assert doc.read_setting("S", "Key") is None
    assert doc.read_setting("s", "key") is None
    assert doc.read_setting("S", "key") == "v"


def test_section_mapping_view(sample_doc: IniDocument) -> None:
    general = sample_doc["General"]
    assert dict(general) == {
        "Name": "Demo App",
        "Title": "  padded  ",
        "Port": "8080",
        "Empty": "",
    }
    general["Port"] = "9090"
    assert sample_doc.read_section("General")[2] == "Port=9090"
    del general["Empty"]
    assert "Empty" not in general


def test_clear_and_reindex(sample_doc: IniDocument) -> None:
    sample_doc.clear()
    assert len(sample_doc) == 0
    assert sample_doc.read_section(None) == []
    sample_doc.write_setting("X", "a", "1")
    sample_doc.reindex()
    assert sample_doc.read_setting("x", "a") == "1"


def test_invalid_properties() -> None:
    with pytest.raises(ConfigurationError):
        IniDocument(IniProperties(encoding="no-such-codec"))
    with pytest.raises(ConfigurationError):
        IniDocument(IniProperties(compression="zip"))  # type: ignore[arg-type]
    with pytest.raises(ConfigurationError):
        IniDocument(IniProperties(culture="xx_QQ"))
    assert IniProperties(compression="GZIP").valid  # type: ignore[arg-type]


def test_remove_targets_the_readable_setting() -> None:
    doc = parse_text("[S]\nName\nName=x\n")
    assert doc.remove_setting("S", "Name")
    assert doc.read_setting("S", "Name") is None
    assert doc.read_section("S") == ["Name"]
    assert doc.remove_setting("S", "Name")
    assert not doc.remove_setting("S", "Name")


def test_write_targets_the_readable_setting() -> None:
    doc = parse_text("[S]\nName\nName=x\n")
    doc.write_setting("S", "Name", "y")
    assert doc.read_section("S") == ["Name", "Name=y"]
    doc = parse_text("[S]\nFLAG\nk=v\n")
    doc.write_setting("S", "flag", "1")
    assert doc.read_section("S") == ["FLAG=1", "k=v"]
