import pytest

from mend.utils.text import Document, detect_eol, join_document, split_document


@pytest.mark.parametrize("content, eol, trailing", [
    ("a\nb\n", "\n", True),
    ("a\r\nb\r\n", "\r\n", True),
    ("a\rb", "\r", False),
    ("a\nb", "\n", False),
])
def test_split_join_round_trip(content, eol, trailing):
    doc = split_document(content)
    assert doc.lines == ["a", "b"]
    assert doc.eol == eol
    assert doc.trailing_newline is trailing
    assert join_document(doc) == content


def test_empty_document():
    doc = split_document("")
    assert doc == Document(lines=[], eol="\n", trailing_newline=True)
    assert join_document(doc) == ""


def test_blank_lines_survive():
    doc = split_document("a\n\n\nb\n")
    assert doc.lines == ["a", "", "", "b"]
    assert join_document(doc) == "a\n\n\nb\n"


def test_form_feed_is_not_a_line_break():
    assert split_document("a\x0cb\n").lines == ["a\x0cb"]


def test_mixed_endings_prefer_crlf():
    assert detect_eol("a\nb\r\nc\n") == "\r\n"
    assert join_document(split_document("a\nb\r\n")) == "a\r\nb\r\n"
