import logging
from pathlib import Path
from unittest.mock import patch

from docx import Document as DocxDocument

from marginalia.readers.registry import (
    _check_mime,
    list_supported_files,
    read_document,
)

# --- list_supported_files ---


def test_list_supported_single_file(tmp_path: Path):
    txt = tmp_path / "doc.txt"
    txt.write_text("hello", encoding="utf-8")
    assert list_supported_files(txt) == [txt]


def test_list_supported_single_unknown_extension(tmp_path: Path):
    xyz = tmp_path / "data.xyz"
    xyz.write_text("??", encoding="utf-8")
    assert list_supported_files(xyz) == []


def test_list_supported_directory(tmp_path: Path):
    (tmp_path / "a.txt").write_text("a", encoding="utf-8")
    (tmp_path / "b.rtf").write_text("b", encoding="utf-8")
    (tmp_path / "c.xyz").write_text("c", encoding="utf-8")
    (tmp_path / "d.doc").write_text("d", encoding="utf-8")

    names = [f.name for f in list_supported_files(tmp_path)]
    assert names == ["a.txt", "b.rtf", "d.doc"]


# --- read_document ---


def test_read_document_unknown_extension(tmp_path: Path):
    xyz = tmp_path / "data.xyz"
    xyz.write_text("hello", encoding="utf-8")
    assert read_document(xyz) is None


def test_read_document_txt(tmp_path: Path):
    txt = tmp_path / "hello.txt"
    txt.write_text("Annual report 2023", encoding="utf-8")
    content = read_document(txt)
    assert content is not None
    assert content.raw_text == "Annual report 2023"
    assert content.mimetype == "text/plain"


def test_read_document_txt_latin1(tmp_path: Path, caplog):
    txt = tmp_path / "latin.txt"
    txt.write_bytes("caf\xe9".encode("latin-1"))
    with caplog.at_level(logging.WARNING):
        content = read_document(txt)
    assert content.raw_text == "caf\xe9"
    assert "falling back to latin-1" in caplog.text


def test_read_document_rtf_basic_extraction(tmp_path: Path, caplog):
    rtf = tmp_path / "memo.rtf"
    rtf.write_bytes(b"{\\rtf1 Grant memo\x00\x01}")
    with caplog.at_level(logging.WARNING):
        content = read_document(rtf)
    assert content.mimetype == "application/rtf"
    assert "Grant memo" in content.raw_text
    assert "\x00" not in content.raw_text
    assert "basic printable-text extraction" in caplog.text


def test_read_document_doc(tmp_path: Path):
    doc = tmp_path / "legacy.doc"
    doc.write_bytes(b"\xd0\xcfLegacy words")
    content = read_document(doc)
    assert content.mimetype == "application/msword"
    assert "Legacy words" in content.raw_text


def test_read_document_docx(tmp_path: Path):
    path = tmp_path / "report.docx"
    docx = DocxDocument()
    docx.add_paragraph("Health program report")
    docx.add_paragraph("Second paragraph")
    table = docx.add_table(rows=1, cols=1)
    table.cell(0, 0).text = "Budget cell"
    docx.save(str(path))

    content = read_document(path)
    assert "Health program report\nSecond paragraph\n" in content.raw_text
    assert content.raw_text.endswith("Budget cell\n")
    assert content.page_count == 0


def test_read_document_pdf(sample_pdf: Path):
    content = read_document(sample_pdf)
    assert content.mimetype == "application/pdf"
    assert content.page_count == 3
    assert len(content.parts) == 3
    assert "Second page" in content.parts[1]
    assert "Second page" in content.raw_text


# --- _check_mime ---


@patch("marginalia.readers.registry._HAS_MAGIC", False)
def test_check_mime_no_magic(tmp_path: Path):
    txt = tmp_path / "test.txt"
    txt.write_text("hello", encoding="utf-8")
    _check_mime(txt, ".txt")


@patch("marginalia.readers.registry._HAS_MAGIC", True)
@patch("marginalia.readers.registry.magic", create=True)
def test_check_mime_matching(mock_magic, tmp_path: Path, caplog):
    mock_magic.from_file.return_value = "text/plain"
    txt = tmp_path / "test.txt"
    txt.write_text("hello", encoding="utf-8")
    with caplog.at_level(logging.WARNING):
        _check_mime(txt, ".txt")
    assert caplog.text == ""


@patch("marginalia.readers.registry._HAS_MAGIC", True)
@patch("marginalia.readers.registry.magic", create=True)
def test_check_mime_mismatch_warns(mock_magic, tmp_path: Path, caplog):
    mock_magic.from_file.return_value = "application/pdf"
    txt = tmp_path / "fake.txt"
    txt.write_text("not really text", encoding="utf-8")

    with caplog.at_level(logging.WARNING):
        _check_mime(txt, ".txt")

    assert "may be misnamed or corrupted" in caplog.text


@patch("marginalia.readers.registry._HAS_MAGIC", True)
@patch("marginalia.readers.registry.magic", create=True)
def test_check_mime_exception_handled(mock_magic, tmp_path: Path):
    mock_magic.from_file.side_effect = OSError("magic failed")
    txt = tmp_path / "test.txt"
    txt.write_text("hello", encoding="utf-8")
    _check_mime(txt, ".txt")


def test_check_mime_unknown_extension(tmp_path: Path):
    xyz = tmp_path / "data.xyz"
    xyz.write_text("hello", encoding="utf-8")
    _check_mime(xyz, ".xyz")


def test_read_document_txt_normalizes_newlines(tmp_path: Path):
    txt = tmp_path / "crlf.txt"
    txt.write_bytes(b"line one\r\nline two\rline three")
    assert read_document(txt).raw_text == "line one\nline two\nline three"
