"""Shared fixtures: synthetic uploads built in memory."""

import io
import zipfile
from typing import Dict

import pytest

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00\x00\x00\rIHDR" + b"\x00" * 32
JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00" + b"\x00" * 32
PDF_BYTES = b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n1 0 obj\n<<>>\nendobj\n"
EXE_BYTES = b"MZ\x90\x00\x03\x00\x00\x00\x04\x00\x00\x00\xff\xff\x00\x00" + b"\x00" * 48
ELF_BYTES = b"\x7fELF\x02\x01\x01\x00" + b"\x00" * 48


def build_zip(entries: Dict[str, bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, data in entries.items():
            zf.writestr(name, data)
    return buffer.getvalue()


def build_docx(extra: Dict[str, bytes] = None) -> bytes:
    entries = {
        "[Content_Types].xml": b'<?xml version="1.0"?><Types/>',
        "_rels/.rels": b'<?xml version="1.0"?><Relationships/>',
        "word/document.xml": b'<?xml version="1.0"?><w:document/>',
    }
    entries.update(extra or {})
    return build_zip(entries)


@pytest.fixture
def png_bytes():
    return PNG_BYTES


@pytest.fixture
def exe_bytes():
    return EXE_BYTES


@pytest.fixture
def make_zip():
    return build_zip


@pytest.fixture
def make_docx():
    return build_docx


@pytest.fixture
def jpeg_bytes():
    return JPEG_BYTES


@pytest.fixture
def pdf_bytes():
    return PDF_BYTES


@pytest.fixture
def elf_bytes():
    return ELF_BYTES
