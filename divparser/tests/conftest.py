"""
Shared fixtures: minimal single-page PDFs built in memory.
"""
import pytest
from pathlib import Path
from typing import Optional

from ..core.detectors import load_template


TO_UNICODE_AB = b"""/CIDInit /ProcSet findresource begin
12 dict begin
begincmap
/CMapName /Test-AB def
1 begincodespacerange
<00> <FF>
endcodespacerange
2 beginbfchar
<01> <0041>
<02> <0042>
endbfchar
endcmap
CMapName currentdict /CMap defineresource pop
end
end"""


def _stream(data: bytes) -> bytes:
    return b"<< /Length %d >>\nstream\n" % len(data) + data + b"\nendstream"


def build_pdf(content: bytes, to_unicode: Optional[bytes] = None) -> bytes:
    """
    Build a one-page PDF showing content with a Helvetica font named /F1.

    Args:
        content: Uncompressed page content stream
        to_unicode: Optional ToUnicode CMap for /F1

    Returns:
        PDF file bytes with a valid xref table
    """
    font = b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica /Encoding /WinAnsiEncoding"
    if to_unicode is not None:
        font += b" /ToUnicode 6 0 R"
    font += b" >>"

    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
        b"/Resources << /Font << /F1 5 0 R >> >> /Contents 4 0 R >>",
        _stream(content),
        font,
    ]
    if to_unicode is not None:
        objects.append(_stream(to_unicode))

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, 1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"

    xref_at = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (len(objects) + 1, xref_at)
    return bytes(out)


STATEMENT_CONTENT = b"""BT
/F1 10 Tf
72 740 Td
(Mrs Jane Citizen) Tj
0 -14 Td
(Example Holdings Limited) Tj
0 -14 Td
(ABN 12 345 678 901) Tj
0 -14 Td
(ASX Code: EXH) Tj
0 -14 Td
(Payment Date) Tj
0 -14 Td
(15 March 2020) Tj
0 -28 Td
(Franked Amount) Tj
200 0 Td
($36.00) Tj
-200 -14 Td
(Unfranked Amount) Tj
200 0 Td
($0.00) Tj
-200 -14 Td
[(Franking) -250 ( ) (Credit)] TJ
200 0 Td
($15.43) Tj
ET"""


@pytest.fixture
def make_pdf(tmp_path):
    """Factory writing a one-page PDF to a temporary file."""
    def _make(content: bytes, to_unicode: Optional[bytes] = None,
              name: str = "statement.pdf") -> Path:
        path = tmp_path / name
        path.write_bytes(build_pdf(content, to_unicode))
        return path
    return _make


@pytest.fixture
def statement_pdf(make_pdf):
    """A dividend statement with entity, code, date, amounts and a holder."""
    return make_pdf(STATEMENT_CONTENT)


@pytest.fixture
def template():
    """The packaged dividend statement template."""
    return load_template()
