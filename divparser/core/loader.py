"""
PDF loading: page content streams and font character maps via pdfplumber.
"""
import pdfplumber
from pathlib import Path
from typing import List, Dict, Optional, Union, BinaryIO, Protocol
import logging

from pdfminer.pdffont import PDFUnicodeNotDefined
from pdfminer.pdfinterp import PDFResourceManager
from pdfminer.pdftypes import PDFObjRef, PDFStream, resolve1

logger = logging.getLogger(__name__)


class CharMap(Protocol):
    """Maps the raw bytes of a shown string to Unicode text."""
    def decode(self, data: bytes) -> str:
        ...


class IdentityCharMap:
    """Fallback mapper: every byte is the code point of the same value."""
    def decode(self, data: bytes) -> str:
        return data.decode('latin-1')

    def __repr__(self):
        return "IdentityCharMap()"


class FontCharMap:
    """Decodes through a pdfminer font built lazily from its font dictionary."""
    def __init__(self, rsrcmgr: PDFResourceManager, name: str,
                 spec: Dict, objid: Optional[int] = None):
        self.rsrcmgr = rsrcmgr
        self.name = name
        self.spec = spec
        self.objid = objid
        self._font = None

    @property
    def font(self):
        if self._font is None:
            self._font = self.rsrcmgr.get_font(self.objid, self.spec)
            logger.debug(f"Resolved font {self.name}: {self._font}")
        return self._font

    def decode(self, data: bytes) -> str:
        """
        Decode a shown string to text.

        Args:
            data: Raw string operand bytes

        Returns:
            Unicode text; unmapped single-byte codes decode as themselves
        """
        font = self.font
        chars = []
        for cid in font.decode(data):
            try:
                chars.append(font.to_unichr(cid))
            except PDFUnicodeNotDefined:
                chars.append(chr(cid) if cid < 256 else '\ufffd')
        return ''.join(chars)

    def __repr__(self):
        return f"FontCharMap('{self.name}')"


class PageContent:
    """Represents a page's decoded content stream and its fonts."""
    def __init__(self, page_num: int, content: bytes, fonts: Dict[str, CharMap]):
        self.page_num = page_num
        self.content = content
        self.fonts = fonts

    def __repr__(self):
        return (f"PageContent(page_num={self.page_num}, {len(self.content)} bytes, "
                f"fonts={sorted(self.fonts)})")


class PDFLoader:
    """Handles PDF loading and content stream extraction."""

    def __init__(self, pdf_path: Union[Path, str, BinaryIO]):
        self.pdf_path = pdf_path
        self._pdf = None
        self._pages = []
        self._rsrcmgr = PDFResourceManager(caching=True)

    def load(self) -> List[PageContent]:
        """Load PDF and collect content and fonts from all pages."""
        if self._pages:
            return self._pages

        try:
            self._pdf = pdfplumber.open(self.pdf_path)
            logger.info(f"Loaded PDF with {len(self._pdf.pages)} pages")

            for i, page in enumerate(self._pdf.pages, 1):
                page_obj = page.page_obj
                content = self.content_bytes(page_obj)
                fonts = self.font_map(page_obj)

                self._pages.append(PageContent(page_num=i, content=content, fonts=fonts))
                logger.debug(f"Page {i}: {len(content)} content bytes, {len(fonts)} fonts")

            return self._pages

        except Exception as e:
            logger.error(f"Error loading PDF: {e}")
            raise

    def content_bytes(self, page_obj) -> bytes:
        """
        Decode and join every content stream of a page.

        Args:
            page_obj: pdfminer PDFPage

        Returns:
            Decompressed content stream bytes
        """
        refs = resolve1(page_obj.contents) or []
        if not isinstance(refs, list):
            refs = [refs]

        streams = []
        for ref in refs:
            stream = resolve1(ref)
            # /Contents may itself be a reference to an array of streams
            parts = [resolve1(part) for part in stream] if isinstance(stream, list) else [stream]
            for part in parts:
                if isinstance(part, PDFStream):
                    streams.append(part.get_data())
                else:
                    logger.warning(f"Skipping non-stream page contents: {part!r}")
        return b'\n'.join(streams)

    def font_map(self, page_obj) -> Dict[str, CharMap]:
        """
        Map a page's font resource names to character maps.

        Args:
            page_obj: pdfminer PDFPage

        Returns:
            Dictionary from resource name (no leading slash) to CharMap
        """
        resources = resolve1(page_obj.resources) or {}
        fonts = resolve1(resources.get('Font')) or {}

        charmaps = {}
        for name, ref in fonts.items():
            objid = ref.objid if isinstance(ref, PDFObjRef) else None
            spec = resolve1(ref)
            if not isinstance(spec, dict):
                logger.warning(f"Font {name} has no font dictionary")
                continue
            charmaps[str(name)] = FontCharMap(self._rsrcmgr, str(name), spec, objid)
        return charmaps

    def get_page(self, page_num: int) -> Optional[PageContent]:
        """Get a specific page by number (1-indexed)."""
        if not self._pages:
            self.load()

        if 1 <= page_num <= len(self._pages):
            return self._pages[page_num - 1]
        return None

    def close(self):
        """Close the PDF file."""
        if self._pdf:
            self._pdf.close()
            self._pdf = None
