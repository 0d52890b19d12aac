"""
Content stream interpretation.

Replays the operators of a page content stream to recover the words it shows,
in drawing order. Geometry is ignored; the operand stack only has to stay in
step with the operators so that the text operators find their operands.

Fragments follow one convention: a fragment ending in a space is followed by
the next fragment within the same sentence, a fragment without one closes
its sentence. A shown string that decodes to a lone space is folded into the
previous fragment as that trailing space.
"""
import logging
import re
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Union

from .errors import ContentStreamError
from .loader import CharMap, IdentityCharMap, PageContent

logger = logging.getLogger(__name__)

WHITESPACE = b' \t\n\r\x0c\x00'
DELIMITERS = b'()<>[]{}/%'
HEX_DIGITS = b'0123456789abcdefABCDEF'
OCTAL_DIGITS = b'01234567'

LITERAL_ESCAPES = {
    ord('n'): 0x0a,
    ord('r'): 0x0d,
    ord('t'): 0x09,
    ord('b'): 0x08,
    ord('f'): 0x0c,
    ord('('): 0x28,
    ord(')'): 0x29,
    ord('\\'): 0x5c,
}

INLINE_IMAGE_END = re.compile(rb'[ \t\n\r\x0c\x00]EI(?=[ \t\n\r\x0c\x00]|$)')
NAME_ESCAPE = re.compile(r'#([0-9A-Fa-f]{2})')

# Operands consumed by each operator. sc/scn/SC/SCN take a variable number
# and are left out; their operands stay on the stack unread.
OPERATOR_ARITY = {
    # path painting and clipping
    'B': 0, 'B*': 0, 'F': 0, 'S': 0, 'b': 0, 'b*': 0, 'f': 0, 'f*': 0,
    'h': 0, 'n': 0, 's': 0, 'W': 0, 'W*': 0,
    # graphics state
    'q': 0, 'Q': 0, 'G': 1, 'J': 1, 'M': 1, 'g': 1, 'gs': 1, 'i': 1,
    'j': 1, 'w': 1, 'ri': 1, 'd': 2, 'cs': 1, 'CS': 1,
    'RG': 3, 'rg': 3, 'K': 4, 'k': 4, 'cm': 6,
    # path construction
    'l': 2, 'm': 2, 're': 4, 'v': 4, 'y': 4, 'c': 6,
    # text objects, state and positioning
    'BT': 0, 'ET': 0, 'T*': 0, 'TL': 1, 'Tc': 1, 'Tr': 1, 'Ts': 1,
    'Tw': 1, 'Tz': 1, 'TD': 2, 'Td': 2, 'Tm': 6, 'Tf': 2,
    # text showing
    'Tj': 1, "'": 1, 'TJ': 1, '"': 3,
    # marked content and compatibility sections
    'EMC': 0, 'BMC': 1, 'MP': 1, 'BDC': 2, 'DP': 2, 'BX': 0, 'EX': 0,
    # XObjects, shading and type3 glyph metrics
    'Do': 1, 'sh': 1, 'd0': 2, 'd1': 6,
}

Operand = Union[str, bytes, list, dict]


class _Marker:
    def __init__(self, name: str):
        self.name = name

    def __repr__(self):
        return self.name


ARRAY_END = _Marker('ARRAY_END')
DICT_END = _Marker('DICT_END')


class ContentTokenizer:
    """
    Splits content stream bytes into operands and keywords.

    Literal and hex strings come back as bytes, arrays as lists and
    dictionaries as dicts. Names (with their leading slash), numbers and
    operator keywords come back as str.
    """

    def __init__(self, data: bytes):
        self.data = data
        self.pos = 0

    def __iter__(self) -> Iterator[Operand]:
        while True:
            token = self.next_token()
            if token is None:
                return
            if token is ARRAY_END or token is DICT_END:
                continue
            yield token

    def next_token(self):
        """Read the next token, or None at end of data."""
        data = self.data
        while True:
            self._skip_whitespace()
            if self.pos >= len(data):
                return None

            c = data[self.pos]
            if c == 0x25:  # %
                self._skip_comment()
                continue
            if c == 0x28:  # (
                return self._read_literal()
            if data.startswith(b'<<', self.pos):
                self.pos += 2
                return self._read_dict()
            if data.startswith(b'>>', self.pos):
                self.pos += 2
                return DICT_END
            if c == 0x3c:  # <
                return self._read_hex()
            if c == 0x5b:  # [
                self.pos += 1
                return self._read_array()
            if c == 0x5d:  # ]
                self.pos += 1
                return ARRAY_END
            if c in b')>{}':
                self.pos += 1
                continue
            if c == 0x2f:  # /
                return self._read_name()

            token = self._read_regular()
            if token == 'BI':
                self._skip_inline_image()
                continue
            return token

    def _skip_whitespace(self):
        data = self.data
        while self.pos < len(data) and data[self.pos] in WHITESPACE:
            self.pos += 1

    def _skip_comment(self):
        data = self.data
        while self.pos < len(data) and data[self.pos] not in b'\r\n':
            self.pos += 1

    def _read_regular(self) -> str:
        data = self.data
        start = self.pos
        while (self.pos < len(data) and data[self.pos] not in WHITESPACE
               and data[self.pos] not in DELIMITERS):
            self.pos += 1
        return data[start:self.pos].decode('latin-1')

    def _read_name(self) -> str:
        self.pos += 1
        raw = self._read_regular()
        return '/' + NAME_ESCAPE.sub(lambda m: chr(int(m.group(1), 16)), raw)

    def _read_literal(self) -> bytes:
        data = self.data
        self.pos += 1
        depth = 1
        out = bytearray()

        while self.pos < len(data):
            c = data[self.pos]

            if c == 0x5c:  # backslash
                self.pos += 1
                if self.pos >= len(data):
                    break
                e = data[self.pos]
                if e in LITERAL_ESCAPES:
                    out.append(LITERAL_ESCAPES[e])
                    self.pos += 1
                elif e in OCTAL_DIGITS:
                    end = self.pos
                    while end < len(data) and end - self.pos < 3 and data[end] in OCTAL_DIGITS:
                        end += 1
                    out.append(int(data[self.pos:end], 8) & 0xff)
                    self.pos = end
                elif e == 0x0d:
                    # line continuation, \r or \r\n
                    self.pos += 1
                    if self.pos < len(data) and data[self.pos] == 0x0a:
                        self.pos += 1
                elif e == 0x0a:
                    self.pos += 1
                else:
                    out.append(e)
                    self.pos += 1
                continue

            if c == 0x28:
                depth += 1
            elif c == 0x29:
                depth -= 1
                if depth == 0:
                    self.pos += 1
                    break

            out.append(c)
            self.pos += 1

        return bytes(out)

    def _read_hex(self) -> bytes:
        data = self.data
        self.pos += 1
        end = data.find(b'>', self.pos)
        if end < 0:
            end = len(data)

        digits = bytes(b for b in data[self.pos:end] if b in HEX_DIGITS)
        self.pos = end + 1
        if len(digits) % 2:
            digits += b'0'
        return bytes.fromhex(digits.decode('ascii'))

    def _read_array(self) -> list:
        items = []
        while True:
            token = self.next_token()
            if token is None or token is ARRAY_END:
                return items
            if token is DICT_END:
                continue
            items.append(token)

    def _read_dict(self) -> dict:
        items = []
        while True:
            token = self.next_token()
            if token is None or token is DICT_END:
                break
            if token is ARRAY_END:
                continue
            items.append(token)
        return {str(key): value for key, value in zip(items[::2], items[1::2])}

    def _skip_inline_image(self):
        match = INLINE_IMAGE_END.search(self.data, self.pos)
        self.pos = match.end() if match else len(self.data)


def font_name(operand: Operand) -> str:
    """Resource name of a Tf font operand, without the leading slash."""
    if isinstance(operand, str) and operand.startswith('/'):
        return operand[1:]
    return str(operand)


class ContentStreamInterpreter:
    """Replays one page's content stream and collects the text it shows."""

    def __init__(self, fonts: Optional[Mapping[str, CharMap]] = None):
        self.fonts = fonts or {}
        self.font: Optional[str] = None
        self.stack: List[Operand] = []
        self.fragments: List[str] = []
        self._charmaps: Dict[Optional[str], CharMap] = {}

    def charmap(self, font: Optional[str]) -> CharMap:
        """Character map for a font name, identity when the page has none."""
        if font in self._charmaps:
            return self._charmaps[font]

        charmap = self.fonts.get(font) if font is not None else None
        if charmap is None:
            logger.debug(f"No character map for font {font}, decoding bytes as-is")
            charmap = IdentityCharMap()

        self._charmaps[font] = charmap
        return charmap

    def push(self, operand: Operand):
        self.stack.append(operand)

    def drop(self, operator: str, count: int) -> List[Operand]:
        """Pop the operands of an operator, oldest first."""
        if count == 0:
            return []
        if len(self.stack) < count:
            raise ContentStreamError(operator, count, len(self.stack))

        operands = self.stack[-count:]
        del self.stack[-count:]
        return operands

    def write(self, operand: Operand):
        """
        Decode the strings of a text-showing operand into fragments.

        Args:
            operand: A string, or a TJ array of strings and kerning numbers
        """
        strings = operand if isinstance(operand, list) else [operand]
        charmap = self.charmap(self.font)

        for value in strings:
            if not isinstance(value, bytes):
                continue

            text = charmap.decode(value)
            if text == ' ':
                if self.fragments:
                    self.fragments[-1] += ' '
            elif text:
                self.fragments.append(text)

    def execute(self, operator: str, operands: List[Operand]):
        if operator == 'Tf':
            self.font = font_name(operands[0])
        elif operator in ('Tj', "'", 'TJ'):
            self.write(operands[0])
        elif operator == '"':
            self.write(operands[2])

    def process(self, data: bytes) -> List[str]:
        """
        Interpret content stream bytes.

        Args:
            data: Decompressed content stream

        Returns:
            Fragments shown by the stream, in order
        """
        for token in ContentTokenizer(data):
            if isinstance(token, str) and token in OPERATOR_ARITY:
                self.execute(token, self.drop(token, OPERATOR_ARITY[token]))
            else:
                self.push(token)

        return self.fragments


def reconstruct_text(pages: Iterable[PageContent]) -> List[str]:
    """
    Rebuild the fragment sequence of a whole document.

    Each page gets its own interpreter, so font maps are cached per page.

    Args:
        pages: Pages in document order

    Returns:
        Fragments of all pages, concatenated
    """
    fragments = []
    for page in pages:
        page_fragments = ContentStreamInterpreter(page.fonts).process(page.content)
        logger.debug(f"Page {page.page_num}: {len(page_fragments)} fragments")
        fragments.extend(page_fragments)
    return fragments
