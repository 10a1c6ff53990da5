"""
Utility functions shared by the protocol matchers.
"""

import re
import struct
import unicodedata
from typing import List, Optional


class HexDecodeError(ValueError):
    """Raised when a hex string given by the user cannot be decoded."""


_HEX_ESCAPE = re.compile(r"\\(x[0-9a-fA-F]{2}|[rnt\\])")
_ESCAPES = {"r": "\r", "n": "\n", "t": "\t", "\\": "\\"}


def to_hex(data: bytes) -> str:
    """
    Render bytes as uppercase hex pairs separated by single spaces.

    Args:
        data: Raw bytes

    Returns:
        Hex string, e.g. "00 01 FF" (empty string for empty input)
    """
    return " ".join(f"{b:02X}" for b in data)


def to_ascii(data: bytes) -> str:
    """
    Render bytes as printable ASCII, substituting '.' for anything else.

    Graphic characters (0x21-0x7E) and space are kept as-is.

    Args:
        data: Raw bytes

    Returns:
        String with exactly one character per input byte
    """
    return "".join(chr(b) if 0x20 <= b <= 0x7E else "." for b in data)


def read_u16_be(data: bytes, offset: int) -> int:
    return struct.unpack_from(">H", data, offset)[0]


def read_u16_le(data: bytes, offset: int) -> int:
    return struct.unpack_from("<H", data, offset)[0]


def read_u32_le(data: bytes, offset: int) -> int:
    return struct.unpack_from("<I", data, offset)[0]


def decode_text(data: bytes) -> Optional[str]:
    """
    Decode payload as strict UTF-8.

    Returns:
        Decoded text, or None if the payload is not valid UTF-8
    """
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return None


def is_plain_text(text: str) -> bool:
    """
    Check that text holds no control characters other than CR, LF and TAB.

    Only Unicode control characters (category Cc) are rejected; format
    characters such as a BOM or a zero-width joiner are text.
    """
    return all(ch in "\r\n\t" or unicodedata.category(ch) != "Cc" for ch in text)


def text_lines(text: str) -> List[str]:
    """
    Split text into lines on LF, dropping a trailing CR from each line.

    A final line break does not produce an extra empty line, so
    "a\\r\\n\\r\\n" gives ["a", ""].

    Args:
        text: Decoded payload text

    Returns:
        List of lines (empty for empty text)
    """
    if not text:
        return []
    lines = text.split("\n")
    if text.endswith("\n"):
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def parse_decimal(value: str) -> Optional[int]:
    """
    Parse an unsigned decimal number ("42" or "+42").

    Returns:
        Integer value, or None if value is not a plain decimal number
    """
    if re.fullmatch(r"\+?[0-9]+", value) is None:
        return None
    return int(value)


def parse_hex(value: str) -> bytes:
    """
    Parse a hex string such as "00 01 ff" or "0001FF" into bytes.

    Raises:
        HexDecodeError: if the string is not an even run of hex digits
    """
    compact = "".join(value.split())
    if compact.lower().startswith("0x"):
        compact = compact[2:]
    try:
        return bytes.fromhex(compact)
    except ValueError as e:
        raise HexDecodeError(f"invalid hex input: {value!r}") from e


def unescape_text(value: str) -> bytes:
    """
    Interpret \\r, \\n, \\t, \\\\ and \\xNN escapes in command-line text.

    Text outside escapes is encoded as UTF-8; \\xNN produces the raw byte.
    """
    out = bytearray()
    pos = 0
    for match in _HEX_ESCAPE.finditer(value):
        out += value[pos:match.start()].encode("utf-8")
        token = match.group(1)
        if token.startswith("x"):
            out.append(int(token[1:], 16))
        else:
            out += _ESCAPES[token].encode("utf-8")
        pos = match.end()
    out += value[pos:].encode("utf-8")
    return bytes(out)
