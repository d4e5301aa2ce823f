"""
Base parser class with the helpers shared by the address, LUN and VPD parsers.
"""

import re
import struct

_SIGNED_DECIMAL = re.compile(r'^[+-]?[0-9]+$')
_UNSIGNED_DECIMAL = re.compile(r'^\+?[0-9]+$')
_HEXADECIMAL = re.compile(r'^0[xX][0-9a-fA-F]+$')


class BaseParser:
    """Base class for all listing parsers."""

    @staticmethod
    def safe_unpack(format_string: str, data: bytes, offset: int = 0) -> tuple:
        """
        Unpack a fixed size field from a page buffer.

        Args:
            format_string: struct format string, e.g. '>H' for a big-endian length
            data: page bytes
            offset: position of the field within data

        Returns:
            Unpacked tuple

        Raises:
            ValueError: If the buffer ends before the field does
        """
        size = struct.calcsize(format_string)
        if len(data) < offset + size:
            raise ValueError(f"Field at offset {offset} needs {size} bytes, buffer has {len(data) - offset}")
        try:
            return struct.unpack_from(format_string, data, offset)
        except struct.error as e:
            raise ValueError(f"Cannot unpack {format_string!r} at offset {offset}: {e}")

    @staticmethod
    def extract_string(data: bytes, offset: int, length: int, encoding: str = 'ascii') -> str:
        """
        Text of a designator, cut at the first NUL.

        Undecodable bytes are replaced rather than rejected.
        """
        raw = bytes(data[offset:offset + length]).split(b'\x00', 1)[0]
        return raw.decode(encoding, errors='replace')

    @staticmethod
    def bytes_to_hex_string(data: bytes) -> str:
        """Lower case hex digits with no separators ("5000c500...")."""
        return bytes(data).hex()

    @staticmethod
    def validate_data_length(data: bytes, expected_length: int, name: str = "data") -> None:
        """
        Raises:
            ValueError: If data is shorter than expected_length
        """
        if len(data) < expected_length:
            raise ValueError(f"{name} too short: got {len(data)} bytes, need {expected_length}")

    @staticmethod
    def to_signed_int(text: str) -> int | None:
        """Strict signed decimal conversion, None if text is not one."""
        text = text.strip()
        if not _SIGNED_DECIMAL.match(text):
            return None
        return int(text, 10)

    @staticmethod
    def to_unsigned_int(text: str, allow_hex: bool = False) -> int | None:
        """Strict unsigned decimal (or 0x hex) conversion, None if text is not one."""
        text = text.strip()
        if allow_hex and _HEXADECIMAL.match(text):
            return int(text, 16)
        if not _UNSIGNED_DECIMAL.match(text):
            return None
        return int(text, 10)
