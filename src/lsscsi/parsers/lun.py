"""
Logical unit number parsing.

Reference: SAM-5 Section 4.7 "Logical unit numbers"
"""

from .base import BaseParser
from ..protocol.constants import LUN_BYTES_LEN, LUN_LEVELS, LUN_NOT_SPECIFIED
from ..protocol.types import AddressingMethod, LunTag

# Extended logical unit addressing: (length field, extended address method)
# pairs with a fixed size in bytes
_EXTENDED_SIZES = {
    (0, 1): 2,
    (1, 2): 4,
    (2, 2): 6,
}
_EXTENDED_NOT_SPECIFIED = (3, 0xF)


class LunParser(BaseParser):
    """Splits an 8-byte T10 lun into its addressing levels."""

    @staticmethod
    def _tag_level(tags: list[int], level: int, count: int) -> None:
        for j in range(count):
            tags[2 * level + j] = LunTag.SEPARATOR if (level > 0 and j == 0) else LunTag.PLAIN

    @classmethod
    def tag_lun(cls, lun_bytes: bytes) -> list[int]:
        """
        Tag each lun byte for printing.

        Returns a list of 8 tags: LunTag.IGNORE for this byte and all that
        follow, LunTag.PLAIN to print the byte, LunTag.SEPARATOR to print
        it with a '_' in front. Bytes 01 22 00 33 00 00 00 00 give
        [1, 1, 2, 1, 0, 0, 0, 0].

        Args:
            lun_bytes: 8 bytes in T10 order

        Returns:
            List of 8 tags
        """
        cls.validate_data_length(lun_bytes, LUN_BYTES_LEN, "LUN")
        # Extended addressing can tag past byte 7; those tags are dropped
        tags = [LunTag.IGNORE] * (2 * LUN_BYTES_LEN)

        if bytes(lun_bytes[:LUN_BYTES_LEN]) == LUN_NOT_SPECIFIED:
            tags[0] = tags[1] = LunTag.PLAIN
            return [int(t) for t in tags[:LUN_BYTES_LEN]]

        for level in range(LUN_LEVELS):
            first = lun_bytes[2 * level]
            method = (first >> 6) & 0x3
            next_level = False

            if method == AddressingMethod.PERIPHERAL:
                next_level = (first & 0x3F) != 0
                cls._tag_level(tags, level, 2)
            elif method == AddressingMethod.EXTENDED:
                len_fld = (first & 0x30) >> 4
                ext_method = first & 0xF
                fixed = _EXTENDED_SIZES.get((len_fld, ext_method))
                if fixed is not None:
                    cls._tag_level(tags, level, fixed)
                elif (len_fld, ext_method) == _EXTENDED_NOT_SPECIFIED:
                    tags[2 * level] = LunTag.SEPARATOR if level > 0 else LunTag.PLAIN
                elif len_fld < 2:
                    cls._tag_level(tags, level, 4)
                else:
                    cls._tag_level(tags, level, 6)
                    if len_fld == 3:
                        tags[2 * level + 6] = LunTag.PLAIN
                        tags[2 * level + 7] = LunTag.PLAIN
            else:
                # Flat space and logical unit addressing are single level
                cls._tag_level(tags, level, 2)

            if not next_level:
                break

        return [int(t) for t in tags[:LUN_BYTES_LEN]]

    @classmethod
    def format_t10(cls, lun_bytes: bytes) -> str:
        """
        Render a lun in T10 hex with '_' between addressing levels.

        Example: 01 22 00 33 00 00 00 00 -> "0x0122_0033"
        """
        parts = ["0x"]
        for tag, value in zip(cls.tag_lun(lun_bytes), lun_bytes):
            if tag == LunTag.IGNORE:
                break
            if tag == LunTag.SEPARATOR:
                parts.append("_")
            parts.append(f"{value:02x}")
        return "".join(parts)
