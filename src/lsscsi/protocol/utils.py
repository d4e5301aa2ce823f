"""
SCSI Listing Utilities

Small pure helpers for LUN byte ordering and size formatting.
"""

import struct

from .constants import LUN_BYTES_LEN, LUN_MAX
from .types import SizeUnits

_SIZE_UNITS = {
    SizeUnits.SI: ("B", "kB", "MB", "GB", "TB", "PB", "EB", "ZB", "YB"),
    SizeUnits.BINARY: ("B", "KiB", "MiB", "GiB", "TiB", "PiB", "EiB", "ZiB", "YiB"),
}

_SIZE_DIVISORS = {
    SizeUnits.SI: 1000,
    SizeUnits.BINARY: 1024,
}


def lun_word_flip(lun: int) -> int:
    """
    Reverse the order of the four 16-bit words of a 64-bit lun.

    Linux keeps the lun "word flipped" relative to the T10 byte order, so
    applying this twice returns the original value.

    Args:
        lun: 64-bit Linux lun value

    Returns:
        The word flipped 64-bit value

    Reference: SAM-5 Section 4.7.2, Linux scsilun_to_int()
    """
    words = struct.unpack('<4H', struct.pack('<Q', lun & LUN_MAX))
    return struct.unpack('>Q', struct.pack('>4H', *words))[0]


def lun_to_t10_bytes(lun: int) -> bytes:
    """
    Convert a Linux lun integer to the 8-byte T10 (SAM-5) representation.

    Args:
        lun: 64-bit Linux lun value

    Returns:
        8 bytes, first level first
    """
    return lun_word_flip(lun).to_bytes(LUN_BYTES_LEN, 'big')


def nsid_to_bytes(nsid: int) -> bytes:
    """Namespace ID little-endian in the first 4 bytes, zero padded to 8."""
    return struct.pack('<L', nsid & 0xFFFFFFFF) + b'\x00' * 4


def string_get_size(size: int, units: SizeUnits = SizeUnits.SI) -> str:
    """
    Format a byte count to three significant figures.

    Args:
        size: Size in bytes
        units: SI (powers of 1000) or binary (powers of 1024)

    Returns:
        A string such as "500GB", "1.00TB" or "931GiB"
    """
    names = _SIZE_UNITS[units]
    divisor = _SIZE_DIVISORS[units]
    index = 0
    remainder = 0
    fraction = ""

    if size >= divisor:
        while size >= divisor and index < len(names) - 1:
            size, remainder = divmod(size, divisor)
            index += 1

        sf_cap = size
        digits = 0
        while sf_cap * 10 < 1000:
            sf_cap *= 10
            digits += 1

        if digits:
            remainder = (remainder * 1000) // divisor
            fraction = f".{remainder:03d}"[:digits + 1]

    return f"{size}{fraction}{names[index]}"
