"""
SCSI Listing Exception Classes

Custom exception classes for address parsing, VPD decoding and sysfs
access failures.

References:
- SAM-5 Section 4.7 (Logical unit numbers)
- SPC-5 Section 7.7.6 (Device Identification VPD page)
"""


class LsscsiError(Exception):
    """Base exception class for all listing errors."""
    pass


class ParseError(LsscsiError, ValueError):
    """
    Raised when an address tuple or filter argument cannot be decoded.

    This includes:
    - Fewer (or more) than four colon separated components
    - A component that is not an integer of its expected kind
    - A lun outside the unsigned 64-bit range

    Attributes:
        text: The string that failed to parse
    """
    def __init__(self, message, text=None):
        super().__init__(message)
        self.text = text


class MalformedPageError(LsscsiError, ValueError):
    """
    Raised when a Device Identification VPD page fails sanity checks.

    Covers:
    - Wrong page code in the header
    - Page length field disagreeing with the buffer length
    - A designation descriptor running past the end of the page

    Attributes:
        offset: Descriptor offset at which decoding stopped, if known
    """
    def __init__(self, message, offset=None):
        super().__init__(message)
        self.offset = offset


class SysfsRootError(LsscsiError):
    """
    Raised when the root of the device or host tree cannot be read.

    This is the only fatal condition of a listing run.
    """
    def __init__(self, message, path=None):
        super().__init__(message)
        self.path = path
