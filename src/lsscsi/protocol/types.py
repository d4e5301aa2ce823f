"""
SCSI Protocol Types and Enums

Enumerations for the binary encodings decoded by the parsers.
"""

from enum import IntEnum


class DesignatorType(IntEnum):
    """
    Designator types of a Device Identification VPD page descriptor.

    Reference: SPC-5 Table 494 "DESIGNATOR TYPE field"
    """
    VENDOR_SPECIFIC = 0x0
    T10_VENDOR_ID = 0x1
    EUI_64 = 0x2
    NAA = 0x3
    RELATIVE_TARGET_PORT = 0x4
    TARGET_PORT_GROUP = 0x5
    LOGICAL_UNIT_GROUP = 0x6
    MD5_LOGICAL_UNIT = 0x7
    SCSI_NAME_STRING = 0x8
    PROTOCOL_SPECIFIC_PORT = 0x9
    UUID = 0xA


class Association(IntEnum):
    """
    Association field of a designation descriptor.

    Reference: SPC-5 Table 493 "ASSOCIATION field"
    """
    LOGICAL_UNIT = 0x0
    TARGET_PORT = 0x1
    TARGET_DEVICE = 0x2


class CodeSet(IntEnum):
    """
    Code set field of a designation descriptor.

    Reference: SPC-5 Table 492 "CODE SET field"
    """
    BINARY = 0x1
    ASCII = 0x2
    UTF8 = 0x3


class ProtocolIdentifier(IntEnum):
    """
    Protocol identifier values (high nibble of descriptor byte 0).

    Reference: SPC-5 Table 477 "PROTOCOL IDENTIFIER values"
    """
    FCP = 0x0
    SPI = 0x1
    SSA = 0x2
    SBP = 0x3
    SRP = 0x4
    ISCSI = 0x5
    SAS = 0x6
    ADT = 0x7
    ATA = 0x8
    UAS = 0x9
    SOP = 0xA
    PCIE = 0xB
    NONE = 0xF


class AddressingMethod(IntEnum):
    """
    LUN addressing methods (top two bits of each LUN level).

    Reference: SAM-5 Table 13 "ADDRESS METHOD field"
    """
    PERIPHERAL = 0
    FLAT_SPACE = 1
    LOGICAL_UNIT = 2
    EXTENDED = 3


class LunTag(IntEnum):
    """Per-byte tags produced by the LUN structure decoder."""
    IGNORE = 0        # This byte and those after it are not printed
    PLAIN = 1         # Print as is
    SEPARATOR = 2     # Print with a preceding '_'


class LunFormat(IntEnum):
    """Renderings of the lun field of an address tuple."""
    DECIMAL = 0       # Plain decimal
    T10_HEX = 1       # 0x prefixed T10 byte order, '_' between levels
    FULL_HEX = 2      # 0x prefixed 16 hex digits, word flipped


class DevType(IntEnum):
    """Device node kinds held by the device node cache."""
    BLOCK = 0
    CHAR = 1


class SizeUnits(IntEnum):
    """Unit families for human readable sizes."""
    SI = 0            # Powers of 1000
    BINARY = 1        # Powers of 1024
