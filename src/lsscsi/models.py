"""
SCSI Listing Data Models

Structured data classes for address tuples, directory classification,
transport resolution and listing options.
Provides type safety and clear interfaces instead of generic dictionaries.

References:
- SAM-5 Section 4.7 "Logical unit numbers"
- SPC-5 Section 7.7.6 "Device Identification VPD page"
- Linux Documentation/ABI/testing/sysfs-class-scsi_host
"""

import functools
from dataclasses import dataclass, field
from enum import IntEnum

from .protocol.constants import (
    DEV_DIR,
    HCTL_COLUMN_WIDTH,
    HCTL_LUNHEX_COLUMN_WIDTH,
    LUN_BYTES_LEN,
    LUN_UNSET,
    NVME_HOST_CHAR,
    NVME_HOST_NUM,
    UNSET_INT,
)
from .protocol.types import DevType, LunFormat
from .protocol.utils import lun_to_t10_bytes, lun_word_flip, nsid_to_bytes


class TransportKind(IntEnum):
    """
    Transport protocols a SCSI host (initiator) or device (target) can use.

    Values match the numbering used by the lsscsi utility.
    """
    UNKNOWN = 0
    SPI = 1          # Parallel SCSI
    FC = 2           # Fibre Channel
    SAS = 3          # SAS transport class (sas_host)
    SAS_CLASS = 4    # Legacy SAS class (libsas "sas/ha")
    ISCSI = 5
    SBP = 6          # FireWire
    USB = 7
    ATA = 8          # Probably PATA, could be SATA
    SATA = 9
    FCOE = 10        # Fibre Channel over Ethernet
    SRP = 11         # SCSI RDMA Protocol
    PCIE = 12        # NVMe over PCIe (or fabrics)


class DeviceKind(IntEnum):
    """Kind of entry found below a SCSI device or NVMe controller directory."""
    NONE = 0             # No device found
    BLOCK = 1            # SCSI block device (disk, cd/dvd, ...)
    TAPE = 2             # SCSI tape device (st or osst)
    NVME_NAMESPACE = 3
    GENERIC = 4          # SCSI generic (sg) device
    ENCLOSURE = 5        # SES enclosure device
    MEDIUM_CHANGER = 6   # SCSI medium changer (ch)


@dataclass(frozen=True)
class DirEntry:
    """One child of a sysfs directory."""

    name: str
    is_dir: bool
    is_symlink: bool = False

    @property
    def is_candidate(self) -> bool:
        """Symlinks, and directories other than dot entries, are considered."""
        if self.is_symlink:
            return True
        return self.is_dir and not self.name.startswith('.')


@dataclass
class ClassificationResult:
    """
    Outcome of classifying a device directory.

    segment is the relative path from the classified directory to the
    class device holding the "dev" attribute, e.g. "block/sda" or
    "scsi_tape:st0".
    """

    kind: DeviceKind
    segment: str | None = None

    @property
    def found(self) -> bool:
        """True when some device was found."""
        return self.kind != DeviceKind.NONE

    @property
    def dev_type(self) -> DevType:
        """Kind of /dev node expected for this device."""
        if self.kind in (DeviceKind.BLOCK, DeviceKind.NVME_NAMESPACE):
            return DevType.BLOCK
        return DevType.CHAR


@dataclass
class TransportInfo:
    """
    Result of transport resolution for one host or device.

    context holds the values a later verbose dump needs (for example the
    SAS end device name or the iSCSI session number). It is never shared
    between entries.
    """

    kind: TransportKind
    display: str = ""
    context: dict[str, str] = field(default_factory=dict)

    @property
    def known(self) -> bool:
        """True unless no probe matched."""
        return self.kind != TransportKind.UNKNOWN


@dataclass(frozen=True)
class AttributeLine:
    """
    One line of a verbose attribute dump.

    Renders as "name=value" indented by depth levels, or just "name"
    when value is None (headings such as a port or phy name).
    """

    name: str
    value: str | None = None
    depth: int = 1

    def render(self) -> str:
        indent = "  " * self.depth
        if self.value is None:
            return f"{indent}{self.name}"
        return f"{indent}{self.name}={self.value}"


@dataclass(frozen=True)
class DevNode:
    """A block or character special file found under the device directory."""

    path: str
    major: int
    minor: int
    dev_type: DevType
    mtime: float = 0.0


@dataclass
class DesignatorCandidate:
    """
    One designation descriptor of a Device Identification VPD page.

    Reference: SPC-5 Table 491 "Designation descriptor"
    """

    designator_type: int         # Byte 1, bits 3:0
    association: int             # Byte 1, bits 5:4
    code_set: int                # Byte 0, bits 3:0
    length: int                  # Byte 3, designator length
    data: bytes                  # Designator bytes following the 4-byte header
    offset: int = 0              # Offset of the descriptor within the descriptor list
    protocol_identifier: int = 0  # Byte 0, bits 7:4
    piv: bool = False            # Byte 1, bit 7: protocol identifier valid


@functools.total_ordering
@dataclass(frozen=True)
class AddressTuple:
    """
    A host:channel:target:lun address of a SCSI device or host.

    Unset fields are None; the -1 / all-ones sentinels only appear when
    parsing or formatting. NVMe entries use the reserved host number
    0x7fff, the controller ID as target and the namespace ID as lun.

    The T10 byte view of the lun (lun_bytes) is always derived from the
    lun integer, so the two cannot disagree.
    """

    host: int | None = None
    channel: int | None = None
    target: int | None = None
    lun: int | None = None

    def __post_init__(self):
        for name in ('host', 'channel', 'target'):
            if getattr(self, name) == UNSET_INT:
                object.__setattr__(self, name, None)
        if self.lun == LUN_UNSET:
            object.__setattr__(self, 'lun', None)

    @classmethod
    def parse(cls, text: str) -> 'AddressTuple':
        """
        Parse "h:c:t:l" (host may be 'N' for NVMe).

        Raises:
            ParseError: If the text is not a valid tuple
        """
        from .parsers.address import AddressParser
        return AddressParser.parse_hctl(text)

    @classmethod
    def unset(cls) -> 'AddressTuple':
        """Tuple with every field unset (matches everything as a filter)."""
        return cls()

    @classmethod
    def for_nvme(cls, controller: int, cntlid: int, nsid: int | None = None) -> 'AddressTuple':
        """Tuple for NVMe controller nvme<controller> and optional namespace."""
        return cls(NVME_HOST_NUM, controller, cntlid, nsid)

    def invalidated(self) -> 'AddressTuple':
        """Return this tuple reset to the unset state."""
        return AddressTuple.unset()

    @property
    def is_nvme(self) -> bool:
        """True for NVMe controller/namespace tuples."""
        return self.host == NVME_HOST_NUM

    @property
    def is_unset(self) -> bool:
        """True when no field is set."""
        return (self.host is None and self.channel is None and
                self.target is None and self.lun is None)

    @property
    def lun_bytes(self) -> bytes:
        """
        8-byte lun view.

        SCSI: T10 order (Linux word flip undone). NVMe: namespace ID
        little-endian in the first four bytes. Unset: all 0xff.
        """
        if self.lun is None:
            return b'\xff' * LUN_BYTES_LEN
        if self.is_nvme:
            return nsid_to_bytes(self.lun)
        return lun_to_t10_bytes(self.lun)

    def sentinels(self) -> tuple[int, int, int, int]:
        """Fields with unset values replaced by -1 / all-ones."""
        return (
            UNSET_INT if self.host is None else self.host,
            UNSET_INT if self.channel is None else self.channel,
            UNSET_INT if self.target is None else self.target,
            LUN_UNSET if self.lun is None else self.lun,
        )

    def compare(self, other: 'AddressTuple') -> int:
        """Return -1, 0 or 1 ordering by host, channel, target then lun."""
        left, right = self.sentinels(), other.sentinels()
        if left == right:
            return 0
        return -1 if left < right else 1

    def __lt__(self, other):
        if not isinstance(other, AddressTuple):
            return NotImplemented
        return self.compare(other) < 0

    def matches(self, filt: 'AddressTuple') -> bool:
        """True if every field set in filt equals the same field here."""
        for name in ('host', 'channel', 'target', 'lun'):
            wanted = getattr(filt, name)
            if wanted is not None and getattr(self, name) != wanted:
                return False
        return True

    def format(self, fields: str = "hctl", lun_format: LunFormat = LunFormat.DECIMAL) -> str:
        """
        Render selected fields joined with ':'.

        Args:
            fields: Non-empty subset of "hctl", in any order (output keeps h, c, t, l order)
            lun_format: How the lun is rendered when included

        Returns:
            e.g. "2:0:3:0", "N:0:1:1" or "2:0:3:0x0122_0033"
        """
        wanted = set(fields)
        if not wanted or not wanted <= set("hctl"):
            raise ValueError(f"fields must be a non-empty subset of 'hctl', got {fields!r}")

        h, c, t, _ = self.sentinels()
        parts = []
        if 'h' in wanted:
            parts.append(NVME_HOST_CHAR if self.is_nvme else str(h))
        if 'c' in wanted:
            parts.append(str(c))
        if 't' in wanted:
            parts.append(str(t))
        if 'l' in wanted:
            parts.append(self._format_lun(lun_format))
        return ":".join(parts)

    def _format_lun(self, lun_format: LunFormat) -> str:
        if self.lun is None:
            return str(UNSET_INT)
        if lun_format == LunFormat.DECIMAL:
            return str(self.lun)
        if self.is_nvme:
            return f"0x{self.lun:x}"
        if lun_format == LunFormat.T10_HEX:
            from .parsers.lun import LunParser
            return LunParser.format_t10(self.lun_bytes)
        return f"0x{lun_word_flip(self.lun):016x}"

    def bracketed(self, lun_format: LunFormat = LunFormat.DECIMAL) -> str:
        """Bracketed tuple padded to the listing column width."""
        width = HCTL_COLUMN_WIDTH if lun_format == LunFormat.DECIMAL else HCTL_LUNHEX_COLUMN_WIDTH
        return f"[{self.format('hctl', lun_format)}]".ljust(width)

    def __str__(self) -> str:
        return self.format()


@dataclass
class ListOptions:
    """
    Options controlling one listing run.

    Counter fields mirror repeatable command line flags (0 = off).
    """

    classic: int = 0            # --classic
    dev_maj_min: int = 0        # --device
    generic: int = 0            # --generic
    hosts: bool = False         # --hosts
    kname: int = 0              # --kname
    long_opt: int = 0           # --long (+1 each), --list (+3)
    lunhex: int = 0             # --lunhex, 1 = T10 form, 2+ = full 16 digit
    nvme: bool = True           # Cleared by --no-nvme
    protection: int = 0         # --protection
    protmode: int = 0           # --protmode
    scsi_id: int = 0            # --scsi_id
    size: int = 0               # --size, 2+ adds binary units
    transport: int = 0          # --transport
    unit: int = 0               # --unit, 2+ adds "naa." style prefix
    verbose: int = 0            # --verbose
    wwn: int = 0                # --wwn
    sysfsroot: str = "/sys"
    dev_dir: str = DEV_DIR
    hctl_filter: AddressTuple = field(default_factory=AddressTuple.unset)

    @property
    def lun_format(self) -> LunFormat:
        """Lun rendering selected by --lunhex."""
        if self.lunhex <= 0:
            return LunFormat.DECIMAL
        if self.lunhex == 1:
            return LunFormat.T10_HEX
        return LunFormat.FULL_HEX

    @property
    def filter_active(self) -> bool:
        """True when the filter has at least one field set."""
        return not self.hctl_filter.is_unset
