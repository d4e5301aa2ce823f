"""
Device Identification VPD page parser.

Handles the binary page 0x83 that the kernel exposes as the vpd_pg83
attribute of a SCSI device, and picks a single logical unit name from
its designation descriptors.

Reference: SPC-5 Section 7.7.6 "Device Identification VPD page"
"""

import logging
from typing import Iterator

from .base import BaseParser
from ..exceptions import MalformedPageError
from ..models import DesignatorCandidate
from ..protocol.constants import (
    EUI64_LENGTHS,
    NAA_LENGTHS,
    T10_VENDOR_ID_MIN_LEN,
    UUID_DASH_OFFSETS,
    UUID_DESIGNATOR_LEN,
    UUID_TYPE_RFC4122,
    VPD_DESC_HEADER_LEN,
    VPD_DEVICE_ID,
    VPD_HEADER_LEN,
)
from ..protocol.types import Association, CodeSet, DesignatorType, ProtocolIdentifier

logger = logging.getLogger(__name__)

UUID_ERROR = "??"


class DeviceIdentificationParser(BaseParser):
    """Parser for Device Identification VPD page data."""

    @classmethod
    def descriptor_list(cls, page: bytes) -> bytes:
        """
        Check the page header and return the designation descriptor list.

        Args:
            page: Raw page bytes, header included

        Returns:
            The bytes following the 4-byte page header

        Raises:
            MalformedPageError: If the page code or page length is wrong
        """
        if len(page) < VPD_HEADER_LEN:
            raise MalformedPageError(f"VPD page too short: {len(page)} bytes")
        if page[1] != VPD_DEVICE_ID:
            raise MalformedPageError(f"not a Device Identification page: page code 0x{page[1]:02x}")
        page_length = cls.safe_unpack('>H', page, 2)[0]
        if page_length + VPD_HEADER_LEN != len(page):
            raise MalformedPageError(
                f"page length {page_length} disagrees with buffer length {len(page)}")
        return bytes(page[VPD_HEADER_LEN:])

    @classmethod
    def next_designator(cls, page: bytes, offset: int | None = None,
                        association: int | None = None,
                        designator_type: int | None = None,
                        code_set: int | None = None) -> int | None:
        """
        Find the next designation descriptor matching the given filters.

        A filter of None accepts any value. Offsets are relative to the
        start of the descriptor list; pass None to start before the
        first descriptor, or a previously returned offset to continue.

        Returns:
            Offset of the matching descriptor, or None when the scan ends
            exactly at the end of the page

        Raises:
            MalformedPageError: On a bad page header or a descriptor that
                runs past the end of the page
        """
        desc = cls.descriptor_list(page)
        end = len(desc)
        k = offset if offset is not None else -1

        while k + 3 < end:
            k = 0 if k < 0 else k + desc[k + 3] + VPD_DESC_HEADER_LEN
            if k + VPD_DESC_HEADER_LEN > end:
                break
            if k + VPD_DESC_HEADER_LEN + desc[k + 3] > end:
                raise MalformedPageError(
                    f"designation descriptor at offset {k} overruns the page", k)
            if code_set is not None and desc[k] & 0x0F != code_set:
                continue
            if association is not None and (desc[k + 1] >> 4) & 0x3 != association:
                continue
            if designator_type is not None and desc[k + 1] & 0x0F != designator_type:
                continue
            return k

        if k == end or (offset is None and end == 0):
            return None
        raise MalformedPageError(f"descriptor list ends inconsistently at offset {k}", k)

    @classmethod
    def designator_at(cls, page: bytes, offset: int) -> DesignatorCandidate:
        """Decode the descriptor at offset (as returned by next_designator)."""
        desc = cls.descriptor_list(page)
        b0, b1, _, length = cls.safe_unpack('>4B', desc, offset)
        start = offset + VPD_DESC_HEADER_LEN
        return DesignatorCandidate(
            designator_type=b1 & 0x0F,
            association=(b1 >> 4) & 0x3,
            code_set=b0 & 0x0F,
            length=length,
            data=desc[start:start + length],
            offset=offset,
            protocol_identifier=(b0 >> 4) & 0x0F,
            piv=bool(b1 & 0x80),
        )

    @classmethod
    def iter_designators(cls, page: bytes, association: int | None = None,
                         designator_type: int | None = None,
                         code_set: int | None = None) -> Iterator[DesignatorCandidate]:
        """Yield every descriptor matching the filters, in page order."""
        offset = None
        while True:
            offset = cls.next_designator(page, offset, association, designator_type, code_set)
            if offset is None:
                return
            yield cls.designator_at(page, offset)

    @classmethod
    def _first(cls, page: bytes, association: int, designator_type: int,
               code_set: int | None) -> DesignatorCandidate | None:
        offset = cls.next_designator(page, None, association, designator_type, code_set)
        return None if offset is None else cls.designator_at(page, offset)

    @classmethod
    def extract_logical_unit_name(cls, page: bytes, want_prefix: bool = False) -> str:
        """
        Pick the logical unit name from a Device Identification page.

        Preference order:
        1. SCSI name string, when a target port descriptor says iSCSI
        2. NAA (8 or 16 bytes) as hex, "naa." prefix
        3. EUI-64 (8, 12 or 16 bytes) as hex, "eui." prefix
        4. RFC 4122 UUID, "uuid." prefix ("??" if not RFC 4122)
        5. SCSI name string
        6. T10 vendor ID (text, at least 8 bytes), "t10." prefix

        Args:
            page: Raw page bytes, header included
            want_prefix: Prefix the name with its designator kind

        Returns:
            The name, or "" when no usable designator exists

        Raises:
            MalformedPageError: If the page fails its sanity checks
        """
        lu = Association.LOGICAL_UNIT

        name_string = None
        scsi_name = cls._first(page, lu, DesignatorType.SCSI_NAME_STRING, CodeSet.UTF8)
        if scsi_name is not None:
            name_string = cls.extract_string(scsi_name.data, 0, scsi_name.length, 'utf-8')
            port = cls._first(page, Association.TARGET_PORT,
                              DesignatorType.SCSI_NAME_STRING, CodeSet.UTF8)
            if port is not None and port.piv and port.protocol_identifier == ProtocolIdentifier.ISCSI:
                logger.debug(f"iSCSI target port found, using SCSI name string {name_string!r}")
                return name_string

        naa = cls._first(page, lu, DesignatorType.NAA, CodeSet.BINARY)
        if naa is not None:
            if naa.length not in NAA_LENGTHS:
                logger.debug(f"NAA designator length {naa.length} not supported")
                return ""
            return cls._prefixed("naa.", cls.bytes_to_hex_string(naa.data), want_prefix)

        eui = cls._first(page, lu, DesignatorType.EUI_64, CodeSet.BINARY)
        if eui is not None:
            if eui.length not in EUI64_LENGTHS:
                logger.debug(f"EUI-64 designator length {eui.length} not supported")
                return ""
            return cls._prefixed("eui.", cls.bytes_to_hex_string(eui.data), want_prefix)

        uuid = cls._first(page, lu, DesignatorType.UUID, CodeSet.BINARY)
        if uuid is not None:
            if uuid.length != UUID_DESIGNATOR_LEN or (uuid.data[0] >> 4) != UUID_TYPE_RFC4122:
                return UUID_ERROR
            return cls._prefixed("uuid.", cls._format_uuid(uuid.data[2:]), want_prefix)

        if name_string is not None:
            return name_string

        t10 = cls._first(page, lu, DesignatorType.T10_VENDOR_ID, None)
        if t10 is not None and t10.code_set != CodeSet.BINARY and t10.length >= T10_VENDOR_ID_MIN_LEN:
            return cls._prefixed("t10.", cls.extract_string(t10.data, 0, t10.length), want_prefix)

        return ""

    @staticmethod
    def _prefixed(prefix: str, value: str, want_prefix: bool) -> str:
        return prefix + value if want_prefix else value

    @staticmethod
    def _format_uuid(data: bytes) -> str:
        parts = []
        for k, value in enumerate(data):
            if k in UUID_DASH_OFFSETS:
                parts.append("-")
            parts.append(f"{value:02x}")
        return "".join(parts)
