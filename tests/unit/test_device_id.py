"""
Unit tests for the Device Identification VPD page parser

Tests descriptor iteration and the choice of logical unit name.
"""

import os
import sys
import unittest

from lsscsi.exceptions import MalformedPageError
from lsscsi.parsers import DeviceIdentificationParser
from lsscsi.protocol.types import Association, CodeSet, DesignatorType

# Add the fixtures directory to the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'fixtures'))

# Import test fixtures (must come after sys.path manipulation)
from mock_responses import (  # noqa: E402
    designator,
    device_id_page,
    eui_descriptor,
    iscsi_port_descriptor,
    naa_descriptor,
    scsi_name_descriptor,
    t10_descriptor,
    uuid_descriptor,
)

Parser = DeviceIdentificationParser


class TestDescriptorIteration(unittest.TestCase):
    """Test next_designator and iter_designators."""

    def test_header_checks(self):
        """Test rejection of a wrong page code or a mismatched page length."""
        page = device_id_page(naa_descriptor())
        with self.assertRaises(MalformedPageError):
            Parser.descriptor_list(page[:3])
        with self.assertRaises(MalformedPageError):
            Parser.descriptor_list(bytes((0, 0x80)) + page[2:])
        with self.assertRaises(MalformedPageError):
            Parser.descriptor_list(page + b'\x00')

    def test_walk_all_descriptors(self):
        """Test walking every descriptor in page order."""
        page = device_id_page(t10_descriptor(), naa_descriptor(), eui_descriptor())
        found = list(Parser.iter_designators(page))
        self.assertEqual([d.designator_type for d in found],
                         [DesignatorType.T10_VENDOR_ID, DesignatorType.NAA, DesignatorType.EUI_64])
        self.assertEqual(found[1].offset, 4 + len("LIO-ORG block0"))
        self.assertEqual(found[1].data, bytes.fromhex("5000c500a1b2c3d4"))

    def test_filters(self):
        """Test selecting descriptors by type."""
        page = device_id_page(t10_descriptor(), naa_descriptor(), eui_descriptor())
        offset = Parser.next_designator(page, designator_type=DesignatorType.EUI_64)
        self.assertEqual(Parser.designator_at(page, offset).designator_type, DesignatorType.EUI_64)
        self.assertIsNone(Parser.next_designator(page, association=Association.TARGET_PORT))
        self.assertIsNone(Parser.next_designator(page, code_set=CodeSet.UTF8))

    def test_continue_after_last(self):
        """Test that iteration ends after the last descriptor."""
        page = device_id_page(naa_descriptor())
        offset = Parser.next_designator(page)
        self.assertEqual(offset, 0)
        self.assertIsNone(Parser.next_designator(page, offset))

    def test_empty_list(self):
        """Test a page with no descriptors."""
        self.assertIsNone(Parser.next_designator(device_id_page()))

    def test_overrun(self):
        """Test that a descriptor running past the page is malformed."""
        page = bytearray(device_id_page(naa_descriptor()))
        page[7] = 0x40
        with self.assertRaises(MalformedPageError):
            Parser.next_designator(bytes(page))

    def test_piv_and_protocol(self):
        """Test decoding of the PIV bit and protocol identifier."""
        page = device_id_page(iscsi_port_descriptor())
        candidate = next(Parser.iter_designators(page))
        self.assertTrue(candidate.piv)
        self.assertEqual(candidate.protocol_identifier, 5)
        self.assertEqual(candidate.association, Association.TARGET_PORT)


class TestLogicalUnitName(unittest.TestCase):
    """Test extract_logical_unit_name precedence and formats."""

    def test_naa(self):
        """Test that an NAA designator names the logical unit."""
        page = device_id_page(t10_descriptor(), naa_descriptor())
        self.assertEqual(Parser.extract_logical_unit_name(page), "5000c500a1b2c3d4")
        self.assertEqual(Parser.extract_logical_unit_name(page, want_prefix=True),
                         "naa.5000c500a1b2c3d4")

    def test_naa_bad_length(self):
        """Test that an NAA designator of the wrong length gives no name."""
        page = device_id_page(designator(DesignatorType.NAA, b'\x50' * 12), eui_descriptor())
        self.assertEqual(Parser.extract_logical_unit_name(page), "")

    def test_eui(self):
        """Test an EUI-64 designator with the eui. prefix."""
        page = device_id_page(eui_descriptor())
        self.assertEqual(Parser.extract_logical_unit_name(page, True), "eui.0011223344556677")

    def test_uuid(self):
        """Test a UUID designator with the uuid. prefix."""
        page = device_id_page(uuid_descriptor())
        self.assertEqual(Parser.extract_logical_unit_name(page, True),
                         "uuid.00010203-0405-0607-0809-0a0b0c0d0e0f")

    def test_uuid_wrong_kind(self):
        """Test the placeholder for an unknown UUID sub-type."""
        page = device_id_page(uuid_descriptor(kind=2))
        self.assertEqual(Parser.extract_logical_unit_name(page, True), "??")

    def test_iscsi_name_wins(self):
        """Test that an iSCSI target makes the LU name string win over NAA."""
        page = device_id_page(naa_descriptor(),
                              scsi_name_descriptor("iqn.2003-01.org.example:lun0"),
                              iscsi_port_descriptor())
        self.assertEqual(Parser.extract_logical_unit_name(page), "iqn.2003-01.org.example:lun0")

    def test_name_string_after_naa_without_iscsi(self):
        """Test that NAA wins over a name string on non-iSCSI targets."""
        page = device_id_page(scsi_name_descriptor("naa.600A0B80001111550000"), naa_descriptor())
        self.assertEqual(Parser.extract_logical_unit_name(page), "5000c500a1b2c3d4")

    def test_name_string_fallback(self):
        """Test the SCSI name string when nothing else is present."""
        page = device_id_page(scsi_name_descriptor("eui.0011223344556677"))
        self.assertEqual(Parser.extract_logical_unit_name(page), "eui.0011223344556677")

    def test_t10_fallback(self):
        """Test the T10 vendor ID as the last resort."""
        page = device_id_page(t10_descriptor("LIO-ORG block0"))
        self.assertEqual(Parser.extract_logical_unit_name(page), "LIO-ORG block0")
        self.assertEqual(Parser.extract_logical_unit_name(page, True), "t10.LIO-ORG block0")

    def test_t10_too_short_or_binary(self):
        """Test that short or binary T10 vendor IDs give no name."""
        self.assertEqual(Parser.extract_logical_unit_name(device_id_page(t10_descriptor("SHORT"))), "")
        page = device_id_page(t10_descriptor("LIO-ORG block0", CodeSet.BINARY))
        self.assertEqual(Parser.extract_logical_unit_name(page), "")

    def test_target_port_naa_ignored(self):
        """Test that target port designators are not used as the LU name."""
        page = device_id_page(designator(DesignatorType.NAA, bytes(8), association=Association.TARGET_PORT))
        self.assertEqual(Parser.extract_logical_unit_name(page), "")

    def test_malformed_page_raises(self):
        """Test that a truncated page raises MalformedPageError."""
        with self.assertRaises(MalformedPageError):
            Parser.extract_logical_unit_name(device_id_page(naa_descriptor())[:-1])


if __name__ == '__main__':
    unittest.main()
