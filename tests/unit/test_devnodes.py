"""
Unit tests for device node lookups

Tests major:minor lookup, WWN and SCSI id discovery through
/dev/disk/by-id.
"""

import os
import sys
import unittest
from unittest.mock import patch

from lsscsi.devnodes import DevNodeCache, parse_dev_attribute
from lsscsi.protocol.types import DevType

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'fixtures'))

from test_helpers import FakeSysfs, StaticDevNodeCache, block_node, char_node  # noqa: E402


class TestParseDevAttribute(unittest.TestCase):

    def test_valid(self):
        """Test parsing major:minor pairs."""
        self.assertEqual(parse_dev_attribute("8:16"), (8, 16))
        self.assertEqual(parse_dev_attribute("259:0\n"), (259, 0))

    def test_invalid(self):
        """Test rejection of malformed dev attributes."""
        for value in (None, "", "8", "8:x", "a:1"):
            with self.subTest(value=value):
                self.assertIsNone(parse_dev_attribute(value))


class TestLookup(unittest.TestCase):
    """Test the major:minor to device node cache."""

    def test_newest_node_wins(self):
        """Test that the most recently changed node is returned."""
        cache = StaticDevNodeCache([
            block_node("/dev/sda", 8, 0, mtime=100.0),
            block_node("/dev/old_sda", 8, 0, mtime=50.0),
            char_node("/dev/sg0", 21, 0),
        ])
        self.assertEqual(cache.lookup(8, 0, DevType.BLOCK), "/dev/sda")
        self.assertEqual(cache.lookup(21, 0, DevType.CHAR), "/dev/sg0")

    def test_type_must_match(self):
        """Test that block and char nodes are kept apart."""
        cache = StaticDevNodeCache([char_node("/dev/sg0", 8, 0)])
        self.assertIsNone(cache.lookup(8, 0, DevType.BLOCK))

    def test_scan_happens_once(self):
        """Test that /dev is scanned only on first use."""
        cache = DevNodeCache("/nonexistent")
        with patch.object(DevNodeCache, '_scan_dev_nodes', return_value=[]) as scan:
            cache.lookup(8, 0, DevType.BLOCK)
            cache.lookup(8, 16, DevType.BLOCK)
        scan.assert_called_once()

    def test_missing_dev_dir(self):
        """Test a device directory that does not exist."""
        self.assertEqual(DevNodeCache("/nonexistent/dev").nodes, [])


class TestByIdLinks(unittest.TestCase):
    """Test WWN and SCSI id discovery."""

    def setUp(self):
        self.fake = FakeSysfs()
        self.cache = DevNodeCache(self.fake.dev_dir, self.fake.reader())

    def tearDown(self):
        self.fake.cleanup()

    def test_wwn(self):
        """Test finding a disk's WWN through disk/by-id."""
        self.fake.add_dev_file("sda")
        self.fake.add_by_id_link("wwn-0x5000c500a1b2c3d4", "sda")
        self.fake.add_by_id_link("wwn-0x5000c500a1b2c3d4-part1", "sda1")
        self.assertEqual(self.cache.wwn("sda"), "0x5000c500a1b2c3d4")
        self.assertEqual(self.cache.wwn("/dev/sda"), "0x5000c500a1b2c3d4")
        self.assertIsNone(self.cache.wwn("sda1"))
        self.assertIsNone(self.cache.wwn("sdb"))

    def test_wwn_without_by_id(self):
        """Test a missing disk/by-id directory."""
        self.assertIsNone(self.cache.wwn("sda"))

    def test_scsi_id_prefix_order(self):
        """Test the preference order of by-id link prefixes."""
        node = self.fake.add_dev_file("sda")
        self.fake.add_by_id_link("usb-Generic_Flash_123-0:0", "sda")
        self.fake.add_by_id_link("scsi-35000c500a1b2c3d4", "sda")
        self.assertEqual(self.cache.scsi_id(node), "35000c500a1b2c3d4")

    def test_scsi_id_through_holder(self):
        """Test finding the id of a disk through its holder."""
        node = self.fake.add_dev_file("sdb")
        self.fake.add_dev_file("dm-0")
        self.fake.add_by_id_link("dm-uuid-mpath-36001405abcdef", "dm-0")
        self.fake.add_dir("class/block/sdb/holders/dm-0")
        self.assertEqual(self.cache.scsi_id(node), "36001405abcdef")

    def test_scsi_id_missing(self):
        """Test a disk with no by-id link."""
        node = self.fake.add_dev_file("sdc")
        self.assertIsNone(self.cache.scsi_id(node))
        self.assertIsNone(self.cache.scsi_id(os.path.join(self.fake.dev_dir, "nope")))


if __name__ == '__main__':
    unittest.main()
