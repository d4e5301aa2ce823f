"""
Unit tests for LUN structure decoding

Tests the per-byte tagging of T10 luns and their hex rendering.
"""

import unittest

from lsscsi.parsers.lun import LunParser


def tags(hex_bytes: str) -> list[int]:
    return LunParser.tag_lun(bytes.fromhex(hex_bytes))


class TestTagLun(unittest.TestCase):
    """Test tag_lun over the SAM-5 addressing methods."""

    def test_single_level_peripheral(self):
        """Test a single level peripheral device address."""
        self.assertEqual(tags("0001000000000000"), [1, 1, 0, 0, 0, 0, 0, 0])

    def test_two_level_peripheral(self):
        """Test that the second level gets a separator tag."""
        self.assertEqual(tags("0122003300000000"), [1, 1, 2, 1, 0, 0, 0, 0])

    def test_four_levels(self):
        """Test a lun using all four addressing levels."""
        self.assertEqual(tags("0101010101010101"), [1, 1, 2, 1, 2, 1, 2, 1])

    def test_flat_space(self):
        """Test flat space addressing."""
        self.assertEqual(tags("4005000000000000"), [1, 1, 0, 0, 0, 0, 0, 0])

    def test_logical_unit_addressing(self):
        """Test logical unit addressing."""
        self.assertEqual(tags("8123000000000000"), [1, 1, 0, 0, 0, 0, 0, 0])

    def test_extended_two_byte(self):
        """Test a two byte extended lun."""
        self.assertEqual(tags("C1AA000000000000"), [1, 1, 0, 0, 0, 0, 0, 0])

    def test_extended_four_and_six_byte(self):
        """Test four and six byte extended luns."""
        self.assertEqual(tags("D200112200000000"), [1, 1, 1, 1, 0, 0, 0, 0])
        self.assertEqual(tags("E200112233440000"), [1, 1, 1, 1, 1, 1, 0, 0])

    def test_extended_long_form(self):
        """Test the eight byte extended lun."""
        self.assertEqual(tags("F000000000000000"), [1, 1, 1, 1, 1, 1, 1, 1])

    def test_extended_not_specified_single_byte(self):
        """Test the single byte not-specified extended form."""
        self.assertEqual(tags("FF00000000000000"), [1, 0, 0, 0, 0, 0, 0, 0])

    def test_lun_not_specified(self):
        """Test the logical unit not specified pattern."""
        self.assertEqual(tags("FFFF000000000000"), [1, 1, 0, 0, 0, 0, 0, 0])

    def test_wrong_length(self):
        """Test rejection of a lun that is not eight bytes."""
        with self.assertRaises(ValueError):
            LunParser.tag_lun(b'\x00' * 4)


class TestFormatT10(unittest.TestCase):
    """Test hex rendering with level separators."""

    def test_two_levels(self):
        """Test rendering two levels with an underscore separator."""
        self.assertEqual(LunParser.format_t10(bytes.fromhex("0122003300000000")), "0x0122_0033")

    def test_zero_lun(self):
        """Test rendering lun 0."""
        self.assertEqual(LunParser.format_t10(bytes(8)), "0x0000")

    def test_four_levels(self):
        """Test a lun using all four addressing levels."""
        self.assertEqual(LunParser.format_t10(bytes.fromhex("0101010101010101")),
                         "0x0101_0101_0101_0101")


if __name__ == '__main__':
    unittest.main()
