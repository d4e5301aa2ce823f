"""
Unit tests for the directory classifier

Tests rule precedence on plain entry lists and class device resolution
on a synthetic sysfs tree.
"""

import os
import sys
import unittest

from lsscsi.classifier import PRIMARY_RULES, DirectoryClassifier
from lsscsi.models import DeviceKind, DirEntry
from lsscsi.protocol.types import DevType

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'fixtures'))

from test_helpers import FakeSysfs  # noqa: E402


def dirs(*names):
    return [DirEntry(name, is_dir=True) for name in names]


def links(*names):
    return [DirEntry(name, is_dir=False, is_symlink=True) for name in names]


class TestClassifyEntries(unittest.TestCase):
    """Test classification from directory listings alone."""

    def test_block_beats_generic(self):
        """Test that a block device wins over the sg device."""
        result = DirectoryClassifier.classify_entries(dirs("scsi_generic", "block", "power"))
        self.assertEqual(result.kind, DeviceKind.BLOCK)
        self.assertEqual(result.segment, "block")
        self.assertEqual(result.dev_type, DevType.BLOCK)

    def test_changer_beats_block(self):
        """Test that a medium changer wins over a block device."""
        result = DirectoryClassifier.classify_entries(dirs("block") + links("scsi_changer:ch0"))
        self.assertEqual(result.kind, DeviceKind.MEDIUM_CHANGER)
        self.assertEqual(result.dev_type, DevType.CHAR)

    def test_generic_beats_enclosure(self):
        """Test that the sg device wins over an enclosure."""
        result = DirectoryClassifier.classify_entries(dirs("enclosure_device:slot1", "scsi_generic"))
        self.assertEqual(result.kind, DeviceKind.GENERIC)

    def test_enclosure_alone(self):
        """Test an enclosure with nothing else attached."""
        result = DirectoryClassifier.classify_entries(dirs("enclosure_device:slot1"))
        self.assertEqual(result.kind, DeviceKind.ENCLOSURE)

    def test_old_style_tape_links(self):
        """Test that only the st<n> link of the old tape layout is picked."""
        entries = links("scsi_tape:nst0", "scsi_tape:st0a", "scsi_tape:st0")
        result = DirectoryClassifier.classify_entries(entries)
        self.assertEqual(result.kind, DeviceKind.TAPE)
        self.assertEqual(result.segment, "scsi_tape:st0")

    def test_tape_mode_variant_excluded(self):
        """Test that tape mode aliases are not taken as the tape device."""
        result = DirectoryClassifier.classify_entries(links("scsi_tape:mtst7"))
        self.assertEqual(result.kind, DeviceKind.NONE)

    def test_single_tape_link(self):
        """Test a lone scsi_tape:st<n> link."""
        result = DirectoryClassifier.classify_entries(links("scsi_tape:st7"))
        self.assertEqual(result.kind, DeviceKind.TAPE)

    def test_onstream_tape(self):
        """Test an OnStream tape link."""
        result = DirectoryClassifier.classify_entries(links("onstream_tape:os0"))
        self.assertEqual(result.kind, DeviceKind.TAPE)

    def test_nothing_found(self):
        """Test a directory with no device children."""
        result = DirectoryClassifier.classify_entries(dirs("power", "driver", ".hidden"))
        self.assertFalse(result.found)
        self.assertIsNone(result.segment)

    def test_dot_entries_and_files_ignored(self):
        """Test that hidden entries and plain files are skipped."""
        entries = [DirEntry(".block", is_dir=True), DirEntry("block", is_dir=False)]
        self.assertFalse(DirectoryClassifier.classify_entries(entries).found)

    def test_nvme_namespaces(self):
        """Test that every namespace below a controller is reported, by name."""
        entries = dirs("nvme0n2", "nvme0n1", "nvme0c1n1", "power", "hwmon0")
        results = DirectoryClassifier.nvme_namespaces(entries)
        self.assertEqual([result.segment for result in results], ["nvme0c1n1", "nvme0n1", "nvme0n2"])
        self.assertTrue(all(result.kind == DeviceKind.NVME_NAMESPACE for result in results))
        self.assertEqual(results[0].dev_type, DevType.BLOCK)

    def test_nvme_controller_listing(self):
        """Test that a controller directory classifies as an NVMe namespace."""
        result = DirectoryClassifier.classify_entries(dirs("power", "nvme1n1", "hwmon1"))
        self.assertEqual(result.kind, DeviceKind.NVME_NAMESPACE)
        self.assertEqual(result.segment, "nvme1n1")

    def test_scsi_rules_only(self):
        """Test that restricting the rules ignores namespaces."""
        result = DirectoryClassifier.classify_entries(dirs("nvme1n1"), PRIMARY_RULES)
        self.assertFalse(result.found)


class TestClassifyTree(unittest.TestCase):
    """Test resolution of the class device below a device directory."""

    def setUp(self):
        self.fake = FakeSysfs()
        self.classifier = DirectoryClassifier(self.fake.reader())

    def tearDown(self):
        self.fake.cleanup()

    def test_block_directory_descends(self):
        """Test that a block directory resolves to the disk below it."""
        rel = self.fake.add_scsi_device("0:0:0:0", block="sda", generic="sg0")
        result = self.classifier.classify(self.fake.path(rel))
        self.assertEqual(result.kind, DeviceKind.BLOCK)
        self.assertEqual(result.segment, "block/sda")

    def test_generic_only(self):
        """Test resolving the sg device alone."""
        rel = self.fake.add_scsi_device("0:0:0:0", block="sda", generic="sg0")
        result = self.classifier.generic(self.fake.path(rel))
        self.assertEqual(result.segment, "scsi_generic/sg0")

    def test_tape_directory_picks_st_node(self):
        """Test that a scsi_tape directory resolves to its st<n> child."""
        rel = self.fake.add_scsi_device("0:0:1:0", dev_type=1)
        for name in ("nst0", "st0", "st0a", "st0l"):
            self.fake.add_dir(f"{rel}/scsi_tape/{name}")
        result = self.classifier.primary(self.fake.path(rel))
        self.assertEqual(result.kind, DeviceKind.TAPE)
        self.assertEqual(result.segment, "scsi_tape/st0")

    def test_symlink_is_the_class_device(self):
        """Test that a symlinked child is not descended into."""
        rel = self.fake.add_scsi_device("0:0:0:0")
        self.fake.add_attr("class/scsi_generic/sg3/dev", "21:3")
        self.fake.add_symlink(f"{rel}/scsi_generic:sg3", "class/scsi_generic/sg3")
        result = self.classifier.generic(self.fake.path(rel))
        self.assertEqual(result.segment, "scsi_generic:sg3")

    def test_empty_class_directory(self):
        """Test a block directory with nothing below it."""
        rel = self.fake.add_scsi_device("0:0:0:0")
        self.fake.add_dir(f"{rel}/block")
        result = self.classifier.primary(self.fake.path(rel))
        self.assertEqual(result.kind, DeviceKind.BLOCK)
        self.assertIsNone(result.segment)

    def test_missing_directory(self):
        """Test classifying a directory that does not exist."""
        result = self.classifier.classify(self.fake.path("bus/scsi/devices/9:9:9:9"))
        self.assertFalse(result.found)

    def test_enclosure(self):
        """Test resolving an enclosure component."""
        rel = self.fake.add_scsi_device("0:0:5:0", dev_type=13)
        self.fake.add_dir(f"{rel}/enclosure_device:SLOT 1")
        self.assertEqual(self.classifier.enclosure(self.fake.path(rel)).kind, DeviceKind.ENCLOSURE)
        self.assertEqual(self.classifier.classify(self.fake.path(rel)).kind, DeviceKind.ENCLOSURE)
        self.assertEqual(self.classifier.enclosure(self.fake.path(rel)).segment, "enclosure_device:SLOT 1")

    def test_nvme_namespace_is_not_descended(self):
        """Test that a namespace directory is itself the class device."""
        self.fake.add_nvme_controller(0)
        self.fake.add_nvme_namespace(0, 1, dev="259:0")
        result = self.classifier.classify(self.fake.path("class/nvme/nvme0"))
        self.assertEqual(result.kind, DeviceKind.NVME_NAMESPACE)
        self.assertEqual(result.segment, "nvme0n1")


if __name__ == '__main__':
    unittest.main()
