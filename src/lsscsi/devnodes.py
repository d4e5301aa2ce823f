"""
Device node lookups.

Maps sysfs class devices to their /dev special files, disks to their WWN
and device nodes to their udev SCSI id. Each directory scan happens at
most once per DevNodeCache and the results are never refreshed.
"""

import os
import stat
import logging

from .models import DevNode
from .protocol.constants import CLASS_BLOCK, DEV_DISK_BY_ID
from .protocol.types import DevType

logger = logging.getLogger(__name__)

WWN_PREFIX = "wwn-"
PARTITION_MARKER = "part"
SCSI_ID_PREFIXES = ("scsi-", "dm-uuid-mpath-", "usb-")


def parse_dev_attribute(value: str | None) -> tuple[int, int] | None:
    """Split a sysfs "dev" attribute ("8:16") into (major, minor)."""
    if not value:
        return None
    major, sep, minor = value.strip().partition(':')
    if not sep or not major.isdigit() or not minor.isdigit():
        return None
    return int(major), int(minor)


def _device_key(st: os.stat_result) -> tuple:
    # Special files are identified by the device they refer to
    if stat.S_ISBLK(st.st_mode) or stat.S_ISCHR(st.st_mode):
        return ('rdev', st.st_rdev)
    return ('inode', st.st_dev, st.st_ino)


class DevNodeCache:
    """Lazily built lookups over the device node directory."""

    def __init__(self, dev_dir: str = "/dev", sysfs=None):
        self.dev_dir = dev_dir
        self.sysfs = sysfs
        self._nodes: list[DevNode] | None = None
        self._wwns: dict[str, str] | None = None
        self._by_id: list[tuple[str, tuple]] | None = None

    @property
    def by_id_dir(self) -> str:
        return os.path.join(self.dev_dir, DEV_DISK_BY_ID)

    def _scan_dev_nodes(self) -> list[DevNode]:
        nodes = []
        try:
            names = sorted(os.listdir(self.dev_dir))
        except OSError as e:
            logger.warning(f"Cannot scan {self.dev_dir}: {e}")
            return nodes

        for name in names:
            path = os.path.join(self.dev_dir, name)
            try:
                st = os.lstat(path)
            except OSError:
                continue
            if stat.S_ISBLK(st.st_mode):
                dev_type = DevType.BLOCK
            elif stat.S_ISCHR(st.st_mode):
                dev_type = DevType.CHAR
            else:
                continue
            nodes.append(DevNode(path, os.major(st.st_rdev), os.minor(st.st_rdev),
                                 dev_type, st.st_mtime))
        logger.debug(f"Collected {len(nodes)} device nodes from {self.dev_dir}")
        return nodes

    @property
    def nodes(self) -> list[DevNode]:
        if self._nodes is None:
            self._nodes = self._scan_dev_nodes()
        return self._nodes

    def lookup(self, major: int, minor: int, dev_type: DevType) -> str | None:
        """
        Find the device node for a major:minor pair.

        When several nodes match, the most recently modified one wins.

        Returns:
            Path of the node, or None if there is none
        """
        best = None
        for node in self.nodes:
            if (node.major, node.minor, node.dev_type) != (major, minor, dev_type):
                continue
            if best is None or node.mtime > best.mtime:
                best = node
        return best.path if best else None

    def _scan_wwns(self) -> dict[str, str]:
        wwns: dict[str, str] = {}
        try:
            names = sorted(os.listdir(self.by_id_dir))
        except OSError as e:
            logger.debug(f"Cannot scan {self.by_id_dir}: {e}")
            return wwns

        for name in names:
            if not name.startswith(WWN_PREFIX) or PARTITION_MARKER in name:
                continue
            path = os.path.join(self.by_id_dir, name)
            if not os.path.islink(path):
                continue
            disk = os.path.basename(os.readlink(path))
            wwns.setdefault(disk, name[len(WWN_PREFIX):])
        return wwns

    def wwn(self, disk_name: str) -> str | None:
        """WWN of a disk given its kernel name (e.g. "sda")."""
        if self._wwns is None:
            self._wwns = self._scan_wwns()
        return self._wwns.get(os.path.basename(disk_name))

    def _scan_by_id(self) -> list[tuple[str, tuple]]:
        entries = []
        try:
            names = sorted(os.listdir(self.by_id_dir))
        except OSError as e:
            logger.debug(f"Cannot scan {self.by_id_dir}: {e}")
            return entries
        for name in names:
            try:
                st = os.stat(os.path.join(self.by_id_dir, name))
            except OSError:
                continue
            entries.append((name, _device_key(st)))
        return entries

    def scsi_id(self, dev_node: str, _seen: set[str] | None = None) -> str | None:
        """
        udev SCSI id of a device node, from the disk/by-id symlinks.

        Links named scsi-*, dm-uuid-mpath-* and usb-* are tried in that
        order. Without a match, the holders of the block device (for
        example a multipath map) are tried in turn.

        Returns:
            The link name without its prefix, or None
        """
        seen = _seen if _seen is not None else set()
        if dev_node in seen:
            return None
        seen.add(dev_node)

        try:
            key = _device_key(os.stat(dev_node))
        except OSError:
            return None

        if self._by_id is None:
            self._by_id = self._scan_by_id()
        for prefix in SCSI_ID_PREFIXES:
            for name, entry_key in self._by_id:
                if entry_key == key and name.startswith(prefix):
                    return name[len(prefix):]

        if self.sysfs is None:
            return None
        for holder in self.sysfs.list_names(CLASS_BLOCK, os.path.basename(dev_node), "holders"):
            found = self.scsi_id(os.path.join(self.dev_dir, holder), seen)
            if found:
                return found
        return None
