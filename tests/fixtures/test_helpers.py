"""
Test Helper Functions

Builders for a synthetic sysfs and /dev tree under a temporary directory,
shared by the classifier, transport, device node and lister tests.
"""

import os
import tempfile

from lsscsi.devnodes import DevNodeCache
from lsscsi.models import DevNode
from lsscsi.protocol.types import DevType
from lsscsi.sysfs import SysfsReader


class FakeSysfs:
    """
    A throwaway sysfs root plus a device directory.

    Paths given to the add_* helpers are relative to the sysfs root.
    Attribute files get a trailing newline as the kernel writes them.
    """

    def __init__(self):
        self._tmp = tempfile.TemporaryDirectory(prefix="fake_sysfs_")
        self.base = self._tmp.name
        self.root = os.path.join(self.base, "sys")
        self.dev_dir = os.path.join(self.base, "dev")
        os.makedirs(self.root)
        os.makedirs(self.dev_dir)

    def cleanup(self):
        self._tmp.cleanup()

    def path(self, rel: str) -> str:
        return os.path.join(self.root, rel)

    def reader(self) -> SysfsReader:
        return SysfsReader(self.root)

    def add_dir(self, rel: str) -> str:
        full = self.path(rel)
        os.makedirs(full, exist_ok=True)
        return full

    def add_attr(self, rel: str, value: str) -> str:
        full = self.path(rel)
        os.makedirs(os.path.dirname(full), exist_ok=True)
        with open(full, 'w') as f:
            f.write(f"{value}\n")
        return full

    def add_attrs(self, rel_dir: str, **values) -> None:
        for name, value in values.items():
            self.add_attr(os.path.join(rel_dir, name), str(value))

    def add_binary(self, rel: str, data: bytes) -> str:
        full = self.path(rel)
        os.makedirs(os.path.dirname(full), exist_ok=True)
        with open(full, 'wb') as f:
            f.write(data)
        return full

    def add_symlink(self, rel: str, target_rel: str) -> str:
        """Symlink rel -> target_rel, both relative to the sysfs root."""
        full = self.path(rel)
        os.makedirs(os.path.dirname(full), exist_ok=True)
        os.symlink(self.path(target_rel), full)
        return full

    def add_scsi_device(self, hctl: str, dev_type: int = 0, vendor: str = "ATA",
                        model: str = "Fake Disk", rev: str = "1.0",
                        block: str | None = None, block_dev: str = "8:0",
                        generic: str | None = None, generic_dev: str = "21:0",
                        **attrs) -> str:
        """
        A device directory under bus/scsi/devices with optional block and sg devices.

        Returns the relative path of the device directory.
        """
        rel = f"bus/scsi/devices/{hctl}"
        self.add_attrs(rel, type=dev_type, vendor=vendor, model=model, rev=rev, **attrs)
        if block:
            self.add_attr(f"{rel}/block/{block}/dev", block_dev)
        if generic:
            self.add_attr(f"{rel}/scsi_generic/{generic}/dev", generic_dev)
        return rel

    def add_scsi_host(self, number: int, proc_name: str | None = "fake_hba", **attrs) -> str:
        rel = f"class/scsi_host/host{number}"
        self.add_dir(rel)
        if proc_name is not None:
            self.add_attr(f"{rel}/proc_name", proc_name)
        self.add_attrs(rel, **attrs)
        return rel

    def add_nvme_controller(self, index: int, cntlid: int = 1, model: str = "Fake NVMe",
                            serial: str = "S123", firmware_rev: str = "1.0",
                            transport: str = "pcie", address: str = "0000:01:00.0") -> str:
        rel = f"class/nvme/nvme{index}"
        self.add_attrs(rel, cntlid=cntlid, model=model, serial=serial,
                       firmware_rev=firmware_rev, transport=transport, address=address)
        return rel

    def add_nvme_namespace(self, index: int, ns: int, dev: str = "259:0",
                           size: int | None = None, wwid: str | None = None) -> str:
        rel = f"class/nvme/nvme{index}/nvme{index}n{ns}"
        self.add_attrs(rel, nsid=ns, dev=dev)
        if size is not None:
            self.add_attr(f"{rel}/size", str(size))
        if wwid is not None:
            self.add_attr(f"{rel}/wwid", wwid)
        return rel

    def add_dev_file(self, name: str) -> str:
        """A regular file standing in for a device node."""
        full = os.path.join(self.dev_dir, name)
        os.makedirs(os.path.dirname(full), exist_ok=True)
        with open(full, 'w'):
            pass
        return full

    def add_by_id_link(self, name: str, dev_name: str) -> str:
        """dev/disk/by-id/<name> -> ../../<dev_name>"""
        by_id = os.path.join(self.dev_dir, "disk", "by-id")
        os.makedirs(by_id, exist_ok=True)
        full = os.path.join(by_id, name)
        os.symlink(os.path.join("..", "..", dev_name), full)
        return full


class StaticDevNodeCache(DevNodeCache):
    """DevNodeCache whose node list is given rather than scanned (no mknod needed)."""

    def __init__(self, nodes=None, dev_dir: str = "/dev", sysfs=None):
        super().__init__(dev_dir, sysfs)
        self._static_nodes = list(nodes or [])

    def _scan_dev_nodes(self):
        return list(self._static_nodes)


def block_node(path: str, major: int, minor: int, mtime: float = 0.0) -> DevNode:
    return DevNode(path, major, minor, DevType.BLOCK, mtime)


def char_node(path: str, major: int, minor: int, mtime: float = 0.0) -> DevNode:
    return DevNode(path, major, minor, DevType.CHAR, mtime)
