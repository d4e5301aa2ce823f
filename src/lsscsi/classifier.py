"""
Directory Classifier

Decides what kind of device sits behind a SCSI device directory
(/sys/bus/scsi/devices/h:c:t:l) or an NVMe controller directory by
looking at the names of its children, and where below that directory
the class device holding the "dev" attribute lives.
"""

import re
import logging
from typing import Callable

from .models import ClassificationResult, DeviceKind, DirEntry

logger = logging.getLogger(__name__)

_TAPE_NODE = re.compile(r'^st[0-9]+$')
_NVME_NAMESPACE = re.compile(r'^nvme[0-9]+(c[0-9]+)?n[0-9]+$')

# Kinds whose matching child is itself the device, never a container
_SELF_CONTAINED = (DeviceKind.ENCLOSURE, DeviceKind.NVME_NAMESPACE)


def _trailing_digit(name: str) -> bool:
    return name[-1:].isdigit()


# Primary device rules, highest precedence first
PRIMARY_RULES: list[tuple[DeviceKind, Callable[[str], bool]]] = [
    (DeviceKind.MEDIUM_CHANGER, lambda name: name.startswith("scsi_changer")),
    (DeviceKind.BLOCK, lambda name: name.startswith("block")),
    (DeviceKind.TAPE, lambda name: name in ("tape", "scsi_tape")),
    # Only st<n>; the mode aliases (st<n>l, st<n>m, st<n>a) and nst<n> are skipped
    (DeviceKind.TAPE, lambda name: name.startswith("scsi_tape:st") and _trailing_digit(name)),
    (DeviceKind.TAPE, lambda name: name.startswith("onstream_tape:os") and _trailing_digit(name)),
]

GENERIC_RULES: list[tuple[DeviceKind, Callable[[str], bool]]] = [
    (DeviceKind.GENERIC, lambda name: name.startswith("scsi_generic")),
    (DeviceKind.GENERIC, lambda name: name == "generic"),
]

ENCLOSURE_RULES: list[tuple[DeviceKind, Callable[[str], bool]]] = [
    (DeviceKind.ENCLOSURE, lambda name: name.startswith("enclosure_device")),
]


NVME_NAMESPACE_RULES: list[tuple[DeviceKind, Callable[[str], bool]]] = [
    (DeviceKind.NVME_NAMESPACE, lambda name: _NVME_NAMESPACE.match(name) is not None),
]

# Full precedence used when classifying a directory from scratch
ALL_RULES = PRIMARY_RULES + GENERIC_RULES + ENCLOSURE_RULES + NVME_NAMESPACE_RULES


def _candidates(entries: list[DirEntry]) -> list[DirEntry]:
    return sorted((entry for entry in entries if entry.is_candidate),
                  key=lambda entry: entry.name)


def _first_match(entries: list[DirEntry],
                 rules: list[tuple[DeviceKind, Callable[[str], bool]]]) -> tuple[DeviceKind, DirEntry] | None:
    candidates = _candidates(entries)
    for kind, predicate in rules:
        for entry in candidates:
            if predicate(entry.name):
                return kind, entry
    return None


class DirectoryClassifier:
    """
    Classifies device directories read through a SysfsReader.

    The static methods work on a plain list of DirEntry and never touch
    the filesystem.
    """

    def __init__(self, sysfs):
        self.sysfs = sysfs

    @staticmethod
    def classify_entries(entries: list[DirEntry], rules=ALL_RULES) -> ClassificationResult:
        """
        Classify a device directory from its children alone.

        Block, tape and changer devices take precedence over the generic
        device, which takes precedence over an enclosure device. NVMe
        namespaces only appear below NVMe controllers. The segment is the
        matching child's name.
        """
        match = _first_match(entries, rules)
        if match is None:
            return ClassificationResult(DeviceKind.NONE)
        kind, entry = match
        return ClassificationResult(kind, entry.name)

    @staticmethod
    def nvme_namespaces(entries: list[DirEntry]) -> list[ClassificationResult]:
        """Every namespace (nvme0n1, nvme0c1n1...) below an NVMe controller directory, by name."""
        results = []
        for entry in _candidates(entries):
            for kind, predicate in NVME_NAMESPACE_RULES:
                if predicate(entry.name):
                    results.append(ClassificationResult(kind, entry.name))
                    break
        return results

    def _resolve(self, path: str, kind: DeviceKind, entry: DirEntry) -> ClassificationResult:
        # A real directory (e.g. "block", "scsi_generic") holds the class
        # device one level down; a symlink, namespace or enclosure component is
        # the entry itself
        if entry.is_symlink or not entry.is_dir or kind in _SELF_CONTAINED:
            return ClassificationResult(kind, entry.name)

        wanted = _TAPE_NODE.match if entry.name == "scsi_tape" else None
        for child in self.sysfs.list_children(path, entry.name) or []:
            if child.is_candidate and (wanted is None or wanted(child.name)):
                return ClassificationResult(kind, f"{entry.name}/{child.name}")

        logger.warning(f"No class device found below {path}/{entry.name}")
        return ClassificationResult(kind)

    def classify(self, path: str, rules=ALL_RULES) -> ClassificationResult:
        """
        Classify a device directory and resolve its class device.

        Args:
            path: SCSI device or NVMe controller directory
            rules: Ordered (kind, predicate) pairs, first match wins

        Returns:
            ClassificationResult whose segment, joined to path, is the
            directory holding the "dev" attribute (None if unresolved)
        """
        entries = self.sysfs.list_children(path)
        if entries is None:
            return ClassificationResult(DeviceKind.NONE)
        match = _first_match(entries, rules)
        if match is None:
            return ClassificationResult(DeviceKind.NONE)
        return self._resolve(path, *match)

    def primary(self, path: str) -> ClassificationResult:
        """Resolve only the changer, block or tape device."""
        return self.classify(path, PRIMARY_RULES)

    def generic(self, path: str) -> ClassificationResult:
        """Resolve only the SCSI generic device."""
        return self.classify(path, GENERIC_RULES)

    def enclosure(self, path: str) -> ClassificationResult:
        """Resolve only the enclosure device."""
        return self.classify(path, ENCLOSURE_RULES)
