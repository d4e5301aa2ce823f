"""
SCSI and NVMe Device Lister

A Python library and command line tool listing the SCSI devices and
hosts, and the NVMe namespaces and controllers, that a Linux system
exposes through sysfs, in the manner of the lsscsi utility.

Version: 1.0.0
"""

from .exceptions import LsscsiError, MalformedPageError, ParseError, SysfsRootError
from .lister import ScsiLister
from .models import (
    AddressTuple,
    AttributeLine,
    ClassificationResult,
    DesignatorCandidate,
    DeviceKind,
    DirEntry,
    ListOptions,
    TransportInfo,
    TransportKind,
)

__version__ = "1.0.0"
__all__ = [
    "ScsiLister",
    "LsscsiError",
    "ParseError",
    "MalformedPageError",
    "SysfsRootError",
    "AddressTuple",
    "AttributeLine",
    "ClassificationResult",
    "DesignatorCandidate",
    "DeviceKind",
    "DirEntry",
    "ListOptions",
    "TransportInfo",
    "TransportKind",
]
