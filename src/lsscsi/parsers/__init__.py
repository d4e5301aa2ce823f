"""
SCSI listing parsing module.

This module provides parsers for the address tuples, LUN encodings and
VPD pages found in sysfs.
"""

from .base import BaseParser
from .address import AddressParser
from .lun import LunParser
from .device_id import DeviceIdentificationParser

__all__ = [
    'BaseParser',
    'AddressParser',
    'LunParser',
    'DeviceIdentificationParser'
]
