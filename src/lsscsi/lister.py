"""
SCSI / NVMe Lister

Walks the sysfs tree and renders the device and host listings. All
output is returned as lines of text; printing is left to the caller.
"""

import os
import logging
from dataclasses import dataclass

from .classifier import DirectoryClassifier
from .devnodes import DevNodeCache, parse_dev_attribute
from .exceptions import MalformedPageError, ParseError
from .models import AddressTuple, ClassificationResult, ListOptions, TransportInfo, TransportKind
from .parsers.address import AddressParser
from .parsers.device_id import DeviceIdentificationParser
from .protocol.constants import (
    BUS_SCSI_DEVS,
    CLASS_NVME,
    CLASS_SCSI_HOST,
    HCTL_COLUMN_WIDTH,
    NVME_HOST_NUM,
    SCSI_DEVICE_TYPE_MAX,
    SCSI_DEVICE_TYPES,
    SCSI_SHORT_DEVICE_TYPES,
    SECTOR_SHIFT,
    VPD_MAX_READ,
    VPD_MIN_PAGE_LEN,
    VPD_PAGE_FILE,
)
from .protocol.types import DevType, SizeUnits
from .protocol.utils import string_get_size
from .sysfs import SysfsReader
from .transport import TransportResolver

NULL_PROC_NAMES = ("<NULL>", "(null)")
LU_NAME_WIDTH = 32
TRANSPORT_WIDTH = 30

# Attributes of the --long device and host output
DEVICE_LONG_ATTRS = ("state", "queue_depth", "scsi_level", "type", "device_blocked", "timeout")
DEVICE_LONG2_ATTRS = ("iocounterbits", "iodone_cnt", "ioerr_cnt", "iorequest_cnt")
DEVICE_LIST_ATTRS = (
    "device_blocked", "iocounterbits", "iodone_cnt", "ioerr_cnt", "iorequest_cnt",
    "queue_depth", "queue_type", "scsi_level", "state", "timeout", "type",
)
HOST_LIST_ATTRS = (
    "can_queue", "cmd_per_lun", "host_busy", "sg_tablesize", "state",
    "unchecked_isa_dma", "unique_id",
)


@dataclass
class DeviceEntry:
    """A bus/scsi/devices name and its parsed address (None if malformed)."""

    name: str
    hctl: AddressTuple | None = None

    @property
    def sort_key(self):
        if self.hctl is None:
            return (0, (), self.name)
        return (1, self.hctl.sentinels(), self.name)


class ScsiLister:
    """
    Produces the lsscsi style listings for one set of options.

    Example:
        >>> lister = ScsiLister(ListOptions(size=1))
        >>> for line in lister.list_devices():
        ...     print(line)
    """

    def __init__(self, options: ListOptions | None = None, sysfs: SysfsReader | None = None,
                 dev_nodes: DevNodeCache | None = None):
        self.options = options or ListOptions()
        self.sysfs = sysfs or SysfsReader(self.options.sysfsroot)
        self.dev_nodes = dev_nodes or DevNodeCache(self.options.dev_dir, self.sysfs)
        self.classifier = DirectoryClassifier(self.sysfs)
        self.transports = TransportResolver(self.sysfs, self.classifier)
        self._logger = logging.getLogger(__name__)

    def run(self) -> list[str]:
        """Host listing with --hosts, device listing otherwise."""
        if self.options.hosts:
            return self.list_hosts()
        return self.list_devices()

    # Device listing

    def device_entries(self) -> list[DeviceEntry] | None:
        """
        Names under bus/scsi/devices that describe devices, in listing order.

        Returns:
            Sorted entries, or None when the directory cannot be read
        """
        children = self.sysfs.list_children(BUS_SCSI_DEVS)
        if children is None:
            return None

        filt = self.options.hctl_filter
        entries = []
        for child in children:
            name = child.name
            if name.startswith(("host", "target")) or ':' not in name:
                continue
            try:
                hctl = AddressTuple.parse(name)
            except ParseError as e:
                self._logger.warning(f"Cannot parse device name {name!r}: {e}")
                if self.options.filter_active:
                    continue
                entries.append(DeviceEntry(name, None))
                continue
            if hctl.matches(filt):
                entries.append(DeviceEntry(name, hctl))
        return sorted(entries, key=lambda entry: entry.sort_key)

    def list_devices(self) -> list[str]:
        """SCSI devices followed by NVMe namespaces."""
        opts = self.options
        lines = []
        entries = self.device_entries()
        if entries is None:
            self._logger.warning(f"Cannot read {self.sysfs.path(BUS_SCSI_DEVS)}, "
                                 "SCSI mid level module may not be loaded")
            entries = []
        if opts.classic:
            lines.append(f"Attached devices: {'' if entries else 'none'}".rstrip())

        for entry in entries:
            if opts.classic:
                lines.extend(self._classic_device_lines(entry))
            else:
                lines.extend(self._device_lines(entry))

        if opts.nvme and not opts.classic:
            lines.extend(self.list_nvme_namespaces())
        return lines

    def _read_type(self, path: str) -> tuple[int | None, str]:
        value = self.sysfs.read_attribute(path, "type")
        if value is None:
            return None, "type?"
        peripheral_type = AddressParser.to_signed_int(value)
        if peripheral_type is None:
            return None, "type??"
        if not 0 <= peripheral_type <= SCSI_DEVICE_TYPE_MAX:
            return None, "type???"
        return peripheral_type, SCSI_SHORT_DEVICE_TYPES[peripheral_type]

    def _node_name(self, class_dir: str, dev_type: DevType) -> str | None:
        if self.options.kname:
            return os.path.join(self.options.dev_dir, os.path.basename(self.sysfs.realpath(class_dir)))
        dev = parse_dev_attribute(self.sysfs.read_attribute(class_dir, "dev"))
        if dev is None:
            return None
        return self.dev_nodes.lookup(dev[0], dev[1], dev_type)

    def _maj_min(self, class_dir: str) -> str:
        value = self.sysfs.read_attribute(class_dir, "dev")
        return f"[{value}]" if value is not None else "[dev?]"

    def lu_name(self, path: str, want_prefix: bool = False) -> str:
        """Logical unit name from the device's vpd_pg83 attribute, "" if none."""
        page = self.sysfs.read_binary(path, VPD_PAGE_FILE, limit=VPD_MAX_READ)
        if page is None or len(page) < VPD_MIN_PAGE_LEN:
            return ""
        try:
            return DeviceIdentificationParser.extract_logical_unit_name(page, want_prefix)
        except MalformedPageError as e:
            self._logger.warning(f"{path}: bad Device Identification page: {e}")
            return ""

    def _lu_name_column(self, path: str) -> str:
        name = self.lu_name(path, want_prefix=self.options.unit > 1)
        if not name:
            name = "none"
        elif self.options.unit == 1:
            name = name[:LU_NAME_WIDTH]
        return f"{name:<{LU_NAME_WIDTH}}  "

    def _device_lines(self, entry: DeviceEntry) -> list[str]:
        opts = self.options
        hctl = entry.hctl
        path = self.sysfs.path(BUS_SCSI_DEVS, entry.name)

        if hctl is not None:
            head = hctl.bracketed(opts.lun_format)
        else:
            head = f"[{entry.name}]".ljust(HCTL_COLUMN_WIDTH)
        peripheral_type, type_name = self._read_type(path)
        parts = [head, f"{type_name:<7} "]

        info = TransportInfo(TransportKind.UNKNOWN)
        if opts.transport and hctl is not None:
            info = self.transports.resolve_device(hctl)

        if opts.wwn:
            pass
        elif opts.transport:
            parts.append(f"{info.display:<{TRANSPORT_WIDTH}}  ")
        elif opts.unit:
            parts.append(self._lu_name_column(path))
        else:
            vendor = self.sysfs.read_attribute(path, "vendor")
            model = self.sysfs.read_attribute(path, "model")
            rev = self.sysfs.read_attribute(path, "rev")
            parts.append(f"{vendor:<8} " if vendor is not None else "vendor?  ")
            parts.append(f"{model:<16} " if model is not None else "model?           ")
            parts.append(f"{rev:<4}  " if rev is not None else "rev?  ")

        primary = self.classifier.primary(path)
        if primary.found and primary.segment:
            class_dir = os.path.join(path, primary.segment)
            if opts.wwn:
                wwn = None
                if primary.dev_type == DevType.BLOCK:
                    wwn = self.dev_nodes.wwn(os.path.basename(self.sysfs.realpath(class_dir)))
                parts.append(f"{wwn or '':<{TRANSPORT_WIDTH}}  ")
            node = self._node_name(class_dir, primary.dev_type)
            parts.append(f"{node or '-':<9}")
            if opts.dev_maj_min:
                parts.append(self._maj_min(class_dir))
            if opts.scsi_id:
                scsi_id = self.dev_nodes.scsi_id(node) if node else None
                parts.append(f"  {scsi_id or '-'}")
        else:
            if opts.wwn:
                parts.append(" " * (TRANSPORT_WIDTH + 2))
            parts.append(f"{'-':<9}")
            if opts.scsi_id:
                parts.append("  -")

        if opts.generic:
            parts.append(self._generic_column(path))
        if opts.protection:
            parts.append(self._protection_columns(path))
        if opts.protmode:
            parts.append(self._protmode_column(path))
        if opts.size:
            parts.append(self._size_columns(path, peripheral_type))

        lines = ["".join(parts).rstrip()]
        if opts.long_opt:
            lines.extend(self._long_device_lines(path, hctl, info))
        if opts.verbose:
            lines.append(f"  dir: {path}  [{self.sysfs.realpath(path)}]")
        return lines

    def _generic_column(self, path: str) -> str:
        generic = self.classifier.generic(path)
        if not (generic.found and generic.segment):
            return f"  {'-':<9}"
        class_dir = os.path.join(path, generic.segment)
        node = self._node_name(class_dir, DevType.CHAR)
        column = f"  {node or '-':<9}"
        if self.options.dev_maj_min:
            column += self._maj_min(class_dir)
        return column

    def _sub_dir(self, path: str, marker: str) -> str | None:
        # "scsi_disk/h:c:t:l" on current kernels, "scsi_disk:h:c:t:l" on old ones
        for child in self.sysfs.list_children(path) or []:
            if not child.is_candidate or marker not in child.name:
                continue
            sub = os.path.join(path, child.name)
            if child.is_dir and not child.is_symlink:
                names = self.sysfs.list_names(sub)
                return os.path.join(sub, names[0]) if names else None
            return sub
        return None

    def _protection_columns(self, path: str) -> str:
        sd_dir = self._sub_dir(path, "scsi_disk")
        ptype = self.sysfs.read_attribute(sd_dir, "protection_type") if sd_dir else None
        if ptype is None or ptype.startswith("0"):
            column = f"  {'-':<9}"
        else:
            column = f"  {'DIF/Type' + ptype:<9}"

        block_dir = self._sub_dir(path, "block")
        integrity = self.sysfs.read_attribute(block_dir, "integrity", "format") if block_dir else None
        return column + f"  {integrity or '-':<16}"

    def _protmode_column(self, path: str) -> str:
        sd_dir = self._sub_dir(path, "scsi_disk")
        mode = self.sysfs.read_attribute(sd_dir, "protection_mode") if sd_dir else None
        if mode is None or mode == "none":
            mode = "-"
        return f"  {mode:<4}"

    def _disk_size(self, class_dir: str | None) -> int:
        if class_dir is None:
            return 0
        blocks = AddressParser.to_unsigned_int(self.sysfs.read_attribute(class_dir, "size") or "")
        return (blocks or 0) << SECTOR_SHIFT

    def _format_size(self, size: int) -> str:
        if size <= 0:
            column = f"  {'-':>6}"
            return column + f"  {'-':>7}" if self.options.size > 1 else column
        column = f"  {string_get_size(size, SizeUnits.SI):>6}"
        if self.options.size > 1:
            column += f"  {string_get_size(size, SizeUnits.BINARY):>7}"
        return column

    def _size_columns(self, path: str, peripheral_type: int | None) -> str:
        size = 0
        if peripheral_type == 0:
            size = self._disk_size(self._sub_dir(path, "block"))
        return self._format_size(size)

    def _long_device_lines(self, path: str, hctl: AddressTuple | None, info: TransportInfo) -> list[str]:
        opts = self.options
        if opts.transport:
            if hctl is None:
                return []
            return [line.render() for line in self.transports.describe_device(hctl, info)]

        values = {name: self.sysfs.read_attribute(path, name) for name in DEVICE_LIST_ATTRS}

        if opts.long_opt >= 3:
            lines = []
            for name in DEVICE_LIST_ATTRS:
                if values[name] is not None:
                    lines.append(f"  {name}={values[name]}")
                elif opts.verbose:
                    lines.append(f"  {name}=?")
            return lines

        def pairs(names):
            return " ".join(f"{name}={'?' if values[name] is None else values[name]}" for name in names)

        lines = [f"  {pairs(DEVICE_LONG_ATTRS)}"]
        if opts.long_opt == 2:
            lines.append(f"  {pairs(DEVICE_LONG2_ATTRS)}")
            lines.append(f"  {pairs(('queue_type',))}")
        return lines

    def _classic_device_lines(self, entry: DeviceEntry) -> list[str]:
        opts = self.options
        path = self.sysfs.path(BUS_SCSI_DEVS, entry.name)
        h, c, t, lun = (entry.hctl or AddressTuple.unset()).sentinels()

        vendor = self.sysfs.read_attribute(path, "vendor")
        model = self.sysfs.read_attribute(path, "model")
        rev = self.sysfs.read_attribute(path, "rev")
        lines = [
            f"Host: scsi{h} Channel: {c:02d} Target: {t:02d} Lun: {lun:02d}",
            (f"  Vendor: {vendor if vendor is not None else '?':<8}"
             f" Model: {model if model is not None else '?':<16}"
             f" Rev: {rev if rev is not None else '?':<4}").rstrip(),
        ]

        value = self.sysfs.read_attribute(path, "type")
        number = AddressParser.to_signed_int(value) if value is not None else None
        if value is None:
            type_name = "?"
        elif number is None:
            type_name = "??"
        elif not 0 <= number <= SCSI_DEVICE_TYPE_MAX:
            type_name = "???"
        else:
            type_name = SCSI_DEVICE_TYPES[number]

        value = self.sysfs.read_attribute(path, "scsi_level")
        level = AddressParser.to_signed_int(value) if value is not None else None
        if value is None:
            revision = "?"
        elif level is None:
            revision = "??"
        else:
            revision = f"{(level - 1) if level != 1 else 1:02x}"
        lines.append(f"  Type:   {type_name:<33}ANSI SCSI revision: {revision}")

        if opts.generic:
            generic = self.classifier.generic(path)
            node = None
            if generic.found and generic.segment:
                node = self._node_name(os.path.join(path, generic.segment), DevType.CHAR)
            lines.append(node or "-")
        if opts.long_opt:
            info = TransportInfo(TransportKind.UNKNOWN)
            if opts.transport and entry.hctl is not None:
                info = self.transports.resolve_device(entry.hctl)
            lines.extend(self._long_device_lines(path, entry.hctl, info))
        if opts.verbose:
            lines.append(f"  dir: {path}")
        return lines

    # NVMe namespaces

    def nvme_controllers(self) -> list[tuple[int, str]]:
        """(controller index, name) of each nvme<X> under class/nvme, sorted by index."""
        controllers = []
        for name in self.sysfs.list_names(CLASS_NVME):
            index = AddressParser.parse_nvme_controller(name)
            if index is not None:
                controllers.append((index, name))
        return sorted(controllers)

    def _controller_tuple(self, index: int, name: str, nsid: int | None = None) -> AddressTuple:
        cntlid = AddressParser.to_unsigned_int(self.sysfs.read_attribute(CLASS_NVME, name, "cntlid") or "")
        return AddressTuple.for_nvme(index, cntlid if cntlid is not None else 0, nsid)

    def list_nvme_namespaces(self) -> list[str]:
        """One line per NVMe namespace, in address order."""
        opts = self.options
        rows = []
        for index, controller in self.nvme_controllers():
            children = self.sysfs.list_children(CLASS_NVME, controller) or []
            namespaces = self.classifier.nvme_namespaces(children)
            if not namespaces:
                continue
            info = self.transports.resolve_nvme(controller) if opts.transport else None
            model = self.sysfs.read_attribute(CLASS_NVME, controller, "model")
            for namespace in namespaces:
                ns_dir = self.sysfs.path(CLASS_NVME, controller, namespace.segment)
                nsid = AddressParser.to_unsigned_int(self.sysfs.read_attribute(ns_dir, "nsid") or "")
                if nsid is None:
                    parsed = AddressParser.parse_nvme_namespace(namespace.segment)
                    nsid = parsed[1] if parsed else None
                hctl = self._controller_tuple(index, controller, nsid)
                if not hctl.matches(opts.hctl_filter):
                    continue
                rows.append((hctl, self._nvme_namespace_lines(hctl, ns_dir, namespace, model, info)))
        rows.sort(key=lambda row: row[0].sentinels())
        return [line for _, lines in rows for line in lines]

    def _nvme_namespace_lines(self, hctl: AddressTuple, ns_dir: str, namespace: ClassificationResult,
                              model: str | None, info: TransportInfo | None) -> list[str]:
        opts = self.options
        parts = [hctl.bracketed(opts.lun_format), f"{SCSI_SHORT_DEVICE_TYPES[0]:<7} "]
        if opts.wwn:
            pass
        elif info is not None:
            parts.append(f"{info.display:<{TRANSPORT_WIDTH}}  ")
        elif opts.unit:
            wwid = self.sysfs.read_attribute(ns_dir, "wwid") or "none"
            if opts.unit == 1:
                wwid = wwid[:LU_NAME_WIDTH]
            parts.append(f"{wwid:<{LU_NAME_WIDTH}}  ")
        else:
            parts.append(f"{model or 'model?':<{TRANSPORT_WIDTH}}  ")

        if opts.wwn:
            wwid = self.sysfs.read_attribute(ns_dir, "wwid")
            parts.append(f"{wwid or '':<{TRANSPORT_WIDTH}}  ")
        node = self._node_name(ns_dir, namespace.dev_type)
        parts.append(f"{node or '-':<9}")
        if opts.dev_maj_min:
            parts.append(self._maj_min(ns_dir))
        if opts.scsi_id:
            parts.append("  -")
        if opts.generic:
            parts.append(f"  {'-':<9}")
        if opts.protection:
            parts.append(f"  {'-':<9}  {'-':<16}")
        if opts.protmode:
            parts.append(f"  {'-':<4}")
        if opts.size:
            parts.append(self._format_size(self._disk_size(ns_dir)))

        lines = ["".join(parts).rstrip()]
        if opts.long_opt and opts.transport:
            controller = os.path.basename(os.path.dirname(ns_dir))
            lines.extend(line.render() for line in self.transports.describe_nvme(controller))
        if opts.verbose:
            lines.append(f"  dir: {ns_dir}  [{self.sysfs.realpath(ns_dir)}]")
        return lines

    # Host listing

    def host_entries(self) -> list[tuple[int | None, str]]:
        """
        (host number, name) of the SCSI hosts, filtered and sorted.

        Raises:
            SysfsRootError: If class/scsi_host cannot be read
        """
        self.sysfs.require_dir(CLASS_SCSI_HOST)
        wanted = self.options.hctl_filter.host
        hosts = []
        for entry in self.sysfs.list_children(CLASS_SCSI_HOST) or []:
            if not entry.name.startswith("host"):
                continue
            number = AddressParser.parse_host_number(entry.name)
            if wanted is not None and number != wanted:
                continue
            hosts.append((number, entry.name))
        return sorted(hosts, key=lambda host: (-1 if host[0] is None else host[0], host[1]))

    def list_hosts(self) -> list[str]:
        """
        SCSI hosts followed by NVMe controllers.

        Raises:
            SysfsRootError: If class/scsi_host cannot be read
        """
        opts = self.options
        hosts = self.host_entries()
        lines = []
        if opts.classic:
            lines.append(f"Attached hosts: {'' if hosts else 'none'}".rstrip())
        for number, name in hosts:
            if opts.classic:
                lines.append("  <'--classic' not supported for hosts>")
                continue
            lines.extend(self._host_lines(number, name))
        if opts.nvme and not opts.classic:
            lines.extend(self.list_nvme_controllers())
        return lines

    def _proc_name(self, path: str) -> str:
        value = self.sysfs.read_attribute(path, "proc_name")
        if value is not None and not value.startswith(NULL_PROC_NAMES):
            return f"  {value:<12}  "
        driver = os.path.join(path, "device/../driver")
        if self.sysfs.is_dir(driver):
            return f"  {os.path.basename(self.sysfs.realpath(driver)):<12}  "
        return "  proc_name=????  "

    def _host_lines(self, number: int | None, name: str) -> list[str]:
        opts = self.options
        path = self.sysfs.path(CLASS_SCSI_HOST, name)
        parts = [f"[{number}]  " if number is not None else "[?]  ", self._proc_name(path)]

        info = TransportInfo(TransportKind.UNKNOWN)
        if opts.transport:
            info = self.transports.resolve_host(name)
            parts.append(info.display)
        lines = ["".join(parts).rstrip()]

        if opts.long_opt:
            lines.extend(self._long_host_lines(path, name, info))
        if opts.verbose:
            lines.append(f"  dir: {path}")
            device = os.path.join(path, "device")
            lines.append(f"  device dir: {self.sysfs.realpath(device) if self.sysfs.is_dir(device) else ''}".rstrip())
        return lines

    def _long_host_lines(self, path: str, name: str, info: TransportInfo) -> list[str]:
        opts = self.options
        if opts.transport:
            return [line.render() for line in self.transports.describe_host(name, info)]

        values = {attr: self.sysfs.read_attribute(path, attr) for attr in HOST_LIST_ATTRS}
        if opts.long_opt >= 3:
            lines = []
            for attr in HOST_LIST_ATTRS:
                if values[attr] is not None:
                    lines.append(f"  {attr}={values[attr]}")
                elif opts.verbose:
                    lines.append(f"  {attr}=?")
            return lines

        def field(attr, width, missing):
            value = values[attr]
            return f"{attr}={value:<{width}}" if value is not None else f"{attr}={missing}"

        lines = ["  " + " ".join((
            field("cmd_per_lun", 4, "????"),
            field("host_busy", 4, "????"),
            field("sg_tablesize", 4, "????"),
            field("unchecked_isa_dma", 2, "??"),
        )).rstrip()]
        if opts.long_opt == 2:
            extra = []
            for attr, width in (("can_queue", 4), ("state", 8), ("unique_id", 2)):
                if values[attr] is not None:
                    extra.append(f"{attr}={values[attr]:<{width}}")
            lines.append(("  " + "  ".join(extra)).rstrip())
        return lines

    # NVMe controllers

    def list_nvme_controllers(self) -> list[str]:
        """One line per NVMe controller, shown with the host listing."""
        opts = self.options
        filt = opts.hctl_filter
        if filt.host is not None and filt.host != NVME_HOST_NUM:
            return []
        lines = []
        for index, controller in self.nvme_controllers():
            if filt.channel is not None and filt.channel != index:
                continue
            ctl_dir = self.sysfs.path(CLASS_NVME, controller)
            parts = [f"[N:{index}]  ", f"  {os.path.join(opts.dev_dir, controller):<12}  "]
            if opts.transport:
                parts.append(self.transports.resolve_nvme(controller).display)
            else:
                for attr in ("model", "serial", "firmware_rev"):
                    value = self.sysfs.read_attribute(ctl_dir, attr)
                    parts.append(f"{value.strip() if value else '-'}  ")
            lines.append("".join(parts).rstrip())
            if opts.long_opt:
                lines.extend(line.render() for line in self.transports.describe_nvme(controller))
            if opts.verbose:
                lines.append(f"  dir: {ctl_dir}")
        return lines

