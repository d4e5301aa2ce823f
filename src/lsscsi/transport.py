"""
Transport Resolver

Works out which transport (SAS, SPI, FC, iSCSI, ...) a SCSI host or
device uses by probing the transport class directories in sysfs, and
produces the per-transport attribute dumps shown with --list --transport.

Probes run in a fixed order and the first one that matches wins. A probe
that finds its marker but not the attributes it needs does not match, and
resolution carries on with the next one.

References:
- Linux drivers/scsi/scsi_transport_{sas,spi,fc,iscsi,srp}.c
- SAM-4 Annex A, Table A.3 (iSCSI target port names)
"""

import os
import re
import logging

from .classifier import DirectoryClassifier
from .models import AddressTuple, AttributeLine, TransportInfo, TransportKind
from .parsers.address import AddressParser
from .protocol.constants import (
    BUS_SCSI_DEVS,
    CLASS_FC_HOST,
    CLASS_FC_REMOTE_PORTS,
    CLASS_FC_TRANSPORT,
    CLASS_ISCSI_HOST,
    CLASS_ISCSI_SESSION,
    CLASS_NVME,
    CLASS_SAS_DEVICE,
    CLASS_SAS_END_DEVICE,
    CLASS_SAS_HOST,
    CLASS_SAS_PHY,
    CLASS_SAS_PORT,
    CLASS_SCSI_DEV,
    CLASS_SCSI_HOST,
    CLASS_SPI_HOST,
    CLASS_SPI_TRANSPORT,
    CLASS_SRP_HOST,
    CLASS_SRP_REMOTE_PORTS,
)

logger = logging.getLogger(__name__)

FCOE_MARKER = " over "
FIREWIRE_HOST_MARKER = "/fw-host"
FIREWIRE_GUID_LEN = 18         # "0x" followed by 16 hex digits
NVME_TRANSPORTS = {
    "pcie": TransportKind.PCIE,
    "fc": TransportKind.FC,
}

_SESSION_NAME = re.compile(r'^session([0-9]+)$')

# Attribute lists of the verbose dumps, in output order
SPI_HOST_ATTRS = ("signalling",)
FC_HOST_ATTRS = (
    "active_fc4s", "supported_fc4s", "fabric_name", "maxframe_size",
    "max_npiv_vports", "npiv_vports_inuse", "node_name", "port_name",
    "port_id", "port_state", "port_type", "speed", "supported_speeds",
    "supported_classes", "tgtid_bind_type",
)
SAS_PHY_SHORT_ATTRS = (
    "sas_address", "phy_identifier", "minimum_linkrate", "minimum_linkrate_hw",
    "maximum_linkrate", "maximum_linkrate_hw", "negotiated_linkrate",
)
SAS_PHY_ATTRS = (
    "device_type", "initiator_port_protocols", "invalid_dword_count",
    "loss_of_dword_sync_count", "minimum_linkrate", "minimum_linkrate_hw",
    "maximum_linkrate", "maximum_linkrate_hw", "negotiated_linkrate",
    "phy_identifier", "phy_reset_problem_count",
    "running_disparity_error_count", "sas_address", "target_port_protocols",
)
SAS_HA_ATTRS = ("device_name", "ha_name", "version_descriptor")
SAS_HA_PHY_ATTRS = (
    "class", "enabled", "id", "iproto", "linkrate", "oob_mode", "role",
    "sas_addr", "tproto", "type",
)
SPI_TARGET_ATTRS = ("dt", "max_offset", "max_width", "min_period", "offset", "period", "width")
FC_RPORT_ATTRS = ("node_name", "port_name", "port_id", "port_state", "roles")
FC_RPORT_TAIL_ATTRS = ("scsi_target_id", "supported_classes", "fast_io_fail_tmo", "dev_loss_tmo")
SAS_CLASS_DEVICE_ATTRS = (
    "device_name", "dev_type", "iproto", "iresp_timeout", "itnl_timeout",
    "linkrate", "max_linkrate", "max_pathways", "min_linkrate", "pathways",
    "ready_led_meaning", "rl_wlun", "sas_addr", "tproto",
    "transport_layer_retries",
)
ISCSI_SESSION_ATTRS = (
    "targetname", "tpgt", "data_pdu_in_order", "data_seq_in_order", "erl",
    "first_burst_len", "initial_r2t", "max_burst_len", "max_outstanding_r2t",
    "recovery_tmo",
)
SRP_RPORT_ATTRS = ("port_id", "roles")
NVME_CONTROLLER_ATTRS = ("transport", "address", "cntlid", "state")

TRANSPORT_NAMES = {
    TransportKind.SPI: "spi",
    TransportKind.FC: "fc:",
    TransportKind.FCOE: "fcoe:",
    TransportKind.SAS: "sas",
    TransportKind.SAS_CLASS: "sas",
    TransportKind.ISCSI: "iSCSI",
    TransportKind.SBP: "sbp",
    TransportKind.USB: "usb",
    TransportKind.ATA: "ata",
    TransportKind.SATA: "sata",
    TransportKind.SRP: "srp",
}


def _phy_number(name: str) -> int:
    _, _, tail = name.rpartition(':')
    return int(tail) if tail.isdigit() else -1


def usb_device_name(path: str) -> str | None:
    """
    USB interface name ("<bus>-<port>[.<port>]*:<config>.<interface>").

    Args:
        path: Resolved sysfs path of a SCSI host or device

    Returns:
        The path component just above the first "/host" component, "" if
        there is none, or None when the path has no USB ancestor
    """
    segments = path.split('/')
    host_index = next((i for i, seg in enumerate(segments) if seg.startswith("host")), None)
    ancestors = segments if host_index is None else segments[:host_index]
    if not any(seg.startswith("usb") for seg in ancestors):
        return None
    if host_index is None or host_index < 1:
        return ""
    return segments[host_index - 1]


class TransportResolver:
    """
    Resolves and describes the transport of SCSI hosts and devices.

    Every call returns a fresh TransportInfo; nothing is remembered
    between entries.
    """

    def __init__(self, sysfs, classifier: DirectoryClassifier | None = None):
        self.sysfs = sysfs
        self.classifier = classifier or DirectoryClassifier(sysfs)
        self.host_probes = [
            ("sas", self._host_sas),
            ("sas_class", self._host_sas_class),
            ("spi", self._host_spi),
            ("fc", self._host_fc),
            ("srp", self._host_srp),
            ("sbp", self._host_sbp),
            ("iscsi", self._host_iscsi),
            ("usb", self._host_usb),
            ("ata", self._host_ata),
        ]
        self.device_probes = [
            ("sas", self._device_sas),
            ("sas_class", self._device_sas_class),
            ("spi", self._device_spi),
            ("fc", self._device_fc),
            ("srp", self._device_srp),
            ("sbp", self._device_sbp),
            ("iscsi", self._device_iscsi),
            ("usb", self._device_usb),
            ("ata", self._device_ata),
        ]

    @staticmethod
    def _run(probes, target, label: str) -> TransportInfo:
        for name, probe in probes:
            try:
                info = probe(target)
            except (OSError, ValueError) as e:
                logger.debug(f"{name} probe failed for {label}: {e}")
                continue
            if info is not None:
                logger.debug(f"{label}: transport {info.kind.name} ({info.display})")
                return info
        logger.debug(f"{label}: no transport found")
        return TransportInfo(TransportKind.UNKNOWN)

    def resolve_host(self, host_name: str) -> TransportInfo:
        """
        Resolve the transport of a SCSI host (initiator).

        Args:
            host_name: Host directory name, e.g. "host3"
        """
        return self._run(self.host_probes, host_name, host_name)

    def resolve_device(self, hctl: AddressTuple) -> TransportInfo:
        """Resolve the transport of a SCSI device (target port side)."""
        return self._run(self.device_probes, hctl, hctl.format())

    # Host probes

    def _host_sas(self, host: str) -> TransportInfo | None:
        if not self.sysfs.is_dir(CLASS_SAS_HOST, host):
            return None
        phys = [name for name in self.sysfs.list_names(CLASS_SAS_HOST, host, "device")
                if name.startswith("phy")]
        if not phys:
            return None
        low_phy = min(phys, key=_phy_number)
        address = self.sysfs.read_attribute(CLASS_SAS_PHY, low_phy, "sas_address")
        if address is None:
            logger.warning(f"{host}: no sas_address for {low_phy}")
            return None
        return TransportInfo(TransportKind.SAS, f"sas:{address}", {"low_phy": low_phy})

    def _host_sas_class(self, host: str) -> TransportInfo | None:
        ha_dir = self.sysfs.path(CLASS_SCSI_HOST, host, "device/sas/ha")
        if not self.sysfs.is_dir(ha_dir):
            return None
        device_name = self.sysfs.read_attribute(ha_dir, "device_name")
        if device_name is None:
            logger.warning(f"{host}: no device_name in {ha_dir}")
            return None
        return TransportInfo(TransportKind.SAS_CLASS, f"sas:{device_name}")

    def _host_spi(self, host: str) -> TransportInfo | None:
        if not self.sysfs.is_dir(CLASS_SPI_HOST, host):
            return None
        return TransportInfo(TransportKind.SPI, "spi:")

    def _fc_kind(self, host: str) -> TransportKind:
        symbolic_name = self.sysfs.read_attribute(CLASS_FC_HOST, host, "symbolic_name")
        if symbolic_name and FCOE_MARKER in symbolic_name:
            return TransportKind.FCOE
        return TransportKind.FC

    def _fc_display(self, kind: TransportKind, port_dir: str) -> str | None:
        port_name = self.sysfs.read_attribute(port_dir, "port_name")
        port_id = self.sysfs.read_attribute(port_dir, "port_id")
        if port_name is None or port_id is None:
            return None
        prefix = "fcoe:" if kind == TransportKind.FCOE else "fc:"
        return f"{prefix}{port_name},{port_id}"

    def _host_fc(self, host: str) -> TransportInfo | None:
        if not self.sysfs.is_dir(CLASS_FC_HOST, host):
            return None
        kind = self._fc_kind(host)
        display = self._fc_display(kind, self.sysfs.path(CLASS_FC_HOST, host))
        return TransportInfo(kind, display) if display else None

    def _host_srp(self, host: str) -> TransportInfo | None:
        if not self.sysfs.is_dir(CLASS_SRP_HOST, host):
            return None
        return TransportInfo(TransportKind.SRP, "srp:")

    def _host_sbp(self, host: str) -> TransportInfo | None:
        device = self.sysfs.path(CLASS_SCSI_HOST, host, "device")
        resolved = self.sysfs.realpath(device)
        index = resolved.find(FIREWIRE_HOST_MARKER)
        if index < 0:
            return None
        end = resolved.find('/', index + 1)
        fw_host = resolved if end < 0 else resolved[:end]
        guid = self.sysfs.read_attribute(fw_host, "host_id/guid")
        if guid is None or len(guid) != FIREWIRE_GUID_LEN:
            return None
        return TransportInfo(TransportKind.SBP, f"sbp:{guid[2:]}")

    def _host_iscsi(self, host: str) -> TransportInfo | None:
        if not self.sysfs.is_dir(CLASS_ISCSI_HOST, host):
            return None
        return TransportInfo(TransportKind.ISCSI, "iscsi:")

    def _host_usb(self, host: str) -> TransportInfo | None:
        if not self.sysfs.exists(CLASS_SCSI_HOST, host):
            return None
        name = usb_device_name(self.sysfs.realpath(CLASS_SCSI_HOST, host))
        if name is None:
            return None
        return TransportInfo(TransportKind.USB, f"usb: {name}", {"usb_name": name})

    def _ata_from_driver(self, host: str) -> TransportInfo | None:
        proc_name = self.sysfs.read_attribute(CLASS_SCSI_HOST, host, "proc_name")
        if proc_name is None:
            return None
        if proc_name == "ahci" or proc_name.startswith("sata"):
            return TransportInfo(TransportKind.SATA, "sata:")
        if "ata" in proc_name:
            return TransportInfo(TransportKind.ATA, "ata:")
        return None

    def _host_ata(self, host: str) -> TransportInfo | None:
        return self._ata_from_driver(host)

    # Device probes

    @staticmethod
    def _host_of(hctl: AddressTuple) -> str:
        return f"host{hctl.host}"

    @staticmethod
    def _target_of(hctl: AddressTuple) -> str:
        return f"target{hctl.format('hct')}"

    def _device_sas(self, hctl: AddressTuple) -> TransportInfo | None:
        if not self.sysfs.is_dir(CLASS_SAS_HOST, self._host_of(hctl)):
            return None
        device = self.sysfs.path(CLASS_SCSI_DEV, hctl.format(), "device")
        if not self.sysfs.is_dir(device):
            logger.warning(f"{hctl}: cannot follow {device}")
            return None
        # .../end_device-H:B:P/targetH:C:T/H:C:T:L
        end_device = os.path.basename(os.path.dirname(os.path.dirname(self.sysfs.realpath(device))))
        address = self.sysfs.read_attribute(CLASS_SAS_DEVICE, end_device, "sas_address")
        if address is None:
            logger.warning(f"{hctl}: no sas_address for {end_device}")
            return None
        return TransportInfo(TransportKind.SAS, f"sas:{address}", {"end_device": end_device})

    def _device_sas_class(self, hctl: AddressTuple) -> TransportInfo | None:
        sas_device = self.sysfs.path(BUS_SCSI_DEVS, hctl.format(), "sas_device")
        if not self.sysfs.is_dir(sas_device):
            return None
        address = self.sysfs.read_attribute(sas_device, "sas_addr")
        if address is None:
            logger.warning(f"{hctl}: no sas_addr in {sas_device}")
            return None
        return TransportInfo(TransportKind.SAS_CLASS, f"sas:{address}")

    def _device_spi(self, hctl: AddressTuple) -> TransportInfo | None:
        if not self.sysfs.is_dir(CLASS_SPI_HOST, self._host_of(hctl)):
            return None
        return TransportInfo(TransportKind.SPI, f"spi:{hctl.target}")

    def _device_fc(self, hctl: AddressTuple) -> TransportInfo | None:
        host = self._host_of(hctl)
        if not self.sysfs.is_dir(CLASS_FC_HOST, host):
            return None
        kind = self._fc_kind(host)
        display = self._fc_display(kind, self.sysfs.path(CLASS_FC_TRANSPORT, self._target_of(hctl)))
        return TransportInfo(kind, display) if display else None

    def _srp_rport(self, hctl: AddressTuple) -> str | None:
        prefix = f"port-{hctl.host}:"
        for name in self.sysfs.list_names(CLASS_SRP_REMOTE_PORTS):
            if name.startswith(prefix):
                return name
        return None

    def _device_srp(self, hctl: AddressTuple) -> TransportInfo | None:
        if not self.sysfs.is_dir(CLASS_SRP_HOST, self._host_of(hctl)):
            return None
        rport = self._srp_rport(hctl)
        if rport is None:
            return TransportInfo(TransportKind.SRP, "srp:")
        port_id = self.sysfs.read_attribute(CLASS_SRP_REMOTE_PORTS, rport, "port_id") or ""
        return TransportInfo(TransportKind.SRP, f"srp:{port_id}", {"rport": rport})

    def _device_sbp(self, hctl: AddressTuple) -> TransportInfo | None:
        ieee1394_id = self.sysfs.read_attribute(BUS_SCSI_DEVS, hctl.format(), "ieee1394_id")
        if ieee1394_id is None:
            return None
        return TransportInfo(TransportKind.SBP, f"sbp:{ieee1394_id}")

    def _iscsi_session(self, hctl: AddressTuple) -> int | None:
        host_device = self.sysfs.path(CLASS_ISCSI_HOST, self._host_of(hctl), "device")
        for name in self.sysfs.list_names(host_device):
            match = _SESSION_NAME.match(name)
            if match and self.sysfs.is_dir(host_device, name, self._target_of(hctl)):
                return int(match.group(1))
        return None

    def _device_iscsi(self, hctl: AddressTuple) -> TransportInfo | None:
        if not self.sysfs.is_dir(CLASS_ISCSI_HOST, self._host_of(hctl), "device"):
            return None
        session = self._iscsi_session(hctl)
        if session is None:
            return None
        session_dir = self.sysfs.path(CLASS_ISCSI_SESSION, f"session{session}")
        target_name = self.sysfs.read_attribute(session_dir, "targetname")
        tpgt = self.sysfs.read_attribute(session_dir, "tpgt")
        tpgt_value = AddressParser.to_signed_int(tpgt) if tpgt is not None else None
        if target_name is None or tpgt_value is None:
            return None
        return TransportInfo(TransportKind.ISCSI, f"{target_name},t,0x{tpgt_value:x}",
                             {"session": str(session)})

    def _device_usb(self, hctl: AddressTuple) -> TransportInfo | None:
        if not self.sysfs.exists(CLASS_SCSI_DEV, hctl.format()):
            return None
        name = usb_device_name(self.sysfs.realpath(CLASS_SCSI_DEV, hctl.format()))
        if name is None:
            return None
        return TransportInfo(TransportKind.USB, f"usb: {name}", {"usb_name": name})

    def _device_ata(self, hctl: AddressTuple) -> TransportInfo | None:
        return self._ata_from_driver(self._host_of(hctl))

    # NVMe

    def resolve_nvme(self, controller: str) -> TransportInfo:
        """
        Transport of an NVMe controller, from its transport and address attributes.

        Args:
            controller: Controller directory name, e.g. "nvme0"
        """
        transport = self.sysfs.read_attribute(CLASS_NVME, controller, "transport")
        if transport is None:
            return TransportInfo(TransportKind.UNKNOWN)
        address = self.sysfs.read_attribute(CLASS_NVME, controller, "address") or ""
        kind = NVME_TRANSPORTS.get(transport, TransportKind.UNKNOWN)
        display = f"{transport} {address}".strip()
        return TransportInfo(kind, display, {"transport": transport})

    # Verbose dumps

    def _attribute_lines(self, directory: str, names, depth: int = 1) -> list[AttributeLine]:
        lines = []
        for name in names:
            value = self.sysfs.read_attribute(directory, name)
            if value is not None:
                lines.append(AttributeLine(name, value, depth))
        return lines

    def _sas_host_lines(self, host: str) -> list[AttributeLine]:
        device = self.sysfs.path(CLASS_SCSI_HOST, host, "device")
        ports = [name for name in self.sysfs.list_names(device) if name.startswith("port-")]
        lines = []
        if not ports:
            lines.append(AttributeLine("no configured ports"))
            phys = [name for name in self.sysfs.list_names(device) if name.startswith("phy")]
            if not phys:
                lines.append(AttributeLine("no configured phys"))
                return lines
            for phy in sorted(phys, key=_phy_number):
                lines.append(AttributeLine(phy))
                lines.extend(self._attribute_lines(self.sysfs.path(CLASS_SAS_PHY, phy),
                                                   SAS_PHY_SHORT_ATTRS, depth=2))
            return lines

        for port in ports:
            phys = sorted((name for name in self.sysfs.list_names(device, port)
                           if name.startswith("phy")), key=_phy_number)
            if not phys:
                lines.append(AttributeLine(f"{port}: phy list not available"))
                continue
            num_phys = self.sysfs.read_attribute(CLASS_SAS_PORT, port, "num_phys")
            if num_phys is not None:
                lines.append(AttributeLine(f"{port}: num_phys", f"{num_phys}, {' '.join(phys)}"))
            lines.extend(self._attribute_lines(self.sysfs.path(CLASS_SAS_PHY, phys[0]),
                                               SAS_PHY_ATTRS, depth=2))
        return lines

    def describe_host(self, host: str, info: TransportInfo) -> list[AttributeLine]:
        """
        Per-transport attribute dump of a SCSI host.

        Args:
            host: Host directory name, e.g. "host3"
            info: Result of resolve_host() for the same host

        Returns:
            Lines in output order; attributes that cannot be read are left out
        """
        kind = info.kind
        if kind == TransportKind.UNKNOWN:
            logger.info(f"{host}: no transport information")
            return []

        lines = [AttributeLine("transport", TRANSPORT_NAMES.get(kind, kind.name.lower()))]
        if kind == TransportKind.SPI:
            lines.extend(self._attribute_lines(self.sysfs.path(CLASS_SPI_HOST, host), SPI_HOST_ATTRS))
        elif kind in (TransportKind.FC, TransportKind.FCOE):
            lines.extend(self._attribute_lines(self.sysfs.path(CLASS_FC_HOST, host), FC_HOST_ATTRS))
        elif kind == TransportKind.SAS:
            lines.extend(self._sas_host_lines(host))
        elif kind == TransportKind.SAS_CLASS:
            ha_dir = self.sysfs.path(CLASS_SCSI_HOST, host, "device/sas/ha")
            lines.append(AttributeLine("sub_transport", "sas_class"))
            lines.extend(self._attribute_lines(ha_dir, SAS_HA_ATTRS))
            lines.append(AttributeLine("phy0:"))
            lines.extend(self._attribute_lines(os.path.join(ha_dir, "phys/0"), SAS_HA_PHY_ATTRS, depth=2))
        elif kind == TransportKind.USB:
            lines.append(AttributeLine("device_name", info.context.get("usb_name", "")))
        return lines

    def describe_device(self, hctl: AddressTuple, info: TransportInfo) -> list[AttributeLine]:
        """
        Per-transport attribute dump of a SCSI device.

        Args:
            hctl: Address of the device
            info: Result of resolve_device() for the same device

        Returns:
            Lines in output order; attributes that cannot be read are left out
        """
        kind = info.kind
        if kind == TransportKind.UNKNOWN:
            logger.info(f"{hctl}: no transport information")
            return []

        name = hctl.format()
        device = self.sysfs.path(CLASS_SCSI_DEV, name, "device")
        lines = [AttributeLine("transport", TRANSPORT_NAMES.get(kind, kind.name.lower()))]

        if kind == TransportKind.SPI:
            lines.append(AttributeLine("target_id", str(hctl.target)))
            lines.extend(self._attribute_lines(self.sysfs.path(CLASS_SPI_TRANSPORT, self._target_of(hctl)),
                                               SPI_TARGET_ATTRS))
        elif kind in (TransportKind.FC, TransportKind.FCOE):
            lines.extend(self._fc_device_lines(hctl, device))
        elif kind == TransportKind.SAS:
            end_device = info.context.get("end_device", "")
            sas_dir = self.sysfs.path(CLASS_SAS_DEVICE, end_device)
            end_dir = self.sysfs.path(CLASS_SAS_END_DEVICE, end_device)
            lines.extend(self._attribute_lines(device, ("vendor", "model")))
            lines.extend(self._attribute_lines(sas_dir, ("bay_identifier",)))
            lines.extend(self._enclosure_lines(hctl))
            lines.extend(self._attribute_lines(sas_dir, ("enclosure_identifier", "initiator_port_protocols")))
            lines.extend(self._attribute_lines(end_dir, ("initiator_response_timeout", "I_T_nexus_loss_timeout")))
            lines.extend(self._attribute_lines(sas_dir, ("phy_identifier",)))
            lines.extend(self._attribute_lines(end_dir, ("ready_led_meaning",)))
            lines.extend(self._attribute_lines(sas_dir, ("sas_address", "target_port_protocols")))
            lines.extend(self._attribute_lines(end_dir, ("tlr_enabled", "tlr_supported")))
        elif kind == TransportKind.SAS_CLASS:
            lines.append(AttributeLine("sub_transport", "sas_class"))
            lines.extend(self._attribute_lines(os.path.join(device, "sas_device"), SAS_CLASS_DEVICE_ATTRS))
        elif kind == TransportKind.ISCSI:
            session_dir = self.sysfs.path(CLASS_ISCSI_SESSION, f"session{info.context.get('session', '')}")
            lines.extend(self._attribute_lines(session_dir, ISCSI_SESSION_ATTRS))
        elif kind == TransportKind.SBP:
            lines.extend(self._attribute_lines(device, ("ieee1394_id",)))
        elif kind == TransportKind.USB:
            lines.append(AttributeLine("device_name", info.context.get("usb_name", "")))
        elif kind == TransportKind.SRP:
            rport = info.context.get("rport")
            if rport:
                lines.append(AttributeLine(rport))
                lines.extend(self._attribute_lines(self.sysfs.path(CLASS_SRP_REMOTE_PORTS, rport),
                                                   SRP_RPORT_ATTRS))
        return lines

    def describe_nvme(self, controller: str) -> list[AttributeLine]:
        """Attribute dump of an NVMe controller."""
        return self._attribute_lines(self.sysfs.path(CLASS_NVME, controller), NVME_CONTROLLER_ATTRS)

    def _enclosure_lines(self, hctl: AddressTuple) -> list[AttributeLine]:
        enclosure = self.classifier.enclosure(self.sysfs.path(BUS_SCSI_DEVS, hctl.format()))
        return [AttributeLine(enclosure.segment)] if enclosure.segment else []

    def _fc_device_lines(self, hctl: AddressTuple, device: str) -> list[AttributeLine]:
        if not self.sysfs.is_dir(device):
            return []
        # .../rport-H:B-R/targetH:C:T/H:C:T:L
        rport_path = os.path.dirname(os.path.dirname(self.sysfs.realpath(device)))
        rport = os.path.basename(rport_path)
        rport_dir = os.path.join(rport_path, "fc_remote_ports", rport)
        if not self.sysfs.is_dir(rport_dir):
            rport_dir = self.sysfs.path(CLASS_FC_REMOTE_PORTS, rport)

        lines = self._attribute_lines(device, ("vendor", "model"))
        lines.append(AttributeLine(rport))
        lines.extend(self._attribute_lines(rport_dir, FC_RPORT_ATTRS))
        lines.extend(self._enclosure_lines(hctl))
        lines.extend(self._attribute_lines(rport_dir, FC_RPORT_TAIL_ATTRS))
        return lines
