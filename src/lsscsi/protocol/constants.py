"""
SCSI / NVMe Listing Constants

Sysfs locations, sentinel values and binary layout constants used while
enumerating SCSI and NVMe devices.
"""

# Address Tuple Sentinels
# Reference: Linux SCSI mid-level "h:c:t:l" device naming
UNSET_INT = -1                         # Unset host/channel/target
LUN_UNSET = 0xFFFFFFFFFFFFFFFF         # Unset lun (all bits set)
LUN_MAX = 0xFFFFFFFFFFFFFFFF           # Largest 64-bit lun
NVME_HOST_NUM = 0x7FFF                 # Host number marking an NVMe entry
NVME_HOST_CHAR = 'N'                   # Display form of NVME_HOST_NUM
LUN_BYTES_LEN = 8                      # T10 LUN length in bytes

# Address tuple column widths
HCTL_COLUMN_WIDTH = 13                 # "[h:c:t:l]" padded width
HCTL_LUNHEX_COLUMN_WIDTH = 28          # Width when the lun is shown in hex

# Sysfs locations (relative to the sysfs root)
BUS_SCSI_DEVS = "bus/scsi/devices"
CLASS_SCSI_DEV = "class/scsi_device"
CLASS_SCSI_HOST = "class/scsi_host"
CLASS_SPI_HOST = "class/spi_host"
CLASS_SPI_TRANSPORT = "class/spi_transport"
CLASS_SAS_HOST = "class/sas_host"
CLASS_SAS_PHY = "class/sas_phy"
CLASS_SAS_PORT = "class/sas_port"
CLASS_SAS_DEVICE = "class/sas_device"
CLASS_SAS_END_DEVICE = "class/sas_end_device"
CLASS_FC_HOST = "class/fc_host"
CLASS_FC_TRANSPORT = "class/fc_transport"
CLASS_FC_REMOTE_PORTS = "class/fc_remote_ports"
CLASS_SRP_HOST = "class/srp_host"
CLASS_SRP_REMOTE_PORTS = "class/srp_remote_ports"
CLASS_ISCSI_HOST = "class/iscsi_host"
CLASS_ISCSI_SESSION = "class/iscsi_session"
CLASS_NVME = "class/nvme"
CLASS_BLOCK = "class/block"

# Device node locations
DEV_DIR = "/dev"
DEV_DISK_BY_ID = "disk/by-id"          # Relative to DEV_DIR

# VPD Device Identification page
# Reference: SPC-5 Section 7.7.6 "Device Identification VPD page"
VPD_PAGE_FILE = "vpd_pg83"
VPD_DEVICE_ID = 0x83                   # Page code
VPD_HEADER_LEN = 4                     # Page header length
VPD_DESC_HEADER_LEN = 4                # Designation descriptor header length
VPD_MIN_PAGE_LEN = 9                   # Shorter reads hold no usable descriptor
VPD_MAX_READ = VPD_HEADER_LEN + 0xFFFF  # Header plus the largest 16-bit page length

# NAA / EUI-64 / UUID / T10 designator lengths
NAA_LENGTHS = (8, 16)
EUI64_LENGTHS = (8, 12, 16)
UUID_DESIGNATOR_LEN = 18
UUID_TYPE_RFC4122 = 1                  # High nibble of the first designator byte
UUID_DASH_OFFSETS = (4, 6, 8, 10)
T10_VENDOR_ID_MIN_LEN = 8

# LUN structure
# Reference: SAM-5 Section 4.7 "Logical unit numbers"
LUN_LEVELS = 4
LUN_NOT_SPECIFIED = bytes((0xFF, 0xFF, 0, 0, 0, 0, 0, 0))

# Peripheral device types
# Reference: SPC-5 Table 141 "Peripheral device type"
SCSI_DEVICE_TYPES = (
    "Direct-Access",
    "Sequential-Access",
    "Printer",
    "Processor",
    "Write-once",
    "CD-ROM",
    "Scanner",
    "Optical memory",
    "Medium Changer",
    "Communications",
    "Unknown (0xa)",
    "Unknown (0xb)",
    "Storage array",
    "Enclosure",
    "Simplified direct-access",
    "Optical card read/writer",
    "Bridge controller",
    "Object based storage",
    "Automation Drive interface",
    "Security manager",
    "Zoned Block",
    "Reserved (0x15)", "Reserved (0x16)", "Reserved (0x17)",
    "Reserved (0x18)", "Reserved (0x19)", "Reserved (0x1a)",
    "Reserved (0x1b)", "Reserved (0x1c)", "Reserved (0x1d)",
    "Well known LU",
    "No device",
)

SCSI_SHORT_DEVICE_TYPES = (
    "disk   ", "tape   ", "printer", "process", "worm   ", "cd/dvd ",
    "scanner", "optical", "mediumx", "comms  ", "(0xa)  ", "(0xb)  ",
    "storage", "enclosu", "sim dsk", "opti rd", "bridge ", "osd    ",
    "adi    ", "sec man", "zbc    ", "(0x15) ", "(0x16) ", "(0x17) ",
    "(0x18) ", "(0x19) ", "(0x1a) ", "(0x1b) ", "(0x1c) ", "(0x1d) ",
    "wlun   ", "no dev ",
)

SCSI_DEVICE_TYPE_MAX = 31

# Disk size reporting
SECTOR_SHIFT = 9                       # block/size is in 512 byte units
