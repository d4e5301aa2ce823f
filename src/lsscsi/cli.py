"""
Command line front end.

Builds a ListOptions from the command line (and LSSCSI_LUNHEX_OPT), runs
a ScsiLister and prints its lines to stdout. Diagnostics go to stderr
through logging.
"""

import os
import sys
import logging
import argparse

from . import __version__
from .exceptions import ParseError, SysfsRootError
from .lister import ScsiLister
from .models import ListOptions
from .parsers.address import AddressParser

logger = logging.getLogger(__name__)

LUNHEX_ENV = "LSSCSI_LUNHEX_OPT"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pylsscsi",
        description="List SCSI devices or hosts, and NVMe namespaces or controllers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Filter:
  [H:C:T:L] selects devices by host, channel, target and lun. Any field
  may be '-', '*' or '?' (or left out) to match everything. 'hostN'
  selects one host, and 'N' as host selects NVMe entries.

Examples:
  %(prog)s                    # One line per SCSI device and NVMe namespace
  %(prog)s -g -s              # Add the sg device and the disk size
  %(prog)s -H -t              # Hosts with their transport
  %(prog)s -L -t 2:0:3        # Transport attributes of devices on target 2:0:3
        """
    )

    parser.add_argument('-c', '--classic', action='count', default=0,
                        help='Alternate output similar to "cat /proc/scsi/scsi"')
    parser.add_argument('-d', '--device', dest='dev_maj_min', action='count', default=0,
                        help='Show device node major + minor numbers')
    parser.add_argument('-g', '--generic', action='count', default=0,
                        help='Show SCSI generic device name')
    parser.add_argument('-H', '--hosts', action='store_true',
                        help='List SCSI hosts instead of devices')
    parser.add_argument('-i', '--scsi_id', action='count', default=0,
                        help='Show udev derived /dev/disk/by-id/scsi* entry')
    parser.add_argument('-k', '--kname', action='count', default=0,
                        help='Show kernel name instead of device node name')
    parser.add_argument('-l', '--long', dest='long_opt', action='count', default=0,
                        help='Additional information output (repeat for more)')
    parser.add_argument('-L', '--list', action='store_true',
                        help='Additional information as one attribute=value per line')
    parser.add_argument('-N', '--no-nvme', dest='no_nvme', action='store_true',
                        help='Exclude NVMe devices from the output')
    parser.add_argument('-p', '--protection', action='count', default=0,
                        help='Show target and initiator protection information')
    parser.add_argument('-P', '--protmode', action='count', default=0,
                        help='Show protection mode of disks')
    parser.add_argument('-s', '--size', action='count', default=0,
                        help='Show disk size (twice for binary units as well)')
    parser.add_argument('-t', '--transport', action='count', default=0,
                        help='Transport information for target or, with --hosts, initiator')
    parser.add_argument('-u', '--unit', action='count', default=0,
                        help='Show logical unit name (twice for the full prefixed name)')
    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help='Output path names where data is found')
    parser.add_argument('-V', '--version', action='version', version=__version__,
                        help='Show program version and exit')
    parser.add_argument('-w', '--wwn', action='count', default=0,
                        help='Show WWN of disks')
    parser.add_argument('-x', '--lunhex', action='count', default=None,
                        help='Show lun as hex (twice for the full 16 digits)')
    parser.add_argument('-y', '--sysfsroot', metavar='PATH', default="/sys",
                        help='Use PATH instead of /sys')
    parser.add_argument('--devdir', metavar='PATH', default="/dev",
                        help='Look for device nodes in PATH instead of /dev')
    parser.add_argument('filter', nargs='*', metavar='H:C:T:L',
                        help='Filter output list (default is "- - - -")')
    return parser


def lunhex_from_env(environ=None) -> int:
    """Default --lunhex level taken from LSSCSI_LUNHEX_OPT, 0 if unset or invalid."""
    environ = os.environ if environ is None else environ
    value = environ.get(LUNHEX_ENV)
    if value is None:
        return 0
    level = AddressParser.to_signed_int(value.strip())
    if level is None or level < 0:
        logger.warning(f"Ignoring {LUNHEX_ENV}={value!r}, expected a non-negative integer")
        return 0
    return level


def options_from_args(args: argparse.Namespace, environ=None) -> ListOptions:
    """
    Turn parsed arguments into ListOptions.

    Raises:
        ParseError: If the filter arguments cannot be decoded
        ValueError: If the options conflict
    """
    long_opt = args.long_opt + (3 if args.list else 0)
    if args.transport and long_opt in (1, 2):
        raise ValueError("please '--list' (rather than '--long') with --transport")

    lunhex = args.lunhex if args.lunhex is not None else lunhex_from_env(environ)
    return ListOptions(
        classic=args.classic,
        dev_maj_min=args.dev_maj_min,
        generic=args.generic,
        hosts=args.hosts,
        kname=args.kname,
        long_opt=long_opt,
        lunhex=lunhex,
        nvme=not args.no_nvme,
        protection=args.protection,
        protmode=args.protmode,
        scsi_id=args.scsi_id,
        size=args.size,
        transport=args.transport,
        unit=args.unit,
        verbose=args.verbose,
        wwn=args.wwn,
        sysfsroot=args.sysfsroot,
        dev_dir=args.devdir,
        hctl_filter=AddressParser.parse_filter_args(args.filter),
    )


def configure_logging(verbose: int) -> None:
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, stream=sys.stderr,
                        format="%(levelname)s: %(name)s: %(message)s")


def main(argv=None, environ=None) -> int:
    """
    Entry point of the pylsscsi command.

    Returns:
        Exit status: 0 on success, 1 on a bad filter, an option conflict
        or an unreadable sysfs tree
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        options = options_from_args(args, environ)
    except ParseError as e:
        sys.stderr.write(f"pylsscsi: bad filter: {e}\n")
        parser.print_usage(sys.stderr)
        return 1
    except ValueError as e:
        sys.stderr.write(f"pylsscsi: {e}\n")
        parser.print_usage(sys.stderr)
        return 1

    logger.info(f"sysfsroot: {options.sysfsroot}")
    logger.debug(f"filter: {options.hctl_filter.format('hctl')}")

    try:
        lines = ScsiLister(options).run()
    except SysfsRootError as e:
        sys.stderr.write(f"pylsscsi: {e}\n")
        return 1

    for line in lines:
        print(line)
    return 0
