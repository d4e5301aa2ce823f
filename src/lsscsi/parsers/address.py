"""
Address tuple parsing.

This module handles the "h:c:t:l" device names found under
/sys/bus/scsi/devices, the host and NVMe entry names, and the filter
arguments given on the command line.
"""

import logging
import re

from .base import BaseParser
from ..exceptions import ParseError
from ..models import AddressTuple
from ..protocol.constants import LUN_MAX, LUN_UNSET, NVME_HOST_NUM, UNSET_INT

logger = logging.getLogger(__name__)

HCTL_FIELD_COUNT = 4
MAX_FILTER_ARGS = 4
NVME_HOST_LETTERS = ('N', 'n')
WILDCARD_LEADERS = ('-', '*', '?')

_HOST_NAME = re.compile(r'^host([0-9]+)$')
_NVME_CONTROLLER_NAME = re.compile(r'^nvme([0-9]+)$')
_NVME_NAMESPACE_NAME = re.compile(r'^nvme([0-9]+)(?:c([0-9]+))?n([0-9]+)$')


class AddressParser(BaseParser):
    """Parser for address tuples, host names and filter arguments."""

    @classmethod
    def parse_hctl(cls, text: str) -> AddressTuple:
        """
        Parse a "host:channel:target:lun" string.

        The host may be 'N' or 'n' for an NVMe entry. The lun is an
        unsigned 64-bit decimal; "-1" is accepted as the unset lun so that
        formatted unset tuples parse back.

        Args:
            text: The tuple text, e.g. "2:0:3:0"

        Returns:
            AddressTuple

        Raises:
            ParseError: If the text is not exactly four valid components
        """
        if text is None:
            raise ParseError("no address tuple given", text)

        parts = text.split(':')
        if len(parts) != HCTL_FIELD_COUNT:
            raise ParseError(
                f"expected {HCTL_FIELD_COUNT} colon separated fields in {text!r}, got {len(parts)}", text)

        host_text = parts[0].strip()
        if host_text in NVME_HOST_LETTERS:
            host = NVME_HOST_NUM
        else:
            host = cls._signed_field(host_text, "host", text)
        channel = cls._signed_field(parts[1], "channel", text)
        target = cls._signed_field(parts[2], "target", text)

        lun_text = parts[3].strip()
        if lun_text == str(UNSET_INT):
            lun = LUN_UNSET
        else:
            lun = cls.to_unsigned_int(lun_text)
            if lun is None or lun > LUN_MAX:
                raise ParseError(f"bad lun {lun_text!r} in {text!r}", text)

        return AddressTuple(host, channel, target, lun)

    @classmethod
    def _signed_field(cls, value: str, name: str, text: str) -> int:
        number = cls.to_signed_int(value)
        if number is None:
            raise ParseError(f"bad {name} {value.strip()!r} in {text!r}", text)
        return number

    @classmethod
    def parse_filter_args(cls, args: list[str]) -> AddressTuple:
        """
        Decode up to four positional filter arguments.

        Accepted forms:
        - "host3" selects host 3 only
        - "2:0:*:1" or "[2:0:-:1]" as a single argument
        - "2 0 * 1" as separate arguments (joined with ':')

        Empty components and those starting with '-', '*' or '?' are
        wildcards. The lun may be given in hex with a 0x prefix.

        Returns:
            AddressTuple with wildcard fields unset

        Raises:
            ParseError: On too many arguments or components, or bad integers
        """
        if not args:
            return AddressTuple.unset()
        if len(args) > MAX_FILTER_ARGS:
            raise ParseError(f"unexpected non-option arguments: {' '.join(args[MAX_FILTER_ARGS:])}")

        first = args[0]
        host = cls.parse_host_number(first)
        if host is not None:
            if len(args) > 1:
                raise ParseError(f"unexpected arguments after {first!r}", first)
            return AddressTuple(host=host)

        if ':' in first:
            if len(args) > 1:
                raise ParseError(f"unexpected arguments after {first!r}", first)
            return cls._decode_filter(first)
        return cls._decode_filter(':'.join(args))

    @classmethod
    def _decode_filter(cls, text: str) -> AddressTuple:
        stripped = text.lstrip(' \t[')
        if not stripped:
            return AddressTuple.unset()

        parts = stripped.split(':')
        if len(parts) > HCTL_FIELD_COUNT:
            raise ParseError(f"expect three colons at most in {text!r}", text)

        values: list[int | None] = [None] * HCTL_FIELD_COUNT
        for k, part in enumerate(parts):
            part = part.strip().rstrip(']').strip()
            if not part or part.startswith(WILDCARD_LEADERS):
                continue
            if k == 0 and part in NVME_HOST_LETTERS:
                values[k] = NVME_HOST_NUM
                continue
            if k == HCTL_FIELD_COUNT - 1:
                number = cls.to_unsigned_int(part, allow_hex=True)
                if number is not None and number > LUN_MAX:
                    number = None
            else:
                number = cls.to_signed_int(part)
            if number is None:
                raise ParseError(f"cannot decode {part} as an integer", text)
            values[k] = number

        filt = AddressTuple(*values)
        logger.debug(f"Filter {text!r} decoded as {filt.format()}")
        return filt

    @staticmethod
    def parse_host_number(name: str) -> int | None:
        """Host number of a "host<N>" name, None for other names."""
        match = _HOST_NAME.match(name.strip())
        return int(match.group(1)) if match else None

    @staticmethod
    def parse_nvme_controller(name: str) -> int | None:
        """Controller index of an "nvme<X>" name, None for other names."""
        match = _NVME_CONTROLLER_NAME.match(name)
        return int(match.group(1)) if match else None

    @staticmethod
    def parse_nvme_namespace(name: str) -> tuple[int, int] | None:
        """
        (controller, namespace index) of an "nvme<X>n<Y>" or "nvme<X>c<Z>n<Y>" name.

        Returns None for other names.
        """
        match = _NVME_NAMESPACE_NAME.match(name)
        if not match:
            return None
        return int(match.group(1)), int(match.group(3))
