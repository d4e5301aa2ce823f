"""
Sysfs Attribute Store

Read-only access to the sysfs tree (or a copy of it under another root,
see --sysfsroot). Every lookup that finds nothing returns None; only a
missing listing root raises.
"""

import os
import logging

from .exceptions import SysfsRootError
from .models import DirEntry


class SysfsReader:
    """
    Reader for sysfs attributes and directories.

    Relative paths are resolved against root; absolute paths are used as
    given (they usually come from an earlier realpath() call).
    """

    def __init__(self, root: str = "/sys"):
        self.root = root
        self._logger = logging.getLogger(__name__)

    def path(self, *parts: str) -> str:
        """Join parts below the root."""
        if parts and os.path.isabs(parts[0]):
            return os.path.join(*parts)
        return os.path.join(self.root, *parts)

    def exists(self, *parts: str) -> bool:
        return os.path.exists(self.path(*parts))

    def is_dir(self, *parts: str) -> bool:
        """True if the path is a directory (symlinks followed)."""
        return os.path.isdir(self.path(*parts))

    def read_attribute(self, *parts: str) -> str | None:
        """
        Read a text attribute.

        The trailing newline is dropped; an empty file gives "".

        Returns:
            The value, or None if the attribute cannot be read
        """
        full = self.path(*parts)
        try:
            with open(full, 'r', errors='replace') as f:
                value = f.readline()
        except OSError as e:
            self._logger.debug(f"Cannot read {full}: {e}")
            return None
        if value.endswith('\n'):
            value = value[:-1]
        return value

    def read_binary(self, *parts: str, limit: int | None = None) -> bytes | None:
        """Read a binary attribute, at most limit bytes. None if unreadable."""
        full = self.path(*parts)
        try:
            with open(full, 'rb') as f:
                return f.read() if limit is None else f.read(limit)
        except OSError as e:
            self._logger.debug(f"Cannot read {full}: {e}")
            return None

    def list_children(self, *parts: str) -> list[DirEntry] | None:
        """
        List one directory level, sorted by name.

        Returns:
            DirEntry list, or None if the directory cannot be read
        """
        full = self.path(*parts)
        try:
            with os.scandir(full) as it:
                entries = [
                    DirEntry(name=entry.name,
                             is_dir=entry.is_dir(follow_symlinks=False),
                             is_symlink=entry.is_symlink())
                    for entry in it
                ]
        except OSError as e:
            self._logger.debug(f"Cannot list {full}: {e}")
            return None
        return sorted(entries, key=lambda entry: entry.name)

    def list_names(self, *parts: str) -> list[str]:
        """Names of the candidate children (see DirEntry.is_candidate), [] if unreadable."""
        entries = self.list_children(*parts) or []
        return [entry.name for entry in entries if entry.is_candidate]

    def require_dir(self, *parts: str) -> str:
        """
        Return the full path of a directory that a listing starts from.

        Raises:
            SysfsRootError: If it is not a readable directory
        """
        full = self.path(*parts)
        if not os.path.isdir(full) or not os.access(full, os.R_OK):
            raise SysfsRootError(f"Cannot read directory {full}", full)
        return full

    def realpath(self, *parts: str) -> str:
        """Canonical path with symlinks resolved."""
        return os.path.realpath(self.path(*parts))

    def readlink(self, *parts: str) -> str | None:
        """Target of a symlink, None if not a symlink."""
        try:
            return os.readlink(self.path(*parts))
        except OSError:
            return None
