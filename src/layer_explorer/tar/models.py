"""Data models for layer archive entries."""

import io
import stat
import tarfile
from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO, Optional

from ..utils.formatting import format_mode
from .paths import is_whiteout, normalize_path


class EntryType(Enum):
    """Kind of a tar entry."""

    REGULAR = "regular"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    HARDLINK = "hardlink"
    WHITEOUT = "whiteout"
    OTHER = "other"


_TYPE_BITS = {
    EntryType.REGULAR: stat.S_IFREG,
    EntryType.DIRECTORY: stat.S_IFDIR,
    EntryType.SYMLINK: stat.S_IFLNK,
    EntryType.HARDLINK: stat.S_IFREG,
    EntryType.WHITEOUT: stat.S_IFREG,
}


def entry_type(member: tarfile.TarInfo) -> EntryType:
    """Classify a tar member."""
    if is_whiteout(member.name):
        return EntryType.WHITEOUT
    if member.isreg():
        return EntryType.REGULAR
    if member.isdir():
        return EntryType.DIRECTORY
    if member.issym():
        return EntryType.SYMLINK
    if member.islnk():
        return EntryType.HARDLINK
    return EntryType.OTHER


def _type_bits(member: tarfile.TarInfo) -> int:
    if member.ischr():
        return stat.S_IFCHR
    if member.isblk():
        return stat.S_IFBLK
    if member.isfifo():
        return stat.S_IFIFO
    return _TYPE_BITS.get(entry_type(member), stat.S_IFREG)


@dataclass
class ArchiveEntry:
    """One entry of a layer archive.

    The content reader is only valid while this entry is the current
    entry of the iterator that produced it.
    """

    path: str  # as stored, may carry "./" or a trailing "/"
    mode: int
    size: int
    type: EntryType
    linkname: str = ""
    mode_string: str = ""
    _tar: Optional[tarfile.TarFile] = field(default=None, repr=False, compare=False)
    _member: Optional[tarfile.TarInfo] = field(default=None, repr=False, compare=False)

    @classmethod
    def from_member(cls, tar: tarfile.TarFile, member: tarfile.TarInfo) -> "ArchiveEntry":
        return cls(
            path=member.name,
            mode=member.mode,
            size=member.size,
            type=entry_type(member),
            linkname=member.linkname,
            mode_string=format_mode(member.mode, _type_bits(member)),
            _tar=tar,
            _member=member,
        )

    @property
    def normalized_path(self) -> str:
        return normalize_path(self.path)

    @property
    def is_dir(self) -> bool:
        return self.type is EntryType.DIRECTORY

    @property
    def is_whiteout(self) -> bool:
        return self.type is EntryType.WHITEOUT

    def open(self) -> BinaryIO:
        """Return a reader over the entry's raw bytes.

        Entries without data of their own (directories, links, devices)
        read as empty.
        """
        if self.type is EntryType.REGULAR and self._tar is not None:
            reader = self._tar.extractfile(self._member)
            if reader is not None:
                return reader
        return io.BytesIO(b"")
