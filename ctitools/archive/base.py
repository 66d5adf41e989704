"""Common interface of package archivers and the directory walk they share."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from enum import Enum
from typing import BinaryIO, Callable, Optional


class Skip(Enum):
    """Verdict of an exclusion callback while an archiver walks a directory.

    ``FILE`` leaves the entry out.  ``DIR`` on a directory leaves out the whole
    directory; on a file it leaves out that file and the rest of its directory.
    """

    FILE = "file"
    DIR = "dir"


Exclude = Callable[[str, os.DirEntry], Optional[Skip]]
_Visit = Callable[[str, os.DirEntry, bool], Optional[Skip]]


class Archiver(ABC):
    """Writes files and in-memory data into an archive on disk.

    An archiver is opened on a destination, written to, and closed; used as a
    context manager it is closed on leaving the block.
    """

    @abstractmethod
    def open(self, destination: str) -> "Archiver":
        """Create the archive at ``destination`` and return the archiver."""

    @abstractmethod
    def close(self) -> None:
        """Finish the archive and release the destination file."""

    @abstractmethod
    def write_bytes(self, name: str, data: bytes) -> None:
        """Store ``data`` in the archive under ``name``."""

    @abstractmethod
    def write_file(self, base_dir: str, name: str) -> None:
        """Store the file ``base_dir/name`` in the archive under ``name``."""

    @abstractmethod
    def write_directory(self, base_dir: str, exclude: Optional[Exclude] = None) -> None:
        """Store the files below ``base_dir`` under their paths relative to it."""

    def __enter__(self) -> "Archiver":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @staticmethod
    def _create_destination(destination: str) -> BinaryIO:
        os.makedirs(os.path.dirname(destination) or ".", exist_ok=True)
        return open(destination, "wb")

    @staticmethod
    def _walk(base_dir: str, visit: _Visit) -> None:
        """Visit every entry below ``base_dir`` depth first, in lexical order.

        ``visit`` gets the entry's path, the entry and whether it is a directory
        (symbolic links are not followed), and may return a ``Skip`` verdict.
        """

        def walk(directory: str) -> None:
            with os.scandir(directory) as iterator:
                entries = sorted(iterator, key=lambda entry: entry.name)
            for entry in entries:
                is_dir = entry.is_dir(follow_symlinks=False)
                verdict = visit(entry.path, entry, is_dir)
                if verdict is Skip.DIR:
                    if is_dir:
                        continue
                    return
                if is_dir:
                    walk(entry.path)

        walk(base_dir)

    @staticmethod
    def _archive_name(name: str) -> str:
        return name.replace(os.sep, "/")