"""Archiver writing zip archives."""

from __future__ import annotations

import logging
import os
import shutil
import zipfile
from typing import BinaryIO, Optional

from ctitools.archive.base import Archiver, Exclude, Skip

_log = logging.getLogger(__name__)


class ZipArchiver(Archiver):
    """Writes a deflate-compressed ``.zip`` archive."""

    def __init__(self) -> None:
        self._file: Optional[BinaryIO] = None
        self._zip: Optional[zipfile.ZipFile] = None

    def open(self, destination: str) -> "ZipArchiver":
        self._file = self._create_destination(destination)
        self._zip = zipfile.ZipFile(self._file, "w", compression=zipfile.ZIP_DEFLATED)
        return self

    def close(self) -> None:
        archive, handle = self._zip, self._file
        self._zip = self._file = None
        try:
            if archive is not None:
                archive.close()
        finally:
            if handle is not None:
                handle.close()

    def _writer(self) -> zipfile.ZipFile:
        if self._zip is None:
            raise RuntimeError("archive is not open")
        return self._zip

    def write_file(self, base_dir: str, name: str) -> None:
        archive = self._writer()
        with open(os.path.join(base_dir, name), "rb") as source:
            with archive.open(self._archive_name(name), "w") as target:
                shutil.copyfileobj(source, target)

    def write_bytes(self, name: str, data: bytes) -> None:
        archive = self._writer()
        with archive.open(self._archive_name(name), "w") as target:
            target.write(data)

    def write_directory(self, base_dir: str, exclude: Optional[Exclude] = None) -> None:
        if self._file is None:
            raise RuntimeError("archive is not open")
        destination_stat = os.fstat(self._file.fileno())

        def visit(path: str, entry: os.DirEntry, is_dir: bool) -> Optional[Skip]:
            if is_dir:
                return None
            if os.path.samestat(entry.stat(follow_symlinks=False), destination_stat):
                _log.debug("Skip archive file to avoid recursion: %s", path)
                return None
            if exclude is not None:
                verdict = exclude(path, entry)
                if verdict is Skip.DIR:
                    return Skip.DIR
                if verdict is Skip.FILE:
                    return None
            self.write_file(base_dir, os.path.relpath(path, base_dir))
            return None

        self._walk(base_dir, visit)