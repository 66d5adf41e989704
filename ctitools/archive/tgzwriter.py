"""Archiver writing gzip-compressed tar archives."""

from __future__ import annotations

import logging
import os
import tarfile
import time
from io import BytesIO
from typing import BinaryIO, Optional

from ctitools.archive.base import Archiver, Exclude, Skip

_log = logging.getLogger(__name__)


class TarGzArchiver(Archiver):
    """Writes a ``.tar.gz`` archive."""

    def __init__(self) -> None:
        self._file: Optional[BinaryIO] = None
        self._tar: Optional[tarfile.TarFile] = None

    def open(self, destination: str) -> "TarGzArchiver":
        self._file = self._create_destination(destination)
        self._tar = tarfile.open(fileobj=self._file, mode="w:gz")
        return self

    def close(self) -> None:
        tar, archive = self._tar, self._file
        self._tar = self._file = None
        try:
            if tar is not None:
                tar.close()
        finally:
            if archive is not None:
                archive.close()

    def _writer(self) -> tarfile.TarFile:
        if self._tar is None:
            raise RuntimeError("archive is not open")
        return self._tar

    def write_file(self, base_dir: str, name: str) -> None:
        tar = self._writer()
        path = os.path.join(base_dir, name)
        with open(path, "rb") as source:
            info = tar.gettarinfo(arcname=self._archive_name(name), fileobj=source)
            info.name = self._archive_name(name)
            tar.addfile(info, source)

    def write_bytes(self, name: str, data: bytes) -> None:
        tar = self._writer()
        info = tarfile.TarInfo(self._archive_name(name))
        info.size = len(data)
        info.mode = 0o600
        info.type = tarfile.REGTYPE
        info.mtime = int(time.time())
        tar.addfile(info, BytesIO(data))

    def write_directory(self, base_dir: str, exclude: Optional[Exclude] = None) -> None:
        if self._file is None:
            raise RuntimeError("archive is not open")
        destination_stat = os.fstat(self._file.fileno())

        def visit(path: str, entry: os.DirEntry, is_dir: bool) -> Optional[Skip]:
            if not is_dir and os.path.samestat(
                entry.stat(follow_symlinks=False), destination_stat
            ):
                _log.debug("Skip archive file to avoid recursion: %s", path)
                return None
            rel = os.path.relpath(path, base_dir)
            if exclude is not None:
                verdict = exclude(path, entry)
                if verdict is Skip.DIR:
                    return Skip.DIR
                if verdict is Skip.FILE:
                    return None
            if not is_dir:
                self.write_file(base_dir, rel)
            return None

        self._walk(base_dir, visit)