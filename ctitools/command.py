"""Helpers shared by command-line commands: error wrapping, package lists, pack formats."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, Optional


class CommandError(Exception):
    """A command failure that wraps the error which caused it."""

    def __init__(self, inner: BaseException, msg: str = "command failed") -> None:
        super().__init__(f"{msg}: {inner}")
        self.inner = inner
        self.msg = msg
        self.__cause__ = inner


def wrap_error(error: Optional[BaseException]) -> Optional[CommandError]:
    """Wrap ``error`` as a command failure; None stays None."""
    if error is None:
        return None
    return CommandError(error)


def parse_packages(args: Iterable[str]) -> Dict[str, str]:
    """Parse ``<source>@<version>`` arguments into a mapping of source to version."""
    packages: Dict[str, str] = {}
    for arg in args:
        chunks = arg.split("@")
        if len(chunks) != 2:
            raise ValueError(
                f"invalid package format: {arg}, should be `<source>@<version>`"
            )
        source, version = chunks
        if source in packages:
            raise ValueError(f"duplicate package: {source}")
        packages[source] = version
    return packages


class PackFormat(str, Enum):
    """Archive format of a packed package."""

    TGZ = "tgz"
    ZIP = "zip"

    def __str__(self) -> str:
        return self.value


def parse_pack_format(value: str) -> PackFormat:
    """Return the pack format named by ``value``."""
    try:
        return PackFormat(value)
    except ValueError:
        allowed = ",".join(fmt.value for fmt in PackFormat)
        raise ValueError(f"must be one of {allowed}") from None