import pytest

from ctitools.command import (
    CommandError,
    PackFormat,
    parse_pack_format,
    parse_packages,
    wrap_error,
)


def test_wrap_error_keeps_inner():
    inner = ValueError("boom")
    wrapped = wrap_error(inner)
    assert isinstance(wrapped, CommandError)
    assert wrapped.inner is inner
    assert wrapped.__cause__ is inner
    assert str(wrapped) == "command failed: boom"


def test_wrap_error_none():
    assert wrap_error(None) is None


def test_parse_packages():
    result = parse_packages(["git.example.com/a@v1.0.0", "git.example.com/b@v2"])
    assert result == {"git.example.com/a": "v1.0.0", "git.example.com/b": "v2"}


def test_parse_packages_empty():
    assert parse_packages([]) == {}


@pytest.mark.parametrize("arg", ["nover", "a@b@c"])
def test_parse_packages_invalid_format(arg):
    with pytest.raises(ValueError, match="invalid package format: " + arg):
        parse_packages([arg])


def test_parse_packages_duplicate():
    with pytest.raises(ValueError, match="duplicate package: pkg"):
        parse_packages(["pkg@1", "pkg@2"])


def test_parse_pack_format_round_trip():
    for fmt in PackFormat:
        assert parse_pack_format(str(fmt)) is fmt
    assert parse_pack_format("tgz") is PackFormat.TGZ
    assert parse_pack_format("zip") is PackFormat.ZIP


def test_parse_pack_format_invalid():
    with pytest.raises(ValueError, match="must be one of tgz,zip"):
        parse_pack_format("rar")