import os

import pytest

from ctitools.archive.base import Archiver, Skip


class RecordingArchiver(Archiver):
    def __init__(self):
        self.opened = None
        self.closed = False
        self.visited = []

    def open(self, destination):
        self.opened = destination
        return self

    def close(self):
        self.closed = True

    def write_bytes(self, name, data):
        self.visited.append((name, data))

    def write_file(self, base_dir, name):
        self.visited.append(name)

    def write_directory(self, base_dir, exclude=None):
        _, visit = recorder(base_dir, exclude, self.visited)
        self._walk(base_dir, visit)


def recorder(base_dir, exclude=None, visited=None):
    visited = [] if visited is None else visited

    def visit(path, entry, is_dir):
        rel = os.path.relpath(path, base_dir).replace(os.sep, "/")
        verdict = exclude(path, entry) if exclude else None
        if verdict is Skip.FILE:
            return None
        if verdict is Skip.DIR:
            return Skip.DIR
        if not is_dir:
            visited.append(rel)
        return None

    return visited, visit


def make_tree(root):
    (root / "b").mkdir()
    (root / "b" / "inner.txt").write_text("x")
    (root / "a.txt").write_text("a")
    (root / "c.txt").write_text("c")
    (root / "d.txt").write_text("d")


def test_archiver_is_abstract():
    with pytest.raises(TypeError):
        Archiver()


def test_context_manager_closes():
    archiver = RecordingArchiver()
    assert Archiver.__enter__(archiver) is archiver
    assert archiver.closed is False
    assert not Archiver.__exit__(archiver, None, None, None)
    assert archiver.closed is True


def test_context_manager_closes_on_error():
    archiver = RecordingArchiver()
    error = KeyError("boom")
    assert not Archiver.__exit__(archiver, KeyError, error, None)
    assert archiver.closed is True


def test_walk_visits_in_lexical_order(tmp_path):
    make_tree(tmp_path)
    visited, visit = recorder(str(tmp_path))
    Archiver._walk(str(tmp_path), visit)
    assert visited == ["a.txt", "b/inner.txt", "c.txt", "d.txt"]


def test_walk_skip_dir_on_directory(tmp_path):
    make_tree(tmp_path)
    visited, visit = recorder(
        str(tmp_path), lambda path, entry: Skip.DIR if entry.name == "b" else None
    )
    Archiver._walk(str(tmp_path), visit)
    assert visited == ["a.txt", "c.txt", "d.txt"]


def test_walk_skip_dir_on_file_skips_rest_of_directory(tmp_path):
    make_tree(tmp_path)
    visited, visit = recorder(
        str(tmp_path), lambda path, entry: Skip.DIR if entry.name == "c.txt" else None
    )
    Archiver._walk(str(tmp_path), visit)
    assert visited == ["a.txt", "b/inner.txt"]


def test_walk_skip_file(tmp_path):
    make_tree(tmp_path)
    visited, visit = recorder(
        str(tmp_path), lambda path, entry: Skip.FILE if entry.name == "a.txt" else None
    )
    Archiver._walk(str(tmp_path), visit)
    assert visited == ["b/inner.txt", "c.txt", "d.txt"]


def test_create_destination_makes_parents(tmp_path):
    target = tmp_path / "x" / "y" / "out.bin"
    handle = Archiver._create_destination(str(target))
    handle.write(b"data")
    handle.close()
    assert target.read_bytes() == b"data"