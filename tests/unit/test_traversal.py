"""Unit tests for SpaceTraversal and TraversalResult."""

from typing import Dict, List, Union

import pytest

from ftpspace.ftp.exceptions import (
    FTPDataChannelError,
    FTPProtocolParseError,
    FTPTimeoutError,
)
from ftpspace.ftp.listing import DirectoryEntry, parse_listing
from ftpspace.ftp.traversal import DEFAULT_MAX_DEPTH, SpaceTraversal, TraversalResult


def file_line(name: str, size: int) -> str:
    return f"-rw-r--r-- 1 user group {size} Jan 1 00:00 {name}"


def dir_line(name: str) -> str:
    return f"drwxr-xr-x 2 user group 4096 Jan 1 00:00 {name}"


class FakeLister:
    """Serves canned listings by path; exceptions are raised instead."""

    def __init__(self, tree: Dict[str, Union[str, Exception]]):
        self.tree = tree
        self.calls: List[str] = []

    def list_directory(self, path: str) -> List[DirectoryEntry]:
        self.calls.append(path)
        listing = self.tree.get(path, "")
        if isinstance(listing, Exception):
            raise listing
        return parse_listing(listing, path)


@pytest.fixture
def simple_tree():
    """Root with two files and one subdirectory holding one file."""
    return {
        "/": "\n".join([file_line("a.bin", 100), file_line("b.bin", 200), dir_line("sub")]),
        "/sub": file_line("c.bin", 50),
    }


class TestSpaceTraversal:
    """Tests for the depth-first walk."""

    def test_totals_simple_tree(self, simple_tree):
        result = SpaceTraversal(FakeLister(simple_tree)).run("/")

        assert result.total_size == 350
        assert result.total_files == 3
        assert result.total_directories == 1
        assert result.processed_paths == ("/", "/sub")
        assert result.errors == ()

    def test_subdirectory_failure_is_isolated(self, simple_tree):
        simple_tree["/sub"] = FTPDataChannelError("127.0.0.1", 5001, ConnectionRefusedError("refused"))

        result = SpaceTraversal(FakeLister(simple_tree)).run("/")

        assert result.total_size == 300
        assert result.total_files == 2
        assert result.total_directories == 1
        assert result.processed_paths == ("/",)
        assert len(result.errors) == 1
        assert result.errors[0].startswith("Error processing /sub: ")
        assert "refused" in result.errors[0]

    def test_siblings_continue_after_failure(self):
        tree = {
            "/": "\n".join([dir_line("bad"), dir_line("good"), file_line("root.txt", 1)]),
            "/bad": FTPProtocolParseError("PASV", "227 garbage"),
            "/good": file_line("g.txt", 10),
        }

        result = SpaceTraversal(FakeLister(tree)).run("/")

        assert result.total_size == 11
        assert result.total_directories == 2
        assert result.processed_paths == ("/", "/good")
        assert result.errors == ("Error processing /bad: Failed to parse PASV response: '227 garbage'",)

    def test_timeout_is_per_directory(self):
        tree = {
            "/": "\n".join([dir_line("slow"), file_line("f", 5)]),
            "/slow": FTPTimeoutError("Reading directory listing", 30),
        }

        result = SpaceTraversal(FakeLister(tree)).run("/")

        assert result.total_size == 5
        assert result.errors == (
            "Error processing /slow: Reading directory listing timed out after 30 seconds",
        )

    def test_socket_error_is_per_directory(self):
        tree = {"/": dir_line("x"), "/x": ConnectionResetError("reset by peer")}

        result = SpaceTraversal(FakeLister(tree)).run("/")

        assert result.errors == ("Error processing /x: reset by peer",)

    def test_root_failure(self):
        lister = FakeLister({"/": FTPDataChannelError("h", 1)})

        result = SpaceTraversal(lister).run("/")

        assert result.processed_paths == ()
        assert result.total_size == 0
        assert len(result.errors) == 1

    def test_max_depth(self):
        tree = {
            "/": "\n".join([file_line("top", 1), dir_line("l1")]),
            "/l1": "\n".join([file_line("mid", 2), dir_line("l2")]),
            "/l1/l2": "\n".join([file_line("deep", 4), dir_line("l3")]),
            "/l1/l2/l3": file_line("deepest", 8),
        }
        lister = FakeLister(tree)

        result = SpaceTraversal(lister, max_depth=1).run("/")

        assert result.errors == ("Max depth reached for path: /l1",)
        assert lister.calls == ["/"]
        assert result.total_size == 1
        assert result.total_directories == 1

    def test_max_depth_two(self):
        tree = {
            "/": dir_line("l1"),
            "/l1": "\n".join([file_line("mid", 2), dir_line("l2")]),
            "/l1/l2": file_line("deep", 4),
        }

        result = SpaceTraversal(FakeLister(tree), max_depth=2).run("/")

        assert result.errors == ("Max depth reached for path: /l1/l2",)
        assert result.processed_paths == ("/", "/l1")
        assert result.total_size == 2
        assert result.total_directories == 2

    def test_depth_first_pre_order(self):
        tree = {
            "/": "\n".join([dir_line("a"), dir_line("b")]),
            "/a": dir_line("a1"),
            "/a/a1": "",
            "/b": "",
        }
        lister = FakeLister(tree)

        result = SpaceTraversal(lister).run("/")

        assert lister.calls == ["/", "/a", "/a/a1", "/b"]
        assert result.processed_paths == ("/", "/a", "/a/a1", "/b")

    def test_start_path_below_root(self, simple_tree):
        lister = FakeLister({"/data": simple_tree["/"], "/data/sub": simple_tree["/sub"]})

        result = SpaceTraversal(lister).run("/data")

        assert result.processed_paths == ("/data", "/data/sub")
        assert result.total_size == 350

    def test_on_directory_callback(self, simple_tree):
        seen = []

        SpaceTraversal(FakeLister(simple_tree), on_directory=seen.append).run("/")

        assert seen == ["/", "/sub"]

    def test_each_path_listed_once(self, simple_tree):
        lister = FakeLister(simple_tree)

        SpaceTraversal(lister).run("/")

        assert len(lister.calls) == len(set(lister.calls))

    def test_default_max_depth(self):
        assert SpaceTraversal(FakeLister({})).max_depth == DEFAULT_MAX_DEPTH == 10

    def test_invalid_max_depth(self):
        with pytest.raises(ValueError):
            SpaceTraversal(FakeLister({}), max_depth=0)


class TestTraversalResult:
    """Tests for the TraversalResult structure."""

    def test_to_dict(self):
        result = TraversalResult(
            total_size=350,
            total_files=3,
            total_directories=1,
            processed_paths=("/", "/sub"),
            errors=("Error processing /x: boom",),
        )

        assert result.to_dict() == {
            "totalSize": 350,
            "totalFiles": 3,
            "totalDirectories": 1,
            "processedPaths": ["/", "/sub"],
            "errors": ["Error processing /x: boom"],
        }

    def test_empty(self):
        result = TraversalResult.empty(errors=("nope",))

        assert result.total_size == 0
        assert result.processed_paths == ()
        assert result.errors == ("nope",)
        assert result.has_errors is True

    def test_result_is_frozen(self, simple_tree):
        result = SpaceTraversal(FakeLister(simple_tree)).run("/")

        with pytest.raises(AttributeError):
            result.total_size = 0
