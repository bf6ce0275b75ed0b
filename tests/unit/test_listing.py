"""Unit tests for the UNIX listing parser."""

import pytest

from ftpspace.ftp.listing import (
    DirectoryEntry,
    join_remote_path,
    parse_listing,
    parse_listing_line,
)


class TestParseListing:
    """Tests for parse_listing."""

    def test_directory_line(self):
        entries = parse_listing("drwxr-xr-x 2 u g 4096 Jan 1 00:00 sub", "/")

        assert entries == [
            DirectoryEntry(
                name="sub",
                size=4096,
                is_directory=True,
                raw_permissions="drwxr-xr-x",
                path="/sub",
            )
        ]

    def test_file_name_with_spaces(self):
        entries = parse_listing("-rw-r--r-- 1 u g 123 Jan 1 00:00 file with spaces.txt", "/data")

        assert len(entries) == 1
        entry = entries[0]
        assert entry.name == "file with spaces.txt"
        assert entry.is_directory is False
        assert entry.size == 123
        assert entry.path == "/data/file with spaces.txt"

    def test_skips_total_dot_entries_and_keeps_order(self, sample_listing):
        entries = parse_listing(sample_listing, "/pub")

        assert [e.name for e in entries] == ["a.bin", "b.bin", "sub"]
        assert [e.path for e in entries] == ["/pub/a.bin", "/pub/b.bin", "/pub/sub"]
        assert [e.is_directory for e in entries] == [False, False, True]

    def test_skips_malformed_lines(self):
        text = (
            "-rw-r--r-- 1 u g 10 Jan 1 00:00 good.txt\n"
            "this line is not a listing\n"
            "-rw-r--r-- 1 u g 10 short\n"
            "\n"
            "-rw-r--r-- 1 u g 20 Jan 1 00:00 also-good.txt\n"
        )

        entries = parse_listing(text, "/")

        assert [e.name for e in entries] == ["good.txt", "also-good.txt"]

    def test_unparsable_size_defaults_to_zero(self):
        entries = parse_listing("-rw-r--r-- 1 u g huge Jan 1 00:00 odd.bin", "/")

        assert entries[0].size == 0

    def test_large_size(self):
        entries = parse_listing("-rw-r--r-- 1 u g 18446744073709551615 Jan 1 2020 big.img", "/")

        assert entries[0].size == 18446744073709551615

    def test_symlink_is_not_a_directory(self):
        entries = parse_listing("lrwxrwxrwx 1 u g 7 Jan 1 00:00 link -> target", "/")

        assert entries[0].is_directory is False
        assert entries[0].name == "link -> target"

    @pytest.mark.parametrize("text", [
        "",
        "\n\n\n",
        "total 0",
        "garbage",
        "\x00\xff binary-ish \t\t",
        "d" * 10000,
        "drwxr-xr-x 2 u g 4096 Jan 1 00:00 .\ndrwxr-xr-x 2 u g 4096 Jan 1 00:00 ..",
    ])
    def test_never_raises(self, text):
        assert parse_listing(text, "/") == []

    @pytest.mark.parametrize("name", [
        "tab\x0bname",
        "form\x0cfeed",
        "sep\x1crecord",
        "next\x85line",
        "line\u2028sep",
        "para\u2029sep",
    ])
    def test_control_characters_stay_in_names(self, name):
        text = (
            f"-rw-r--r-- 1 u g 10 Jan 1 00:00 {name}\r\n"
            "-rw-r--r-- 1 u g 20 Jan 1 00:00 after.txt\r\n"
        )

        entries = parse_listing(text, "/")

        assert [e.name for e in entries] == [name, "after.txt"]
        assert [e.size for e in entries] == [10, 20]

    def test_crlf_and_lf_lines(self):
        text = "-rw-r--r-- 1 u g 1 Jan 1 00:00 a\r\n-rw-r--r-- 1 u g 2 Jan 1 00:00 b\n"

        assert [(e.name, e.size) for e in parse_listing(text, "/")] == [("a", 1), ("b", 2)]

    def test_entries_are_immutable(self):
        entry = parse_listing("-rw-r--r-- 1 u g 1 Jan 1 00:00 f", "/")[0]

        with pytest.raises(AttributeError):
            entry.size = 2


class TestParseListingLine:
    """Tests for parse_listing_line."""

    def test_total_line(self):
        assert parse_listing_line("total 48", "/") is None

    def test_leading_whitespace(self):
        entry = parse_listing_line("   -rw-r--r-- 1 u g 5 Jan 1 00:00 f.txt", "/x")
        assert entry.path == "/x/f.txt"


class TestJoinRemotePath:
    """Tests for join_remote_path."""

    @pytest.mark.parametrize("parent,name,expected", [
        ("/", "a", "/a"),
        ("/data", "a", "/data/a"),
        ("/data/", "a", "/data/a"),
        ("", "a", "/a"),
    ])
    def test_join(self, parent, name, expected):
        assert join_remote_path(parent, name) == expected
