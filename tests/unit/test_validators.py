"""Unit tests for input validators."""

import pytest

from ftpspace.utils.validators import (
    MAX_TRAVERSAL_DEPTH,
    validate_ftp_path,
    validate_host,
    validate_ip_address,
    validate_max_depth,
    validate_port,
)


class TestValidateHost:
    """Tests for host validation."""

    @pytest.mark.parametrize("host", ["192.168.1.100", "ftp.example.com", "localhost", " nas.local "])
    def test_valid_hosts(self, host):
        assert validate_host(host) == (True, None)

    @pytest.mark.parametrize("host", ["bad host", "-leading.example.com", "ftp_server!"])
    def test_invalid_hosts(self, host):
        is_valid, error = validate_host(host)
        assert is_valid is False
        assert "Invalid host" in error

    def test_empty_host(self):
        assert validate_host("  ") == (False, "Host is required")

    def test_ip_out_of_range(self):
        is_valid, _ = validate_ip_address("256.1.1.1")
        assert is_valid is False


class TestValidatePort:
    """Tests for port validation."""

    def test_valid_ports(self):
        assert validate_port(21) == (True, None)
        assert validate_port("2121") == (True, None)

    @pytest.mark.parametrize("port", [0, 65536, -1])
    def test_out_of_range(self, port):
        is_valid, error = validate_port(port)
        assert is_valid is False
        assert "between 1 and 65535" in error

    def test_not_a_number(self):
        assert validate_port("ftp") == (False, "Port must be a number")


class TestValidateMaxDepth:
    """Tests for traversal depth validation."""

    def test_bounds(self):
        assert validate_max_depth(1) == (True, None)
        assert validate_max_depth(MAX_TRAVERSAL_DEPTH) == (True, None)
        assert validate_max_depth(0)[0] is False
        assert validate_max_depth(MAX_TRAVERSAL_DEPTH + 1)[0] is False

    def test_not_a_number(self):
        assert validate_max_depth("10")[0] is False


class TestValidateFtpPath:
    """Tests for FTP path validation."""

    @pytest.mark.parametrize("path", ["/", "/pub", "/data/my files", "/a..b/c"])
    def test_valid_paths(self, path):
        assert validate_ftp_path(path) == (True, None)

    def test_relative_path(self):
        is_valid, error = validate_ftp_path("pub/data")
        assert is_valid is False
        assert "absolute" in error

    @pytest.mark.parametrize("path", ["/..", "/pub/../etc", "/pub/.."])
    def test_parent_segments(self, path):
        assert validate_ftp_path(path)[0] is False

    @pytest.mark.parametrize("path", ["/pub\r\nDELE x", "/pub\n"])
    def test_line_breaks(self, path):
        assert validate_ftp_path(path)[0] is False

    def test_empty_path(self):
        assert validate_ftp_path("") == (False, "FTP path is required")
