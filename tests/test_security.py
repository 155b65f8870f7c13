"""Tests for src/linkmap_mcp/security.py."""

import socket
from unittest.mock import patch

import pytest

from linkmap_mcp.security import is_safe_url, require_http_url, wrap_external_content


def _addrinfo(ip):
    return [(socket.AF_INET, socket.SOCK_STREAM, 6, "", (ip, 0))]


# -----------------------------------------------------------------------
# is_safe_url
# -----------------------------------------------------------------------


def test_public_address_allowed():
    with patch("socket.getaddrinfo", return_value=_addrinfo("93.184.216.34")):
        assert is_safe_url("https://example.com/page")


@pytest.mark.parametrize("ip", ["10.0.0.5", "192.168.1.1", "169.254.169.254", "127.0.0.2"])
def test_private_resolution_blocked(ip):
    with patch("socket.getaddrinfo", return_value=_addrinfo(ip)):
        assert not is_safe_url("https://internal.example.com/")


@pytest.mark.parametrize(
    "url",
    ["http://localhost:8080/", "ftp://example.com/file", "file:///etc/passwd", "https://"],
)
def test_unsafe_urls_rejected_without_lookup(url):
    with patch("socket.getaddrinfo") as mock_dns:
        assert not is_safe_url(url)
        mock_dns.assert_not_called()


def test_link_local_ipv6_with_zone_blocked():
    infos = [(socket.AF_INET6, socket.SOCK_STREAM, 6, "", ("fe80::1%eth0", 0, 0, 2))]
    with patch("socket.getaddrinfo", return_value=infos):
        assert not is_safe_url("https://printer.example/")


def test_unresolvable_host_allowed():
    with patch("socket.getaddrinfo", side_effect=socket.gaierror("no such host")):
        assert is_safe_url("https://does-not-exist.example/")


# -----------------------------------------------------------------------
# require_http_url
# -----------------------------------------------------------------------


def test_require_http_url_strips():
    assert require_http_url("  https://example.com/a ") == "https://example.com/a"


@pytest.mark.parametrize("url", [None, "", "   "])
def test_require_http_url_missing(url):
    with pytest.raises(ValueError, match="URL is required"):
        require_http_url(url)


@pytest.mark.parametrize(
    "url",
    [
        "example.com/a",
        "mailto:a@b.com",
        "https://",
        "http://[::1",
        "https://x.com:abc/",
        "http://exa mple.com/",
    ],
)
def test_require_http_url_invalid(url):
    with pytest.raises(ValueError, match="Invalid URL format"):
        require_http_url(url)


# -----------------------------------------------------------------------
# wrap_external_content
# -----------------------------------------------------------------------


def test_wrap_external_content():
    wrapped = wrap_external_content("links", '{"links": []}')
    assert wrapped.startswith("<untrusted_links_content>\n")
    assert '{"links": []}\n</untrusted_links_content>' in wrapped
    assert "UNTRUSTED" in wrapped


def test_errors_not_wrapped():
    assert wrap_external_content("links", "Error: boom") == "Error: boom"
