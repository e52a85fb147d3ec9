"""Reject job URLs that point into private or internal networks.

The hostname is resolved here and again by the HTTP client, so a DNS
record that changes between the two lookups is not caught.
"""

from __future__ import annotations

import ipaddress
import socket
from urllib.parse import urlparse


class SSRFError(ValueError):
    """URL targets a private, loopback or metadata address."""


_BLOCKED_HOSTNAMES = {"localhost", "localhost.localdomain"}

_BLOCKED_IPS = {
    ipaddress.ip_address("169.254.169.254"),  # cloud metadata
    ipaddress.ip_address("0.0.0.0"),
}


def _is_blocked(addr: ipaddress.IPv4Address | ipaddress.IPv6Address) -> bool:
    return (
        addr in _BLOCKED_IPS
        or addr.is_private
        or addr.is_loopback
        or addr.is_reserved
        or addr.is_link_local
        or addr.is_multicast
        or addr.is_unspecified
    )


def validate_url(url: str) -> str:
    """Return `url` unchanged if it is safe to fetch.

    Raises SSRFError for internal targets and ValueError for malformed or
    unresolvable URLs.
    """
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise ValueError(f"Unsupported URL scheme: {parsed.scheme!r}")

    hostname = parsed.hostname
    if not hostname:
        raise ValueError(f"No hostname in URL: {url!r}")
    if hostname.lower() in _BLOCKED_HOSTNAMES:
        raise SSRFError(f"Blocked internal hostname: {hostname!r}")

    try:
        literal = ipaddress.ip_address(hostname)
    except ValueError:
        literal = None
    if literal is not None:
        if _is_blocked(literal):
            raise SSRFError(f"Blocked private/internal IP: {literal}")
        return url

    try:
        results = socket.getaddrinfo(hostname, None, socket.AF_UNSPEC, socket.SOCK_STREAM)
    except socket.gaierror as exc:
        raise ValueError(f"Cannot resolve hostname {hostname!r}: {exc}") from exc

    for *_, sockaddr in results:
        addr = ipaddress.ip_address(sockaddr[0])
        if _is_blocked(addr):
            raise SSRFError(f"Hostname {hostname!r} resolves to blocked address: {addr}")
    return url
