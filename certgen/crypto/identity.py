"""Route caller-supplied identifiers into IP, email, URI and DNS subject alternative names."""

import ipaddress
import re
from email.utils import parseaddr
from enum import Enum
from typing import Any, Optional, Tuple
from urllib.parse import urlsplit

from certgen.common.protocol import SubjectIdentity
from certgen.common.utils import split_hosts


_ATEXT = "[A-Za-z0-9!#$%&'*+/=?^_`{|}~\u0080-\U0010ffff-]"
_DOT_ATOM = rf"{_ATEXT}+(?:\.{_ATEXT}+)*"
_ADDR_SPEC = re.compile(rf"{_DOT_ATOM}@{_DOT_ATOM}")

_HOST_CHARS = re.compile("[A-Za-z0-9\\-._~!$&'()*+,;=:\\[\\]<>\"%\u0080-\U0010ffff]+")
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_OPTIONAL_PORT = re.compile(r":[0-9]*")


class SanCategory(str, Enum):
    IP = "ip"
    EMAIL = "email"
    URI = "uri"
    DNS = "dns"


def parse_ip(token: str) -> Optional[Any]:
    """Return an IPv4Address/IPv6Address for a bare literal, else None."""
    # zoned addresses like fe80::1%eth0 cannot go into a SAN
    if "%" in token:
        return None
    try:
        return ipaddress.ip_address(token)
    except ValueError:
        return None


def parse_email(token: str) -> Optional[str]:
    """
    Return the token if it is a single plain address.

    The parsed address must render back to exactly the token, so
    display-name forms like '"Name" <a@b.c>' or '<a@b.c>' fall through.
    """
    name, address = parseaddr(token)
    if name or address != token:
        return None
    if not _ADDR_SPEC.fullmatch(address):
        return None
    return address


def parse_uri(token: str) -> Optional[str]:
    """Return the token if it has both a scheme and a host, else None."""
    if any(c.isspace() for c in token):
        return None
    try:
        parts = urlsplit(token)
    except ValueError:
        return None
    host = parts.netloc.rpartition("@")[2]
    if parts.scheme and host and valid_host(host):
        return token
    return None


def valid_host(host: str) -> bool:
    """Check an authority host[:port] the way a strict URL parser would."""
    if not _HOST_CHARS.fullmatch(host) or _BAD_ESCAPE.search(host):
        return False
    if host.startswith("["):
        end = host.rfind("]")
        if end < 0:
            return False
        port = host[end + 1:]
    else:
        colon = host.rfind(":")
        port = host[colon:] if colon >= 0 else ""
    # any digit string is a valid port here, 65535 is not an upper bound
    return port == "" or bool(_OPTIONAL_PORT.fullmatch(port))


# First match wins; anything left over is taken as a DNS name unchecked.
_CLASSIFIERS = (
    (SanCategory.IP, parse_ip),
    (SanCategory.EMAIL, parse_email),
    (SanCategory.URI, parse_uri),
)


def classify(token: str) -> Tuple[SanCategory, Any]:
    """Return (category, value) for one trimmed, non-empty identifier."""
    for category, parse in _CLASSIFIERS:
        value = parse(token)
        if value is not None:
            return category, value
    return SanCategory.DNS, token


def classify_hosts(raw: str) -> SubjectIdentity:
    """
    Partition a comma-separated identifier list into SAN categories.

    Args:
        raw: Identifiers as typed by the caller, e.g. "10.0.0.1, *.example.com"

    Returns:
        SubjectIdentity with each category in input order, duplicates kept
    """
    identity = SubjectIdentity()
    buckets = {
        SanCategory.IP: identity.ip_addresses,
        SanCategory.EMAIL: identity.email_addresses,
        SanCategory.URI: identity.uris,
        SanCategory.DNS: identity.dns_names,
    }
    for token in split_hosts(raw):
        category, value = classify(token)
        buckets[category].append(value)
    return identity
