"""Helper functions: identity string, identifier lists, Go-style durations, wildcard checks."""

import getpass
import os
import re
import socket
from datetime import timedelta
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Tuple

from certgen.common.errors import FormatError


_DURATION_PART = re.compile(r"(\d*\.?\d*)(ns|us|µs|μs|ms|s|m|h)")
_UNIT_MICROSECONDS = {
    "ns": Decimal("0.001"),
    "us": Decimal(1),
    "µs": Decimal(1),
    "μs": Decimal(1),
    "ms": Decimal(1000),
    "s": Decimal(1000000),
    "m": Decimal(60000000),
    "h": Decimal(3600000000),
}

_SECOND_LEVEL_WILDCARD = re.compile(r"^\*\.[0-9a-z_-]+$", re.IGNORECASE)


def lookup_current_user() -> Tuple[Optional[str], str]:
    """Return (username, full name) of the invoking user; username is None if unknown."""
    try:
        username = getpass.getuser()
    except (KeyError, OSError):
        return None, ""

    full_name = ""
    if hasattr(os, "getuid"):
        import pwd
        try:
            full_name = pwd.getpwuid(os.getuid()).pw_gecos.split(",")[0]
        except KeyError:
            pass
    return username, full_name


def user_and_hostname() -> str:
    """
    Build the "user@host (full name)" string used as organizational unit.

    Missing pieces are left out rather than reported, so the result may be
    partial or empty.
    """
    identity = ""
    username, full_name = lookup_current_user()
    if username is not None:
        identity = username + "@"
    try:
        identity += socket.gethostname()
    except OSError:
        pass
    if username is not None and full_name and full_name != username:
        identity += f" ({full_name})"
    return identity


def split_hosts(raw: str) -> List[str]:
    """Split a comma-separated identifier list, trimming blanks and dropping empty entries."""
    return [h.strip() for h in raw.split(",") if h.strip()]


def parse_duration(text: str) -> timedelta:
    """
    Parse a Go-style duration such as "8760h", "1h30m" or "-1.5s".

    Raises:
        FormatError: If the string is not a valid duration
    """
    value = text.strip()
    sign = 1
    if value[:1] in ("-", "+"):
        sign = -1 if value[0] == "-" else 1
        value = value[1:]
    if value == "0":
        return timedelta(0)
    if not value:
        raise FormatError(f"invalid duration {text!r}")

    micros = Decimal(0)
    pos = 0
    while pos < len(value):
        match = _DURATION_PART.match(value, pos)
        if not match or match.group(1) in ("", "."):
            raise FormatError(f"invalid duration {text!r}")
        try:
            micros += Decimal(match.group(1)) * _UNIT_MICROSECONDS[match.group(2)]
        except InvalidOperation as e:
            raise FormatError(f"invalid duration {text!r}") from e
        pos = match.end()

    try:
        return sign * timedelta(microseconds=int(micros))
    except OverflowError as e:
        raise FormatError(f"duration out of range {text!r}") from e


def _trim_fraction(whole: int, frac: int, width: int) -> str:
    if not frac:
        return str(whole)
    return f"{whole}.{frac:0{width}d}".rstrip("0")


def format_duration(value: timedelta) -> str:
    """Render a timedelta the way Go prints durations, e.g. 8760h0m0s."""
    micros = value // timedelta(microseconds=1)
    if micros == 0:
        return "0s"
    sign = "-" if micros < 0 else ""
    micros = abs(micros)

    if micros < 1000:
        return f"{sign}{micros}µs"
    if micros < 1000000:
        return f"{sign}{_trim_fraction(*divmod(micros, 1000), 3)}ms"

    hours, micros = divmod(micros, 3600000000)
    minutes, micros = divmod(micros, 60000000)
    out = sign
    if hours:
        out += f"{hours}h"
    if hours or minutes:
        out += f"{minutes}m"
    return out + _trim_fraction(*divmod(micros, 1000000), 6) + "s"


def is_second_level_wildcard(name: str) -> bool:
    """True for names like "*.example" that many browsers refuse to match."""
    return bool(_SECOND_LEVEL_WILDCARD.match(name))


def first_wildcard(names: List[str]) -> Optional[str]:
    """Return the first "*."-prefixed name, if any."""
    for name in names:
        if name.startswith("*."):
            return name
    return None
