from datetime import timedelta

import pytest

from certgen.common import utils
from certgen.common.errors import FormatError


@pytest.mark.parametrize("text, expected", [
    ("8760h", timedelta(days=365)),
    ("8760h0m0s", timedelta(days=365)),
    ("1h30m", timedelta(minutes=90)),
    ("1.5s", timedelta(milliseconds=1500)),
    ("300ms", timedelta(milliseconds=300)),
    ("-2m", timedelta(minutes=-2)),
    ("+45s", timedelta(seconds=45)),
    ("0", timedelta(0)),
    ("1500us", timedelta(microseconds=1500)),
])
def test_parse_duration(text, expected):
    assert utils.parse_duration(text) == expected


@pytest.mark.parametrize("text", ["", "-", "5", "1d", "h", "1h 30m", "abc", ".s"])
def test_parse_duration_rejects_garbage(text):
    with pytest.raises(FormatError):
        utils.parse_duration(text)


@pytest.mark.parametrize("value, expected", [
    (timedelta(days=365), "8760h0m0s"),
    (timedelta(seconds=90), "1m30s"),
    (timedelta(milliseconds=1500), "1.5s"),
    (timedelta(milliseconds=300), "300ms"),
    (timedelta(0), "0s"),
    (timedelta(hours=-2), "-2h0m0s"),
])
def test_format_duration(value, expected):
    assert utils.format_duration(value) == expected


def test_split_hosts():
    assert utils.split_hosts(" a.example.com,,  10.0.0.1 , ") == ["a.example.com", "10.0.0.1"]
    assert utils.split_hosts("") == []


@pytest.mark.parametrize("name, expected", [
    ("*.example", True),
    ("*.LOCAL", True),
    ("*.dev_box-1", True),
    ("*.example.com", False),
    ("*.sub.example.com", False),
    ("example", False),
])
def test_second_level_wildcard(name, expected):
    assert utils.is_second_level_wildcard(name) is expected


def test_first_wildcard():
    assert utils.first_wildcard(["a.com", "*.b.com", "*.c.com"]) == "*.b.com"
    assert utils.first_wildcard(["a.com"]) is None


@pytest.fixture
def host_box(monkeypatch):
    monkeypatch.setattr(utils.socket, "gethostname", lambda: "box")


def test_identity_string_full(monkeypatch, host_box):
    monkeypatch.setattr(utils, "lookup_current_user", lambda: ("alice", "Alice Smith"))
    assert utils.user_and_hostname() == "alice@box (Alice Smith)"


def test_identity_string_skips_redundant_full_name(monkeypatch, host_box):
    monkeypatch.setattr(utils, "lookup_current_user", lambda: ("alice", "alice"))
    assert utils.user_and_hostname() == "alice@box"


def test_identity_string_without_user(monkeypatch, host_box):
    monkeypatch.setattr(utils, "lookup_current_user", lambda: (None, ""))
    assert utils.user_and_hostname() == "box"


def test_identity_string_without_hostname(monkeypatch):
    def no_hostname():
        raise OSError("no hostname")

    monkeypatch.setattr(utils, "lookup_current_user", lambda: ("alice", ""))
    monkeypatch.setattr(utils.socket, "gethostname", no_hostname)
    assert utils.user_and_hostname() == "alice@"
