from ipaddress import ip_address

import pytest

from certgen.crypto.identity import SanCategory, classify, classify_hosts


@pytest.mark.parametrize("token", ["10.0.0.1", "192.168.1.254", "::1", "2001:db8::1", "::ffff:10.0.0.1"])
def test_ip_literals_are_ips(token):
    category, value = classify(token)
    assert category == SanCategory.IP
    assert value == ip_address(token)


@pytest.mark.parametrize("token", [
    "admin@example.com",
    "first.last+tag@sub.example.org",
    "root@localhost",
])
def test_plain_addresses_are_emails(token):
    assert classify(token) == (SanCategory.EMAIL, token)


@pytest.mark.parametrize("token", [
    '"Admin" <admin@example.com>',
    "Admin <admin@example.com>",
    "<admin@example.com>",
])
def test_wrapped_addresses_fall_back_to_dns(token):
    assert classify(token) == (SanCategory.DNS, token)


@pytest.mark.parametrize("token", [
    "spiffe://example.org/svc",
    "https://svc.local:8443",
    "https://user@svc.local/path",
    "urn://example/thing",
    "https://[::1]:8443/status",
    "http://host:99999",
    "http://host:",
])
def test_scheme_and_host_make_a_uri(token):
    assert classify(token) == (SanCategory.URI, token)


@pytest.mark.parametrize("token", [
    "example.com",
    "*.example.com",
    "not a valid uri",
    "localhost:8080",
    "fe80::1%eth0",
    "999.1.1.1",
    "bad_host!name",
    "http://host:abc",
    "http://a|b",
    "http://a{b}",
    "http://a%zzb",
    "http://[::1",
])
def test_everything_else_is_dns(token):
    assert classify(token) == (SanCategory.DNS, token)


def test_mixed_list_is_partitioned(mixed_identity):
    assert mixed_identity.ip_addresses == [ip_address("10.0.0.1")]
    assert mixed_identity.email_addresses == ["admin@example.com"]
    assert mixed_identity.uris == ["https://svc.local:8443"]
    assert mixed_identity.dns_names == ["*.example.com"]


def test_blanks_are_trimmed_and_empty_entries_skipped():
    identity = classify_hosts("  b.example.com , ,a.example.com,, ")
    assert identity.dns_names == ["b.example.com", "a.example.com"]


def test_duplicates_are_kept_in_order():
    identity = classify_hosts("10.0.0.2,10.0.0.1,10.0.0.2")
    assert identity.ip_addresses == [ip_address("10.0.0.2"), ip_address("10.0.0.1"), ip_address("10.0.0.2")]


def test_no_usable_identifiers_gives_empty_identity():
    identity = classify_hosts(" , ,")
    assert not identity.has_server_names()
    assert identity.email_addresses == []
