"""Shared fixtures for certificate generation tests."""

from datetime import datetime, timezone

import pytest

from certgen.common.protocol import CertificateRequest
from certgen.crypto.identity import classify_hosts


MIXED_HOSTS = "10.0.0.1, admin@example.com, https://svc.local:8443, *.example.com"


@pytest.fixture
def fixed_now():
    return datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def mixed_identity():
    return classify_hosts(MIXED_HOSTS)


@pytest.fixture
def request_factory(tmp_path):
    def make(**overrides):
        fields = {"hosts": MIXED_HOSTS, "out_dir": tmp_path}
        fields.update(overrides)
        return CertificateRequest(**fields)
    return make
