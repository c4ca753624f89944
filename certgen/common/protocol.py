"""Pydantic models for certificate generation: classified identities, templates and run requests."""

from datetime import datetime, timedelta
from enum import Enum
from ipaddress import IPv4Address, IPv6Address
from pathlib import Path
from typing import List, Set, Union

from pydantic import BaseModel, ConfigDict, Field
from cryptography.x509.oid import ExtendedKeyUsageOID


DEFAULT_ORG_NAME = "Certgen Development"
DEFAULT_DURATION = timedelta(days=365)


class KeyAlgorithm(str, Enum):
    """Signing key algorithms the generator can produce."""
    P224 = "P224"
    P256 = "P256"
    P384 = "P384"
    P521 = "P521"
    ED25519 = "Ed25519"


class KeyUsage(str, Enum):
    """Key usage bits; values are the matching x509.KeyUsage argument names."""
    DIGITAL_SIGNATURE = "digital_signature"
    KEY_ENCIPHERMENT = "key_encipherment"
    CERT_SIGN = "key_cert_sign"


class ExtKeyUsage(str, Enum):
    """Extended key usage purposes."""
    SERVER_AUTH = "server_auth"
    EMAIL_PROTECTION = "email_protection"
    CLIENT_AUTH = "client_auth"

    @property
    def oid(self):
        return _EXT_KEY_USAGE_OIDS[self]


_EXT_KEY_USAGE_OIDS = {
    ExtKeyUsage.SERVER_AUTH: ExtendedKeyUsageOID.SERVER_AUTH,
    ExtKeyUsage.EMAIL_PROTECTION: ExtendedKeyUsageOID.EMAIL_PROTECTION,
    ExtKeyUsage.CLIENT_AUTH: ExtendedKeyUsageOID.CLIENT_AUTH,
}


class SubjectIdentity(BaseModel):
    """Identifiers routed into the four SAN categories, each in input order."""
    ip_addresses: List[Union[IPv4Address, IPv6Address]] = Field(default_factory=list)
    email_addresses: List[str] = Field(default_factory=list)
    uris: List[str] = Field(default_factory=list)
    dns_names: List[str] = Field(default_factory=list)

    def has_server_names(self) -> bool:
        """True when any IP, DNS or URI entry is present."""
        return bool(self.ip_addresses or self.dns_names or self.uris)


class CertificateTemplate(BaseModel):
    """Everything needed to self-sign one certificate."""
    model_config = ConfigDict(frozen=True)

    serial_number: int = Field(..., description="Random integer in [0, 2**128)")
    organization: str
    organizational_unit: str = Field("", description="user@host (full name) identity string")
    not_before: datetime
    not_after: datetime
    key_usage: Set[KeyUsage]
    ext_key_usage: List[ExtKeyUsage] = Field(default_factory=list)
    identity: SubjectIdentity = Field(default_factory=SubjectIdentity)
    is_ca: bool = False
    basic_constraints_valid: bool = True


class CertificateRequest(BaseModel):
    """Resolved inputs of one generator run."""
    hosts: str = Field("", description="Comma-separated hostnames, IPs, emails and URIs")
    org_name: str = DEFAULT_ORG_NAME
    no_ca: bool = False
    client: bool = False
    ecdsa_curve: str = "P256"
    ed25519: bool = False
    start_date: str = Field("", description="Creation date formatted as Jan 2 15:04:05 2006")
    duration: timedelta = DEFAULT_DURATION
    out_dir: Path = Path(".")
