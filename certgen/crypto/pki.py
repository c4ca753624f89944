"""Certificate template assembly: usage derivation, validity, serial numbers and self-signing."""

import re
import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable, List, NamedTuple, Optional, Set, Tuple

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.x509.oid import NameOID

from certgen.common.errors import (
    DateFormatError, FormatError, SerialNumberGenerationError, SigningError
)
from certgen.common.protocol import (
    DEFAULT_DURATION, CertificateTemplate, ExtKeyUsage, KeyUsage, SubjectIdentity
)
from certgen.crypto.keys import get_hash_algo


START_DATE_LAYOUT = "%b %d %H:%M:%S %Y"
# minutes and seconds are fixed-width, day and hour are not
START_DATE_SHAPE = re.compile(r"[A-Za-z]{3} \d{1,2} \d{1,2}:\d{2}:\d{2} \d{4}")
SERIAL_NUMBER_LIMIT = 1 << 128


class ModeRule(NamedTuple):
    is_ca: bool
    client_auth: bool


# (client, no_ca) -> rule. Client mode overrides CA mode.
MODE_TABLE = {
    (True, False): ModeRule(is_ca=False, client_auth=True),
    (True, True): ModeRule(is_ca=False, client_auth=True),
    (False, False): ModeRule(is_ca=True, client_auth=False),
    (False, True): ModeRule(is_ca=False, client_auth=False),
}


def resolve_mode(client: bool, no_ca: bool) -> ModeRule:
    return MODE_TABLE[(bool(client), bool(no_ca))]


def derive_key_usage(is_ca: bool) -> Set[KeyUsage]:
    """Digital signature and key encipherment always; certificate signing only for a CA."""
    usage = {KeyUsage.DIGITAL_SIGNATURE, KeyUsage.KEY_ENCIPHERMENT}
    if is_ca:
        usage.add(KeyUsage.CERT_SIGN)
    return usage


def derive_ext_key_usage(identity: SubjectIdentity, client_auth: bool) -> List[ExtKeyUsage]:
    """Pick extended key usages from the populated SAN categories and client mode."""
    purposes = []
    if identity.has_server_names():
        purposes.append(ExtKeyUsage.SERVER_AUTH)
    if identity.email_addresses:
        purposes.append(ExtKeyUsage.EMAIL_PROTECTION)
    if client_auth:
        purposes.append(ExtKeyUsage.CLIENT_AUTH)
    return purposes


def random_serial() -> int:
    return secrets.randbelow(SERIAL_NUMBER_LIMIT)


def new_serial_number(source: Optional[Callable[[], int]] = None) -> int:
    """
    Draw a serial number uniformly from [0, 2**128).

    Raises:
        SerialNumberGenerationError: If the random source fails
    """
    source = source or random_serial
    try:
        return source()
    except (OSError, NotImplementedError) as e:
        raise SerialNumberGenerationError(f"Failed to generate serial number: {e}") from e


def parse_start_date(text: str) -> datetime:
    """
    Parse a creation date laid out as "Jan 2 15:04:05 2006", taken as UTC.

    Raises:
        DateFormatError: If the text does not match the layout
    """
    if not START_DATE_SHAPE.fullmatch(text):
        raise DateFormatError(f"Failed to parse creation date: {text!r} does not match 'Jan 2 15:04:05 2006'")
    try:
        parsed = datetime.strptime(text, START_DATE_LAYOUT)
    except ValueError as e:
        raise DateFormatError(f"Failed to parse creation date: {e}") from e
    return parsed.replace(tzinfo=timezone.utc)


def validity_window(
    start_date: str = "",
    duration: timedelta = DEFAULT_DURATION,
    now: Optional[datetime] = None
) -> Tuple[datetime, datetime]:
    """Return (not_before, not_after); not_before is now unless start_date is given."""
    if start_date:
        not_before = parse_start_date(start_date)
    else:
        not_before = now or datetime.now(timezone.utc)
    try:
        return not_before, not_before + duration
    except OverflowError as e:
        raise FormatError(f"validity window out of range: {not_before} + {duration}") from e


def build_template(
    identity: SubjectIdentity,
    organization: str,
    organizational_unit: str,
    client: bool = False,
    no_ca: bool = False,
    start_date: str = "",
    duration: timedelta = DEFAULT_DURATION,
    serial_source: Optional[Callable[[], int]] = None,
    now: Optional[datetime] = None
) -> CertificateTemplate:
    """
    Assemble the template for a self-signed certificate.

    Args:
        identity: Classified subject alternative names
        organization: Subject organization (O)
        organizational_unit: Subject organizational unit (OU), the user@host string
        client: Issue a client certificate; never a CA
        no_ca: Do not make the certificate its own CA
        start_date: Optional "Jan 2 15:04:05 2006" creation date
        duration: Validity period added to the start
        serial_source: Callable returning the serial number (random by default)
        now: Clock override used when start_date is empty

    Returns:
        CertificateTemplate ready for sign_certificate()
    """
    mode = resolve_mode(client, no_ca)
    not_before, not_after = validity_window(start_date, duration, now)
    serial_number = new_serial_number(serial_source)

    return CertificateTemplate(
        serial_number=serial_number,
        organization=organization,
        organizational_unit=organizational_unit,
        not_before=not_before,
        not_after=not_after,
        key_usage=derive_key_usage(mode.is_ca),
        ext_key_usage=derive_ext_key_usage(identity, mode.client_auth),
        identity=identity,
        is_ca=mode.is_ca,
        basic_constraints_valid=True,
    )


def subject_name(template: CertificateTemplate) -> x509.Name:
    """Build O/OU name attributes, skipping empty values."""
    attributes = []
    if template.organization:
        attributes.append(x509.NameAttribute(NameOID.ORGANIZATION_NAME, template.organization))
    if template.organizational_unit:
        attributes.append(
            x509.NameAttribute(NameOID.ORGANIZATIONAL_UNIT_NAME, template.organizational_unit)
        )
    return x509.Name(attributes)


def san_entries(identity: SubjectIdentity) -> list:
    """General names ordered DNS, email, IP, URI."""
    return (
        [x509.DNSName(name) for name in identity.dns_names]
        + [x509.RFC822Name(addr) for addr in identity.email_addresses]
        + [x509.IPAddress(ip) for ip in identity.ip_addresses]
        + [x509.UniformResourceIdentifier(uri) for uri in identity.uris]
    )


def key_usage_extension(usage: Set[KeyUsage]) -> x509.KeyUsage:
    flags = dict(
        digital_signature=False,
        content_commitment=False,
        key_encipherment=False,
        data_encipherment=False,
        key_agreement=False,
        key_cert_sign=False,
        crl_sign=False,
        encipher_only=False,
        decipher_only=False,
    )
    for bit in usage:
        flags[bit.value] = True
    return x509.KeyUsage(**flags)


def build_certificate(template: CertificateTemplate, issuer: CertificateTemplate, public_key):
    """Translate the template into a CertificateBuilder with all extensions."""
    builder = x509.CertificateBuilder()
    builder = builder.subject_name(subject_name(template))
    builder = builder.issuer_name(subject_name(issuer))
    builder = builder.public_key(public_key)
    builder = builder.serial_number(template.serial_number)
    builder = builder.not_valid_before(template.not_before)
    builder = builder.not_valid_after(template.not_after)

    if template.basic_constraints_valid:
        builder = builder.add_extension(
            x509.BasicConstraints(ca=template.is_ca, path_length=None),
            critical=True,
        )
    builder = builder.add_extension(key_usage_extension(template.key_usage), critical=True)
    if template.ext_key_usage:
        builder = builder.add_extension(
            x509.ExtendedKeyUsage([purpose.oid for purpose in template.ext_key_usage]),
            critical=False,
        )
    names = san_entries(template.identity)
    if names:
        builder = builder.add_extension(x509.SubjectAlternativeName(names), critical=False)
    if template.is_ca:
        builder = builder.add_extension(
            x509.SubjectKeyIdentifier.from_public_key(public_key),
            critical=False,
        )
    return builder


def sign_certificate(
    template: CertificateTemplate,
    issuer: CertificateTemplate,
    public_key,
    signing_key
) -> x509.Certificate:
    """
    Sign the template with signing_key; pass the template as issuer for a self-signed cert.

    Raises:
        SigningError: If the template cannot be encoded or signed
    """
    try:
        builder = build_certificate(template, issuer, public_key)
        return builder.sign(signing_key, get_hash_algo(signing_key))
    except (TypeError, ValueError) as e:
        raise SigningError(f"Failed to create certificate: {e}") from e


def self_sign(template: CertificateTemplate, private_key) -> x509.Certificate:
    return sign_certificate(template, template, private_key.public_key(), private_key)


def cert_to_pem(cert: x509.Certificate) -> bytes:
    """PEM "CERTIFICATE" block for the certificate."""
    return cert.public_bytes(serialization.Encoding.PEM)


def get_cert_fingerprint(cert: x509.Certificate) -> str:
    """Hex SHA-256 fingerprint of the certificate."""
    return cert.fingerprint(hashes.SHA256()).hex()
