"""
Self-Signed Certificate Generator
Creates one key pair and one X.509 certificate, optionally its own CA or a
client certificate, for a list of hostnames, IPs, email addresses and URIs.
"""

import argparse
import os
import sys
from importlib.metadata import PackageNotFoundError, version as dist_version
from pathlib import Path
from typing import List, NamedTuple

from cryptography import x509
from dotenv import load_dotenv

from certgen.common.errors import CertgenError, MissingInputError
from certgen.common.protocol import DEFAULT_DURATION, DEFAULT_ORG_NAME, CertificateRequest
from certgen.common.utils import (
    first_wildcard, format_duration, is_second_level_wildcard, parse_duration,
    split_hosts, user_and_hostname
)
from certgen.crypto import keys, pki
from certgen.crypto.identity import classify_hosts
from certgen.storage import output

load_dotenv()


class IssuedCertificate(NamedTuple):
    certificate: x509.Certificate
    cert_path: Path
    key_path: Path
    hosts: List[str]


def get_version() -> str:
    try:
        return dist_version("certgen")
    except PackageNotFoundError:
        return "(dev)"


def issue_self_signed_certificate(
    request: CertificateRequest,
    identity_string: str,
    serial_source=None,
    now=None
) -> IssuedCertificate:
    """Main function to generate the key pair, self-sign the certificate and write both files."""
    if not request.hosts:
        raise MissingInputError("Missing required --host parameter")

    algorithm = keys.select_algorithm(request.ecdsa_curve, request.ed25519)
    private_key = keys.generate_private_key(algorithm)

    identity = classify_hosts(request.hosts)
    template = pki.build_template(
        identity,
        organization=request.org_name,
        organizational_unit=identity_string,
        client=request.client,
        no_ca=request.no_ca,
        start_date=request.start_date,
        duration=request.duration,
        serial_source=serial_source,
        now=now,
    )
    certificate = pki.self_sign(template, private_key)

    cert_path, key_path = output.output_paths(request.out_dir, request.client)
    cert_pem = pki.cert_to_pem(certificate)
    key_pem = keys.marshal_private_key(private_key)

    output.ensure_output_dir(request.out_dir)
    output.write_cert_file(cert_pem, cert_path)
    output.write_key_file(key_pem, key_path)

    return IssuedCertificate(certificate, cert_path, key_path, split_hosts(request.hosts))


def print_summary(issued: IssuedCertificate):
    """Report the files written and the names the certificate covers."""
    print(f"Created a new certificate '{issued.cert_path}', '{issued.key_path}' "
          f"valid for the following names 📜")
    for host in issued.hosts:
        print(f' - "{host}"')
        if is_second_level_wildcard(host):
            print(f'   Warning: many browsers don\'t support second-level wildcards like "{host}" ⚠️')

    wildcard = first_wildcard(issued.hosts)
    if wildcard:
        print(f"\nReminder: X.509 wildcards only go one level deep, "
              f"so this won't match a.b.{wildcard[2:]} ℹ️")

    cert = issued.certificate
    print(f"\n  Fingerprint (SHA-256): {pki.get_cert_fingerprint(cert)}")
    print(f"  Valid from {cert.not_valid_before_utc} until {cert.not_valid_after_utc}")


def setup_argument_parser():
    """Configure command-line interface; defaults may come from the environment or .env."""
    parser = argparse.ArgumentParser(
        description="Generate a self-signed X.509 certificate for a TLS server or client"
    )
    parser.add_argument(
        "--host",
        default=os.getenv("CERTGEN_HOST", ""),
        help="Comma-separated hostnames and IPs to generate a certificate for"
    )
    parser.add_argument(
        "--ecdsa-curve",
        default=os.getenv("CERTGEN_ECDSA_CURVE", "P256"),
        help="ECDSA curve to use to generate a key. Valid values are P224, P256 (recommended), P384, P521"
    )
    parser.add_argument(
        "--ed25519",
        action="store_true",
        help="Generate an Ed25519 key"
    )
    parser.add_argument(
        "--org-name",
        default=os.getenv("CERTGEN_ORG_NAME", DEFAULT_ORG_NAME),
        help="Organization name used when generating the certs"
    )
    parser.add_argument(
        "--no-ca",
        action="store_true",
        help="Whether this cert should not be its own Certificate Authority"
    )
    parser.add_argument(
        "--client",
        action="store_true",
        help="Whether this cert is a client certificate"
    )
    parser.add_argument(
        "--start-date",
        default=os.getenv("CERTGEN_START_DATE", ""),
        help="Creation date formatted as Jan 1 15:04:05 2011 (UTC)"
    )
    parser.add_argument(
        "--duration",
        default=os.getenv("CERTGEN_DURATION", format_duration(DEFAULT_DURATION)),
        help="Duration that certificate is valid for, e.g. 8760h or 720h30m"
    )
    parser.add_argument(
        "--out",
        default=os.getenv("CERTGEN_OUT_DIR", "."),
        help="Output directory (default: current directory)"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {get_version()}"
    )
    return parser


def request_from_args(args) -> CertificateRequest:
    return CertificateRequest(
        hosts=args.host,
        org_name=args.org_name,
        no_ca=args.no_ca,
        client=args.client,
        ecdsa_curve=args.ecdsa_curve,
        ed25519=args.ed25519,
        start_date=args.start_date,
        duration=parse_duration(args.duration),
        out_dir=Path(args.out),
    )


def main(argv=None) -> int:
    identity_string = user_and_hostname()
    arguments = setup_argument_parser().parse_args(argv)

    try:
        request = request_from_args(arguments)
        issued = issue_self_signed_certificate(request, identity_string)
    except CertgenError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print_summary(issued)
    return 0


if __name__ == "__main__":
    sys.exit(main())
