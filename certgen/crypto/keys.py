"""Key pair generation, signature hash selection and PKCS#8 private key marshalling."""

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519

from certgen.common.errors import KeyGenerationError, MarshalError, UnrecognizedAlgorithmError
from certgen.common.protocol import KeyAlgorithm


_CURVES = {
    KeyAlgorithm.P224: ec.SECP224R1,
    KeyAlgorithm.P256: ec.SECP256R1,
    KeyAlgorithm.P384: ec.SECP384R1,
    KeyAlgorithm.P521: ec.SECP521R1,
}


def select_algorithm(ecdsa_curve: str, use_ed25519: bool = False) -> KeyAlgorithm:
    """
    Map the command-line key selectors to a KeyAlgorithm.

    Args:
        ecdsa_curve: Curve name, one of P224, P256, P384, P521 (case-sensitive)
        use_ed25519: Generate an Ed25519 key instead, whatever the curve says

    Raises:
        UnrecognizedAlgorithmError: If the curve name is unknown
    """
    if use_ed25519:
        return KeyAlgorithm.ED25519
    try:
        algorithm = KeyAlgorithm(ecdsa_curve)
    except ValueError:
        algorithm = None
    if algorithm not in _CURVES:
        raise UnrecognizedAlgorithmError(f"Unrecognized elliptic curve: {ecdsa_curve!r}")
    return algorithm


def generate_private_key(algorithm: KeyAlgorithm):
    """Create a new private key; the public half is available via public_key()."""
    try:
        if algorithm == KeyAlgorithm.ED25519:
            return ed25519.Ed25519PrivateKey.generate()
        return ec.generate_private_key(_CURVES[algorithm]())
    except KeyError as e:
        raise UnrecognizedAlgorithmError(f"Unsupported key algorithm: {algorithm!r}") from e
    except (UnsupportedAlgorithm, ValueError) as e:
        raise KeyGenerationError(f"Failed to generate private key: {e}") from e


def get_hash_algo(private_key):
    """Return the signature hash matching the key; None for Ed25519."""
    if isinstance(private_key, ed25519.Ed25519PrivateKey):
        return None
    if private_key.key_size > 500:
        return hashes.SHA512()
    if private_key.key_size > 300:
        return hashes.SHA384()
    return hashes.SHA256()


def marshal_private_key(private_key) -> bytes:
    """Serialize the key as unencrypted PKCS#8 inside a PEM "PRIVATE KEY" block."""
    try:
        return private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption()
        )
    except (TypeError, ValueError, UnsupportedAlgorithm) as e:
        raise MarshalError(f"Unable to marshal private key: {e}") from e
