"""Error taxonomy for certificate generation; every failure is fatal to a run."""


class CertgenError(Exception):
    """Base class. Messages are prefixed with an upper-case code."""
    code = "CERTGEN_ERROR"

    def __init__(self, message: str):
        super().__init__(f"{self.code}: {message}")


class MissingInputError(CertgenError):
    """No identifiers were supplied."""
    code = "MISSING_INPUT"


class ConfigError(CertgenError):
    code = "BAD_CONFIG"


class UnrecognizedAlgorithmError(ConfigError):
    """Unknown curve or key algorithm selector."""
    code = "BAD_ALGORITHM"


class FormatError(CertgenError):
    code = "BAD_FORMAT"


class DateFormatError(FormatError):
    """Start date does not match the 'Jan 2 15:04:05 2006' layout."""
    code = "BAD_DATE"


class CryptoError(CertgenError):
    code = "CRYPTO_FAIL"


class KeyGenerationError(CryptoError):
    code = "KEYGEN_FAIL"


class SerialNumberGenerationError(CryptoError):
    code = "SERIAL_FAIL"


class SigningError(CryptoError):
    code = "SIGN_FAIL"


class MarshalError(CryptoError):
    code = "MARSHAL_FAIL"


class FileIOError(CertgenError):
    """An output file could not be created, written or closed."""
    code = "FILE_IO"
