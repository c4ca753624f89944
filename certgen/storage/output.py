"""Output file naming and writing for the certificate and its private key."""

import os
from pathlib import Path
from typing import Tuple

from certgen.common.errors import FileIOError


SERVER_FILES = ("public.crt", "private.key")
CLIENT_FILES = ("client.crt", "client.key")
KEY_FILE_MODE = 0o600


def output_paths(out_dir: Path, client: bool = False) -> Tuple[Path, Path]:
    """Return (certificate path, key path) inside out_dir."""
    cert_name, key_name = CLIENT_FILES if client else SERVER_FILES
    return out_dir / cert_name, out_dir / key_name


def ensure_output_dir(out_dir: Path):
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileIOError(f"Failed to create output directory {out_dir}: {e}") from e


def write_cert_file(cert_pem: bytes, destination: Path):
    """Save certificate to filesystem, replacing any existing file."""
    try:
        destination.write_bytes(cert_pem)
    except OSError as e:
        raise FileIOError(f"Failed to write data to {destination}: {e}") from e


def write_key_file(key_pem: bytes, destination: Path):
    """Save private key to filesystem; a newly created file is readable by the owner only."""
    try:
        fd = os.open(destination, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, KEY_FILE_MODE)
    except OSError as e:
        raise FileIOError(f"Failed to open {destination} for writing: {e}") from e
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(key_pem)
    except OSError as e:
        raise FileIOError(f"Failed to write data to {destination}: {e}") from e
