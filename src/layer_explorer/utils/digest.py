"""Digest calculation and validation utilities."""

import hashlib
import re
from typing import Union

# algorithm:encoded, as used by OCI content descriptors
DIGEST_PATTERN = re.compile(r"^[a-z0-9]+(?:[.+_-][a-z0-9]+)*:[a-zA-Z0-9=_-]+$")

SUPPORTED_ALGORITHMS = {"sha256": 64, "sha512": 128}


def calculate_digest(data: Union[bytes, bytearray], algorithm: str = "sha256") -> str:
    """Calculate digest of data.

    Args:
        data: Data to hash
        algorithm: Hash algorithm (default: sha256)

    Returns:
        Digest string in format "algorithm:hex"

    Raises:
        ValueError: If algorithm is not supported
    """
    if algorithm not in SUPPORTED_ALGORITHMS:
        raise ValueError(f"Unsupported algorithm: {algorithm}")

    return f"{algorithm}:{hashlib.new(algorithm, data).hexdigest()}"


def validate_digest(digest: str) -> bool:
    """Validate digest format.

    Only sha256 and sha512 digests with a hex encoding of the right
    length are accepted.
    """
    if not isinstance(digest, str) or not DIGEST_PATTERN.match(digest):
        return False

    algorithm, encoded = digest.split(":", 1)
    length = SUPPORTED_ALGORITHMS.get(algorithm)
    return length == len(encoded) and re.fullmatch(r"[a-f0-9]+", encoded) is not None


def verify_digest(data: Union[bytes, bytearray], expected_digest: str) -> bool:
    """Verify data matches expected digest.

    Raises:
        ValueError: If digest format is invalid
    """
    if not validate_digest(expected_digest):
        raise ValueError(f"Invalid digest format: {expected_digest}")

    algorithm, _ = expected_digest.split(":", 1)
    return calculate_digest(data, algorithm) == expected_digest
