"""
Prompt hashing utilities.

Provides a stable digest of assembled instruction text so that a prompt
can be identified in transparency records and events without shipping
the full text around.

IMPORTANT:
- This module hashes text exactly as given. No normalization occurs here.
"""

import hashlib


def compute_text_hash(text: str) -> str:
    """
    Compute a human-readable SHA-256 digest of UTF-8 encoded text.

    Returns:
        A hash string with an explicit algorithm prefix.
        Example: ``SHA-256:3b7c0e4c...``
    """
    if not isinstance(text, str):
        raise TypeError(
            "compute_text_hash expects str, "
            f"got {type(text).__name__}"
        )

    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()
    return f"SHA-256:{digest}"
