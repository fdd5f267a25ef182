"""Content fingerprints for detecting hand-edited files."""

import hashlib


def fingerprint(content: str) -> str:
    """SHA-256 hex digest of the UTF-8 encoded content."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()
