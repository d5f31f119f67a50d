"""Content fingerprint for uploaded files - detects re-uploads of unchanged bytes. Not a security boundary."""
import hashlib


def compute_file_fingerprint(data: bytes) -> str:
    """MD5 hex digest of the raw file bytes."""
    return hashlib.md5(data).hexdigest()
