import os
import hashlib

from configs import HASH_PREFIX_LEN


def url_hash(url: str, length: int = HASH_PREFIX_LEN) -> str:
    """
    First `length` hex chars of the SHA-256 of the URL string.
    Distinct URLs sharing a prefix map to the same artifact; the later
    write replaces the earlier one.
    """
    return hashlib.sha256(url.encode("utf-8")).hexdigest()[:length]


def artifact_path(output_dir: str, domain: str, url: str) -> str:
    return os.path.join(output_dir, domain, url_hash(url))
