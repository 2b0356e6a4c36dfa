from urllib.parse import urlparse

from configs import UNKNOWN_DOMAIN
from errors import InvalidURL


def normalize_url(raw: str):
    """
    Return (url, parsed) for a raw input line.
    A missing http:// or https:// prefix gets http:// prepended; the
    returned url is the string that is hashed, requested and reported.
    """
    url = raw.strip()
    if not url.lower().startswith(("http://", "https://")):
        url = "http://" + url
    try:
        parsed = urlparse(url)
        # port access validates it; urlparse itself is lazy about ports
        parsed.port
    except ValueError as exc:
        raise InvalidURL(url, str(exc)) from exc
    return url, parsed


def domain_of(parsed) -> str:
    host = parsed.hostname or ""
    return host.lower() or UNKNOWN_DOMAIN
