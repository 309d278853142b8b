from urllib.parse import urlsplit, urlunsplit

from igscraper.config import TARGET_DOMAIN
from igscraper.errors import InvalidUrl, UnsupportedHost

# Canonical post address: https://instagram.com/<path>, no query or fragment.
PostURL = str


def normalize_post_url(raw: str, domain: str = TARGET_DOMAIN) -> PostURL:
    """
    Validates and canonicalizes a user supplied post link.

    Accepts /p/, /reel/, /tv/ and any other path on the platform domain.
    Tracking parameters and fragments never reach the renderer, so two links
    to the same post always normalize to the same string.
    """
    if not isinstance(raw, str) or not raw.strip():
        raise InvalidUrl()

    try:
        parts = urlsplit(raw.strip())
        host = parts.hostname
    except ValueError as exc:
        raise InvalidUrl() from exc

    if not parts.scheme or not host:
        raise InvalidUrl()

    host = host.lower()
    if host.startswith("www."):
        host = host[len("www."):]
    if host != domain:
        raise UnsupportedHost(host, domain)

    # Any scheme on the right host is coerced to https.
    return urlunsplit(("https", host, parts.path or "/", "", ""))
