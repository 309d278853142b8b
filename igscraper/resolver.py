"""
Turns pooled raw candidates into validated, deduplicated MediaItems.

Everything rejected here is expected noise (the script scanner sweeps up
profile pictures, static assets and half-matched fragments), so rejections
are logged at debug level and never raised.
"""

import logging
from typing import Iterable, List, Optional, Set
from urllib.parse import SplitResult, urlsplit, urlunsplit

from igscraper.adapters.base import MediaItem, StrategyOutcome
from igscraper.config import DEFAULT_EXTRACTION_CONFIG, ExtractionConfig

logger = logging.getLogger(__name__)

IMAGE = "image"
VIDEO = "video"


def parse_candidate(value: str) -> Optional[SplitResult]:
    """Parses an absolute http(s) URL, or returns None."""
    try:
        parts = urlsplit((value or "").strip())
        host = parts.hostname
    except ValueError:
        return None
    if parts.scheme.lower() not in ("http", "https") or not host:
        return None
    return parts


def is_trusted_host(host: Optional[str], config: ExtractionConfig = DEFAULT_EXTRACTION_CONFIG) -> bool:
    if not host:
        return False
    host = host.lower().rstrip(".")
    return any(host == s or host.endswith("." + s) for s in config.trusted_host_suffixes)


def canonical_url(parts: SplitResult) -> str:
    # Hosts and schemes are case-insensitive; CDN paths and signed queries are not.
    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), parts.path, parts.query, ""))


def classify_media(url: str, config: ExtractionConfig = DEFAULT_EXTRACTION_CONFIG) -> str:
    path = urlsplit(url).path.lower()
    if any(path.endswith("." + ext) for ext in config.video_extensions):
        return VIDEO
    return IMAGE


def resolve_candidates(
    outcomes: Iterable[StrategyOutcome],
    config: ExtractionConfig = DEFAULT_EXTRACTION_CONFIG,
) -> List[MediaItem]:
    """
    Validates every candidate of every outcome, in outcome order.
    First occurrence wins, so structured-tag hits come before ld+json hits,
    which come before script-scan hits.
    """
    seen: Set[str] = set()
    items: List[MediaItem] = []

    for outcome in outcomes:
        for candidate in outcome.candidates:
            parts = parse_candidate(candidate.value)
            if parts is None:
                logger.debug("[%s] dropped unparseable candidate %r", candidate.strategy, candidate.value[:120])
                continue
            if not is_trusted_host(parts.hostname, config):
                logger.debug("[%s] dropped untrusted host %s", candidate.strategy, parts.hostname)
                continue

            url = canonical_url(parts)
            if url in seen:
                continue
            seen.add(url)
            items.append(MediaItem(type=classify_media(url, config), url=url))

    return items
