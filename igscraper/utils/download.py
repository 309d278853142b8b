"""
Streaming downloader for resolved media.

Bytes are copied from the CDN in fixed-size chunks and never held in memory
as a whole, so a long reel costs the same RAM as a thumbnail.
"""

import asyncio
import logging
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

import requests

from igscraper.adapters.base import MediaItem
from igscraper.config import DEFAULT_EXTRACTION_CONFIG, UA, ExtractionConfig
from igscraper.errors import DownloadFailed
from igscraper.resolver import is_trusted_host, parse_candidate

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192
TIMEOUT = 30
DEFAULT_CONTENT_TYPE = "application/octet-stream"


def extension_for_content_type(content_type: Optional[str]) -> str:
    """
    video/mp4 -> mp4, image/jpeg -> jpg, image/webp -> webp, else bin.
    """
    ct = (content_type or "").split(";", 1)[0].strip().lower()
    if "mp4" in ct:
        return "mp4"
    if "jpeg" in ct:
        return "jpg"
    _, _, subtype = ct.partition("/")
    return subtype or "bin"


def open_media_stream(
    url: str,
    session: Optional[requests.Session] = None,
    config: ExtractionConfig = DEFAULT_EXTRACTION_CONFIG,
    timeout: int = TIMEOUT,
) -> requests.Response:
    """
    Starts a streamed GET against a trusted media host.
    The caller owns the returned response and must close it.
    """
    parts = parse_candidate(url)
    if parts is None or not is_trusted_host(parts.hostname, config):
        raise DownloadFailed(url, reason="not a trusted media host")

    http = session or requests
    try:
        resp = http.get(url, stream=True, timeout=timeout, headers={"User-Agent": UA})
    except requests.RequestException as exc:
        raise DownloadFailed(url, reason=str(exc)) from exc

    if not resp.ok:
        status = resp.status_code
        resp.close()
        raise DownloadFailed(url, status=status)
    return resp


def stream_media(
    url: str,
    chunk_size: int = CHUNK_SIZE,
    session: Optional[requests.Session] = None,
) -> Iterator[bytes]:
    with open_media_stream(url, session=session) as resp:
        try:
            for chunk in resp.iter_content(chunk_size=chunk_size):
                if chunk:
                    yield chunk
        except requests.RequestException as exc:
            raise DownloadFailed(url, reason=str(exc)) from exc


def download_item(
    item: MediaItem,
    out_dir: Path,
    index: int = 0,
    session: Optional[requests.Session] = None,
) -> Path:
    """Writes one item to out_dir/instagram-media-<index>.<ext> and returns the path."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    with open_media_stream(item.url, session=session) as resp:
        content_type = resp.headers.get("Content-Type") or DEFAULT_CONTENT_TYPE
        path = out_dir / f"instagram-media-{index}.{extension_for_content_type(content_type)}"
        try:
            with open(path, "wb") as f:
                for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
        except requests.RequestException as exc:
            # Connection dropped mid-body; never leave a truncated file behind.
            path.unlink(missing_ok=True)
            raise DownloadFailed(item.url, reason=str(exc)) from exc

    logger.info("saved %s (%s)", path, content_type)
    return path


async def download_items(
    items: Sequence[MediaItem],
    out_dir: str,
    session: Optional[requests.Session] = None,
) -> List[Path]:
    """
    Downloads every item one after another off the event loop.
    A failed item is logged and skipped; the rest still download.
    """
    saved: List[Path] = []
    for index, item in enumerate(items):
        try:
            path = await asyncio.to_thread(download_item, item, Path(out_dir), index, session)
        except DownloadFailed as exc:
            logger.warning("skipping %s: %s", item.url, exc)
            continue
        saved.append(path)
    return saved
