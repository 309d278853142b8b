import json
import logging
import re
from typing import Any, Dict, Iterator, List, Optional, Tuple

from igscraper.adapters.base import ExtractionStrategy, RenderedPage
from igscraper.config import DEFAULT_EXTRACTION_CONFIG, ExtractionConfig

logger = logging.getLogger(__name__)

Collected = Tuple[List[str], Dict[str, List[str]]]


class MetaTagStrategy(ExtractionStrategy):
    """Open Graph tags. Rendered server side, so they survive the login wall."""

    name = "meta"

    VIDEO_TAGS = ("og:video", "og:video:secure_url")
    IMAGE_TAGS = ("og:image",)

    def collect(self, page: RenderedPage) -> Collected:
        urls = []

        video = next((v for v in map(page.meta, self.VIDEO_TAGS) if v), None)
        if video:
            urls.append(video)
        urls.extend(v for v in map(page.meta, self.IMAGE_TAGS) if v)

        metadata = {
            "title": [page.meta("og:title") or page.title or ""],
            "caption": [page.meta("description") or ""],
        }
        return urls, metadata


def _as_list(value: Any) -> list:
    if value is None:
        return []
    return value if isinstance(value, list) else [value]


def _urls_from(value: Any) -> Iterator[str]:
    # image / video fields come as a string, a list, or an ImageObject
    for entry in _as_list(value):
        if isinstance(entry, str):
            yield entry
        elif isinstance(entry, dict):
            for key in ("contentUrl", "url"):
                if isinstance(entry.get(key), str):
                    yield entry[key]
                    break


def _author_name(value: Any) -> Optional[str]:
    for entry in _as_list(value):
        if isinstance(entry, str):
            return entry
        if isinstance(entry, dict):
            name = entry.get("alternateName") or entry.get("name")
            if isinstance(name, str) and name.strip():
                return name
    return None


class StructuredDataStrategy(ExtractionStrategy):
    """schema.org JSON-LD blocks. Each block is parsed on its own."""

    name = "ld_json"
    SCRIPT_TYPE = "application/ld+json"

    def _nodes(self, page: RenderedPage) -> Iterator[dict]:
        for index, (kind, text) in enumerate(page.scripts):
            if kind != self.SCRIPT_TYPE:
                continue
            try:
                data = json.loads(text)
            except ValueError as exc:
                logger.debug("skipping malformed ld+json block %d: %s", index, exc)
                continue
            for node in _as_list(data):
                if not isinstance(node, dict):
                    continue
                yield node
                for child in _as_list(node.get("@graph")):
                    if isinstance(child, dict):
                        yield child

    def collect(self, page: RenderedPage) -> Collected:
        urls: List[str] = []
        metadata: Dict[str, List[str]] = {"author": [], "caption": []}

        for node in self._nodes(page):
            urls.extend(_urls_from(node.get("contentUrl")))
            for video in _as_list(node.get("video")):
                if isinstance(video, dict):
                    urls.extend(_urls_from(video.get("contentUrl")))
            urls.extend(_urls_from(node.get("image")))
            urls.extend(_urls_from(node.get("thumbnailUrl")))

            author = _author_name(node.get("author"))
            if author:
                metadata["author"].append(author)
            caption = node.get("caption") or node.get("articleBody")
            if isinstance(caption, str):
                metadata["caption"].append(caption)

        return urls, metadata


class ScriptScanStrategy(ExtractionStrategy):
    """
    Last resort: pattern-match media URLs out of the embedded API payloads.

    The payload shape is undocumented, so the script text is treated as
    opaque. Only blocks that mention a platform marker are scanned, and at
    most config.max_script_blocks of them.
    """

    name = "script_scan"

    def __init__(self, config: ExtractionConfig = DEFAULT_EXTRACTION_CONFIG):
        self.config = config
        extensions = "|".join(re.escape(e) for e in config.media_extensions)
        # Slashes are JSON-escaped as \/ inside the payloads, or \\/ when the
        # JSON itself sits inside a JS string literal.
        self._url_re = re.compile(
            r"https?:(?:\\*/){2}[^\s\"'<>]+?\.(?:" + extensions + r")\b"
            r"(?:\?[^\s\"'<>]*)?",
            re.IGNORECASE,
        )

    _ESCAPED_SLASH_RE = re.compile(r"\\+/")
    _ESCAPED_AMP_RE = re.compile(r"\\+u0026", re.IGNORECASE)
    _ESCAPED_PCT_RE = re.compile(r"\\+u0025", re.IGNORECASE)

    @classmethod
    def unescape(cls, raw: str) -> str:
        text = cls._ESCAPED_SLASH_RE.sub("/", raw)
        text = cls._ESCAPED_AMP_RE.sub("&", text)
        text = cls._ESCAPED_PCT_RE.sub("%", text)
        return text.rstrip("\\")

    def matching_blocks(self, page: RenderedPage) -> List[str]:
        blocks = [
            text for _, text in page.scripts
            if any(marker in text for marker in self.config.script_markers)
        ]
        return blocks[: self.config.max_script_blocks]

    def collect(self, page: RenderedPage) -> Collected:
        urls = []
        for block in self.matching_blocks(page):
            urls.extend(self.unescape(m.group(0)) for m in self._url_re.finditer(block))
        return urls, {}


def default_strategies(config: ExtractionConfig = DEFAULT_EXTRACTION_CONFIG) -> List[ExtractionStrategy]:
    # Order is the merge priority.
    return [MetaTagStrategy(), StructuredDataStrategy(), ScriptScanStrategy(config)]
