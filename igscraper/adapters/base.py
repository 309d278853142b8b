import logging
from dataclasses import dataclass, field
from functools import cached_property
from typing import Dict, List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

SUCCEEDED = "succeeded"
FOUND_NOTHING = "found_nothing"
FAILED = "failed"


@dataclass(frozen=True)
class RenderedPage:                                # Snapshot of one loaded document
    url: str                                      # URL the browser ended up on
    status: Optional[int]                         # Navigation response status
    html: str                                     # Serialized DOM after client rendering

    @cached_property
    def soup(self) -> BeautifulSoup:
        return BeautifulSoup(self.html, "html.parser")

    @cached_property
    def scripts(self) -> List[Tuple[str, str]]:
        """Inline script blocks as (type, text) pairs, in document order."""
        out = []
        for tag in self.soup.find_all("script"):
            if tag.get("src"):
                continue
            text = tag.string if tag.string is not None else tag.get_text()
            out.append(((tag.get("type") or "").strip().lower(), text or ""))
        return out

    @property
    def title(self) -> Optional[str]:
        if self.soup.title and self.soup.title.string:
            return self.soup.title.string.strip() or None
        return None

    def meta(self, key: str) -> Optional[str]:
        """content= of the first <meta property=key> or <meta name=key>."""
        for attr in ("property", "name"):
            tag = self.soup.find("meta", attrs={attr: key})
            if tag is not None:
                content = (tag.get("content") or "").strip()
                if content:
                    return content
        return None


@dataclass(frozen=True)
class RawCandidate:                                # Unvalidated URL-ish string
    value: str
    strategy: str                                 # Which strategy produced it (diagnostics only)


@dataclass(frozen=True)
class StrategyOutcome:
    strategy: str
    status: str                                   # succeeded / found_nothing / failed
    candidates: Tuple[RawCandidate, ...] = ()
    metadata: Dict[str, Tuple[str, ...]] = field(default_factory=dict)

    def values(self, key: str) -> Tuple[str, ...]:
        return self.metadata.get(key, ())


@dataclass(frozen=True)
class MediaItem:                                   # One downloadable file
    type: str                                     # "image" or "video"
    url: str                                      # Canonical URL on a trusted host

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.type, "url": self.url}


@dataclass(frozen=True)
class ExtractionResult:
    source_url: str
    caption: Optional[str]
    author: Optional[str]
    items: Tuple[MediaItem, ...]

    def to_dict(self) -> dict:
        return {
            "url": self.source_url,
            "caption": self.caption,
            "author": self.author,
            "items": [item.to_dict() for item in self.items],
        }


class ExtractionStrategy:                          # Base class for all strategies
    name: str = "base"
    # Collected for logs only; finding just these does not count as a hit.
    diagnostic_fields: Tuple[str, ...] = ("title",)

    def collect(self, page: RenderedPage) -> Tuple[List[str], Dict[str, List[str]]]:
        """Implement in concrete strategies: return (raw urls, metadata lists)."""
        raise NotImplementedError

    def extract(self, page: RenderedPage) -> StrategyOutcome:
        """
        Runs collect() and turns whatever happens into a StrategyOutcome.
        A broken strategy is reported as FAILED; it never raises.
        """
        try:
            urls, metadata = self.collect(page)
        except Exception as exc:
            logger.warning("strategy %s failed: %s", self.name, exc)
            return StrategyOutcome(strategy=self.name, status=FAILED)

        candidates = tuple(RawCandidate(u, self.name) for u in urls if u)
        cleaned = {
            key: tuple(v.strip() for v in values if isinstance(v, str) and v.strip())
            for key, values in metadata.items()
        }
        cleaned = {k: v for k, v in cleaned.items() if v}
        found = candidates or any(k not in self.diagnostic_fields for k in cleaned)
        status = SUCCEEDED if found else FOUND_NOTHING
        logger.debug("strategy %s: %s, %d candidates", self.name, status, len(candidates))
        return StrategyOutcome(self.name, status, candidates, cleaned)


def run_strategies(
    page: RenderedPage, strategies: Sequence[ExtractionStrategy]
) -> List[StrategyOutcome]:
    """Runs every strategy in priority order; outcomes keep that order."""
    return [strategy.extract(page) for strategy in strategies]
