import logging
from typing import Callable, Optional, Sequence

from playwright.async_api import async_playwright

from igscraper.adapters.base import ExtractionResult, ExtractionStrategy, RenderedPage, run_strategies
from igscraper.adapters.instagram import default_strategies
from igscraper.assembler import assemble_result
from igscraper.browser import render_page
from igscraper.config import (
    DEFAULT_EXTRACTION_CONFIG,
    DEFAULT_RENDERER_CONFIG,
    ExtractionConfig,
    RendererConfig,
)
from igscraper.errors import ResolverError
from igscraper.normalizer import normalize_post_url
from igscraper.resolver import resolve_candidates

logger = logging.getLogger(__name__)


def extract_from_page(
    source_url: str,
    page: RenderedPage,
    strategies: Optional[Sequence[ExtractionStrategy]] = None,
    config: ExtractionConfig = DEFAULT_EXTRACTION_CONFIG,
) -> ExtractionResult:
    """Runs the strategies over an already rendered page and assembles the result."""
    if strategies is None:
        strategies = default_strategies(config)

    outcomes = run_strategies(page, strategies)
    for outcome in outcomes:
        logger.info("%-12s %-13s %d candidates", outcome.strategy, outcome.status, len(outcome.candidates))

    items = resolve_candidates(outcomes, config)
    return assemble_result(source_url, items, outcomes)


async def extract_media(
    raw_url: str,
    renderer_config: RendererConfig = DEFAULT_RENDERER_CONFIG,
    config: ExtractionConfig = DEFAULT_EXTRACTION_CONFIG,
    strategies: Optional[Sequence[ExtractionStrategy]] = None,
    playwright_factory: Callable = async_playwright,
) -> ExtractionResult:
    """
    High-level resolve function.
    Steps:
        1. Normalize the URL (InvalidUrl / UnsupportedHost).
        2. Render it in a private browser session, closed before returning
           (NavigationTimeout / PageLoadFailed).
        3. Run every strategy, pool candidates, validate and dedupe them.
        4. Assemble caption/author and the item list (NoMediaFound).
    """
    post_url = normalize_post_url(raw_url)
    page = await render_page(post_url, renderer_config, playwright_factory)
    result = extract_from_page(post_url, page, strategies, config)
    logger.info("resolved %s: %d items", post_url, len(result.items))
    return result


async def resolve_to_response(raw_url: Optional[str], **kwargs) -> dict:
    """Wraps extract_media into the {ok, data, error} envelope."""
    if not raw_url or not raw_url.strip():
        return {"ok": False, "error": "Missing url parameter"}
    try:
        result = await extract_media(raw_url, **kwargs)
    except ResolverError as exc:
        logger.info("resolution failed for %s: %s", raw_url, exc)
        return {"ok": False, "error": str(exc)}
    return {"ok": True, "data": result.to_dict()}
