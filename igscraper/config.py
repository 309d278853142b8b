"""
Platform-specific tables and tunables.

Everything that tends to break when Instagram changes its markup lives here,
so a new CDN host or payload marker is a one-line change.
"""

from dataclasses import dataclass
from typing import Tuple


TARGET_DOMAIN = "instagram.com"

# Platform-operated content-delivery hosts; subdomains match too.
TRUSTED_HOST_SUFFIXES: Tuple[str, ...] = (
    "cdninstagram.com",
    "fbcdn.net",
    "akamaihd.net",
    "akamaized.net",
)

# Property names that only show up in the embedded API/GraphQL payloads.
SCRIPT_MARKERS: Tuple[str, ...] = (
    "graphql",
    "display_url",
    "video_url",
    "xdt_api",
)

MEDIA_EXTENSIONS: Tuple[str, ...] = ("mp4", "jpg", "jpeg", "png", "webp")
VIDEO_EXTENSIONS: Tuple[str, ...] = ("mp4",)

CHROME_ARGS = [
    "--disable-blink-features=AutomationControlled",
    # Keeps navigator.webdriver unset.

    "--no-sandbox",
    "--disable-setuid-sandbox",
    # Required inside Docker / CI where the sandbox can't start.

    "--disable-dev-shm-usage",
    # /dev/shm is tiny in containers and Chromium crashes without this.
]

UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/133.0.0.0 Safari/537.36"
)
# Playwright's default UA advertises HeadlessChrome and gets the no-script page.


@dataclass(frozen=True)
class RendererConfig:
    headless: bool = True
    navigation_timeout_ms: int = 45_000
    user_agent: str = UA
    accept_language: str = "en-US,en;q=0.9"
    viewport_width: int = 1366
    viewport_height: int = 900
    launch_args: Tuple[str, ...] = tuple(CHROME_ARGS)


@dataclass(frozen=True)
class ExtractionConfig:
    trusted_host_suffixes: Tuple[str, ...] = TRUSTED_HOST_SUFFIXES
    script_markers: Tuple[str, ...] = SCRIPT_MARKERS
    media_extensions: Tuple[str, ...] = MEDIA_EXTENSIONS
    video_extensions: Tuple[str, ...] = VIDEO_EXTENSIONS
    max_script_blocks: int = 5


DEFAULT_RENDERER_CONFIG = RendererConfig()
DEFAULT_EXTRACTION_CONFIG = ExtractionConfig()
