import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from igscraper.adapters.base import MediaItem
from igscraper.config import RendererConfig
from igscraper.dispatcher import resolve_to_response
from igscraper.utils.download import download_items


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Resolve a public Instagram post into direct media URLs")
    p.add_argument("--url", required=True, help="Post / reel / tv URL")
    p.add_argument("--headed", action="store_true", help="Show the browser window (debugging)")
    p.add_argument("--timeout-ms", type=int, default=45_000,
                   help="Navigation timeout in milliseconds")
    p.add_argument("--out-json", type=str, default=None, help="Also write the JSON result to this path")
    p.add_argument("--download-dir", type=str, default=None,
                   help="If set, downloads every resolved item to this folder")
    p.add_argument("--log-level", type=str, default="INFO", help="DEBUG, INFO, WARNING, ...")
    return p.parse_args(argv)


async def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    renderer_config = RendererConfig(headless=not args.headed, navigation_timeout_ms=args.timeout_ms)
    response = await resolve_to_response(args.url, renderer_config=renderer_config)

    text = json.dumps(response, ensure_ascii=False, indent=2)
    print(text)

    if args.out_json:
        Path(args.out_json).parent.mkdir(parents=True, exist_ok=True)
        with open(args.out_json, "w", encoding="utf-8") as f:
            f.write(text)

    if not response["ok"]:
        return 1

    if args.download_dir:
        items = [MediaItem(**item) for item in response["data"]["items"]]
        saved = await download_items(items, out_dir=args.download_dir)
        print(f"[OK] Downloaded {len(saved)}/{len(items)} items to: {args.download_dir}", file=sys.stderr)

    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
