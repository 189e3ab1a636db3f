from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from cyfra_client.analysis.results import SceneSummary
from cyfra_client.client import CyfraClient
from cyfra_client.logging_config import configure_logging
from cyfra_client.settings import get_settings


NO_PRODUCTS = "No products found for this tile"


def _split_indices(raw: str | None) -> list[str]:
    return [item.strip() for item in (raw or "").split(",") if item.strip()]


def render_summary(summary: SceneSummary) -> dict[str, Any]:
    return {
        "tileId": summary.tile_id,
        "date": summary.date,
        "dimensions": summary.dimensions_text,
        "totalPixels": summary.total_pixels,
        "indicesComputed": summary.index_count,
        "indices": [
            {
                "code": item.code,
                "name": item.name,
                "range": item.range_text,
                "mean": item.mean_text,
                "stdDev": item.std_dev_text,
                "imageUrl": item.image_url,
            }
            for item in summary.indices
        ],
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Cyfra tile analysis client")
    parser.add_argument("--api-url", default=None)
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("filters", help="List regions, categories and countries.")

    tiles = sub.add_parser("tiles", help="Search the tile catalog.")
    group = tiles.add_mutually_exclusive_group()
    group.add_argument("--query", "-q", default=None)
    group.add_argument("--region", default=None)
    group.add_argument("--category", default=None)
    group.add_argument("--country", default=None)

    dates = sub.add_parser("dates", help="List acquisition dates of a tile.")
    dates.add_argument("tile_id")

    analyze = sub.add_parser("analyze", help="Compute spectral indices.")
    analyze.add_argument("--mode", choices=["real", "synthetic"], default="real")
    analyze.add_argument("--tile-id", default=None)
    analyze.add_argument("--date", default=None)
    analyze.add_argument("--width", type=int, default=None)
    analyze.add_argument("--height", type=int, default=None)
    analyze.add_argument("--indices", default="NDVI")
    return parser


def run(args: argparse.Namespace) -> int:
    with CyfraClient(api_url=args.api_url) as client:
        if args.command == "filters":
            options = client.filter_options()
            print(json.dumps(options.model_dump()))
            return 1 if options.errors else 0

        if args.command == "tiles":
            listing = client.search_tiles(
                query=args.query,
                region=args.region,
                category=args.category,
                country=args.country,
            )
            print(
                json.dumps(
                    {
                        "count": listing.count,
                        "error": listing.error,
                        "tiles": [tile.model_dump() for tile in listing.tiles],
                    }
                )
            )
            return 1 if listing.error else 0

        if args.command == "dates":
            dates = client.available_dates(args.tile_id)
            if dates is None or dates.is_empty:
                print(json.dumps({"tile": args.tile_id, "message": NO_PRODUCTS}))
                return 0
            print(dates.model_dump_json())
            return 0

        indices = _split_indices(args.indices)
        if args.mode == "real":
            summary = client.analyze_real(args.tile_id or "", args.date or "", indices)
        else:
            width = args.width if args.width is not None else client.settings.cyfra_default_width
            height = args.height if args.height is not None else client.settings.cyfra_default_height
            summary = client.analyze_synthetic(width, height, indices)
        print(json.dumps(render_summary(summary), ensure_ascii=False))
        return 0


def main() -> None:
    settings = get_settings()
    configure_logging(level=settings.cyfra_log_level, json_logs=settings.cyfra_log_json)
    parser = build_parser()
    args = parser.parse_args()
    try:
        code = run(args)
    except Exception as exc:
        print(json.dumps({"error": str(exc)}), file=sys.stderr)
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
