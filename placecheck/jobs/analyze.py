"""CLI job that analyzes one place URL and prints the JSON result."""

import argparse
import json
import logging
import sys

from placecheck.core.errors import AnalysisError
from placecheck.services.analyze import AnalyzeRequest, analyze, build_services

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Analyze a Naver Place listing")
    parser.add_argument("place_url", help="Listing URL (m.place, place or map.naver.com)")
    parser.add_argument("--plan", choices=("free", "pro"), default="pro", help="Plan used for redaction")
    parser.add_argument("--depth", choices=("standard", "deep"), default="standard", help="Deep also scans competitors")
    parser.add_argument("--debug", action="store_true", help="Include the extraction trail")
    return parser


def main(argv=None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    args = build_parser().parse_args(argv)

    services = build_services()
    try:
        body = analyze(
            AnalyzeRequest(
                mode="place_url",
                place_url=args.place_url,
                plan=args.plan,
                depth=args.depth,
                debug=args.debug,
            ),
            services,
        )
    except AnalysisError as exc:
        logger.error("Analysis failed: %s", exc)
        return 1
    finally:
        services.close()

    json.dump(body, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
