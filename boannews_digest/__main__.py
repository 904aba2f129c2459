"""Command-line entry point for a single digest run."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from typing import List, Optional

from .config import LISTING_STRATEGIES, load_config
from .digest import run
from .errors import TransportError

LOGGER = logging.getLogger("boannews_digest")


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Collect, summarize and store the latest boannews articles")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--strategy", choices=LISTING_STRATEGIES, help="Override the listing strategy")
    parser.add_argument("--max-candidates", type=int, help="Override the maximum number of candidates")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(verbose=args.verbose)

    try:
        config = load_config()
        if args.strategy:
            config = replace(config, listing_strategy=args.strategy)
        if args.max_candidates is not None:
            config = replace(config, max_candidates=args.max_candidates)
        run(config)
    except ValueError as exc:
        LOGGER.error("Invalid configuration: %s", exc)
        return 1
    except TransportError as exc:
        LOGGER.error("Listing source unreachable: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
