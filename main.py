# main.py

"""Entry point for the deal_checker pipeline."""

import argparse
import asyncio
import logging
import sys

from deal_checker.config.logging_config import setup_logging
from deal_checker.config.settings import Settings

logger = logging.getLogger("deal_checker.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    valid_ids = [p["id"] for p in Settings.AVAILABLE_PROVIDERS]

    parser = argparse.ArgumentParser(
        prog="deal_checker",
        description=(
            "Resolve ASINs from listing URLs, fetch prices and rank "
            "the discounted ones."
        ),
        epilog=f"Available providers: {', '.join(valid_ids)}",
    )
    parser.add_argument(
        "-p",
        "--provider",
        choices=valid_ids,
        default=Settings.DEFAULT_PROVIDER,
        help=f"Pricing provider (default: {Settings.DEFAULT_PROVIDER}).",
    )
    parser.add_argument(
        "-i",
        "--input-dir",
        default=None,
        dest="input_dir",
        help="Directory of .txt URL lists (default: DoNotDelete-MyListInput/).",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        default=None,
        dest="output_dir",
        help="Output root, wiped on every run (default: output/).",
    )
    parser.add_argument(
        "--files",
        default=None,
        dest="files_csv",
        help="Comma-separated .txt file names to process (default: all).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Also show batch progress and rate-limit waits on stderr.",
    )
    parser.add_argument(
        "--save-images",
        action="store_true",
        default=False,
        dest="save_images",
        help="Download each product's main image next to the results.",
    )
    return parser


def main() -> None:
    """Parse arguments, run the pipeline and exit with its status."""
    args = _build_parser().parse_args()

    log_file = setup_logging(verbose=args.verbose)
    logger.info("deal_checker starting, log file: %s", log_file)

    from deal_checker.cli.runner import run_check

    try:
        exit_code = asyncio.run(
            run_check(
                provider_id=args.provider,
                input_dir=args.input_dir,
                output_dir=args.output_dir,
                files_csv=args.files_csv,
                save_images=args.save_images,
            )
        )
    except Exception:
        logger.critical("Unrecoverable error", exc_info=True)
        raise
    finally:
        logger.info("deal_checker shutting down")
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
