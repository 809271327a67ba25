import logging
import sys
import argparse
import json
import os
from dotenv import load_dotenv

# Use absolute imports from the 'src' package namespace
from src.data_fetchers.fetcher_factory import create_fetcher, FETCHER_SOURCES
from src.calendar_generator import create_ics_file, DEFAULT_ICS_FILENAME
from src.data_models import ScrapeResult

load_dotenv()
DEFAULT_SOURCE = os.environ.get("FETCHER_SOURCE", "rbwm")

logger = logging.getLogger(__name__)


def _configure_logging():
    if logging.getLogger('').hasHandlers():
        return
    console_handler = logging.StreamHandler(sys.stderr); console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    logging.getLogger('').addHandler(console_handler)
    logging.getLogger('').setLevel(logging.INFO)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Check the RBWM bin collection schedule.")
    parser.add_argument("--source", "-s", default=DEFAULT_SOURCE, choices=sorted(FETCHER_SOURCES), help="Acquisition strategy (Defaults to FETCHER_SOURCE env var or 'rbwm').")
    parser.add_argument("--save-ics", "-i", action="store_true", help="Save schedule to ICS file.")
    parser.add_argument("--ics-file", default=DEFAULT_ICS_FILENAME, help="ICS file to write with --save-ics.")
    args = parser.parse_args(argv)

    _configure_logging()
    logger.info(f"Checking bins using source '{args.source}'")

    try:
        fetcher = create_fetcher(source=args.source, use_cache=False)
        result: ScrapeResult = fetcher.get_collections()
    except Exception as e:
        logger.error(f"Unexpected error during fetch/processing: {e}", exc_info=True)
        print(f"\nUnexpected error: {e}", file=sys.stderr)
        sys.exit(1)

    print(json.dumps(result.to_dict(), indent=4))

    if not result.success:
        print("\nERROR: No collections found. See the diagnostic output above.", file=sys.stderr)
        sys.exit(1)

    if args.save_ics:
        logger.info("Saving schedule to ICS file...")
        try:
            create_ics_file(result, args.ics_file)
        except IOError:
            print(f"\nERROR: Could not write {args.ics_file}.", file=sys.stderr)
            sys.exit(1)

    logger.info("Check complete.")


if __name__ == "__main__":
    main()
