#!/usr/bin/env python3
"""
CLI entry point for the event ingester.

Pulls pages of sale events into the document store and prints the cursor
for the next run.

Usage:
    event-ingest --before 1615746153
    event-ingest --config config/ingest.yaml
    event-ingest --backend sqlite --max-page-index 10 --verbose
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import find_dotenv, load_dotenv

from event_ingest.config import IngestConfig
from event_ingest.connectors import OpenSeaEventsConnector
from event_ingest.core.errors import ConfigError, IngestError
from event_ingest.core.models import PageResult, RunState, StopReason
from event_ingest.core.state_store import RunStateStore
from event_ingest.core.storage import DocumentStore
from event_ingest.runner import IngestRunner, RunnerConfig
from event_ingest.state import SqliteRunStateStore
from event_ingest.storage import create_document_store


EXIT_OK = 0
EXIT_FATAL = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    log_level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def build_fetcher(config: IngestConfig) -> OpenSeaEventsConnector:
    """Build the upstream page fetcher from configuration."""
    source_config = config.get_source_config()
    return OpenSeaEventsConnector(
        base_url=source_config.get("base_url"),
        api_key=source_config.get("api_key"),
        rate_limit_delay=source_config.get("rate_limit_delay", 0.0),
        timeout=source_config.get("timeout", 30),
        user_agent=source_config.get("user_agent"),
    )


def build_store(config: IngestConfig) -> DocumentStore:
    """Build the document store from configuration."""
    store_config = config.get_store_config()
    backend = store_config.get("backend", "mongo")
    mongo_config = store_config.get("mongo", {})

    if backend == "mongo" and not (mongo_config.get("database") and mongo_config.get("collection")):
        raise ConfigError("MONGO_DATABASE and MONGO_COLLECTION must be set for the mongo backend")

    return create_document_store(
        backend=backend,
        uri=mongo_config.get("uri"),
        database=mongo_config.get("database"),
        collection=mongo_config.get("collection"),
        db_path=store_config.get("sqlite", {}).get("db_path"),
        timestamp_field=store_config.get("timestamp_field", "created_date"),
    )


def build_state_store(config: IngestConfig) -> RunStateStore:
    """Build the run state store from configuration."""
    state_config = config.get_state_config()
    db_path = Path(state_config.get("db_path", "local/state/run_state.db"))
    return SqliteRunStateStore(db_path=db_path)


def resolve_before_timestamp(
    cli_value: Optional[int],
    config: IngestConfig,
    state_store: Optional[RunStateStore],
    state_name: str,
) -> Optional[int]:
    """
    Pick the run's before_timestamp.

    Precedence: command line, then config/environment, then the cursor
    saved by the previous run.
    """
    if cli_value is not None:
        return cli_value

    configured = config.get("runner.before_timestamp")
    if configured is not None:
        return int(configured)

    if state_store is not None:
        state = state_store.load(state_name)
        if state is not None:
            logging.getLogger(__name__).info(
                f"Resuming from saved cursor {state.last_cursor} "
                f"(last run {state.last_run_at.isoformat()})"
            )
            return state.last_cursor

    return None


def print_progress(page_index: int, page: PageResult) -> None:
    """Print one progress marker per ingested page."""
    print(".", end="", flush=True)


def parse_args(argv: Optional[List[str]] = None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Ingest marketplace sale events into a document store",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration YAML file",
    )

    parser.add_argument(
        "--before",
        type=int,
        help="Only fetch events that occurred before this unix timestamp",
    )

    parser.add_argument(
        "--max-page-index",
        type=int,
        help="Highest page index to fetch (inclusive, default 200)",
    )

    parser.add_argument(
        "--backend",
        choices=["mongo", "sqlite"],
        help="Document store backend",
    )

    parser.add_argument(
        "--no-state",
        action="store_true",
        help="Do not read or save the run state cursor",
    )

    parser.add_argument(
        "--env-file",
        type=Path,
        help="Path to a .env file (default: search from the working directory)",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose/debug logging",
    )

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    setup_logging(verbose=args.verbose)
    logger = logging.getLogger(__name__)

    if not load_dotenv(dotenv_path=args.env_file or find_dotenv(usecwd=True)):
        logger.info("No .env file found")

    try:
        config = IngestConfig(config_path=args.config)
    except (FileNotFoundError, ConfigError) as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_USAGE
    logger.info("Configuration loaded")

    if args.backend:
        config.set("store.backend", args.backend)
    if args.max_page_index is not None:
        config.set("runner.max_page_index", args.max_page_index)

    state_config = config.get_state_config()
    use_state = state_config.get("enabled", True) and not args.no_state
    state_name = state_config.get("name", "opensea_events")

    state_store = None
    fetcher = None
    store = None

    try:
        if use_state:
            state_store = build_state_store(config)

        # Build stage: bad values here are configuration errors
        try:
            before_timestamp = resolve_before_timestamp(args.before, config, state_store, state_name)
            if before_timestamp is None:
                logger.error(
                    "No before timestamp: pass --before, set INGEST_BEFORE_TIMESTAMP, "
                    "or run once with a seed value to save a cursor"
                )
                return EXIT_USAGE

            runner_config = RunnerConfig(
                max_page_index=int(config.get("runner.max_page_index", 200)),
                page_size=int(config.get("source.page_size", 50)),
                timestamp_field=config.get("store.timestamp_field", "created_date"),
            )

            fetcher = build_fetcher(config)
            store = build_store(config)
        except (ConfigError, ValueError) as e:
            logger.error(f"Configuration error: {e}")
            return EXIT_USAGE

        runner = IngestRunner(
            fetcher=fetcher,
            store=store,
            config=runner_config,
            on_page=print_progress,
        )

        logger.info("Starting ingestion run...")
        result = runner.run(before_timestamp=before_timestamp)

        print()
        if result.stop_reason != StopReason.CEILING_REACHED:
            print("No events returned")

        print(result.cursor.raw_timestamp)
        if result.cursor.is_usable:
            print(result.cursor.cursor)
            if state_store is not None:
                state_store.save(state_name, RunState(last_cursor=result.cursor.cursor))
        else:
            print(f"Cursor unavailable: {result.cursor.error_message}")

        print("Program complete")
        return EXIT_OK

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return EXIT_INTERRUPTED
    except IngestError as e:
        logger.error(f"Fatal error: {e}")
        return EXIT_FATAL
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        return EXIT_FATAL
    finally:
        if fetcher is not None:
            fetcher.close()
        if store is not None:
            store.close()
        if state_store is not None:
            state_store.close()


if __name__ == "__main__":
    sys.exit(main())
