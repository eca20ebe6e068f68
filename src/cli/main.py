"""Weather loader CLI entry points.

This module maps the loader command line onto index administration
and the load pipeline, and turns fatal errors into exit codes.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Sequence

from core.config import LoaderConfig, validate_offset_policy
from core.constants import DEFAULT_SOURCE_FILES, SUPPORTED_OFFSET_POLICIES
from core.errors import ConfigError, WeatherLoaderError
from core.logging_config import get_logger
from core.types import LoadSummary
from ingest.pipeline import LoadPipeline
from ingest.record_parser import RecordParser
from ingest.timestamp import TimestampNormalizer
from store.bulk_submitter import BulkSubmitter
from store.elastic_client import create_elastic_client
from store.index_admin import IndexAdmin

_LOGGER = get_logger(__name__)

ClientFactory = Callable[[LoaderConfig], Any]


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="weather-loader",
        description="Load weather sensor CSV files into Elasticsearch",
    )
    parser.add_argument(
        "sources",
        nargs="*",
        default=list(DEFAULT_SOURCE_FILES),
        help="Source CSV files, loaded in order",
    )
    parser.add_argument("--delete", action="store_true", help="Delete the index and exit")
    parser.add_argument("--index", help="Override WEATHER_INDEX_NAME")
    parser.add_argument("--mapping", help="Override WEATHER_MAPPING_PATH")
    parser.add_argument("--workers", type=int, help="Override WEATHER_BULK_WORKERS")
    parser.add_argument("--batch-size", type=int, help="Override WEATHER_BULK_BATCH_SIZE")
    parser.add_argument(
        "--offset-policy",
        choices=SUPPORTED_OFFSET_POLICIES,
        help="Override WEATHER_OFFSET_POLICY",
    )
    return parser


def main(
    argv: Sequence[str] | None = None,
    client_factory: ClientFactory = create_elastic_client,
) -> int:
    """Run the weather loader CLI.

    Args:
        argv: Optional argument vector.
        client_factory: Builds the Elasticsearch client from config.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    _LOGGER.info("loader_starting")
    try:
        config = _build_config(args)
        client = client_factory(config)
        _LOGGER.info("elastic_client_initialized", url=config.elastic_endpoint)
        if args.delete:
            IndexAdmin(client).delete_index(config.index_name)
            return 0
        summary = run_load(client, config, [Path(source) for source in args.sources])
    except WeatherLoaderError as error:
        _log_failure(error)
        return 1
    print(
        f"created={summary.created} duplicates={summary.duplicates} "
        f"batches={summary.batches} index={config.index_name}"
    )
    return 0


def run_load(client: Any, config: LoaderConfig, source_paths: list[Path]) -> LoadSummary:
    """Ensure the index exists and load all source files into it.

    Args:
        client: Elasticsearch client.
        config: Runtime configuration.
        source_paths: Ordered source CSV files.

    Returns:
        Counters for the completed load.
    """
    IndexAdmin(client).ensure_index(config.index_name, config.mapping_path)
    normalizer = TimestampNormalizer(config.source_timezone, config.offset_policy)
    record_parser = RecordParser(normalizer)
    with BulkSubmitter(
        client,
        config.index_name,
        workers=config.bulk_workers,
        batch_size=config.bulk_batch_size,
    ) as submitter:
        pipeline = LoadPipeline(record_parser, submitter)
        return pipeline.run(source_paths)


def _build_config(args: argparse.Namespace) -> LoaderConfig:
    """Build config from environment with CLI overrides applied."""
    config = LoaderConfig.from_env()
    overrides: dict[str, Any] = {}
    if args.index:
        overrides["index_name"] = args.index
    if args.mapping:
        overrides["mapping_path"] = Path(args.mapping).expanduser()
    if args.workers is not None:
        overrides["bulk_workers"] = _require_positive("--workers", args.workers)
    if args.batch_size is not None:
        overrides["bulk_batch_size"] = _require_positive("--batch-size", args.batch_size)
    if args.offset_policy:
        overrides["offset_policy"] = validate_offset_policy(args.offset_policy)
    return replace(config, **overrides) if overrides else config


def _require_positive(flag: str, value: int) -> int:
    if value < 1:
        raise ConfigError(f"Invalid {flag} value: expected value >= 1, got {value}.")
    return value


def _log_failure(error: WeatherLoaderError) -> None:
    """Log one structured line naming the failing stage and input."""
    fields: dict[str, object] = {"stage": error.stage, "error": str(error)}
    for attribute in ("field_name", "raw_value", "location", "record_id", "batch_id"):
        value = getattr(error, attribute, None)
        if value is not None:
            fields[attribute] = value
    if error.__cause__ is not None:
        fields["cause"] = repr(error.__cause__)
    _LOGGER.error("load_failed", **fields)
