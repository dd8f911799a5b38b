# =============================================================================
# src/cli/sonar.py — Command-Line Wrapper
# =============================================================================
#
# Thin command-line wrapper around the same object graph the web app uses
# (src.main.build_services).  Nothing here contains scoring or enhancement
# logic; every subcommand builds the components, calls one service method,
# prints the result, and closes the shared HTTP client.
#
# Supported subcommands:
#
#   enhance — run the batch enhancement orchestrator once over pending events
#   score   — score one event (JSON file) against a profile (JSON file or
#             the generic default profile)
#   ingest  — pull events from the ticketing source by location and store
#             them as pending enhancement work
#
# Usage examples:
#   python -m src.cli enhance --db data/sonar_edm.db --batch-size 25
#   python -m src.cli score --event event.json --profile profile.json
#   python -m src.cli ingest --lat 43.65 --lon -79.38 --radius 50 --keyword techno
# =============================================================================

"""Command-line wrapper for batch enhancement, one-off scoring and ingestion.

Usage::

    python -m src.cli enhance --db data/sonar_edm.db --batch-size 25 --limit 100

    python -m src.cli score --event event.json [--profile profile.json]

    python -m src.cli ingest --lat 43.65 --lon -79.38 --radius 50
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
import uuid
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from src.config.loader import load_config
from src.config.settings import Settings
from src.main import build_services, initialize_services
from src.models.event import Event
from src.models.taste_profile import TasteProfile
from src.utils.errors import SonarEDMError
from src.utils.logging import configure_logging

_CLI_USER = "cli"


def _settings_from_args(args: argparse.Namespace) -> Settings:
    """Environment settings with command-line overrides applied."""
    overrides: dict[str, Any] = {}
    if getattr(args, "db", None):
        overrides["database_path"] = args.db
    if getattr(args, "catalog", None):
        overrides["artist_catalog_path"] = args.catalog
    if getattr(args, "json_logs", False):
        overrides["json_logs"] = True
    return Settings(**overrides)


def _read_json(path: str) -> str:
    file_path = Path(path)
    if not file_path.is_file():
        raise FileNotFoundError(f"File not found: {path}")
    return file_path.read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# Subcommand handlers
# ---------------------------------------------------------------------------


async def _handle_enhance(args: argparse.Namespace, components: dict[str, Any]) -> int:
    batch_size = args.batch_size or components["default_batch_size"]
    print(f"Enhancing pending events (batch size {batch_size}, limit {args.limit or 'none'})")

    tracker = components["progress_tracker"]
    run_id = f"cli-{uuid.uuid4().hex[:8]}"

    def _print_progress(_run_id: str, progress: float, message: str, _counts: dict[str, int]) -> None:
        print(f"  [{progress:5.1f}%] {message}")

    tracker.register_listener(run_id, _print_progress)
    try:
        summary = await components["batch_enhancer"].enhance_all(
            batch_size=batch_size, limit=args.limit, run_id=run_id
        )
    finally:
        tracker.clear(run_id)

    print("\nEnhancement complete:")
    print(f"  Processed:        {summary.processed}")
    print(f"  Enhanced:         {summary.enhanced}")
    print(f"  Skipped:          {summary.skipped}")
    print(f"  Errors:           {summary.errors}")
    print(f"  Success rate:     {summary.success_rate:.1f}%")
    print(f"  Time:             {summary.duration_seconds:.2f}s")
    if summary.failed_event_ids:
        print(f"  Failed event IDs: {', '.join(summary.failed_event_ids)}")
    return 0 if summary.errors == 0 else 2


async def _handle_score(args: argparse.Namespace, components: dict[str, Any]) -> int:
    event = Event.model_validate_json(_read_json(args.event))
    if args.profile:
        profile = TasteProfile.model_validate_json(_read_json(args.profile))
    else:
        profile = components["profile_service"].default_profile(_CLI_USER)

    result = await components["scoring_engine"].score(event, profile)
    print(json.dumps(result.model_dump(mode="json"), indent=2))
    return 0


async def _handle_ingest(args: argparse.Namespace, components: dict[str, Any]) -> int:
    source = components["event_source"]
    if not source.is_available():
        print("Error: TICKETMASTER_API_KEY is not configured.", file=sys.stderr)
        return 1

    events = await source.search_events(
        latitude=args.lat,
        longitude=args.lon,
        radius_km=args.radius,
        keyword=args.keyword,
    )
    stored = await components["event_store"].upsert_events(events)
    print(f"Fetched {len(events)} events, stored {stored}.")
    return 0


_HANDLERS = {
    "enhance": _handle_enhance,
    "score": _handle_score,
    "ingest": _handle_ingest,
}


async def _run(args: argparse.Namespace, app_settings: Settings) -> int:
    components = build_services(app_settings, load_config(app_settings.config_path, app_settings))
    try:
        await initialize_services(components)
        return await _HANDLERS[args.command](args, components)
    finally:
        await components["http_client"].aclose()


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m src.cli",
        description="sonarEDM batch enhancement and scoring tools.",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--db", help="SQLite database path (overrides DATABASE_PATH)")
    common.add_argument("--catalog", help="Artist catalog YAML (overrides ARTIST_CATALOG_PATH)")
    common.add_argument("--json-logs", action="store_true", dest="json_logs", help="Emit JSON log lines")

    # -- enhance --
    enhance_parser = subparsers.add_parser("enhance", parents=[common], help="Run one batch enhancement pass")
    enhance_parser.add_argument("--batch-size", type=int, dest="batch_size", help="Events per batch")
    enhance_parser.add_argument("--limit", type=int, help="Maximum events to process")

    # -- score --
    score_parser = subparsers.add_parser("score", parents=[common], help="Score one event")
    score_parser.add_argument("--event", required=True, help="Path to an event JSON file")
    score_parser.add_argument("--profile", help="Path to a taste-profile JSON file (default profile if omitted)")

    # -- ingest --
    ingest_parser = subparsers.add_parser("ingest", parents=[common], help="Fetch and store events by location")
    ingest_parser.add_argument("--lat", type=float, required=True, help="Latitude")
    ingest_parser.add_argument("--lon", type=float, required=True, help="Longitude")
    ingest_parser.add_argument("--radius", type=int, default=50, help="Search radius in km (default: 50)")
    ingest_parser.add_argument("--keyword", help="Optional search keyword")

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point.

    Parses the subcommand, loads settings with command-line overrides,
    builds the service graph and dispatches to the handler.  Exit code 2
    from ``enhance`` means the run finished with per-event errors.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "enhance" and args.batch_size is not None and args.batch_size < 1:
        parser.error("--batch-size must be at least 1")
    if args.command == "enhance" and args.limit is not None and args.limit < 0:
        parser.error("--limit must not be negative")

    app_settings = _settings_from_args(args)
    configure_logging(log_level=app_settings.log_level, json_output=app_settings.json_logs)

    try:
        exit_code = asyncio.run(_run(args, app_settings))
    except (FileNotFoundError, ValidationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    except SonarEDMError as exc:
        print(f"Error [{exc.code}]: {exc.message}", file=sys.stderr)
        sys.exit(1)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
