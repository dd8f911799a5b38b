# =============================================================================
# src/cli/__init__.py — CLI Module Overview
# =============================================================================
#
# Command-line tools for operators running sonarEDM outside the web API.
# All subcommands live in sonar.py and are reached through the package:
#
#   python -m src.cli enhance   — one batch enhancement pass over pending events
#   python -m src.cli score     — score one event JSON against a profile
#   python -m src.cli ingest    — fetch events by location into the event store
#
# Architecture Notes:
#   - argparse for argument parsing (not Click/Typer).
#   - The CLI builds its components with src.main.build_services, so the
#     command line and the web app share one construction path.
# =============================================================================

"""CLI tools for the sonarEDM enhancement and scoring pipeline."""
