# =============================================================================
# src/cli/__main__.py — Package Entry Point
# =============================================================================
#
# Enables running the CLI package itself as a module:
#     python -m src.cli enhance --db data/sonar_edm.db
#
# Delegates to src.cli.sonar, which owns the argument parser and the
# enhance / score / ingest subcommands.
# =============================================================================

"""Allow ``python -m src.cli`` execution."""

from src.cli.sonar import main

main()
