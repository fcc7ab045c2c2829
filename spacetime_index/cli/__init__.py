"""Spacetime index CLI.

Command-line interface for syncing and querying the search index.
Built with Click and Rich.
"""

from spacetime_index.cli.main import cli

__all__ = ["cli"]
