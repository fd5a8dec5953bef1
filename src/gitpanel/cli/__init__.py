"""Command-line interface package for GitPanel."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Annotated

import typer

from gitpanel import __version__
from gitpanel.config import ConfigError, ConfigLoader
from gitpanel.utils.cli_utils import exit_with_error
from gitpanel.utils.log_setup import setup_logging

from .diff_cmd import register_command as register_diff_command
from .log_cmd import register_command as register_log_command
from .repo_cmd import register_command as register_repo_command
from .status_cmd import register_command as register_status_command

logger = logging.getLogger(__name__)

app = typer.Typer(
	help=f"GitPanel - repository status, history and diffs\n\nVersion: {__version__}",
	no_args_is_help=True,
	context_settings={"help_option_names": ["-h", "--help"]},
)


def _version_callback(value: bool) -> None:
	"""Callback for --version option."""
	if value:
		typer.echo(f"GitPanel version: {__version__}")
		raise typer.Exit


@app.callback(invoke_without_command=True)
def global_options(
	ctx: typer.Context,
	is_verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable verbose logging.")] = False,
	config_file: Annotated[
		Path | None, typer.Option("--config", help="Configuration file (defaults to .gitpanel.yml lookup).")
	] = None,
	log_file: Annotated[Path | None, typer.Option("--log-file", help="Append a debug log of this run to a file.")] = None,
	_version: Annotated[
		bool | None,
		typer.Option("--version", help="Show version and exit.", callback=_version_callback, is_eager=True),
	] = None,
) -> None:
	"""Global CLI options and logging setup."""
	setup_logging(is_verbose=is_verbose, log_file_path=log_file)
	ctx.ensure_object(dict)
	try:
		ctx.obj["config"] = ConfigLoader(config_file)
	except ConfigError as e:
		exit_with_error(f"Invalid configuration: {e}", exception=e)


register_status_command(app)
register_diff_command(app)
register_log_command(app)
register_repo_command(app)


def main() -> int:
	"""Run the CLI application."""
	return app()


if __name__ == "__main__":
	sys.exit(main())
