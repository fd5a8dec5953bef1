"""
Logging setup for GitPanel.

Log records go to stderr through rich so they never mix with command output
on stdout. An optional file handler keeps a debug-level trace of a run.

"""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.rule import Rule
from rich.text import Text

console = Console(stderr=True)

FILE_LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s:%(lineno)d %(message)s"


def _file_handler(log_file_path: Path | str) -> logging.Handler | None:
	path = Path(log_file_path)
	try:
		path.parent.mkdir(parents=True, exist_ok=True)
		handler = logging.FileHandler(path, mode="a", encoding="utf-8")
	except OSError as e:
		console.print(f"[bold red]Cannot write log file {path}: {e}[/bold red]")
		return None
	handler.setLevel(logging.DEBUG)
	handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
	return handler


def setup_logging(
	is_verbose: bool = False,
	log_to_console: bool = True,
	log_file_path: Path | str | None = None,
) -> None:
	"""
	Configure the root logger.

	Args:
	    is_verbose: Show debug records on the console instead of warnings only
	    log_to_console: Attach the rich console handler
	    log_file_path: Also append every record, at debug level, to this file

	"""
	console_level = logging.DEBUG if is_verbose else logging.WARNING
	root_logger = logging.getLogger()

	# Replace handlers from an earlier call (the CLI callback runs once per invocation)
	for handler in root_logger.handlers[:]:
		root_logger.removeHandler(handler)

	handlers: list[logging.Handler] = []
	if log_to_console:
		handlers.append(
			RichHandler(
				level=console_level,
				console=console,
				rich_tracebacks=True,
				show_time=is_verbose,
				show_path=is_verbose,
			)
		)
	file_handler = _file_handler(log_file_path) if log_file_path else None
	if file_handler is not None:
		handlers.append(file_handler)

	root_logger.setLevel(logging.DEBUG if file_handler is not None else console_level)
	for handler in handlers:
		root_logger.addHandler(handler)
	if file_handler is not None:
		root_logger.debug("Logging to file: %s", log_file_path)


def _display_summary(title: str, message: str, style: str) -> None:
	console.print()
	console.print(Rule(Text(title, style=f"bold {style}"), style=style))
	console.print(f"\n{message}\n")
	console.print(Rule(style=style))
	console.print()


def display_error_summary(error_message: str) -> None:
	"""Print an error between two red rules."""
	_display_summary("Error Summary", error_message, "red")


def display_warning_summary(warning_message: str) -> None:
	"""Print a warning between two yellow rules."""
	_display_summary("Warning Summary", warning_message, "yellow")
