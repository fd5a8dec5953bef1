"""Helpers shared by the GitPanel commands."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import NoReturn

import typer

from gitpanel.utils.log_setup import console, display_error_summary, display_warning_summary

logger = logging.getLogger(__name__)

INTERRUPTED_EXIT_CODE = 130


def show_error(message: str, exception: Exception | None = None) -> None:
	"""Print an error summary; the exception text is appended and its traceback logged at debug level."""
	if exception is not None:
		logger.debug("Command failed", exc_info=exception)
		message = f"{message}\n\nDetails: {exception}"
	display_error_summary(message)


def show_warning(message: str) -> None:
	"""Print a warning summary."""
	display_warning_summary(message)


def exit_with_error(message: str, exit_code: int = 1, exception: Exception | None = None) -> NoReturn:
	"""
	Show an error summary and stop the command.

	Raises:
		typer.Exit: Always, with ``exit_code``.

	"""
	show_error(message, exception)
	raise typer.Exit(exit_code) from exception


def handle_keyboard_interrupt() -> NoReturn:
	"""Stop a command the user interrupted with Ctrl+C."""
	console.print("\n[yellow]Interrupted.[/yellow]")
	raise typer.Exit(INTERRUPTED_EXIT_CODE)


def parse_date(value: str | None) -> datetime | None:
	"""
	Parse an ISO 8601 date or datetime given on the command line.

	Raises:
		typer.BadParameter: If the value is not ISO 8601.

	"""
	if not value:
		return None
	try:
		return datetime.fromisoformat(value)
	except ValueError as e:
		msg = f"Invalid date '{value}', expected ISO 8601 (e.g. 2024-01-31 or 2024-01-31T12:00)"
		raise typer.BadParameter(msg) from e
