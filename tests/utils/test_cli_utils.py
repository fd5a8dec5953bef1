"""Tests for CLI helper functions."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
import typer

from gitpanel.utils.cli_utils import exit_with_error, handle_keyboard_interrupt, parse_date, show_warning


@pytest.mark.unit
def test_parse_date() -> None:
	assert parse_date(None) is None
	assert parse_date("") is None
	assert parse_date("2024-01-31") == datetime(2024, 1, 31)  # noqa: DTZ001
	assert parse_date("2024-01-31T12:30+02:00") == datetime(2024, 1, 31, 12, 30, tzinfo=timezone(timedelta(hours=2)))


@pytest.mark.unit
def test_parse_date_rejects_free_text() -> None:
	with pytest.raises(typer.BadParameter, match="ISO 8601"):
		parse_date("yesterday")


@pytest.mark.unit
def test_exit_with_error() -> None:
	with patch("gitpanel.utils.cli_utils.display_error_summary") as mock_display:
		with pytest.raises(typer.Exit) as exc_info:
			exit_with_error("Something failed", exit_code=3, exception=RuntimeError("root cause"))

	assert exc_info.value.exit_code == 3
	shown = mock_display.call_args[0][0]
	assert "Something failed" in shown
	assert "root cause" in shown


@pytest.mark.unit
def test_handle_keyboard_interrupt() -> None:
	with pytest.raises(typer.Exit) as exc_info:
		handle_keyboard_interrupt()

	assert exc_info.value.exit_code == 130


@pytest.mark.unit
def test_show_warning() -> None:
	with patch("gitpanel.utils.cli_utils.display_warning_summary") as mock_display:
		show_warning("Branch list is partial")

	mock_display.assert_called_once_with("Branch list is partial")
