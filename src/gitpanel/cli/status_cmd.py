"""Command for showing pending changes."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.markup import escape

from gitpanel.cli.common import RepoPathOption, console, get_service
from gitpanel.git import GitError
from gitpanel.utils.cli_utils import exit_with_error

logger = logging.getLogger(__name__)


def register_command(app: typer.Typer) -> None:
	"""Register the status command with the CLI app."""

	@app.command(name="status")
	def status_command(ctx: typer.Context, repo: RepoPathOption = Path()) -> None:
		"""Show staged, unstaged and untracked changes."""
		try:
			files = get_service(ctx).get_status(repo)
		except GitError as e:
			exit_with_error(str(e), exception=e)

		if not files:
			console.print("Nothing to commit, working tree clean")
			return

		staged = [f for f in files if f.staged]
		unstaged = [f for f in files if not f.staged]
		if staged:
			console.print("[bold green]Staged changes:[/bold green]")
			for f in staged:
				console.print(f"  {f.status.value}  {escape(f.path)}")
		if unstaged:
			console.print("[bold red]Unstaged changes:[/bold red]")
			for f in unstaged:
				console.print(f"  {f.status.value}  {escape(f.path)}")
