"""Command for showing the diff of a single file."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from gitpanel.cli.common import RepoPathOption, console, get_service
from gitpanel.git import GitError
from gitpanel.utils.cli_utils import exit_with_error

FileArg = Annotated[str, typer.Argument(help="File path relative to the repository root")]
StagedFlag = Annotated[bool, typer.Option("--staged", "--cached", help="Diff HEAD against the index")]


def register_command(app: typer.Typer) -> None:
	"""Register the diff command with the CLI app."""

	@app.command(name="diff")
	def diff_command(
		ctx: typer.Context,
		file: FileArg,
		staged: StagedFlag = False,
		repo: RepoPathOption = Path(),
	) -> None:
		"""Show a unified diff for FILE."""
		try:
			file_diff = get_service(ctx).get_file_diff(repo, file, staged)
		except GitError as e:
			exit_with_error(str(e), exception=e)

		if file_diff.is_binary:
			console.print(f"Binary file {file} differs")
			return
		if file_diff.content:
			typer.echo(file_diff.content, nl=False)
		stats = file_diff.stats
		console.print(f"[green]+{stats.added}[/green] [red]-{stats.deleted}[/red]")
