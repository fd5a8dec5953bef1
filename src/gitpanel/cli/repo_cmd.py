"""Commands that create repositories and change the index or working tree."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from gitpanel.cli.common import RepoPathOption, console, get_service
from gitpanel.git import GitError
from gitpanel.utils.cli_utils import exit_with_error, handle_keyboard_interrupt

logger = logging.getLogger(__name__)

FilesArg = Annotated[list[str], typer.Argument(help="File paths relative to the repository root")]
MessageOption = Annotated[str, typer.Option("--message", "-m", help="Commit message")]
InitPathArg = Annotated[Path, typer.Argument(help="Directory to initialize")]


def register_command(app: typer.Typer) -> None:
	"""Register repository and index commands with the CLI app."""

	@app.command(name="init")
	def init_command(ctx: typer.Context, path: InitPathArg = Path()) -> None:
		"""Create an empty repository."""
		try:
			get_service(ctx).init_repository(path)
		except GitError as e:
			exit_with_error(str(e), exception=e)
		console.print(f"Initialized empty repository in {escape(str(path.resolve()))}")

	@app.command(name="stage")
	def stage_command(ctx: typer.Context, files: FilesArg, repo: RepoPathOption = Path()) -> None:
		"""Stage files, including deletions."""
		service = get_service(ctx)
		try:
			for file in files:
				service.stage_file(repo, file)
		except GitError as e:
			exit_with_error(str(e), exception=e)
		except KeyboardInterrupt:
			handle_keyboard_interrupt()

	@app.command(name="unstage")
	def unstage_command(ctx: typer.Context, files: FilesArg, repo: RepoPathOption = Path()) -> None:
		"""Remove files from the index, keeping working-tree changes."""
		service = get_service(ctx)
		try:
			for file in files:
				service.unstage_file(repo, file)
		except GitError as e:
			exit_with_error(str(e), exception=e)

	@app.command(name="discard")
	def discard_command(
		ctx: typer.Context,
		files: FilesArg,
		yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask for confirmation")] = False,
		repo: RepoPathOption = Path(),
	) -> None:
		"""Revert files to the last commit; untracked files are deleted."""
		if not yes:
			typer.confirm(f"Discard changes to {', '.join(files)}?", abort=True)
		service = get_service(ctx)
		try:
			for file in files:
				service.discard_changes(repo, file)
		except GitError as e:
			exit_with_error(str(e), exception=e)
		except KeyboardInterrupt:
			handle_keyboard_interrupt()

	@app.command(name="commit")
	def commit_command(ctx: typer.Context, message: MessageOption, repo: RepoPathOption = Path()) -> None:
		"""Commit staged changes."""
		try:
			commit_hash = get_service(ctx).commit(repo, message)
		except (GitError, ValueError) as e:
			exit_with_error(str(e), exception=e)
		console.print(f"Created commit [yellow]{commit_hash[:7]}[/yellow]")

	@app.command(name="branches")
	def branches_command(ctx: typer.Context, repo: RepoPathOption = Path()) -> None:
		"""List local and remote-tracking branches."""
		try:
			branches = get_service(ctx).list_branches(repo)
		except GitError as e:
			exit_with_error(str(e), exception=e)

		for branch in branches:
			marker = "*" if branch.is_head else " "
			style = "red" if branch.is_remote else ("green" if branch.is_head else "default")
			console.print(f"{marker} [{style}]{escape(branch.name)}[/{style}]")
