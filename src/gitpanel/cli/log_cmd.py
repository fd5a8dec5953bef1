"""Commands for browsing commit history."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from rich.markup import escape

from gitpanel.cli.common import RepoPathOption, console, get_config, get_service
from gitpanel.git import CommitFilter, GitError
from gitpanel.utils.cli_utils import exit_with_error, handle_keyboard_interrupt, parse_date, show_warning

if TYPE_CHECKING:
	from gitpanel.git import CommitInfo

logger = logging.getLogger(__name__)

LimitOption = Annotated[
	int | None, typer.Option("--limit", "-n", help="Maximum commits to show (0 for all; defaults to config)")
]
AfterOption = Annotated[str | None, typer.Option("--after", help="Continue after this commit hash")]
SkipOption = Annotated[int, typer.Option("--skip", help="Skip this many matching commits")]
BranchOption = Annotated[str | None, typer.Option("--branch", "-b", help="List history of a local branch")]
FromOption = Annotated[str | None, typer.Option("--from", help="Start from this commit instead of HEAD")]
AuthorOption = Annotated[str | None, typer.Option("--author", help="Author name or email substring")]
GrepOption = Annotated[str | None, typer.Option("--grep", help="Case-insensitive message substring")]
SinceOption = Annotated[str | None, typer.Option("--since", help="Earliest author date (ISO 8601)")]
UntilOption = Annotated[str | None, typer.Option("--until", help="Latest author date (ISO 8601)")]


def _print_commit(commit: CommitInfo) -> None:
	subject = commit.message.splitlines()[0] if commit.message else ""
	console.print(
		f"[yellow]{commit.hash[:7]}[/yellow]  {commit.timestamp:%Y-%m-%d %H:%M}  "
		f"[cyan]{escape(commit.author_name)}[/cyan]  {escape(subject)}"
	)


def register_command(app: typer.Typer) -> None:
	"""Register the history commands with the CLI app."""

	@app.command(name="log")
	def log_command(
		ctx: typer.Context,
		limit: LimitOption = None,
		after: AfterOption = None,
		skip: SkipOption = 0,
		branch: BranchOption = None,
		start: FromOption = None,
		author: AuthorOption = None,
		grep: GrepOption = None,
		since: SinceOption = None,
		until: UntilOption = None,
		repo: RepoPathOption = Path(),
	) -> None:
		"""List commits newest first, one page at a time."""
		commit_filter = CommitFilter(
			branch=branch,
			start_hash=start,
			limit=limit if limit is not None else get_config(ctx).get.history.default_limit,
			offset=skip,
			offset_hash=after,
			author=author,
			search_query=grep,
			start_date=parse_date(since),
			end_date=parse_date(until),
		)
		try:
			commits = get_service(ctx).list_commits(repo, commit_filter)
		except GitError as e:
			exit_with_error(str(e), exception=e)
		except KeyboardInterrupt:
			handle_keyboard_interrupt()

		if not commits:
			if after:
				show_warning(f"No commits found after {after}. The hash may not be part of this history.")
			else:
				console.print("No commits found")
			return
		for commit in commits:
			_print_commit(commit)
		if commits[-1].has_more:
			console.print(f"\nMore commits available: --after {commits[-1].hash}")

	@app.command(name="head")
	def head_command(ctx: typer.Context, repo: RepoPathOption = Path()) -> None:
		"""Show the commit HEAD points to."""
		try:
			commit = get_service(ctx).get_head_commit(repo)
		except GitError as e:
			exit_with_error(str(e), exception=e)

		console.print(f"commit [yellow]{commit.hash}[/yellow]")
		console.print(f"Author: {escape(commit.author_name)} <{escape(commit.author_email)}>")
		console.print(f"Date:   {commit.timestamp.isoformat()}")
		console.print()
		console.print(escape(commit.message))
