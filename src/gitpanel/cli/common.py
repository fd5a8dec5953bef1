"""Shared helpers for GitPanel commands."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from gitpanel.config import ConfigLoader
from gitpanel.git import GitService
from gitpanel.utils.ignore import GitignoreMatcher, never_ignored

logger = logging.getLogger(__name__)

console = Console()

RepoPathOption = Annotated[
	Path,
	typer.Option("--repo", "-C", help="Path inside the repository (defaults to the current directory)"),
]


def build_service(config_loader: ConfigLoader) -> GitService:
	"""Create a GitService wired from configuration."""
	config = config_loader.get
	if config.status.use_gitignore:
		is_ignored = GitignoreMatcher(config.status.extra_ignore_patterns)
	else:
		is_ignored = never_ignored
	return GitService(
		is_ignored,
		binary_sniff_bytes=config.diff.binary_sniff_bytes,
		fallback_author=config.commit.fallback_author,
	)


def get_config(ctx: typer.Context) -> ConfigLoader:
	"""Return the configuration loaded by the global callback."""
	config_loader = ctx.obj.get("config") if ctx.obj else None
	return config_loader or ConfigLoader.get_instance()


def get_service(ctx: typer.Context) -> GitService:
	"""Return a service configured for this invocation."""
	return build_service(get_config(ctx))
