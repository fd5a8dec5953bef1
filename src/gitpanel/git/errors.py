"""Error taxonomy for repository inspection."""

from __future__ import annotations

from pathlib import Path


class GitError(Exception):
	"""Base exception for Git-related errors.

	Carries the failing operation and path so the message can be shown to a user as-is.
	"""

	def __init__(self, operation: str, path: Path | str | None = None, detail: str | None = None) -> None:
		self.operation = operation
		self.path = str(path) if path is not None else None
		self.detail = detail
		message = f"Failed to {operation}"
		if self.path:
			message += f" for {self.path}"
		if detail:
			message += f": {detail}"
		super().__init__(message)


class NotARepositoryError(GitError):
	"""No repository metadata exists at or above the path."""


class RepositoryExistsError(GitError):
	"""The path already belongs to a repository."""


class ReferenceNotFoundError(GitError):
	"""HEAD, a branch, or a start hash could not be resolved."""


class PathNotFoundInRevisionError(GitError):
	"""The path has no content at the requested revision."""


class GitIOError(GitError):
	"""Disk read/write, permission, or libgit2 failure."""
