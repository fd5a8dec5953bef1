"""Working-tree status with staged/unstaged classification."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from pygit2 import GitError as Pygit2GitError
from pygit2.enums import FileStatus as GitStatusFlag

from gitpanel.git.errors import GitIOError
from gitpanel.git.models import FileStatus, StatusCode

if TYPE_CHECKING:
	from gitpanel.git.repository import RepoHandle

logger = logging.getLogger(__name__)

IgnorePredicate = Callable[[Path, Path], bool]
"""``(repo_root, absolute_path) -> bool``; True means the path must never be reported."""

_INDEX_FLAGS: tuple[tuple[GitStatusFlag, StatusCode], ...] = (
	(GitStatusFlag.INDEX_NEW, StatusCode.ADDED),
	(GitStatusFlag.INDEX_DELETED, StatusCode.DELETED),
	(GitStatusFlag.INDEX_RENAMED, StatusCode.RENAMED),
	(GitStatusFlag.INDEX_MODIFIED, StatusCode.MODIFIED),
	(GitStatusFlag.INDEX_TYPECHANGE, StatusCode.MODIFIED),
)

_WORKTREE_FLAGS: tuple[tuple[GitStatusFlag, StatusCode], ...] = (
	(GitStatusFlag.WT_NEW, StatusCode.UNTRACKED),
	(GitStatusFlag.WT_DELETED, StatusCode.DELETED),
	(GitStatusFlag.WT_RENAMED, StatusCode.RENAMED),
	(GitStatusFlag.WT_MODIFIED, StatusCode.MODIFIED),
	(GitStatusFlag.WT_TYPECHANGE, StatusCode.MODIFIED),
)


def _first_match(flags: int, table: tuple[tuple[GitStatusFlag, StatusCode], ...]) -> StatusCode | None:
	for flag, code in table:
		if flags & flag:
			return code
	return None


def classify(path: str, flags: int) -> list[FileStatus]:
	"""
	Turn libgit2 status flags for one path into status rows.

	Args:
		path: Repository-relative path.
		flags: Bitmask from ``Repository.status``.

	Returns:
		Zero, one or two rows: a staged row when the index differs from HEAD,
		and an unstaged row when the working tree differs from the index.
	"""
	rows: list[FileStatus] = []
	staged_code = _first_match(flags, _INDEX_FLAGS)
	if staged_code is not None:
		rows.append(FileStatus(path=path, status=staged_code, staged=True))
	unstaged_code = _first_match(flags, _WORKTREE_FLAGS)
	if unstaged_code is not None:
		rows.append(FileStatus(path=path, status=unstaged_code, staged=False))
	return rows


class StatusResolver:
	"""Computes pending changes for a repository, hiding ignored paths."""

	def __init__(self, handle: RepoHandle, is_ignored: IgnorePredicate) -> None:
		self.handle = handle
		self.is_ignored = is_ignored

	def path_flags(self, path: str) -> int:
		"""Return the status bitmask for a single path (0 when unchanged or unknown)."""
		try:
			return self.handle.repo.status_file(path)
		except KeyError:
			return 0
		except Pygit2GitError as e:
			logger.exception("Failed to get status for %s", path)
			raise GitIOError("get status", path, str(e)) from e

	def is_path_ignored(self, path: str) -> bool:
		"""Apply the injected ignore predicate to a repository-relative path."""
		return self.is_ignored(self.handle.root, self.handle.worktree_path(path))

	def resolve(self) -> list[FileStatus]:
		"""
		Compute the change list.

		Returns:
			Rows sorted by path, the staged row first when a path has both.

		Raises:
			GitIOError: If libgit2 cannot compute the status.
		"""
		try:
			status = self.handle.repo.status()
		except Pygit2GitError as e:
			logger.exception("Failed to get repository status")
			raise GitIOError("get status", self.handle.root, str(e)) from e

		files: list[FileStatus] = []
		ignored = 0
		for path in sorted(status):
			if self.is_path_ignored(path):
				ignored += 1
				continue
			files.extend(classify(path, status[path]))

		logger.debug("Status: %d rows, %d ignored paths skipped", len(files), ignored)
		return files
