"""Opening, creating and probing repositories with pygit2."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import pygit2
from pygit2 import GitError as Pygit2GitError
from pygit2.repository import Repository

from gitpanel.git.errors import GitIOError, NotARepositoryError, RepositoryExistsError

if TYPE_CHECKING:
	from collections.abc import Iterator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RepoHandle:
	"""An open repository together with the root of its working tree."""

	repo: Repository
	root: Path

	def worktree_path(self, file_path: str) -> Path:
		"""Return the on-disk location of a repository-relative path."""
		return self.root / file_path


class RepositoryGateway:
	"""Entry point for getting a repository handle for a filesystem path."""

	@staticmethod
	def _discover(path: Path) -> str | None:
		"""Find the repository metadata directory at or above ``path``."""
		try:
			return pygit2.discover_repository(str(path))
		except KeyError:
			# Older pygit2 releases raise instead of returning None
			return None

	@classmethod
	def probe(cls, path: Path | str) -> bool:
		"""
		Tell whether ``path`` lies inside a repository.

		Absence of a repository is not an error; a missing or unreadable
		directory is.

		Raises:
			GitIOError: If the path cannot be inspected.
		"""
		abs_path = Path(path).expanduser().resolve()
		if not abs_path.exists():
			raise GitIOError("check repository", abs_path, "path does not exist")
		try:
			return cls._discover(abs_path) is not None
		except (Pygit2GitError, OSError) as e:
			msg = f"Failed to check repository at {abs_path}"
			logger.exception(msg)
			raise GitIOError("check repository", abs_path, str(e)) from e

	@classmethod
	def open(cls, path: Path | str) -> RepoHandle:
		"""
		Open the repository containing ``path``.

		Raises:
			NotARepositoryError: If no repository exists at or above the path.
			GitIOError: If the repository cannot be read.
		"""
		abs_path = Path(path).expanduser().resolve()
		if not cls.probe(abs_path):
			raise NotARepositoryError("open repository", abs_path, "not a git repository")
		try:
			repo = Repository(cls._discover(abs_path))
		except Pygit2GitError as e:
			logger.exception("Failed to open repository at %s", abs_path)
			raise GitIOError("open repository", abs_path, str(e)) from e

		if repo.workdir is None:
			repo.free()
			raise NotARepositoryError("open repository", abs_path, "bare repositories have no working tree")
		return RepoHandle(repo=repo, root=Path(repo.workdir))

	@classmethod
	def init(cls, path: Path | str) -> RepoHandle:
		"""
		Create a non-bare repository at ``path``.

		Raises:
			RepositoryExistsError: If ``open`` would already succeed.
			GitIOError: If the repository cannot be created.
		"""
		abs_path = Path(path).expanduser().resolve()
		if abs_path.exists() and cls.probe(abs_path):
			raise RepositoryExistsError("initialize repository", abs_path, "directory is already a git repository")
		try:
			repo = pygit2.init_repository(str(abs_path), bare=False)
		except (Pygit2GitError, OSError) as e:
			logger.exception("Failed to initialize repository at %s", abs_path)
			raise GitIOError("initialize repository", abs_path, str(e)) from e
		logger.info("Initialized repository at %s", abs_path)
		return RepoHandle(repo=repo, root=Path(repo.workdir))

	@classmethod
	@contextmanager
	def session(cls, path: Path | str) -> Iterator[RepoHandle]:
		"""Open a repository for the duration of one operation and free it afterwards."""
		handle = cls.open(path)
		try:
			yield handle
		finally:
			handle.repo.free()
