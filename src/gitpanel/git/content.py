"""Resolve the bytes of a path at the working tree, the index, or HEAD."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pygit2 import Blob, Commit
from pygit2 import GitError as Pygit2GitError

from gitpanel.git.errors import GitIOError, PathNotFoundInRevisionError, ReferenceNotFoundError
from gitpanel.git.models import Revision

if TYPE_CHECKING:
	from pygit2 import Oid, Tree

	from gitpanel.git.repository import RepoHandle

logger = logging.getLogger(__name__)


class ContentResolver:
	"""Reads file content from one of the three places a path can live."""

	def __init__(self, handle: RepoHandle) -> None:
		self.handle = handle
		self.repo = handle.repo

	def resolve(self, path: str, revision: Revision) -> bytes:
		"""
		Return the raw content of ``path`` at ``revision``.

		Args:
			path: Path relative to the repository root, using forward slashes.
			revision: Working tree, index or HEAD.

		Returns:
			The content as bytes; text/binary interpretation is left to the caller.

		Raises:
			PathNotFoundInRevisionError: If the path has no content at that revision.
			ReferenceNotFoundError: If ``revision`` is HEAD and there are no commits.
			GitIOError: If reading fails.
		"""
		if revision is Revision.WORKING_TREE:
			return self._read_worktree(path)
		if revision is Revision.INDEX:
			return self._read_index(path)
		return self._read_head(path)

	def resolve_optional(self, path: str, revision: Revision) -> bytes | None:
		"""Like ``resolve`` but return None when the path is absent from the revision."""
		try:
			return self.resolve(path, revision)
		except PathNotFoundInRevisionError:
			return None

	def head_tree(self) -> Tree:
		"""
		Return the tree of the current HEAD commit.

		Raises:
			ReferenceNotFoundError: If the repository has no commits yet.
		"""
		if self.repo.head_is_unborn:
			raise ReferenceNotFoundError("resolve HEAD", self.handle.root, "repository has no commits")
		try:
			return self.repo.head.peel(Commit).tree
		except Pygit2GitError as e:
			raise ReferenceNotFoundError("resolve HEAD", self.handle.root, str(e)) from e

	def index_entry_id(self, path: str) -> Oid | None:
		"""Return the blob id staged for ``path``, or None if it has no index entry."""
		try:
			return self.repo.index[path].id
		except KeyError:
			return None

	def _read_worktree(self, path: str) -> bytes:
		full_path = self.handle.worktree_path(path)
		try:
			return full_path.read_bytes()
		except (FileNotFoundError, IsADirectoryError) as e:
			raise PathNotFoundInRevisionError("read working tree file", path, "file does not exist") from e
		except OSError as e:
			logger.exception("Failed to read %s", full_path)
			raise GitIOError("read working tree file", path, str(e)) from e

	def _read_index(self, path: str) -> bytes:
		oid = self.index_entry_id(path)
		if oid is None:
			raise PathNotFoundInRevisionError("read staged content", path, "path is not in the index")
		return self._read_blob(oid, path, "read staged content")

	def _read_head(self, path: str) -> bytes:
		tree = self.head_tree()
		try:
			entry = tree[path]
		except KeyError as e:
			raise PathNotFoundInRevisionError("read HEAD content", path, "path does not exist in HEAD") from e
		return self._read_blob(entry.id, path, "read HEAD content")

	def _read_blob(self, oid: Oid, path: str, operation: str) -> bytes:
		try:
			obj = self.repo[oid]
		except (KeyError, Pygit2GitError) as e:
			logger.exception("Failed to load object %s for %s", oid, path)
			raise GitIOError(operation, path, str(e)) from e
		if not isinstance(obj, Blob):
			raise PathNotFoundInRevisionError(operation, path, "path is not a file")
		return obj.data
