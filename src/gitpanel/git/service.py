"""Repository operations exposed to the editor's source-control panel."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pygit2 import IndexEntry, Signature
from pygit2 import GitError as Pygit2GitError
from pygit2.enums import FileMode
from pygit2.enums import FileStatus as GitStatusFlag

from gitpanel.git.content import ContentResolver
from gitpanel.git.diff import BINARY_SNIFF_BYTES, binary_file_diff, build_file_diff, is_binary
from gitpanel.git.errors import (
	GitError,
	GitIOError,
	PathNotFoundInRevisionError,
	ReferenceNotFoundError,
)
from gitpanel.git.history import (
	HEAD_FILTER,
	CommitHistoryWalker,
	after_filter,
	author_filter,
	branch_filter,
	search_filter,
)
from gitpanel.git.models import BranchInfo, CommitFilter, CommitInfo, FileDiff, FileStatus, Revision
from gitpanel.git.repository import RepoHandle, RepositoryGateway
from gitpanel.git.status import StatusResolver
from gitpanel.utils.ignore import never_ignored

if TYPE_CHECKING:
	from pathlib import Path

	from gitpanel.git.history import LivenessCheck
	from gitpanel.git.status import IgnorePredicate

logger = logging.getLogger(__name__)

_INDEX_CHANGES = (
	GitStatusFlag.INDEX_NEW
	| GitStatusFlag.INDEX_MODIFIED
	| GitStatusFlag.INDEX_DELETED
	| GitStatusFlag.INDEX_RENAMED
	| GitStatusFlag.INDEX_TYPECHANGE
)


class GitService:
	"""
	Synchronous repository operations.

	Every call opens the repository fresh and frees it before returning, so the
	service holds no state besides its collaborators. Callers serialize
	mutating calls against the same repository themselves.

	"""

	def __init__(
		self,
		is_ignored: IgnorePredicate | None = None,
		*,
		binary_sniff_bytes: int = BINARY_SNIFF_BYTES,
		fallback_author: tuple[str, str] | None = None,
	) -> None:
		"""
		Initialize the service.

		Args:
			is_ignored: ``(repo_root, absolute_path) -> bool`` used to hide ignored paths.
			binary_sniff_bytes: Leading bytes inspected when classifying content as binary.
			fallback_author: ``(name, email)`` used to commit when git config has no identity.
		"""
		self.is_ignored = is_ignored or never_ignored
		self.binary_sniff_bytes = binary_sniff_bytes
		self.fallback_author = fallback_author

	# --- Repository lifecycle ---

	def is_repository(self, path: Path | str) -> bool:
		"""Return True if ``path`` is inside a repository."""
		return RepositoryGateway.probe(path)

	def init_repository(self, path: Path | str) -> None:
		"""Create a new non-bare repository at ``path``."""
		handle = RepositoryGateway.init(path)
		handle.repo.free()

	# --- Status and index ---

	def get_status(self, path: Path | str) -> list[FileStatus]:
		"""Return the pending changes of the repository at ``path``."""
		with RepositoryGateway.session(path) as handle:
			return StatusResolver(handle, self.is_ignored).resolve()

	def stage_file(self, path: Path | str, file: str) -> None:
		"""
		Stage the working-tree state of ``file``, including its deletion.

		Raises:
			PathNotFoundInRevisionError: If the file is neither on disk nor tracked.
		"""
		with RepositoryGateway.session(path) as handle:
			index = handle.repo.index
			try:
				if handle.worktree_path(file).is_file():
					index.add(file)
				elif ContentResolver(handle).index_entry_id(file) is not None:
					index.remove(file)
				else:
					raise PathNotFoundInRevisionError("stage file", file, "file is neither on disk nor tracked")
				index.write()
			except (Pygit2GitError, OSError) as e:
				logger.exception("Failed to stage %s", file)
				raise GitIOError("stage file", file, str(e)) from e
			logger.info("Staged %s", file)

	def unstage_file(self, path: Path | str, file: str) -> None:
		"""Reset the index entry of ``file`` to HEAD without touching the working tree."""
		with RepositoryGateway.session(path) as handle:
			resolver = ContentResolver(handle)
			index = handle.repo.index
			try:
				head_entry = None
				if not handle.repo.head_is_unborn:
					try:
						head_entry = resolver.head_tree()[file]
					except KeyError:
						head_entry = None

				if head_entry is not None:
					index.add(IndexEntry(file, head_entry.id, head_entry.filemode))
				elif resolver.index_entry_id(file) is not None:
					index.remove(file)
				index.write()
			except (Pygit2GitError, OSError) as e:
				logger.exception("Failed to unstage %s", file)
				raise GitIOError("unstage file", file, str(e)) from e
			logger.info("Unstaged %s", file)

	def discard_changes(self, path: Path | str, file: str) -> None:
		"""
		Revert ``file`` on disk to the last commit, or delete it if untracked.

		Raises:
			ReferenceNotFoundError: If a tracked file is discarded before the first commit.
			PathNotFoundInRevisionError: If the file does not exist in HEAD.
		"""
		with RepositoryGateway.session(path) as handle:
			resolver = ContentResolver(handle)
			full_path = handle.worktree_path(file)
			flags = StatusResolver(handle, self.is_ignored).path_flags(file)

			try:
				if flags & GitStatusFlag.WT_NEW and not flags & _INDEX_CHANGES:
					full_path.unlink()
					logger.info("Deleted untracked file %s", file)
					return

				try:
					entry = resolver.head_tree()[file]
				except KeyError as e:
					raise PathNotFoundInRevisionError("discard changes", file, "path does not exist in HEAD") from e

				full_path.parent.mkdir(parents=True, exist_ok=True)
				full_path.write_bytes(resolver.resolve(file, Revision.HEAD))
				full_path.chmod(0o755 if entry.filemode == FileMode.BLOB_EXECUTABLE else 0o644)
			except OSError as e:
				logger.exception("Failed to discard changes to %s", file)
				raise GitIOError("discard changes", file, str(e)) from e
			logger.info("Discarded changes to %s", file)

	def commit(self, path: Path | str, message: str) -> str:
		"""
		Commit the index on the current branch.

		Returns:
			The hash of the new commit.
		"""
		if not message.strip():
			msg = "Commit message must not be empty"
			raise ValueError(msg)

		with RepositoryGateway.session(path) as handle:
			repo = handle.repo
			signature = self._signature(handle)
			try:
				tree = repo.index.write_tree()
				parents = [] if repo.head_is_unborn else [repo.head.target]
				oid = repo.create_commit("HEAD", signature, signature, message, tree, parents)
			except Pygit2GitError as e:
				logger.exception("Failed to create commit")
				raise GitIOError("create commit", handle.root, str(e)) from e
			logger.info("Created commit %s", oid)
			return str(oid)

	def _signature(self, handle: RepoHandle) -> Signature:
		try:
			return handle.repo.default_signature
		except (KeyError, Pygit2GitError):
			if self.fallback_author is None:
				raise GitError(
					"create commit", handle.root, "no author identity configured (set user.name and user.email)"
				) from None
			name, email = self.fallback_author
			return Signature(name, email)

	# --- Branches ---

	def list_branches(self, path: Path | str) -> list[BranchInfo]:
		"""List local branches, then remote-tracking branches."""
		with RepositoryGateway.session(path) as handle:
			repo = handle.repo
			current = "" if repo.head_is_unborn else repo.head.shorthand
			branches = [
				BranchInfo(name=name, is_remote=False, is_head=name == current)
				for name in sorted(repo.branches.local)
			]
			branches.extend(
				BranchInfo(name=name, is_remote=True, is_head=False)
				for name in sorted(repo.branches.remote)
				if not name.endswith("/HEAD")
			)
			return branches

	def get_current_branch(self, path: Path | str) -> str:
		"""
		Return the short name of HEAD.

		Raises:
			ReferenceNotFoundError: If the repository has no commits.
		"""
		with RepositoryGateway.session(path) as handle:
			if handle.repo.head_is_unborn:
				raise ReferenceNotFoundError("get current branch", handle.root, "repository has no commits")
			return handle.repo.head.shorthand

	# --- History ---

	def list_commits(
		self, path: Path | str, commit_filter: CommitFilter, is_alive: LivenessCheck | None = None
	) -> list[CommitInfo]:
		"""Return one page of history matching ``commit_filter``."""
		with RepositoryGateway.session(path) as handle:
			return CommitHistoryWalker(handle).walk(commit_filter, is_alive)

	def list_commits_after(self, path: Path | str, offset_hash: str, limit: int) -> list[CommitInfo]:
		"""Return the page of history that follows ``offset_hash``."""
		return self.list_commits(path, after_filter(offset_hash, limit))

	def list_commits_by_branch(self, path: Path | str, branch: str, limit: int) -> list[CommitInfo]:
		"""Return history of a local branch."""
		return self.list_commits(path, branch_filter(branch, limit))

	def list_commits_by_author(self, path: Path | str, author: str, limit: int) -> list[CommitInfo]:
		"""Return history filtered by author name or email."""
		return self.list_commits(path, author_filter(author, limit))

	def search_commits(self, path: Path | str, query: str, limit: int) -> list[CommitInfo]:
		"""Return history whose messages contain ``query``."""
		return self.list_commits(path, search_filter(query, limit))

	def get_head_commit(self, path: Path | str) -> CommitInfo:
		"""
		Return the commit HEAD points to.

		Raises:
			ReferenceNotFoundError: If the repository has no commits.
		"""
		return self.list_commits(path, HEAD_FILTER)[0]

	# --- Diffs ---

	def get_file_diff(self, path: Path | str, file: str, staged: bool) -> FileDiff:
		"""
		Diff one file.

		Staged diffs compare HEAD with the index; unstaged diffs compare the index
		(or HEAD when the file is not staged) with the working tree.

		Raises:
			PathNotFoundInRevisionError: If a staged diff is requested for an untracked file.
		"""
		with RepositoryGateway.session(path) as handle:
			resolver = ContentResolver(handle)
			status = StatusResolver(handle, self.is_ignored)
			flags = status.path_flags(file)
			in_index = resolver.index_entry_id(file) is not None

			if not in_index and status.is_path_ignored(file):
				logger.debug("Skipping diff for ignored path %s", file)
				return FileDiff(path=file)

			untracked = bool(flags & GitStatusFlag.WT_NEW) and not flags & _INDEX_CHANGES
			if untracked and staged:
				raise PathNotFoundInRevisionError("get staged diff", file, "file is untracked")

			if flags & (GitStatusFlag.INDEX_DELETED if staged else GitStatusFlag.WT_DELETED):
				old = self._head_or_empty(resolver, file) if staged else self._index_or_head(resolver, file)
				if old is not None and is_binary(old, self.binary_sniff_bytes):
					return binary_file_diff(file)
				logger.debug("Diffing deleted file %s (staged=%s)", file, staged)
				return build_file_diff(old, None, file)

			current = resolver.resolve_optional(file, Revision.WORKING_TREE)
			if staged:
				old = self._head_or_empty(resolver, file)
				new = resolver.resolve_optional(file, Revision.INDEX)
			elif untracked:
				old, new = None, current
			else:
				old = self._index_or_head(resolver, file)
				new = current

			sniffed = current if current is not None else new
			if sniffed is not None and is_binary(sniffed, self.binary_sniff_bytes):
				return binary_file_diff(file)
			logger.debug("Diffing %s (staged=%s, untracked=%s)", file, staged, untracked)
			return build_file_diff(old, new, file)

	@staticmethod
	def _head_or_empty(resolver: ContentResolver, file: str) -> bytes | None:
		try:
			return resolver.resolve_optional(file, Revision.HEAD)
		except ReferenceNotFoundError:
			return None

	@classmethod
	def _index_or_head(cls, resolver: ContentResolver, file: str) -> bytes | None:
		content = resolver.resolve_optional(file, Revision.INDEX)
		if content is None:
			content = cls._head_or_empty(resolver, file)
		return content
