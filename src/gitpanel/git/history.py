"""Commit history walking with filters and cursor pagination."""

from __future__ import annotations

import logging
from collections.abc import Callable
from contextlib import contextmanager
from dataclasses import replace
from datetime import UTC, datetime, timedelta, timezone
from typing import TYPE_CHECKING

from pygit2 import Commit
from pygit2 import GitError as Pygit2GitError
from pygit2.enums import SortMode

from gitpanel.git.errors import GitIOError, ReferenceNotFoundError
from gitpanel.git.models import CommitFilter, CommitInfo

if TYPE_CHECKING:
	from collections.abc import Iterator

	from pygit2 import Oid, Walker

	from gitpanel.git.repository import RepoHandle

logger = logging.getLogger(__name__)

LivenessCheck = Callable[[], bool]


def _author_time(commit: Commit) -> datetime:
	author = commit.author
	return datetime.fromtimestamp(author.time, tz=timezone(timedelta(minutes=author.offset)))


def _as_aware(value: datetime) -> datetime:
	return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def commit_info(commit: Commit) -> CommitInfo:
	"""Build a ``CommitInfo`` (with ``has_more`` unset) from a pygit2 commit."""
	return CommitInfo(
		hash=str(commit.id),
		message=commit.message.strip(),
		author_name=commit.author.name,
		author_email=commit.author.email,
		timestamp=_author_time(commit),
		parent_hashes=tuple(str(parent_id) for parent_id in commit.parent_ids),
	)


class CommitHistoryWalker:
	"""
	Walks history newest-first and pages through it.

	The pipeline per commit is: liveness check, cursor gate, date range,
	author, message, numeric offset, then limit with a one-commit look-ahead.

	"""

	def __init__(self, handle: RepoHandle) -> None:
		self.handle = handle
		self.repo = handle.repo

	def resolve_start(self, commit_filter: CommitFilter) -> Oid:
		"""
		Pick the commit the walk starts from: branch, then start hash, then HEAD.

		Raises:
			ReferenceNotFoundError: If the chosen start point does not exist.
		"""
		if commit_filter.branch:
			branch = self.repo.branches.local.get(commit_filter.branch)
			if branch is None:
				raise ReferenceNotFoundError("resolve branch", commit_filter.branch, "no such branch")
			return branch.peel(Commit).id

		if commit_filter.start_hash:
			try:
				return self.repo.revparse_single(commit_filter.start_hash).peel(Commit).id
			except (KeyError, ValueError, Pygit2GitError) as e:
				raise ReferenceNotFoundError("resolve start commit", commit_filter.start_hash, str(e)) from e

		if self.repo.head_is_unborn:
			raise ReferenceNotFoundError("resolve HEAD", self.handle.root, "repository has no commits")
		return self.repo.head.peel(Commit).id

	@contextmanager
	def _open_walker(self, start: Oid) -> Iterator[Walker]:
		try:
			walker = self.repo.walk(start, SortMode.TIME)
		except Pygit2GitError as e:
			logger.exception("Failed to start history walk at %s", start)
			raise GitIOError("walk history", self.handle.root, str(e)) from e
		try:
			yield walker
		finally:
			walker.reset()
			logger.debug("Released history walker started at %s", start)

	@staticmethod
	def _passes_filters(commit: Commit, commit_filter: CommitFilter) -> bool:
		if commit_filter.start_date is not None or commit_filter.end_date is not None:
			when = _author_time(commit)
			if commit_filter.start_date is not None and when < _as_aware(commit_filter.start_date):
				return False
			if commit_filter.end_date is not None and when > _as_aware(commit_filter.end_date):
				return False

		if commit_filter.author:
			author = commit.author
			if commit_filter.author not in author.name and commit_filter.author not in author.email:
				return False

		if commit_filter.search_query:
			return commit_filter.search_query.lower() in commit.message.lower()
		return True

	def walk(self, commit_filter: CommitFilter, is_alive: LivenessCheck | None = None) -> list[CommitInfo]:
		"""
		Return one page of history.

		Args:
			commit_filter: Start point, filters and pagination.
			is_alive: Polled once per commit; returning False stops the walk early.

		Returns:
			Commits newest-first. Every row but the last has ``has_more=True``;
			the last row's flag says whether another qualifying commit exists.

		Raises:
			ReferenceNotFoundError: If the start point cannot be resolved.
			GitIOError: If the walk fails.
		"""
		start = self.resolve_start(commit_filter)
		logger.debug("Walking history from %s with %s", start, commit_filter)

		limit = commit_filter.limit if commit_filter.limit > 0 else None
		gate_open = not commit_filter.offset_hash
		to_skip = commit_filter.offset if gate_open else 0
		commits: list[CommitInfo] = []
		has_more = False
		reason = "exhausted"

		with self._open_walker(start) as walker:
			try:
				for commit in walker:
					if is_alive is not None and not is_alive():
						has_more = True
						reason = "cancelled"
						break

					if not gate_open:
						gate_open = str(commit.id) == commit_filter.offset_hash
						continue

					if not self._passes_filters(commit, commit_filter):
						continue

					if to_skip > 0:
						to_skip -= 1
						continue

					if limit is not None and len(commits) >= limit:
						has_more = True
						reason = "limit reached"
						break

					commits.append(commit_info(commit))
			except Pygit2GitError as e:
				logger.exception("History walk failed")
				raise GitIOError("walk history", self.handle.root, str(e)) from e

		if not gate_open:
			logger.debug("Cursor %s not found in history", commit_filter.offset_hash)
		logger.debug("History walk stopped (%s) with %d commits", reason, len(commits))

		last = len(commits) - 1
		return [replace(info, has_more=index < last or has_more) for index, info in enumerate(commits)]


def after_filter(offset_hash: str, limit: int) -> CommitFilter:
	"""Filter for the page following ``offset_hash``."""
	return CommitFilter(offset_hash=offset_hash, limit=limit)


def branch_filter(branch: str, limit: int) -> CommitFilter:
	"""Filter for history of a local branch."""
	return CommitFilter(branch=branch, limit=limit)


def author_filter(author: str, limit: int) -> CommitFilter:
	"""Filter for commits whose author name or email contains ``author``."""
	return CommitFilter(author=author, limit=limit)


def search_filter(query: str, limit: int) -> CommitFilter:
	"""Filter for commits whose message contains ``query``."""
	return CommitFilter(search_query=query, limit=limit)


HEAD_FILTER = CommitFilter(limit=1)
