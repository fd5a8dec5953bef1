"""Tests for history walking, filters and pagination."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from pygit2 import GitError as Pygit2GitError

from gitpanel.git.errors import GitIOError, ReferenceNotFoundError
from gitpanel.git.history import CommitHistoryWalker, after_filter
from gitpanel.git.models import CommitFilter, CommitInfo
from gitpanel.git.repository import RepoHandle, RepositoryGateway
from tests.base import RepoBuilder


def _walk(builder: RepoBuilder, commit_filter: CommitFilter, is_alive=None) -> list[CommitInfo]:
	with RepositoryGateway.session(builder.root) as handle:
		return CommitHistoryWalker(handle).walk(commit_filter, is_alive)


def _hashes(commits: list[CommitInfo]) -> list[str]:
	return [commit.hash for commit in commits]


@pytest.mark.unit
@pytest.mark.git
class TestPagination:
	"""Test cursor pagination and the look-ahead flag on c5..c1."""

	def test_first_page(self, history: tuple[RepoBuilder, list[str]]) -> None:
		builder, (c5, c4, *_) = history

		page = _walk(builder, CommitFilter(limit=2))

		assert _hashes(page) == [c5, c4]
		assert [commit.has_more for commit in page] == [True, True]

	def test_following_pages(self, history: tuple[RepoBuilder, list[str]]) -> None:
		builder, (_, c4, c3, c2, c1) = history

		second = _walk(builder, after_filter(c4, 2))
		third = _walk(builder, after_filter(c2, 2))

		assert _hashes(second) == [c3, c2]
		assert second[-1].has_more is True
		assert _hashes(third) == [c1]
		assert third[-1].has_more is False

	def test_pages_partition_history(self, history: tuple[RepoBuilder, list[str]]) -> None:
		"""Following the cursor visits every commit exactly once, in order."""
		builder, hashes = history

		seen: list[str] = []
		page = _walk(builder, CommitFilter(limit=2))
		while True:
			seen.extend(_hashes(page))
			if not page or not page[-1].has_more:
				break
			page = _walk(builder, after_filter(page[-1].hash, 2))

		assert seen == hashes

	def test_unknown_cursor(self, history: tuple[RepoBuilder, list[str]]) -> None:
		builder, _ = history

		assert _walk(builder, after_filter("0" * 40, 2)) == []

	def test_cursor_at_oldest_commit(self, history: tuple[RepoBuilder, list[str]]) -> None:
		builder, hashes = history

		assert _walk(builder, after_filter(hashes[-1], 2)) == []

	def test_unlimited(self, history: tuple[RepoBuilder, list[str]]) -> None:
		builder, hashes = history

		page = _walk(builder, CommitFilter(limit=0))

		assert _hashes(page) == hashes
		assert [commit.has_more for commit in page] == [True, True, True, True, False]

	def test_limit_equal_to_history_length(self, history: tuple[RepoBuilder, list[str]]) -> None:
		builder, hashes = history

		page = _walk(builder, CommitFilter(limit=5))

		assert _hashes(page) == hashes
		assert page[-1].has_more is False

	def test_numeric_offset(self, history: tuple[RepoBuilder, list[str]]) -> None:
		builder, (_, c4, c3, *_) = history

		assert _hashes(_walk(builder, CommitFilter(offset=1, limit=2))) == [c4, c3]

	def test_cursor_takes_priority_over_offset(self, history: tuple[RepoBuilder, list[str]]) -> None:
		builder, (_, c4, c3, c2, _) = history

		page = _walk(builder, CommitFilter(offset_hash=c4, offset=1, limit=2))

		assert _hashes(page) == [c3, c2]


@pytest.mark.unit
@pytest.mark.git
class TestFilters:
	"""Test start points and commit filters."""

	def test_commit_fields(self, history: tuple[RepoBuilder, list[str]]) -> None:
		builder, hashes = history

		newest, *_, oldest = _walk(builder, CommitFilter())

		assert newest.message == "Commit number 5"
		assert newest.author_name == "Alice Example"
		assert newest.author_email == "alice@example.com"
		assert newest.timestamp == builder.time_of(5)
		assert newest.parent_hashes == (hashes[1],)
		assert oldest.parent_hashes == ()

	def test_author_matches_name_or_email(self, history: tuple[RepoBuilder, list[str]]) -> None:
		builder, (_, c4, _, c2, _) = history

		assert _hashes(_walk(builder, CommitFilter(author="Bob"))) == [c4, c2]
		assert _hashes(_walk(builder, CommitFilter(author="builders.org"))) == [c4, c2]

	def test_author_is_case_sensitive(self, history: tuple[RepoBuilder, list[str]]) -> None:
		builder, _ = history

		assert _walk(builder, CommitFilter(author="bob builder")) == []

	def test_search_is_case_insensitive(self, history: tuple[RepoBuilder, list[str]]) -> None:
		builder, (_, _, c3, *_) = history

		assert _hashes(_walk(builder, CommitFilter(search_query="NUMBER 3"))) == [c3]

	def test_filters_combine_with_pagination(self, history: tuple[RepoBuilder, list[str]]) -> None:
		builder, (c5, _, c3, _, c1) = history

		page = _walk(builder, CommitFilter(author="Alice", limit=1))
		next_page = _walk(builder, CommitFilter(author="Alice", offset_hash=page[-1].hash, limit=1))

		assert _hashes(page) == [c5]
		assert page[-1].has_more is True
		assert _hashes(next_page) == [c3]
		assert _hashes(_walk(builder, CommitFilter(author="Alice", offset_hash=c3))) == [c1]

	def test_date_range_is_inclusive(self, history: tuple[RepoBuilder, list[str]]) -> None:
		builder, (_, c4, c3, c2, _) = history

		page = _walk(builder, CommitFilter(start_date=builder.time_of(2), end_date=builder.time_of(4)))

		assert _hashes(page) == [c4, c3, c2]

	def test_naive_dates_are_utc(self, history: tuple[RepoBuilder, list[str]]) -> None:
		builder, (c5, *_) = history
		naive_start = builder.time_of(5).replace(tzinfo=None)

		page = _walk(builder, CommitFilter(start_date=naive_start, end_date=datetime(2100, 1, 1)))

		assert _hashes(page) == [c5]

	def test_branch_start(self, history: tuple[RepoBuilder, list[str]]) -> None:
		builder, (_, _, c3, c2, c1) = history
		builder.create_branch("topic", c3)

		assert _hashes(_walk(builder, CommitFilter(branch="topic"))) == [c3, c2, c1]

	def test_unknown_branch(self, history: tuple[RepoBuilder, list[str]]) -> None:
		builder, _ = history

		with pytest.raises(ReferenceNotFoundError):
			_walk(builder, CommitFilter(branch="missing"))

	def test_start_hash(self, history: tuple[RepoBuilder, list[str]]) -> None:
		builder, (*_, c2, c1) = history

		assert _hashes(_walk(builder, CommitFilter(start_hash=c2))) == [c2, c1]
		assert _hashes(_walk(builder, CommitFilter(start_hash=c2[:10]))) == [c2, c1]

	def test_unknown_start_hash(self, history: tuple[RepoBuilder, list[str]]) -> None:
		builder, _ = history

		with pytest.raises(ReferenceNotFoundError):
			_walk(builder, CommitFilter(start_hash="f" * 40))

	def test_repository_without_commits(self, builder: RepoBuilder) -> None:
		with pytest.raises(ReferenceNotFoundError):
			_walk(builder, CommitFilter())


@pytest.mark.unit
@pytest.mark.git
class TestWalkLifecycle:
	"""Test cancellation and walker release."""

	def test_cancelled_walk_returns_partial_page(self, history: tuple[RepoBuilder, list[str]]) -> None:
		builder, (c5, c4, *_) = history
		answers = iter([True, True, False])

		page = _walk(builder, CommitFilter(), is_alive=lambda: next(answers))

		assert _hashes(page) == [c5, c4]
		assert page[-1].has_more is True

	@staticmethod
	def _mock_handle(tmp_path: Path, walker: MagicMock) -> RepoHandle:
		repo = MagicMock()
		repo.head_is_unborn = False
		repo.walk.return_value = walker
		return RepoHandle(repo=repo, root=tmp_path)

	@staticmethod
	def _mock_commit(commit_id: str) -> MagicMock:
		commit = MagicMock()
		commit.id = commit_id
		commit.message = f"message {commit_id}\n"
		commit.author.name = "Alice"
		commit.author.email = "alice@example.com"
		commit.author.time = 1_700_000_000
		commit.author.offset = 0
		commit.parent_ids = []
		return commit

	def test_walker_released_on_early_stop(self, tmp_path: Path) -> None:
		walker = MagicMock()
		walker.__iter__.return_value = iter([self._mock_commit("a"), self._mock_commit("b")])

		page = CommitHistoryWalker(self._mock_handle(tmp_path, walker)).walk(CommitFilter(limit=1))

		assert _hashes(page) == ["a"]
		assert page[0].has_more is True
		walker.reset.assert_called_once()

	def test_walker_released_on_failure(self, tmp_path: Path) -> None:
		def failing():
			yield self._mock_commit("a")
			msg = "corrupt object"
			raise Pygit2GitError(msg)

		walker = MagicMock()
		walker.__iter__.return_value = failing()

		with pytest.raises(GitIOError):
			CommitHistoryWalker(self._mock_handle(tmp_path, walker)).walk(CommitFilter())

		walker.reset.assert_called_once()
