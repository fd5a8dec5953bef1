"""Global test fixtures and configuration."""

from __future__ import annotations

from pathlib import Path

import pytest

from gitpanel.git import GitService
from tests.base import TEST_AUTHOR, RepoBuilder


@pytest.fixture
def builder(tmp_path: Path) -> RepoBuilder:
	"""An empty repository with no commits."""
	return RepoBuilder(tmp_path / "repo")


@pytest.fixture
def service() -> GitService:
	"""A service that reports every change and can always commit."""
	return GitService(fallback_author=TEST_AUTHOR)


@pytest.fixture
def history(builder: RepoBuilder) -> tuple[RepoBuilder, list[str]]:
	"""
	A repository with five linear commits, alternating between two authors.

	Returns the builder and the hashes newest first: ``[c5, c4, c3, c2, c1]``.
	"""
	hashes = []
	for number in range(1, 6):
		author = ("Bob Builder", "bob@builders.org") if number % 2 == 0 else ("Alice Example", "alice@example.com")
		hashes.append(
			builder.commit_file("notes.txt", f"entry {number}\n" * number, f"Commit number {number}\n", author=author)
		)
	hashes.reverse()
	return builder, hashes
