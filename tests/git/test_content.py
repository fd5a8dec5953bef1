"""Tests for reading file content at a revision."""

from __future__ import annotations

import pytest

from gitpanel.git.content import ContentResolver
from gitpanel.git.errors import PathNotFoundInRevisionError, ReferenceNotFoundError
from gitpanel.git.models import Revision
from gitpanel.git.repository import RepositoryGateway
from tests.base import RepoBuilder


@pytest.mark.unit
@pytest.mark.git
class TestContentResolver:
	"""Test ContentResolver across the three revisions."""

	def test_reads_each_revision(self, builder: RepoBuilder) -> None:
		builder.commit_file("a.txt", "committed\n", "Add a")
		builder.write("a.txt", "staged\n")
		builder.stage("a.txt")
		builder.write("a.txt", "on disk\n")

		with RepositoryGateway.session(builder.root) as handle:
			resolver = ContentResolver(handle)
			assert resolver.resolve("a.txt", Revision.HEAD) == b"committed\n"
			assert resolver.resolve("a.txt", Revision.INDEX) == b"staged\n"
			assert resolver.resolve("a.txt", Revision.WORKING_TREE) == b"on disk\n"

	def test_nested_path(self, builder: RepoBuilder) -> None:
		builder.commit_file("src/pkg/mod.py", "x = 1\n", "Add module")

		with RepositoryGateway.session(builder.root) as handle:
			assert ContentResolver(handle).resolve("src/pkg/mod.py", Revision.HEAD) == b"x = 1\n"

	def test_binary_content_is_returned_untouched(self, builder: RepoBuilder) -> None:
		payload = bytes(range(256))
		builder.commit_file("blob.bin", payload, "Add blob")

		with RepositoryGateway.session(builder.root) as handle:
			assert ContentResolver(handle).resolve("blob.bin", Revision.HEAD) == payload

	def test_missing_paths(self, builder: RepoBuilder) -> None:
		builder.commit_file("a.txt", "a\n", "Add a")
		builder.write("untracked.txt", "u\n")

		with RepositoryGateway.session(builder.root) as handle:
			resolver = ContentResolver(handle)
			with pytest.raises(PathNotFoundInRevisionError):
				resolver.resolve("nope.txt", Revision.WORKING_TREE)
			with pytest.raises(PathNotFoundInRevisionError):
				resolver.resolve("untracked.txt", Revision.INDEX)
			with pytest.raises(PathNotFoundInRevisionError):
				resolver.resolve("untracked.txt", Revision.HEAD)
			assert resolver.resolve_optional("untracked.txt", Revision.HEAD) is None

	def test_directory_is_not_content(self, builder: RepoBuilder) -> None:
		builder.commit_file("src/a.txt", "a\n", "Add src")

		with RepositoryGateway.session(builder.root) as handle:
			resolver = ContentResolver(handle)
			with pytest.raises(PathNotFoundInRevisionError):
				resolver.resolve("src", Revision.HEAD)
			with pytest.raises(PathNotFoundInRevisionError):
				resolver.resolve("src", Revision.WORKING_TREE)

	def test_head_without_commits(self, builder: RepoBuilder) -> None:
		builder.write("a.txt", "a\n")
		builder.stage("a.txt")

		with RepositoryGateway.session(builder.root) as handle:
			resolver = ContentResolver(handle)
			assert resolver.resolve("a.txt", Revision.INDEX) == b"a\n"
			with pytest.raises(ReferenceNotFoundError):
				resolver.resolve("a.txt", Revision.HEAD)
			with pytest.raises(ReferenceNotFoundError):
				resolver.resolve_optional("a.txt", Revision.HEAD)
