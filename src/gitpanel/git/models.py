"""Value objects produced by the repository inspection layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
	from datetime import datetime


class StatusCode(str, Enum):
	"""Change classification for a path."""

	MODIFIED = "M"
	ADDED = "A"
	DELETED = "D"
	RENAMED = "R"
	UNTRACKED = "?"


class Revision(str, Enum):
	"""Where a path's content is read from."""

	WORKING_TREE = "worktree"
	INDEX = "index"
	HEAD = "head"


@dataclass(frozen=True)
class FileStatus:
	"""A pending change for one path, on one side of the index."""

	path: str
	status: StatusCode
	staged: bool


@dataclass(frozen=True)
class BranchInfo:
	"""A local or remote-tracking branch."""

	name: str
	is_remote: bool = False
	is_head: bool = False


@dataclass(frozen=True)
class CommitInfo:
	"""
	Summary of a single commit.

	``has_more`` belongs to the response, not the commit: every row but the last
	is ``True``, and the last row tells whether the walk found another qualifying
	commit beyond the page.

	"""

	hash: str
	message: str
	author_name: str
	author_email: str
	timestamp: datetime
	parent_hashes: tuple[str, ...] = ()
	has_more: bool = False


@dataclass(frozen=True)
class CommitFilter:
	"""Start point, pagination and filter options for a history walk."""

	branch: str | None = None
	start_hash: str | None = None
	limit: int = 0
	"""Maximum rows to return; zero or negative means unlimited."""

	offset: int = 0
	"""Qualifying commits to skip; ignored when ``offset_hash`` is set."""

	offset_hash: str | None = None
	"""Return only commits strictly after this one."""

	author: str | None = None
	"""Case-sensitive substring of the author name or email."""

	search_query: str | None = None
	"""Case-insensitive substring of the commit message."""

	start_date: datetime | None = None
	end_date: datetime | None = None


@dataclass(frozen=True)
class DiffStats:
	"""Line counts for a diff. ``modified`` stays zero at line granularity."""

	added: int = 0
	deleted: int = 0
	modified: int = 0


@dataclass(frozen=True)
class FileDiff:
	"""Unified diff for one path. Binary files carry no content and zero stats."""

	path: str
	content: str | None = None
	stats: DiffStats = field(default_factory=DiffStats)
	is_binary: bool = False
