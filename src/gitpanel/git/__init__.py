"""Repository inspection: status, content resolution, diffs and history."""

from gitpanel.git.errors import (
	GitError,
	GitIOError,
	NotARepositoryError,
	PathNotFoundInRevisionError,
	ReferenceNotFoundError,
	RepositoryExistsError,
)
from gitpanel.git.models import (
	BranchInfo,
	CommitFilter,
	CommitInfo,
	DiffStats,
	FileDiff,
	FileStatus,
	Revision,
	StatusCode,
)
from gitpanel.git.repository import RepoHandle, RepositoryGateway
from gitpanel.git.service import GitService

__all__ = [
	"BranchInfo",
	"CommitFilter",
	"CommitInfo",
	"DiffStats",
	"FileDiff",
	"FileStatus",
	"GitError",
	"GitIOError",
	"GitService",
	"NotARepositoryError",
	"PathNotFoundInRevisionError",
	"ReferenceNotFoundError",
	"RepoHandle",
	"RepositoryExistsError",
	"RepositoryGateway",
	"Revision",
	"StatusCode",
]
