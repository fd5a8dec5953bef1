"""Default ignore predicate built from ``.gitignore`` files."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pathspec
from pathspec.patterns.gitwildmatch import GitWildMatchPattern

if TYPE_CHECKING:
	from collections.abc import Sequence
	from pathlib import Path

logger = logging.getLogger(__name__)


class GitignoreMatcher:
	"""
	Callable ``(root, path) -> bool`` answering whether a path is ignored.

	Paths inside ``.git`` are always ignored. Otherwise the extra patterns are
	applied first, then every ``.gitignore`` from the root down to the path's
	directory, each matched relative to its own directory; the deepest file
	with a matching pattern decides. As in git, nothing below an ignored
	directory can be re-included. Compiled files are cached for the lifetime
	of the matcher.

	"""

	def __init__(self, extra_patterns: Sequence[str] = ()) -> None:
		self._extra = pathspec.PathSpec.from_lines(GitWildMatchPattern, extra_patterns) if extra_patterns else None
		self._specs: dict[Path, pathspec.PathSpec | None] = {}
		self._ignored_dirs: dict[tuple[Path, Path], bool] = {}

	def _spec_for(self, directory: Path) -> pathspec.PathSpec | None:
		if directory not in self._specs:
			gitignore_path = directory / ".gitignore"
			spec = None
			if gitignore_path.is_file():
				with gitignore_path.open("r", encoding="utf-8", errors="replace") as f:
					spec = pathspec.PathSpec.from_lines(GitWildMatchPattern, f.read().splitlines())
				logger.debug("Loaded ignore rules from %s", gitignore_path)
			self._specs[directory] = spec
		return self._specs[directory]

	@staticmethod
	def _decision(spec: pathspec.PathSpec | None, rel_path: str) -> bool | None:
		"""Include state of the last pattern matching ``rel_path``, or None if none matches."""
		if spec is None:
			return None
		return spec.check_file(rel_path).include

	def _is_excluded(self, root: Path, path: Path, is_dir: bool) -> bool:
		suffix = "/" if is_dir else ""
		excluded = bool(self._decision(self._extra, path.relative_to(root).as_posix() + suffix))

		directories = [path.parent]
		while directories[-1] != root:
			directories.append(directories[-1].parent)
		for directory in reversed(directories):
			decision = self._decision(self._spec_for(directory), path.relative_to(directory).as_posix() + suffix)
			if decision is not None:
				excluded = decision
		return excluded

	def _is_dir_excluded(self, root: Path, directory: Path) -> bool:
		key = (root, directory)
		if key not in self._ignored_dirs:
			self._ignored_dirs[key] = self._is_excluded(root, directory, is_dir=True)
		return self._ignored_dirs[key]

	def __call__(self, root: Path, path: Path) -> bool:
		try:
			rel_path = path.relative_to(root)
		except ValueError:
			return False
		if not rel_path.parts:
			return False
		if ".git" in rel_path.parts:
			return True

		ancestor = root
		for part in rel_path.parts[:-1]:
			ancestor = ancestor / part
			if self._is_dir_excluded(root, ancestor):
				return True
		return self._is_excluded(root, path, is_dir=path.is_dir())


def never_ignored(_root: Path, _path: Path) -> bool:
	"""Predicate for callers that want every change reported."""
	return False
