"""
Line-level diffing and unified rendering.

Lines are aligned by libgit2 (``pygit2.Patch``) with enough context that every
file is rendered as a single full-file hunk.

"""

from __future__ import annotations

import logging
import re
from enum import Enum

from pygit2 import GitError as Pygit2GitError
from pygit2 import Patch
from pygit2.enums import DiffOption

from gitpanel.git.errors import GitIOError
from gitpanel.git.models import DiffStats, FileDiff

logger = logging.getLogger(__name__)

BINARY_SNIFF_BYTES = 512
NO_NEWLINE_MARKER = "\\ No newline at end of file"
# pygit2 takes context_lines as an unsigned short
MAX_CONTEXT_LINES = 0xFFFF

_BOMS = (b"\xef\xbb\xbf", b"\xfe\xff", b"\xff\xfe")
# WHATWG mime sniffing "binary data bytes"
_BINARY_BYTES = frozenset([*range(0x00, 0x09), 0x0B, *range(0x0E, 0x1B), *range(0x1C, 0x20)])
_LINE_RE = re.compile(r"[^\n]*\n|[^\n]+")


class DiffOp(str, Enum):
	"""Kind of an aligned line."""

	EQUAL = " "
	INSERT = "+"
	DELETE = "-"


# '=', '<' and '>' only flag a missing final newline, which line content already shows
_LINE_ORIGINS = {op.value: op for op in DiffOp}


def is_binary(content: bytes, sniff_bytes: int = BINARY_SNIFF_BYTES) -> bool:
	"""Classify content as binary from its leading bytes."""
	head = content[:sniff_bytes]
	if head.startswith(_BOMS):
		return False
	return any(byte in _BINARY_BYTES for byte in head)


def split_lines(content: str) -> list[str]:
	"""Split text into lines that keep their ``\\n``; no empty trailing line is produced."""
	return _LINE_RE.findall(content)


def _create_patch(old_content: str, new_content: str, path: str, context_lines: int) -> Patch:
	try:
		return Patch.create_from(
			old_content.encode("utf-8"),
			new_content.encode("utf-8"),
			old_as_path=path or None,
			new_as_path=path or None,
			flag=DiffOption.FORCE_TEXT,
			context_lines=context_lines,
			interhunk_lines=context_lines,
		)
	except Pygit2GitError as e:
		logger.exception("Failed to diff %s", path)
		raise GitIOError("diff file", path, str(e)) from e


def align_lines(old_content: str, new_content: str, path: str = "") -> tuple[list[tuple[DiffOp, str]], DiffStats]:
	"""
	Align two texts line by line.

	Returns:
		One ``(op, line)`` pair per output line covering both texts in full,
		and the added/deleted line counts.

	Raises:
		GitIOError: If libgit2 cannot produce the patch.
	"""
	old_lines = split_lines(old_content)
	if old_content == new_content:
		return [(DiffOp.EQUAL, line) for line in old_lines], DiffStats()

	context_lines = min(max(len(old_lines), len(split_lines(new_content))), MAX_CONTEXT_LINES)
	patch = _create_patch(old_content, new_content, path, context_lines)

	ops: list[tuple[DiffOp, str]] = []
	old_index = 0
	for hunk in patch.hunks:
		# A hunk without old lines starts after old_start instead of at it
		hunk_start = hunk.old_start if hunk.old_lines == 0 else hunk.old_start - 1
		ops.extend((DiffOp.EQUAL, line) for line in old_lines[old_index:hunk_start])
		old_index = hunk_start
		for line in hunk.lines:
			op = _LINE_ORIGINS.get(line.origin)
			if op is None:
				continue
			ops.append((op, line.content))
			if op is not DiffOp.INSERT:
				old_index += 1
	ops.extend((DiffOp.EQUAL, line) for line in old_lines[old_index:])

	_, added, deleted = patch.line_stats
	return ops, DiffStats(added=added, deleted=deleted)


def _render_line(op: DiffOp, line: str) -> str:
	if line.endswith("\n"):
		return f"{op.value}{line}"
	return f"{op.value}{line}\n{NO_NEWLINE_MARKER}\n"


def _hunk_range(count: int) -> str:
	return f"{1 if count else 0},{count}"


def generate_diff(old_content: str, new_content: str, path: str) -> tuple[str, DiffStats]:
	"""
	Produce a unified diff between two texts.

	Args:
		old_content: Previous text; empty for a created file.
		new_content: Current text; empty for a deleted file.
		path: Repository-relative path used in the headers.

	Returns:
		The diff text and its line statistics.
	"""
	old_lines = split_lines(old_content)
	new_lines = split_lines(new_content)
	parts = [f"--- a/{path}\n", f"+++ b/{path}\n"]

	if not new_lines and old_lines:
		parts.append(f"@@ -1,{len(old_lines)} +0,0 @@\n")
		parts.extend(_render_line(DiffOp.DELETE, line) for line in old_lines)
		return "".join(parts), DiffStats(deleted=len(old_lines))

	if not old_lines and not new_lines:
		return "".join(parts), DiffStats()

	ops, stats = align_lines(old_content, new_content, path)
	parts.append(f"@@ -{_hunk_range(len(old_lines))} +{_hunk_range(len(new_lines))} @@\n")
	parts.extend(_render_line(op, line) for op, line in ops)
	return "".join(parts), stats


def decode(content: bytes | None) -> str:
	"""Decode content for rendering, replacing undecodable bytes."""
	if not content:
		return ""
	return content.decode("utf-8", errors="replace")


def build_file_diff(old: bytes | None, new: bytes | None, path: str) -> FileDiff:
	"""Diff two blobs (None meaning absent) into a ``FileDiff``."""
	content, stats = generate_diff(decode(old), decode(new), path)
	logger.debug("Diff for %s: +%d -%d", path, stats.added, stats.deleted)
	return FileDiff(path=path, content=content, stats=stats)


def binary_file_diff(path: str) -> FileDiff:
	"""The diff reported for binary content: no text and zero stats."""
	return FileDiff(path=path, content=None, stats=DiffStats(), is_binary=True)
