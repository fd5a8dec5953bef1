"""Pydantic schema for GitPanel configuration files."""

from __future__ import annotations

from pydantic import BaseModel, Field


class DiffConfigSchema(BaseModel):
	"""Diff rendering settings."""

	binary_sniff_bytes: int = Field(default=512, gt=0)


class HistoryConfigSchema(BaseModel):
	"""History listing settings."""

	default_limit: int = Field(default=50, ge=0)


class StatusConfigSchema(BaseModel):
	"""Change-list settings."""

	use_gitignore: bool = True
	extra_ignore_patterns: list[str] = Field(default_factory=list)


class CommitConfigSchema(BaseModel):
	"""Identity used when git config has none."""

	author_name: str | None = None
	author_email: str | None = None

	@property
	def fallback_author(self) -> tuple[str, str] | None:
		"""Return ``(name, email)`` when both are configured."""
		if self.author_name and self.author_email:
			return self.author_name, self.author_email
		return None


class AppConfigSchema(BaseModel):
	"""Root configuration."""

	diff: DiffConfigSchema = Field(default_factory=DiffConfigSchema)
	history: HistoryConfigSchema = Field(default_factory=HistoryConfigSchema)
	status: StatusConfigSchema = Field(default_factory=StatusConfigSchema)
	commit: CommitConfigSchema = Field(default_factory=CommitConfigSchema)
