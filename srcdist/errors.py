# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class SDistError(Exception):
	"""
	A structured, serializable error for source distribution builds.

	Every fatal condition carries a stable reason code plus whatever context
	(path, module, suffixes tried, tool) helps the user fix the package.
	"""

	reason_code: str
	message: str
	path: str | None = None
	item: str | None = None
	suffixes: list[str] | None = None
	tool: str | None = None
	exit_code: int | None = None

	def __str__(self) -> str:
		return self.format_human()

	def to_dict(self) -> dict[str, Any]:
		return {
			"reason_code": self.reason_code,
			"message": self.message,
			"path": self.path,
			"item": self.item,
			"suffixes": list(self.suffixes) if self.suffixes is not None else None,
			"tool": self.tool,
			"exit_code": self.exit_code,
		}

	def format_human(self) -> str:
		parts: list[str] = [f"[{self.reason_code}] {self.message}"]
		if self.item:
			parts.append(f"item={self.item}")
		if self.suffixes is not None:
			parts.append(f"suffixes={list(self.suffixes)!r}")
		if self.path:
			parts.append(f"path={self.path}")
		if self.tool:
			parts.append(f"tool={self.tool}")
		if self.exit_code is not None:
			parts.append(f"exit_code={self.exit_code}")
		return " ".join(parts)


class PreconditionError(SDistError):
	"""The staging root is already in place from an earlier run."""


class ResolutionError(SDistError):
	"""A module, main source, header or literal file could not be located."""


class CopyError(SDistError):
	"""Reading, copying or writing a file failed."""


class ExternalToolError(SDistError):
	"""The archiving program is missing or exited with an error status."""


class DescriptorError(SDistError):
	"""The package description file is missing, ambiguous or malformed."""
