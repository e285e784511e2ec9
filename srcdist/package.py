# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Package description model.

These are plain frozen records. The snapshot flow derives modified copies via
`dataclasses.replace`; nothing in the pipeline mutates a description.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True, order=True)
class Version:
	branch: tuple[int, ...]

	@classmethod
	def parse(cls, text: str) -> "Version":
		s = text.strip()
		if not s:
			raise ValueError("version must be non-empty")
		parts: list[int] = []
		for comp in s.split("."):
			if not comp.isdigit():
				raise ValueError(f"invalid version component {comp!r} in {text!r}")
			parts.append(int(comp))
		return cls(tuple(parts))

	def display(self) -> str:
		return ".".join(str(n) for n in self.branch)

	def __str__(self) -> str:
		return self.display()


@dataclass(frozen=True)
class PackageIdentifier:
	name: str
	version: Version

	def display(self) -> str:
		return f"{self.name}-{self.version.display()}"

	def __str__(self) -> str:
		return self.display()


@dataclass(frozen=True)
class BuildInfo:
	hs_source_dirs: tuple[str, ...] = (".",)
	other_modules: tuple[str, ...] = ()
	c_sources: tuple[str, ...] = ()
	include_dirs: tuple[str, ...] = ()
	install_includes: tuple[str, ...] = ()


@dataclass(frozen=True)
class Library:
	exposed_modules: tuple[str, ...] = ()
	build_info: BuildInfo = field(default_factory=BuildInfo)


@dataclass(frozen=True)
class Executable:
	name: str
	main_is: str
	build_info: BuildInfo = field(default_factory=BuildInfo)


@dataclass(frozen=True)
class PackageDescription:
	package: PackageIdentifier
	library: Library | None = None
	executables: tuple[Executable, ...] = ()
	data_files: tuple[str, ...] = ()
	data_dir: str = ""
	license_file: str | None = None
	extra_src_files: tuple[str, ...] = ()
	license: str = ""
	synopsis: str = ""

	def tarball_name(self) -> str:
		"""Name of the top-level archive directory (and the archive, minus extension)."""
		return self.package.display()


def dot_to_sep(module: str) -> str:
	"""Map a dotted module name onto a relative file path (no extension)."""
	return str(Path(*module.split(".")))
