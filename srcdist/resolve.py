# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Source lookup across search directories.

Every lookup is relative to an explicit package root and returns a path that
is still relative to that root, so the result can be mirrored into the staging
tree unchanged. Lookups are deterministic: directories are tried in the order
given, and within one directory suffixes are tried in the order given.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Sequence

from srcdist.errors import ResolutionError
from srcdist.package import dot_to_sep

NATIVE_SUFFIXES: tuple[str, ...] = ("hs", "lhs")
BOOT_SUFFIXES: tuple[str, ...] = ("hs-boot",)


def source_suffixes(pp_suffixes: Iterable[str]) -> list[str]:
	"""Preprocessor suffixes take priority over the native source suffixes."""
	return [*pp_suffixes, *NATIVE_SUFFIXES]


def _join(directory: str, rel: str) -> Path:
	# "." stays out of the result so staged paths mirror the package layout.
	if directory in ("", "."):
		return Path(rel)
	return Path(directory) / rel


def find_file_with_extension(
	suffixes: Sequence[str], dirs: Sequence[str], item: str, *, root: Path
) -> Path | None:
	for d in dirs:
		for suffix in suffixes:
			rel = _join(d, f"{item}.{suffix}")
			if (root / rel).is_file():
				return rel
	return None


def resolve_module(module: str, suffixes: Sequence[str], dirs: Sequence[str], *, root: Path) -> Path:
	found = find_file_with_extension(suffixes, dirs, dot_to_sep(module), root=root)
	if found is None:
		raise ResolutionError(
			reason_code="MODULE_NOT_FOUND",
			message=f"Could not find module: {module} with any suffix: {list(suffixes)!r}",
			item=module,
			suffixes=list(suffixes),
		)
	return found


def resolve_optional(module: str, suffixes: Sequence[str], dirs: Sequence[str], *, root: Path) -> Path | None:
	"""Companion lookup (e.g. hs-boot files): a miss is not an error."""
	return find_file_with_extension(suffixes, dirs, dot_to_sep(module), root=root)


def find_file(dirs: Sequence[str], path: str, *, root: Path, reason_code: str = "FILE_NOT_FOUND") -> Path:
	for d in dirs:
		rel = _join(d, path)
		if (root / rel).is_file():
			return rel
	raise ResolutionError(
		reason_code=reason_code,
		message=f"{path} doesn't exist in any of the search directories {list(dirs)!r}",
		item=path,
	)


def _drop_extension(path: str) -> str:
	p = Path(path)
	return str(p.with_suffix("")) if p.suffix else path


def resolve_main(main_is: str, pp_suffixes: Sequence[str], dirs: Sequence[str], *, root: Path) -> Path:
	"""
	Locate an executable's main source.

	A preprocessor input (e.g. `Main.y` for `main-is: Main.hs`) wins over the
	literal file; only when none exists is the path looked up as given.
	"""
	pp_file = find_file_with_extension(pp_suffixes, dirs, _drop_extension(main_is), root=root)
	if pp_file is not None:
		return pp_file
	return find_file(dirs, main_is, root=root, reason_code="MAIN_NOT_FOUND")


def include_search_dirs(include_dirs: Iterable[str]) -> list[str]:
	"""Headers are searched in the root first, then in the relative include dirs."""
	return ["."] + [d for d in include_dirs if not Path(d).is_absolute()]


def find_include(dirs: Sequence[str], header: str, *, root: Path) -> Path:
	for d in dirs:
		rel = _join(d, header)
		if (root / rel).is_file():
			return rel
	raise ResolutionError(
		reason_code="HEADER_NOT_FOUND",
		message=f"can't find include file {header}",
		item=header,
	)
