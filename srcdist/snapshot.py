# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Snapshot versions.

A snapshot archive carries the package version with one extra component
derived from a date, e.g. `1.2.3` on 2008-03-18 becomes `1.2.3.20080318`.
The staged description file gets the new version by a line rewrite, so
comments and layout of the original file survive.
"""

from __future__ import annotations

import datetime
from dataclasses import replace
from pathlib import Path
from typing import Iterable, Sequence

from srcdist.errors import CopyError
from srcdist.package import PackageDescription, Version
from srcdist.preprocess import BuildContext, PPSuffixHandler
from srcdist.tree import prepare_tree, write_file
from srcdist.verbosity import Verbosity

VERSION_FIELD_PREFIX = "version:"


def date_to_snapshot_number(date: datetime.date) -> int:
	"""Given a date produce its integer form: 2008-03-18 -> 20080318."""
	return date.year * 10000 + date.month * 100 + date.day


def snapshot_version(date: datetime.date, version: Version) -> Version:
	"""
	Append the snapshot number for `date` to `version`.

	Not idempotent: stamping an already stamped version appends another
	component.
	"""
	return Version((*version.branch, date_to_snapshot_number(date)))


def _split_eol(line: str) -> tuple[str, str]:
	body = line.rstrip("\r\n")
	return body, line[len(body):]


def rewrite_version_lines(version: Version, lines: Iterable[str]) -> list[str]:
	"""
	Replace each `version:` field line (case-insensitive) with the new version.

	Lines may carry their terminators (as from `split_lines`);
	a replaced line keeps its own. Every other line is returned unchanged.

	Every matching line is replaced, not only the first: a description with
	two unindented `version:` lines gets both overwritten. Indented lines never
	match.
	"""
	out: list[str] = []
	for line in lines:
		body, eol = _split_eol(line)
		if body.lower().startswith(VERSION_FIELD_PREFIX):
			out.append(f"version: {version.display()}{eol}")
		else:
			out.append(line)
	return out


def split_lines(text: str) -> list[str]:
	"""Split on `\n` only, keeping terminators; `"".join` restores the input."""
	parts = text.split("\n")
	out = [p + "\n" for p in parts[:-1]]
	if parts[-1]:
		out.append(parts[-1])
	return out


def read_text_exact(path: Path) -> str:
	"""Read UTF-8 text without newline translation."""
	try:
		with open(path, encoding="utf-8", newline="") as f:
			return f.read()
	except (OSError, UnicodeDecodeError) as err:
		raise CopyError(reason_code="COPY_FAILED", message=f"cannot read {path}: {err}", path=str(path)) from err


def overwrite_snapshot_package_desc(version: Version, desc_file: Path, target_dir: Path, *, root: Path) -> Path:
	text = read_text_exact(root / desc_file)
	dest = target_dir / desc_file
	write_file(dest, "".join(rewrite_version_lines(version, split_lines(text))))
	return dest


def snapshot_package(pkg: PackageDescription, date: datetime.date) -> PackageDescription:
	"""Copy of `pkg` whose version carries the snapshot component."""
	pkgid = pkg.package
	return replace(pkg, package=replace(pkgid, version=snapshot_version(date, pkgid.version)))


def prepare_snapshot_tree(
	pkg: PackageDescription,
	target_pref: Path,
	date: datetime.date,
	*,
	root: Path,
	desc_file: Path,
	preprocessors: Sequence[PPSuffixHandler] = (),
	build_context: BuildContext | None = None,
	verbosity: Verbosity = Verbosity.NORMAL,
) -> tuple[Path, PackageDescription]:
	snap = snapshot_package(pkg, date)
	target_dir = prepare_tree(
		snap,
		target_pref,
		root=root,
		desc_file=desc_file,
		preprocessors=preprocessors,
		build_context=build_context,
		verbosity=verbosity,
	)
	overwrite_snapshot_package_desc(snap.package.version, desc_file, target_dir, root=root)
	return target_dir, snap
