# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Distribution quality checks.

The checks here are deliberately few; `report_package_problems` accepts
findings from any source. Reporting never stops a build: blocking findings
only mean a public package server would refuse the archive.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Iterable, Literal

from srcdist.package import PackageDescription
from srcdist.verbosity import Verbosity, notice

CheckKind = Literal["build-impossible", "build-warning", "dist-suspicious", "dist-inexcusable"]


@dataclass(frozen=True)
class PackageCheck:
	kind: CheckKind
	explanation: str

	def is_dist_error(self) -> bool:
		return self.kind != "dist-suspicious"


def _is_unsafe_rel_path(path_str: str) -> bool:
	p = PurePosixPath(path_str.replace("\\", "/"))
	return p.is_absolute() or any(part == ".." for part in p.parts)


def check_package(pkg: PackageDescription) -> list[PackageCheck]:
	"""Checks that need only the description."""
	out: list[PackageCheck] = []
	if pkg.library is None and not pkg.executables:
		out.append(PackageCheck("build-impossible", "No executables and no library found. Nothing to do."))
	if pkg.library is not None and not (pkg.library.exposed_modules or pkg.library.build_info.other_modules):
		out.append(PackageCheck("build-warning", "The library section lists no modules."))
	if not pkg.synopsis.strip():
		out.append(PackageCheck("dist-suspicious", "No 'synopsis' field."))
	if not pkg.license_file:
		out.append(PackageCheck("dist-suspicious", "A 'license-file' is not specified."))

	fields: list[tuple[str, Iterable[str]]] = [
		("data-files", pkg.data_files),
		("extra-source-files", pkg.extra_src_files),
		("license-file", [pkg.license_file] if pkg.license_file else []),
	]
	for name, paths in fields:
		for p in paths:
			if _is_unsafe_rel_path(p):
				out.append(
					PackageCheck(
						"dist-inexcusable",
						f"'{name}' entry {p!r} must be a relative path inside the package.",
					)
				)
	return out


def check_package_files(pkg: PackageDescription, root: Path) -> list[PackageCheck]:
	"""Checks that look at the package root on disk."""
	out: list[PackageCheck] = []
	if pkg.license_file and not (root / pkg.license_file).is_file():
		out.append(
			PackageCheck(
				"build-warning",
				f"The 'license-file' field refers to the file {pkg.license_file!r} which does not exist.",
			)
		)
	return out


def report_package_problems(checks: Iterable[PackageCheck], verbosity: Verbosity) -> None:
	"""Print findings grouped as errors and warnings. Never raises."""
	all_checks = list(checks)
	errors = [c for c in all_checks if c.is_dist_error()]
	warnings = [c for c in all_checks if not c.is_dist_error()]
	if errors:
		notice(verbosity, "Distribution quality errors:\n" + "".join(f"{c.explanation}\n" for c in errors))
	if warnings:
		notice(verbosity, "Distribution quality warnings:\n" + "".join(f"{c.explanation}\n" for c in warnings))
	if errors:
		notice(verbosity, "Note: the public hackage server would reject this package.")
