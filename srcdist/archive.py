# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

from srcdist.errors import ExternalToolError
from srcdist.package import PackageDescription
from srcdist.verbosity import Verbosity, info

ARCHIVE_EXTENSION = ".tar.gz"


@dataclass(frozen=True)
class TarProgram:
	path: str


def find_tar_program(name: str = "tar") -> TarProgram:
	found = shutil.which(name)
	if found is None:
		raise ExternalToolError(
			reason_code="TOOL_NOT_FOUND",
			message=f"the program '{name}' is required but it could not be found on PATH",
			tool=name,
		)
	return TarProgram(path=found)


def archive_path(pkg: PackageDescription, target_pref: Path) -> Path:
	return target_pref / (pkg.tarball_name() + ARCHIVE_EXTENSION)


def create_archive(
	pkg: PackageDescription,
	staging_root: Path,
	target_pref: Path,
	*,
	program: TarProgram | None = None,
	verbosity: Verbosity = Verbosity.NORMAL,
) -> Path:
	"""
	Compress `staging_root/<name>-<version>` into `target_pref/<name>-<version>.tar.gz`.

	tar changes into the staging root first (`-C`), so every member path is
	relative and rooted at the single package directory.
	"""
	prog = program or find_tar_program()
	tarball = archive_path(pkg, target_pref).resolve()
	tarball.parent.mkdir(parents=True, exist_ok=True)
	cmd = [prog.path, "-C", str(staging_root.resolve()), "-czf", str(tarball), pkg.tarball_name()]
	info(verbosity, " ".join(cmd))
	try:
		res = subprocess.run(cmd, capture_output=True, text=True)
	except OSError as err:
		raise ExternalToolError(
			reason_code="TOOL_NOT_FOUND",
			message=f"cannot run {prog.path}: {err}",
			tool=prog.path,
		) from err
	if res.returncode != 0:
		raise ExternalToolError(
			reason_code="TOOL_FAILED",
			message=f"{Path(prog.path).name} failed: {res.stderr.strip()}",
			tool=prog.path,
			path=str(tarball),
			exit_code=res.returncode,
		)
	return tarball
