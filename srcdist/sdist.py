# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
The `sdist` action: build a source distribution archive.

Sequence: quality report, staging precondition, (snapshot stamping,) tree
assembly, archive, cleanup. The staging root is removed on every exit path.
"""

from __future__ import annotations

import datetime
import shutil
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Sequence

from srcdist.archive import TarProgram, create_archive
from srcdist.check import check_package, check_package_files, report_package_problems
from srcdist.errors import PreconditionError
from srcdist.package import PackageDescription
from srcdist.preprocess import BuildContext, PPSuffixHandler
from srcdist.snapshot import prepare_snapshot_tree
from srcdist.tree import prepare_tree
from srcdist.verbosity import Verbosity, debug, notice, setup_message, warn


@dataclass(frozen=True)
class SDistOptions:
	dist_pref: Path = Path("dist")
	verbosity: Verbosity = Verbosity.NORMAL
	snapshot: bool = False

	@property
	def staging_root(self) -> Path:
		return self.dist_pref / "src"


@contextmanager
def temp_directory(verbosity: Verbosity, path: Path) -> Iterator[Path]:
	path.mkdir(parents=True)
	try:
		yield path
	finally:
		debug(verbosity, f"removing {path}")
		try:
			shutil.rmtree(path)
		except OSError as err:
			warn(verbosity, f"could not remove staging directory {path}: {err}")


def sdist(
	pkg: PackageDescription,
	opts: SDistOptions,
	*,
	root: Path,
	desc_file: Path,
	preprocessors: Sequence[PPSuffixHandler] = (),
	build_context: BuildContext | None = None,
	date: datetime.date | None = None,
	program: TarProgram | None = None,
) -> Path:
	"""Create the source archive for `pkg` and return its path."""
	verbosity = opts.verbosity
	tmp_dir = opts.staging_root

	report_package_problems([*check_package(pkg), *check_package_files(pkg, root)], verbosity)

	if tmp_dir.exists():
		raise PreconditionError(
			reason_code="STAGING_EXISTS",
			message=f"Source distribution already in place. please move or remove: {tmp_dir}",
			path=str(tmp_dir),
		)

	if build_context is None:
		warn(verbosity, "Cannot run preprocessors: no build directory configured.")

	with temp_directory(verbosity, tmp_dir):
		setup_message(verbosity, "Building source dist for", pkg.package.display())
		if opts.snapshot:
			_, archived = prepare_snapshot_tree(
				pkg,
				tmp_dir,
				date or datetime.date.today(),
				root=root,
				desc_file=desc_file,
				preprocessors=preprocessors,
				build_context=build_context,
				verbosity=verbosity,
			)
		else:
			prepare_tree(
				pkg,
				tmp_dir,
				root=root,
				desc_file=desc_file,
				preprocessors=preprocessors,
				build_context=build_context,
				verbosity=verbosity,
			)
			archived = pkg
		tarball = create_archive(archived, tmp_dir, opts.dist_pref, program=program, verbosity=verbosity)
		notice(verbosity, f"Source tarball created: {tarball}")
	return tarball
