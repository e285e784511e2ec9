# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Staging tree assembly.

`prepare_tree` copies everything a source distribution must contain into
`<target_pref>/<name>-<version>`, mirroring each file's path relative to the
package root. Failures propagate; cleaning up a half-populated tree is the
caller's job.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Iterable, Sequence

from srcdist.errors import CopyError
from srcdist.package import BuildInfo, PackageDescription
from srcdist.preprocess import BuildContext, PPSuffixHandler, pp_suffixes
from srcdist.resolve import (
	BOOT_SUFFIXES,
	find_include,
	include_search_dirs,
	resolve_main,
	resolve_module,
	resolve_optional,
	source_suffixes,
)
from srcdist.verbosity import Verbosity, info

SETUP_SCRIPT_NAMES: tuple[str, ...] = ("Setup.hs", "Setup.lhs")
DEFAULT_SETUP_SCRIPT = "import Distribution.Simple\nmain = defaultMain\n"


def _mkdir(path: Path, verbosity: Verbosity) -> None:
	if path.is_dir():
		return
	info(verbosity, f"creating {path}")
	try:
		path.mkdir(parents=True, exist_ok=True)
	except OSError as err:
		raise CopyError(reason_code="WRITE_FAILED", message=f"cannot create directory: {err}", path=str(path)) from err


def copy_file_verbose(verbosity: Verbosity, src: Path, dest: Path) -> None:
	info(verbosity, f"copy {src} to {dest}")
	try:
		shutil.copyfile(src, dest)
	except OSError as err:
		raise CopyError(reason_code="COPY_FAILED", message=f"cannot copy {src}: {err}", path=str(src)) from err


def copy_file_to(verbosity: Verbosity, target_dir: Path, rel: Path | str, *, root: Path) -> None:
	"""Copy `root/rel` to `target_dir/rel`, creating parent directories."""
	dest = target_dir / rel
	_mkdir(dest.parent, verbosity)
	copy_file_verbose(verbosity, root / rel, dest)


def write_file(path: Path, text: str) -> None:
	try:
		with open(path, "w", encoding="utf-8", newline="") as f:
			f.write(text)
	except OSError as err:
		raise CopyError(reason_code="WRITE_FAILED", message=f"cannot write {path}: {err}", path=str(path)) from err


def prepare_dir(
	verbosity: Verbosity,
	target_dir: Path,
	pp_suffix_list: Sequence[str],
	modules: Iterable[str],
	bi: BuildInfo,
	*,
	root: Path,
) -> list[Path]:
	"""Resolve and copy the modules of one build target; returns the staged relative paths."""
	suffixes = source_suffixes(pp_suffix_list)
	all_modules = [*modules, *bi.other_modules]
	sources = [resolve_module(m, suffixes, bi.hs_source_dirs, root=root) for m in all_modules]
	boot_files = [resolve_optional(m, BOOT_SUFFIXES, bi.hs_source_dirs, root=root) for m in all_modules]

	all_sources = [*sources, *(b for b in boot_files if b is not None), *(Path(c) for c in bi.c_sources)]
	for rel in all_sources:
		copy_file_to(verbosity, target_dir, rel, root=root)
	return all_sources


def _copy_setup_script(verbosity: Verbosity, target_dir: Path, *, root: Path) -> None:
	for name in SETUP_SCRIPT_NAMES:
		if (root / name).is_file():
			copy_file_to(verbosity, target_dir, name, root=root)
			return
	info(verbosity, f"writing default {SETUP_SCRIPT_NAMES[0]}")
	write_file(target_dir / SETUP_SCRIPT_NAMES[0], DEFAULT_SETUP_SCRIPT)


def prepare_tree(
	pkg: PackageDescription,
	target_pref: Path,
	*,
	root: Path,
	desc_file: Path,
	preprocessors: Sequence[PPSuffixHandler] = (),
	build_context: BuildContext | None = None,
	verbosity: Verbosity = Verbosity.NORMAL,
) -> Path:
	"""
	Populate the staging directory for `pkg` and return it.

	Args:
	  pkg: the description whose identifier names the staging directory.
	  target_pref: staging root; created if missing.
	  root: package root all declared paths are relative to.
	  desc_file: the package description file, relative to `root`.
	  preprocessors: registered handlers; their suffixes outrank `.hs`/`.lhs`.
	  build_context: present only when the package is configured; enables
	    shipping preprocessed modules.
	"""
	target_dir = target_pref / pkg.tarball_name()
	_mkdir(target_dir, verbosity)
	pps = pp_suffixes(preprocessors)

	if pkg.library is not None:
		lib = pkg.library
		prepare_dir(verbosity, target_dir, pps, lib.exposed_modules, lib.build_info, root=root)

	for exe in pkg.executables:
		bi = exe.build_info
		prepare_dir(verbosity, target_dir, pps, (), bi, root=root)
		main_src = resolve_main(exe.main_is, pps, bi.hs_source_dirs, root=root)
		copy_file_to(verbosity, target_dir, main_src, root=root)

	for filename in pkg.data_files:
		copy_file_to(verbosity, target_dir, Path(pkg.data_dir) / filename, root=root)

	if pkg.license_file:
		copy_file_to(verbosity, target_dir, pkg.license_file, root=root)

	for fpath in pkg.extra_src_files:
		copy_file_to(verbosity, target_dir, fpath, root=root)

	if pkg.library is not None:
		lbi = pkg.library.build_info
		dirs = include_search_dirs(lbi.include_dirs)
		for header in lbi.install_includes:
			copy_file_to(verbosity, target_dir, find_include(dirs, header, root=root), root=root)

	if build_context is not None and preprocessors:
		build_dir = target_dir / build_context.build_dir
		build_context.preprocess_sources(pkg, build_dir, preprocessors, root=root, verbosity=verbosity)

	_copy_setup_script(verbosity, target_dir, root=root)

	copy_file_to(verbosity, target_dir, desc_file, root=root)
	return target_dir
