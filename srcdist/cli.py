# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import argparse
import shlex
import sys
from pathlib import Path

from srcdist.descriptor import find_package_desc, package_relative_desc, read_package_description
from srcdist.errors import SDistError
from srcdist.preprocess import BuildContext, PPSuffixHandler, command_handler
from srcdist.sdist import SDistOptions, sdist
from srcdist.verbosity import Verbosity


def _verbosity(value: str) -> Verbosity:
	try:
		return Verbosity.from_flag(value)
	except ValueError as err:
		raise argparse.ArgumentTypeError(str(err)) from err


def _preprocessor(value: str) -> PPSuffixHandler:
	suffix, sep, command = value.partition("=")
	suffix = suffix.strip().lstrip(".")
	argv = shlex.split(command)
	if not sep or not suffix or not argv:
		raise argparse.ArgumentTypeError(f"expected SUFFIX=COMMAND, got {value!r}")
	return command_handler(suffix, argv)


def _relative_dir(value: str) -> Path:
	path = Path(value)
	if path.is_absolute() or ".." in path.parts:
		raise argparse.ArgumentTypeError(f"must be a relative path inside the package: {value}")
	return path


def _build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser(prog="srcdist", description="Build a source distribution archive for a package")
	p.add_argument(
		"--root",
		type=Path,
		default=Path("."),
		help="Package root holding the description file (default: current directory)",
	)
	p.add_argument(
		"--descriptor",
		type=Path,
		default=None,
		help="Description file relative to the root (default: the single *.cabal file in the root)",
	)
	p.add_argument(
		"--dist-dir",
		dest="dist_pref",
		type=Path,
		default=None,
		help="Directory for the archive and the staging tree (default: <root>/dist)",
	)
	p.add_argument(
		"-v",
		"--verbose",
		dest="verbosity",
		type=_verbosity,
		nargs="?",
		const=Verbosity.VERBOSE,
		default=Verbosity.NORMAL,
		help="Verbosity level 0-3 (bare -v means 2)",
	)
	p.add_argument(
		"--snapshot",
		action="store_true",
		help="Append today's date (YYYYMMDD) to the version to make a snapshot archive",
	)
	p.add_argument(
		"--build-dir",
		type=_relative_dir,
		default=None,
		help="Archive directory for preprocessor output; enables preprocessing (default with --preprocessor: dist/build)",
	)
	p.add_argument(
		"--preprocessor",
		dest="preprocessors",
		type=_preprocessor,
		action="append",
		default=[],
		metavar="SUFFIX=COMMAND",
		help="Preprocessor for SUFFIX sources; {src} and {dest} in COMMAND name the input and output (repeatable)",
	)
	return p


def main(argv: list[str] | None = None) -> int:
	p = _build_parser()
	args = p.parse_args(argv)

	root: Path = args.root
	dist_pref: Path = args.dist_pref if args.dist_pref is not None else root / "dist"
	opts = SDistOptions(dist_pref=dist_pref, verbosity=args.verbosity, snapshot=bool(args.snapshot))
	build_context: BuildContext | None = None
	if args.build_dir is not None:
		build_context = BuildContext(build_dir=args.build_dir)
	elif args.preprocessors:
		build_context = BuildContext()
	try:
		if args.descriptor is not None:
			desc_file = package_relative_desc(root, args.descriptor)
		else:
			desc_file = find_package_desc(root)
		pkg = read_package_description(root / desc_file)
		sdist(
			pkg,
			opts,
			root=root,
			desc_file=desc_file,
			preprocessors=args.preprocessors,
			build_context=build_context,
		)
	except SDistError as err:
		print(f"srcdist: error: {err.format_human()}", file=sys.stderr)
		return 2
	return 0
