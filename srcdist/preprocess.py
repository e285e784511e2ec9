# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Preprocessor handlers and the configured build context.

A handler turns a source with its own suffix (e.g. `Lexer.x`) into a plain
`.hs` module. When a package has been configured, the source distribution
ships the generated modules too, so the archive builds without the
preprocessor installed. Only platform-independent handlers take part in that.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Sequence

from srcdist.errors import CopyError, ExternalToolError
from srcdist.package import PackageDescription, dot_to_sep
from srcdist.resolve import find_file_with_extension
from srcdist.verbosity import Verbosity, info

PreprocessFn = Callable[[Path, Path], None]


@dataclass(frozen=True)
class PPSuffixHandler:
	suffix: str
	run: PreprocessFn
	platform_independent: bool = True


def pp_suffixes(handlers: Iterable[PPSuffixHandler]) -> list[str]:
	return [h.suffix for h in handlers]


def command_handler(suffix: str, argv: Sequence[str], *, platform_independent: bool = True) -> PPSuffixHandler:
	"""
	Build a handler around an external command.

	`{src}` and `{dest}` in `argv` are replaced by the input and output paths,
	e.g. `command_handler("y", ["happy", "{src}", "-o", "{dest}"])`.
	"""

	def _run(src: Path, dest: Path) -> None:
		cmd = [a.replace("{src}", str(src)).replace("{dest}", str(dest)) for a in argv]
		try:
			res = subprocess.run(cmd, capture_output=True, text=True)
		except OSError as err:
			raise ExternalToolError(
				reason_code="TOOL_NOT_FOUND",
				message=f"cannot run preprocessor for .{suffix}: {err}",
				tool=cmd[0] if cmd else None,
			) from err
		if res.returncode != 0:
			raise ExternalToolError(
				reason_code="TOOL_FAILED",
				message=f"preprocessor for .{suffix} failed: {res.stderr.strip()}",
				tool=cmd[0],
				path=str(src),
				exit_code=res.returncode,
			)

	return PPSuffixHandler(suffix=suffix, run=_run, platform_independent=platform_independent)


@dataclass(frozen=True)
class BuildContext:
	"""
	Capability handed to the tree builder when the package has been configured.

	`build_dir` is relative; generated modules are written below
	`<staging>/<build_dir>`.
	"""

	build_dir: Path = Path("dist") / "build"

	def preprocess_sources(
		self,
		pkg: PackageDescription,
		build_dir: Path,
		handlers: Sequence[PPSuffixHandler],
		*,
		root: Path,
		verbosity: Verbosity = Verbosity.NORMAL,
	) -> list[Path]:
		active = [h for h in handlers if h.platform_independent]
		by_suffix = {h.suffix: h for h in active}
		suffixes = pp_suffixes(active)
		generated: list[Path] = []
		if not suffixes:
			return generated

		# (file stems without extension, search dirs) per target
		targets: list[tuple[list[str], Sequence[str]]] = []
		if pkg.library is not None:
			lib = pkg.library
			stems = [dot_to_sep(m) for m in (*lib.exposed_modules, *lib.build_info.other_modules)]
			targets.append((stems, lib.build_info.hs_source_dirs))
		for exe in pkg.executables:
			bi = exe.build_info
			stems = [dot_to_sep(m) for m in bi.other_modules]
			stems.append(str(Path(exe.main_is).with_suffix("")))
			targets.append((stems, bi.hs_source_dirs))

		for stems, dirs in targets:
			for stem in stems:
				src = find_file_with_extension(suffixes, dirs, stem, root=root)
				if src is None:
					continue
				dest = build_dir / f"{stem}.hs"
				try:
					dest.parent.mkdir(parents=True, exist_ok=True)
				except OSError as err:
					raise CopyError(reason_code="WRITE_FAILED", message=str(err), path=str(dest.parent)) from err
				info(verbosity, f"preprocessing {src} -> {dest}")
				matched = max((s for s in suffixes if src.name.endswith("." + s)), key=len)
				by_suffix[matched].run(root / src, dest)
				generated.append(dest)
		return generated
