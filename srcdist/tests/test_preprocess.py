# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import sys
from pathlib import Path

import pytest

from srcdist.errors import ExternalToolError
from srcdist.package import BuildInfo, Executable, PackageDescription, PackageIdentifier, Version
from srcdist.preprocess import BuildContext, PPSuffixHandler, command_handler, pp_suffixes

_COPY = "import shutil, sys; shutil.copyfile(sys.argv[1], sys.argv[2])"


def test_pp_suffixes_keep_registration_order() -> None:
	handlers = [PPSuffixHandler("y", lambda s, d: None), PPSuffixHandler("x", lambda s, d: None)]
	assert pp_suffixes(handlers) == ["y", "x"]


def test_command_handler_substitutes_paths(tmp_path: Path) -> None:
	src = tmp_path / "Parser.y"
	src.write_text("grammar\n", encoding="utf-8")
	dest = tmp_path / "out" / "Parser.hs"
	dest.parent.mkdir()
	handler = command_handler("y", [sys.executable, "-c", _COPY, "{src}", "{dest}"])
	handler.run(src, dest)
	assert dest.read_text(encoding="utf-8") == "grammar\n"


def test_command_handler_failure(tmp_path: Path) -> None:
	handler = command_handler("y", [sys.executable, "-c", "import sys; sys.stderr.write('bad grammar'); sys.exit(3)"])
	with pytest.raises(ExternalToolError) as excinfo:
		handler.run(tmp_path / "Parser.y", tmp_path / "Parser.hs")
	assert excinfo.value.reason_code == "TOOL_FAILED"
	assert excinfo.value.exit_code == 3
	assert "bad grammar" in excinfo.value.message


def test_build_context_preprocesses_executable_main(tmp_path: Path) -> None:
	root = tmp_path / "root"
	(root / "app").mkdir(parents=True)
	(root / "app" / "Main.y").write_text("main grammar\n", encoding="utf-8")
	pkg = PackageDescription(
		package=PackageIdentifier("tool", Version((1,))),
		executables=(Executable(name="tool", main_is="Main.hs", build_info=BuildInfo(hs_source_dirs=("app",))),),
	)
	handler = command_handler("y", [sys.executable, "-c", _COPY, "{src}", "{dest}"])
	build_dir = tmp_path / "stage" / "dist" / "build"
	generated = BuildContext().preprocess_sources(pkg, build_dir, [handler], root=root)
	assert generated == [build_dir / "Main.hs"]
	assert (build_dir / "Main.hs").read_text(encoding="utf-8") == "main grammar\n"
