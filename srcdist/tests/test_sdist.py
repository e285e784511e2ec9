# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import datetime
import shutil
import tarfile
from pathlib import Path

import pytest

from srcdist.archive import TarProgram
from srcdist.descriptor import read_package_description
from srcdist.errors import ExternalToolError, PreconditionError, ResolutionError
from srcdist.sdist import SDistOptions, sdist, temp_directory
from srcdist.verbosity import Verbosity

requires_tar = pytest.mark.skipif(shutil.which("tar") is None, reason="tar not on PATH")

CABAL = """\
-- sample
name: pkg
version: 1.0

library
  exposed-modules: A.B
  hs-source-dirs: src
"""


def _write_file(path: Path, text: str) -> None:
	path.parent.mkdir(parents=True, exist_ok=True)
	path.write_text(text, encoding="utf-8")


def _members(tarball: Path) -> list[str]:
	with tarfile.open(tarball, "r:gz") as tf:
		return sorted(m.name for m in tf.getmembers() if m.isfile())


@pytest.fixture()
def root(tmp_path: Path) -> Path:
	r = tmp_path / "root"
	_write_file(r / "pkg.cabal", CABAL)
	_write_file(r / "src" / "A" / "B.hs", "module A.B where\n")
	return r


def _opts(tmp_path: Path, **kwargs) -> SDistOptions:
	return SDistOptions(dist_pref=tmp_path / "dist", verbosity=Verbosity.SILENT, **kwargs)


@requires_tar
def test_end_to_end_library_package(root: Path, tmp_path: Path) -> None:
	pkg = read_package_description(root / "pkg.cabal")
	opts = _opts(tmp_path)
	tarball = sdist(pkg, opts, root=root, desc_file=Path("pkg.cabal"))
	assert tarball.name == "pkg-1.0.tar.gz"
	assert tarball.parent == (tmp_path / "dist").resolve()
	assert _members(tarball) == ["pkg-1.0/Setup.hs", "pkg-1.0/pkg.cabal", "pkg-1.0/src/A/B.hs"]
	assert not opts.staging_root.exists()


@requires_tar
def test_snapshot_mode_stamps_archive_and_description(root: Path, tmp_path: Path) -> None:
	pkg = read_package_description(root / "pkg.cabal")
	opts = _opts(tmp_path, snapshot=True)
	tarball = sdist(pkg, opts, root=root, desc_file=Path("pkg.cabal"), date=datetime.date(2008, 3, 18))
	assert tarball.name == "pkg-1.0.20080318.tar.gz"
	with tarfile.open(tarball, "r:gz") as tf:
		member = tf.extractfile("pkg-1.0.20080318/pkg.cabal")
		assert member is not None
		staged = member.read().decode("utf-8")
	assert staged == CABAL.replace("version: 1.0\n", "version: 1.0.20080318\n")
	# The working copy and the parsed description are untouched.
	assert (root / "pkg.cabal").read_text(encoding="utf-8") == CABAL
	assert pkg.package.display() == "pkg-1.0"
	assert not opts.staging_root.exists()


def test_existing_staging_root_aborts_untouched(root: Path, tmp_path: Path) -> None:
	opts = _opts(tmp_path)
	_write_file(opts.staging_root / "leftover" / "file.txt", "stale\n")
	pkg = read_package_description(root / "pkg.cabal")

	with pytest.raises(PreconditionError) as excinfo:
		sdist(pkg, opts, root=root, desc_file=Path("pkg.cabal"), program=TarProgram("/nonexistent/tar"))
	assert excinfo.value.reason_code == "STAGING_EXISTS"

	assert sorted(p.relative_to(opts.dist_pref).as_posix() for p in opts.dist_pref.rglob("*")) == [
		"src",
		"src/leftover",
		"src/leftover/file.txt",
	]
	assert (opts.staging_root / "leftover" / "file.txt").read_text(encoding="utf-8") == "stale\n"


def test_staging_removed_after_resolution_failure(root: Path, tmp_path: Path) -> None:
	(root / "src" / "A" / "B.hs").unlink()
	pkg = read_package_description(root / "pkg.cabal")
	opts = _opts(tmp_path)
	with pytest.raises(ResolutionError):
		sdist(pkg, opts, root=root, desc_file=Path("pkg.cabal"))
	assert not opts.staging_root.exists()


def test_staging_removed_after_archive_failure(root: Path, tmp_path: Path) -> None:
	pkg = read_package_description(root / "pkg.cabal")
	opts = _opts(tmp_path)
	with pytest.raises(ExternalToolError):
		sdist(pkg, opts, root=root, desc_file=Path("pkg.cabal"), program=TarProgram(str(tmp_path / "no-such-tar")))
	assert not opts.staging_root.exists()
	assert not (tmp_path / "dist" / "pkg-1.0.tar.gz").exists()


@requires_tar
def test_blocking_diagnostics_do_not_halt(root: Path, tmp_path: Path, capsys) -> None:
	# An escaping license path is a dist-inexcusable finding.
	_write_file(root / "pkg.cabal", CABAL + "license-file: ../LICENSE\n")
	_write_file(tmp_path / "LICENSE", "BSD\n")
	pkg = read_package_description(root / "pkg.cabal")
	opts = SDistOptions(dist_pref=tmp_path / "dist", verbosity=Verbosity.NORMAL)

	tarball = sdist(pkg, opts, root=root, desc_file=Path("pkg.cabal"))
	out = capsys.readouterr().out
	assert "Distribution quality errors:" in out
	assert "would reject this package" in out
	assert f"Source tarball created: {tarball}" in out
	assert "pkg-1.0/LICENSE" not in _members(tarball)


def test_missing_build_context_warns(root: Path, tmp_path: Path, capsys) -> None:
	pkg = read_package_description(root / "pkg.cabal")
	opts = SDistOptions(dist_pref=tmp_path / "dist", verbosity=Verbosity.NORMAL)
	with pytest.raises(ExternalToolError):
		sdist(pkg, opts, root=root, desc_file=Path("pkg.cabal"), program=TarProgram(str(tmp_path / "no-such-tar")))
	assert "Cannot run preprocessors: no build directory configured." in capsys.readouterr().err


def test_temp_directory_warns_when_cleanup_fails(tmp_path: Path, monkeypatch, capsys) -> None:
	def _refuse(path, *args, **kwargs):
		raise PermissionError(13, "Permission denied", str(path))

	monkeypatch.setattr("srcdist.sdist.shutil.rmtree", _refuse)
	with temp_directory(Verbosity.NORMAL, tmp_path / "src") as staging:
		assert staging.is_dir()
	err = capsys.readouterr().err
	assert "could not remove staging directory" in err
	assert "Permission denied" in err
