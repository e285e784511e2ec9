# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from pathlib import Path

from srcdist.check import PackageCheck, check_package, check_package_files, report_package_problems
from srcdist.package import Library, PackageDescription, PackageIdentifier, Version
from srcdist.verbosity import Verbosity


def _pkg(**kwargs) -> PackageDescription:
	return PackageDescription(package=PackageIdentifier("pkg", Version((1, 0))), **kwargs)


def test_suspicious_is_advisory_everything_else_blocks() -> None:
	assert not PackageCheck("dist-suspicious", "x").is_dist_error()
	for kind in ("build-impossible", "build-warning", "dist-inexcusable"):
		assert PackageCheck(kind, "x").is_dist_error()


def test_report_groups_errors_and_warnings(capsys) -> None:
	checks = [
		PackageCheck("build-impossible", "cannot build"),
		PackageCheck("dist-suspicious", "looks odd"),
		PackageCheck("dist-inexcusable", "bad path"),
	]
	report_package_problems(checks, Verbosity.NORMAL)
	out = capsys.readouterr().out
	assert "Distribution quality errors:\ncannot build\nbad path\n" in out
	assert "Distribution quality warnings:\nlooks odd\n" in out
	assert "Note: the public hackage server would reject this package." in out


def test_report_warnings_only_has_no_rejection_note(capsys) -> None:
	report_package_problems([PackageCheck("dist-suspicious", "looks odd")], Verbosity.NORMAL)
	out = capsys.readouterr().out
	assert "Distribution quality warnings:" in out
	assert "errors" not in out
	assert "reject" not in out


def test_report_empty_and_silent_print_nothing(capsys) -> None:
	report_package_problems([], Verbosity.NORMAL)
	report_package_problems([PackageCheck("build-impossible", "x")], Verbosity.SILENT)
	captured = capsys.readouterr()
	assert captured.out == ""
	assert captured.err == ""


def test_check_package_findings() -> None:
	kinds = {c.kind for c in check_package(_pkg())}
	assert "build-impossible" in kinds
	assert "dist-suspicious" in kinds

	clean = _pkg(library=Library(exposed_modules=("A",)), synopsis="thing", license_file="LICENSE")
	assert check_package(clean) == []


def test_check_package_rejects_escaping_paths() -> None:
	pkg = _pkg(
		library=Library(exposed_modules=("A",)),
		synopsis="thing",
		license_file="LICENSE",
		extra_src_files=("../outside.txt", "/etc/passwd", "ok/inside.txt"),
	)
	findings = check_package(pkg)
	assert [c.kind for c in findings] == ["dist-inexcusable", "dist-inexcusable"]
	assert "../outside.txt" in findings[0].explanation


def test_check_package_files_missing_license(tmp_path: Path) -> None:
	pkg = _pkg(license_file="LICENSE")
	findings = check_package_files(pkg, tmp_path)
	assert [c.kind for c in findings] == ["build-warning"]
	(tmp_path / "LICENSE").write_text("BSD\n", encoding="utf-8")
	assert check_package_files(pkg, tmp_path) == []
