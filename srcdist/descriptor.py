# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Package description file reader.

Supported layout (a subset of the .cabal format):

	-- comment
	name: pkg
	version: 1.0
	extra-source-files: README
	                    CHANGES

	library
	  exposed-modules: A.B, A.C
	  hs-source-dirs: src

	executable tool
	  main-is: Main.hs
	  if os(windows)
	    cpp-options: -DWINDOWS

Field names are case-insensitive. Unknown fields and sections are ignored,
and so are the bodies of nested blocks such as `if` / `else`.
Continuation lines of one field must share one indentation.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from lark import Lark, LarkError, Transformer, UnexpectedInput
from lark.indenter import Indenter

from srcdist.errors import DescriptorError
from srcdist.package import BuildInfo, Executable, Library, PackageDescription, PackageIdentifier, Version

DESCRIPTOR_GLOB = "*.cabal"

_GRAMMAR = r"""
start: _NL? item*

?item: field
     | section

field: NAME _COLON [VALUE] _NL [continuation]
continuation: _INDENT (VALUE _NL)+ _DEDENT
section: NAME [VALUE] _NL _INDENT (field | section)+ _DEDENT

_COLON.2: ":"
NAME: /[A-Za-z][A-Za-z0-9_.-]*/
VALUE: /[^ \t\r\n][^\r\n]*/
_NL: /(\r?\n[\t ]*(--[^\r\n]*)?)+/

%ignore /[\t ]+/
%declare _INDENT _DEDENT
"""


class _DescriptorIndenter(Indenter):
	NL_type = "_NL"
	OPEN_PAREN_types: list[str] = []
	CLOSE_PAREN_types: list[str] = []
	INDENT_type = "_INDENT"
	DEDENT_type = "_DEDENT"
	tab_len = 8


_PARSER = Lark(_GRAMMAR, parser="lalr", postlex=_DescriptorIndenter())


class _ToStanzas(Transformer):
	def continuation(self, items: list[Any]) -> list[str]:
		return [str(t).rstrip() for t in items]

	def field(self, items: list[Any]) -> tuple[str, str]:
		name, value, cont = items
		lines: list[str] = []
		if value is not None:
			lines.append(str(value).rstrip())
		if cont is not None:
			lines.extend(cont)
		return str(name).lower(), "\n".join(lines)

	def section(self, items: list[Any]) -> tuple[str, str | None, dict[str, str]]:
		kind, header, *body = items
		# Nested blocks (`if` / `else`) are conditional; only unconditional fields count.
		fields = dict(b for b in body if len(b) == 2)
		name = str(header).strip() if header is not None else None
		return str(kind).lower(), name or None, fields

	def start(self, items: list[Any]) -> list[Any]:
		return list(items)


def _list_field(fields: dict[str, str], key: str) -> tuple[str, ...]:
	return tuple(s for s in re.split(r"[,\s]+", fields.get(key, "")) if s)


def _build_info(fields: dict[str, str]) -> BuildInfo:
	return BuildInfo(
		hs_source_dirs=_list_field(fields, "hs-source-dirs") or (".",),
		other_modules=_list_field(fields, "other-modules"),
		c_sources=_list_field(fields, "c-sources"),
		include_dirs=_list_field(fields, "include-dirs"),
		install_includes=_list_field(fields, "install-includes"),
	)


def _parse_error(msg: str, *, path: Path | None) -> DescriptorError:
	return DescriptorError(
		reason_code="DESCRIPTOR_PARSE",
		message=msg,
		path=str(path) if path is not None else None,
	)


def parse_package_description(text: str, *, path: Path | None = None) -> PackageDescription:
	# A leading newline lets comments and blank lines open the file; a trailing
	# one closes the last field.
	try:
		tree = _PARSER.parse("\n" + text + "\n")
	except UnexpectedInput as err:
		# Line numbers are shifted by the leading newline.
		raise _parse_error(f"syntax error at line {err.line - 1}, column {err.column}", path=path) from err
	except LarkError as err:
		# e.g. a continuation line dedented to a column no enclosing block uses
		raise _parse_error(f"bad indentation: {err}", path=path) from err
	items = _ToStanzas().transform(tree)

	top: dict[str, str] = {}
	library: Library | None = None
	executables: list[Executable] = []
	for item in items:
		if len(item) == 2:
			top[item[0]] = item[1]
			continue
		kind, name, fields = item
		if kind == "library":
			library = Library(
				exposed_modules=_list_field(fields, "exposed-modules"),
				build_info=_build_info(fields),
			)
		elif kind == "executable":
			if not name:
				raise _parse_error("executable section needs a name", path=path)
			main_is = fields.get("main-is", "").strip()
			if not main_is:
				raise _parse_error(f"executable '{name}' is missing main-is", path=path)
			executables.append(Executable(name=name, main_is=main_is, build_info=_build_info(fields)))

	name = top.get("name", "").strip()
	if not name:
		raise _parse_error("missing required field 'name'", path=path)
	try:
		version = Version.parse(top.get("version", ""))
	except ValueError as err:
		raise _parse_error(f"bad 'version' field: {err}", path=path) from err

	return PackageDescription(
		package=PackageIdentifier(name=name, version=version),
		library=library,
		executables=tuple(executables),
		data_files=_list_field(top, "data-files"),
		data_dir=top.get("data-dir", "").strip(),
		license_file=top.get("license-file", "").strip() or None,
		extra_src_files=_list_field(top, "extra-source-files"),
		license=top.get("license", "").strip(),
		synopsis=top.get("synopsis", "").strip(),
	)


def read_package_description(path: Path) -> PackageDescription:
	try:
		text = path.read_text(encoding="utf-8")
	except OSError as err:
		raise DescriptorError(reason_code="DESCRIPTOR_NOT_FOUND", message=str(err), path=str(path)) from err
	except UnicodeDecodeError as err:
		raise _parse_error(f"not valid UTF-8: {err}", path=path) from err
	return parse_package_description(text, path=path)


def find_package_desc(root: Path) -> Path:
	"""
	Find the single description file in `root`.

	Returns the path relative to `root`.
	"""
	found = sorted(p for p in root.glob(DESCRIPTOR_GLOB) if p.is_file())
	if not found:
		raise DescriptorError(
			reason_code="DESCRIPTOR_NOT_FOUND",
			message=f"No {DESCRIPTOR_GLOB} file found. Please create a package description file <pkgname>.cabal",
			path=str(root),
		)
	if len(found) > 1:
		raise DescriptorError(
			reason_code="DESCRIPTOR_AMBIGUOUS",
			message="Multiple description files found: " + ", ".join(p.name for p in found),
			path=str(root),
		)
	return Path(found[0].name)


def package_relative_desc(root: Path, desc_file: Path) -> Path:
	"""
	Express `desc_file` relative to the package `root`.

	A relative `desc_file` is taken relative to `root`. The file must lie inside
	`root`, since it is staged at the same relative path in the archive.
	"""
	candidate = desc_file if desc_file.is_absolute() else root / desc_file
	try:
		return candidate.resolve().relative_to(root.resolve())
	except ValueError as err:
		raise DescriptorError(
			reason_code="DESCRIPTOR_OUTSIDE_ROOT",
			message=f"description file must be inside the package root {root}: {desc_file}",
			path=str(desc_file),
		) from err
