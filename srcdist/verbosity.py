# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Verbosity-gated user messages.

Progress goes to stdout, warnings to stderr. Nothing here raises; fatal
conditions are `SDistError`s and are rendered by the CLI.
"""

from __future__ import annotations

import sys
from enum import IntEnum


class Verbosity(IntEnum):
	SILENT = 0
	NORMAL = 1
	VERBOSE = 2
	DEAFENING = 3

	@classmethod
	def from_flag(cls, value: str) -> "Verbosity":
		"""Parse a `-v` value: a level number 0-3 or a level name."""
		text = value.strip().lower()
		if text.isdigit():
			level = int(text)
			if level > cls.DEAFENING:
				raise ValueError(f"verbosity level out of range (0-3): {value}")
			return cls(level)
		for member in cls:
			if member.name.lower() == text:
				return member
		raise ValueError(f"unknown verbosity level: {value}")


def notice(verbosity: Verbosity, msg: str) -> None:
	if verbosity >= Verbosity.NORMAL:
		print(msg, flush=True)


def warn(verbosity: Verbosity, msg: str) -> None:
	if verbosity >= Verbosity.NORMAL:
		print(f"Warning: {msg}", file=sys.stderr, flush=True)


def info(verbosity: Verbosity, msg: str) -> None:
	if verbosity >= Verbosity.VERBOSE:
		print(msg, flush=True)


def debug(verbosity: Verbosity, msg: str) -> None:
	if verbosity >= Verbosity.DEAFENING:
		print(msg, flush=True)


def setup_message(verbosity: Verbosity, msg: str, subject: str) -> None:
	notice(verbosity, f"{msg} {subject}...")
