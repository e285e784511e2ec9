# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
srcdist: source distribution builder.

Modules:
  resolve:  module/file lookup across source directories
  tree:     staging tree assembly
  snapshot: date-stamped snapshot versions
  archive:  tar.gz creation
  sdist:    the end-to-end action
"""

__all__ = ["archive", "check", "descriptor", "errors", "package", "resolve", "sdist", "snapshot", "tree"]
