"""
Move TypeScript files between modules while updating import statements.

This package relocates one TypeScript source file in a multi-library
workspace and rewrites every import elsewhere in the workspace that imports
the file's exports from its old module specifier, so that it imports them
from the new one.  Only the moved bindings are rewritten: an import that
also pulls other names from the old module is split in two, keeping its
comments and layout.  Subpath imports (``@scope/lib/sub/path``) keep their
subpath.

Example::

    # Move a model from one library to another and rewrite imports
    tsmover move‑file libs/acme-models/src/lib/user.ts libs/acme-auth/src/lib/ \
        --old-module @acme/models --new-module @acme/auth

The CLI is built on top of :mod:`click`; parsing uses tree-sitter.  See
``tsmover.cli`` for details.
"""

__all__ = [
    "move_unit",
    "update_imports",
    "extract_exports",
    "rewrite_imports",
    "parse_source",
]

from .exports import extract_exports  # noqa: F401
from .mover import move_unit, update_imports  # noqa: F401
from .parser import parse_source  # noqa: F401
from .rewriter import rewrite_imports  # noqa: F401
