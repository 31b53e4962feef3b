"""
Discover module specifiers of a multi-library TypeScript workspace.

Libraries live in one folder (``libs`` by default).  A library folder
``libs/<prefix><name>`` is the module ``<scope>/<name>``.  Path aliases
declared in ``tsconfig.json`` are also reported, since that is where
Nx-style workspaces register their libraries.

None of this affects how imports are rewritten; it only supplies defaults
and choices for the command line.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path, PurePosixPath
from typing import List, Optional

from .config import ModuleLayout, ProjectOptions, load_tsconfig_paths

__all__ = ["find_available_modules", "guess_module_specifier", "layout_for_workspace"]

logger = logging.getLogger(__name__)


def layout_for_workspace(
    options: ProjectOptions,
    *,
    libs_dir: str = "libs",
    folder_prefix: str = "",
    scope: Optional[str] = None,
) -> ModuleLayout:
    """Build a :class:`ModuleLayout`, loading tsconfig path aliases when configured."""
    aliases = {}
    if options.ts_config_path is not None:
        aliases = load_tsconfig_paths(options.ts_config_path)
        logger.debug("Loaded %d path aliases from %s", len(aliases), options.ts_config_path)
    return ModuleLayout(libs_dir=libs_dir, folder_prefix=folder_prefix, scope=scope, tsconfig_paths=aliases)


def find_available_modules(workspace_root: Path, layout: ModuleLayout) -> List[str]:
    """Return the module specifiers available in ``workspace_root``.

    Library folders come first, in name order, followed by tsconfig aliases
    not already listed.  A workspace without a libraries folder yields only
    the aliases (possibly nothing).
    """
    found: List[str] = []
    libs = workspace_root / layout.libs_dir
    if libs.is_dir():
        for entry in sorted(libs.iterdir()):
            if not entry.is_dir():
                continue
            name = layout.module_name(entry.name)
            if name:
                found.append(layout.specifier(name))
    for alias in sorted(layout.tsconfig_paths):
        if alias not in found:
            found.append(alias)
    return found


def guess_module_specifier(relative_path: Path, layout: ModuleLayout, workspace_root: Optional[Path] = None) -> Optional[str]:
    """Guess the module specifier owning a file.

    The longest tsconfig alias whose target contains the file wins.
    Otherwise ``<libs_dir>/<folder>/...`` gives ``<scope>/<name>`` when a
    scope is configured.

    Parameters
    ----------
    relative_path: Path
        The file, relative to the workspace root.
    layout: ModuleLayout
        Workspace naming conventions.
    workspace_root: Path, optional
        Needed to match tsconfig aliases, whose targets are absolute.

    Returns
    -------
    str or None
        The specifier, or ``None`` if nothing matches.
    """
    if workspace_root is not None and layout.tsconfig_paths:
        absolute = (workspace_root / relative_path).resolve()
        best: Optional[str] = None
        best_depth = -1
        for alias, targets in layout.tsconfig_paths.items():
            for target in targets:
                base = target.parent if target.suffix else target
                if base == absolute or base in absolute.parents:
                    depth = len(base.parts)
                    if depth > best_depth:
                        best, best_depth = alias, depth
        if best is not None:
            return best
    posix = PurePosixPath(*relative_path.parts).as_posix()
    match = re.search(rf"(?:^|/){re.escape(layout.libs_dir)}/([^/]+)", posix)
    if not match or not layout.scope:
        return None
    name = layout.module_name(match.group(1))
    return layout.specifier(name) if name else None
