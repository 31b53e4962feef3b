"""
Configuration for parsing a TypeScript workspace and naming its modules.

Two plain dataclasses are used throughout the package:

* :class:`ProjectOptions` controls which files form the workspace and how
  ``tsconfig.json`` is consulted.
* :class:`ModuleLayout` describes how library folders map onto scoped module
  specifiers, e.g. ``libs/acme-auth`` onto ``@acme/auth``.

``tsconfig.json`` files are JSON with comments and trailing commas, so they
are cleaned up before being handed to :mod:`json`.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Set

__all__ = [
    "DEFAULT_EXCLUDE_DIRS",
    "DEPENDENCY_DIRS",
    "SOURCE_EXTENSIONS",
    "ProjectOptions",
    "ModuleLayout",
    "load_tsconfig_paths",
]

logger = logging.getLogger(__name__)

SOURCE_EXTENSIONS: FrozenSet[str] = frozenset({".ts", ".tsx"})
DEPENDENCY_DIRS: FrozenSet[str] = frozenset({"node_modules", "bower_components"})
DEFAULT_EXCLUDE_DIRS: FrozenSet[str] = frozenset({".git", ".hg", ".svn", "dist", "out", "tmp", ".angular", ".nx"})


@dataclass
class ProjectOptions:
    """Options for building the set of source units of a workspace.

    Parameters
    ----------
    ts_config_path: Path, optional
        ``tsconfig.json`` whose ``compilerOptions.paths`` declare the
        workspace's module aliases.  Used for module discovery and for
        guessing the module specifier of a file.
    skip_dependency_resolution: bool
        When true (the default) dependency folders such as ``node_modules``
        are never scanned for imports.
    exclude_dirs: frozenset of str
        Directory names that are never descended into.
    extensions: frozenset of str
        File suffixes treated as source units.
    workers: int, optional
        Size of the thread pool processing workspace files.  ``None`` lets
        :mod:`concurrent.futures` choose.
    """

    ts_config_path: Optional[Path] = None
    skip_dependency_resolution: bool = True
    exclude_dirs: FrozenSet[str] = DEFAULT_EXCLUDE_DIRS
    extensions: FrozenSet[str] = SOURCE_EXTENSIONS
    workers: Optional[int] = None

    @classmethod
    def for_workspace(cls, workspace_root: Path, **kwargs) -> "ProjectOptions":
        """Return options that use ``<workspace_root>/tsconfig.json`` when present."""
        if kwargs.get("ts_config_path") is None:
            candidate = workspace_root / "tsconfig.json"
            if candidate.is_file():
                kwargs["ts_config_path"] = candidate
            else:
                candidate = workspace_root / "tsconfig.base.json"
                if candidate.is_file():
                    kwargs["ts_config_path"] = candidate
        return cls(**kwargs)

    def skipped_dirs(self) -> Set[str]:
        skipped = set(self.exclude_dirs)
        if self.skip_dependency_resolution:
            skipped |= DEPENDENCY_DIRS
        return skipped


@dataclass
class ModuleLayout:
    """How library folders translate into module specifiers.

    With ``libs_dir="libs"``, ``folder_prefix="acme-"`` and
    ``scope="@acme"`` the folder ``libs/acme-auth`` is the module
    ``@acme/auth``.
    """

    libs_dir: str = "libs"
    folder_prefix: str = ""
    scope: Optional[str] = None
    tsconfig_paths: Dict[str, List[Path]] = field(default_factory=dict)

    def module_name(self, folder: str) -> Optional[str]:
        """Return the bare module name for a library folder, or ``None``."""
        if self.folder_prefix:
            if not folder.startswith(self.folder_prefix):
                return None
            folder = folder[len(self.folder_prefix):]
        return folder or None

    def specifier(self, module_name: str) -> str:
        if self.scope:
            return f"{self.scope.rstrip('/')}/{module_name}"
        return module_name


def _strip_jsonc(text: str) -> str:
    """Remove comments and trailing commas from a JSON-with-comments document."""
    out: List[str] = []
    i = 0
    n = len(text)
    in_string = False
    while i < n:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
        elif ch == '"':
            in_string = True
            out.append(ch)
            i += 1
        elif text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end == -1 else end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = n if end == -1 else end + 2
        elif ch in "}]":
            j = len(out) - 1
            while j >= 0 and out[j].isspace():
                j -= 1
            if j >= 0 and out[j] == ",":
                del out[j]
            out.append(ch)
            i += 1
        else:
            out.append(ch)
            i += 1
    return "".join(out)


def _read_tsconfig(path: Path) -> dict:
    text = path.read_text(encoding="utf-8-sig")
    return json.loads(_strip_jsonc(text))


def load_tsconfig_paths(ts_config_path: Path) -> Dict[str, List[Path]]:
    """Return the ``compilerOptions.paths`` aliases declared by a tsconfig.

    Relative ``extends`` chains are followed; options in the extending file
    win.  Alias targets are resolved against the ``baseUrl`` of the file
    that declares them (or the file's own directory).  Wildcard aliases
    (``"@scope/lib/*"``) are returned with the ``/*`` suffix stripped from
    both key and targets.

    Parameters
    ----------
    ts_config_path: Path
        Path to ``tsconfig.json``.

    Returns
    -------
    dict
        Mapping of alias to absolute target paths.  Empty when the file
        cannot be read.
    """
    seen: Set[Path] = set()
    paths: Dict[str, List[Path]] = {}
    base_url: Optional[Path] = None
    current: Optional[Path] = ts_config_path.resolve()
    chain: List[tuple] = []
    while current is not None and current not in seen:
        seen.add(current)
        try:
            data = _read_tsconfig(current)
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable tsconfig %s: %s", current, exc)
            break
        chain.append((current, data))
        parent = data.get("extends")
        if isinstance(parent, str) and parent.startswith("."):
            target = (current.parent / parent)
            if target.suffix != ".json":
                target = target.with_name(target.name + ".json")
            current = target.resolve()
        else:
            current = None
    # Apply from the root of the chain so extending files override.
    for config_path, data in reversed(chain):
        options = data.get("compilerOptions") or {}
        if "baseUrl" in options:
            base_url = (config_path.parent / options["baseUrl"]).resolve()
        declared = options.get("paths")
        if not isinstance(declared, dict):
            continue
        root = base_url or config_path.parent
        for alias, targets in declared.items():
            key = alias[:-2] if alias.endswith("/*") else alias
            resolved = []
            for target in targets or []:
                if target.endswith("/*"):
                    target = target[:-2]
                resolved.append((root / target).resolve())
            if key != alias:
                paths.setdefault(key, resolved)
            else:
                paths[key] = resolved
    return paths
