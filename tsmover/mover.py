"""
Move a TypeScript file to another module and update imports.

This module implements the functionality behind the CLI exposed in
``tsmover.cli``.  :func:`move_unit` relocates one source file and then
rewrites, in every other ``.ts``/``.tsx`` file under the workspace root,
the import statements that import the moved file's exports from its old
module specifier so that they import them from the new one.

The order of operations matters.  Exports are extracted before anything
changes; if there are none, nothing happens.  If the physical move fails,
no import is rewritten.  Once the move succeeded, workspace files are
processed independently and a failure in one file is recorded in the
report instead of stopping the others.  The move is never rolled back.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from .config import ProjectOptions
from .errors import MoveFailed, NoExportsFound, ParseFailure, TargetExists, WriteFailure
from .exports import exported_symbols
from .model import ModuleMoveOperation, MoveReport
from .parser import parse_file
from .rewriter import rewrite_unit

__all__ = [
    "move_file",
    "list_source_files",
    "update_imports",
    "move_unit",
]

logger = logging.getLogger(__name__)

MoveFunction = Callable[[Path, Path], None]
Enumerator = Callable[[Path, ProjectOptions], List[Path]]


def move_file(source: Path, target: Path, overwrite: bool = False) -> None:
    """Move ``source`` to ``target``, creating missing parent directories.

    Raises
    ------
    TargetExists
        If ``target`` exists and ``overwrite`` is false.
    MoveFailed
        If the file system refuses the move.
    """
    if not source.is_file():
        raise MoveFailed(source, target, "source is not a file")
    if target.exists() and not overwrite:
        raise TargetExists(source, target)
    try:
        if not target.parent.exists():
            target.parent.mkdir(parents=True, exist_ok=True)
            logger.info("Created target directory %s", target.parent)
        shutil.move(str(source), str(target))
    except OSError as exc:
        raise MoveFailed(source, target, exc.strerror or str(exc)) from exc


def list_source_files(workspace_root: Path, options: Optional[ProjectOptions] = None) -> List[Path]:
    """Return every TypeScript source file under ``workspace_root``, sorted."""
    options = options or ProjectOptions()
    skipped = options.skipped_dirs()
    found: List[Path] = []
    for root, dirs, files in os.walk(workspace_root):
        dirs[:] = [d for d in dirs if d not in skipped]
        for filename in files:
            if Path(filename).suffix.lower() in options.extensions:
                found.append(Path(root) / filename)
    found.sort()
    return found


@dataclass
class _FileOutcome:
    path: Path
    bindings_changed: int = 0
    skipped: Optional[str] = None
    write_failure: Optional[str] = None


def _write(path: Path, text: str) -> None:
    """Replace ``path`` with ``text``; the original is untouched if anything fails."""
    tmp: Optional[Path] = None
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        tmp = Path(tmp_name)
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(text)
        shutil.copymode(path, tmp)
        os.replace(tmp, path)
    except OSError as exc:
        if tmp is not None and tmp.exists():
            tmp.unlink()
        raise WriteFailure(path, exc.strerror or str(exc)) from exc


def _process_file(path: Path, operation: ModuleMoveOperation, dry_run: bool) -> _FileOutcome:
    outcome = _FileOutcome(path)
    try:
        unit = parse_file(path)
    except ParseFailure as exc:
        logger.warning("Skipping %s: %s", path, exc.reason)
        outcome.skipped = exc.reason
        return outcome
    changed = rewrite_unit(
        unit,
        operation.moved_symbol_names,
        operation.old_module_specifier,
        operation.new_module_specifier,
    )
    if not changed:
        return outcome
    if not dry_run:
        try:
            _write(path, unit.text())
        except WriteFailure as exc:
            logger.error("%s", exc)
            outcome.write_failure = exc.reason
            return outcome
    logger.info("Updated %d import(s) in %s", changed, path)
    outcome.bindings_changed = changed
    return outcome


def update_imports(
    workspace_root: Path,
    moved_symbol_names: Iterable[str],
    old_specifier: str,
    new_specifier: str,
    *,
    options: Optional[ProjectOptions] = None,
    exclude_paths: Optional[Sequence[Path]] = None,
    dry_run: bool = False,
    enumerator: Optional[Enumerator] = None,
    report: Optional[MoveReport] = None,
) -> MoveReport:
    """Rewrite imports of ``moved_symbol_names`` throughout a workspace.

    Every source file is read, parsed, rewritten and written back on a
    thread pool.  Per-file results are collected after the pool finishes.

    Parameters
    ----------
    workspace_root: Path
        Directory scanned for source files.
    moved_symbol_names: iterable of str
        Names that moved; ``"default"`` stands for the default export.
    old_specifier, new_specifier: str
        Module specifiers before and after the move.
    options: ProjectOptions, optional
        Which files to scan and how many workers to use.
    exclude_paths: sequence of Path, optional
        Files never rewritten, typically the moved file itself.
    dry_run: bool
        Count what would change without writing anything.
    enumerator: callable, optional
        Replaces :func:`list_source_files`.
    report: MoveReport, optional
        Report to fill in; a new one is created otherwise.

    Returns
    -------
    MoveReport
        Scanned, changed and skipped files and the number of moved bindings.
    """
    options = options or ProjectOptions()
    enumerate_files = enumerator or list_source_files
    excluded = {p.resolve() for p in (exclude_paths or [])}
    operation = ModuleMoveOperation(
        old_module_specifier=old_specifier,
        new_module_specifier=new_specifier,
        moved_symbol_names=set(moved_symbol_names),
        files=[p for p in enumerate_files(workspace_root, options) if p.resolve() not in excluded],
    )
    if report is None:
        report = MoveReport(
            None, None, old_specifier, new_specifier, moved_symbols=sorted(operation.moved_symbol_names)
        )
    report.dry_run = dry_run
    logger.info("Found %d TypeScript files to scan for imports", len(operation.files))

    with ThreadPoolExecutor(max_workers=options.workers) as pool:
        outcomes = list(pool.map(lambda p: _process_file(p, operation, dry_run), operation.files))

    for outcome in outcomes:
        report.files_scanned += 1
        if outcome.skipped is not None:
            report.skipped.append((outcome.path, outcome.skipped))
        elif outcome.write_failure is not None:
            report.write_failures.append((outcome.path, outcome.write_failure))
        elif outcome.bindings_changed:
            report.files_changed += 1
            report.bindings_changed += outcome.bindings_changed
            report.changed_paths.append(outcome.path)
    logger.info(
        "Update complete: modified %d files, updated %d imports, skipped %d files",
        report.files_changed,
        report.bindings_changed,
        report.files_skipped,
    )
    return report


def move_unit(
    source_path: Path,
    target_path: Path,
    old_specifier: str,
    new_specifier: str,
    workspace_root: Path,
    *,
    options: Optional[ProjectOptions] = None,
    overwrite: bool = False,
    dry_run: bool = False,
    mover: Optional[MoveFunction] = None,
    enumerator: Optional[Enumerator] = None,
) -> MoveReport:
    """Move a TypeScript file and update imports across the workspace.

    Parameters
    ----------
    source_path: Path
        The file to move.
    target_path: Path
        Where the file goes.  Parent directories are created.
    old_specifier, new_specifier: str
        Module specifiers the file's exports are imported from before and
        after the move, e.g. ``"@acme/models"`` and ``"@acme/auth"``.
    workspace_root: Path
        Root of the workspace whose imports are rewritten.
    options: ProjectOptions, optional
        Workspace scanning options.
    overwrite: bool
        Replace an existing file at ``target_path``.
    dry_run: bool
        Neither move nor write; only report what would change.
    mover, enumerator: callable, optional
        Replace :func:`move_file` and :func:`list_source_files`.

    Raises
    ------
    ParseFailure
        If ``source_path`` cannot be parsed.
    NoExportsFound
        If ``source_path`` exports nothing.
    MoveFailed
        If the file could not be moved.  No import has been changed then.
    """
    unit = parse_file(source_path)
    symbols = exported_symbols(unit)
    if not symbols:
        raise NoExportsFound(source_path)
    names = [s.name for s in symbols]
    logger.info("Found exported names: %s", ", ".join(names))

    report = MoveReport(source_path, target_path, old_specifier, new_specifier, moved_symbols=names)
    if dry_run:
        logger.info("Dry run: not moving %s", source_path)
    else:
        logger.info("Moving %s to %s", source_path, target_path)
        if mover is not None:
            try:
                mover(source_path, target_path)
            except OSError as exc:
                raise MoveFailed(source_path, target_path, str(exc)) from exc
        else:
            move_file(source_path, target_path, overwrite=overwrite)
    logger.info("Old module: %s, new module: %s", old_specifier, new_specifier)

    return update_imports(
        workspace_root,
        names,
        old_specifier,
        new_specifier,
        options=options,
        exclude_paths=[source_path, target_path],
        dry_run=dry_run,
        enumerator=enumerator,
        report=report,
    )
