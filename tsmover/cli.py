"""
Command‑line interface for the tsmover package.

This module exposes four top‑level commands using :mod:`click`:

* ``move‑file`` – move a TypeScript file to another module and update the
  imports of its exports everywhere in the workspace.
* ``update‑imports`` – only rewrite imports, for a file that was already
  moved by other means.
* ``exports`` – list what a file exports.
* ``list‑modules`` – list the module specifiers found in the workspace.

All commands accept a ``--workspace‑root`` option which defaults to the
current working directory.  Module specifiers that are not given on the
command line are prompted for, with a default guessed from the file's
location (``libs/<prefix><name>/...`` becomes ``<scope>/<name>``) or from
the path aliases of ``tsconfig.json``.
"""

from __future__ import annotations

import logging
import os
import pathlib
import sys
from typing import Optional

import click

from .config import ProjectOptions
from .errors import TsMoverError
from .exports import exported_symbols
from .model import MoveReport
from .modules import find_available_modules, guess_module_specifier, layout_for_workspace
from .mover import move_unit, update_imports
from .parser import parse_file


def resolve_paths(
    src: str, dst: str, workspace_root: Optional[str]
) -> tuple[pathlib.Path, pathlib.Path, pathlib.Path]:
    """Resolve source, destination and workspace root paths.

    ``src`` and ``dst`` are interpreted relative to the workspace root
    unless they are absolute.  ``workspace_root`` defaults to the current
    working directory.  All returned paths are absolute and normalised.
    """
    root = resolve_root(workspace_root)
    src_path = (root / src).resolve() if not pathlib.Path(src).is_absolute() else pathlib.Path(src).resolve()
    dst_path = (root / dst).resolve() if not pathlib.Path(dst).is_absolute() else pathlib.Path(dst).resolve()
    return src_path, dst_path, root


def resolve_root(workspace_root: Optional[str]) -> pathlib.Path:
    root = pathlib.Path(workspace_root).resolve() if workspace_root else pathlib.Path.cwd()
    if not root.is_dir():
        raise click.UsageError(f"Workspace root {root!s} does not exist or is not a directory")
    return root


def _relative(path: pathlib.Path, root: pathlib.Path) -> pathlib.Path:
    try:
        return path.relative_to(root)
    except ValueError:
        return path


def _options(root: pathlib.Path, tsconfig: Optional[str], workers: Optional[int] = None) -> ProjectOptions:
    ts_config_path = pathlib.Path(tsconfig).resolve() if tsconfig else None
    return ProjectOptions.for_workspace(root, ts_config_path=ts_config_path, workers=workers)


def _echo_report(report: MoveReport, root: pathlib.Path) -> None:
    verb = "Would update" if report.dry_run else "Updated"
    for path in report.changed_paths:
        click.echo(f"  {verb.lower()} {_relative(path, root)}")
    for path, reason in report.skipped:
        click.echo(f"  skipped {_relative(path, root)}: {reason}", err=True)
    for path, reason in report.write_failures:
        click.echo(f"  failed to write {_relative(path, root)}: {reason}", err=True)
    click.echo(
        f"{verb} {report.bindings_changed} import(s) in {report.files_changed} of "
        f"{report.files_scanned} file(s); {report.files_skipped} file(s) skipped."
    )


def _finish(report: MoveReport, root: pathlib.Path) -> None:
    _echo_report(report, root)
    if not report.ok:
        raise click.ClickException("some files could not be processed")
    click.echo("Done.")


_root_option = click.option(
    "--workspace-root", "workspace_root", type=click.Path(), default=None,
    help="Root directory of the workspace (defaults to current working directory).",
)
_tsconfig_option = click.option(
    "--tsconfig", "tsconfig", type=click.Path(exists=True, dir_okay=False), default=None,
    help="tsconfig.json declaring module path aliases (defaults to the workspace's own).",
)
_layout_options = [
    click.option("--scope", default=None, help="Scope of module specifiers, e.g. @acme."),
    click.option("--folder-prefix", "folder_prefix", default="", help="Prefix of library folder names, e.g. acme-."),
    click.option("--libs-dir", "libs_dir", default="libs", show_default=True, help="Folder holding the libraries."),
]


def _with_layout_options(func):
    for option in reversed(_layout_options):
        func = option(func)
    return func


@click.group()
@click.version_option(package_name="tsmover")
@click.option("-v", "--verbose", is_flag=True, help="Log every step.")
def cli(verbose: bool) -> None:
    """Move TypeScript files between modules and update import statements.

    Use one of the subcommands to relocate code within your workspace while
    automatically rewriting the imports of everything the moved file
    exports.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@cli.command("move-file", help="Move a TypeScript file to another module and update imports.")
@click.argument("src", type=click.Path(exists=True, dir_okay=False))
@click.argument("dst", type=click.Path())
@click.option("--old-module", "old_module", default=None, help="Module specifier the file is imported from now.")
@click.option("--new-module", "new_module", default=None, help="Module specifier the file is imported from after the move.")
@_root_option
@_tsconfig_option
@_with_layout_options
@click.option("--overwrite", is_flag=True, help="Replace an existing file at DST.")
@click.option("--dry-run", "dry_run", is_flag=True, help="Report what would change without touching any file.")
@click.option("--workers", type=click.IntRange(min=1), default=None, help="Number of files processed in parallel.")
def move_file_cmd(
    src: str,
    dst: str,
    old_module: Optional[str],
    new_module: Optional[str],
    workspace_root: Optional[str],
    tsconfig: Optional[str],
    scope: Optional[str],
    folder_prefix: str,
    libs_dir: str,
    overwrite: bool,
    dry_run: bool,
    workers: Optional[int],
) -> None:
    """Move a TypeScript source file and fix imports in the workspace.

    ``SRC`` is the file to move and ``DST`` its new path.  If ``DST`` is an
    existing directory or ends with a path separator the file keeps its
    name.  Every import of something ``SRC`` exports from the old module
    specifier (or a subpath of it) is changed to import it from the new one.
    """
    src_path, dst_path, root = resolve_paths(src, dst, workspace_root)
    if src_path.suffix.lower() not in (".ts", ".tsx"):
        raise click.UsageError("move-file expects SRC to be a TypeScript (.ts or .tsx) file")
    if (dst_path.exists() and dst_path.is_dir()) or dst.endswith(os.path.sep) or dst.endswith("/"):
        dst_path = (dst_path / src_path.name).resolve()

    options = _options(root, tsconfig, workers)
    layout = layout_for_workspace(options, libs_dir=libs_dir, folder_prefix=folder_prefix, scope=scope)
    if not old_module:
        guess = guess_module_specifier(_relative(src_path, root), layout, root)
        old_module = click.prompt("Source module specifier", default=guess or "", show_default=bool(guess))
    if not new_module:
        guess = guess_module_specifier(_relative(dst_path, root), layout, root)
        new_module = click.prompt("Target module specifier", default=guess or "", show_default=bool(guess))
    if not old_module or not new_module:
        raise click.UsageError("Module names are required")

    click.echo(
        f"Moving {_relative(src_path, root)} to {_relative(dst_path, root)} "
        f"({old_module} -> {new_module}) and updating imports…"
    )
    try:
        report = move_unit(
            src_path,
            dst_path,
            old_module,
            new_module,
            root,
            options=options,
            overwrite=overwrite,
            dry_run=dry_run,
        )
    except TsMoverError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Exported names: {', '.join(report.moved_symbols)}")
    _finish(report, root)


@cli.command("update-imports", help="Rewrite imports of NAMES from one module specifier to another.")
@click.argument("names", nargs=-1, required=True)
@click.option("--old-module", "old_module", required=True, help="Module specifier NAMES were imported from.")
@click.option("--new-module", "new_module", required=True, help="Module specifier NAMES are imported from now.")
@_root_option
@click.option("--dry-run", "dry_run", is_flag=True, help="Report what would change without touching any file.")
@click.option("--workers", type=click.IntRange(min=1), default=None, help="Number of files processed in parallel.")
def update_imports_cmd(
    names: tuple,
    old_module: str,
    new_module: str,
    workspace_root: Optional[str],
    dry_run: bool,
    workers: Optional[int],
) -> None:
    """Rewrite imports without moving anything.

    Use ``default`` as a name to include default imports.
    """
    root = resolve_root(workspace_root)
    options = ProjectOptions(workers=workers)
    report = update_imports(root, names, old_module, new_module, options=options, dry_run=dry_run)
    _finish(report, root)


@cli.command("exports", help="List the symbols a TypeScript file exports.")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def exports_cmd(file: str) -> None:
    """Print each exported name of ``FILE`` with its kind."""
    try:
        unit = parse_file(pathlib.Path(file))
    except TsMoverError as exc:
        raise click.ClickException(str(exc)) from exc
    symbols = exported_symbols(unit)
    if not symbols:
        raise click.ClickException(f"{file} exports nothing")
    for symbol in symbols:
        click.echo(f"{symbol.name}\t{symbol.kind.value}")


@cli.command("list-modules", help="List the module specifiers available in the workspace.")
@_root_option
@_tsconfig_option
@_with_layout_options
def list_modules_cmd(
    workspace_root: Optional[str],
    tsconfig: Optional[str],
    scope: Optional[str],
    folder_prefix: str,
    libs_dir: str,
) -> None:
    root = resolve_root(workspace_root)
    layout = layout_for_workspace(_options(root, tsconfig), libs_dir=libs_dir, folder_prefix=folder_prefix, scope=scope)
    for specifier in find_available_modules(root, layout):
        click.echo(specifier)


def main(argv: Optional[list[str]] = None) -> None:
    """Entrypoint for console_scripts.

    Allows the CLI to be executed via ``python -m tsmover`` or when
    installed through a ``console_scripts`` entry point.  Errors are
    printed the way click prints them and end the process with their exit
    code.
    """
    try:
        cli.main(args=argv, standalone_mode=False)
    except click.ClickException as exc:
        exc.show()
        sys.exit(exc.exit_code)


if __name__ == "__main__":  # pragma: no cover
    main(sys.argv[1:])
