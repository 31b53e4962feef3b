"""
Rewrite import statements after symbols move from one module to another.

Given the names a moved file exports and the old and new module
specifiers, every import statement importing one of those names from the
old module (or a subpath of it) is split.  Bindings that did not move stay
where they are; moved bindings go into a new statement placed right after
the original one.  If nothing stays behind, the original statement is
dropped.  Side-effect-only imports and imports of other modules are never
touched.

Statements that end up with the same specifier are left separate.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Set

from .model import ImportStatement, RewriteResult, SourceUnit

__all__ = ["rewrite_statement", "rewrite_unit", "rewrite_imports"]

logger = logging.getLogger(__name__)


def rewrite_statement(
    statement: ImportStatement,
    moved_symbol_names: Set[str],
    old_specifier: str,
    new_specifier: str,
) -> List[ImportStatement]:
    """Return the statements replacing ``statement``.

    The result is ``[statement]`` when nothing moves.  Otherwise it holds
    the statement with the retained bindings (omitted when none are left)
    followed by a statement importing the moved bindings from the new
    specifier.  Binding order and local aliases are preserved.
    """
    if statement.is_side_effect_only or not statement.matches(old_specifier):
        return [statement]
    moved = [b for b in statement.bindings if b.is_moved(moved_symbol_names)]
    if not moved:
        return [statement]
    retained = [b for b in statement.bindings if not b.is_moved(moved_symbol_names)]
    result = []
    if retained:
        result.append(statement.derive(statement.module_specifier, retained))
    result.append(statement.derive(statement.target_specifier(old_specifier, new_specifier), moved))
    return result


def rewrite_unit(
    unit: SourceUnit,
    moved_symbol_names: Set[str],
    old_specifier: str,
    new_specifier: str,
) -> int:
    """Rewrite the import statements of ``unit`` in place.

    Returns
    -------
    int
        The number of bindings that now import from the new specifier.
    """
    statements: List[ImportStatement] = []
    changed = 0
    for statement in unit.import_statements:
        replacement = rewrite_statement(statement, moved_symbol_names, old_specifier, new_specifier)
        if replacement[0] is not statement:
            moved = replacement[-1].bindings
            changed += len(moved)
            logger.debug(
                "%s: %s now from %s",
                unit.path,
                ", ".join(b.local_alias for b in moved),
                replacement[-1].module_specifier,
            )
        statements.extend(replacement)
    if changed:
        unit.import_statements = statements
    return changed


def rewrite_imports(
    units: Iterable[SourceUnit],
    moved_symbol_names: Iterable[str],
    old_specifier: str,
    new_specifier: str,
) -> RewriteResult:
    """Rewrite imports across ``units``.

    Parameters
    ----------
    units: iterable of SourceUnit
        The workspace's parsed units, excluding the moved unit itself.
    moved_symbol_names: iterable of str
        Names exported by the moved unit; ``"default"`` stands for its
        default export.
    old_specifier, new_specifier: str
        Module specifiers before and after the move, e.g.
        ``"@acme/models"`` and ``"@acme/auth"``.

    Returns
    -------
    RewriteResult
        Counts of changed units and bindings, and the changed units.
    """
    moved = set(moved_symbol_names)
    result = RewriteResult()
    for unit in units:
        changed = rewrite_unit(unit, moved, old_specifier, new_specifier)
        if changed:
            result.files_changed += 1
            result.bindings_changed += changed
            result.changed_units.append(unit)
    return result
