"""
Serialize a rewritten :class:`~tsmover.model.SourceUnit` back to text.

Printing never regenerates a whole file.  Each import statement whose
bindings or specifier changed is re-rendered from its layout and spliced
into the original bytes; everything else is copied through untouched.
Statements split off from an original statement are placed on the lines
right after it, with the same indentation.
"""

from __future__ import annotations

from typing import Dict, List, Tuple

from .model import Binding, ImportStatement, SourceUnit, StatementLayout

__all__ = ["render_statement", "print_unit"]


def _render_named(named: List[Binding], layout: StatementLayout) -> str:
    pieces = ["{"]
    last = len(named) - 1
    for index, binding in enumerate(named):
        pieces.append(binding.layout.leading + binding.source_text)
        if index < last:
            pieces.append(binding.layout.before_comma + "," + binding.layout.trailing)
        else:
            if layout.trailing_comma:
                pieces.append(binding.layout.before_comma + ",")
            else:
                pieces.append(binding.layout.before_comma.rstrip(" \t"))
            pieces.append(binding.layout.trailing)
    close = layout.named_close
    if "//" in named[-1].layout.trailing and "\n" not in close:
        close = layout.newline + layout.indent + close.lstrip(" \t")
    pieces.append(close)
    pieces.append("}")
    return "".join(pieces)


def _render_clause(bindings: List[Binding], layout: StatementLayout) -> str:
    parts = []
    default = [b for b in bindings if b.is_default]
    namespace = [b for b in bindings if b.is_namespace]
    named = [b for b in bindings if not b.is_default and not b.is_namespace]
    if default:
        parts.append(default[0].source_text)
    if namespace:
        parts.append(namespace[0].source_text)
    if named:
        parts.append(_render_named(named, layout))
    return layout.default_separator.join(parts)


def render_statement(statement: ImportStatement) -> str:
    """Return the source text of ``statement``.

    A statement that still has all of its original bindings keeps its
    original text, with only the module specifier between the quotes
    replaced.
    """
    layout = statement.layout
    if layout is None:
        raise ValueError("cannot render an import statement without layout")
    if statement.is_side_effect_only or tuple(statement.bindings) == layout.bindings:
        raw = layout.text.encode("utf-8")
        start, end = layout.specifier_span
        return (raw[:start] + statement.module_specifier.encode("utf-8") + raw[end:]).decode("utf-8")
    return "".join(
        [
            layout.head,
            _render_clause(statement.bindings, layout),
            layout.between,
            layout.quote,
            statement.module_specifier,
            layout.quote,
            layout.end_text,
        ]
    )


def print_unit(unit: SourceUnit) -> str:
    """Return the text of ``unit`` with its current import statements."""
    groups: Dict[int, Tuple[StatementLayout, List[ImportStatement]]] = {}
    for statement in unit.import_statements:
        if statement.layout is None:
            raise ValueError(f"import of {statement.module_specifier!r} in {unit.path} has no layout")
        key = id(statement.layout)
        if key not in groups:
            groups[key] = (statement.layout, [])
        groups[key][1].append(statement)

    edits: List[Tuple[int, int, bytes]] = []
    for layout, statements in groups.values():
        if len(statements) == 1 and statements[0].is_original:
            continue
        first, rest = statements[0], statements[1:]
        edits.append((layout.start, layout.end, render_statement(first).encode("utf-8")))
        if rest:
            separator = layout.newline + layout.indent
            added = "".join(separator + render_statement(s) for s in rest)
            edits.append((layout.insert_at, layout.insert_at, added.encode("utf-8")))

    source = unit.source
    for start, end, replacement in sorted(edits, key=lambda e: (e[0], e[1]), reverse=True):
        source = source[:start] + replacement + source[end:]
    return source.decode("utf-8")
